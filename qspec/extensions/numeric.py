from __future__ import annotations
import numbers
import typing
from decimal import Decimal
from typing import Any

import numpy as np

from .equality import is_nan

if typing.TYPE_CHECKING:
    from ..expectation import Expectation


def is_real_number(value: Any) -> bool:
    """ints, floats, fractions, decimals and numpy scalars; never bools"""
    if isinstance(value, (bool, np.bool_)): return False
    return isinstance(value, (numbers.Real, Decimal))


class _NumericMatchers:
    def _check_numbers(self: 'Expectation', matcher_name: str, expected: Any) -> None:
        if not is_real_number(self.received):
            self._assert(False, matcher_name, expected, "received value must be a number")
        if not is_real_number(expected):
            self._assert(False, matcher_name, expected, "expected value must be a number")
        if is_nan(self.received) or is_nan(expected):
            self._assert(False, matcher_name, expected, "nan cannot be ordered")

    def to_be_nan(self: 'Expectation') -> 'Expectation':
        return self._assert(is_nan(self.received), 'to_be_nan', reason="value is not nan")

    def to_be_greater_than(self: 'Expectation', expected: Any) -> 'Expectation':
        """received > expected, both numbers"""
        self._check_numbers('to_be_greater_than', expected)
        return self._assert(bool(self.received > expected), 'to_be_greater_than', expected,
                            "received is not greater than expected")

    def to_be_less_than(self: 'Expectation', expected: Any) -> 'Expectation':
        """received < expected, both numbers"""
        self._check_numbers('to_be_less_than', expected)
        return self._assert(bool(self.received < expected), 'to_be_less_than', expected,
                            "received is not less than expected")

    toBeNaN = to_be_nan
    toBeGreaterThan = to_be_greater_than
    toBeLessThan = to_be_less_than
