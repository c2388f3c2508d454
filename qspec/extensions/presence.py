from __future__ import annotations
import typing
from typing import Any

import numpy as np
import pandas as pd

from ..types import UNDEFINED

if typing.TYPE_CHECKING:
    from ..expectation import Expectation


def is_truthy(value: Any) -> bool:
    """python truthiness, with undefined falsy and empty arrays/frames falsy"""
    if value is UNDEFINED: return False
    # numpy and pandas refuse bool() on multi-element containers
    if isinstance(value, np.ndarray): return value.size > 0
    if isinstance(value, (pd.Series, pd.DataFrame, pd.Index)): return not value.empty
    return bool(value)


class _PresenceMatchers:
    def to_be_defined(self: 'Expectation') -> 'Expectation':
        """received is anything but undefined (None counts as defined)"""
        return self._assert(self.received is not UNDEFINED, 'to_be_defined', reason="value is undefined")

    def to_be_undefined(self: 'Expectation') -> 'Expectation':
        return self._assert(self.received is UNDEFINED, 'to_be_undefined', reason="value is defined")

    def to_be_null(self: 'Expectation') -> 'Expectation':
        """received is None"""
        return self._assert(self.received is None, 'to_be_null', reason="value is not None")

    def to_be_not_null(self: 'Expectation') -> 'Expectation':
        return self._assert(self.received is not None, 'to_be_not_null', reason="value is None")

    def to_be_truthy(self: 'Expectation') -> 'Expectation':
        return self._assert(is_truthy(self.received), 'to_be_truthy', reason="value is falsy")

    def to_be_falsy(self: 'Expectation') -> 'Expectation':
        """received is 0, empty, None, False or undefined"""
        return self._assert(not is_truthy(self.received), 'to_be_falsy', reason="value is truthy")

    toBeDefined = to_be_defined
    toBeUndefined = to_be_undefined
    toBeNull = to_be_null
    toBeNotNull = to_be_not_null
    toBeTruthy = to_be_truthy
    toBeFalsy = to_be_falsy
