from __future__ import annotations
import re
import typing
from collections.abc import Iterable, Mapping
from typing import Any, Union

import numpy as np
import pandas as pd

from .equality import deep_equal

if typing.TYPE_CHECKING:
    from ..expectation import Expectation


def _elements(value: Any) -> list:
    """the items to_contain searches, flattened for arrays"""
    if isinstance(value, np.ndarray): return value.ravel().tolist()
    if isinstance(value, (pd.Series, pd.Index)): return value.tolist()
    return list(value)


class _ContainerMatchers:
    def to_have_length(self: 'Expectation', expected: int) -> 'Expectation':
        """len(received) == expected"""
        try:
            length = len(self.received)
        except TypeError:
            return self._assert(False, 'to_have_length', expected, "received value has no length")
        return self._assert(length == expected, 'to_have_length', expected,
                            f"received length: {length}")

    def to_contain(self: 'Expectation', item: Any) -> 'Expectation':
        """
        substring check for strings, otherwise an element deep-equal to item.
        mappings are not searched (ambiguous between keys and values).
        """
        received = self.received
        if isinstance(received, (str, bytes, bytearray)):
            same_family = (str,) if isinstance(received, str) else (bytes, bytearray)
            if not isinstance(item, same_family):
                return self._assert(False, 'to_contain', item, "a string can only contain a string")
            return self._assert(item in received, 'to_contain', item, "substring not found")

        if isinstance(received, (Mapping, pd.DataFrame)) or not isinstance(received, Iterable):
            return self._assert(False, 'to_contain', item, "received value is not a sequence or string")

        found = any(deep_equal(element, item) for element in _elements(received))
        return self._assert(found, 'to_contain', item, "item not found")

    def to_match(self: 'Expectation', pattern: Union[str, re.Pattern]) -> 'Expectation':
        """received is a str and the pattern matches somewhere in it"""
        if not isinstance(self.received, str):
            return self._assert(False, 'to_match', pattern, "received value must be a string")
        found = re.search(pattern, self.received) is not None
        return self._assert(found, 'to_match', pattern, "pattern does not match")

    toHaveLength = to_have_length
    toContain = to_contain
    toMatch = to_match
