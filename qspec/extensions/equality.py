from __future__ import annotations

import cmath
import dataclasses
import math
import numbers
import typing
from collections import deque
from collections.abc import Mapping, Set
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List

import numpy as np
import pandas as pd

from ..types import UNDEFINED

if typing.TYPE_CHECKING:
    from ..expectation import Expectation


class ValueKind(Enum):
    """the closed set of shapes deep equality knows how to compare"""
    UNDEFINED = "undefined"
    NULL = "null"
    BOOLEAN = "boolean"
    NUMBER = "number"
    TEXT = "text"
    SEQUENCE = "sequence"
    MAPPING = "mapping"
    SET = "set"
    ARRAY = "array"
    FRAME = "frame"
    RECORD = "record"
    OTHER = "other"


_FRAME_TYPES = (pd.Series, pd.DataFrame, pd.Index)


def _slot_names(cls: type) -> List[str]:
    names = []
    for klass in cls.__mro__:
        slots = klass.__dict__.get('__slots__', ())
        if isinstance(slots, str): slots = (slots,)
        names.extend(s for s in slots if s not in ('__dict__', '__weakref__'))
    return names


def _is_plain_record(value: Any) -> bool:
    """instances of classes that keep state in __dict__ (or slots) and don't define equality"""
    if isinstance(value, type) or callable(value):
        return False
    if isinstance(value, BaseException):
        return True
    has_state = hasattr(value, '__dict__') or bool(_slot_names(type(value)))
    return has_state and type(value).__eq__ is object.__eq__


def classify(value: Any) -> ValueKind:
    if value is UNDEFINED: return ValueKind.UNDEFINED
    if value is None: return ValueKind.NULL
    if isinstance(value, Enum): return ValueKind.OTHER
    # bool before number: True is an int in python but not a number here
    if isinstance(value, (bool, np.bool_)): return ValueKind.BOOLEAN
    if isinstance(value, numbers.Number): return ValueKind.NUMBER
    if isinstance(value, (str, bytes, bytearray)): return ValueKind.TEXT
    if isinstance(value, np.ndarray): return ValueKind.ARRAY
    if isinstance(value, _FRAME_TYPES): return ValueKind.FRAME
    if isinstance(value, Mapping): return ValueKind.MAPPING
    if isinstance(value, Set): return ValueKind.SET
    if isinstance(value, (list, tuple, deque, range)): return ValueKind.SEQUENCE
    if dataclasses.is_dataclass(value) and not isinstance(value, type): return ValueKind.RECORD
    if _is_plain_record(value): return ValueKind.RECORD
    return ValueKind.OTHER


def is_nan(value: Any) -> bool:
    """true for float, complex, decimal and numpy nan values"""
    if isinstance(value, (bool, np.bool_)):
        return False
    try:
        if isinstance(value, Decimal): return value.is_nan()
        if isinstance(value, numbers.Real): return math.isnan(value)
        if isinstance(value, numbers.Complex): return cmath.isnan(value)
    except (TypeError, ValueError, OverflowError):
        return False
    return False


def _record_fields(value: Any) -> Dict[str, Any]:
    if dataclasses.is_dataclass(value):
        return {f.name: getattr(value, f.name) for f in dataclasses.fields(value)}
    fields = dict(vars(value)) if hasattr(value, '__dict__') else {}
    # exceptions keep their message in args, outside __dict__
    if isinstance(value, BaseException):
        fields['__args__'] = value.args
    for name in _slot_names(type(value)):
        fields[name] = getattr(value, name, UNDEFINED)
    return fields


def _arrays_equal(a: np.ndarray, b: np.ndarray) -> bool:
    if a.shape != b.shape:
        return False
    numeric = all(np.issubdtype(x.dtype, np.number) or np.issubdtype(x.dtype, np.bool_) for x in (a, b))
    if numeric:
        return bool(np.array_equal(a, b, equal_nan=True))
    return all(deep_equal(x, y) for x, y in zip(a.ravel().tolist(), b.ravel().tolist()))


def _mappings_equal(a: Mapping, b: Mapping) -> bool:
    if len(a) != len(b):
        return False
    for key in a:
        if key not in b or not deep_equal(a[key], b[key]):
            return False
    return True


def _sets_equal(a: Set, b: Set) -> bool:
    if len(a) != len(b):
        return False
    # one-to-one: every partner found in b is used up
    unmatched = list(b)
    for x in a:
        for i, y in enumerate(unmatched):
            if deep_equal(x, y):
                del unmatched[i]
                break
        else:
            return False
    return True


def deep_equal(a: Any, b: Any) -> bool:
    """
    structural equality. values of different kinds are never equal; numbers
    compare by value with nan equal to nan; containers compare element by
    element. cyclic structures are not supported and end in RecursionError.
    """
    if a is b:
        return True
    kind = classify(a)
    if kind is not classify(b):
        return False

    if kind in (ValueKind.UNDEFINED, ValueKind.NULL):
        return True
    if kind is ValueKind.BOOLEAN:
        return bool(a) == bool(b)
    if kind is ValueKind.NUMBER:
        if is_nan(a) or is_nan(b):
            return is_nan(a) and is_nan(b)
        return bool(a == b)
    if kind is ValueKind.TEXT:
        return a == b
    if kind is ValueKind.SEQUENCE:
        return len(a) == len(b) and all(deep_equal(x, y) for x, y in zip(a, b))
    if kind is ValueKind.MAPPING:
        return _mappings_equal(a, b)
    if kind is ValueKind.SET:
        return _sets_equal(a, b)
    if kind is ValueKind.ARRAY:
        return _arrays_equal(a, b)
    if kind is ValueKind.FRAME:
        return type(a) is type(b) and bool(a.equals(b))
    if kind is ValueKind.RECORD:
        return type(a) is type(b) and _mappings_equal(_record_fields(a), _record_fields(b))

    # ValueKind.OTHER: whatever the type itself calls equal
    try:
        return bool(a == b)
    except (TypeError, ValueError):
        return a is b


class _EqualityMatchers:
    def to_be_equal(self: 'Expectation', expected: Any) -> 'Expectation':
        """received is deep-equal to expected"""
        return self._assert(deep_equal(self.received, expected), 'to_be_equal', expected,
                            "values are not deeply equal")

    def to_be_not_equal(self: 'Expectation', expected: Any) -> 'Expectation':
        """received is not deep-equal to expected"""
        return self._assert(not deep_equal(self.received, expected), 'to_be_not_equal', expected,
                            "values are deeply equal")

    toBeEqual = to_be_equal
    toBeNotEqual = to_be_not_equal
