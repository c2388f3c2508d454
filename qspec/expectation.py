from __future__ import annotations

from typing import Any, Optional

from .errors import NOTHING, MatcherFailure
from .types import UNDEFINED

# --- matchers ---
from .extensions.presence import _PresenceMatchers
from .extensions.equality import _EqualityMatchers
from .extensions.numeric import _NumericMatchers
from .extensions.containers import _ContainerMatchers


# --- base expectation ---

class _BaseExpectation:
    def __init__(self, received: Any):
        """hold the value under test"""
        self.received = received

    def _assert(self, passed: bool, matcher_name: str, expected: Any = NOTHING,
                reason: Optional[str] = None) -> 'Expectation':
        """return self so matchers chain, or raise a MatcherFailure"""
        if not passed:
            raise MatcherFailure(matcher_name, self.received, expected, reason)
        return self

    def __repr__(self) -> str:
        return f"Expectation(received={self.received!r})"


# --- main expectation class ---

class Expectation(
    _BaseExpectation,
    _PresenceMatchers,
    _EqualityMatchers,
    _NumericMatchers,
    _ContainerMatchers
):
    """matcher chain returned by expect(value). every matcher evaluates immediately."""
    pass


def expect(value: Any = UNDEFINED) -> Expectation:
    """
    start an assertion on value. called without an argument the received
    value is undefined.

        expect(number).to_be_defined()
        expect([1, 2, 3]).to_have_length(3).to_contain(2)
    """
    return Expectation(value)
