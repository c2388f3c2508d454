import reprlib
from typing import Any, Optional

from .types import UNDEFINED


class _Nothing:
    """marks a matcher that takes no expected value"""

    def __repr__(self) -> str: return "<nothing>"


NOTHING = _Nothing()

_repr = reprlib.Repr()
_repr.maxstring = 120
_repr.maxother = 120
_repr.maxlist = _repr.maxtuple = _repr.maxdict = _repr.maxset = 12
_repr.maxlevel = 4


def render(value: Any) -> str:
    """short, single-line rendering of a value for failure messages"""
    if value is UNDEFINED: return "undefined"
    try:
        return _repr.repr(value)
    except Exception:  # repr of the received value may itself raise
        return f"<{type(value).__name__} instance>"


class QspecError(Exception):
    """base class for errors raised by qspec itself."""
    pass


class UsageError(QspecError):
    """malformed declaration: bad arguments, async declaration bodies, frozen registry."""
    pass


class LoadError(QspecError):
    """a test file could not be imported."""

    def __init__(self, path: str, error: BaseException):
        super().__init__(f"failed to load {path}: {type(error).__name__}: {error}")
        self.path = path
        self.error = error


# --- custom exception for assertions ---

class MatcherFailure(AssertionError):
    """
    raised by a failing matcher. subclasses AssertionError so the engine (and
    any other runner) can tell assertion failures apart from runtime errors.
    the message is rendered on first access, not when the failure is raised.
    """

    def __init__(self, matcher_name: str, received: Any, expected: Any = NOTHING,
                 reason: Optional[str] = None):
        super().__init__(matcher_name)
        self.matcher_name = matcher_name
        self.received = received
        self.expected = expected
        self.reason = reason
        self._message: Optional[str] = None

    @property
    def has_expected(self) -> bool: return self.expected is not NOTHING

    @property
    def message(self) -> str:
        if self._message is None:
            lines = [f"expect(received).{self.matcher_name}({'expected' if self.has_expected else ''})"]
            if self.reason:
                lines.append(self.reason)
            if self.has_expected:
                lines.append(f"expected: {render(self.expected)}")
            lines.append(f"received: {render(self.received)}")
            self._message = "\n".join(lines)
        return self._message

    def __str__(self) -> str:
        return self.message

    def __reduce__(self):
        return (MatcherFailure, (self.matcher_name, self.received, self.expected, self.reason))
