import weakref
from enum import Enum
from typing import (
    Callable, Iterator, Any, Optional, Union, Dict, List, Tuple, Awaitable
)

# a hook or test body: zero arguments, may return an awaitable
Body = Callable[[], Union[None, Awaitable[Any]]]

PATH_SEPARATOR = " > "


class Mode(Enum):
    NORMAL = "normal"
    SKIPPED = "skipped"


class Status(Enum):
    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"


class FailureKind(Enum):
    ASSERTION = "assertion"
    RUNTIME = "runtime"
    HOOK = "hook"


class HookKind(Enum):
    BEFORE_ALL = "before_all"
    AFTER_ALL = "after_all"
    BEFORE_EACH = "before_each"
    AFTER_EACH = "after_each"


class _Undefined:
    """marker for 'no value', distinct from None (the null value)"""
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool: return False

    def __repr__(self) -> str: return "undefined"

    def __reduce__(self):
        return (_Undefined, ())


UNDEFINED = _Undefined()


class Options:
    """options accepted by the three-argument forms of describe and test"""

    def __init__(self, skip: bool = False, details: Optional[Dict[str, Any]] = None):
        self.skip = skip
        self.details = dict(details or {})

    @classmethod
    def coerce(cls, value: Union['Options', Dict[str, Any], None]) -> 'Options':
        """accept an Options instance, a plain dict of option values, or None"""
        if value is None: return cls()
        if isinstance(value, cls): return value
        if isinstance(value, dict):
            unknown = set(value) - {'skip', 'details'}
            if unknown:
                raise TypeError(f"unknown option(s): {', '.join(sorted(unknown))}")
            return cls(**value)
        raise TypeError(f"options must be an Options instance or a dict, not {type(value).__name__}")

    def __repr__(self) -> str:
        return f"Options(skip={self.skip}, details={self.details})"


class _Node:
    """shared parts of suite and test nodes"""

    def __init__(self, name: str, mode: Mode, parent: Optional['SuiteNode'], details: Dict[str, Any]):
        self.name = name
        self.mode = mode
        self.details = details
        # weak back-reference, the registry owns the tree through its root
        self._parent_ref = weakref.ref(parent) if parent is not None else None

    @property
    def parent(self) -> Optional['SuiteNode']:
        return self._parent_ref() if self._parent_ref is not None else None

    @property
    def ancestors(self) -> List['SuiteNode']:
        """enclosing suites, outermost (the root) first"""
        chain = []
        node = self.parent
        while node is not None:
            chain.append(node)
            node = node.parent
        chain.reverse()
        return chain

    @property
    def path(self) -> List[str]:
        """names from the outermost named suite down to this node"""
        names = [s.name for s in self.ancestors if not s.is_root]
        if not getattr(self, 'is_root', False):
            names.append(self.name)
        return names

    @property
    def full_name(self) -> str: return PATH_SEPARATOR.join(self.path)

    @property
    def is_skipped(self) -> bool:
        """true when this node or any enclosing suite is skipped"""
        if self.mode is Mode.SKIPPED: return True
        return any(s.mode is Mode.SKIPPED for s in self.ancestors)


class TestNode(_Node):
    """one `test` declaration"""
    __test__ = False  # not a pytest class

    def __init__(self, name: str, body: Optional[Body], mode: Mode = Mode.NORMAL,
                 parent: Optional['SuiteNode'] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(name, mode, parent, dict(details or {}))
        self.body = body

    def __repr__(self) -> str:
        return f"TestNode(name={self.name!r}, mode={self.mode.value})"


class SuiteNode(_Node):
    """one `describe` block, or the implicit root when it has no parent"""

    def __init__(self, name: str, mode: Mode = Mode.NORMAL, parent: Optional['SuiteNode'] = None,
                 details: Optional[Dict[str, Any]] = None):
        super().__init__(name, mode, parent, dict(details or {}))
        self.children: List[Union['SuiteNode', TestNode]] = []
        self.hooks: Dict[HookKind, List[Body]] = {kind: [] for kind in HookKind}

    @property
    def is_root(self) -> bool: return self._parent_ref is None

    @property
    def before_all(self) -> List[Body]: return self.hooks[HookKind.BEFORE_ALL]

    @property
    def after_all(self) -> List[Body]: return self.hooks[HookKind.AFTER_ALL]

    @property
    def before_each(self) -> List[Body]: return self.hooks[HookKind.BEFORE_EACH]

    @property
    def after_each(self) -> List[Body]: return self.hooks[HookKind.AFTER_EACH]

    @property
    def suites(self) -> List['SuiteNode']:
        return [c for c in self.children if isinstance(c, SuiteNode)]

    @property
    def tests(self) -> List[TestNode]:
        return [c for c in self.children if isinstance(c, TestNode)]

    def iter_tests(self) -> Iterator[TestNode]:
        """every test beneath this suite, depth-first in declaration order"""
        for child in self.children:
            if isinstance(child, SuiteNode):
                yield from child.iter_tests()
            else:
                yield child

    def merged_details(self) -> Dict[str, Any]:
        """details of every enclosing suite and this one, inner keys winning"""
        merged: Dict[str, Any] = {}
        for suite in self.ancestors + [self]:
            merged.update(suite.details)
        return merged

    def __repr__(self) -> str:
        return f"SuiteNode(name={self.name!r}, mode={self.mode.value}, children={len(self.children)})"


class Failure:
    """why a test (or a suite-level hook) failed"""

    def __init__(self, kind: FailureKind, error: BaseException, hook: Optional[HookKind] = None,
                 suite: Optional[str] = None):
        self.kind = kind
        self.error = error
        self.hook = hook
        self.suite = suite
        # failures raised after the first one, kept as detail
        self.extra: List['Failure'] = []

    @property
    def is_assertion(self) -> bool: return self.kind is FailureKind.ASSERTION

    @property
    def message(self) -> str:
        text = str(self.error)
        if self.kind is FailureKind.ASSERTION:
            return text or type(self.error).__name__
        prefix = f"{self.hook.value} hook: " if self.hook is not None else ""
        if not text:
            return f"{prefix}{type(self.error).__name__}"
        return f"{prefix}{type(self.error).__name__}: {text}"

    def __repr__(self) -> str:
        return f"Failure(kind={self.kind.value}, error={self.error!r}, extra={len(self.extra)})"


class TestResult:
    """outcome of one test"""
    __test__ = False

    def __init__(self, name: str, status: Status, failure: Optional[Failure] = None,
                 duration_ms: float = 0.0, details: Optional[Dict[str, Any]] = None):
        self.name = name
        self.status = status
        self.failure = failure
        self.duration_ms = duration_ms
        self.details = dict(details or {})

    @property
    def passed(self) -> bool: return self.status is Status.PASSED

    @property
    def failed(self) -> bool: return self.status is Status.FAILED

    @property
    def skipped(self) -> bool: return self.status is Status.SKIPPED

    def __repr__(self) -> str:
        return f"TestResult(name={self.name!r}, status={self.status.value}, duration_ms={self.duration_ms:.2f})"


class SuiteError:
    """a before_all / after_all failure, reported at suite level"""

    def __init__(self, suite: str, hook: HookKind, failure: Failure):
        self.suite = suite
        self.hook = hook
        self.failure = failure

    def __repr__(self) -> str:
        return f"SuiteError(suite={self.suite!r}, hook={self.hook.value})"


class RunReport:
    """ordered test results plus suite-level errors for one run"""

    def __init__(self, results: List[TestResult], suite_errors: List[SuiteError], duration_ms: float):
        self.results = results
        self.suite_errors = suite_errors
        self.duration_ms = duration_ms

    @property
    def total(self) -> int: return len(self.results)

    @property
    def passed(self) -> int: return sum(1 for r in self.results if r.passed)

    @property
    def failed(self) -> int: return sum(1 for r in self.results if r.failed)

    @property
    def skipped(self) -> int: return sum(1 for r in self.results if r.skipped)

    @property
    def ok(self) -> bool: return self.failed == 0 and not self.suite_errors

    def outcomes(self) -> List[Tuple[str, Status]]:
        """(name, status) pairs, handy for comparing runs"""
        return [(r.name, r.status) for r in self.results]

    def __iter__(self) -> Iterator[TestResult]:
        return iter(self.results)

    def __len__(self) -> int:
        return len(self.results)

    def __getitem__(self, index):
        return self.results[index]

    def __repr__(self) -> str:
        return (f"RunReport(passed={self.passed}, failed={self.failed}, skipped={self.skipped}, "
                f"suite_errors={len(self.suite_errors)})")
