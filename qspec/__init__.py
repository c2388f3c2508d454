r"""
'      ________   ____________________________________
'     \_____  \ /   _____/\______   \_   _____/\_   ___ \
'      /  / \  \\_____  \  |     ___/|    __)_ /    \  \/
'     /   \_/.  \/        \ |    |    |        \\     \____
'     \_____\ \_/_______  / |____|   /_______  / \______  /
'            \__>       \/                   \/         \/
"""

# expose the declaration surface
from .registry import (
    Registry,
    describe,
    test,
    it,
    before_all,
    after_all,
    before_each,
    after_each,
    beforeAll,
    afterAll,
    beforeEach,
    afterEach,
    current_registry,
    reset
)

# expose the matcher chain
from .expectation import expect, Expectation
from .extensions.equality import deep_equal, ValueKind

# expose the execution engine
from .engine import run, run_sync

# expose supporting data classes and errors
from .types import (
    UNDEFINED,
    Options,
    Mode,
    Status,
    FailureKind,
    HookKind,
    SuiteNode,
    TestNode,
    TestResult,
    Failure,
    SuiteError,
    RunReport
)
from .errors import QspecError, UsageError, MatcherFailure, LoadError

# define what `import *` does
__all__ = [
    "Registry",
    "describe",
    "test",
    "it",
    "before_all",
    "after_all",
    "before_each",
    "after_each",
    "beforeAll",
    "afterAll",
    "beforeEach",
    "afterEach",
    "current_registry",
    "reset",
    "expect",
    "Expectation",
    "deep_equal",
    "ValueKind",
    "run",
    "run_sync",
    "UNDEFINED",
    "Options",
    "Mode",
    "Status",
    "FailureKind",
    "HookKind",
    "SuiteNode",
    "TestNode",
    "TestResult",
    "Failure",
    "SuiteError",
    "RunReport",
    "QspecError",
    "UsageError",
    "MatcherFailure",
    "LoadError"
]
