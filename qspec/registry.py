from __future__ import annotations

import inspect
import logging
import typing
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from .errors import UsageError
from .types import Body, HookKind, Mode, Options, SuiteNode, TestNode

if typing.TYPE_CHECKING:
    from .types import RunReport

logger = logging.getLogger(__name__)

OptionsOrBody = Union[Body, Options, Dict[str, Any], None]


def _resolve_arguments(what: str, options_or_body: OptionsOrBody, body: Optional[Body],
                       body_required: bool = True) -> Tuple[Options, Optional[Body]]:
    """
    turns the (options_or_body, body) pair of the public entry points into
    (Options, body). a callable middle argument is the body; anything else is
    an options value and the body comes third.
    """
    if callable(options_or_body):
        if body is not None:
            raise UsageError(f"{what}: body given twice (second argument is already callable)")
        options, body = Options(), options_or_body
    else:
        try:
            options = Options.coerce(options_or_body)
        except TypeError as e:
            raise UsageError(f"{what}: {e}") from e

    if body is None:
        if body_required:
            raise UsageError(f"{what}: missing body")
    elif not callable(body):
        raise UsageError(f"{what}: body must be callable, not {type(body).__name__}")
    return options, body


def _check_name(what: str, name: Any) -> None:
    if not isinstance(name, str):
        raise UsageError(f"{what}: name must be a string, not {type(name).__name__}")


def _check_not_async_generator(what: str, body: Optional[Body]) -> None:
    # an async generator is neither awaitable nor ever iterated by the engine
    if body is not None and inspect.isasyncgenfunction(body):
        raise UsageError(f"{what}: body must be a plain or async function, not an async generator")


class SuiteDeclarator:
    """`describe(...)`, with `describe.skip(...)` hanging off it"""

    def __init__(self, registry: 'Registry'):
        self._registry = registry

    def __call__(self, name: str, options_or_body: OptionsOrBody = None, body: Optional[Body] = None) -> SuiteNode:
        _check_name("describe", name)
        options, body = _resolve_arguments(f"describe({name!r})", options_or_body, body)
        mode = Mode.SKIPPED if options.skip else Mode.NORMAL
        return self._registry._add_suite(name, mode, options, body)

    def skip(self, name: str, options_or_body: OptionsOrBody = None, body: Optional[Body] = None) -> SuiteNode:
        """declare a suite whose tests are never run. the body is optional."""
        _check_name("describe.skip", name)
        options, body = _resolve_arguments(f"describe.skip({name!r})", options_or_body, body, body_required=False)
        return self._registry._add_suite(name, Mode.SKIPPED, options, body)


class TestDeclarator:
    """`test(...)`, with `test.skip(...)` hanging off it"""
    __test__ = False

    def __init__(self, registry: 'Registry'):
        self._registry = registry

    def __call__(self, name: str, options_or_body: OptionsOrBody = None, body: Optional[Body] = None) -> TestNode:
        _check_name("test", name)
        options, body = _resolve_arguments(f"test({name!r})", options_or_body, body)
        mode = Mode.SKIPPED if options.skip else Mode.NORMAL
        return self._registry._add_test(name, mode, options, body)

    def skip(self, name: str, options_or_body: OptionsOrBody = None, body: Optional[Body] = None) -> TestNode:
        """declare a test that is reported as skipped. the body, if any, never runs."""
        _check_name("test.skip", name)
        options, body = _resolve_arguments(f"test.skip({name!r})", options_or_body, body, body_required=False)
        return self._registry._add_test(name, Mode.SKIPPED, options, body)


class Registry:
    """
    builder context for one run. owns the implicit root suite and the stack of
    suites being declared; nested describe/test/hook calls attach to the suite
    on top of the stack. the tree is frozen once a run starts.
    """

    def __init__(self):
        self.root = SuiteNode("")
        self._stack: List[SuiteNode] = [self.root]
        self._frozen = False
        # --- public declaration surface ---
        self.describe = SuiteDeclarator(self)
        self.test = TestDeclarator(self)
        self.it = self.test

    # --- state ---

    @property
    def current(self) -> SuiteNode:
        """the suite that declarations currently attach to"""
        return self._stack[-1]

    @property
    def frozen(self) -> bool: return self._frozen

    @property
    def is_declaring(self) -> bool: return len(self._stack) > 1

    def freeze(self) -> None:
        if self.is_declaring:
            raise UsageError("cannot freeze the registry while a describe body is running")
        self._frozen = True

    def count_tests(self) -> int:
        return sum(1 for _ in self.root.iter_tests())

    def _ensure_open(self, what: str) -> None:
        if self._frozen:
            raise UsageError(f"{what}: declarations are closed once the run has started")

    # --- node construction ---

    def _add_suite(self, name: str, mode: Mode, options: Options, body: Optional[Body]) -> SuiteNode:
        self._ensure_open(f"describe({name!r})")
        if body is not None and inspect.iscoroutinefunction(body):
            raise UsageError(f"describe({name!r}): declaration bodies must be synchronous")

        parent = self.current
        suite = SuiteNode(name, mode, parent, options.details)
        parent.children.append(suite)
        logger.debug(f"declared suite: {suite.full_name} ({mode.value})")

        if body is None: return suite

        self._stack.append(suite)
        try:
            outcome = body()
        finally:
            self._stack.pop()

        if inspect.isawaitable(outcome):
            if inspect.iscoroutine(outcome):
                outcome.close()
            raise UsageError(f"describe({name!r}): declaration bodies must not return an awaitable")
        return suite

    def _add_test(self, name: str, mode: Mode, options: Options, body: Optional[Body]) -> TestNode:
        self._ensure_open(f"test({name!r})")
        _check_not_async_generator(f"test({name!r})", body)
        parent = self.current
        node = TestNode(name, body, mode, parent, options.details)
        parent.children.append(node)
        logger.debug(f"declared test: {node.full_name} ({mode.value})")
        return node

    def _add_hook(self, kind: HookKind, body: Body) -> None:
        self._ensure_open(kind.value)
        if not callable(body):
            raise UsageError(f"{kind.value}: hook must be callable, not {type(body).__name__}")
        _check_not_async_generator(kind.value, body)
        self.current.hooks[kind].append(body)

    # --- hooks ---

    def before_all(self, body: Body) -> Body:
        """run once before every test of the current suite"""
        self._add_hook(HookKind.BEFORE_ALL, body)
        return body

    def after_all(self, body: Body) -> Body:
        """run once after every test of the current suite, even when something failed"""
        self._add_hook(HookKind.AFTER_ALL, body)
        return body

    def before_each(self, body: Body) -> Body:
        """run before each test of the current suite and its nested suites"""
        self._add_hook(HookKind.BEFORE_EACH, body)
        return body

    def after_each(self, body: Body) -> Body:
        """run after each test of the current suite and its nested suites"""
        self._add_hook(HookKind.AFTER_EACH, body)
        return body

    # camelCase aliases
    beforeAll = before_all
    afterAll = after_all
    beforeEach = before_each
    afterEach = after_each

    # --- execution ---

    async def run(self) -> 'RunReport':
        from .engine import run
        return await run(self)

    def run_sync(self) -> 'RunReport':
        from .engine import run_sync
        return run_sync(self)

    def __repr__(self) -> str:
        return f"Registry(tests={self.count_tests()}, frozen={self._frozen})"


# --- process-wide registry behind the module-level functions ---

default_registry = Registry()


def current_registry() -> Registry:
    """the registry the module-level describe/test/hook functions declare into"""
    return default_registry


def reset() -> Registry:
    """replace the process-wide registry with an empty one and return it"""
    global default_registry
    default_registry = Registry()
    return default_registry


class _DefaultDeclarator:
    """forwards to the declarator of whichever registry is the default right now"""

    def __init__(self, attribute: str):
        self._attribute = attribute

    def __call__(self, name: str, options_or_body: OptionsOrBody = None, body: Optional[Body] = None):
        return getattr(default_registry, self._attribute)(name, options_or_body, body)

    def skip(self, name: str, options_or_body: OptionsOrBody = None, body: Optional[Body] = None):
        return getattr(default_registry, self._attribute).skip(name, options_or_body, body)


describe = _DefaultDeclarator('describe')
test = _DefaultDeclarator('test')
test.__test__ = False
it = test


def _forward_hook(name: str) -> Callable[[Body], Body]:
    def hook(body: Body) -> Body:
        return getattr(default_registry, name)(body)
    hook.__name__ = name
    hook.__doc__ = getattr(Registry, name).__doc__
    return hook


before_all = _forward_hook('before_all')
after_all = _forward_hook('after_all')
before_each = _forward_hook('before_each')
after_each = _forward_hook('after_each')

beforeAll = before_all
afterAll = after_all
beforeEach = before_each
afterEach = after_each
