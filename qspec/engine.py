"""
execution engine: walks a frozen registry depth-first in declaration order,
running hooks and test bodies one at a time and collecting a RunReport.
"""
from __future__ import annotations

import asyncio
import inspect
import logging
import time
from typing import List, Optional

from .errors import UsageError
from .registry import Registry, current_registry
from .types import (
    Body, Failure, FailureKind, HookKind, Mode, RunReport, Status, SuiteError, SuiteNode, TestNode,
    TestResult
)

logger = logging.getLogger(__name__)


async def _call(body: Body) -> None:
    """call a hook or test body, awaiting whatever awaitable it returns"""
    outcome = body()
    if inspect.isawaitable(outcome):
        await outcome
    elif inspect.isasyncgen(outcome) or inspect.isgenerator(outcome):
        raise TypeError(f"body returned a {type(outcome).__name__} that would never run; return an awaitable or None")


def _classify(error: BaseException, hook: Optional[HookKind] = None, suite: Optional[str] = None) -> Failure:
    if hook is not None:
        return Failure(FailureKind.HOOK, error, hook=hook, suite=suite)
    if isinstance(error, AssertionError):
        return Failure(FailureKind.ASSERTION, error)
    return Failure(FailureKind.RUNTIME, error)


class _Run:
    """state of one walk over the tree"""

    def __init__(self, registry: Registry):
        self.registry = registry
        self.results: List[TestResult] = []
        self.suite_errors: List[SuiteError] = []

    # --- recording ---

    def _record(self, test: TestNode, status: Status, failure: Optional[Failure] = None,
                duration_ms: float = 0.0) -> None:
        details = test.parent.merged_details() if test.parent is not None else {}
        details.update(test.details)
        result = TestResult(test.full_name, status, failure, duration_ms, details)
        self.results.append(result)
        logger.debug(f"{status.value}: {result.name} ({duration_ms:.2f}ms)")

    def _record_subtree(self, suite: SuiteNode, status: Status, failure: Optional[Failure] = None) -> None:
        for test in suite.iter_tests():
            # skipped tests stay skipped even under a failed setup
            if status is Status.FAILED and test.is_skipped:
                self._record(test, Status.SKIPPED)
            else:
                self._record(test, status, failure)

    # --- suites ---

    async def _run_suite_hooks(self, suite: SuiteNode, kind: HookKind, stop_on_failure: bool) -> Optional[Failure]:
        """run the suite-level hooks of one kind; returns the first failure"""
        first = None
        for hook in suite.hooks[kind]:
            try:
                await _call(hook)
            except UsageError:
                raise
            except Exception as e:
                failure = _classify(e, hook=kind, suite=suite.full_name)
                self.suite_errors.append(SuiteError(suite.full_name, kind, failure))
                logger.warning(f"{kind.value} hook failed in '{suite.full_name or '(root)'}': {e}")
                if first is None:
                    first = failure
                if stop_on_failure:
                    break
        return first

    async def run_suite(self, suite: SuiteNode) -> None:
        if suite.mode is Mode.SKIPPED:
            self._record_subtree(suite, Status.SKIPPED)
            return

        setup_failure = await self._run_suite_hooks(suite, HookKind.BEFORE_ALL, stop_on_failure=True)
        if setup_failure is not None:
            self._record_subtree(suite, Status.FAILED, setup_failure)
        else:
            for child in suite.children:
                if isinstance(child, SuiteNode):
                    await self.run_suite(child)
                else:
                    await self.run_test(child)

        await self._run_suite_hooks(suite, HookKind.AFTER_ALL, stop_on_failure=False)

    # --- tests ---

    async def run_test(self, test: TestNode) -> None:
        if test.is_skipped:
            self._record(test, Status.SKIPPED)
            return

        chain = test.ancestors
        failure: Optional[Failure] = None

        def note(new: Failure) -> None:
            nonlocal failure
            if failure is None:
                failure = new
            else:
                failure.extra.append(new)

        start = time.perf_counter()

        # before_each: outermost suite first, stop at the first failure
        for suite in chain:
            for hook in suite.before_each:
                try:
                    await _call(hook)
                except UsageError:
                    raise
                except Exception as e:
                    note(_classify(e, hook=HookKind.BEFORE_EACH, suite=suite.full_name))
                    break
            if failure is not None:
                break

        if failure is None:
            try:
                await _call(test.body)
            except UsageError:
                raise
            except Exception as e:
                note(_classify(e))

        # after_each: innermost suite first, every hook runs
        for suite in reversed(chain):
            for hook in suite.after_each:
                try:
                    await _call(hook)
                except UsageError:
                    raise
                except Exception as e:
                    note(_classify(e, hook=HookKind.AFTER_EACH, suite=suite.full_name))

        duration = (time.perf_counter() - start) * 1000
        self._record(test, Status.PASSED if failure is None else Status.FAILED, failure, duration)


async def run(registry: Optional[Registry] = None) -> RunReport:
    """freeze the registry (the process-wide one by default), run every registered suite and return the report."""
    if registry is None:
        registry = current_registry()
    registry.freeze()
    state = _Run(registry)
    logger.debug(f"running {registry.count_tests()} tests")

    start = time.perf_counter()
    await state.run_suite(registry.root)
    duration = (time.perf_counter() - start) * 1000

    report = RunReport(state.results, state.suite_errors, duration)
    logger.debug(f"run finished: {report!r}")
    return report


def run_sync(registry: Optional[Registry] = None) -> RunReport:
    """run() on a fresh event loop, for callers that are not async themselves."""
    return asyncio.run(run(registry))
