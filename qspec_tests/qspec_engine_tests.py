import asyncio
import pytest
from qspec import (
    Registry, Status, FailureKind, HookKind, MatcherFailure, UsageError, RunReport, expect, run, run_sync
)


def noop():
    pass


def fail_with(error):
    def body():
        raise error
    return body


def statuses(report):
    return [(r.name, r.status) for r in report]


# --- ordering ---

def test_results_follow_declaration_order():
    reg = Registry()
    reg.describe("A", lambda: reg.test("a1", noop))
    reg.describe("B", lambda: reg.test("b1", noop))

    report = run_sync(reg)
    expect([r.name for r in report]).to_be_equal(["A > a1", "B > b1"])
    expect(report.passed).to_be_equal(2)
    expect(report.ok).to_be_truthy()


def test_tests_and_suites_interleave_depth_first():
    reg = Registry()
    log = []

    def outer():
        reg.test("one", lambda: log.append("one"))
        reg.describe("inner", lambda: reg.test("two", lambda: log.append("two")))
        reg.test("three", lambda: log.append("three"))

    reg.describe("outer", outer)
    reg.test("four", lambda: log.append("four"))
    run_sync(reg)
    expect(log).to_be_equal(["one", "two", "three", "four"])


def test_nested_hook_ordering_around_a_test():
    reg = Registry()
    log = []
    seen_by_test = []

    def outer():
        reg.before_each(lambda: log.append("O"))
        reg.after_each(lambda: log.append("O"))

        def inner():
            reg.before_each(lambda: log.append("I"))
            reg.after_each(lambda: log.append("I"))
            reg.test("reads the log", lambda: seen_by_test.extend(log))

        reg.describe("Inner", inner)

    reg.describe("Outer", outer)
    report = run_sync(reg)

    expect(report[0].status).to_be_equal(Status.PASSED)
    expect(seen_by_test).to_be_equal(["O", "I"])
    expect(log[2:]).to_be_equal(["I", "O"])


def test_before_all_and_after_all_wrap_the_suite_once():
    reg = Registry()
    log = []

    def body():
        reg.before_all(lambda: log.append("setup"))
        reg.after_all(lambda: log.append("teardown"))
        reg.before_each(lambda: log.append("each"))
        reg.test("a", lambda: log.append("a"))
        reg.test("b", lambda: log.append("b"))

    reg.describe("s", body)
    run_sync(reg)
    expect(log).to_be_equal(["setup", "each", "a", "each", "b", "teardown"])


def test_root_hooks_span_the_whole_run():
    reg = Registry()
    log = []
    reg.before_all(lambda: log.append("start"))
    reg.after_all(lambda: log.append("end"))
    reg.before_each(lambda: log.append("each"))
    reg.describe("x", lambda: reg.test("t", lambda: log.append("t")))
    reg.test("root test", lambda: log.append("r"))

    run_sync(reg)
    expect(log).to_be_equal(["start", "each", "t", "each", "r", "end"])


# --- skipping ---

def test_plain_test_inside_skipped_suite_is_skipped():
    reg = Registry()
    ran = []

    def body():
        reg.before_each(lambda: ran.append("hook"))
        reg.test("plain", lambda: ran.append("body"))
        reg.describe("deeper", lambda: reg.test("nested", lambda: ran.append("nested")))

    reg.describe.skip("skipped", body)
    report = run_sync(reg)

    expect(ran).to_have_length(0)
    expect(statuses(report)).to_be_equal([
        ("skipped > plain", Status.SKIPPED),
        ("skipped > deeper > nested", Status.SKIPPED),
    ])
    expect(report.ok).to_be_truthy()


def test_skipped_test_runs_no_hooks():
    reg = Registry()
    ran = []
    reg.before_each(lambda: ran.append("before"))
    reg.after_each(lambda: ran.append("after"))
    reg.test.skip("skipped", lambda: ran.append("body"))
    reg.test("normal", noop)

    report = run_sync(reg)
    expect(ran).to_be_equal(["before", "after"])
    expect([r.status for r in report]).to_be_equal([Status.SKIPPED, Status.PASSED])


def test_skipped_suite_hooks_never_run():
    reg = Registry()
    ran = []

    def body():
        reg.before_all(lambda: ran.append("before_all"))
        reg.after_all(lambda: ran.append("after_all"))
        reg.test("t", noop)

    reg.describe("s", {'skip': True}, body)
    run_sync(reg)
    expect(ran).to_be_equal([])


# --- failures ---

def test_matcher_failure_is_recorded_as_assertion():
    reg = Registry()
    reg.test("bad math", lambda: expect(1 + 1).to_be_equal(3))
    report = run_sync(reg)

    result = report[0]
    expect(result.status).to_be_equal(Status.FAILED)
    expect(result.failure.kind).to_be_equal(FailureKind.ASSERTION)
    expect(isinstance(result.failure.error, MatcherFailure)).to_be_truthy()
    expect(result.failure.message).to_contain("to_be_equal")


def test_runtime_error_is_recorded_raw():
    reg = Registry()
    error = KeyError("missing")
    reg.test("explodes", fail_with(error))
    result = run_sync(reg)[0]
    expect(result.failure.kind).to_be_equal(FailureKind.RUNTIME)
    expect(result.failure.error is error).to_be_truthy()


def test_body_returning_a_generator_fails_instead_of_passing():
    reg = Registry()
    ran = []

    async def streams():
        ran.append("x")
        yield

    reg.test("wrapped generator", lambda: streams())
    result = run_sync(reg)[0]
    expect(result.status).to_be_equal(Status.FAILED)
    expect(result.failure.kind).to_be_equal(FailureKind.RUNTIME)
    expect(ran).to_have_length(0)


def test_empty_error_messages_name_the_type_once():
    hooked = Registry()
    hooked.before_each(fail_with(RuntimeError()))
    hooked.test("t", noop)
    expect(run_sync(hooked)[0].failure.message).to_be_equal("before_each hook: RuntimeError")

    plain = Registry()
    plain.test("raises", fail_with(KeyError()))
    plain.test("bare assert", fail_with(AssertionError()))
    report = run_sync(plain)
    expect(report[0].failure.message).to_be_equal("KeyError")
    expect(report[1].failure.message).to_be_equal("AssertionError")


def test_failing_test_does_not_stop_siblings_or_cousins():
    reg = Registry()

    def first():
        reg.test("boom", fail_with(RuntimeError("x")))
        reg.test("fine", noop)

    reg.describe("first", first)
    reg.describe("second", lambda: reg.test("also fine", noop))

    report = run_sync(reg)
    expect([r.status for r in report]).to_be_equal([Status.FAILED, Status.PASSED, Status.PASSED])
    expect(report.failed).to_be_equal(1)
    expect(report.ok).to_be_falsy()


def test_before_all_failure_fails_the_subtree_and_spares_siblings():
    reg = Registry()
    ran = []

    def broken():
        reg.before_all(fail_with(RuntimeError("db down")))
        reg.before_all(lambda: ran.append("second before_all"))
        reg.after_all(lambda: ran.append("cleanup"))
        reg.test("a", lambda: ran.append("a"))
        reg.describe("nested", lambda: reg.test("b", lambda: ran.append("b")))
        reg.test.skip("c")

    reg.describe("broken", broken)
    reg.describe("healthy", lambda: reg.test("d", lambda: ran.append("d")))

    report = run_sync(reg)
    expect(statuses(report)).to_be_equal([
        ("broken > a", Status.FAILED),
        ("broken > nested > b", Status.FAILED),
        ("broken > c", Status.SKIPPED),
        ("healthy > d", Status.PASSED),
    ])
    expect(ran).to_be_equal(["cleanup", "d"])

    failure = report[0].failure
    expect(failure.kind).to_be_equal(FailureKind.HOOK)
    expect(failure.hook).to_be_equal(HookKind.BEFORE_ALL)
    expect(failure.message).to_contain("db down")
    expect(report.suite_errors).to_have_length(1)
    expect(report.suite_errors[0].suite).to_be_equal("broken")


def test_before_each_failure_skips_body_but_runs_after_each():
    reg = Registry()
    ran = []
    reg.before_each(fail_with(ValueError("no fixture")))
    reg.after_each(lambda: ran.append("after"))
    reg.test("t", lambda: ran.append("body"))

    result = run_sync(reg)[0]
    expect(ran).to_be_equal(["after"])
    expect(result.status).to_be_equal(Status.FAILED)
    expect(result.failure.hook).to_be_equal(HookKind.BEFORE_EACH)


def test_first_failure_wins_and_later_hook_errors_are_attached():
    reg = Registry()
    reg.after_each(fail_with(RuntimeError("outer cleanup")))

    def body():
        reg.after_each(fail_with(RuntimeError("inner cleanup")))
        reg.test("t", lambda: expect("a").to_be_equal("b"))

    reg.describe("s", body)
    result = run_sync(reg)[0]

    expect(result.failure.kind).to_be_equal(FailureKind.ASSERTION)
    expect([str(f.error) for f in result.failure.extra]).to_be_equal(["inner cleanup", "outer cleanup"])
    expect(result.failure.extra[0].hook).to_be_equal(HookKind.AFTER_EACH)


def test_after_each_failure_alone_fails_the_test():
    reg = Registry()
    reg.after_each(fail_with(OSError("disk")))
    reg.test("t", noop)
    result = run_sync(reg)[0]
    expect(result.status).to_be_equal(Status.FAILED)
    expect(result.failure.kind).to_be_equal(FailureKind.HOOK)


def test_after_all_failure_is_a_suite_error_and_keeps_test_outcomes():
    reg = Registry()
    ran = []

    def body():
        reg.after_all(fail_with(RuntimeError("teardown")))
        reg.after_all(lambda: ran.append("second after_all"))
        reg.test("t", noop)

    reg.describe("s", body)
    report = run_sync(reg)

    expect(report[0].status).to_be_equal(Status.PASSED)
    expect(ran).to_be_equal(["second after_all"])
    expect(report.suite_errors).to_have_length(1)
    expect(report.suite_errors[0].hook).to_be_equal(HookKind.AFTER_ALL)
    expect(report.ok).to_be_falsy()


def test_usage_error_inside_a_test_body_escapes_the_engine():
    reg = Registry()
    reg.test("declares late", lambda: reg.test("too late", noop))
    with pytest.raises(UsageError):
        run_sync(reg)


# --- async bodies ---

def test_async_hooks_and_bodies_are_awaited_in_sequence():
    reg = Registry()
    log = []

    async def setup():
        await asyncio.sleep(0)
        log.append("setup")

    async def body_a():
        await asyncio.sleep(0.01)
        log.append("a")

    async def body_b():
        log.append("b")

    reg.before_each(setup)
    reg.test("a", body_a)
    reg.test("b", body_b)

    report = run_sync(reg)
    expect(log).to_be_equal(["setup", "a", "setup", "b"])
    expect(report.passed).to_be_equal(2)


def test_rejected_awaitable_counts_as_failure():
    reg = Registry()

    async def rejects():
        await asyncio.sleep(0)
        expect(None).to_be_not_null()

    reg.test("async failure", rejects)
    result = run_sync(reg)[0]
    expect(result.status).to_be_equal(Status.FAILED)
    expect(result.failure.kind).to_be_equal(FailureKind.ASSERTION)


def test_run_can_be_awaited_from_an_existing_loop():
    reg = Registry()
    reg.test("t", noop)

    async def main():
        return await reg.run()

    report = asyncio.run(main())
    expect(isinstance(report, RunReport)).to_be_truthy()
    expect(report.total).to_be_equal(1)


# --- results ---

def test_durations_are_recorded_for_executed_tests():
    reg = Registry()
    reg.test("slow", lambda: asyncio.sleep(0.02))
    reg.test.skip("skipped")
    report = run_sync(reg)
    expect(report[0].duration_ms).to_be_greater_than(10)
    expect(report[1].duration_ms).to_be_equal(0.0)
    expect(report.duration_ms).to_be_greater_than(report[0].duration_ms - 1)


def test_details_flow_from_suites_to_results():
    reg = Registry()

    def body():
        reg.test("t", {'details': {'owner': 'qa', 'ticket': 7}}, noop)

    reg.describe("s", {'details': {'owner': 'core', 'area': 'io'}}, body)
    result = run_sync(reg)[0]
    expect(result.details).to_be_equal({'owner': 'qa', 'area': 'io', 'ticket': 7})


def test_running_the_same_tree_twice_is_idempotent():
    reg = Registry()

    def body():
        reg.test("passes", noop)
        reg.test("fails", lambda: expect([]).to_have_length(1))
        reg.test.skip("skips")

    reg.describe("s", body)
    first = run_sync(reg)
    second = run_sync(reg)
    expect(first.outcomes()).to_be_equal(second.outcomes())
    expect(first.outcomes()).to_have_length(3)


def test_run_defaults_to_the_process_wide_registry():
    import qspec
    fresh = qspec.reset()
    try:
        qspec.test("global test", noop)
        report = asyncio.run(run())
        expect(report[0].name).to_be_equal("global test")
        expect(fresh.frozen).to_be_truthy()
    finally:
        qspec.reset()
