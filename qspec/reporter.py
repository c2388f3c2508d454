import sys
from typing import List, Optional, Sequence, TextIO

from .errors import LoadError
from .types import Failure, RunReport, Status, TestResult

PASS_FACE = '(^ ω ^)'
FAIL_FACE = '(ﾉಥДಥ)ﾉ'
SKIP_FACE = '(-_-)zzz'
SUMMARY_FACE = '☆*:.｡.o(≧▽≦)o.｡.:*☆'


class _c:
    """a tiny, silent class for holding color codes."""
    ok = '\033[92m'
    fail = '\033[91m'
    warn = '\033[93m'
    info = '\033[94m'
    grey = '\033[90m'
    reset = '\033[0m'


class _no_c:
    ok = fail = warn = info = grey = reset = ''


def _failure_lines(failure: Failure) -> List[str]:
    """first failure, then anything attached after it"""
    lines = failure.message.splitlines() or [failure.message]
    for extra in failure.extra:
        lines.append(f"also: {extra.message.splitlines()[0]}")
    return lines


class ConsoleReporter:
    """prints a RunReport the way the old single-file suite runner did"""

    def __init__(self, stream: Optional[TextIO] = None, color: bool = True, show_skipped: bool = True):
        self.stream = stream if stream is not None else sys.stdout
        self.c = _c if color else _no_c
        self.show_skipped = show_skipped

    def _print(self, text: str = "") -> None:
        print(text, file=self.stream)

    def start(self, title: str) -> None:
        self._print(f"\n{self.c.info}--- starting: {title} ---{self.c.reset}")

    def result(self, result: TestResult) -> None:
        c = self.c
        if result.status is Status.PASSED:
            self._print(f"  {c.ok}✔ pass{c.reset}  {PASS_FACE}  {result.name} "
                        f"{c.grey}({result.duration_ms:.2f}ms){c.reset}")
        elif result.status is Status.SKIPPED:
            if self.show_skipped:
                self._print(f"  {c.warn}○ skip{c.reset}  {SKIP_FACE}  {result.name}")
        else:
            self._print(f"  {c.fail}✖ fail{c.reset}  {FAIL_FACE}  {result.name}")
            lines = _failure_lines(result.failure)
            for i, line in enumerate(lines):
                branch = '└─>' if i == len(lines) - 1 else '├─>'
                self._print(f"    {c.grey}{branch} {line}{c.reset}")

    def suite_errors(self, report: RunReport) -> None:
        c = self.c
        for error in report.suite_errors:
            where = error.suite or '(root)'
            self._print(f"  {c.fail}✖ {error.hook.value}{c.reset}  in {where}")
            self._print(f"    {c.grey}└─> {error.failure.message.splitlines()[0]}{c.reset}")

    def load_errors(self, errors: Sequence[LoadError]) -> None:
        c = self.c
        for error in errors:
            self._print(f"  {c.fail}✖ load{c.reset}  {error.path}")
            self._print(f"    {c.grey}└─> {type(error.error).__name__}: {error.error}{c.reset}")

    def summary(self, report: RunReport, load_errors: Sequence[LoadError] = ()) -> None:
        """prints the final summary of the test run."""
        c = self.c
        healthy = report.ok and not load_errors
        summary_color = c.ok if healthy else c.fail

        self._print(f"\n{summary_color}--- summary ---{c.reset}")
        self._print(f"  {SUMMARY_FACE}  ran {c.info}{report.total}{c.reset} tests "
                    f"in {c.warn}{report.duration_ms:.2f}ms{c.reset}")
        self._print(f"  {c.ok}passed: {report.passed}{c.reset}, {c.fail}failed: {report.failed}{c.reset}, "
                    f"{c.warn}skipped: {report.skipped}{c.reset}")
        if report.suite_errors:
            self._print(f"  {c.fail}suite errors: {len(report.suite_errors)}{c.reset}")
        if load_errors:
            self._print(f"  {c.fail}files that failed to load: {len(load_errors)}{c.reset}")
        self._print(f"{summary_color}---------------{c.reset}\n")

    def report(self, report: RunReport, title: str = "test run", load_errors: Sequence[LoadError] = ()) -> None:
        self.start(title)
        self.load_errors(load_errors)
        for result in report:
            self.result(result)
        self.suite_errors(report)
        self.summary(report, load_errors)
