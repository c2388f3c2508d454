"""
command line runner: find test files, load their declarations, run them and
print a report. exit code is 0 when nothing failed, 1 otherwise.
"""

import asyncio
import logging
import os
import sys
from dataclasses import dataclass, asdict, field
from typing import List, Optional, Sequence, Tuple

from . import registry as _registry
from .engine import run
from .errors import UsageError
from .loader import DEFAULT_PATTERNS, discover, load_files
from .reporter import ConsoleReporter

logger = logging.getLogger(__name__)


@dataclass
class RunConfig:
    paths: List[str] = field(default_factory=lambda: ["."])
    patterns: Tuple[str, ...] = DEFAULT_PATTERNS
    title: str = "test run"
    color: bool = True
    verbose: bool = False
    show_skipped: bool = True

    def __post_init__(self):
        if os.environ.get('NO_COLOR'): self.color = False
        self.patterns = tuple(self.patterns)


def execute(config: RunConfig) -> int:
    """load, run and report according to config; returns the exit code"""
    logger.debug(f"config: {asdict(config)}")
    registry = _registry.reset()

    try:
        files = discover(config.paths, config.patterns)
    except FileNotFoundError as e:
        logger.error(str(e))
        return 1

    _, load_errors = load_files(files)
    try:
        report = asyncio.run(run(registry))
    except UsageError as e:
        logger.error(f"run aborted: {e}")
        return 1

    reporter = ConsoleReporter(color=config.color, show_skipped=config.show_skipped)
    reporter.report(report, title=config.title, load_errors=load_errors)

    if report.total == 0 and not load_errors:
        logger.warning(f"no tests found in {', '.join(config.paths)} (patterns: {', '.join(config.patterns)})")
        return 1
    return 0 if report.ok and not load_errors else 1


def parse_args(argv: Optional[Sequence[str]] = None) -> RunConfig:
    import argparse

    parser = argparse.ArgumentParser(
        prog='qspec',
        description='run describe/test style test files',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
examples:
  qspec                          # every *_spec.py / *_test.py below the current directory
  qspec tests/ math_spec.py      # a directory and a single file
  qspec -p '*.check.py' checks/  # custom file name pattern
        """
    )
    parser.add_argument('paths', nargs='*', default=['.'], help='files or directories to run')
    parser.add_argument('-p', '--pattern', action='append', dest='patterns',
                        help=f"file name pattern for directory search (default: {' '.join(DEFAULT_PATTERNS)})")
    parser.add_argument('-t', '--title', default='test run', help='title printed above the results')
    parser.add_argument('--no-color', action='store_true', help='disable ANSI colors')
    parser.add_argument('--hide-skipped', action='store_true', help='do not list skipped tests')
    parser.add_argument('--verbose', action='store_true', help='Verbose logging')

    args = parser.parse_args(argv)
    return RunConfig(
        paths=args.paths,
        patterns=tuple(args.patterns) if args.patterns else DEFAULT_PATTERNS,
        title=args.title,
        color=not args.no_color,
        verbose=args.verbose,
        show_skipped=not args.hide_skipped,
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    config = parse_args(argv)

    # configure minimal logging
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(message)s')
    if config.verbose: logging.getLogger().setLevel(logging.DEBUG)

    return execute(config)


if __name__ == "__main__":
    sys.exit(main())
