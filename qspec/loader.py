import fnmatch
import importlib.util
import logging
import sys
from pathlib import Path
from types import ModuleType
from typing import Iterable, List, Sequence, Tuple

from .errors import LoadError

logger = logging.getLogger(__name__)

DEFAULT_PATTERNS = ("*_spec.py", "*_test.py")
_IGNORED_DIRS = {'.git', '__pycache__', '.venv', 'venv', 'node_modules', '.tox'}


def _matches(path: Path, patterns: Sequence[str]) -> bool:
    return any(fnmatch.fnmatch(path.name, pattern) for pattern in patterns)


def discover(paths: Iterable[str], patterns: Sequence[str] = DEFAULT_PATTERNS) -> List[Path]:
    """
    expand files and directories into test files. files named explicitly are
    always kept; directories are searched recursively for names matching any
    pattern. result is sorted per directory and free of duplicates.
    """
    found: List[Path] = []
    seen = set()
    for raw in paths:
        path = Path(raw)
        if path.is_file():
            candidates = [path]
        elif path.is_dir():
            candidates = sorted(
                p for p in path.rglob('*.py')
                if _matches(p, patterns) and not _IGNORED_DIRS.intersection(p.relative_to(path).parts)
            )
        else:
            raise FileNotFoundError(f"no such file or directory: {raw}")

        for candidate in candidates:
            resolved = candidate.resolve()
            if resolved not in seen:
                seen.add(resolved)
                found.append(candidate)
    logger.debug(f"discovered {len(found)} test files")
    return found


def load_file(path: Path, index: int = 0) -> ModuleType:
    """import a test file as a fresh module; its declarations run right away"""
    module_name = f"qspec_file_{index}_{path.stem}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise ImportError(f"cannot import {path}")

    # sibling helper modules should be importable from the test file
    directory = str(path.resolve().parent)
    if directory not in sys.path:
        sys.path.insert(0, directory)

    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except BaseException:
        del sys.modules[module_name]
        raise
    return module


def load_files(paths: Sequence[Path]) -> Tuple[List[ModuleType], List[LoadError]]:
    """load every file, collecting import failures instead of stopping at the first"""
    modules, errors = [], []
    for index, path in enumerate(paths):
        try:
            modules.append(load_file(path, index))
            logger.debug(f"loaded {path}")
        except Exception as e:
            logger.error(f"failed to load {path}: {e}")
            errors.append(LoadError(str(path), e))
    return modules, errors
