"""File scanning utilities for PHP sources."""

from __future__ import annotations

import logging
from fnmatch import fnmatch
from pathlib import Path
from typing import TYPE_CHECKING, cast

from gitignore_parser import parse_gitignore  # type: ignore[import-untyped]

from rules.config import DEFAULT_EXCLUDE_DIRS

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Iterator

    from rules.config import FinderConfig

logger = logging.getLogger(__name__)


def _should_include_file(
    path: Path,
    directory: Path,
    extensions: tuple[str, ...],
    exclude_dirs: frozenset[str],
    gitignore_matches: Callable[[str], bool] | None,
    include_patterns: list[str] | None,
    exclude_patterns: list[str] | None,
) -> bool:
    """Check if a file should be included based on all filtering rules."""
    if path.suffix.lower() not in extensions:
        return False

    if not path.is_file() or path.is_symlink():
        return False

    if not _is_within_root(path, directory):
        return False

    try:
        rel_path = path.relative_to(directory)
    except ValueError:
        return False

    rel_path_str = rel_path.as_posix()

    if any(part in exclude_dirs for part in rel_path.parts[:-1]):
        return False

    if gitignore_matches is not None and gitignore_matches(str(path)):
        return False

    if include_patterns and not any(
        fnmatch(rel_path_str, pat) for pat in include_patterns
    ):
        return False

    has_excluded_match = exclude_patterns and any(
        fnmatch(rel_path_str, pat) for pat in exclude_patterns
    )
    return not has_excluded_match


def _is_within_root(path: Path, root: Path) -> bool:
    """Return True when the resolved path stays within the resolved root."""
    try:
        root_resolved = root.resolve()
        path_resolved = path.resolve()
    except OSError:
        return False

    try:
        path_resolved.relative_to(root_resolved)
    except ValueError:
        return False

    return True


def _iter_gitignore_files(root: Path) -> list[Path]:
    """Return sorted list of .gitignore files under root (including root)."""
    gitignore_paths = [root / ".gitignore"]
    gitignore_paths.extend(root.rglob(".gitignore"))
    unique_paths = {
        path for path in gitignore_paths if path.is_file() and not path.is_symlink()
    }
    return sorted(unique_paths, key=lambda p: p.relative_to(root).as_posix())


def _build_gitignore_matcher(
    root: Path,
    *,
    nested_gitignore: bool,
) -> Callable[[str], bool] | None:
    if not nested_gitignore:
        gitignore_path = root / ".gitignore"
        if gitignore_path.is_file():
            return cast("Callable[[str], bool]", parse_gitignore(gitignore_path))
        return None

    gitignore_paths = _iter_gitignore_files(root)
    if not gitignore_paths:
        return None

    matchers = [parse_gitignore(path) for path in gitignore_paths]

    def matches(path_str: str) -> bool:
        for matcher in matchers:
            try:
                if matcher(path_str):
                    return True
            except ValueError:
                continue
        return False

    return matches


def find_php_files(
    directory: Path,
    *,
    include_patterns: list[str] | None = None,
    exclude_patterns: list[str] | None = None,
    exclude_dirs: Iterable[str] = DEFAULT_EXCLUDE_DIRS,
    extensions: Iterable[str] = (".php",),
    nested_gitignore: bool = False,
) -> Iterator[Path]:
    """Find all PHP files in a directory, respecting .gitignore.

    Args:
        directory: Directory to search for PHP files
        include_patterns: Optional list of fnmatch patterns; if provided,
            files must match at least one pattern to be included
        exclude_patterns: Optional list of fnmatch patterns; files matching
            any pattern are excluded
        exclude_dirs: Directory names (e.g. "vendor") whose contents are skipped
        extensions: File suffixes treated as PHP source
        nested_gitignore: Also apply .gitignore files found below ``directory``

    Yields:
        Path objects for each PHP file found, sorted lexicographically
        by relative path for deterministic ordering.
    """
    gitignore_matches = _build_gitignore_matcher(
        directory,
        nested_gitignore=nested_gitignore,
    )
    suffixes = tuple(ext.lower() for ext in extensions)
    skipped_dirs = frozenset(exclude_dirs)

    matched_files = [
        path
        for path in directory.rglob("*")
        if _should_include_file(
            path,
            directory,
            suffixes,
            skipped_dirs,
            gitignore_matches,
            include_patterns,
            exclude_patterns,
        )
    ]

    matched_files.sort(key=lambda p: p.relative_to(directory).as_posix())

    yield from matched_files


def _is_excluded_path(path: Path, excluded: list[Path]) -> bool:
    return any(path == root or path.is_relative_to(root) for root in excluded)


def collect_php_files(
    paths: Iterable[str | Path],
    *,
    config: FinderConfig,
    exclude_paths: Iterable[str | Path] = (),
) -> list[Path]:
    """Expand files and directories into absolute PHP file paths.

    Explicit files are kept regardless of their suffix. Paths that do not
    exist are logged and skipped. Files under any of ``exclude_paths`` are
    dropped. The result preserves argument order and contains no duplicates.
    """
    excluded = [Path(p).expanduser().resolve() for p in exclude_paths]
    collected: list[Path] = []
    seen: set[Path] = set()

    def _add(candidate: Path) -> None:
        if candidate in seen or _is_excluded_path(candidate, excluded):
            return
        seen.add(candidate)
        collected.append(candidate)

    for raw_path in paths:
        path = Path(raw_path).expanduser().resolve()
        if path.is_file():
            _add(path)
        elif path.is_dir():
            for file_path in find_php_files(
                path,
                include_patterns=config.include,
                exclude_patterns=config.exclude,
                exclude_dirs=config.exclude_dirs,
                extensions=config.extensions,
                nested_gitignore=config.nested_gitignore,
            ):
                _add(file_path.resolve())
        else:
            logger.warning("Path does not exist: %s", raw_path)

    return collected


__all__ = ["_should_include_file", "collect_php_files", "find_php_files"]
