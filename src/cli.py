"""Command-line interface for phpusage."""

from __future__ import annotations

import argparse
import logging
import platform
import sys
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

from artifacts.models.usages import Confidence
from artifacts.render import OUTPUT_FORMATS, filter_by_confidence, render
from finder.usage_finder import UsageFinder
from index.symbol_index import SymbolIndex
from rules.config import ConfigError, FinderConfig, load_config

logger = logging.getLogger(__name__)

_LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"

PARSER_DISTRIBUTIONS = ("tree-sitter", "tree-sitter-php")


def _configure_logging(verbosity: int) -> None:
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity == 1:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format=_LOG_FORMAT, stream=sys.stderr)


def _add_common_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-e",
        "--exclude",
        action="append",
        default=[],
        metavar="PATH",
        help="Path to leave out of the search (repeatable)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Log progress to stderr (-vv for debug output)",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="phpusage")
    subparsers = parser.add_subparsers(dest="command", required=True)

    find_parser = subparsers.add_parser(
        "find-usages", help="Find usages of a class, method or constant"
    )
    find_parser.add_argument(
        "symbol",
        help="Qualified symbol, e.g. 'App\\User' or 'App\\User::getName'",
    )
    find_parser.add_argument(
        "-p",
        "--path",
        action="append",
        default=[],
        metavar="PATH",
        help="File or directory to search (repeatable, default: .)",
    )
    find_parser.add_argument(
        "-f",
        "--format",
        choices=OUTPUT_FORMATS,
        default="text",
        help="Output format (default: text)",
    )
    find_parser.add_argument(
        "-c",
        "--confidence",
        "--min-confidence",
        dest="min_confidence",
        choices=[tier.value for tier in Confidence],
        type=str.upper,
        default=None,
        help="Lowest confidence tier to report (default: config or POSSIBLE)",
    )
    _add_common_options(find_parser)

    index_parser = subparsers.add_parser(
        "index", help="List the PHP files and declarations a search would cover"
    )
    index_parser.add_argument("paths", nargs="+", metavar="PATH")
    index_parser.add_argument(
        "--stats",
        action="store_true",
        help="Print symbol and error totals instead of the file list",
    )
    _add_common_options(index_parser)

    subparsers.add_parser("version", help="Show tool and parser versions")

    return parser


def _config_root(paths: list[str]) -> Path:
    first = Path(paths[0]).expanduser().resolve()
    return first if first.is_dir() else first.parent


def _build_index(
    paths: list[str], excludes: list[str], config: FinderConfig
) -> SymbolIndex:
    index = SymbolIndex()
    index.index_paths(paths, config=config, exclude_paths=excludes)
    return index


def _handle_find_usages(args: argparse.Namespace, config: FinderConfig) -> int:
    paths = args.path or ["."]
    index = _build_index(paths, args.exclude, config)

    logger.debug("Searching %d indexed file(s)", len(index))
    finder = UsageFinder(index, config=config)
    usages = finder.find(args.symbol)

    min_confidence = (
        Confidence(args.min_confidence)
        if args.min_confidence is not None
        else config.min_confidence
    )
    sys.stdout.write(render(filter_by_confidence(usages, min_confidence), args.format))

    if finder.errors.exceeds_threshold(len(index)):
        sys.stderr.write(
            f"warning: {len(finder.errors)} of {len(index)} file(s) "
            "could not be analyzed\n"
        )
    return 0


def _handle_index(args: argparse.Namespace, config: FinderConfig) -> int:
    index = _build_index(args.paths, args.exclude, config)

    if not args.stats:
        for path in index.indexed_files():
            sys.stdout.write(f"{path}\n")
        return 0

    summary = index.errors.summary()
    sys.stdout.write(f"files: {len(index)}\n")
    sys.stdout.write(f"symbols: {index.symbol_count()}\n")
    sys.stdout.write(f"errors: {summary['total']}\n")
    for category, count in summary["by_category"].items():
        sys.stdout.write(f"  {category}: {count}\n")
    return 0


def _distribution_version(name: str) -> str:
    try:
        return version(name)
    except PackageNotFoundError:
        return "unknown"


def _handle_version() -> int:
    sys.stdout.write(f"phpusage {_distribution_version('phpusage')}\n")
    sys.stdout.write(f"Python {platform.python_version()}\n")
    for name in PARSER_DISTRIBUTIONS:
        sys.stdout.write(f"{name} {_distribution_version(name)}\n")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    if args.command == "version":
        return _handle_version()

    _configure_logging(args.verbose)
    if args.command == "find-usages":
        paths = args.path or ["."]
    else:
        paths = args.paths
    try:
        config = load_config(_config_root(paths))
    except ConfigError as exc:
        sys.stderr.write(f"error: {exc}\n")
        return 2

    if args.command == "find-usages":
        return _handle_find_usages(args, config)

    if args.command == "index":
        return _handle_index(args, config)

    raise AssertionError


if __name__ == "__main__":
    raise SystemExit(main())
