# SPDX-License-Identifier: MIT
"""Command-line interface for antimony (``sb``)."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from antimony.core.errors import AntimonyError, MissingDependencyError
from antimony.core.label import Label
from antimony.core.resolver import DEFAULT_BUILD_FILE, Resolver
from antimony.dsl.value import StringValue

# Set up logging
logger = logging.getLogger("antimony")

WORKSPACE_MARKERS = (".sb", "WORKSPACE")


def setup_logging(verbose: bool = False, debug: bool = False) -> None:
    """Configure logging based on verbosity level."""
    if debug:
        level = logging.DEBUG
        fmt = "%(levelname)s: %(name)s: %(message)s"
    elif verbose:
        level = logging.INFO
        fmt = "%(levelname)s: %(message)s"
    else:
        level = logging.WARNING
        fmt = "%(levelname)s: %(message)s"

    logging.basicConfig(level=level, format=fmt)


def find_workspace(start: Path | None = None) -> Path | None:
    """Find the workspace root.

    Walks up from ``start`` (default: current dir) looking for a
    directory containing one of WORKSPACE_MARKERS.

    Returns:
        The workspace root, or None if no marker was found.
    """
    if start is None:
        start = Path.cwd()
    start = start.absolute()

    for directory in (start, *start.parents):
        if any((directory / marker).exists() for marker in WORKSPACE_MARKERS):
            return directory
    return None


def parse_variables(args: list[str]) -> tuple[dict[str, StringValue], list[str]]:
    """Split ``KEY=value`` overrides from the other arguments.

    Args:
        args: List of arguments.

    Returns:
        Tuple of (variables dict, remaining args).
    """
    variables: dict[str, StringValue] = {}
    remaining: list[str] = []

    for arg in args:
        key, sep, value = arg.partition("=")
        if sep and key and not arg.startswith("-"):
            variables[key] = StringValue(value)
        else:
            remaining.append(arg)

    return variables, remaining


def _resolver(args: argparse.Namespace) -> tuple[Resolver, list[str]] | None:
    if args.root:
        root: Path | None = Path(args.root)
    else:
        root = find_workspace()
    if root is None:
        logger.error(
            "No workspace found (looked for %s in %s and its parents)",
            " or ".join(WORKSPACE_MARKERS),
            Path.cwd(),
        )
        return None

    variables, references = parse_variables(args.extra)
    resolver = Resolver(root, build_file=args.build_file, variables=variables)
    logger.debug("Workspace root: %s", resolver.root)
    return resolver, references


async def _labels(resolver: Resolver, references: list[str]) -> list[Label]:
    """Labels named on the command line, or every target in the root."""
    if references:
        return [resolver.label(reference, Path.cwd()) for reference in references]
    return [target.label for target in await resolver.load(resolver.root)]


async def _generate(
    resolver: Resolver, references: list[str], output_dir: Path
) -> Path:
    labels = await _labels(resolver, references)
    return await resolver.build(labels, output_dir)


async def _format(resolver: Resolver, references: list[str]) -> list[str]:
    blocks = []
    for label in await _labels(resolver, references):
        target = await resolver.resolve(label)
        if target is None:
            raise MissingDependencyError(label.format(resolver.root))
        blocks.append(target.format())
    return blocks


def cmd_gen(args: argparse.Namespace) -> int:
    """Generate build.ninja for the requested targets."""
    setup_logging(args.verbose, args.debug)
    if (found := _resolver(args)) is None:
        return 1
    resolver, references = found

    try:
        path = asyncio.run(_generate(resolver, references, Path(args.output_dir)))
    except AntimonyError as e:
        logger.error("%s", e)
        return 1

    print(f"Wrote {path}")
    return 0


def cmd_format(args: argparse.Namespace) -> int:
    """Print the requested targets in description file syntax."""
    setup_logging(args.verbose, args.debug)
    if (found := _resolver(args)) is None:
        return 1
    resolver, references = found

    try:
        blocks = asyncio.run(_format(resolver, references))
    except AntimonyError as e:
        logger.error("%s", e)
        return 1

    print("\n\n".join(blocks))
    return 0


def add_common_args(parser: argparse.ArgumentParser) -> None:
    """Add common arguments to a parser."""
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    parser.add_argument("--debug", action="store_true", help="Debug output")
    parser.add_argument(
        "--root",
        metavar="DIR",
        help="Workspace root (default: nearest directory containing .sb or WORKSPACE)",
    )
    parser.add_argument(
        "--build-file",
        default=DEFAULT_BUILD_FILE,
        help=f"Description file name (default: {DEFAULT_BUILD_FILE})",
    )


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the sb CLI."""
    parser = argparse.ArgumentParser(
        prog="sb",
        description="Generate ninja build files from BUILD.gn descriptions.",
        epilog="Run 'sb <command> --help' for command-specific help.",
    )
    from antimony import __version__

    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # sb gen
    gen_parser = subparsers.add_parser("gen", help="Generate build.ninja")
    add_common_args(gen_parser)
    gen_parser.add_argument("output_dir", metavar="OUT_DIR", help="Build directory")
    gen_parser.add_argument(
        "extra",
        nargs="*",
        metavar="LABEL",
        help="Targets to generate (default: all in the root) or KEY=value overrides",
    )
    gen_parser.set_defaults(func=cmd_gen)

    # sb format
    format_parser = subparsers.add_parser(
        "format", help="Print targets as description file syntax"
    )
    add_common_args(format_parser)
    format_parser.add_argument(
        "extra",
        nargs="*",
        metavar="LABEL",
        help="Targets to print (default: all in the root) or KEY=value overrides",
    )
    format_parser.set_defaults(func=cmd_format)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    result: int = args.func(args)
    return result


if __name__ == "__main__":
    sys.exit(main())
