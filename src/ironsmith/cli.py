"""Command-line interface for the Ironsmith engine.

This module provides the ``ironsmith`` entry point, which configures an
engine from flags, imports plugins by dotted path, and runs a build.
"""

import argparse
import asyncio
import importlib
import json
import sys
from typing import Any

from .core.types import Plugin
from .engine import Ironsmith


def import_plugin(spec: str) -> Plugin:
    """Import a plugin from a ``module:attribute`` reference.

    Args:
        spec: Reference such as ``'mysite.plugins:markdown'``

    Returns:
        The plugin callable

    Raises:
        ValueError: If the reference is malformed or not callable
        ImportError: If the module cannot be imported
    """
    module_name, sep, attribute = spec.partition(":")
    if not sep or not module_name or not attribute:
        raise ValueError(f"Invalid plugin reference: '{spec}'. Expected 'module:attribute'")

    module = importlib.import_module(module_name)

    try:
        plugin = getattr(module, attribute)
    except AttributeError:
        raise ValueError(f"Module '{module_name}' has no attribute '{attribute}'") from None

    if not callable(plugin):
        raise ValueError(f"Plugin '{spec}' is not callable")

    return plugin  # type: ignore[no-any-return]


def create_engine(args: argparse.Namespace) -> Ironsmith:
    """Build an engine from parsed command-line arguments.

    Raises:
        ValueError: If ``--metadata`` is not a JSON object or a plugin
            reference is invalid
        ImportError: If a plugin module cannot be imported
    """
    options: dict[str, Any] = {
        "root_path": args.root,
        "source_path": args.source,
        "build_path": args.build,
        "load_source": not args.no_source,
        "clean": args.clean,
        "verbose": min(args.verbose, 2),
    }

    if args.assets:
        options["assets_path"] = args.assets
        options["load_assets"] = True

    if args.metadata:
        metadata = json.loads(args.metadata)
        if not isinstance(metadata, dict):
            raise ValueError("--metadata must be a JSON object")
        options["metadata"] = metadata

    engine = Ironsmith(options)

    for spec in args.use:
        engine.use(import_plugin(spec))

    return engine


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the ironsmith command."""
    parser = argparse.ArgumentParser(
        prog="ironsmith",
        description="Run files through a plugin pipeline",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Copy src/ to build/
  ironsmith build --root .

  # Run plugins and write to a clean output directory
  ironsmith build --root site --use mysite.plugins:markdown --clean

  # List the files the pipeline would produce
  ironsmith process --root site --assets static --use mysite.plugins:drafts
        """,
    )

    parser.add_argument(
        "command", choices=["build", "process"], help="Write the output or only process it"
    )
    parser.add_argument("--root", default=".", help="Root directory (default: current directory)")
    parser.add_argument("--source", default="src", help="Source directory relative to root")
    parser.add_argument("--build", default="build", help="Build directory relative to root")
    parser.add_argument("--assets", help="Assets directory relative to root (enables assets)")
    parser.add_argument("--no-source", action="store_true", help="Do not load the source directory")
    parser.add_argument(
        "--clean", action="store_true", help="Empty the build directory before writing"
    )
    parser.add_argument("--metadata", help="Metadata as a JSON object")
    parser.add_argument(
        "--use",
        action="append",
        default=[],
        metavar="MODULE:ATTR",
        help="Plugin to add to the pipeline (repeatable, runs in order)",
    )
    parser.add_argument(
        "-v", "--verbose", action="count", default=0, help="Verbose output (-vv for debug)"
    )

    args = parser.parse_args(argv)

    try:
        engine = create_engine(args)

        if args.command == "build":
            files = asyncio.run(engine.build())
            print(f"Wrote {len(files)} files to {engine.build_path}", file=sys.stderr)
        else:
            files = asyncio.run(engine.process())
            for path in sorted(files):
                print(path)

    except Exception as e:
        print(f"Error: {args.command} failed: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
