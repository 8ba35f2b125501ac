# SPDX-License-Identifier: MIT
"""Command-line interface for vcxgen."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path

from vcxgen.core.errors import VcxgenError
from vcxgen.core.graph import build_target_graph
from vcxgen.core.project import load_project
from vcxgen.generators.msvc import MsvcGenerator
from vcxgen.toolsets.profiles import DEFAULT_PROFILE, PROFILES

# Set up logging
logger = logging.getLogger("vcxgen")

# Environment variable holding KEY=value overrides as a JSON object
VARS_ENV = "VCXGEN_VARS"


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


def parse_variables(args: list[str]) -> tuple[dict[str, str], list[str]]:
    """Parse KEY=value arguments from a list.

    Args:
        args: List of arguments.

    Returns:
        Tuple of (variables dict, remaining args).
    """
    variables: dict[str, str] = {}
    remaining: list[str] = []

    for arg in args:
        if "=" in arg and not arg.startswith("-"):
            key, _, value = arg.partition("=")
            if key:  # Valid KEY=value
                variables[key] = value
            else:
                remaining.append(arg)
        else:
            remaining.append(arg)

    return variables, remaining


def env_variables() -> dict[str, str]:
    """Read overrides from the VCXGEN_VARS environment variable.

    An unset variable or one that is not a JSON object gives no overrides.
    """
    raw = os.environ.get(VARS_ENV)
    if not raw:
        return {}
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Ignoring %s: not valid JSON", VARS_ENV)
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring %s: not a JSON object", VARS_ENV)
        return {}
    return {str(k): str(v) for k, v in data.items()}


def cmd_generate(args: argparse.Namespace) -> int:
    """Generate the Visual Studio solution and projects.

    Variables given on the command line win over VCXGEN_VARS.
    """
    setup_logging(args.verbose, args.debug)

    variables, remaining = parse_variables(args.extra)
    if remaining:
        logger.error("Unexpected arguments: %s", " ".join(remaining))
        return 1
    variables = {**env_variables(), **variables}

    output_dir = Path(args.output).absolute() if args.output else None
    try:
        project = load_project(args.project)
        generator = MsvcGenerator(args.profile, variables)
        result = generator.generate(project, output_dir)
    except VcxgenError as e:
        logger.error("%s", e)
        return 1

    if result.changed:
        print(f"Generated {len(result.written)} files in {result.output_dir}")
    else:
        print(f"All files in {result.output_dir} are up to date")
    return 0


def cmd_targets(args: argparse.Namespace) -> int:
    """Print the targets a project exports to."""
    setup_logging(args.verbose, args.debug)

    try:
        project = load_project(args.project)
        graph = build_target_graph(project)
    except VcxgenError as e:
        logger.error("%s", e)
        return 1

    for target in graph:
        line = f"{target.name:<20} {target.configuration_type:<16} {target.suffix:<8} {target.guid}"
        if target.depends_on is not None:
            line += f"  (links {target.depends_on.name})"
        print(line)
    return 0


def cmd_profiles(args: argparse.Namespace) -> int:
    """List the Visual Studio profiles."""
    setup_logging(args.verbose, args.debug)

    for tag, profile in PROFILES.items():
        marker = "*" if tag == DEFAULT_PROFILE else " "
        print(
            f"{marker} {tag:<8} {profile.display_name:<20} "
            f"version {profile.visual_studio_version:<3} "
            f"toolsets: {', '.join(profile.supported_toolsets)}"
        )
    return 0


def add_common_args(parser: argparse.ArgumentParser) -> None:
    """Add common arguments to a parser."""
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    parser.add_argument("--debug", action="store_true", help="Debug output")


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the vcxgen CLI."""
    parser = argparse.ArgumentParser(
        prog="vcxgen",
        description="Generate Visual Studio solutions and projects from a project description.",
        epilog="Run 'vcxgen <command> --help' for command-specific help.",
    )

    from vcxgen import __version__

    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # vcxgen generate
    gen_parser = subparsers.add_parser(
        "generate", help="Generate the solution and project files"
    )
    add_common_args(gen_parser)
    gen_parser.add_argument("project", help="Path to the project description (JSON)")
    gen_parser.add_argument(
        "-o", "--output", metavar="DIR", help="Output folder (default: Builds/<profile>)"
    )
    gen_parser.add_argument(
        "--profile",
        metavar="TAG",
        help=f"Visual Studio profile ({', '.join(PROFILES)})",
    )
    gen_parser.add_argument(
        "extra",
        nargs="*",
        help="Exporter variables (KEY=value)",
    )
    gen_parser.set_defaults(func=cmd_generate)

    # vcxgen targets
    targets_parser = subparsers.add_parser("targets", help="Show the targets of a project")
    add_common_args(targets_parser)
    targets_parser.add_argument("project", help="Path to the project description (JSON)")
    targets_parser.set_defaults(func=cmd_targets)

    # vcxgen profiles
    profiles_parser = subparsers.add_parser("profiles", help="List Visual Studio profiles")
    add_common_args(profiles_parser)
    profiles_parser.set_defaults(func=cmd_profiles)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    result: int = args.func(args)
    return result


if __name__ == "__main__":
    sys.exit(main())
