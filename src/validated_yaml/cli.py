"""validated-yaml CLI: validate YAML batches from the command line."""

import argparse
import logging
import sys
from importlib.metadata import version as get_version, PackageNotFoundError
from pathlib import Path


def _configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr)


def main():
    """Main CLI entry point for validated-yaml commands."""
    try:
        package_version = get_version("validated-yaml")
    except PackageNotFoundError:
        package_version = "dev"

    parser = argparse.ArgumentParser(
        prog="validated-yaml",
        description="Validate YAML files against the JSON Schemas referenced by their '# yaml-language-server: $schema=' marker"
    )
    parser.add_argument("--version", action="version", version=f"validated-yaml {package_version}")
    # Common arguments
    parent_parser = argparse.ArgumentParser(add_help=False)
    parent_parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress all non-error output."
    )
    parent_parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Log progress to stderr (-v for INFO, -vv for DEBUG)."
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # check command
    check_parser = subparsers.add_parser(
        "check",
        help="Validate every file matched by a glob pattern",
        parents=[parent_parser]
    )
    check_parser.add_argument(
        "pattern",
        help="Glob pattern of YAML files ('**' matches across directories); quote it to keep the shell from expanding it"
    )
    check_parser.add_argument(
        "--first-line-only",
        action="store_true",
        help="Require the schema marker on the first non-blank line instead of anywhere in the file"
    )
    check_parser.add_argument(
        "--draft",
        choices=["2020-12", "2019-09", "7", "6", "4"],
        default="2020-12",
        help="JSON Schema dialect for schemas without '$schema' (default: 2020-12)"
    )
    check_parser.add_argument(
        "--format-assertion",
        action="store_true",
        help="Enforce the 'format' keyword"
    )
    check_parser.add_argument(
        "--include-directories",
        action="store_true",
        help="Keep directories matched by the pattern (they fail as unreadable files)"
    )
    check_parser.add_argument(
        "--output-dir",
        type=Path,
        default=None,
        help="Write validated.json (the full batch result) to this directory"
    )
    check_parser.add_argument(
        "--print",
        dest="print_entries",
        action="store_true",
        help="Print the committed path -> content mapping as JSON to stdout"
    )

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    _configure_logging(args.verbose)

    if args.command == "check":
        # Lazy import: only load the schema engine when a command runs
        from .api import validate_batch
        from .config import PipelineConfig
        from .kernel.errors import BatchAbortedError
        from ._internal.canonical_json import canonical_dumps

        try:
            config = PipelineConfig(
                marker_position="first-line" if args.first_line_only else "anywhere",
                default_draft=args.draft,
                format_assertion=args.format_assertion,
                files_only=not args.include_directories,
            )
            result = validate_batch(args.pattern, config=config)
        except BatchAbortedError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)

        for diagnostic in result.diagnostics:
            print(diagnostic, file=sys.stderr)

        report_out = None
        if args.output_dir is not None:
            output_dir = Path(args.output_dir).resolve()
            output_dir.mkdir(parents=True, exist_ok=True)
            report_out = output_dir / "validated.json"
            report_out.write_text(canonical_dumps(result.model_dump()) + "\n", encoding="utf-8")

        if args.print_entries and result.committed:
            print(canonical_dumps(result.entries))
        elif not args.quiet:
            status = "OK" if result.committed else "FAILED"
            failed = sum(1 for f in result.files if not f.ok)
            print(f"[{status}] Validation complete")
            print(f"  Status: {'COMMITTED' if result.committed else 'NOT COMMITTED'}")
            print(f"  Files: {len(result.files)}")
            print(f"  Failed: {failed}")
            if result.digest:
                print(f"  Digest: {result.digest}")
            if report_out is not None:
                print(f"  Report: {report_out}")

        if not result.committed:
            sys.exit(1)
