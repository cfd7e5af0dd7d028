# File: rapier/cli.py
"""
Rapier - Command-Line Interface
================================

Thin ``argparse`` wrapper over ``GenerationPipeline``.

Usage examples::

    # Generate Types.swift and Methods.swift
    python -m rapier --schema telegram.yaml --output ./Sources/TelegramBotSDK

    # Verbose output, custom extension and client type
    rapier -s telegram.yaml -o ./out -vv --extension swift --client-type Bot

    # Validate only (no file output)
    rapier -s telegram.yaml --validate-only

    # Render everything but write nothing
    rapier -s telegram.yaml --dry-run

Exit codes:
    0 — success
    1 — validation error
    2 — generation error
    3 — export error
    4 — input/argument error
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, NoReturn, Optional, Sequence

from rapier.generator import GenerationPipeline, GenerationReport, load_schema_file, parse_raw_schema
from rapier.utils import Timer
from rapier.validators import validate_full

# ---------------------------------------------------------------------------
# Logger (configured in _setup_logging)
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("rapier")


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

EXIT_SUCCESS: int = 0
EXIT_VALIDATION_ERROR: int = 1
EXIT_GENERATION_ERROR: int = 2
EXIT_EXPORT_ERROR: int = 3
EXIT_INPUT_ERROR: int = 4


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(verbosity: int) -> None:
    """
    Configure the ``rapier`` logger based on verbosity level.

    Args:
        verbosity: 0 = WARNING, 1 = INFO, 2+ = DEBUG.
    """
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity >= 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    handler: logging.StreamHandler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    fmt: str = "%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s"
    handler.setFormatter(logging.Formatter(fmt, datefmt="%H:%M:%S"))

    root_logger: logging.Logger = logging.getLogger("rapier")
    root_logger.setLevel(level)

    # Repeated cli_main() calls (tests) must not stack handlers
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.propagate = False


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    from rapier import __version__

    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="rapier",
        description=(
            "Rapier — Swift client-library generator.\n\n"
            "Turns a description of API types and methods (JSON/YAML) into "
            "Types.swift and Methods.swift for a JSON-backed bot client."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  %(prog)s -s telegram.yaml -o ./Sources\n"
            "  %(prog)s -s telegram.yaml --validate-only\n"
            "  %(prog)s -s telegram.json -o ./out -vv --no-strict\n"
        ),
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"Rapier v{__version__}",
    )

    parser.add_argument(
        "-s", "--schema",
        type=str,
        required=True,
        metavar="PATH",
        help="Path to the schema file (JSON or YAML).",
    )
    parser.add_argument(
        "-o", "--output",
        type=str,
        default=None,
        metavar="DIR",
        help="Output directory (defaults to config.output_dir of the schema file).",
    )

    # --- Modes ---
    mode_group = parser.add_argument_group("operation modes")
    mode_group.add_argument(
        "--validate-only",
        action="store_true",
        default=False,
        help="Only validate the schema without generating code.",
    )
    mode_group.add_argument(
        "--dry-run",
        action="store_true",
        default=False,
        help="Render both files but don't write them to disk.",
    )

    # --- Config overrides ---
    config_group = parser.add_argument_group("configuration overrides")
    config_group.add_argument(
        "--extension",
        type=str,
        default=None,
        metavar="EXT",
        help="File extension of the generated files (default: swift).",
    )
    config_group.add_argument(
        "--client-type",
        type=str,
        default=None,
        metavar="NAME",
        help="Type extended by the generated methods (default: TelegramBot).",
    )

    # --- Behaviour flags ---
    behaviour_group = parser.add_argument_group("behaviour flags")
    behaviour_group.add_argument(
        "--no-strict",
        action="store_true",
        default=False,
        help="Emit the nested-object accessor for unsupported fields instead of failing.",
    )
    behaviour_group.add_argument(
        "--fail-on-warnings",
        action="store_true",
        default=False,
        help="Treat validation warnings as errors.",
    )

    # --- Verbosity ---
    verbosity_group = parser.add_argument_group("verbosity")
    verbosity_group.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v for INFO, -vv for DEBUG).",
    )
    verbosity_group.add_argument(
        "-q", "--quiet",
        action="store_true",
        default=False,
        help="Suppress all log output.",
    )

    return parser


# ---------------------------------------------------------------------------
# Config override builder
# ---------------------------------------------------------------------------


def _build_config_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """Build a config override dictionary from CLI arguments."""
    overrides: Dict[str, Any] = {}

    if args.extension is not None:
        overrides["file_extension"] = args.extension

    if args.client_type is not None:
        overrides["client_type"] = args.client_type

    if args.no_strict:
        overrides["strict"] = False

    return overrides


# ---------------------------------------------------------------------------
# Validate-only mode
# ---------------------------------------------------------------------------


def _run_validate_only(schema_path: Path, overrides: Dict[str, Any]) -> int:
    """Run validation only and return the exit code."""
    logger.info("Running validation-only mode for: %s", schema_path)

    try:
        raw_data: Dict[str, Any] = load_schema_file(schema_path)
    except (FileNotFoundError, ValueError) as exc:
        logger.error("Failed to load schema: %s", exc)
        return EXIT_INPUT_ERROR

    if overrides:
        raw_data["config"] = {**(raw_data.get("config") or {}), **overrides}

    try:
        schema, config = parse_raw_schema(raw_data, source_file=str(schema_path))
    except ValueError as exc:
        logger.error("Failed to parse schema: %s", exc)
        return EXIT_INPUT_ERROR

    with Timer("validation") as t:
        result = validate_full(schema, config)

    print(f"\n{'=' * 50}")
    print("  Schema Validation Report")
    print(f"{'=' * 50}")
    print(f"  File:     {schema_path.name}")
    print(f"  Types:    {schema.type_count}")
    print(f"  Methods:  {schema.method_count}")
    print(f"  Time:     {t.elapsed:.3f}s")
    print(f"  Valid:    {'Yes' if result.is_valid else 'No'}")

    if len(result):
        print()
        print(result.format_report())
    else:
        print("\n  ✅ All validations passed!")

    print(f"{'=' * 50}\n")

    return EXIT_SUCCESS if result.is_valid else EXIT_VALIDATION_ERROR


# ---------------------------------------------------------------------------
# Full generation mode
# ---------------------------------------------------------------------------


def _exit_code_for(report: GenerationReport) -> int:
    if report.success:
        return EXIT_SUCCESS
    if report.validation_errors:
        return EXIT_VALIDATION_ERROR
    if report.export_errors:
        return EXIT_EXPORT_ERROR
    # Load/parse failures never reach the generation step
    if any(m.step_name in ("Load Schema File", "Parse Schema") and not m.success
           for m in report.step_metrics):
        return EXIT_INPUT_ERROR
    return EXIT_GENERATION_ERROR


def _run_generation(
    schema_path: Path,
    output_dir: Optional[Path],
    args: argparse.Namespace,
    overrides: Dict[str, Any],
) -> int:
    """Run the full generation pipeline and return the exit code."""
    pipeline = GenerationPipeline(
        fail_on_warnings=args.fail_on_warnings,
        dry_run=args.dry_run,
    )

    if args.dry_run:
        logger.info("Dry-run mode: files will not be written to disk.")

    report: GenerationReport = pipeline.generate_from_file(
        schema_path,
        output_dir,
        config_overrides=overrides or None,
    )

    print(report.summary())
    return _exit_code_for(report)


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def cli_main(argv: Optional[Sequence[str]] = None) -> NoReturn:
    """
    Main CLI entry point.

    Can be called from ``__main__.py`` or directly for testing.

    Args:
        argv: Optional argument list (defaults to sys.argv[1:]).
    """
    parser: argparse.ArgumentParser = _build_parser()
    args: argparse.Namespace = parser.parse_args(argv)

    if args.quiet:
        verbosity: int = -1
        logging.disable(logging.CRITICAL)
    else:
        verbosity = args.verbose
        logging.disable(logging.NOTSET)

    _setup_logging(verbosity)

    schema_path: Path = Path(args.schema).resolve()

    if not schema_path.exists():
        logger.error("Schema file not found: %s", schema_path)
        sys.exit(EXIT_INPUT_ERROR)

    if not schema_path.is_file():
        logger.error("Schema path is not a file: %s", schema_path)
        sys.exit(EXIT_INPUT_ERROR)

    overrides: Dict[str, Any] = _build_config_overrides(args)

    if args.validate_only:
        sys.exit(_run_validate_only(schema_path, overrides))

    output_dir: Optional[Path] = Path(args.output).resolve() if args.output else None

    logger.info("Schema:  %s", schema_path)
    logger.info("Output:  %s", output_dir or "(from config)")
    logger.info("Strict:  %s", not args.no_strict)

    exit_code: int = _run_generation(schema_path, output_dir, args, overrides)

    if exit_code == EXIT_SUCCESS:
        logger.info("Generation completed successfully.")
    else:
        logger.error("Generation failed with exit code %d.", exit_code)

    sys.exit(exit_code)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "cli_main",
    "EXIT_SUCCESS",
    "EXIT_VALIDATION_ERROR",
    "EXIT_GENERATION_ERROR",
    "EXIT_EXPORT_ERROR",
    "EXIT_INPUT_ERROR",
]

logger.debug("rapier.cli loaded.")
