# File: rapier/generator.py
"""
Rapier - Generation Pipeline (Orchestrator)
============================================

Connects every phase together:

    Schema File → Parse → Validation → SDK Generation → File Output

Workflow::

    1. Load the schema from a JSON/YAML file (or accept in-memory objects).
    2. Parse into ``SchemaDefinition`` + ``GenerationConfig`` (models.py).
    3. Run the validation pipeline (validators.py).
    4. Drive ``SwiftSDKGenerator`` through its callbacks (sdk_generator.py).
    5. Write ``Types.<ext>`` and ``Methods.<ext>`` (skipped on dry runs).
    6. Return a ``GenerationReport`` with metrics and status.

Error handling strategy:
    - Load and parse errors abort the run and are recorded on the report.
    - Validation errors abort the run unless ``strict_validation`` is off.
    - An ``UnsupportedFieldError`` aborts generation; nothing is written.
    - Write errors are recorded; a Types file written before a failing
      Methods write stays on disk.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml
from pydantic import ValidationError as PydanticValidationError

from rapier.models import GenerationConfig, SchemaDefinition
from rapier.sdk_generator import SwiftSDKGenerator, run_code_generator
from rapier.templates import UnsupportedFieldError
from rapier.utils import Timer, count_lines
from rapier.validators import ValidationResult, validate_full

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("rapier.generator")


# ---------------------------------------------------------------------------
# Generation report
# ---------------------------------------------------------------------------


@dataclass(slots=True)
class GenerationStepMetric:
    """Timing and outcome for a single pipeline step."""

    step_name: str = ""
    success: bool = True
    elapsed_seconds: float = 0.0
    detail: str = ""


@dataclass(slots=True)
class GenerationReport:
    """
    Report produced by ``GenerationPipeline.generate()``.

    Contains timing information, counts, the written files and any
    errors/warnings encountered.
    """

    success: bool = False
    output_directory: str = ""
    dry_run: bool = False

    total_types: int = 0
    total_methods: int = 0
    total_lines: int = 0
    total_bytes: int = 0
    total_elapsed_seconds: float = 0.0

    files_written: List[str] = field(default_factory=list)
    rendered: Dict[str, str] = field(default_factory=dict)
    step_metrics: List[GenerationStepMetric] = field(default_factory=list)
    validation_errors: List[str] = field(default_factory=list)
    validation_warnings: List[str] = field(default_factory=list)
    generation_errors: List[str] = field(default_factory=list)
    export_errors: List[str] = field(default_factory=list)

    def summary(self) -> str:
        """Return a human-readable summary string."""
        lines: List[str] = []
        status: str = "✅ SUCCESS" if self.success else "❌ FAILED"
        lines.append("=" * 60)
        lines.append("  Rapier — Generation Report")
        lines.append("=" * 60)
        lines.append(f"  Status:           {status}")
        lines.append(f"  Output:           {self.output_directory}")
        if self.dry_run:
            lines.append("  Mode:             dry run (nothing written)")
        lines.append(f"  Types:            {self.total_types}")
        lines.append(f"  Methods:          {self.total_methods}")
        lines.append(f"  Total lines:      {self.total_lines:,}")
        lines.append(f"  Total bytes:      {self.total_bytes:,}")
        lines.append(f"  Total time:       {self.total_elapsed_seconds:.3f}s")
        lines.append("─" * 60)

        if self.step_metrics:
            lines.append("  Pipeline Steps:")
            for step in self.step_metrics:
                icon: str = "✓" if step.success else "✗"
                lines.append(
                    f"    {icon} {step.step_name:<22s} "
                    f"{step.elapsed_seconds:>7.3f}s  {step.detail}"
                )

        for title, items, icon in (
            ("Validation Errors", self.validation_errors, "✗"),
            ("Validation Warnings", self.validation_warnings, "⚠"),
            ("Generation Errors", self.generation_errors, "✗"),
            ("Export Errors", self.export_errors, "✗"),
        ):
            if items:
                lines.append("─" * 60)
                lines.append(f"  {title} ({len(items)}):")
                for item in items:
                    lines.append(f"    {icon} {item}")

        lines.append("=" * 60)
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Schema loader helpers
# ---------------------------------------------------------------------------


def _load_json_file(path: Path) -> Dict[str, Any]:
    """Load and parse a JSON file. Raises ValueError on parse errors."""
    try:
        data: Any = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(
            f"Expected a JSON object at top level, got {type(data).__name__}."
        )
    return data


def _load_yaml_file(path: Path) -> Dict[str, Any]:
    """Load and parse a YAML file. Raises ValueError on parse errors."""
    try:
        data: Any = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(
            f"Expected a YAML mapping at top level, got {type(data).__name__}."
        )
    return data


def load_schema_file(path: Path) -> Dict[str, Any]:
    """
    Load a schema file (JSON or YAML), dispatching on the extension.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the file can't be parsed.
    """
    if not path.exists():
        raise FileNotFoundError(f"Schema file not found: {path}")

    if not path.is_file():
        raise ValueError(f"Schema path is not a file: {path}")

    suffix: str = path.suffix.lower()
    if suffix in (".yaml", ".yml"):
        return _load_yaml_file(path)
    if suffix == ".json":
        return _load_json_file(path)

    # YAML is a superset of JSON
    logger.info("Unknown extension '%s' — parsing as YAML.", suffix)
    return _load_yaml_file(path)


def parse_raw_schema(
    raw: Dict[str, Any],
    *,
    source_file: Optional[str] = None,
) -> Tuple[SchemaDefinition, GenerationConfig]:
    """
    Parse a raw dictionary (from JSON/YAML) into validated Pydantic models.

    Expected top-level keys: ``types``, ``methods`` and optional ``config``.

    Raises:
        ValueError: If neither types nor methods are present or validation fails.
    """
    if "types" not in raw and "methods" not in raw:
        raise ValueError(
            "Cannot find schema definition in input. "
            "Expected top-level key 'types' and/or 'methods'."
        )

    schema_data: Dict[str, Any] = {
        "types": raw.get("types") or {},
        "methods": raw.get("methods") or {},
        "source_file": source_file,
    }
    config_data: Dict[str, Any] = raw.get("config") or {}
    if not config_data:
        logger.info("No generation config found in input — using defaults.")

    try:
        schema: SchemaDefinition = SchemaDefinition.model_validate(schema_data)
    except PydanticValidationError as exc:
        raise ValueError(f"Schema validation failed: {exc}") from exc

    try:
        config: GenerationConfig = GenerationConfig.model_validate(config_data)
    except PydanticValidationError as exc:
        raise ValueError(f"Config validation failed: {exc}") from exc

    return schema, config


# ---------------------------------------------------------------------------
# GenerationPipeline: master orchestrator
# ---------------------------------------------------------------------------


class GenerationPipeline:
    """
    Master pipeline orchestrator.

    Usage::

        pipeline = GenerationPipeline()

        # From a file
        report = pipeline.generate_from_file(Path("telegram.yaml"), Path("./Sources"))

        # From in-memory objects
        report = pipeline.generate(schema, config, Path("./Sources"))

        print(report.summary())

    The pipeline is reusable — create once, call generate() many times.
    """

    def __init__(
        self,
        *,
        strict_validation: bool = True,
        fail_on_warnings: bool = False,
        dry_run: bool = False,
    ) -> None:
        """
        Args:
            strict_validation: If True, abort on any validation error.
            fail_on_warnings: If True, treat validation warnings as errors.
            dry_run: If True, render everything but write nothing.
        """
        self._strict_validation: bool = strict_validation
        self._fail_on_warnings: bool = fail_on_warnings
        self._dry_run: bool = dry_run

        logger.debug(
            "GenerationPipeline initialised: strict=%s, fail_on_warnings=%s, dry_run=%s.",
            strict_validation,
            fail_on_warnings,
            dry_run,
        )

    # -----------------------------------------------------------------
    # Public: generate from file
    # -----------------------------------------------------------------

    def generate_from_file(
        self,
        schema_path: Path,
        output_dir: Optional[Path] = None,
        *,
        config_overrides: Optional[Dict[str, Any]] = None,
    ) -> GenerationReport:
        """
        Full pipeline: load file → parse → validate → generate → write.

        ``output_dir`` wins over ``config.output_dir`` from the file.
        """
        report: GenerationReport = GenerationReport(dry_run=self._dry_run)
        pipeline_start: float = time.perf_counter()

        with Timer("load_schema") as t_load:
            try:
                raw_data: Dict[str, Any] = load_schema_file(schema_path)
            except (FileNotFoundError, ValueError) as exc:
                raw_data = {}
                report.generation_errors.append(str(exc))

        report.step_metrics.append(GenerationStepMetric(
            step_name="Load Schema File",
            success=not report.generation_errors,
            elapsed_seconds=t_load.elapsed,
            detail=report.generation_errors[-1] if report.generation_errors
            else f"from {schema_path.name}",
        ))
        if report.generation_errors:
            return self._finalise_report(report, pipeline_start)

        with Timer("parse_schema") as t_parse:
            try:
                if config_overrides:
                    raw_data.setdefault("config", {})
                    raw_data["config"] = {**(raw_data["config"] or {}), **config_overrides}
                schema, config = parse_raw_schema(raw_data, source_file=str(schema_path))
            except ValueError as exc:
                report.generation_errors.append(str(exc))

        report.step_metrics.append(GenerationStepMetric(
            step_name="Parse Schema",
            success=not report.generation_errors,
            elapsed_seconds=t_parse.elapsed,
            detail=report.generation_errors[-1] if report.generation_errors
            else f"{schema.type_count} types, {schema.method_count} methods",
        ))
        if report.generation_errors:
            return self._finalise_report(report, pipeline_start)

        target: Path = output_dir if output_dir is not None else Path(config.output_dir)
        return self._run_pipeline(schema, config, target, report, pipeline_start)

    # -----------------------------------------------------------------
    # Public: generate from in-memory objects
    # -----------------------------------------------------------------

    def generate(
        self,
        schema: SchemaDefinition,
        config: GenerationConfig,
        output_dir: Optional[Path] = None,
    ) -> GenerationReport:
        """Full pipeline from pre-parsed schema and config objects."""
        report: GenerationReport = GenerationReport(dry_run=self._dry_run)
        target: Path = output_dir if output_dir is not None else Path(config.output_dir)
        return self._run_pipeline(schema, config, target, report, time.perf_counter())

    # -----------------------------------------------------------------
    # Internal: master pipeline
    # -----------------------------------------------------------------

    def _run_pipeline(
        self,
        schema: SchemaDefinition,
        config: GenerationConfig,
        output_dir: Path,
        report: GenerationReport,
        pipeline_start: float,
    ) -> GenerationReport:
        report.output_directory = str(output_dir.resolve())

        if not self._step_validate(schema, config, report) and self._strict_validation:
            return self._finalise_report(report, pipeline_start)

        generator: Optional[SwiftSDKGenerator] = self._step_generate(
            schema, config, output_dir, report
        )
        if generator is None:
            return self._finalise_report(report, pipeline_start)

        if self._dry_run:
            logger.info("Dry run: %d files rendered, none written.", len(report.rendered))
        else:
            self._step_write(generator, report)

        return self._finalise_report(report, pipeline_start)

    def _step_validate(
        self,
        schema: SchemaDefinition,
        config: GenerationConfig,
        report: GenerationReport,
    ) -> bool:
        """Returns True if validation passed (or only warnings and allowed)."""
        with Timer("validation") as t:
            result: ValidationResult = validate_full(schema, config)

        report.validation_errors.extend(str(e) for e in result.errors)
        report.validation_warnings.extend(str(w) for w in result.warnings)

        if result.error_count:
            detail: str = f"{result.error_count} error(s)"
        elif result.warning_count:
            detail = f"{result.warning_count} warning(s)"
        else:
            detail = "all checks passed"

        report.step_metrics.append(GenerationStepMetric(
            step_name="Validate Schema",
            success=result.is_valid,
            elapsed_seconds=t.elapsed,
            detail=detail,
        ))

        if not result.is_valid:
            logger.error("Validation failed with %d error(s).", result.error_count)
            for err in result.errors:
                logger.error("  ✗ %s", err)
            return False

        for warn in result.warnings:
            logger.warning("  ⚠ %s", warn)

        if result.warning_count and self._fail_on_warnings:
            report.validation_errors.append(
                f"{result.warning_count} warning(s) treated as errors."
            )
            return False

        return True

    def _step_generate(
        self,
        schema: SchemaDefinition,
        config: GenerationConfig,
        output_dir: Path,
        report: GenerationReport,
    ) -> Optional[SwiftSDKGenerator]:
        """Render both buffers; returns None if a descriptor is unsupported."""
        generator = SwiftSDKGenerator(output_dir, config)

        with Timer("code_generation") as t:
            try:
                run_code_generator(generator, schema, write=False)
            except UnsupportedFieldError as exc:
                report.generation_errors.append(str(exc))
                logger.error("Generation aborted: %s", exc)

        report.total_types = generator.types_generated
        report.total_methods = generator.methods_generated
        report.rendered = generator.rendered_files()
        report.total_lines = sum(count_lines(c) for c in report.rendered.values())

        report.step_metrics.append(GenerationStepMetric(
            step_name="Code Generation",
            success=not report.generation_errors,
            elapsed_seconds=t.elapsed,
            detail=f"{report.total_types} types, {report.total_methods} methods, "
            f"~{report.total_lines:,} lines",
        ))

        if report.generation_errors:
            return None
        return generator

    def _step_write(
        self,
        generator: SwiftSDKGenerator,
        report: GenerationReport,
    ) -> None:
        with Timer("write") as t:
            try:
                generator.finish()
            except OSError as exc:
                report.export_errors.append(f"{type(exc).__name__}: {exc}")
                logger.error("Writing output failed: %s", exc)

        for path, byte_count in generator.files_written.items():
            report.files_written.append(str(path))
            report.total_bytes += byte_count

        report.step_metrics.append(GenerationStepMetric(
            step_name="Write Files",
            success=not report.export_errors,
            elapsed_seconds=t.elapsed,
            detail=f"{len(report.files_written)} files, {report.total_bytes:,} bytes",
        ))

    def _finalise_report(
        self,
        report: GenerationReport,
        pipeline_start: float,
    ) -> GenerationReport:
        """Set final status and timing on the report."""
        report.total_elapsed_seconds = time.perf_counter() - pipeline_start
        report.success = not (
            report.validation_errors
            or report.generation_errors
            or report.export_errors
        )
        return report


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "GenerationPipeline",
    "GenerationReport",
    "GenerationStepMetric",
    "load_schema_file",
    "parse_raw_schema",
]

logger.debug("rapier.generator loaded.")
