# File: rapier/__init__.py
"""
Rapier — Swift Client-Library Generator
========================================

Consumes a description of a bot API (types with fields, methods with
parameters and a result) and emits two Swift source files: ``Types.swift``
with JSON-backed structs and ``Methods.swift`` with a client extension that
exposes a synchronous and an asynchronous wrapper per method.

Architecture overview::

    ┌──────────────┐     ┌───────────────────┐     ┌──────────────────┐
    │  CLI / Entry │────▶│ GenerationPipeline│────▶│ SwiftSDKGenerator│
    │   (cli.py)   │     │  (generator.py)   │     │(sdk_generator.py)│
    └──────────────┘     └─────────┬─────────┘     └────────┬─────────┘
                                   │                        │
                        ┌──────────┴──────┐                 ▼
                        ▼                 ▼          ┌──────────────┐
                  ┌──────────┐      ┌──────────┐     │  templates   │
                  │validators│      │  models  │     │    (.py)     │
                  └──────────┘      └──────────┘     └──────────────┘

Usage::

    # As a library
    from rapier import SwiftSDKGenerator, SchemaDefinition, run_code_generator
    run_code_generator(SwiftSDKGenerator("./Sources"), schema)

    # From the command line
    python -m rapier --schema telegram.yaml --output ./Sources -v
"""

from __future__ import annotations

__version__: str = "1.0.0"
__license__: str = "MIT"

from rapier.models import (
    DEFAULT_RENAME_RULES,
    FieldInfo,
    GenerationConfig,
    MethodInfo,
    RenameRule,
    SchemaDefinition,
    TypeInfo,
)
from rapier.validators import validate_full, ValidationResult
from rapier.utils import Timer, camelized, write_file
from rapier.templates import (
    FieldTemplateKind,
    SwiftTemplates,
    UnsupportedFieldError,
    classify_field,
    swift_type,
)
from rapier.sdk_generator import (
    CodeGenerator,
    GenerationContext,
    SwiftSDKGenerator,
    run_code_generator,
)
from rapier.generator import GenerationPipeline, GenerationReport

# ---------------------------------------------------------------------------
# Public API surface
# ---------------------------------------------------------------------------

__all__: list[str] = [
    # Version info
    "__version__",
    "__license__",
    # Orchestration
    "GenerationPipeline",
    "GenerationReport",
    # Generator
    "CodeGenerator",
    "GenerationContext",
    "SwiftSDKGenerator",
    "run_code_generator",
    # Models
    "DEFAULT_RENAME_RULES",
    "FieldInfo",
    "GenerationConfig",
    "MethodInfo",
    "RenameRule",
    "SchemaDefinition",
    "TypeInfo",
    # Templates
    "FieldTemplateKind",
    "SwiftTemplates",
    "UnsupportedFieldError",
    "classify_field",
    "swift_type",
    # Validation
    "validate_full",
    "ValidationResult",
    # Utilities
    "Timer",
    "camelized",
    "write_file",
]
