# File: rapier/validators.py
"""
Rapier - Schema Validators
===========================
A pure-function validation pipeline over the models in ``rapier.models``.

Pydantic already guarantees structural correctness of the descriptors.  This
module adds the checks the generator itself never performs: identifier
validity after camelization, accessor collisions, unsupported field shapes
and references to types the schema never defines.

Usage::

    from rapier.validators import validate_full
    result = validate_full(schema, config)
    if not result.is_valid:
        print(result.format_report())
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, Dict, FrozenSet, List, Optional, Set, Tuple

from rapier.models import FieldInfo, GenerationConfig, SchemaDefinition
from rapier.templates import (
    DATE_TYPE,
    SCALAR_JSON_ACCESSORS,
    TRUE_SENTINEL,
    UnsupportedFieldError,
    classify_field,
)
from rapier.utils import camelized, is_identifier, is_swift_keyword

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("rapier.validators")

# Types the generated code gets from its runtime rather than from the schema.
_BUILTIN_TYPES: FrozenSet[str] = frozenset(
    set(SCALAR_JSON_ACCESSORS) | {DATE_TYPE, TRUE_SENTINEL}
)

# Members every generated struct declares besides its field accessors.
_GENERATED_MEMBERS: Tuple[str, ...] = ("json", "internalJson")


# ---------------------------------------------------------------------------
# Validation result container
# ---------------------------------------------------------------------------


class ValidationError:
    """Lightweight error descriptor (no Pydantic overhead)."""

    __slots__ = ("level", "code", "message", "context")

    def __init__(
        self,
        level: str,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.level: str = level  # "error" | "warning"
        self.code: str = code
        self.message: str = message
        self.context: Dict[str, Any] = context or {}

    @property
    def is_error(self) -> bool:
        return self.level == "error"

    @property
    def is_warning(self) -> bool:
        return self.level == "warning"

    def __repr__(self) -> str:
        return f"[{self.level.upper()}] {self.code}: {self.message}"

    def __str__(self) -> str:
        return self.__repr__()


class ValidationResult:
    """Accumulates ``ValidationError`` instances produced by the pipeline."""

    __slots__ = ("_items",)

    def __init__(self) -> None:
        self._items: List[ValidationError] = []

    def add_error(
        self,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._items.append(ValidationError("error", code, message, context))

    def add_warning(
        self,
        code: str,
        message: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._items.append(ValidationError("warning", code, message, context))

    def merge(self, other: "ValidationResult") -> None:
        self._items.extend(other._items)

    @property
    def errors(self) -> List[ValidationError]:
        return [e for e in self._items if e.is_error]

    @property
    def warnings(self) -> List[ValidationError]:
        return [e for e in self._items if e.is_warning]

    @property
    def codes(self) -> List[str]:
        return [e.code for e in self._items]

    @property
    def error_count(self) -> int:
        return sum(1 for e in self._items if e.is_error)

    @property
    def warning_count(self) -> int:
        return sum(1 for e in self._items if e.is_warning)

    @property
    def is_valid(self) -> bool:
        return self.error_count == 0

    def summary(self) -> str:
        return (
            f"Validation: {self.error_count} error(s), "
            f"{self.warning_count} warning(s)."
        )

    def __repr__(self) -> str:
        return f"<ValidationResult {self.summary()}>"

    def __bool__(self) -> bool:
        """Truthy when there are NO errors (i.e. valid)."""
        return self.is_valid

    def __len__(self) -> int:
        return len(self._items)

    def format_report(self) -> str:
        """Human-readable multi-line report."""
        lines: List[str] = [self.summary(), ""]
        for item in self._items:
            prefix: str = "✗" if item.is_error else "⚠"
            lines.append(f"  {prefix} [{item.code}] {item.message}")
            for k, v in item.context.items():
                lines.append(f"       {k}: {v}")
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Individual validation functions
# ---------------------------------------------------------------------------


def validate_type_names(schema: SchemaDefinition) -> ValidationResult:
    """Every struct name must be a Swift identifier and not a keyword."""
    result = ValidationResult()
    for name in schema.types:
        if not is_identifier(name):
            result.add_error(
                "TYPE_NAME_INVALID",
                f"Type name '{name}' is not a valid identifier.",
                {"type": name},
            )
        elif is_swift_keyword(name):
            result.add_error(
                "TYPE_NAME_RESERVED",
                f"Type name '{name}' is a Swift keyword.",
                {"type": name},
            )
        elif name in _BUILTIN_TYPES:
            result.add_error(
                "TYPE_NAME_BUILTIN",
                f"Type name '{name}' shadows a built-in field type.",
                {"type": name},
            )
    return result


def validate_field_names(
    schema: SchemaDefinition, config: GenerationConfig
) -> ValidationResult:
    """
    Check the accessor each field will get after renames and camelization.

    Two wire names that camelize to the same accessor (``chat_id`` and
    ``chat__id``) would produce a struct that does not compile.  The same
    holds for an accessor named like a generated member (``json``,
    ``internalJson``).
    """
    result = ValidationResult()
    for type_name, type_info in schema.types.items():
        seen: Dict[str, List[str]] = defaultdict(list)
        for member in _GENERATED_MEMBERS:
            seen[member].append("<generated>")
        for field_name, field_info in type_info.sorted_fields():
            if field_info.type == TRUE_SENTINEL:
                continue
            accessor = camelized(
                config.accessor_name_for(type_name, field_name, field_info.type)
            )
            seen[accessor].append(field_name)
            context = {"type": type_name, "field": field_name, "accessor": accessor}
            if not is_identifier(accessor):
                result.add_error(
                    "FIELD_NAME_INVALID",
                    f"Field '{type_name}.{field_name}' yields invalid accessor "
                    f"'{accessor}'.",
                    context,
                )
            elif is_swift_keyword(accessor):
                result.add_warning(
                    "FIELD_NAME_RESERVED",
                    f"Accessor '{accessor}' of '{type_name}.{field_name}' is a Swift "
                    "keyword; add a rename rule.",
                    context,
                )
        for accessor, wire_names in seen.items():
            if len(wire_names) > 1:
                result.add_error(
                    "FIELD_ACCESSOR_COLLISION",
                    f"Fields {wire_names} of '{type_name}' all map to accessor "
                    f"'{accessor}'.",
                    {"type": type_name, "accessor": accessor},
                )
    return result


def validate_field_categories(
    schema: SchemaDefinition, config: GenerationConfig
) -> ValidationResult:
    """Every field must have an accessor template (error when strict)."""
    result = ValidationResult()
    probe: GenerationConfig = config.model_copy(update={"strict": True})
    for type_name, type_info in schema.types.items():
        for field_name, field_info in type_info.sorted_fields():
            if field_info.type == TRUE_SENTINEL:
                continue
            try:
                classify_field(field_info, probe, owner=type_name, field_name=field_name)
            except UnsupportedFieldError as exc:
                context = {"type": type_name, "field": field_name, "shape": field_info.shorthand}
                if config.strict:
                    result.add_error("FIELD_UNSUPPORTED", str(exc), context)
                else:
                    result.add_warning("FIELD_UNSUPPORTED", str(exc), context)
    return result


def _referenced_type_unknown(info: FieldInfo, known: Set[str], config: GenerationConfig) -> bool:
    if info.type in _BUILTIN_TYPES or info.type in known:
        return False
    if info.type in config.self_bridging_types:
        return False
    return True


def validate_methods(
    schema: SchemaDefinition, config: GenerationConfig
) -> ValidationResult:
    """
    Method names must be identifiers, parameters must camelize uniquely,
    and referenced types should be defined somewhere.
    """
    result = ValidationResult()
    known: Set[str] = set(schema.types)

    for method_name, method_info in schema.methods.items():
        if not is_identifier(method_name):
            result.add_error(
                "METHOD_NAME_INVALID",
                f"Method name '{method_name}' is not a valid identifier.",
                {"method": method_name},
            )

        locals_seen: Dict[str, str] = {}
        for param_name, param_info in method_info.sorted_parameters():
            local = camelized(param_name)
            if not is_identifier(local):
                result.add_error(
                    "PARAM_NAME_INVALID",
                    f"Parameter '{method_name}.{param_name}' yields invalid name '{local}'.",
                    {"method": method_name, "parameter": param_name},
                )
            elif is_swift_keyword(local):
                result.add_warning(
                    "PARAM_NAME_RESERVED",
                    f"Parameter '{method_name}.{param_name}' maps to Swift keyword "
                    f"'{local}'.",
                    {"method": method_name, "parameter": param_name},
                )
            if local in locals_seen:
                result.add_error(
                    "PARAM_NAME_COLLISION",
                    f"Parameters '{locals_seen[local]}' and '{param_name}' of "
                    f"'{method_name}' both map to '{local}'.",
                    {"method": method_name, "local": local},
                )
            locals_seen[local] = param_name
            if _referenced_type_unknown(param_info, known, config):
                result.add_warning(
                    "PARAM_TYPE_UNKNOWN",
                    f"Parameter '{method_name}.{param_name}' uses type "
                    f"'{param_info.type}' which the schema does not define.",
                    {"method": method_name, "parameter": param_name},
                )

        if _referenced_type_unknown(method_info.result, known, config):
            result.add_warning(
                "RESULT_TYPE_UNKNOWN",
                f"Method '{method_name}' returns '{method_info.result.type}' which "
                "the schema does not define.",
                {"method": method_name},
            )
    return result


# ---------------------------------------------------------------------------
# Full pipeline
# ---------------------------------------------------------------------------


def validate_full(
    schema: SchemaDefinition, config: GenerationConfig
) -> ValidationResult:
    """Run every validator and merge the results."""
    result = ValidationResult()
    result.merge(validate_type_names(schema))
    result.merge(validate_field_names(schema, config))
    result.merge(validate_field_categories(schema, config))
    result.merge(validate_methods(schema, config))
    logger.info(
        "Validated %d types and %d methods: %s",
        schema.type_count,
        schema.method_count,
        result.summary(),
    )
    return result


__all__: List[str] = [
    "ValidationError",
    "ValidationResult",
    "validate_field_categories",
    "validate_field_names",
    "validate_full",
    "validate_methods",
    "validate_type_names",
]
