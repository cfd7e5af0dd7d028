# File: rapier/models.py
"""
Rapier - Core Data Models
==========================
Pydantic V2 models for the descriptors the generator consumes and for the
generation settings.  These models are the single source of truth for the
pipeline: Schema Loading → Validation → Code Generation → File Output.

Descriptors are immutable: a ``FieldInfo`` is built once per field or
parameter and only read afterwards.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("rapier.models")

# ---------------------------------------------------------------------------
# Shared model configuration
# ---------------------------------------------------------------------------

_DESCRIPTOR_CONFIG: ConfigDict = ConfigDict(
    strict=False,
    populate_by_name=True,
    frozen=True,
    extra="forbid",
)

_SHARED_CONFIG: ConfigDict = ConfigDict(
    strict=False,
    populate_by_name=True,
    validate_assignment=True,
    frozen=False,
    extra="forbid",
)

# "[[PhotoSize]]?", "[User]", "String?", "Int"
_SHORTHAND_RE: re.Pattern[str] = re.compile(
    r"^\s*(?P<outer>\[\s*)?(?P<inner>\[\s*)?(?P<type>[^\[\]?\s]+)\s*"
    r"(?P<inner_close>\])?\s*(?P<outer_close>\])?\s*(?P<optional>\?)?\s*$"
)
_PLAIN_TYPE_RE: re.Pattern[str] = re.compile(r"^\s*[^\[\]?\s]+\s*$")


# ---------------------------------------------------------------------------
# Descriptors
# ---------------------------------------------------------------------------


class FieldInfo(BaseModel):
    """
    Shape of a single struct field, method parameter or method result.

    Schema files may give either the full mapping or a shorthand string:
    ``"User?"`` (optional), ``"[User]"`` (array) and ``"[[PhotoSize]]"``
    (array of arrays, which also sets ``is_array``).
    """

    model_config = _DESCRIPTOR_CONFIG

    type: str = Field(default="", description="Semantic type name, e.g. 'String'.")
    is_array: bool = Field(default=False, description="Ordered sequence of `type`.")
    is_array_of_array: bool = Field(
        default=False, description="Sequence of sequences of `type`."
    )
    is_optional: bool = Field(default=False, description="Field may be absent.")

    @model_validator(mode="before")
    @classmethod
    def _parse_shorthand(cls, data: Any) -> Any:
        if isinstance(data, str):
            return parse_field_shorthand(data)
        # Unquoted YAML: ``flag: True`` loads as a bool, ``[User]`` as a list
        if data is True:
            return parse_field_shorthand("True")
        if isinstance(data, list):
            return _parse_yaml_sequence(data)
        return data

    def __repr__(self) -> str:
        return f"<FieldInfo {self.shorthand}>"

    @property
    def shorthand(self) -> str:
        """Inverse of the shorthand parser, used in log and error messages."""
        if self.is_array_of_array:
            text = f"[[{self.type}]]"
        elif self.is_array:
            text = f"[{self.type}]"
        else:
            text = self.type
        return text + ("?" if self.is_optional else "")


def parse_field_shorthand(text: str) -> Dict[str, Any]:
    """
    Parse a shorthand field string into ``FieldInfo`` keyword arguments.

    Raises:
        ValueError: on unbalanced brackets or an empty type name.
    """
    match = _SHORTHAND_RE.match(text)
    if match is None:
        raise ValueError(f"Invalid field shorthand: {text!r}")

    opened: int = (match.group("outer") is not None) + (match.group("inner") is not None)
    closed: int = (
        (match.group("inner_close") is not None)
        + (match.group("outer_close") is not None)
    )
    if opened != closed:
        raise ValueError(f"Unbalanced brackets in field shorthand: {text!r}")

    return {
        "type": match.group("type"),
        "is_array": opened >= 1,
        "is_array_of_array": opened == 2,
        "is_optional": match.group("optional") is not None,
    }


def _parse_yaml_sequence(data: List[Any]) -> Dict[str, Any]:
    """``["User"]`` is an array, ``[["PhotoSize"]]`` an array of arrays."""
    element: Any = data[0] if len(data) == 1 else None
    nested: bool = isinstance(element, list)
    if nested:
        element = element[0] if len(element) == 1 else None

    if not isinstance(element, str) or not _PLAIN_TYPE_RE.match(element):
        raise ValueError(
            f"Field sequence must hold exactly one plain type name, got {data!r}"
        )
    return {
        "type": element.strip(),
        "is_array": True,
        "is_array_of_array": nested,
        "is_optional": False,
    }


class TypeInfo(BaseModel):
    """A named struct: wire field name → field descriptor."""

    model_config = _DESCRIPTOR_CONFIG

    fields: Dict[str, FieldInfo] = Field(default_factory=dict)

    def sorted_fields(self) -> List[tuple[str, FieldInfo]]:
        return sorted(self.fields.items(), key=lambda item: item[0])


class MethodInfo(BaseModel):
    """An API method: parameters plus the shape of its result."""

    model_config = _DESCRIPTOR_CONFIG

    parameters: Dict[str, FieldInfo] = Field(default_factory=dict)
    result: FieldInfo = Field(..., description="Shape of the returned value.")

    def sorted_parameters(self) -> List[tuple[str, FieldInfo]]:
        return sorted(self.parameters.items(), key=lambda item: item[0])


class SchemaDefinition(BaseModel):
    """
    The root model: every type and method the generator will be fed.

    Callbacks are delivered in mapping order; the generator re-sorts fields
    and parameters itself, so declaration order never leaks into the output.
    """

    model_config = _SHARED_CONFIG

    types: Dict[str, TypeInfo] = Field(default_factory=dict)
    methods: Dict[str, MethodInfo] = Field(default_factory=dict)
    source_file: Optional[str] = Field(
        default=None, description="Original schema file path."
    )

    @property
    def type_count(self) -> int:
        return len(self.types)

    @property
    def method_count(self) -> int:
        return len(self.methods)

    def __repr__(self) -> str:
        return (
            f"<SchemaDefinition {self.type_count} types, "
            f"{self.method_count} methods>"
        )


# ---------------------------------------------------------------------------
# Accessor rename table
# ---------------------------------------------------------------------------


class RenameRule(BaseModel):
    """
    Renames the accessor generated for a struct field (never the wire key).

    ``type_name`` and ``field_type`` are optional filters; ``None`` matches
    anything.
    """

    model_config = _DESCRIPTOR_CONFIG

    field_name: str = Field(..., min_length=1)
    accessor: str = Field(..., min_length=1, description="snake_case accessor name.")
    type_name: Optional[str] = Field(default=None, description="Owning struct.")
    field_type: Optional[str] = Field(default=None, description="Declared field type.")

    def matches(self, type_name: str, field_name: str, field_type: str) -> bool:
        return (
            self.field_name == field_name
            and (self.type_name is None or self.type_name == type_name)
            and (self.field_type is None or self.field_type == field_type)
        )


DEFAULT_RENAME_RULES: List[RenameRule] = [
    RenameRule(type_name="ChatMember", field_name="status", accessor="status_string"),
    RenameRule(field_name="type", field_type="String", accessor="type_string"),
    RenameRule(field_name="parse_mode", field_type="String", accessor="parse_mode_string"),
]


# ---------------------------------------------------------------------------
# Code Generation Configuration
# ---------------------------------------------------------------------------


class GenerationConfig(BaseModel):
    """
    Settings that control the emitted client library.

    A single instance of this model (combined with a ``SchemaDefinition``)
    is all the generator needs.
    """

    model_config = _SHARED_CONFIG

    output_dir: str = Field(
        default="./generated", description="Directory receiving Types/Methods files."
    )
    file_extension: str = Field(
        default="swift", min_length=1, description="Extension of the output files."
    )
    client_type: str = Field(
        default="TelegramBot", min_length=1, description="Type extended by the methods."
    )
    generator_name: str = Field(
        default="Rapier", min_length=1, description="Name in the banner comment."
    )
    strict: bool = Field(
        default=True,
        description="Raise on field descriptors no template supports.",
    )
    variant_content_prefix: str = Field(
        default="InputMessageContent",
        min_length=1,
        description="Type-name prefix of variant-content fields.",
    )
    self_bridging_types: List[str] = Field(
        default_factory=lambda: ["InputFileOrString"],
        description="Types that manage their own JSON bridging.",
    )
    rename_rules: List[RenameRule] = Field(
        default_factory=lambda: list(DEFAULT_RENAME_RULES),
        description="Accessor rename table, first match wins.",
    )

    @field_validator("file_extension")
    @classmethod
    def _strip_dot(cls, v: str) -> str:
        return v.lstrip(".")

    @property
    def types_filename(self) -> str:
        return f"Types.{self.file_extension}"

    @property
    def methods_filename(self) -> str:
        return f"Methods.{self.file_extension}"

    def accessor_name_for(self, type_name: str, field_name: str, field_type: str) -> str:
        """snake_case accessor name for a struct field after renames."""
        for rule in self.rename_rules:
            if rule.matches(type_name, field_name, field_type):
                logger.debug(
                    "Renamed accessor %s.%s -> %s", type_name, field_name, rule.accessor
                )
                return rule.accessor
        return field_name


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "DEFAULT_RENAME_RULES",
    "FieldInfo",
    "GenerationConfig",
    "MethodInfo",
    "RenameRule",
    "SchemaDefinition",
    "TypeInfo",
    "parse_field_shorthand",
]

logger.debug("rapier.models loaded — %d public symbols.", len(__all__))
