# File: rapier/templates.py
"""
Rapier - Code Template Engine
==============================
Pure-Python rendering of every fragment of the generated Swift client:

    1. File headers and the ``public extension <Client>`` wrapper
    2. JSON-backed structs, one accessor per field
    3. Request methods with ``Sync`` / ``Async`` variants

Every struct field is first classified into exactly one
``FieldTemplateKind`` and then rendered by the function registered for that
kind in ``_FIELD_RENDERERS``.  The registry is checked against the enum at
import time, so adding a kind without a renderer fails immediately.

All string assembly uses ``List[str]`` + ``"\\n".join()``.  Template methods
are stateless apart from the read-only config.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Dict, FrozenSet, List, Tuple

from rapier.models import FieldInfo, GenerationConfig, MethodInfo, TypeInfo
from rapier.utils import camelized, capitalize_first, indent, is_identifier

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("rapier.templates")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_INDENT: str = "    "

# Schema type name → SwiftyJSON accessor stem (``.string`` / ``.stringValue``)
SCALAR_JSON_ACCESSORS: Dict[str, str] = {
    "String": "string",
    "Int": "int",
    "Int64": "int64",
    "Float": "float",
    "Bool": "bool",
}

DATE_TYPE: str = "Date"

# A field of this type is always `true`; it is folded into the defaults.
TRUE_SENTINEL: str = "True"

_NON_NAMED_TYPES: FrozenSet[str] = frozenset(
    set(SCALAR_JSON_ACCESSORS) | {DATE_TYPE, TRUE_SENTINEL}
)


class UnsupportedFieldError(ValueError):
    """Raised in strict mode when no template supports a field descriptor."""

    def __init__(self, owner: str, field_name: str, info: FieldInfo, reason: str) -> None:
        self.owner: str = owner
        self.field_name: str = field_name
        self.info: FieldInfo = info
        self.reason: str = reason
        super().__init__(
            f"Unsupported field '{owner}.{field_name}' ({info.shorthand}): {reason}"
        )


class FieldTemplateKind(str, Enum):
    """One member per accessor template."""

    SCALAR = "scalar"
    DATE_OPTIONAL = "date_optional"
    DATE_REQUIRED = "date_required"
    ARRAY_OF_ARRAY_OPTIONAL = "array_of_array_optional"
    ARRAY_OF_ARRAY_REQUIRED = "array_of_array_required"
    ARRAY_OPTIONAL = "array_optional"
    ARRAY_REQUIRED = "array_required"
    VARIANT_CONTENT = "variant_content"
    SELF_BRIDGING = "self_bridging"
    NESTED_OBJECT = "nested_object"


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


def is_named_type(type_name: str) -> bool:
    """True for struct-like type names (not primitives, Date or True)."""
    return is_identifier(type_name) and type_name not in _NON_NAMED_TYPES


def classify_field(
    info: FieldInfo,
    config: GenerationConfig,
    *,
    owner: str = "?",
    field_name: str = "?",
) -> FieldTemplateKind:
    """
    Select the accessor template for a field.

    Precedence: scalar, Date, array of arrays, array, variant content,
    self-bridging, nested object.  Descriptors that only the nested-object
    fallback would accept without naming a struct raise
    ``UnsupportedFieldError`` when ``config.strict`` is set.
    """
    is_sequence: bool = info.is_array or info.is_array_of_array

    if not is_sequence and info.type in SCALAR_JSON_ACCESSORS:
        return FieldTemplateKind.SCALAR

    if not is_sequence and info.type == DATE_TYPE:
        if info.is_optional:
            return FieldTemplateKind.DATE_OPTIONAL
        return FieldTemplateKind.DATE_REQUIRED

    if is_sequence and is_named_type(info.type):
        if info.is_array_of_array:
            if info.is_optional:
                return FieldTemplateKind.ARRAY_OF_ARRAY_OPTIONAL
            return FieldTemplateKind.ARRAY_OF_ARRAY_REQUIRED
        if info.is_optional:
            return FieldTemplateKind.ARRAY_OPTIONAL
        return FieldTemplateKind.ARRAY_REQUIRED

    if not is_sequence and info.type.startswith(config.variant_content_prefix):
        return FieldTemplateKind.VARIANT_CONTENT

    if not is_sequence and info.type in config.self_bridging_types:
        return FieldTemplateKind.SELF_BRIDGING

    if not is_sequence and is_named_type(info.type):
        return FieldTemplateKind.NESTED_OBJECT

    if is_sequence:
        reason = f"sequences of '{info.type}' have no accessor template"
    else:
        reason = f"'{info.type}' is not a struct type"

    if config.strict:
        raise UnsupportedFieldError(owner, field_name, info, reason)

    logger.warning(
        "Field '%s.%s' (%s): %s; emitting nested-object accessor.",
        owner,
        field_name,
        info.shorthand,
        reason,
    )
    return FieldTemplateKind.NESTED_OBJECT


# ---------------------------------------------------------------------------
# Swift type rendering
# ---------------------------------------------------------------------------


def swift_type(info: FieldInfo) -> str:
    """
    Swift spelling of a descriptor: ``[[T]]``, ``[T]`` or ``T``, plus ``?``.

    The schema sentinel ``True`` becomes ``Bool``.
    """
    base: str = "Bool" if info.type == TRUE_SENTINEL else info.type
    if info.is_array_of_array:
        base = f"[[{base}]]"
    elif info.is_array:
        base = f"[{base}]"
    if info.is_optional:
        base += "?"
    return base


# ---------------------------------------------------------------------------
# Field accessor renderers
# ---------------------------------------------------------------------------
#
# Each renderer receives the camelized accessor name, the wire key and the
# descriptor, and returns the accessor lines at struct-member indentation.


def _render_scalar(accessor: str, key: str, info: FieldInfo) -> List[str]:
    stem: str = SCALAR_JSON_ACCESSORS[info.type]
    suffix: str = "" if info.is_optional else "Value"
    optional_mark: str = "?" if info.is_optional else ""
    return [
        f"public var {accessor}: {info.type}{optional_mark} {{",
        f'    get {{ return internalJson["{key}"].{stem}{suffix} }}',
        f'    set {{ internalJson["{key}"].{stem}{suffix} = newValue }}',
        "}",
    ]


def _render_date_optional(accessor: str, key: str, info: FieldInfo) -> List[str]:
    return [
        f"public var {accessor}: Date? {{",
        "    get {",
        f'        guard let date = internalJson["{key}"].double else {{ return nil }}',
        "        return Date(timeIntervalSince1970: date)",
        "    }",
        "    set {",
        f'        internalJson["{key}"].double = newValue?.timeIntervalSince1970',
        "    }",
        "}",
    ]


def _render_date_required(accessor: str, key: str, info: FieldInfo) -> List[str]:
    return [
        f"public var {accessor}: Date {{",
        f'    get {{ return Date(timeIntervalSince1970: internalJson["{key}"].doubleValue) }}',
        f'    set {{ internalJson["{key}"].double = newValue.timeIntervalSince1970 }}',
        "}",
    ]


def _two_d_setter_body(key: str) -> List[str]:
    return [
        "        var rowsJson = [JSON]()",
        "        rowsJson.reserveCapacity(newValue.count)",
        "        for row in newValue {",
        "            var colsJson = [JSON]()",
        "            colsJson.reserveCapacity(row.count)",
        "            for col in row {",
        "                colsJson.append(col.internalJson)",
        "            }",
        "            rowsJson.append(JSON(colsJson))",
        "        }",
        f'        internalJson["{key}"] = JSON(rowsJson)',
    ]


def _render_array_of_array_optional(accessor: str, key: str, info: FieldInfo) -> List[str]:
    lines: List[str] = [
        f"public var {accessor}: [[{info.type}]] {{",
        f'    get {{ return internalJson["{key}"].twoDArrayValue() }}',
        "    set {",
        "        if newValue.isEmpty {",
        f'            internalJson["{key}"] = JSON.null',
        "            return",
        "        }",
    ]
    lines.extend(_two_d_setter_body(key))
    lines.extend(["    }", "}"])
    return lines


def _render_array_of_array_required(accessor: str, key: str, info: FieldInfo) -> List[str]:
    lines: List[str] = [
        f"public var {accessor}: [[{info.type}]] {{",
        f'    get {{ return internalJson["{key}"].twoDArrayValue() }}',
        "    set {",
    ]
    lines.extend(_two_d_setter_body(key))
    lines.extend(["    }", "}"])
    return lines


def _render_array_optional(accessor: str, key: str, info: FieldInfo) -> List[str]:
    return [
        f"public var {accessor}: [{info.type}] {{",
        f'    get {{ return internalJson["{key}"].customArrayValue() }}',
        f'    set {{ internalJson["{key}"] = newValue.isEmpty ? JSON.null : JSON.initFrom(newValue) }}',
        "}",
    ]


def _render_array_required(accessor: str, key: str, info: FieldInfo) -> List[str]:
    return [
        f"public var {accessor}: [{info.type}] {{",
        f'    get {{ return internalJson["{key}"].customArrayValue() }}',
        f'    set {{ internalJson["{key}"] = JSON.initFrom(newValue) }}',
        "}",
    ]


def _render_variant_content(accessor: str, key: str, info: FieldInfo) -> List[str]:
    # The variant cannot be decoded without knowing which case was sent.
    if info.is_optional:
        declared = f"{info.type}?"
        stored = "JSON(newValue?.json ?? JSON.null)"
    else:
        declared = info.type
        stored = "JSON(newValue.json)"
    return [
        f"public var {accessor}: {declared} {{",
        "    get {",
        '        fatalError("Not implemented")',
        "    }",
        "    set {",
        f'        internalJson["{key}"] = {stored}',
        "    }",
        "}",
    ]


def _render_self_bridging(accessor: str, key: str, info: FieldInfo) -> List[str]:
    if info.is_optional:
        return [f"public var {accessor}: {info.type}? = nil"]
    return [f"public var {accessor}: {info.type}"]


def _render_nested_object(accessor: str, key: str, info: FieldInfo) -> List[str]:
    if info.is_optional:
        return [
            f"public var {accessor}: {info.type}? {{",
            "    get {",
            f'        let value = internalJson["{key}"]',
            f"        return value.isNullOrUnknown ? nil : {info.type}(internalJson: value)",
            "    }",
            "    set {",
            f'        internalJson["{key}"] = newValue?.internalJson ?? JSON.null',
            "    }",
            "}",
        ]
    return [
        f"public var {accessor}: {info.type} {{",
        f'    get {{ return {info.type}(internalJson: internalJson["{key}"]) }}',
        f'    set {{ internalJson["{key}"] = JSON(newValue.json) }}',
        "}",
    ]


_FieldRenderer = Callable[[str, str, FieldInfo], List[str]]

_FIELD_RENDERERS: Dict[FieldTemplateKind, _FieldRenderer] = {
    FieldTemplateKind.SCALAR: _render_scalar,
    FieldTemplateKind.DATE_OPTIONAL: _render_date_optional,
    FieldTemplateKind.DATE_REQUIRED: _render_date_required,
    FieldTemplateKind.ARRAY_OF_ARRAY_OPTIONAL: _render_array_of_array_optional,
    FieldTemplateKind.ARRAY_OF_ARRAY_REQUIRED: _render_array_of_array_required,
    FieldTemplateKind.ARRAY_OPTIONAL: _render_array_optional,
    FieldTemplateKind.ARRAY_REQUIRED: _render_array_required,
    FieldTemplateKind.VARIANT_CONTENT: _render_variant_content,
    FieldTemplateKind.SELF_BRIDGING: _render_self_bridging,
    FieldTemplateKind.NESTED_OBJECT: _render_nested_object,
}

_missing_renderers: FrozenSet[FieldTemplateKind] = frozenset(FieldTemplateKind) - frozenset(
    _FIELD_RENDERERS
)
if _missing_renderers:
    raise RuntimeError(
        "No renderer registered for: "
        + ", ".join(sorted(kind.value for kind in _missing_renderers))
    )


def render_field(
    kind: FieldTemplateKind, accessor: str, key: str, info: FieldInfo
) -> str:
    """Render one accessor, indented as a struct member."""
    body: List[str] = _FIELD_RENDERERS[kind](accessor, key, info)
    return indent("\n".join(body))


# ---------------------------------------------------------------------------
# SwiftTemplates class
# ---------------------------------------------------------------------------


class SwiftTemplates:
    """
    Renders the Types and Methods files piece by piece.

    Each ``render_*`` method returns a string that the generator appends to
    one of its buffers; concatenating them in callback order yields the
    complete file.
    """

    def __init__(self, config: GenerationConfig) -> None:
        self._config: GenerationConfig = config
        logger.debug(
            "SwiftTemplates initialised (client=%s, strict=%s).",
            config.client_type,
            config.strict,
        )

    @property
    def config(self) -> GenerationConfig:
        return self._config

    def _banner(self) -> str:
        return f"// This file is automatically generated by {self._config.generator_name}"

    # ===================================================================
    # Types file
    # ===================================================================

    def render_types_header(self) -> str:
        return "\n".join([self._banner(), "", "import Foundation", "", "", ""])

    def render_type(self, name: str, info: TypeInfo) -> str:
        """
        Render one JSON-backed struct.

        Fields are emitted in ascending order of their wire name.  Fields of
        type ``True`` get no accessor; they seed the default JSON instead.
        """
        lines: List[str] = [
            f"public struct {name}: JsonConvertible, InternalJsonConvertible {{",
            f"{_INDENT}/// Original JSON for fields not yet added to Swift structures.",
            f"{_INDENT}public var json: Any {{",
            f"{_INDENT}    get {{ return internalJson.object }}",
            f"{_INDENT}    set {{ internalJson = JSON(newValue) }}",
            f"{_INDENT}}}",
            f"{_INDENT}internal var internalJson: JSON",
            "",
        ]

        true_defaults: List[str] = []
        for field_name, field_info in info.sorted_fields():
            if field_info.type == TRUE_SENTINEL:
                true_defaults.append(f'"{field_name}": true')
                continue
            kind: FieldTemplateKind = classify_field(
                field_info, self._config, owner=name, field_name=field_name
            )
            accessor: str = camelized(
                self._config.accessor_name_for(name, field_name, field_info.type)
            )
            lines.append(render_field(kind, accessor, field_name, field_info))
            lines.append("")

        defaults: str = "[" + ", ".join(true_defaults) + "]" if true_defaults else "[:]"

        lines.extend([
            f"{_INDENT}internal init(internalJson: JSON = {defaults}) {{",
            f"{_INDENT}    self.internalJson = internalJson",
            f"{_INDENT}}}",
            f"{_INDENT}public init() {{",
            f"{_INDENT}    self.internalJson = {defaults}",
            f"{_INDENT}}}",
            f"{_INDENT}public init(json: Any) {{",
            f"{_INDENT}    self.internalJson = JSON(json)",
            f"{_INDENT}}}",
            f"{_INDENT}public init(data: Data) {{",
            f"{_INDENT}    self.internalJson = JSON(data: data)",
            f"{_INDENT}}}",
            "}",
            "",
            "",
            "",
        ])

        content: str = "\n".join(lines)
        logger.debug(
            "Rendered type '%s': %d fields, %d literal-true defaults.",
            name,
            len(info.fields),
            len(true_defaults),
        )
        return content

    # ===================================================================
    # Methods file
    # ===================================================================

    def render_methods_header(self) -> str:
        return "\n".join([
            self._banner(),
            "",
            "",
            "import Foundation",
            "import Dispatch",
            "",
            f"public extension {self._config.client_type} {{",
            "",
            "",
        ])

    def render_methods_footer(self) -> str:
        return "\n}\n"

    def render_method(self, name: str, info: MethodInfo) -> str:
        """
        Render the completion alias plus the ``Sync`` and ``Async`` variants.

        The bridging literal pairs each wire name with the camelized local
        argument, in the same alphabetical order as the parameter list.
        """
        parameters: List[Tuple[str, FieldInfo]] = info.sorted_parameters()

        signature: List[str] = []
        bridging: List[str] = []
        for param_name, param_info in parameters:
            local: str = camelized(param_name)
            declaration: str = f"{local}: {swift_type(param_info)}"
            if param_info.is_optional:
                declaration += " = nil"
            signature.append(f"{declaration},")
            bridging.append(f'"{param_name}": {local}')

        completion: str = f"{capitalize_first(name)}Completion"
        result_type: str = swift_type(info.result)
        pad: str = _INDENT * 3

        if bridging:
            bridging_literal: str = "[\n" + ",\n".join(
                f"{pad}{pair}" for pair in bridging
            ) + "]"
        else:
            bridging_literal = "[:]"

        lines: List[str] = [
            f"{_INDENT}typealias {completion} = "
            f"(_ result: {result_type}, _ error: DataTaskError?) -> ()",
            "",
            f"{_INDENT}@discardableResult",
            f"{_INDENT}func {name}Sync(",
        ]
        lines.extend(f"{pad}{item}" for item in signature)
        lines.extend([
            f"{pad}_ parameters: [String: Any?] = [:]) -> {result_type} {{",
            f'{_INDENT * 2}return requestSync("{name}", defaultParameters["{name}"], '
            f"parameters, {bridging_literal})",
            f"{_INDENT}}}",
            "",
            f"{_INDENT}func {name}Async(",
        ])
        lines.extend(f"{pad}{item}" for item in signature)
        lines.extend([
            f"{pad}_ parameters: [String: Any?] = [:],",
            f"{pad}queue: DispatchQueue = .main,",
            f"{pad}completion: {completion}? = nil) {{",
            f'{_INDENT * 2}return requestAsync("{name}", defaultParameters["{name}"], '
            f"parameters, {bridging_literal},",
            f"{pad}queue: queue, completion: completion)",
            f"{_INDENT}}}",
            "",
            "",
        ])

        logger.debug("Rendered method '%s': %d parameters.", name, len(parameters))
        return "\n".join(lines)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "DATE_TYPE",
    "FieldTemplateKind",
    "SCALAR_JSON_ACCESSORS",
    "SwiftTemplates",
    "TRUE_SENTINEL",
    "UnsupportedFieldError",
    "classify_field",
    "is_named_type",
    "render_field",
    "swift_type",
]
