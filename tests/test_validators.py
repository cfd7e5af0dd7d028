"""
tests/test_validators.py
Unit tests for rapier.validators.

Tests cover:
- Type name checks (identifier, keyword, built-in shadowing)
- Accessor checks after renames and camelization
- Unsupported field shapes in strict and lenient mode
- Method, parameter and referenced-type checks
- Full validation pipeline (validate_full)
"""

from __future__ import annotations

from typing import Any, Dict

from rapier.models import GenerationConfig, SchemaDefinition
from rapier.validators import (
    ValidationResult,
    validate_field_categories,
    validate_field_names,
    validate_full,
    validate_methods,
    validate_type_names,
)


def _schema(types: Dict[str, Any] | None = None, methods: Dict[str, Any] | None = None) -> SchemaDefinition:
    return SchemaDefinition.model_validate({"types": types or {}, "methods": methods or {}})


class TestValidationResult:
    def test_empty_result_is_valid(self) -> None:
        result = ValidationResult()
        assert result.is_valid
        assert bool(result)
        assert len(result) == 0

    def test_warning_keeps_result_valid(self) -> None:
        result = ValidationResult()
        result.add_warning("W", "careful")
        assert result.is_valid
        assert result.warning_count == 1

    def test_error_makes_result_invalid(self) -> None:
        result = ValidationResult()
        result.add_error("E", "broken", {"type": "User"})
        assert not result
        assert result.codes == ["E"]
        assert "[E] broken" in result.format_report()
        assert "type: User" in result.format_report()

    def test_merge(self) -> None:
        a, b = ValidationResult(), ValidationResult()
        a.add_error("A", "a")
        b.add_warning("B", "b")
        a.merge(b)
        assert a.codes == ["A", "B"]


class TestTypeNames:
    def test_valid_names(self) -> None:
        assert validate_type_names(_schema({"User": {}, "PhotoSize": {}})).is_valid

    def test_invalid_identifier(self) -> None:
        result = validate_type_names(_schema({"Photo-Size": {}}))
        assert result.codes == ["TYPE_NAME_INVALID"]

    def test_keyword(self) -> None:
        result = validate_type_names(_schema({"struct": {}}))
        assert result.codes == ["TYPE_NAME_RESERVED"]

    def test_builtin_shadowing(self) -> None:
        result = validate_type_names(_schema({"Date": {}}))
        assert result.codes == ["TYPE_NAME_BUILTIN"]


class TestFieldNames:
    def test_collision_after_camelization(self, config: GenerationConfig) -> None:
        schema = _schema({"Message": {"fields": {"chat_id": "Int64", "chat__id": "Int64"}}})
        result = validate_field_names(schema, config)
        assert "FIELD_ACCESSOR_COLLISION" in result.codes
        assert not result.is_valid

    def test_keyword_accessor_is_warning(self, config: GenerationConfig) -> None:
        schema = _schema({"Chat": {"fields": {"default": "String"}}})
        result = validate_field_names(schema, config)
        assert result.codes == ["FIELD_NAME_RESERVED"]
        assert result.is_valid

    def test_renamed_accessor_is_clean(self, config: GenerationConfig) -> None:
        schema = _schema({"Chat": {"fields": {"type": "String"}}})
        assert len(validate_field_names(schema, config)) == 0

    def test_invalid_accessor(self, config: GenerationConfig) -> None:
        schema = _schema({"Chat": {"fields": {"first-name": "String"}}})
        assert validate_field_names(schema, config).codes == ["FIELD_NAME_INVALID"]

    def test_true_fields_ignored(self, config: GenerationConfig) -> None:
        schema = _schema({"ForceReply": {"fields": {"force_reply": "True", "forceReply": "Bool"}}})
        assert validate_field_names(schema, config).is_valid

    def test_collision_with_generated_members(self, config: GenerationConfig) -> None:
        schema = _schema({"Blob": {"fields": {"json": "String", "internal_json": "String"}}})
        result = validate_field_names(schema, config)
        assert result.codes == ["FIELD_ACCESSOR_COLLISION", "FIELD_ACCESSOR_COLLISION"]
        assert {e.context["accessor"] for e in result.errors} == {"json", "internalJson"}
        assert not validate_full(schema, config).is_valid


class TestFieldCategories:
    def test_unsupported_is_error_when_strict(self, config: GenerationConfig) -> None:
        schema = _schema({"Poll": {"fields": {"options": "[String]"}}})
        result = validate_field_categories(schema, config)
        assert result.codes == ["FIELD_UNSUPPORTED"]
        assert not result.is_valid

    def test_unsupported_is_warning_when_lenient(self, lenient_config: GenerationConfig) -> None:
        schema = _schema({"Poll": {"fields": {"options": "[String]"}}})
        result = validate_field_categories(schema, lenient_config)
        assert result.codes == ["FIELD_UNSUPPORTED"]
        assert result.is_valid

    def test_supported_shapes_pass(self, example_schema: SchemaDefinition, config: GenerationConfig) -> None:
        assert len(validate_field_categories(example_schema, config)) == 0


class TestMethods:
    def test_invalid_method_name(self, config: GenerationConfig) -> None:
        schema = _schema(methods={"send-message": {"result": "Message"}})
        assert "METHOD_NAME_INVALID" in validate_methods(schema, config).codes

    def test_parameter_collision(self, config: GenerationConfig) -> None:
        schema = _schema(methods={
            "sendMessage": {
                "parameters": {"chat_id": "Int64", "chat__id": "Int64"},
                "result": "True",
            },
        })
        assert validate_methods(schema, config).codes == ["PARAM_NAME_COLLISION"]

    def test_unknown_types_are_warnings(self, config: GenerationConfig) -> None:
        schema = _schema(methods={
            "sendSticker": {"parameters": {"sticker": "Sticker"}, "result": "Message"},
        })
        result = validate_methods(schema, config)
        assert sorted(result.codes) == ["PARAM_TYPE_UNKNOWN", "RESULT_TYPE_UNKNOWN"]
        assert result.is_valid

    def test_keyword_parameters_are_warnings(self, config: GenerationConfig) -> None:
        schema = _schema(methods={
            "getUpdates": {"parameters": {"default": "Int", "in": "Int"}, "result": "True"},
        })
        result = validate_methods(schema, config)
        assert result.codes == ["PARAM_NAME_RESERVED", "PARAM_NAME_RESERVED"]
        assert result.is_valid

    def test_self_bridging_and_builtin_types_are_known(self, config: GenerationConfig) -> None:
        schema = _schema(methods={
            "sendPhoto": {
                "parameters": {"photo": "InputFileOrString", "date": "Date?"},
                "result": "True",
            },
        })
        assert len(validate_methods(schema, config)) == 0


class TestValidateFull:
    def test_example_schema_is_clean(self, example_schema: SchemaDefinition, config: GenerationConfig) -> None:
        result = validate_full(example_schema, config)
        assert result.is_valid, result.format_report()
        assert result.warning_count == 0, result.format_report()

    def test_collects_from_every_validator(self, config: GenerationConfig) -> None:
        schema = _schema(
            types={"struct": {"fields": {"options": "[String]"}}},
            methods={"getMe": {"result": "Unknown"}},
        )
        codes = validate_full(schema, config).codes
        assert "TYPE_NAME_RESERVED" in codes
        assert "FIELD_UNSUPPORTED" in codes
        assert "RESULT_TYPE_UNKNOWN" in codes
