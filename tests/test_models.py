"""
tests/test_models.py
Unit tests for rapier.models: field shorthand parsing, descriptor
immutability, the rename table and GenerationConfig defaults.
"""

from __future__ import annotations

import pytest
import yaml
from pydantic import ValidationError

from rapier.models import (
    DEFAULT_RENAME_RULES,
    FieldInfo,
    GenerationConfig,
    MethodInfo,
    RenameRule,
    SchemaDefinition,
    TypeInfo,
    parse_field_shorthand,
)


class TestFieldShorthand:
    def test_plain_type(self) -> None:
        info = FieldInfo.model_validate("User")
        assert info == FieldInfo(type="User")

    def test_optional(self) -> None:
        info = FieldInfo.model_validate("String?")
        assert info.type == "String"
        assert info.is_optional
        assert not info.is_array

    def test_array(self) -> None:
        info = FieldInfo.model_validate("[User]")
        assert info.is_array
        assert not info.is_array_of_array
        assert not info.is_optional

    def test_array_of_array_sets_both_flags(self) -> None:
        info = FieldInfo.model_validate("[[PhotoSize]]?")
        assert info.type == "PhotoSize"
        assert info.is_array
        assert info.is_array_of_array
        assert info.is_optional

    @pytest.mark.parametrize("text", ["[User", "User]", "[[User]", "", "?", "[]"])
    def test_invalid_shorthand(self, text: str) -> None:
        with pytest.raises(ValueError):
            parse_field_shorthand(text)

    def test_invalid_shorthand_inside_model(self) -> None:
        with pytest.raises(ValidationError):
            TypeInfo.model_validate({"fields": {"broken": "[User"}})

    @pytest.mark.parametrize("text", ["User", "String?", "[User]", "[[PhotoSize]]?"])
    def test_shorthand_property_matches_input(self, text: str) -> None:
        assert FieldInfo.model_validate(text).shorthand == text

    def test_mapping_form_still_accepted(self) -> None:
        info = FieldInfo.model_validate({"type": "Int", "is_optional": True})
        assert info.shorthand == "Int?"


class TestUnquotedYamlShorthand:
    def test_bool_true_is_true_sentinel(self) -> None:
        assert FieldInfo.model_validate(True) == FieldInfo(type="True")

    def test_one_element_list_is_array(self) -> None:
        assert FieldInfo.model_validate(["User"]).shorthand == "[User]"

    def test_nested_list_is_array_of_array(self) -> None:
        info = FieldInfo.model_validate([["PhotoSize"]])
        assert info.is_array
        assert info.is_array_of_array
        assert not info.is_optional

    def test_loaded_from_yaml(self) -> None:
        raw = yaml.safe_load(
            "fields:\n"
            "  photos: [PhotoSize]\n"
            "  keyboard: [[KeyboardButton]]\n"
            "  force_reply: True\n"
        )
        info = TypeInfo.model_validate(raw)
        assert info.fields["photos"].shorthand == "[PhotoSize]"
        assert info.fields["keyboard"].shorthand == "[[KeyboardButton]]"
        assert info.fields["force_reply"].type == "True"

    @pytest.mark.parametrize(
        "value", [[], ["User", "Chat"], ["User?"], [["A", "B"]], [1], False]
    )
    def test_other_values_rejected(self, value: object) -> None:
        with pytest.raises(ValidationError):
            FieldInfo.model_validate(value)


class TestDescriptors:
    def test_field_info_is_frozen(self) -> None:
        info = FieldInfo(type="Int")
        with pytest.raises(ValidationError):
            info.type = "String"

    def test_structural_equality(self) -> None:
        assert FieldInfo(type="User", is_optional=True) == FieldInfo.model_validate("User?")

    def test_unknown_keys_rejected(self) -> None:
        with pytest.raises(ValidationError):
            FieldInfo.model_validate({"type": "Int", "nullable": True})

    def test_sorted_fields(self) -> None:
        info = TypeInfo.model_validate(
            {"fields": {"username": "String?", "id": "Int64", "first_name": "String"}}
        )
        assert [name for name, _ in info.sorted_fields()] == ["first_name", "id", "username"]

    def test_method_requires_result(self) -> None:
        with pytest.raises(ValidationError):
            MethodInfo.model_validate({"parameters": {}})

    def test_sorted_parameters(self) -> None:
        info = MethodInfo.model_validate(
            {"parameters": {"text": "String", "chat_id": "Int64"}, "result": "Message"}
        )
        assert [name for name, _ in info.sorted_parameters()] == ["chat_id", "text"]

    def test_schema_counts(self, minimal_schema: SchemaDefinition) -> None:
        assert minimal_schema.type_count == 1
        assert minimal_schema.method_count == 1
        assert "1 types" in repr(minimal_schema)


class TestRenameRules:
    def test_defaults(self) -> None:
        config = GenerationConfig()
        assert config.rename_rules == DEFAULT_RENAME_RULES

    def test_chat_member_status(self) -> None:
        config = GenerationConfig()
        assert config.accessor_name_for("ChatMember", "status", "String") == "status_string"
        assert config.accessor_name_for("Poll", "status", "String") == "status"

    def test_type_renamed_only_for_string(self) -> None:
        config = GenerationConfig()
        assert config.accessor_name_for("Chat", "type", "String") == "type_string"
        assert config.accessor_name_for("Sticker", "type", "StickerType") == "type"

    def test_parse_mode_renamed_only_for_string(self) -> None:
        config = GenerationConfig()
        assert config.accessor_name_for("InputTextMessageContent", "parse_mode", "String") == (
            "parse_mode_string"
        )
        assert config.accessor_name_for("X", "parse_mode", "ParseMode") == "parse_mode"

    def test_first_match_wins(self) -> None:
        config = GenerationConfig(rename_rules=[
            RenameRule(field_name="id", accessor="first"),
            RenameRule(field_name="id", accessor="second"),
        ])
        assert config.accessor_name_for("User", "id", "Int64") == "first"

    def test_empty_table_keeps_names(self) -> None:
        config = GenerationConfig(rename_rules=[])
        assert config.accessor_name_for("ChatMember", "status", "String") == "status"


class TestGenerationConfig:
    def test_defaults(self) -> None:
        config = GenerationConfig()
        assert config.file_extension == "swift"
        assert config.client_type == "TelegramBot"
        assert config.strict is True
        assert config.variant_content_prefix == "InputMessageContent"
        assert config.self_bridging_types == ["InputFileOrString"]

    def test_leading_dot_stripped(self) -> None:
        config = GenerationConfig(file_extension=".swift")
        assert config.types_filename == "Types.swift"
        assert config.methods_filename == "Methods.swift"

    def test_unknown_key_rejected(self) -> None:
        with pytest.raises(ValidationError):
            GenerationConfig.model_validate({"language": "kotlin"})
