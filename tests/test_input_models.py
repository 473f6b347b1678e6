"""Tests for Pydantic input models.

This test suite validates the input validation logic for MCP tools,
ensuring that:
- Valid inputs are accepted and normalized correctly
- Invalid inputs raise ValidationError with descriptive messages
- Schema generation produces correct JSON schemas for MCP
"""

import pytest
from pydantic import ValidationError

from obsidian_kb.models import (
    AddFolderConstraintInput,
    AddKnowledgeBaseInput,
    AppendNoteInput,
    BaseNoteInput,
    ListNotesInput,
    MoveNoteInput,
    ReadNoteInput,
    SetActiveVaultInput,
    UpdateKnowledgeBaseInput,
)


class TestBaseNoteInput:
    """Test suite for BaseNoteInput model validation."""

    def test_valid_relative_path(self):
        """Test that a path relative to the KB subfolder is accepted."""
        model = BaseNoteInput(knowledge_base_name="eng", note_path="api/auth.md")
        assert model.note_path == "api/auth.md"
        assert model.vault is None

    def test_leading_slash_is_tolerated(self):
        """Test that rooted paths pass; they are normalized during resolution."""
        model = BaseNoteInput(knowledge_base_name="eng", note_path="/docs/api/auth.md")
        assert model.note_path == "/docs/api/auth.md"

    def test_unicode_path(self):
        model = BaseNoteInput(knowledge_base_name="journal", note_path="日記/2025-10-27.md")
        assert model.note_path == "日記/2025-10-27.md"

    def test_vault_with_whitespace_is_stripped(self):
        model = BaseNoteInput(knowledge_base_name="eng", note_path="a.md", vault="  work  ")
        assert model.vault == "work"

    def test_whitespace_only_path_raises_error(self):
        with pytest.raises(ValidationError) as exc_info:
            BaseNoteInput(knowledge_base_name="eng", note_path="   ")

        error_messages = " ".join(str(e) for e in exc_info.value.errors())
        assert "empty" in error_messages.lower()

    @pytest.mark.parametrize("note_path", ["../secrets.md", "api/../../x.md", "./a.md"])
    def test_dot_segments_raise_error(self, note_path):
        with pytest.raises(ValidationError) as exc_info:
            BaseNoteInput(knowledge_base_name="eng", note_path=note_path)

        assert any("'..'" in str(e) for e in exc_info.value.errors())

    def test_backslashes_raise_error(self):
        with pytest.raises(ValidationError):
            BaseNoteInput(knowledge_base_name="eng", note_path="api\\auth.md")

    def test_empty_vault_string_raises_error(self):
        with pytest.raises(ValidationError):
            BaseNoteInput(knowledge_base_name="eng", note_path="a.md", vault="   ")

    def test_model_validation_error_details(self):
        with pytest.raises(ValidationError) as exc_info:
            BaseNoteInput(knowledge_base_name="eng", note_path="")

        assert any(error.get("loc") == ("note_path",) for error in exc_info.value.errors())


class TestKnowledgeBaseName:
    """Knowledge base names become directory names."""

    @pytest.mark.parametrize("name", ["eng", "team_docs", "ADR-2025", "a" * 100])
    def test_valid_names(self, name):
        assert AddKnowledgeBaseInput(name=name, subfolder="docs").name == name

    @pytest.mark.parametrize("name", ["with space", "dots.are.bad", "slash/name", "a" * 101, "   "])
    def test_invalid_names(self, name):
        with pytest.raises(ValidationError):
            AddKnowledgeBaseInput(name=name, subfolder="docs")

    def test_name_is_stripped(self):
        assert AddKnowledgeBaseInput(name=" eng ", subfolder="docs").name == "eng"

    def test_note_inputs_check_name_too(self):
        with pytest.raises(ValidationError):
            ListNotesInput(knowledge_base_name="bad name")


class TestKnowledgeBaseInputs:
    def test_add_defaults(self):
        model = AddKnowledgeBaseInput(name="eng", subfolder="docs")
        assert model.description == ""
        assert model.organization_rules == ""

    def test_add_requires_subfolder(self):
        with pytest.raises(ValidationError):
            AddKnowledgeBaseInput(name="eng")

    def test_update_fields_are_optional(self):
        model = UpdateKnowledgeBaseInput(name="eng")
        assert model.description is None
        assert model.subfolder is None
        assert model.organization_rules is None

    def test_update_rejects_traversal_subfolder(self):
        with pytest.raises(ValidationError):
            UpdateKnowledgeBaseInput(name="eng", subfolder="docs/../other")

    def test_constraint_rules_accept_any_json(self):
        model = AddFolderConstraintInput(kb_name="eng", subfolder="docs/adr", rules={"filename": {"pattern": "x"}})
        assert model.rules == {"filename": {"pattern": "x"}}

        loose = AddFolderConstraintInput(kb_name="eng", subfolder="docs/adr", rules="not an object")
        assert loose.rules == "not an object"

    def test_constraint_requires_rules(self):
        with pytest.raises(ValidationError):
            AddFolderConstraintInput(kb_name="eng", subfolder="docs/adr")

    def test_model_json_schema_generation(self):
        """Test that JSON schema is generated correctly for MCP."""
        schema = AddKnowledgeBaseInput.model_json_schema()

        assert "properties" in schema
        for field in ("name", "description", "subfolder", "organization_rules", "vault"):
            assert field in schema["properties"]
        assert "description" in schema["properties"]["subfolder"]
        assert "examples" in schema


class TestNoteInputs:
    def test_read_defaults(self):
        model = ReadNoteInput(knowledge_base_name="eng", note_path="a.md")
        assert model.offset == 0
        assert model.limit is None

    @pytest.mark.parametrize("field, value", [("offset", -1), ("limit", 0)])
    def test_read_bounds(self, field, value):
        with pytest.raises(ValidationError):
            ReadNoteInput(knowledge_base_name="eng", note_path="a.md", **{field: value})

    def test_append_requires_content(self):
        with pytest.raises(ValidationError):
            AppendNoteInput(knowledge_base_name="eng", note_path="a.md", note_content="")

    def test_move_validates_both_paths(self):
        with pytest.raises(ValidationError) as exc_info:
            MoveNoteInput(knowledge_base_name="eng", origin_note_path="../a.md", new_note_path="../b.md")

        locations = {error["loc"] for error in exc_info.value.errors()}
        assert locations == {("origin_note_path",), ("new_note_path",)}

    def test_list_subfolder_is_optional(self):
        assert ListNotesInput(knowledge_base_name="eng").subfolder is None
        assert ListNotesInput(knowledge_base_name="eng", subfolder="adr").subfolder == "adr"


class TestPydanticIntegration:
    """Test Pydantic-specific features and integration."""

    def test_model_dump_produces_dict(self):
        model = ReadNoteInput(knowledge_base_name="eng", note_path="a.md", vault="personal", limit=50)
        assert model.model_dump() == {
            "vault": "personal",
            "knowledge_base_name": "eng",
            "note_path": "a.md",
            "offset": 0,
            "limit": 50,
        }

    def test_extra_fields_are_ignored(self):
        model = SetActiveVaultInput(vault="personal", extra_field="ignored")  # type: ignore
        assert model.vault == "personal"
        assert not hasattr(model, "extra_field")
