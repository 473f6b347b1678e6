"""Tests for knowledge-base scoped note operations."""

import pytest

from obsidian_kb.core import note_operations
from obsidian_kb.errors import (
    FolderConstraintViolation,
    InvalidNotePath,
    KnowledgeBaseNotFound,
    NoteAlreadyExists,
    NoteNotFound,
)

VALID_ADR = "---\nstatus: draft\n---\n# Decision\nUse SQLite."
INVALID_ADR = "---\nstatus: rejected-ish\n---\n# Decision"


@pytest.fixture
def write_note(vault_path):
    def _write(path: str, content: str):
        target = vault_path / path
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(content, encoding="utf-8")
        return target

    return _write


class TestCreateNote:
    def test_valid_note_is_written(self, engineering_kb, vault_path):
        result = note_operations.create_note(engineering_kb, "eng", "adr/0001-storage.md", VALID_ADR)

        assert result["note"] == {"path": "docs/adr/0001-storage.md", "content": VALID_ADR}
        assert result["machine_validation"] == {"passed": True, "issues": []}
        assert result["knowledge_base"]["name"] == "eng"
        assert "Keep one decision per note." in result["validation_instruction_for_llm"]
        assert (vault_path / "docs/adr/0001-storage.md").read_text(encoding="utf-8") == VALID_ADR

    def test_violation_writes_nothing(self, engineering_kb, vault_path):
        with pytest.raises(FolderConstraintViolation) as excinfo:
            note_operations.create_note(engineering_kb, "eng", "adr/storage.md", INVALID_ADR)

        payload = excinfo.value.as_payload()["error"]
        assert payload["code"] == "folder_constraint_violation"
        assert payload["constraint"] == {"kb_name": "eng", "subfolder": "docs/adr"}
        assert [issue["field"] for issue in payload["issues"]] == ["frontmatter.status", "filename"]
        assert not (vault_path / "docs/adr/storage.md").exists()

    def test_unconstrained_note_creates_parent_folders(self, engineering_kb, vault_path):
        result = note_operations.create_note(engineering_kb, "eng", "guides/setup/local.md", "anything")

        assert result["machine_validation"]["passed"] is True
        assert (vault_path / "docs/guides/setup/local.md").is_file()

    def test_existing_note(self, engineering_kb, write_note):
        write_note("docs/readme.md", "hello")
        with pytest.raises(NoteAlreadyExists):
            note_operations.create_note(engineering_kb, "eng", "readme.md", "again")

    def test_existing_folder_at_note_path(self, engineering_kb, vault_path):
        (vault_path / "docs/sub").mkdir()
        with pytest.raises(NoteAlreadyExists):
            note_operations.create_note(engineering_kb, "eng", "sub", "x")

    def test_parent_segment_is_a_file(self, engineering_kb, write_note, vault_path):
        write_note("docs/a.md", "x")
        with pytest.raises(InvalidNotePath):
            note_operations.create_note(engineering_kb, "eng", "a.md/b.md", "x")
        assert (vault_path / "docs/a.md").read_text(encoding="utf-8") == "x"

    def test_unknown_knowledge_base(self, engineering_kb):
        with pytest.raises(KnowledgeBaseNotFound):
            note_operations.create_note(engineering_kb, "missing", "a.md", "")

    def test_path_outside_knowledge_base(self, engineering_kb):
        with pytest.raises(InvalidNotePath):
            note_operations.create_note(engineering_kb, "eng", "../escape.md", "")


class TestReadNote:
    def test_paging(self, engineering_kb, write_note):
        write_note("docs/long.md", "abcdefghijklmnopqrstuvwxy")

        first = note_operations.read_note(engineering_kb, "eng", "long.md", limit=10)["note"]
        assert first["content"] == "abcdefghij"
        assert first["next_offset"] == 10
        assert first["has_more"] is True
        assert first["remaining_chars"] == 15

        last = note_operations.read_note(engineering_kb, "eng", "docs/long.md", offset=20, limit=10)["note"]
        assert last["content"] == "uvwxy"
        assert last["next_offset"] == 25
        assert last["has_more"] is False
        assert last["remaining_chars"] == 0

    def test_default_limit_reads_small_note_whole(self, engineering_kb, write_note):
        write_note("docs/short.md", "short")
        note = note_operations.read_note(engineering_kb, "eng", "short.md")["note"]
        assert note["content"] == "short"
        assert note["has_more"] is False

    def test_missing_note(self, engineering_kb):
        with pytest.raises(NoteNotFound):
            note_operations.read_note(engineering_kb, "eng", "nothing.md")


class TestUpdateAndAppend:
    def test_update_replaces_content(self, engineering_kb, write_note):
        target = write_note("docs/adr/0001-x.md", VALID_ADR)
        new_content = VALID_ADR.replace("draft", "accepted")

        result = note_operations.update_note(engineering_kb, "eng", "adr/0001-x.md", new_content)

        assert result["original_note"]["content"] == VALID_ADR
        assert result["updated_note"]["content"] == new_content
        assert target.read_text(encoding="utf-8") == new_content

    def test_invalid_update_keeps_original(self, engineering_kb, write_note):
        target = write_note("docs/adr/0001-x.md", VALID_ADR)
        with pytest.raises(FolderConstraintViolation):
            note_operations.update_note(engineering_kb, "eng", "adr/0001-x.md", INVALID_ADR)
        assert target.read_text(encoding="utf-8") == VALID_ADR

    def test_update_missing_note(self, engineering_kb):
        with pytest.raises(NoteNotFound):
            note_operations.update_note(engineering_kb, "eng", "adr/0002-x.md", VALID_ADR)

    @pytest.mark.parametrize(
        "original, expected",
        [("line", "line\nmore"), ("line\n", "line\nmore")],
    )
    def test_append_separates_with_newline(self, engineering_kb, write_note, original, expected):
        target = write_note("docs/log.md", original)
        result = note_operations.append_note(engineering_kb, "eng", "log.md", "more")

        assert result["updated_note"]["content"] == expected
        assert target.read_text(encoding="utf-8") == expected

    def test_append_validates_combined_note(self, engineering_kb, write_note):
        target = write_note("docs/adr/0001-x.md", "# No frontmatter")
        with pytest.raises(FolderConstraintViolation):
            note_operations.append_note(engineering_kb, "eng", "adr/0001-x.md", "more text")
        assert target.read_text(encoding="utf-8") == "# No frontmatter"


class TestMoveAndDelete:
    def test_move_validates_destination(self, engineering_kb, write_note, vault_path):
        write_note("docs/inbox/idea.md", "# Just an idea")

        with pytest.raises(FolderConstraintViolation) as excinfo:
            note_operations.move_note(engineering_kb, "eng", "inbox/idea.md", "adr/0002-idea.md")

        assert excinfo.value.message.endswith("for new location")
        assert (vault_path / "docs/inbox/idea.md").is_file()
        assert not (vault_path / "docs/adr/0002-idea.md").exists()

    def test_move_into_new_folder(self, engineering_kb, write_note, vault_path):
        write_note("docs/adr/0001-x.md", VALID_ADR)
        result = note_operations.move_note(engineering_kb, "eng", "adr/0001-x.md", "archive/2024/0001-x.md")

        assert result["origin_path"] == "docs/adr/0001-x.md"
        assert result["new_path"] == "docs/archive/2024/0001-x.md"
        assert not (vault_path / "docs/adr/0001-x.md").exists()
        assert (vault_path / "docs/archive/2024/0001-x.md").read_text(encoding="utf-8") == VALID_ADR

    def test_move_onto_existing_note(self, engineering_kb, write_note):
        write_note("docs/a.md", "a")
        write_note("docs/b.md", "b")
        with pytest.raises(NoteAlreadyExists):
            note_operations.move_note(engineering_kb, "eng", "a.md", "b.md")

    def test_move_onto_existing_folder(self, engineering_kb, write_note, vault_path):
        write_note("docs/a.md", "a")
        (vault_path / "docs/archive").mkdir()
        with pytest.raises(NoteAlreadyExists):
            note_operations.move_note(engineering_kb, "eng", "a.md", "archive")
        assert (vault_path / "docs/a.md").is_file()

    def test_move_through_a_file(self, engineering_kb, write_note, vault_path):
        write_note("docs/a.md", "a")
        write_note("docs/b.md", "b")
        with pytest.raises(InvalidNotePath):
            note_operations.move_note(engineering_kb, "eng", "a.md", "b.md/a.md")
        assert (vault_path / "docs/a.md").is_file()

    def test_delete(self, engineering_kb, write_note):
        target = write_note("docs/old.md", "bye")
        result = note_operations.delete_note(engineering_kb, "eng", "old.md")

        assert result == {"knowledge_base": {"name": "eng", "subfolder": "docs"}, "deleted_path": "docs/old.md"}
        assert not target.exists()

        with pytest.raises(NoteNotFound):
            note_operations.delete_note(engineering_kb, "eng", "old.md")


class TestListNotes:
    def test_lists_markdown_recursively(self, engineering_kb, write_note):
        write_note("docs/b.md", "")
        write_note("docs/a/deep/c.md", "")
        write_note("docs/a/image.png", "")
        write_note("outside/x.md", "")

        result = note_operations.list_notes(engineering_kb, "eng")

        assert result["knowledge_base"] == {"name": "eng", "subfolder": "docs"}
        assert [note["path"] for note in result["notes"]] == ["docs/a/deep/c.md", "docs/b.md"]

    def test_subfolder_listing(self, engineering_kb, write_note):
        write_note("docs/adr/0001-x.md", "")
        write_note("docs/other.md", "")

        result = note_operations.list_notes(engineering_kb, "eng", "adr")
        assert [note["path"] for note in result["notes"]] == ["docs/adr/0001-x.md"]

    def test_missing_subfolder_is_empty(self, engineering_kb):
        assert note_operations.list_notes(engineering_kb, "eng", "nowhere")["notes"] == []
