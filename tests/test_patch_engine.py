"""Tests for the patch engine."""

import pytest
from pydantic import ValidationError

from mutation_guard.models.patch import EditKind, EditOperation
from mutation_guard.services.patch_engine import EditRangeError, apply_edits, check_ranges


TEN_LINES = "\n".join(f"L{i}" for i in range(1, 11))


def edit(operation, start_line, end_line=None, content=None):
    return EditOperation(operation=operation, start_line=start_line, end_line=end_line, content=content)


class TestEditOperation:
    """Tests for EditOperation validation."""

    def test_end_line_defaults_to_start_line(self):
        op = edit("delete", 3)
        assert op.end_line == 3
        assert op.operation == EditKind.DELETE

    def test_content_required_for_replace_and_insert(self):
        with pytest.raises(ValidationError):
            edit("replace", 1)
        with pytest.raises(ValidationError):
            edit("insert", 1)

    def test_line_numbers_validated(self):
        with pytest.raises(ValidationError):
            edit("delete", 0)
        with pytest.raises(ValidationError):
            edit("delete", 5, 4)


class TestApplyEdits:
    """Tests for the pure edit application."""

    def test_batch_uses_original_numbering(self):
        lines = TEN_LINES.split("\n")
        result = apply_edits(lines, [edit("insert", 5, content="X"), edit("delete", 2)])
        assert result == ["L1", "L3", "L4", "X", "L5", "L6", "L7", "L8", "L9", "L10"]

    def test_replace_range_with_multiline_content(self):
        result = apply_edits(["a", "b", "c", "d"], [edit("replace", 2, 3, "x\ny\nz")])
        assert result == ["a", "x", "y", "z", "d"]

    def test_insert_past_last_line_appends(self):
        assert apply_edits(["a", "b"], [edit("insert", 3, content="c")]) == ["a", "b", "c"]

    def test_input_list_untouched(self):
        lines = ["a", "b"]
        apply_edits(lines, [edit("delete", 1)])
        assert lines == ["a", "b"]

    def test_out_of_range_rejected(self):
        with pytest.raises(EditRangeError):
            check_ranges(10, [edit("delete", 9, 11)])
        with pytest.raises(EditRangeError):
            check_ranges(10, [edit("insert", 12, content="x")])
        check_ranges(10, [edit("insert", 11, content="x")])


class TestPatchEngine:
    """Tests for PatchEngine.apply_patch / create_file."""

    def test_apply_patch_writes_and_snapshots(self, engine, store, workspace, ten_line_file):
        result = engine.apply_patch(ten_line_file, [edit("insert", 5, content="X"), edit("delete", 2)])

        assert result.success
        assert result.snapshot_id is not None
        assert (workspace.root / ten_line_file).read_text() == "L1\nL3\nL4\nX\nL5\nL6\nL7\nL8\nL9\nL10"
        assert "-L2" in result.diff_text
        assert "+X" in result.diff_text

        snapshot = store.get(result.snapshot_id)
        assert snapshot.kind == "modify"
        assert snapshot.pre_image == TEN_LINES
        assert snapshot.post_image == result.new_content

    def test_dry_run_touches_nothing(self, engine, store, workspace, ten_line_file):
        result = engine.apply_patch(ten_line_file, [edit("replace", 1, content="changed")], dry_run=True)

        assert result.success
        assert result.dry_run
        assert result.snapshot_id is None
        assert result.new_content.startswith("changed\nL2")
        assert (workspace.root / ten_line_file).read_text() == TEN_LINES
        assert list(store.list_all()) == []
        assert not store.snapshot_dir.exists()

    def test_out_of_range_edit_reports_error_without_snapshot(self, engine, store, ten_line_file):
        result = engine.apply_patch(ten_line_file, [edit("replace", 10, 12, "x")])

        assert not result.success
        assert "out of range" in result.error
        assert list(store.list_all()) == []

    def test_path_outside_root_rejected(self, engine):
        result = engine.apply_patch("../outside.txt", [edit("insert", 1, content="x")])
        assert not result.success
        assert "outside project root" in result.error

    def test_syntax_errors_are_reported_not_fatal(self, engine, workspace):
        (workspace.root / "app.js").write_text("function f() {\n  return 1;\n}")
        result = engine.apply_patch("app.js", [edit("replace", 2, content="  return (1;")])

        assert result.success
        assert not result.validation.syntax_valid
        assert len(result.validation.lint_errors) == 1
        assert result.validation.type_errors == []

    def test_create_file(self, engine, store, workspace):
        result = engine.create_file("src/new.ts", "export const a = 1;\n")

        assert result.success
        assert (workspace.root / "src" / "new.ts").read_text() == "export const a = 1;\n"
        assert store.get(result.snapshot_id).kind == "create"

    def test_create_existing_file_requires_overwrite(self, engine, workspace, ten_line_file):
        result = engine.create_file(ten_line_file, "new")
        assert not result.success
        assert "already exists" in result.error

        result = engine.create_file(ten_line_file, "new", overwrite=True)
        assert result.success
        assert (workspace.root / ten_line_file).read_text() == "new"

    def test_repeated_dry_runs_never_write(self, engine, store, workspace, ten_line_file, monkeypatch):
        attached = []
        monkeypatch.setattr(store, "attach_post_image", lambda *args: attached.append(args))
        patches = [edit("replace", 3, content="changed")]

        first = engine.apply_patch(ten_line_file, patches, dry_run=True)
        second = engine.apply_patch(ten_line_file, patches, dry_run=True)

        assert first.new_content == second.new_content
        assert attached == []
        assert (workspace.root / ten_line_file).read_text() == TEN_LINES
        assert list(store.list_all()) == []

    def test_nul_byte_in_path_is_a_result(self, engine, store):
        result = engine.apply_patch("a\x00b.txt", [edit("insert", 1, content="x")])
        assert not result.success
        assert "Invalid path" in result.error

        created = engine.create_file("a\x00b.txt", "x")
        assert not created.success
        assert list(store.list_all()) == []

    def test_snapshot_directory_is_not_writable(self, engine, store, workspace, ten_line_file):
        snapshot_id = engine.apply_patch(ten_line_file, [edit("delete", 1)]).snapshot_id
        target = f".mutation_guard/snapshots/{snapshot_id}.json"
        before = (workspace.root / target).read_text()

        forged = engine.create_file(target, '{"pre_image": "FORGED"}', overwrite=True)
        assert not forged.success
        assert "snapshot directory" in forged.error

        patched = engine.apply_patch(target, [edit("replace", 1, content="{}")])
        assert not patched.success
        assert (workspace.root / target).read_text() == before
