"""Tests for the snapshot store."""

import pytest

from mutation_guard.services.snapshot_store import SnapshotContractError, SnapshotStore


class TestSnapshotLifecycle:
    """create / attach_post_image / rollback"""

    def test_rollback_restores_byte_identical_content(self, store, workspace):
        original = "line one\r\nline two\n\ttabbed  \n"
        path = workspace.root / "data.cfg"
        path.write_bytes(original.encode("utf-8"))

        snapshot_id = store.create("data.cfg", "modify")
        workspace.write_text("data.cfg", "something else")
        store.attach_post_image(snapshot_id, "something else")

        result = store.rollback(snapshot_id)
        assert result.success
        assert result.file_path == "data.cfg"
        assert path.read_bytes() == original.encode("utf-8")

    def test_rollback_of_create_removes_file(self, store, workspace):
        snapshot_id = store.create("fresh.txt", "create")
        assert store.get(snapshot_id).pre_image == ""
        workspace.write_text("fresh.txt", "hello")

        assert store.rollback(snapshot_id).success
        assert not (workspace.root / "fresh.txt").exists()

    def test_rollback_unknown_id(self, store):
        result = store.rollback("snap_missing")
        assert not result.success
        assert "not found" in result.message

    def test_post_image_attached_once(self, store):
        snapshot_id = store.create("a.txt", "create")
        store.attach_post_image(snapshot_id, "x")
        with pytest.raises(SnapshotContractError):
            store.attach_post_image(snapshot_id, "y")

    def test_post_image_requires_create(self, store):
        with pytest.raises(SnapshotContractError):
            store.attach_post_image("snap_unknown", "x")

    def test_rollback_file_uses_latest(self, store, workspace):
        workspace.write_text("a.txt", "v1")
        store.create("a.txt", "modify")
        workspace.write_text("a.txt", "v2")
        store.create("a.txt", "modify")
        workspace.write_text("a.txt", "v3")

        assert store.rollback_file("a.txt").success
        assert workspace.read_text("a.txt") == "v2"

    def test_rollback_file_without_history(self, store):
        result = store.rollback_file("nothing.txt")
        assert not result.success


class TestSnapshotQueries:
    """Listing, persistence and pruning"""

    def test_list_by_file_is_chronological(self, store):
        ids = [store.create("a.txt", "modify") for _ in range(3)]
        store.create("b.txt", "modify")

        assert [info.id for info in store.list_by_file("a.txt")] == ids
        assert [info.file_path for info in store.list_all()] == ["a.txt"] * 3 + ["b.txt"]

    def test_snapshots_survive_reload(self, store, workspace):
        workspace.write_text("a.txt", "before")
        snapshot_id = store.create("a.txt", "modify")
        store.attach_post_image(snapshot_id, "after")

        reloaded = SnapshotStore(workspace)
        assert reloaded.load() == 1
        snapshot = reloaded.get(snapshot_id)
        assert snapshot.pre_image == "before"
        assert snapshot.post_image == "after"

    def test_load_skips_corrupt_files(self, store, workspace):
        store.create("a.txt", "create")
        (store.snapshot_dir / "broken.json").write_text("{not json")

        reloaded = SnapshotStore(workspace)
        assert reloaded.load() == 1

    def test_prune_keeps_newest(self, store):
        ids = [store.create("a.txt", "modify") for _ in range(4)]

        result = store.prune("a.txt", keep=1)
        assert result.removed == ids[:3]
        assert result.kept == 1
        assert [info.id for info in store.list_by_file("a.txt")] == ids[3:]
        assert not (store.snapshot_dir / f"{ids[0]}.json").exists()

    def test_paths_outside_root_never_snapshotted(self, store):
        from mutation_guard.services.workspace import WorkspaceViolation

        with pytest.raises(WorkspaceViolation):
            store.create("../escape.txt", "create")
