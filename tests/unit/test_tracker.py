import json
from datetime import datetime, timedelta, timezone
from itertools import count
from pathlib import Path

import pytest

from docdrift.changes import ChangeRecord, ChangeRecordStore
from docdrift.config import DEFAULT_STORAGE_KEY
from docdrift.diff import generate_diff, similarity_ratio
from docdrift.persistence import PersistenceError
from docdrift.tracker import ChangeTracker, format_time_ago

FIXED_NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class _MemoryStore:
    def __init__(self, values: dict[str, str] | None = None) -> None:
        self.values = dict(values or {})
        self.writes = 0

    def get(self, key: str) -> str | None:
        return self.values.get(key)

    def set(self, key: str, value: str) -> None:
        self.writes += 1
        self.values[key] = value


class _FailingStore:
    def get(self, key: str) -> str | None:
        raise PersistenceError("disk unavailable")

    def set(self, key: str, value: str) -> None:
        raise PersistenceError("disk unavailable")


def _tracker(root: Path, storage=None) -> tuple[ChangeTracker, ChangeRecordStore]:
    ids = count(1)
    store = ChangeRecordStore(storage if storage is not None else _MemoryStore())
    tracker = ChangeTracker(
        store,
        root,
        clock=lambda: FIXED_NOW,
        id_factory=lambda: f"chg-{next(ids)}",
    )
    return tracker, store


def test_chg_001_creation_is_recorded_as_applied(tmp_path: Path) -> None:
    tracker, _ = _tracker(tmp_path)

    record = tracker.track_file_creation("docs/API.md", "# API\n...")
    stats = tracker.get_change_stats()

    assert record.status == "applied"
    assert record.origin == "automatic"
    assert record.title == "Created API.md"
    assert record.diff is None
    assert (stats.total, stats.applied, stats.pending, stats.reverted) == (1, 1, 0, 0)


def test_chg_002_modification_carries_diff(tmp_path: Path) -> None:
    tracker, _ = _tracker(tmp_path)

    record = tracker.track_file_modification("README.md", "a\nb", "a\nc")

    assert record.type == "modified"
    assert record.diff == "  a\n- b\n+ c\n"


def test_chg_003_manual_action_is_pending_and_apply_writes_file(tmp_path: Path) -> None:
    tracker, _ = _tracker(tmp_path)
    record = tracker.track_manual_action(
        "Fix typo", "Fix a typo in setup docs", "docs/SETUP.md", "Setpu", "Setup"
    )

    result = tracker.apply_change(record.id)

    assert record.origin == "manual"
    assert result.success is True
    assert (tmp_path / "docs" / "SETUP.md").read_text(encoding="utf-8") == "Setup"
    assert tracker.get_change(record.id).status == "applied"


def test_chg_004_apply_twice_is_a_no_op(tmp_path: Path, monkeypatch) -> None:
    tracker, _ = _tracker(tmp_path)
    record = tracker.track_manual_action("Add", "Add guide", "GUIDE.md", None, "guide")
    writes: list[str] = []
    original_write_text = Path.write_text

    def _counting_write_text(self, data, *args, **kwargs):
        writes.append(str(self))
        return original_write_text(self, data, *args, **kwargs)

    monkeypatch.setattr("pathlib.Path.write_text", _counting_write_text)

    first = tracker.apply_change(record.id)
    second = tracker.apply_change(record.id)

    assert bool(first) is True
    assert bool(second) is False
    assert "already applied" in second.message
    assert writes == [str(tmp_path.resolve() / "GUIDE.md")]
    assert tracker.get_change(record.id).status == "applied"


def test_chg_005_revert_restores_original_content(tmp_path: Path) -> None:
    tracker, _ = _tracker(tmp_path)
    (tmp_path / "README.md").write_text("new", encoding="utf-8")
    record = tracker.track_file_modification("README.md", "old", "new")

    result = tracker.revert_change(record.id)

    assert result.success is True
    assert (tmp_path / "README.md").read_text(encoding="utf-8") == "old"
    assert tracker.get_change(record.id).status == "reverted"


def test_chg_006_apply_then_revert_of_creation_deletes_file(tmp_path: Path) -> None:
    tracker, _ = _tracker(tmp_path)
    record = tracker.track_file_creation("docs/API.md", "# API\n")

    reverted = tracker.revert_change(record.id)
    reapplied = tracker.apply_change(record.id)
    reverted_again = tracker.revert_change(record.id)

    assert reverted.success and reapplied.success and reverted_again.success
    assert not (tmp_path / "docs" / "API.md").exists()
    assert tracker.get_change(record.id).status == "reverted"


def test_chg_007_revert_of_non_applied_change_does_not_touch_disk(
    tmp_path: Path,
) -> None:
    tracker, _ = _tracker(tmp_path)
    (tmp_path / "NOTES.md").write_text("keep", encoding="utf-8")
    record = tracker.track_manual_action("Edit", "Edit notes", "NOTES.md", "keep", "x")

    result = tracker.revert_change(record.id)

    assert result.success is False
    assert (tmp_path / "NOTES.md").read_text(encoding="utf-8") == "keep"
    assert tracker.get_change(record.id).status == "pending"


def test_chg_008_unknown_change_id_reports_not_found(tmp_path: Path) -> None:
    tracker, _ = _tracker(tmp_path)

    for result in (
        tracker.apply_change("missing"),
        tracker.revert_change("missing"),
        tracker.view_diff("missing"),
    ):
        assert result.success is False
        assert "missing" in result.message


def test_chg_009_clear_then_activities_is_empty(tmp_path: Path) -> None:
    storage = _MemoryStore()
    tracker, _ = _tracker(tmp_path, storage)
    tracker.track_file_creation("README.md", "# Readme")

    result = tracker.clear_all_changes()

    assert result.success is True
    assert tracker.get_activities() == []
    assert json.loads(storage.values[DEFAULT_STORAGE_KEY]) == []


def test_chg_010_records_reload_from_storage_newest_first(tmp_path: Path) -> None:
    storage = _MemoryStore()
    tracker, _ = _tracker(tmp_path, storage)
    tracker.track_file_creation("docs/A.md", "a")
    tracker.track_file_creation("docs/B.md", "b")

    reloaded = ChangeRecordStore(storage)

    assert [record.file_path for record in reloaded.records] == ["docs/B.md", "docs/A.md"]
    assert reloaded.records[0].timestamp == FIXED_NOW
    assert reloaded.records[0].metadata["generated_by"] == "docdrift"


def test_chg_011_corrupt_storage_degrades_to_empty_history(tmp_path: Path) -> None:
    storage = _MemoryStore({DEFAULT_STORAGE_KEY: "{not json"})

    tracker, store = _tracker(tmp_path, storage)

    assert store.records == []
    assert tracker.get_change_stats().total == 0


def test_chg_012_failed_persistence_keeps_memory_state(tmp_path: Path) -> None:
    tracker, store = _tracker(tmp_path, _FailingStore())

    record = tracker.track_file_creation("README.md", "# Readme")
    result = tracker.revert_change(record.id)

    assert [item.id for item in store.records] == [record.id]
    assert result.success is True
    assert "history not saved" in result.message


def test_chg_013_path_outside_workspace_is_rejected(tmp_path: Path) -> None:
    tracker, _ = _tracker(tmp_path / "ws")
    (tmp_path / "ws").mkdir()
    record = tracker.track_manual_action("Escape", "Escape", "../evil.md", None, "x")

    result = tracker.apply_change(record.id)

    assert result.success is False
    assert not (tmp_path / "evil.md").exists()


def test_chg_014_no_workspace_root_fails_apply(tmp_path: Path) -> None:
    tracker, _ = _tracker(None)  # type: ignore[arg-type]
    record = tracker.track_manual_action("Add", "Add", "A.md", None, "x")

    result = tracker.apply_change(record.id)

    assert result.success is False
    assert "No workspace" in result.message
    assert tracker.get_change(record.id).status == "pending"


def test_chg_015_deleted_record_removes_and_restores_file(tmp_path: Path) -> None:
    tracker, _ = _tracker(tmp_path)
    (tmp_path / "OLD.md").write_text("legacy", encoding="utf-8")
    record = tracker.track_manual_action("Remove", "Remove old doc", "OLD.md", "legacy")
    record.type = "deleted"

    applied = tracker.apply_change(record.id)
    removed = not (tmp_path / "OLD.md").exists()
    reverted = tracker.revert_change(record.id)

    assert applied.success and removed and reverted.success
    assert (tmp_path / "OLD.md").read_text(encoding="utf-8") == "legacy"


def test_chg_016_write_document_tracks_new_and_updated_files(tmp_path: Path) -> None:
    tracker, _ = _tracker(tmp_path)

    created = tracker.write_document("docs/API.md", "# API\n", doc_type="api")
    updated = tracker.write_document("docs/API.md", "# API v2\n", doc_type="api")

    first = tracker.get_change(created.change_id)
    second = tracker.get_change(updated.change_id)
    assert first.type == "content-generated"
    assert first.metadata["doc_type"] == "api"
    assert second.type == "content-updated"
    assert second.original_content == "# API\n"
    assert second.diff == "- # API\n+ # API v2\n  \n"
    assert (tmp_path / "docs" / "API.md").read_text(encoding="utf-8") == "# API v2\n"


def test_chg_017_view_diff_renders_markdown_document(tmp_path: Path) -> None:
    tracker, _ = _tracker(tmp_path)
    record = tracker.track_file_modification("README.md", "hello", "hallo")

    result = tracker.view_diff(record.id)

    assert result.success is True
    assert result.document.startswith("# Diff: Updated README.md")
    assert "**Similarity:** 80%" in result.document
    assert "```diff\n- hello\n+ hallo\n```" in result.document
    assert '"generated_by": "docdrift"' in result.document


def test_chg_018_activities_and_filters_project_records(tmp_path: Path) -> None:
    tracker, _ = _tracker(tmp_path)
    tracker.track_file_creation("docs/A.md", "a")
    manual = tracker.track_manual_action("Edit", "Edit B", "docs/B.md", None, "b")

    activities = tracker.get_activities()

    assert [entry.id for entry in activities] == [manual.id, "chg-1"]
    assert activities[0].type == "Manual"
    assert activities[0].status == "Pending"
    assert activities[1].when == "just now"
    assert [r.id for r in tracker.filter_changes(status="pending")] == [manual.id]
    assert [r.id for r in tracker.filter_changes(origin="automatic")] == ["chg-1"]
    assert tracker.filter_changes(change_type="modified") == []


def test_chg_019_time_ago_buckets() -> None:
    assert format_time_ago(FIXED_NOW - timedelta(seconds=30), FIXED_NOW) == "just now"
    assert format_time_ago(FIXED_NOW - timedelta(minutes=5), FIXED_NOW) == "5m ago"
    assert format_time_ago(FIXED_NOW - timedelta(hours=3), FIXED_NOW) == "3h ago"
    assert format_time_ago(FIXED_NOW - timedelta(days=2), FIXED_NOW) == "2d ago"
    assert format_time_ago(FIXED_NOW - timedelta(days=30), FIXED_NOW) == "2026-01-30"


def test_chg_020_positional_diff_emits_unpaired_lines() -> None:
    assert generate_diff("a\nb\nc", "a\nx") == "  a\n- b\n+ x\n- c\n"
    assert generate_diff("a", "a\nb") == "  a\n+ b\n"
    assert generate_diff("same", "same") == "  same\n"
    assert similarity_ratio("abc", "abc") == 1.0


def test_chg_021_non_json_metadata_is_stored_as_text(tmp_path: Path) -> None:
    storage = _MemoryStore()
    tracker, _ = _tracker(tmp_path, storage)

    first = tracker.track_file_creation(
        "docs/A.md", "# A", metadata={"source": Path("x")}
    )
    tracker.track_file_creation("docs/B.md", "# B")
    reloaded = ChangeRecordStore(storage)

    assert first.metadata["source"] == "x"
    assert [record.id for record in reloaded.records] == ["chg-2", "chg-1"]
    assert reloaded.records[1].metadata["source"] == "x"


def test_chg_022_unserializable_record_is_rejected_without_blocking_later_saves(
    tmp_path: Path,
) -> None:
    storage = _MemoryStore()
    store = ChangeRecordStore(storage)
    broken = ChangeRecord(
        id="bad",
        type="created",
        origin="automatic",
        status="applied",
        title="Created A.md",
        description="Generated new documentation file: A.md",
        file_path="docs/A.md",
        timestamp=FIXED_NOW,
        new_content="# A",
        metadata={"source": object()},
    )

    with pytest.raises(PersistenceError):
        store.add(broken)
    tracker = ChangeTracker(
        store, tmp_path, clock=lambda: FIXED_NOW, id_factory=lambda: "good"
    )
    tracker.track_file_creation("docs/B.md", "# B")

    assert [record.id for record in store.records] == ["good"]
    assert [record.id for record in ChangeRecordStore(storage).records] == ["good"]
