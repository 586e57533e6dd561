"""Unit tests for Pydantic models."""

import pytest
from pydantic import ValidationError

from treedo.models import Priority, StoreDocument, TaskRecord, WorkspaceRecord
from treedo.version import APP_SCHEMA_VERSION


class TestPriority:
    """Test priority values and display helpers."""

    def test_values(self):
        assert [p.value for p in (Priority.BLOCKED, Priority.NORMAL, Priority.LOW, Priority.HIGH)] == [-1, 0, 1, 2]

    def test_label_and_icon(self):
        assert Priority.HIGH.label == "high"
        assert Priority.HIGH.icon == "^"
        assert Priority.LOW.icon == "."
        assert Priority.NORMAL.icon == ""
        assert Priority.BLOCKED.icon == ""


class TestTaskRecord:
    """Test TaskRecord validation."""

    def test_title_stripped(self):
        task = TaskRecord(id=1, workspace_id=1, title="  Buy milk ")
        assert task.title == "Buy milk"
        assert task.parent_id is None
        assert task.due_date == ""
        assert task.priority == Priority.NORMAL

    def test_empty_title_rejected(self):
        with pytest.raises(ValidationError, match="must not be empty"):
            TaskRecord(id=1, workspace_id=1, title="   ")

    def test_tags_deduplicated_in_order(self):
        task = TaskRecord(id=1, workspace_id=1, title="t", tags=["b", " a", "b", "", "a"])
        assert task.tags == ["b", "a"]

    def test_unknown_priority_rejected(self):
        with pytest.raises(ValidationError):
            TaskRecord(id=1, workspace_id=1, title="t", priority=5)

    def test_is_blocked(self):
        assert TaskRecord(id=1, workspace_id=1, title="t", priority=-1).is_blocked


class TestWorkspaceRecord:
    """Test WorkspaceRecord validation."""

    def test_name(self):
        assert WorkspaceRecord(id=1, name=" Home ").name == "Home"
        with pytest.raises(ValidationError):
            WorkspaceRecord(id=1, name="")


class TestStoreDocument:
    """Test the persisted document."""

    def test_defaults(self):
        doc = StoreDocument()
        assert doc.schema_version == APP_SCHEMA_VERSION
        assert doc.next_task_id == 1
        assert doc.settings == {}

    def test_yaml_round_trip(self):
        doc = StoreDocument(
            workspaces=[WorkspaceRecord(id=1, name="Home")],
            tasks=[TaskRecord(id=1, workspace_id=1, title="Sweep", tags=["chore"], priority=Priority.LOW)],
            settings={'theme': 'slate'},
        )
        loaded = StoreDocument.from_yaml(doc.to_yaml())
        assert loaded == doc
