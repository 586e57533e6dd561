from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from enum import Enum, IntEnum
from typing import Optional, List, Dict
import yaml

from .version import APP_SCHEMA_VERSION

class Mode(Enum):
    NORMAL = "normal"
    INSERT = "insert"
    COMMAND = "command"
    SEARCH = "search"

class Pane(Enum):
    TASKS = "tasks"
    WORKSPACES = "workspaces"

class Priority(IntEnum):
    BLOCKED = -1
    NORMAL = 0
    LOW = 1
    HIGH = 2

    @property
    def label(self) -> str:
        return self.name.lower()

    @property
    def icon(self) -> str:
        if self is Priority.HIGH:
            return "^"
        if self is Priority.LOW:
            return "."
        return ""

class BaseYAMLModel(BaseModel):
    """Pydantic model that round-trips through YAML."""

    def to_yaml(self) -> str:
        return yaml.safe_dump(self.model_dump(mode='json'), default_flow_style=False, sort_keys=False, allow_unicode=True)

    @classmethod
    def from_yaml(cls, text: str):
        data = yaml.safe_load(text) or {}
        return cls.model_validate(data)

class TaskRecord(BaseModel):
    """One persisted task. Children are derived, never stored."""

    id: int = Field(description="Opaque id, unique within the store")
    parent_id: Optional[int] = Field(default=None, description="Parent task id, null for a root task")
    workspace_id: int = Field(description="Owning workspace id")
    title: str = Field(description="Human readable title")
    completed: bool = Field(default=False, description="Only authoritative for leaf tasks")
    tags: List[str] = Field(default_factory=list, description="Unique per task, display order preserved")
    due_date: str = Field(default="", description="YYYY-MM-DD or any free-form string; empty when unset")
    priority: Priority = Field(default=Priority.NORMAL, description="-1 blocked, 0 normal, 1 low, 2 high")
    order: int = Field(default=0, description="Sibling order within (workspace, parent)")
    created_at: datetime = Field(default_factory=datetime.now, description="When the task was created")

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("task title must not be empty")
        return v

    @field_validator('tags')
    @classmethod
    def dedupe_tags(cls, v):
        seen = []
        for tag in v:
            tag = tag.strip()
            if tag and tag not in seen:
                seen.append(tag)
        return seen

    @property
    def is_blocked(self) -> bool:
        return self.priority == Priority.BLOCKED

class WorkspaceRecord(BaseModel):
    id: int = Field(description="Workspace id")
    name: str = Field(description="Display name")
    order: int = Field(default=0, description="Position in the workspace list")

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("workspace name must not be empty")
        return v

class Workspace(BaseModel):
    """Workspace as shown in the sidebar, with counters recomputed on load."""

    id: int
    name: str
    order: int = 0
    task_count: int = 0
    completed_count: int = 0

class StoreDocument(BaseYAMLModel):
    """Everything the store persists, written as one YAML document."""

    schema_version: str = Field(default=APP_SCHEMA_VERSION, description="Schema version the file was written with")
    next_workspace_id: int = Field(default=1, description="Next workspace id to hand out")
    next_task_id: int = Field(default=1, description="Next task id to hand out")
    workspaces: List[WorkspaceRecord] = Field(default_factory=list)
    tasks: List[TaskRecord] = Field(default_factory=list)
    settings: Dict[str, str] = Field(default_factory=dict, description="Small persisted preferences")
