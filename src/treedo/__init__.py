"""
treedo - a keyboard-driven terminal task manager.

Tasks nest without limit inside named workspaces; a parent counts as done
once every child is done. Everything lives in one YAML file under
``~/.config/td``.
"""

from .version import VERSION, APP_SCHEMA_VERSION
from .models import (
    Mode,
    Pane,
    Priority,
    TaskRecord,
    Workspace,
    StoreDocument,
)
from .tree import TaskTree
from .data import YAMLStore
from .engine import Engine, KeyPress

__version__ = VERSION

__all__ = [
    "VERSION",
    "APP_SCHEMA_VERSION",
    "Mode",
    "Pane",
    "Priority",
    "TaskRecord",
    "Workspace",
    "StoreDocument",
    "TaskTree",
    "YAMLStore",
    "Engine",
    "KeyPress",
]
