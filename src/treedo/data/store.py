"""
YAMLStore - the embedded task store.

Holds every workspace, task and setting in one YAML document. Each mutation
is applied to a deep copy of the document and committed with a single atomic
file replace; the in-memory document is swapped only after the write lands,
so a failed or interrupted mutation leaves no partial state behind.
"""

from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Tuple, Union, Iterator

from pydantic import ValidationError

from ..logs import get_logger
from ..models import StoreDocument, TaskRecord, WorkspaceRecord, Workspace, Priority
from ..recovery import FileOperationError, StoreInitError, StoreOperationError
from .io import atomic_write, load_document

log = get_logger("store")


class YAMLStore:
    """Store collaborator consumed by the interactive engine and the CLI."""

    def __init__(self, path: Union[Path, str], document: StoreDocument):
        self.path = Path(path)
        self._doc = document

    @classmethod
    def open(cls, path: Union[Path, str]) -> 'YAMLStore':
        """Open (or create) the store file at ``path``.

        Raises:
            StoreInitError: the file cannot be read or created
            CorruptionError / SchemaVersionError: the file exists but is unusable
        """
        path = Path(path)
        try:
            document = load_document(path)
            if document is None:
                document = StoreDocument()
                atomic_write(path, document.model_dump(mode='json'), create_dirs=True)
                log.info(f"Created new store at {path}")
        except FileOperationError as e:
            log.critical(f"Cannot open store {path}: {e}")
            raise StoreInitError(f"failed to open store {path}: {e}") from e
        return cls(path, document)

    # -------------------- transactions --------------------
    @contextmanager
    def _transaction(self) -> Iterator[StoreDocument]:
        draft = self._doc.model_copy(deep=True)
        yield draft
        atomic_write(self.path, draft.model_dump(mode='json'))
        self._doc = draft

    def _task(self, doc: StoreDocument, task_id: int) -> TaskRecord:
        task = next((t for t in doc.tasks if t.id == task_id), None)
        if task is None:
            raise StoreOperationError(f"task {task_id} not found")
        return task

    def _workspace(self, doc: StoreDocument, workspace_id: int) -> WorkspaceRecord:
        ws = next((w for w in doc.workspaces if w.id == workspace_id), None)
        if ws is None:
            raise StoreOperationError(f"workspace {workspace_id} not found")
        return ws

    @staticmethod
    def _subtree_ids(doc: StoreDocument, task_id: int) -> set:
        ids = {task_id}
        frontier = [task_id]
        while frontier:
            current = frontier.pop()
            for t in doc.tasks:
                if t.parent_id == current and t.id not in ids:
                    ids.add(t.id)
                    frontier.append(t.id)
        return ids

    @staticmethod
    def _next_order(doc: StoreDocument, workspace_id: int, parent_id: Optional[int]) -> int:
        orders = [t.order for t in doc.tasks if t.workspace_id == workspace_id and t.parent_id == parent_id]
        return max(orders, default=-1) + 1

    # -------------------- workspaces --------------------
    def list_workspaces(self) -> List[Workspace]:
        result = []
        for ws in sorted(self._doc.workspaces, key=lambda w: w.order):
            tasks = [t for t in self._doc.tasks if t.workspace_id == ws.id]
            result.append(Workspace(
                id=ws.id,
                name=ws.name,
                order=ws.order,
                task_count=len(tasks),
                completed_count=sum(1 for t in tasks if t.completed),
            ))
        return result

    def create_workspace(self, name: str) -> int:
        with self._transaction() as doc:
            order = max((w.order for w in doc.workspaces), default=-1) + 1
            try:
                ws = WorkspaceRecord(id=doc.next_workspace_id, name=name, order=order)
            except ValidationError as e:
                raise StoreOperationError(f"invalid workspace: {e.errors()[0]['msg']}") from e
            doc.workspaces.append(ws)
            doc.next_workspace_id += 1
        log.debug(f"Created workspace {ws.id} ({ws.name!r})")
        return ws.id

    def rename_workspace(self, workspace_id: int, name: str) -> None:
        name = name.strip()
        if not name:
            raise StoreOperationError("workspace name must not be empty")
        with self._transaction() as doc:
            self._workspace(doc, workspace_id).name = name
        log.debug(f"Renamed workspace {workspace_id} to {name!r}")

    def delete_workspace(self, workspace_id: int) -> None:
        with self._transaction() as doc:
            self._workspace(doc, workspace_id)
            doc.workspaces = [w for w in doc.workspaces if w.id != workspace_id]
            doc.tasks = [t for t in doc.tasks if t.workspace_id != workspace_id]
        log.debug(f"Deleted workspace {workspace_id} and its tasks")

    # -------------------- tasks --------------------
    def list_tasks(self, workspace_id: int) -> List[TaskRecord]:
        """All tasks of a workspace, grouped by parent and in sibling order."""
        tasks = [t.model_copy(deep=True) for t in self._doc.tasks if t.workspace_id == workspace_id]
        tasks.sort(key=lambda t: (t.parent_id is not None, t.parent_id or 0, t.order, t.id))
        return tasks

    def get_task(self, task_id: int) -> TaskRecord:
        return self._task(self._doc, task_id).model_copy(deep=True)

    def create_task(self, workspace_id: int, title: str, parent_id: Optional[int] = None,
                    tags: Optional[List[str]] = None, due_date: str = "",
                    priority: int = Priority.NORMAL) -> int:
        with self._transaction() as doc:
            self._workspace(doc, workspace_id)
            if parent_id is not None:
                parent = self._task(doc, parent_id)
                if parent.workspace_id != workspace_id:
                    raise StoreOperationError(f"parent {parent_id} belongs to another workspace")
            try:
                task = TaskRecord(
                    id=doc.next_task_id,
                    parent_id=parent_id,
                    workspace_id=workspace_id,
                    title=title,
                    tags=list(tags or []),
                    due_date=due_date or "",
                    priority=Priority(priority),
                    order=self._next_order(doc, workspace_id, parent_id),
                    created_at=datetime.now(),
                )
            except (ValidationError, ValueError) as e:
                raise StoreOperationError(f"invalid task: {e}") from e
            doc.tasks.append(task)
            doc.next_task_id += 1
        log.debug(f"Created task {task.id} in workspace {workspace_id} under {parent_id}")
        return task.id

    def update_task(self, task: TaskRecord) -> None:
        """Persist title, completed, tags, due date and priority of ``task``."""
        with self._transaction() as doc:
            stored = self._task(doc, task.id)
            try:
                updated = TaskRecord.model_validate({
                    **stored.model_dump(),
                    'title': task.title,
                    'completed': task.completed,
                    'tags': list(task.tags),
                    'due_date': task.due_date or "",
                    'priority': task.priority,
                })
            except ValidationError as e:
                raise StoreOperationError(f"invalid task: {e.errors()[0]['msg']}") from e
            doc.tasks[doc.tasks.index(stored)] = updated
        log.debug(f"Updated task {task.id}")

    def delete_task(self, task_id: int) -> None:
        with self._transaction() as doc:
            self._task(doc, task_id)
            doomed = self._subtree_ids(doc, task_id)
            doc.tasks = [t for t in doc.tasks if t.id not in doomed]
        log.debug(f"Deleted task {task_id} ({len(doomed)} tasks with subtree)")

    def set_task_completed(self, task_id: int, completed: bool) -> None:
        with self._transaction() as doc:
            self._task(doc, task_id).completed = completed
        log.debug(f"Set task {task_id} completed={completed}")

    def set_tasks_completed(self, task_ids: List[int], completed: bool) -> None:
        """Bulk variant of set_task_completed, committed as one write."""
        with self._transaction() as doc:
            for task_id in task_ids:
                self._task(doc, task_id).completed = completed
        log.debug(f"Set {len(task_ids)} tasks completed={completed}")

    def move_task(self, task_id: int, new_parent_id: Optional[int]) -> None:
        """Reparent a task, appending it after its new siblings."""
        with self._transaction() as doc:
            task = self._task(doc, task_id)
            if new_parent_id is not None:
                parent = self._task(doc, new_parent_id)
                if parent.workspace_id != task.workspace_id:
                    raise StoreOperationError("cannot move a task across workspaces")
                if new_parent_id in self._subtree_ids(doc, task_id):
                    raise StoreOperationError("cannot move a task under its own subtree")
            task.order = self._next_order(doc, task.workspace_id, new_parent_id)
            task.parent_id = new_parent_id
        log.debug(f"Moved task {task_id} under {new_parent_id}")

    def task_stats(self, workspace_id: int) -> Tuple[int, int, int]:
        """Return (total, completed, blocked) counts for a workspace."""
        tasks = [t for t in self._doc.tasks if t.workspace_id == workspace_id]
        return (
            len(tasks),
            sum(1 for t in tasks if t.completed),
            sum(1 for t in tasks if t.priority == Priority.BLOCKED),
        )

    # -------------------- settings --------------------
    def get_setting(self, key: str) -> str:
        return self._doc.settings.get(key, "")

    def set_setting(self, key: str, value: str) -> None:
        with self._transaction() as doc:
            doc.settings[key] = value
        log.debug(f"Setting {key}={value!r}")
