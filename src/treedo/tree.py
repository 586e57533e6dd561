"""
In-memory task tree for one workspace.

Tasks live in an arena keyed by id; parent/child relations are id lists, so a
tree can be rebuilt from the store's flat records after every write without
any back-references to untangle.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from .models import TaskRecord, Priority


@dataclass
class DashboardStats:
    total: int = 0
    completed: int = 0
    due_today: int = 0
    overdue: int = 0
    high_priority: int = 0
    blocked: int = 0
    today_titles: List[str] = field(default_factory=list)

    @property
    def percent(self) -> int:
        if self.total == 0:
            return 0
        return (self.completed * 100) // self.total


class TaskTree:
    """A forest of tasks indexed by id."""

    def __init__(self, tasks: Dict[int, TaskRecord], children: Dict[Optional[int], List[int]]):
        self._tasks = tasks
        self._children = children

    @classmethod
    def build(cls, records: Iterable[TaskRecord]) -> 'TaskTree':
        """Assemble the forest from flat records, siblings in ``order``.

        Records whose parent is missing are unreachable and left out.
        """
        records = sorted(records, key=lambda r: (r.order, r.id))
        tasks = {r.id: r for r in records}
        children: Dict[Optional[int], List[int]] = {None: []}
        for r in records:
            if r.parent_id is not None and r.parent_id not in tasks:
                continue
            children.setdefault(r.parent_id, []).append(r.id)
        reachable = {}
        stack = list(children[None])
        while stack:
            task_id = stack.pop()
            reachable[task_id] = tasks[task_id]
            stack.extend(children.get(task_id, []))
        pruned = {k: v for k, v in children.items() if k is None or k in reachable}
        return cls(reachable, pruned)

    @classmethod
    def empty(cls) -> 'TaskTree':
        return cls({}, {None: []})

    def __len__(self) -> int:
        return len(self._tasks)

    def __contains__(self, task_id) -> bool:
        return task_id in self._tasks

    def get(self, task_id: int) -> Optional[TaskRecord]:
        return self._tasks.get(task_id)

    @property
    def roots(self) -> List[int]:
        return list(self._children.get(None, []))

    def children(self, task_id: int) -> List[int]:
        return list(self._children.get(task_id, []))

    def has_children(self, task_id: int) -> bool:
        return bool(self._children.get(task_id))

    def walk(self, start: Optional[int] = None) -> Iterator[Tuple[int, int]]:
        """Pre-order ``(task_id, depth)`` over the whole forest or a subtree's descendants."""
        stack = [(tid, 0) for tid in reversed(self._children.get(start, []))]
        while stack:
            task_id, depth = stack.pop()
            yield task_id, depth
            stack.extend((cid, depth + 1) for cid in reversed(self._children.get(task_id, [])))

    def descendants(self, task_id: int) -> List[int]:
        return [tid for tid, _ in self.walk(task_id)]

    def is_descendant(self, ancestor_id: int, task_id: int) -> bool:
        """True when ``task_id`` is ``ancestor_id`` itself or lies in its subtree."""
        if ancestor_id == task_id:
            return True
        return task_id in self.descendants(ancestor_id)

    def is_complete(self, task_id: int) -> bool:
        task = self._tasks[task_id]
        if task.priority == Priority.BLOCKED:
            return False
        kids = self._children.get(task_id)
        if not kids:
            return task.completed
        return all(self.is_complete(cid) for cid in kids)

    def progress(self, task_id: int) -> Tuple[int, int]:
        """(completed children, total children) of a task."""
        kids = self._children.get(task_id, [])
        return sum(1 for cid in kids if self.is_complete(cid)), len(kids)

    def matches(self, task_id: int, query: str) -> bool:
        task = self._tasks[task_id]
        if query in task.title.lower():
            return True
        return any(query in tag.lower() for tag in task.tags)

    def filtered(self, query: str) -> 'TaskTree':
        """Structural clone keeping matches and every ancestor of a match.

        The source tree is left untouched.
        """
        query = query.strip().lower()
        if not query:
            return TaskTree(dict(self._tasks), {k: list(v) for k, v in self._children.items()})

        tasks: Dict[int, TaskRecord] = {}
        children: Dict[Optional[int], List[int]] = {}

        def keep(parent: Optional[int]) -> List[int]:
            survivors = []
            for tid in self._children.get(parent, []):
                kept_children = keep(tid)
                if kept_children or self.matches(tid, query):
                    tasks[tid] = self._tasks[tid]
                    if kept_children:
                        children[tid] = kept_children
                    survivors.append(tid)
            return survivors

        children[None] = keep(None)
        return TaskTree(tasks, children)

    def stats(self) -> Tuple[int, int, int]:
        """(completed, open, blocked) across every task in the tree."""
        completed = open_ = blocked = 0
        for tid, _ in self.walk():
            if self._tasks[tid].priority == Priority.BLOCKED:
                blocked += 1
            elif self.is_complete(tid):
                completed += 1
            else:
                open_ += 1
        return completed, open_, blocked

    def dashboard(self, today: Optional[date] = None) -> DashboardStats:
        today_str = (today or date.today()).isoformat()
        stats = DashboardStats()
        for tid, _ in self.walk():
            task = self._tasks[tid]
            stats.total += 1
            if self.is_complete(tid):
                stats.completed += 1
                continue
            if task.due_date == today_str:
                stats.due_today += 1
                if len(stats.today_titles) < 3:
                    stats.today_titles.append(task.title)
            elif task.due_date and task.due_date < today_str:
                stats.overdue += 1
            if task.priority >= Priority.HIGH:
                stats.high_priority += 1
            if task.priority == Priority.BLOCKED:
                stats.blocked += 1
        return stats
