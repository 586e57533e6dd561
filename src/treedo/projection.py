"""
Tree-to-list projection and cursor/scroll bookkeeping.
"""

from dataclasses import dataclass
from typing import List, Optional, Set, Tuple

from .tree import TaskTree


@dataclass(frozen=True)
class FlatRow:
    """One display line of the task list."""

    task_id: int
    depth: int
    expanded: bool
    has_children: bool
    index: int


@dataclass
class Projection:
    rows: List[FlatRow]
    tree: TaskTree

    def __len__(self) -> int:
        return len(self.rows)

    def row(self, index: int) -> Optional[FlatRow]:
        if 0 <= index < len(self.rows):
            return self.rows[index]
        return None


def flatten(tree: TaskTree, expanded: Set[int], query: str = "") -> Projection:
    """Depth-first pre-order rows for ``tree``.

    Roots always show their children; other nodes only when their id is in
    ``expanded``. An active query filters a clone of the tree and shows every
    surviving branch open.
    """
    query = query.strip()
    source = tree.filtered(query) if query else tree
    rows: List[FlatRow] = []

    def walk(task_ids: List[int], depth: int, is_root: bool) -> None:
        for tid in task_ids:
            has_children = source.has_children(tid)
            open_ = bool(query) or is_root or tid in expanded
            rows.append(FlatRow(
                task_id=tid,
                depth=depth,
                expanded=has_children and open_,
                has_children=has_children,
                index=len(rows),
            ))
            if has_children and open_:
                walk(source.children(tid), depth + 1, False)

    walk(source.roots, 0, True)
    return Projection(rows=rows, tree=source)


def clamp_selection(selected: int, total: int) -> int:
    """Keep the cursor within ``[0, total - 1]``, or 0 for an empty list."""
    if total <= 0:
        return 0
    return max(0, min(selected, total - 1))


@dataclass
class Viewport:
    """Scroll offset of the task list."""

    offset: int = 0

    def follow(self, selected: int, total: int, visible: int) -> int:
        """Scroll so ``selected`` is visible, then clamp to the valid range."""
        visible = max(1, visible)
        if selected < self.offset:
            self.offset = selected
        elif selected >= self.offset + visible:
            self.offset = selected - visible + 1
        max_offset = max(0, total - visible)
        self.offset = max(0, min(self.offset, max_offset))
        return self.offset

    def window(self, total: int, visible: int) -> Tuple[int, int]:
        """Half-open ``(start, end)`` row range currently on screen."""
        start = self.offset
        return start, min(total, start + max(1, visible))

    def reset(self) -> None:
        self.offset = 0
