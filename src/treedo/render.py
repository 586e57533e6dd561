"""
Frame building from an engine snapshot.

Every function here is read-only over the snapshot and returns rich Text;
layout (widths, heights) is supplied by the caller.
"""

from datetime import date, datetime
from typing import List, Optional

from rich.style import Style
from rich.text import Text

from .engine import Snapshot
from .models import Mode, Pane, Priority, TaskRecord
from .projection import FlatRow
from .theme import Theme

QUOTE = "keep the noise outside"
INFO_PANEL_HEIGHT = 5
MODE_NAMES = {
    Mode.NORMAL: "NORMAL",
    Mode.INSERT: "INSERT",
    Mode.COMMAND: "COMMAND",
    Mode.SEARCH: "SEARCH",
}
HELP_LINES = [
    "Navigation",
    "  j/k or arrows  move cursor",
    "  tab             switch pane",
    "  enter           open workspace / toggle task",
    "  gg / G          top / bottom",
    "",
    "Tasks",
    "  a / A           add task / add subtask",
    "  i               edit task",
    "  space / x       toggle task",
    "  dd              delete task",
    "  h/l             collapse / expand",
    "  > / <           indent / unindent",
    "  m               toggle details panel",
    "  ?               search",
    "",
    "Workspaces",
    "  W               add workspace",
    "  R               rename workspace",
    "  X               delete workspace",
    "",
    "Commands",
    "  /help           show this screen",
    "  /search <q>     filter tasks",
    "  /ws add <name>  create workspace",
    "  /due /tag /priority /clear",
    "  /scheme list    list themes",
    "  /settings city <name>",
    "  /settings weather on|off",
    "  /settings unit c|f",
    "",
    "Press H or Esc to close.",
]


def command_help() -> str:
    return ":q  /help  /ws add <name>  /ws rename <name>  /ws delete  /ws <name|#>  /search <query>  /info on|off"


def format_tags(tags: List[str]) -> str:
    cleaned = []
    for tag in tags:
        tag = tag.strip()
        if not tag:
            continue
        cleaned.append(tag if tag.startswith("#") else "#" + tag)
    return " ".join(cleaned)


def truncate(text: str, width: int) -> str:
    if width <= 0:
        return ""
    text = text.split("\n", 1)[0]
    return text[:width]


def checkbox_and_progress(snap: Snapshot, task: TaskRecord) -> tuple:
    if task.priority == Priority.BLOCKED:
        return "✖", ""
    tree = snap.full_tree
    if tree.has_children(task.id):
        done, total = tree.progress(task.id)
        return ("☑" if done == total else "☐"), f"{done}/{total}"
    return ("☑" if task.completed else "☐"), ""


def task_line(snap: Snapshot, row: FlatRow, width: int) -> Text:
    theme = snap.theme
    task = snap.tree.get(row.task_id)
    marker = " "
    if row.has_children:
        marker = "v" if row.expanded else ">"
    checkbox, progress = checkbox_and_progress(snap, task)

    meta = []
    if progress:
        meta.append(f"[{progress}]")
    if task.tags:
        meta.append(format_tags(task.tags))
    meta_str = " ".join(meta)

    left = f"{'  ' * row.depth}{marker} {checkbox} {task.title}".rstrip()
    right = " ".join(part for part in (task.priority.icon, task.due_date) if part)

    avail = width - (len(right) + 1 if right else 0)
    full_left = f"{left} {meta_str}" if meta_str else left
    if len(full_left) > avail:
        full_left = truncate(full_left, max(0, avail))
    line = Text(full_left)
    if meta_str and len(full_left) > len(left):
        line.stylize(Style(color=theme.dim), len(left) + 1, len(full_left))
    if right:
        line.append(" " * max(1, width - len(full_left) - len(right)))
        line.append(right)

    if task.priority == Priority.BLOCKED:
        line.stylize(Style(color=theme.dim))
    elif snap.full_tree.is_complete(task.id):
        line.stylize(Style(color=theme.done, strike=True))
    return line


def dashboard(snap: Snapshot, today: Optional[date] = None) -> Text:
    theme = snap.theme
    stats = snap.full_tree.dashboard(today)
    dim, sep = Style(color=theme.dim), Style(color=theme.dim)
    parts = [
        Text.assemble((f"{stats.completed}/{stats.total}", dim), " ",
                      (f"{stats.percent}%", Style(color=theme.accent))),
    ]
    for count, label, color in (
        (stats.due_today, "today", theme.warn),
        (stats.overdue, "overdue", theme.danger),
        (stats.high_priority, "!high", theme.warn),
        (stats.blocked, "blocked", theme.danger),
    ):
        if count:
            parts.append(Text(f"{label}:{count}", Style(color=color)))
    line = Text("[ ", sep)
    line.append_text(Text(" · ", sep).join(parts))
    line.append(" ]", sep)
    return line


def header(snap: Snapshot, width: int, now: Optional[datetime] = None) -> Text:
    theme = snap.theme
    now = now or datetime.now()
    art = "\n".join(truncate(line.rstrip(" "), max(0, width - 2)) for line in snap.header_art.split("\n"))
    lines = [
        Text(QUOTE, Style(color=theme.dim)),
        Text(art, Style(color=theme.header)),
        Text(f"{now:%A, %B} {now.day}, {now.year}", Style(color=theme.text)),
    ]
    if snap.show_dashboard:
        lines.append(dashboard(snap, now.date()))
    return Text("\n").join(lines)


def pane_title(label: str, active: bool, theme: Theme) -> Text:
    if active:
        return Text("▌ " + label, Style(color=theme.accent))
    return Text("  " + label, Style(color=theme.dim))


def sidebar(snap: Snapshot, width: int) -> Text:
    theme = snap.theme
    out = pane_title("Workspaces", snap.pane is Pane.WORKSPACES, theme)
    out.append("\n" + "─" * max(0, width - 2) + "\n", Style(color=theme.border))
    for i, ws in enumerate(snap.workspaces):
        if i == snap.selected_ws:
            out.append(f"» {ws.name}", Style(bgcolor=theme.selection))
        else:
            out.append(f"  {ws.name}")
        out.append("\n")
    return out


def info_panel(snap: Snapshot, width: int) -> Text:
    theme = snap.theme
    row = snap.rows[snap.selected_task] if snap.rows else None
    if row is None:
        return Text()
    task = snap.tree.get(row.task_id)
    panel = Style(bgcolor=theme.info)
    label = Style(color=theme.dim, bgcolor=theme.info)
    value = Style(color=theme.text, bgcolor=theme.info)

    status, status_style = "pending", value
    if snap.full_tree.is_complete(task.id):
        status, status_style = "done", Style(color=theme.done, bgcolor=theme.info)
    priority_style = value
    if task.priority == Priority.BLOCKED:
        priority_style = Style(color=theme.danger, bgcolor=theme.info)
    elif task.priority == Priority.HIGH:
        priority_style = Style(color=theme.warn, bgcolor=theme.info)
    tags = format_tags(task.tags) or "-"
    max_value = max(10, width - 12)
    if len(tags) > max_value:
        tags = tags[:max_value - 3] + "..."

    out = Text("▸ DETAILS".ljust(width), Style(color=theme.bg, bgcolor=theme.accent, bold=True))
    for name, text, style in (
        ("Status", status, status_style),
        ("Priority", task.priority.label, priority_style),
        ("Due", task.due_date or "-", Style(color=theme.accent, bgcolor=theme.info)),
        ("Tags", tags, value),
    ):
        line = Text(f" {name:<9}", label)
        line.append(text, style)
        line.append(" " * max(0, width - len(line.plain)), panel)
        out.append("\n")
        out.append_text(line)
    return out


def help_screen(theme: Theme, height: int) -> Text:
    lines = [Text("Help", Style(color=theme.accent)), Text("")] + [Text(line) for line in HELP_LINES]
    if height > 0:
        lines = lines[:height]
    return Text("\n").join(lines)


def empty_hint(snap: Snapshot) -> Text:
    dim = Style(color=snap.theme.dim)
    first = "no matches" if snap.search_query else "empty list"
    return Text("\n".join([
        first,
        "press a to add a task",
        "press W to add a workspace",
        "or use /ws add <name>",
    ]), dim)


def task_list(snap: Snapshot, width: int, height: int) -> Text:
    theme = snap.theme
    title = pane_title("Todos", snap.pane is Pane.TASKS, theme)
    ws = snap.workspaces[snap.selected_ws] if snap.selected_ws < len(snap.workspaces) else None
    if ws is not None:
        title.append(f"  {ws.name}", Style(color=theme.dim))
    if snap.search_query:
        title.append(f"  [filter: {snap.search_query}]", Style(color=theme.dim))
    out = title
    out.append("\n" + "─" * max(0, width) + "\n", Style(color=theme.border))

    if snap.show_art_list:
        body = Text("\n".join(truncate(line, width) for line in snap.art_lines) or "no ascii art found")
    elif snap.show_help:
        body = help_screen(theme, height - 2)
    elif not snap.rows:
        body = empty_hint(snap)
    else:
        start, end = snap.window
        lines = []
        for row in snap.rows[start:end]:
            line = task_line(snap, row, width)
            if row.index == snap.selected_task:
                line.pad_right(max(0, width - len(line.plain)))
                line.stylize(Style(bgcolor=theme.cursor))
            lines.append(line)
        body = Text("\n").join(lines)
        if snap.show_info:
            body.append("\n")
            body.append_text(info_panel(snap, width))
    out.append_text(body)

    if snap.mode is Mode.INSERT:
        out.append(f"\n+ {snap.insert_buf}_", Style(color=theme.accent))
    return out


def visible_task_rows(height: int, show_info: bool) -> int:
    """Rows available for tasks in a list pane of ``height`` lines."""
    rows = height - 2
    if show_info:
        rows -= INFO_PANEL_HEIGHT + 1
    return max(1, rows)


def command_line(snap: Snapshot) -> Text:
    theme = snap.theme
    if snap.mode is Mode.COMMAND:
        return Text((snap.command_leader or ":") + snap.command_buf, Style(color=theme.accent))
    if snap.mode is Mode.SEARCH:
        return Text("?" + snap.search_buf, Style(color=theme.accent))
    if snap.message:
        return Text(snap.message, Style(color=theme.accent))
    return Text(command_help(), Style(color=theme.dim))


def status_bar(snap: Snapshot, width: int, now: Optional[datetime] = None) -> Text:
    now = now or datetime.now()
    pane = "WORKSPACES" if snap.pane is Pane.WORKSPACES else "TASKS"
    left = f" {MODE_NAMES[snap.mode]} · {pane} "
    weather = f"{snap.weather_temp} " if snap.weather_enabled else ""
    clock = now.strftime("%I:%M %p")
    if snap.selected_ws < len(snap.workspaces):
        completed, open_, blocked = snap.full_tree.stats()
        right = f" ✔ {completed} ☐ {open_} ✖ {blocked} {weather}{clock} "
    else:
        right = f" {weather}{clock} "
    line = Text(left + " " * max(0, width - len(left) - len(right)) + right)
    line.append("\n")
    line.append_text(command_line(snap))
    return line
