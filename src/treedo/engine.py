"""
Interactive view/state engine.

Routes key events to the handler of the current mode, applies mutations
through the store, and re-derives the tree and its flat projection from the
store after every write. Nothing here paints; the UI reads ``snapshot()``.
"""

import time
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, List, NamedTuple, Optional, Set

from .art import ArtGallery
from .commands import CommandDispatcher
from .config import AppConfig
from .inline import parse_task_input
from .logs import get_logger
from .models import Mode, Pane, TaskRecord, Workspace
from .projection import FlatRow, Viewport, clamp_selection, flatten
from .recovery import RecoverableError
from .theme import Theme, default_theme, get_scheme
from .tree import TaskTree
from .weather import UNKNOWN_TEMP, WeatherRequest, WeatherResult

log = get_logger("engine")

CHORD_WINDOW = 0.8
CHORD_IDLE_EXPIRY = 1.0
MESSAGE_TICKS = 6
CHORD_KEYS = ("d", "g")


class KeyPress(NamedTuple):
    """A key event: the key name plus the printable character, if any."""

    key: str
    character: Optional[str] = None

    @classmethod
    def of(cls, text: str) -> 'KeyPress':
        """Key event for a single printable character or a named key."""
        if len(text) == 1:
            return cls("space" if text == " " else text, text)
        return cls(text, None)

    @property
    def printable(self) -> Optional[str]:
        if self.character and len(self.character) == 1 and self.character.isprintable():
            return self.character
        return None

    @property
    def token(self) -> str:
        char = self.printable
        if char and not char.isspace():
            return char
        return self.key


class PendingChord:
    """First key of a two-key sequence and when it was pressed."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self.key: Optional[str] = None
        self.at = 0.0

    def press(self, key: str) -> bool:
        """Record ``key``; True when it completes the sequence."""
        now = self._clock()
        if self.key == key and now - self.at < CHORD_WINDOW:
            self.clear()
            return True
        self.key = key
        self.at = now
        return False

    def clear(self) -> None:
        self.key = None

    def expire(self) -> None:
        if self.key is not None and self._clock() - self.at > CHORD_IDLE_EXPIRY:
            self.clear()


@dataclass
class ViewState:
    mode: Mode = Mode.NORMAL
    pane: Pane = Pane.TASKS
    selected_ws: int = 0
    selected_task: int = 0
    expanded: Set[int] = field(default_factory=set)
    command_buf: str = ""
    command_leader: str = ":"
    search_buf: str = ""
    insert_buf: str = ""
    search_query: str = ""
    message: str = ""
    message_ticks: int = 0


@dataclass
class WeatherState:
    enabled: bool = False
    city: str = ""
    lat: float = 0.0
    lon: float = 0.0
    unit: str = "f"
    temp: str = UNKNOWN_TEMP
    checked_at: Optional[float] = None
    in_flight: bool = False


@dataclass(frozen=True)
class Snapshot:
    """Read-only view of the engine for one rendered frame."""

    mode: Mode
    pane: Pane
    workspaces: List[Workspace]
    selected_ws: int
    rows: List[FlatRow]
    tree: TaskTree
    full_tree: TaskTree
    selected_task: int
    scroll: int
    window: tuple
    message: str
    command_leader: str
    command_buf: str
    search_buf: str
    insert_buf: str
    search_query: str
    theme: Theme
    show_info: bool
    show_help: bool
    show_dashboard: bool
    show_art_list: bool
    art_lines: List[str]
    header_art: str
    weather_enabled: bool
    weather_temp: str


class Engine:
    """Modal input state machine over one store."""

    def __init__(self, store, config: Optional[AppConfig] = None, gallery: Optional[ArtGallery] = None,
                 clock: Callable[[], float] = time.monotonic, today: Callable[[], date] = date.today):
        self.store = store
        self.config = config or AppConfig()
        self.gallery = gallery or ArtGallery()
        self.clock = clock
        self.today = today
        self.state = ViewState()
        self.weather = WeatherState()
        self.theme = default_theme()
        self.pending = PendingChord(clock)
        self.viewport = Viewport()
        self.commands = CommandDispatcher(self)

        self.workspaces: List[Workspace] = []
        self.tree = TaskTree.empty()
        self.projection = flatten(self.tree, set())

        self.new_task_parent: Optional[int] = None
        self.editing_task_id: Optional[int] = None
        self.show_info = False
        self.show_help = False
        self.show_dashboard = True
        self.show_art_list = False
        self.list_height = 20
        self.quit_requested = False

    def start(self) -> None:
        self.load_settings()
        self.load_workspaces()

    # -------------------- loading --------------------
    def load_settings(self) -> None:
        get = self.store.get_setting
        self.weather.enabled = get("weather_enabled") == "1"
        self.weather.city = get("weather_city")
        for attr, key in (("lat", "weather_lat"), ("lon", "weather_lon")):
            raw = get(key)
            if raw:
                try:
                    setattr(self.weather, attr, float(raw))
                except ValueError:
                    log.warning(f"Ignoring malformed setting {key}={raw!r}")
        unit = get("weather_unit")
        if unit:
            self.weather.unit = unit
        theme = get_scheme(get("theme")) if get("theme") else None
        if theme is not None:
            self.theme = theme

    def load_workspaces(self) -> None:
        self.workspaces = self.store.list_workspaces()
        if not self.workspaces:
            self.state.selected_ws = 0
            self.tree = TaskTree.empty()
            self.reproject()
            return
        if self.state.selected_ws >= len(self.workspaces):
            self.state.selected_ws = len(self.workspaces) - 1
        self.load_tasks()

    def load_tasks(self) -> None:
        """Rebuild the tree from the store's canonical state, then re-project."""
        ws = self.current_workspace()
        if ws is None:
            self.tree = TaskTree.empty()
        else:
            self.tree = TaskTree.build(self.store.list_tasks(ws.id))
        self.reproject()

    def reproject(self) -> None:
        self.projection = flatten(self.tree, self.state.expanded, self.state.search_query)
        self.state.selected_task = clamp_selection(self.state.selected_task, len(self.projection))

    def current_workspace(self) -> Optional[Workspace]:
        if 0 <= self.state.selected_ws < len(self.workspaces):
            return self.workspaces[self.state.selected_ws]
        return None

    def selected_row(self) -> Optional[FlatRow]:
        return self.projection.row(self.state.selected_task)

    def selected_task(self) -> Optional[TaskRecord]:
        row = self.selected_row()
        if row is None:
            return None
        return self.tree.get(row.task_id)

    def _mutate(self, operation, *args) -> bool:
        """Run one store write; on failure the view keeps the store's state."""
        try:
            operation(*args)
            return True
        except RecoverableError as e:
            name = getattr(operation, '__name__', 'store operation')
            log.warning(f"{name} failed: {e}")
            self.set_message(f"error: {e}")
            return False

    def save_setting(self, key: str, value: str) -> bool:
        return self._mutate(self.store.set_setting, key, value)

    def set_weather_city(self, city: str) -> None:
        """Switch city; cached coordinates belong to the old one."""
        w = self.weather
        w.city = city
        w.lat = w.lon = 0.0
        self.save_setting("weather_city", city)
        self.save_setting("weather_lat", "")
        self.save_setting("weather_lon", "")
        self.refresh_weather()

    # -------------------- messages & ticks --------------------
    def set_message(self, message: str, ticks: int = MESSAGE_TICKS) -> None:
        self.state.message = message
        self.state.message_ticks = ticks

    def tick(self) -> Optional[WeatherRequest]:
        """Once-a-second housekeeping; returns a weather request when one is due."""
        self.pending.expire()
        if self.state.message_ticks > 0:
            self.state.message_ticks -= 1
            if self.state.message_ticks == 0:
                self.state.message = ""
        return self._weather_due()

    def refresh_weather(self) -> None:
        self.weather.checked_at = None

    def _weather_due(self) -> Optional[WeatherRequest]:
        w = self.weather
        if not w.enabled or w.in_flight:
            return None
        if w.checked_at is not None and self.clock() - w.checked_at < self.config.weather_cooldown:
            return None
        if not w.city and (w.lat == 0 or w.lon == 0):
            return None
        w.in_flight = True
        return WeatherRequest(city=w.city, lat=w.lat, lon=w.lon, unit=w.unit)

    def apply_weather(self, result: WeatherResult) -> None:
        w = self.weather
        w.in_flight = False
        w.checked_at = self.clock()
        if not result.ok:
            self.set_message("weather unavailable")
            return
        w.temp = result.temp
        if (result.lat or result.lon) and (result.lat, result.lon) != (w.lat, w.lon):
            w.lat, w.lon = result.lat, result.lon
            self.save_setting("weather_lat", f"{w.lat:.4f}")
            self.save_setting("weather_lon", f"{w.lon:.4f}")

    # -------------------- key routing --------------------
    def handle_key(self, press: KeyPress) -> None:
        mode = self.state.mode
        if mode is Mode.NORMAL:
            self._handle_normal(press)
        elif mode is Mode.INSERT:
            self._handle_insert(press)
        elif mode is Mode.COMMAND:
            self._handle_command(press)
        elif mode is Mode.SEARCH:
            self._handle_search(press)

    def _handle_normal(self, press: KeyPress) -> None:
        key = press.token
        tasks_pane = self.state.pane is Pane.TASKS

        if key in CHORD_KEYS:
            self._handle_chord(key)
            return
        self.pending.clear()

        if key in ("q", "ctrl+c"):
            self.quit_requested = True
        elif key == "tab":
            self.toggle_pane()
        elif key in (":", "/"):
            self.open_command(key)
        elif key == "?":
            self.state.mode = Mode.SEARCH
            self.state.search_buf = ""
        elif key == "escape":
            self.show_art_list = False
            self.show_help = False
        elif key == "H":
            self.show_help = not self.show_help
        elif key == "W":
            self.open_command(":", "ws add ")
        elif key == "R":
            self.open_command(":", "ws rename ")
        elif key == "X":
            self.open_command(":", "ws delete")
        elif key in ("j", "down"):
            self._vertical(1)
        elif key in ("k", "up"):
            self._vertical(-1)
        elif key == "pagedown" and tasks_pane and self.show_art_list:
            self.gallery.scroll_by(self._art_page(), self.list_height)
        elif key == "pageup" and tasks_pane and self.show_art_list:
            self.gallery.scroll_by(-self._art_page(), self.list_height)
        elif key == "enter":
            if tasks_pane:
                self.toggle_task()
            else:
                self.select_workspace(self.state.selected_ws)
                self.state.pane = Pane.TASKS
        elif not tasks_pane:
            return
        elif key in ("x", "space"):
            self.toggle_task()
        elif key == "i":
            self.edit_task()
        elif key == "a":
            self.add_task()
        elif key == "A":
            self.add_task(child=True)
        elif key == "m":
            self.show_info = not self.show_info
        elif key == "h":
            self.collapse_task()
        elif key == "l":
            self.expand_task()
        elif key == "G":
            if self.show_art_list:
                self.gallery.scroll_to_end(self.list_height)
            else:
                self.move_to_bottom()
        elif key == ">":
            self.indent_task()
        elif key in ("<", "shift+tab"):
            self.unindent_task()

    def _handle_chord(self, key: str) -> None:
        if self.state.pane is not Pane.TASKS:
            self.pending.clear()
            return
        if not self.pending.press(key):
            return
        if key == "d":
            self.delete_task()
        elif self.show_art_list:
            self.gallery.scroll = 0
        else:
            self.move_to_top()

    def _edit_buffer(self, buf: str, press: KeyPress) -> str:
        if press.key == "backspace":
            return buf[:-1]
        char = press.printable
        if char:
            return buf + char
        return buf

    def _handle_insert(self, press: KeyPress) -> None:
        if press.key == "escape":
            self._leave_insert()
        elif press.key == "enter":
            self.commit_insert()
        else:
            self.state.insert_buf = self._edit_buffer(self.state.insert_buf, press)

    def _handle_command(self, press: KeyPress) -> None:
        if press.key == "escape":
            self.state.mode = Mode.NORMAL
            self.state.command_buf = ""
        elif press.key == "enter":
            command = self.state.command_buf.strip()
            try:
                self.commands.execute(command)
            finally:
                self.state.mode = Mode.NORMAL
                self.state.command_buf = ""
        else:
            self.state.command_buf = self._edit_buffer(self.state.command_buf, press)

    def _handle_search(self, press: KeyPress) -> None:
        if press.key == "escape":
            self.state.mode = Mode.NORMAL
            self.state.search_buf = ""
        elif press.key == "enter":
            self.set_search(self.state.search_buf)
            self.state.search_buf = ""
            self.state.mode = Mode.NORMAL
        else:
            self.state.search_buf = self._edit_buffer(self.state.search_buf, press)

    # -------------------- navigation --------------------
    def open_command(self, leader: str, buf: str = "") -> None:
        self.state.mode = Mode.COMMAND
        self.state.command_leader = leader
        self.state.command_buf = buf

    def toggle_pane(self) -> None:
        self.state.pane = Pane.WORKSPACES if self.state.pane is Pane.TASKS else Pane.TASKS

    def _vertical(self, step: int) -> None:
        if self.state.pane is Pane.WORKSPACES:
            self.move_workspace(step)
        elif self.show_art_list:
            self.gallery.scroll_by(step, self.list_height)
        else:
            self.move_cursor(step)

    def _art_page(self) -> int:
        return 1 if self.list_height <= 2 else self.list_height - 2

    def move_cursor(self, step: int) -> None:
        self.state.selected_task = clamp_selection(self.state.selected_task + step, len(self.projection))

    def move_to_top(self) -> None:
        self.state.selected_task = 0
        self.viewport.reset()

    def move_to_bottom(self) -> None:
        self.state.selected_task = clamp_selection(len(self.projection) - 1, len(self.projection))

    def set_search(self, query: str) -> None:
        self.state.search_query = query.strip()
        self.reproject()

    def collapse_task(self) -> None:
        row = self.selected_row()
        if row is not None and row.has_children:
            self.state.expanded.discard(row.task_id)
            self.reproject()

    def expand_task(self) -> None:
        row = self.selected_row()
        if row is not None and row.has_children:
            self.state.expanded.add(row.task_id)
            self.reproject()

    # -------------------- task mutations --------------------
    def toggle_task(self) -> None:
        row = self.selected_row()
        if row is None:
            return
        task = self.tree.get(row.task_id)
        if self.tree.has_children(task.id):
            target = not self.tree.is_complete(task.id)
            ids = [task.id] + self.tree.descendants(task.id)
            self._mutate(self.store.set_tasks_completed, ids, target)
        else:
            self._mutate(self.store.set_task_completed, task.id, not task.completed)
        self.load_tasks()

    def delete_task(self) -> None:
        row = self.selected_row()
        if row is None:
            return
        self._mutate(self.store.delete_task, row.task_id)
        self.load_tasks()

    def update_task(self, task: TaskRecord) -> bool:
        ok = self._mutate(self.store.update_task, task)
        self.load_tasks()
        return ok

    def indent_task(self) -> None:
        index = self.state.selected_task
        current, prev = self.projection.row(index), self.projection.row(index - 1)
        if current is None or prev is None or index == 0:
            return
        if prev.depth != current.depth:
            return
        if self.tree.is_descendant(current.task_id, prev.task_id) or \
                self.tree.is_descendant(prev.task_id, current.task_id):
            return
        if self._mutate(self.store.move_task, current.task_id, prev.task_id):
            self.state.expanded.add(prev.task_id)
        self.load_tasks()

    def unindent_task(self) -> None:
        task = self.selected_task()
        if task is None or task.parent_id is None:
            return
        parent = self.tree.get(task.parent_id)
        if parent is None:
            return
        self._mutate(self.store.move_task, task.id, parent.parent_id)
        self.load_tasks()

    def add_task(self, child: bool = False) -> None:
        """Enter Insert mode for a new sibling (or child) of the selection."""
        if self.current_workspace() is None:
            self.set_message("no workspace: add one with :ws add <name>")
            return
        selected = self.selected_task()
        self.state.mode = Mode.INSERT
        self.state.insert_buf = ""
        self.editing_task_id = None
        self.new_task_parent = None
        if selected is not None:
            self.new_task_parent = selected.id if child else selected.parent_id

    def edit_task(self) -> None:
        task = self.selected_task()
        if task is None:
            return
        self.state.mode = Mode.INSERT
        self.state.insert_buf = task.title
        self.editing_task_id = task.id
        self.new_task_parent = None

    def _leave_insert(self) -> None:
        self.state.mode = Mode.NORMAL
        self.state.insert_buf = ""
        self.new_task_parent = None
        self.editing_task_id = None

    def commit_insert(self) -> None:
        parsed = parse_task_input(self.state.insert_buf, self.today())
        editing, parent = self.editing_task_id, self.new_task_parent
        self._leave_insert()
        if not parsed.title:
            return

        if editing is not None:
            stored = self.tree.get(editing)
            if stored is None:
                return
            task = stored.model_copy(deep=True)
            task.title = parsed.title
            task.tags = task.tags + [t for t in parsed.tags if t not in task.tags]
            if parsed.due_date:
                task.due_date = parsed.due_date
            if parsed.priority:
                task.priority = parsed.priority
            self.update_task(task)
            return

        ws = self.current_workspace()
        if ws is None:
            return
        if self._mutate(self.store.create_task, ws.id, parsed.title, parent,
                        parsed.tags, parsed.due_date, parsed.priority) and parent is not None:
            self.state.expanded.add(parent)
        self.load_tasks()

    # -------------------- workspaces --------------------
    def select_workspace(self, index: int) -> None:
        self.state.selected_ws = index
        self.state.selected_task = 0
        self.viewport.reset()
        self.load_tasks()

    def move_workspace(self, step: int) -> None:
        if not self.workspaces:
            return
        self.select_workspace(max(0, min(self.state.selected_ws + step, len(self.workspaces) - 1)))

    def select_workspace_by_token(self, token: str) -> bool:
        """1-based index, then exact name, then first substring match (case-insensitive)."""
        if not self.workspaces or not token:
            return False
        if token.isascii() and token.isdigit():
            index = int(token) - 1
            if 0 <= index < len(self.workspaces):
                self.select_workspace(index)
                return True
        lowered = token.lower()
        for matcher in (lambda name: name == lowered, lambda name: lowered in name):
            for i, ws in enumerate(self.workspaces):
                if matcher(ws.name.lower()):
                    self.select_workspace(i)
                    return True
        return False

    def create_workspace(self, name: str) -> None:
        name = name.strip()
        if not name:
            return
        try:
            new_id = self.store.create_workspace(name)
        except RecoverableError as e:
            log.warning(f"create_workspace failed: {e}")
            self.set_message(f"error: {e}")
            return
        self.workspaces = self.store.list_workspaces()
        index = next((i for i, ws in enumerate(self.workspaces) if ws.id == new_id), 0)
        self.select_workspace(index)

    def rename_workspace(self, name: str) -> None:
        ws = self.current_workspace()
        if ws is None or not name.strip():
            return
        self._mutate(self.store.rename_workspace, ws.id, name.strip())
        self.load_workspaces()

    def delete_workspace(self) -> None:
        ws = self.current_workspace()
        if ws is None:
            return
        self._mutate(self.store.delete_workspace, ws.id)
        self.state.selected_task = 0
        self.viewport.reset()
        self.load_workspaces()

    # -------------------- rendering support --------------------
    def snapshot(self, visible_rows: Optional[int] = None) -> Snapshot:
        """Freeze the current view; ``visible_rows`` also updates the scroll window."""
        if visible_rows is not None:
            self.list_height = max(1, visible_rows)
        total = len(self.projection)
        self.viewport.follow(self.state.selected_task, total, self.list_height)
        s = self.state
        return Snapshot(
            mode=s.mode,
            pane=s.pane,
            workspaces=list(self.workspaces),
            selected_ws=s.selected_ws,
            rows=list(self.projection.rows),
            tree=self.projection.tree,
            full_tree=self.tree,
            selected_task=s.selected_task,
            scroll=self.viewport.offset,
            window=self.viewport.window(total, self.list_height),
            message=s.message,
            command_leader=s.command_leader,
            command_buf=s.command_buf,
            search_buf=s.search_buf,
            insert_buf=s.insert_buf,
            search_query=s.search_query,
            theme=self.theme,
            show_info=self.show_info and not self.show_art_list,
            show_help=self.show_help,
            show_dashboard=self.show_dashboard,
            show_art_list=self.show_art_list,
            art_lines=self.gallery.visible(self.list_height) if self.show_art_list else [],
            header_art=self.gallery.header_art,
            weather_enabled=self.weather.enabled,
            weather_temp=self.weather.temp,
        )
