"""
Colon-command language.

The first word picks a verb (case-insensitive); the rest are arguments.
Unknown verbs are ignored. Known verbs with bad arguments leave state alone
and explain themselves in the status line.
"""

from typing import TYPE_CHECKING, Callable, Dict, List

from .inline import parse_due_date, parse_priority
from .logs import get_logger
from .models import Pane, Priority, TaskRecord
from .recovery import CommandError
from .theme import get_scheme, scheme_names

if TYPE_CHECKING:
    from .engine import Engine

log = get_logger("commands")

RESULT_TICKS = 2
ERROR_TICKS = 3

ON_WORDS = ("on", "show", "1")
OFF_WORDS = ("off", "hide", "0")

WORKSPACE_PANE_WORDS = ("ws", "workspace", "workspaces")
TASK_PANE_WORDS = ("tasks", "todos")

CLEAR_FIELDS = {
    'due': 'due', 'date': 'due',
    'tags': 'tags', 'tag': 'tags',
    'priority': 'priority', 'p': 'priority',
    'all': 'all',
}


def _toggle_arg(args: List[str], current: bool, usage: str) -> bool:
    if not args:
        return not current
    word = args[0].lower()
    if word in ON_WORDS:
        return True
    if word in OFF_WORDS:
        return False
    raise CommandError(usage)


class CommandDispatcher:
    """Maps verbs to engine operations."""

    def __init__(self, engine: 'Engine'):
        self.engine = engine
        self._verbs: Dict[str, Callable[[List[str]], None]] = {}
        for names, handler in (
            (("q", "quit", "wq"), self._quit),
            (("ws", "workspace", "workspaces"), self._workspace),
            (("due", "date"), self._due),
            (("tag", "tags"), self._tag),
            (("priority", "p"), self._priority),
            (("clear",), self._clear),
            (("search",), self._search),
            (("info",), self._info),
            (("focus", "pane"), self._focus),
            (("scheme",), self._scheme),
            (("dashboard", "dash", "db"), self._dashboard),
            (("ascii", "art"), self._ascii),
            (("settings",), self._settings),
            (("weather",), self._weather),
            (("help",), self._help),
        ):
            for name in names:
                self._verbs[name] = handler

    @property
    def verbs(self) -> List[str]:
        return sorted(self._verbs)

    def execute(self, command: str) -> bool:
        """Run one command line; False when the verb is unknown or the line empty."""
        fields = command.strip().split()
        if not fields:
            return False
        handler = self._verbs.get(fields[0].lower())
        if handler is None:
            log.debug(f"Ignoring unknown command {fields[0]!r}")
            return False
        try:
            handler(fields[1:])
        except CommandError as e:
            self.engine.set_message(str(e), ERROR_TICKS)
        return True

    # -------------------- helpers --------------------
    def _selected_copy(self) -> TaskRecord:
        task = self.engine.selected_task()
        if task is None:
            raise CommandError("no task selected")
        return task.model_copy(deep=True)

    def _result(self, message: str) -> None:
        self.engine.set_message(message, RESULT_TICKS)

    # -------------------- verbs --------------------
    def _quit(self, args: List[str]) -> None:
        self.engine.quit_requested = True

    def _workspace(self, args: List[str]) -> None:
        engine = self.engine
        if not args:
            engine.state.pane = Pane.WORKSPACES
            return
        sub = args[0].lower()
        name = " ".join(args[1:]).strip()
        if sub in ("add", "new", "create"):
            if not name:
                raise CommandError("usage: :ws add <name>")
            engine.create_workspace(name)
        elif sub == "rename":
            if not name:
                raise CommandError("usage: :ws rename <name>")
            engine.rename_workspace(name)
        elif sub in ("delete", "del", "rm"):
            engine.delete_workspace()
        elif sub in ("select", "open"):
            if len(args) > 1:
                engine.select_workspace_by_token(args[1])
        else:
            engine.select_workspace_by_token(args[0])

    def _due(self, args: List[str]) -> None:
        task = self._selected_copy()
        if not args:
            raise CommandError("usage: :due <date|today|tomorrow|monday...>")
        task.due_date = parse_due_date(args[0], self.engine.today())
        if self.engine.update_task(task):
            self._result(f"due date set to {task.due_date}")

    def _tag(self, args: List[str]) -> None:
        task = self._selected_copy()
        if not args:
            raise CommandError("usage: :tag <tag1> [tag2] ...")
        for raw in args:
            tag = raw[1:] if raw.startswith("#") else raw
            if tag and tag not in task.tags:
                task.tags.append(tag)
        if self.engine.update_task(task):
            self._result("tags updated")

    def _priority(self, args: List[str]) -> None:
        task = self._selected_copy()
        if not args:
            raise CommandError("usage: :priority <high|low|normal|blocked>")
        priority = parse_priority(args[0], numeric=True)
        if priority is None:
            raise CommandError(f"unknown priority: {args[0].lower()}")
        task.priority = priority
        if self.engine.update_task(task):
            self._result("priority updated")

    def _clear(self, args: List[str]) -> None:
        task = self._selected_copy()
        if not args:
            raise CommandError("usage: :clear <due|tags|priority|all>")
        word = args[0].lower()
        target = CLEAR_FIELDS.get(word)
        if target is None:
            raise CommandError(f"unknown field: {word}")
        if target in ("due", "all"):
            task.due_date = ""
        if target in ("tags", "all"):
            task.tags = []
        if target in ("priority", "all"):
            task.priority = Priority.NORMAL
        if self.engine.update_task(task):
            self._result(f"cleared {word}")

    def _search(self, args: List[str]) -> None:
        query = " ".join(args).strip()
        self.engine.set_search(query)
        self.engine.set_message(f"search: {query}" if query else "search cleared")

    def _info(self, args: List[str]) -> None:
        self.engine.show_info = _toggle_arg(args, self.engine.show_info, "usage: :info [on|off]")

    def _focus(self, args: List[str]) -> None:
        word = args[0].lower() if args else ""
        if word in WORKSPACE_PANE_WORDS:
            self.engine.state.pane = Pane.WORKSPACES
        elif word in TASK_PANE_WORDS:
            self.engine.state.pane = Pane.TASKS
        else:
            raise CommandError("usage: :focus ws|tasks")

    def _scheme(self, args: List[str]) -> None:
        if not args or args[0].lower() == "list":
            self.engine.set_message("schemes: " + ", ".join(scheme_names()))
            return
        theme = get_scheme(args[0])
        if theme is None:
            raise CommandError("scheme not found")
        self.engine.theme = theme
        self.engine.save_setting("theme", theme.name)
        self.engine.set_message(f"scheme: {theme.name}")

    def _dashboard(self, args: List[str]) -> None:
        show = _toggle_arg(args, self.engine.show_dashboard, "usage: :dashboard [on|off]")
        self.engine.show_dashboard = show
        self._result("dashboard on" if show else "dashboard off")

    def _ascii(self, args: List[str]) -> None:
        engine = self.engine
        sub = args[0].lower() if args else "list"
        if sub == "list":
            if not engine.gallery.arts:
                engine.set_message("no ascii art found")
                return
            engine.gallery.build_lines()
            engine.show_art_list = True
        elif sub in ("hide", "clear"):
            engine.show_art_list = False
        elif sub == "random":
            engine.gallery.pick_random()
            engine.show_art_list = False
        else:
            raise CommandError("usage: :ascii list|hide|random")

    def _settings(self, args: List[str]) -> None:
        engine = self.engine
        if not args:
            engine.set_message("settings: weather on|off, city <name>, unit c|f")
            return
        sub = args[0].lower()
        if sub == "weather":
            word = args[1].lower() if len(args) > 1 else ""
            if word == "on":
                engine.weather.enabled = True
                engine.save_setting("weather_enabled", "1")
                engine.refresh_weather()
                engine.set_message("weather on")
            elif word == "off":
                engine.weather.enabled = False
                engine.save_setting("weather_enabled", "0")
                engine.set_message("weather off")
            else:
                raise CommandError("usage: :settings weather on|off")
        elif sub == "city":
            name = " ".join(args[1:]).strip()
            if not name:
                raise CommandError("usage: :settings city <name>")
            engine.set_weather_city(name)
            engine.set_message(f"city set: {name}")
        elif sub == "unit":
            word = args[1].lower() if len(args) > 1 else ""
            if word in ("c", "celsius"):
                unit, label = "c", "celsius"
            elif word in ("f", "fahrenheit"):
                unit, label = "f", "fahrenheit"
            else:
                raise CommandError("usage: :settings unit c|f")
            engine.weather.unit = unit
            engine.save_setting("weather_unit", unit)
            engine.refresh_weather()
            engine.set_message(f"unit: {label}")
        else:
            raise CommandError("settings: weather on|off, city <name>, unit c|f")

    def _weather(self, args: List[str]) -> None:
        engine = self.engine
        sub = args[0].lower() if args else ""
        if sub == "refresh":
            engine.refresh_weather()
        elif sub == "city" and len(args) > 1:
            engine.set_weather_city(" ".join(args[1:]).strip())
        else:
            engine.set_message("weather: refresh | city <name>")

    def _help(self, args: List[str]) -> None:
        self.engine.show_help = True
