"""
Full-screen terminal UI.

A thin textual shell around the engine: keys are forwarded verbatim, a one
second timer drives ``Engine.tick`` and weather lookups run in a worker
thread whose result is handed back to the engine on the UI thread.
"""

from datetime import datetime

from textual import events, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.widgets import Static

from . import render
from .engine import Engine, KeyPress
from .logs import get_logger
from .weather import WeatherRequest, run_weather_request

log = get_logger("tui")

SIDEBAR_WIDTH = 24
TICK_SECONDS = 1.0


class TreedoApp(App):
    """Header, workspace sidebar, task list and status bar."""

    CSS = """
    #header {
        height: auto;
        padding: 0 1;
    }

    #body {
        height: 1fr;
    }

    #sidebar {
        width: 24;
        padding: 0 1;
    }

    #tasks {
        width: 1fr;
        padding: 0 1;
    }

    #status {
        height: 2;
    }
    """

    # Forwarded ahead of focus navigation.
    BINDINGS = [
        Binding("tab", "forward('tab')", show=False, priority=True),
        Binding("shift+tab", "forward('shift+tab')", show=False, priority=True),
        Binding("ctrl+c", "forward('ctrl+c')", show=False, priority=True),
    ]

    def __init__(self, engine: Engine):
        super().__init__()
        self.engine = engine
        self._ui_ready = False

    def compose(self) -> ComposeResult:
        yield Static(id="header")
        with Horizontal(id="body"):
            yield Static(id="sidebar")
            yield Static(id="tasks")
        yield Static(id="status")

    def on_mount(self) -> None:
        self._ui_ready = True
        self.set_interval(TICK_SECONDS, self._tick)
        self._tick()

    def on_resize(self, event: events.Resize) -> None:
        self.redraw()

    def on_key(self, event: events.Key) -> None:
        event.prevent_default()
        event.stop()
        self._dispatch(KeyPress(event.key, event.character))

    def action_forward(self, key: str) -> None:
        self._dispatch(KeyPress(key))

    def _dispatch(self, press: KeyPress) -> None:
        self.engine.handle_key(press)
        if self.engine.quit_requested:
            self.exit()
            return
        self.redraw()

    def _tick(self) -> None:
        request = self.engine.tick()
        if request is not None:
            log.debug(f"Fetching weather for {request.city or 'saved coordinates'}")
            self.fetch_weather(request)
        self.redraw()

    @work(thread=True, exclusive=True)
    def fetch_weather(self, request: WeatherRequest) -> None:
        result = run_weather_request(request, self.engine.config.weather_timeout)
        self.call_from_thread(self._weather_done, result)

    def _weather_done(self, result) -> None:
        self.engine.apply_weather(result)
        self.redraw()

    def redraw(self) -> None:
        if not self._ui_ready:
            return
        header = self.query_one("#header", Static)
        tasks = self.query_one("#tasks", Static)
        sidebar = self.query_one("#sidebar", Static)
        status = self.query_one("#status", Static)

        width = max(10, self.size.width)
        tasks_width = max(10, width - SIDEBAR_WIDTH - 2)
        probe = self.engine.snapshot()
        header_text = render.header(probe, width)
        list_height = max(3, self.size.height - len(header_text.plain.split("\n")) - 2)
        snap = self.engine.snapshot(render.visible_task_rows(list_height, probe.show_info))
        now = datetime.now()

        theme = snap.theme
        self.screen.styles.background = theme.bg
        self.screen.styles.color = theme.text
        sidebar.styles.background = theme.sidebar
        status.styles.background = theme.border

        header.update(render.header(snap, width, now))
        sidebar.update(render.sidebar(snap, SIDEBAR_WIDTH - 2))
        tasks.update(render.task_list(snap, tasks_width, list_height))
        status.update(render.status_bar(snap, width, now))


def run_app(engine: Engine) -> int:
    """Run until quit; the app's exit code, non-zero when it crashed."""
    app = TreedoApp(engine)
    app.run()
    return app.return_code or 0
