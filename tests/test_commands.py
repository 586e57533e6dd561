"""Unit tests for the colon-command verbs."""

from conftest import press, workspace_id
from treedo.art import ArtGallery
from treedo.models import Pane, Priority


def run(engine, line):
    return engine.commands.execute(line)


def seed_selected(engine, title="task"):
    task_id = engine.store.create_task(workspace_id(engine), title)
    engine.load_tasks()
    return task_id


class TestDispatch:
    """Test verb lookup."""

    def test_unknown_and_empty(self, engine):
        assert run(engine, "bogus things") is False
        assert run(engine, "   ") is False
        assert engine.state.message == ""

    def test_case_insensitive_verb(self, engine):
        assert run(engine, "QUIT") is True
        assert engine.quit_requested

    def test_aliases(self, engine):
        for alias in ("q", "quit", "wq"):
            assert alias in engine.commands.verbs


class TestTaskVerbs:
    """Test verbs acting on the selected task."""

    def test_no_selection(self, engine):
        run(engine, "due today")
        assert engine.state.message == "no task selected"

    def test_due(self, engine):
        task_id = seed_selected(engine)
        run(engine, "date fri")
        assert engine.store.get_task(task_id).due_date == "2026-10-23"

    def test_due_without_argument(self, engine):
        task_id = seed_selected(engine)
        run(engine, "due")
        assert engine.state.message.startswith("usage: :due")
        assert engine.store.get_task(task_id).due_date == ""

    def test_tags_deduplicated(self, engine):
        task_id = seed_selected(engine)
        run(engine, "tag #a b a")
        assert engine.store.get_task(task_id).tags == ["a", "b"]
        assert engine.state.message == "tags updated"

    def test_priority(self, engine):
        task_id = seed_selected(engine)
        run(engine, "p -1")
        assert engine.store.get_task(task_id).priority == Priority.BLOCKED
        run(engine, "priority HIGH")
        assert engine.store.get_task(task_id).priority == Priority.HIGH

    def test_unknown_priority(self, engine):
        task_id = seed_selected(engine)
        run(engine, "priority urgent")
        assert engine.state.message == "unknown priority: urgent"
        assert engine.store.get_task(task_id).priority == Priority.NORMAL

    def test_clear(self, engine):
        task_id = seed_selected(engine)
        run(engine, "tag x")
        run(engine, "due today")
        run(engine, "p high")
        run(engine, "clear date")
        assert engine.store.get_task(task_id).due_date == ""
        run(engine, "clear all")
        task = engine.store.get_task(task_id)
        assert task.tags == []
        assert task.priority == Priority.NORMAL
        assert engine.state.message == "cleared all"

    def test_clear_unknown_field(self, engine):
        seed_selected(engine)
        run(engine, "clear colour")
        assert engine.state.message == "unknown field: colour"


class TestWorkspaceVerbs:
    """Test the ws verb family."""

    def test_add_selects_new_workspace(self, engine):
        run(engine, "ws add Side Projects")
        assert engine.current_workspace().name == "Side Projects"

    def test_add_requires_name(self, engine):
        run(engine, "ws add")
        assert engine.state.message == "usage: :ws add <name>"
        assert len(engine.workspaces) == 1

    def test_rename_and_delete(self, engine):
        run(engine, "ws rename Errands")
        assert engine.current_workspace().name == "Errands"
        run(engine, "workspace delete")
        assert engine.workspaces == []

    def test_select_by_token(self, engine):
        run(engine, "ws add Work")
        run(engine, "ws add Home")
        run(engine, "ws 1")
        assert engine.current_workspace().name == "Inbox"
        run(engine, "ws wor")
        assert engine.current_workspace().name == "Work"
        run(engine, "ws select home")
        assert engine.current_workspace().name == "Home"

    def test_non_ascii_digit_token_is_ignored(self, engine):
        run(engine, "ws add Work")
        assert run(engine, "ws ²") is True
        press(engine, ":", "ws ①", "enter")
        assert engine.current_workspace().name == "Work"
        assert len(engine.workspaces) == 2

    def test_bare_ws_focuses_pane(self, engine):
        run(engine, "ws")
        assert engine.state.pane is Pane.WORKSPACES


class TestViewVerbs:
    """Test display toggles."""

    def test_search(self, engine):
        seed_selected(engine, "needle")
        seed_selected(engine, "hay")
        run(engine, "search need")
        assert engine.state.search_query == "need"
        assert len(engine.projection) == 1
        assert engine.state.message == "search: need"

    def test_info(self, engine):
        run(engine, "info on")
        assert engine.show_info
        run(engine, "info")
        assert not engine.show_info
        run(engine, "info maybe")
        assert engine.state.message == "usage: :info [on|off]"

    def test_focus(self, engine):
        run(engine, "focus ws")
        assert engine.state.pane is Pane.WORKSPACES
        run(engine, "pane todos")
        assert engine.state.pane is Pane.TASKS
        run(engine, "focus nowhere")
        assert engine.state.message == "usage: :focus ws|tasks"

    def test_dashboard(self, engine):
        run(engine, "dashboard")
        assert not engine.show_dashboard
        assert engine.state.message == "dashboard off"
        run(engine, "db on")
        assert engine.show_dashboard

    def test_help(self, engine):
        run(engine, "help")
        assert engine.show_help

    def test_scheme(self, engine):
        run(engine, "scheme list")
        assert engine.state.message.startswith("schemes: black")
        run(engine, "scheme Copper")
        assert engine.theme.name == "copper"
        assert engine.store.get_setting("theme") == "copper"
        run(engine, "scheme neon")
        assert engine.state.message == "scheme not found"
        assert engine.theme.name == "copper"

    def test_ascii(self, engine):
        run(engine, "ascii")
        assert engine.state.message == "no ascii art found"
        assert not engine.show_art_list

        engine.gallery = ArtGallery(["cat"], ["/\\_/\\\n( o.o )"])
        run(engine, "ascii list")
        assert engine.show_art_list
        assert engine.snapshot().art_lines == ["/\\_/\\", "( o.o )"]
        run(engine, "art hide")
        assert not engine.show_art_list


class TestSettingsVerbs:
    """Test persisted weather preferences."""

    def test_weather_toggle(self, engine):
        run(engine, "settings weather on")
        assert engine.weather.enabled
        assert engine.store.get_setting("weather_enabled") == "1"
        run(engine, "settings weather off")
        assert engine.store.get_setting("weather_enabled") == "0"
        run(engine, "settings weather sometimes")
        assert engine.state.message == "usage: :settings weather on|off"

    def test_city_clears_coordinates(self, engine):
        engine.weather.lat, engine.weather.lon = 1.0, 2.0
        run(engine, "settings city New York")
        assert engine.weather.city == "New York"
        assert (engine.weather.lat, engine.weather.lon) == (0.0, 0.0)
        assert engine.store.get_setting("weather_city") == "New York"
        assert engine.state.message == "city set: New York"

    def test_unit(self, engine):
        run(engine, "settings unit Celsius")
        assert engine.weather.unit == "c"
        assert engine.store.get_setting("weather_unit") == "c"
        assert engine.state.message == "unit: celsius"
        run(engine, "settings unit kelvin")
        assert engine.weather.unit == "c"

    def test_settings_reload(self, engine):
        run(engine, "settings weather on")
        run(engine, "settings city Oslo")
        run(engine, "settings unit c")
        run(engine, "scheme forest")
        engine.weather.enabled = False
        engine.load_settings()
        assert engine.weather.enabled
        assert engine.weather.city == "Oslo"
        assert engine.weather.unit == "c"
        assert engine.theme.name == "forest"

    def test_weather_refresh_resets_throttle(self, engine, clock):
        engine.weather.checked_at = clock()
        run(engine, "weather refresh")
        assert engine.weather.checked_at is None
