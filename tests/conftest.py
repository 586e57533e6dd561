"""Shared fixtures: a store in a temp directory and an engine driven by a fake clock."""

import os
import tempfile
from datetime import date

# Keep the import-time log file out of the real home directory
os.environ.setdefault("TREEDO_LOG_DIR", tempfile.mkdtemp(prefix="treedo-logs-"))

import pytest

from treedo.art import ArtGallery
from treedo.config import AppConfig
from treedo.data import YAMLStore
from treedo.engine import Engine, KeyPress
from treedo.logs import setup_logging

TODAY = date(2026, 10, 19)  # a Monday


@pytest.fixture(autouse=True)
def quiet_logging(tmp_path_factory, monkeypatch):
    """Log into a per-test temp directory and drop any console handler a CLI test attached."""
    monkeypatch.setattr("treedo.logs.LOG_DIR", tmp_path_factory.mktemp("logs"))
    setup_logging()
    yield
    setup_logging()


class FakeClock:
    """Monotonic clock under test control."""

    def __init__(self, now: float = 100.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def press(engine, *keys):
    """Feed named keys or printable strings (one event per character) to the engine."""
    for key in keys:
        if key in ("enter", "escape", "backspace", "tab", "shift+tab", "up", "down",
                   "pageup", "pagedown", "ctrl+c", "space"):
            engine.handle_key(KeyPress.of(key) if key != "space" else KeyPress.of(" "))
        else:
            for char in key:
                engine.handle_key(KeyPress.of(char))


@pytest.fixture
def store(tmp_path):
    return YAMLStore.open(tmp_path / "td.yml")


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def engine(store, clock, tmp_path):
    store.create_workspace("Inbox")
    config = AppConfig(home=tmp_path, ascii_dir=tmp_path / "ascii")
    eng = Engine(store, config, ArtGallery(), clock=clock, today=lambda: TODAY)
    eng.start()
    return eng


def workspace_id(engine) -> int:
    return engine.current_workspace().id
