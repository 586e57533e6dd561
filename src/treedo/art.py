"""Decorative header art loaded from ``*.txt`` files."""

import random
from pathlib import Path
from typing import List, Optional

from .logs import get_logger

log = get_logger("art")

DEFAULT_ART = "  .-.\n (o o)\n | O \\\n  \\   \\\n   `~~~'"


class ArtGallery:
    def __init__(self, names: List[str] = None, arts: List[str] = None, rng: Optional[random.Random] = None):
        self.names = names or []
        self.arts = arts or []
        self.current = ""
        self.lines: List[str] = []
        self.scroll = 0
        self._rng = rng or random.Random()

    @classmethod
    def load(cls, directory: Path, rng: Optional[random.Random] = None) -> 'ArtGallery':
        """Read every non-empty ``*.txt`` file of ``directory``, sorted by name."""
        names, arts = [], []
        directory = Path(directory)
        if directory.is_dir():
            for path in sorted(directory.iterdir()):
                if not path.is_file() or path.suffix.lower() != ".txt":
                    continue
                try:
                    art = path.read_text(encoding="utf-8").rstrip("\n")
                except (OSError, UnicodeDecodeError) as e:
                    log.warning(f"Skipping unreadable art file {path}: {e}")
                    continue
                if art:
                    arts.append(art)
                    names.append(path.stem)
        gallery = cls(names, arts, rng)
        gallery.pick_random()
        log.debug(f"Loaded {len(arts)} art files from {directory}")
        return gallery

    @property
    def header_art(self) -> str:
        return self.current or DEFAULT_ART

    def pick_random(self) -> None:
        if self.arts:
            self.current = self._rng.choice(self.arts)

    def build_lines(self) -> List[str]:
        """Every art stacked with a blank line between pieces."""
        self.lines = []
        for i, art in enumerate(self.arts):
            self.lines.extend(line.rstrip(" ") for line in art.split("\n"))
            if i != len(self.arts) - 1:
                self.lines.append("")
        self.scroll = 0
        return self.lines

    def scroll_by(self, delta: int, height: int) -> None:
        if not self.lines:
            return
        max_scroll = max(0, len(self.lines) - max(1, height))
        self.scroll = max(0, min(self.scroll + delta, max_scroll))

    def scroll_to_end(self, height: int) -> None:
        if self.lines:
            self.scroll = max(0, len(self.lines) - max(1, height))

    def visible(self, height: int) -> List[str]:
        height = max(0, height)
        start = max(0, min(self.scroll, max(0, len(self.lines) - height)))
        return self.lines[start:start + height]
