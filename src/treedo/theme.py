"""Color schemes.

A theme is an immutable value handed to the renderer; switching scheme means
looking up a different value, never mutating shared state.
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

DEFAULT_SCHEME = "black"

WARN = "#e5c07b"
DANGER = "#e06c75"


@dataclass(frozen=True)
class Theme:
    name: str
    bg: str
    sidebar: str
    selection: str
    cursor: str
    accent: str
    dim: str
    text: str
    header: str
    border: str
    done: str
    info: str
    warn: str = WARN
    danger: str = DANGER


SCHEMES: Tuple[Theme, ...] = (
    Theme(name="black", bg="#0a0a0a", sidebar="#0d0d0d", selection="#1a1a1a", cursor="#242424",
          accent="#9aa3a8", dim="#5b5f63", text="#c0c5c8", header="#b5babf", border="#151515",
          done="#3b3b3b", info="#2a2a2a"),
    Theme(name="copper", bg="#11110f", sidebar="#14120f", selection="#2a1f16", cursor="#3a2c20",
          accent="#c58b5a", dim="#6f6256", text="#b9ab9d", header="#d3a57a", border="#1f1a14",
          done="#4d3f33", info="#3a2b20"),
    Theme(name="seafoam", bg="#0a1214", sidebar="#0b1518", selection="#16262b", cursor="#20343a",
          accent="#70c0b6", dim="#5d7274", text="#a7b6b6", header="#88c9c0", border="#162126",
          done="#3f4d52", info="#203237"),
    Theme(name="forest", bg="#0c120f", sidebar="#0e1512", selection="#1a251f", cursor="#243126",
          accent="#7fa879", dim="#5f6d60", text="#aab3a7", header="#93b98c", border="#172019",
          done="#3f4b41", info="#27352b"),
    Theme(name="slate", bg="#0b0f14", sidebar="#0e131a", selection="#1a2430", cursor="#243242",
          accent="#87a2c2", dim="#5a6676", text="#a4afbd", header="#98b4d1", border="#16202a",
          done="#3c4654", info="#243244"),
)


def scheme_names() -> List[str]:
    return [scheme.name for scheme in SCHEMES]


def get_scheme(name: str) -> Optional[Theme]:
    """Return the named theme, or None if there is no such scheme."""
    name = name.strip().lower()
    return next((scheme for scheme in SCHEMES if scheme.name == name), None)


def default_theme() -> Theme:
    theme = get_scheme(DEFAULT_SCHEME)
    assert theme is not None
    return theme
