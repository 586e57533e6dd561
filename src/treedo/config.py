"""
Runtime configuration resolved from the environment.

Persisted user preferences (theme, weather) live in the store's settings map;
this module only covers where things are and how long to wait for them.
"""

import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator

DEFAULT_HOME = Path.home() / ".config" / "td"
STORE_FILENAME = "td.yml"


def _default_ascii_dir() -> Path:
    bundled = Path(__file__).resolve().parent / "ascii"
    if bundled.is_dir():
        return bundled
    return Path.cwd() / "ascii"


class AppConfig(BaseModel):
    home: Path = Field(default=DEFAULT_HOME, description="Directory holding the store file")
    ascii_dir: Path = Field(default_factory=_default_ascii_dir, description="Directory of *.txt header art")
    weather_timeout: float = Field(default=5.0, description="Seconds before a weather fetch is treated as failed")
    weather_cooldown: float = Field(default=1800.0, description="Minimum seconds between weather re-checks")

    @field_validator('weather_timeout', 'weather_cooldown')
    @classmethod
    def validate_positive(cls, v):
        if v <= 0:
            raise ValueError("must be positive")
        return v

    @property
    def store_path(self) -> Path:
        return self.home / STORE_FILENAME

    @classmethod
    def from_env(cls, environ: Optional[dict] = None) -> 'AppConfig':
        """Build a config, letting TREEDO_* variables override the defaults."""
        env = os.environ if environ is None else environ
        values = {}
        if env.get('TREEDO_HOME'):
            values['home'] = Path(env['TREEDO_HOME']).expanduser()
        if env.get('TREEDO_ASCII_DIR'):
            values['ascii_dir'] = Path(env['TREEDO_ASCII_DIR']).expanduser()
        if env.get('TREEDO_WEATHER_TIMEOUT'):
            values['weather_timeout'] = env['TREEDO_WEATHER_TIMEOUT']
        if env.get('TREEDO_WEATHER_COOLDOWN'):
            values['weather_cooldown'] = env['TREEDO_WEATHER_COOLDOWN']
        return cls(**values)
