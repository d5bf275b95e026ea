"""
Configuration module for the combat tracker.

Settings are a pydantic model with sensible defaults. They can be loaded from
a JSON file and individual values overridden from the command line.
"""

import json
from pathlib import Path
from typing import Any, Optional

from catchery import log_warning
from pydantic import BaseModel, Field, ValidationError

from combat_tracker.core.constants import DEFAULT_LOG_TAIL


class TrackerSettings(BaseModel):
    """Runtime settings for one tracker session."""

    lookup_timeout: float = Field(
        default=10.0,
        gt=0,
        description="Seconds a reference lookup may block before timing out",
    )
    reference_base_url: str = Field(
        default="http://dnd5e.wikidot.com",
        description="Base URL of the reference site",
    )
    cache_dir: Path = Field(
        default=Path.home() / ".cache" / "combat_tracker",
        description="Directory holding cached reference pages",
    )
    refresh_cache: bool = Field(
        default=False,
        description="Ignore cached reference pages and fetch them again",
    )
    log_tail: int = Field(
        default=DEFAULT_LOG_TAIL,
        ge=0,
        description="Number of log entries rendered after each command",
    )
    log_level: str = Field(
        default="WARNING",
        description="Level of the diagnostic logger",
    )

    def with_overrides(self, **overrides: Any) -> "TrackerSettings":
        """Returns a copy with every non-None override applied."""
        values = {k: v for k, v in overrides.items() if v is not None}
        return self.model_validate({**self.model_dump(), **values})


def load_settings(path: Optional[Path] = None) -> TrackerSettings:
    """
    Loads the tracker settings.

    Args:
        path (Optional[Path]): A JSON settings file. When missing or invalid
            the defaults are used.

    Returns:
        TrackerSettings: The loaded settings.

    """
    if path is None:
        return TrackerSettings()
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return TrackerSettings.model_validate(data)
    except FileNotFoundError:
        log_warning(
            f"Settings file not found, using defaults: {path}",
            {"path": str(path), "context": "settings_loading"},
        )
    except (json.JSONDecodeError, ValidationError) as e:
        log_warning(
            f"Invalid settings file, using defaults: {path}",
            {"path": str(path), "error": str(e), "context": "settings_loading"},
        )
    return TrackerSettings()
