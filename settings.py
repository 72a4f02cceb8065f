"""
Editor settings persisted as settings.json beside the modules.
"""
import json
import logging
import os
from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

CONFIG_FILE = os.path.join(os.path.dirname(os.path.abspath(__file__)), "settings.json")

MIN_FONT_SIZE = 8
MAX_FONT_SIZE = 28
THEME_CHOICES = ("Light", "Dark", "System")


class SettingsError(Exception):
    """Raised when settings cannot be written."""
    pass


@dataclass
class EditorSettings:
    theme: str = "System"
    font_family: Optional[str] = None
    font_size: int = 12
    last_database: Optional[str] = None
    max_rows: int = 10000

    def clamped_font_size(self, size=None) -> int:
        size = self.font_size if size is None else size
        return max(MIN_FONT_SIZE, min(MAX_FONT_SIZE, size))


# Field name → accepted types; values of any other type keep the default
_FIELD_TYPES = {
    "theme": (str,),
    "font_family": (str, type(None)),
    "font_size": (int,),
    "last_database": (str, type(None)),
    "max_rows": (int,),
}


def _from_dict(raw: Dict[str, Any]) -> EditorSettings:
    settings = EditorSettings()
    for f in fields(EditorSettings):
        if f.name not in raw:
            continue
        value = raw[f.name]
        # bool is an int subclass; reject it for numeric fields
        if isinstance(value, bool) or not isinstance(value, _FIELD_TYPES[f.name]):
            logger.warning("Ignoring setting %s=%r (wrong type)", f.name, value)
            continue
        setattr(settings, f.name, value)
    if settings.theme not in THEME_CHOICES:
        logger.warning("Unknown theme %r, using System", settings.theme)
        settings.theme = "System"
    if settings.max_rows < 1:
        settings.max_rows = EditorSettings.max_rows
    return settings


def load_settings(path=CONFIG_FILE) -> EditorSettings:
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except FileNotFoundError:
        return EditorSettings()
    except (OSError, ValueError) as e:
        logger.warning("Cannot read settings from %s, using defaults: %s", path, e)
        return EditorSettings()
    if not isinstance(raw, dict):
        logger.warning("Settings file %s does not hold an object, using defaults", path)
        return EditorSettings()
    return _from_dict(raw)


def save_settings(settings: EditorSettings, path=CONFIG_FILE) -> None:
    try:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(asdict(settings), f, indent=2)
    except OSError as e:
        logger.error("Cannot save settings to %s: %s", path, e)
        raise SettingsError(f"Cannot save settings: {e}") from e
    logger.info("Saved settings to %s", path)
