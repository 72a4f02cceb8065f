"""
IDE Theme — syntax palettes, chrome colours and theme-change notification.
Kept free of Tk imports so the highlighter and its tests can use it headless.
"""
import logging
from dataclasses import dataclass
from enum import Enum

logger = logging.getLogger(__name__)


class Theme(Enum):
    LIGHT = "Light"
    DARK = "Dark"

    @classmethod
    def from_name(cls, name, default=None):
        """Parse "light"/"Dark"/... case-insensitively; *default* otherwise."""
        for theme in cls:
            if isinstance(name, str) and name.lower() == theme.value.lower():
                return theme
        return default


@dataclass(frozen=True)
class ColorPalette:
    default: str
    keyword: str
    string: str
    number: str
    comment: str
    property_name: str
    boolean: str


# ── Syntax palettes ──
LIGHT_PALETTE = ColorPalette(
    default="#202020",
    keyword="#0066CC",
    string="#A31515",
    number="#098658",
    comment="#6A9955",
    property_name="#1A4B94",
    boolean="#B000B5",
)

DARK_PALETTE = ColorPalette(
    default="#E8E8E8",
    keyword="#4FC1FF",
    string="#CE9178",
    number="#B5CEA8",
    comment="#6A9955",
    property_name="#4EC9B0",
    boolean="#C586C0",
)

_PALETTES = {Theme.LIGHT: LIGHT_PALETTE, Theme.DARK: DARK_PALETTE}

# Plain text reads as pure black on light backgrounds, pure white on dark
_PLAIN_TEXT_COLORS = {Theme.LIGHT: "#000000", Theme.DARK: "#FFFFFF"}


def resolve(theme: Theme) -> ColorPalette:
    return _PALETTES[theme]


def plain_text_color(theme: Theme) -> str:
    return _PLAIN_TEXT_COLORS[theme]


# ── Chrome Colors  (Catppuccin Mocha / Latte) ──
COLORS = {
    "bg":           "#1e1e2e",
    "bg_secondary": "#181825",
    "bg_tertiary":  "#11111b",
    "surface":      "#313244",
    "overlay":      "#45475a",
    "text":         "#cdd6f4",
    "subtext":      "#a6adc8",
    "green":        "#a6e3a1",
    "red":          "#f38ba8",
    "yellow":       "#f9e2af",
    "cursor":       "#f5e0dc",
    "selection":    "#45475a",
    "placeholder":  "#7f7f7f",
    "output_bg":    "#11111b",
    "toolbar_bg":   "#181825",
    "status_bg":    "#181825",
    "accent":       "#89b4fa",
    "error":        "#f38ba8",
    "success":      "#a6e3a1",
    "warning":      "#f9e2af",
    "button_bg":    "#313244",
    "button_hover": "#45475a",
    "border":       "#313244",
    "current_line": "#232336",
}

COLORS_LIGHT = {
    "bg":           "#eff1f5",
    "bg_secondary": "#e6e9ef",
    "bg_tertiary":  "#dce0e8",
    "surface":      "#ccd0da",
    "overlay":      "#9ca0b0",
    "text":         "#4c4f69",
    "subtext":      "#6c6f85",
    "green":        "#40a02b",
    "red":          "#d20f39",
    "yellow":       "#df8e1d",
    "cursor":       "#dc8a78",
    "selection":    "#bcc0cc",
    "placeholder":  "#7f7f7f",
    "output_bg":    "#e6e9ef",
    "toolbar_bg":   "#e6e9ef",
    "status_bg":    "#e6e9ef",
    "accent":       "#1e66f5",
    "error":        "#d20f39",
    "success":      "#40a02b",
    "warning":      "#df8e1d",
    "button_bg":    "#ccd0da",
    "button_hover": "#bcc0cc",
    "border":       "#ccd0da",
    "current_line": "#e6e9ef",
}


def colors_for(theme: Theme) -> dict:
    return COLORS if theme is Theme.DARK else COLORS_LIGHT


def chrome(key):
    """(light, dark) pair; customtkinter switches between them by itself."""
    return (COLORS_LIGHT[key], COLORS[key])


# ═══════════════════════════════════════════════════════
#  Theme-change notification
# ═══════════════════════════════════════════════════════

class Subscription:
    """Handle returned by ThemeNotifier.subscribe(); closing it unsubscribes."""

    def __init__(self, notifier, callback):
        self._notifier = notifier
        self._callback = callback

    @property
    def active(self):
        return self._notifier is not None

    def close(self):
        if self._notifier is not None:
            self._notifier._remove(self._callback)
            self._notifier = None

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()
        return False


class ThemeNotifier:
    """Current theme plus the listeners that re-render when it changes."""

    def __init__(self, theme=Theme.LIGHT):
        self._theme = theme
        self._listeners = []

    @property
    def theme(self) -> Theme:
        return self._theme

    @property
    def listener_count(self):
        return len(self._listeners)

    def subscribe(self, callback) -> Subscription:
        self._listeners.append(callback)
        return Subscription(self, callback)

    def _remove(self, callback):
        try:
            self._listeners.remove(callback)
        except ValueError:
            pass

    def set_theme(self, theme: Theme):
        if theme is self._theme:
            return
        self._theme = theme
        logger.debug("Theme changed to %s, notifying %d listener(s)",
                     theme.value, len(self._listeners))
        # Copy: a listener may unsubscribe while we iterate
        for callback in list(self._listeners):
            callback(theme)

    def toggle(self):
        self.set_theme(Theme.LIGHT if self._theme is Theme.DARK else Theme.DARK)
