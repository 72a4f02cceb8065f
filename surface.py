"""
Dual-layer highlighting surface.

Keeps an editable plain-text surface and a read-only coloured surface showing
the same content.  Every edit, language change or theme change re-tokenizes
the whole buffer and hands the fresh runs to the render surface.

The controller is toolkit-agnostic: the Tk widgets in ide_widgets implement
the two surface protocols, tests use in-memory fakes.
"""
import logging
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass, replace
from typing import Callable, List, Optional, Protocol

from highlighter import HighlightLanguage, Run, tokenize
from ide_theme import Theme, ThemeNotifier, plain_text_color, resolve

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LayoutOptions:
    font_family: Optional[str] = None
    font_size: int = 12
    padding: int = 8
    placeholder: str = ""
    read_only: bool = False
    autosize: bool = False


class EditableSurface(Protocol):
    def get_text(self) -> str: ...
    def set_text(self, text: str) -> None: ...
    def set_change_callback(self, callback: Callable[[str], None]) -> None: ...
    def apply_layout(self, options: LayoutOptions) -> None: ...
    def focus(self) -> None: ...
    def unfocus(self) -> None: ...


class RenderSurface(Protocol):
    def render(self, runs: List[Run]) -> None: ...
    def apply_layout(self, options: LayoutOptions) -> None: ...


class HighlightingSurface:
    """Controller owning the current text of a highlighted editor.

    ``on_user_edited`` is wired to the editable surface's change callback.
    Programmatic ``set_text`` suppresses that echo so listeners registered
    with ``add_text_listener`` only hear about genuine user edits.
    """

    def __init__(self, editable: EditableSurface, renderer: RenderSurface,
                 notifier: ThemeNotifier, language=HighlightLanguage.SQL,
                 layout: Optional[LayoutOptions] = None):
        self._editable = editable
        self._renderer = renderer
        self._notifier = notifier
        self._text = ""
        self._language = language
        self._suppress_echo = False
        self._plain_color_override = None
        self._listeners = []
        self._theme = notifier.theme
        self._palette = resolve(self._theme)
        self._runs: List[Run] = []
        self._layout = layout or LayoutOptions()
        self._closed = False

        with ExitStack() as stack:
            stack.enter_context(notifier.subscribe(self.on_theme_changed))
            editable.set_change_callback(self.on_user_edited)
            self._apply_layout()
            self._rerender()
            # Construction succeeded: keep the subscription until close()
            self._resources = stack.pop_all()

    # ── State ──

    @property
    def text(self) -> str:
        return self._text

    @property
    def language(self) -> HighlightLanguage:
        return self._language

    @property
    def theme(self) -> Theme:
        return self._theme

    @property
    def palette(self):
        return self._palette

    @property
    def runs(self) -> List[Run]:
        """The run sequence most recently handed to the render surface."""
        return list(self._runs)

    @property
    def layout(self) -> LayoutOptions:
        return self._layout

    @property
    def plain_text_color(self) -> str:
        if self._plain_color_override is not None:
            return self._plain_color_override
        return plain_text_color(self._theme)

    @property
    def closed(self):
        return self._closed

    # ── Text ──

    def set_text(self, new_text):
        """Programmatic overwrite; never reported to text listeners."""
        new_text = new_text or ""
        if self._editable.get_text() != new_text:
            with self._suppressing_echo():
                self._editable.set_text(new_text)
        self._text = new_text
        self._rerender()

    def on_user_edited(self, new_text):
        if self._suppress_echo:
            return
        new_text = new_text or ""
        old_text = self._text
        runs = self._tokenize(new_text)
        self._renderer.render(runs)
        self._runs = runs
        self._text = new_text
        for listener in list(self._listeners):
            listener(old_text, new_text)

    def add_text_listener(self, listener: Callable[[str, str], None]):
        """Register ``listener(old_text, new_text)`` for user edits."""
        self._listeners.append(listener)

    def remove_text_listener(self, listener):
        if listener in self._listeners:
            self._listeners.remove(listener)

    # ── Configuration ──

    def set_language(self, language: HighlightLanguage):
        self._language = language
        self._rerender()

    def set_plain_text_color(self, color: Optional[str]):
        """Pin the plain-text colour; ``None`` goes back to the theme's."""
        self._plain_color_override = color
        self._rerender()

    def on_theme_changed(self, theme: Optional[Theme] = None):
        self._theme = theme or self._notifier.theme
        self._palette = resolve(self._theme)
        logger.debug("Re-highlighting %d chars for %s theme",
                     len(self._text), self._theme.value)
        self._rerender()

    def apply_layout(self, **changes):
        """Font, padding, placeholder, read-only, autosize: both layers at once."""
        self._layout = replace(self._layout, **changes)
        self._apply_layout()

    def focus(self):
        self._editable.focus()

    def unfocus(self):
        self._editable.unfocus()

    # ── Teardown ──

    def close(self):
        if self._closed:
            return
        self._closed = True
        self._resources.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()
        return False

    # ── Internals ──

    @contextmanager
    def _suppressing_echo(self):
        self._suppress_echo = True
        try:
            yield
        finally:
            self._suppress_echo = False

    def _tokenize(self, text):
        return tokenize(text, self._language, self._palette, self.plain_text_color)

    def _rerender(self):
        runs = self._tokenize(self._text)
        self._renderer.render(runs)
        self._runs = runs

    def _apply_layout(self):
        self._editable.apply_layout(self._layout)
        self._renderer.apply_layout(self._layout)
