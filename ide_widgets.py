"""
IDE Widgets — Tk surfaces for the highlighting controller.
CodeEditor is the editable layer, TagLayer paints runs over its glyphs,
RunView is a read-only surface for query results.
"""
import logging
import tkinter as tk
from tkinter import font as tkfont

import customtkinter as ctk

from highlighter import HighlightLanguage, joined_text
from ide_theme import COLORS, chrome, colors_for
from surface import HighlightingSurface, LayoutOptions

logger = logging.getLogger(__name__)

MONOSPACE_FAMILIES = ("Cascadia Code", "JetBrains Mono", "Fira Code", "Consolas",
                      "Menlo", "DejaVu Sans Mono", "Courier New")


def pick_monospace_family(preferred=None):
    families = set(tkfont.families())
    for fam in ((preferred,) if preferred else ()) + MONOSPACE_FAMILIES:
        if fam in families:
            return fam
    return "TkFixedFont"


class RunTags:
    """Lazily configured Tk tags, one per (colour, bold) pair."""

    PREFIX = "run:"

    def __init__(self, widget):
        self.widget = widget
        self.bold_font = None
        self._configured = set()

    def set_font(self, base_font):
        actual = tkfont.Font(font=base_font).actual()
        self.bold_font = tkfont.Font(family=actual["family"], size=actual["size"],
                                     weight="bold")
        for name in self._configured:
            if name.endswith(":b"):
                self.widget.tag_configure(name, font=self.bold_font)

    def tag_for(self, run):
        name = f"{self.PREFIX}{run.color}{':b' if run.bold else ''}"
        if name not in self._configured:
            opts = {"foreground": run.color}
            if run.bold and self.bold_font is not None:
                opts["font"] = self.bold_font
            self.widget.tag_configure(name, **opts)
            self._configured.add(name)
        return name

    def clear(self):
        for name in self._configured:
            self.widget.tag_remove(name, "1.0", "end")


# ═══════════════════════════════════════════════════════
#  Editable layer
# ═══════════════════════════════════════════════════════

class CodeEditor(tk.Text):
    """Plain-text editing surface with placeholder and current-line highlight."""

    MIN_AUTOSIZE_LINES = 3

    def __init__(self, parent, **kwargs):
        self.code_font = kwargs.pop("font", None) or tkfont.Font(
            family=pick_monospace_family(), size=12)
        super().__init__(parent, font=self.code_font, undo=True, maxundo=-1,
                         relief="flat", bd=0, wrap="word", **kwargs)
        self._change_callback = None
        self._autosize = False
        self._placeholder = tk.Label(self, text="", anchor="nw",
                                     fg=COLORS["placeholder"], font=self.code_font)
        self.tag_configure("current_line", background=COLORS["current_line"])
        self.bind("<<Modified>>", self._on_modify)
        self.bind("<KeyRelease>", self._on_cursor_move)
        self.bind("<ButtonRelease-1>", self._on_cursor_move)

    # ── EditableSurface ──

    def get_text(self):
        return self.get("1.0", "end-1c")

    def set_text(self, text):
        was_disabled = self.cget("state") == "disabled"
        if was_disabled:
            self.configure(state="normal")
        self.delete("1.0", "end")
        self.insert("1.0", text)
        if was_disabled:
            self.configure(state="disabled")
        # Queued <<Modified>> events for this write see a clean flag and are dropped
        self.edit_modified(False)
        self._after_content_change()

    def set_change_callback(self, callback):
        self._change_callback = callback

    def apply_layout(self, options: LayoutOptions):
        self.code_font.configure(family=pick_monospace_family(options.font_family),
                                 size=options.font_size)
        self.configure(padx=options.padding, pady=options.padding,
                       state="disabled" if options.read_only else "normal")
        self._placeholder.configure(text=options.placeholder)
        self._autosize = options.autosize
        self._after_content_change()

    def focus(self):
        self.focus_set()

    def unfocus(self):
        self.master.focus_set()

    # ── Theme ──

    def recolor(self, theme):
        colors = colors_for(theme)
        self.configure(bg=colors["bg"], fg=colors["text"],
                       insertbackground=colors["cursor"],
                       selectbackground=colors["selection"],
                       selectforeground=colors["text"])
        self._placeholder.configure(bg=colors["bg"])
        self.tag_configure("current_line", background=colors["current_line"])

    # ── Change tracking ──

    def _on_modify(self, _event=None):
        if not self.edit_modified():
            return
        self.edit_modified(False)
        self._after_content_change()
        if self._change_callback is not None:
            self._change_callback(self.get_text())

    def _after_content_change(self):
        self._update_placeholder()
        if self._autosize:
            lines = int(self.index("end-1c").split(".")[0])
            self.configure(height=max(self.MIN_AUTOSIZE_LINES, lines))
        self._highlight_current_line()

    def _update_placeholder(self):
        if self._placeholder.cget("text") and not self.get_text():
            pad = int(str(self.cget("padx")))
            self._placeholder.place(x=pad, y=int(str(self.cget("pady"))))
        else:
            self._placeholder.place_forget()

    # ── Current-line highlight ──

    def _on_cursor_move(self, _event=None):
        self._highlight_current_line()

    def _highlight_current_line(self):
        self.tag_remove("current_line", "1.0", "end")
        self.tag_add("current_line", "insert linestart", "insert lineend+1c")
        self.tag_lower("current_line")


# ═══════════════════════════════════════════════════════
#  Render layers
# ═══════════════════════════════════════════════════════

class TagLayer:
    """Paints runs as tags over a CodeEditor's own characters."""

    def __init__(self, editor: CodeEditor):
        self.editor = editor
        self.tags = RunTags(editor)
        self.tags.set_font(editor.code_font)
        # Tcl 8.6 stores characters outside the BMP as surrogate pairs
        self._wide_chars = editor.tk.call("string", "length", "\U0001F600") == 2

    def index_length(self, text):
        """Length of *text* in Tk "+Nc" index units."""
        if self._wide_chars:
            return sum(2 if ord(ch) > 0xFFFF else 1 for ch in text)
        return len(text)

    def render(self, runs):
        self.tags.clear()
        if joined_text(runs) != self.editor.get_text():
            # Re-serialised output (JSON) cannot be laid over the typed text
            logger.debug("Runs do not match editor text, leaving it unpainted")
            return
        offset = 0
        for run in runs:
            if run.text:
                end = offset + self.index_length(run.text)
                self.editor.tag_add(self.tags.tag_for(run), f"1.0+{offset}c", f"1.0+{end}c")
                offset = end
        self.editor.tag_lower("current_line")

    def apply_layout(self, options: LayoutOptions):
        self.tags.set_font(self.editor.code_font)


class RunView(tk.Text):
    """Read-only display of a run sequence (query results, messages)."""

    def __init__(self, parent, **kwargs):
        self.view_font = kwargs.pop("font", None) or tkfont.Font(
            family=pick_monospace_family(), size=11)
        super().__init__(parent, font=self.view_font, relief="flat", bd=0,
                         wrap="word", **kwargs)
        self.tags = RunTags(self)
        self.tags.set_font(self.view_font)
        self.tag_configure("message", foreground=COLORS["error"])
        self.configure(state="disabled")

    def render(self, runs):
        self.configure(state="normal")
        self.delete("1.0", "end")
        for run in runs:
            if run.text:
                self.insert("end", run.text, self.tags.tag_for(run))
        self.configure(state="disabled")

    def show_message(self, text, color=None):
        self.configure(state="normal")
        self.delete("1.0", "end")
        self.tag_configure("message", foreground=color or COLORS["error"])
        self.insert("1.0", text, "message")
        self.configure(state="disabled")

    def clear(self):
        self.configure(state="normal")
        self.delete("1.0", "end")
        self.configure(state="disabled")

    def scroll_to_top(self):
        self.yview_moveto(0)

    def apply_layout(self, options: LayoutOptions):
        self.view_font.configure(family=pick_monospace_family(options.font_family),
                                 size=max(8, options.font_size - 1))
        self.configure(padx=options.padding + 4, pady=options.padding)
        self.tags.set_font(self.view_font)

    def recolor(self, theme):
        colors = colors_for(theme)
        self.configure(bg=colors["output_bg"], fg=colors["text"],
                       selectbackground=colors["selection"])


# ═══════════════════════════════════════════════════════
#  Composite editor
# ═══════════════════════════════════════════════════════

class QueryEditor(ctk.CTkFrame):
    """Highlighted query editor: CodeEditor + TagLayer driven by a HighlightingSurface."""

    def __init__(self, parent, notifier, language=HighlightLanguage.SQL,
                 layout=None, **kwargs):
        super().__init__(parent, fg_color=chrome("bg"), corner_radius=0, **kwargs)
        self.editor = CodeEditor(self)
        scrollbar = ctk.CTkScrollbar(self, orientation="vertical",
                                     fg_color=chrome("bg"),
                                     button_color=chrome("surface"),
                                     button_hover_color=chrome("overlay"),
                                     command=self.editor.yview)
        self.editor.configure(yscrollcommand=scrollbar.set)
        scrollbar.pack(side="right", fill="y")
        self.editor.pack(side="left", fill="both", expand=True)

        self.editor.recolor(notifier.theme)
        self.layer = TagLayer(self.editor)
        self.surface = HighlightingSurface(self.editor, self.layer, notifier,
                                           language=language, layout=layout)
        self._chrome_subscription = notifier.subscribe(self.editor.recolor)

    @property
    def text(self):
        return self.surface.text

    def set_text(self, text):
        self.surface.set_text(text)

    def set_language(self, language):
        self.surface.set_language(language)

    def add_text_listener(self, listener):
        self.surface.add_text_listener(listener)

    def apply_layout(self, **changes):
        self.surface.apply_layout(**changes)

    def focus(self):
        self.surface.focus()

    def destroy(self):
        self.surface.close()
        self._chrome_subscription.close()
        super().destroy()
