"""
Query Tester IDE — Desktop Interface
CustomTkinter + Tkinter hybrid GUI with light/dark Catppuccin chrome,
a syntax-highlighted SQL++ editor and a JSON-highlighted results pane.
"""
import logging
import tkinter as tk

import customtkinter as ctk

from highlighter import HighlightLanguage, tokenize
from ide_managers import IDEDatabaseManager, IDEFileManager, IDEQueryRunner
from ide_theme import Theme, ThemeNotifier, chrome, colors_for, resolve
from ide_widgets import QueryEditor, RunView
from query_engine import QueryEngine
from settings import SettingsError, load_settings, save_settings
from surface import LayoutOptions

logger = logging.getLogger(__name__)

DEFAULT_FONT_SIZE = 12


class AppearanceThemeNotifier(ThemeNotifier):
    """ThemeNotifier that also switches customtkinter's appearance mode."""

    def __init__(self, mode="System"):
        if mode in ("Light", "Dark"):
            ctk.set_appearance_mode(mode)
        else:
            ctk.set_appearance_mode("system")
        initial = Theme.from_name(ctk.get_appearance_mode(), Theme.LIGHT)
        super().__init__(initial)

    def set_theme(self, theme):
        if theme is not self.theme:
            ctk.set_appearance_mode(theme.value)
        super().set_theme(theme)

    def watch_appearance_mode(self):
        """Follow customtkinter's appearance mode, including OS switches in "System" mode."""
        ctk.AppearanceModeTracker.add(self._on_appearance_mode)
        self._on_appearance_mode(ctk.get_appearance_mode())

    def _on_appearance_mode(self, mode):
        theme = Theme.from_name(mode)
        if theme is not None:
            # customtkinter already switched; only broadcast
            ThemeNotifier.set_theme(self, theme)

    def close(self):
        ctk.AppearanceModeTracker.remove(self._on_appearance_mode)


# ═══════════════════════════════════════════════════════
#  Main Window
# ═══════════════════════════════════════════════════════

class QueryTesterIDE:
    """Main window: open a database, type a query, read highlighted JSON results."""

    def __init__(self, settings_path=None):
        self._settings_path = settings_path
        self.settings = load_settings(settings_path) if settings_path else load_settings()
        self.engine = QueryEngine(max_rows=self.settings.max_rows)
        self.notifier = AppearanceThemeNotifier(self.settings.theme)

        self.root = ctk.CTk()
        self.root.title("Query Tester")
        self.root.configure(fg_color=chrome("bg_tertiary"))
        self.root.geometry("1100x750")
        self.root.minsize(800, 500)
        self.root.protocol("WM_DELETE_WINDOW", self.close)

        # Extracted Managers
        self.db_manager = IDEDatabaseManager(self)
        self.file_manager = IDEFileManager(self)
        self.query_runner = IDEQueryRunner(self)

        self._result_json = None
        self._build_ui()
        self._bind_shortcuts()
        self._theme_subscription = self.notifier.subscribe(self._on_theme_changed)
        self._on_theme_changed(self.notifier.theme)
        self.notifier.watch_appearance_mode()

        if self.settings.last_database:
            self.root.after(100, self._reopen_last_database)

    # ═══════ UI Construction ═══════

    def _build_ui(self):
        ctk.CTkFrame(self.root, fg_color=chrome("accent"),
                     corner_radius=0, height=2).pack(fill="x", side="top")

        self._build_toolbar()
        self._build_statusbar()

        self.paned = tk.PanedWindow(self.root, orient="vertical",
                                    sashwidth=4, sashrelief="flat")
        self.paned.pack(fill="both", expand=True)

        self._build_editor()
        self._build_results()

    def _build_toolbar(self):
        toolbar = ctk.CTkFrame(self.root, fg_color=chrome("toolbar_bg"),
                               corner_radius=0, height=48)
        toolbar.pack(fill="x", side="top")
        toolbar.pack_propagate(False)

        left = ctk.CTkFrame(toolbar, fg_color="transparent")
        left.pack(side="left", padx=8)

        for text, cmd in [("Open DB", self.db_manager.pick_database),
                          ("Open Query", self.file_manager.open_file),
                          ("Save Query", self.file_manager.save_file)]:
            ctk.CTkButton(
                left, text=text, command=cmd,
                fg_color=chrome("button_bg"), text_color=chrome("text"),
                hover_color=chrome("button_hover"), corner_radius=6,
                font=("Segoe UI", 10), width=84, height=30,
            ).pack(side="left", padx=3, pady=8)

        sep = ctk.CTkFrame(toolbar, fg_color=chrome("overlay"),
                           width=2, height=26, corner_radius=1)
        sep.pack(side="left", padx=10)

        center = ctk.CTkFrame(toolbar, fg_color="transparent")
        center.pack(side="left", padx=4)

        self.execute_btn = ctk.CTkButton(
            center, text="▶  Execute", command=self.run_query,
            fg_color=chrome("accent"), text_color=chrome("bg_tertiary"),
            corner_radius=8, font=("Segoe UI", 12, "bold"),
            width=110, height=32, state="disabled",
        )
        self.execute_btn.pack(side="left", padx=4, pady=8)

        ctk.CTkButton(
            center, text="✕  Clear", command=self.clear_results,
            fg_color=chrome("button_bg"), text_color=chrome("text"),
            hover_color=chrome("button_hover"), corner_radius=8,
            font=("Segoe UI", 11), width=85, height=32,
        ).pack(side="left", padx=4, pady=8)

        self.theme_switch = ctk.CTkSwitch(
            toolbar, text="Dark", command=self._toggle_theme,
            font=("Segoe UI", 10), text_color=chrome("subtext"),
        )
        self.theme_switch.pack(side="right", padx=16)

    def _build_editor(self):
        editor_frame = ctk.CTkFrame(self.root, fg_color=chrome("bg"), corner_radius=0)
        self.paned.add(editor_frame, stretch="always", height=320)

        self.db_label = ctk.CTkLabel(
            editor_frame, text="No database selected", anchor="w",
            font=("Segoe UI", 10), text_color=chrome("subtext"),
        )
        self.db_label.pack(fill="x", padx=10, pady=(4, 0))

        layout = LayoutOptions(
            font_family=self.settings.font_family,
            font_size=self.settings.clamped_font_size(),
            placeholder="SELECT * FROM sqlite_master",
        )
        self.query_editor = QueryEditor(editor_frame, self.notifier,
                                        language=HighlightLanguage.SQL, layout=layout)
        self.query_editor.pack(fill="both", expand=True)
        self.query_editor.add_text_listener(self._on_query_edited)

    def _build_results(self):
        output_frame = ctk.CTkFrame(self.root, fg_color=chrome("output_bg"), corner_radius=0)
        self.paned.add(output_frame, stretch="always")

        header = ctk.CTkFrame(output_frame, fg_color=chrome("bg_secondary"),
                              corner_radius=0, height=28)
        header.pack(fill="x")
        header.pack_propagate(False)
        ctk.CTkLabel(
            header, text="  RESULTS",
            font=("Segoe UI", 9, "bold"), text_color=chrome("subtext"),
        ).pack(side="left", padx=4, pady=2)

        self.summary_label = ctk.CTkLabel(
            header, text="Results will appear here",
            font=("Segoe UI", 9), text_color=chrome("subtext"),
        )
        self.summary_label.pack(side="right", padx=12)

        self.results = RunView(output_frame)
        self.results.apply_layout(self.query_editor.surface.layout)
        self.results.pack(fill="both", expand=True)

    def _build_statusbar(self):
        status = ctk.CTkFrame(self.root, fg_color=chrome("status_bg"),
                              corner_radius=0, height=26)
        status.pack(fill="x", side="bottom")
        status.pack_propagate(False)

        self.status_msg = ctk.CTkLabel(
            status, text="Ready",
            font=("Segoe UI", 9), text_color=chrome("subtext"),
        )
        self.status_msg.pack(side="left", padx=12)

        ctk.CTkLabel(
            status,
            text="Ctrl+Enter / F5 Execute  │  Ctrl+O Open DB  │  Ctrl+S Save  │  Ctrl+±  Zoom",
            font=("Segoe UI", 8), text_color=chrome("overlay"),
        ).pack(side="right", padx=20)

    # ═══════ Helpers ═══════

    def _bind_shortcuts(self):
        self.root.bind("<F5>", lambda e: self.run_query())
        self.root.bind("<Control-Return>", lambda e: self.run_query())
        self.root.bind("<Control-o>", lambda e: self.db_manager.pick_database())
        self.root.bind("<Control-O>", lambda e: self.db_manager.pick_database())
        self.root.bind("<Control-s>", lambda e: self.file_manager.save_file())
        self.root.bind("<Control-S>", lambda e: self.file_manager.save_file())
        self.root.bind("<Control-equal>", lambda e: self._change_font_size(1))
        self.root.bind("<Control-plus>", lambda e: self._change_font_size(1))
        self.root.bind("<Control-minus>", lambda e: self._change_font_size(-1))
        self.root.bind("<Control-0>", lambda e: self._set_font_size(DEFAULT_FONT_SIZE))

    def _change_font_size(self, delta):
        self._set_font_size(self.query_editor.surface.layout.font_size + delta)

    def _set_font_size(self, size):
        size = self.settings.clamped_font_size(size)
        self.settings.font_size = size
        self.query_editor.apply_layout(font_size=size)
        self.results.apply_layout(self.query_editor.surface.layout)
        self._set_status(f"Font size: {size}")

    def _toggle_theme(self):
        theme = Theme.DARK if self.theme_switch.get() else Theme.LIGHT
        self.settings.theme = theme.value
        self.notifier.set_theme(theme)

    def _on_theme_changed(self, theme):
        colors = colors_for(theme)
        self.paned.configure(bg=colors["border"])
        self.results.recolor(theme)
        if theme is Theme.DARK:
            self.theme_switch.select()
        else:
            self.theme_switch.deselect()
        if self._result_json is not None:
            self.results.render(tokenize(self._result_json, HighlightLanguage.JSON, resolve(theme)))

    def _on_query_edited(self, _old_text, new_text):
        lines = new_text.count("\n") + 1
        self._set_status(f"{lines} line{'s' if lines != 1 else ''}, {len(new_text)} chars")

    def _reopen_last_database(self):
        if not self.db_manager.open_database(self.settings.last_database):
            self.settings.last_database = None

    def _set_status(self, msg, color=None):
        self.status_msg.configure(text=msg, text_color=color or chrome("subtext"))

    def _set_summary(self, msg):
        self.summary_label.configure(text=msg)

    # ═══════ Results ═══════

    def run_query(self):
        self.query_runner.run_query()

    def clear_results(self):
        self._result_json = None
        self.results.clear()
        self._set_summary("Results cleared.")

    def _show_results(self, json_text, summary):
        self._result_json = json_text
        palette = resolve(self.notifier.theme)
        self.results.render(tokenize(json_text, HighlightLanguage.JSON, palette))
        self._set_summary(summary)
        self._set_status(summary, chrome("success"))
        # Let Tk lay out the new text before scrolling
        self.root.after(50, self.results.scroll_to_top)

    def _show_error(self, kind, message):
        logger.info("%s: %s", kind, message)
        self._result_json = None
        self.results.show_message(message, colors_for(self.notifier.theme)["error"])
        self._set_summary("An error occurred.")
        self._set_status(kind, chrome("error"))

    # ═══════ Lifecycle ═══════

    def close(self):
        self.notifier.close()
        self._theme_subscription.close()
        self.db_manager.close_database()
        try:
            if self._settings_path:
                save_settings(self.settings, self._settings_path)
            else:
                save_settings(self.settings)
        except SettingsError as e:
            logger.warning("Settings not saved: %s", e)
        self.root.destroy()

    def start(self):
        self.root.mainloop()


if __name__ == "__main__":
    app = QueryTesterIDE()
    app.start()
