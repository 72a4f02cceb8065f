"""
IDE Helper Managers — database selection, query files and query execution.
Kept out of ide.py so the window class only builds and wires widgets.
"""
import logging
import os
import threading
from tkinter import filedialog

from ide_theme import chrome
from query_engine import PickerRequest, QueryEngineError
from results import rows_to_json, summarize_rows

logger = logging.getLogger(__name__)


class IDEDatabaseManager:
    """Opens and closes the database behind the IDE."""

    def __init__(self, ide):
        self.ide = ide

    def pick_database(self):
        last = self.ide.settings.last_database
        request = PickerRequest(initial_dir=os.path.dirname(last) if last else None)
        path = filedialog.askopenfilename(parent=self.ide.root, **request.as_dialog_options())
        if path:
            self.open_database(path)

    def open_database(self, path):
        engine = self.ide.engine
        try:
            engine.open(path)
        except QueryEngineError as e:
            self.ide._show_error("Failed to open database", str(e))
            return False
        self.ide.settings.last_database = str(engine.path)
        self.ide.execute_btn.configure(state="normal")
        self.ide.db_label.configure(text=f"Connected: {engine.name}  ({engine.path})")
        self.ide._set_summary("Database opened. Ready for queries.")
        self.ide.results.clear()
        return True

    def close_database(self):
        self.ide.engine.close()
        self.ide.execute_btn.configure(state="disabled")
        self.ide.db_label.configure(text="No database selected")


class IDEFileManager:
    """Loads and saves query text (.sql files)."""

    FILE_TYPES = [("SQL Files", "*.sql"), ("Text", "*.txt"), ("All files", "*.*")]

    def __init__(self, ide):
        self.ide = ide
        self.current_file = None

    def open_file(self):
        path = filedialog.askopenfilename(parent=self.ide.root, title="Open Query",
                                          filetypes=self.FILE_TYPES)
        if not path:
            return
        try:
            with open(path, "r", encoding="utf-8") as f:
                content = f.read()
        except (OSError, UnicodeDecodeError) as e:
            self.ide._show_error("File Error", f"Cannot open file: {e}")
            return
        self.ide.query_editor.set_text(content)
        self.current_file = path
        self.ide._set_summary(f"Opened {os.path.basename(path)}")

    def save_file(self):
        if self.current_file:
            self.write_file(self.current_file)
        else:
            self.save_as()

    def save_as(self):
        path = filedialog.asksaveasfilename(parent=self.ide.root, title="Save Query",
                                            defaultextension=".sql",
                                            filetypes=self.FILE_TYPES)
        if path:
            self.write_file(path)
            self.current_file = path

    def write_file(self, path):
        try:
            with open(path, "w", encoding="utf-8") as f:
                f.write(self.ide.query_editor.text)
        except OSError as e:
            self.ide._show_error("File Error", f"Cannot save file: {e}")
            return
        self.ide._set_summary(f"Saved {os.path.basename(path)}")


class IDEQueryRunner:
    """Runs a query on a worker thread and reports back on the Tk thread."""

    POLL_MS = 50

    def __init__(self, ide):
        self.ide = ide
        self.is_running = False
        self.run_thread = None
        self._outcome = None

    def run_query(self):
        if self.is_running:
            return
        sql = self.ide.query_editor.text.strip()
        self.ide.results.clear()
        if not self.ide.engine.is_open:
            self.ide._show_error("No database", "Please open a database first.")
            return
        if not sql:
            self.ide._show_error("No query", "Enter a query to execute.")
            return

        self.is_running = True
        self._outcome = None
        self.ide.execute_btn.configure(fg_color=chrome("overlay"))
        self.ide._set_summary("Running...")
        self.run_thread = threading.Thread(target=self._execute, args=(sql,), daemon=True)
        self.run_thread.start()
        self._check_thread()

    def _execute(self, sql):
        try:
            rows = self.ide.engine.execute(sql)
            self._outcome = ("ok", rows_to_json(rows), len(rows))
        except QueryEngineError as e:
            self._outcome = ("error", str(e), None)
        except Exception as e:
            logger.exception("Unexpected failure running query")
            self._outcome = ("error", f"Unexpected error: {e}", None)

    def _check_thread(self):
        if self.run_thread and self.run_thread.is_alive():
            self.ide.root.after(self.POLL_MS, self._check_thread)
            return
        self.is_running = False
        self.ide.execute_btn.configure(fg_color=chrome("accent"))
        kind, payload, count = self._outcome or ("error", "Query did not finish.", None)
        if kind == "ok":
            self.ide._show_results(payload, summarize_rows(count))
        else:
            self.ide._show_error("Query Error", payload)
