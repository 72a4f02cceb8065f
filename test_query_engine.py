import sqlite3

import pytest
from query_engine import PickerRequest, QueryEngine, QueryEngineError


@pytest.fixture
def db_path(tmp_path):
    path = tmp_path / "hotels.db"
    con = sqlite3.connect(str(path))
    with con:
        con.execute("CREATE TABLE hotel (id INTEGER PRIMARY KEY, name TEXT, photo BLOB)")
        con.executemany("INSERT INTO hotel (name, photo) VALUES (?, ?)",
                        [("Grand", b"\x89PNG"), ("Plaza", None), ("Ritz", None)])
    con.close()
    return path


@pytest.fixture
def engine(db_path):
    with QueryEngine() as engine:
        engine.open(db_path)
        yield engine


def test_open_describes_connection(engine, db_path):
    assert engine.is_open
    assert engine.name == "hotels"
    assert engine.path == db_path.resolve()


def test_execute_returns_rows_as_dicts(engine):
    rows = engine.execute("SELECT id, name, photo FROM hotel ORDER BY id")
    assert rows[0] == {"id": 1, "name": "Grand", "photo": b"\x89PNG"}
    assert [r["name"] for r in rows] == ["Grand", "Plaza", "Ritz"]


def test_statement_without_columns_returns_empty_list(engine):
    assert engine.execute("UPDATE hotel SET name = 'Savoy' WHERE id = 2") == []
    assert engine.execute("SELECT name FROM hotel WHERE id = 2") == [{"name": "Savoy"}]


def test_rows_are_capped(db_path):
    with QueryEngine(max_rows=2) as engine:
        engine.open(db_path)
        assert len(engine.execute("SELECT * FROM hotel")) == 2


def test_bad_sql_is_wrapped(engine):
    with pytest.raises(QueryEngineError) as excinfo:
        engine.execute("SELEC nonsense")
    assert isinstance(excinfo.value.__cause__, sqlite3.Error)


def test_multiple_statements_are_rejected(engine):
    with pytest.raises(QueryEngineError):
        engine.execute("SELECT 1; SELECT 2")


def test_blank_query_is_rejected(engine):
    with pytest.raises(QueryEngineError, match="Enter a query"):
        engine.execute("   \n ")


def test_execute_without_database():
    with pytest.raises(QueryEngineError, match="open a database"):
        QueryEngine().execute("SELECT 1")


def test_missing_file(tmp_path):
    with pytest.raises(QueryEngineError, match="does not exist"):
        QueryEngine().open(tmp_path / "nope.db")


def test_directory_is_rejected(tmp_path):
    folder = tmp_path / "data.db"
    folder.mkdir()
    with pytest.raises(QueryEngineError, match="not a file"):
        QueryEngine().open(folder)


def test_wrong_suffix(tmp_path):
    path = tmp_path / "notes.txt"
    path.write_text("hello")
    with pytest.raises(QueryEngineError, match="not a SQLite database"):
        QueryEngine().open(path)


def test_garbage_file_fails_on_open(tmp_path):
    path = tmp_path / "broken.db"
    path.write_bytes(b"this is definitely not a sqlite database file" * 4)
    engine = QueryEngine()
    with pytest.raises(QueryEngineError, match="Failed to open"):
        engine.open(path)
    assert not engine.is_open


def test_reopen_switches_database(engine, tmp_path):
    other = tmp_path / "other.sqlite"
    con = sqlite3.connect(str(other))
    with con:
        con.execute("CREATE TABLE t (x)")
    con.close()
    engine.open(other)
    assert engine.name == "other"


def test_close_is_idempotent(engine):
    engine.close()
    engine.close()
    assert not engine.is_open
    assert engine.name is None


def test_picker_request_options():
    request = PickerRequest(initial_dir="/data")
    options = request.as_dialog_options()
    assert options["title"] == "Select a SQLite database"
    assert options["initialdir"] == "/data"
    assert ("All files", "*.*") in options["filetypes"]
    assert "initialdir" not in PickerRequest().as_dialog_options()
