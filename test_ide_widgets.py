import pytest

tk = pytest.importorskip("tkinter")
ctk = pytest.importorskip("customtkinter")

import ide_widgets
from highlighter import Emphasis, HighlightLanguage, Run, tokenize
from ide_theme import LIGHT_PALETTE as P, Theme, ThemeNotifier
from ide_widgets import CodeEditor, QueryEditor, TagLayer


@pytest.fixture
def root():
    try:
        root = tk.Tk()
    except tk.TclError:
        pytest.skip("no display available")
    root.withdraw()
    yield root
    root.destroy()


@pytest.fixture
def editor(root):
    return CodeEditor(root)


def painted(editor, layer, run):
    """Text ranges carrying the tag used for *run*."""
    ranges = editor.tag_ranges(layer.tags.tag_for(run))
    return [editor.get(start, end) for start, end in zip(ranges[::2], ranges[1::2])]


def test_runs_are_painted_over_editor_text(editor):
    layer = TagLayer(editor)
    text = "SELECT name -- who\nFROM t"
    editor.set_text(text)
    layer.render(tokenize(text, HighlightLanguage.SQL, P))

    assert painted(editor, layer, Run("FROM", P.keyword, Emphasis.BOLD)) == ["SELECT", "FROM"]
    assert painted(editor, layer, Run("-- who", P.comment)) == ["-- who"]


def test_tags_stay_aligned_after_non_bmp_characters(editor):
    layer = TagLayer(editor)
    text = "SELECT '\U0001F600\U0001F600' FROM t"
    editor.set_text(text)
    layer.render(tokenize(text, HighlightLanguage.SQL, P))

    assert painted(editor, layer, Run("'", P.string)) == ["'\U0001F600\U0001F600'"]
    assert painted(editor, layer, Run("FROM", P.keyword, Emphasis.BOLD)) == ["SELECT", "FROM"]


def test_mismatched_runs_leave_text_unpainted(editor):
    layer = TagLayer(editor)
    editor.set_text('{"a":1}')
    layer.render(tokenize('{"a":1}', HighlightLanguage.JSON, P))

    assert painted(editor, layer, Run('"a"', P.property_name)) == []
    assert painted(editor, layer, Run("1", P.number)) == []


def test_query_editor_subscription_released_when_surface_fails(root, monkeypatch):
    notifier = ThemeNotifier(Theme.LIGHT)

    def broken(*args, **kwargs):
        raise RuntimeError("surface failed")
    monkeypatch.setattr(ide_widgets, "HighlightingSurface", broken)

    with pytest.raises(RuntimeError):
        QueryEditor(root, notifier)
    assert notifier.listener_count == 0
