import pytest

ctk = pytest.importorskip("customtkinter")

import ide
from ide_theme import Theme


@pytest.fixture
def tracked(monkeypatch):
    callbacks = []
    monkeypatch.setattr(ide.ctk.AppearanceModeTracker, "add",
                        lambda callback, widget=None: callbacks.append(callback))
    monkeypatch.setattr(ide.ctk.AppearanceModeTracker, "remove",
                        lambda callback: callbacks.remove(callback))
    return callbacks


@pytest.fixture
def modes(monkeypatch):
    requested = []
    monkeypatch.setattr(ide.ctk, "set_appearance_mode", requested.append)
    monkeypatch.setattr(ide.ctk, "get_appearance_mode", lambda: "Light")
    return requested


def test_system_mode_follows_os_switch(tracked, modes):
    notifier = ide.AppearanceThemeNotifier("System")
    notifier.watch_appearance_mode()
    seen = []
    notifier.subscribe(seen.append)

    for callback in list(tracked):
        callback("Dark")

    assert notifier.theme is Theme.DARK
    assert seen == [Theme.DARK]
    # Still following the system, no explicit mode forced
    assert modes == ["system"]


def test_repeated_mode_report_is_not_rebroadcast(tracked, modes):
    notifier = ide.AppearanceThemeNotifier("System")
    notifier.watch_appearance_mode()
    seen = []
    notifier.subscribe(seen.append)

    for mode in ("Light", "Dark", "Dark"):
        tracked[0](mode)

    assert seen == [Theme.DARK]


def test_close_stops_following(tracked, modes):
    notifier = ide.AppearanceThemeNotifier("System")
    notifier.watch_appearance_mode()
    assert len(tracked) == 1
    notifier.close()
    assert tracked == []


def test_explicit_theme_sets_appearance_mode(tracked, modes):
    notifier = ide.AppearanceThemeNotifier("Light")
    notifier.set_theme(Theme.DARK)
    assert modes == ["Light", "Dark"]
    assert notifier.theme is Theme.DARK
