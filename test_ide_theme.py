import unittest
from ide_theme import (
    DARK_PALETTE, LIGHT_PALETTE, Theme, ThemeNotifier, chrome, colors_for,
    plain_text_color, resolve,
)


class TestPaletteResolver(unittest.TestCase):
    def test_light_palette_values(self):
        p = resolve(Theme.LIGHT)
        self.assertEqual(
            (p.default, p.keyword, p.string, p.number, p.comment, p.property_name, p.boolean),
            ("#202020", "#0066CC", "#A31515", "#098658", "#6A9955", "#1A4B94", "#B000B5"),
        )

    def test_dark_palette_values(self):
        p = resolve(Theme.DARK)
        self.assertEqual(
            (p.default, p.keyword, p.string, p.number, p.comment, p.property_name, p.boolean),
            ("#E8E8E8", "#4FC1FF", "#CE9178", "#B5CEA8", "#6A9955", "#4EC9B0", "#C586C0"),
        )

    def test_resolve_returns_fixed_tables(self):
        self.assertIs(resolve(Theme.LIGHT), LIGHT_PALETTE)
        self.assertIs(resolve(Theme.DARK), DARK_PALETTE)

    def test_palette_is_immutable(self):
        with self.assertRaises(AttributeError):
            LIGHT_PALETTE.keyword = "#000000"

    def test_plain_text_colors(self):
        self.assertEqual(plain_text_color(Theme.LIGHT), "#000000")
        self.assertEqual(plain_text_color(Theme.DARK), "#FFFFFF")

    def test_theme_from_name(self):
        self.assertIs(Theme.from_name("dark"), Theme.DARK)
        self.assertIs(Theme.from_name("Light"), Theme.LIGHT)
        self.assertIsNone(Theme.from_name("System"))
        self.assertIs(Theme.from_name(None, Theme.LIGHT), Theme.LIGHT)

    def test_chrome_pairs_follow_theme_tables(self):
        light, dark = chrome("bg")
        self.assertEqual(light, colors_for(Theme.LIGHT)["bg"])
        self.assertEqual(dark, colors_for(Theme.DARK)["bg"])


class TestThemeNotifier(unittest.TestCase):
    def setUp(self):
        self.notifier = ThemeNotifier(Theme.LIGHT)
        self.seen = []

    def test_listeners_hear_theme_changes(self):
        self.notifier.subscribe(self.seen.append)
        self.notifier.set_theme(Theme.DARK)
        self.assertEqual(self.seen, [Theme.DARK])
        self.assertIs(self.notifier.theme, Theme.DARK)

    def test_same_theme_is_not_broadcast(self):
        self.notifier.subscribe(self.seen.append)
        self.notifier.set_theme(Theme.LIGHT)
        self.assertEqual(self.seen, [])

    def test_toggle_flips_theme(self):
        self.notifier.subscribe(self.seen.append)
        self.notifier.toggle()
        self.notifier.toggle()
        self.assertEqual(self.seen, [Theme.DARK, Theme.LIGHT])

    def test_closed_subscription_stops_notifications(self):
        sub = self.notifier.subscribe(self.seen.append)
        sub.close()
        sub.close()  # idempotent
        self.notifier.set_theme(Theme.DARK)
        self.assertEqual(self.seen, [])
        self.assertFalse(sub.active)
        self.assertEqual(self.notifier.listener_count, 0)

    def test_subscription_as_context_manager(self):
        with self.notifier.subscribe(self.seen.append):
            self.notifier.set_theme(Theme.DARK)
        self.notifier.set_theme(Theme.LIGHT)
        self.assertEqual(self.seen, [Theme.DARK])

    def test_listener_may_unsubscribe_during_broadcast(self):
        subs = []

        def once(theme):
            self.seen.append(("once", theme))
            subs[0].close()

        subs.append(self.notifier.subscribe(once))
        self.notifier.subscribe(lambda t: self.seen.append(("always", t)))
        self.notifier.set_theme(Theme.DARK)
        self.notifier.set_theme(Theme.LIGHT)
        self.assertEqual(self.seen, [
            ("once", Theme.DARK), ("always", Theme.DARK), ("always", Theme.LIGHT),
        ])


if __name__ == "__main__":
    unittest.main()
