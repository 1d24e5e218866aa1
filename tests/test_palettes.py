import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from palettes import (
    MAX_CUSTOM_COLORS, NOIR_DEFAULT, POPART_SCHEMES, VIBGYOR, YCM,
    active_palette, add_color, next_scheme, remove_color, scheme_index, set_color,
)
from render_config import StyleFilter


class TestActivePalette(unittest.TestCase):

    def test_per_filter(self):
        custom = ((1, 2, 3), (4, 5, 6))
        self.assertEqual(active_palette(StyleFilter.NONE), ())
        self.assertEqual(active_palette(StyleFilter.NOIR), NOIR_DEFAULT)
        self.assertEqual(active_palette(StyleFilter.NOIR, noir=[(9, 9, 9), (200, 0, 0)]), ((9, 9, 9), (200, 0, 0)))
        self.assertEqual(active_palette(StyleFilter.RAINBOW, 3, custom), VIBGYOR)
        self.assertEqual(active_palette(StyleFilter.POPART, 0, custom), custom)
        self.assertEqual(active_palette(StyleFilter.POPART, 2, custom), YCM)

    def test_scheme_lookup(self):
        self.assertEqual(scheme_index("retro"), len(POPART_SCHEMES) - 1)
        self.assertEqual(scheme_index("VIBGYOR"), 0)
        with self.assertRaises(ValueError):
            scheme_index("neon")

    def test_scheme_cycle_wraps(self):
        self.assertEqual(next_scheme(0), 1)
        self.assertEqual(next_scheme(len(POPART_SCHEMES) - 1), 0)


class TestEditing(unittest.TestCase):

    def test_add_skips_duplicates(self):
        pal = add_color(VIBGYOR, (0, 0, 255))
        self.assertEqual(pal, VIBGYOR)
        pal = add_color(VIBGYOR, (1, 1, 1))
        self.assertEqual(pal[-1], (1, 1, 1))
        self.assertEqual(len(pal), len(VIBGYOR) + 1)

    def test_add_respects_capacity(self):
        full = tuple((i, 0, 0) for i in range(MAX_CUSTOM_COLORS))
        self.assertEqual(add_color(full, (99, 99, 99)), full)

    def test_remove_keeps_last_entry(self):
        self.assertEqual(remove_color(((1, 1, 1),), 0), ((1, 1, 1),))
        self.assertEqual(remove_color(((1, 1, 1), (2, 2, 2)), 0), ((2, 2, 2),))
        self.assertEqual(remove_color(((1, 1, 1), (2, 2, 2)), 5), ((1, 1, 1), (2, 2, 2)))

    def test_set_color(self):
        self.assertEqual(set_color(NOIR_DEFAULT, 1, (10, 20, 30)), ((0, 0, 0), (10, 20, 30)))


if __name__ == "__main__":
    unittest.main()
