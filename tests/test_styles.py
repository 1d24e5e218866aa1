import random
import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from palettes import BLACK, DESATURATE, ORANGE, RGB, VIBGYOR, WHITE
from render_config import StyleFilter
from styles import apply_style, blink, desaturate, finish_color, on_blink_line


def _colors(n, seed=11):
    rng = random.Random(seed)
    return [(rng.randint(0, 255), rng.randint(0, 255), rng.randint(0, 255)) for _ in range(n)]


class TestRegistry(unittest.TestCase):

    def test_every_filter_has_a_handler(self):
        for flt in StyleFilter:
            out = apply_style(flt, (120, 80, 40), VIBGYOR)
            self.assertEqual(len(out), 3)

    def test_none_is_passthrough(self):
        self.assertEqual(apply_style(StyleFilter.NONE, (1, 2, 3), VIBGYOR), (1, 2, 3))


class TestNoir(unittest.TestCase):

    def test_black_white_palette_only_yields_black_or_white(self):
        for c in _colors(300):
            self.assertIn(apply_style(StyleFilter.NOIR, c, [BLACK, WHITE]), (BLACK, WHITE))

    def test_red_pushes_to_black(self):
        # grey 76 -> 26 -> black
        self.assertEqual(apply_style(StyleFilter.NOIR, (255, 0, 0), [BLACK, WHITE]), BLACK)

    def test_bright_pushes_up(self):
        duo = [(20, 0, 40), (250, 240, 200)]
        self.assertEqual(apply_style(StyleFilter.NOIR, (200, 200, 200), duo), (250, 240, 200))

    def test_empty_palette_returns_contrast_grey(self):
        self.assertEqual(apply_style(StyleFilter.NOIR, (255, 0, 0), []), (26, 26, 26))


class TestRainbowAndPopArt(unittest.TestCase):

    def test_near_grey_goes_black_or_white(self):
        self.assertEqual(apply_style(StyleFilter.RAINBOW, (100, 100, 100), VIBGYOR), BLACK)
        self.assertEqual(apply_style(StyleFilter.RAINBOW, (200, 190, 200), VIBGYOR), WHITE)

    def test_brownish_maps_to_orange(self):
        self.assertEqual(apply_style(StyleFilter.RAINBOW, (150, 100, 50), VIBGYOR), ORANGE)

    def test_brownish_without_orange_uses_first_entry(self):
        self.assertEqual(apply_style(StyleFilter.RAINBOW, (150, 100, 50), RGB), RGB[0])

    def test_gradient_index_without_jitter(self):
        # grey 29 -> floor(29 / 256 * 9) = 1 -> indigo
        self.assertEqual(apply_style(StyleFilter.RAINBOW, (0, 0, 255), VIBGYOR), VIBGYOR[1])

    def test_nearest_match_with_jitter_and_large_palette(self):
        self.assertEqual(apply_style(StyleFilter.RAINBOW, (0, 0, 255), VIBGYOR, True), (0, 0, 255))

    def test_small_palette_stays_on_gradient_even_with_jitter(self):
        # grey 29 -> floor(29 / 256 * 5) = 0
        self.assertEqual(apply_style(StyleFilter.RAINBOW, (0, 0, 255), RGB, True), RGB[0])

    def test_popart_requantizes_styled_colors(self):
        # light grey: rainbow keeps white, pop-art re-maps grey 200 -> index 7 (black)
        self.assertEqual(apply_style(StyleFilter.RAINBOW, (200, 200, 200), VIBGYOR), WHITE)
        self.assertEqual(apply_style(StyleFilter.POPART, (200, 200, 200), VIBGYOR), VIBGYOR[7])

    def test_outputs_come_from_the_palette_when_not_grey(self):
        for c in _colors(200, seed=5):
            for flt in (StyleFilter.RAINBOW, StyleFilter.POPART):
                out = apply_style(flt, c, RGB)
                self.assertIn(out, tuple(RGB) + (BLACK, WHITE))

    def test_empty_palette_keeps_transformed_color(self):
        self.assertEqual(apply_style(StyleFilter.RAINBOW, (0, 0, 255), []), (0, 0, 255))
        self.assertEqual(apply_style(StyleFilter.POPART, (150, 100, 50), []), (150, 100, 50))


class TestPostPasses(unittest.TestCase):

    def test_desaturate_always_lands_on_the_seven(self):
        for c in _colors(300, seed=9):
            self.assertIn(desaturate(c), DESATURATE)

    def test_desaturate_after_any_filter(self):
        for flt in StyleFilter:
            for c in _colors(40, seed=2):
                out = finish_color(c, flt, VIBGYOR, desaturated=True)
                self.assertIn(out, DESATURATE)

    def test_blink_lines(self):
        self.assertTrue(on_blink_line(9, 0))
        self.assertTrue(on_blink_line(0, 9))
        self.assertTrue(on_blink_line(19, 3))
        self.assertFalse(on_blink_line(0, 0))
        self.assertFalse(on_blink_line(10, 10))

    def test_blink_flash_depends_on_brightness(self):
        self.assertEqual(blink(WHITE), (50, 50, 50))
        self.assertEqual(blink(BLACK), WHITE)
        self.assertEqual(blink((255, 0, 0)), WHITE)

    def test_blink_only_on_tenth_lines(self):
        c = (255, 0, 0)
        self.assertEqual(finish_color(c, StyleFilter.NONE, (), blink_on=True, row=9, col=2), WHITE)
        self.assertEqual(finish_color(c, StyleFilter.NONE, (), blink_on=True, row=8, col=2), c)
        self.assertEqual(finish_color(c, StyleFilter.NONE, (), blink_on=False, row=9, col=9), c)


if __name__ == "__main__":
    unittest.main()
