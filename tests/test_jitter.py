import math
import sys
import unittest
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from jitter import JitterStream, jitter


class TestJitter(unittest.TestCase):

    def test_closed_form(self):
        # sin(1) * 10000 = 8414.70984807...
        self.assertAlmostEqual(jitter(1), 0.709848078965, places=6)

    def test_range_and_repeatability(self):
        for seed in (1, 2, 99, 1_700_000_000_000):
            v = jitter(seed)
            self.assertGreaterEqual(v, 0.0)
            self.assertLess(v, 1.0)
            self.assertEqual(v, jitter(seed))

    def test_negative_sine_still_in_unit_range(self):
        # sin(4) < 0
        self.assertLess(math.sin(4), 0)
        self.assertTrue(0.0 <= jitter(4) < 1.0)


class TestJitterStream(unittest.TestCase):

    def test_advances_by_one_per_draw(self):
        s = JitterStream(5)
        self.assertEqual(s.next(), jitter(5))
        self.assertEqual(s.next(), jitter(6))
        self.assertEqual(s.seed, 7)

    def test_active_flag_follows_start_seed(self):
        self.assertTrue(JitterStream(1).active)
        self.assertFalse(JitterStream(0).active)
        s = JitterStream(0)
        s.next()
        self.assertFalse(s.active)


if __name__ == "__main__":
    unittest.main()
