import importlib.util
import os
import sys
import tempfile
import unittest
from pathlib import Path

from PIL import Image

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from animation import BLINK_INTERVAL_MS, _to_frame_array, blink_frames, encode_frames_to_gif, encode_frames_to_mp4
from render_config import RenderConfig, Shape

HAS_FFMPEG = importlib.util.find_spec("imageio_ffmpeg") is not None


class TestBlinkFrames(unittest.TestCase):

    def setUp(self):
        self.src = Image.new("RGB", (80, 80), (255, 0, 0))
        self.cfg = RenderConfig(grid_size=20, shape=Shape.RECTANGLE)
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = self._tmp.name

    def tearDown(self):
        self._tmp.cleanup()

    def test_alternates_off_and_on(self):
        frames = blink_frames(self.src, self.cfg, cycles=3)
        self.assertEqual(len(frames), 6)
        self.assertTrue(all(f["duration_ms"] == BLINK_INTERVAL_MS for f in frames))
        off, on = frames[0]["image"], frames[1]["image"]
        self.assertNotEqual(off.tobytes(), on.tobytes())
        self.assertEqual(frames[2]["image"].tobytes(), off.tobytes())
        # column 10 flashes white on red
        self.assertEqual(on.getpixel((38, 2)), (255, 255, 255))
        self.assertEqual(off.getpixel((38, 2)), (255, 0, 0))

    def test_gif(self):
        out = os.path.join(self.tmp, "sub", "blink.gif")
        encode_frames_to_gif(blink_frames(self.src, self.cfg, cycles=2), out)
        with Image.open(out) as gif:
            self.assertEqual(gif.n_frames, 4)
            self.assertEqual(gif.info.get("duration"), BLINK_INTERVAL_MS)

    def test_frame_array_is_rgb(self):
        arr = _to_frame_array(Image.new("RGBA", (5, 3), (1, 2, 3, 4)))
        self.assertEqual(arr.shape, (3, 5, 3))
        self.assertEqual(tuple(arr[0, 0]), (1, 2, 3))

    def test_empty_frames_rejected(self):
        with self.assertRaises(ValueError):
            encode_frames_to_gif([], os.path.join(self.tmp, "x.gif"))
        with self.assertRaises(ValueError):
            encode_frames_to_mp4([], os.path.join(self.tmp, "x.mp4"))

    @unittest.skipUnless(HAS_FFMPEG, "imageio-ffmpeg not installed")
    def test_mp4(self):
        out = os.path.join(self.tmp, "blink.mp4")
        encode_frames_to_mp4(blink_frames(self.src, self.cfg, cycles=2), out)
        self.assertGreater(os.path.getsize(out), 0)


if __name__ == "__main__":
    unittest.main()
