import os
import sys
import tempfile
import unittest
from pathlib import Path

from PIL import Image

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from errors import ImageLoadError
from io_utils import downscale_for_preview, ensure_srgb, export_path, flatten_rgb, load_image, save_png


class TestIOUtils(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = self._tmp.name

    def tearDown(self):
        self._tmp.cleanup()

    def test_save_then_load(self):
        path = os.path.join(self.tmp, "nested", "red.png")
        save_png(Image.new("RGB", (12, 7), (255, 0, 0)), path)
        img = load_image(path)
        self.assertEqual(img.size, (12, 7))
        self.assertEqual(img.convert("RGB").getpixel((3, 3)), (255, 0, 0))

    def test_save_refuses_to_overwrite_when_asked(self):
        path = os.path.join(self.tmp, "a.png")
        save_png(Image.new("RGB", (2, 2)), path)
        with self.assertRaises(FileExistsError):
            save_png(Image.new("RGB", (2, 2)), path, overwrite=False)

    def test_unreadable_files_raise_image_load_error(self):
        junk = os.path.join(self.tmp, "junk.png")
        with open(junk, "w", encoding="utf-8") as f:
            f.write("definitely not a png")
        with self.assertRaises(ImageLoadError):
            load_image(junk)
        with self.assertRaises(ImageLoadError):
            load_image(os.path.join(self.tmp, "missing.jpg"))

    def test_flatten_over_black(self):
        rgba = Image.new("RGBA", (2, 2), (255, 255, 255, 0))
        self.assertEqual(flatten_rgb(rgba).getpixel((0, 0)), (0, 0, 0))
        opaque = Image.new("RGBA", (2, 2), (10, 20, 30, 255))
        self.assertEqual(flatten_rgb(opaque).getpixel((1, 1)), (10, 20, 30))
        self.assertEqual(flatten_rgb(Image.new("L", (2, 2), 128)).mode, "RGB")

    def test_flatten_keeps_straight_colour_of_partial_alpha(self):
        img = Image.new("RGBA", (2, 1), (200, 100, 50, 128))
        img.putpixel((1, 0), (200, 100, 50, 0))
        flat = flatten_rgb(img)
        self.assertEqual(flat.getpixel((0, 0)), (200, 100, 50))
        self.assertEqual(flat.getpixel((1, 0)), (0, 0, 0))
        la = flatten_rgb(Image.new("LA", (1, 1), (90, 1)))
        self.assertEqual(la.getpixel((0, 0)), (90, 90, 90))

    def test_ensure_srgb_without_profile_is_noop(self):
        img = Image.new("RGB", (2, 2))
        self.assertIs(ensure_srgb(img), img)

    def test_export_name(self):
        self.assertEqual(export_path("out", 1700000000123), os.path.join("out", "pixel-art-1700000000123.png"))

    def test_preview_downscale(self):
        self.assertEqual(downscale_for_preview(Image.new("RGB", (2048, 1024))).size, (1024, 512))
        small = Image.new("RGB", (300, 200))
        self.assertIs(downscale_for_preview(small), small)


if __name__ == "__main__":
    unittest.main()
