import io
import os
import tempfile
import unittest
from contextlib import redirect_stderr
import numpy as np
from PIL import Image as PIM

import cli
from ImLite import Image, Framebuffer
from materials import Material, IVORY, GLASS
from utils import color_to_rgb, to_rgb8, vec


class TestColorToRGB(unittest.TestCase):

    def test_background(self):
        np.testing.assert_array_equal(color_to_rgb(vec([0.2, 0.7, 0.8])), [51, 178, 204])

    def test_bright_colors_keep_hue(self):
        np.testing.assert_array_equal(color_to_rgb(vec([2.0, 1.0, 0.5])), [255, 127, 63])

    def test_clamps_and_truncates(self):
        np.testing.assert_array_equal(color_to_rgb(vec([-0.5, 0.999, 1.0])), [0, 254, 255])

    def test_nan_is_black(self):
        np.testing.assert_array_equal(color_to_rgb(np.array([np.nan, 0.5, 0.2])), [0, 127, 51])

    def test_image_matches_pixels(self):
        img = np.array([[[0.2, 0.7, 0.8], [2.0, 1.0, 0.5]],
                        [[-1.0, 0.0, 3.0], [0.1, 0.1, 0.1]]], np.float32)
        out = to_rgb8(img)
        self.assertEqual(out.dtype, np.uint8)
        for y in range(2):
            for x in range(2):
                np.testing.assert_array_equal(out[y, x], color_to_rgb(img[y, x]))


class TestFramebuffer(unittest.TestCase):

    def test_raster_order(self):
        fb = Framebuffer(3, 2)
        for i in range(6):
            self.assertFalse(fb.is_full)
            fb.put(vec([i, 0, 0]) / 10)
        self.assertTrue(fb.is_full)
        np.testing.assert_allclose(fb.pixels[:, :, 0], [[0.0, 0.1, 0.2], [0.3, 0.4, 0.5]], rtol=1e-6)

    def test_overflow(self):
        fb = Framebuffer(1, 1)
        fb.put(vec([1, 1, 1]))
        with self.assertRaises(IndexError):
            fb.put(vec([1, 1, 1]))
        with self.assertRaises(IndexError):
            fb.set_pixel(-1, vec([0, 0, 0]))

    def test_disjoint_slots(self):
        fb = Framebuffer(2, 2)
        fb.set_pixel(3, vec([0.2, 0.7, 0.8]))
        fb.set_pixel(0, vec([1, 1, 1]))
        np.testing.assert_array_equal(fb.rgb8(1, 1), [51, 178, 204])
        np.testing.assert_array_equal(fb.rgb8(0, 0), [255, 255, 255])
        np.testing.assert_array_equal(fb.image().pixels[1, 0], [0, 0, 0])

    def test_bad_size(self):
        with self.assertRaises(ValueError):
            Framebuffer(0, 4)


class TestImageFiles(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)

    def test_ppm_layout(self):
        pixels = np.array([[[51, 178, 204], [255, 0, 7]]], np.uint8)
        path = os.path.join(self.tmp.name, "nested", "out.ppm")
        Image(pixels=pixels).writeToFile(path)
        with open(path, "rb") as f:
            data = f.read()
        self.assertEqual(data, b"P6\n2 1\n255\n" + pixels.tobytes())

    def test_png_round_trip(self):
        fb = Framebuffer(2, 1)
        fb.put(vec([0.2, 0.7, 0.8]))
        fb.put(vec([4.0, 2.0, 0.0]))
        path = os.path.join(self.tmp.name, "out.png")
        fb.image().writeToFile(path)
        loaded = Image(path)
        np.testing.assert_array_equal(loaded.pixels, [[[51, 178, 204], [255, 127, 0]]])


class TestMaterial(unittest.TestCase):

    def test_presets(self):
        np.testing.assert_allclose(IVORY.albedo, [0.6, 0.3, 0.1, 0.0], rtol=1e-6)
        self.assertEqual(GLASS.refractive_index, 1.5)
        self.assertEqual(IVORY.refractive_index, 1.0)

    def test_read_only(self):
        with self.assertRaises(ValueError):
            IVORY.albedo[0] = 1.0

    def test_validation(self):
        with self.assertRaises(ValueError):
            Material(albedo=[1, 0, 0], diffuse_color=[1, 1, 1])
        with self.assertRaises(ValueError):
            Material(albedo=[1, -0.1, 0, 0], diffuse_color=[1, 1, 1])
        with self.assertRaises(ValueError):
            Material(albedo=[1, 0, 0, 0], diffuse_color=[1, 1, 1], specular_exponent=0)
        with self.assertRaises(ValueError):
            Material(albedo=[1, 0, 0, 0], diffuse_color=[1, 1, 1], refractive_index=-1.5)


class TestCLI(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self.tmp.cleanup)

    def test_render_four_spheres(self):
        path = os.path.join(self.tmp.name, "out", "render.png")
        status = cli.main(["--width", "8", "--height", "6", "--depth", "2", "--output", path, "--quiet"])
        self.assertEqual(status, 0)
        with PIM.open(path) as im:
            self.assertEqual(im.size, (8, 6))

    def test_unwritable_output(self):
        blocker = os.path.join(self.tmp.name, "blocker")
        with open(blocker, "w") as f:
            f.write("not a directory")
        err = io.StringIO()
        with redirect_stderr(err):
            status = cli.main(["--scene", "single_sphere", "--width", "4", "--height", "4",
                               "--output", os.path.join(blocker, "render.ppm"), "--quiet"])
        self.assertEqual(status, 1)
        self.assertIn("could not write", err.getvalue())

    def test_unknown_extension_rejected_before_rendering(self):
        for name in ("render.jpgx", "render"):
            path = os.path.join(self.tmp.name, name)
            with redirect_stderr(io.StringIO()), self.assertRaises(SystemExit) as cm:
                cli.main(["--output", path, "--quiet"])
            self.assertEqual(cm.exception.code, 2)
            self.assertFalse(os.path.exists(path))

    def test_bad_fov_rejected(self):
        path = os.path.join(self.tmp.name, "render.png")
        for fov in ("0", "-30", "180", "270"):
            with redirect_stderr(io.StringIO()), self.assertRaises(SystemExit) as cm:
                cli.main(["--fov", fov, "--output", path, "--quiet"])
            self.assertEqual(cm.exception.code, 2)


if __name__ == '__main__':
    unittest.main()
