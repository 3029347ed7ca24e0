import os
from PIL import Image as PIM
import numpy as np

from utils import color_to_rgb, to_rgb8


class Image(object):
    """Image

    Thin wrapper around an (h, w, 3) pixel array. Float pixels are linear RGB,
    uint8 pixels are final display values.
    """

    def __init__(self, path=None, pixels=None):
        # You can do Image(pixels) or Image(path)
        self._samples = None;
        self.file_path = None;
        if (isinstance(path, np.ndarray) and (pixels is None)):
            # if the path looks like pixels and pixels are undefined, treat the path as pixels
            self.pixels = path;
        else:
            self.pixels = pixels;
            self.file_path = path;
            if(self.file_path is not None and pixels is None):
                self.loadImageData(self.file_path);

    @property
    def pixels(self):
        return self.samples;

    @pixels.setter
    def pixels(self, data):
        self.samples = data;

    @property
    def samples(self):
        return self._samples;

    @samples.setter
    def samples(self, value):
        self._samples = value;

    @property
    def dtype(self):
        return self.pixels.dtype;

    @property
    def _is_float(self):
        return (self.dtype.kind in 'f');

    @property
    def ipixels(self):
        """8-bit pixels; float pixels are finalized with to_rgb8."""
        if (self._is_float):
            return to_rgb8(self.pixels);
        else:
            return self.pixels.astype(np.uint8);

    @property
    def width(self):
        return self.pixels.shape[1];

    @property
    def height(self):
        return self.pixels.shape[0];

    def loadImageData(self, path=None):
        if(path is not None):
            self.file_path = path;
        with PIM.open(fp=self.file_path) as pim:
            self.pixels = np.array(pim.convert('RGB'));

    def PIL(self):
        return PIM.fromarray(np.uint8(self.ipixels));

    def writeToFile(self, output_path, **kwargs):
        """Encode the image with Pillow; the format follows the file extension.

        A .ppm path gives a binary P6 file: the header `P6\\n<w> <h>\\n255\\n`
        followed by the raw RGB bytes. Missing directories are created.
        Filesystem errors propagate as OSError.
        """
        out_dir = os.path.dirname(output_path);
        if(out_dir):
            os.makedirs(out_dir, exist_ok=True);
        self.PIL().save(output_path, **kwargs);
        self.file_path = output_path;


class Framebuffer(object):
    """Pre-sized pixel store filled in raster order.

    Every pixel has its own slot, addressed by index = y * width + x, so pixels
    may be written in any order without sharing anything but the array.
    """

    def __init__(self, width, height):
        if width <= 0 or height <= 0:
            raise ValueError(f"framebuffer size must be positive, got {width}x{height}");
        self.width = width;
        self.height = height;
        self.pixels = np.zeros((height, width, 3), np.float32);
        self._next = 0;

    def __len__(self):
        return self.width * self.height;

    @property
    def is_full(self):
        return self._next >= len(self);

    def set_pixel(self, index, color):
        """Store a linear RGB color in slot `index` (row-major)."""
        if not 0 <= index < len(self):
            raise IndexError(f"pixel index {index} outside {self.width}x{self.height} framebuffer");
        y, x = divmod(index, self.width);
        self.pixels[y, x] = color;

    def put(self, color):
        """Store the next pixel in raster order: top row first, left to right."""
        self.set_pixel(self._next, color);
        self._next += 1;

    def rgb8(self, x, y):
        """The finalized 8-bit color of pixel (x, y)."""
        return color_to_rgb(self.pixels[y, x]);

    def image(self):
        """The finalized 8-bit Image."""
        return Image(pixels=to_rgb8(self.pixels));
