from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable

import numpy as np
from PIL import Image, ImageChops, ImageDraw

from .interfaces import Image2D
from .polyline import PolyLine


_LUMA_WEIGHTS = np.array([0.299, 0.587, 0.114])
_FULL_RANGE_DTYPES = (np.dtype(np.uint8), np.dtype(np.uint16))


class RasterImage:
    """Read-only numpy-backed image satisfying `ImageSource`.

    Holds either a grayscale `(height, width)` array or a color
    `(height, width, channels)` array with 3 (RGB) or 4 (RGBA) channels.
    """

    def __init__(self, data: Any) -> None:
        arr = _coerce_array(data)
        arr.setflags(write=False)
        self._data = arr
        self._luminance: np.ndarray | None = None

    @classmethod
    def from_pil(cls, image: Image.Image) -> "RasterImage":
        if image.mode not in ("L", "RGB", "RGBA"):
            image = image.convert("RGBA" if "A" in image.getbands() else "RGB")
        return cls(np.asarray(image))

    @property
    def data(self) -> np.ndarray:
        return self._data

    @property
    def width(self) -> int:
        return int(self._data.shape[1])

    @property
    def height(self) -> int:
        return int(self._data.shape[0])

    @property
    def channels(self) -> int:
        return 1 if self._data.ndim == 2 else int(self._data.shape[2])

    def contains(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def sample(self, x: int, y: int) -> Any:
        if not self.contains(x, y):
            raise IndexError(f"Pixel ({x}, {y}) outside {self.width}x{self.height} image")
        value = self._data[y, x]
        if self._data.ndim == 2:
            return value.item()
        return tuple(v.item() for v in value)

    def luminance(self) -> np.ndarray:
        """Return grayscale intensities scaled to [0, 1] as a float array."""

        if self._luminance is None:
            arr = self._data.astype(float)
            if arr.ndim == 3:
                arr = arr[:, :, :3] @ _LUMA_WEIGHTS
            arr = scale_to_unit(arr, self._data.dtype)
            arr.setflags(write=False)
            self._luminance = arr
        return self._luminance

    def to_pil(self) -> Image.Image:
        arr = self._data
        if arr.dtype != np.uint8:
            arr = _to_uint8(arr)
        return Image.fromarray(arr)

    def __repr__(self) -> str:
        return f"RasterImage({self.width}x{self.height}, channels={self.channels})"


def load_image(path: str | Path) -> RasterImage:
    in_path = Path(path)
    if not in_path.exists():
        raise FileNotFoundError(f"Image not found: {in_path}")
    with Image.open(in_path) as img:
        img.load()
        return RasterImage.from_pil(img)


def as_raster_image(image: Any) -> RasterImage:
    if isinstance(image, RasterImage):
        return image
    if isinstance(image, Image.Image):
        return RasterImage.from_pil(image)
    return RasterImage(image)


def scale_to_unit(values: np.ndarray, dtype: np.dtype) -> np.ndarray:
    """Scale float samples of a `dtype` image into [0, 1].

    8 and 16 bit unsigned images use their full range as white. Anything else
    (wider or signed integers, floats) is divided by its observed peak when
    that peak exceeds 1.
    """

    if np.dtype(dtype) in _FULL_RANGE_DTYPES:
        return values / float(np.iinfo(dtype).max)
    peak = float(values.max()) if values.size else 0.0
    if peak > 1.0:
        return values / peak
    return values


def _to_uint8(arr: np.ndarray) -> np.ndarray:
    scaled = scale_to_unit(arr.astype(float), arr.dtype)
    return np.clip(np.rint(scaled * 255.0), 0, 255).astype(np.uint8)


def _coerce_array(image: Any) -> np.ndarray:
    if isinstance(image, np.ndarray):
        arr = np.array(image, copy=True)
    else:
        if hasattr(image, "tolist") and callable(image.tolist):
            image = image.tolist()
        arr = np.asarray(_coerce_image_2d(image), dtype=float)

    if arr.ndim == 2:
        if arr.shape[0] == 0 or arr.shape[1] == 0:
            raise ValueError("Empty image")
    elif arr.ndim == 3:
        if arr.shape[0] == 0 or arr.shape[1] == 0:
            raise ValueError("Empty image")
        if arr.shape[2] not in (3, 4):
            raise ValueError("Color images must have 3 or 4 channels")
    else:
        raise ValueError("Image must be 2D (gray) or 3D (color)")
    return arr


def _coerce_image_2d(image: Any) -> Image2D:
    if isinstance(image, tuple):
        image = list(image)
    if not isinstance(image, list):
        raise TypeError("Image must be a 2D list/tuple, an ndarray or expose tolist()")

    out: Image2D = []
    width: int | None = None
    for row in image:
        if isinstance(row, tuple):
            row = list(row)
        if not isinstance(row, list):
            raise TypeError("Image rows must be list/tuple")
        if width is None:
            width = len(row)
            if width == 0:
                raise ValueError("Empty image")
        elif len(row) != width:
            raise ValueError("Image rows must have equal length")
        out.append(row)

    if not out:
        raise ValueError("Empty image")
    return out


def extract_region(image: RasterImage, boundary: Iterable[PolyLine]) -> Image.Image:
    """Cut the pixels enclosed by a closed boundary out of `image`.

    Returns an RGBA image cropped to the boundary's bounding box (clamped to
    the image) whose pixels outside the boundary are fully transparent.
    """

    polygon = [(p.x, p.y) for segment in boundary for p in segment]
    if not polygon:
        raise ValueError("Boundary is empty")

    xs = [x for x, _ in polygon]
    ys = [y for _, y in polygon]
    left = max(0, min(xs))
    top = max(0, min(ys))
    right = min(image.width - 1, max(xs))
    bottom = min(image.height - 1, max(ys))
    if right < left or bottom < top:
        raise ValueError("Boundary does not intersect the image")

    source = image.to_pil().convert("RGBA")
    mask = Image.new("L", source.size, 0)
    if len(polygon) >= 2:
        ImageDraw.Draw(mask).polygon(polygon, fill=255, outline=255)
    else:
        mask.putpixel(polygon[0], 255)
    source.putalpha(ImageChops.multiply(source.getchannel("A"), mask))
    return source.crop((left, top, right + 1, bottom + 1))
