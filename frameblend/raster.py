"""
Pixel buffers and the Pillow codec seam.

Everything that touches Pillow lives here: header-only size queries,
decoding a file into a 3-channel 8-bit frame, and encoding the finished
buffer into the format named by the output file's extension.
"""
from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Tuple

import numpy as np
from PIL import Image, UnidentifiedImageError

from .errors import DecodeFailed, DimensionQueryFailed, EncodeFailed, UnsupportedPixelFormat

logger = logging.getLogger(__name__)

CHANNELS = 3

# Pillow modes that map onto 8-bit RGB without any colour conversion
RGB_MODE = "RGB"
RGBA_MODE = "RGBA"


@dataclass(frozen=True)
class RasterImage:
    """A decoded frame: ``pixels`` is a (height, width, 3) uint8 array."""

    pixels: np.ndarray
    source: Optional[Path] = None

    def __post_init__(self):
        if self.pixels.ndim != 3 or self.pixels.shape[2] != CHANNELS:
            raise ValueError(f"expected (h, w, 3) pixels, got {self.pixels.shape}")
        if self.pixels.dtype != np.uint8:
            raise ValueError(f"expected uint8 pixels, got {self.pixels.dtype}")

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height


# Pillow raises these for unreadable, corrupt or oversized (decompression bomb) input
CODEC_ERRORS = (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError)


def image_size(path: Path) -> Tuple[int, int]:
    # Image.open only parses the header; no pixel data is decoded here
    try:
        with Image.open(path) as img:
            return img.size
    except CODEC_ERRORS as exc:
        raise DimensionQueryFailed(path, str(exc)) from exc


def to_rgb(
    img: Image.Image,
    path: Path,
    on_alpha: Optional[Callable[[Path], None]] = None,
) -> RasterImage:
    """Project a decoded Pillow image onto 3-channel 8-bit RGB.

    RGB passes through untouched. RGBA loses its alpha channel and
    ``on_alpha`` is told about it. Every other mode (greyscale, palette,
    16-bit, CMYK, ...) is rejected.
    """
    if img.mode == RGB_MODE:
        pixels = np.asarray(img, dtype=np.uint8)
    elif img.mode == RGBA_MODE:
        logger.warning("alpha channel in '%s' will be discarded", path)
        if on_alpha is not None:
            on_alpha(path)
        pixels = np.asarray(img, dtype=np.uint8)[:, :, :CHANNELS]
    else:
        raise UnsupportedPixelFormat(path, img.mode)
    return RasterImage(pixels=pixels, source=path)


def raw_mode(img: Image.Image) -> Optional[str]:
    """The decoder's raw sample layout, e.g. ``RGB;16B``; only known before ``load()``."""
    for tile in img.tile or ():
        args = tile[3]
        if isinstance(args, tuple):
            args = args[0] if args else None
        if isinstance(args, str):
            return args
    return None


def is_wide(img: Image.Image) -> bool:
    # Pillow narrows 16-bit RGB(A) to 8 bits and still reports RGB/RGBA
    rawmode = raw_mode(img)
    return rawmode is not None and ";16" in rawmode


def decode(path: Path, on_alpha: Optional[Callable[[Path], None]] = None) -> RasterImage:
    try:
        with path.open("rb") as f_in:
            with Image.open(f_in) as img:
                if is_wide(img):
                    mode = img.mode if ";16" in img.mode else f"{img.mode};16"
                    raise UnsupportedPixelFormat(path, mode)
                img.load()
                return to_rgb(img, path, on_alpha)
    except CODEC_ERRORS as exc:
        raise DecodeFailed(path, str(exc)) from exc


def is_image_extension(name: str) -> bool:
    return Path(name).suffix.lower() in Image.registered_extensions()


def output_format(path: Path) -> str:
    ext = path.suffix.lower()
    fmt = Image.registered_extensions().get(ext)
    if fmt is None:
        raise EncodeFailed(path, f"unknown image format for extension '{ext or path.name}'")
    return fmt


def encode(pixels: np.ndarray, fmt: str, path: Optional[Path] = None) -> bytes:
    buf = io.BytesIO()
    try:
        Image.fromarray(pixels).save(buf, format=fmt)
    except (OSError, ValueError, KeyError) as exc:
        raise EncodeFailed(path, str(exc)) from exc
    return buf.getvalue()
