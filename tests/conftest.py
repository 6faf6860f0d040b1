import numpy as np
import pytest
from PIL import Image


@pytest.fixture
def write_image(tmp_path):
    """Write ``pixels`` to ``tmp_path / name`` and return the path.

    The Pillow mode follows the array shape: (h, w) is L, (h, w, 3) RGB,
    (h, w, 4) RGBA.
    """

    def _write(name, pixels):
        path = tmp_path / name
        Image.fromarray(np.asarray(pixels, dtype=np.uint8)).save(path)
        return path

    return _write


@pytest.fixture
def solid(write_image):
    """Write a width x height image filled with one RGB colour."""

    def _solid(name, rgb, width=4, height=3):
        pixels = np.empty((height, width, 3), dtype=np.uint8)
        pixels[...] = rgb
        return write_image(name, pixels)

    return _solid


@pytest.fixture
def frames(write_image):
    """Three random 5x4 RGB frames on disk plus their pixel arrays."""
    rng = np.random.default_rng(1234)
    arrays = [rng.integers(0, 256, (4, 5, 3), dtype=np.uint8) for _ in range(3)]
    paths = [write_image(f"frame{i}.png", a) for i, a in enumerate(arrays)]
    return paths, arrays


@pytest.fixture
def read_rgb():
    def _read(path):
        with Image.open(path) as img:
            return np.asarray(img.convert("RGB"))

    return _read


@pytest.fixture
def truncated(write_image, tmp_path):
    """A good 64x64 noise PNG and a copy cut off halfway through its pixel data."""
    noise = np.random.default_rng(99).integers(0, 256, (64, 64, 3), dtype=np.uint8)
    good = write_image("good.png", noise)
    data = good.read_bytes()
    broken = tmp_path / "broken.png"
    # the header survives so the size query passes; decoding does not
    broken.write_bytes(data[: len(data) // 2])
    return good, broken


@pytest.fixture
def write_png16(tmp_path):
    """Write a 16-bit-per-channel RGB PNG by hand; Pillow cannot save one."""
    import struct
    import zlib

    def _chunk(kind, body):
        crc = zlib.crc32(kind + body) & 0xFFFFFFFF
        return struct.pack(">I", len(body)) + kind + body + struct.pack(">I", crc)

    def _write(name, pixels):
        pixels = np.asarray(pixels, dtype=">u2")
        height, width, _ = pixels.shape
        ihdr = struct.pack(">IIBBBBB", width, height, 16, 2, 0, 0, 0)
        raw = b"".join(b"\x00" + row.tobytes() for row in pixels)
        data = (
            b"\x89PNG\r\n\x1a\n"
            + _chunk(b"IHDR", ihdr)
            + _chunk(b"IDAT", zlib.compress(raw))
            + _chunk(b"IEND", b"")
        )
        path = tmp_path / name
        path.write_bytes(data)
        return path

    return _write
