from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence, Tuple

from .errors import DimensionMismatch, InputMissing
from .raster import image_size

logger = logging.getLogger(__name__)


def check_input(path: Path) -> None:
    if not path.exists() or not path.is_file():
        raise InputMissing(path)


def validate_dimensions(paths: Sequence[Path]) -> Tuple[int, int]:
    """Return the (width, height) shared by every input.

    Reads headers only. Stops at the first missing file or mismatch, in
    input order.
    """
    if not paths:
        raise ValueError("No images to blend.")

    first = paths[0]
    check_input(first)
    expected = image_size(first)
    logger.debug("Reference size %dx%d from '%s'", expected[0], expected[1], first)

    for path in paths[1:]:
        check_input(path)
        actual = image_size(path)
        if actual != expected:
            raise DimensionMismatch(expected, actual, path)
    return expected
