"""
The accumulation engine.

Frames are decoded lazily and folded into a single accumulator one at a
time, so a run holds at most one decoded input next to the output buffer
regardless of how many inputs it has.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from .errors import DimensionMismatch, EncodeFailed, OutputExistsNoOverwrite, OutputIsDirectory
from .policies import Policy
from .raster import RasterImage, decode, encode, output_format
from .validate import validate_dimensions

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BlendOptions:
    output: Path
    inputs: Tuple[Path, ...]
    mode: Policy = Policy.SUM
    overwrite: bool = False
    # Min folds against a zero accumulator unless seeded from the first frame
    min_from_first: bool = False


@dataclass
class BlendResult:
    pixels: np.ndarray
    size: Tuple[int, int]
    count: int
    alpha_discarded: List[Path] = field(default_factory=list)


def iter_frames(
    paths: Iterable[Path],
    on_alpha: Optional[Callable[[Path], None]] = None,
) -> Iterator[RasterImage]:
    for path in paths:
        logger.info("Stacking '%s'", path)
        yield decode(path, on_alpha)


def accumulate(
    frames: Iterable[RasterImage],
    policy: Policy,
    size: Tuple[int, int],
    count: int,
    min_from_first: bool = False,
) -> np.ndarray:
    """Fold ``frames`` under ``policy`` and return (h, w, 3) uint8 pixels.

    ``size`` is the validated (width, height); ``count`` is the number of
    validated inputs and is the Average divisor.
    """
    reducer = policy.reducer
    width, height = size
    acc = reducer.new_accumulator(width, height)
    seed_pending = policy is Policy.MIN and min_from_first

    for frame in frames:
        if frame.size != size:
            raise DimensionMismatch(size, frame.size, frame.source)
        if seed_pending:
            acc[...] = frame.pixels
            seed_pending = False
            continue
        reducer.combine(acc, frame.pixels)

    return reducer.finalize(acc, count)


def blend_files(
    paths: Sequence[Path],
    policy: Policy,
    min_from_first: bool = False,
) -> BlendResult:
    paths = [Path(p) for p in paths]
    size = validate_dimensions(paths)
    count = len(paths)
    logger.debug(
        "Blending %d image(s) at %dx%d with mode %s", count, size[0], size[1], policy.value
    )

    alpha_discarded: List[Path] = []
    pixels = accumulate(
        iter_frames(paths, alpha_discarded.append),
        policy,
        size,
        count,
        min_from_first=min_from_first,
    )
    return BlendResult(pixels=pixels, size=size, count=count, alpha_discarded=alpha_discarded)


def check_output(output: Path, overwrite: bool) -> None:
    if output.is_dir():
        raise OutputIsDirectory(output)
    if output.exists() and not overwrite:
        raise OutputExistsNoOverwrite(output)


def run(options: BlendOptions) -> BlendResult:
    output = Path(options.output)
    check_output(output, options.overwrite)
    # resolve the encoder before any decoding so a bad extension fails fast
    fmt = output_format(output)

    result = blend_files(options.inputs, options.mode, options.min_from_first)

    data = encode(result.pixels, fmt, output)
    try:
        output.write_bytes(data)
    except OSError as exc:
        raise EncodeFailed(output, str(exc)) from exc
    logger.info("Blended image saved as '%s'", output)
    return result
