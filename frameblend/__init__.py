"""
Merge batches of equally sized images, e.g. light painting sequences or
faked long exposures, under a per-channel accumulation mode.
"""

from .engine import BlendOptions, BlendResult, accumulate, blend_files, iter_frames, run
from .errors import (
    BlendError,
    DecodeFailed,
    DimensionMismatch,
    DimensionQueryFailed,
    EncodeFailed,
    InputMissing,
    OutputExistsNoOverwrite,
    OutputIsDirectory,
    UnsupportedPixelFormat,
)
from .policies import Policy
from .raster import RasterImage
from .validate import validate_dimensions

__version__ = "1.0.0"

__all__ = [
    # Engine
    "BlendOptions",
    "BlendResult",
    "accumulate",
    "blend_files",
    "iter_frames",
    "run",

    # Policies
    "Policy",

    # Data
    "RasterImage",
    "validate_dimensions",

    # Errors
    "BlendError",
    "DecodeFailed",
    "DimensionMismatch",
    "DimensionQueryFailed",
    "EncodeFailed",
    "InputMissing",
    "OutputExistsNoOverwrite",
    "OutputIsDirectory",
    "UnsupportedPixelFormat",
]
