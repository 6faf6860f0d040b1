"""Failures that abort a blend run, each naming the offending file where there is one."""
from __future__ import annotations

from pathlib import Path
from typing import Optional, Tuple


class BlendError(Exception):
    """Base for every failure that aborts a blend run."""

    def __init__(self, message: str, path: Optional[Path] = None):
        super().__init__(message)
        self.path = path


class OutputIsDirectory(BlendError):
    def __init__(self, path: Path):
        super().__init__(f"Output file '{path}' is a directory", path)


class OutputExistsNoOverwrite(BlendError):
    def __init__(self, path: Path):
        super().__init__(
            f"Output file '{path}' exists, refusing to overwrite", path
        )


class InputMissing(BlendError):
    def __init__(self, path: Path):
        super().__init__(f"Input file '{path}' does not exist", path)


class DimensionQueryFailed(BlendError):
    def __init__(self, path: Path, reason: str = ""):
        message = f"Querying dimensions of '{path}' failed"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, path)


class DimensionMismatch(BlendError):
    def __init__(self, expected: Tuple[int, int], actual: Tuple[int, int], path: Path):
        super().__init__(
            f"Input image '{path}' has mismatched dimensions: "
            f"expected {expected[0]}x{expected[1]} but got {actual[0]}x{actual[1]}",
            path,
        )
        self.expected = expected
        self.actual = actual


class UnsupportedPixelFormat(BlendError):
    def __init__(self, path: Path, mode: str = ""):
        message = f"Image '{path}' has an unsupported pixel format"
        if mode:
            message = f"{message} ({mode})"
        super().__init__(message, path)
        self.mode = mode


class DecodeFailed(BlendError):
    def __init__(self, path: Path, reason: str = ""):
        message = f"Decoding '{path}' failed"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, path)


class EncodeFailed(BlendError):
    def __init__(self, path: Optional[Path], reason: str = ""):
        target = f" '{path}'" if path is not None else ""
        message = f"Saving output file{target} failed"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, path)
