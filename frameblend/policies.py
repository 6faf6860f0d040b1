"""
Accumulation policies.

Each policy knows the dtype of its accumulator, how to fold one 8-bit
frame into it (in place, channel by channel, pixel by pixel), and how to
turn the folded accumulator back into 8-bit pixels.
"""
from __future__ import annotations

import enum
from typing import Dict

import numpy as np

U8_MAX = 255


class Reducer:
    """Per-channel fold for one policy."""

    dtype = np.uint8

    def new_accumulator(self, width: int, height: int) -> np.ndarray:
        return np.zeros((height, width, 3), dtype=self.dtype)

    def combine(self, acc: np.ndarray, sample: np.ndarray) -> None:
        raise NotImplementedError

    def finalize(self, acc: np.ndarray, count: int) -> np.ndarray:
        return acc


class SaturatingSum(Reducer):
    def combine(self, acc, sample):
        wide = acc.astype(np.uint16)
        wide += sample
        np.minimum(wide, U8_MAX, out=wide)
        acc[...] = wide


class WrappingSum(Reducer):
    def combine(self, acc, sample):
        # uint8 addition wraps modulo 256
        np.add(acc, sample, out=acc)


class ChannelMin(Reducer):
    def combine(self, acc, sample):
        np.minimum(acc, sample, out=acc)


class ChannelMax(Reducer):
    def combine(self, acc, sample):
        np.maximum(acc, sample, out=acc)


class Mean(Reducer):
    """Running sum of samples normalised to [0, 1], divided at the end."""

    dtype = np.float32

    def combine(self, acc, sample):
        acc += sample.astype(np.float32) / np.float32(U8_MAX)

    def finalize(self, acc, count):
        if count <= 0:
            raise ValueError("count must be positive")
        acc /= np.float32(count)
        scaled = np.clip(acc, 0.0, 1.0) * U8_MAX
        # round half up; values are never negative
        return np.floor(scaled + 0.5).astype(np.uint8)


class Policy(enum.Enum):
    SUM = "sum"
    SUM_OVERFLOW = "sum-overflow"
    MIN = "min"
    MAX = "max"
    AVERAGE = "average"

    @classmethod
    def parse(cls, text: str) -> "Policy":
        key = text.strip().lower().replace("_", "-")
        key = ALIASES.get(key, key)
        try:
            return cls(key)
        except ValueError:
            choices = ", ".join(choice_names())
            raise ValueError(f"unknown mode '{text}' (expected one of: {choices})") from None

    @property
    def reducer(self) -> Reducer:
        return REDUCERS[self]


ALIASES = {"avg": Policy.AVERAGE.value}

REDUCERS: Dict[Policy, Reducer] = {
    Policy.SUM: SaturatingSum(),
    Policy.SUM_OVERFLOW: WrappingSum(),
    Policy.MIN: ChannelMin(),
    Policy.MAX: ChannelMax(),
    Policy.AVERAGE: Mean(),
}


def choice_names():
    return [p.value for p in Policy] + list(ALIASES)
