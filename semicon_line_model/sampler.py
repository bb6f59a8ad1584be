from __future__ import annotations

import math
from typing import Optional, Union

import numpy as np

from . import config
from .calibration import EXPONENTIAL, NORMAL, QuantityRange


class SamplingError(RuntimeError):
    """Raised when the rejection loop exceeds its redraw budget."""


def truncate(values, digits: int = config.TRUNCATE_DIGITS):
    """
    Truncate toward zero to `digits` decimal places.

    Accepts a Python scalar (returns float) or an array (returns float64 array).
    Negative inputs truncate toward zero as well: -1.2349 -> -1.234.
    """
    f = 10.0**digits
    if np.ndim(values) == 0:
        return math.trunc(float(values) * f) / f
    arr = np.asarray(values, dtype=np.float64)
    return np.trunc(arr * f) / f


class RandomSource:
    """
    Injectable entropy source for the samplers.

    One SeedSequence per source; every call to spawn() derives an independent
    child stream, so samplers never share a generator. With seed=None the root
    entropy comes from the OS; a fixed seed makes the whole run reproducible.
    """

    def __init__(self, seed: Optional[int] = None) -> None:
        self._seq = np.random.SeedSequence(seed)
        self.spawned = 0

    @property
    def entropy(self) -> int:
        return int(self._seq.entropy)

    def spawn(self) -> np.random.Generator:
        child = self._seq.spawn(1)[0]
        self.spawned += 1
        return np.random.default_rng(child)


class BoundedSampler:
    """
    Truncated normal / shifted exponential sampler over an inclusive range.

    - normal:      mean (low+high)/2, sd (high-low)/4
    - exponential: rate -ln(TAIL_PROBABILITY) / (high-low), shifted by +low,
                   so 95% of the untruncated mass falls inside the range

    Raw draws are truncated to 3 decimals and redrawn until they fall inside
    [low, high].
    """

    def __init__(
        self,
        kind: str,
        low: float,
        high: float,
        rng: np.random.Generator,
        *,
        max_rounds: int = config.MAX_REJECTION_ROUNDS,
        digits: int = config.TRUNCATE_DIGITS,
    ) -> None:
        if kind not in (NORMAL, EXPONENTIAL):
            raise ValueError(f"Unknown distribution kind: {kind!r}")
        if not (math.isfinite(low) and math.isfinite(high)):
            raise ValueError("low and high must be finite")
        if low > high:
            raise ValueError(f"low must be <= high (got {low} > {high})")
        if max_rounds <= 0:
            raise ValueError("max_rounds must be positive")

        self.kind = kind
        self.low = float(low)
        self.high = float(high)
        self.rng = rng
        self.max_rounds = int(max_rounds)
        self.digits = int(digits)

        width = self.high - self.low
        if kind == NORMAL:
            self.mean = (self.low + self.high) / 2.0
            self.sd = width / 4.0
            self.rate = float("nan")
        else:
            self.mean = float("nan")
            self.sd = float("nan")
            self.rate = (-math.log(config.TAIL_PROBABILITY) / width) if width > 0 else float("inf")

    @classmethod
    def from_range(cls, qr: QuantityRange, rng: np.random.Generator, **kwargs) -> "BoundedSampler":
        return cls(qr.kind, qr.low, qr.high, rng, **kwargs)

    def __repr__(self) -> str:
        return f"BoundedSampler({self.kind!r}, {self.low}, {self.high})"

    def _raw(self, n: int) -> np.ndarray:
        if self.kind == NORMAL:
            if self.sd == 0.0:
                return np.full(n, self.mean)
            return self.rng.normal(loc=self.mean, scale=self.sd, size=n)
        if math.isinf(self.rate):
            return np.full(n, self.low)
        return self.rng.exponential(scale=1.0 / self.rate, size=n) + self.low

    def sample(self, size: Optional[int] = None) -> Union[float, np.ndarray]:
        """Return one value (size=None) or an array of `size` values in [low, high]."""
        n = 1 if size is None else int(size)
        if n < 0:
            raise ValueError("size must be non-negative")

        out = np.empty(n, dtype=np.float64)
        pending = np.arange(n)
        rounds = 0
        while pending.size:
            if rounds >= self.max_rounds:
                raise SamplingError(
                    f"{self!r}: {pending.size} value(s) still outside range after {rounds} rounds"
                )
            x = truncate(self._raw(pending.size), self.digits)
            ok = (x >= self.low) & (x <= self.high)
            out[pending[ok]] = x[ok]
            pending = pending[~ok]
            rounds += 1

        if size is None:
            return float(out[0])
        return out

    __call__ = sample
