from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Optional

import numpy as np
import pandas as pd

from . import config
from .calibration import DEFAULT_CALIBRATION, Calibration
from .sampler import BoundedSampler, RandomSource


class ComputationError(ArithmeticError):
    """Raised when the throughput formula leaves its valid domain (Tunit <= 0 or non-finite)."""


@dataclass(frozen=True)
class FactoryDraws:
    """Per-factory draws and derived quantities for one population evaluation."""

    machines: int
    window_s: float
    samples: Mapping[str, np.ndarray]
    batch: np.ndarray
    t_total: np.ndarray
    t_unit: np.ndarray
    output: np.ndarray

    def __len__(self) -> int:
        return int(self.output.shape[0])

    @property
    def total_output(self) -> int:
        return int(np.sum(self.output))

    def to_frame(self) -> pd.DataFrame:
        cols = {k: v for k, v in self.samples.items()}
        cols.update({"batch": self.batch, "t_total": self.t_total, "t_unit": self.t_unit, "output": self.output})
        return pd.DataFrame(cols)


def build_samplers(
    source: RandomSource,
    calibration: Calibration = DEFAULT_CALIBRATION,
) -> dict[str, BoundedSampler]:
    """Nine fresh samplers, each on its own spawned generator."""
    return {
        name: BoundedSampler.from_range(calibration.quantities[name], source.spawn())
        for name in calibration.names
    }


def total_machine_time(
    machines: int,
    window_s: float,
    st_da,
    dd_da,
    st_wb,
    dd_wb,
    *,
    seconds_per_day: float = 86400.0,
) -> np.ndarray:
    """
    Productive machine-seconds of one factory over `window_s`:

        M * [ (Td - STda)(day - DDda)/day + Td + (Td - STwb)(day - DDwb)/day + Td ]

    Die attach and wire bond lose setup time and are scaled by the downtime
    ratio; oven cure and pre-cap inspection are available for the whole
    window. A window shorter than a setup yields zero time for that stage.
    Truncated toward zero to whole seconds.
    """
    td = float(window_s)
    day = float(seconds_per_day)
    da = np.maximum(td - np.asarray(st_da, dtype=np.float64), 0.0) * (day - np.asarray(dd_da)) / day
    wb = np.maximum(td - np.asarray(st_wb, dtype=np.float64), 0.0) * (day - np.asarray(dd_wb)) / day
    t = machines * (da + td + wb + td)
    return np.trunc(t).astype(np.int64)


def unit_cycle_time(
    samples: Mapping[str, np.ndarray],
    batch,
    calibration: Calibration = DEFAULT_CALIBRATION,
) -> np.ndarray:
    """Regression estimate of the time to produce one unit, truncated to whole seconds."""
    t = calibration.oven_cure_s + calibration.batch_coef * np.asarray(batch, dtype=np.float64)
    for name in calibration.names:
        t = t + calibration.terms[name].evaluate(np.asarray(samples[name], dtype=np.float64))

    if np.any(~np.isfinite(t)):
        raise ComputationError("Non-finite unit cycle time")
    t_int = np.trunc(t).astype(np.int64)
    if np.any(t_int <= 0):
        raise ComputationError(f"Unit cycle time must be positive (min={float(np.min(t)):.6g})")
    return t_int


@dataclass
class Factory:
    """
    One model factory: `machines` machines per stage working `window_s` seconds.

    Factories own no samplers; every evaluation builds fresh ones from the
    given RandomSource (a new OS-seeded source when none is given).
    """

    machines: int = config.MACHINES
    window_s: float = config.SECONDS_PER_DAY
    calibration: Calibration = field(default=DEFAULT_CALIBRATION, repr=False)

    def __post_init__(self) -> None:
        if self.machines < 0:
            raise ValueError("machines must be >= 0")
        if not self.window_s > 0:
            raise ValueError("window_s must be > 0")

    def simulate_many(self, n: int, source: Optional[RandomSource] = None) -> FactoryDraws:
        if n < 0:
            raise ValueError("n must be >= 0")
        if source is None:
            source = RandomSource()
        cal = self.calibration

        samplers = build_samplers(source, cal)
        samples = {name: s.sample(n) for name, s in samplers.items()}
        batch = source.spawn().choice(np.asarray(cal.batch_sizes, dtype=np.int64), size=n)

        t_total = total_machine_time(
            self.machines,
            self.window_s,
            samples["st_da"],
            samples["dd_da"],
            samples["st_wb"],
            samples["dd_wb"],
            seconds_per_day=cal.seconds_per_day,
        )
        t_unit = unit_cycle_time(samples, batch, cal)
        # t_total >= 0 and t_unit > 0, so floor division truncates toward zero.
        output = (t_total * batch) // t_unit

        return FactoryDraws(
            machines=self.machines,
            window_s=self.window_s,
            samples=samples,
            batch=batch,
            t_total=t_total,
            t_unit=t_unit,
            output=output.astype(np.int64, copy=False),
        )

    def simulate(self, source: Optional[RandomSource] = None) -> int:
        """Units produced by this factory over one window."""
        return int(self.simulate_many(1, source).output[0])


def simulate_factory(
    machines: int = config.MACHINES,
    window_s: float = config.SECONDS_PER_DAY,
    source: Optional[RandomSource] = None,
    *,
    calibration: Calibration = DEFAULT_CALIBRATION,
) -> int:
    return Factory(machines, window_s, calibration).simulate(source)


def aggregate_factories(
    n_factories: int,
    machines: int = config.MACHINES,
    window_s: float = config.SECONDS_PER_DAY,
    source: Optional[RandomSource] = None,
    *,
    calibration: Calibration = DEFAULT_CALIBRATION,
) -> int:
    """Total output of `n_factories` independent factories over one window."""
    if n_factories < 0:
        raise ValueError("n_factories must be >= 0")
    factory = Factory(machines, window_s, calibration)
    if n_factories == 0:
        return 0
    return factory.simulate_many(n_factories, source).total_output
