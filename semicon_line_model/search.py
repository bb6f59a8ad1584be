from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np
import pandas as pd
from tqdm import tqdm

from . import config
from .calibration import DEFAULT_CALIBRATION, Calibration
from .model import aggregate_factories
from .sampler import RandomSource


@dataclass(frozen=True)
class SearchResult:
    """Outcome of one capacity search run."""

    factories: int
    total_output: int
    iterations: int
    converged: bool


@dataclass(frozen=True)
class CapacityEstimate:
    """Mean over the converged runs of a repeated capacity search."""

    mean_factories: float
    mean_output: float
    runs: int
    converged_runs: int

    @property
    def converged(self) -> bool:
        return self.runs > 0 and self.converged_runs == self.runs


def find_minimum_factories(
    target: float,
    machines: int = config.MACHINES,
    window_s: float = config.SECONDS_PER_YEAR,
    step: int = config.STEP_EXP2,
    *,
    start: int = 0,
    max_iterations: int = config.MAX_SEARCH_ITERATIONS,
    source: Optional[RandomSource] = None,
    calibration: Calibration = DEFAULT_CALIBRATION,
) -> SearchResult:
    """
    Smallest candidate on the grid start, start+step, ... whose simulated
    aggregate output meets `target`.

    Each candidate is re-simulated from scratch, so the result is noisy near
    the threshold. After `max_iterations` evaluations without reaching the
    target the last candidate is returned with converged=False.
    """
    if step <= 0:
        raise ValueError("step must be > 0")
    if start < 0:
        raise ValueError("start must be >= 0")
    if max_iterations <= 0:
        raise ValueError("max_iterations must be > 0")
    if not math.isfinite(target):
        raise ValueError("target must be finite")
    if source is None:
        source = RandomSource()

    candidate = start
    output = 0
    for iteration in range(1, max_iterations + 1):
        output = aggregate_factories(candidate, machines, window_s, source, calibration=calibration)
        if output >= target:
            return SearchResult(candidate, output, iteration, True)
        candidate += step

    return SearchResult(candidate - step, output, max_iterations, False)


def average_capacity_search(
    target: float,
    machines: int = config.MACHINES,
    window_s: float = config.SECONDS_PER_YEAR,
    step: int = config.STEP_EXP2,
    n_runs: int = config.N_RUNS,
    *,
    start: int = 0,
    max_iterations: int = config.MAX_SEARCH_ITERATIONS,
    source: Optional[RandomSource] = None,
    calibration: Calibration = DEFAULT_CALIBRATION,
    warn_hook: Optional[Callable[[str], None]] = None,
    progress: bool = False,
    desc: str = "capacity_search",
) -> CapacityEstimate:
    """Repeat the capacity search `n_runs` times and average the converged runs."""
    if n_runs <= 0:
        raise ValueError("n_runs must be positive")
    if source is None:
        source = RandomSource()

    factories: list[int] = []
    outputs: list[int] = []
    for run in tqdm(range(n_runs), desc=desc, leave=False, disable=not progress):
        res = find_minimum_factories(
            target,
            machines,
            window_s,
            step,
            start=start,
            max_iterations=max_iterations,
            source=source,
            calibration=calibration,
        )
        if not res.converged:
            if warn_hook is not None:
                warn_hook(
                    f"{desc}: run {run} found no solution within {max_iterations} iterations "
                    f"(last candidate={res.factories}, output={res.total_output})"
                )
            continue
        factories.append(res.factories)
        outputs.append(res.total_output)

    mean_f = float(np.mean(factories)) if factories else float("nan")
    mean_o = float(np.mean(outputs)) if outputs else float("nan")
    return CapacityEstimate(mean_f, mean_o, n_runs, len(factories))


def project_growth(
    base_total: float = config.TARGET_2021,
    growth_rate: float = config.GROWTH_RATE,
    years: int = config.GROWTH_YEARS,
    machines: int = config.MACHINES,
    window_s: float = config.SECONDS_PER_YEAR,
    step: int = config.STEP_EXP3,
    n_runs: int = config.N_RUNS,
    *,
    max_iterations: int = config.MAX_SEARCH_ITERATIONS,
    source: Optional[RandomSource] = None,
    calibration: Calibration = DEFAULT_CALIBRATION,
    warn_hook: Optional[Callable[[str], None]] = None,
    progress: bool = False,
) -> pd.DataFrame:
    """
    Factories to build each year so that new capacity covers the growth.

    Year y targets growth_rate * total(y-1); the mean converged output of
    that year's searches is added to the running total for year y+1.
    A year without any converged run stops the projection.
    """
    if years <= 0:
        raise ValueError("years must be positive")
    if growth_rate <= 0:
        raise ValueError("growth_rate must be > 0")
    if source is None:
        source = RandomSource()

    rows = []
    total = float(base_total)
    for year in range(1, years + 1):
        target = total * growth_rate
        est = average_capacity_search(
            target,
            machines,
            window_s,
            step,
            n_runs,
            max_iterations=max_iterations,
            source=source,
            calibration=calibration,
            warn_hook=warn_hook,
            progress=progress,
            desc=f"growth_year_{year}",
        )
        rows.append(
            {
                "year": year,
                "previous_total": total,
                "target": target,
                "mean_factories": est.mean_factories,
                "mean_output": est.mean_output,
                "converged_runs": est.converged_runs,
                "runs": est.runs,
            }
        )
        if est.converged_runs == 0:
            if warn_hook is not None:
                warn_hook(f"growth: no converged run in year {year}; stopping projection")
            break
        total += est.mean_output

    return pd.DataFrame(rows)
