from __future__ import annotations

from pathlib import Path
from typing import Callable, Optional

import pandas as pd

from . import config
from .io_utils import atomic_write_csv
from .sampler import RandomSource
from .search import CapacityEstimate, average_capacity_search, project_growth
from .validation import REFERENCE_TABLES, compare_statistics, simulated_samples


def _noop(msg: str) -> None:
    return None


def run_experiment_1(
    *,
    source: RandomSource,
    n_samples: int = config.N_VALIDATION_SAMPLES,
    results_dir: Optional[Path] = None,
    logger_warn: Callable[[str], None] = _noop,
    logger_info: Callable[[str], None] = _noop,
) -> pd.DataFrame:
    """Experiment 1 — model validation against the reference tables."""
    logger_info(f"START experiment_1: n_samples={n_samples} M={config.MACHINES} Td={config.SECONDS_PER_DAY}")

    simulated = simulated_samples(n_samples, config.MACHINES, config.SECONDS_PER_DAY, source)
    if n_samples == config.N_VALIDATION_SAMPLES:
        reference = REFERENCE_TABLES
    else:
        logger_warn(
            f"experiment_1: n_samples={n_samples} differs from the {config.N_VALIDATION_SAMPLES} "
            "reference rows; comparing against the first rows only"
        )
        n = min(n_samples, config.N_VALIDATION_SAMPLES)
        reference = {k: v[:n] for k, v in REFERENCE_TABLES.items()}
        simulated = {k: v[:n] for k, v in simulated.items()}

    report = compare_statistics(reference, simulated)

    if results_dir is not None:
        atomic_write_csv(report, Path(results_dir) / "experiment_1_validation.csv", index=True)
        atomic_write_csv(pd.DataFrame(simulated), Path(results_dir) / "experiment_1_samples.csv")

    logger_info("END experiment_1")
    return report


def run_experiment_2(
    *,
    source: RandomSource,
    target: float = config.TARGET_2021,
    step: int = config.STEP_EXP2,
    n_runs: int = config.N_RUNS,
    results_dir: Optional[Path] = None,
    progress: bool = True,
    logger_warn: Callable[[str], None] = _noop,
    logger_info: Callable[[str], None] = _noop,
) -> CapacityEstimate:
    """Experiment 2 — factories needed to produce `target` units in one year."""
    logger_info(f"START experiment_2: target={target:.6g} step={step} n_runs={n_runs}")

    est = average_capacity_search(
        target,
        config.MACHINES,
        config.SECONDS_PER_YEAR,
        step,
        n_runs,
        source=source,
        warn_hook=logger_warn,
        progress=progress,
        desc="experiment_2",
    )
    if not est.converged:
        logger_warn(f"experiment_2: only {est.converged_runs}/{est.runs} runs converged")

    if results_dir is not None:
        row = {
            "target": target,
            "step": step,
            "mean_factories": est.mean_factories,
            "mean_output": est.mean_output,
            "converged_runs": est.converged_runs,
            "runs": est.runs,
        }
        atomic_write_csv(pd.DataFrame([row]), Path(results_dir) / "experiment_2_capacity.csv")

    logger_info(f"END experiment_2: mean_factories={est.mean_factories:.6g}")
    return est


def run_experiment_3(
    *,
    source: RandomSource,
    base_total: float = config.TARGET_2021,
    growth_rate: float = config.GROWTH_RATE,
    years: int = config.GROWTH_YEARS,
    step: int = config.STEP_EXP3,
    n_runs: int = config.N_RUNS,
    results_dir: Optional[Path] = None,
    progress: bool = True,
    logger_warn: Callable[[str], None] = _noop,
    logger_info: Callable[[str], None] = _noop,
) -> pd.DataFrame:
    """Experiment 3 — factories to build each year to follow output growth."""
    logger_info(
        f"START experiment_3: base_total={base_total:.6g} growth={growth_rate} "
        f"years={years} step={step} n_runs={n_runs}"
    )

    df = project_growth(
        base_total,
        growth_rate,
        years,
        config.MACHINES,
        config.SECONDS_PER_YEAR,
        step,
        n_runs,
        source=source,
        warn_hook=logger_warn,
        progress=progress,
    )

    if results_dir is not None:
        atomic_write_csv(df, Path(results_dir) / "experiment_3_growth.csv")

    logger_info(f"END experiment_3: {len(df)} year(s) projected")
    return df
