"""
Model validation against the literature reference tables.

The reference study reports 21 observations of every sampled quantity plus
the resulting total machine time and daily output of the case-study line
(M=3, Td=one day). compare_statistics() is pure; simulated_samples() draws a
matching set of factories from the model.
"""

from __future__ import annotations

from typing import Mapping, Optional, Sequence

import numpy as np
import pandas as pd

from . import config
from .calibration import DEFAULT_CALIBRATION, Calibration
from .model import Factory
from .sampler import RandomSource

REFERENCE_TABLES: dict[str, tuple[float, ...]] = {
    "ct_da": (2.8346, 2.907, 2.9342, 2.8936, 2.9046, 2.8971, 2.8378,
              2.8432, 2.8342, 2.9032, 2.9178, 2.8190, 2.8772, 2.8100,
              2.9328, 2.8477, 2.8342, 2.8146, 2.9055, 2.8418, 2.9181),
    "ct_wb": (6.1796, 6.3721, 6.1890, 6.3850, 6.2920, 6.2297, 6.2860,
              6.1901, 6.2720, 6.1126, 6.3301, 6.1450, 6.3021, 6.2378,
              6.2891, 6.3310, 6.3187, 6.1722, 6.1137, 6.2671, 6.1263),
    "ct_pc": (1.0199, 0.9977, 1.0288, 0.9880, 1.0186, 0.9883, 1.0078,
              1.0079, 0.9220, 1.0260, 1.0348, 0.9972, 1.0152, 1.020,
              0.9973, 1.0256, 1.0200, 1.0450, 1.0123, 1.0150, 1.0190),
    "dd_da": (2241, 3190, 2845, 3986, 4097, 3967, 2988,
              3990, 4010, 3720, 2899, 2690, 2477, 3320,
              3966, 4210, 3277, 3547, 4177, 4091, 2851),
    "dd_wb": (1599, 1987, 2366, 1822, 1769, 2544, 1479,
              2265, 2740, 1608, 1790, 2011, 2390, 2700,
              2541, 1922, 2410, 2180, 2419, 2655, 2399),
    "df_da": (1601, 2067, 1339, 1845, 1937, 2080, 2065,
              1205, 1580, 1945, 1540, 1766, 2010, 2087,
              2019, 1579, 1368, 1392, 1752, 2180, 1611),
    "df_wb": (1790, 1544, 1988, 1756, 2147, 2079, 1655,
              1742, 1823, 2009, 1990, 2080, 1590, 1630,
              1762, 1934, 2076, 1855, 1988, 1628, 2070),
    "st_da": (3867, 3099, 5427, 4635, 4906, 3782, 3056,
              4932, 5109, 3550, 5742, 5230, 4480, 5020,
              5564, 5716, 4288, 4399, 4980, 5927, 3899),
    "st_wb": (2613, 2561, 1762, 2611, 2701, 1677, 1577,
              2430, 2054, 2689, 2090, 2190, 1988, 1420,
              1436, 1788, 1867, 2090, 1645, 2654, 2017),
    "t_total": (994433, 992858, 979236, 980697, 981625, 980148, 993847,
                975787, 975532, 984679, 977745, 979935, 984775, 981757,
                993745, 994579, 1002224, 999328, 994918, 994747, 1005139),
    "output": (72902, 91956, 92674, 82019, 80998, 92276, 76479,
               90772, 78789, 80136, 89995, 75844, 72967, 79716,
               81412, 72110, 90693, 70974, 72538, 78620, 92051),
}

REPORT_COLUMNS = [
    "reference_mean",
    "simulated_mean",
    "mean_diff",
    "reference_sd",
    "simulated_sd",
    "sd_diff",
]


def describe(values: Sequence[float]) -> tuple[float, float]:
    """Mean and population standard deviation."""
    arr = np.asarray(values, dtype=np.float64)
    if arr.size == 0:
        raise ValueError("Cannot describe an empty sequence")
    return float(np.mean(arr)), float(np.std(arr, ddof=0))


def compare_statistics(
    reference: Mapping[str, Sequence[float]],
    simulated: Mapping[str, Sequence[float]],
    *,
    quantities: Optional[Sequence[str]] = None,
) -> pd.DataFrame:
    """
    Per-quantity mean/sd of both sequences and their absolute differences.

    Every quantity must be present on both sides with equal-length sequences.
    """
    names = list(quantities) if quantities is not None else list(reference.keys())
    rows = {}
    for name in names:
        if name not in reference or name not in simulated:
            raise ValueError(f"Quantity '{name}' missing from reference or simulated data")
        ref = reference[name]
        sim = simulated[name]
        if len(ref) != len(sim):
            raise ValueError(f"Length mismatch for '{name}': {len(ref)} reference vs {len(sim)} simulated")
        ref_mean, ref_sd = describe(ref)
        sim_mean, sim_sd = describe(sim)
        rows[name] = {
            "reference_mean": ref_mean,
            "simulated_mean": sim_mean,
            "mean_diff": abs(ref_mean - sim_mean),
            "reference_sd": ref_sd,
            "simulated_sd": sim_sd,
            "sd_diff": abs(ref_sd - sim_sd),
        }
    df = pd.DataFrame.from_dict(rows, orient="index", columns=REPORT_COLUMNS)
    df.index.name = "quantity"
    return df


def simulated_samples(
    n: int = config.N_VALIDATION_SAMPLES,
    machines: int = config.MACHINES,
    window_s: float = config.SECONDS_PER_DAY,
    source: Optional[RandomSource] = None,
    *,
    calibration: Calibration = DEFAULT_CALIBRATION,
) -> dict[str, np.ndarray]:
    """Draw `n` factories and return arrays keyed like REFERENCE_TABLES."""
    draws = Factory(machines, window_s, calibration).simulate_many(n, source)
    out = {name: draws.samples[name] for name in calibration.names}
    out["t_total"] = draws.t_total
    out["output"] = draws.output
    return out
