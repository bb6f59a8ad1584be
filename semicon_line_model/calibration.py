"""
Calibration table of the semiconductor assembly line.

The case study line consists of three die attach machines, four oven cure
machines, nine wire bond machines and three pre-cap inspection machines.
Ranges and regression terms come from the published calibration study and
are kept together so a different study can be swapped in as a whole.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

NORMAL = "normal"
EXPONENTIAL = "exponential"

QUANTITY_NAMES = (
    "ct_wb",
    "ct_da",
    "ct_pc",
    "dd_da",
    "dd_wb",
    "df_da",
    "df_wb",
    "st_da",
    "st_wb",
)


@dataclass(frozen=True)
class QuantityRange:
    """Inclusive [low, high] range of one sampled line quantity."""

    name: str
    kind: str
    low: float
    high: float
    description: str = ""


@dataclass(frozen=True)
class RegressionTerm:
    """One standardised term of the unit cycle time fit: coef * (x - centre) / scale."""

    coef: float
    centre: float
    scale: float

    def evaluate(self, x):
        return self.coef * (x - self.centre) / self.scale


def _frozen(d: dict) -> Mapping:
    return MappingProxyType(dict(d))


@dataclass(frozen=True)
class Calibration:
    quantities: Mapping[str, QuantityRange]
    terms: Mapping[str, RegressionTerm]
    batch_sizes: tuple[int, ...] = (2200, 3080, 11264)
    batch_coef: float = 10.1729
    oven_cure_s: float = 7200.0
    seconds_per_day: float = 86400.0
    names: tuple[str, ...] = field(default=QUANTITY_NAMES)

    def __post_init__(self) -> None:
        missing = [n for n in self.names if n not in self.quantities or n not in self.terms]
        if missing:
            raise ValueError(f"Calibration is missing quantities: {missing}")
        if not self.batch_sizes:
            raise ValueError("batch_sizes must not be empty")


DEFAULT_CALIBRATION = Calibration(
    quantities=_frozen(
        {
            "ct_wb": QuantityRange("ct_wb", NORMAL, 6.0902, 6.4609, "Cycle time, wire bond"),
            "ct_da": QuantityRange("ct_da", NORMAL, 2.8072, 2.9460, "Cycle time, die attach"),
            "ct_pc": QuantityRange("ct_pc", NORMAL, 0.9882, 1.0498, "Cycle time, pre-cap inspection"),
            "dd_da": QuantityRange("dd_da", EXPONENTIAL, 2141, 4391, "Downtime duration, die attach"),
            "dd_wb": QuantityRange("dd_wb", EXPONENTIAL, 1364, 2797, "Downtime duration, wire bond"),
            "df_da": QuantityRange("df_da", EXPONENTIAL, 1066, 2187, "Downtime frequency, die attach"),
            "df_wb": QuantityRange("df_wb", EXPONENTIAL, 1421, 2193, "Downtime frequency, wire bond"),
            "st_da": QuantityRange("st_da", EXPONENTIAL, 2957, 6063, "Setup time, die attach"),
            "st_wb": QuantityRange("st_wb", EXPONENTIAL, 1324, 2714, "Setup time, wire bond"),
        }
    ),
    terms=_frozen(
        {
            "ct_da": RegressionTerm(387.1239, 2.8766, 0.0694),
            "ct_wb": RegressionTerm(1008.0011, 6.2756, 0.1854),
            "ct_pc": RegressionTerm(157.9690, 1.019, 0.0308),
            "dd_da": RegressionTerm(9.5167, 3266, 1125),
            "dd_wb": RegressionTerm(3.9325, 2080.5, 716.5),
            "df_da": RegressionTerm(2.4477, 1626.5, 560.5),
            "df_wb": RegressionTerm(-0.1807, 1807, 386),
            "st_da": RegressionTerm(-2.6148, 4510, 1553),
            "st_wb": RegressionTerm(24.3713, 2019, 695),
        }
    ),
)
