"""
Semiconductor Assembly Line — Capacity Model

This package implements a closed-form Monte Carlo model of a semiconductor
assembly line (die attach, oven cure, wire bond, pre-cap inspection). Each
factory evaluation draws the line's cycle, downtime and setup times from
bounded distributions and converts them into an output count through the
regression fit of the reference study; capacity searches invert the model to
find how many factories reach a production target.
"""

from .calibration import DEFAULT_CALIBRATION, Calibration, QuantityRange  # noqa: F401
from .config import (  # noqa: F401
    GROWTH_RATE,
    MACHINES,
    N_RUNS,
    SECONDS_PER_DAY,
    SECONDS_PER_YEAR,
    TARGET_2021,
)
from .model import (  # noqa: F401
    ComputationError,
    Factory,
    FactoryDraws,
    aggregate_factories,
    simulate_factory,
)
from .sampler import BoundedSampler, RandomSource, SamplingError, truncate  # noqa: F401
from .search import (  # noqa: F401
    CapacityEstimate,
    SearchResult,
    average_capacity_search,
    find_minimum_factories,
    project_growth,
)
from .validation import REFERENCE_TABLES, compare_statistics  # noqa: F401
