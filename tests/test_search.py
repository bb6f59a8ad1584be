"""Tests for the capacity search and the multi-year growth projection."""

import math

import pytest

from semicon_line_model import config
from semicon_line_model.model import aggregate_factories
from semicon_line_model.sampler import RandomSource
from semicon_line_model.search import (
    average_capacity_search,
    find_minimum_factories,
    project_growth,
)

DAY = config.SECONDS_PER_DAY


def test_zero_target_returns_start_immediately(source):
    res = find_minimum_factories(0, 3, DAY, 10, source=source)
    assert res.converged
    assert res.factories == 0
    assert res.iterations == 1

    res = find_minimum_factories(0, 3, DAY, 10, start=40, source=source)
    assert res.factories == 40


def test_search_reaches_target(source):
    target = 1_000_000
    res = find_minimum_factories(target, 3, DAY, 1, source=source)
    assert res.converged
    assert res.total_output >= target
    # ~80k units/day per factory
    assert 8 <= res.factories <= 20


def test_search_stays_on_step_grid(source):
    res = find_minimum_factories(2_000_000, 3, DAY, 7, start=3, source=source)
    assert (res.factories - 3) % 7 == 0


def test_search_cap_reports_no_solution(source):
    res = find_minimum_factories(1e15, 3, DAY, 1, max_iterations=3, source=source)
    assert not res.converged
    assert res.iterations == 3
    assert res.factories == 2


@pytest.mark.parametrize("kwargs", [{"step": 0}, {"start": -1}, {"max_iterations": 0}])
def test_search_invalid_arguments(kwargs, source):
    params = {"step": 1, "start": 0, "max_iterations": 10}
    params.update(kwargs)
    with pytest.raises(ValueError):
        find_minimum_factories(
            100,
            3,
            DAY,
            params["step"],
            start=params["start"],
            max_iterations=params["max_iterations"],
            source=source,
        )


def test_average_search(source):
    est = average_capacity_search(500_000, 3, DAY, 1, n_runs=5, source=source)
    assert est.converged
    assert est.runs == 5
    assert est.converged_runs == 5
    assert 4 <= est.mean_factories <= 12
    assert est.mean_output >= 500_000


def test_average_search_without_solution_warns(source):
    warnings = []
    est = average_capacity_search(
        1e15, 3, DAY, 1, n_runs=2, max_iterations=2, source=source, warn_hook=warnings.append
    )
    assert not est.converged
    assert est.converged_runs == 0
    assert math.isnan(est.mean_factories)
    assert len(warnings) == 2


def test_average_search_deterministic():
    a = average_capacity_search(300_000, 3, DAY, 1, n_runs=3, source=RandomSource(seed=3))
    b = average_capacity_search(300_000, 3, DAY, 1, n_runs=3, source=RandomSource(seed=3))
    assert a == b


def test_growth_compounds_totals(source):
    df = project_growth(
        base_total=10_000_000,
        growth_rate=0.1,
        years=3,
        machines=3,
        window_s=DAY,
        step=1,
        n_runs=3,
        source=source,
    )
    assert list(df["year"]) == [1, 2, 3]
    assert df.loc[0, "target"] == pytest.approx(1_000_000)
    for i in range(1, len(df)):
        prev = df.loc[i - 1]
        assert df.loc[i, "previous_total"] == pytest.approx(prev["previous_total"] + prev["mean_output"])
        assert df.loc[i, "target"] == pytest.approx(0.1 * df.loc[i, "previous_total"])
    assert (df["mean_output"] >= df["target"]).all()


def test_growth_stops_without_solution(source):
    warnings = []
    df = project_growth(
        base_total=1e16,
        growth_rate=0.5,
        years=4,
        machines=3,
        window_s=DAY,
        step=1,
        n_runs=1,
        max_iterations=2,
        source=source,
        warn_hook=warnings.append,
    )
    assert len(df) == 1
    assert df.loc[0, "converged_runs"] == 0
    assert any("stopping projection" in w for w in warnings)


def test_more_factories_needed_for_larger_target(source):
    small = average_capacity_search(400_000, 3, DAY, 1, n_runs=4, source=source)
    large = average_capacity_search(4_000_000, 3, DAY, 1, n_runs=4, source=source)
    assert large.mean_factories > small.mean_factories
    assert aggregate_factories(0, 3, DAY, source) == 0
