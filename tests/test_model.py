"""Tests for the factory throughput model and the population aggregator."""

import dataclasses

import numpy as np
import pytest

from semicon_line_model.calibration import DEFAULT_CALIBRATION
from semicon_line_model.model import (
    ComputationError,
    Factory,
    aggregate_factories,
    simulate_factory,
    total_machine_time,
    unit_cycle_time,
)
from semicon_line_model.sampler import RandomSource


def _centre_samples():
    return {name: np.array([term.centre]) for name, term in DEFAULT_CALIBRATION.terms.items()}


class TestFormulas:
    def test_total_machine_time_matches_formula(self):
        td, m = 86400, 3
        st_da, dd_da, st_wb, dd_wb = 4510.0, 3266.0, 2019.0, 2080.5
        expected = m * (
            (td - st_da) * (86400 - dd_da) / 86400 + td + (td - st_wb) * (86400 - dd_wb) / 86400 + td
        )
        got = total_machine_time(m, td, st_da, dd_da, st_wb, dd_wb)
        assert int(got) == int(expected)

    def test_total_machine_time_clamps_short_windows(self):
        got = total_machine_time(1, 1000, 5000.0, 0.0, 5000.0, 0.0)
        assert int(got) == 2000

    def test_unit_cycle_time_at_centres(self):
        t = unit_cycle_time(_centre_samples(), np.array([2200]))
        assert int(t[0]) == int(7200 + 10.1729 * 2200)

    def test_non_positive_unit_time_is_fatal(self):
        cal = dataclasses.replace(DEFAULT_CALIBRATION, oven_cure_s=-1e9)
        with pytest.raises(ComputationError):
            unit_cycle_time(_centre_samples(), np.array([2200]), cal)

    def test_non_finite_unit_time_is_fatal(self):
        samples = _centre_samples()
        samples["ct_wb"] = np.array([np.nan])
        with pytest.raises(ComputationError):
            unit_cycle_time(samples, np.array([3080]))


class TestFactory:
    def test_daily_output_non_negative_integer(self, source):
        draws = Factory(3, 86400).simulate_many(10_000, source)
        assert len(draws) == 10_000
        assert draws.output.dtype == np.int64
        assert np.all(draws.output >= 0)
        assert set(np.unique(draws.batch)) <= {2200, 3080, 11264}

    def test_single_simulation_returns_int(self, source):
        for _ in range(300):
            om = simulate_factory(3, 86400, source)
            assert isinstance(om, int)
            assert om >= 0

    def test_output_in_plausible_daily_range(self, source):
        draws = Factory().simulate_many(2_000, source)
        # Reference study reports ~7e4..9e4 units/day for the case-study line.
        assert 6.0e4 < float(np.mean(draws.output)) < 1.1e5
        assert 9.5e5 < float(np.mean(draws.t_total)) < 1.02e6

    def test_output_matches_components(self, source):
        d = Factory().simulate_many(50, source)
        np.testing.assert_array_equal(d.output, (d.t_total * d.batch) // d.t_unit)

    def test_deterministic_with_fixed_seed(self):
        a = Factory().simulate_many(100, RandomSource(seed=7))
        b = Factory().simulate_many(100, RandomSource(seed=7))
        np.testing.assert_array_equal(a.output, b.output)

        sa, sb = RandomSource(seed=11), RandomSource(seed=11)
        seq_a = [simulate_factory(source=sa) for _ in range(20)]
        seq_b = [simulate_factory(source=sb) for _ in range(20)]
        assert seq_a == seq_b

    def test_to_frame_columns(self, source):
        df = Factory().simulate_many(5, source).to_frame()
        assert len(df) == 5
        for col in list(DEFAULT_CALIBRATION.names) + ["batch", "t_total", "t_unit", "output"]:
            assert col in df.columns

    @pytest.mark.parametrize("machines, window", [(-1, 86400), (3, 0), (3, -5)])
    def test_invalid_factory(self, machines, window):
        with pytest.raises(ValueError):
            Factory(machines, window)


class TestAggregate:
    def test_zero_factories(self, source):
        assert aggregate_factories(0, 3, 86400, source) == 0

    def test_negative_count_rejected(self, source):
        with pytest.raises(ValueError):
            aggregate_factories(-1, 3, 86400, source)

    def test_non_decreasing_in_expectation(self, source):
        means = []
        for n in (1, 5, 10, 20):
            trials = [aggregate_factories(n, 3, 86400, source) for _ in range(30)]
            means.append(float(np.mean(trials)))
        assert means == sorted(means)

    def test_aggregate_is_sum_of_population(self):
        total = aggregate_factories(25, 3, 86400, RandomSource(seed=5))
        draws = Factory(3, 86400).simulate_many(25, RandomSource(seed=5))
        assert total == int(draws.output.sum())
