"""Tests for the experiment runner command line."""

import pytest

from semicon_line_model import run_experiments


@pytest.mark.parametrize(
    "argv",
    [
        ["-4"],
        ["--bogus"],
        ["extra"],
        ["-1", "-x"],
        # Short flags are not merged, long options are not abbreviated.
        ["-12"],
        ["-123"],
        ["-3", "-21"],
        ["--q"],
        ["--results", "out"],
    ],
)
def test_unknown_flag_prints_usage_and_exits_1(argv, capsys, fresh_logger, monkeypatch):
    called = []
    for name in ("run_experiment_1", "run_experiment_2", "run_experiment_3"):
        monkeypatch.setattr(run_experiments, name, lambda **kw: called.append(kw))
    with pytest.raises(SystemExit) as exc:
        run_experiments.main(argv)
    assert exc.value.code == 1
    assert "usage" in capsys.readouterr().out.lower()
    assert called == []


def test_flags_select_experiments(monkeypatch, fresh_logger, capsys):
    ran = []
    monkeypatch.setattr(run_experiments, "run_experiment_1", lambda **kw: ran.append(1) or _report())
    monkeypatch.setattr(run_experiments, "run_experiment_2", lambda **kw: ran.append(2) or _estimate())
    monkeypatch.setattr(run_experiments, "run_experiment_3", lambda **kw: ran.append(3) or _growth())

    assert run_experiments.main(["-2"]) == 0
    assert ran == [2]

    ran.clear()
    assert run_experiments.main(["-3", "-1"]) == 0
    assert ran == [1, 3]

    ran.clear()
    assert run_experiments.main([]) == 0
    assert ran == [1, 2, 3]


def test_experiment_1_end_to_end(capsys, fresh_logger, tmp_path):
    assert run_experiments.main(["-1", "--seed", "7", "--results-dir", str(tmp_path)]) == 0
    out = capsys.readouterr().out
    assert "Experiment 1" in out
    assert "ct_wb" in out
    assert (tmp_path / "experiment_1_validation.csv").exists()
    assert (tmp_path / "figures" / "experiment_1_validation.png").exists()
    assert (tmp_path / "diagnostics.log").exists()


def test_quick_capacity_experiments(capsys, fresh_logger, tmp_path):
    assert run_experiments.main(["-2", "-3", "--quick", "--seed", "1", "--results-dir", str(tmp_path)]) == 0
    out = capsys.readouterr().out
    assert "Experiment 2" in out
    assert "Experiment 3" in out
    assert "after 5 year(s)" in out
    assert (tmp_path / "figures" / "experiment_3_growth.png").exists()


def _report():
    import pandas as pd

    return pd.DataFrame(
        {"reference_mean": [1.0], "simulated_mean": [1.0], "mean_diff": [0.0],
         "reference_sd": [0.0], "simulated_sd": [0.0], "sd_diff": [0.0]},
        index=["x"],
    )


def _estimate():
    from semicon_line_model.search import CapacityEstimate

    return CapacityEstimate(10.0, 100.0, 1, 1)


def _growth():
    import pandas as pd

    return pd.DataFrame([{"year": 1, "target": 5.0, "mean_factories": 1.0}])
