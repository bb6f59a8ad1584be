from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence

import pandas as pd

from . import config
from .experiments import run_experiment_1, run_experiment_2, run_experiment_3
from .io_utils import ensure_results_layout, get_logger
from .sampler import RandomSource
from .search import CapacityEstimate

RULE = "-" * 100


class _UsageParser(argparse.ArgumentParser):
    """Any argument error prints the usage and exits with status 1."""

    def error(self, message: str) -> None:  # type: ignore[override]
        self.print_usage(sys.stdout)
        sys.stderr.write(f"{self.prog}: error: {message}\n")
        sys.exit(1)


def build_parser() -> argparse.ArgumentParser:
    p = _UsageParser(
        prog="semicon_line_model",
        allow_abbrev=False,
        description="Semiconductor assembly line capacity experiments.",
    )
    p.add_argument("-1", dest="exp1", action="store_true", help="Experiment 1: model validation")
    p.add_argument("-2", dest="exp2", action="store_true", help="Experiment 2: factories for the 2021 output")
    p.add_argument("-3", dest="exp3", action="store_true", help="Experiment 3: yearly expansion for 6.25%% growth")
    p.add_argument(
        "--quick",
        action="store_true",
        help="smaller target and fewer averaging runs (dev / smoke test)",
    )
    p.add_argument("--seed", type=int, default=None, help="fixed seed for a reproducible run")
    p.add_argument(
        "--results-dir",
        type=Path,
        default=None,
        help="write CSVs, the diagnostics log and figures under this directory",
    )
    return p


def _print_experiment_1(report: pd.DataFrame) -> None:
    print(RULE)
    print("Experiment 1 - model validation:")
    print("")
    with pd.option_context("display.float_format", "{:.6g}".format, "display.width", 120):
        print(report.to_string())
    print(RULE)


def _print_experiment_2(est: CapacityEstimate, target: float) -> None:
    print(RULE)
    print("Experiment 2 - model factories needed to cover one year of world output:")
    print("")
    if est.converged_runs == 0:
        print(f"No solution found within the search bounds ({est.runs} runs).")
    else:
        print(f"{target:.4g} units per year need {est.mean_factories:.1f} model factories "
              f"(mean of {est.converged_runs}/{est.runs} runs).")
    print(RULE)


def _print_experiment_3(growth: pd.DataFrame, growth_rate: float) -> None:
    print(RULE)
    print(f"Experiment 3 - model factories to build each year to follow {100 * growth_rate:.2f}% growth:")
    print("")
    for row in growth.itertuples(index=False):
        print(f"after {row.year} year(s), factories to build: {row.mean_factories:.1f} "
              f"(target {row.target:.4g} units)")
    print(RULE)


_EXPERIMENT_FLAGS = ("-1", "-2", "-3")
_VALUE_OPTIONS = ("--seed", "--results-dir")


def _check_short_flags(parser: argparse.ArgumentParser, argv: Sequence[str]) -> None:
    """Short flags are taken verbatim: "-12" is not "-1 -2"."""
    prev = None
    for tok in argv:
        if prev not in _VALUE_OPTIONS and tok.startswith("-") and not tok.startswith("--"):
            if tok not in _EXPERIMENT_FLAGS:
                parser.error(f"unrecognized arguments: {tok}")
        prev = tok


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    argv = list(sys.argv[1:] if argv is None else argv)
    _check_short_flags(parser, argv)
    args = parser.parse_args(argv)
    run_all = not (args.exp1 or args.exp2 or args.exp3)

    results_dir = ensure_results_layout(args.results_dir) if args.results_dir is not None else None
    logger = get_logger(results_dir=results_dir)
    warn = logger.warning
    info = logger.info

    source = RandomSource(args.seed)
    logger.info(f"RUN START quick={args.quick} entropy={source.entropy}")

    if args.quick:
        n_runs = config.N_RUNS_QUICK
        target = config.TARGET_2021 * config.TARGET_SCALE_QUICK
        step2, step3 = config.STEP_EXP2_QUICK, config.STEP_EXP3_QUICK
    else:
        n_runs = config.N_RUNS
        target = config.TARGET_2021
        step2, step3 = config.STEP_EXP2, config.STEP_EXP3

    if run_all or args.exp1:
        report = run_experiment_1(source=source, results_dir=results_dir, logger_warn=warn, logger_info=info)
        _print_experiment_1(report)
        if results_dir is not None:
            from .viz_utils import plot_validation

            plot_validation(report, results_dir / "figures" / "experiment_1_validation.png")

    if run_all or args.exp2:
        est = run_experiment_2(
            source=source,
            target=target,
            step=step2,
            n_runs=n_runs,
            results_dir=results_dir,
            logger_warn=warn,
            logger_info=info,
        )
        _print_experiment_2(est, target)

    if run_all or args.exp3:
        growth = run_experiment_3(
            source=source,
            base_total=target,
            step=step3,
            n_runs=n_runs,
            results_dir=results_dir,
            logger_warn=warn,
            logger_info=info,
        )
        _print_experiment_3(growth, config.GROWTH_RATE)
        if results_dir is not None and not growth.empty:
            from .viz_utils import plot_growth

            plot_growth(growth, results_dir / "figures" / "experiment_3_growth.png")

    logger.info("RUN END")
    return 0


if __name__ == "__main__":
    sys.exit(main())
