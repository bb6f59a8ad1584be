"""
Visualisation utilities for semicon_line_model.

Read-only with respect to numerical results: figures are built from the
DataFrames the experiments return and written as PNG files.
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pandas as pd

COLOURS = {
    "mean": "#0072B2",  # blue
    "sd": "#D55E00",  # orange
    "target": "#009E73",  # green
}


def _pyplot():
    import matplotlib

    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    return plt


def plot_validation(report: pd.DataFrame, path: Path) -> Path:
    """
    Grouped bars of the relative mean / sd difference per quantity:
      |ref - sim| / |ref|
    """
    plt = _pyplot()
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with np.errstate(divide="ignore", invalid="ignore"):
        rel_mean = (report["mean_diff"] / report["reference_mean"].abs()).to_numpy(dtype=float)
        rel_sd = (report["sd_diff"] / report["reference_sd"].abs()).to_numpy(dtype=float)

    x = np.arange(len(report))
    width = 0.38
    fig, ax = plt.subplots(figsize=(10, 4.5))
    ax.bar(x - width / 2, 100.0 * rel_mean, width, label="mean", color=COLOURS["mean"])
    ax.bar(x + width / 2, 100.0 * rel_sd, width, label="sd", color=COLOURS["sd"])
    ax.set_xticks(x)
    ax.set_xticklabels(list(report.index), rotation=30, ha="right")
    ax.set_ylabel("relative difference [%]")
    ax.set_title("Simulated vs reference statistics")
    ax.grid(True, axis="y", alpha=0.20)
    ax.legend(frameon=False)
    fig.tight_layout()
    fig.savefig(path, dpi=150)
    plt.close(fig)
    return path


def plot_growth(growth: pd.DataFrame, path: Path) -> Path:
    """Factories to build per year (bars) with the yearly output target (line)."""
    plt = _pyplot()
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    years = growth["year"].to_numpy(dtype=int)
    fig, ax = plt.subplots(figsize=(7, 4.5))
    ax.bar(years, growth["mean_factories"].to_numpy(dtype=float), color=COLOURS["mean"], label="factories")
    ax.set_xlabel("year")
    ax.set_ylabel("factories to build")
    ax.set_xticks(years)
    ax.grid(True, axis="y", alpha=0.20)

    ax2 = ax.twinx()
    ax2.plot(years, growth["target"].to_numpy(dtype=float), "-o", color=COLOURS["target"], label="target")
    ax2.set_ylabel("output target [units]")

    ax.set_title("Yearly capacity expansion")
    fig.tight_layout()
    fig.savefig(path, dpi=150)
    plt.close(fig)
    return path
