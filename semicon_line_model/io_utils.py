from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional, Union
from uuid import uuid4

import pandas as pd

LOGGER_NAME = "semicon_line_model"


def ensure_results_layout(root: Union[str, Path]) -> Path:
    root = Path(root)
    (root / "figures").mkdir(parents=True, exist_ok=True)
    return root


def get_logger(*, results_dir: Optional[Union[str, Path]] = None) -> logging.Logger:
    """
    Configure and return the run logger.

    Logs to stderr, and also to `<results_dir>/diagnostics.log` when a
    results directory is given. Later calls with a new results directory
    attach its log file to the already configured logger.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.INFO)

    fmt = logging.Formatter(
        fmt="%(asctime)s | %(levelname)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    # Avoid duplicate handlers if called multiple times in-process.
    if not getattr(logger, "_configured", False):
        sh = logging.StreamHandler()
        sh.setLevel(logging.INFO)
        sh.setFormatter(fmt)
        logger.addHandler(sh)
        logger.propagate = False
        logger._configured = True  # type: ignore[attr-defined]

    if results_dir is not None:
        log_path = (ensure_results_layout(results_dir) / "diagnostics.log").resolve()
        attached = {
            Path(h.baseFilename).resolve()
            for h in logger.handlers
            if isinstance(h, logging.FileHandler)
        }
        if log_path not in attached:
            fh = logging.FileHandler(log_path, mode="a", encoding="utf-8")
            fh.setLevel(logging.INFO)
            fh.setFormatter(fmt)
            logger.addHandler(fh)

    return logger


def atomic_write_csv(df: pd.DataFrame, path: Path, *, index: bool = False) -> None:
    """
    Atomic CSV write (temp file -> rename).

    Ensures an interrupted run never leaves a partial/corrupt CSV.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + f".tmp.{os.getpid()}.{uuid4().hex}")
    df.to_csv(tmp, index=index)
    os.replace(tmp, path)
