from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Mapping, Optional

# Matplotlib must be configured before importing pyplot.
_mpl_cache_dir = Path(tempfile.gettempdir()) / "matplotlib"
_mpl_cache_dir.mkdir(parents=True, exist_ok=True)
os.environ.setdefault("MPLCONFIGDIR", str(_mpl_cache_dir))

import matplotlib  # noqa: E402

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402


def save_figure(fig, path: Path) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(path, dpi=300, bbox_inches="tight")


def plot_lines(
    x,
    series: Mapping[str, object],
    path: Path,
    *,
    title: str = "",
    xlabel: str = "",
    ylabel: str = "",
) -> Path:
    fig, ax = plt.subplots(figsize=(8, 5))
    for label, y in series.items():
        ax.plot(x, y, label=label)
    ax.set_title(title)
    ax.set_xlabel(xlabel)
    ax.set_ylabel(ylabel)
    if series:
        ax.legend()
    fig.tight_layout()
    save_figure(fig, path)
    plt.close(fig)
    return Path(path)


def plot_histogram(values, path: Path, *, title: str = "", bins: int = 30, xlabel: Optional[str] = None) -> Path:
    vals = np.asarray(values, dtype=float)
    fig, ax = plt.subplots(figsize=(8, 5))
    ax.hist(vals[np.isfinite(vals)], bins=bins)
    ax.set_title(title)
    ax.set_ylabel("Count")
    if xlabel:
        ax.set_xlabel(xlabel)
    fig.tight_layout()
    save_figure(fig, path)
    plt.close(fig)
    return Path(path)
