from __future__ import annotations

import statistics
import timeit
from dataclasses import dataclass
from typing import Callable, Iterable, Optional

import numpy as np
import pandas as pd


@dataclass(frozen=True)
class BenchmarkResult:
    name: str
    n_runs: int
    number: int
    min_s: float
    median_s: float
    mean_s: float
    max_s: float


def benchmark(
    fn: Callable,
    *args,
    name: Optional[str] = None,
    repeat: int = 7,
    number: int = 100,
) -> BenchmarkResult:
    """Time ``fn(*args)``; each reported figure is seconds per call."""

    if repeat < 1:
        raise ValueError(f"repeat must be >= 1; got {repeat}")
    if number < 1:
        raise ValueError(f"number must be >= 1; got {number}")

    timer = timeit.Timer(lambda: fn(*args))
    per_call = [t / number for t in timer.repeat(repeat=repeat, number=number)]
    return BenchmarkResult(
        name=name or getattr(fn, "__name__", "anonymous"),
        n_runs=repeat,
        number=number,
        min_s=min(per_call),
        median_s=statistics.median(per_call),
        mean_s=statistics.fmean(per_call),
        max_s=max(per_call),
    )


def loop_sum(values) -> float:
    total = 0.0
    for v in values:
        total += v
    return total


def builtin_sum(values) -> float:
    return float(sum(values))


def numpy_sum(values) -> float:
    return float(np.sum(values))


def compare_benchmarks(results: Iterable[BenchmarkResult]) -> pd.DataFrame:
    df = pd.DataFrame([r.__dict__ for r in results])
    if df.empty:
        return df
    slowest = float(df["median_s"].max())
    df["speedup_vs_slowest"] = slowest / df["median_s"]
    return df.sort_values("median_s", kind="mergesort").reset_index(drop=True)
