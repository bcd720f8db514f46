"""Monte-Carlo estimate of pi split across a fixed pool of worker processes.

The sample count ``n`` is cut into ``n_workers`` equal chunks of
``n // n_workers`` points; the ``n % n_workers`` left over are counted by the
calling process once the pool has returned. Partial counts are summed and
``pi ~ 4 * hits / n``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np
from joblib import Parallel, delayed

logger = logging.getLogger(__name__)

# Points drawn per vectorised batch inside a worker.
_BATCH_SIZE = 1_000_000


@dataclass(frozen=True)
class PiEstimate:
    estimate: float
    n: int
    n_workers: int
    partial_counts: Tuple[int, ...]
    local_count: int

    @property
    def hits(self) -> int:
        return int(sum(self.partial_counts) + self.local_count)

    @property
    def abs_error(self) -> float:
        return abs(self.estimate - np.pi)


def partition_range(n: int, n_workers: int) -> Tuple[List[int], int]:
    """Chunk sizes handed to workers, and the remainder kept by the caller."""

    if n < 0:
        raise ValueError(f"n must be non-negative; got {n}")
    if n_workers < 1:
        raise ValueError(f"n_workers must be >= 1; got {n_workers}")
    chunk = n // n_workers
    return [chunk] * n_workers, n - chunk * n_workers


def count_in_circle(n: int, seed) -> int:
    """Count uniform points of the unit square that fall inside the quarter circle."""

    if n < 0:
        raise ValueError(f"n must be non-negative; got {n}")
    rng = np.random.default_rng(seed)
    hits = 0
    remaining = n
    while remaining > 0:
        size = min(remaining, _BATCH_SIZE)
        x = rng.random(size)
        y = rng.random(size)
        hits += int(np.count_nonzero(x * x + y * y <= 1.0))
        remaining -= size
    return hits


def estimate_pi(
    n: int,
    n_workers: int = 4,
    *,
    seed: int = 2026,
    backend: Optional[str] = None,
) -> PiEstimate:
    if n < 1:
        raise ValueError(f"n must be >= 1; got {n}")
    chunks, remainder = partition_range(n, n_workers)

    # One independent stream per worker chunk plus one for the local remainder.
    seeds = np.random.SeedSequence(seed).spawn(n_workers + 1)

    logger.info("Estimating pi with n=%d over %d workers (chunk=%d, local remainder=%d)", n, n_workers, chunks[0], remainder)
    with Parallel(n_jobs=n_workers, backend=backend) as pool:
        partial = pool(delayed(count_in_circle)(size, s) for size, s in zip(chunks, seeds[:-1]))
    local = count_in_circle(remainder, seeds[-1])

    hits = int(sum(partial)) + local
    estimate = 4.0 * hits / n
    logger.info("pi ~ %.6f (abs error %.2e)", estimate, abs(estimate - np.pi))
    return PiEstimate(
        estimate=estimate,
        n=n,
        n_workers=n_workers,
        partial_counts=tuple(int(c) for c in partial),
        local_count=int(local),
    )
