from __future__ import annotations

import logging
from typing import Optional

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

_COLUMNS = ["t", "S", "I", "R"]


def _validate_sir_inputs(s0: int, i0: int, r0: int, beta: float, gamma: float, t_max: float) -> None:
    counts = {"s0": s0, "i0": i0, "r0": r0}
    bad = {k: v for k, v in counts.items() if v < 0}
    if bad:
        raise ValueError(f"Compartment counts must be non-negative; got {bad}")
    if beta < 0 or gamma < 0:
        raise ValueError(f"Rates must be non-negative; got beta={beta}, gamma={gamma}")
    if t_max <= 0:
        raise ValueError(f"t_max must be positive; got {t_max}")


def simulate_sir(
    s0: int,
    i0: int,
    r0: int,
    *,
    beta: float,
    gamma: float,
    t_max: float,
    seed: Optional[int] = None,
    rng: Optional[np.random.Generator] = None,
) -> pd.DataFrame:
    """One SIR trajectory via Gillespie's direct method.

    Two reactions: infection ``S + I -> 2I`` at rate ``beta*S*I`` and recovery
    ``I -> R`` at rate ``gamma*I``. One row per event, starting at ``t = 0``.
    If infectives remain when the run stops (the next event would pass
    ``t_max``, or no reaction can fire), a closing row at ``t_max`` repeats
    the last state.
    """

    _validate_sir_inputs(s0, i0, r0, beta, gamma, t_max)
    rng = rng if rng is not None else np.random.default_rng(seed)

    s, i, r = int(s0), int(i0), int(r0)
    t = 0.0
    rows = [(t, s, i, r)]

    while True:
        a_inf = beta * s * i
        a_rec = gamma * i
        a_total = a_inf + a_rec
        if a_total <= 0.0:
            # No reaction can fire; a live epidemic still holds its state until t_max.
            if i > 0:
                rows.append((float(t_max), s, i, r))
            break

        t_next = t + rng.exponential(1.0 / a_total)
        if t_next > t_max:
            rows.append((float(t_max), s, i, r))
            break

        t = t_next
        if rng.random() * a_total < a_inf:
            s -= 1
            i += 1
        else:
            i -= 1
            r += 1
        rows.append((t, s, i, r))

    logger.debug("SIR jump run finished at t=%.3f after %d events (final I=%d)", rows[-1][0], len(rows) - 1, i)
    out = pd.DataFrame(rows, columns=_COLUMNS)
    return out.astype({"S": "int64", "I": "int64", "R": "int64"})


def simulate_sir_ensemble(
    n_runs: int,
    s0: int,
    i0: int,
    r0: int,
    *,
    beta: float,
    gamma: float,
    t_max: float,
    seed: int,
) -> pd.DataFrame:
    if n_runs < 1:
        raise ValueError(f"n_runs must be >= 1; got {n_runs}")
    children = np.random.SeedSequence(seed).spawn(n_runs)
    frames = []
    for run, child in enumerate(children):
        traj = simulate_sir(s0, i0, r0, beta=beta, gamma=gamma, t_max=t_max, rng=np.random.default_rng(child))
        traj.insert(0, "run", run)
        frames.append(traj)
    return pd.concat(frames, ignore_index=True)


def sample_on_grid(traj: pd.DataFrame, grid) -> pd.DataFrame:
    """State of a piecewise-constant trajectory at each grid time (last event at or before ``t``)."""

    grid = np.asarray(grid, dtype=float)
    times = traj["t"].to_numpy(dtype=float)
    idx = np.searchsorted(times, grid, side="right") - 1
    if np.any(idx < 0):
        raise ValueError("Grid contains times before the start of the trajectory")
    out = traj.iloc[idx][["S", "I", "R"]].reset_index(drop=True)
    out.insert(0, "t", grid)
    return out


def ensemble_mean_on_grid(ensemble: pd.DataFrame, grid) -> pd.DataFrame:
    frames = [sample_on_grid(g.drop(columns="run"), grid) for _, g in ensemble.groupby("run", sort=True)]
    stacked = pd.concat(frames, ignore_index=True)
    return stacked.groupby("t", sort=True)[["S", "I", "R"]].mean().reset_index()
