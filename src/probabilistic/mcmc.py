from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple

import numpy as np
import pandas as pd

from src.probabilistic.models import Model

logger = logging.getLogger(__name__)

SAMPLERS = ("metropolis", "hmc")


@dataclass(frozen=True)
class Chain:
    param_names: Tuple[str, ...]
    samples: np.ndarray  # (n_samples, n_params), constrained scale
    acceptance_rate: float
    sampler: str

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(self.samples, columns=list(self.param_names))


def _check_sampling_args(n_samples: int, step_size: float, n_warmup: int) -> None:
    if n_samples < 1:
        raise ValueError(f"n_samples must be >= 1; got {n_samples}")
    if step_size <= 0:
        raise ValueError(f"step_size must be > 0; got {step_size}")
    if n_warmup < 0:
        raise ValueError(f"n_warmup must be >= 0; got {n_warmup}")


def _finish_chain(model: Model, draws: np.ndarray, n_accepted: int, n_total: int, sampler: str) -> Chain:
    samples = np.asarray(model.transform(draws), dtype=float).reshape(draws.shape)
    rate = n_accepted / n_total
    logger.debug("%s on %s: acceptance rate %.3f", sampler, model.name, rate)
    return Chain(model.param_names, samples, float(rate), sampler)


def metropolis(
    model: Model,
    n_samples: int,
    *,
    step_size: float = 0.5,
    n_warmup: int = 500,
    seed: int = 2026,
) -> Chain:
    """Random-walk Metropolis with an isotropic Gaussian proposal."""

    _check_sampling_args(n_samples, step_size, n_warmup)
    rng = np.random.default_rng(seed)
    theta = np.array(model.init, dtype=float)
    logp = model.log_density(theta)

    total = n_warmup + n_samples
    draws = np.empty((n_samples, model.dim))
    n_accepted = 0
    for it in range(total):
        proposal = theta + step_size * rng.standard_normal(model.dim)
        logp_new = model.log_density(proposal)
        if np.isfinite(logp_new) and np.log(rng.random()) < logp_new - logp:
            theta, logp = proposal, logp_new
            n_accepted += 1
        if it >= n_warmup:
            draws[it - n_warmup] = theta

    return _finish_chain(model, draws, n_accepted, total, "metropolis")


def _leapfrog(model: Model, theta: np.ndarray, momentum: np.ndarray, step_size: float, n_steps: int):
    theta = theta.copy()
    momentum = momentum + 0.5 * step_size * model.grad_log_density(theta)
    for step in range(n_steps):
        theta = theta + step_size * momentum
        if step != n_steps - 1:
            momentum = momentum + step_size * model.grad_log_density(theta)
    momentum = momentum + 0.5 * step_size * model.grad_log_density(theta)
    return theta, -momentum


def hmc(
    model: Model,
    n_samples: int,
    *,
    step_size: float = 0.05,
    n_leapfrog: int = 10,
    n_warmup: int = 500,
    seed: int = 2026,
) -> Chain:
    """Hamiltonian Monte Carlo with unit mass matrix and fixed trajectory length."""

    _check_sampling_args(n_samples, step_size, n_warmup)
    if n_leapfrog < 1:
        raise ValueError(f"n_leapfrog must be >= 1; got {n_leapfrog}")

    rng = np.random.default_rng(seed)
    theta = np.array(model.init, dtype=float)
    logp = model.log_density(theta)

    total = n_warmup + n_samples
    draws = np.empty((n_samples, model.dim))
    n_accepted = 0
    with np.errstate(over="ignore", invalid="ignore"):
        for it in range(total):
            momentum = rng.standard_normal(model.dim)
            current_h = -logp + 0.5 * float(momentum @ momentum)
            proposal, new_momentum = _leapfrog(model, theta, momentum, step_size, n_leapfrog)
            logp_new = model.log_density(proposal)
            proposed_h = -logp_new + 0.5 * float(new_momentum @ new_momentum)
            if np.isfinite(proposed_h) and np.log(rng.random()) < current_h - proposed_h:
                theta, logp = proposal, logp_new
                n_accepted += 1
            if it >= n_warmup:
                draws[it - n_warmup] = theta

    return _finish_chain(model, draws, n_accepted, total, "hmc")


def sample(model: Model, sampler: str = "hmc", *, n_chains: int = 4, seed: int = 2026, **kwargs) -> List[Chain]:
    """Run ``n_chains`` independent chains with seeds spawned from ``seed``."""

    if sampler not in SAMPLERS:
        raise ValueError(f"Unknown sampler {sampler!r}; expected one of {SAMPLERS}")
    if n_chains < 1:
        raise ValueError(f"n_chains must be >= 1; got {n_chains}")
    fn = metropolis if sampler == "metropolis" else hmc
    seeds = np.random.SeedSequence(seed).generate_state(n_chains)
    return [fn(model, seed=int(s), **kwargs) for s in seeds]


def gelman_rubin(chains: Sequence[np.ndarray]) -> float:
    """Potential scale reduction factor for one scalar across chains."""

    x = np.vstack([np.asarray(c, dtype=float) for c in chains])
    m, n = x.shape
    if m < 2 or n < 2:
        return np.nan
    within = float(np.mean(np.var(x, axis=1, ddof=1)))
    between = float(n * np.var(np.mean(x, axis=1), ddof=1))
    if within == 0.0:
        return np.nan
    var_hat = (n - 1) / n * within + between / n
    return float(np.sqrt(var_hat / within))


def _autocorrelation(x: np.ndarray) -> np.ndarray:
    n = x.size
    centered = x - x.mean()
    size = 1 << (2 * n - 1).bit_length()
    f = np.fft.rfft(centered, size)
    acov = np.fft.irfft(f * np.conj(f), size)[:n]
    if acov[0] == 0.0:
        return np.zeros(n)
    return acov / acov[0]


def effective_sample_size(chains: Sequence[np.ndarray]) -> float:
    """Sum of per-chain ESS using Geyer's initial positive sequence."""

    total = 0.0
    for c in chains:
        x = np.asarray(c, dtype=float)
        n = x.size
        if n < 4:
            total += n
            continue
        rho = _autocorrelation(x)
        tau = -1.0
        for k in range(0, n - 1, 2):
            pair = rho[k] + rho[k + 1]
            if pair <= 0.0:
                break
            tau += 2.0 * pair
        tau = max(tau, 1.0 / n)
        total += min(n / tau, float(n))
    return float(total)


def summarize_chains(chains: Iterable[Chain], alpha: float = 0.05) -> pd.DataFrame:
    chains = list(chains)
    if not chains:
        raise ValueError("No chains to summarize")
    names = chains[0].param_names
    lo = float(100.0 * (alpha / 2.0))
    hi = float(100.0 * (1.0 - alpha / 2.0))

    rows = []
    for j, name in enumerate(names):
        per_chain = [c.samples[:, j] for c in chains]
        vals = np.concatenate(per_chain)
        rows.append(
            {
                "param": name,
                "mean": float(np.mean(vals)),
                "std": float(np.std(vals, ddof=1)) if vals.size > 1 else np.nan,
                "ci_low": float(np.percentile(vals, lo)),
                "ci_high": float(np.percentile(vals, hi)),
                "rhat": gelman_rubin(per_chain),
                "ess": effective_sample_size(per_chain),
            }
        )
    return pd.DataFrame(rows)
