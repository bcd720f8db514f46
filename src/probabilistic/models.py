"""Small probabilistic models written as log-densities on an unconstrained space.

Samplers in :mod:`src.probabilistic.mcmc` only see ``log_density`` and
``grad_log_density`` over a real vector; ``transform`` maps draws back to the
parameters users care about (e.g. ``p`` in ``(0, 1)`` from its logit).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Tuple

import numpy as np
from scipy import stats
from scipy.special import expit, log_expit


def _identity(theta: np.ndarray) -> np.ndarray:
    return theta


@dataclass(frozen=True)
class Model:
    name: str
    param_names: Tuple[str, ...]
    log_density: Callable[[np.ndarray], float]
    grad_log_density: Callable[[np.ndarray], np.ndarray]
    init: np.ndarray
    transform: Callable[[np.ndarray], np.ndarray] = field(default=_identity)

    @property
    def dim(self) -> int:
        return int(np.asarray(self.init).size)


def _as_binary(data) -> np.ndarray:
    y = np.asarray(data)
    if y.ndim != 1 or y.size == 0:
        raise ValueError("Coin-flip data must be a non-empty 1D sequence")
    if not np.isin(y, (0, 1)).all():
        raise ValueError(f"Coin-flip data must be 0/1; observed {sorted(set(np.unique(y).tolist()))}")
    return y.astype(int)


def coin_flip_model(data, prior_a: float = 1.0, prior_b: float = 1.0) -> Model:
    """``p ~ Beta(a, b)``, ``y_i ~ Bernoulli(p)``, sampled as ``theta = logit(p)``.

    The log-Jacobian of ``p = expit(theta)`` is ``log p + log(1 - p)``, which
    folds into the Beta exponents.
    """

    if prior_a <= 0 or prior_b <= 0:
        raise ValueError(f"Beta prior parameters must be positive; got ({prior_a}, {prior_b})")
    y = _as_binary(data)
    heads = float(y.sum())
    tails = float(y.size - heads)
    a_post = prior_a + heads
    b_post = prior_b + tails

    def log_density(theta: np.ndarray) -> float:
        t = float(theta[0])
        return a_post * float(log_expit(t)) + b_post * float(log_expit(-t))

    def grad_log_density(theta: np.ndarray) -> np.ndarray:
        p = float(expit(theta[0]))
        return np.array([a_post * (1.0 - p) - b_post * p])

    def transform(theta: np.ndarray) -> np.ndarray:
        return expit(theta)

    init = np.array([0.0])
    return Model("coin_flip", ("p",), log_density, grad_log_density, init, transform)


def coin_flip_posterior(data, prior_a: float = 1.0, prior_b: float = 1.0):
    """Exact conjugate posterior ``Beta(a + heads, b + tails)``."""

    y = _as_binary(data)
    heads = int(y.sum())
    return stats.beta(prior_a + heads, prior_b + (y.size - heads))


def linear_regression_model(x, y, prior_scale: float = 10.0) -> Model:
    """``alpha, beta ~ N(0, prior_scale)``, ``log_sigma ~ N(0, 1)``, ``y ~ N(alpha + beta*x, sigma)``."""

    x = np.asarray(x, dtype=float).ravel()
    y = np.asarray(y, dtype=float).ravel()
    if x.shape != y.shape:
        raise ValueError(f"x and y must have the same length; got {x.size} and {y.size}")
    if x.size < 2:
        raise ValueError("Need at least two observations")
    if prior_scale <= 0:
        raise ValueError(f"prior_scale must be positive; got {prior_scale}")

    n = x.size
    s2 = prior_scale**2

    def log_density(theta: np.ndarray) -> float:
        alpha, beta, log_sigma = (float(v) for v in theta)
        sigma2 = np.exp(2.0 * log_sigma)
        resid = y - alpha - beta * x
        return float(
            -0.5 * (alpha**2 + beta**2) / s2
            - 0.5 * log_sigma**2
            - n * log_sigma
            - 0.5 * np.sum(resid**2) / sigma2
        )

    def grad_log_density(theta: np.ndarray) -> np.ndarray:
        alpha, beta, log_sigma = (float(v) for v in theta)
        sigma2 = np.exp(2.0 * log_sigma)
        resid = y - alpha - beta * x
        return np.array(
            [
                -alpha / s2 + resid.sum() / sigma2,
                -beta / s2 + np.dot(resid, x) / sigma2,
                -log_sigma - n + np.sum(resid**2) / sigma2,
            ]
        )

    def transform(theta: np.ndarray) -> np.ndarray:
        out = np.array(theta, dtype=float, copy=True)
        out[..., 2] = np.exp(out[..., 2])
        return out

    init = np.array([0.0, 0.0, float(np.log(np.std(y) + 1e-12))])
    return Model("linear_regression", ("alpha", "beta", "sigma"), log_density, grad_log_density, init, transform)
