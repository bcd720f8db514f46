"""ODE problems solved with ``scipy.integrate.solve_ivp``.

An :class:`ODEProblem` bundles the right-hand side ``rhs(t, u, params)``, the
initial state, the time span and parameter dict; :func:`solve` hands it to
SciPy and wraps the result. Integration itself is entirely SciPy's.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from scipy.integrate import solve_ivp

logger = logging.getLogger(__name__)


class ODESolveError(RuntimeError):
    """The integrator reported failure."""


@dataclass(frozen=True)
class ODEProblem:
    rhs: Callable[[float, np.ndarray, Dict[str, float]], np.ndarray]
    u0: Tuple[float, ...]
    tspan: Tuple[float, float]
    params: Dict[str, float] = field(default_factory=dict)
    names: Tuple[str, ...] = ()

    def state_names(self) -> Tuple[str, ...]:
        if self.names:
            return tuple(self.names)
        return tuple(f"u{i}" for i in range(len(self.u0)))


@dataclass(frozen=True)
class ODESolution:
    t: np.ndarray
    u: np.ndarray  # (n_times, n_states)
    names: Tuple[str, ...]
    method: str
    nfev: int

    def to_frame(self) -> pd.DataFrame:
        df = pd.DataFrame(self.u, columns=list(self.names))
        df.insert(0, "t", self.t)
        return df

    def final_state(self) -> np.ndarray:
        return self.u[-1].copy()


def solve(
    problem: ODEProblem,
    *,
    method: str = "RK45",
    n_points: Optional[int] = None,
    rtol: float = 1e-6,
    atol: float = 1e-9,
) -> ODESolution:
    t0, t1 = float(problem.tspan[0]), float(problem.tspan[1])
    if t1 <= t0:
        raise ValueError(f"tspan must be increasing; got {problem.tspan}")
    names = problem.state_names()
    if len(names) != len(problem.u0):
        raise ValueError(f"{len(names)} state names given for {len(problem.u0)} states")

    t_eval = None
    if n_points is not None:
        if n_points < 2:
            raise ValueError(f"n_points must be >= 2; got {n_points}")
        t_eval = np.linspace(t0, t1, n_points)

    params = dict(problem.params)
    result = solve_ivp(
        lambda t, u: problem.rhs(t, u, params),
        (t0, t1),
        np.asarray(problem.u0, dtype=float),
        method=method,
        t_eval=t_eval,
        rtol=rtol,
        atol=atol,
    )
    if not result.success:
        raise ODESolveError(f"solve_ivp ({method}) failed: {result.message}")

    logger.debug("Solved %s with %s: %d points, nfev=%d", names, method, result.t.size, result.nfev)
    return ODESolution(t=result.t, u=result.y.T, names=names, method=method, nfev=int(result.nfev))


def _exponential_rhs(t, u, p):
    return p["r"] * u


def exponential_growth(r: float, u0: float, tspan: Sequence[float]) -> ODEProblem:
    return ODEProblem(_exponential_rhs, (float(u0),), tuple(tspan), {"r": float(r)}, ("u",))


def exponential_exact(r: float, u0: float, t) -> np.ndarray:
    return float(u0) * np.exp(float(r) * np.asarray(t, dtype=float))


def _lotka_volterra_rhs(t, u, p):
    prey, predator = u
    return [
        p["alpha"] * prey - p["beta"] * prey * predator,
        -p["gamma"] * predator + p["delta"] * prey * predator,
    ]


def lotka_volterra(
    alpha: float,
    beta: float,
    gamma: float,
    delta: float,
    u0: Sequence[float],
    tspan: Sequence[float],
) -> ODEProblem:
    params = {"alpha": alpha, "beta": beta, "gamma": gamma, "delta": delta}
    return ODEProblem(_lotka_volterra_rhs, tuple(map(float, u0)), tuple(tspan), params, ("prey", "predator"))


def lotka_volterra_invariant(u: np.ndarray, alpha: float, beta: float, gamma: float, delta: float) -> np.ndarray:
    """Conserved quantity ``delta*x - gamma*ln x + beta*y - alpha*ln y`` along exact trajectories."""

    u = np.atleast_2d(u)
    x, y = u[:, 0], u[:, 1]
    return delta * x - gamma * np.log(x) + beta * y - alpha * np.log(y)


def _lorenz_rhs(t, u, p):
    x, y, z = u
    return [
        p["sigma"] * (y - x),
        x * (p["rho"] - z) - y,
        x * y - p["beta"] * z,
    ]


def lorenz(sigma: float, rho: float, beta: float, u0: Sequence[float], tspan: Sequence[float]) -> ODEProblem:
    params = {"sigma": sigma, "rho": rho, "beta": beta}
    return ODEProblem(_lorenz_rhs, tuple(map(float, u0)), tuple(tspan), params, ("x", "y", "z"))


def _sir_rhs(t, u, p):
    s, i, r = u
    infection = p["beta"] * s * i
    recovery = p["gamma"] * i
    return [-infection, infection - recovery, recovery]


def sir_ode(beta: float, gamma: float, u0: Sequence[float], tspan: Sequence[float]) -> ODEProblem:
    """Mean-field SIR with mass-action infection ``beta*S*I`` (same rates as the jump model)."""

    return ODEProblem(_sir_rhs, tuple(map(float, u0)), tuple(tspan), {"beta": beta, "gamma": gamma}, ("S", "I", "R"))
