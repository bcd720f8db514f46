from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List

import numpy as np
from sklearn.linear_model import LinearRegression

logger = logging.getLogger(__name__)


@dataclass
class GDResult:
    weights: np.ndarray
    bias: float
    loss_history: List[float] = field(default_factory=list)
    n_iter: int = 0
    converged: bool = False

    def predict(self, X) -> np.ndarray:
        return _as_2d(X) @ self.weights + self.bias


def _as_2d(X) -> np.ndarray:
    X = np.asarray(X, dtype=float)
    if X.ndim == 1:
        X = X.reshape(-1, 1)
    return X


def mse(y_true, y_pred) -> float:
    y_true = np.asarray(y_true, dtype=float)
    y_pred = np.asarray(y_pred, dtype=float)
    if y_true.shape != y_pred.shape:
        raise ValueError(f"Shape mismatch: {y_true.shape} vs {y_pred.shape}")
    return float(np.mean((y_true - y_pred) ** 2))


def fit_linear_gd(
    X,
    y,
    *,
    learning_rate: float = 0.05,
    n_iter: int = 1000,
    tol: float = 1e-10,
) -> GDResult:
    """Batch gradient descent on mean squared error.

    Stops early once the loss improves by less than ``tol`` between steps.
    """

    if learning_rate <= 0:
        raise ValueError(f"learning_rate must be > 0; got {learning_rate}")
    if n_iter < 1:
        raise ValueError(f"n_iter must be >= 1; got {n_iter}")

    X = _as_2d(X)
    y = np.asarray(y, dtype=float).ravel()
    if X.shape[0] != y.shape[0]:
        raise ValueError(f"X has {X.shape[0]} rows but y has {y.shape[0]}")

    n, d = X.shape
    w = np.zeros(d)
    b = 0.0
    history: List[float] = []
    converged = False

    for it in range(n_iter):
        resid = X @ w + b - y
        loss = float(np.mean(resid**2))
        if not np.isfinite(loss):
            raise FloatingPointError(
                f"Gradient descent diverged at iteration {it}; try a smaller learning_rate (got {learning_rate})."
            )
        history.append(loss)
        if len(history) > 1 and abs(history[-2] - loss) < tol:
            converged = True
            break

        grad_w = (2.0 / n) * (X.T @ resid)
        grad_b = (2.0 / n) * float(resid.sum())
        w -= learning_rate * grad_w
        b -= learning_rate * grad_b

    logger.debug("GD finished after %d iterations (converged=%s, loss=%.6g)", len(history), converged, history[-1])
    return GDResult(weights=w, bias=b, loss_history=history, n_iter=len(history), converged=converged)


def fit_linear_reference(X, y) -> Dict[str, object]:
    model = LinearRegression()
    model.fit(_as_2d(X), np.asarray(y, dtype=float).ravel())
    return {"weights": model.coef_.copy(), "bias": float(model.intercept_)}
