from typing import Dict

import numpy as np


def make_vector(n: int) -> np.ndarray:
    if n < 0:
        raise ValueError(f"Vector length must be non-negative; got {n}")
    return np.arange(1, n + 1, dtype=float)


def broadcast_table(x, y, op: str = "add") -> np.ndarray:
    """Outer table of ``x`` against ``y`` via broadcasting (``x[:, None] op y``)."""

    xa = np.asarray(x, dtype=float).reshape(-1, 1)
    ya = np.asarray(y, dtype=float).reshape(1, -1)
    if op == "add":
        return xa + ya
    if op == "mul":
        return xa * ya
    raise ValueError(f"Unsupported op: {op!r}; expected 'add' or 'mul'.")


def solve_linear_system(A, b) -> np.ndarray:
    A = np.asarray(A, dtype=float)
    b = np.asarray(b, dtype=float)
    if A.ndim != 2 or A.shape[0] != A.shape[1]:
        raise ValueError(f"A must be a square matrix; got shape {A.shape}")
    if b.shape[0] != A.shape[0]:
        raise ValueError(f"b has {b.shape[0]} rows but A has {A.shape[0]}")
    # Singular systems raise numpy.linalg.LinAlgError.
    return np.linalg.solve(A, b)


def matrix_summary(A) -> Dict[str, object]:
    A = np.asarray(A, dtype=float)
    if A.ndim != 2:
        raise ValueError(f"Expected a 2D matrix; got {A.ndim} dimensions")
    out: Dict[str, object] = {
        "shape": list(A.shape),
        "rank": int(np.linalg.matrix_rank(A)),
        "frobenius_norm": float(np.linalg.norm(A)),
        "trace": None,
        "determinant": None,
    }
    if A.shape[0] == A.shape[1]:
        out["trace"] = float(np.trace(A))
        out["determinant"] = float(np.linalg.det(A))
    return out
