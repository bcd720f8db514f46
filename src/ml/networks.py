from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Sequence, Tuple

import numpy as np
from scipy import signal
from sklearn.datasets import load_digits
from sklearn.linear_model import LogisticRegression
from sklearn.metrics import accuracy_score, log_loss
from sklearn.model_selection import StratifiedShuffleSplit
from sklearn.neural_network import MLPClassifier
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import FunctionTransformer, StandardScaler


EDGE_KERNELS: Dict[str, np.ndarray] = {
    "vertical": np.array([[1.0, 0.0, -1.0], [2.0, 0.0, -2.0], [1.0, 0.0, -1.0]]),
    "horizontal": np.array([[1.0, 2.0, 1.0], [0.0, 0.0, 0.0], [-1.0, -2.0, -1.0]]),
    "diagonal": np.array([[0.0, 1.0, 2.0], [-1.0, 0.0, 1.0], [-2.0, -1.0, 0.0]]),
    "laplacian": np.array([[0.0, 1.0, 0.0], [1.0, -4.0, 1.0], [0.0, 1.0, 0.0]]),
}


@dataclass(frozen=True)
class DataSplit:
    X_train: np.ndarray
    X_test: np.ndarray
    y_train: np.ndarray
    y_test: np.ndarray


def make_holdout_split(X, y, test_size: float, seed: int) -> Tuple[np.ndarray, np.ndarray]:
    splitter = StratifiedShuffleSplit(n_splits=1, test_size=test_size, random_state=seed)
    train_idx, test_idx = next(splitter.split(X, y))
    return train_idx, test_idx


def load_digits_split(test_size: float = 0.25, seed: int = 2026, n_samples: Optional[int] = None) -> DataSplit:
    """8x8 handwritten digits, flattened to 64 features, with a stratified holdout."""

    digits = load_digits()
    X = digits.data.astype(float)
    y = digits.target.astype(int)
    if n_samples is not None:
        if n_samples <= 0:
            raise ValueError(f"n_samples must be positive; got {n_samples}")
        X, y = X[:n_samples], y[:n_samples]
    train_idx, test_idx = make_holdout_split(X, y, test_size=test_size, seed=seed)
    return DataSplit(X[train_idx], X[test_idx], y[train_idx], y[test_idx])


def build_mlp(hidden_layer_sizes: Sequence[int] = (64, 32), seed: int = 2026, max_iter: int = 300) -> Pipeline:
    return Pipeline(
        steps=[
            ("scaler", StandardScaler(with_mean=True, with_std=True)),
            (
                "model",
                MLPClassifier(
                    hidden_layer_sizes=tuple(hidden_layer_sizes),
                    activation="relu",
                    solver="adam",
                    max_iter=max_iter,
                    random_state=seed,
                ),
            ),
        ]
    )


def train_and_evaluate(model, split: DataSplit) -> Dict[str, float]:
    model.fit(split.X_train, split.y_train)
    proba = model.predict_proba(split.X_test)
    pred = model.classes_[np.argmax(proba, axis=1)]
    return {
        "accuracy": float(accuracy_score(split.y_test, pred)),
        "log_loss": float(log_loss(split.y_test, proba, labels=model.classes_)),
        "n_train": int(split.X_train.shape[0]),
        "n_test": int(split.X_test.shape[0]),
    }


def conv2d(image, kernel) -> np.ndarray:
    """Valid-mode 2D cross-correlation (the "convolution" of CNN layers)."""

    image = np.asarray(image, dtype=float)
    kernel = np.asarray(kernel, dtype=float)
    if image.ndim != 2 or kernel.ndim != 2:
        raise ValueError(f"conv2d expects 2D inputs; got image {image.shape}, kernel {kernel.shape}")
    if kernel.shape[0] > image.shape[0] or kernel.shape[1] > image.shape[1]:
        raise ValueError(f"Kernel {kernel.shape} is larger than image {image.shape}")
    return signal.correlate2d(image, kernel, mode="valid")


def max_pool2d(x, size: int = 2) -> np.ndarray:
    x = np.asarray(x, dtype=float)
    if size < 1:
        raise ValueError(f"Pool size must be >= 1; got {size}")
    h, w = (x.shape[0] // size) * size, (x.shape[1] // size) * size
    if h == 0 or w == 0:
        raise ValueError(f"Input {x.shape} is smaller than pool size {size}")
    x = x[:h, :w]
    return x.reshape(h // size, size, w // size, size).max(axis=(1, 3))


def _as_images(X) -> np.ndarray:
    X = np.asarray(X, dtype=float)
    if X.ndim == 3:
        return X
    if X.ndim == 2:
        side = int(round(np.sqrt(X.shape[1])))
        if side * side != X.shape[1]:
            raise ValueError(f"Cannot reshape {X.shape[1]} features into a square image")
        return X.reshape(X.shape[0], side, side)
    raise ValueError(f"Expected (n, h, w) images or (n, h*w) rows; got shape {X.shape}")


def conv_features(X, kernels: Optional[Mapping[str, np.ndarray]] = None, pool: int = 2) -> np.ndarray:
    """ReLU(conv) followed by max-pooling, flattened per image."""

    images = _as_images(X)
    kernels = kernels or EDGE_KERNELS
    rows = []
    for img in images:
        maps = [max_pool2d(np.maximum(conv2d(img, k), 0.0), pool).ravel() for k in kernels.values()]
        rows.append(np.concatenate(maps))
    return np.vstack(rows) if rows else np.empty((0, 0))


def build_conv_classifier(
    kernels: Optional[Mapping[str, np.ndarray]] = None,
    pool: int = 2,
    seed: int = 2026,
) -> Pipeline:
    return Pipeline(
        steps=[
            ("conv", FunctionTransformer(conv_features, kw_args={"kernels": kernels, "pool": pool})),
            ("scaler", StandardScaler()),
            ("model", LogisticRegression(max_iter=2000, random_state=seed)),
        ]
    )
