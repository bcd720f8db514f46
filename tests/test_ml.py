import numpy as np
import pytest

from src.ml.gradient_descent import fit_linear_gd, fit_linear_reference, mse
from src.ml.networks import (
    EDGE_KERNELS,
    build_conv_classifier,
    build_mlp,
    conv2d,
    conv_features,
    load_digits_split,
    max_pool2d,
    train_and_evaluate,
)


def test_gradient_descent_matches_least_squares():
    rng = np.random.default_rng(0)
    X = rng.uniform(-1, 1, size=(200, 2))
    y = 0.5 + X @ np.array([2.0, -3.0]) + rng.normal(0, 0.01, size=200)

    gd = fit_linear_gd(X, y, learning_rate=0.1, n_iter=5000, tol=1e-14)
    ref = fit_linear_reference(X, y)
    np.testing.assert_allclose(gd.weights, ref["weights"], atol=1e-3)
    assert gd.bias == pytest.approx(ref["bias"], abs=1e-3)
    assert gd.loss_history[-1] <= gd.loss_history[0]
    assert mse(y, gd.predict(X)) < 1e-3


def test_gradient_descent_validation_and_divergence():
    X = np.arange(10.0)
    y = 3 * X
    with pytest.raises(ValueError):
        fit_linear_gd(X, y, learning_rate=0.0)
    with pytest.raises(ValueError):
        fit_linear_gd(X, y[:5])
    with pytest.raises(FloatingPointError):
        fit_linear_gd(X * 1e3, y, learning_rate=10.0, n_iter=500)


def test_conv2d_and_pooling():
    image = np.arange(16, dtype=float).reshape(4, 4)
    kernel = np.array([[0.0, 0.0], [0.0, 1.0]])
    np.testing.assert_array_equal(conv2d(image, kernel), image[1:, 1:])

    pooled = max_pool2d(image, 2)
    np.testing.assert_array_equal(pooled, [[5.0, 7.0], [13.0, 15.0]])
    assert max_pool2d(np.ones((5, 5)), 2).shape == (2, 2)

    with pytest.raises(ValueError):
        conv2d(np.ones((2, 2)), np.ones((3, 3)))
    with pytest.raises(ValueError):
        conv2d(np.ones(4), np.ones((1, 1)))


def test_conv_features_shape():
    X = np.random.default_rng(1).random((5, 64))
    feats = conv_features(X, EDGE_KERNELS, pool=2)
    # 8x8 -> 6x6 valid conv -> 3x3 pooled, per kernel
    assert feats.shape == (5, len(EDGE_KERNELS) * 9)
    assert (feats >= 0).all()


def test_digits_models_learn():
    split = load_digits_split(test_size=0.25, seed=0, n_samples=600)
    assert split.X_train.shape[1] == 64
    assert split.X_train.shape[0] + split.X_test.shape[0] == 600
    assert set(np.unique(split.y_test)) == set(range(10))

    mlp_metrics = train_and_evaluate(build_mlp((32,), seed=0, max_iter=200), split)
    conv_metrics = train_and_evaluate(build_conv_classifier(seed=0), split)
    assert mlp_metrics["accuracy"] > 0.8
    assert conv_metrics["accuracy"] > 0.7
    assert mlp_metrics["n_test"] == split.X_test.shape[0]
