"""Lecture 2: calling other languages, R-style modelling, gradient descent and neural networks."""

from __future__ import annotations

import argparse
import logging
import math
import sys
from pathlib import Path

import numpy as np
import pandas as pd


PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from src.basics.plotting import plot_lines, plt, save_figure  # noqa: E402
from src.config import (  # noqa: E402
    CONV_POOL_SIZE,
    DIGITS_TEST_SIZE,
    GD_LEARNING_RATE,
    GD_N_ITER,
    GD_TOL,
    MLP_HIDDEN_LAYER_SIZES,
    MLP_MAX_ITER,
    RANDOM_SEED,
    REGRESSION_INTERCEPT,
    REGRESSION_N,
    REGRESSION_NOISE,
    REGRESSION_SLOPE,
)
from src.interop.native import c_array_sum, c_qsort, libm_cos, libm_pow  # noqa: E402
from src.interop.rstyle import coefficient_table, fit_formula, make_regression_frame  # noqa: E402
from src.ml.gradient_descent import fit_linear_gd, fit_linear_reference, mse  # noqa: E402
from src.ml.networks import (  # noqa: E402
    EDGE_KERNELS,
    build_conv_classifier,
    build_mlp,
    conv2d,
    load_digits_split,
    train_and_evaluate,
)
from src.utils.logging import run_metadata, setup_logging, write_json  # noqa: E402

logger = logging.getLogger("src.scripts.lecture2")


def _interop_checks(seed: int) -> dict:
    values = np.random.default_rng(seed).normal(size=16)
    sorted_native = c_qsort(values, out=np.empty_like(values))
    return {
        "cos_pi_3": {"c": libm_cos(math.pi / 3), "python": math.cos(math.pi / 3)},
        "pow_2_10": {"c": libm_pow(2.0, 10.0), "python": 2.0**10},
        "array_sum": {"c": c_array_sum(values), "numpy": float(np.sum(values))},
        "qsort_matches_numpy": bool(np.array_equal(sorted_native, np.sort(values))),
    }


def _plot_feature_maps(image: np.ndarray, path: Path) -> None:
    fig, axes = plt.subplots(1, len(EDGE_KERNELS) + 1, figsize=(3 * (len(EDGE_KERNELS) + 1), 3))
    axes[0].imshow(image, cmap="gray_r")
    axes[0].set_title("input")
    for ax, (name, kernel) in zip(axes[1:], EDGE_KERNELS.items()):
        ax.imshow(conv2d(image, kernel), cmap="coolwarm")
        ax.set_title(name)
    for ax in axes:
        ax.set_xticks([])
        ax.set_yticks([])
    fig.tight_layout()
    save_figure(fig, path)
    plt.close(fig)


def main() -> None:
    parser = argparse.ArgumentParser(description="Lecture 2 demos: interop, R-style formulas, gradient descent, networks.")
    parser.add_argument("--outdir", type=Path, default=Path("outputs"), help="Output directory (default: outputs/).")
    parser.add_argument("--seed", type=int, default=RANDOM_SEED, help="Random seed for data and models.")
    parser.add_argument("--quick", action="store_true", help="Smaller workloads (smoke runs).")
    parser.add_argument("--verbose", action="store_true", help="Debug logging.")
    args = parser.parse_args()

    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    outdir = args.outdir
    tables_dir = outdir / "tables"
    figures_dir = outdir / "figures"
    logs_dir = outdir / "logs"
    tables_dir.mkdir(parents=True, exist_ok=True)
    figures_dir.mkdir(parents=True, exist_ok=True)

    # Native interop
    checks = _interop_checks(args.seed)
    write_json(tables_dir / "interop_checks.json", checks)
    logger.info("C cos(pi/3) = %.6f; qsort matches numpy: %s", checks["cos_pi_3"]["c"], checks["qsort_matches_numpy"])

    # R-style formulas
    df = make_regression_frame(
        REGRESSION_N,
        args.seed,
        intercept=REGRESSION_INTERCEPT,
        slope=REGRESSION_SLOPE,
        noise=REGRESSION_NOISE,
    )
    ols = fit_formula(df, "y ~ x + C(group)")
    coefficient_table(ols).to_csv(tables_dir / "ols_coefficients.csv", index=False)
    logit = fit_formula(df, "hit ~ x", family="binomial")
    coefficient_table(logit).to_csv(tables_dir / "logit_coefficients.csv", index=False)

    # Gradient descent vs closed-form reference
    n_iter = 300 if args.quick else GD_N_ITER
    gd = fit_linear_gd(df[["x"]], df["y"], learning_rate=GD_LEARNING_RATE, n_iter=n_iter, tol=GD_TOL)
    ref = fit_linear_reference(df[["x"]], df["y"])
    pd.DataFrame(
        [
            {"method": "gradient_descent", "intercept": gd.bias, "slope": float(gd.weights[0]), "mse": mse(df["y"], gd.predict(df[["x"]])), "n_iter": gd.n_iter},
            {"method": "least_squares", "intercept": ref["bias"], "slope": float(ref["weights"][0]), "mse": mse(df["y"], ref["bias"] + ref["weights"][0] * df["x"]), "n_iter": np.nan},
        ]
    ).to_csv(tables_dir / "gd_vs_reference.csv", index=False)
    plot_lines(
        np.arange(1, gd.n_iter + 1),
        {"MSE": gd.loss_history},
        figures_dir / "gd_loss.png",
        title="Gradient descent loss",
        xlabel="iteration",
        ylabel="mean squared error",
    )

    # Networks on 8x8 digits
    split = load_digits_split(DIGITS_TEST_SIZE, args.seed, n_samples=600 if args.quick else None)
    mlp = build_mlp(MLP_HIDDEN_LAYER_SIZES, seed=args.seed, max_iter=100 if args.quick else MLP_MAX_ITER)
    conv = build_conv_classifier(pool=CONV_POOL_SIZE, seed=args.seed)
    rows = []
    for name, model in [("mlp", mlp), ("conv_logreg", conv)]:
        metrics = train_and_evaluate(model, split)
        logger.info("%s: accuracy %.3f, log loss %.3f", name, metrics["accuracy"], metrics["log_loss"])
        rows.append({"model": name, **metrics})
    pd.DataFrame(rows).to_csv(tables_dir / "network_metrics.csv", index=False)
    _plot_feature_maps(split.X_test[0].reshape(8, 8), figures_dir / "conv_feature_maps.png")

    write_json(
        logs_dir / "lecture2_run_metadata.json",
        run_metadata(
            sys.argv,
            seed=args.seed,
            quick=args.quick,
            outdir=str(outdir),
            gd={"learning_rate": GD_LEARNING_RATE, "n_iter": gd.n_iter, "converged": gd.converged},
            digits={"n_train": int(split.X_train.shape[0]), "n_test": int(split.X_test.shape[0])},
        ),
    )

    print(f"Wrote lecture 2 artifacts to {outdir}/")


if __name__ == "__main__":
    main()
