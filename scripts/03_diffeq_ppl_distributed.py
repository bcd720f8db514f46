"""Lecture 3: differential equations, jump processes, MCMC and a distributed pi estimate."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import numpy as np
import pandas as pd


PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from src.basics.plotting import plot_histogram, plot_lines, plt, save_figure  # noqa: E402
from src.config import (  # noqa: E402
    COIN_FLIP_N,
    COIN_FLIP_TRUE_P,
    COIN_HMC_N_LEAPFROG,
    COIN_PRIOR,
    CREDIBLE_ALPHA,
    HMC_N_LEAPFROG,
    HMC_STEP_SIZE,
    LORENZ_PARAMS,
    LORENZ_TSPAN,
    LORENZ_U0,
    LOTKA_VOLTERRA_PARAMS,
    LOTKA_VOLTERRA_TSPAN,
    LOTKA_VOLTERRA_U0,
    MCMC_N_CHAINS,
    MCMC_N_SAMPLES,
    MCMC_N_WARMUP,
    MH_STEP_SIZE,
    ODE_N_POINTS,
    PI_N,
    PI_N_WORKERS,
    RANDOM_SEED,
    REGRESSION_INTERCEPT,
    REGRESSION_NOISE,
    REGRESSION_SLOPE,
    SIR_BETA,
    SIR_ENSEMBLE_RUNS,
    SIR_GAMMA,
    SIR_T_MAX,
    SIR_U0,
)
from src.diffeq.jump import ensemble_mean_on_grid, simulate_sir_ensemble  # noqa: E402
from src.diffeq.ode import lorenz, lotka_volterra, sir_ode, solve  # noqa: E402
from src.distributed.montecarlo import estimate_pi  # noqa: E402
from src.probabilistic.mcmc import sample, summarize_chains  # noqa: E402
from src.probabilistic.models import coin_flip_model, coin_flip_posterior, linear_regression_model  # noqa: E402
from src.utils.logging import run_metadata, setup_logging, write_json  # noqa: E402

logger = logging.getLogger("src.scripts.lecture3")


def _plot_lorenz(df: pd.DataFrame, path: Path) -> None:
    fig = plt.figure(figsize=(7, 6))
    ax = fig.add_subplot(projection="3d")
    ax.plot(df["x"], df["y"], df["z"], linewidth=0.5)
    ax.set_title("Lorenz attractor")
    save_figure(fig, path)
    plt.close(fig)


def _plot_regression_posterior(chains, path: Path) -> None:
    names = chains[0].param_names
    fig, axes = plt.subplots(1, len(names), figsize=(4 * len(names), 4))
    for j, (ax, name) in enumerate(zip(np.atleast_1d(axes), names)):
        ax.hist(np.concatenate([c.samples[:, j] for c in chains]), bins=40)
        ax.set_title(name)
    fig.suptitle("Regression posterior (HMC)")
    fig.tight_layout()
    save_figure(fig, path)
    plt.close(fig)


def _plot_pi_estimates(df: pd.DataFrame, path: Path) -> None:
    fig, ax = plt.subplots(figsize=(6, 4))
    ax.bar(df["n_workers"].astype(str), df["estimate"])
    ax.axhline(np.pi, color="black", linestyle="--", label="pi")
    margin = max(float(df["abs_error"].max()) * 2.0, 1e-3)
    ax.set_ylim(np.pi - margin, np.pi + margin)
    ax.set_xlabel("workers")
    ax.set_ylabel("estimate")
    ax.set_title(f"Monte-Carlo pi, n = {int(df['n'].iloc[0]):,}")
    ax.legend()
    save_figure(fig, path)
    plt.close(fig)


def main() -> None:
    parser = argparse.ArgumentParser(description="Lecture 3 demos: ODEs, SIR jump process, MCMC, distributed pi.")
    parser.add_argument("--outdir", type=Path, default=Path("outputs"), help="Output directory (default: outputs/).")
    parser.add_argument("--seed", type=int, default=RANDOM_SEED, help="Random seed.")
    parser.add_argument("--quick", action="store_true", help="Smaller workloads (smoke runs).")
    parser.add_argument("--workers", type=int, default=PI_N_WORKERS, help="Worker processes for the pi estimate.")
    parser.add_argument("--verbose", action="store_true", help="Debug logging.")
    args = parser.parse_args()

    if args.workers < 1:
        raise SystemExit("--workers must be a positive integer.")

    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    outdir = args.outdir
    tables_dir = outdir / "tables"
    figures_dir = outdir / "figures"
    logs_dir = outdir / "logs"
    tables_dir.mkdir(parents=True, exist_ok=True)
    figures_dir.mkdir(parents=True, exist_ok=True)

    # ODEs
    n_points = 200 if args.quick else ODE_N_POINTS
    lv = solve(lotka_volterra(u0=LOTKA_VOLTERRA_U0, tspan=LOTKA_VOLTERRA_TSPAN, **LOTKA_VOLTERRA_PARAMS), n_points=n_points)
    lv_df = lv.to_frame()
    lv_df.to_csv(tables_dir / "lotka_volterra.csv", index=False)
    plot_lines(lv_df["t"], {"prey": lv_df["prey"], "predator": lv_df["predator"]}, figures_dir / "lotka_volterra.png", title="Lotka-Volterra", xlabel="t", ylabel="population")

    lorenz_tspan = (LORENZ_TSPAN[0], 20.0) if args.quick else LORENZ_TSPAN
    lz_df = solve(lorenz(u0=LORENZ_U0, tspan=lorenz_tspan, **LORENZ_PARAMS), n_points=n_points * 5).to_frame()
    lz_df.to_csv(tables_dir / "lorenz.csv", index=False)
    _plot_lorenz(lz_df, figures_dir / "lorenz.png")

    sir_df = solve(sir_ode(SIR_BETA, SIR_GAMMA, SIR_U0, (0.0, SIR_T_MAX)), n_points=n_points).to_frame()
    sir_df.to_csv(tables_dir / "sir_ode.csv", index=False)

    # SIR jump process vs mean-field ODE
    n_runs = 5 if args.quick else SIR_ENSEMBLE_RUNS
    ensemble = simulate_sir_ensemble(n_runs, *SIR_U0, beta=SIR_BETA, gamma=SIR_GAMMA, t_max=SIR_T_MAX, seed=args.seed)
    ensemble.to_csv(tables_dir / "sir_jump_ensemble.csv", index=False)
    grid = sir_df["t"].to_numpy()
    mean_jump = ensemble_mean_on_grid(ensemble, grid)
    plot_lines(
        grid,
        {
            "I (ODE)": sir_df["I"],
            "I (jump mean)": mean_jump["I"],
            "R (ODE)": sir_df["R"],
            "R (jump mean)": mean_jump["R"],
        },
        figures_dir / "sir_ode_vs_jump.png",
        title=f"SIR: ODE vs mean of {n_runs} jump runs",
        xlabel="t",
        ylabel="count",
    )

    # Probabilistic programming
    n_samples = 300 if args.quick else MCMC_N_SAMPLES
    n_warmup = 100 if args.quick else MCMC_N_WARMUP
    n_chains = 2 if args.quick else MCMC_N_CHAINS
    rng = np.random.default_rng(args.seed)

    flips = rng.binomial(1, COIN_FLIP_TRUE_P, size=COIN_FLIP_N)
    coin = coin_flip_model(flips, *COIN_PRIOR)
    coin_rows = []
    for sampler, kwargs in [("metropolis", {"step_size": MH_STEP_SIZE}), ("hmc", {"step_size": HMC_STEP_SIZE, "n_leapfrog": COIN_HMC_N_LEAPFROG})]:
        chains = sample(coin, sampler, n_chains=n_chains, seed=args.seed, n_samples=n_samples, n_warmup=n_warmup, **kwargs)
        summary = summarize_chains(chains, alpha=CREDIBLE_ALPHA)
        summary.insert(0, "sampler", sampler)
        summary["acceptance_rate"] = float(np.mean([c.acceptance_rate for c in chains]))
        coin_rows.append(summary)
        if sampler == "hmc":
            plot_histogram(np.concatenate([c.samples[:, 0] for c in chains]), figures_dir / "coin_flip_posterior.png", title="Posterior of p (HMC)", bins=40, xlabel="p")
    exact = coin_flip_posterior(flips, *COIN_PRIOR)
    lo, hi = exact.interval(1.0 - CREDIBLE_ALPHA)
    coin_rows.append(pd.DataFrame([{"sampler": "exact", "param": "p", "mean": exact.mean(), "std": exact.std(), "ci_low": lo, "ci_high": hi}]))
    pd.concat(coin_rows, ignore_index=True).to_csv(tables_dir / "coin_flip_posterior.csv", index=False)

    x = rng.uniform(-2.0, 2.0, size=100)
    y = REGRESSION_INTERCEPT + REGRESSION_SLOPE * x + rng.normal(0.0, REGRESSION_NOISE, size=x.size)
    reg_chains = sample(
        linear_regression_model(x, y),
        "hmc",
        n_chains=n_chains,
        seed=args.seed,
        n_samples=n_samples,
        n_warmup=n_warmup,
        step_size=HMC_STEP_SIZE,
        n_leapfrog=HMC_N_LEAPFROG,
    )
    reg_summary = summarize_chains(reg_chains, alpha=CREDIBLE_ALPHA)
    reg_summary.to_csv(tables_dir / "regression_posterior.csv", index=False)
    _plot_regression_posterior(reg_chains, figures_dir / "regression_posterior.png")
    for row in reg_summary.itertuples(index=False):
        logger.info("%s: mean %.3f [%.3f, %.3f] rhat %.3f", row.param, row.mean, row.ci_low, row.ci_high, row.rhat)

    # Distributed Monte-Carlo pi
    pi_n = 200_000 if args.quick else PI_N
    pi_rows = []
    for workers in sorted({1, args.workers}):
        est = estimate_pi(pi_n, workers, seed=args.seed)
        pi_rows.append(
            {
                "n": est.n,
                "n_workers": est.n_workers,
                "estimate": est.estimate,
                "abs_error": est.abs_error,
                "hits": est.hits,
                "local_count": est.local_count,
            }
        )
    pi_df = pd.DataFrame(pi_rows)
    pi_df.to_csv(tables_dir / "pi_estimates.csv", index=False)
    _plot_pi_estimates(pi_df, figures_dir / "pi_estimates.png")

    write_json(
        logs_dir / "lecture3_run_metadata.json",
        run_metadata(
            sys.argv,
            seed=args.seed,
            quick=args.quick,
            outdir=str(outdir),
            ode={"n_points": n_points, "lotka_volterra_nfev": lv.nfev},
            sir_jump={"n_runs": n_runs, "beta": SIR_BETA, "gamma": SIR_GAMMA, "u0": list(SIR_U0), "t_max": SIR_T_MAX},
            mcmc={"n_samples": n_samples, "n_warmup": n_warmup, "n_chains": n_chains},
            pi={"n": pi_n, "workers": args.workers},
        ),
    )

    print(f"Wrote lecture 3 artifacts to {outdir}/")


if __name__ == "__main__":
    main()
