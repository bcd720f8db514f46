import json
import subprocess
import sys
from pathlib import Path

import pandas as pd


REPO_ROOT = Path(__file__).resolve().parents[1]


def _run(script: str, outdir: Path, *extra: str) -> None:
    cmd = [sys.executable, str(REPO_ROOT / "scripts" / script), "--outdir", str(outdir), *extra]
    subprocess.run(cmd, cwd=REPO_ROOT, check=True)


def _assert_artifacts(outdir: Path, required: list) -> None:
    for rel in required:
        assert (outdir / rel).exists(), f"Missing expected artifact: {rel}"


def test_validate_environment_smoke(tmp_path: Path):
    _run("00_validate_environment.py", tmp_path)
    payload = json.loads((tmp_path / "logs" / "environment_check.json").read_text(encoding="utf-8"))
    assert payload["libm_available"] is True
    assert payload["packages"]["numpy"]


def test_lecture1_smoke(tmp_path: Path):
    _run("01_language_basics.py", tmp_path, "--quick")
    _assert_artifacts(
        tmp_path,
        [
            "tables/people.csv",
            "tables/people_by_city.csv",
            "tables/people_missingness.csv",
            "tables/benchmarks.csv",
            "tables/matrix_summary.json",
            "figures/age_histogram.png",
            "figures/sine_cosine.png",
            "logs/lecture1_run_metadata.json",
        ],
    )
    bench = pd.read_csv(tmp_path / "tables" / "benchmarks.csv")
    assert set(bench["name"]) == {"loop_sum", "builtin_sum", "numpy_sum"}


def test_lecture2_smoke(tmp_path: Path):
    _run("02_interop_and_ml.py", tmp_path, "--quick")
    _assert_artifacts(
        tmp_path,
        [
            "tables/interop_checks.json",
            "tables/ols_coefficients.csv",
            "tables/logit_coefficients.csv",
            "tables/gd_vs_reference.csv",
            "tables/network_metrics.csv",
            "figures/gd_loss.png",
            "figures/conv_feature_maps.png",
            "logs/lecture2_run_metadata.json",
        ],
    )
    checks = json.loads((tmp_path / "tables" / "interop_checks.json").read_text(encoding="utf-8"))
    assert checks["qsort_matches_numpy"] is True
    metrics = pd.read_csv(tmp_path / "tables" / "network_metrics.csv")
    assert metrics["model"].tolist() == ["mlp", "conv_logreg"]


def test_lecture3_smoke(tmp_path: Path):
    _run("03_diffeq_ppl_distributed.py", tmp_path, "--quick", "--workers", "2")
    _assert_artifacts(
        tmp_path,
        [
            "tables/lotka_volterra.csv",
            "tables/lorenz.csv",
            "tables/sir_ode.csv",
            "tables/sir_jump_ensemble.csv",
            "tables/coin_flip_posterior.csv",
            "tables/regression_posterior.csv",
            "tables/pi_estimates.csv",
            "figures/lotka_volterra.png",
            "figures/lorenz.png",
            "figures/sir_ode_vs_jump.png",
            "figures/coin_flip_posterior.png",
            "figures/regression_posterior.png",
            "figures/pi_estimates.png",
            "logs/lecture3_run_metadata.json",
        ],
    )
    pi = pd.read_csv(tmp_path / "tables" / "pi_estimates.csv")
    assert pi["n_workers"].tolist() == [1, 2]
    assert (pi["abs_error"] < 0.05).all()


def test_lecture3_rejects_bad_workers(tmp_path: Path):
    cmd = [sys.executable, str(REPO_ROOT / "scripts" / "03_diffeq_ppl_distributed.py"), "--outdir", str(tmp_path), "--workers", "0"]
    proc = subprocess.run(cmd, cwd=REPO_ROOT, capture_output=True, text=True)
    assert proc.returncode != 0
    assert "--workers must be a positive integer" in proc.stderr
