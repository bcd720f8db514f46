import numpy as np
import pytest

from src.probabilistic.mcmc import effective_sample_size, gelman_rubin, hmc, metropolis, sample, summarize_chains
from src.probabilistic.models import coin_flip_model, coin_flip_posterior, linear_regression_model


@pytest.fixture
def flips():
    rng = np.random.default_rng(11)
    return rng.binomial(1, 0.3, size=200)


def test_coin_flip_gradient_matches_finite_difference(flips):
    model = coin_flip_model(flips, 2.0, 2.0)
    theta = np.array([0.3])
    eps = 1e-6
    fd = (model.log_density(theta + eps) - model.log_density(theta - eps)) / (2 * eps)
    assert model.grad_log_density(theta)[0] == pytest.approx(fd, rel=1e-5)


def test_regression_gradient_matches_finite_difference():
    rng = np.random.default_rng(0)
    x = rng.normal(size=30)
    y = 1.0 + 2.0 * x + rng.normal(0, 0.3, size=30)
    model = linear_regression_model(x, y)
    theta = np.array([0.5, 1.5, -0.5])
    grad = model.grad_log_density(theta)
    eps = 1e-6
    for j in range(3):
        step = np.zeros(3)
        step[j] = eps
        fd = (model.log_density(theta + step) - model.log_density(theta - step)) / (2 * eps)
        assert grad[j] == pytest.approx(fd, rel=1e-4)


@pytest.mark.parametrize("sampler", ["metropolis", "hmc"])
def test_coin_flip_samplers_match_exact_posterior(flips, sampler):
    model = coin_flip_model(flips)
    kwargs = {"step_size": 0.5} if sampler == "metropolis" else {"step_size": 0.05, "n_leapfrog": 5}
    chains = sample(model, sampler, n_chains=2, seed=5, n_samples=2000, n_warmup=300, **kwargs)
    summary = summarize_chains(chains)
    exact = coin_flip_posterior(flips)

    row = summary.iloc[0]
    assert row["param"] == "p"
    assert row["mean"] == pytest.approx(exact.mean(), abs=0.02)
    assert row["std"] == pytest.approx(exact.std(), rel=0.25)
    assert row["rhat"] < 1.1
    assert row["ess"] > 100
    assert all(0 < c.acceptance_rate <= 1 for c in chains)
    assert all(((c.samples > 0) & (c.samples < 1)).all() for c in chains)


def test_hmc_regression_recovers_parameters():
    rng = np.random.default_rng(3)
    x = rng.uniform(-2, 2, size=100)
    y = 1.5 - 2.0 * x + rng.normal(0, 0.5, size=100)
    chain = hmc(linear_regression_model(x, y), 1000, step_size=0.05, n_leapfrog=10, n_warmup=300, seed=1)
    means = chain.to_frame().mean()
    assert means["alpha"] == pytest.approx(1.5, abs=0.2)
    assert means["beta"] == pytest.approx(-2.0, abs=0.2)
    assert means["sigma"] == pytest.approx(0.5, abs=0.15)


def test_sampler_validation(flips):
    model = coin_flip_model(flips)
    with pytest.raises(ValueError):
        metropolis(model, 0)
    with pytest.raises(ValueError):
        hmc(model, 10, step_size=-1.0)
    with pytest.raises(ValueError):
        sample(model, "nuts")
    with pytest.raises(ValueError):
        coin_flip_model([0, 1, 2])


def test_diagnostics():
    rng = np.random.default_rng(0)
    iid = [rng.normal(size=1000) for _ in range(4)]
    assert gelman_rubin(iid) == pytest.approx(1.0, abs=0.01)
    assert effective_sample_size(iid) > 2000

    shifted = [rng.normal(size=500), rng.normal(loc=5.0, size=500)]
    assert gelman_rubin(shifted) > 1.5
    assert np.isnan(gelman_rubin([rng.normal(size=100)]))
