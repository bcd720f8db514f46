import math

import pytest

from src.distributed.montecarlo import count_in_circle, estimate_pi, partition_range


@pytest.mark.parametrize("n,p", [(10, 3), (100, 4), (7, 7), (5, 8), (0, 2), (1_000_003, 4)])
def test_partition_range_covers_n(n, p):
    chunks, remainder = partition_range(n, p)
    assert len(chunks) == p
    assert all(c == n // p for c in chunks)
    assert 0 <= remainder < p
    assert sum(chunks) + remainder == n


def test_partition_range_validation():
    with pytest.raises(ValueError):
        partition_range(10, 0)
    with pytest.raises(ValueError):
        partition_range(-1, 2)


def test_count_in_circle_is_deterministic_and_bounded():
    assert count_in_circle(0, 1) == 0
    hits = count_in_circle(10_000, 42)
    assert hits == count_in_circle(10_000, 42)
    assert 0 <= hits <= 10_000
    assert 4 * hits / 10_000 == pytest.approx(math.pi, abs=0.1)


def test_estimate_pi_sums_partials_and_remainder():
    est = estimate_pi(100_003, n_workers=2, seed=1)
    assert est.n == 100_003
    assert len(est.partial_counts) == 2
    assert est.hits == sum(est.partial_counts) + est.local_count
    assert est.estimate == pytest.approx(4.0 * est.hits / est.n)
    assert est.abs_error < 0.05


def test_estimate_pi_reproducible_and_validates():
    a = estimate_pi(20_000, n_workers=1, seed=9)
    b = estimate_pi(20_000, n_workers=1, seed=9)
    assert a == b
    with pytest.raises(ValueError):
        estimate_pi(0, 2)
    with pytest.raises(ValueError):
        estimate_pi(10, 0)
