import math

import numpy as np
import pytest

from src.interop.native import InteropError, c_array_sum, c_function, c_qsort, libm_cos, libm_pow, load_library
from src.interop.rstyle import coefficient_table, fit_formula, make_regression_frame


def test_libm_calls_match_python():
    assert libm_cos(0.5) == pytest.approx(math.cos(0.5))
    assert libm_pow(3.0, 4.0) == pytest.approx(81.0)


def test_missing_library_and_symbol_raise_interop_error():
    with pytest.raises(InteropError):
        load_library("definitely_not_a_real_library_xyz")
    with pytest.raises(InteropError):
        c_function(load_library("m"), "no_such_symbol_xyz", [], None)


def test_array_pointer_helpers():
    values = np.array([3.0, -1.0, 2.5, 0.0, 10.0])
    assert c_array_sum(values) == pytest.approx(values.sum())
    with pytest.raises(ValueError):
        c_array_sum(np.ones((2, 2)))


def test_qsort_into_separate_buffer_leaves_input_untouched():
    values = np.array([3.0, -1.0, 2.5])
    out = np.zeros(3)
    result = c_qsort(values, out=out)
    assert result is out
    assert out.tolist() == [-1.0, 2.5, 3.0]
    assert values.tolist() == [3.0, -1.0, 2.5]

    # Non-array input is accepted when an output buffer is supplied.
    assert c_qsort([2.0, 1.0], out=np.empty(2)).tolist() == [1.0, 2.0]

    with pytest.raises(ValueError, match="does not match"):
        c_qsort(values, out=np.zeros(4))
    with pytest.raises(ValueError):
        c_qsort(values, out=np.zeros(3, dtype=np.float32))


def test_qsort_without_out_sorts_in_place():
    values = np.array([3.0, -1.0, 2.5, 0.0, 10.0])
    result = c_qsort(values)
    assert result is values
    assert values.tolist() == [-1.0, 0.0, 2.5, 3.0, 10.0]

    same = np.array([5.0, 4.0])
    assert c_qsort(same, out=same).tolist() == [4.0, 5.0]

    with pytest.raises(ValueError, match="sort in place"):
        c_qsort([3.0, 1.0])
    with pytest.raises(ValueError):
        c_qsort(np.arange(6.0)[::2])


def test_ols_recovers_coefficients():
    df = make_regression_frame(500, seed=3, intercept=1.0, slope=2.0, noise=0.1)
    table = coefficient_table(fit_formula(df, "y ~ x"))
    assert table["term"].tolist() == ["Intercept", "x"]
    est = dict(zip(table["term"], table["estimate"]))
    assert est["Intercept"] == pytest.approx(1.0, abs=0.05)
    assert est["x"] == pytest.approx(2.0, abs=0.05)
    assert (table["ci_low"] <= table["estimate"]).all()
    assert (table["estimate"] <= table["ci_high"]).all()


def test_binomial_glm_and_unknown_family():
    df = make_regression_frame(800, seed=4)
    table = coefficient_table(fit_formula(df, "hit ~ x", family="binomial"))
    slope = float(table.loc[table["term"] == "x", "estimate"].iloc[0])
    assert slope > 0
    with pytest.raises(ValueError, match="Unknown family"):
        fit_formula(df, "y ~ x", family="gamma-ish")
