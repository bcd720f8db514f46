import math

import numpy as np
import pandas as pd
import pytest

from src.basics.arrays import broadcast_table, make_vector, matrix_summary, solve_linear_system
from src.basics.benchmark import BenchmarkResult, benchmark, builtin_sum, compare_benchmarks, loop_sum, numpy_sum
from src.basics.frames import (
    filter_rows,
    join_city_info,
    make_people_frame,
    summarize_by_group,
    summarize_missingness,
)
from src.basics.language import Circle, Rectangle, Square, area, collatz_length, describe, fibonacci
from src.basics.plotting import plot_histogram, plot_lines


def test_area_dispatches_on_shape_type():
    assert area(Circle(2.0)) == pytest.approx(4.0 * math.pi)
    assert area(Rectangle(2.0, 3.0)) == 6.0
    assert area(Square(1.5)) == 2.25

    with pytest.raises(TypeError):
        area("not a shape")
    with pytest.raises(ValueError):
        area(Rectangle(-1.0, 2.0))


def test_describe_uses_most_specific_type():
    assert describe(True) == "boolean True"
    assert describe(4) == "even integer 4"
    assert describe("abc") == "string of length 3"
    assert describe(np.zeros((2, 3))) == "float64 array with shape (2, 3)"
    assert describe({"a": 1}) == "dict value"


def test_collatz_and_fibonacci():
    assert collatz_length(1) == 0
    assert collatz_length(27) == 111
    assert fibonacci(0) == []
    assert fibonacci(8) == [0, 1, 1, 2, 3, 5, 8, 13]
    with pytest.raises(ValueError):
        collatz_length(0)
    with pytest.raises(ValueError):
        fibonacci(-1)


def test_arrays_helpers():
    v = make_vector(3)
    assert v.tolist() == [1.0, 2.0, 3.0]
    assert broadcast_table(v, v, op="mul")[2, 1] == 6.0

    A = np.array([[2.0, 0.0], [0.0, 4.0]])
    x = solve_linear_system(A, [2.0, 8.0])
    np.testing.assert_allclose(x, [1.0, 2.0])

    summary = matrix_summary(A)
    assert summary["rank"] == 2
    assert summary["determinant"] == pytest.approx(8.0)
    assert matrix_summary(np.ones((2, 3)))["determinant"] is None

    with pytest.raises(ValueError):
        solve_linear_system(np.ones((2, 3)), [1.0, 2.0])
    with pytest.raises(np.linalg.LinAlgError):
        solve_linear_system(np.ones((2, 2)), [1.0, 2.0])


def test_people_frame_queries():
    df = make_people_frame(100, seed=1)
    assert df.columns.tolist() == ["id", "name", "age", "height_cm", "city", "score"]
    assert len(df) == 100
    pd.testing.assert_frame_equal(df, make_people_frame(100, seed=1))

    older = filter_rows(df, "age", 50)
    assert (older["age"] >= 50).all()

    grouped = summarize_by_group(df, "city", "score")
    assert grouped["city"].tolist() == sorted(grouped["city"].tolist())
    assert int(grouped["n"].sum()) == 100

    cities = pd.DataFrame({"city": sorted(df["city"].unique()), "code": range(df["city"].nunique())})
    joined = join_city_info(df, cities)
    assert len(joined) == len(df)
    assert joined["code"].notna().all()

    with pytest.raises(ValueError, match="Missing required columns"):
        summarize_by_group(df, "country", "score")


def test_people_frame_city_choices():
    df = make_people_frame(20, seed=3, cities=["Oslo"])
    assert (df["city"] == "Oslo").all()

    # An empty city list is an error, not a request for the defaults.
    with pytest.raises(ValueError, match="at least one city"):
        make_people_frame(5, seed=0, cities=[])
    with pytest.raises(ValueError):
        make_people_frame(-1, seed=0)


def test_summarize_missingness_counts_na():
    df = pd.DataFrame({"a": [1.0, None, 3.0, None], "b": ["x", "y", None, "z"]})
    out = summarize_missingness(df)
    assert out["n_missing"].tolist() == [2, 1]
    assert out["missing_rate"].tolist() == [0.5, 0.25]


def test_plots_are_written(tmp_path):
    x = np.linspace(0, 1, 10)
    p1 = plot_lines(x, {"x": x, "x^2": x**2}, tmp_path / "figs" / "lines.png", title="t")
    p2 = plot_histogram(np.arange(20), tmp_path / "hist.png", bins=5)
    assert p1.exists() and p2.exists()


def test_benchmark_and_compare():
    values = list(range(100))
    assert loop_sum(values) == builtin_sum(values) == numpy_sum(np.array(values)) == 4950.0

    res = benchmark(loop_sum, values, repeat=3, number=2)
    assert isinstance(res, BenchmarkResult)
    assert res.name == "loop_sum"
    assert res.n_runs == 3
    assert 0 < res.min_s <= res.median_s <= res.max_s

    table = compare_benchmarks(
        [
            BenchmarkResult("slow", 3, 1, 2.0, 2.0, 2.0, 2.0),
            BenchmarkResult("fast", 3, 1, 0.5, 0.5, 0.5, 0.5),
        ]
    )
    assert table["name"].tolist() == ["fast", "slow"]
    assert table["speedup_vs_slowest"].tolist() == [4.0, 1.0]

    with pytest.raises(ValueError):
        benchmark(loop_sum, values, repeat=0)
