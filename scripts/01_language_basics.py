"""Lecture 1: language basics, arrays, dataframes, plotting and benchmarking."""

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

from src.basics.arrays import broadcast_table, make_vector, matrix_summary, solve_linear_system  # noqa: E402
from src.basics.benchmark import benchmark, builtin_sum, compare_benchmarks, loop_sum, numpy_sum  # noqa: E402
from src.basics.frames import (  # noqa: E402
    filter_rows,
    join_city_info,
    make_people_frame,
    summarize_by_group,
    summarize_missingness,
)
from src.basics.language import Circle, Rectangle, Square, area, collatz_length, describe, fibonacci  # noqa: E402
from src.basics.plotting import plot_histogram, plot_lines  # noqa: E402
from src.config import (  # noqa: E402
    BENCHMARK_NUMBER,
    BENCHMARK_REPEAT,
    BENCHMARK_VECTOR_LEN,
    PEOPLE_CITIES,
    PEOPLE_N,
    RANDOM_SEED,
)
from src.utils.logging import run_metadata, setup_logging, write_json  # noqa: E402

logger = logging.getLogger("src.scripts.lecture1")

CITY_INFO = pd.DataFrame(
    {
        "city": PEOPLE_CITIES,
        "country": ["Germany", "Nigeria", "Peru", "Japan", "Canada"],
        "population_m": [3.7, 15.4, 10.1, 2.7, 2.8],
    }
)


def main() -> None:
    parser = argparse.ArgumentParser(description="Lecture 1 demos: language basics, arrays, dataframes, plots, benchmarks.")
    parser.add_argument("--outdir", type=Path, default=Path("outputs"), help="Output directory (default: outputs/).")
    parser.add_argument("--seed", type=int, default=RANDOM_SEED, help="Random seed for synthetic data.")
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

    # Dispatch and control flow
    shapes = [Circle(1.0), Rectangle(2.0, 3.0), Square(1.5)]
    for shape in shapes:
        logger.info("area(%s) = %.4f", shape, area(shape))
    for value in [3, 2.5, "julia", [1, 2, 3], np.zeros((2, 3))]:
        logger.info("describe -> %s", describe(value))
    logger.info("collatz_length(27) = %d; first 10 Fibonacci = %s", collatz_length(27), fibonacci(10))

    # Arrays
    A = np.array([[4.0, 1.0, 0.0], [1.0, 3.0, 1.0], [0.0, 1.0, 2.0]])
    b = make_vector(3)
    x = solve_linear_system(A, b)
    summary = matrix_summary(A)
    summary["solution"] = x.tolist()
    summary["outer_sum_3x3"] = broadcast_table(make_vector(3), make_vector(3)).tolist()
    write_json(tables_dir / "matrix_summary.json", summary)

    # Dataframes
    n_people = 50 if args.quick else PEOPLE_N
    people = make_people_frame(n_people, seed=args.seed)
    people.to_csv(tables_dir / "people.csv", index=False)
    adults_over_40 = filter_rows(people, "age", 40)
    logger.info("%d of %d people are 40 or older", len(adults_over_40), len(people))
    by_city = summarize_by_group(join_city_info(people, CITY_INFO), "city", "score")
    by_city.to_csv(tables_dir / "people_by_city.csv", index=False)
    summarize_missingness(people).to_csv(tables_dir / "people_missingness.csv", index=False)

    # Plots
    plot_histogram(people["age"], figures_dir / "age_histogram.png", title="Age distribution", bins=20, xlabel="Age")
    t = np.linspace(0.0, 2.0 * np.pi, 200)
    plot_lines(
        t,
        {"sin(t)": np.sin(t), "cos(t)": np.cos(t)},
        figures_dir / "sine_cosine.png",
        title="Sine and cosine",
        xlabel="t",
        ylabel="value",
    )

    # Benchmarks
    vec_len = 1_000 if args.quick else BENCHMARK_VECTOR_LEN
    repeat = 3 if args.quick else BENCHMARK_REPEAT
    number = 5 if args.quick else BENCHMARK_NUMBER
    values = np.random.default_rng(args.seed).random(vec_len)
    as_list = values.tolist()
    results = [
        benchmark(loop_sum, as_list, repeat=repeat, number=number),
        benchmark(builtin_sum, as_list, repeat=repeat, number=number),
        benchmark(numpy_sum, values, repeat=repeat, number=number),
    ]
    bench = compare_benchmarks(results)
    bench.to_csv(tables_dir / "benchmarks.csv", index=False)
    for row in bench.itertuples(index=False):
        logger.info("%-12s median %.3e s (x%.1f vs slowest)", row.name, row.median_s, row.speedup_vs_slowest)

    write_json(
        logs_dir / "lecture1_run_metadata.json",
        run_metadata(
            sys.argv,
            seed=args.seed,
            quick=args.quick,
            outdir=str(outdir),
            n_people=n_people,
            benchmark={"vector_len": vec_len, "repeat": repeat, "number": number},
        ),
    )

    print(f"Wrote lecture 1 artifacts to {outdir}/")


if __name__ == "__main__":
    main()
