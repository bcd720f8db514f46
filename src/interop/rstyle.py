"""R-style model formulas through statsmodels (``lm``/``glm`` analogues)."""

from __future__ import annotations

import numpy as np
import pandas as pd
import statsmodels.api as sm
import statsmodels.formula.api as smf

_FAMILIES = {
    "gaussian": None,
    "binomial": sm.families.Binomial,
    "poisson": sm.families.Poisson,
}


def make_regression_frame(
    n: int,
    seed: int,
    *,
    intercept: float = 1.5,
    slope: float = -2.0,
    noise: float = 0.5,
) -> pd.DataFrame:
    """Synthetic ``y = intercept + slope * x + eps`` plus a binary outcome ``hit``."""

    if n < 3:
        raise ValueError(f"n must be >= 3 for a regression fit; got {n}")
    rng = np.random.default_rng(seed)
    x = rng.uniform(-2.0, 2.0, size=n)
    y = intercept + slope * x + rng.normal(0.0, noise, size=n)
    p = 1.0 / (1.0 + np.exp(-(0.5 + 1.5 * x)))
    hit = rng.binomial(1, p)
    group = rng.choice(["a", "b"], size=n)
    return pd.DataFrame({"x": x, "y": y, "hit": hit, "group": group})


def fit_formula(df: pd.DataFrame, formula: str, family: str = "gaussian"):
    if family not in _FAMILIES:
        raise ValueError(f"Unknown family {family!r}; expected one of {sorted(_FAMILIES)}")
    if family == "gaussian":
        return smf.ols(formula, data=df).fit()
    return smf.glm(formula, data=df, family=_FAMILIES[family]()).fit()


def coefficient_table(result, alpha: float = 0.05) -> pd.DataFrame:
    """Coefficient summary in the layout of R's ``summary(fit)$coefficients``."""

    ci = result.conf_int(alpha=alpha)
    return pd.DataFrame(
        {
            "term": result.params.index.astype(str),
            "estimate": result.params.to_numpy(dtype=float),
            "std_error": result.bse.to_numpy(dtype=float),
            "statistic": result.tvalues.to_numpy(dtype=float),
            "p_value": result.pvalues.to_numpy(dtype=float),
            "ci_low": ci.iloc[:, 0].to_numpy(dtype=float),
            "ci_high": ci.iloc[:, 1].to_numpy(dtype=float),
        }
    )
