"""
Regression influence and outlier diagnostics.

All quantities are closed-form functions of a weighted fit; no row is
ever literally refit. With weights W, residuals are taken on the
weighted scale sqrt(w_i) e_i and leverage is the hat diagonal of
sqrt(W)[1 | X].

    internal studentized   r_i = sqrt(w_i) e_i / (s sqrt(1 - h_i)),     s² = RSS / df
    external studentized   t_i = sqrt(w_i) e_i / (s_(i) sqrt(1 - h_i)),
                           s_(i)² = (RSS - w_i e_i² / (1 - h_i)) / (df - 1)
    Cook's distance        D_i = r_i² h_i / (k (1 - h_i)),               k = p + 1

Rows with h_i = 1 are fit exactly and get NaN studentized residuals and
Cook's distances.
"""

from __future__ import annotations

from typing import Any

import numpy as np
from numpy.typing import NDArray
from scipy import stats as sp_stats


def internal_studentized(
    residuals: NDArray[np.floating[Any]],
    weights: NDArray[np.floating[Any]],
    leverage: NDArray[np.floating[Any]],
    rss: float,
    df_residual: int,
) -> NDArray[np.floating[Any]]:
    if df_residual <= 0:
        return np.full(len(residuals), np.nan)
    e_w = np.sqrt(weights) * residuals
    s = np.sqrt(rss / df_residual)
    with np.errstate(divide='ignore', invalid='ignore'):
        r = e_w / (s * np.sqrt(1.0 - leverage))
    return np.where(leverage < 1.0, r, np.nan)


def external_studentized(
    residuals: NDArray[np.floating[Any]],
    weights: NDArray[np.floating[Any]],
    leverage: NDArray[np.floating[Any]],
    rss: float,
    df_residual: int,
) -> NDArray[np.floating[Any]]:
    """Jackknife residuals via the leave-one-out variance update."""
    if df_residual <= 1:
        return np.full(len(residuals), np.nan)
    e_w = np.sqrt(weights) * residuals
    with np.errstate(divide='ignore', invalid='ignore'):
        one_minus_h = 1.0 - leverage
        s2_loo = (rss - e_w ** 2 / one_minus_h) / (df_residual - 1)
        # Rounding can push s2_loo slightly negative for a perfect fit
        s2_loo = np.maximum(s2_loo, 0.0)
        t = e_w / np.sqrt(s2_loo * one_minus_h)
    return np.where(leverage < 1.0, t, np.nan)


def cooks_distance(
    internal: NDArray[np.floating[Any]],
    leverage: NDArray[np.floating[Any]],
    n_params: int,
) -> NDArray[np.floating[Any]]:
    with np.errstate(divide='ignore', invalid='ignore'):
        d = internal ** 2 * leverage / (n_params * (1.0 - leverage))
    return np.where(leverage < 1.0, d, np.nan)


def bonferroni_threshold(n: int, df_residual: int, alpha: float) -> float:
    """
    Two-sided Bonferroni critical value for n externally studentized
    residuals, each t-distributed with df_residual - 1 degrees of freedom.
    """
    return float(sp_stats.t.ppf(1.0 - alpha / (2.0 * n), df_residual - 1))


def outlier_mask(
    studentized: NDArray[np.floating[Any]],
    df_residual: int,
    alpha: float,
) -> NDArray[np.bool_]:
    if df_residual <= 1:
        return np.zeros(len(studentized), dtype=bool)
    threshold = bonferroni_threshold(len(studentized), df_residual, alpha)
    with np.errstate(invalid='ignore'):
        return np.abs(studentized) > threshold


def high_leverage_mask(
    leverage: NDArray[np.floating[Any]],
    n_params: int,
    multiple: float,
) -> NDArray[np.bool_]:
    """h_i above `multiple` times the average leverage k / n."""
    return leverage > multiple * n_params / len(leverage)


def half_normal_scores(
    values: NDArray[np.floating[Any]],
) -> tuple[NDArray[np.floating[Any]], NDArray[np.floating[Any]], NDArray[np.intp]]:
    """
    Half-normal ranking of |values|.

    Expected quantiles use Φ⁻¹((i + n - 1/8) / (2n + 1/2)), i = 1..n.
    NaN values rank last.

    Returns:
        (quantiles, sorted |values|, order) where order indexes the
        original rows from smallest to largest
    """
    abs_vals = np.abs(np.asarray(values, dtype=np.float64))
    order = np.argsort(np.where(np.isnan(abs_vals), np.inf, abs_vals), kind='stable')
    n = len(abs_vals)
    i = np.arange(1, n + 1)
    quantiles = sp_stats.norm.ppf((i + n - 0.125) / (2 * n + 0.5))
    return quantiles, abs_vals[order], order
