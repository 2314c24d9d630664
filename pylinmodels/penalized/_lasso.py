"""
Lasso by cyclic coordinate descent.

    min_{b0, β} ½ Σ w_i (y_i - b0 - x_i'β)² + λ ||β||₁

Each pass refits the unpenalized intercept, then updates every
coefficient in column order with the soft-threshold rule

    β_j ← S(Σ w x_j (r + x_j β_j), λ) / Σ w x_j²

while keeping the residual r current. A pass whose largest coefficient
change is below `tol` ends the loop.
"""

from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import NDArray


@dataclass(frozen=True)
class LassoFit:
    intercept: float
    coefficients: NDArray[np.floating[Any]]
    iterations: int
    converged: bool
    max_change: float


def soft_threshold(value: float, threshold: float) -> float:
    if value > threshold:
        return value - threshold
    if value < -threshold:
        return value + threshold
    return 0.0


def lasso_lambda_max_raw(
    X: NDArray[np.floating[Any]],
    y: NDArray[np.floating[Any]],
    w: NDArray[np.floating[Any]],
) -> float:
    """max_j |Σ w x_j (y - ȳ_w)|, the smallest λ at which β = 0."""
    if X.shape[1] == 0:
        return 0.0
    y_bar = np.sum(w * y) / np.sum(w)
    return float(np.max(np.abs(X.T @ (w * (y - y_bar)))))


def coordinate_descent(
    X: NDArray[np.floating[Any]],
    y: NDArray[np.floating[Any]],
    w: NDArray[np.floating[Any]],
    penalty: float,
    *,
    tol: float,
    max_iter: int,
    warm_start: tuple[float, NDArray[np.floating[Any]]] | None = None,
) -> LassoFit:
    """
    Args:
        X: (n, p) design without intercept column
        y: (n,) response
        w: (n,) positive weights
        penalty: λ >= 0
        tol: Stop when max |Δβ| over a full pass falls below this
        max_iter: Cap on full passes
        warm_start: (intercept, coefficients) to start from

    Returns:
        LassoFit; converged is False when max_iter passes were used up
    """
    p = X.shape[1]
    if warm_start is None:
        b0 = 0.0
        beta = np.zeros(p, dtype=np.float64)
    else:
        b0 = float(warm_start[0])
        beta = np.array(warm_start[1], dtype=np.float64)

    wx = w[:, None] * X
    z = np.sum(wx * X, axis=0)
    w_sum = float(np.sum(w))
    r = y - b0 - X @ beta

    max_change = np.inf
    for iteration in range(1, max_iter + 1):
        delta = float(np.sum(w * r) / w_sum)
        b0 += delta
        r -= delta
        max_change = abs(delta)

        for j in range(p):
            if z[j] == 0:
                new = 0.0
            else:
                rho = float(wx[:, j] @ r) + z[j] * beta[j]
                new = soft_threshold(rho, penalty) / z[j]
            change = new - beta[j]
            if change != 0.0:
                r -= change * X[:, j]
                beta[j] = new
                max_change = max(max_change, abs(change))

        if max_change < tol:
            return LassoFit(b0, beta, iteration, True, max_change)

    return LassoFit(b0, beta, max_iter, False, max_change)
