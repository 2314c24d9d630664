"""
Tolerance tiers for numerical comparison.

Used by the QR rank check, by the regularization path when deciding
held-out-error ties, and by the test suite.
"""

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class ToleranceTier:
    """Tolerance tier for numerical comparison."""
    rtol: float
    atol: float
    name: str
    description: str


# Direct solves on well-conditioned designs
CPU_FP64 = ToleranceTier(
    rtol=1e-10,
    atol=1e-12,
    name='cpu_fp64',
    description='CPU double precision, direct solve',
)

# Designs with near-collinear interaction columns (cond > 1e4)
CPU_FP64_ILL_CONDITIONED = ToleranceTier(
    rtol=1e-4,
    atol=1e-6,
    name='cpu_fp64_ill_conditioned',
    description='CPU double precision, ill-conditioned design',
)

# Iterative solves (coordinate descent) stopped at a change tolerance
ITERATIVE = ToleranceTier(
    rtol=1e-5,
    atol=1e-6,
    name='iterative',
    description='Coordinate descent at default convergence tolerance',
)

# Relative slack under which two held-out errors count as a tie
TIE_RTOL = 1e-12


def rank_tolerance(n_rows: int, n_cols: int, largest_diag: float) -> float:
    """
    Threshold on |diag(R)| below which a pivoted column is rank-deficient.

    Mirrors the LAPACK-style rule max(n, p) * eps * |R[0, 0]|.
    """
    return max(n_rows, n_cols) * np.finfo(np.float64).eps * largest_diag


def is_ill_conditioned(condition_number: float) -> bool:
    return condition_number > 1e4


def select_tolerance(is_ill_conditioned: bool = False) -> ToleranceTier:
    """Select the tolerance tier for a direct solve."""
    if is_ill_conditioned:
        return CPU_FP64_ILL_CONDITIONED
    return CPU_FP64
