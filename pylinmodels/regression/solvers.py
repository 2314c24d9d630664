"""
Solver dispatch for weighted least squares.

This module provides fit() (public API) and backend selection.
"""

from typing import Literal

from numpy.typing import ArrayLike

from pylinmodels.regression.backends.cpu import CPUQRBackend
from pylinmodels.regression.design import WLSDesign
from pylinmodels.regression.solution import FittedModel
from pylinmodels.terms.design import DesignMatrix

BackendChoice = Literal['auto', 'cpu', 'cpu_qr']


def fit(
    design: DesignMatrix,
    response: ArrayLike | None = None,
    weights: ArrayLike | None = None,
    *,
    backend: BackendChoice = 'auto',
) -> FittedModel:
    """
    Fit a weighted linear model with intercept.

    Solves:
        min_β Σ w_i (y_i - β₀ - x_i'β)²

    by QR on the weight-scaled design, never through explicit
    normal-equation inversion.

    Args:
        design: DesignMatrix from DesignMatrix.build() or intercept_only()
        response: Response aligned to design.row_ids; defaults to
            design.response
        weights: Strictly positive per-row weights aligned to
            design.row_ids; None means all ones
        backend: 'auto', 'cpu' or 'cpu_qr' (all the same CPU QR solver)

    Returns:
        FittedModel with coefficients, fit statistics and diagnostics

    Raises:
        ValidationError: If response or weights are invalid
        DimensionError: If response or weights do not match design.n
        RankDeficientError: If the design has linearly dependent columns;
            the exception names them

    Example:
        >>> design = DesignMatrix.build(obs, [Term.of('x')], schema, rows=split.train)
        >>> model = fit(design)
        >>> model.coef_dict['x']
        >>> print(model.summary())
    """
    wls = WLSDesign.build(design, response, weights)
    backend_impl = _get_backend(backend)
    result = backend_impl.solve(wls)
    return FittedModel(_result=result, _design=design)


def _get_backend(choice: BackendChoice) -> CPUQRBackend:
    """
    Raises:
        ValueError: If the backend name is unknown
    """
    if choice in ('auto', 'cpu', 'cpu_qr'):
        return CPUQRBackend()
    raise ValueError(f"Unknown backend: {choice!r}")
