"""
Penalized regression paths.

Public API:
    solve_path(design, ..., penalty, grid, validation) -> RegularizationPath
    make_grid(start, stop, num, spacing='linear') -> ndarray
    lasso_lambda_max(design, response=None, weights=None) -> float
"""

from __future__ import annotations

import logging
import warnings
from typing import Any, Literal

import numpy as np
from numpy.typing import ArrayLike, NDArray

from pylinmodels.core.compute.timing import Timer
from pylinmodels.core.compute.tolerances import TIE_RTOL
from pylinmodels.core.exceptions import ConvergenceWarning, ValidationError
from pylinmodels.core.result import Result
from pylinmodels.core.validation import check_1d, check_array, check_finite, check_length
from pylinmodels.penalized._common import PathParams, PathPoint
from pylinmodels.penalized._lasso import coordinate_descent, lasso_lambda_max_raw
from pylinmodels.penalized._ridge import ridge_fit
from pylinmodels.penalized.design import PathDesign
from pylinmodels.penalized.solution import RegularizationPath
from pylinmodels.regression.design import WLSDesign
from pylinmodels.terms.design import DesignMatrix

logger = logging.getLogger(__name__)


def solve_path(
    design: DesignMatrix,
    response: ArrayLike | None = None,
    weights: ArrayLike | None = None,
    *,
    penalty: str,
    grid: ArrayLike,
    validation: DesignMatrix,
    validation_response: ArrayLike | None = None,
    tol: float = 1e-7,
    max_iter: int = 10_000,
) -> RegularizationPath:
    """
    Fit a ridge or lasso path and pick the penalty by held-out error.

    Columns of `design` must already be centered with unit norm (see
    standardize()); they are used as given, so coefficients are comparable
    along the grid. The intercept is never penalized.

    Args:
        design: Standardized training design
        response: Training response; defaults to design.response
        weights: Positive row weights; defaults to all ones
        penalty: 'ridge' (Σw r² + λ||β||²) or 'lasso' (½Σw r² + λ||β||₁)
        grid: Non-negative, strictly increasing penalty strengths
        validation: Held-out design standardized with the training
            statistics
        validation_response: Defaults to validation.response
        tol: Lasso stops a grid point when max |Δβ| over a pass < tol
        max_iter: Lasso pass cap per grid point

    Returns:
        RegularizationPath in grid order with the selected point

    Raises:
        ValidationError: Bad configuration, or validation columns differ
            from the training columns
        RankDeficientError: Ridge at λ = 0 on a rank-deficient design

    Warns:
        ConvergenceWarning: A lasso grid point used up max_iter passes;
            the point is kept with converged=False

    Example:
        >>> train, stats = standardize(train_design)
        >>> valid, _ = standardize(valid_design, reference=stats)
        >>> grid = make_grid(0.0, lasso_lambda_max(train), 50)
        >>> path = solve_path(train, penalty='lasso', grid=grid, validation=valid)
        >>> path.selected.penalty
    """
    config = PathDesign.build(penalty, grid, tol=tol, max_iter=max_iter)
    wls = WLSDesign.build(design, response, weights)

    if validation.column_names != design.column_names:
        raise ValidationError(
            f"validation columns {validation.column_names} do not match the "
            f"training columns {design.column_names}"
        )
    if validation_response is None:
        y_valid = validation.response
    else:
        y_valid = check_array(validation_response, 'validation_response')
        check_1d(y_valid, 'validation_response')
        check_length(y_valid, validation.n, 'validation_response')
        check_finite(y_valid, 'validation_response')

    with Timer() as timer:
        if config.penalty == 'ridge':
            fits = _ridge_path(wls, config, timer)
        else:
            fits = _lasso_path(wls, config, timer)

        with timer.section('validation'):
            points = []
            for lam, (b0, beta, df, converged, iterations, message) in zip(config.grid, fits):
                predictions = b0 + validation.X @ beta
                points.append(PathPoint(
                    penalty=float(lam),
                    intercept=b0,
                    coefficients=beta,
                    held_out_error=float(np.mean((y_valid - predictions) ** 2)),
                    df=df,
                    converged=converged,
                    iterations=iterations,
                    warning=message,
                ))
            selected = select_index(points)

    messages = tuple(pt.warning for pt in points if pt.warning is not None)
    for message in messages:
        warnings.warn(message, ConvergenceWarning, stacklevel=2)

    params = PathParams(
        kind=config.penalty,
        points=tuple(points),
        selected_index=selected,
        column_names=design.column_names,
    )
    info = {
        'method': 'augmented qr' if config.penalty == 'ridge' else 'coordinate descent',
        'penalty': config.penalty,
        'n_points': config.n_points,
        'tol': config.tol,
        'max_iter': config.max_iter,
        'weighted': wls.weighted,
        'n_total': design.n_total,
        'n_retained': design.n,
        'n_dropped': design.n_dropped,
        'n_validation': validation.n,
        'n_unconverged': len(messages),
    }
    logger.info(
        "%s path: %d points, selected penalty %.6g (held-out %.6g)",
        config.penalty, config.n_points, points[selected].penalty,
        points[selected].held_out_error,
    )
    return RegularizationPath(_result=Result(
        params=params,
        info=info,
        timing=timer.result(),
        backend_name='cpu',
        warnings=messages,
    ))


def _ridge_path(wls: WLSDesign, config: PathDesign, timer: Timer) -> list:
    Xw, yw = wls.weighted_system()
    names = wls.matrix.fitted_column_names
    fits = []
    for lam in config.grid:
        with timer.section('grid_point'):
            b0, beta, df = ridge_fit(Xw, yw, float(lam), names)
        fits.append((b0, beta, df, True, 0, None))
    return fits


def _lasso_path(wls: WLSDesign, config: PathDesign, timer: Timer) -> list:
    """Solve from the largest penalty down, warm-starting each point."""
    X, y, w = wls.matrix.X, wls.y, wls.weights
    fits: list = [None] * config.n_points
    start = None
    for i in reversed(range(config.n_points)):
        lam = float(config.grid[i])
        with timer.section('grid_point'):
            result = coordinate_descent(
                X, y, w, lam, tol=config.tol, max_iter=config.max_iter, warm_start=start,
            )
        message = None
        if not result.converged:
            message = (
                f"Lasso did not converge at penalty {lam:.6g} after "
                f"{result.iterations} passes (max change {result.max_change:.3g} >= tol {config.tol:.3g})"
            )
        logger.debug(
            "lasso penalty=%.6g: %d passes, converged=%s",
            lam, result.iterations, result.converged,
        )
        fits[i] = (
            result.intercept, result.coefficients,
            float(np.count_nonzero(result.coefficients)),
            result.converged, result.iterations, message,
        )
        start = (result.intercept, result.coefficients)
    return fits


def select_index(points: list[PathPoint]) -> int:
    """
    Index of the minimal held-out error; ties within TIE_RTOL go to the
    largest penalty.
    """
    errors = np.array([pt.held_out_error for pt in points])
    finite = np.isfinite(errors)
    if not finite.any():
        return len(points) - 1
    best = float(np.min(errors[finite]))
    slack = TIE_RTOL * max(abs(best), np.finfo(np.float64).tiny)
    tied = np.flatnonzero(finite & (errors <= best + slack))
    return int(tied[-1])


def lasso_lambda_max(
    design: DesignMatrix,
    response: ArrayLike | None = None,
    weights: ArrayLike | None = None,
) -> float:
    """Smallest lasso penalty at which every coefficient is zero."""
    wls = WLSDesign.build(design, response, weights)
    return lasso_lambda_max_raw(wls.matrix.X, wls.y, wls.weights)


def make_grid(
    start: float,
    stop: float,
    num: int,
    spacing: Literal['linear', 'log'] = 'linear',
) -> NDArray[np.floating[Any]]:
    """
    Strictly increasing penalty grid from start to stop inclusive.

    Args:
        start: Smallest penalty (>= 0; > 0 for log spacing)
        stop: Largest penalty (> start unless num == 1)
        num: Number of points
        spacing: 'linear' or 'log'

    Example:
        >>> make_grid(0.01, 100.0, 5, spacing='log')
        array([1.e-02, 1.e-01, 1.e+00, 1.e+01, 1.e+02])
    """
    if isinstance(num, bool) or not isinstance(num, int) or num < 1:
        raise ValidationError(f"num: must be a positive integer, got {num!r}")
    if start < 0:
        raise ValidationError(f"start: must be non-negative, got {start}")
    if num == 1:
        return np.array([float(start)])
    if not stop > start:
        raise ValidationError(f"stop ({stop}) must exceed start ({start})")

    if spacing == 'linear':
        return np.linspace(start, stop, num)
    if spacing == 'log':
        if start == 0:
            raise ValidationError("start: log spacing needs start > 0")
        return np.geomspace(start, stop, num)
    raise ValidationError(f"spacing must be 'linear' or 'log', got {spacing!r}")
