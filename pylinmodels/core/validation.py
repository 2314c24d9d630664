"""
Input validation utilities for pylinmodels.

Validators fail fast and loud: they raise with the parameter name and the
offending values rather than correcting input silently. Public entry
points call these once; everything downstream trusts the result.
"""

import numpy as np
from numpy.typing import ArrayLike, NDArray
from typing import Any

from pylinmodels.core.exceptions import ValidationError, DimensionError


def check_array(
    array: ArrayLike,
    name: str,
) -> NDArray[np.floating[Any]]:
    """
    Validate and convert input to a float64 numpy array.

    Rejects inputs that convert to object or other non-numeric dtypes.

    Args:
        array: Input to validate
        name: Parameter name for error messages

    Returns:
        numpy.ndarray with floating dtype

    Raises:
        ValidationError: If input cannot be converted to a numeric array
    """
    try:
        result = np.asarray(array)
    except (ValueError, TypeError) as e:
        raise ValidationError(f"{name}: cannot convert to array: {e}") from e

    if result.dtype == object:
        raise ValidationError(
            f"{name}: converted to object dtype, indicating mixed types or non-numeric data"
        )

    if not np.issubdtype(result.dtype, np.number):
        raise ValidationError(
            f"{name}: non-numeric dtype {result.dtype}, expected numeric data"
        )

    if not np.issubdtype(result.dtype, np.floating):
        result = result.astype(np.float64)

    return result


def check_finite(array: NDArray[np.floating[Any]], name: str) -> None:
    """Verify array contains no NaN or Inf values."""
    if not np.all(np.isfinite(array)):
        n_nan = int(np.sum(np.isnan(array)))
        n_inf = int(np.sum(np.isinf(array)))
        raise ValidationError(
            f"{name}: contains non-finite values ({n_nan} NaN, {n_inf} Inf)"
        )


def check_ndim(array: NDArray[np.floating[Any]], ndim: int, name: str) -> None:
    """Verify array has exactly the specified number of dimensions."""
    if array.ndim != ndim:
        raise DimensionError(
            f"{name}: expected {ndim}D array, got {array.ndim}D with shape {array.shape}"
        )


def check_1d(array: NDArray[np.floating[Any]], name: str) -> None:
    check_ndim(array, 1, name)


def check_length(array: NDArray[Any], length: int, name: str) -> None:
    """
    Verify a 1-D array has the expected length.

    Raises:
        DimensionError: If the first dimension differs from length
    """
    if array.shape[0] != length:
        raise DimensionError(
            f"{name}: expected length {length}, got {array.shape[0]}"
        )


def check_positive(array: NDArray[np.floating[Any]], name: str) -> None:
    """
    Verify every element is strictly positive.

    Raises:
        ValidationError: If any element is zero or negative
    """
    bad = np.flatnonzero(array <= 0)
    if len(bad) > 0:
        raise ValidationError(
            f"{name}: must be strictly positive, {len(bad)} non-positive "
            f"value(s) at positions {bad[:5].tolist()}"
        )


def check_fraction(value: float, name: str) -> None:
    """
    Verify a split fraction lies in [0, 1).

    Raises:
        ValidationError: If value is outside [0, 1)
    """
    if not (0.0 <= value < 1.0):
        raise ValidationError(f"{name}: must be in [0, 1), got {value}")


def check_increasing_grid(grid: NDArray[np.floating[Any]], name: str) -> None:
    """
    Verify a penalty grid is non-empty, non-negative and strictly increasing.

    Raises:
        ValidationError: If any of the three conditions fails
    """
    if grid.size == 0:
        raise ValidationError(f"{name}: must contain at least one value")
    if np.any(grid < 0):
        raise ValidationError(
            f"{name}: penalty strengths must be non-negative, got min {grid.min()}"
        )
    if np.any(np.diff(grid) <= 0):
        raise ValidationError(f"{name}: must be strictly increasing")
