"""
Column standardization for penalized fits.

Penalties are only comparable across columns on a common scale, so the
path solver expects every column centered to zero mean and scaled to
unit Euclidean norm. The statistics come from the training design and
are reused unchanged on validation and test designs.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any

import numpy as np
from numpy.typing import NDArray

from pylinmodels.core.exceptions import ValidationError
from pylinmodels.terms.design import DesignMatrix


@dataclass(frozen=True, eq=False)
class Standardization:
    """
    Per-column centering and scaling.

    Attributes:
        means: Column means of the reference design
        scales: Column norms after centering; 1.0 for constant columns
        column_names: Columns the statistics belong to
    """
    means: NDArray[np.floating[Any]]
    scales: NDArray[np.floating[Any]]
    column_names: tuple[str, ...]

    @classmethod
    def fit(cls, design: DesignMatrix) -> Standardization:
        X = design.X
        means = X.mean(axis=0)
        scales = np.linalg.norm(X - means, axis=0)
        scales = np.where(scales > 0, scales, 1.0)
        return cls(means=means, scales=scales, column_names=design.column_names)

    def apply(self, design: DesignMatrix) -> DesignMatrix:
        """
        Raises:
            ValidationError: If the design's columns differ
        """
        if design.column_names != self.column_names:
            raise ValidationError(
                f"design columns {design.column_names} do not match the "
                f"standardization columns {self.column_names}"
            )
        X = (design.X - self.means) / self.scales
        X.setflags(write=False)
        return dataclasses.replace(design, X=X)

    def unscale(
        self,
        intercept: float,
        coefficients: NDArray[np.floating[Any]],
    ) -> tuple[float, NDArray[np.floating[Any]]]:
        """Map a fit on standardized columns back to the original columns."""
        beta = coefficients / self.scales
        return float(intercept - self.means @ beta), beta


def standardize(
    design: DesignMatrix,
    reference: Standardization | None = None,
) -> tuple[DesignMatrix, Standardization]:
    """
    Center columns to zero mean and scale them to unit norm.

    Args:
        design: Design to transform
        reference: Statistics from a training design; when None they are
            computed from `design` itself

    Returns:
        (standardized design, statistics used)

    Example:
        >>> train_std, stats = standardize(train)
        >>> valid_std, _ = standardize(valid, reference=stats)
    """
    stats = Standardization.fit(design) if reference is None else reference
    return stats.apply(design), stats
