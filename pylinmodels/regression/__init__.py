"""
Weighted linear least squares.

Public API:
    fit(design, response=None, weights=None) -> FittedModel
    group_variance_weights(model, observations, variable) -> GroupWeights

Example:
    >>> from pylinmodels.regression import fit
    >>> model = fit(design)
    >>> model.coefficients
    >>> model.outlier_rows(alpha=0.05)
"""

from pylinmodels.regression._common import LinearParams
from pylinmodels.regression._weights import GroupWeights, group_variance_weights
from pylinmodels.regression.design import WLSDesign
from pylinmodels.regression.solution import FittedModel
from pylinmodels.regression.solvers import fit

__all__ = [
    "fit",
    "FittedModel",
    "LinearParams",
    "WLSDesign",
    "GroupWeights",
    "group_variance_weights",
]
