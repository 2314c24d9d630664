"""
Ridge and lasso regularization paths with validation-driven selection.

Public API:
    solve_path(design, ..., penalty, grid, validation) -> RegularizationPath
    standardize(design, reference=None) -> (DesignMatrix, Standardization)
    make_grid(start, stop, num, spacing='linear')
    lasso_lambda_max(design, response=None, weights=None)
"""

from pylinmodels.penalized._common import PathParams, PathPoint
from pylinmodels.penalized._standardize import Standardization, standardize
from pylinmodels.penalized.design import PathDesign
from pylinmodels.penalized.solution import RegularizationPath
from pylinmodels.penalized.solvers import lasso_lambda_max, make_grid, solve_path

__all__ = [
    "solve_path",
    "make_grid",
    "lasso_lambda_max",
    "standardize",
    "Standardization",
    "PathDesign",
    "PathPoint",
    "PathParams",
    "RegularizationPath",
]
