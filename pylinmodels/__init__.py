"""
PyLinModels: linear model fitting and selection.

Design-matrix expansion under a complete-case policy, weighted least
squares with row diagnostics, model comparison, greedy forward selection
and ridge/lasso regularization paths.

Submodules:
    core: Observations, splits, result envelope, exceptions
    terms: Variable schema, terms and design matrices
    regression: Weighted least squares and diagnostics
    comparison: Adjusted R², BIC, held-out error, nested F-tests
    selection: Greedy forward selection
    penalized: Ridge and lasso paths
"""

__version__ = "0.1.0"

from pylinmodels import core
from pylinmodels import terms
from pylinmodels import regression
from pylinmodels import comparison
from pylinmodels import selection
from pylinmodels import penalized

__all__ = [
    "__version__",
    "core",
    "terms",
    "regression",
    "comparison",
    "selection",
    "penalized",
]
