"""
Model comparison: information criteria, held-out error and nested F-tests.

Public API:
    adjusted_r2(model), bic(model), aic(model)
    held_out_error(model, validation, response=None)
    validation_error(model, observations, rows)
    nested_f_test(full, reduced) -> FTestSolution
    score_model(model, observations=None, rows=None) -> ModelScores
    compare_models(models, observations=None, rows=None) -> list[ModelScores]
"""

from pylinmodels.comparison._common import FTestParams, ModelScores
from pylinmodels.comparison._criteria import (
    adjusted_r2,
    aic,
    bic,
    held_out_error,
    validation_error,
)
from pylinmodels.comparison.solution import FTestSolution
from pylinmodels.comparison.solvers import compare_models, nested_f_test, score_model

__all__ = [
    "adjusted_r2",
    "bic",
    "aic",
    "held_out_error",
    "validation_error",
    "nested_f_test",
    "score_model",
    "compare_models",
    "FTestSolution",
    "FTestParams",
    "ModelScores",
]
