"""
Core infrastructure for pylinmodels.

Shared abstractions used by every domain subpackage (terms, regression,
comparison, selection, penalized).

Key components:
    observations: ObservationTable, the immutable row store
    split: Split / SplitConfig / split_rows
    result: Generic Result[P] envelope
    exceptions: Exception and warning hierarchy
    validation: Input validators
    compute: Timing, tolerances, QR least squares
"""

from pylinmodels.core.observations import ObservationTable
from pylinmodels.core.split import Split, SplitConfig, split_rows
from pylinmodels.core.result import Result
from pylinmodels.core.exceptions import (
    PyLinModelsError,
    ValidationError,
    DimensionError,
    SchemaError,
    DegenerateDesignError,
    NumericalError,
    RankDeficientError,
    NotNestedError,
    ConvergenceWarning,
)

__all__ = [
    "ObservationTable",
    "Split",
    "SplitConfig",
    "split_rows",
    "Result",
    "PyLinModelsError",
    "ValidationError",
    "DimensionError",
    "SchemaError",
    "DegenerateDesignError",
    "NumericalError",
    "RankDeficientError",
    "NotNestedError",
    "ConvergenceWarning",
]
