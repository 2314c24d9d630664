"""
Exception hierarchy for pylinmodels.

All exceptions inherit from PyLinModelsError so callers can catch any
library-specific failure in one place. Non-fatal solver issues are
reported through warning categories defined here, never through
exceptions.

Design principles:
    - Exceptions carry diagnostic information as attributes
    - Error messages state the actual and the expected values
    - Nothing is raised for ordinary control flow (a search step that
      does not improve its criterion is a normal outcome)
"""

from __future__ import annotations


class PyLinModelsError(Exception):
    """Base exception for all pylinmodels errors."""
    pass


class ValidationError(PyLinModelsError):
    """
    Input validation failed.

    Raised at the public boundary when caller-provided inputs are
    malformed. Internals trust validated inputs.
    """
    pass


class DimensionError(ValidationError):
    """Array dimensions are incorrect or inconsistent."""
    pass


class SchemaError(ValidationError):
    """
    Variable declarations are malformed or inconsistent.

    Raised when a schema is built with zero or several response variables,
    an ordinal variable lacks an explicit level order, a term refers to an
    undeclared variable (or to the response), or a data value falls
    outside a variable's declared levels. Always fatal for the run.

    Attributes:
        variable: Name of the offending variable, if known
    """

    def __init__(self, message: str, variable: str | None = None):
        super().__init__(message)
        self.variable = variable


class DegenerateDesignError(PyLinModelsError):
    """
    A requested term set cannot produce a usable design matrix.

    Raised when complete-case exclusion leaves zero rows, when fewer rows
    remain than fitted columns, or when a rebuild meets a categorical
    level that the reference encoding has never seen. A search treats
    this as an unfavourable candidate, not as a reason to abort.

    Attributes:
        n_retained: Rows retained after complete-case exclusion
        n_columns: Columns the fit would need (intercept included)
        variable: Variable carrying an unseen level, if that was the cause
        level: The unseen level, if that was the cause
    """

    def __init__(
        self,
        message: str,
        n_retained: int | None = None,
        n_columns: int | None = None,
        variable: str | None = None,
        level: str | None = None,
    ):
        super().__init__(message)
        self.n_retained = n_retained
        self.n_columns = n_columns
        self.variable = variable
        self.level = level


class NumericalError(PyLinModelsError):
    """Base class for errors arising from numerical issues."""
    pass


class RankDeficientError(NumericalError):
    """
    Design matrix column rank is below its column count.

    Typical once many interaction terms are requested. The offending
    columns are the ones column-pivoted QR pushed past the numerical rank;
    dropping the term that owns them usually resolves the problem.

    Attributes:
        rank: Numerical rank of the weighted design
        expected_rank: Number of columns (intercept included)
        columns: Names of the columns found to be linearly dependent
    """

    def __init__(
        self,
        message: str,
        rank: int | None = None,
        expected_rank: int | None = None,
        columns: tuple[str, ...] = (),
    ):
        super().__init__(message)
        self.rank = rank
        self.expected_rank = expected_rank
        self.columns = tuple(columns)


class NotNestedError(ValidationError):
    """
    Nested-model comparison requested on models that are not nested.

    Raised when the reduced model's term set is not a strict subset of the
    full model's, or when the two models were fit on different rows.
    """
    pass


class ConvergenceWarning(UserWarning):
    """
    Iterative solver stopped at its iteration cap without converging.

    Emitted through warnings.warn and also recorded on the affected
    result so callers can discount it.
    """
    pass
