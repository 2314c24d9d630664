"""
Design matrix construction.

DesignMatrix.build() expands a row set and an ordered list of terms into a
numeric matrix under the complete-case policy: a row is kept only if the
response and every variable referenced by any term are present. The
retained set therefore depends on the requested terms, and every matrix
records how many candidate rows it dropped.

Column order is fixed by the caller's term order and, inside a categorical
expansion, by the schema's level order, so identical inputs always give
byte-identical matrices.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable

import numpy as np
from numpy.typing import NDArray

from pylinmodels.core.exceptions import (
    DegenerateDesignError,
    SchemaError,
    ValidationError,
)
from pylinmodels.core.observations import ObservationTable
from pylinmodels.terms._encoding import (
    ColumnBlock,
    encode_numeric,
    encode_threshold,
    encode_treatment,
    interaction_columns,
    order_labels,
)
from pylinmodels.terms._terms import Term, as_terms, referenced_variables
from pylinmodels.terms.schema import VariableSchema, as_label

INTERCEPT = '(Intercept)'


@dataclass(frozen=True, eq=False)
class DesignMatrix:
    """
    Encoded design over a retained row set. Immutable after construction.

    X carries no intercept column; solvers add it. Construct with build(),
    intercept_only() or rebuild().

    Attributes:
        row_ids: Retained row identifiers, in candidate order
        X: (n, p) float64 encoded columns
        response: (n,) response values aligned to row_ids
        terms: Terms in caller order
        column_names: One name per column of X
        term_slices: term name -> column slice in X
        encoding: categorical variable -> levels in use (reference first)
        n_total: Candidate rows before complete-case exclusion
        schema: Schema the design was built against
    """
    row_ids: NDArray[Any]
    X: NDArray[np.floating[Any]]
    response: NDArray[np.floating[Any]]
    terms: tuple[Term, ...]
    column_names: tuple[str, ...]
    term_slices: dict[str, slice]
    encoding: dict[str, tuple[str, ...]]
    n_total: int
    schema: VariableSchema = field(repr=False)

    # === Construction ===

    @classmethod
    def build(
        cls,
        observations: ObservationTable,
        terms: Iterable[Term | str],
        schema: VariableSchema,
        *,
        rows: Iterable[Any] | None = None,
        encoding: dict[str, tuple[str, ...]] | None = None,
        fitting: bool = True,
    ) -> DesignMatrix:
        """
        Expand terms over rows into a design matrix.

        Args:
            observations: Source rows
            terms: Non-empty sequence of Terms (or 'a:b' strings), in the
                column order wanted
            schema: Variable declarations
            rows: Candidate row ids (e.g. a split partition); all rows if None
            encoding: Levels fixed by a previously built design; nominal
                labels outside them raise DegenerateDesignError
            fitting: When True the design must have more rows than fitted
                columns; held-out rebuilds pass False

        Returns:
            DesignMatrix over the complete-case rows

        Raises:
            ValidationError: Empty or duplicated term list
            SchemaError: Undeclared variable, response used as a term,
                column absent from observations, or a label outside the
                declared levels
            DegenerateDesignError: No rows retained, too few rows for the
                columns, a single level left for a categorical variable,
                or an unseen level under a fixed encoding
        """
        term_list = as_terms(tuple(terms))
        if not term_list:
            raise ValidationError("terms: at least one term is required")
        if len(set(term_list)) != len(term_list):
            raise ValidationError(
                f"terms: duplicates in {[t.name for t in term_list]}"
            )
        for term in term_list:
            schema.check_term(term)

        referenced = referenced_variables(term_list)
        candidates, retained = _complete_cases(
            observations, schema, sorted(referenced), rows
        )

        n = len(retained)
        if n == 0:
            raise DegenerateDesignError(
                f"No rows retained for terms {[t.name for t in term_list]}: "
                f"all {len(candidates)} candidate rows miss a referenced variable",
                n_retained=0,
            )

        blocks: dict[str, ColumnBlock] = {}
        used_encoding: dict[str, tuple[str, ...]] = {}
        for name in sorted(referenced, key=schema.position):
            block, levels = _encode_variable(
                observations, schema, name, retained,
                fixed=None if encoding is None else encoding.get(name),
            )
            blocks[name] = block
            if levels is not None:
                used_encoding[name] = levels

        columns: list[NDArray] = []
        column_names: list[str] = []
        term_slices: dict[str, slice] = {}
        offset = 0
        for term in term_list:
            constituents = schema.ordered(term)
            if len(constituents) == 1:
                block = blocks[constituents[0]]
            else:
                block = interaction_columns([blocks[v] for v in constituents])
            columns.append(block.X)
            column_names.extend(block.names)
            term_slices[term.name] = slice(offset, offset + block.width)
            offset += block.width

        X = np.hstack(columns)
        if fitting and n < offset + 1:
            raise DegenerateDesignError(
                f"{n} retained rows cannot support {offset + 1} columns "
                f"(intercept included) for terms {[t.name for t in term_list]}",
                n_retained=n,
                n_columns=offset + 1,
            )

        response = _numeric_values(observations, schema.response, retained)
        return cls._frozen(
            row_ids=observations.row_ids[retained],
            X=X,
            response=response,
            terms=term_list,
            column_names=tuple(column_names),
            term_slices=term_slices,
            encoding=used_encoding,
            n_total=len(candidates),
            schema=schema,
        )

    @classmethod
    def intercept_only(
        cls,
        observations: ObservationTable,
        schema: VariableSchema,
        *,
        rows: Iterable[Any] | None = None,
    ) -> DesignMatrix:
        """
        Size-0 design: no columns, rows with a present response.

        Raises:
            DegenerateDesignError: If every candidate row misses the response
        """
        candidates, retained = _complete_cases(observations, schema, [], rows)
        if len(retained) == 0:
            raise DegenerateDesignError(
                f"No rows retained: all {len(candidates)} candidate rows miss "
                f"the response '{schema.response}'",
                n_retained=0,
            )
        return cls._frozen(
            row_ids=observations.row_ids[retained],
            X=np.empty((len(retained), 0), dtype=np.float64),
            response=_numeric_values(observations, schema.response, retained),
            terms=(),
            column_names=(),
            term_slices={},
            encoding={},
            n_total=len(candidates),
            schema=schema,
        )

    def rebuild(
        self,
        observations: ObservationTable,
        rows: Iterable[Any] | None = None,
    ) -> DesignMatrix:
        """
        Same terms and encoding over another row set (held-out evaluation).

        Complete-case exclusion is applied afresh to the new rows.
        """
        if not self.terms:
            return DesignMatrix.intercept_only(observations, self.schema, rows=rows)
        return DesignMatrix.build(
            observations,
            self.terms,
            self.schema,
            rows=rows,
            encoding=self.encoding,
            fitting=False,
        )

    @classmethod
    def _frozen(cls, **kwargs: Any) -> DesignMatrix:
        for key in ('row_ids', 'X', 'response'):
            kwargs[key].setflags(write=False)
        return cls(**kwargs)

    # === Properties ===

    @property
    def n(self) -> int:
        """Retained rows."""
        return self.X.shape[0]

    @property
    def p(self) -> int:
        """Encoded columns, intercept excluded."""
        return self.X.shape[1]

    @property
    def n_dropped(self) -> int:
        return self.n_total - self.n

    @property
    def term_set(self) -> frozenset[Term]:
        return frozenset(self.terms)

    def with_intercept(self) -> NDArray[np.floating[Any]]:
        """[1 | X], the matrix a solver actually factors."""
        return np.column_stack([np.ones(self.n, dtype=np.float64), self.X])

    @property
    def fitted_column_names(self) -> tuple[str, ...]:
        return (INTERCEPT,) + self.column_names

    def __repr__(self) -> str:
        return (
            f"DesignMatrix(n={self.n}, p={self.p}, "
            f"terms={[t.name for t in self.terms]}, dropped={self.n_dropped})"
        )


def _complete_cases(
    observations: ObservationTable,
    schema: VariableSchema,
    variables: list[str],
    rows: Iterable[Any] | None,
) -> tuple[NDArray[np.intp], NDArray[np.intp]]:
    """Candidate positions and the subset with every listed variable present."""
    if rows is None:
        candidates = np.arange(observations.n_observations, dtype=np.intp)
    else:
        candidates = observations.positions(rows)

    keep = np.ones(len(candidates), dtype=bool)
    for name in [schema.response] + list(variables):
        if name not in observations:
            raise SchemaError(
                f"variable '{name}' is declared but absent from the observations",
                variable=name,
            )
        keep &= ~observations.is_missing(name)[candidates]

    return candidates, candidates[keep]


def _numeric_values(
    observations: ObservationTable,
    name: str,
    positions: NDArray[np.intp],
) -> NDArray[np.floating[Any]]:
    col = observations.column(name)[positions]
    if col.dtype != object:
        return col.astype(np.float64)
    try:
        return np.array([float(v) for v in col], dtype=np.float64)
    except ValueError as e:
        raise SchemaError(
            f"'{name}' is declared numeric but holds non-numeric values: {e}",
            variable=name,
        ) from e


def _encode_variable(
    observations: ObservationTable,
    schema: VariableSchema,
    name: str,
    positions: NDArray[np.intp],
    fixed: tuple[str, ...] | None,
) -> tuple[ColumnBlock, tuple[str, ...] | None]:
    """Encode one variable's retained values; returns (block, levels in use)."""
    var = schema[name]
    if var.role == 'numeric':
        return encode_numeric(name, _numeric_values(observations, name, positions)), None

    labels = [as_label(v) for v in observations.column(name)[positions].tolist()]
    present = set(labels)

    if var.levels is not None:
        undeclared = present.difference(var.levels)
        if undeclared:
            raise SchemaError(
                f"'{name}': values {sorted(undeclared)} are not among the declared "
                f"levels {var.levels}",
                variable=name,
            )

    if fixed is not None:
        levels = fixed
        unseen = present.difference(levels)
        if unseen and var.role == 'nominal':
            level = sorted(unseen)[0]
            raise DegenerateDesignError(
                f"'{name}': level {level!r} does not occur in the rows the "
                f"encoding was built from (known levels {levels})",
                variable=name,
                level=level,
            )
    elif var.levels is not None:
        levels = tuple(level for level in var.levels if level in present)
    else:
        levels = order_labels(present)

    if len(levels) < 2:
        raise DegenerateDesignError(
            f"'{name}': only {len(levels)} level(s) among retained rows {levels}; "
            f"the variable cannot be encoded",
            n_retained=len(labels),
            variable=name,
        )

    if var.role == 'nominal':
        return encode_treatment(name, labels, levels), levels
    return encode_threshold(name, labels, levels, var.levels), levels
