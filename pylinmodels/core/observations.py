"""
Observation table for pylinmodels.

ObservationTable is the "I have rows" abstraction: a row identifier per
observation and one column per declared variable, each value possibly
missing. It does not know which columns are predictors or how they will
be encoded; the schema and the design builder decide that.

Missing values:
    numeric columns   -> float64 with NaN
    label columns     -> object arrays of str with None

Usage:
    obs = ObservationTable.from_file("data.csv", missing="NA")
    obs = ObservationTable.from_dataframe(df, id_column="id")
    obs = ObservationTable.from_columns({"x": x, "g": g, "y": y})
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Mapping, TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from pylinmodels.core.exceptions import ValidationError, DimensionError

if TYPE_CHECKING:
    import pandas as pd

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ObservationTable:
    """
    Immutable row store. Construct via the from_* factories.

    Attributes are private; use the accessors so columns cannot be
    mutated in place (every stored array is marked read-only).
    """
    _row_ids: NDArray[Any]
    _columns: dict[str, NDArray[Any]]
    _metadata: dict[str, Any] = field(default_factory=dict)

    # === Access ===

    @property
    def row_ids(self) -> NDArray[Any]:
        return self._row_ids

    @property
    def n_observations(self) -> int:
        return len(self._row_ids)

    @property
    def columns(self) -> tuple[str, ...]:
        return tuple(self._columns.keys())

    @property
    def metadata(self) -> dict[str, Any]:
        return {k: v for k, v in self._metadata.items() if not k.startswith('_')}

    def __contains__(self, name: str) -> bool:
        return name in self._columns

    def column(self, name: str) -> NDArray[Any]:
        """
        Return one column.

        Raises:
            KeyError: If the column does not exist, listing available columns
        """
        if name not in self._columns:
            raise KeyError(
                f"ObservationTable has no column '{name}'. Available: {self.columns}"
            )
        return self._columns[name]

    def is_missing(self, name: str) -> NDArray[np.bool_]:
        """Boolean mask of missing values in a column."""
        return _missing_mask(self.column(name))

    def positions(self, row_ids: Iterable[Any]) -> NDArray[np.intp]:
        """
        Map row ids to positional indices, preserving the given order.

        Raises:
            ValidationError: If any id is unknown
        """
        index = self._metadata['_id_index']
        ids = list(row_ids)
        try:
            return np.array([index[r] for r in ids], dtype=np.intp)
        except KeyError as e:
            raise ValidationError(f"row_ids: unknown row id {e.args[0]!r}") from e

    def select(self, row_ids: Iterable[Any]) -> ObservationTable:
        """New table restricted to the given rows, in the given order."""
        pos = self.positions(row_ids)
        return ObservationTable._from_validated(
            self._row_ids[pos],
            {name: col[pos] for name, col in self._columns.items()},
            source=self._metadata.get('source', 'select'),
        )

    # === Factory Methods ===

    @classmethod
    def from_columns(
        cls,
        columns: Mapping[str, Any],
        *,
        row_ids: Any = None,
        missing: Any = None,
    ) -> ObservationTable:
        """
        Construct from a mapping of column name to 1-D array-like.

        Args:
            columns: {name: values}; all of equal length
            row_ids: Unique row identifiers; defaults to 0..n-1
            missing: Extra token treated as missing, in addition to None/NaN
        """
        if not columns:
            raise ValidationError("columns: at least one column is required")

        converted: dict[str, NDArray[Any]] = {}
        n: int | None = None
        for name, values in columns.items():
            col = _convert_column(np.asarray(values), missing)
            if col.ndim != 1:
                raise DimensionError(
                    f"{name}: expected 1D column, got {col.ndim}D with shape {col.shape}"
                )
            if n is None:
                n = len(col)
            elif len(col) != n:
                raise DimensionError(
                    f"Inconsistent column lengths: {name}={len(col)}, expected {n}"
                )
            converted[str(name)] = col

        ids = np.arange(n) if row_ids is None else np.asarray(row_ids)
        return cls._from_validated(ids, converted, source='columns')

    @classmethod
    def from_dataframe(
        cls,
        df: 'pd.DataFrame',
        *,
        id_column: str | None = None,
        missing: Any = None,
        source_path: str | None = None,
    ) -> ObservationTable:
        """
        Construct from a pandas DataFrame.

        Args:
            df: One row per observation
            id_column: Column holding row ids; defaults to the frame index
            missing: Extra token treated as missing
            source_path: Recorded in metadata when loaded from a file
        """
        if id_column is not None:
            if id_column not in df.columns:
                raise ValidationError(f"id_column: '{id_column}' not in columns")
            ids = df[id_column].to_numpy()
            data = df.drop(columns=[id_column])
        else:
            ids = df.index.to_numpy()
            data = df

        columns = {str(col): data[col].to_numpy() for col in data.columns}
        table = cls.from_columns(columns, row_ids=ids, missing=missing)
        meta = dict(table._metadata)
        meta['source'] = 'dataframe'
        if source_path:
            meta['source_path'] = source_path
        return cls(_row_ids=table._row_ids, _columns=table._columns, _metadata=meta)

    @classmethod
    def from_file(
        cls,
        path: str | Path,
        *,
        id_column: str | None = None,
        missing: str = 'NA',
        sep: str | None = None,
    ) -> ObservationTable:
        """
        Load a delimited file with a header row.

        Only the reserved missing token (and empty fields) is treated as
        missing; pandas' default NA vocabulary is disabled so labels such
        as "None" or "nan" survive as levels.

        Args:
            path: CSV/TSV file
            id_column: Column holding row ids; defaults to 0..n-1
            missing: Reserved missing-value token
            sep: Field delimiter; inferred from the suffix when None
        """
        import pandas as pd

        path = Path(path)
        if sep is None:
            suffix = path.suffix.lower()
            if suffix == '.csv':
                sep = ','
            elif suffix in ('.tsv', '.tab'):
                sep = '\t'
            else:
                raise ValidationError(f"Unknown file format: {suffix}; pass sep=")

        df = pd.read_csv(
            path,
            sep=sep,
            na_values=[missing, ''],
            keep_default_na=False,
        )
        logger.info("Loaded %d rows x %d columns from %s", len(df), df.shape[1], path)
        return cls.from_dataframe(df, id_column=id_column, source_path=str(path))

    @classmethod
    def _from_validated(
        cls,
        row_ids: NDArray[Any],
        columns: dict[str, NDArray[Any]],
        source: str,
    ) -> ObservationTable:
        if row_ids.ndim != 1:
            raise DimensionError(f"row_ids: expected 1D, got {row_ids.ndim}D")
        n = len(row_ids)
        for name, col in columns.items():
            if len(col) != n:
                raise DimensionError(
                    f"Inconsistent lengths: row_ids={n}, {name}={len(col)}"
                )

        id_index: dict[Any, int] = {}
        for i, r in enumerate(row_ids.tolist()):
            if r in id_index:
                raise ValidationError(f"row_ids: duplicate row id {r!r}")
            id_index[r] = i

        row_ids = row_ids.copy()
        row_ids.setflags(write=False)
        frozen: dict[str, NDArray[Any]] = {}
        for name, col in columns.items():
            col = col.copy()
            col.setflags(write=False)
            frozen[name] = col

        return cls(
            _row_ids=row_ids,
            _columns=frozen,
            _metadata={
                'n_observations': n,
                'source': source,
                '_id_index': id_index,
            },
        )


def _convert_column(values: NDArray[Any], missing: Any) -> NDArray[Any]:
    """Numeric columns become float64/NaN; anything else str/None labels."""
    if np.issubdtype(values.dtype, np.number) and not np.issubdtype(values.dtype, np.complexfloating):
        col = values.astype(np.float64)
        if missing is not None and not isinstance(missing, str):
            col[col == missing] = np.nan
        return col

    out = np.empty(len(values), dtype=object)
    for i, v in enumerate(values.tolist()):
        if v is None or (isinstance(v, float) and np.isnan(v)):
            out[i] = None
        elif missing is not None and v == missing:
            out[i] = None
        else:
            out[i] = str(v)

    # Object columns that are entirely numeric strings stay labels; coercion
    # to numbers happens against the schema at design-build time.
    return out


def _missing_mask(col: NDArray[Any]) -> NDArray[np.bool_]:
    if col.dtype == object:
        return np.array([v is None for v in col], dtype=bool)
    return np.isnan(col)
