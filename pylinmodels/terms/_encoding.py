"""
Column encoding for design matrices.

Translates one variable's retained values into numeric columns, and
combines the columns of several variables into interaction columns.

Key concepts:
    - Treatment coding (nominal): k-1 indicator columns, reference = first level
    - Threshold coding (ordinal): k-1 columns 1[x >= level_j], j = 2..k,
      monotone in the declared order
    - Interaction: element-wise products of every combination of the
      constituents' columns, first constituent varying slowest
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence

import numpy as np
from numpy.typing import NDArray


@dataclass(frozen=True)
class ColumnBlock:
    """Encoded columns for one variable or term, with their names."""
    X: NDArray[np.floating[Any]]
    names: tuple[str, ...]

    @property
    def width(self) -> int:
        return self.X.shape[1]


def encode_numeric(name: str, values: NDArray[np.floating[Any]]) -> ColumnBlock:
    return ColumnBlock(X=values.reshape(-1, 1).astype(np.float64), names=(name,))


def encode_treatment(
    name: str,
    labels: Sequence[str],
    levels: tuple[str, ...],
) -> ColumnBlock:
    """
    Treatment (dummy) coding.

    Args:
        name: Variable name, used for column labels
        labels: Retained values as canonical labels
        levels: Levels in use; levels[0] is the reference and gets no column

    Returns:
        ColumnBlock with len(levels) - 1 indicator columns
    """
    labels_arr = np.asarray(labels, dtype=object)
    contrasts = levels[1:]
    X = np.zeros((len(labels_arr), len(contrasts)), dtype=np.float64)

    for j, level in enumerate(contrasts):
        X[:, j] = (labels_arr == level).astype(np.float64)

    return ColumnBlock(X=X, names=tuple(f"{name}[{level}]" for level in contrasts))


def encode_threshold(
    name: str,
    labels: Sequence[str],
    levels: tuple[str, ...],
    declared: tuple[str, ...],
) -> ColumnBlock:
    """
    Threshold (cumulative) coding for an ordered factor.

    Column j indicates x >= levels[j + 1] in declared order, so a row's
    encoding is monotone non-decreasing as its level rises. Labels that are
    declared but not among `levels` are still placed by declared rank.

    Args:
        name: Variable name, used for column labels
        labels: Retained values as canonical labels
        levels: Levels in use, in declared order
        declared: Full declared order from the schema

    Returns:
        ColumnBlock with len(levels) - 1 threshold columns
    """
    rank = {level: i for i, level in enumerate(declared)}
    row_rank = np.array([rank[v] for v in labels], dtype=np.int64)
    thresholds = levels[1:]
    X = np.zeros((len(row_rank), len(thresholds)), dtype=np.float64)

    for j, level in enumerate(thresholds):
        X[:, j] = (row_rank >= rank[level]).astype(np.float64)

    return ColumnBlock(X=X, names=tuple(f"{name}[>={level}]" for level in thresholds))


def interaction_columns(blocks: Sequence[ColumnBlock]) -> ColumnBlock:
    """
    Products of every combination of columns from the given blocks.

    For blocks of widths p_a, p_b (, p_c) the result has p_a * p_b (* p_c)
    columns ordered with the first block varying slowest.
    """
    X = blocks[0].X
    names = blocks[0].names
    for block in blocks[1:]:
        n = X.shape[0]
        combined = np.empty((n, X.shape[1] * block.width), dtype=np.float64)
        col = 0
        combined_names = []
        for i in range(X.shape[1]):
            for j in range(block.width):
                combined[:, col] = X[:, i] * block.X[:, j]
                combined_names.append(f"{names[i]}:{block.names[j]}")
                col += 1
        X = combined
        names = tuple(combined_names)
    return ColumnBlock(X=X, names=names)


def order_labels(labels: set[str]) -> tuple[str, ...]:
    """Sorted present labels; numerically when every label parses as a number."""
    try:
        return tuple(sorted(labels, key=float))
    except ValueError:
        return tuple(sorted(labels))
