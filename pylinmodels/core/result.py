"""
Generic result envelope shared by every solver in pylinmodels.

Each domain defines its own frozen parameter payload (LinearParams,
FTestParams, PathParams); the envelope adds the metadata every fit must
report: method details, complete-case row accounting, timing, and
non-fatal warnings.
"""

from dataclasses import dataclass, field
from typing import TypeVar, Generic, Any

P = TypeVar('P')


@dataclass(frozen=True)
class Result(Generic[P]):
    """
    Immutable result envelope.

    Attributes:
        params: Domain-specific payload (coefficients, statistics, path)
        info: Metadata such as method, rank, row counts, convergence
        timing: Timer sections in seconds, or None when not measured
        backend_name: Identifier of the backend that produced the payload
        warnings: Non-fatal issues encountered during computation

    Examples:
        >>> Result(
        ...     params=LinearParams(...),
        ...     info={'method': 'qr', 'rank': 3, 'n_retained': 97, 'n_total': 100},
        ...     timing={'total_seconds': 0.002},
        ...     backend_name='cpu_qr',
        ... )
    """
    params: P
    info: dict[str, Any]
    timing: dict[str, float] | None
    backend_name: str
    warnings: tuple[str, ...] = field(default_factory=tuple)

    def has_warning(self, substring: str) -> bool:
        """Check if any warning contains the given substring."""
        return any(substring in w for w in self.warnings)
