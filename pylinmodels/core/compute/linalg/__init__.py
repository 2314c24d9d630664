"""
Linear algebra kernels for pylinmodels.

CPU only: NumPy/SciPy with LAPACK underneath. Each decomposition returns a
frozen result dataclass; rank problems raise immediately.
"""

from pylinmodels.core.compute.linalg.qr import (
    QRResult,
    qr_pivoted,
    qr_solve,
    lstsq_qr,
)

__all__ = [
    "QRResult",
    "qr_pivoted",
    "qr_solve",
    "lstsq_qr",
]
