"""
Regression backends.

Available backends:
    CPUQRBackend: weighted least squares via column-pivoted QR
"""

from pylinmodels.regression.backends.cpu import CPUQRBackend

__all__ = [
    "CPUQRBackend",
]
