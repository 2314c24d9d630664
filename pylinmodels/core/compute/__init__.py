"""
Compute primitives shared by every solver: timing, tolerances, linear algebra.
"""

from pylinmodels.core.compute.timing import Timer

__all__ = ["Timer"]
