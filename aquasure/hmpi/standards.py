"""
standards.py
Reference permissible concentrations (mg/L) for drinking water, per authority.

Usage:
    from aquasure.hmpi.standards import STANDARDS
    STANDARDS["WHO"]["Lead"]  # 0.01
"""

from types import MappingProxyType


WHO = "WHO"
BBI = "BBI"


# -----------------------------------------------------
# WHO drinking-water guideline values
# -----------------------------------------------------
WHO_LIMITS = MappingProxyType({
    "Lead": 0.01,
    "Arsenic": 0.01,
    "Chromium": 0.05,
    "Mercury": 0.006,
    "Cadmium": 0.003,
})

# -----------------------------------------------------
# BBI limits
# -----------------------------------------------------
BBI_LIMITS = MappingProxyType({
    "Lead": 0.05,
    "Arsenic": 0.05,
    "Chromium": 0.1,
    "Mercury": 0.001,
    "Cadmium": 0.005,
})

STANDARDS = MappingProxyType({
    WHO: WHO_LIMITS,
    BBI: BBI_LIMITS,
})
