"""
driftrack - drifter-buoy track reconstruction

Rebuilds absolute timestamps for drifter position feeds that only carry
a fractional day-of-year, groups transmitter series into named drifters,
and writes one ordered track per drifter.
"""

__version__ = "0.1.0"
