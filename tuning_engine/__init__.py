"""Vehicle tuning calculation engine.

Load transfer, aerodynamics, track-specific tuning and tire selection as
deterministic functions over frozen setup records.
"""

__version__ = "0.1.0"
