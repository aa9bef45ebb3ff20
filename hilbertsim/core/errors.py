"""Exception and warning types raised by hilbertsim."""

from __future__ import annotations


class HilbertSimError(Exception):
    """Base class for hilbertsim errors."""


class ConfigurationError(HilbertSimError, ValueError):
    """Invalid parameter or parameter combination."""


class DataShapeError(HilbertSimError, ValueError):
    """Sample matrix, labels or coordinates do not have the expected shape/range."""


class DegenerateBinningWarning(RuntimeWarning):
    """A dimension was cut into fewer bins than requested."""
