"""Statistical utilities for hilbertsim."""

from hilbertsim.stats.bootstrap import (
    bootstrap_ncells,
    bootstrap_sign_counts,
    bootstrap_significance,
    fold_change_sign,
)

__all__ = [
    "fold_change_sign",
    "bootstrap_ncells",
    "bootstrap_sign_counts",
    "bootstrap_significance",
]
