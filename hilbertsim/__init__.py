"""hilbertsim public API."""

from hilbertsim._version import __version__
from hilbertsim.core.binning import do_cut, make_cuts
from hilbertsim.core.hilbert import HilbertCurve, do_hilbert
from hilbertsim.core.ordering import dimension_order, mutual_information_matrix
from hilbertsim.core.similarity import hilbert_counts, js_dist
from hilbertsim.core.types import AnalysisConfig
from hilbertsim.stats.bootstrap import bootstrap_significance


def run_analysis(*args, **kwargs):
    """Lazy wrapper to avoid importing pipeline dependencies at import time."""
    from hilbertsim.pipeline.analysis import run_analysis as _run_analysis

    return _run_analysis(*args, **kwargs)


__all__ = [
    "__version__",
    "AnalysisConfig",
    "make_cuts",
    "do_cut",
    "mutual_information_matrix",
    "dimension_order",
    "HilbertCurve",
    "do_hilbert",
    "hilbert_counts",
    "js_dist",
    "bootstrap_significance",
    "run_analysis",
]
