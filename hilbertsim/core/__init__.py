"""Core binning, ordering, curve and similarity subpackage."""

from hilbertsim.core.binning import cut_values, do_cut, make_cuts
from hilbertsim.core.errors import (
    ConfigurationError,
    DataShapeError,
    DegenerateBinningWarning,
    HilbertSimError,
)
from hilbertsim.core.hilbert import (
    HilbertCurve,
    decode,
    do_hilbert,
    encode,
    hilbert_to_bins,
    minimum_order,
)
from hilbertsim.core.ordering import dimension_order, mutual_information_matrix, normalized_mi
from hilbertsim.core.regions import bin_intervals, describe_indices
from hilbertsim.core.similarity import (
    complexity_summary,
    hilbert_counts,
    hilbert_proportions,
    js_dist,
    js_divergence,
)
from hilbertsim.core.types import AnalysisConfig, AnalysisResult, BootstrapResult, CutSet

__all__ = [
    "AnalysisConfig",
    "AnalysisResult",
    "BootstrapResult",
    "CutSet",
    "HilbertSimError",
    "ConfigurationError",
    "DataShapeError",
    "DegenerateBinningWarning",
    "make_cuts",
    "cut_values",
    "do_cut",
    "mutual_information_matrix",
    "normalized_mi",
    "dimension_order",
    "HilbertCurve",
    "encode",
    "decode",
    "do_hilbert",
    "hilbert_to_bins",
    "minimum_order",
    "bin_intervals",
    "describe_indices",
    "hilbert_counts",
    "hilbert_proportions",
    "js_divergence",
    "js_dist",
    "complexity_summary",
]
