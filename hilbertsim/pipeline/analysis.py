"""End-to-end orchestration: binning -> ordering -> Hilbert index -> similarity/bootstrap."""

from __future__ import annotations

import logging
import warnings
from typing import Any, Sequence

import numpy as np

from hilbertsim._version import __version__
from hilbertsim.core.binning import do_cut, make_cuts
from hilbertsim.core.errors import ConfigurationError, DegenerateBinningWarning
from hilbertsim.core.hilbert import do_hilbert, minimum_order
from hilbertsim.core.ordering import dimension_order, mutual_information_matrix
from hilbertsim.core.regions import describe_indices
from hilbertsim.core.similarity import (
    complexity_summary,
    hilbert_counts,
    hilbert_proportions,
    js_dist,
)
from hilbertsim.core.types import AnalysisConfig, AnalysisResult
from hilbertsim.core.utils import as_labels, as_sample_matrix, resolve_reference
from hilbertsim.stats.bootstrap import bootstrap_significance

LOGGER = logging.getLogger(__name__)


def _resolve_order(config: AnalysisConfig, effective_bins: np.ndarray) -> int:
    needed = minimum_order(int(np.max(effective_bins)))
    if config.order is None:
        return needed
    if int(config.order) < needed:
        raise ConfigurationError(
            f"Hilbert order {int(config.order)} cannot address {int(np.max(effective_bins))} "
            f"bins per dimension; need at least {needed}."
        )
    return int(config.order)


def run_analysis(
    samples: Any,
    labels: Sequence[Any] | np.ndarray,
    config: AnalysisConfig | None = None,
    *,
    channels: Sequence[str] | None = None,
    logger: logging.Logger | None = None,
) -> AnalysisResult:
    """Run the full pipeline on one sample matrix with per-point condition labels."""
    cfg = config or AnalysisConfig()
    log = logger or LOGGER

    mat, names = as_sample_matrix(samples, channels)
    lab = as_labels(labels, mat.shape[0])
    reference, others = resolve_reference(lab, cfg.reference)
    log.info(
        "Samples: %d points x %d channels; reference=%s; conditions=%s",
        mat.shape[0],
        mat.shape[1],
        reference,
        ",".join(others),
    )

    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always", DegenerateBinningWarning)
        cut_set = make_cuts(
            mat,
            cfg.n_bins,
            cfg.count_lim,
            mode=cfg.cut_mode,
            groups=cfg.groups,
            channels=names,
        )
    for w in caught:
        if issubclass(w.category, DegenerateBinningWarning):
            log.warning("Degenerate binning: %s", w.message)
        else:
            warnings.warn_explicit(w.message, w.category, w.filename, w.lineno)
    binned = do_cut(mat, cut_set)
    log.info(
        "Cut mode=%s; effective bins per channel: %s",
        cut_set.mode,
        ", ".join(f"{ch}={int(k)}" for ch, k in zip(names, cut_set.effective_bins)),
    )

    mi = mutual_information_matrix(binned)
    dim_order = dimension_order(mi)
    log.info("Dimension order: %s", ", ".join(names[i] for i in dim_order))

    order = _resolve_order(cfg, cut_set.effective_bins)
    hilbert = do_hilbert(binned, order=order, dim_order=dim_order)
    log.info("Hilbert order=%d (%d bits per index)", order, order * len(names))

    counts = hilbert_counts(hilbert, lab, reference)
    proportions = hilbert_proportions(counts)
    js = js_dist(counts)
    complexity = complexity_summary(counts)
    log.info("Occupied Hilbert indices: %d", counts.shape[0])

    boot = bootstrap_significance(
        counts,
        reference,
        lim=cfg.lim,
        n_rep=cfg.n_rep,
        flim=cfg.flim,
        p=cfg.p,
        seed=cfg.seed,
        round_to=cfg.round_to,
        n_jobs=cfg.n_jobs,
    )
    n_sig = int(boot.table["significant"].sum())
    log.info(
        "Bootstrap: ncells=%d n_rep=%d tested=%d excluded=%d significant=%d",
        boot.ncells,
        boot.n_rep,
        int(boot.table["hilbert"].nunique()),
        len(boot.excluded),
        n_sig,
    )
    if boot.table.empty:
        log.warning(
            "No Hilbert index reaches lim=%d points; all %d indices excluded from the bootstrap.",
            boot.lim,
            len(boot.excluded),
        )

    sig_idx = list(dict.fromkeys(boot.significant["hilbert"].tolist()))
    regions = describe_indices(sig_idx, cut_set, order, dim_order)

    metadata: dict[str, Any] = {
        "hilbertsim_version": __version__,
        "n_points": int(mat.shape[0]),
        "n_channels": int(mat.shape[1]),
        "linkage": "average",
        "significant_regions": regions,
    }
    return AnalysisResult(
        config=cfg,
        channels=names,
        reference=reference,
        cut_set=cut_set,
        binned=binned,
        mi=mi,
        dim_order=dim_order,
        order=order,
        hilbert=hilbert,
        counts=counts,
        proportions=proportions,
        js=js,
        complexity=complexity,
        bootstrap=boot,
        metadata=metadata,
    )
