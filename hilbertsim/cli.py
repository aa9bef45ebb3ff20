"""Command-line interface for hilbertsim analyses."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Iterable

import matplotlib

# Use a non-interactive backend for reproducible headless runs.
matplotlib.use("Agg")

from hilbertsim.config import load_analysis_config
from hilbertsim.core.errors import HilbertSimError
from hilbertsim.pipeline.analysis import run_analysis
from hilbertsim.pipeline.io import (
    ensure_dir,
    read_csv_samples,
    read_h5ad_samples,
    setup_logger,
    write_analysis_outputs,
)
from hilbertsim.plotting import (
    apply_plot_style,
    plot_bootstrap_signs,
    plot_cuts,
    plot_js_heatmap,
)


def _read_samples(path: str, condition_key: str | None, channels: list[str] | None, layer: str | None):
    suffix = Path(path).suffix.lower()
    if suffix == ".h5ad":
        return read_h5ad_samples(path, condition_key, channels=channels, layer=layer)
    if suffix in {".csv", ".tsv", ".txt"}:
        if condition_key is None:
            raise ValueError("--condition-key is required for tabular input.")
        return read_csv_samples(path, condition_key, channels=channels)
    raise ValueError(f"Unsupported input format '{suffix}'. Use .h5ad or .csv.")


def run_main(argv: Iterable[str] | None = None) -> int:
    """Run the full analysis and write tables, summary and figures.

    Args:
        argv: Command-line arguments (if None, uses sys.argv).

    Returns:
        Exit code (0 for success).
    """
    parser = argparse.ArgumentParser(description="hilbertsim analysis")
    parser.add_argument("--input", required=True, help="Path to .h5ad or .csv file")
    parser.add_argument(
        "--condition-key",
        default=None,
        help="obs column (h5ad) or table column (csv) holding condition labels",
    )
    parser.add_argument("--channels", nargs="+", default=None, help="Channels to use")
    parser.add_argument("--layer", default=None, help="AnnData layer to read instead of X")
    parser.add_argument("--config", default=None, help="JSON analysis config")
    parser.add_argument("--reference", default=None, help="Reference condition label")
    parser.add_argument("--n-bins", type=int, default=None, help="Bins per channel")
    parser.add_argument("--n-rep", type=int, default=None, help="Bootstrap repetitions")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--n-jobs", type=int, default=None, help="Parallel bootstrap workers")
    parser.add_argument("--outdir", default="hilbertsim_out", help="Output directory")
    parser.add_argument("--no-plots", action="store_true", help="Skip figure output")
    args = parser.parse_args(list(argv) if argv is not None else None)

    outdir = Path(args.outdir)
    ensure_dir(outdir)
    logger = setup_logger(outdir / "logs" / "hilbertsim.log", "hilbertsim")

    config = load_analysis_config(
        args.config,
        reference=args.reference,
        n_bins=args.n_bins,
        n_rep=args.n_rep,
        seed=args.seed,
        n_jobs=args.n_jobs,
    )
    samples, labels = _read_samples(args.input, args.condition_key, args.channels, args.layer)
    logger.info("Loaded %s: %d cells x %d channels", args.input, samples.shape[0], samples.shape[1])

    try:
        result = run_analysis(samples, labels, config, logger=logger)
    except HilbertSimError as exc:
        logger.error("Analysis aborted: %s", exc)
        return 2

    paths = write_analysis_outputs(result, outdir)
    logger.info("Wrote summary to %s", paths["summary"].as_posix())

    if not args.no_plots:
        apply_plot_style()
        fig_dir = outdir / "figures"
        plot_cuts(samples, result.cut_set, out_png=fig_dir / "cuts.png")
        plot_js_heatmap(result.js, out_png=fig_dir / "js_distance.png")
        tested = set(result.bootstrap.table["condition"])
        for cond in result.counts.columns[1:]:
            if str(cond) not in tested:
                continue
            plot_bootstrap_signs(
                result.bootstrap,
                str(cond),
                out_png=fig_dir / f"bootstrap_{cond}.png",
            )
        logger.info("Figures written to %s", fig_dir.as_posix())

    n_sig = int(result.bootstrap.table["significant"].sum())
    print(f"reference={result.reference}")
    print(f"n_indices={result.counts.shape[0]}")
    print(f"n_significant={n_sig}")
    return 0


def main(argv: Iterable[str] | None = None) -> int:
    """Main CLI entry point.

    Args:
        argv: Command-line arguments (if None, uses sys.argv).

    Returns:
        Exit code.
    """
    parser = argparse.ArgumentParser(description="hilbertsim CLI")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("run", help="Run binning, Hilbert indexing, similarity and bootstrap")

    args, remainder = parser.parse_known_args(list(argv) if argv is not None else None)
    if args.command == "run":
        return run_main(remainder)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
