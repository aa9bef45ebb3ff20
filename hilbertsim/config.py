"""Configuration loading utilities for hilbertsim analyses."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from hilbertsim.core.types import AnalysisConfig


def load_json_config(path: str | Path) -> dict[str, Any]:
    """Load a JSON config file and check that its root is an object."""
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")
    if config_path.suffix.lower() != ".json":
        raise ValueError(
            f"Unsupported config format for '{config_path}'. Use a .json config file."
        )

    try:
        with open(config_path, "r", encoding="utf-8") as fh:
            data = json.load(fh)
    except json.JSONDecodeError as exc:
        raise ValueError(
            f"Invalid JSON in config '{config_path}' at line {exc.lineno}, "
            f"column {exc.colno}: {exc.msg}"
        ) from exc

    if not isinstance(data, dict):
        raise ValueError(
            f"Invalid config root in '{config_path}': expected JSON object, got {type(data).__name__}."
        )
    return data


def load_analysis_config(
    path: str | Path | None = None,
    **overrides: Any,
) -> AnalysisConfig:
    """Build an `AnalysisConfig` from an optional JSON file plus keyword overrides.

    Overrides set to `None` are ignored so CLI defaults do not mask file values.
    """
    data: dict[str, Any] = {} if path is None else load_json_config(path)
    data.update({k: v for k, v in overrides.items() if v is not None})
    return AnalysisConfig.from_dict(data)
