from __future__ import annotations

import json
from pathlib import Path

import numpy as np
import pytest

from hilbertsim.config import load_analysis_config, load_json_config
from hilbertsim.core.binning import make_cuts
from hilbertsim.core.errors import ConfigurationError
from hilbertsim.core.types import AnalysisConfig


def test_load_project_configs():
    root = Path(__file__).resolve().parents[1]
    default_cfg = load_json_config(root / "configs" / "hilbertsim_default.json")
    combined_cfg = load_analysis_config(root / "configs" / "hilbertsim_combined.json")
    assert AnalysisConfig.from_dict(default_cfg) == AnalysisConfig()
    assert combined_cfg.cut_mode == "combined"
    assert combined_cfg.n_rep == 400


def test_invalid_json_reports_line_and_column(tmp_path: Path):
    bad = tmp_path / "bad.json"
    bad.write_text('{"a": 1,}\n', encoding="utf-8")
    with pytest.raises(ValueError, match=r"line \d+, column \d+"):
        load_json_config(bad)


def test_non_object_json_config_rejected(tmp_path: Path):
    bad = tmp_path / "list.json"
    bad.write_text(json.dumps([1, 2, 3]), encoding="utf-8")
    with pytest.raises(ValueError, match="expected JSON object"):
        load_json_config(bad)


def test_non_json_extension_rejected(tmp_path: Path):
    bad = tmp_path / "cfg.yaml"
    bad.write_text("{}", encoding="utf-8")
    with pytest.raises(ValueError, match="Use a .json config file"):
        load_json_config(bad)


def test_missing_config_file(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_json_config(tmp_path / "absent.json")


def test_overrides_and_unknown_keys(tmp_path: Path):
    cfg_path = tmp_path / "cfg.json"
    cfg_path.write_text(
        json.dumps({"n_bins": 4, "cut_mode": "combined", "groups": [["CD3", "CD4"]]}),
        encoding="utf-8",
    )
    cfg = load_analysis_config(cfg_path, n_rep=25, seed=None)
    assert cfg.n_bins == 4
    assert cfg.n_rep == 25
    assert cfg.seed == 0
    assert cfg.groups == (("CD3", "CD4"),)
    assert cfg.to_dict()["groups"] == [["CD3", "CD4"]]

    cfg_path.write_text(json.dumps({"bins": 4}), encoding="utf-8")
    with pytest.raises(ConfigurationError, match="Unknown config keys: bins"):
        load_analysis_config(cfg_path)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"n_bins": 0},
        {"cut_mode": "fixed"},
        {"groups": (("a",),)},
        {"order": 0},
        {"n_rep": 0},
        {"flim": 1.0},
        {"p": 1.0},
        {"round_to": 0},
        {"n_jobs": 0},
    ],
)
def test_invalid_parameters_rejected(kwargs):
    with pytest.raises(ConfigurationError):
        AnalysisConfig(**kwargs)


def test_integer_groups_from_json_are_channel_positions(tmp_path: Path):
    cfg_path = tmp_path / "cfg.json"
    cfg_path.write_text(
        json.dumps({"cut_mode": "combined", "groups": [[0, 1]], "n_rep": 10}),
        encoding="utf-8",
    )
    cfg = load_analysis_config(cfg_path)
    assert cfg.groups == ((0, 1),)

    rng = np.random.default_rng(0)
    mat = rng.lognormal(size=(300, 3))
    cut_set = make_cuts(
        mat, cfg.n_bins, cfg.count_lim, mode=cfg.cut_mode, groups=cfg.groups
    )
    assert cut_set.groups == ((0, 1),)
    np.testing.assert_array_equal(cut_set.cuts[0], cut_set.cuts[1])

    named = AnalysisConfig.from_dict({"cut_mode": "combined", "groups": [["dim0", 2]]})
    assert named.groups == (("dim0", 2),)
