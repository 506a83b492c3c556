from __future__ import annotations
import copy
import tomllib
from pathlib import Path
from typing import Any, Dict

import yaml

from expcat_core.errors import ConfigurationError

REPO = Path(__file__).resolve().parents[1]
DEFAULT_CONFIG = REPO / "config.toml"

DEFAULTS: Dict[str, Any] = {
    "paths": {
        "assets_dir": "assets",
        "vocab": "assets/vocab.json",
        "labels": "assets/labels.json",
        "model": "assets/model.joblib",
        "tables": "config/classifier.yaml",
    },
    "classifier": {"min_confidence": 0.4, "min_gap": 0.05},
    "vocab": {"max_edit_distance": 1, "length_window": 2},
    "corrections": {
        "backend": "sqlite",
        "path": "data/expcat.sqlite",
        "key": "category_corrections",
        "capacity": 500,
        "min_partial_length": 0,
    },
    "logging": {"level": "INFO"},
}

DEFAULT_TABLES: Dict[str, Dict[str, str]] = {
    "label_mapping": {
        "Food & Drink": "Food",
        "Groceries": "Bills",
        "Bills & Utilities": "Bills",
        "Services": "Other",
        "Travel": "Transport",
    },
    "token_aliases": {
        "phone": "mobile",
        "phones": "mobile",
        "cellphone": "mobile",
        "cell": "mobile",
    },
}


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    out = copy.deepcopy(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _merge(out[k], v)
        else:
            out[k] = v
    return out


def load_config(config_path: Path | None = None) -> Dict[str, Any]:
    """
    Load config.toml (repo root by default) merged over built-in defaults.
    A missing default file yields the defaults; a missing explicit path is an error.
    The folder holding the file is recorded under "_base_dir" for relative paths.
    """
    explicit = config_path is not None
    if config_path is None:
        config_path = DEFAULT_CONFIG
    config_path = Path(config_path)

    if not config_path.exists():
        if explicit:
            raise ConfigurationError(
                f"Config not found: {config_path}",
                parameter="config_path",
                suggested_fix="Pass an existing config.toml or omit --config",
            )
        cfg = copy.deepcopy(DEFAULTS)
        cfg["_base_dir"] = str(REPO)
        return cfg

    try:
        with config_path.open("rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(
            f"Cannot parse {config_path}: {e}", parameter="config_path"
        ) from e

    cfg = _merge(DEFAULTS, data)
    cfg["_base_dir"] = str(config_path.resolve().parent)
    return cfg


def load_tables(tables_path: Path | None) -> Dict[str, Dict[str, str]]:
    """
    Load label_mapping and token_aliases from YAML. Missing file -> built-in tables.
    """
    tables = copy.deepcopy(DEFAULT_TABLES)
    if tables_path is None:
        return tables
    p = Path(tables_path)
    if not p.exists():
        return tables

    with open(p, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Cannot parse {p}: {e}", parameter="tables"
            ) from e

    if not isinstance(data, dict):
        raise ConfigurationError(
            f"{p} must contain a mapping at the top level", parameter="tables"
        )

    for name in ("label_mapping", "token_aliases"):
        if name not in data:
            continue
        section = data[name] or {}
        if not isinstance(section, dict):
            raise ConfigurationError(
                f"'{name}' in {p} must be a mapping",
                parameter=name,
                suggested_fix="Use 'key: value' pairs",
            )
        tables[name] = {str(k): str(v) for k, v in section.items()}
    return tables
