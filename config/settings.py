"""Resolved, validated runtime settings built from config.toml."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from expcat_core.errors import ConfigurationError

from .loader import load_config, load_tables

BACKENDS = ("sqlite", "json", "memory")


@dataclass
class Settings:
    vocab_path: Path
    labels_path: Path
    model_path: Path
    tables_path: Optional[Path] = None
    assets_dir: Optional[Path] = None

    min_confidence: float = 0.4
    min_gap: float = 0.05

    max_edit_distance: int = 1
    length_window: int = 2

    corrections_backend: str = "sqlite"
    corrections_path: Optional[Path] = None
    corrections_key: str = "category_corrections"
    corrections_capacity: int = 500
    min_partial_length: int = 0

    log_level: str = "INFO"

    label_mapping: Dict[str, str] = field(default_factory=dict)
    token_aliases: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        self._validate_thresholds()
        self._validate_vocab()
        self._validate_corrections()

    def _validate_thresholds(self):
        if not (0.0 <= self.min_confidence <= 1.0):
            raise ConfigurationError(
                f"min_confidence ({self.min_confidence}) must be between 0 and 1",
                parameter="classifier.min_confidence",
                suggested_fix="Use a probability such as 0.4",
            )
        if not (0.0 <= self.min_gap <= 1.0):
            raise ConfigurationError(
                f"min_gap ({self.min_gap}) must be between 0 and 1",
                parameter="classifier.min_gap",
                suggested_fix="Use a probability margin such as 0.05",
            )

    def _validate_vocab(self):
        if self.max_edit_distance < 0:
            raise ConfigurationError(
                f"max_edit_distance ({self.max_edit_distance}) must not be negative",
                parameter="vocab.max_edit_distance",
            )
        if self.length_window < 0:
            raise ConfigurationError(
                f"length_window ({self.length_window}) must not be negative",
                parameter="vocab.length_window",
            )

    def _validate_corrections(self):
        if self.corrections_backend not in BACKENDS:
            raise ConfigurationError(
                f"Unknown corrections backend '{self.corrections_backend}'",
                parameter="corrections.backend",
                suggested_fix=f"Use one of: {', '.join(BACKENDS)}",
            )
        if self.corrections_backend != "memory" and self.corrections_path is None:
            raise ConfigurationError(
                f"Backend '{self.corrections_backend}' needs a path",
                parameter="corrections.path",
            )
        if self.corrections_capacity <= 0:
            raise ConfigurationError(
                f"capacity ({self.corrections_capacity}) must be a positive integer",
                parameter="corrections.capacity",
                suggested_fix="Set capacity to 500",
            )
        if self.min_partial_length < 0:
            raise ConfigurationError(
                f"min_partial_length ({self.min_partial_length}) must not be negative",
                parameter="corrections.min_partial_length",
            )

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "Settings":
        base = Path(cfg.get("_base_dir", "."))

        def _path(value: Any) -> Optional[Path]:
            if value in (None, ""):
                return None
            p = Path(value)
            return p if p.is_absolute() else base / p

        paths = cfg["paths"]
        clf = cfg["classifier"]
        voc = cfg["vocab"]
        corr = cfg["corrections"]
        tables_path = _path(paths.get("tables"))
        tables = load_tables(tables_path)

        try:
            return cls(
                vocab_path=_path(paths["vocab"]),
                labels_path=_path(paths["labels"]),
                model_path=_path(paths["model"]),
                tables_path=tables_path,
                assets_dir=_path(paths.get("assets_dir")),
                min_confidence=float(clf["min_confidence"]),
                min_gap=float(clf["min_gap"]),
                max_edit_distance=int(voc["max_edit_distance"]),
                length_window=int(voc["length_window"]),
                corrections_backend=str(corr["backend"]).lower(),
                corrections_path=_path(corr.get("path")),
                corrections_key=str(corr["key"]),
                corrections_capacity=int(corr["capacity"]),
                min_partial_length=int(corr["min_partial_length"]),
                log_level=str(cfg.get("logging", {}).get("level", "INFO")).upper(),
                label_mapping=tables["label_mapping"],
                token_aliases=tables["token_aliases"],
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid config value: {e}") from e


def load_settings(config_path: Path | None = None) -> Settings:
    return Settings.from_config(load_config(config_path))
