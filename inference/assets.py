# inference/assets.py
# Build-time assets: vocab.json, labels.json and the serialized model.

from __future__ import annotations

import json
from pathlib import Path
from typing import List, Optional, Union

from config.settings import Settings
from expcat_core.errors import AssetError
from tokenizer.encoder import Tokenizer
from vocab.resolver import TokenResolver
from vocab.table import Vocabulary

from .classifier import TextClassifier
from .model import ModelHandle, shared_handle


def load_labels(path: Union[str, Path]) -> List[str]:
    p = Path(path)
    if not p.exists():
        raise AssetError("Label file not found", path=str(p))
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise AssetError(f"Cannot read labels: {e}", path=str(p)) from e
    if not isinstance(data, list) or not all(isinstance(x, str) for x in data):
        raise AssetError("Labels must be a JSON array of strings", path=str(p))
    return data


def save_labels(labels: List[str], path: Union[str, Path]) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(list(labels), ensure_ascii=False, indent=2), encoding="utf-8")


def build_classifier(
    settings: Settings, handle: Optional[ModelHandle] = None
) -> TextClassifier:
    """
    Wire vocabulary, tokenizer, labels and model handle from settings.
    The model itself is not loaded here; it loads on first use.
    """
    vocab = Vocabulary.load(settings.vocab_path)
    labels = load_labels(settings.labels_path)
    resolver = TokenResolver(
        vocab,
        aliases=settings.token_aliases,
        max_edit_distance=settings.max_edit_distance,
        length_window=settings.length_window,
    )
    return TextClassifier(
        handle=handle or shared_handle(settings.model_path),
        tokenizer=Tokenizer(resolver),
        labels=labels,
        label_mapping=settings.label_mapping,
        min_confidence=settings.min_confidence,
        min_gap=settings.min_gap,
    )
