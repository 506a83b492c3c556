"""
trainer.py
----------

Builds the three assets the classifier loads at startup:

  vocab.json    ["", "[UNK]", most frequent unigrams/bigrams...]
  labels.json   label names in the model's output order
  model.joblib  {"model": MLPClassifier, "input_dtype": "float32", ...}

Training examples are encoded with the same tokenizer used at inference, so
suffix stripping, aliases and fuzzy matching behave identically on both sides.

Input is a CSV with ``Description`` and ``Category`` columns, or the built-in
samples from ``training/samples.py`` when no CSV is given.
"""
from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import joblib
import numpy as np
import pandas as pd
from sklearn.neural_network import MLPClassifier

from expcat_core.models import ElementKind, TensorSpec
from expcat_utils.normalizers import ngram_tokens, split_words
from inference.assets import save_labels
from tokenizer.encoder import Tokenizer
from vocab.resolver import TokenResolver
from vocab.table import PAD_TOKEN, UNK_TOKEN, Vocabulary

from .samples import TRAINING_DATA

log = logging.getLogger("training")

REQUIRED_COLUMNS = {"Description", "Category"}


@dataclass
class TrainResult:
    vocab_path: Path
    labels_path: Path
    model_path: Path
    samples: int
    vocab_size: int
    labels: List[str]
    train_accuracy: float


def load_training_data(path: Optional[str | Path]) -> pd.DataFrame:
    """Load labelled expense names from a CSV or from the built-in sample list."""
    if path:
        df = pd.read_csv(path)
        if not REQUIRED_COLUMNS.issubset(set(df.columns)):
            raise ValueError(
                "Training CSV must contain Description and Category columns"
            )
        df = df[["Description", "Category"]].dropna()
    else:
        df = pd.DataFrame(TRAINING_DATA, columns=["Description", "Category"])
    df = df.astype(str)
    if df["Category"].nunique() < 2:
        raise ValueError("Training data needs at least two categories")
    return df


def build_vocabulary(
    texts: Iterable[str],
    max_tokens: int = 5000,
    aliases: Optional[Dict[str, str]] = None,
) -> Vocabulary:
    """
    Reserved entries first (padding, unknown), then tokens by descending
    frequency; ties break alphabetically so the table is reproducible.
    """
    aliases = aliases or {}
    counts: Counter = Counter()
    for text in texts:
        for token in ngram_tokens(split_words(text)):
            counts[aliases.get(token, token)] += 1

    ranked = sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))
    room = max(int(max_tokens) - 2, 0)
    tokens = [PAD_TOKEN, UNK_TOKEN] + [tok for tok, _ in ranked[:room]]
    return Vocabulary.from_list(tokens)


def encode_texts(
    texts: Iterable[str], tokenizer: Tokenizer, kind: ElementKind = ElementKind.FLOAT32
) -> np.ndarray:
    spec = TensorSpec(shape=(1, len(tokenizer.vocab)), kind=kind)
    rows = [tokenizer.tokenize(t, spec) for t in texts]
    return np.vstack(rows) if rows else np.zeros((0, len(tokenizer.vocab)), dtype=kind.dtype)


def train(
    data: pd.DataFrame,
    out_dir: str | Path,
    max_tokens: int = 5000,
    hidden: int = 64,
    max_iter: int = 500,
    seed: int = 42,
    aliases: Optional[Dict[str, str]] = None,
) -> TrainResult:
    out = Path(out_dir)
    out.mkdir(parents=True, exist_ok=True)

    texts = data["Description"].tolist()
    y = data["Category"].tolist()

    vocab = build_vocabulary(texts, max_tokens=max_tokens, aliases=aliases)
    tokenizer = Tokenizer(TokenResolver(vocab, aliases=aliases))
    X = encode_texts(texts, tokenizer)

    clf = MLPClassifier(
        hidden_layer_sizes=(int(hidden),),
        max_iter=int(max_iter),
        random_state=int(seed),
    )
    clf.fit(X, y)
    labels = [str(c) for c in clf.classes_]
    accuracy = float(clf.score(X, y))

    vocab_path = out / "vocab.json"
    labels_path = out / "labels.json"
    model_path = out / "model.joblib"

    vocab.save(vocab_path)
    save_labels(labels, labels_path)
    joblib.dump(
        {
            "model": clf,
            "input_dtype": ElementKind.FLOAT32.value,
            "labels": labels,
            "trained_at": datetime.now(timezone.utc).isoformat(),
            "samples": len(texts),
        },
        model_path,
    )

    log.info(
        "Model trained on %d samples (vocab=%d, labels=%d, train acc=%.3f) -> %s",
        len(texts),
        len(vocab),
        len(labels),
        accuracy,
        out,
    )
    return TrainResult(
        vocab_path=vocab_path,
        labels_path=labels_path,
        model_path=model_path,
        samples=len(texts),
        vocab_size=len(vocab),
        labels=labels,
        train_accuracy=accuracy,
    )
