# tokenizer/encoder.py
"""
Expense name -> fixed-width multi-hot feature vector.

  "Uber to airport" -> words  [uber, to, airport]
                    -> tokens [uber, "uber to", to, "to airport", airport]
                    -> buffer[index(token)] = 1 for every resolved token

Unresolved tokens land on the unknown index (1). Index 0 (padding) is never set.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Sequence

import numpy as np

from expcat_core.models import ElementKind, TensorSpec, TokenStats
from expcat_utils.normalizers import ngram_tokens, split_words
from vocab.resolver import TokenResolver
from vocab.table import UNK_INDEX, Vocabulary

log = logging.getLogger("tokenizer")


@dataclass
class Encoding:
    buffer: np.ndarray
    stats: TokenStats


def allocate_buffer(spec: Optional[TensorSpec], vocab_size: int) -> np.ndarray:
    """Zero-filled 1-D buffer sized to the input shape (vocab size when unknown)."""
    kind = spec.kind if spec is not None else ElementKind.FLOAT32
    width = spec.width if spec is not None else 0
    return np.zeros(width or vocab_size, dtype=kind.dtype)


class Tokenizer:
    def __init__(self, resolver: TokenResolver):
        self.resolver = resolver

    @property
    def vocab(self) -> Vocabulary:
        return self.resolver.vocab

    def encode(self, text: str, spec: Optional[TensorSpec] = None) -> Encoding:
        words = split_words(text)
        tokens = ngram_tokens(words)

        buf = allocate_buffer(spec, len(self.vocab))
        width = buf.shape[0]
        unknown = 0

        for token in tokens:
            idx = self.resolver.resolve(token)
            if idx is None:
                idx = UNK_INDEX
            if idx == UNK_INDEX:
                unknown += 1
            if idx < 0 or idx >= width:
                continue
            buf[idx] = 1

        stats = TokenStats(
            total=len(tokens),
            unknown=unknown,
            non_zero=int(np.count_nonzero(buf)),
            sample=words[:6],
            kind=ElementKind.parse(buf.dtype),
            width=width,
        )
        if words:
            log.debug(
                "token stats: total=%d unknown=%d non_zero=%d width=%d kind=%s sample=%s",
                stats.total,
                stats.unknown,
                stats.non_zero,
                stats.width,
                stats.kind.value,
                stats.sample,
            )
        return Encoding(buffer=buf, stats=stats)

    def tokenize(self, text: str, spec: Optional[TensorSpec] = None) -> np.ndarray:
        return self.encode(text, spec).buffer


def tokenize(
    text: str,
    vocab: Vocabulary,
    shape: Optional[Sequence[int]] = None,
    kind: Optional[str] = None,
    aliases: Optional[Dict[str, str]] = None,
) -> np.ndarray:
    """Functional form: encode text against vocab for a target shape/element type."""
    spec = TensorSpec(
        shape=tuple(shape) if shape else None, kind=ElementKind.parse(kind)
    )
    return Tokenizer(TokenResolver(vocab, aliases)).tokenize(text, spec)
