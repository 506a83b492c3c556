# vocab/resolver.py
"""
Token -> vocabulary index resolution.

Order of attempts (first hit wins):
  1. alias table (always applied first)
  2. exact lookup
  3. suffix stripping: "ies" -> "y", then "es", then "s"
  4. fuzzy match: first vocabulary word (stored order) within edit distance 1
"""
from __future__ import annotations

import logging
from typing import Dict, Optional

from rapidfuzz.distance import Levenshtein

from .table import Vocabulary

log = logging.getLogger("vocab.resolver")


class TokenResolver:
    def __init__(
        self,
        vocab: Vocabulary,
        aliases: Optional[Dict[str, str]] = None,
        max_edit_distance: int = 1,
        length_window: int = 2,
    ):
        self.vocab = vocab
        self.aliases = dict(aliases or {})
        self.max_edit_distance = int(max_edit_distance)
        self.length_window = int(length_window)

    def resolve(self, token: str) -> Optional[int]:
        """Return the vocabulary index for token, or None if nothing matches."""
        normalized = self.aliases.get(token, token)

        idx = self.vocab.get(normalized)
        if idx is not None:
            return idx

        idx = self._strip_suffix(normalized)
        if idx is not None:
            return idx

        if len(normalized) > 3:
            return self._fuzzy(normalized)
        return None

    __call__ = resolve

    def _strip_suffix(self, token: str) -> Optional[int]:
        # each rule is tried when its suffix matches; "movies" misses on
        # "movy" and "movi" before landing on "movie"
        n = len(token)
        if n > 3 and token.endswith("ies"):
            idx = self.vocab.get(token[:-3] + "y")
            if idx is not None:
                return idx
        if n > 3 and token.endswith("es"):
            idx = self.vocab.get(token[:-2])
            if idx is not None:
                return idx
        if n > 2 and token.endswith("s"):
            idx = self.vocab.get(token[:-1])
            if idx is not None:
                return idx
        return None

    def _fuzzy(self, token: str) -> Optional[int]:
        best_idx: Optional[int] = None
        best_distance = self.max_edit_distance + 1
        for word, _ in self.vocab:
            if abs(len(word) - len(token)) > self.length_window:
                continue
            distance = Levenshtein.distance(
                token, word, score_cutoff=self.max_edit_distance
            )
            if distance < best_distance:
                best_distance = distance
                # the table's final index for this word, not the entry's
                best_idx = self.vocab.get(word)
        if best_idx is not None:
            log.debug("fuzzy match %r -> index %s (distance %s)", token, best_idx, best_distance)
        return best_idx


def resolve_token(
    token: str, vocab: Vocabulary, aliases: Optional[Dict[str, str]] = None
) -> Optional[int]:
    """One-off resolution with default fuzzy settings."""
    return TokenResolver(vocab, aliases).resolve(token)
