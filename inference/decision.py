# inference/decision.py
"""
Score vector -> category decision.

A positive answer needs both an absolute floor (top >= min_confidence) and a
margin over the runner-up (top - second >= min_gap); otherwise "Other".
NaN scores never take either slot.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from expcat_core.models import Prediction
from expcat_utils.categories import OTHER, UNCATEGORIZED

MIN_CONFIDENCE = 0.4
MIN_GAP = 0.05


@dataclass(frozen=True)
class TopTwo:
    index: int
    best: float
    second: float

    @property
    def gap(self) -> float:
        return self.best - self.second


def top_two(scores: Sequence[float]) -> TopTwo:
    """
    Streaming max / second-max in one pass.
    Only strictly greater values move a slot, so on ties the earlier index keeps
    first place and an equal later value does not replace the current second.
    """
    best = -math.inf
    second = -math.inf
    index = 0
    for i, s in enumerate(scores):
        if s > best:
            second = best
            best = s
            index = i
        elif s > second:
            second = s
    return TopTwo(index=index, best=best, second=second)


def safe_max(scores: Sequence[float]) -> float:
    """max() ignoring NaN; 0.0 for an empty or all-NaN vector."""
    vals = [s for s in scores if not math.isnan(s)]
    return max(vals) if vals else 0.0


def top_k(scores: Sequence[float], labels: Sequence[str], k: int = 3) -> List[Tuple[str, float]]:
    pairs = [(labels[i], s) for i, s in enumerate(scores) if not math.isnan(s)]
    pairs.sort(key=lambda p: p[1], reverse=True)
    return pairs[:k]


def decide(
    scores: Sequence[float],
    labels: Sequence[str],
    label_mapping: Optional[Dict[str, str]] = None,
    min_confidence: float = MIN_CONFIDENCE,
    min_gap: float = MIN_GAP,
) -> Prediction:
    if len(scores) != len(labels):
        return Prediction(category=UNCATEGORIZED, confidence=safe_max(scores))

    tt = top_two(scores)
    confidence = tt.best if math.isfinite(tt.best) or tt.best > 0 else 0.0

    if tt.best < min_confidence or tt.gap < min_gap:
        return Prediction(category=OTHER, confidence=confidence)

    raw = labels[tt.index]
    mapping = label_mapping or {}
    return Prediction(category=mapping.get(raw) or raw, confidence=confidence, raw_label=raw)
