# inference/classifier.py
"""
Text classifier: tokenize -> run model -> confidence-gated decision.
"""
from __future__ import annotations

import logging
from typing import Dict, List, Optional

from expcat_core.models import Prediction
from tokenizer.encoder import Tokenizer

from .decision import MIN_CONFIDENCE, MIN_GAP, decide, top_k
from .model import ModelHandle

log = logging.getLogger("inference.classifier")


class TextClassifier:
    def __init__(
        self,
        handle: ModelHandle,
        tokenizer: Tokenizer,
        labels: List[str],
        label_mapping: Optional[Dict[str, str]] = None,
        min_confidence: float = MIN_CONFIDENCE,
        min_gap: float = MIN_GAP,
    ):
        self.handle = handle
        self.tokenizer = tokenizer
        self.labels = list(labels)
        self.label_mapping = dict(label_mapping or {})
        self.min_confidence = float(min_confidence)
        self.min_gap = float(min_gap)

    def load_model(self) -> None:
        """Idempotent. Raises ModelLoadError if the model cannot be loaded."""
        self.handle.load()

    @property
    def is_loaded(self) -> bool:
        return self.handle.is_loaded

    def predict_category(self, text: str) -> Prediction:
        if not self.handle.is_loaded:
            self.handle.load()

        buf = self.tokenizer.tokenize(text, self.handle.input_spec)
        scores = self.handle.run(buf)

        if len(scores) != len(self.labels):
            log.warning(
                "Label/output size mismatch: labels=%d outputs=%d",
                len(self.labels),
                len(scores),
            )
        elif log.isEnabledFor(logging.DEBUG):
            log.debug("Prediction top3: %s", top_k(scores, self.labels, 3))

        return decide(
            scores,
            self.labels,
            self.label_mapping,
            min_confidence=self.min_confidence,
            min_gap=self.min_gap,
        )
