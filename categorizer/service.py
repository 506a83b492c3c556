# categorizer/service.py
"""
Categorizer service: learned corrections first, model second.
"""
from __future__ import annotations

import logging
from typing import Optional

from config.settings import Settings
from expcat_core.errors import ModelLoadError
from expcat_core.models import Suggestion
from expcat_utils.categories import OTHER, category_key, category_label
from inference.assets import build_classifier
from inference.classifier import TextClassifier
from learning.corrections import CorrectionMemory
from storage import open_store

log = logging.getLogger("categorizer")


class CategorizerService:
    """Suggest a category for an expense name and remember user overrides."""

    def __init__(self, classifier: TextClassifier, memory: CorrectionMemory):
        self.classifier = classifier
        self.memory = memory

    @classmethod
    def from_settings(cls, settings: Settings) -> "CategorizerService":
        classifier = build_classifier(settings)
        store = open_store(settings.corrections_backend, settings.corrections_path)
        memory = CorrectionMemory(
            store,
            key=settings.corrections_key,
            capacity=settings.corrections_capacity,
            min_partial_length=settings.min_partial_length,
        )
        return cls(classifier, memory)

    def close(self) -> None:
        """Release the correction store (closes a SQLite connection)."""
        close = getattr(self.memory.store, "close", None)
        if close is not None:
            close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def warm_up(self) -> bool:
        """Load the model ahead of the first request. Returns False on failure."""
        try:
            self.classifier.load_model()
            return True
        except ModelLoadError as e:
            log.warning("Model warm-up failed: %s", e)
            return False

    def suggest(self, text: str, use_learned: bool = True) -> Optional[Suggestion]:
        """
        Return a suggestion for text, or None for blank input.
        A model that cannot be loaded degrades to "Other" with source "unavailable".
        """
        if not text or not text.strip():
            return None

        if use_learned:
            learned = self.memory.get_learned_category(text)
            if learned:
                return Suggestion(
                    category=learned,
                    confidence=None,
                    source="learned",
                    category_key=category_key(learned),
                )

        try:
            pred = self.classifier.predict_category(text)
        except ModelLoadError as e:
            log.warning("Prediction unavailable: %s", e)
            return Suggestion(
                category=OTHER,
                confidence=0.0,
                source="unavailable",
                category_key=category_key(OTHER),
            )

        return Suggestion(
            category=pred.category,
            confidence=pred.confidence,
            source="model",
            category_key=category_key(pred.category),
        )

    def record_choice(self, text: str, predicted: str, chosen: str) -> bool:
        """
        Store a correction when the user picked something other than the
        suggestion. chosen may be a category key ("food") or a label ("Food").
        Returns True only when a correction was stored.
        """
        if not text or not text.strip() or not predicted or not chosen:
            return False
        if predicted.strip().lower() == chosen.strip().lower():
            return False
        label = category_label(chosen.strip())
        return self.memory.save_correction(text, predicted, label)
