# learning/corrections.py
"""
Correction memory: the user's explicit category choices, replayed for the same
or similar expense text before the model is consulted.

Stored as one JSON array under a fixed key:
  [{"text", "predictedCategory", "correctedCategory", "timestamp"}, ...]

Append order is eviction order (oldest first once over capacity).
Reads and writes are not locked: two concurrent writers can lose an update
(last write wins). Fine for a single user; wrap calls if that changes.
"""
from __future__ import annotations

import json
import logging
import time
from typing import Any, Callable, List, Optional

from expcat_core.models import Correction
from expcat_utils.normalizers import correction_key
from storage.kv_store import KeyValueStore

log = logging.getLogger("learning.corrections")

LEARNING_KEY = "category_corrections"
MAX_CORRECTIONS = 500


def _now_ms() -> int:
    return int(time.time() * 1000)


def _latest(matches: List[Correction]) -> Correction:
    # equal timestamps: the later append wins
    return max(enumerate(matches), key=lambda p: (p[1].timestamp, p[0]))[1]


class CorrectionMemory:
    def __init__(
        self,
        store: KeyValueStore,
        key: str = LEARNING_KEY,
        capacity: int = MAX_CORRECTIONS,
        min_partial_length: int = 0,
        clock: Callable[[], int] = _now_ms,
    ):
        self.store = store
        self.key = key
        self.capacity = int(capacity)
        self.min_partial_length = int(min_partial_length)
        self.clock = clock

    def _load_raw(self) -> List[Any]:
        """Stored log as raw JSON rows. Storage/JSON errors propagate to the caller."""
        raw = self.store.get_item(self.key)
        if not raw:
            return []
        data = json.loads(raw)
        if not isinstance(data, list):
            raise ValueError(f"stored corrections under '{self.key}' are not a list")
        return data

    def _load(self) -> List[Correction]:
        """Parsed log; rows that do not parse are skipped, not dropped from storage."""
        out: List[Correction] = []
        for i, row in enumerate(self._load_raw()):
            try:
                out.append(Correction.from_dict(row))
            except (KeyError, TypeError, ValueError) as e:
                log.warning("Skipping malformed correction #%d: %s", i, e)
        return out

    def save_correction(
        self, text: str, predicted_category: str, corrected_category: str
    ) -> bool:
        """
        Append a correction and persist the log. Never raises: a lost
        correction only weakens later suggestions. Returns True once stored.
        """
        try:
            rows = self._load_raw()
            rows.append(
                Correction(
                    text=correction_key(text),
                    predicted_category=predicted_category,
                    corrected_category=corrected_category,
                    timestamp=int(self.clock()),
                ).to_dict()
            )
            if len(rows) > self.capacity:
                del rows[: len(rows) - self.capacity]
            self.store.set_item(self.key, json.dumps(rows, ensure_ascii=False))
            return True
        except Exception as e:
            log.error("Error saving correction: %s", e)
            return False

    save_category_correction = save_correction

    def get_learned_category(self, text: str) -> Optional[str]:
        """
        Exact text match first, then substring match either way round; the
        most recent record wins within each pass. None when nothing matches
        or the log cannot be read.
        """
        try:
            corrections = self._load()
        except Exception as e:
            log.error("Error getting learned category: %s", e)
            return None
        if not corrections:
            return None

        normalized = correction_key(text)

        exact = [c for c in corrections if c.text == normalized]
        if exact:
            return _latest(exact).corrected_category

        partial = [c for c in corrections if self._partial_match(normalized, c.text)]
        if partial:
            return _latest(partial).corrected_category or None
        return None

    def _partial_match(self, normalized: str, stored: str) -> bool:
        if self.min_partial_length and (
            len(normalized) < self.min_partial_length
            or len(stored) < self.min_partial_length
        ):
            return False
        return stored in normalized or normalized in stored

    def corrections(self) -> List[Correction]:
        """Current log, oldest first; empty if it cannot be read."""
        try:
            return self._load()
        except Exception as e:
            log.error("Error reading corrections: %s", e)
            return []

    def __len__(self) -> int:
        return len(self.corrections())
