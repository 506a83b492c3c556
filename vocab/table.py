# vocab/table.py
"""
Fixed vocabulary table: token -> feature index.

Index 0 is padding and index 1 is the unknown token; both are reserved and
never produced by a lookup for real text.
"""
from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Tuple, Union

from expcat_core.errors import AssetError

PAD_INDEX = 0
UNK_INDEX = 1
PAD_TOKEN = ""
UNK_TOKEN = "[UNK]"


class Vocabulary:
    """Immutable token table that remembers the order tokens were stored in."""

    def __init__(self, entries: Iterable[Tuple[str, int]]):
        self._entries: List[Tuple[str, int]] = []
        self._index: Dict[str, int] = {}
        for token, idx in entries:
            token = str(token)
            idx = int(idx)
            self._entries.append((token, idx))
            # later duplicates win, like building a dict from the list
            self._index[token] = idx
        self._size = max((i for _, i in self._entries), default=-1) + 1

    @classmethod
    def from_list(cls, tokens: Iterable[str]) -> "Vocabulary":
        return cls((tok, i) for i, tok in enumerate(tokens))

    @classmethod
    def from_mapping(cls, mapping: Dict[str, int]) -> "Vocabulary":
        return cls(mapping.items())

    @classmethod
    def load(cls, path: Union[str, Path]) -> "Vocabulary":
        """Read vocab.json: a JSON array (position = index) or a {token: index} object."""
        p = Path(path)
        if not p.exists():
            raise AssetError("Vocabulary file not found", path=str(p))
        try:
            data = json.loads(p.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise AssetError(f"Cannot read vocabulary: {e}", path=str(p)) from e

        if isinstance(data, list):
            return cls.from_list(data)
        if isinstance(data, dict):
            try:
                return cls.from_mapping(data)
            except (TypeError, ValueError) as e:
                raise AssetError(
                    f"Vocabulary indices must be integers: {e}", path=str(p)
                ) from e
        raise AssetError("Vocabulary must be a JSON array or object", path=str(p))

    def save(self, path: Union[str, Path]) -> None:
        p = Path(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(
            json.dumps(self.tokens(), ensure_ascii=False, indent=0), encoding="utf-8"
        )

    def get(self, token: str) -> Optional[int]:
        return self._index.get(token)

    def __contains__(self, token: object) -> bool:
        return token in self._index

    def __len__(self) -> int:
        return self._size

    def __iter__(self) -> Iterator[Tuple[str, int]]:
        """(token, index) pairs in stored order."""
        return iter(self._entries)

    def tokens(self) -> List[str]:
        """Tokens laid out by index; gaps are filled with empty strings."""
        out = [PAD_TOKEN] * self._size
        for token, idx in self._entries:
            if idx >= 0:
                out[idx] = token
        return out
