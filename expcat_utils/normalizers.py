# expcat_utils/normalizers.py
# Text normalization shared by the tokenizer, the trainer and correction memory.

from __future__ import annotations

import re
from typing import List

_NON_TOKEN_CHARS = re.compile(r"[^a-z0-9 ]")


def clean_text(text: str) -> str:
    """Lowercase and drop everything outside [a-z0-9 ]."""
    if not isinstance(text, str):
        text = str(text or "")
    return _NON_TOKEN_CHARS.sub("", text.lower())


def split_words(text: str) -> List[str]:
    return clean_text(text).split()


def ngram_tokens(words: List[str]) -> List[str]:
    """
    Unigrams and adjacent bigrams, left to right:
      ["uber", "to", "airport"] -> ["uber", "uber to", "to", "to airport", "airport"]
    """
    tokens: List[str] = []
    for i, word in enumerate(words):
        tokens.append(word)
        if i + 1 < len(words):
            tokens.append(f"{word} {words[i + 1]}")
    return tokens


def correction_key(text: str) -> str:
    """Key used to store and look up corrections: lowercase + trim only."""
    if not isinstance(text, str):
        text = str(text or "")
    return text.lower().strip()
