# expcat_utils/categories.py
# User-facing category list. Model labels are remapped onto these names
# (see config/classifier.yaml); anything else is passed through verbatim.

from __future__ import annotations

from typing import Optional

APP_CATEGORIES = {
    "food": "Food",
    "transport": "Transport",
    "shopping": "Shopping",
    "entertainment": "Entertainment",
    "bills": "Bills",
    "health": "Health",
    "education": "Education",
    "other": "Other",
}

OTHER = "Other"
UNCATEGORIZED = "Uncategorized"


def category_key(name: Optional[str]) -> Optional[str]:
    """Return the app category key for a label or key (case-insensitive), else None."""
    if not name:
        return None
    n = name.strip().lower()
    if n in APP_CATEGORIES:
        return n
    for key, label in APP_CATEGORIES.items():
        if label.lower() == n:
            return key
    return None


def category_label(name: Optional[str]) -> Optional[str]:
    """Translate an app category key to its label; unknown names come back unchanged."""
    key = category_key(name)
    if key is None:
        return name
    return APP_CATEGORIES[key]
