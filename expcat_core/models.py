from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

import numpy as np


class ElementKind(str, Enum):
    """Numeric element types a model input tensor may declare."""

    INT32 = "int32"
    INT16 = "int16"
    UINT8 = "uint8"
    INT8 = "int8"
    FLOAT32 = "float32"
    FLOAT16 = "float16"
    FLOAT64 = "float64"

    @property
    def dtype(self) -> np.dtype:
        return np.dtype(self.value)

    @classmethod
    def parse(cls, value: Any) -> "ElementKind":
        """Map a dtype name (or numpy dtype) to a kind; float32 when unknown."""
        if isinstance(value, cls):
            return value
        if value is None:
            return cls.FLOAT32
        try:
            name = np.dtype(value).name
        except TypeError:
            name = str(value).strip().lower()
        try:
            return cls(name)
        except ValueError:
            return cls.FLOAT32


@dataclass(frozen=True)
class TensorSpec:
    shape: Optional[Tuple[int, ...]] = None
    kind: ElementKind = ElementKind.FLOAT32

    @property
    def width(self) -> int:
        """Flat element count; 0 when the shape is unknown."""
        if not self.shape:
            return 0
        n = 1
        for dim in self.shape:
            # dynamic (-1/None) or zero dims count as 1
            n *= dim if dim and dim > 0 else 1
        return n


@dataclass
class TokenStats:
    total: int = 0
    unknown: int = 0
    non_zero: int = 0
    sample: List[str] = field(default_factory=list)
    kind: ElementKind = ElementKind.FLOAT32
    width: int = 0


@dataclass
class Prediction:
    category: str
    confidence: float
    raw_label: Optional[str] = None


@dataclass
class Suggestion:
    category: str
    confidence: Optional[float]
    source: str  # "learned" | "model" | "unavailable"
    category_key: Optional[str] = None


@dataclass
class Correction:
    text: str
    predicted_category: str
    corrected_category: str
    timestamp: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "predictedCategory": self.predicted_category,
            "correctedCategory": self.corrected_category,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Correction":
        """Build from the stored JSON shape. Raises KeyError/ValueError/TypeError on bad rows."""
        return cls(
            text=str(d["text"]),
            predicted_category=str(d.get("predictedCategory") or ""),
            corrected_category=str(d["correctedCategory"]),
            timestamp=int(d["timestamp"]),
        )
