# inference/model.py
"""
Inference model backends and the process-wide model handle.

The handle loads its model once, keeps the model's input spec next to it and
collapses concurrent load() calls into a single load.
"""
from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Protocol, Sequence, Union

import joblib
import numpy as np

from expcat_core.errors import ModelLoadError
from expcat_core.models import ElementKind, TensorSpec

log = logging.getLogger("inference.model")


class InferenceModel(Protocol):
    input_spec: TensorSpec

    def run(self, buffer: np.ndarray) -> Sequence[float]:
        """Score one encoded example; one probability per label."""
        ...


class JoblibModel:
    """
    scikit-learn classifier (e.g. MLPClassifier) serialized with joblib.

    The payload is either the bare estimator or a dict written by the trainer:
      {"model": estimator, "input_dtype": "float32", "labels": [...], "trained_at": "..."}
    """

    def __init__(
        self,
        estimator: Any,
        input_dtype: Optional[str] = None,
        labels: Optional[List[str]] = None,
        meta: Optional[Dict[str, Any]] = None,
    ):
        if not hasattr(estimator, "predict_proba"):
            raise TypeError(
                f"{type(estimator).__name__} does not provide predict_proba"
            )
        self.estimator = estimator
        self.labels = list(labels) if labels else None
        self.meta = dict(meta or {})
        n_features = getattr(estimator, "n_features_in_", None)
        self.input_spec = TensorSpec(
            shape=(1, int(n_features)) if n_features else None,
            kind=ElementKind.parse(input_dtype),
        )

    @classmethod
    def load(cls, path: Union[str, Path]) -> "JoblibModel":
        payload = joblib.load(path)
        if isinstance(payload, dict):
            if "model" not in payload:
                raise ValueError("model payload has no 'model' entry")
            meta = {
                k: v
                for k, v in payload.items()
                if k not in ("model", "input_dtype", "labels")
            }
            return cls(
                payload["model"],
                input_dtype=payload.get("input_dtype"),
                labels=payload.get("labels"),
                meta=meta,
            )
        return cls(payload)

    def run(self, buffer: np.ndarray) -> List[float]:
        x = np.asarray(buffer).reshape(1, -1)
        proba = self.estimator.predict_proba(x)
        return [float(p) for p in proba[0]]


ModelLoader = Callable[[], InferenceModel]


class ModelHandle:
    """Lazily loaded, shared model. Inject one into each classifier."""

    def __init__(self, loader: ModelLoader, name: str = "model"):
        self._loader = loader
        self.name = name
        self._model: Optional[InferenceModel] = None
        self._spec: Optional[TensorSpec] = None
        self._lock = threading.Lock()

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "ModelHandle":
        p = Path(path)
        return cls(lambda: JoblibModel.load(p), name=str(p))

    @classmethod
    def from_model(cls, model: InferenceModel, name: str = "in-memory") -> "ModelHandle":
        """Wrap an already built model (tests, notebooks)."""
        return cls(lambda: model, name=name)

    @property
    def is_loaded(self) -> bool:
        return self._model is not None

    @property
    def model(self) -> InferenceModel:
        if self._model is None:
            raise ModelLoadError("Model is not loaded", model_path=self.name)
        return self._model

    @property
    def input_spec(self) -> Optional[TensorSpec]:
        return self._spec

    def load(self) -> None:
        """Load once. Raises ModelLoadError; the handle stays unloaded on failure."""
        if self._model is not None:
            return
        with self._lock:
            if self._model is not None:
                return
            try:
                model = self._loader()
            except Exception as e:
                log.error("Failed to load model %s: %s", self.name, e)
                raise ModelLoadError(str(e), model_path=self.name) from e

            spec = getattr(model, "input_spec", None) or TensorSpec()
            # normalise whatever the backend declared into a concrete kind
            spec = TensorSpec(shape=spec.shape, kind=ElementKind.parse(spec.kind))
            self._spec = spec
            self._model = model
            log.info(
                "Model loaded: %s (input shape=%s, kind=%s)",
                self.name,
                spec.shape,
                spec.kind.value,
            )

    def unload(self) -> None:
        with self._lock:
            self._model = None
            self._spec = None

    def run(self, buffer: np.ndarray) -> List[float]:
        return [float(s) for s in self.model.run(buffer)]


_HANDLES: Dict[str, ModelHandle] = {}
_HANDLES_LOCK = threading.Lock()


def shared_handle(path: Union[str, Path]) -> ModelHandle:
    """One handle per model file for the life of the process."""
    key = str(Path(path).resolve())
    with _HANDLES_LOCK:
        handle = _HANDLES.get(key)
        if handle is None:
            handle = ModelHandle.from_path(key)
            _HANDLES[key] = handle
        return handle
