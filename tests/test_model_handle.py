import threading

import joblib
import numpy as np
import pytest
from sklearn.neural_network import MLPClassifier

from expcat_core.errors import ModelLoadError
from expcat_core.models import ElementKind
from inference.model import JoblibModel, ModelHandle, shared_handle

from conftest import CountingLoader, FakeModel


def test_load_is_idempotent():
    loader = CountingLoader(FakeModel([0.5, 0.5]))
    handle = ModelHandle(loader)
    assert not handle.is_loaded
    handle.load()
    handle.load()
    assert handle.is_loaded
    assert loader.calls == 1


def test_concurrent_loads_collapse_into_one():
    gate = threading.Event()
    loader = CountingLoader(FakeModel([1.0]), delay=gate)
    handle = ModelHandle(loader)

    threads = [threading.Thread(target=handle.load) for _ in range(8)]
    for t in threads:
        t.start()
    gate.set()
    for t in threads:
        t.join(5)

    assert handle.is_loaded
    assert loader.calls == 1


def test_failed_load_raises_and_retries():
    loader = CountingLoader(FakeModel([1.0]), failures=1)
    handle = ModelHandle(loader, name="broken.joblib")

    with pytest.raises(ModelLoadError) as exc_info:
        handle.load()
    assert "broken.joblib" in str(exc_info.value)
    assert not handle.is_loaded

    handle.load()
    assert handle.is_loaded
    assert loader.calls == 2


def test_model_access_before_load():
    handle = ModelHandle.from_model(FakeModel([1.0]))
    with pytest.raises(ModelLoadError):
        handle.model


def test_input_spec_cached_with_model():
    handle = ModelHandle.from_model(FakeModel([1.0], width=5, kind=ElementKind.INT8))
    assert handle.input_spec is None
    handle.load()
    assert handle.input_spec.shape == (1, 5)
    assert handle.input_spec.kind is ElementKind.INT8
    handle.unload()
    assert not handle.is_loaded
    assert handle.input_spec is None


def test_missing_file_is_load_error(tmp_path):
    handle = ModelHandle.from_path(tmp_path / "missing.joblib")
    with pytest.raises(ModelLoadError):
        handle.load()


def test_shared_handle_is_one_per_path(tmp_path):
    a = shared_handle(tmp_path / "m.joblib")
    b = shared_handle(str(tmp_path / "m.joblib"))
    c = shared_handle(tmp_path / "other.joblib")
    assert a is b
    assert a is not c


def _tiny_estimator():
    X = np.array([[0, 0, 1, 0], [0, 0, 0, 1], [0, 0, 1, 1], [0, 0, 0, 0]], dtype=np.float32)
    y = ["A", "B", "A", "B"]
    return MLPClassifier(hidden_layer_sizes=(4,), max_iter=300, random_state=0).fit(X, y)


def test_joblib_model_from_payload(tmp_path):
    est = _tiny_estimator()
    path = tmp_path / "model.joblib"
    joblib.dump({"model": est, "input_dtype": "uint8", "labels": ["A", "B"], "samples": 4}, path)

    model = JoblibModel.load(path)
    assert model.input_spec.shape == (1, 4)
    assert model.input_spec.kind is ElementKind.UINT8
    assert model.labels == ["A", "B"]
    assert model.meta["samples"] == 4

    scores = model.run(np.array([0, 0, 1, 0], dtype=np.uint8))
    assert len(scores) == 2
    assert sum(scores) == pytest.approx(1.0)


def test_joblib_model_bare_estimator(tmp_path):
    path = tmp_path / "bare.joblib"
    joblib.dump(_tiny_estimator(), path)
    model = JoblibModel.load(path)
    assert model.input_spec.kind is ElementKind.FLOAT32
    assert model.labels is None


def test_joblib_model_rejects_non_classifier(tmp_path):
    path = tmp_path / "junk.joblib"
    joblib.dump({"model": object()}, path)
    handle = ModelHandle.from_path(path)
    with pytest.raises(ModelLoadError):
        handle.load()
