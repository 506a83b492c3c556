# tests/conftest.py
import itertools
import json
import threading

import pytest

from expcat_core.models import ElementKind, TensorSpec
from inference.classifier import TextClassifier
from inference.model import ModelHandle
from learning.corrections import CorrectionMemory
from storage.kv_store import MemoryKVStore
from tokenizer.encoder import Tokenizer
from vocab.resolver import TokenResolver
from vocab.table import Vocabulary

VOCAB = [
    "",  # 0 padding
    "[UNK]",  # 1 unknown
    "uber",  # 2
    "airport",  # 3
    "taxi",  # 4
    "grocery",  # 5
    "battery",  # 6
    "movie",  # 7
    "mobile",  # 8
    "bill",  # 9
    "mobile bill",  # 10
    "coffee",  # 11
    "bus",  # 12
    "class",  # 13
    "hotel",  # 14
    "hostel",  # 15
]

LABELS = ["Food & Drink", "Travel", "Bills & Utilities", "Shopping"]

ALIASES = {"phone": "mobile", "phones": "mobile", "cellphone": "mobile", "cell": "mobile"}

MAPPING = {
    "Food & Drink": "Food",
    "Groceries": "Bills",
    "Bills & Utilities": "Bills",
    "Services": "Other",
    "Travel": "Transport",
}


class FakeModel:
    """Returns canned scores and remembers every buffer it was given."""

    def __init__(self, scores, width=len(VOCAB), kind=ElementKind.FLOAT32):
        self.scores = list(scores)
        self.input_spec = TensorSpec(shape=(1, width), kind=kind)
        self.calls = []

    def run(self, buffer):
        self.calls.append(buffer.copy())
        return list(self.scores)


class CountingLoader:
    """Loader that counts calls; optionally fails the first `failures` calls."""

    def __init__(self, model, failures=0, delay=None):
        self.model = model
        self.failures = failures
        self.delay = delay
        self.calls = 0
        self._lock = threading.Lock()

    def __call__(self):
        with self._lock:
            self.calls += 1
            n = self.calls
        if self.delay is not None:
            self.delay.wait(2)
        if n <= self.failures:
            raise OSError("model file unreadable")
        return self.model


@pytest.fixture
def vocab():
    return Vocabulary.from_list(VOCAB)


@pytest.fixture
def resolver(vocab):
    return TokenResolver(vocab, aliases=ALIASES)


@pytest.fixture
def tokenizer(resolver):
    return Tokenizer(resolver)


@pytest.fixture
def make_classifier(tokenizer):
    def _make(scores, labels=LABELS, **kw):
        model = FakeModel(scores)
        clf = TextClassifier(
            handle=ModelHandle.from_model(model),
            tokenizer=tokenizer,
            labels=labels,
            label_mapping=MAPPING,
            **kw,
        )
        return clf, model

    return _make


@pytest.fixture
def clock():
    counter = itertools.count(1_700_000_000_000)
    return lambda: next(counter)


@pytest.fixture
def store():
    return MemoryKVStore()


@pytest.fixture
def memory(store, clock):
    return CorrectionMemory(store, clock=clock)


@pytest.fixture
def asset_dir(tmp_path):
    """vocab.json + labels.json for the small test vocabulary (no model file)."""
    d = tmp_path / "assets"
    d.mkdir()
    (d / "vocab.json").write_text(json.dumps(VOCAB), encoding="utf-8")
    (d / "labels.json").write_text(json.dumps(LABELS), encoding="utf-8")
    return d


@pytest.fixture(scope="session")
def trained_assets(tmp_path_factory):
    """Real assets trained on the built-in samples (small network, fixed seed)."""
    from training.trainer import load_training_data, train

    out = tmp_path_factory.mktemp("trained")
    result = train(load_training_data(None), out, hidden=32, max_iter=400, seed=7, aliases=ALIASES)
    return result
