import json

import joblib
import numpy as np
import pandas as pd
import pytest

from categorizer.service import CategorizerService
from config.settings import Settings
from inference.assets import build_classifier, load_labels
from inference.model import JoblibModel, ModelHandle
from learning.corrections import CorrectionMemory
from storage.kv_store import MemoryKVStore
from training.samples import TRAINING_DATA
from training.trainer import build_vocabulary, load_training_data
from vocab.table import Vocabulary

from conftest import ALIASES, MAPPING


def test_vocabulary_order_and_reserved_entries():
    vocab = build_vocabulary(["taxi fare", "Taxi ride"])
    assert vocab.tokens() == ["", "[UNK]", "taxi", "fare", "ride", "taxi fare", "taxi ride"]


def test_vocabulary_cap_and_aliases():
    vocab = build_vocabulary(["phone bill", "cell bill"], max_tokens=4, aliases=ALIASES)
    # bill and mobile (phone/cell) both occur twice
    assert vocab.tokens() == ["", "[UNK]", "bill", "mobile"]


def test_builtin_samples():
    df = load_training_data(None)
    assert list(df.columns) == ["Description", "Category"]
    assert len(df) == len(TRAINING_DATA)
    assert df["Category"].nunique() >= 2


def test_csv_missing_columns(tmp_path):
    p = tmp_path / "bad.csv"
    pd.DataFrame({"Text": ["a"], "Label": ["b"]}).to_csv(p, index=False)
    with pytest.raises(ValueError):
        load_training_data(p)


def test_csv_single_category(tmp_path):
    p = tmp_path / "one.csv"
    pd.DataFrame({"Description": ["a", "b"], "Category": ["X", "X"]}).to_csv(p, index=False)
    with pytest.raises(ValueError):
        load_training_data(p)


def test_csv_drops_empty_rows(tmp_path):
    p = tmp_path / "rows.csv"
    pd.DataFrame(
        {"Description": ["taxi", None, "pizza"], "Category": ["Travel", "Travel", "Food & Drink"]}
    ).to_csv(p, index=False)
    df = load_training_data(p)
    assert df["Description"].tolist() == ["taxi", "pizza"]


def test_trained_assets_are_consistent(trained_assets):
    vocab = Vocabulary.load(trained_assets.vocab_path)
    labels = load_labels(trained_assets.labels_path)
    assert len(vocab) == trained_assets.vocab_size
    assert vocab.get("") == 0
    assert vocab.get("[UNK]") == 1
    assert labels == sorted(set(c for _, c in TRAINING_DATA))
    assert 0.0 <= trained_assets.train_accuracy <= 1.0

    payload = joblib.load(trained_assets.model_path)
    assert payload["labels"] == labels
    assert payload["samples"] == len(TRAINING_DATA)

    model = JoblibModel.load(trained_assets.model_path)
    assert model.input_spec.shape == (1, len(vocab))


def test_trained_model_predicts(trained_assets):
    settings = Settings(
        vocab_path=trained_assets.vocab_path,
        labels_path=trained_assets.labels_path,
        model_path=trained_assets.model_path,
        corrections_backend="memory",
        label_mapping=MAPPING,
        token_aliases=ALIASES,
    )
    clf = build_classifier(settings, handle=ModelHandle.from_path(trained_assets.model_path))
    allowed = {MAPPING.get(l, l) for l in trained_assets.labels} | {"Other"}

    for text in ["Electricity bill", "Uber to airport", "", "zzzz qqqq"]:
        pred = clf.predict_category(text)
        assert pred.category in allowed
        assert 0.0 <= pred.confidence <= 1.0

    scores = clf.handle.run(clf.tokenizer.tokenize("Pizza delivery", clf.handle.input_spec))
    assert len(scores) == len(trained_assets.labels)
    assert sum(scores) == pytest.approx(1.0)

    svc = CategorizerService(clf, CorrectionMemory(MemoryKVStore()))
    assert svc.suggest("Pizza delivery").source == "model"


def test_trained_vocab_is_json_array(trained_assets):
    data = json.loads(trained_assets.vocab_path.read_text(encoding="utf-8"))
    assert isinstance(data, list)
    assert data[:2] == ["", "[UNK]"]
    assert np.all([isinstance(t, str) for t in data])
