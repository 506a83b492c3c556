import numpy as np
import pytest

from expcat_core.models import ElementKind, TensorSpec
from expcat_utils.normalizers import clean_text, ngram_tokens, split_words
from tokenizer.encoder import allocate_buffer, tokenize

from conftest import VOCAB, ALIASES


def test_normalize_and_ngrams():
    assert clean_text("Uber -> Airport!") == "uber  airport"
    words = split_words("  Uber to   AIRPORT!! ")
    assert words == ["uber", "to", "airport"]
    assert ngram_tokens(words) == ["uber", "uber to", "to", "to airport", "airport"]
    assert ngram_tokens([]) == []


def test_multi_hot_positions(tokenizer):
    enc = tokenizer.encode("Uber to airport!")
    buf = enc.buffer
    assert buf.shape == (len(VOCAB),)
    assert buf.dtype == np.float32
    assert set(np.flatnonzero(buf)) == {1, 2, 3}
    # "uber to", "to", "to airport" are unknown
    assert enc.stats.unknown == 3
    assert enc.stats.total == 5
    assert enc.stats.non_zero == 3
    assert enc.stats.sample == ["uber", "to", "airport"]


def test_repeated_tokens_do_not_count_up(tokenizer):
    buf = tokenizer.tokenize("taxi taxi TAXI")
    assert buf[4] == 1
    assert buf.max() == 1


def test_bigram_entry_is_set(tokenizer):
    buf = tokenizer.tokenize("phone bill")
    # phone -> mobile (8), bill (9); "phone bill" itself is not an entry
    assert buf[8] == 1
    assert buf[9] == 1
    buf = tokenizer.tokenize("mobile bill")
    assert buf[10] == 1


@pytest.mark.parametrize("text", ["", "   ", "!!!", "$$ -- ??"])
def test_empty_text_gives_zero_buffer(tokenizer, text):
    enc = tokenizer.encode(text)
    assert enc.buffer.shape == (len(VOCAB),)
    assert not enc.buffer.any()
    assert enc.stats.total == 0
    assert enc.stats.unknown == 0


def test_padding_index_never_set(tokenizer):
    buf = tokenizer.tokenize("uber taxi movies groceries qwerty asdfgh")
    assert buf[0] == 0


@pytest.mark.parametrize(
    "kind,dtype",
    [
        (ElementKind.INT32, np.int32),
        (ElementKind.INT16, np.int16),
        (ElementKind.UINT8, np.uint8),
        (ElementKind.INT8, np.int8),
        (ElementKind.FLOAT32, np.float32),
        (ElementKind.FLOAT16, np.float16),
        (ElementKind.FLOAT64, np.float64),
    ],
)
def test_buffer_element_kinds(tokenizer, kind, dtype):
    buf = tokenizer.tokenize("uber", TensorSpec(shape=(1, len(VOCAB)), kind=kind))
    assert buf.dtype == dtype
    assert buf[2] == 1


def test_unknown_kind_defaults_to_float32():
    assert ElementKind.parse(None) is ElementKind.FLOAT32
    assert ElementKind.parse("bfloat7") is ElementKind.FLOAT32
    assert ElementKind.parse("int64") is ElementKind.FLOAT32
    assert ElementKind.parse("uint8") is ElementKind.UINT8
    assert ElementKind.parse(np.dtype("int16")) is ElementKind.INT16


def test_shape_product_and_dynamic_dims():
    assert TensorSpec(shape=(1, 16)).width == 16
    assert TensorSpec(shape=(2, 8)).width == 16
    assert TensorSpec(shape=(-1, 12)).width == 12
    assert TensorSpec(shape=None).width == 0
    assert TensorSpec(shape=()).width == 0


def test_unknown_shape_uses_vocab_size():
    buf = allocate_buffer(TensorSpec(shape=None, kind=ElementKind.INT32), vocab_size=7)
    assert buf.shape == (7,)
    assert buf.dtype == np.int32
    assert allocate_buffer(None, 5).dtype == np.float32


def test_indices_beyond_buffer_are_skipped(tokenizer):
    # width 8 keeps uber (2) but drops hotel (14)
    buf = tokenizer.tokenize("uber hotel", TensorSpec(shape=(1, 8)))
    assert buf.shape == (8,)
    assert buf[2] == 1
    assert set(np.flatnonzero(buf)) == {1, 2}


def test_functional_tokenize(vocab):
    buf = tokenize("Phones", vocab, shape=(1, len(VOCAB)), kind="uint8", aliases=ALIASES)
    assert buf.dtype == np.uint8
    assert buf[8] == 1
