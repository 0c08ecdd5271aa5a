import numpy as np
import pytest

from guided_text_pipeline.components.data_preprocessing import VocabularyBuilder
from guided_text_pipeline.components.sequence_encoder import (
    encode_dataset,
    encode_text,
    encode_tokens,
)
from guided_text_pipeline.entity.artifact_entity import DatasetRole, NormalizedRow, Vocabulary
from guided_text_pipeline.exception import EncodingError


@pytest.fixture
def vocabulary():
    return VocabularyBuilder().build([
        NormalizedRow(text="I love pizza", label=1),
        NormalizedRow(text="AI generated spam", label=0),
    ])


def test_short_sequence_is_right_padded(vocabulary):
    assert encode_text("I love pizza", vocabulary, 5) == [2, 3, 4, 0, 0]


def test_unseen_words_are_oov(vocabulary):
    assert encode_text("totally unseen words", vocabulary, 5) == [1, 1, 1, 0, 0]


def test_long_sequence_is_right_truncated():
    vocabulary = Vocabulary({"<PAD>": 0, "<OOV>": 1, "a": 5, "b": 6, "c": 7, "d": 8})

    assert encode_tokens(["a", "b", "c", "d"], vocabulary, 3) == [5, 6, 7]


@pytest.mark.parametrize("max_length", [1, 2, 3, 7, 50])
@pytest.mark.parametrize("tokens", [[], ["i"], ["i", "love", "pizza", "x", "y", "z"]])
def test_output_length_is_always_max_length(vocabulary, tokens, max_length):
    encoded = encode_tokens(tokens, vocabulary, max_length)

    assert len(encoded) == max_length
    assert all(index == 0 or index == 1 or index >= 2 for index in encoded)


def test_default_length_is_fifty(vocabulary):
    assert len(encode_text("I love pizza", vocabulary)) == 50


@pytest.mark.parametrize("max_length", [0, -1, 2.5, True])
def test_invalid_max_length(vocabulary, max_length):
    with pytest.raises(ValueError):
        encode_tokens(["i"], vocabulary, max_length)


def test_encoding_never_extends_vocabulary(vocabulary):
    before = vocabulary.to_dict()
    encode_text("brand new tokens here", vocabulary, 5)

    assert vocabulary.to_dict() == before


def test_encode_dataset_shapes(vocabulary):
    rows = [NormalizedRow("I love pizza", 1), NormalizedRow("spam", 0), NormalizedRow("pizza pizza", 1)]
    encoded = encode_dataset(DatasetRole.TESTING, rows, vocabulary, 4)

    assert encoded.sequences.shape == (3, 4)
    assert encoded.labels.shape == (3, 1)
    assert encoded.sequences.dtype == np.int64
    assert encoded.sequences.tolist()[1] == [7, 0, 0, 0]
    assert encoded.labels.reshape(-1).tolist() == [1, 0, 1]


def test_encode_dataset_wraps_failures(vocabulary):
    with pytest.raises(EncodingError):
        encode_dataset(DatasetRole.TRAINING, [NormalizedRow(text=None, label=1)], vocabulary, 4)
