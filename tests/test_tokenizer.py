import pytest

from guided_text_pipeline.components.tokenizer import PUNCTUATION, tokenize


def test_hello_world():
    assert tokenize("Hello, World!") == ["hello", "world"]


def test_empty_text():
    assert tokenize("") == []
    assert tokenize("   \t\n ") == []


def test_punctuation_only_yields_no_tokens():
    assert tokenize(PUNCTUATION) == []


def test_punctuation_is_deleted_not_split():
    # Deleting "-" joins the two halves of a hyphenated word
    assert tokenize("state-of-the-art (model)") == ["stateoftheart", "model"]


def test_characters_outside_the_set_are_kept():
    assert tokenize("It's 100% \"good\"?") == ["it's", "100", "\"good\"?"]


@pytest.mark.parametrize("text", [
    "Mixed   whitespace\tand\nnewlines",
    "  leading and trailing  ",
    "a.b,c/d#e!f$g%h^i&j*k;l:m{n}o=p-q_r`s~t(u)v",
])
def test_tokens_are_non_empty_and_punctuation_free(text):
    tokens = tokenize(text)
    assert all(tokens)
    assert not any(char in token for token in tokens for char in PUNCTUATION)
    assert all(token == token.lower() for token in tokens)
