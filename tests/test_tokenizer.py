"""Unit tests for wordtok tokenizer encode/decode, edge cases, and special tokens."""

import pytest

import wordtok as wtok
from wordtok.errors import (
    InvalidInputError,
    NotFoundError,
    SpecialTokenError,
    TrainingError,
)

CORPUS = "hello world hello there hello everyone"


# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def tokenizer():
    """Return a tokenizer trained with a handful of merges."""
    tok = wtok.Tokenizer()
    tok.train(CORPUS, vocab_size=160)
    return tok


@pytest.fixture
def special_tokenizer():
    """Return a tokenizer trained with an end-of-text special token."""
    tok = wtok.Tokenizer()
    tok.train(
        "hello world<|endoftext|>hello there<|endoftext|>",
        vocab_size=160,
        special_tokens=[wtok.ENDOFTEXT],
    )
    return tok


# Encode-decode round-trip
# ---------------------------------------------------------------------------


def test_hello_world_scenario():
    """Training with a target below the seed size still round-trips."""
    tok = wtok.Tokenizer()
    result = tok.train(CORPUS, vocab_size=100)
    assert result.n_merges_completed == 0

    tokens = tok.encode("hello world")
    assert tok.decode(tokens) == "hello world"


def test_encode_decode_roundtrip(tokenizer):
    """Encode then decode returns single-line text unchanged."""
    text = "hello there world everyone"
    assert tokenizer.decode(tokenizer.encode(text)) == text


def test_roundtrip_unseen_ascii_words(tokenizer):
    """ASCII characters absent from the corpus still encode via the seed."""
    text = "Quick, brown FOX #42!"
    assert tokenizer.decode(tokenizer.encode(text)) == text


def test_newline_reconstruction(tokenizer):
    """A newline decodes with a space on each side of it."""
    tokens = tokenizer.encode("hello world\nhello there")
    assert tokenizer.decode(tokens) == "hello world \n hello there"


def test_newline_is_single_token(tokenizer):
    """Each line break becomes exactly one newline token."""
    tokens = tokenizer.encode("hello\nhello")
    newline_id = tokenizer.vocab.id_of(wtok.NEWLINE)
    assert tokens.count(newline_id) == 1


def test_learned_words_encode_to_one_token(tokenizer):
    """Frequent words learned during training become single tokens."""
    assert tokenizer.encode("hello") == [tokenizer.vocab.id_of("hello")]
    assert tokenizer.encode("hello hello") == [
        tokenizer.vocab.id_of("hello"),
        tokenizer.vocab.id_of(wtok.SPACE_MARKER + "hello"),
    ]


def test_encode_is_deterministic(tokenizer):
    """Encoding the same text twice gives identical ids."""
    text = "hello everyone out there"
    assert tokenizer.encode(text) == tokenizer.encode(text)


# Edge cases
# ---------------------------------------------------------------------------


def test_empty_string(tokenizer):
    """Empty string encodes to empty list and decodes back."""
    assert tokenizer.encode("") == []
    assert tokenizer.decode([]) == ""


def test_single_character(tokenizer):
    """Single character round-trips."""
    assert tokenizer.decode(tokenizer.encode("x")) == "x"


def test_repetitive_text_creates_merges(tokenizer):
    """Repetitive text produces fewer tokens than characters."""
    text = "hello hello hello"
    assert len(tokenizer.encode(text)) < len(text)


def test_unknown_character_raises(tokenizer):
    """A character with no vocabulary entry aborts encoding."""
    with pytest.raises(NotFoundError):
        tokenizer.encode("hello wörld")


def test_unknown_id_raises(tokenizer):
    """Decoding an id outside the vocabulary raises NotFoundError."""
    with pytest.raises(NotFoundError) as exc_info:
        tokenizer.decode([0, tokenizer.vocab_size() + 10])
    assert exc_info.value.token_id == tokenizer.vocab_size() + 10


def test_not_found_is_key_error(tokenizer):
    """NotFoundError can be caught as a KeyError."""
    with pytest.raises(KeyError):
        tokenizer.decode([-1])


# Special tokens
# ---------------------------------------------------------------------------


def test_special_token_is_atomic(special_tokenizer):
    """An allowed special token encodes to exactly one id."""
    text = "hello world<|endoftext|>hello"
    tokens = special_tokenizer.encode(text, allowed_special={wtok.ENDOFTEXT})
    eot = special_tokenizer.vocab.id_of(wtok.ENDOFTEXT)
    assert tokens.count(eot) == 1
    assert special_tokenizer.decode(tokens) == text


def test_allow_all_special_tokens(special_tokenizer):
    """``"all"`` allows every registered special token."""
    text = "hello<|endoftext|>"
    assert special_tokenizer.encode(text, allowed_special="all") == (
        special_tokenizer.encode(text, allowed_special={wtok.ENDOFTEXT})
    )


def test_allowed_special_as_bare_string(special_tokenizer):
    """A single literal passed as a string is treated as a one-token set."""
    text = "hello world<|endoftext|>hello"
    tokens = special_tokenizer.encode(text, allowed_special=wtok.ENDOFTEXT)
    assert tokens == special_tokenizer.encode(text, allowed_special={wtok.ENDOFTEXT})
    assert special_tokenizer.decode(tokens) == text
    assert special_tokenizer.decode(
        special_tokenizer.encode("hello world", allowed_special=wtok.ENDOFTEXT)
    ) == "hello world"


def test_disallowed_special_token_raises(special_tokenizer):
    """A registered special token outside the allowed set aborts encoding."""
    with pytest.raises(SpecialTokenError) as exc_info:
        special_tokenizer.encode(
            "hello <|endoftext|>", allowed_special={"<|pad|>"}
        )
    assert exc_info.value.found_tokens == {wtok.ENDOFTEXT}
    assert exc_info.value.position == len("hello ")
    assert exc_info.value.input_text == "hello <|endoftext|>"


def test_special_token_error_is_invalid_input(special_tokenizer):
    """SpecialTokenError belongs to the invalid input family."""
    with pytest.raises(InvalidInputError):
        special_tokenizer.encode("<|endoftext|>", allowed_special={"<|pad|>"})


def test_allowed_special_missing_from_vocab_raises(tokenizer):
    """An allowed literal that occurs in text but has no id raises."""
    with pytest.raises(NotFoundError):
        tokenizer.encode("hello<|pad|>", allowed_special={"<|pad|>"})


def test_special_tokens_never_merged(special_tokenizer):
    """No learned merge has a special token on either side."""
    for left, right in special_tokenizer.rank_list():
        assert wtok.ENDOFTEXT not in (left, right)


# Untrained usage raises
# ---------------------------------------------------------------------------


def test_decode_before_training_raises():
    """Decoding before training raises TrainingError."""
    with pytest.raises(TrainingError):
        wtok.Tokenizer().decode([0, 1, 2])


def test_encode_before_training_raises():
    """Encoding before training raises TrainingError."""
    with pytest.raises(TrainingError):
        wtok.Tokenizer().encode("hello")


def test_state_must_be_given_together():
    """A vocabulary without a merge table is rejected."""
    with pytest.raises(InvalidInputError):
        wtok.Tokenizer(vocab=wtok.Vocabulary())


# Batch encode/decode
# ---------------------------------------------------------------------------


def test_encode_batch_decode_batch(tokenizer):
    """Batch encode and decode match single-text results."""
    texts = ["hello world", "there", "hello everyone"]
    encoded = tokenizer.encode_batch(texts)
    decoded = tokenizer.decode_batch(encoded)

    for i, text in enumerate(texts):
        assert encoded[i] == tokenizer.encode(text)
        assert decoded[i] == text


@pytest.mark.parametrize("mode", wtok.list_parallel_modes())
def test_encode_batch_modes_agree(tokenizer, mode):
    """Every parallel mode returns the serial result in input order."""
    texts = ["hello world", "hello there", "everyone", "world hello"] * 3
    expected = [tokenizer.encode(text) for text in texts]
    assert tokenizer.encode_batch(texts, num_workers=2, parallel_mode=mode) == expected


def test_encode_batch_unknown_mode(tokenizer):
    """An unknown parallel mode name raises InvalidInputError."""
    with pytest.raises(InvalidInputError):
        tokenizer.encode_batch(["hello"], parallel_mode="chunk")


def test_encode_batch_empty(tokenizer):
    """An empty batch encodes to an empty list."""
    assert tokenizer.encode_batch([]) == []


# Vocab size
# ---------------------------------------------------------------------------


def test_vocab_size_after_training(tokenizer):
    """Vocab size never exceeds the training target."""
    assert tokenizer.vocab_size() <= 160
    assert tokenizer.vocab_size() == len(tokenizer.vocab)


# Factory
# ---------------------------------------------------------------------------


def test_get_tokenizer_returns_untrained():
    """get_tokenizer() gives a fresh tokenizer that must be trained before use."""
    tok = wtok.get_tokenizer()
    assert isinstance(tok, wtok.Tokenizer)
    assert tok.vocab_size() == 0
    with pytest.raises(TrainingError):
        tok.encode("hello")
    tok.train(CORPUS, vocab_size=150)
    assert tok.decode(tok.encode("hello world")) == "hello world"
