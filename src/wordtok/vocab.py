"""Bidirectional token id <-> token string table."""

from collections.abc import Iterable, Iterator
import logging

from .errors import NotFoundError, VocabularyError
from .pretokenize import SPACE_MARKER
from .types import Token

log = logging.getLogger(__name__)

# base tokens every seeded vocabulary carries regardless of the corpus
ASCII_RANGE = range(128)


class Vocabulary:
    """
    Bijective mapping between token ids and token strings.

    Ids are assigned by the caller in construction order and are never
    reassigned once inserted.
    """

    def __init__(self) -> None:
        # id -> token
        self._tokens: dict[Token, str] = {}
        # token -> id
        self._ids: dict[str, Token] = {}
        self._next_id: Token = 0

    @classmethod
    def from_id_map(cls, id_to_token: dict[Token, str]) -> "Vocabulary":
        """Build a vocabulary from an id -> token mapping, inserting in id order."""
        vocab = cls()
        for tok_id in sorted(id_to_token):
            vocab.insert(tok_id, id_to_token[tok_id])
        return vocab

    @classmethod
    def from_token_map(cls, token_to_id: dict[str, Token]) -> "Vocabulary":
        """Build a vocabulary from a token -> id mapping."""
        vocab = cls()
        for token, tok_id in sorted(token_to_id.items(), key=lambda x: x[1]):
            vocab.insert(tok_id, token)
        return vocab

    def insert(self, tok_id: Token, token: str) -> None:
        """
        Add one entry.

        :raises VocabularyError: If ``tok_id`` or ``token`` is already present.
        """
        if tok_id in self._tokens:
            raise VocabularyError("token id already assigned", token_id=tok_id)
        if token in self._ids:
            raise VocabularyError("token already has an id", token=token)
        self._tokens[tok_id] = token
        self._ids[token] = tok_id
        self._next_id = max(self._next_id, tok_id + 1)

    def append(self, token: str) -> Token:
        """Insert ``token`` under the next free id and return that id."""
        tok_id = self.next_id()
        self.insert(tok_id, token)
        return tok_id

    def id_of(self, token: str) -> Token:
        """:raises NotFoundError: If ``token`` has no id."""
        try:
            return self._ids[token]
        except KeyError:
            raise NotFoundError("token not found in vocabulary", token=token) from None

    def token_of(self, tok_id: Token) -> str:
        """:raises NotFoundError: If ``tok_id`` is not assigned."""
        try:
            return self._tokens[tok_id]
        except KeyError:
            raise NotFoundError("id not found in vocabulary", token_id=tok_id) from None

    def has_id(self, tok_id: Token) -> bool:
        return tok_id in self._tokens

    def size(self) -> int:
        """Return the number of entries."""
        return len(self._tokens)

    def next_id(self) -> Token:
        """Return the id the next appended token would receive."""
        return self._next_id

    def items(self) -> Iterator[tuple[Token, str]]:
        """Iterate ``(id, token)`` pairs in ascending id order."""
        for tok_id in sorted(self._tokens):
            yield tok_id, self._tokens[tok_id]

    def __len__(self) -> int:
        return len(self._tokens)

    def __contains__(self, token: object) -> bool:
        return token in self._ids

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Vocabulary):
            return NotImplemented
        return self._tokens == other._tokens

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(size={len(self)})"


def seed_vocab(text: str, special_tokens: Iterable[str] = ()) -> Vocabulary:
    """
    Build the initial character-level vocabulary for training.

    Ids are assigned in this order: characters occurring in ``text``
    (ascending code point), remaining ASCII 0-127, the space marker, then
    each special token as one atomic entry.

    :param text: Training text with spaces already replaced by the space marker.
    :param special_tokens: Reserved strings that are never split.
    """
    vocab = Vocabulary()

    for c in sorted(set(text)):
        vocab.append(c)

    for code in ASCII_RANGE:
        c = chr(code)
        if c not in vocab:
            vocab.append(c)

    if SPACE_MARKER not in vocab:
        vocab.append(SPACE_MARKER)

    for seq in sorted(set(special_tokens)):
        if seq not in vocab:
            vocab.append(seq)

    log.debug(f"seeded vocabulary with {len(vocab)} tokens")
    return vocab


__all__ = ["Vocabulary", "seed_vocab"]
