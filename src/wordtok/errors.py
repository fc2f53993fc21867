"""Custom exception hierarchy for wordtok tokenization errors."""

from .types import Token


class WordTokError(Exception):
    """Base exception for all wordtok errors."""


class InvalidInputError(WordTokError):
    """Raised when training or encoding input is malformed or empty."""

    def __init__(
        self,
        message: str,
        *,
        position: int | None = None,
        input_text: str | None = None,
    ) -> None:
        extra = " "
        if position is not None:
            extra += f"(position: {position}) "
        super().__init__(message + extra)
        self.position = position
        self.input_text = input_text


class VocabularyError(InvalidInputError):
    """Raised when an insert would break the id <-> token bijection."""

    def __init__(
        self,
        message: str,
        *,
        token_id: Token | None = None,
        token: str | None = None,
    ) -> None:
        """Initialize with the offending id and/or token appended to the message."""
        if token_id is not None:
            message += f" (id: {token_id})"
        if token is not None:
            message += f" (token: {token!r})"
        super().__init__(message)
        self.token_id = token_id
        self.token = token


class SpecialTokenError(InvalidInputError):
    """Raised when text contains a special token literal that is not allowed."""

    def __init__(
        self,
        message: str,
        *,
        found_tokens: set[str] | None = None,
        position: int | None = None,
        input_text: str | None = None,
    ) -> None:
        """Initialize with optional found_tokens that get appended to the message."""
        if found_tokens:
            message = f"{message} (found: {', '.join(sorted(found_tokens))})"
        super().__init__(message, position=position, input_text=input_text)
        self.found_tokens = found_tokens


class NotFoundError(WordTokError, KeyError):
    """Raised when a token id or token string is absent from the vocabulary."""

    def __init__(
        self,
        message: str,
        *,
        token_id: Token | None = None,
        token: str | None = None,
    ) -> None:
        extra = " "
        # decoding: id not in vocab
        if token_id is not None:
            extra += f"(invalid id: {token_id}) "
        # encoding: character or merged string not in vocab
        if token is not None:
            extra += f"(invalid token: {token!r}) "
        super().__init__(message + extra)
        self.token_id = token_id
        self.token = token

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return str(self.args[0])


class InvalidDataError(WordTokError):
    """Raised when persisted vocabulary or merge data is malformed."""

    def __init__(
        self,
        message: str,
        *,
        path: str | None = None,
        line: int | None = None,
    ) -> None:
        extra = " "
        if path:
            extra += f"(path: {path}) "
        if line is not None:
            extra += f"(line: {line}) "
        super().__init__(message + extra)
        self.path = path
        self.line = line


class TrainingError(WordTokError):
    """Raised when an operation needs a trained or loaded tokenizer."""


__all__ = [
    "WordTokError",
    "InvalidInputError",
    "VocabularyError",
    "SpecialTokenError",
    "NotFoundError",
    "InvalidDataError",
    "TrainingError",
]
