"""
Word-level BPE tokenizer with a space marker for word boundaries.
"""

from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Literal
import logging
import os

from .errors import InvalidInputError, SpecialTokenError, TrainingError
from .merges import MergeTable, PairMerges
from .parallel import ParallelMode, ParallelStrategy
from .pretokenize import (
    NEWLINE,
    SPACE_MARKER,
    find_disallowed,
    is_special_shaped,
    split_special,
    split_words,
)
from .serialization import load_native, load_rank_files, save_native
from .trainer import BPETrainingResult, train_bpe
from .types import StrPair, Token
from .vocab import Vocabulary

log = logging.getLogger(__name__)

type AllowedSpecial = Iterable[str] | Literal["all"] | None


class Tokenizer:
    """
    BPE tokenizer owning one vocabulary and one merge table.

    The merge table is either id-pair merges learned by ``train()`` or
    ranked string-pair merges imported by ``load_ranks()``. Once trained or
    loaded the state is only read by encode and decode.

    Example:
       >>> tok = Tokenizer()
       >>> result = tok.train("hello world hello there", vocab_size=150)
       >>> tok.decode(tok.encode("hello world"))
       'hello world'
    """

    def __init__(
        self, vocab: Vocabulary | None = None, merges: MergeTable | None = None
    ) -> None:
        """Wrap already built state, or start untrained when both are ``None``."""
        if (vocab is None) != (merges is None):
            raise InvalidInputError("vocab and merges must be given together")
        self.vocab: Vocabulary = vocab if vocab is not None else Vocabulary()
        self.merges: MergeTable | None = merges
        self.special_toks: set[str] = self._find_special_tokens()

    def train(
        self,
        text: str,
        vocab_size: int,
        special_tokens: Iterable[str] | None = None,
        verbose: bool = False,
    ) -> BPETrainingResult:
        """
        Train on ``text`` until the vocabulary reaches ``vocab_size``.

        Replaces any previously trained or loaded state.

        :param text: Training corpus.
        :param vocab_size: Target vocabulary size including seed tokens.
        :param special_tokens: Strings registered as atomic tokens.
        :param verbose: Log each learned merge when ``True``.
        :returns: The raw training result, including the rank list.
        :raises InvalidInputError: If ``text`` is empty.
        """
        result = train_bpe(text, vocab_size, special_tokens, verbose=verbose)

        self.vocab = result.vocab
        self.merges = PairMerges(result.merges)
        self.special_toks = result.special_tokens | self._find_special_tokens()
        return result

    def encode(self, text: str, allowed_special: AllowedSpecial = None) -> list[Token]:
        """
        Encode text into a sequence of token ids.

        When ``allowed_special`` is empty or ``None`` the text is encoded as
        ordinary text and special token literals get no treatment. Otherwise
        allowed literals become single ids, and any other registered special
        token found in the text raises. ``"all"`` allows every registered
        special token, and any other string allows just that literal.

        :raises TrainingError: If the tokenizer has not been trained or loaded.
        :raises SpecialTokenError: If ``text`` holds a special token that is not allowed.
        :raises NotFoundError: If a character or merged token is not in the vocabulary.
        """
        merges = self._require_merges("encoding")

        if allowed_special == "all":
            allowed = set(self.special_toks)
        elif isinstance(allowed_special, str):
            # a bare literal names one token, not a set of characters
            allowed = {allowed_special}
        else:
            allowed = set(allowed_special or ())

        if not allowed:
            return self._encode_ordinary(text, merges)

        disallowed = find_disallowed(text, self.special_toks, allowed)
        if disallowed:
            raise SpecialTokenError(
                "special tokens found in text but not allowed",
                found_tokens=disallowed,
                position=min(text.find(seq) for seq in disallowed),
                input_text=text,
            )

        tokens: list[Token] = []
        for chunk in split_special(text, allowed):
            if chunk in allowed:
                # special tokens have pre-determined encodings
                tokens.append(self.vocab.id_of(chunk))
            else:
                tokens.extend(self._encode_ordinary(chunk, merges))
        return tokens

    def _encode_ordinary(self, text: str, merges: MergeTable) -> list[Token]:
        """Encode text with no special token handling."""
        tokens: list[Token] = []
        for segment in split_words(text):
            if segment in self.vocab:
                tokens.append(self.vocab.id_of(segment))
            else:
                # base characters first, then merge
                base = [self.vocab.id_of(c) for c in segment]
                tokens.extend(merges.apply(base, self.vocab))
        return tokens

    def encode_batch(
        self,
        texts: list[str],
        allowed_special: AllowedSpecial = None,
        num_workers: int | None = None,
        parallel_mode: ParallelStrategy | ParallelMode = "auto",
    ) -> list[list[Token]]:
        """
        Encode many texts, optionally across worker threads.

        ``off`` encodes serially, ``batch`` always uses a thread pool and
        ``auto`` uses one only when there is more than one text and worker.

        :returns: Encoded token sequences in input order.
        :raises InvalidInputError: If ``parallel_mode`` is unknown.
        """
        mode = ParallelMode.get(parallel_mode)
        self._require_merges("encoding")

        if not texts:
            return []

        if num_workers is None:
            workers = os.cpu_count() or 1
        else:
            workers = max(1, num_workers)  # "0" interpreted as 1 worker

        def encode_one(text: str) -> list[Token]:
            return self.encode(text, allowed_special)

        match mode:
            case ParallelMode.OFF:
                return [encode_one(text) for text in texts]
            case ParallelMode.BATCH:
                pass
            case ParallelMode.AUTO:
                if len(texts) <= 1 or workers == 1:
                    return [encode_one(text) for text in texts]

        with ThreadPoolExecutor(max_workers=workers) as pool:
            return list(pool.map(encode_one, texts))

    def decode(self, tokens: Iterable[Token]) -> str:
        """
        Decode token ids back into text.

        The newline token emits ``\\n``, preceded by a space unless the output
        is empty or already ends with one. Tokens starting with the space
        marker emit a space followed by the rest of the token. All other
        tokens are appended verbatim.

        :raises TrainingError: If the tokenizer has not been trained or loaded.
        :raises NotFoundError: If any id is not in the vocabulary.
        """
        self._require_merges("decoding")

        parts: list[str] = []
        for tok in tokens:
            token = self.vocab.token_of(tok)
            if token == NEWLINE:
                if parts and not parts[-1].endswith(" "):
                    parts.append(" ")
                parts.append(NEWLINE)
            elif token.startswith(SPACE_MARKER):
                parts.append(" " + token[len(SPACE_MARKER) :])
            elif token:
                parts.append(token)
        return "".join(parts)

    def decode_batch(self, token_batch: list[list[Token]]) -> list[str]:
        """Decode multiple token sequences."""
        return [self.decode(tokens) for tokens in token_batch]

    def vocab_size(self) -> int:
        """Return the number of tokens in the vocabulary."""
        return len(self.vocab)

    def rank_list(self) -> list[StrPair]:
        """Return merge pairs as token strings, lowest rank first."""
        return self._require_merges("listing merges").rank_list(self.vocab)

    def save(self, file_prefix: str | Path) -> tuple[Path, Path]:
        """
        Save vocabulary and merges as ``<prefix>.vocab`` and ``<prefix>.merges``.

        :returns: The written vocabulary and merges paths.
        :raises TrainingError: If the tokenizer has not been trained or loaded.
        :raises InvalidInputError: If the merges were imported from a rank file.
        """
        merges = self._require_merges("saving")
        if not isinstance(merges, PairMerges):
            raise InvalidInputError(
                "only id-pair merges can be saved in the native format"
            )
        log.info(f"saving tokenizer to {file_prefix}")
        paths = save_native(self.vocab, merges, file_prefix)
        log.info("tokenizer saved successfully")
        return paths

    def load(self, vocab_path: str | Path, merges_path: str | Path) -> None:
        """
        Restore state written by ``save()``.

        :raises InvalidDataError: If either file is missing or malformed.
        """
        vocab, merges = load_native(vocab_path, merges_path)
        # update tokenizer state only after a successful read
        self.vocab, self.merges = vocab, merges
        self.special_toks = self._find_special_tokens()

    def load_ranks(self, vocab_path: str | Path, ranks_path: str | Path) -> None:
        """
        Import an externally trained ``encoder.json``-style vocabulary and
        ``vocab.bpe``-style rank file. Encoding then merges by rank.

        :raises InvalidDataError: If a file is missing or malformed.
        """
        vocab, ranks = load_rank_files(vocab_path, ranks_path)
        self.vocab, self.merges = vocab, ranks
        self.special_toks = self._find_special_tokens()

    def _require_merges(self, action: str) -> MergeTable:
        if self.merges is None:
            raise TrainingError(
                f"{self.__class__.__name__} must be trained or loaded before {action}"
            )
        return self.merges

    def _find_special_tokens(self) -> set[str]:
        """Return vocabulary entries that follow the special token convention."""
        return {tok for _, tok in self.vocab.items() if is_special_shaped(tok)}

    def __repr__(self) -> str:
        kind = type(self.merges).__name__ if self.merges is not None else "untrained"
        return f"{self.__class__.__name__}(vocab_size={len(self.vocab)}, merges={kind})"


__all__ = ["Tokenizer", "AllowedSpecial"]
