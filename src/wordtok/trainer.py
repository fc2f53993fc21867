"""Standalone BPE training module."""

from collections.abc import Iterable
from dataclasses import dataclass, field
import logging

from ._bpe import merge_word_freqs, pair_freqs
from ._decorators import measure_time
from ._sanitise import render_token
from .errors import InvalidInputError
from .pretokenize import mark_spaces, split_special, split_words
from .types import Encoding, StrPair, Token, TokenPair, Word, WordFreqs
from .vocab import Vocabulary, seed_vocab

log = logging.getLogger(__name__)


@dataclass
class BPETrainingResult:
    """Results from one BPE training run."""

    vocab: Vocabulary
    merges: Encoding
    # (left, right) token strings in learning order; position is the rank
    ranks: list[StrPair] = field(default_factory=list)
    n_merges_completed: int = 0
    special_tokens: set[str] = field(default_factory=set)


def _build_word_freqs(
    text: str, vocab: Vocabulary, special_toks: set[str]
) -> WordFreqs:
    """Segment ``text`` like the encoder does and count each unique word."""
    word_freqs: WordFreqs = {}
    for chunk in split_special(text, special_toks):
        if chunk in special_toks:
            # special tokens are one atomic symbol
            words: Iterable[Word] = [(vocab.id_of(chunk),)]
        else:
            words = (tuple(vocab.id_of(c) for c in w) for w in split_words(chunk))
        for word in words:
            word_freqs[word] = word_freqs.get(word, 0) + 1
    return word_freqs


def _select_pair(counts: dict[TokenPair, int], vocab: Vocabulary) -> TokenPair:
    """
    Pick the most frequent pair.

    Ties go to the lexicographically smallest ``(left, right)`` string pair so
    the outcome never depends on dict iteration order.
    """
    return min(
        counts,
        key=lambda p: (-counts[p], vocab.token_of(p[0]), vocab.token_of(p[1])),
    )


@measure_time
def train_bpe(
    text: str,
    vocab_size: int,
    special_tokens: Iterable[str] | None = None,
    verbose: bool = False,
) -> BPETrainingResult:
    """
    Learn a vocabulary and merge rules from raw text.

    Training works on unique words weighted by their count, so the cost of
    one merge scales with the number of distinct words rather than with the
    corpus length.

    :param text: Training corpus.
    :param vocab_size: Target vocabulary size, seed tokens included.
    :param special_tokens: Reserved strings kept atomic and never merged.
    :param verbose: Log each learned merge when ``True``.
    :returns: Vocabulary, id-pair merges, rank list and merge count.
    :raises InvalidInputError: If ``text`` is empty.
    """
    if not text:
        raise InvalidInputError("empty training text, no symbols to seed")

    special_toks = set(special_tokens or ())
    vocab = seed_vocab(mark_spaces(text), special_toks)
    excluded = {vocab.id_of(seq) for seq in special_toks}
    word_freqs = _build_word_freqs(text, vocab, special_toks)

    n_merges = max(0, vocab_size - len(vocab))
    log.info(
        f"training on {len(word_freqs)} unique words: "
        f"{len(vocab)} seed tokens, up to {n_merges} merges"
    )

    merges: Encoding = {}
    ranks: list[StrPair] = []

    while len(vocab) < vocab_size:
        counts = pair_freqs(word_freqs, excluded)
        if not counts:
            log.warning(
                f"no more pairs to merge after {len(merges)} merges "
                f"(requested {n_merges}) stopping early"
            )
            break

        pair = _select_pair(counts, vocab)
        left, right = vocab.token_of(pair[0]), vocab.token_of(pair[1])
        merged = left + right
        # a string reachable through two different splits keeps its first id
        if merged in vocab:
            new_tok: Token = vocab.id_of(merged)
        else:
            new_tok = vocab.append(merged)

        merges[pair] = new_tok
        ranks.append((left, right))
        word_freqs = merge_word_freqs(word_freqs, pair, new_tok)

        if verbose:
            log.info(
                "merge %d/%d: [%s][%s] -> %d (%d occurrences)",
                len(merges),
                n_merges,
                render_token(left),
                render_token(right),
                new_tok,
                counts[pair],
            )

    return BPETrainingResult(
        vocab=vocab,
        merges=merges,
        ranks=ranks,
        n_merges_completed=len(merges),
        special_tokens=special_toks,
    )


__all__ = ["BPETrainingResult", "train_bpe"]
