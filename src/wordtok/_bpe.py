"""
Core Byte Pair Encoding (BPE) operations.
"""

from collections import Counter
from collections.abc import Sequence, Set

from typing_extensions import deprecated

from .types import Encoding, Ranks, Token, TokenPair, WordFreqs


def pair_freqs(
    word_freqs: WordFreqs, excluded: Set[Token] = frozenset()
) -> Counter[TokenPair]:
    """
    Count adjacent token pairs across unique words, weighted by word frequency.

    Pairs with an ``excluded`` token on either side are never counted.
    """
    counts: Counter[TokenPair] = Counter()
    for word, freq in word_freqs.items():
        for pair in zip(word, word[1:]):
            if pair[0] in excluded or pair[1] in excluded:
                continue
            counts[pair] += freq
    return counts


def merge_pair[T](symbols: Sequence[T], target: tuple[T, T], new: T) -> list[T]:
    """
    Replace every non-overlapping left-to-right occurrence of ``target`` with ``new``.

    Example:
       >>> merge_pair([1, 2, 3, 1, 2], (1, 2), 4)
       [4, 3, 4]
    """
    merged: list[T] = []
    i = 0
    n = len(symbols)
    while i < n:
        # check if we can form a pair and it matches the target
        if i < n - 1 and symbols[i] == target[0] and symbols[i + 1] == target[1]:
            merged.append(new)
            i += 2
        else:
            merged.append(symbols[i])
            i += 1
    return merged


def merge_word_freqs(
    word_freqs: WordFreqs, target: TokenPair, new_tok: Token
) -> WordFreqs:
    """
    Merge ``target`` inside every unique word, keeping word counts.

    Words that become identical after the merge have their counts summed.
    Words that do not contain ``target[0]`` are carried over untouched.
    """
    merged: WordFreqs = {}
    for word, freq in word_freqs.items():
        if len(word) > 1 and target[0] in word:
            word = tuple(merge_pair(word, target, new_tok))
        merged[word] = merged.get(word, 0) + freq
    return merged


def apply_pair_merges(tokens: list[Token], merges: Encoding) -> list[Token]:
    """
    Apply id-pair merge rules until a full pass makes no replacement.

    Each pass scans left to right and replaces any adjacent pair with a
    recorded rule. Stops early once a single token remains.
    """
    while len(tokens) > 1:
        newtoks: list[Token] = []
        merged = False
        i = 0
        n = len(tokens)
        while i < n:
            if i < n - 1 and (tokens[i], tokens[i + 1]) in merges:
                newtoks.append(merges[(tokens[i], tokens[i + 1])])
                merged = True
                i += 2
            else:
                newtoks.append(tokens[i])
                i += 1
        tokens = newtoks
        if not merged:
            break
    return tokens


def apply_ranked_merges(symbols: list[str], ranks: Ranks) -> list[str]:
    """
    Apply ranked merges: repeatedly merge the lowest-rank adjacent pair.

    Every non-overlapping occurrence of the chosen pair is merged in the same
    round. Pairs without a rank are never merged.
    """
    while len(symbols) > 1:
        best: tuple[str, str] | None = None
        best_rank = -1
        for pair in zip(symbols, symbols[1:]):
            rank = ranks.get(pair)
            if rank is not None and (best is None or rank < best_rank):
                best, best_rank = pair, rank
        if best is None:
            break
        symbols = merge_pair(symbols, best, best[0] + best[1])
    return symbols


@deprecated(
    "Reference implementation for documentation only. Use `train_bpe()` for training."
)
def slow_bpe_merge(
    tokens: list[Token], target: TokenPair, new_tok: Token
) -> list[Token]:
    """
    Merge all occurrences of a target pair in a flattened corpus token stream.

    Training on one flattened stream rescans the whole corpus on every merge:
    O(n × M) where n is the corpus length and M the number of merges.
    ``train_bpe()`` instead rewrites the deduplicated word-frequency table,
    which scales with the number of distinct words.
    """
    return merge_pair(tokens, target, new_tok)


__all__ = [
    "pair_freqs",
    "merge_pair",
    "merge_word_freqs",
    "apply_pair_merges",
    "apply_ranked_merges",
    "slow_bpe_merge",
]
