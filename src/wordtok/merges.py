"""
Merge table variants.

A tokenizer holds exactly one of these. Self-trained tokenizers carry
``PairMerges`` (id pair -> merged id); tokenizers imported from an external
rank file carry ``RankedMerges`` ((left, right) string pair -> rank).
"""

from dataclasses import dataclass, field
from typing import override
from abc import ABC, abstractmethod

from ._bpe import apply_pair_merges, apply_ranked_merges
from .types import Encoding, Ranks, StrPair, Token
from .vocab import Vocabulary


class MergeTable(ABC):
    """Merge rules applied to out-of-vocabulary segments during encoding."""

    @abstractmethod
    def apply(self, tokens: list[Token], vocab: Vocabulary) -> list[Token]:
        """Merge base token ids of one segment into final token ids."""

    @abstractmethod
    def rank_list(self, vocab: Vocabulary) -> list[StrPair]:
        """Return merge pairs as strings ordered by rank."""

    @abstractmethod
    def __len__(self) -> int: ...


@dataclass
class PairMerges(MergeTable):
    """Id-pair merges in learning order."""

    merges: Encoding = field(default_factory=dict)

    @override
    def apply(self, tokens: list[Token], vocab: Vocabulary) -> list[Token]:
        return apply_pair_merges(tokens, self.merges)

    @override
    def rank_list(self, vocab: Vocabulary) -> list[StrPair]:
        # dicts keep insertion order, which is learning order
        return [(vocab.token_of(a), vocab.token_of(b)) for a, b in self.merges]

    def __len__(self) -> int:
        return len(self.merges)


@dataclass
class RankedMerges(MergeTable):
    """String-pair merges keyed by rank; lower rank merges first."""

    ranks: Ranks = field(default_factory=dict)

    @classmethod
    def from_list(cls, pairs: list[StrPair]) -> "RankedMerges":
        """Rank pairs by list position, keeping the first rank of repeated pairs."""
        ranks: Ranks = {}
        for rank, pair in enumerate(pairs):
            ranks.setdefault(pair, rank)
        return cls(ranks)

    @override
    def apply(self, tokens: list[Token], vocab: Vocabulary) -> list[Token]:
        symbols = [vocab.token_of(tok) for tok in tokens]
        symbols = apply_ranked_merges(symbols, self.ranks)
        return [vocab.id_of(s) for s in symbols]

    @override
    def rank_list(self, vocab: Vocabulary) -> list[StrPair]:
        return sorted(self.ranks, key=self.ranks.__getitem__)

    def __len__(self) -> int:
        return len(self.ranks)


__all__ = ["MergeTable", "PairMerges", "RankedMerges"]
