"""
Text segmentation shared by training and encoding.

Text is first split around special token literals, then into lines and
whitespace-separated words. Words that followed whitespace carry the space
marker as a prefix so word boundaries survive tokenization.
"""

from collections.abc import Iterable
from functools import lru_cache
from typing import Final

import regex as re

SPACE_MARKER: Final[str] = "Ġ"
NEWLINE: Final[str] = "\n"
ENDOFTEXT: Final[str] = "<|endoftext|>"
SPECIAL_PREFIX: Final[str] = "<|"
SPECIAL_SUFFIX: Final[str] = "|>"


def mark_spaces(text: str) -> str:
    """Replace every literal space with the space marker."""
    return text.replace(" ", SPACE_MARKER)


def is_special_shaped(token: str) -> bool:
    """Return ``True`` if ``token`` follows the ``<|...|>`` special token convention."""
    return (
        len(token) >= len(SPECIAL_PREFIX) + len(SPECIAL_SUFFIX)
        and token.startswith(SPECIAL_PREFIX)
        and token.endswith(SPECIAL_SUFFIX)
    )


@lru_cache(maxsize=32)
def _special_pattern(special_toks: tuple[str, ...]) -> re.Pattern:
    # longest literal first so that at a shared start position the longer one wins
    ordered = sorted(special_toks, key=lambda s: (-len(s), s))
    # escape regex metachars like "|" in special tokens to avoid unwanted effects
    esc_special_toks = [re.escape(seq) for seq in ordered]
    # the capturing group makes split() keep the matched delimiters
    return re.compile("(" + "|".join(esc_special_toks) + ")")


def split_special(text: str, special_toks: Iterable[str]) -> list[str]:
    """
    Split ``text`` around literal occurrences of ``special_toks``.

    Matches are kept as their own chunks. Overlapping candidates resolve by
    earliest start, then by the longest literal at that start. Chunks that
    are not special tokens may be empty.
    """
    special_toks = tuple(sorted(set(special_toks)))
    if not special_toks:
        return [text]
    return _special_pattern(special_toks).split(text)


def split_words(text: str) -> list[str]:
    """
    Segment special-token-free text into words and newline tokens.

    The first word of the first line is emitted as-is. Every other word,
    including the first word of later lines, gets the space marker prefix.
    A newline token is emitted between consecutive lines.
    """
    segments: list[str] = []
    for i, line in enumerate(text.split(NEWLINE)):
        if i > 0:
            segments.append(NEWLINE)
        for j, word in enumerate(line.split()):
            if i == 0 and j == 0:
                segments.append(word)
            else:
                segments.append(SPACE_MARKER + word)
    return segments


def find_disallowed(
    text: str, candidates: Iterable[str], allowed: Iterable[str]
) -> set[str]:
    """Return special-shaped ``candidates`` that occur in ``text`` but are not ``allowed``."""
    allowed = set(allowed)
    return {
        seq
        for seq in candidates
        if is_special_shaped(seq) and seq not in allowed and seq in text
    }


__all__ = [
    "SPACE_MARKER",
    "NEWLINE",
    "ENDOFTEXT",
    "SPECIAL_PREFIX",
    "SPECIAL_SUFFIX",
    "mark_spaces",
    "is_special_shaped",
    "split_special",
    "split_words",
    "find_disallowed",
]
