"""
Reading and writing tokenizer state.

Native format: a ``.vocab`` JSON object mapping ids to token strings and a
``.merges`` JSON array of ``{"left", "right", "id"}`` records in learning order.

External format: an ``encoder.json``-style JSON object mapping token strings
to ids and a ``vocab.bpe``-style rank file whose first line is a header and
whose following lines each hold one space-separated merge pair.
"""

import json
import logging
from pathlib import Path
from typing import Any, Final

from .errors import InvalidDataError, VocabularyError
from .merges import PairMerges, RankedMerges
from .pretokenize import ENDOFTEXT, NEWLINE, SPACE_MARKER
from .types import Encoding, Ranks, StrPair
from .vocab import Vocabulary

VOCAB_SUFFIX: Final[str] = ".vocab"
MERGES_SUFFIX: Final[str] = ".merges"

# ids that may be repurposed as the newline token, in order of preference
_NEWLINE_SENTINELS: Final[tuple[str, ...]] = (ENDOFTEXT, SPACE_MARKER)

log = logging.getLogger(__name__)


def _read_json(path: Path) -> Any:
    if not path.exists():
        raise InvalidDataError("file does not exist", path=str(path))
    try:
        with path.open("r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise InvalidDataError(
            f"malformed json: {e.msg}", path=str(path), line=e.lineno
        ) from e


def save_native(
    vocab: Vocabulary, merges: PairMerges, file_prefix: str | Path
) -> tuple[Path, Path]:
    """
    Write the vocabulary and merges next to ``file_prefix``.

    :returns: Paths of the written ``.vocab`` and ``.merges`` files.
    """
    vocab_path = Path(f"{file_prefix}{VOCAB_SUFFIX}")
    merges_path = Path(f"{file_prefix}{MERGES_SUFFIX}")
    # create directory if does not exist
    vocab_path.parent.mkdir(parents=True, exist_ok=True)

    log.debug(f"saving {len(vocab)} tokens to {vocab_path}")
    with vocab_path.open("w", encoding="utf-8", newline="\n") as f:
        json.dump(
            {str(tok_id): tok for tok_id, tok in vocab.items()},
            f,
            ensure_ascii=False,
            indent=2,
        )

    log.debug(f"saving {len(merges)} merge rules to {merges_path}")
    records = [
        {"left": vocab.token_of(a), "right": vocab.token_of(b), "id": mtok}
        for (a, b), mtok in merges.merges.items()
    ]
    with merges_path.open("w", encoding="utf-8", newline="\n") as f:
        json.dump(records, f, ensure_ascii=False, indent=2)

    return vocab_path, merges_path


def _parse_id(raw: Any) -> int | None:
    """Return ``raw`` as a non-negative id, or ``None`` if it is not one."""
    # bool is an int subclass in python
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw if raw >= 0 else None
    if isinstance(raw, str):
        try:
            tok_id = int(raw)
        except ValueError:
            return None
        return tok_id if tok_id >= 0 else None
    return None


def load_native(
    vocab_path: str | Path, merges_path: str | Path
) -> tuple[Vocabulary, PairMerges]:
    """
    Load a vocabulary and id-pair merges written by ``save_native``.

    Merge constituents are resolved back to ids through the loaded vocabulary.

    :raises InvalidDataError: If a file is missing or malformed, or a merge
        record references a string or id absent from the vocabulary.
    """
    vocab_path, merges_path = Path(vocab_path), Path(merges_path)
    log.info(f"loading vocabulary from {vocab_path}")

    raw_vocab = _read_json(vocab_path)
    if not isinstance(raw_vocab, dict):
        raise InvalidDataError("vocabulary must be a json object", path=str(vocab_path))

    id_to_token: dict[int, str] = {}
    for key, tok in raw_vocab.items():
        tok_id = _parse_id(key)
        if tok_id is None or not isinstance(tok, str):
            raise InvalidDataError(
                f"invalid vocabulary entry: {key!r}: {tok!r}", path=str(vocab_path)
            )
        id_to_token[tok_id] = tok

    try:
        vocab = Vocabulary.from_id_map(id_to_token)
    except VocabularyError as e:
        raise InvalidDataError(str(e), path=str(vocab_path)) from e

    log.info(f"loading merges from {merges_path}")
    records = _read_json(merges_path)
    if not isinstance(records, list):
        raise InvalidDataError("merges must be a json array", path=str(merges_path))

    merges: Encoding = {}
    for idx, record in enumerate(records):
        try:
            left, right, mtok = record["left"], record["right"], record["id"]
        except (KeyError, TypeError):
            raise InvalidDataError(
                f"invalid merge record #{idx}: {record!r}", path=str(merges_path)
            ) from None
        if not isinstance(left, str) or not isinstance(right, str):
            raise InvalidDataError(
                f"invalid merge record #{idx}: {record!r}", path=str(merges_path)
            )
        if left not in vocab or right not in vocab:
            raise InvalidDataError(
                f"merge record #{idx} references unknown token: {left!r} {right!r}",
                path=str(merges_path),
            )
        mtok = _parse_id(mtok)
        if mtok is None or not vocab.has_id(mtok):
            raise InvalidDataError(
                f"merge record #{idx} has an unknown merged id: {record['id']!r}",
                path=str(merges_path),
            )
        merges[(vocab.id_of(left), vocab.id_of(right))] = mtok

    log.info(
        f"model loaded successfully: {len(merges)} merge rules, {len(vocab)} total tokens"
    )
    return vocab, PairMerges(merges)


def _synthesize_newline(token_to_id: dict[str, int], path: Path) -> None:
    """Repurpose a sentinel id as the newline token when the vocabulary has none."""
    if NEWLINE in token_to_id:
        return
    for sentinel in _NEWLINE_SENTINELS:
        if sentinel in token_to_id:
            # the sentinel string gives up its id so the mapping stays bijective
            token_to_id[NEWLINE] = token_to_id.pop(sentinel)
            log.warning(
                f"vocabulary has no newline token, repurposing id "
                f"{token_to_id[NEWLINE]} of {sentinel!r}"
            )
            return
    raise InvalidDataError("no suitable token to use as newline", path=str(path))


def load_rank_files(
    vocab_path: str | Path, ranks_path: str | Path
) -> tuple[Vocabulary, RankedMerges]:
    """
    Import an externally trained vocabulary and merge rank file.

    The first line of the rank file is skipped. Each following line holds two
    whitespace-separated tokens and its 0-based ordinal is the rank of that
    pair. Lines with another field count or with tokens missing from the
    vocabulary are skipped. A pair listed twice keeps its first rank.

    :raises InvalidDataError: If a file is missing or malformed, ids collide,
        or no token can serve as the newline token.
    """
    vocab_path, ranks_path = Path(vocab_path), Path(ranks_path)
    log.info(f"importing vocabulary from {vocab_path}")

    raw_vocab = _read_json(vocab_path)
    if not isinstance(raw_vocab, dict):
        raise InvalidDataError("vocabulary must be a json object", path=str(vocab_path))

    token_to_id: dict[str, int] = {}
    for tok, raw_id in raw_vocab.items():
        tok_id = _parse_id(raw_id) if not isinstance(raw_id, str) else None
        if tok_id is None:
            raise InvalidDataError(
                f"invalid vocabulary entry: {tok!r}: {raw_id!r}", path=str(vocab_path)
            )
        token_to_id[tok] = tok_id

    _synthesize_newline(token_to_id, vocab_path)

    try:
        vocab = Vocabulary.from_token_map(token_to_id)
    except VocabularyError as e:
        raise InvalidDataError(str(e), path=str(vocab_path)) from e

    if not ranks_path.exists():
        raise InvalidDataError("file does not exist", path=str(ranks_path))

    log.info(f"importing merge ranks from {ranks_path}")
    ranks: Ranks = {}
    n_skipped = 0
    with ranks_path.open("r", encoding="utf-8") as f:
        # header / version line
        next(f, None)
        for rank, line in enumerate(f):
            fields = line.split()
            if len(fields) != 2 or fields[0] not in vocab or fields[1] not in vocab:
                n_skipped += 1
                continue
            pair: StrPair = (fields[0], fields[1])
            ranks.setdefault(pair, rank)

    log.debug(f"skipped {n_skipped} unusable rank lines")
    log.info(f"imported {len(ranks)} merge ranks, {len(vocab)} total tokens")
    return vocab, RankedMerges(ranks)


__all__ = [
    "VOCAB_SUFFIX",
    "MERGES_SUFFIX",
    "save_native",
    "load_native",
    "load_rank_files",
]
