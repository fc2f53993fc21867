"""Factory functions for creating tokenizers."""

from pathlib import Path

from .serialization import MERGES_SUFFIX, VOCAB_SUFFIX
from .tokenizer import Tokenizer


def get_tokenizer() -> Tokenizer:
    """
    Create an untrained tokenizer.

    :return: Tokenizer with an empty vocabulary and no merge table.

    .. code-block:: python

        tokenizer = get_tokenizer()
        tokenizer.train(text, vocab_size=1000)
    """
    return Tokenizer()


def from_pretrained(
    vocab_path: str | Path, merges_path: str | Path | None = None
) -> Tokenizer:
    """
    Load a tokenizer saved with ``Tokenizer.save()``.

    :param vocab_path: Path to the ``.vocab`` file.
    :param merges_path: Path to the ``.merges`` file. Defaults to the
                        vocabulary path with its suffix swapped.
    :return: Loaded tokenizer using id-pair merges.
    :raises InvalidDataError: If either file is missing or malformed.

    .. code-block:: python

        tokenizer = from_pretrained("path/to/model.vocab")
        tokens = tokenizer.encode("Hello world")
    """
    vocab_path = Path(vocab_path)
    if merges_path is None:
        if vocab_path.suffix == VOCAB_SUFFIX:
            merges_path = vocab_path.with_suffix(MERGES_SUFFIX)
        else:
            merges_path = Path(f"{vocab_path}{MERGES_SUFFIX}")

    tokenizer = Tokenizer()
    tokenizer.load(vocab_path, merges_path)
    return tokenizer


def from_rank_files(vocab_path: str | Path, ranks_path: str | Path) -> Tokenizer:
    """
    Import an externally trained vocabulary and merge rank file.

    :param vocab_path: JSON object mapping token strings to ids (``encoder.json``).
    :param ranks_path: Rank file with a header line then one pair per line (``vocab.bpe``).
    :return: Tokenizer that merges by rank.
    :raises InvalidDataError: If either file is missing or malformed.

    .. code-block:: python

        tokenizer = from_rank_files("encoder.json", "vocab.bpe")
    """
    tokenizer = Tokenizer()
    tokenizer.load_ranks(vocab_path, ranks_path)
    return tokenizer


__all__ = ["get_tokenizer", "from_pretrained", "from_rank_files"]
