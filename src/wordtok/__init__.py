"""wordtok: word-level BPE tokenization library."""

from .errors import (
    InvalidDataError,
    InvalidInputError,
    NotFoundError,
    SpecialTokenError,
    TrainingError,
    VocabularyError,
    WordTokError,
)
from .factory import from_pretrained, from_rank_files, get_tokenizer
from .merges import MergeTable, PairMerges, RankedMerges
from .parallel import ParallelMode, list_parallel_modes
from .pretokenize import ENDOFTEXT, NEWLINE, SPACE_MARKER
from .tokenizer import Tokenizer
from .trainer import BPETrainingResult, train_bpe
from .vocab import Vocabulary

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("wordtok")
except PackageNotFoundError:
    __version__ = "dev"

__all__ = [
    "Tokenizer",
    "Vocabulary",
    "MergeTable",
    "PairMerges",
    "RankedMerges",
    "BPETrainingResult",
    "ParallelMode",
    "train_bpe",
    "get_tokenizer",
    "from_pretrained",
    "from_rank_files",
    "list_parallel_modes",
    "SPACE_MARKER",
    "NEWLINE",
    "ENDOFTEXT",
    "WordTokError",
    "InvalidInputError",
    "VocabularyError",
    "SpecialTokenError",
    "NotFoundError",
    "InvalidDataError",
    "TrainingError",
]
