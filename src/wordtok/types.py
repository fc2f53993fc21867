"""
Core types for tokenization.
"""

type Token = int
type TokenStr = str
type TokenPair = tuple[Token, Token]
type StrPair = tuple[TokenStr, TokenStr]
type Encoding = dict[TokenPair, Token]
type Ranks = dict[StrPair, int]
type Word = tuple[Token, ...]
type WordFreqs = dict[Word, int]
