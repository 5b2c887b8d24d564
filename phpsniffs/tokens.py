"""
phpsniffs/tokens.py
═══════════════════

Token model shared by the tokenizer, the sniff framework and every sniff.

A :class:`TokenStream` is the read-only view of one tokenized file.  It is
built once by :func:`phpsniffs.tokenizer.tokenize` and handed explicitly to
each sniff invocation; nothing in this package keeps a "current file".

Partner maps
────────────

Every token carries precomputed links so sniffs never re-derive structure:

  parenthesis_opener / parenthesis_closer   ``(`` ↔ ``)``
  bracket_opener / bracket_closer           ``[`` ↔ ``]`` and ``{`` ↔ ``}``
  scope_opener / scope_closer               ``function`` / ``class`` body
  nested_parenthesis                        enclosing ``(`` indices,
                                            outermost first

Search helpers return ``None`` when nothing matches.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import (
    FrozenSet,
    Iterable,
    Iterator,
    Optional,
    Sequence,
    Tuple,
    Union,
)


class TokenKind(Enum):
    """Closed set of lexical token kinds produced by the tokenizer."""
    OPEN_TAG = "T_OPEN_TAG"
    CLOSE_TAG = "T_CLOSE_TAG"
    INLINE_HTML = "T_INLINE_HTML"
    WHITESPACE = "T_WHITESPACE"
    COMMENT = "T_COMMENT"
    DOC_COMMENT = "T_DOC_COMMENT"
    STRING = "T_STRING"
    VARIABLE = "T_VARIABLE"
    LNUMBER = "T_LNUMBER"
    CONSTANT_ENCAPSED_STRING = "T_CONSTANT_ENCAPSED_STRING"
    COMMA = "T_COMMA"
    SEMICOLON = "T_SEMICOLON"
    OPEN_PARENTHESIS = "T_OPEN_PARENTHESIS"
    CLOSE_PARENTHESIS = "T_CLOSE_PARENTHESIS"
    OPEN_CURLY_BRACKET = "T_OPEN_CURLY_BRACKET"
    CLOSE_CURLY_BRACKET = "T_CLOSE_CURLY_BRACKET"
    OPEN_SQUARE_BRACKET = "T_OPEN_SQUARE_BRACKET"
    CLOSE_SQUARE_BRACKET = "T_CLOSE_SQUARE_BRACKET"
    EQUAL = "T_EQUAL"
    BITWISE_AND = "T_BITWISE_AND"
    OPERATOR = "T_OPERATOR"
    FUNCTION = "T_FUNCTION"
    CLOSURE = "T_CLOSURE"
    CLASS = "T_CLASS"
    KEYWORD = "T_KEYWORD"


# Tokens that carry no syntactic meaning.
EMPTY_TOKENS: FrozenSet[TokenKind] = frozenset({
    TokenKind.WHITESPACE,
    TokenKind.COMMENT,
    TokenKind.DOC_COMMENT,
})

KindSet = Union[TokenKind, Iterable[TokenKind]]


@dataclass(frozen=True)
class Token:
    """
    One lexical token.

    Attributes
    ----------
    index              : Position in the stream
    kind               : TokenKind
    text               : Raw source slice
    line, column       : 1-based position of the first character
    parenthesis_opener : Index of the matching ``(`` (parenthesis tokens)
    parenthesis_closer : Index of the matching ``)`` (parenthesis tokens)
    bracket_opener     : Index of the matching ``[`` / ``{``
    bracket_closer     : Index of the matching ``]`` / ``}``
    scope_opener       : ``{`` opening the body of a function/closure/class
    scope_closer       : ``}`` closing that body
    nested_parenthesis : Enclosing ``(`` indices, outermost first
    """
    index: int
    kind: TokenKind
    text: str
    line: int = 1
    column: int = 1
    parenthesis_opener: Optional[int] = None
    parenthesis_closer: Optional[int] = None
    bracket_opener: Optional[int] = None
    bracket_closer: Optional[int] = None
    scope_opener: Optional[int] = None
    scope_closer: Optional[int] = None
    nested_parenthesis: Tuple[int, ...] = field(default_factory=tuple)

    @property
    def is_empty(self) -> bool:
        return self.kind in EMPTY_TOKENS

    def __str__(self) -> str:
        return f"{self.kind.value}({self.text!r})@{self.line}:{self.column}"


def _as_kind_set(kinds: KindSet) -> FrozenSet[TokenKind]:
    if isinstance(kinds, TokenKind):
        return frozenset({kinds})
    return frozenset(kinds)


class TokenStream(Sequence[Token]):
    """
    Ordered, randomly indexable tokens of one source file.

    >>> stream = tokenize("<?php foo( $a );")
    >>> stream.find_next(TokenKind.VARIABLE, 0)
    4
    >>> stream.find_next(TokenKind.CLASS, 0) is None
    True
    """

    def __init__(
        self,
        tokens: Sequence[Token],
        filename: str = "<string>",
        eol_char: str = "\n",
    ) -> None:
        self._tokens: Tuple[Token, ...] = tuple(tokens)
        self.filename = filename
        self.eol_char = eol_char

    @property
    def tokens(self) -> Tuple[Token, ...]:
        return self._tokens

    def __getitem__(self, index):  # type: ignore[override]
        return self._tokens[index]

    def __len__(self) -> int:
        return len(self._tokens)

    def __iter__(self) -> Iterator[Token]:
        return iter(self._tokens)

    def find_next(
        self,
        kinds: KindSet,
        start: int,
        end: Optional[int] = None,
        exclude: bool = False,
    ) -> Optional[int]:
        """
        Index of the first token at ``start <= i < end`` whose kind is in
        ``kinds`` (or, with ``exclude``, is *not* in ``kinds``).
        """
        wanted = _as_kind_set(kinds)
        stop = len(self._tokens) if end is None else min(end, len(self._tokens))
        for i in range(max(start, 0), stop):
            if (self._tokens[i].kind in wanted) != exclude:
                return i
        return None

    def find_previous(
        self,
        kinds: KindSet,
        start: int,
        end: Optional[int] = None,
        exclude: bool = False,
    ) -> Optional[int]:
        """
        Index of the last token at ``start >= i >= end`` whose kind is in
        ``kinds`` (or, with ``exclude``, is *not* in ``kinds``).
        """
        wanted = _as_kind_set(kinds)
        stop = 0 if end is None else max(end, 0)
        for i in range(min(start, len(self._tokens) - 1), stop - 1, -1):
            if (self._tokens[i].kind in wanted) != exclude:
                return i
        return None

    def __repr__(self) -> str:
        return f"<TokenStream {self.filename!r} ({len(self._tokens)} tokens)>"


__all__ = [
    "EMPTY_TOKENS",
    "Token",
    "TokenKind",
    "TokenStream",
]
