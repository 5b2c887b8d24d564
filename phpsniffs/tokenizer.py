"""
phpsniffs/tokenizer.py
══════════════════════

PHP tokenizer producing the :class:`~phpsniffs.tokens.TokenStream` that
sniffs consume.

Two stages:

  1. **Lexing** — a parsimonious PEG grammar whose rules are the lexeme
     classes; :class:`LexemeCollector` turns the parse tree into
     ``(kind, text)`` pairs.
  2. **Linking** — keyword classification, closure detection, line/column
     bookkeeping, bracket and scope partner maps, and the enclosing
     parenthesis stack of every token.

Text outside ``<?php ... ?>`` becomes opaque ``INLINE_HTML`` tokens that no
sniff inspects.  Heredoc / nowdoc bodies and string interpolation are not
supported.  Input that cannot be lexed, or whose brackets do not balance,
raises :class:`TokenizerError`.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional, Tuple

from parsimonious.exceptions import ParseError
from parsimonious.grammar import Grammar
from parsimonious.nodes import NodeVisitor

from phpsniffs.errors import TokenizerError
from phpsniffs.tokens import EMPTY_TOKENS, Token, TokenKind, TokenStream

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════
#  PART 1 — LEXICAL GRAMMAR (Parsimonious PEG)
# ═══════════════════════════════════════════════════════════════════

PHP_LEXICON = Grammar(r'''
    source              = inline_html? php_block*
    php_block           = open_tag code* (close_tag inline_html?)?
    code                = !close_tag lexeme
    lexeme              = whitespace
                        / doc_comment / block_comment / line_comment
                        / variable / bareword / number
                        / single_quoted / double_quoted
                        / comma / semicolon
                        / open_parenthesis / close_parenthesis
                        / open_curly_bracket / close_curly_bracket
                        / open_square_bracket / close_square_bracket
                        / operator / equal / bitwise_and

    inline_html         = ~r"(?:(?!<\?(?:php|=)).)+"is
    open_tag            = ~r"<\?php(?:\r\n|[ \t\n\r])?"i / "<?="
    close_tag           = ~r"\?>(?:\r\n|\n)?"
    whitespace          = ~r"[ \t\r\n\f\v]+"

    doc_comment         = ~r"/\*\*(?!/).*?\*/"s
    block_comment       = ~r"/\*.*?\*/"s
    line_comment        = ~r"(?://|#)(?:(?!\?>)[^\r\n])*"

    variable            = ~r"\$[^\W\d]\w*"
    bareword            = ~r"[^\W\d]\w*"
    number              = ~r"0[xX][0-9a-fA-F_]+|0[bB][01_]+|(?:\d[\d_]*(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?"
    single_quoted       = ~r"'(?:[^'\\]|\\.)*'"s
    double_quoted       = ~r'"(?:[^"\\]|\\.)*"'s

    comma               = ","
    semicolon           = ";"
    open_parenthesis    = "("
    close_parenthesis   = ")"
    open_curly_bracket  = "{"
    close_curly_bracket = "}"
    open_square_bracket = "["
    close_square_bracket = "]"

    operator            = ~r"\?->|<=>|===|!==|\*\*=|\.\.\.|<<=|>>=|\?\?=|==|!=|<>|<=|>=|&&|\|\||\+\+|--|\+=|-=|\*=|/=|\.=|%=|&=|\|=|\^=|->|=>|::|<<|>>|\?\?|\*\*|[-+*/%.<>!~^|?:@\\$`]"
    equal               = "="
    bitwise_and         = "&"
''')

_KIND_BY_RULE: Dict[str, TokenKind] = {
    "whitespace": TokenKind.WHITESPACE,
    "doc_comment": TokenKind.DOC_COMMENT,
    "block_comment": TokenKind.COMMENT,
    "line_comment": TokenKind.COMMENT,
    "variable": TokenKind.VARIABLE,
    "bareword": TokenKind.STRING,
    "number": TokenKind.LNUMBER,
    "single_quoted": TokenKind.CONSTANT_ENCAPSED_STRING,
    "double_quoted": TokenKind.CONSTANT_ENCAPSED_STRING,
    "comma": TokenKind.COMMA,
    "semicolon": TokenKind.SEMICOLON,
    "open_parenthesis": TokenKind.OPEN_PARENTHESIS,
    "close_parenthesis": TokenKind.CLOSE_PARENTHESIS,
    "open_curly_bracket": TokenKind.OPEN_CURLY_BRACKET,
    "close_curly_bracket": TokenKind.CLOSE_CURLY_BRACKET,
    "open_square_bracket": TokenKind.OPEN_SQUARE_BRACKET,
    "close_square_bracket": TokenKind.CLOSE_SQUARE_BRACKET,
    "operator": TokenKind.OPERATOR,
    "equal": TokenKind.EQUAL,
    "bitwise_and": TokenKind.BITWISE_AND,
}

# Reserved words that never name a function call.  ``function`` and
# ``class`` are classified separately.
PHP_KEYWORDS = frozenset({
    "abstract", "and", "array", "as", "break", "callable", "case", "catch",
    "clone", "const", "continue", "declare", "default", "die", "do", "echo",
    "else", "elseif", "empty", "enddeclare", "endfor", "endforeach",
    "endif", "endswitch", "endwhile", "enum", "eval", "exit", "extends",
    "final", "finally", "fn", "for", "foreach", "global", "goto", "if",
    "implements", "include", "include_once", "instanceof", "insteadof",
    "interface", "isset", "list", "match", "namespace", "new", "or",
    "print", "private", "protected", "public", "readonly", "require",
    "require_once", "return", "static", "switch", "throw", "trait", "try",
    "unset", "use", "var", "while", "xor", "yield",
})

# After these operators a bareword is a member name, whatever it spells.
_MEMBER_ACCESS = frozenset({"->", "?->", "::"})

_CLOSERS = {
    TokenKind.CLOSE_PARENTHESIS: TokenKind.OPEN_PARENTHESIS,
    TokenKind.CLOSE_SQUARE_BRACKET: TokenKind.OPEN_SQUARE_BRACKET,
    TokenKind.CLOSE_CURLY_BRACKET: TokenKind.OPEN_CURLY_BRACKET,
}
_OPENERS = frozenset(_CLOSERS.values())

_EOL_RE = re.compile(r"\r\n|\n|\r")


class LexemeCollector(NodeVisitor):
    """Flattens a :data:`PHP_LEXICON` parse tree into ``(kind, text)`` pairs."""

    grammar = PHP_LEXICON

    def visit_source(self, node, visited_children):
        return list(_flatten(visited_children))

    def visit_lexeme(self, node, visited_children):
        matched = node.children[0]
        return _KIND_BY_RULE[matched.expr_name], matched.text

    def visit_open_tag(self, node, visited_children):
        return TokenKind.OPEN_TAG, node.text

    def visit_close_tag(self, node, visited_children):
        return TokenKind.CLOSE_TAG, node.text

    def visit_inline_html(self, node, visited_children):
        return TokenKind.INLINE_HTML, node.text

    def generic_visit(self, node, visited_children):
        return visited_children or node


def _flatten(items):
    # Lexemes are tuples; optional and lookahead nodes that matched nothing
    # come back as bare nodes and are dropped.
    for item in items:
        if isinstance(item, tuple):
            yield item
        elif isinstance(item, list):
            yield from _flatten(item)


# ═══════════════════════════════════════════════════════════════════
#  PART 2 — LINKING
# ═══════════════════════════════════════════════════════════════════

class _Draft:
    """Mutable token record used while links are being resolved."""

    __slots__ = (
        "kind", "text", "line", "column",
        "parenthesis_opener", "parenthesis_closer",
        "bracket_opener", "bracket_closer",
        "scope_opener", "scope_closer", "nested_parenthesis",
    )

    def __init__(self, kind: TokenKind, text: str, line: int, column: int):
        self.kind = kind
        self.text = text
        self.line = line
        self.column = column
        self.parenthesis_opener: Optional[int] = None
        self.parenthesis_closer: Optional[int] = None
        self.bracket_opener: Optional[int] = None
        self.bracket_closer: Optional[int] = None
        self.scope_opener: Optional[int] = None
        self.scope_closer: Optional[int] = None
        self.nested_parenthesis: Tuple[int, ...] = ()

    def freeze(self, index: int) -> Token:
        return Token(
            index=index,
            kind=self.kind,
            text=self.text,
            line=self.line,
            column=self.column,
            parenthesis_opener=self.parenthesis_opener,
            parenthesis_closer=self.parenthesis_closer,
            bracket_opener=self.bracket_opener,
            bracket_closer=self.bracket_closer,
            scope_opener=self.scope_opener,
            scope_closer=self.scope_closer,
            nested_parenthesis=self.nested_parenthesis,
        )


def _position(lexemes: List[Tuple[TokenKind, str]]) -> List[_Draft]:
    drafts: List[_Draft] = []
    line, column = 1, 1
    for kind, text in lexemes:
        drafts.append(_Draft(kind, text, line, column))
        breaks = _EOL_RE.findall(text)
        if breaks:
            line += len(breaks)
            tail = _EOL_RE.split(text)[-1]
            column = len(tail) + 1
        else:
            column += len(text)
    return drafts


def _next_significant(drafts: List[_Draft], start: int) -> Optional[int]:
    for i in range(start, len(drafts)):
        kind = drafts[i].kind
        if kind not in EMPTY_TOKENS and kind is not TokenKind.BITWISE_AND:
            return i
    return None


def _classify_barewords(drafts: List[_Draft]) -> None:
    previous: Optional[_Draft] = None
    for i, draft in enumerate(drafts):
        if draft.kind is TokenKind.STRING:
            word = draft.text.lower()
            after_member = (
                previous is not None
                and previous.kind is TokenKind.OPERATOR
                and previous.text in _MEMBER_ACCESS
            )
            after_function = (
                previous is not None and previous.kind is TokenKind.FUNCTION
            )
            if after_member or after_function:
                pass
            elif word == "function":
                nxt = _next_significant(drafts, i + 1)
                if (nxt is not None
                        and drafts[nxt].kind is TokenKind.OPEN_PARENTHESIS):
                    draft.kind = TokenKind.CLOSURE
                else:
                    draft.kind = TokenKind.FUNCTION
            elif word == "class":
                draft.kind = TokenKind.CLASS
            elif word in PHP_KEYWORDS:
                draft.kind = TokenKind.KEYWORD
        if draft.kind not in EMPTY_TOKENS and draft.kind is not TokenKind.BITWISE_AND:
            previous = draft


def _link_brackets(drafts: List[_Draft]) -> None:
    stack: List[int] = []
    parentheses: List[int] = []
    for i, draft in enumerate(drafts):
        if draft.kind is TokenKind.OPEN_PARENTHESIS:
            draft.nested_parenthesis = tuple(parentheses)
            parentheses.append(i)
        elif draft.kind is TokenKind.CLOSE_PARENTHESIS and parentheses:
            parentheses.pop()
            draft.nested_parenthesis = tuple(parentheses)
        else:
            draft.nested_parenthesis = tuple(parentheses)

        if draft.kind in _OPENERS:
            stack.append(i)
        elif draft.kind in _CLOSERS:
            if not stack or drafts[stack[-1]].kind is not _CLOSERS[draft.kind]:
                raise TokenizerError(
                    f"Unmatched {draft.text!r}", draft.line, draft.column
                )
            opener = stack.pop()
            if draft.kind is TokenKind.CLOSE_PARENTHESIS:
                drafts[opener].parenthesis_opener = opener
                drafts[opener].parenthesis_closer = i
                draft.parenthesis_opener = opener
                draft.parenthesis_closer = i
            else:
                drafts[opener].bracket_opener = opener
                drafts[opener].bracket_closer = i
                draft.bracket_opener = opener
                draft.bracket_closer = i

    if stack:
        unclosed = drafts[stack[-1]]
        raise TokenizerError(
            f"Unclosed {unclosed.text!r}", unclosed.line, unclosed.column
        )


_SCOPED = frozenset({TokenKind.FUNCTION, TokenKind.CLOSURE, TokenKind.CLASS})


def _link_scopes(drafts: List[_Draft]) -> None:
    for i, draft in enumerate(drafts):
        if draft.kind not in _SCOPED:
            continue
        j = i + 1
        while j < len(drafts):
            candidate = drafts[j]
            if candidate.kind is TokenKind.OPEN_PARENTHESIS:
                j = candidate.parenthesis_closer + 1
                continue
            if candidate.kind is TokenKind.OPEN_CURLY_BRACKET:
                draft.scope_opener = j
                draft.scope_closer = candidate.bracket_closer
                break
            if candidate.kind is TokenKind.SEMICOLON:
                break
            j += 1
        if draft.kind is TokenKind.CLOSURE and draft.scope_closer is None:
            raise TokenizerError(
                "Closure without a body", draft.line, draft.column
            )


def detect_eol(source: str) -> str:
    """Return the first line ending used in ``source`` (``\\n`` if none)."""
    match = _EOL_RE.search(source)
    return match.group(0) if match else "\n"


# ═══════════════════════════════════════════════════════════════════
#  PART 3 — PUBLIC ENTRY POINT
# ═══════════════════════════════════════════════════════════════════

def tokenize(source: str, filename: str = "<string>") -> TokenStream:
    """
    Tokenize PHP ``source`` into a linked :class:`TokenStream`.

    Raises
    ------
    TokenizerError
        When the source cannot be lexed or its brackets do not balance.
    """
    try:
        tree = PHP_LEXICON.parse(source)
    except ParseError as exc:
        raise TokenizerError(
            f"Unexpected input {source[exc.pos:exc.pos + 10]!r}",
            exc.line(),
            exc.column(),
            filename=filename,
        ) from exc

    drafts = _position(LexemeCollector().visit(tree))
    _classify_barewords(drafts)
    try:
        _link_brackets(drafts)
        _link_scopes(drafts)
    except TokenizerError as exc:
        exc.filename = filename
        raise

    tokens = [draft.freeze(i) for i, draft in enumerate(drafts)]
    logger.debug("Tokenized %s into %d tokens", filename, len(tokens))
    return TokenStream(tokens, filename=filename, eol_char=detect_eol(source))


__all__ = [
    "PHP_KEYWORDS",
    "PHP_LEXICON",
    "LexemeCollector",
    "detect_eol",
    "tokenize",
]
