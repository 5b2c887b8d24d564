"""
phpsniffs/sniffs/function_call_argument_spacing.py

Checks that calls to methods and functions are spaced correctly:

  SpaceAfterOpenParens    ``foo($a )``      at least one space after ``(``
  SpaceBeforeCloseParens  ``foo( $a)``      at least one space before ``)``
  SpaceBeforeComma        ``foo( $a ,$b )`` no space before a comma
  NoSpaceAfterComma       ``foo( $a,$b )``  a space after each comma
  NoSpaceBeforeEquals     ``foo( $x= 1 )``  a space before ``=``
  NoSpaceAfterEquals      ``foo( $x =1 )``  a space after ``=``

Comma and equals violations are reported on the called name; parenthesis
violations on the offending token.  Arguments laid out one per line are
accepted.
"""

from __future__ import annotations

from typing import FrozenSet

from phpsniffs.checkers import Sniff, SniffFile
from phpsniffs.tokens import EMPTY_TOKENS, TokenKind

# Separators inspected inside an argument list.
_SEPARATORS = frozenset({TokenKind.COMMA, TokenKind.VARIABLE, TokenKind.CLOSURE})

# Skipped when looking back for a ``function`` / ``class`` keyword, so that
# ``function &name(`` is recognised as a declaration.
_DECLARATION_SKIP = EMPTY_TOKENS | {TokenKind.BITWISE_AND}


class FunctionCallArgumentSpacingSniff(Sniff):
    """Spacing inside the argument list of function and method calls."""

    name = "Functions.FunctionCallArgumentSpacing"
    description = "Checks that calls to methods and functions are spaced correctly"
    codes = frozenset({
        "SpaceBeforeCloseParens",
        "SpaceAfterOpenParens",
        "SpaceBeforeComma",
        "NoSpaceAfterComma",
        "NoSpaceBeforeEquals",
        "NoSpaceAfterEquals",
    })

    def register(self) -> FrozenSet[TokenKind]:
        return frozenset({TokenKind.STRING})

    def process(self, phpcs_file: SniffFile, stack_ptr: int) -> None:
        tokens = phpcs_file.tokens

        # The name in "function myFunction(" or "class Foo" is a
        # declaration, not a call.
        keyword = phpcs_file.find_previous(
            _DECLARATION_SKIP, stack_ptr - 1, exclude=True
        )
        if keyword is not None and tokens[keyword].kind in (
            TokenKind.FUNCTION, TokenKind.CLASS
        ):
            return

        open_bracket = phpcs_file.find_next(
            EMPTY_TOKENS, stack_ptr + 1, exclude=True
        )
        if open_bracket is None or tokens[open_bracket].kind is not TokenKind.OPEN_PARENTHESIS:
            return

        # No arguments, nothing to space.
        if tokens[open_bracket + 1].kind is TokenKind.CLOSE_PARENTHESIS:
            return

        close_bracket = tokens[open_bracket].parenthesis_closer

        if tokens[close_bracket - 1].kind is not TokenKind.WHITESPACE:
            phpcs_file.add_error(
                "Expected at least 1 space before closing parenthesis",
                close_bracket - 1,
                "SpaceBeforeCloseParens",
            )

        if tokens[open_bracket + 1].kind is not TokenKind.WHITESPACE:
            phpcs_file.add_error(
                "Expected at least 1 space after opening parenthesis",
                open_bracket + 1,
                "SpaceAfterOpenParens",
            )

        next_separator = open_bracket
        while True:
            next_separator = phpcs_file.find_next(
                _SEPARATORS, next_separator + 1, close_bracket
            )
            if next_separator is None:
                break

            separator = tokens[next_separator]
            if separator.kind is TokenKind.CLOSURE:
                next_separator = separator.scope_closer
                continue

            # Only commas and variables of this call, not of a nested
            # call or array().
            if not separator.nested_parenthesis or separator.nested_parenthesis[-1] != open_bracket:
                continue

            if separator.kind is TokenKind.COMMA:
                self._check_comma(phpcs_file, stack_ptr, next_separator)
            elif separator.kind is TokenKind.VARIABLE:
                self._check_default_value(
                    phpcs_file, stack_ptr, next_separator, close_bracket
                )

    def _check_comma(self, phpcs_file: SniffFile, stack_ptr: int, comma: int) -> None:
        tokens = phpcs_file.tokens

        if tokens[comma - 1].kind is TokenKind.WHITESPACE:
            phpcs_file.add_error(
                "Space found before comma in function call",
                stack_ptr,
                "SpaceBeforeComma",
            )

        after = tokens[comma + 1]
        if after.kind is not TokenKind.WHITESPACE:
            phpcs_file.add_error(
                "No space found after comma in function call",
                stack_ptr,
                "NoSpaceAfterComma",
            )
        elif phpcs_file.eol_char not in after.text:
            # A line break means one argument per line, which is fine.
            space = len(after.text)
            if space < 1:
                phpcs_file.add_error(
                    "Expected at least 1 space after comma in function call; %s found",
                    stack_ptr,
                    "NoSpaceAfterComma",
                    [space],
                )

    def _check_default_value(
        self,
        phpcs_file: SniffFile,
        stack_ptr: int,
        variable: int,
        close_bracket: int,
    ) -> None:
        tokens = phpcs_file.tokens

        next_token = phpcs_file.find_next(
            EMPTY_TOKENS, variable + 1, close_bracket, exclude=True
        )
        if next_token is None or tokens[next_token].kind is not TokenKind.EQUAL:
            return

        if tokens[next_token - 1].kind is not TokenKind.WHITESPACE:
            phpcs_file.add_error(
                "Expected 1 space before = sign of default value",
                stack_ptr,
                "NoSpaceBeforeEquals",
            )

        if tokens[next_token + 1].kind is not TokenKind.WHITESPACE:
            phpcs_file.add_error(
                "Expected 1 space after = sign of default value",
                stack_ptr,
                "NoSpaceAfterEquals",
            )
