"""Built-in sniffs."""

from phpsniffs.sniffs.function_call_argument_spacing import (
    FunctionCallArgumentSpacingSniff,
)

BUILTIN_SNIFFS = (
    FunctionCallArgumentSpacingSniff,
)

__all__ = [
    "BUILTIN_SNIFFS",
    "FunctionCallArgumentSpacingSniff",
]
