"""
phpsniffs — coding-standard sniffs for PHP sources
==================================================

A small PHP tokenizer, a sniff framework in the spirit of PHP_CodeSniffer,
and the ``Functions.FunctionCallArgumentSpacing`` sniff.

Core modules
------------
tokens
    Token kinds, immutable tokens and the read-only ``TokenStream``.
tokenizer
    parsimonious-based PHP lexer with bracket / scope linking.
checkers
    Diagnostics, suppressions, ``Sniff`` base class, registry and runner.
sniffs
    Built-in sniffs.

Quick start
-----------
>>> from phpsniffs import SniffRunner
>>> results = SniffRunner().run_source("<?php foo($a,$b);")
>>> [d.rule_code for d in results.diagnostics]
['SpaceBeforeCloseParens', 'SpaceAfterOpenParens', 'NoSpaceAfterComma']
"""

from __future__ import annotations

import importlib
import logging
import sys
from typing import List

# ---------------------------------------------------------------------------
# Package metadata
# ---------------------------------------------------------------------------

__version__ = "0.1.0"
__license__ = "MIT"
__all__: List[str] = []          # populated below

_log = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Internal registry: (module_name, list_of_names_to_import)
# ---------------------------------------------------------------------------

_CORE_MODULES = {
    "errors": [
        "PhpSniffsError",
        "SniffError",
        "TokenizerError",
    ],
    "tokens": [
        "EMPTY_TOKENS",
        "Token",
        "TokenKind",
        "TokenStream",
    ],
    "tokenizer": [
        "tokenize",
    ],
    "checkers": [
        "Diagnostic",
        "DiagnosticSeverity",
        "SourceLocation",
        "SuppressionManager",
        "Sniff",
        "SniffFile",
        "SniffRegistry",
        "SniffRunner",
        "SniffRunResults",
        "default_registry",
    ],
    "sniffs": [
        "FunctionCallArgumentSpacingSniff",
    ],
}


def _import_names(module_rel_name: str, names: List[str]) -> None:
    """Import *names* from a submodule and bind them in the package namespace."""
    fq_name = f"{__name__}.{module_rel_name}"
    try:
        mod = importlib.import_module(fq_name)
    except ImportError as exc:
        raise ImportError(
            f"phpsniffs: required submodule '{module_rel_name}' "
            f"failed to import: {exc}"
        ) from exc

    current_module = sys.modules[__name__]
    for name in names:
        obj = getattr(mod, name, None)
        if obj is None:
            raise AttributeError(
                f"phpsniffs.{module_rel_name} does not export '{name}'"
            )
        setattr(current_module, name, obj)
        __all__.append(name)

    setattr(current_module, module_rel_name, mod)
    if module_rel_name not in __all__:
        __all__.append(module_rel_name)


for _mod, _names in _CORE_MODULES.items():
    _import_names(_mod, _names)

del _mod, _names
_log.debug("phpsniffs %s loaded", __version__)

__all__ += ["__version__"]
