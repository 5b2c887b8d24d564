# tests/conftest.py
"""Shared fixtures: tokenize a PHP snippet and run one sniff over it."""

import pytest

from phpsniffs.checkers import SniffFile
from phpsniffs.sniffs import FunctionCallArgumentSpacingSniff
from phpsniffs.tokenizer import tokenize


def run_spacing_sniff(source):
    """Return the diagnostics of the spacing sniff for ``source``.

    ``source`` is prefixed with an open tag line unless it already has one,
    so code starts on line 2.
    """
    if not source.startswith("<?php"):
        source = "<?php\n" + source
    stream = tokenize(source, filename="test.php")
    phpcs_file = SniffFile(stream)
    sniff = FunctionCallArgumentSpacingSniff()
    phpcs_file.active_sniff = sniff
    listens = sniff.register()
    for tok in stream:
        if tok.kind in listens:
            sniff.process(phpcs_file, tok.index)
    return phpcs_file.diagnostics


@pytest.fixture
def sniff_codes():
    """Callable returning the rule codes reported for a snippet, in order."""
    def _codes(source):
        return [d.rule_code for d in run_spacing_sniff(source)]
    return _codes


@pytest.fixture
def sniff_diagnostics():
    """Callable returning the full diagnostics reported for a snippet."""
    return run_spacing_sniff
