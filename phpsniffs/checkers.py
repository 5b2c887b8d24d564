"""
phpsniffs/checkers.py
═════════════════════

Sniff framework: turns a tokenized PHP file into suppressed, rendered
diagnostics.

Architecture
────────────

  ┌─────────────────────────────────────────────────────────┐
  │                     SniffRunner                         │
  │   tokenize() ──► TokenStream ──► SniffFile              │
  │                                     │                   │
  │         for each token: every Sniff registered          │
  │         for its kind gets process(file, index)          │
  │                                     │                   │
  │  ┌──────────────────────────────────▼────────────────┐  │
  │  │           SuppressionManager                      │  │
  │  │  phpcs:ignore │ phpcs:disable/enable │ global     │  │
  │  └──────────────────────────┬────────────────────────┘  │
  │                             │                           │
  │  ┌──────────────────────────▼────────────────────────┐  │
  │  │        Diagnostic Formatter (JSON / text)         │  │
  │  └───────────────────────────────────────────────────┘  │
  └─────────────────────────────────────────────────────────┘

A sniff declares the token kinds it listens for in ``register()`` and
reports violations through ``SniffFile.add_error`` / ``add_warning``.
Sniffs keep no state between invocations.
"""

from __future__ import annotations

import json
import logging
import re
import sys
import time
from abc import ABC, abstractmethod
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from fnmatch import fnmatch
from pathlib import Path
from typing import (
    Any,
    ClassVar,
    Dict,
    FrozenSet,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Sequence,
    Set,
    Tuple,
    Type,
)

from phpsniffs.errors import SniffError, TokenizerError
from phpsniffs.tokenizer import tokenize
from phpsniffs.tokens import KindSet, Token, TokenKind, TokenStream

logger = logging.getLogger(__name__)


# ═════════════════════════════════════════════════════════════════════════
#  PART 1 — DIAGNOSTIC MODEL
# ═════════════════════════════════════════════════════════════════════════

class DiagnosticSeverity(Enum):
    """phpcs-compatible severity levels."""
    ERROR = "error"
    WARNING = "warning"


@dataclass(frozen=True)
class SourceLocation:
    """A specific point in source code."""
    file: str = ""
    line: int = 0
    column: int = 0

    def __str__(self) -> str:
        if self.column:
            return f"{self.file}:{self.line}:{self.column}"
        return f"{self.file}:{self.line}"


@dataclass(frozen=True)
class Diagnostic:
    """
    A single diagnostic finding.

    Attributes
    ----------
    code       : Dotted source, ``<sniff name>.<rule code>``
    message    : Human-readable description, already formatted with ``data``
    severity   : DiagnosticSeverity
    location   : Position of the anchor token
    anchor     : Index of the anchor token in the stream
    sniff_name : Name of the sniff that produced this
    data       : Values substituted into the message template
    """
    code: str
    message: str
    severity: DiagnosticSeverity
    location: SourceLocation
    anchor: int = -1
    sniff_name: str = ""
    data: Tuple[Any, ...] = ()

    @property
    def rule_code(self) -> str:
        """The last component of ``code``, e.g. ``NoSpaceAfterComma``."""
        return self.code.rsplit(".", 1)[-1]

    def to_json(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "file": self.location.file,
            "line": self.location.line,
            "column": self.location.column,
            "severity": self.severity.value,
            "message": self.message,
            "code": self.code,
            "sniff": self.sniff_name,
        }
        if self.data:
            result["data"] = list(self.data)
        return result

    def to_json_str(self) -> str:
        """Single-line JSON string."""
        return json.dumps(self.to_json())

    def to_gcc_format(self) -> str:
        """GCC-style diagnostic string: file:line:col: severity: message."""
        sev = self.severity.value
        return f"{self.location}: {sev}: {self.message} [{self.code}]"


def _format_message(message: str, data: Sequence[Any]) -> str:
    if data and "%" in message:
        try:
            return message % tuple(data)
        except (TypeError, ValueError):
            # A literal "%" that is not a placeholder.
            return message
    return message


# ═════════════════════════════════════════════════════════════════════════
#  PART 2 — SUPPRESSION MANAGER
# ═════════════════════════════════════════════════════════════════════════

_DIRECTIVE_RE = re.compile(
    r"phpcs:(?P<verb>ignore|disable|enable)\b(?P<codes>[^\r\n]*?)(?:--.*)?$",
    re.MULTILINE,
)


def _parse_codes(raw: str) -> Set[str]:
    raw = raw.strip().rstrip("*/").strip()
    codes = {c.strip() for c in raw.split(",") if c.strip()}
    return codes or {"*"}


def _code_matches(pattern: str, code: str) -> bool:
    return pattern == "*" or code == pattern or code.startswith(pattern + ".")


class SuppressionManager:
    """
    Manages diagnostic suppressions from multiple sources.

    Sources:
      1. Inline comments:  ``// phpcs:ignore Code`` (same or next line)
      2. Regions:          ``// phpcs:disable Code`` ... ``// phpcs:enable``
      3. File-level suppressions (passed programmatically)
      4. Global suppressions (command-line or config)

    A code suppresses any diagnostic whose dotted code equals it or starts
    with it, so ``Functions.FunctionCallArgumentSpacing`` silences every
    rule of that sniff.  A directive without codes suppresses everything.

    Usage
    -----
    >>> sm = SuppressionManager()
    >>> sm.load_inline_suppressions(stream)
    >>> sm.add_file_suppression("Functions", "legacy/*.php")
    >>> sm.add_global_suppression("Functions.FunctionCallArgumentSpacing.SpaceBeforeComma")
    >>> if not sm.is_suppressed(diagnostic):
    ...     emit(diagnostic)
    """

    def __init__(self) -> None:
        # {(file, line)} → set of codes suppressed at that location
        self._inline: Dict[Tuple[str, int], Set[str]] = defaultdict(set)
        # file → [(first line, last line or None, codes)]
        self._regions: Dict[str, List[Tuple[int, Optional[int], Set[str]]]] = (
            defaultdict(list)
        )
        # file pattern → set of codes
        self._file_level: Dict[str, Set[str]] = defaultdict(set)
        # globally suppressed codes
        self._global: Set[str] = set()

    def load_inline_suppressions(self, stream: TokenStream) -> None:
        """Scan comment tokens of ``stream`` for ``phpcs:`` directives."""
        file = stream.filename
        self._regions.pop(file, None)
        for key in [k for k in self._inline if k[0] == file]:
            del self._inline[key]
        open_region: Optional[Tuple[int, Set[str]]] = None

        for tok in stream:
            if tok.kind not in (TokenKind.COMMENT, TokenKind.DOC_COMMENT):
                continue
            match = _DIRECTIVE_RE.search(tok.text)
            if match is None:
                continue
            verb = match.group("verb")
            codes = _parse_codes(match.group("codes"))
            if verb == "ignore":
                self._inline[(file, tok.line)].update(codes)
            elif verb == "disable":
                if open_region is not None:
                    self._regions[file].append(
                        (open_region[0], tok.line - 1, open_region[1])
                    )
                open_region = (tok.line, codes)
            elif open_region is not None:
                self._regions[file].append(
                    (open_region[0], tok.line, open_region[1])
                )
                open_region = None

        if open_region is not None:
            self._regions[file].append((open_region[0], None, open_region[1]))

    def add_file_suppression(self, code: str, file_pattern: str) -> None:
        """Suppress ``code`` in files matching ``file_pattern``."""
        self._file_level[file_pattern].add(code)

    def add_global_suppression(self, code: str) -> None:
        """Globally suppress ``code``."""
        self._global.add(code)

    def is_suppressed(self, diag: Diagnostic) -> bool:
        """Check whether a diagnostic should be suppressed."""
        code = diag.code

        # Global
        if any(_code_matches(p, code) for p in self._global):
            return True

        loc = diag.location

        # Inline (exact line match, or line-1 for preceding-line ignore)
        for line_offset in (0, 1):
            suppressed = self._inline.get((loc.file, loc.line - line_offset), ())
            if any(_code_matches(p, code) for p in suppressed):
                return True

        # Regions
        for first, last, codes in self._regions.get(loc.file, ()):
            if loc.line >= first and (last is None or loc.line <= last):
                if any(_code_matches(p, code) for p in codes):
                    return True

        # File-level
        for pattern, codes in self._file_level.items():
            if any(_code_matches(p, code) for p in codes):
                if (pattern == loc.file or loc.file.endswith(pattern)
                        or fnmatch(loc.file, pattern)):
                    return True

        return False

    def filter_diagnostics(
        self, diagnostics: Iterable[Diagnostic]
    ) -> List[Diagnostic]:
        """Return only non-suppressed diagnostics."""
        return [d for d in diagnostics if not self.is_suppressed(d)]


# ═════════════════════════════════════════════════════════════════════════
#  PART 3 — SNIFF BASE CLASS AND DIAGNOSTIC SINK
# ═════════════════════════════════════════════════════════════════════════

class SniffFile:
    """
    One file as seen by a sniff: the read-only token stream plus the
    diagnostic sink.

    The runner sets ``active_sniff`` before each ``process`` call so that
    recorded codes are qualified with the sniff's name.
    """

    def __init__(self, stream: TokenStream) -> None:
        self.stream = stream
        self.active_sniff: Optional[Sniff] = None
        self._diagnostics: List[Diagnostic] = []

    @property
    def filename(self) -> str:
        return self.stream.filename

    @property
    def tokens(self) -> TokenStream:
        return self.stream

    @property
    def eol_char(self) -> str:
        return self.stream.eol_char

    @property
    def diagnostics(self) -> List[Diagnostic]:
        return list(self._diagnostics)

    def find_next(
        self,
        kinds: KindSet,
        start: int,
        end: Optional[int] = None,
        exclude: bool = False,
    ) -> Optional[int]:
        return self.stream.find_next(kinds, start, end, exclude)

    def find_previous(
        self,
        kinds: KindSet,
        start: int,
        end: Optional[int] = None,
        exclude: bool = False,
    ) -> Optional[int]:
        return self.stream.find_previous(kinds, start, end, exclude)

    def add_error(
        self,
        message: str,
        stack_ptr: int,
        code: str,
        data: Optional[Sequence[Any]] = None,
    ) -> None:
        """Record an error anchored at token ``stack_ptr``."""
        severity = DiagnosticSeverity.ERROR
        if self.active_sniff is not None:
            severity = self.active_sniff.severity
        self._record(message, stack_ptr, code, data, severity)

    def add_warning(
        self,
        message: str,
        stack_ptr: int,
        code: str,
        data: Optional[Sequence[Any]] = None,
    ) -> None:
        """Record a warning anchored at token ``stack_ptr``."""
        self._record(message, stack_ptr, code, data, DiagnosticSeverity.WARNING)

    def discard(self, sniff_name: str) -> None:
        """Drop every diagnostic recorded by ``sniff_name``."""
        self._diagnostics = [
            d for d in self._diagnostics if d.sniff_name != sniff_name
        ]

    def _record(
        self,
        message: str,
        stack_ptr: int,
        code: str,
        data: Optional[Sequence[Any]],
        severity: DiagnosticSeverity,
    ) -> None:
        values = tuple(data or ())
        tok: Token = self.stream[stack_ptr]
        sniff_name = self.active_sniff.name if self.active_sniff else ""
        self._diagnostics.append(Diagnostic(
            code=f"{sniff_name}.{code}" if sniff_name else code,
            message=_format_message(message, values),
            severity=severity,
            location=SourceLocation(
                file=self.filename, line=tok.line, column=tok.column
            ),
            anchor=stack_ptr,
            sniff_name=sniff_name,
            data=values,
        ))


class Sniff(ABC):
    """
    Abstract base class for all sniffs.

    Subclass Contract
    ─────────────────
      - Override ``name``, ``description``, ``codes``
      - Implement ``register()`` and ``process()``
      - Optionally override ``configure()`` for extra options
    """

    # ── Metadata (override in subclasses) ────────────────────────────

    name: ClassVar[str] = "base-sniff"
    description: ClassVar[str] = ""
    codes: ClassVar[FrozenSet[str]] = frozenset()
    default_severity: ClassVar[DiagnosticSeverity] = DiagnosticSeverity.ERROR

    def __init__(self) -> None:
        self.severity: DiagnosticSeverity = self.default_severity

    def configure(self, options: Mapping[str, Any]) -> None:
        """
        Called once before the first ``process`` call.

        Recognised options: ``severity`` ("error" or "warning"), which sets
        the severity of everything reported through ``add_error``.
        """
        if "severity" in options:
            try:
                self.severity = DiagnosticSeverity(options["severity"])
            except ValueError:
                raise SniffError(
                    f"Invalid severity {options['severity']!r} for {self.name}"
                ) from None

    @abstractmethod
    def register(self) -> FrozenSet[TokenKind]:
        """Token kinds this sniff wants to be invoked for."""
        ...

    @abstractmethod
    def process(self, phpcs_file: SniffFile, stack_ptr: int) -> None:
        """Inspect the token at ``stack_ptr`` and report violations."""
        ...

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} '{self.name}'>"


# ═════════════════════════════════════════════════════════════════════════
#  PART 4 — SNIFF REGISTRY
# ═════════════════════════════════════════════════════════════════════════

class SniffRegistry:
    """
    Registry of available sniffs with discovery and filtering.

    Usage
    -----
    >>> registry = SniffRegistry()
    >>> registry.register(FunctionCallArgumentSpacingSniff)
    >>> sniffs = registry.get_enabled()
    """

    def __init__(self) -> None:
        self._sniffs: Dict[str, Type[Sniff]] = {}
        self._disabled: Set[str] = set()

    def register(self, sniff_cls: Type[Sniff]) -> None:
        """Register a sniff class."""
        self._sniffs[sniff_cls.name] = sniff_cls

    def unregister(self, name: str) -> None:
        """Remove a sniff by name."""
        self._sniffs.pop(name, None)

    def disable(self, name: str) -> None:
        """Disable a registered sniff."""
        self._disabled.add(name)

    def enable(self, name: str) -> None:
        """Re-enable a disabled sniff."""
        self._disabled.discard(name)

    def get_all(self) -> List[Type[Sniff]]:
        return list(self._sniffs.values())

    def get_enabled(self) -> List[Type[Sniff]]:
        return [
            cls for name, cls in self._sniffs.items()
            if name not in self._disabled
        ]

    def get_by_name(self, name: str) -> Optional[Type[Sniff]]:
        return self._sniffs.get(name)

    def filter_by_code(self, code: str) -> List[Type[Sniff]]:
        """Return sniffs that can produce the given rule code."""
        return [cls for cls in self._sniffs.values() if code in cls.codes]

    @property
    def names(self) -> List[str]:
        return sorted(self._sniffs.keys())


def default_registry() -> SniffRegistry:
    """A registry holding every built-in sniff."""
    from phpsniffs.sniffs import BUILTIN_SNIFFS

    registry = SniffRegistry()
    for sniff_cls in BUILTIN_SNIFFS:
        registry.register(sniff_cls)
    return registry


# ═════════════════════════════════════════════════════════════════════════
#  PART 5 — SNIFF RUNNER
# ═════════════════════════════════════════════════════════════════════════

@dataclass
class SniffRunResults:
    """
    Aggregate results from running a suite of sniffs.

    Attributes
    ----------
    diagnostics          : All diagnostics from all sniffs
    diagnostics_by_sniff : Diagnostics grouped by sniff name
    stats                : Timing and counting statistics
    sniff_names          : Names of sniffs that were run
    files                : Files that were processed
    """
    diagnostics: List[Diagnostic] = field(default_factory=list)
    diagnostics_by_sniff: Dict[str, List[Diagnostic]] = field(
        default_factory=lambda: defaultdict(list)
    )
    stats: Dict[str, Any] = field(default_factory=dict)
    sniff_names: List[str] = field(default_factory=list)
    files: List[str] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        return sum(
            1 for d in self.diagnostics
            if d.severity == DiagnosticSeverity.ERROR
        )

    @property
    def warning_count(self) -> int:
        return sum(
            1 for d in self.diagnostics
            if d.severity == DiagnosticSeverity.WARNING
        )

    @property
    def total_count(self) -> int:
        return len(self.diagnostics)

    def by_severity(self, severity: DiagnosticSeverity) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == severity]

    def by_file(self, file: str) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.location.file == file]

    def by_code(self, code: str) -> List[Diagnostic]:
        """Diagnostics whose code equals ``code`` or starts with it."""
        return [d for d in self.diagnostics if _code_matches(code, d.code)]

    def merge(self, other: SniffRunResults) -> None:
        """Fold ``other`` into these results."""
        self.diagnostics.extend(other.diagnostics)
        for name, diags in other.diagnostics_by_sniff.items():
            self.diagnostics_by_sniff[name].extend(diags)
        for key, val in other.stats.items():
            # Accumulate times
            if key in self.stats:
                self.stats[key] += val
            else:
                self.stats[key] = val
        for name in other.sniff_names:
            if name not in self.sniff_names:
                self.sniff_names.append(name)
        self.files.extend(other.files)

    def to_json_lines(self) -> str:
        return "\n".join(d.to_json_str() for d in self.diagnostics)

    def to_gcc_format(self) -> str:
        return "\n".join(d.to_gcc_format() for d in self.diagnostics)

    def summary(self) -> str:
        """Human-readable summary."""
        lines = [
            f"Sniff run complete: {self.total_count} diagnostics "
            f"({self.error_count} errors, {self.warning_count} warnings) "
            f"in {len(self.files)} files",
        ]
        for name in self.sniff_names:
            count = len(self.diagnostics_by_sniff.get(name, []))
            elapsed = self.stats.get(f"{name}_elapsed_ms", 0)
            lines.append(f"  {name}: {count} findings ({elapsed:.1f}ms)")
        return "\n".join(lines)


class SniffRunner:
    """
    Runs a suite of sniffs against tokenized files.

    Usage
    -----
    >>> runner = SniffRunner()
    >>> results = runner.run_file("src/Controller.php")
    >>> print(results.summary())

    >>> results = runner.run(tokenize(source), sniffs=["Functions.FunctionCallArgumentSpacing"])

    Parameters for constructor
    ─────────────────────────
    registry    : SniffRegistry — source of sniff classes
    suppressions: SuppressionManager — pre-loaded suppression rules
    options     : dict — per-sniff options keyed by sniff name; the key
                  ``"*"`` applies to every sniff
    """

    def __init__(
        self,
        registry: Optional[SniffRegistry] = None,
        suppressions: Optional[SuppressionManager] = None,
        options: Optional[Dict[str, Dict[str, Any]]] = None,
    ) -> None:
        self.registry = registry or default_registry()
        self.suppressions = suppressions or SuppressionManager()
        self.options = options or {}

    def _select(self, sniffs: Optional[Sequence[str]]) -> List[Type[Sniff]]:
        if sniffs is None:
            return self.registry.get_enabled()
        selected: List[Type[Sniff]] = []
        for name in sniffs:
            cls = self.registry.get_by_name(name)
            if cls is None:
                raise SniffError(f"Unknown sniff: {name}")
            selected.append(cls)
        return selected

    def _instantiate(self, sniff_cls: Type[Sniff]) -> Sniff:
        sniff = sniff_cls()
        merged: Dict[str, Any] = dict(self.options.get("*", {}))
        merged.update(self.options.get(sniff_cls.name, {}))
        sniff.configure(merged)
        return sniff

    def run(
        self,
        stream: TokenStream,
        sniffs: Optional[Sequence[str]] = None,
    ) -> SniffRunResults:
        """
        Run sniffs against a single token stream.

        Parameters
        ----------
        stream : TokenStream of one file
        sniffs : list of sniff names to run (None = all enabled)
        """
        results = SniffRunResults(files=[stream.filename])
        self.suppressions.load_inline_suppressions(stream)

        phpcs_file = SniffFile(stream)
        instances = [self._instantiate(cls) for cls in self._select(sniffs)]
        listeners: Dict[TokenKind, List[Sniff]] = defaultdict(list)
        for sniff in instances:
            results.sniff_names.append(sniff.name)
            results.stats[f"{sniff.name}_elapsed_ms"] = 0.0
            for kind in sniff.register():
                listeners[kind].append(sniff)

        failed: Set[str] = set()
        for tok in stream:
            for sniff in listeners.get(tok.kind, ()):
                if sniff.name in failed:
                    continue
                phpcs_file.active_sniff = sniff
                t0 = time.monotonic()
                try:
                    sniff.process(phpcs_file, tok.index)
                except Exception as exc:
                    # The sniff's findings for this file are replaced by a
                    # single internal report.
                    logger.error(
                        "Sniff %s failed on %s at token %d: %s",
                        sniff.name, stream.filename, tok.index, exc,
                        exc_info=True,
                    )
                    failed.add(sniff.name)
                    phpcs_file.discard(sniff.name)
                    phpcs_file.active_sniff = None
                    phpcs_file.add_error(
                        f"Sniff '{sniff.name}' failed: {exc}",
                        tok.index,
                        "internal.Exception",
                    )
                finally:
                    results.stats[f"{sniff.name}_elapsed_ms"] += (
                        (time.monotonic() - t0) * 1000.0
                    )
        phpcs_file.active_sniff = None

        diags = self.suppressions.filter_diagnostics(phpcs_file.diagnostics)
        results.diagnostics.extend(diags)
        for diag in diags:
            results.diagnostics_by_sniff[diag.sniff_name or "internal"].append(diag)
        logger.info(
            "%s: %d diagnostics from %d sniffs",
            stream.filename, len(diags), len(instances),
        )
        return results

    def run_source(
        self,
        source: str,
        filename: str = "<string>",
        sniffs: Optional[Sequence[str]] = None,
    ) -> SniffRunResults:
        """Tokenize ``source`` and run sniffs on it."""
        try:
            stream = tokenize(source, filename=filename)
        except TokenizerError as exc:
            logger.warning("Skipping %s: %s", filename, exc)
            return SniffRunResults(
                diagnostics=[Diagnostic(
                    code="internal.Tokenizer",
                    message=f"Could not tokenize file: {exc.message}",
                    severity=DiagnosticSeverity.ERROR,
                    location=SourceLocation(
                        file=filename, line=exc.line, column=exc.column
                    ),
                )],
                files=[filename],
            )
        return self.run(stream, sniffs=sniffs)

    def run_file(
        self,
        path: Any,
        sniffs: Optional[Sequence[str]] = None,
    ) -> SniffRunResults:
        """Read, tokenize and sniff one file."""
        p = Path(path)
        logger.debug("Processing %s", p)
        source = p.read_text(encoding="utf-8")
        return self.run_source(source, filename=str(p), sniffs=sniffs)

    def run_paths(
        self,
        paths: Iterable[Any],
        sniffs: Optional[Sequence[str]] = None,
        extensions: Sequence[str] = ("php",),
    ) -> SniffRunResults:
        """Run sniffs over files and directory trees."""
        combined = SniffRunResults()
        for path in iter_source_files(paths, extensions):
            combined.merge(self.run_file(path, sniffs=sniffs))
        return combined


def iter_source_files(
    paths: Iterable[Any], extensions: Sequence[str] = ("php",)
) -> Iterator[Path]:
    """
    Yield files named directly, and files under directories whose suffix
    is one of ``extensions``, in sorted order.
    """
    suffixes = {"." + ext.lstrip(".").lower() for ext in extensions}
    for raw in paths:
        p = Path(raw)
        if p.is_dir():
            for child in sorted(p.rglob("*")):
                if child.is_file() and child.suffix.lower() in suffixes:
                    yield child
        elif p.is_file():
            yield p
        else:
            raise FileNotFoundError(f"No such file or directory: {p}")


# ═════════════════════════════════════════════════════════════════════════
#  PART 6 — COMMAND-LINE ENTRY POINT
# ═════════════════════════════════════════════════════════════════════════

EXIT_OK: int = 0
EXIT_ERROR: int = 1
EXIT_INFRA: int = 2


def _configure_logging(verbosity: int) -> None:
    """Set up the ``phpsniffs`` logger: 0 → WARNING, 1 → INFO, 2+ → DEBUG."""
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s [%(levelname)-5.5s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    root = logging.getLogger("phpsniffs")
    root.setLevel(level)
    root.addHandler(handler)


def run_files(
    paths: Sequence[str],
    sniffs: Optional[Sequence[str]] = None,
    output: str = "gcc",
    exclude: Optional[Sequence[str]] = None,
    severity: Optional[str] = None,
    extensions: Sequence[str] = ("php",),
    stream: Any = None,
) -> int:
    """
    Sniff ``paths`` and write diagnostics to ``stream`` (stdout).

    Returns
    -------
    Exit code (0 = no errors, 1 = errors found, 2 = infrastructure failure)
    """
    out = stream or sys.stdout

    sm = SuppressionManager()
    for code in exclude or ():
        sm.add_global_suppression(code)

    options: Dict[str, Dict[str, Any]] = {}
    if severity:
        options["*"] = {"severity": severity}

    runner = SniffRunner(suppressions=sm, options=options)
    try:
        results = runner.run_paths(paths, sniffs=sniffs, extensions=extensions)
    except (OSError, UnicodeDecodeError, SniffError) as exc:
        logger.error("%s", exc)
        return EXIT_INFRA

    if output == "json":
        for diag in results.diagnostics:
            out.write(diag.to_json_str() + "\n")
    elif output == "gcc":
        for diag in results.diagnostics:
            out.write(diag.to_gcc_format() + "\n")
    else:
        out.write(results.summary() + "\n")

    return EXIT_ERROR if results.error_count > 0 else EXIT_OK


def main(argv: Optional[Sequence[str]] = None) -> int:
    """CLI entry point for ``phpsniffs`` / ``python -m phpsniffs``."""
    import argparse

    parser = argparse.ArgumentParser(
        description="Check PHP sources against coding-standard sniffs",
        prog="phpsniffs",
    )
    parser.add_argument("paths", nargs="*", help="Files or directories")
    parser.add_argument(
        "--sniffs", nargs="*", default=None,
        help="Sniff names to run (default: all)",
    )
    parser.add_argument(
        "--output", choices=["json", "gcc", "summary"],
        default="gcc", help="Output format",
    )
    parser.add_argument(
        "--exclude", nargs="*", default=None,
        help="Diagnostic codes (or code prefixes) to suppress",
    )
    parser.add_argument(
        "--severity", choices=[s.value for s in DiagnosticSeverity],
        default=None, help="Report every sniff error with this severity",
    )
    parser.add_argument(
        "--extensions", default="php",
        help="Comma-separated file extensions to check in directories",
    )
    parser.add_argument(
        "--list-sniffs", action="store_true",
        help="List available sniffs and exit",
    )
    parser.add_argument(
        "-v", "--verbose", action="count", default=0,
        help="Increase log verbosity (-v info, -vv debug)",
    )

    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    if args.list_sniffs:
        registry = default_registry()
        for name in registry.names:
            cls = registry.get_by_name(name)
            desc = cls.description if cls else ""
            codes = ", ".join(sorted(cls.codes)) if cls else ""
            print(f"  {name:40s} {desc}")
            print(f"  {'':40s} Codes: {codes}")
            print()
        return EXIT_OK

    if not args.paths:
        parser.error("at least one path is required")

    return run_files(
        paths=args.paths,
        sniffs=args.sniffs,
        output=args.output,
        exclude=args.exclude,
        severity=args.severity,
        extensions=[e for e in args.extensions.split(",") if e],
    )


if __name__ == "__main__":
    sys.exit(main())


__all__ = [
    # Diagnostic model
    "Diagnostic",
    "DiagnosticSeverity",
    "SourceLocation",
    # Suppression
    "SuppressionManager",
    # Sniff framework
    "Sniff",
    "SniffFile",
    "SniffRegistry",
    "default_registry",
    # Runner
    "SniffRunner",
    "SniffRunResults",
    "iter_source_files",
    # Entry point
    "run_files",
    "main",
]
