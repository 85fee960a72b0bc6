"""
Compiled ignore state for one project root
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple

from ..config import IgnoreConfig
from ..shell import ShellKind


class DiagnosticKind(Enum):
    """Problems met while compiling an ignore file"""
    IO_ERROR = "io-error"
    EXEMPTION_CONFLICT = "exemption-conflict"
    REGEX_COMPILE_ERROR = "regex-compile-error"
    DEGENERATE_LINE = "degenerate-line"
    COMMAND_LENGTH_OVERFLOW = "command-length-overflow"

    @property
    def fatal(self) -> bool:
        return self in (
            DiagnosticKind.IO_ERROR,
            DiagnosticKind.EXEMPTION_CONFLICT,
            DiagnosticKind.COMMAND_LENGTH_OVERFLOW,
        )


@dataclass(frozen=True)
class Diagnostic:
    """One compilation issue; line is 1-based, 0 for file-level issues"""
    kind: DiagnosticKind
    line: int
    text: str
    message: str

    def __str__(self) -> str:
        location = f":{self.line}" if self.line else ""
        return f"{self.kind.value}{location}: {self.message}"


@dataclass
class ExportState:
    """Record of the persisted skip-path variable script

    Shared by successive profiles of the same root so an unchanged pattern
    is not written again.
    """
    script_path: Optional[Path] = None
    last_exported_pattern: Optional[str] = None
    succeeded: bool = False
    error: Optional[str] = None


@dataclass(frozen=True)
class IgnoreProfile:
    """Result of compiling a project's ignore file

    Immutable once built; the registry replaces it on recompilation.
    """
    root_path: Path
    config: IgnoreConfig
    compiled_pattern: Optional[str] = None
    fragments: Tuple[str, ...] = ()
    valid: bool = False
    exemption_count: int = 0
    error_count: int = 0
    total_pattern_count: int = 0
    parsed_pattern_count: int = 0
    diagnostics: Tuple[Diagnostic, ...] = ()
    source: Optional[Path] = None
    export: ExportState = field(default_factory=ExportState, compare=False)

    @property
    def shell_kind(self) -> ShellKind:
        return self.config.shell

    @property
    def export_threshold(self) -> int:
        return self.config.export_threshold

    @property
    def last_exported_pattern(self) -> Optional[str]:
        return self.export.last_exported_pattern

    @property
    def usable(self) -> bool:
        """Whether callers should prefer this pattern over generic exclusions"""
        return self.valid and bool(self.compiled_pattern)

    @property
    def fatal_diagnostic(self) -> Optional[Diagnostic]:
        for diagnostic in self.diagnostics:
            if diagnostic.kind.fatal:
                return diagnostic
        return None

    def summary(self) -> str:
        pattern_length = len(self.compiled_pattern or '')
        return (
            f"{self.root_path}: valid={self.valid}, patterns={self.parsed_pattern_count}/"
            f"{self.total_pattern_count}, exemptions={self.exemption_count}, "
            f"errors={self.error_count}, pattern length={pattern_length}"
        )
