"""
Ignore-file compilation for gitskip

Turns a project's gitignore-style file into one skip-path regex for the
search binary:
- Per-line glob to regex translation
- Deduplicated alternation with shell-specific escaping
- Externalization of long patterns into an environment variable script
- A registry of compiled profiles per project root
"""

from .translator import DropReason, TranslationResult, translate, translate_for_shell, to_shell_separators
from .profile import Diagnostic, DiagnosticKind, ExportState, IgnoreProfile
from .merger import merge_fragments
from .compiler import compile_ignore_text
from .externalizer import (
    Externalized,
    Inline,
    SkipPathExporter,
    command_fits,
    decide_placement,
    get_export_command,
    get_variable_reference,
)
from .file_loader import IgnoreFileLoader, IgnoreFileText
from .registry import IgnoreProfileRegistry

__all__ = [
    'DropReason',
    'TranslationResult',
    'translate',
    'translate_for_shell',
    'to_shell_separators',
    'Diagnostic',
    'DiagnosticKind',
    'ExportState',
    'IgnoreProfile',
    'merge_fragments',
    'compile_ignore_text',
    'Externalized',
    'Inline',
    'SkipPathExporter',
    'command_fits',
    'decide_placement',
    'get_export_command',
    'get_variable_reference',
    'IgnoreFileLoader',
    'IgnoreFileText',
    'IgnoreProfileRegistry',
]
