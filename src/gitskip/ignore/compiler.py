"""
Compile a whole ignore file into a skip-path profile
"""

import logging
import re
import time
from pathlib import Path
from typing import Dict, List, Optional, Union

from ..config import IgnoreConfig
from ..constants import MAX_DIAGNOSTICS
from ..utils import get_logger, log_with_context
from .externalizer import command_fits
from .merger import merge_fragments
from .profile import Diagnostic, DiagnosticKind, IgnoreProfile
from .translator import DropReason, to_shell_separators, translate

logger = get_logger(__name__)

_LINE_SPLIT_REGEX = re.compile(r'\r?\n')


def get_dot_folder_fragment(skip_dot_folders: bool) -> str:
    """Built-in fragment for folders starting with a dot or a dollar sign"""
    return '/[\\$\\.]' if skip_dot_folders else '/\\$'


def builtin_fragments(config: IgnoreConfig) -> List[str]:
    fragments = [get_dot_folder_fragment(config.skip_dot_folders)]
    if not config.skip_dot_folders:
        fragments.append(translate('.git/', skip_dot_folders=False).fragment)
    return fragments


class _Diagnostics:
    """Keeps the first MAX_DIAGNOSTICS issues; counts stay exact elsewhere"""

    def __init__(self, limit: int = MAX_DIAGNOSTICS):
        self.limit = limit
        self.items: List[Diagnostic] = []

    def add(self, kind: DiagnosticKind, line: int, text: str, message: str):
        # Fatal issues end compilation, always keep them
        if len(self.items) < self.limit or kind.fatal:
            self.items.append(Diagnostic(kind=kind, line=line, text=text, message=message))


def compile_ignore_text(raw_text: Optional[str],
                        config: IgnoreConfig,
                        root_path: Optional[Union[str, Path]] = None,
                        source: Optional[Union[str, Path]] = None) -> IgnoreProfile:
    """
    Compile ignore-file text into an IgnoreProfile

    Line-level problems are counted and recorded as diagnostics; only an
    exemption (with omit_exemptions off), empty input or an oversized
    pattern make the whole profile invalid. Nothing is raised.

    Args:
        raw_text: Content of the ignore file, already read by the caller
        config: Compilation settings
        root_path: Project root the profile belongs to
        source: Path of the ignore file, for messages

    Returns:
        A new IgnoreProfile
    """
    source_path = Path(source) if source else None
    if root_path is not None:
        root = Path(root_path)
    elif source_path is not None:
        root = source_path.parent
    else:
        root = Path('.')
    where = str(source_path) if source_path else str(root)

    diagnostics = _Diagnostics()

    def build(**fields) -> IgnoreProfile:
        return IgnoreProfile(
            root_path=root,
            config=config,
            source=source_path,
            diagnostics=tuple(diagnostics.items),
            **fields
        )

    if not config.use_ignore_file:
        logger.debug(f"Ignore file disabled for {root}")
        return build()

    if raw_text is None or not raw_text.strip():
        diagnostics.add(DiagnosticKind.IO_ERROR, 0, '', f"Read empty content from file: {where}")
        logger.error(f"Read empty content from file: {where}")
        return build()

    begin = time.time()
    shell = config.shell
    forward_slash = config.forward_slash_supported

    fragments: Dict[str, None] = dict.fromkeys(
        to_shell_separators(fragment, shell, forward_slash)
        for fragment in builtin_fragments(config)
    )
    total_count = 0
    dropped_count = 0
    exemption_count = 0
    error_count = 0

    for row, raw_line in enumerate(_LINE_SPLIT_REGEX.split(raw_text), 1):
        line = raw_line.strip()
        if not line or line.startswith('#'):
            continue

        total_count += 1
        result = translate(raw_line, config.skip_dot_folders)

        if result.reason is DropReason.EXEMPTION:
            exemption_count += 1
            dropped_count += 1
            if config.omit_exemptions:
                logger.warning(
                    f'Ignore exemption: "{line}" at {where}:{row} while omit_exemptions = true.'
                )
                continue

            message = (f'Skip using git-ignore due to found exemption: "{line}" at {where}:{row}'
                       f' while omit_exemptions = false.')
            diagnostics.add(DiagnosticKind.EXEMPTION_CONFLICT, row, line, message)
            logger.error(message)
            return build(
                exemption_count=exemption_count,
                error_count=error_count,
                total_pattern_count=total_count,
                parsed_pattern_count=total_count - dropped_count,
            )

        if result.dropped:
            dropped_count += 1
            if result.reason is not DropReason.REDUNDANT_DOT:
                diagnostics.add(DiagnosticKind.DEGENERATE_LINE, row, line,
                                f"Dropped {result.reason.value} line: {line}")
            continue

        fragment = to_shell_separators(result.fragment, shell, forward_slash)
        try:
            re.compile(fragment)
        except re.error as e:
            error_count += 1
            dropped_count += 1
            diagnostics.add(DiagnosticKind.REGEX_COMPILE_ERROR, row, line,
                            f"Invalid regex '{fragment}' from '{line}': {e}")
            logger.warning(f"{where}:{row}: invalid regex '{fragment}' from '{line}': {e}")
            continue

        fragments[fragment] = None

    pattern = merge_fragments(fragments, shell, forward_slash)
    valid = bool(fragments) and bool(pattern)
    if valid and not command_fits(pattern, shell, config.max_command_length):
        valid = False
        message = (f"Skip path pattern of {len(pattern)} chars exceeds the max command length"
                   f" {config.max_command_length} of {shell.value} shell")
        diagnostics.add(DiagnosticKind.COMMAND_LENGTH_OVERFLOW, 0, '', message)
        logger.error(f"{where}: {message}")

    cost = time.time() - begin
    log_with_context(
        logger, logging.INFO,
        f"Cost {cost:.3f} s to parse {len(fragments)} ignore-path patterns and {exemption_count}"
        f" exemptions from: {where} , SkipPathPattern.length = {len(pattern)}",
        root=str(root), valid=valid, errors=error_count,
    )

    return build(
        compiled_pattern=pattern or None,
        fragments=tuple(fragments),
        valid=valid,
        exemption_count=exemption_count,
        error_count=error_count,
        total_pattern_count=total_count,
        parsed_pattern_count=total_count - dropped_count,
    )
