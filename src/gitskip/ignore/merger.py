"""
Merge translated fragments into one skip-path alternation
"""

from typing import Iterable

from ..shell import ShellKind
from .translator import to_shell_separators


def protect_trailing_backslashes(pattern: str) -> str:
    """
    Keep a trailing backslash run from escaping the closing double quote

    cmd argument parsing halves a run of backslashes that precedes a quote,
    so the run is doubled: an odd run gets at least one more backslash and
    the search binary still sees the original run.
    """
    run = len(pattern) - len(pattern.rstrip('\\'))
    if run:
        pattern += '\\' * run
    return pattern


def merge_fragments(fragments: Iterable[str], shell: ShellKind,
                    forward_slash_supported: bool = False) -> str:
    """
    Join fragments into one ``a|b|c`` pattern for the given shell

    Args:
        fragments: Fragments in insertion order, in slash or shell form
        shell: Target shell dialect
        forward_slash_supported: Leave ``/`` separators untouched on Windows

    Returns:
        Merged pattern, or an empty string when there is nothing to skip
    """
    merged = dict.fromkeys(
        to_shell_separators(fragment, shell, forward_slash_supported)
        for fragment in fragments if fragment
    )
    if not merged:
        return ''

    pattern = '|'.join(merged)
    if shell.is_cmd and not forward_slash_supported:
        pattern = protect_trailing_backslashes(pattern)
    return pattern
