"""
Translation of one ignore-file line into a skip-path regex fragment.

The translation is an ordered list of named rules applied left to right.
Each rule reads and updates a small working state; a rule may finish the
translation early, either dropping the line or producing the final fragment.
Fragments use ``/`` as the path separator, see to_shell_separators() for the
shell-specific form.

Supported syntax (subset of gitignore):
    - ``#`` comments and blank lines
    - ``!`` exemptions (reported, never translated)
    - ``*``, ``**``, ``?`` and ``[...]`` classes, including ``[:digit:]`` names
    - ``\\ `` for a trailing space that is kept
    - leading ``/`` (root-relative) and trailing ``/`` (directory)
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Tuple

from ..shell import ShellKind
from ..utils import get_logger

logger = get_logger(__name__)


class DropReason(Enum):
    """Why a line produced no fragment"""
    COMMENT = "comment"
    EXEMPTION = "exemption"
    REDUNDANT_DOT = "redundant-dot"
    TOO_SHORT = "too-short"


@dataclass(frozen=True)
class TranslationResult:
    """Outcome of translating one ignore line"""
    line: str
    fragment: Optional[str] = None
    reason: Optional[DropReason] = None

    @property
    def dropped(self) -> bool:
        return self.fragment is None

    @classmethod
    def drop(cls, line: str, reason: DropReason) -> "TranslationResult":
        return cls(line=line, reason=reason)


@dataclass
class TranslationState:
    """Working state shared by the rules for one line"""
    line: str
    text: str
    skip_dot_folders: bool = True
    has_slash: bool = False
    is_extension: bool = False
    is_bare_word: bool = False
    result: Optional[TranslationResult] = None

    def finish(self, fragment: str) -> None:
        self.result = TranslationResult(line=self.line, fragment=fragment)

    def drop(self, reason: DropReason) -> None:
        self.result = TranslationResult.drop(self.line, reason)


@dataclass(frozen=True)
class TranslationRule:
    name: str
    apply: Callable[[TranslationState], None]


_REDUNDANT_DOT_REGEX = re.compile(r'^(\.\w|\.\*|\$)')
_TRAILING_CONTENTS_REGEX = re.compile(r'/\**\s*$')
_LEADING_DOUBLE_STAR_REGEX = re.compile(r'^\*{2,}/')
_EXTENSION_REGEX = re.compile(r'^\*\.[\w\[][^/]*$')
_WILDCARD_CHARS_REGEX = re.compile(r'[*?\[\]\\]')
_SWAP_FILE_PATTERNS = ('*~', '*~$')
# Trailing whitespace is ignored unless escaped (``foo\ ``)
_TRAILING_SPACE_REGEX = re.compile(r'(?<!\\)\s+$')
_POSIX_CLASS_REGEX = re.compile(r'\[:([a-z]+):\]')

# Python regexes have no [:name:] classes, expand them to ranges
_POSIX_CLASSES = {
    'alnum': 'a-zA-Z0-9',
    'alpha': 'a-zA-Z',
    'blank': ' \\t',
    'cntrl': '\\x00-\\x1f\\x7f',
    'digit': '0-9',
    'graph': '\\x21-\\x7e',
    'lower': 'a-z',
    'print': '\\x20-\\x7e',
    'punct': '!-/:-@\\[-`{-~',
    'space': '\\s',
    'upper': 'A-Z',
    'xdigit': '0-9A-Fa-f',
}

# Regex metacharacters that are literal in ignore files
_LITERAL_ESCAPES = set('.$^+(){}|]')
# Backslash-escaped glob characters keep a regex escape
_ESCAPED_GLOB_CHARS = _LITERAL_ESCAPES | set('*?[\\')

MIN_FRAGMENT_LENGTH = 2


def _escape_literal(ch: str) -> str:
    return '\\' + ch if ch in _LITERAL_ESCAPES else ch


def blank_or_comment(state: TranslationState) -> None:
    if not state.text or state.text.startswith('#'):
        state.drop(DropReason.COMMENT)


def exemption(state: TranslationState) -> None:
    if state.text.startswith('!'):
        state.drop(DropReason.EXEMPTION)


def redundant_dot(state: TranslationState) -> None:
    """Dot and dollar folders are already covered by the dot-folder fragment"""
    if state.skip_dot_folders and _REDUNDANT_DOT_REGEX.match(state.text):
        state.drop(DropReason.REDUNDANT_DOT)


def swap_file(state: TranslationState) -> None:
    """Editor backup files: ``*~`` means "name ends with a tilde" """
    if state.text in _SWAP_FILE_PATTERNS:
        state.finish('~$')


def trailing_contents(state: TranslationState) -> None:
    """``dir/**``, ``dir/*`` and ``dir/`` all mean the folder ``dir/``"""
    state.text = _TRAILING_CONTENTS_REGEX.sub('/', state.text)


def leading_double_star(state: TranslationState) -> None:
    """``**/name`` matches at any depth, which an unanchored regex already does"""
    state.text = _LEADING_DOUBLE_STAR_REGEX.sub('/', state.text)


def classify(state: TranslationState) -> None:
    text = state.text
    state.has_slash = '/' in text
    state.is_extension = not state.has_slash and bool(_EXTENSION_REGEX.match(text))
    state.is_bare_word = not state.has_slash and not _WILDCARD_CHARS_REGEX.search(text)


def _find_class_end(text: str, start: int) -> int:
    """Index of the ``]`` closing the class opened at ``start``, or -1"""
    n = len(text)
    j = start + 1
    if j < n and text[j] in '!^':
        j += 1
    if j < n and text[j] == ']':
        j += 1
    while j < n and text[j] != ']':
        if text[j] == '\\':
            j += 2
        elif text.startswith('[:', j):
            close = text.find(':]', j + 2)
            j = close + 2 if close >= 0 else j + 1
        else:
            j += 1
    return j if j < n else -1


def _strip_line(line: str) -> str:
    return _TRAILING_SPACE_REGEX.sub('', line.lstrip())


def _convert_class(body: str) -> str:
    negated = body[:1] in ('!', '^')
    if negated:
        body = body[1:]

    if body.isalpha() and len(set(body.lower())) == 1 and len(body) > 1:
        # [bB], [BbB] -> [Bb]; same characters, one spelling
        body = ''.join(sorted(set(body), key=lambda c: (c.islower(), c)))

    chars = []
    i = 0
    while i < len(body):
        ch = body[i]
        if ch == '\\' and i + 1 < len(body):
            chars.append(body[i:i + 2])
            i += 2
            continue
        if ch == '[':
            match = _POSIX_CLASS_REGEX.match(body, i)
            if match and match.group(1) in _POSIX_CLASSES:
                chars.append(_POSIX_CLASSES[match.group(1)])
                i = match.end()
                continue
        if ch in '.[]':
            chars.append('\\' + ch)
        else:
            chars.append(ch)
        i += 1
    return '[' + ('^' if negated else '') + ''.join(chars) + ']'


def wildcards(state: TranslationState) -> None:
    """Convert glob syntax to regex syntax in one left-to-right pass

    ``**`` -> ``.*``, ``*`` -> ``[^/]*``, ``?`` -> ``[^/]?``, ``.`` -> ``\\.``.
    The leading ``*`` of an extension-only pattern is dropped; the anchors
    rule pins it to the end instead.
    """
    text = state.text
    out = []
    n = len(text)
    i = 1 if state.is_extension else 0
    while i < n:
        ch = text[i]
        if ch == '\\':
            if i + 1 < n:
                escaped = text[i + 1]
                out.append('\\' + escaped if escaped in _ESCAPED_GLOB_CHARS else escaped)
                i += 2
            else:
                out.append('\\\\')
                i += 1
        elif ch == '*':
            j = i
            while j < n and text[j] == '*':
                j += 1
            out.append('.*' if j - i > 1 else '[^/]*')
            i = j
        elif ch == '?':
            out.append('[^/]?')
            i += 1
        elif ch == '[':
            end = _find_class_end(text, i)
            if end < 0:
                out.append('\\[')
                i += 1
            else:
                out.append(_convert_class(text[i + 1:end]))
                i = end + 1
        else:
            out.append(_escape_literal(ch))
            i += 1
    state.text = ''.join(out)


def anchors(state: TranslationState) -> None:
    if state.is_extension:
        state.text += '$'
    elif state.is_bare_word:
        # Single segment: match it as a whole name, and as a folder unless
        # it looks like a file name with an extension
        state.text = '/' + state.text
        if '.' not in state.line:
            state.text += '/'


def minimum_length(state: TranslationState) -> None:
    if len(state.text) < MIN_FRAGMENT_LENGTH:
        state.drop(DropReason.TOO_SHORT)
    else:
        state.finish(state.text)


RULES: Tuple[TranslationRule, ...] = (
    TranslationRule('blank_or_comment', blank_or_comment),
    TranslationRule('exemption', exemption),
    TranslationRule('redundant_dot', redundant_dot),
    TranslationRule('swap_file', swap_file),
    TranslationRule('trailing_contents', trailing_contents),
    TranslationRule('leading_double_star', leading_double_star),
    TranslationRule('classify', classify),
    TranslationRule('wildcards', wildcards),
    TranslationRule('anchors', anchors),
    TranslationRule('minimum_length', minimum_length),
)


def translate(line: str, skip_dot_folders: bool = True) -> TranslationResult:
    """
    Translate one ignore-file line into a regex fragment

    Args:
        line: Raw line from the ignore file
        skip_dot_folders: Whether dot folders are skipped by a built-in fragment

    Returns:
        TranslationResult with a fragment, or the reason the line was dropped
    """
    stripped = _strip_line(line)
    state = TranslationState(line=stripped, text=stripped, skip_dot_folders=skip_dot_folders)
    logger.trace(f"Input_Git_Ignore = {stripped}")

    for rule in RULES:
        rule.apply(state)
        if state.result is not None:
            break

    result = state.result
    if result.dropped:
        logger.trace(f"Dropped ({result.reason.value}): {stripped}")
    else:
        logger.trace(f"Skip_Paths_Regex = {result.fragment}")
    return result


def to_shell_separators(fragment: str, shell: ShellKind,
                        forward_slash_supported: bool = False) -> str:
    """Rewrite ``/`` separators for shells whose search paths use backslashes"""
    separator = shell.path_separator(forward_slash_supported)
    if separator == '/':
        return fragment
    return fragment.replace('/', separator)


def translate_for_shell(line: str, shell: ShellKind, skip_dot_folders: bool = True,
                        forward_slash_supported: bool = False) -> TranslationResult:
    """Translate a line and put the fragment in the shell's separator form"""
    result = translate(line, skip_dot_folders)
    if result.dropped:
        return result
    return TranslationResult(
        line=result.line,
        fragment=to_shell_separators(result.fragment, shell, forward_slash_supported),
    )
