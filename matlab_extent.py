"""Resolve where a MATLAB function definition ends.

Two dialects exist in the wild. Files where every ``function`` is closed by
a matching ``end`` are handled with a balanced keyword walk. Older files
omit the closing ``end``; a function then runs until the next header.
"""

from __future__ import annotations

import logging
import re
import string
from typing import Iterator, List, Optional, Tuple

from matlab_patterns import FUNCTION_RE

BLOCK_OPENERS = frozenset({"function", "if", "for", "parfor", "while", "switch", "try", "spmd"})

_WORD_RE = re.compile(r"[A-Za-z_]\w*")
_NUMBER_RE = re.compile(r"\d+(?:\.\d*)?(?:[eE][+-]?\d+)?[ij]?")
_ARGUMENTS_LINE_RE = re.compile(r"[ \t]*(?:\((?:Input|Output|Repeating)\))?[ \t\r]*(?:%.*)?$")
_BLOCK_COMMENT_OPEN_RE = re.compile(r"^[ \t]*%\{[ \t\r]*$", re.MULTILINE)
_BLOCK_COMMENT_CLOSE_RE = re.compile(r"^[ \t]*%\}[ \t\r]*$", re.MULTILINE)

_WORD_START = frozenset(string.ascii_letters + "_")
# a quote after any of these is the transpose operator
_TRANSPOSE_AFTER = frozenset(string.ascii_letters + string.digits + ")]}.'_")


class BlockError(SyntaxError):
    """Raised when a block cannot be balanced against its ``end``."""


def _at_line_start(text: str, pos: int) -> bool:
    i = pos - 1
    while i >= 0 and text[i] in " \t":
        i -= 1
    return i < 0 or text[i] == "\n"


def _skip_to_eol(text: str, pos: int) -> int:
    eol = text.find("\n", pos)
    return len(text) if eol == -1 else eol


def iter_block_keywords(text: str, pos: int = 0) -> Iterator[Tuple[str, int, int]]:
    """Yield ``(keyword, start, end)`` for block keywords from ``pos`` onward.

    Comments, strings and continuation tails are skipped. ``end`` inside
    ``()``, ``[]`` or ``{}`` is an index and is not reported, nor is any
    word that follows a ``.`` (a struct field).
    """
    stack: List[str] = []
    n = len(text)
    i = pos
    while i < n:
        ch = text[i]
        if ch == "\n":
            # parentheses do not span lines without a continuation
            while stack and stack[-1] == "(":
                stack.pop()
            i += 1
        elif ch == "%":
            if text.startswith("%{", i) and _BLOCK_COMMENT_OPEN_RE.match(text, _line_start(text, i)):
                close = _BLOCK_COMMENT_CLOSE_RE.search(text, i + 2)
                i = n if close is None else close.end()
            else:
                i = _skip_to_eol(text, i)
        elif text.startswith("...", i):
            # rest of the line is a comment and the statement continues
            i = _skip_to_eol(text, i) + 1
        elif ch == '"' or (ch == "'" and (i == pos or text[i - 1] not in _TRANSPOSE_AFTER)):
            i = _skip_string(text, i)
        elif ch in "([{":
            stack.append(ch)
            i += 1
        elif ch in ")]}":
            if stack:
                stack.pop()
            i += 1
        elif ch.isdigit():
            m = _NUMBER_RE.match(text, i)
            i = m.end() if m else i + 1
        elif ch in _WORD_START:
            m = _WORD_RE.match(text, i)
            word = m.group(0)
            i = m.end()
            if stack or (m.start() > 0 and text[m.start() - 1] == "."):
                continue
            if word == "end" or word in BLOCK_OPENERS:
                yield word, m.start(), m.end()
            elif word == "arguments" and _at_line_start(text, m.start()) and _ARGUMENTS_LINE_RE.match(
                text[m.end():_skip_to_eol(text, m.end())]
            ):
                yield word, m.start(), m.end()
        else:
            i += 1


def _line_start(text: str, pos: int) -> int:
    return text.rfind("\n", 0, pos) + 1


def _skip_string(text: str, pos: int) -> int:
    """Return the offset just past the string literal opened at ``pos``."""
    quote = text[pos]
    i = pos + 1
    n = len(text)
    while i < n:
        ch = text[i]
        if ch == "\n":
            return i
        if ch == quote:
            if i + 1 < n and text[i + 1] == quote:
                i += 2
                continue
            return i + 1
        i += 1
    return n


def skip_block(text: str, start: int) -> int:
    """Return the offset just past the ``end`` closing the block at ``start``.

    Raises
    ------
    BlockError
        If the keywords from ``start`` onward never balance.
    """
    depth = 0
    for word, kw_start, kw_end in iter_block_keywords(text, start):
        if word == "end":
            depth -= 1
            if depth == 0:
                return kw_end
            if depth < 0:
                raise BlockError(f"unexpected 'end' at offset {kw_start}")
        else:
            depth += 1
    raise BlockError(f"unterminated block starting at offset {start}")


def end_of_definition(text: str, start: int) -> int:
    """Return the start of the header following the one at ``start``."""
    nxt = FUNCTION_RE.search(text, _skip_to_eol(text, start))
    return nxt.start() if nxt else len(text)


def detect_functions_have_end(text: str) -> bool:
    """Guess whether functions in ``text`` are closed with ``end``.

    The first function is walked with :func:`skip_block`; if it balances,
    the file uses explicit ends.
    """
    first = FUNCTION_RE.search(text)
    if first is None:
        return False
    try:
        skip_block(text, first.start())
    except BlockError:
        return False
    return True


def resolve_end(text: str, start: int, functions_have_end: Optional[bool] = None) -> int:
    """Return the end offset of the function whose header begins at ``start``.

    Structural failures never propagate. An unbalanced body extends to the
    end of ``text``.
    """
    if functions_have_end is None:
        functions_have_end = detect_functions_have_end(text)
    if not functions_have_end:
        return end_of_definition(text, start)
    try:
        return skip_block(text, start)
    except BlockError as exc:
        logging.warning("Falling back to end of text: %s", exc)
        return len(text)
