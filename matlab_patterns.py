"""Pattern matching for MATLAB function headers and doc comments.

Everything here is a pure function over the source text and an offset.
Nothing reads files or keeps state between calls.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import PurePath
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

# ``function`` at line start, optional filler (continuations may leave
# dots and newlines), optional return clause, then the function name.
FUNCTION_RE = re.compile(
    r"^[ \t]*function\b[ \t\n.]*"
    r"(\[[^\]]*\][ \t]*=|[A-Za-z_]\w*[ \t]*=|)"
    r"[ \t]*([A-Za-z_]\w*)\b",
    re.MULTILINE,
)

BUILTIN_RE = re.compile(r"[ \t]*%([A-Z][A-Z0-9_]*)[ \t]+(.*?)[ \t\r]*$", re.MULTILINE)

_CLAUSE_SPLIT_RE = re.compile(r"[\[\](),=.\s]+")
_CONTINUATION_RE = re.compile(r"\.\.\.[^\n]*$")


@dataclass(frozen=True)
class HeaderMatch:
    """Location and raw clauses of one ``function`` header."""

    start: int
    end: int
    line_end: int
    return_clause: str
    name: str
    arg_clause: str


def _strip_comment(line: str) -> str:
    """Return ``line`` with a trailing ``%`` comment removed.

    Percent signs inside single or double quoted strings are kept.
    """
    quote = None
    for i, ch in enumerate(line):
        if quote:
            if ch == quote:
                quote = None
        elif ch in "'\"":
            quote = ch
        elif ch == "%":
            return line[:i]
    return line


def _logical_line(text: str, pos: int) -> Tuple[str, int]:
    """Return the logical line starting at ``pos`` and the offset of its end.

    ``...`` continuations are joined and comments dropped. The returned
    offset points at the newline (or end of text) closing the last
    physical line consumed.
    """
    parts: List[str] = []
    while True:
        eol = text.find("\n", pos)
        if eol == -1:
            eol = len(text)
        line = _strip_comment(text[pos:eol])
        match = _CONTINUATION_RE.search(line)
        if match and eol < len(text):
            parts.append(line[: match.start()])
            pos = eol + 1
            continue
        parts.append(line[: match.start()] if match else line)
        return " ".join(parts), eol


def _argument_clause(rest: str) -> str:
    """Trim ``rest`` to the parenthesised parameter list when it has one."""
    stripped = rest.lstrip()
    if not stripped.startswith("("):
        return rest
    depth = 0
    for i, ch in enumerate(stripped):
        if ch == "(":
            depth += 1
        elif ch == ")":
            depth -= 1
            if depth == 0:
                return stripped[: i + 1]
    return stripped


def find_header(text: str, pos: int = 0) -> Optional[HeaderMatch]:
    """Return the next ``function`` header at or after ``pos``.

    Parameters
    ----------
    text:
        MATLAB source.
    pos:
        Offset where the search begins.

    Returns
    -------
    HeaderMatch or None
        ``None`` when no further header exists.
    """
    m = FUNCTION_RE.search(text, pos)
    if not m:
        return None
    rest, line_end = _logical_line(text, m.end())
    return HeaderMatch(
        start=m.start(),
        end=m.end(),
        line_end=line_end,
        return_clause=m.group(1),
        name=m.group(2),
        arg_clause=_argument_clause(rest),
    )


def split_clause(clause: str) -> Tuple[str, ...]:
    """Split a raw return or argument clause into identifiers."""
    return tuple(tok for tok in _CLAUSE_SPLIT_RE.split(clause) if tok)


# ---------------------------------------------------------------------------
# docstring heuristics

_TAGGED_COMMENT_RE = re.compile(r"[^\n]*\n[ \t]*%[A-Z0-9_]+[ \t]+([^\n]*)")
_PLAIN_COMMENT_RE = re.compile(r"[^\n]*\n[ \t]*%+[ \t]*([^\n]*)")
_FIRST_COMMENT_RE = re.compile(r"%+[ \t]*([^\n]*)")


def _tagged_comment(text: str, pos: int) -> Optional[str]:
    m = _TAGGED_COMMENT_RE.match(text, pos)
    return m.group(1) if m else None


def _plain_comment(text: str, pos: int) -> Optional[str]:
    m = _PLAIN_COMMENT_RE.match(text, pos)
    return m.group(1) if m else None


def _first_comment(text: str, pos: int) -> Optional[str]:
    eol = text.find("\n", pos)
    if eol == -1:
        return None
    i = eol + 1
    while i < len(text) and text[i].isspace():
        i += 1
    m = _FIRST_COMMENT_RE.match(text, i)
    return m.group(1) if m else None


DOCSTRING_MATCHERS: Sequence[Callable[[str, int], Optional[str]]] = (
    _tagged_comment,
    _plain_comment,
    _first_comment,
)


def extract_docstring(text: str, pos: int) -> Optional[str]:
    """Return the one-line description following the line containing ``pos``.

    The matchers in :data:`DOCSTRING_MATCHERS` are tried in order and the
    first that recognises a comment wins. Empty captures count as no
    docstring.
    """
    for matcher in DOCSTRING_MATCHERS:
        found = matcher(text, pos)
        if found is not None:
            found = found.rstrip()
            return found or None
    return None


# ---------------------------------------------------------------------------
# builtin doc-only files

def _path_parts(path: str) -> Tuple[str, ...]:
    return PurePath(os.path.normpath(path)).parts


def is_under_system_root(file_path: Optional[str], system_roots: Iterable[str]) -> bool:
    """Return True if ``file_path`` lies under one of ``system_roots``.

    Files inside a ``private`` directory are excluded; they are never
    visible as builtins.
    """
    if not file_path:
        return False
    parts = _path_parts(file_path)
    for root in system_roots:
        if not root:
            continue
        root_parts = _path_parts(root)
        if parts[: len(root_parts)] == root_parts and len(parts) > len(root_parts):
            return "private" not in parts[len(root_parts):-1]
    return False


def match_builtin(text: str) -> Optional[Tuple[str, str]]:
    """Return ``(name, description)`` if the first non-blank line is a doc header."""
    for line in text.splitlines():
        if not line.strip():
            continue
        m = BUILTIN_RE.match(line)
        if not m:
            return None
        return m.group(1).lower(), m.group(2)
    return None
