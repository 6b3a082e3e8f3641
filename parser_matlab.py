"""Parser for MATLAB `.m` files used by MatTags.

Finds function headers by pattern matching rather than a grammar, so
partial or malformed files still produce an outline. Subfunctions are
recovered from textual containment of function extents.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from matlab_extent import detect_functions_have_end, resolve_end
from matlab_patterns import (
    extract_docstring,
    find_header,
    is_under_system_root,
    match_builtin,
    split_clause,
)
from matlab_tags import FunctionTag, RawFunctionRecord, build_tree


def scan_functions(
    text: str,
    file_path: Optional[str] = None,
    system_roots: Iterable[str] = (),
    functions_have_end: Optional[bool] = None,
) -> List[RawFunctionRecord]:
    """Return the flat, start-ordered function records found in ``text``.

    A file with no ``function`` header that lives under one of
    ``system_roots`` and opens with a ``%NAME description`` line yields a
    single builtin record instead.
    """
    header = find_header(text)
    if header is None:
        if is_under_system_root(file_path, system_roots):
            builtin = match_builtin(text)
            if builtin:
                name, doc = builtin
                logging.debug("Treating %s as builtin %s", file_path, name)
                return [RawFunctionRecord(0, 0, (), name, (), doc or None, True)]
        return []

    if functions_have_end is None:
        functions_have_end = detect_functions_have_end(text)

    records: List[RawFunctionRecord] = []
    while header is not None:
        records.append(
            RawFunctionRecord(
                start=header.start,
                end=resolve_end(text, header.start, functions_have_end),
                return_names=split_clause(header.return_clause),
                name=header.name,
                arg_names=split_clause(header.arg_clause),
                docstring=extract_docstring(text, header.line_end),
            )
        )
        # subfunctions are found independently and nested later
        header = find_header(text, header.line_end)
    return records


def parse(
    source_text: str,
    file_path: Optional[str] = None,
    system_roots: Iterable[str] = (),
    *,
    functions_have_end: Optional[bool] = None,
) -> List[FunctionTag]:
    """Return the function outline of ``source_text``.

    Parameters
    ----------
    source_text:
        MATLAB source already loaded in memory.
    file_path:
        Location of the source, used only to decide whether it may be a
        builtin doc-only file.
    system_roots:
        Directories whose files may be builtin doc-only files.
    functions_have_end:
        Whether functions are closed with ``end``. ``None`` guesses from
        the text.

    Returns
    -------
    list[FunctionTag]
        Root tags in source order. Any scanning failure yields an empty
        list.
    """
    try:
        records = scan_functions(source_text, file_path, list(system_roots), functions_have_end)
        tags, _ = build_tree(records, len(source_text))
    except Exception:
        logging.warning("Failed to scan %s", file_path or "<text>", exc_info=True)
        return []
    return tags


def _leading_comments(text: str) -> str:
    """Return the comment block at the top of ``text``."""
    header_lines: List[str] = []
    for line in text.splitlines():
        stripped = line.strip()
        if stripped.startswith("%"):
            header_lines.append(stripped.lstrip("% "))
        elif stripped == "":
            if header_lines:
                header_lines.append("")
        else:
            break
    return "\n".join(header_lines).strip()


def _function_entry(tag: FunctionTag, text: str) -> Dict[str, Any]:
    entry = tag.to_dict()
    entry["source"] = "" if tag.is_builtin else text[tag.start:tag.end].strip()
    entry["children"] = [_function_entry(child, text) for child in tag.children]
    return entry


def parse_matlab_file(
    path: str,
    system_roots: Iterable[str] = (),
    *,
    functions_have_end: Optional[bool] = None,
) -> Dict[str, Any]:
    """Parse a MATLAB ``.m`` file and describe its functions.

    Returns
    -------
    dict
        ``name`` and ``path`` of the file, its leading comment ``header``,
        the root ``tags`` and a ``functions`` list of plain mappings with
        each function's ``source`` and nested ``children``.
    """
    text = Path(path).read_text(encoding="utf-8")
    tags = parse(text, path, system_roots, functions_have_end=functions_have_end)
    return {
        "name": Path(path).stem,
        "path": path,
        "header": _leading_comments(text),
        "tags": tags,
        "functions": [_function_entry(tag, text) for tag in tags],
    }
