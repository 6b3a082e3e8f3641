"""Rendering utilities for MatTags outlines.

Turns function tags into one-line prototypes, indented text outlines and
HTML pages. Only the public tag attributes are read here.
"""
from __future__ import annotations

import html
from pathlib import Path
from typing import Any, Dict, Iterable, List, Sequence, Tuple

from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import MatlabLexer

from matlab_tags import FunctionTag

BUILTIN_MARKER = "[builtin]"
NO_ARGUMENTS = "arguments unavailable"

_PAGE_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>{title}</title>
<style>{style}</style>
</head>
<body>
<nav><ul>
{navigation}
</ul></nav>
<main>
<h1>{header}</h1>
{body}
</main>
</body>
</html>
"""


def _prototype(name: str, arg_names: Sequence[str], is_builtin: bool) -> str:
    parts = [name]
    if is_builtin:
        parts.append(BUILTIN_MARKER)
    args = ", ".join(arg_names) if arg_names else NO_ARGUMENTS
    parts.append(f"({args})")
    return " ".join(parts)


def format_prototype(tag: FunctionTag) -> str:
    """Return ``name [builtin] (args)`` for ``tag``."""
    return _prototype(tag.name, tag.arg_names, tag.is_builtin)


def render_outline(tags: Sequence[FunctionTag], indent: str = "  ") -> str:
    """Return an indented text outline with one function per line."""
    lines: List[str] = []

    def _walk(items: Sequence[FunctionTag], depth: int) -> None:
        for tag in items:
            line = indent * depth + format_prototype(tag)
            if tag.docstring:
                line += f"  -- {tag.docstring}"
            lines.append(line)
            _walk(tag.children, depth + 1)

    _walk(tags, 0)
    return "\n".join(lines)


def _highlight(code: str) -> str:
    """Return ``code`` highlighted as MATLAB using pygments."""
    return highlight(code, MatlabLexer(), HtmlFormatter(noclasses=True))


def _render_html(title: str, body: str, nav_html: str) -> str:
    return _PAGE_TEMPLATE.format(
        title=html.escape(title),
        header=html.escape(title),
        body=body,
        navigation=nav_html,
        style="nav{float:left;width:14em}main{margin-left:15em}",
    )


def _nav(page_links: Iterable[Tuple[str, str]]) -> str:
    return "\n".join(
        f'<li><a href="{html.escape(link)}">{html.escape(text)}</a></li>' for text, link in page_links
    )


def write_index(output_dir: str, page_links: Iterable[Tuple[str, str]]) -> None:
    """Render ``index.html`` listing every outlined file."""
    dest_dir = Path(output_dir)
    dest_dir.mkdir(parents=True, exist_ok=True)
    nav_html = _nav(page_links)
    body = "\n".join(["<h2>Files</h2>", "<ul>", nav_html, "</ul>"])
    page = _render_html("MATLAB Outline", body, nav_html)
    (dest_dir / "index.html").write_text(page, encoding="utf-8")


def _function_html(func: Dict[str, Any], level: int) -> List[str]:
    tag_name = f"h{min(level, 6)}"
    sig = _prototype(func["name"], func["args"], func["builtin"])
    parts = [f'<{tag_name} id="{html.escape(func["name"])}">{html.escape(sig)}</{tag_name}>']
    if func.get("returns"):
        parts.append(f"<p>Returns: {html.escape(', '.join(func['returns']))}</p>")
    if func.get("docstring"):
        parts.append(f"<p>{html.escape(func['docstring'])}</p>")
    # nested sources already appear inside their parent
    if func.get("source") and level == 3:
        parts.append(_highlight(func["source"]))
    for child in func.get("children", []):
        parts.extend(_function_html(child, level + 1))
    return parts


def write_outline_page(
    output_dir: str, module_data: Dict[str, Any], page_links: Iterable[Tuple[str, str]]
) -> None:
    """Render an outline page for ``module_data`` from :func:`parse_matlab_file`."""
    dest_dir = Path(output_dir)
    dest_dir.mkdir(parents=True, exist_ok=True)
    module_name = module_data.get("name", "module")

    body_parts: List[str] = []
    if module_data.get("header"):
        body_parts.append(f"<p>{html.escape(module_data['header'])}</p>")
    functions = module_data.get("functions", [])
    if functions:
        body_parts.append("<h2>Functions</h2>")
    else:
        body_parts.append("<p>No functions found.</p>")
    for func in functions:
        body_parts.extend(_function_html(func, 3))

    page = _render_html(module_name, "\n".join(body_parts), _nav(page_links))
    (dest_dir / f"{module_name}.html").write_text(page, encoding="utf-8")
