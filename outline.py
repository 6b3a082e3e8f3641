"""Command line interface for MatTags.

Prints the function outline of a MATLAB file, or of every ``.m`` file in a
source tree, and optionally writes HTML outline pages.

Examples
--------
Outline a toolbox, treating doc-only files under ``/opt/matlab/toolbox`` as
builtins, and write pages into ``./outline``::

    python outline.py ./toolbox --system-root /opt/matlab/toolbox --html ./outline
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from outline_writer import render_outline, write_index, write_outline_page
from parser_matlab import parse_matlab_file
from scanner import scan_directory


@dataclass
class Config:
    """Configuration parsed from CLI arguments."""

    source: Path
    system_roots: List[str] = field(default_factory=list)
    ignore: List[str] = field(default_factory=list)
    functions_have_end: Optional[bool] = None
    html: Optional[Path] = None
    json: bool = False
    progress: bool = False
    verbose: bool = False


def _parse_args(argv: list[str] | None) -> Config:
    parser = argparse.ArgumentParser(description="Outline functions and subfunctions in MATLAB sources")
    parser.add_argument("source", help="MATLAB file or directory to outline")
    parser.add_argument(
        "--system-root",
        action="append",
        default=[],
        help="Directory whose doc-only files are reported as builtins (repeatable)",
    )
    parser.add_argument(
        "--ignore",
        action="append",
        default=[],
        help="Paths relative to source that should be ignored (repeatable)",
    )
    parser.add_argument(
        "--functions-have-end",
        dest="functions_have_end",
        action="store_const",
        const=True,
        default=None,
        help="Functions are closed with 'end' (default: detect per file)",
    )
    parser.add_argument(
        "--no-functions-have-end",
        dest="functions_have_end",
        action="store_const",
        const=False,
        help="Functions run until the next function header",
    )
    parser.add_argument("--html", help="Destination directory for HTML outline pages")
    parser.add_argument("--json", action="store_true", help="Print the outline as JSON")
    parser.add_argument("--progress", action="store_true", help="Show a progress bar while scanning")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    args = parser.parse_args(argv)

    return Config(
        source=Path(args.source),
        system_roots=[str(Path(root).resolve()) for root in args.system_root],
        ignore=args.ignore,
        functions_have_end=args.functions_have_end,
        html=Path(args.html) if args.html else None,
        json=args.json,
        progress=args.progress,
        verbose=args.verbose,
    )


def _page_name(path: str, base: Path) -> str:
    """Return a page name unique within ``base``, e.g. ``+pkg.helper``."""
    rel = Path(path).relative_to(base)
    return ".".join(rel.with_suffix("").parts)


def _collect(config: Config) -> List[Dict[str, Any]]:
    source = config.source.resolve()
    if source.is_file():
        base = source.parent
        files = [str(source)]
    else:
        base = source
        files = scan_directory(str(config.source), config.ignore, show_progress=config.progress)
    logging.info("Outlining %d files", len(files))

    modules = []
    for path in files:
        try:
            module = parse_matlab_file(
                path, config.system_roots, functions_have_end=config.functions_have_end
            )
        except UnicodeDecodeError as exc:  # skip files with invalid encoding
            print(f"Skipping {path}: {exc}", file=sys.stderr)
            continue
        module["name"] = _page_name(path, base)
        if not module["functions"]:
            logging.info("No functions found in %s", path)
        modules.append(module)
    return modules


def main(argv: list[str] | None = None) -> int:
    config = _parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if config.verbose else logging.WARNING)

    if not config.source.exists():
        print(f"Source not found: {config.source}", file=sys.stderr)
        return 1

    modules = _collect(config)

    if config.json:
        payload = [
            {"path": m["path"], "functions": [tag.to_dict() for tag in m["tags"]]} for m in modules
        ]
        print(json.dumps(payload, indent=2))
    else:
        for module in modules:
            print(f"{module['path']}:")
            outline = render_outline(module["tags"], indent="  ")
            if outline:
                print("\n".join("  " + line for line in outline.splitlines()))

    if config.html:
        page_links = [(m["name"], f"{m['name']}.html") for m in modules]
        write_index(str(config.html), page_links)
        for module in modules:
            write_outline_page(str(config.html), module, page_links)

    return 0


if __name__ == "__main__":  # pragma: no cover - CLI entry
    raise SystemExit(main())
