"""MATLAB source discovery for MatTags.

Collects ``.m`` files below a directory. Package (``+pkg``) and class
(``@Class``) folders are searched like any other directory.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List

from tqdm import tqdm

MATLAB_PATTERN = "*.m"
# version control metadata and Simulink build caches
SKIP_DIRS = frozenset({".git", ".svn", "slprj"})


def _excluded(rel: Path, ignored: Iterable[Path]) -> bool:
    """Return True if ``rel`` sits in a skipped folder or under an ignored path."""
    if SKIP_DIRS.intersection(rel.parts[:-1]):
        return True
    return any(rel == ig or ig in rel.parents for ig in ignored)


def scan_directory(base_path: str, ignore: List[str], show_progress: bool = False) -> List[str]:
    """Return the sorted ``.m`` files under *base_path*.

    Parameters
    ----------
    base_path:
        Directory to search.
    ignore:
        Files or directories, relative to ``base_path``, to leave out.
    show_progress:
        If True, display a progress bar while matching files.
    """
    base = Path(base_path).resolve()
    ignored = [Path(p) for p in ignore]

    candidates = base.rglob(MATLAB_PATTERN)
    if show_progress:
        candidates = tqdm(candidates, desc="Scanning MATLAB sources", unit="file")

    found = [
        path
        for path in candidates
        if path.is_file() and not _excluded(path.relative_to(base), ignored)
    ]
    return sorted(str(path) for path in found)
