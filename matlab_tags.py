"""Function tag records and the positional nesting builder.

The scanner produces a flat list of :class:`RawFunctionRecord` ordered by
``start``. :func:`build_tree` turns that list into :class:`FunctionTag`
trees where a function lying inside another function's extent becomes one
of its ``children``. Nesting is purely positional; it says nothing about
MATLAB scoping.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple


@dataclass(frozen=True)
class RawFunctionRecord:
    """One function found by the scanner.

    ``start == end == 0`` marks the synthetic record of a builtin doc-only
    file.
    """

    start: int
    end: int
    return_names: Tuple[str, ...]
    name: str
    arg_names: Tuple[str, ...]
    docstring: Optional[str] = None
    is_builtin: bool = False


@dataclass(frozen=True)
class FunctionTag:
    """A function in the outline together with its subfunctions."""

    start: int
    end: int
    return_names: Tuple[str, ...]
    name: str
    arg_names: Tuple[str, ...]
    docstring: Optional[str] = None
    is_builtin: bool = False
    children: Tuple["FunctionTag", ...] = field(default=())

    @classmethod
    def from_record(
        cls, record: RawFunctionRecord, children: Sequence["FunctionTag"] = ()
    ) -> "FunctionTag":
        return cls(
            start=record.start,
            end=record.end,
            return_names=record.return_names,
            name=record.name,
            arg_names=record.arg_names,
            docstring=record.docstring,
            is_builtin=record.is_builtin,
            children=tuple(children),
        )

    def iter_tags(self) -> Iterator["FunctionTag"]:
        """Yield this tag and all of its descendants in pre-order."""
        yield self
        for child in self.children:
            yield from child.iter_tags()

    def to_dict(self) -> Dict[str, Any]:
        """Return a plain mapping of the tag, children included."""
        return {
            "name": self.name,
            "returns": list(self.return_names),
            "args": list(self.arg_names),
            "docstring": self.docstring,
            "builtin": self.is_builtin,
            "start": self.start,
            "end": self.end,
            "children": [child.to_dict() for child in self.children],
        }


def build_tree(
    records: Sequence[RawFunctionRecord], boundary: int, index: int = 0
) -> Tuple[List[FunctionTag], int]:
    """Partition ``records`` into tags contained below ``boundary``.

    Parameters
    ----------
    records:
        Flat records ordered by ``start``.
    boundary:
        Exclusive end offset of the enclosing region. A record starting
        exactly at ``boundary`` is outside it.
    index:
        Position in ``records`` where this level begins.

    Returns
    -------
    tuple
        The tags found at this level and the index of the first record
        that was not consumed.
    """
    tags: List[FunctionTag] = []
    while index < len(records) and records[index].start < boundary:
        record = records[index]
        if record.end > boundary:
            # an over-wide extent never escapes its parent
            record = replace(record, end=boundary)
        children, index = build_tree(records, record.end, index + 1)
        tags.append(FunctionTag.from_record(record, children))
    return tags, index


def flatten(tags: Sequence[FunctionTag]) -> List[FunctionTag]:
    """Return every tag in ``tags`` and below in pre-order."""
    result: List[FunctionTag] = []
    for tag in tags:
        result.extend(tag.iter_tags())
    return result
