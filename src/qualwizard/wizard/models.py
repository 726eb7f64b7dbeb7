"""
Graph model for the index suggestion wizard.

- QualCollection: a node's quals, always sorted by (relid, attnum, opno)
- Node: the synthetic Start node or one qual batch
- Link: directed edge between two nodes with overlap / missing quals
- OverlapEntry: one attribute two nodes could index together

Nodes and links are plain mutable dataclasses compared by identity. The
Wizard owns them; the link builder, valuator and solvers only receive them
for the duration of a pass.
"""

from __future__ import annotations

import bisect
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Iterator

from qualwizard.parser.models import Qual, QualBatch

START_NODE_ID = "start"


class NodeKind(str, Enum):
    """Kind of graph node."""

    START = "startNode"
    QUAL = "qual"


class QualCollection:
    """
    Quals of a node kept sorted by their (relid, attnum, opno) key.

    The order is restored on every insert, so the link builder can always
    merge-join two collections.
    """

    def __init__(self, quals: Iterable[Qual] = ()) -> None:
        self._quals: list[Qual] = sorted(quals, key=lambda q: q.sort_key)

    def add(self, qual: Qual) -> None:
        bisect.insort_right(self._quals, qual, key=lambda q: q.sort_key)

    def __iter__(self) -> Iterator[Qual]:
        return iter(self._quals)

    def __len__(self) -> int:
        return len(self._quals)

    def __getitem__(self, index: int) -> Qual:
        return self._quals[index]

    def __repr__(self) -> str:
        return f"QualCollection({[q.attr_id for q in self._quals]})"

    def to_list(self) -> list[Qual]:
        return list(self._quals)


@dataclass(frozen=True)
class OverlapEntry:
    """An attribute both ends of a link can index with a common access method."""

    relid: int
    queryids: tuple[int | None, int | None]
    attnum: int
    relname: str | None
    attname: str | None
    indexams: frozenset[str]

    def to_dict(self) -> dict[str, Any]:
        return {
            "relid": self.relid,
            "queryids": list(self.queryids),
            "attnum": self.attnum,
            "relname": self.relname,
            "attname": self.attname,
            "indexams": sorted(self.indexams),
        }


@dataclass(eq=False)
class Node:
    """
    A node of the wizard graph.

    Attributes:
        id: Unique node id ("start" for the Start node, the qualid otherwise)
        label: Display label (the WHERE clause for qual nodes)
        kind: START or QUAL
        quals: Sorted quals of the node (empty for Start)
        links: Outgoing links keyed by the neighbour's id
        queryid: Query the batch came from, if known
    """

    id: str | int
    label: str
    kind: NodeKind = NodeKind.QUAL
    quals: QualCollection = field(default_factory=QualCollection)
    links: dict[str | int, "Link"] = field(default_factory=dict)
    queryid: int | None = None

    @classmethod
    def start(cls) -> "Node":
        return cls(id=START_NODE_ID, label="Start", kind=NodeKind.START)

    @classmethod
    def from_batch(cls, batch: QualBatch) -> "Node":
        return cls(
            id=batch.qualid,
            label=batch.where_clause,
            kind=NodeKind.QUAL,
            quals=QualCollection(batch.quals),
            queryid=batch.queryid,
        )

    @property
    def is_start(self) -> bool:
        return self.kind == NodeKind.START

    def snapshot(self) -> dict[str, Any]:
        """Shallow copy of the node with quals flattened and links omitted."""
        return {
            "id": self.id,
            "label": self.label,
            "type": self.kind.value,
            "queryid": self.queryid,
            "quals": [q.to_attributes() for q in self.quals],
        }

    def __repr__(self) -> str:
        return f"Node(id={self.id!r}, kind={self.kind.value}, quals={len(self.quals)})"


@dataclass(eq=False)
class Link:
    """
    A directed link from source to target.

    Links are always built in pairs (one per direction) sharing the same
    overlap list. `missing` holds the quals the target lacks relative to the
    source. `value` stays None until the valuator resolves it.
    """

    source: Node
    target: Node
    samerel: bool = False
    overlap: list[OverlapEntry] = field(default_factory=list)
    missing: list[Qual] = field(default_factory=list)
    value: float | None = None

    @property
    def resolved(self) -> bool:
        return self.value is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source.id,
            "target": self.target.id,
            "samerel": self.samerel,
            "overlap": [entry.to_dict() for entry in self.overlap],
            "missing": [q.to_attributes() for q in self.missing],
            "value": self.value,
        }

    def __repr__(self) -> str:
        return (
            f"Link({self.source.id!r} -> {self.target.id!r}, samerel={self.samerel}, "
            f"overlap={len(self.overlap)}, missing={len(self.missing)}, value={self.value})"
        )
