"""
Link builder: pairwise merge-join of two nodes' sorted quals.

Two kinds of links come out of it:
- almost-free links, where both nodes can be served by one index
  (their quals overlap on attributes sharing an index access method)
- expensive links, where the target lacks some of the source's quals and a
  new index has to be suggested

Both nodes' quals must be sorted by (relid, attnum, opno); QualCollection
guarantees that.
"""

from __future__ import annotations

import logging
from typing import Sequence

from qualwizard.exceptions import MixedRelationError
from qualwizard.parser.models import Qual, qual_comparator
from qualwizard.wizard.models import Link, Node, OverlapEntry

logger = logging.getLogger(__name__)


def _check_relid(node: Node, seen: int | None, qual: Qual) -> int:
    if seen is not None and seen != qual.relid:
        raise MixedRelationError(node.id, seen, qual.relid)
    return qual.relid


def make_links(node1: Node, node2: Node) -> tuple[Link, Link]:
    """
    Build the pair of links between two nodes.

    Returns (link1, link2) where link1 goes node2 -> node1 and link2 goes
    node1 -> node2. Each link's `missing` holds the source quals with no
    counterpart on the target. Links targeting the Start node are returned
    but not stored in the neighbour's `links`.

    Raises:
        MixedRelationError: If either node's quals touch more than one relation.
    """
    l1: Sequence[Qual] = node1.quals.to_list()
    l2: Sequence[Qual] = node2.quals.to_list()
    idx1 = idx2 = 0
    relid1: int | None = None
    relid2: int | None = None
    overlap: list[OverlapEntry] = []
    missing1: list[Qual] = []
    missing2: list[Qual] = []

    while idx1 < len(l1) and idx2 < len(l2):
        q1 = l1[idx1]
        q2 = l2[idx2]
        relid1 = _check_relid(node1, relid1, q1)
        relid2 = _check_relid(node2, relid2, q2)

        if q1.relid == q2.relid and q1.attnum == q2.attnum:
            common_ams = q1.indexams & q2.indexams
            if common_ams:
                overlap.append(
                    OverlapEntry(
                        relid=q1.relid,
                        queryids=(q1.queryid, q2.queryid),
                        attnum=q1.attnum,
                        relname=q1.relname,
                        attname=q1.attname,
                        indexams=common_ams,
                    )
                )
            idx1 += 1
            idx2 += 1
        elif qual_comparator(q1, q2) > 0:
            missing1.append(q2)
            idx2 += 1
        else:
            missing2.append(q1)
            idx1 += 1

    # Whatever is left on one side has no counterpart on the other
    for q1 in l1[idx1:]:
        relid1 = _check_relid(node1, relid1, q1)
        missing2.append(q1)
    for q2 in l2[idx2:]:
        relid2 = _check_relid(node2, relid2, q2)
        missing1.append(q2)

    samerel = relid1 is not None and relid2 is not None and relid1 == relid2

    link1 = Link(source=node2, target=node1, samerel=samerel, overlap=overlap, missing=missing1)
    link2 = Link(source=node1, target=node2, samerel=samerel, overlap=overlap, missing=missing2)

    if not link1.target.is_start:
        node2.links[node1.id] = link1
    if not link2.target.is_start:
        node1.links[node2.id] = link2

    return link1, link2


def compute_links(nodes: Sequence[Node]) -> list[Link]:
    """
    Compute the links between every unordered pair of nodes.

    Returns the links the graph stores, i.e. every link except those
    pointing at the Start node, in a deterministic order.
    """
    links: list[Link] = []
    for i, first in enumerate(nodes):
        for second in nodes[:i]:
            for link in make_links(first, second):
                if not link.target.is_start:
                    links.append(link)
    logger.debug("Computed %d links over %d nodes", len(links), len(nodes))
    return links
