"""
Path solvers: order the qual nodes into a cheap tour starting at Start.

The tour is an open-path TSP over the wizard graph. Two heuristics are
available, both bounded-time:

- GreedySolver (default, deterministic): stay on the current table through
  its cheapest links, and when the table is exhausted jump to the richest
  remaining node.
- InsertionSolver (randomized cheapest insertion): insert nodes in random
  order wherever they increase the total distance least.

Distance of a path is the sum over consecutive nodes of
    link_cost(link) + (0 if link.samerel else cross_relation_penalty)

Usage:
    solver = get_solver(SolverStrategy.GREEDY)
    tour = solver.shortest_path(nodes)   # list[Link], one per qual node
"""

from __future__ import annotations

import logging
import random
from abc import ABC, abstractmethod
from typing import Sequence

from qualwizard.config import Config, SolverStrategy, get_config
from qualwizard.exceptions import GraphError, UncomputablePathError
from qualwizard.wizard.models import Link, Node
from qualwizard.wizard.valuation import link_cost

logger = logging.getLogger(__name__)


def compute_distance(path: Sequence[Node], config: Config | None = None) -> float:
    """
    Total cost of visiting `path` in order.

    Raises:
        UncomputablePathError: If two consecutive nodes are not linked.
    """
    config = config or get_config()
    total_cost = 0.0
    for current, following in zip(path, path[1:]):
        link = current.links.get(following.id)
        if link is None:
            raise UncomputablePathError(current.id, following.id)
        base = 0.0 if link.samerel else config.cross_relation_penalty
        total_cost += link_cost(link, config) + base
    return total_cost


def path_to_links(path: Sequence[Node]) -> list[Link]:
    """Convert a node path to its link sequence by consecutive lookups."""
    links = []
    for current, following in zip(path, path[1:]):
        link = current.links.get(following.id)
        if link is None:
            raise UncomputablePathError(current.id, following.id)
        links.append(link)
    return links


def _split_start(nodes: Sequence[Node]) -> tuple[Node, list[Node]]:
    start: Node | None = None
    others: list[Node] = []
    for node in nodes:
        if node.is_start:
            if start is not None:
                raise GraphError("The wizard graph has more than one Start node")
            start = node
        else:
            others.append(node)
    if start is None:
        raise GraphError("The wizard graph has no Start node")
    return start, others


class PathSolver(ABC):
    """Base class for tour heuristics."""

    name: str = "base"

    def __init__(self, config: Config | None = None) -> None:
        self.config = config or get_config()

    @abstractmethod
    def shortest_path(self, nodes: Sequence[Node]) -> list[Link]:
        """Return one link per qual node, starting from the Start node."""
        ...

    def distance(self, path: Sequence[Node]) -> float:
        return compute_distance(path, self.config)


class GreedySolver(PathSolver):
    """
    Nearest-neighbour style heuristic.

    The heuristic is a bit tricky: take the cheapest link IF it stays on the
    same relation. Otherwise jump to the node with the most quals, since the
    other nodes on its table are then nearly free.
    """

    name = "greedy"

    def shortest_path(self, nodes: Sequence[Node]) -> list[Link]:
        current, others = _split_start(nodes)
        unvisited = {node.id for node in others}
        path: list[Link] = []

        while unvisited:
            unvisited_targets = [
                link for link in current.links.values() if link.target.id in unvisited
            ]
            if not unvisited_targets:
                raise UncomputablePathError(current.id, next(iter(unvisited)))

            samerel_targets = [link for link in unvisited_targets if link.samerel]
            if samerel_targets:
                # Still more quals to optimize for this table
                next_link = min(samerel_targets, key=lambda link: link_cost(link, self.config))
            else:
                # Jump to the most comprehensive index on another table
                next_link = max(unvisited_targets, key=lambda link: len(link.target.quals))

            path.append(next_link)
            current = next_link.target
            unvisited.discard(current.id)

        return path


class InsertionSolver(PathSolver):
    """
    Randomized cheapest-insertion heuristic.

    Non-deterministic unless seeded. Each insertion recomputes the full
    path distance, so a pass is O(n^3) in the number of nodes.
    """

    name = "insertion"

    def __init__(
        self,
        config: Config | None = None,
        seed: int | None = None,
        rng: random.Random | None = None,
    ) -> None:
        super().__init__(config)
        if rng is None:
            rng = random.Random(seed if seed is not None else self.config.solver_seed)
        self.rng = rng

    def solve(self, nodes: Sequence[Node]) -> list[Node]:
        """Return the visiting order as nodes, Start first."""
        start, others = _split_start(nodes)
        remaining = list(others)
        self.rng.shuffle(remaining)

        path = [start]
        if not remaining:
            return path
        path.append(remaining.pop(0))

        for node in remaining:
            best_path: list[Node] | None = None
            best_cost = 0.0
            for i in range(len(path)):
                candidate = path[: i + 1] + [node] + path[i + 1 :]
                cost = self.distance(candidate)
                if best_path is None or cost < best_cost:
                    best_path = candidate
                    best_cost = cost
            path = best_path
            logger.debug("Inserted node %s, path cost now %s", node.id, best_cost)

        return path

    def shortest_path(self, nodes: Sequence[Node]) -> list[Link]:
        return path_to_links(self.solve(nodes))


def get_solver(
    strategy: SolverStrategy | str | None = None,
    config: Config | None = None,
    seed: int | None = None,
) -> PathSolver:
    """Instantiate the solver for a strategy (defaults to the configured one)."""
    config = config or get_config()
    strategy = SolverStrategy(strategy) if strategy is not None else config.solver_strategy
    if strategy == SolverStrategy.INSERTION:
        return InsertionSolver(config=config, seed=seed)
    return GreedySolver(config=config)
