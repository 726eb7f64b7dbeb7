"""
Wizard - the graph controller of the index suggestion wizard.

The Wizard owns the node set (Start + one node per qual batch) and runs the
pipeline on every batch delivered by its data source:

    append nodes -> compute links -> value links -> solve tour -> publish

Progress is reported to listeners at two points: when new input is accepted
and when the suggestion computation completes. Graph listeners receive the
wizard itself once the new graph and tour are published.

Only one pass may run at a time; a concurrent update() raises
PassInProgressError instead of corrupting the graph. A pass that raises is
rolled back: the nodes it added are dropped and the links, tour and results
of the last complete pass are restored.

Usage:
    from qualwizard.wizard import Wizard

    wizard = Wizard(datasource, database="prod")
    wizard.on_progress(lambda event: print(event.stage, event.percent))
    datasource.load("top_quals.json")

    for link in wizard.shortest_path:
        print(link.target.label)
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Sequence

from qualwizard.config import Config, get_config
from qualwizard.datasource import DataSource, DataSourceRegistry
from qualwizard.exceptions import DataSourceNotFoundError, PassInProgressError
from qualwizard.parser.models import QualBatch
from qualwizard.wizard.links import compute_links
from qualwizard.wizard.models import Link, Node
from qualwizard.wizard.solver import PathSolver, compute_distance, get_solver
from qualwizard.wizard.suggest import SuggestionRequester, requester_from_config
from qualwizard.wizard.valuation import LinkValuator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProgressEvent:
    """A pipeline milestone for the progress display."""

    stage: str
    percent: float


ProgressCallback = Callable[[ProgressEvent], None]
GraphCallback = Callable[["Wizard"], None]


class Wizard:
    """Owns the qual graph and recomputes the suggestion tour."""

    def __init__(
        self,
        datasource: DataSource | None,
        database: str,
        requester: SuggestionRequester | None = None,
        solver: PathSolver | None = None,
        config: Config | None = None,
    ) -> None:
        if datasource is None:
            raise DataSourceNotFoundError(None)

        self.config = config or get_config()
        self.datasource = datasource
        self.database = database
        # A requester built here from the config is closed by close()
        self._owns_requester = requester is None
        if requester is None:
            requester = requester_from_config(self.config)
        self.requester = requester
        self.valuator = LinkValuator(database, requester=requester, config=self.config)
        self.solver = solver or get_solver(config=self.config)

        self.stage = "Starting wizard..."
        self.progress: float = 0
        self.start_node = Node.start()
        self.nodes: list[Node] = [self.start_node]
        self.links: list[Link] = []
        self.shortest_path: list[Link] = []
        self.last_pass_ms: float | None = None

        self._progress_listeners: list[ProgressCallback] = []
        self._graph_listeners: list[GraphCallback] = []
        self._pass_lock = threading.Lock()

        datasource.subscribe(self)

    @classmethod
    def from_json(
        cls,
        obj: Mapping[str, Any],
        registry: DataSourceRegistry | None = None,
        **kwargs: Any,
    ) -> "Wizard":
        """
        Build a wizard from {"datasource": <name>, "database": <db>}.

        Raises:
            DataSourceNotFoundError: If the named data source is not registered.
        """
        registry = registry or DataSourceRegistry.get_instance()
        name = obj.get("datasource")
        datasource = registry.get(name)
        if datasource is None:
            logger.warning("Unknown data source %r, registered: %s", name, registry.names())
            raise DataSourceNotFoundError(name)
        return cls(datasource, database=str(obj.get("database", "")), **kwargs)

    # ── Listeners ───────────────────────────────────────────────────────

    def on_progress(self, callback: ProgressCallback) -> None:
        self._progress_listeners.append(callback)

    def on_graph_update(self, callback: GraphCallback) -> None:
        self._graph_listeners.append(callback)

    def _notify_progress(self, stage: str, percent: float) -> None:
        self.stage = stage
        self.progress = percent
        event = ProgressEvent(stage=stage, percent=percent)
        for callback in self._progress_listeners:
            callback(event)

    # ── Pipeline ────────────────────────────────────────────────────────

    def start_load(self) -> None:
        self._notify_progress(f"Fetching top {self.config.top_quals} quals...", 0)

    @property
    def qual_nodes(self) -> list[Node]:
        return [node for node in self.nodes if not node.is_start]

    def update(self, batches: Sequence[QualBatch]) -> list[Link]:
        """
        Run one pass over newly delivered batches and return the new tour.

        Raises:
            PassInProgressError: If another pass is running on this wizard.
            MixedRelationError: If a batch mixes quals from several tables.
            UncomputablePathError: If the tour cannot be computed.
        """
        if not self._pass_lock.acquire(blocking=False):
            raise PassInProgressError()
        try:
            return self._run_pass(batches)
        finally:
            self._pass_lock.release()

    def _run_pass(self, batches: Sequence[QualBatch]) -> list[Link]:
        started = time.perf_counter()
        self._notify_progress("Suggest indexes...", 0)

        known_ids = {node.id for node in self.nodes}
        nodes = list(self.nodes)
        for batch in batches:
            if batch.qualid in known_ids:
                logger.warning("Qual batch %s already in the graph, skipping", batch.qualid)
                continue
            nodes.append(Node.from_batch(batch))
            known_ids.add(batch.qualid)

        previous_links = [node.links for node in self.nodes]
        for node in nodes:
            node.links = {}
        try:
            links = compute_links(nodes)
            self.valuator.value_links(links)
            shortest_path = self.solver.shortest_path(nodes)
        except Exception:
            for node, node_links in zip(self.nodes, previous_links):
                node.links = node_links
            logger.warning("Wizard pass failed, keeping the previous graph of %d nodes", len(self.nodes))
            raise

        self.nodes = nodes
        self.links = links
        self.shortest_path = shortest_path

        self.last_pass_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "Wizard pass: %d nodes, %d links, tour of %d steps in %.1fms (%s solver)",
            len(self.nodes),
            len(self.links),
            len(self.shortest_path),
            self.last_pass_ms,
            self.solver.name,
        )
        self._notify_progress("Suggestions computed", 100)
        for callback in self._graph_listeners:
            callback(self)
        return self.shortest_path

    # ── Results ─────────────────────────────────────────────────────────

    @property
    def tour(self) -> list[Node]:
        """The tour as nodes, Start first."""
        return [self.start_node] + [link.target for link in self.shortest_path]

    def tour_distance(self) -> float:
        return compute_distance(self.tour, self.config)

    def close(self) -> None:
        """Unsubscribe from the data source and release a config-built requester."""
        self.datasource.unsubscribe(self)
        if self._owns_requester:
            self.requester.close()

    @property
    def unresolved_links(self) -> list[Link]:
        return [link for link in self.links if not link.resolved]

    def to_dict(self) -> dict[str, Any]:
        return {
            "database": self.database,
            "datasource": self.datasource.name,
            "solver": self.solver.name,
            "nodes": [node.snapshot() for node in self.nodes],
            "links": [link.to_dict() for link in self.links],
            "shortest_path": [link.to_dict() for link in self.shortest_path],
            "distance": self.tour_distance(),
        }
