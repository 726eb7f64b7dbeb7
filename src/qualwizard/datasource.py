"""
Data sources feeding qual batches to the wizard.

A DataSource is the collector-side collaborator: it announces when it starts
fetching the top quals and hands the parsed batches to every subscriber once
they are loaded. Data sources are registered by name in a process-wide
DataSourceRegistry so a wizard can be rebuilt from a JSON description:

    registry = DataSourceRegistry.get_instance()
    registry.register(DataSource("wizard_quals"))

    wizard = Wizard.from_json({"datasource": "wizard_quals", "database": "prod"})
    registry.get("wizard_quals").load("top_quals.json")
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, Protocol, Sequence

from qualwizard.parser.config import ParserConfig
from qualwizard.parser.models import QualBatch
from qualwizard.parser.parser import parse_batches

logger = logging.getLogger(__name__)


class DataSourceListener(Protocol):
    """What a data source expects from its subscribers."""

    def start_load(self) -> None: ...

    def update(self, batches: Sequence[QualBatch]) -> Any: ...


class DataSource:
    """A named source of qual batches."""

    def __init__(self, name: str, parser_config: ParserConfig | None = None) -> None:
        self.name = name
        self.parser_config = parser_config
        self._listeners: list[DataSourceListener] = []

    def subscribe(self, listener: DataSourceListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def unsubscribe(self, listener: DataSourceListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    @property
    def listeners(self) -> tuple[DataSourceListener, ...]:
        return tuple(self._listeners)

    def load(self, source: str | Path | dict[str, Any] | list[Any]) -> list[QualBatch]:
        """
        Parse batches from `source` and dispatch them to subscribers.

        Raises:
            ParseError: If the input is malformed. Subscribers are told the
                load started but never receive data.
        """
        for listener in self._listeners:
            listener.start_load()
        batches = parse_batches(source, self.parser_config)
        logger.info("Data source %s loaded %d qual batches", self.name, len(batches))
        self.dispatch(batches)
        return batches

    def dispatch(self, batches: Sequence[QualBatch]) -> None:
        for listener in self._listeners:
            listener.update(batches)

    def __repr__(self) -> str:
        return f"DataSource(name={self.name!r}, listeners={len(self._listeners)})"


class DataSourceRegistry:
    """Process-wide registry of data sources, looked up by name."""

    _instance: "DataSourceRegistry | None" = None
    _instance_lock = threading.Lock()

    def __init__(self) -> None:
        self._sources: dict[str, DataSource] = {}

    @classmethod
    def get_instance(cls) -> "DataSourceRegistry":
        with cls._instance_lock:
            if cls._instance is None:
                cls._instance = cls()
            return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Drop the global registry (mainly for testing)."""
        with cls._instance_lock:
            cls._instance = None

    def register(self, source: DataSource) -> DataSource:
        if source.name in self._sources:
            logger.warning("Replacing data source %s", source.name)
        self._sources[source.name] = source
        return source

    def get(self, name: str | None) -> DataSource | None:
        if name is None:
            return None
        return self._sources.get(name)

    def names(self) -> list[str]:
        return sorted(self._sources)

    def __contains__(self, name: object) -> bool:
        return name in self._sources

    def __len__(self) -> int:
        return len(self._sources)
