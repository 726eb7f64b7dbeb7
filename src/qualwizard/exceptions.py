"""
Package-level exception hierarchy for qualwizard.

All exceptions inherit from QualWizardError, enabling:
- Catching all qualwizard errors with a single except clause
- Context fields for debugging (node ids, relation ids, config keys)
- Structured serialization via to_dict() for JSON error responses

Hierarchy:
    QualWizardError
    ├── ConfigurationError       – Invalid configuration value
    ├── ParseError               – Failed to parse a qual batch input
    ├── DataSourceNotFoundError  – Wizard bound to an unknown data source
    ├── GraphError               – Inconsistent or malformed qual graph
    │   ├── MixedRelationError   – A node's quals touch more than one table
    │   └── UncomputablePathError – A path uses a link that does not exist
    ├── PassInProgressError      – A second pass was started on a busy wizard
    └── SuggestionError          – An index suggestion request failed
"""

from __future__ import annotations

from typing import Any


class QualWizardError(Exception):
    """
    Base exception for all qualwizard errors.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON error responses."""
        return {
            "error_type": type(self).__name__,
            "message": self.message,
        }


# ── Configuration / Input Errors ─────────────────────────────────────────


class ConfigurationError(QualWizardError):
    """
    Error in wizard configuration.

    Attributes:
        config_key: The configuration key that caused the error (if known).
    """

    def __init__(self, message: str, config_key: str | None = None) -> None:
        self.config_key = config_key
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["config_key"] = self.config_key
        return result


class ParseError(QualWizardError):
    """
    Failed to parse qual batch input.

    Attributes:
        detail: Technical details for debugging (optional).
        source: Where the error occurred ("json_decode", "validation", ...).
    """

    def __init__(
        self,
        message: str,
        *,
        detail: str | None = None,
        source: str = "unknown",
    ) -> None:
        self.detail = detail
        self.source = source
        super().__init__(message)

    def __str__(self) -> str:
        if self.detail:
            return f"{self.message}\n\nDetails: {self.detail}"
        return self.message

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["detail"] = self.detail
        result["source"] = self.source
        return result


class DataSourceNotFoundError(QualWizardError):
    """
    The wizard references a data source that was never registered.

    Attributes:
        name: The data source name that could not be resolved.
    """

    def __init__(self, name: str | None) -> None:
        self.name = name
        super().__init__("The content source could not be found.")

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["datasource"] = self.name
        return result


# ── Graph Errors ─────────────────────────────────────────────────────────


class GraphError(QualWizardError):
    """Errors raised while building or walking the qual graph."""
    pass


class MixedRelationError(GraphError):
    """
    A single node's quals reference more than one relation.

    Attributes:
        node_id: Id of the offending node.
        expected_relid: Relation id seen first on that node.
        found_relid: Conflicting relation id.
    """

    def __init__(
        self,
        node_id: str | int,
        expected_relid: int,
        found_relid: int,
    ) -> None:
        self.node_id = node_id
        self.expected_relid = expected_relid
        self.found_relid = found_relid
        super().__init__(
            f"A single qual should NOT touch more than one table! "
            f"(node {node_id}: relid {expected_relid} then {found_relid})"
        )

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["node_id"] = self.node_id
        result["expected_relid"] = self.expected_relid
        result["found_relid"] = self.found_relid
        return result


class UncomputablePathError(GraphError):
    """
    A path visits two consecutive nodes that are not linked.

    Attributes:
        source_id: Id of the node the missing link starts from.
        target_id: Id of the node the missing link points to.
    """

    def __init__(self, source_id: str | int, target_id: str | int) -> None:
        self.source_id = source_id
        self.target_id = target_id
        super().__init__(
            f"Uncomputable path: no link from {source_id!r} to {target_id!r}"
        )

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["source_id"] = self.source_id
        result["target_id"] = self.target_id
        return result


# ── Runtime Errors ───────────────────────────────────────────────────────


class PassInProgressError(QualWizardError):
    """Raised when update() is called while another pass is running."""

    def __init__(self) -> None:
        super().__init__(
            "A suggestion pass is already running on this wizard; "
            "concurrent passes must be serialized by the caller"
        )


class SuggestionError(QualWizardError):
    """
    An index suggestion request could not be delivered.

    The wizard never surfaces this error to callers of a pass; requesters
    raise it and the valuator logs it.
    """

    def __init__(self, message: str, url: str | None = None) -> None:
        self.url = url
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["url"] = self.url
        return result
