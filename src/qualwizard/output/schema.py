"""
JSON Schema definitions for the wizard output.

The rendering side (web UI, CI comment, notebook) consumes this shape:
the full node list, the full link list and the tour as an ordered link
sequence.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class QualSchema(BaseModel):
    """Schema for a single qual."""

    model_config = ConfigDict(frozen=True)

    relid: int
    attnum: int
    opno: int
    queryid: int | None = None
    indexams: list[str] = Field(default_factory=list)
    relname: str | None = None
    attname: str | None = None


class NodeSchema(BaseModel):
    """Schema for a graph node (links omitted)."""

    model_config = ConfigDict(frozen=True)

    id: str | int = Field(..., description="Node id ('start' for the Start node)")
    label: str = Field(..., description="WHERE clause of the batch")
    type: str = Field(..., description="startNode or qual")
    queryid: int | None = None
    quals: list[QualSchema] = Field(default_factory=list)


class OverlapSchema(BaseModel):
    """Schema for an attribute shared by both ends of a link."""

    model_config = ConfigDict(frozen=True)

    relid: int
    queryids: list[int | None]
    attnum: int
    relname: str | None = None
    attname: str | None = None
    indexams: list[str] = Field(default_factory=list)


class LinkSchema(BaseModel):
    """Schema for a directed link."""

    model_config = ConfigDict(frozen=True)

    source: str | int
    target: str | int
    samerel: bool
    overlap: list[OverlapSchema] = Field(default_factory=list)
    missing: list[QualSchema] = Field(default_factory=list)
    value: float | None = Field(None, description="Link value, null while a suggestion is pending")


class WizardResultSchema(BaseModel):
    """Complete wizard output."""

    model_config = ConfigDict(frozen=True)

    version: str = Field("1.0", description="Schema version")
    database: str
    datasource: str
    solver: str
    distance: float = Field(..., description="Total cost of the tour")
    nodes: list[NodeSchema] = Field(default_factory=list)
    links: list[LinkSchema] = Field(default_factory=list)
    shortest_path: list[LinkSchema] = Field(default_factory=list)


def get_json_schema() -> dict[str, Any]:
    """Get the JSON Schema for API documentation."""
    return WizardResultSchema.model_json_schema()


# Schema version - increment on breaking changes
SCHEMA_VERSION = "1.0"
