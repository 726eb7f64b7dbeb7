"""
Pydantic models for the qual batches fed to the wizard.

The collector (pg_qualstats / PoWA) reports its most executed predicates as a
JSON list of batches:

    [
      {
        "qualid": 3912,
        "queryid": 1824012,
        "where_clause": "orders.status = ? AND orders.created_at > ?",
        "quals": [
          {"relid": 16384, "attnum": 2, "opno": 98, "queryid": 1824012,
           "indexams": ["btree", "hash"], "relname": "orders", "attname": "status"},
          ...
        ]
      },
      ...
    ]

Each batch becomes one node of the wizard graph.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Qual(BaseModel):
    """
    A single predicate from a query: one relation, one attribute, one operator.

    Quals are ordered by (relid, attnum, opno). This ordering is what the
    link builder's merge-join relies on.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    relid: int = Field(..., description="OID of the relation the qual filters on")
    attnum: int = Field(..., description="Attribute number within the relation")
    opno: int = Field(..., description="OID of the operator")
    queryid: int | None = Field(default=None, description="Query the qual comes from")
    indexams: frozenset[str] = Field(
        default_factory=frozenset,
        description="Index access methods able to support this qual",
    )
    relname: str | None = Field(default=None, description="Relation name")
    attname: str | None = Field(default=None, description="Attribute name")

    @property
    def sort_key(self) -> tuple[int, int, int]:
        return (self.relid, self.attnum, self.opno)

    @property
    def attr_id(self) -> str:
        """Identifier of the (relation, attribute) pair."""
        return f"{self.relid}/{self.attnum}"

    @property
    def label(self) -> str:
        relname = self.relname or str(self.relid)
        attname = self.attname or str(self.attnum)
        return f"{relname}.{attname}"

    def to_attributes(self) -> dict[str, Any]:
        """Plain JSON-ready attributes, as sent to the suggestion endpoint."""
        data = self.model_dump()
        data["indexams"] = sorted(self.indexams)
        return data


def qual_comparator(qual1: Qual, qual2: Qual) -> int:
    """Three-way comparison on (relid, attnum, opno)."""
    if qual1.relid != qual2.relid:
        return qual1.relid - qual2.relid
    if qual1.attnum != qual2.attnum:
        return qual1.attnum - qual2.attnum
    if qual1.opno != qual2.opno:
        return qual1.opno - qual2.opno
    return 0


class QualBatch(BaseModel):
    """One WHERE clause as reported by the collector, with its quals."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    qualid: int | str = Field(..., description="Identifier of the qual group")
    where_clause: str = Field(default="", description="Normalized WHERE clause text")
    queryid: int | None = Field(default=None, description="Query the clause belongs to")
    quals: list[Qual] = Field(default_factory=list, description="Predicates of the clause")
