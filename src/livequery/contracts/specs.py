"""Scenario and report contracts for replaying change feeds."""

from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

from livequery.contracts.filters import FilterExpr


class TableSpec(BaseModel):
    primary_key: str = "id"


class ViewSpec(BaseModel):
    name: str
    table: str
    where: Optional[FilterExpr] = None


class OperationSpec(BaseModel):
    op: Literal["insert", "delete", "update"]
    table: str
    row: dict[str, Any]


class TransactionSpec(BaseModel):
    id: Optional[str] = None
    ops: list[OperationSpec] = Field(default_factory=list)


class ScenarioSpec(BaseModel):
    tables: dict[str, TableSpec] = Field(default_factory=dict)
    views: list[ViewSpec] = Field(default_factory=list)
    transactions: list[TransactionSpec] = Field(default_factory=list)


class ViewReport(BaseModel):
    name: str
    query: str
    state: Literal["loading", "ready"]
    rows: list[dict[str, Any]] = Field(default_factory=list)
    log: list[dict[str, Any]] = Field(default_factory=list)
    recomputes: int = 0


class ReplayReport(BaseModel):
    views: list[ViewReport]
    transactions_applied: int = 0
    subscriptions: list[str] = Field(default_factory=list)
