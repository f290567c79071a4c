"""
Stored Record Module

Relational storage for entity collections: every record of every collection
is one row, keyed by (collection, record_id), with the record itself kept as a
JSON document.
"""
from typing import Any, Dict
from sqlmodel import SQLModel, Field, JSON, Column


class StoredRecord(SQLModel, table=True):
    __tablename__ = "ledger_records"

    collection: str = Field(primary_key=True)
    record_id: int = Field(primary_key=True)
    data: Dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
