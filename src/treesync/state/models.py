"""Catalog data models for the persisted store."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List

from pydantic import BaseModel, Field


class DataEntry(BaseModel):
    """A data record filed under a relative folder path."""

    file_name: str
    relative_path: str = ""
    added_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class CatalogState(BaseModel):
    """Aggregate catalog for a collection root."""

    root: str
    entries: List[DataEntry] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


__all__ = ["DataEntry", "CatalogState"]
