from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class LinkSource(str, Enum):
    """Where a resolved link came from"""
    DATABASE = "database"
    CSV = "csv"


class ResolvedLink(BaseModel):
    """Result of a token lookup.

    Built straight from a ShortLink row (from_attributes=True), or from a
    static CSV entry, in which case the row-only fields stay None.
    """
    token: str
    long_url: str
    source: LinkSource = LinkSource.DATABASE
    id: Optional[UUID] = None
    click_count: Optional[int] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True, frozen=True)

    @property
    def counts_clicks(self) -> bool:
        """Only database rows have a click_count to bump"""
        return self.source is LinkSource.DATABASE
