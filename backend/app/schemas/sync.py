"""
Sync trigger schemas.
"""
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.services.sync_base import SyncOptions


class SyncRequest(BaseModel):
    """Body of the sync trigger endpoints; every field is optional."""

    store_id: Optional[UUID] = Field(None, alias="storeId")
    from_date: Optional[datetime] = Field(None, alias="fromDate")
    to_date: Optional[datetime] = Field(None, alias="toDate")
    # Range checked by the orchestrator so errors share the envelope
    limit: Optional[int] = None

    model_config = ConfigDict(populate_by_name=True)

    def to_options(self) -> SyncOptions:
        return SyncOptions(
            store_id=self.store_id,
            from_date=self.from_date,
            to_date=self.to_date,
            limit=self.limit,
        )


class SyncResultResponse(BaseModel):
    """Summary of a sync run."""

    processed: int
    created: int
    updated: int
    errors: list[str]
    details: dict[str, int] = Field(default_factory=dict)
    success: bool = True
    message: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class ConnectionStatus(BaseModel):
    connected: bool
