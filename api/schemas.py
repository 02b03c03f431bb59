"""
Pydantic schemas for the Config Baskets API.
"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


# ============================================================
# SNAPSHOT SCHEMAS
# ============================================================

class SnapshotResponse(BaseModel):
    basket_name: str
    checksum: str
    created_at: datetime
    summary: dict[str, int] = {}


class UploadResponse(BaseModel):
    basket_name: str
    created: bool
    checksum: str


# ============================================================
# RESTORE SCHEMAS
# ============================================================

class RestoreRequest(BaseModel):
    document: dict
    purge_types: list[str] = Field(default_factory=list)
    force: bool = False


class RestoreResponse(BaseModel):
    restored: dict[str, int]
    purged: dict[str, list[str]] = {}
    message: str = "Objects from Basket Snapshot have been restored"


class ErrorResponse(BaseModel):
    detail: str
    error: Optional[str] = None
