"""
Pydantic schemas for API response models
"""
from datetime import datetime
from typing import Any, Dict, List

from pydantic import BaseModel


# ===== SNAPSHOT SCHEMAS =====

class PlayerSnapshot(BaseModel):
    """Stored player stats snapshot"""
    id: int
    steam_id: str
    snapshot: Dict[str, Any]
    created_at: datetime

    class Config:
        from_attributes = True


class PlayerSnapshotList(BaseModel):
    count: int
    items: List[PlayerSnapshot]

