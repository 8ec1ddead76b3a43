"""
CRUD operations for persisted snapshots
"""
from typing import List, Optional

from sqlalchemy.orm import Session

from app.models import GameMetadataCache, PlayerStatsSnapshot, _utcnow


# ===== PLAYER SNAPSHOTS =====

def add_player_snapshot(db: Session, steam_id: str, snapshot: dict) -> PlayerStatsSnapshot:
    """
    Append a player stats snapshot
    """
    row = PlayerStatsSnapshot(steam_id=steam_id, snapshot=snapshot)
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def get_player_snapshots(db: Session, steam_id: str, limit: int = 20) -> List[PlayerStatsSnapshot]:
    """
    Most recent snapshots for a player, newest first
    """
    return (
        db.query(PlayerStatsSnapshot)
        .filter(PlayerStatsSnapshot.steam_id == steam_id)
        .order_by(PlayerStatsSnapshot.created_at.desc(), PlayerStatsSnapshot.id.desc())
        .limit(limit)
        .all()
    )


# ===== GAME METADATA =====

def upsert_game_metadata(db: Session, app_id: str, payload: dict) -> GameMetadataCache:
    """
    Insert or overwrite the stored summary for an app
    """
    row = db.get(GameMetadataCache, app_id)
    if row is None:
        row = GameMetadataCache(app_id=app_id, payload=payload)
        db.add(row)
    else:
        row.payload = payload
        row.updated_at = _utcnow()
    db.commit()
    db.refresh(row)
    return row


def get_game_metadata(db: Session, app_id: str) -> Optional[GameMetadataCache]:
    return db.get(GameMetadataCache, app_id)
