"""
Database models for persisted Steam snapshots
SQLAlchemy ORM models for player stats snapshots and game metadata
"""
from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, DateTime, JSON
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PlayerStatsSnapshot(Base):
    """
    One computed player stats payload
    Append-only: every fresh computation adds a row
    """
    __tablename__ = "player_stats_snapshots"

    id = Column(Integer, primary_key=True, autoincrement=True)
    steam_id = Column(String, nullable=False, index=True)
    snapshot = Column(JSON, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    def __repr__(self):
        return f"<PlayerStatsSnapshot(id={self.id}, steam_id='{self.steam_id}')>"


class GameMetadataCache(Base):
    """
    Latest store summary per app
    One record per app, overwritten on every refresh
    """
    __tablename__ = "game_metadata_cache"

    app_id = Column(String, primary_key=True)
    payload = Column(JSON, nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    def __repr__(self):
        return f"<GameMetadataCache(app_id='{self.app_id}')>"
