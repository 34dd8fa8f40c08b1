from sqlalchemy import Column, DateTime, String
from sqlalchemy.sql import func
from checkers_arena.core.database import Base, SnapshotJSON

class PlayerStatsRecord(Base):
    __tablename__ = "player_stats"

    player_id = Column(String, primary_key=True, index=True)

    # Counters and per-bucket ratings (schemas.stats_schema.PlayerStats)
    data = Column(SnapshotJSON, nullable=False)

    last_updated = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
