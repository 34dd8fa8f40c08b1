from sqlalchemy import BigInteger, Column, String
from checkers_arena.core.database import Base, SnapshotJSON

class GameRecord(Base):
    __tablename__ = "games"

    id = Column(String, primary_key=True, index=True)   # game_000001
    status = Column(String, index=True)

    # Tournament Links
    tournament_id = Column(String, nullable=True, index=True)

    updated_at = Column(BigInteger, default=0)

    # Full Game snapshot (schemas.game_schema.Game)
    data = Column(SnapshotJSON, nullable=False)
