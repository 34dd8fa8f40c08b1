from sqlalchemy import Column, String
from checkers_arena.core.database import Base, SnapshotJSON

class TournamentRecord(Base):
    __tablename__ = "tournaments"

    id = Column(String, primary_key=True, index=True)   # t000001
    status = Column(String, index=True)   # REGISTRATION, IN_PROGRESS, FINISHED, CANCELLED

    # Stored upper-case; only private tournaments have one
    invite_code = Column(String, nullable=True, unique=True, index=True)

    # Full Tournament snapshot, rounds and participants included
    data = Column(SnapshotJSON, nullable=False)
