from sqlalchemy import BigInteger, Column, Integer, String
from checkers_arena.core.database import Base

class QueueEntry(Base):
    """A player waiting for an opponent with the same time control."""
    __tablename__ = "matchmaking_queue"

    id = Column(Integer, primary_key=True, autoincrement=True)   # arrival order
    player_id = Column(String, unique=True, index=True)
    time_control = Column(String, index=True)
    enqueued_at = Column(BigInteger, default=0)
