from sqlalchemy import Column, Integer, String
from checkers_arena.core.database import Base

class IdCounter(Base):
    """Monotonic sequences behind game_000001 / t000001 style ids."""
    __tablename__ = "id_counters"

    name = Column(String, primary_key=True)   # "game" or "tournament"
    value = Column(Integer, default=0, nullable=False)
