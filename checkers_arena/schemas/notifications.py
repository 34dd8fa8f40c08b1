from pydantic import BaseModel, Field
from typing import List, Optional

from checkers_arena.models.enums import GameResult, Turn
from checkers_arena.schemas.game_schema import Move


class MoveNotification(BaseModel):
    """Sent to the opponent of whoever just moved."""
    game_id: str
    recipient: str
    move: Move
    board: str
    current_turn: Turn
    move_count: int


class GameEndedNotification(BaseModel):
    game_id: str
    result: GameResult
    winner: Optional[str] = None
    recipients: List[str] = Field(default_factory=list)
    timed_out: bool = False
