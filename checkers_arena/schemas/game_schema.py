from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional

from checkers_arena.engine.board import STARTING_BOARD
from checkers_arena.engine.clock import Clock
from checkers_arena.models.enums import (
    ColorPreference,
    DrawOfferState,
    GameResult,
    GameStatus,
    PlayerType,
    Turn,
)

AI_PLAYER_ID = "AI"


class Move(BaseModel):
    model_config = ConfigDict(frozen=True)

    from_row: int
    from_col: int
    to_row: int
    to_col: int
    captured_row: Optional[int] = None
    captured_col: Optional[int] = None
    promoted: bool = False
    timestamp: int = 0

    @property
    def is_capture(self) -> bool:
        return self.captured_row is not None


class Game(BaseModel):
    # Allow extra fields in stored JSON so older snapshots still load
    model_config = ConfigDict(extra='ignore')

    id: str
    red_player: Optional[str] = None
    black_player: Optional[str] = None
    red_player_type: PlayerType = PlayerType.HUMAN
    black_player_type: PlayerType = PlayerType.HUMAN

    board: str = STARTING_BOARD
    current_turn: Turn = Turn.RED
    moves: List[Move] = Field(default_factory=list)
    move_count: int = 0

    status: GameStatus = GameStatus.PENDING
    result: Optional[GameResult] = None
    created_at: int = 0
    updated_at: int = 0

    clock: Optional[Clock] = None
    draw_offer: DrawOfferState = DrawOfferState.NONE
    is_rated: bool = True
    color_preference: ColorPreference = ColorPreference.RED
    creator_wants_random: bool = False

    tournament_id: Optional[str] = None
    tournament_match_id: Optional[str] = None

    def player_for(self, turn: Turn) -> Optional[str]:
        return self.red_player if turn is Turn.RED else self.black_player

    def player_type_for(self, turn: Turn) -> PlayerType:
        return self.red_player_type if turn is Turn.RED else self.black_player_type

    def is_ai(self, turn: Turn) -> bool:
        return (
            self.player_type_for(turn) is PlayerType.AI
            or self.player_for(turn) == AI_PLAYER_ID
        )

    def side_of(self, player_id: str) -> Optional[Turn]:
        if self.red_player == player_id:
            return Turn.RED
        if self.black_player == player_id:
            return Turn.BLACK
        return None

    def winner_id(self) -> Optional[str]:
        if self.result is GameResult.RED_WINS:
            return self.red_player
        if self.result is GameResult.BLACK_WINS:
            return self.black_player
        return None

    def finish(self, result: GameResult, now_ms: int) -> None:
        """Status FINISHED and a result are always set together."""
        self.status = GameStatus.FINISHED
        self.result = result
        self.draw_offer = DrawOfferState.NONE
        self.updated_at = now_ms

    @property
    def is_tournament_game(self) -> bool:
        return self.tournament_id is not None and self.tournament_match_id is not None


class MoveOutcome(BaseModel):
    """What the caller learns from one make_move / AI step."""
    move: Optional[Move] = None
    game_over: bool = False
    timed_out: bool = False
    turn_passed: bool = False
