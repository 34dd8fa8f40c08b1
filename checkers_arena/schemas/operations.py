"""
Request and result messages handled by the operation dispatcher.

Both sides are closed unions tagged by `type`, so a message can be parsed
straight from JSON with `OperationAdapter.validate_python(...)`.
"""

from pydantic import BaseModel, Field, TypeAdapter
from typing import Annotated, Literal, Optional, Union

from checkers_arena.models.enums import ColorPreference, TimeControl
from checkers_arena.schemas.game_schema import Game, Move
from checkers_arena.schemas.tournament_schema import Tournament


# --- Requests ---

class CreateGame(BaseModel):
    type: Literal["create_game"] = "create_game"
    player_id: str
    vs_ai: bool = False
    time_control: Optional[TimeControl] = None
    color_preference: ColorPreference = ColorPreference.RED
    is_rated: bool = True


class JoinGame(BaseModel):
    type: Literal["join_game"] = "join_game"
    game_id: str
    player_id: str


class MakeMove(BaseModel):
    type: Literal["make_move"] = "make_move"
    game_id: str
    player_id: str
    from_row: int
    from_col: int
    to_row: int
    to_col: int


class Resign(BaseModel):
    type: Literal["resign"] = "resign"
    game_id: str
    player_id: str


class RequestAiMove(BaseModel):
    type: Literal["request_ai_move"] = "request_ai_move"
    game_id: str


class JoinQueue(BaseModel):
    type: Literal["join_queue"] = "join_queue"
    player_id: str
    time_control: TimeControl


class LeaveQueue(BaseModel):
    type: Literal["leave_queue"] = "leave_queue"
    player_id: str


class OfferDraw(BaseModel):
    type: Literal["offer_draw"] = "offer_draw"
    game_id: str
    player_id: str


class AcceptDraw(BaseModel):
    type: Literal["accept_draw"] = "accept_draw"
    game_id: str
    player_id: str


class DeclineDraw(BaseModel):
    type: Literal["decline_draw"] = "decline_draw"
    game_id: str
    player_id: str


class ClaimTimeWin(BaseModel):
    type: Literal["claim_time_win"] = "claim_time_win"
    game_id: str
    player_id: str


class CreateTournament(BaseModel):
    type: Literal["create_tournament"] = "create_tournament"
    player_id: str
    name: str
    time_control: TimeControl = TimeControl.BLITZ_5_3
    max_players: int
    is_public: bool = True
    scheduled_start: Optional[int] = None


class JoinTournament(BaseModel):
    type: Literal["join_tournament"] = "join_tournament"
    tournament_id: str
    player_id: str


class JoinTournamentByCode(BaseModel):
    type: Literal["join_tournament_by_code"] = "join_tournament_by_code"
    invite_code: str
    player_id: str


class LeaveTournament(BaseModel):
    type: Literal["leave_tournament"] = "leave_tournament"
    tournament_id: str
    player_id: str


class StartTournament(BaseModel):
    type: Literal["start_tournament"] = "start_tournament"
    tournament_id: str
    player_id: str


class StartTournamentMatch(BaseModel):
    type: Literal["start_tournament_match"] = "start_tournament_match"
    tournament_id: str
    match_id: str
    player_id: str


class ForfeitTournamentMatch(BaseModel):
    type: Literal["forfeit_tournament_match"] = "forfeit_tournament_match"
    tournament_id: str
    match_id: str
    player_id: str


class CancelTournament(BaseModel):
    type: Literal["cancel_tournament"] = "cancel_tournament"
    tournament_id: str
    player_id: str


Operation = Annotated[
    Union[
        CreateGame, JoinGame, MakeMove, Resign, RequestAiMove,
        JoinQueue, LeaveQueue,
        OfferDraw, AcceptDraw, DeclineDraw, ClaimTimeWin,
        CreateTournament, JoinTournament, JoinTournamentByCode, LeaveTournament,
        StartTournament, StartTournamentMatch, ForfeitTournamentMatch, CancelTournament,
    ],
    Field(discriminator="type"),
]

OperationAdapter = TypeAdapter(Operation)


# --- Results ---

class GameCreated(BaseModel):
    type: Literal["game_created"] = "game_created"
    game: Game


class GameJoined(BaseModel):
    type: Literal["game_joined"] = "game_joined"
    game: Game


class MoveMade(BaseModel):
    type: Literal["move_made"] = "move_made"
    game: Game
    move: Optional[Move] = None
    game_over: bool = False
    timed_out: bool = False


class Resigned(BaseModel):
    type: Literal["resigned"] = "resigned"
    game: Game


class AiMoveMade(BaseModel):
    type: Literal["ai_move_made"] = "ai_move_made"
    game: Game
    move: Optional[Move] = None
    game_over: bool = False
    timed_out: bool = False


class QueueJoined(BaseModel):
    type: Literal["queue_joined"] = "queue_joined"
    player_id: str
    time_control: TimeControl


class QueueLeft(BaseModel):
    type: Literal["queue_left"] = "queue_left"
    player_id: str


class MatchFound(BaseModel):
    type: Literal["match_found"] = "match_found"
    game: Game


class DrawOffered(BaseModel):
    type: Literal["draw_offered"] = "draw_offered"
    game: Game


class DrawAccepted(BaseModel):
    type: Literal["draw_accepted"] = "draw_accepted"
    game: Game


class DrawDeclined(BaseModel):
    type: Literal["draw_declined"] = "draw_declined"
    game: Game


class TimeWinClaimed(BaseModel):
    type: Literal["time_win_claimed"] = "time_win_claimed"
    game: Game


class TournamentCreated(BaseModel):
    type: Literal["tournament_created"] = "tournament_created"
    tournament: Tournament


class TournamentJoined(BaseModel):
    type: Literal["tournament_joined"] = "tournament_joined"
    tournament: Tournament


class TournamentJoinedByCode(BaseModel):
    type: Literal["tournament_joined_by_code"] = "tournament_joined_by_code"
    tournament: Tournament


class TournamentLeft(BaseModel):
    type: Literal["tournament_left"] = "tournament_left"
    tournament: Tournament


class TournamentStarted(BaseModel):
    type: Literal["tournament_started"] = "tournament_started"
    tournament: Tournament


class TournamentMatchStarted(BaseModel):
    type: Literal["tournament_match_started"] = "tournament_match_started"
    tournament: Tournament
    game: Game


class TournamentMatchForfeited(BaseModel):
    type: Literal["tournament_match_forfeited"] = "tournament_match_forfeited"
    tournament: Tournament
    winner: str


class TournamentCancelled(BaseModel):
    type: Literal["tournament_cancelled"] = "tournament_cancelled"
    tournament: Tournament


class ErrorResult(BaseModel):
    type: Literal["error"] = "error"
    code: str
    message: str = ""


OperationResult = Annotated[
    Union[
        GameCreated, GameJoined, MoveMade, Resigned, AiMoveMade,
        QueueJoined, QueueLeft, MatchFound,
        DrawOffered, DrawAccepted, DrawDeclined, TimeWinClaimed,
        TournamentCreated, TournamentJoined, TournamentJoinedByCode, TournamentLeft,
        TournamentStarted, TournamentMatchStarted, TournamentMatchForfeited, TournamentCancelled,
        ErrorResult,
    ],
    Field(discriminator="type"),
]
