"""
Game lifecycle: seating, moves, AI turns, resignation, draws and time wins.

These functions mutate a Game snapshot in place and raise CheckersError on
a rejected request. Running out of time is not an error: the game simply
finishes and the outcome says so.
"""

import logging
from typing import Optional

from checkers_arena.engine import ai
from checkers_arena.engine.clock import Clock
from checkers_arena.engine.errors import CheckersError, ErrorCode
from checkers_arena.engine.rules import apply_move, check_game_over
from checkers_arena.engine.tournament import assign_colors
from checkers_arena.models.enums import (
    ColorPreference,
    DrawOfferState,
    GameResult,
    GameStatus,
    PlayerType,
    TimeControl,
    Turn,
)
from checkers_arena.schemas.game_schema import AI_PLAYER_ID, Game, MoveOutcome
from checkers_arena.schemas.tournament_schema import Tournament, TournamentMatch

logger = logging.getLogger(__name__)


def _clock_for(time_control: Optional[TimeControl]) -> Optional[Clock]:
    return Clock.for_time_control(time_control) if time_control is not None else None


def _activate(game: Game, now_ms: int) -> None:
    game.status = GameStatus.ACTIVE
    game.updated_at = now_ms
    if game.clock is not None:
        game.clock.start(now_ms)


def new_game(
    game_id: str,
    creator: str,
    now_ms: int,
    vs_ai: bool = False,
    time_control: Optional[TimeControl] = None,
    color_preference: ColorPreference = ColorPreference.RED,
    is_rated: bool = True,
) -> Game:
    """
    Human games wait for an opponent; a Random preference seats the creator
    as red for now and flips a coin when someone joins. AI games start at once.
    """
    game = Game(
        id=game_id,
        created_at=now_ms,
        updated_at=now_ms,
        clock=_clock_for(time_control),
        is_rated=is_rated,
        color_preference=color_preference,
    )

    if vs_ai:
        creator_red = (
            color_preference is ColorPreference.RED
            or (color_preference is ColorPreference.RANDOM and now_ms % 2 == 0)
        )
        if creator_red:
            game.red_player = creator
            game.black_player = AI_PLAYER_ID
            game.black_player_type = PlayerType.AI
        else:
            game.red_player = AI_PLAYER_ID
            game.red_player_type = PlayerType.AI
            game.black_player = creator
        _activate(game, now_ms)
        return game

    if color_preference is ColorPreference.BLACK:
        game.black_player = creator
    else:
        game.red_player = creator
        game.creator_wants_random = color_preference is ColorPreference.RANDOM
    return game


def join_game(game: Game, player_id: str, now_ms: int) -> None:
    if game.status is not GameStatus.PENDING:
        raise CheckersError(ErrorCode.GAME_NOT_AVAILABLE)
    if player_id in (game.red_player, game.black_player):
        raise CheckersError(ErrorCode.CANNOT_JOIN_OWN_GAME)

    if game.red_player is None:
        game.red_player = player_id
    else:
        game.black_player = player_id

    if game.creator_wants_random and now_ms % 2 == 0:
        game.red_player, game.black_player = game.black_player, game.red_player

    _activate(game, now_ms)
    logger.debug("Game %s joined by %s", game.id, player_id)


def new_matched_game(game_id: str, queued_player: str, joiner: str, time_control: TimeControl, now_ms: int) -> Game:
    """Matchmaking pairing: whoever waited in the queue plays red."""
    game = Game(
        id=game_id,
        red_player=queued_player,
        black_player=joiner,
        created_at=now_ms,
        clock=_clock_for(time_control),
        is_rated=True,
    )
    _activate(game, now_ms)
    return game


def new_tournament_game(game_id: str, tournament: Tournament, match: TournamentMatch, now_ms: int) -> Game:
    red, black = assign_colors(match, now_ms)
    game = Game(
        id=game_id,
        red_player=red,
        black_player=black,
        created_at=now_ms,
        clock=_clock_for(tournament.time_control),
        is_rated=True,
        tournament_id=tournament.id,
        tournament_match_id=match.id,
    )
    _activate(game, now_ms)
    return game


# --- Guards ---

def _require_active(game: Game) -> None:
    if game.status is not GameStatus.ACTIVE:
        raise CheckersError(ErrorCode.GAME_NOT_ACTIVE)


def _require_side(game: Game, player_id: str) -> Turn:
    side = game.side_of(player_id)
    if side is None:
        raise CheckersError(ErrorCode.NOT_IN_THIS_GAME)
    return side


def expire_if_timed_out(game: Game, now_ms: int) -> bool:
    """Finishes an active game whose running clock has hit zero. True if it did."""
    if game.status is not GameStatus.ACTIVE or game.clock is None:
        return False
    flagged = game.clock.flag_fall(now_ms)
    if flagged is None:
        return False
    game.finish(GameResult.win_for(flagged.opposite()), now_ms)
    logger.info("Game %s: %s ran out of time", game.id, flagged)
    return True


# --- Play ---

def make_move(
    game: Game,
    player_id: str,
    from_row: int,
    from_col: int,
    to_row: int,
    to_col: int,
    now_ms: int,
) -> MoveOutcome:
    """
    Plays one step or one jump of a chain.

    A flag that has already fallen ends the game before the move is looked
    at; the outcome then has timed_out set and no move. The clock is only
    charged when the turn actually passes, so a multi-jump is timed as one turn.
    """
    _require_active(game)
    side = _require_side(game, player_id)
    if side is not game.current_turn:
        raise CheckersError(ErrorCode.NOT_YOUR_TURN)

    if expire_if_timed_out(game, now_ms):
        return MoveOutcome(game_over=True, timed_out=True)

    move = apply_move(game, from_row, from_col, to_row, to_col, now_ms)
    game.moves.append(move)
    game.move_count += 1
    game.updated_at = now_ms
    game.draw_offer = DrawOfferState.NONE

    turn_passed = game.current_turn is not side
    if turn_passed and game.clock is not None and not game.clock.on_move_completed(now_ms):
        game.finish(GameResult.win_for(side.opposite()), now_ms)
        logger.info("Game %s: %s flagged while moving", game.id, side)
        return MoveOutcome(move=move, game_over=True, timed_out=True, turn_passed=True)

    game_over = check_game_over(game, now_ms)
    if game_over:
        logger.info("Game %s finished: %s", game.id, game.result)
    return MoveOutcome(move=move, game_over=game_over, turn_passed=turn_passed)


def play_ai_move(game: Game, now_ms: int) -> MoveOutcome:
    """One AI step. An AI side left without a legal move loses."""
    _require_active(game)
    turn = game.current_turn
    if not game.is_ai(turn):
        raise CheckersError(ErrorCode.NOT_AI_TURN)

    if expire_if_timed_out(game, now_ms):
        return MoveOutcome(game_over=True, timed_out=True)

    choice = ai.choose_move(game)
    if choice is None:
        game.finish(GameResult.win_for(turn.opposite()), now_ms)
        return MoveOutcome(game_over=True)

    return make_move(game, game.player_for(turn), *choice, now_ms)


# --- Endings ---

def resign(game: Game, player_id: str, now_ms: int) -> None:
    _require_active(game)
    side = _require_side(game, player_id)
    game.finish(GameResult.win_for(side.opposite()), now_ms)
    logger.info("Game %s: %s resigned", game.id, player_id)


def _offer_state(side: Turn) -> DrawOfferState:
    return DrawOfferState.OFFERED_BY_RED if side is Turn.RED else DrawOfferState.OFFERED_BY_BLACK


def offer_draw(game: Game, player_id: str, now_ms: int) -> None:
    _require_active(game)
    side = _require_side(game, player_id)
    if game.is_tournament_game:
        raise CheckersError(ErrorCode.DRAW_NOT_ALLOWED_IN_TOURNAMENT)
    if game.draw_offer is not DrawOfferState.NONE:
        raise CheckersError(ErrorCode.DRAW_ALREADY_OFFERED)
    game.draw_offer = _offer_state(side)
    game.updated_at = now_ms


def _require_offer_from_opponent(game: Game, player_id: str) -> None:
    _require_active(game)
    side = _require_side(game, player_id)
    if game.draw_offer is not _offer_state(side.opposite()):
        raise CheckersError(ErrorCode.NO_DRAW_OFFER)


def accept_draw(game: Game, player_id: str, now_ms: int) -> None:
    _require_offer_from_opponent(game, player_id)
    game.finish(GameResult.DRAW, now_ms)


def decline_draw(game: Game, player_id: str, now_ms: int) -> None:
    _require_offer_from_opponent(game, player_id)
    game.draw_offer = DrawOfferState.NONE
    game.updated_at = now_ms


def claim_time_win(game: Game, player_id: str, now_ms: int) -> None:
    _require_active(game)
    side = _require_side(game, player_id)
    if game.clock is None:
        raise CheckersError(ErrorCode.NOT_TIMED_GAME)

    flagged = game.clock.timed_out(now_ms)
    if flagged is None:
        raise CheckersError(ErrorCode.OPPONENT_NOT_TIMED_OUT)
    if flagged is side:
        raise CheckersError(ErrorCode.CLAIMANT_TIMED_OUT)

    expire_if_timed_out(game, now_ms)
