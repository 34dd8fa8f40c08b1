"""
Heuristic AI - single-ply move scorer used for computer-controlled sides.

Every legal candidate is scored and the best one wins; ties keep the first
candidate found (row-major board order, captures before steps). The small
tiebreak term is arithmetic on the origin square and move count, so the same
game state always produces the same move.
"""

import logging
from typing import Optional, Tuple

from checkers_arena.engine.board import SIZE, get_piece
from checkers_arena.engine.rules import legal_moves
from checkers_arena.models.enums import Piece, Turn
from checkers_arena.schemas.game_schema import Game

logger = logging.getLogger(__name__)

CAPTURE_BONUS = 100
ADVANCE_WEIGHT = 2
PROMOTION_BONUS = 50
CENTER = 4


def tiebreak(from_row: int, from_col: int, move_count: int) -> int:
    return (from_row * 13 + from_col * 17 + move_count) % 5


def score_move(
    piece: Piece,
    turn: Turn,
    from_row: int,
    from_col: int,
    to_row: int,
    to_col: int,
    is_capture: bool,
    move_count: int,
) -> int:
    score = CAPTURE_BONUS if is_capture else 0

    if not piece.is_king:
        if turn is Turn.RED:
            score += to_row * ADVANCE_WEIGHT
            if to_row == SIZE - 1:
                score += PROMOTION_BONUS
        else:
            score += (SIZE - 1 - to_row) * ADVANCE_WEIGHT
            if to_row == 0:
                score += PROMOTION_BONUS

    score -= abs(to_row - CENTER) + abs(to_col - CENTER)
    score += tiebreak(from_row, from_col, move_count)
    return score


def choose_move(game: Game) -> Optional[Tuple[int, int, int, int]]:
    """Best (from_row, from_col, to_row, to_col) for the side to move, or None."""
    best_move = None
    best_score = None

    for from_row, from_col, to_row, to_col, is_capture in legal_moves(game):
        piece = get_piece(game.board, from_row, from_col)
        score = score_move(
            piece, game.current_turn, from_row, from_col, to_row, to_col, is_capture, game.move_count
        )
        if best_score is None or score > best_score:
            best_score = score
            best_move = (from_row, from_col, to_row, to_col)

    if best_move is not None:
        logger.debug("AI (%s) picked %s with score %s", game.current_turn, best_move, best_score)
    return best_move
