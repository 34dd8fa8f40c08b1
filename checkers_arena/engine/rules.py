"""
Move Rules Engine.

Validates and applies one move against a Game snapshot: diagonal movement,
the global forced-capture rule, multi-jump continuation and promotion.
Validation always completes before the board or turn is written, so a
raised CheckersError leaves the snapshot untouched.
"""

import logging
from typing import List, Optional, Tuple

from checkers_arena.engine.board import SIZE, count_pieces, get_piece, is_playable_square, set_piece
from checkers_arena.engine.errors import CheckersError, ErrorCode
from checkers_arena.models.enums import GameResult, Piece, Turn
from checkers_arena.schemas.game_schema import Game, Move

logger = logging.getLogger(__name__)

KING_DIRECTIONS = [(-1, -1), (-1, 1), (1, -1), (1, 1)]
RED_DIRECTIONS = [(1, -1), (1, 1)]
BLACK_DIRECTIONS = [(-1, -1), (-1, 1)]

Square = Tuple[int, int]
# (from_row, from_col, to_row, to_col, is_capture)
Candidate = Tuple[int, int, int, int, bool]


def directions_for(piece: Piece) -> List[Square]:
    if piece.is_king:
        return KING_DIRECTIONS
    return RED_DIRECTIONS if piece.is_red else BLACK_DIRECTIONS


def _in_bounds(row: int, col: int) -> bool:
    return 0 <= row < SIZE and 0 <= col < SIZE


def _is_enemy(piece: Piece, other: Piece) -> bool:
    if piece.is_red:
        return other.is_black
    if piece.is_black:
        return other.is_red
    return False


def _moves_forward(turn: Turn, from_row: int, to_row: int) -> bool:
    return to_row > from_row if turn is Turn.RED else to_row < from_row


def promotes(piece: Piece, to_row: int) -> bool:
    if piece is Piece.RED:
        return to_row == SIZE - 1
    if piece is Piece.BLACK:
        return to_row == 0
    return False


def capture_targets(game: Game, row: int, col: int, piece: Piece) -> List[Square]:
    """Landing squares of every jump available to `piece` from (row, col)."""
    targets = []
    for dr, dc in directions_for(piece):
        to_r, to_c = row + 2 * dr, col + 2 * dc
        if not _in_bounds(to_r, to_c):
            continue
        jumped = get_piece(game.board, row + dr, col + dc)
        if _is_enemy(piece, jumped) and get_piece(game.board, to_r, to_c).is_empty:
            targets.append((to_r, to_c))
    return targets


def step_targets(game: Game, row: int, col: int, piece: Piece) -> List[Square]:
    targets = []
    for dr, dc in directions_for(piece):
        to_r, to_c = row + dr, col + dc
        if _in_bounds(to_r, to_c) and get_piece(game.board, to_r, to_c).is_empty:
            targets.append((to_r, to_c))
    return targets


def piece_has_capture(game: Game, row: int, col: int, piece: Piece) -> bool:
    return bool(capture_targets(game, row, col, piece))


def piece_has_simple_move(game: Game, row: int, col: int, piece: Piece) -> bool:
    return bool(step_targets(game, row, col, piece))


def _own_pieces(game: Game, turn: Turn):
    for row in range(SIZE):
        for col in range(SIZE):
            piece = get_piece(game.board, row, col)
            if piece.belongs_to(turn):
                yield row, col, piece


def has_any_capture(game: Game) -> bool:
    return any(
        piece_has_capture(game, row, col, piece)
        for row, col, piece in _own_pieces(game, game.current_turn)
    )


def has_any_legal_move(game: Game) -> bool:
    return any(
        piece_has_capture(game, row, col, piece) or piece_has_simple_move(game, row, col, piece)
        for row, col, piece in _own_pieces(game, game.current_turn)
    )


def pending_jump_square(game: Game) -> Optional[Square]:
    """
    Square of the piece that must keep jumping, if the side to move is in the
    middle of a chain. The last move tells us: a non-promoting capture whose
    piece still belongs to the side to move (the turn did not pass) and can
    capture again.
    """
    if not game.moves:
        return None
    last = game.moves[-1]
    if not last.is_capture or last.promoted:
        return None
    piece = get_piece(game.board, last.to_row, last.to_col)
    if not piece.belongs_to(game.current_turn):
        return None
    if not piece_has_capture(game, last.to_row, last.to_col, piece):
        return None
    return last.to_row, last.to_col


def legal_moves(game: Game) -> List[Candidate]:
    """
    Every legal move for the side to move, in row-major board order with
    captures listed before steps for each piece. Steps are only offered when
    no capture exists anywhere on the board.
    """
    chain = pending_jump_square(game)
    must_capture = has_any_capture(game)
    candidates: List[Candidate] = []
    for row, col, piece in _own_pieces(game, game.current_turn):
        if chain is not None and (row, col) != chain:
            continue
        for to_r, to_c in capture_targets(game, row, col, piece):
            candidates.append((row, col, to_r, to_c, True))
        if not must_capture:
            for to_r, to_c in step_targets(game, row, col, piece):
                candidates.append((row, col, to_r, to_c, False))
    return candidates


def apply_move(game: Game, from_row: int, from_col: int, to_row: int, to_col: int, now_ms: int = 0) -> Move:
    """
    Validates and plays a single step or jump for the side to move.

    On success the board is updated and the turn passes, except after a
    non-promoting jump that leaves the same piece another capture: then
    `current_turn` is unchanged and the caller must come back with the next
    jump of that piece. The returned Move is not appended to history here.
    """
    if not is_playable_square(from_row, from_col) or not is_playable_square(to_row, to_col):
        raise CheckersError(ErrorCode.INVALID_SQUARE, "Both squares must be dark squares on the board")

    turn = game.current_turn
    piece = get_piece(game.board, from_row, from_col)
    if not piece.belongs_to(turn):
        raise CheckersError(ErrorCode.NOT_YOUR_PIECE, f"No {turn.value.lower()} piece at ({from_row}, {from_col})")

    chain = pending_jump_square(game)
    if chain is not None and chain != (from_row, from_col):
        raise CheckersError(ErrorCode.MUST_CONTINUE_JUMP, f"Continue jumping with the piece at {chain}")

    if not get_piece(game.board, to_row, to_col).is_empty:
        raise CheckersError(ErrorCode.DESTINATION_OCCUPIED)

    row_diff = abs(to_row - from_row)
    col_diff = abs(to_col - from_col)
    if row_diff != col_diff:
        raise CheckersError(ErrorCode.MUST_MOVE_DIAGONALLY)

    if row_diff == 1:
        if not piece.is_king and not _moves_forward(turn, from_row, to_row):
            raise CheckersError(ErrorCode.INVALID_DIRECTION, "Men only move toward the opponent")
        if has_any_capture(game):
            raise CheckersError(ErrorCode.MUST_CAPTURE, "A capture is available and must be taken")

        promoted = promotes(piece, to_row)
        board = set_piece(game.board, from_row, from_col, Piece.EMPTY)
        game.board = set_piece(board, to_row, to_col, piece.crowned() if promoted else piece)
        game.current_turn = turn.opposite()
        logger.debug("%s step %s -> %s", turn, (from_row, from_col), (to_row, to_col))
        return Move(
            from_row=from_row, from_col=from_col, to_row=to_row, to_col=to_col,
            promoted=promoted, timestamp=now_ms,
        )

    if row_diff == 2:
        mid_row = (from_row + to_row) // 2
        mid_col = (from_col + to_col) // 2
        if not _is_enemy(piece, get_piece(game.board, mid_row, mid_col)):
            raise CheckersError(ErrorCode.NO_PIECE_TO_CAPTURE)
        if not piece.is_king and not _moves_forward(turn, from_row, to_row):
            raise CheckersError(ErrorCode.INVALID_CAPTURE_DIRECTION, "Men only capture toward the opponent")

        promoted = promotes(piece, to_row)
        landed = piece.crowned() if promoted else piece
        board = set_piece(game.board, from_row, from_col, Piece.EMPTY)
        board = set_piece(board, mid_row, mid_col, Piece.EMPTY)
        game.board = set_piece(board, to_row, to_col, landed)

        # Promotion always ends the turn
        if promoted or not piece_has_capture(game, to_row, to_col, landed):
            game.current_turn = turn.opposite()
        logger.debug("%s jump %s -> %s", turn, (from_row, from_col), (to_row, to_col))
        return Move(
            from_row=from_row, from_col=from_col, to_row=to_row, to_col=to_col,
            captured_row=mid_row, captured_col=mid_col, promoted=promoted, timestamp=now_ms,
        )

    raise CheckersError(ErrorCode.INVALID_MOVE_DISTANCE)


def check_game_over(game: Game, now_ms: int) -> bool:
    """
    Finishes the game when a side has no pieces left, or when the side to move
    has no legal move (that side loses; a blocked position is not a draw).
    """
    red, black = count_pieces(game.board)
    if red == 0:
        game.finish(GameResult.BLACK_WINS, now_ms)
        return True
    if black == 0:
        game.finish(GameResult.RED_WINS, now_ms)
        return True
    if not has_any_legal_move(game):
        game.finish(GameResult.win_for(game.current_turn.opposite()), now_ms)
        return True
    return False
