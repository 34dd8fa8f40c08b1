"""
Board Codec - compact textual board representation.

A board is 8 rows of 8 characters joined by '/'. Row 0 is Red's back rank,
row 7 is Black's back rank. Only squares with (row + col) odd are playable.

    r / b   red / black man
    R / B   red / black king
    .       empty dark (playable) square
    ' '     light square, always empty
"""

from typing import List, Tuple

from checkers_arena.models.enums import Piece

SIZE = 8
ROW_DELIMITER = "/"
EMPTY_DARK = "."
EMPTY_LIGHT = " "

PIECE_CHARS = {
    Piece.RED: "r",
    Piece.BLACK: "b",
    Piece.RED_KING: "R",
    Piece.BLACK_KING: "B",
}
CHAR_PIECES = {char: piece for piece, char in PIECE_CHARS.items()}

Grid = List[List[Piece]]


def is_playable_square(row: int, col: int) -> bool:
    return 0 <= row < SIZE and 0 <= col < SIZE and (row + col) % 2 == 1


def empty_char(row: int, col: int) -> str:
    return EMPTY_DARK if (row + col) % 2 == 1 else EMPTY_LIGHT


def encode(grid: Grid) -> str:
    rows = []
    for r in range(SIZE):
        cells = []
        for c in range(SIZE):
            piece = grid[r][c]
            cells.append(empty_char(r, c) if piece.is_empty else PIECE_CHARS[piece])
        rows.append("".join(cells))
    return ROW_DELIMITER.join(rows)


def decode(board: str) -> Grid:
    """Unknown characters and missing cells decode as empty squares."""
    return [[get_piece(board, r, c) for c in range(SIZE)] for r in range(SIZE)]


def get_piece(board: str, row: int, col: int) -> Piece:
    if row < 0 or col < 0:
        return Piece.EMPTY
    rows = board.split(ROW_DELIMITER)
    if row >= len(rows) or col >= len(rows[row]):
        return Piece.EMPTY
    return CHAR_PIECES.get(rows[row][col], Piece.EMPTY)


def set_piece(board: str, row: int, col: int, piece: Piece) -> str:
    """Returns a new board string; out-of-range coordinates return the input unchanged."""
    if row < 0 or col < 0:
        return board
    rows = board.split(ROW_DELIMITER)
    if row >= len(rows) or col >= len(rows[row]):
        return board
    char = empty_char(row, col) if piece.is_empty else PIECE_CHARS[piece]
    line = rows[row]
    rows[row] = line[:col] + char + line[col + 1:]
    return ROW_DELIMITER.join(rows)


def count_pieces(board: str) -> Tuple[int, int]:
    """Returns (red, black) piece counts, kings included."""
    red = black = 0
    for char in board:
        if char in ("r", "R"):
            red += 1
        elif char in ("b", "B"):
            black += 1
    return red, black


def empty_board() -> str:
    return encode([[Piece.EMPTY] * SIZE for _ in range(SIZE)])


def starting_grid() -> Grid:
    grid = [[Piece.EMPTY] * SIZE for _ in range(SIZE)]
    for r in range(SIZE):
        for c in range(SIZE):
            if not is_playable_square(r, c):
                continue
            if r < 3:
                grid[r][c] = Piece.RED
            elif r > 4:
                grid[r][c] = Piece.BLACK
    return grid


STARTING_BOARD = encode(starting_grid())


def visual_board(board: str) -> str:
    """ASCII grid with row/column labels, for consoles and debug logs."""
    header = "  " + " ".join(str(c) for c in range(SIZE))
    lines = [header]
    for r in range(SIZE):
        cells = []
        for c in range(SIZE):
            piece = get_piece(board, r, c)
            cells.append(PIECE_CHARS[piece] if not piece.is_empty else empty_char(r, c))
        lines.append(f"{r} " + " ".join(cells))
    return "\n".join(lines)
