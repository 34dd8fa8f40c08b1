from enum import StrEnum


class Piece(StrEnum):
    EMPTY = "EMPTY"
    RED = "RED"
    BLACK = "BLACK"
    RED_KING = "RED_KING"
    BLACK_KING = "BLACK_KING"

    @property
    def is_red(self) -> bool:
        return self in (Piece.RED, Piece.RED_KING)

    @property
    def is_black(self) -> bool:
        return self in (Piece.BLACK, Piece.BLACK_KING)

    @property
    def is_king(self) -> bool:
        return self in (Piece.RED_KING, Piece.BLACK_KING)

    @property
    def is_empty(self) -> bool:
        return self is Piece.EMPTY

    def crowned(self) -> "Piece":
        if self is Piece.RED:
            return Piece.RED_KING
        if self is Piece.BLACK:
            return Piece.BLACK_KING
        return self

    def belongs_to(self, turn: "Turn") -> bool:
        return self.is_red if turn is Turn.RED else self.is_black


class Turn(StrEnum):
    RED = "RED"
    BLACK = "BLACK"

    def opposite(self) -> "Turn":
        return Turn.BLACK if self is Turn.RED else Turn.RED


class GameStatus(StrEnum):
    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    FINISHED = "FINISHED"


class GameResult(StrEnum):
    RED_WINS = "RED_WINS"
    BLACK_WINS = "BLACK_WINS"
    DRAW = "DRAW"

    @classmethod
    def win_for(cls, turn: Turn) -> "GameResult":
        return cls.RED_WINS if turn is Turn.RED else cls.BLACK_WINS


class PlayerType(StrEnum):
    HUMAN = "human"
    AI = "ai"


class DrawOfferState(StrEnum):
    NONE = "NONE"
    OFFERED_BY_RED = "OFFERED_BY_RED"
    OFFERED_BY_BLACK = "OFFERED_BY_BLACK"


class ColorPreference(StrEnum):
    RED = "RED"
    BLACK = "BLACK"
    RANDOM = "RANDOM"


class RatingCategory(StrEnum):
    BULLET = "bullet"
    BLITZ = "blitz"
    RAPID = "rapid"


class TimeControl(StrEnum):
    BULLET_1_0 = "BULLET_1_0"
    BULLET_2_1 = "BULLET_2_1"
    BLITZ_3_0 = "BLITZ_3_0"
    BLITZ_5_3 = "BLITZ_5_3"
    RAPID_10_0 = "RAPID_10_0"

    @property
    def initial_time_ms(self) -> int:
        return _TIME_CONTROLS[self][0]

    @property
    def increment_ms(self) -> int:
        return _TIME_CONTROLS[self][1]

    @property
    def category(self) -> RatingCategory:
        return _TIME_CONTROLS[self][2]


# initial ms, increment ms, rating bucket
_TIME_CONTROLS = {
    TimeControl.BULLET_1_0: (60_000, 0, RatingCategory.BULLET),
    TimeControl.BULLET_2_1: (120_000, 1_000, RatingCategory.BULLET),
    TimeControl.BLITZ_3_0: (180_000, 0, RatingCategory.BLITZ),
    TimeControl.BLITZ_5_3: (300_000, 3_000, RatingCategory.BLITZ),
    TimeControl.RAPID_10_0: (600_000, 0, RatingCategory.RAPID),
}


class TournamentStatus(StrEnum):
    REGISTRATION = "REGISTRATION"
    IN_PROGRESS = "IN_PROGRESS"
    FINISHED = "FINISHED"
    CANCELLED = "CANCELLED"


class MatchStatus(StrEnum):
    PENDING = "PENDING"
    READY = "READY"
    IN_PROGRESS = "IN_PROGRESS"
    FINISHED = "FINISHED"
    BYE = "BYE"
