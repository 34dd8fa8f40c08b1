"""
Error taxonomy for the rules, game and tournament engines.

Engines raise CheckersError before touching any snapshot field, so a caught
error always leaves the game or tournament exactly as it was loaded. The
dispatcher turns these into ErrorResult variants.
"""

from enum import StrEnum


class ErrorCode(StrEnum):
    # Move rules
    INVALID_SQUARE = "InvalidSquare"
    NOT_YOUR_PIECE = "NotYourPiece"
    DESTINATION_OCCUPIED = "DestinationOccupied"
    MUST_MOVE_DIAGONALLY = "MustMoveDiagonally"
    INVALID_DIRECTION = "InvalidDirection"
    MUST_CAPTURE = "MustCapture"
    NO_PIECE_TO_CAPTURE = "NoPieceToCapture"
    INVALID_CAPTURE_DIRECTION = "InvalidCaptureDirection"
    INVALID_MOVE_DISTANCE = "InvalidMoveDistance"
    MUST_CONTINUE_JUMP = "MustContinueJump"

    # Game access
    GAME_NOT_FOUND = "GameNotFound"
    GAME_NOT_ACTIVE = "GameNotActive"
    GAME_NOT_AVAILABLE = "GameNotAvailable"
    NOT_YOUR_TURN = "NotYourTurn"
    NOT_IN_THIS_GAME = "NotInThisGame"
    CANNOT_JOIN_OWN_GAME = "CannotJoinOwnGame"
    NOT_AI_TURN = "NotAiTurn"
    DRAW_ALREADY_OFFERED = "DrawAlreadyOffered"
    NO_DRAW_OFFER = "NoDrawOffer"
    DRAW_NOT_ALLOWED_IN_TOURNAMENT = "DrawNotAllowedInTournament"
    NOT_TIMED_GAME = "NotTimedGame"
    OPPONENT_NOT_TIMED_OUT = "OpponentNotTimedOut"
    CLAIMANT_TIMED_OUT = "ClaimantTimedOut"

    # Tournaments
    TOURNAMENT_NOT_FOUND = "TournamentNotFound"
    MATCH_NOT_FOUND = "MatchNotFound"
    MATCH_NOT_READY = "MatchNotReady"
    MATCH_NOT_ACTIVE = "MatchNotActive"
    MATCH_ALREADY_STARTED = "MatchAlreadyStarted"
    NOT_IN_THIS_MATCH = "NotInThisMatch"
    INVALID_INVITE_CODE = "InvalidInviteCode"
    TOURNAMENT_FULL = "TournamentFull"
    ALREADY_REGISTERED = "AlreadyRegistered"
    NOT_ACCEPTING_REGISTRATIONS = "NotAcceptingRegistrations"
    PRIVATE_TOURNAMENT = "PrivateTournament"
    INVALID_MAX_PLAYERS = "InvalidMaxPlayers"
    NOT_TOURNAMENT_CREATOR = "NotTournamentCreator"
    TOURNAMENT_ALREADY_STARTED = "TournamentAlreadyStarted"
    NOT_ENOUGH_PLAYERS = "NotEnoughPlayers"
    SCHEDULED_START_NOT_REACHED = "ScheduledStartNotReached"
    CREATOR_CANNOT_LEAVE = "CreatorCannotLeave"
    NOT_REGISTERED = "NotRegistered"

    # Collaborators
    PERSISTENCE_ERROR = "PersistenceError"


class CheckersError(ValueError):
    """A local validation failure. Never raised after a snapshot was modified."""

    def __init__(self, code: ErrorCode, message: str = ""):
        self.code = code
        self.message = message or code.value
        super().__init__(f"{code.value}: {self.message}")


class PersistenceError(RuntimeError):
    """Raised by a snapshot store when the backing storage fails."""
