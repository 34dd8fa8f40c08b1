"""
Swiss tournament engine.

Round 1 uses fold seeding over the registration order. Later rounds sort the
field by score (player id breaks ties), hand a bye to the lowest-ranked player
without one when the field is odd, and pair top-down while avoiding repeat
opponents where possible. Opponent lists only change when a result is
recorded. A round that completes immediately generates the next one, and the
final round decides the winner.

All functions mutate the Tournament passed in. Guards raise CheckersError
before any field is written.
"""

import logging
import math
from typing import List, Optional, Tuple

from checkers_arena.core.settings import settings
from checkers_arena.engine.errors import CheckersError, ErrorCode
from checkers_arena.models.enums import GameResult, MatchStatus, TimeControl, TournamentStatus
from checkers_arena.schemas.game_schema import Game
from checkers_arena.schemas.tournament_schema import (
    SwissParticipant,
    Tournament,
    TournamentMatch,
    TournamentRound,
)

logger = logging.getLogger(__name__)

# (player1, player2); player2 is None for a bye
Pairing = Tuple[str, Optional[str]]

INVITE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
INVITE_LENGTH = 6
_MASK64 = (1 << 64) - 1


# --- Setup & registration ---

def calculate_swiss_rounds(player_count: int) -> int:
    if player_count <= 1:
        return settings.tournament.min_rounds
    return max(settings.tournament.min_rounds, math.ceil(math.log2(player_count)))


def min_players_to_start(max_players: int) -> int:
    cfg = settings.tournament
    return max(cfg.min_start_players, max_players // cfg.start_fill_divisor)


def generate_invite_code(tournament_id: str, timestamp: int) -> str:
    """Deterministic 6-character code from the id and creation time (no 0/O/1/I)."""
    id_hash = 0
    for byte in tournament_id.encode():
        id_hash = (id_hash * 31 + byte) & _MASK64
    seed = (timestamp * id_hash) & _MASK64

    code = []
    for i in range(INVITE_LENGTH):
        code.append(INVITE_ALPHABET[(seed >> (i * 5)) % len(INVITE_ALPHABET)])
        seed = (seed * 1103515245 + 12345) & _MASK64
    return "".join(code)


def match_id_for(tournament_id: str, round_number: int, match_number: int) -> str:
    return f"{tournament_id}_r{round_number}_m{match_number}"


def new_tournament(
    tournament_id: str,
    name: str,
    creator: str,
    time_control: TimeControl,
    max_players: int,
    is_public: bool,
    scheduled_start: Optional[int],
    now_ms: int,
) -> Tournament:
    cfg = settings.tournament
    if not cfg.min_capacity <= max_players <= cfg.max_capacity:
        raise CheckersError(
            ErrorCode.INVALID_MAX_PLAYERS,
            f"Max players must be between {cfg.min_capacity} and {cfg.max_capacity}",
        )

    return Tournament(
        id=tournament_id,
        name=name,
        creator=creator,
        time_control=time_control,
        max_players=max_players,
        registered_players=[creator],
        total_rounds=int(math.log2(max_players)),
        created_at=now_ms,
        is_public=is_public,
        invite_code=None if is_public else generate_invite_code(tournament_id, now_ms),
        scheduled_start=scheduled_start,
    )


def _check_can_register(tournament: Tournament, player_id: str) -> None:
    if tournament.status is not TournamentStatus.REGISTRATION:
        raise CheckersError(ErrorCode.NOT_ACCEPTING_REGISTRATIONS)
    if player_id in tournament.registered_players:
        raise CheckersError(ErrorCode.ALREADY_REGISTERED)
    if len(tournament.registered_players) >= tournament.max_players:
        raise CheckersError(ErrorCode.TOURNAMENT_FULL)


def register_player(tournament: Tournament, player_id: str) -> None:
    """Open registration; private tournaments are only joinable by code."""
    if not tournament.is_public:
        raise CheckersError(ErrorCode.PRIVATE_TOURNAMENT, "Private tournament - use invite code to join")
    _check_can_register(tournament, player_id)
    tournament.registered_players.append(player_id)


def register_with_code(tournament: Tournament, player_id: str, invite_code: str) -> None:
    if tournament.is_public or tournament.invite_code != invite_code.strip().upper():
        raise CheckersError(ErrorCode.INVALID_INVITE_CODE)
    _check_can_register(tournament, player_id)
    tournament.registered_players.append(player_id)


def unregister_player(tournament: Tournament, player_id: str) -> None:
    if tournament.status is not TournamentStatus.REGISTRATION:
        raise CheckersError(ErrorCode.NOT_ACCEPTING_REGISTRATIONS, "Cannot leave after tournament started")
    if tournament.creator == player_id:
        raise CheckersError(ErrorCode.CREATOR_CANNOT_LEAVE)
    if player_id not in tournament.registered_players:
        raise CheckersError(ErrorCode.NOT_REGISTERED)
    tournament.registered_players.remove(player_id)


def cancel(tournament: Tournament, player_id: str, now_ms: int) -> None:
    if tournament.creator != player_id:
        raise CheckersError(ErrorCode.NOT_TOURNAMENT_CREATOR, "Only creator can cancel tournament")
    if tournament.status is not TournamentStatus.REGISTRATION:
        raise CheckersError(ErrorCode.NOT_ACCEPTING_REGISTRATIONS, "Can only cancel during registration")
    tournament.status = TournamentStatus.CANCELLED
    tournament.winner = None
    tournament.finished_at = now_ms


def start(tournament: Tournament, player_id: str, now_ms: int) -> None:
    """Freezes registration, seeds round 1 and settles its byes."""
    if tournament.creator != player_id:
        raise CheckersError(ErrorCode.NOT_TOURNAMENT_CREATOR, "Only creator can start tournament")
    if tournament.status is not TournamentStatus.REGISTRATION:
        raise CheckersError(ErrorCode.TOURNAMENT_ALREADY_STARTED)
    needed = min_players_to_start(tournament.max_players)
    if len(tournament.registered_players) < needed:
        raise CheckersError(ErrorCode.NOT_ENOUGH_PLAYERS, f"Need at least {needed} players to start")
    if tournament.scheduled_start is not None and now_ms < tournament.scheduled_start:
        raise CheckersError(ErrorCode.SCHEDULED_START_NOT_REACHED)

    tournament.status = TournamentStatus.IN_PROGRESS
    tournament.started_at = now_ms
    tournament.current_round = 1
    tournament.participants = [SwissParticipant(player_id=p) for p in tournament.registered_players]
    tournament.num_rounds = calculate_swiss_rounds(len(tournament.registered_players))
    tournament.total_rounds = tournament.num_rounds

    pairings = first_round_pairings(tournament.registered_players)
    for p1, p2 in pairings:
        if p2 is None:
            tournament.participant(p1).has_bye = True
    _append_round(tournament, 1, pairings)
    logger.info("Tournament %s started: %d players, %d rounds",
                tournament.id, len(tournament.participants), tournament.num_rounds)

    process_byes(tournament, now_ms)


# --- Pairing ---

def first_round_pairings(players: List[str]) -> List[Pairing]:
    """
    Fold seeding: seed i meets seed n-1-i. With an odd field the last seed sits
    out with a bye and the others are folded.
    """
    seeded = list(players)
    bye = seeded.pop() if len(seeded) % 2 == 1 else None
    n = len(seeded)
    pairings: List[Pairing] = [(seeded[i], seeded[n - 1 - i]) for i in range(n // 2)]
    if bye is not None:
        pairings.append((bye, None))
    return pairings


def swiss_pairings(participants: List[SwissParticipant]) -> List[Pairing]:
    """
    Sorts `participants` in place (score desc, player id asc) and pairs them.
    The bye goes to the lowest-ranked player who has not had one; if everyone
    has, the lowest-ranked player gets a second one.
    """
    participants.sort(key=lambda p: (-p.score, p.player_id))
    paired = [False] * len(participants)
    pairings: List[Pairing] = []

    if len(participants) % 2 == 1:
        bye_index = next(
            (i for i in reversed(range(len(participants))) if not participants[i].has_bye),
            len(participants) - 1,
        )
        participants[bye_index].has_bye = True
        paired[bye_index] = True
        pairings.append((participants[bye_index].player_id, None))

    for i, player in enumerate(participants):
        if paired[i]:
            continue
        unpaired = [j for j in range(i + 1, len(participants)) if not paired[j]]
        if not unpaired:
            break
        fresh = [j for j in unpaired if participants[j].player_id not in player.opponents]
        j = fresh[0] if fresh else unpaired[0]
        paired[i] = paired[j] = True
        pairings.append((player.player_id, participants[j].player_id))

    return pairings


def _append_round(tournament: Tournament, round_number: int, pairings: List[Pairing]) -> TournamentRound:
    matches = []
    for number, (p1, p2) in enumerate(pairings, start=1):
        is_bye = p2 is None
        matches.append(TournamentMatch(
            id=match_id_for(tournament.id, round_number, number),
            round=round_number,
            match_number=number,
            player1=p1,
            player2=p2,
            winner=p1 if is_bye else None,
            status=MatchStatus.BYE if is_bye else MatchStatus.READY,
        ))
    new_round = TournamentRound(round_number=round_number, matches=matches)
    tournament.rounds.append(new_round)
    logger.debug("Tournament %s round %d pairings: %s", tournament.id, round_number, pairings)
    return new_round


# --- Results & advancement ---

def record_swiss_result(participants: List[SwissParticipant], winner_id: str, loser_id: str, is_draw: bool) -> None:
    cfg = settings.tournament
    for p in participants:
        if p.player_id == winner_id:
            p.score += cfg.draw_points if is_draw else cfg.win_points
            if loser_id not in p.opponents:
                p.opponents.append(loser_id)
        elif p.player_id == loser_id:
            p.score += cfg.draw_points if is_draw else 0
            if winner_id not in p.opponents:
                p.opponents.append(winner_id)


def process_byes(tournament: Tournament, now_ms: int) -> None:
    """Settles the current round's byes, then tries to advance."""
    current = tournament.get_round(tournament.current_round)
    if current is not None:
        for m in current.matches:
            if m.status is not MatchStatus.BYE:
                continue
            m.winner = m.player1
            m.status = MatchStatus.FINISHED
            participant = tournament.participant(m.player1)
            if participant is not None:
                participant.score += settings.tournament.bye_points
    advance_to_next_round(tournament, now_ms)


def resolve_winner(participants: List[SwissParticipant]) -> Optional[str]:
    """Highest score; equal scores go to the lowest player id."""
    if not participants:
        return None
    return min(participants, key=lambda p: (-p.score, p.player_id)).player_id


def advance_to_next_round(tournament: Tournament, now_ms: int) -> bool:
    """
    Returns True if the tournament moved on (finished or paired a new round).
    Does nothing while the current round still has unresolved matches.
    """
    if tournament.status is not TournamentStatus.IN_PROGRESS:
        return False
    current = tournament.get_round(tournament.current_round)
    if current is None or not current.is_complete:
        return False

    current.completed = True

    if tournament.current_round >= tournament.num_rounds:
        tournament.status = TournamentStatus.FINISHED
        tournament.winner = resolve_winner(tournament.participants)
        tournament.finished_at = now_ms
        logger.info("Tournament %s finished, winner %s", tournament.id, tournament.winner)
        return True

    next_round = tournament.current_round + 1
    pairings = swiss_pairings(tournament.participants)
    _append_round(tournament, next_round, pairings)
    tournament.current_round = next_round
    logger.info("Tournament %s advanced to round %d", tournament.id, next_round)

    process_byes(tournament, now_ms)
    return True


def _finish_match(tournament: Tournament, match: TournamentMatch, winner_id: Optional[str], now_ms: int) -> None:
    """Resolves a played match: a winner, or None for a draw."""
    match.status = MatchStatus.FINISHED
    match.winner = winner_id
    if match.player1 is not None and match.player2 is not None:
        if winner_id is None:
            record_swiss_result(tournament.participants, match.player1, match.player2, is_draw=True)
        else:
            record_swiss_result(tournament.participants, winner_id, match.opponent_of(winner_id), is_draw=False)
    advance_to_next_round(tournament, now_ms)


# --- Match lifecycle ---

def _get_match(tournament: Tournament, match_id: str) -> TournamentMatch:
    match = tournament.find_match(match_id)
    if match is None:
        raise CheckersError(ErrorCode.MATCH_NOT_FOUND)
    return match


def check_match_claimable(tournament: Tournament, match_id: str, player_id: str) -> TournamentMatch:
    """
    Raises unless player_id may start match_id now. The game_id check makes a
    duplicate start with a stale snapshot fail instead of creating a second game.
    """
    match = _get_match(tournament, match_id)
    if match.game_id is not None:
        raise CheckersError(ErrorCode.MATCH_ALREADY_STARTED)
    if match.status is not MatchStatus.READY:
        raise CheckersError(ErrorCode.MATCH_NOT_READY)
    if player_id not in (match.player1, match.player2):
        raise CheckersError(ErrorCode.NOT_IN_THIS_MATCH)
    if match.player1 is None or match.player2 is None:
        raise CheckersError(ErrorCode.MATCH_NOT_READY, "Both player slots must be filled")
    return match


def claim_match(tournament: Tournament, match_id: str, player_id: str, game_id: str) -> TournamentMatch:
    """Binds a new game to a Ready match."""
    match = check_match_claimable(tournament, match_id, player_id)
    match.game_id = game_id
    match.status = MatchStatus.IN_PROGRESS
    return match


def assign_colors(match: TournamentMatch, now_ms: int) -> Tuple[str, str]:
    """(red, black) for a match; even start timestamps seat player1 as red."""
    if now_ms % 2 == 0:
        return match.player1, match.player2
    return match.player2, match.player1


def forfeit_match(tournament: Tournament, match_id: str, player_id: str, now_ms: int) -> str:
    """The forfeiting player's opponent wins. Returns the winner id."""
    match = _get_match(tournament, match_id)
    if match.status not in (MatchStatus.READY, MatchStatus.IN_PROGRESS):
        raise CheckersError(ErrorCode.MATCH_NOT_ACTIVE)
    if player_id not in (match.player1, match.player2):
        raise CheckersError(ErrorCode.NOT_IN_THIS_MATCH)
    winner_id = match.opponent_of(player_id)
    if winner_id is None:
        raise CheckersError(ErrorCode.MATCH_NOT_ACTIVE, "Cannot determine winner")

    logger.info("Match %s forfeited by %s", match_id, player_id)
    _finish_match(tournament, match, winner_id, now_ms)
    return winner_id


def record_game_result(tournament: Tournament, game: Game, now_ms: int) -> bool:
    """
    Feeds a finished tournament game into its match. Returns False (and
    changes nothing) if the match is unknown or already resolved, so the hook
    is safe to call more than once for the same game.
    """
    if game.tournament_match_id is None or game.result is None:
        return False
    match = tournament.find_match(game.tournament_match_id)
    if match is None or match.status is not MatchStatus.IN_PROGRESS:
        return False

    winner_id = None if game.result is GameResult.DRAW else game.winner_id()
    _finish_match(tournament, match, winner_id, now_ms)
    return True
