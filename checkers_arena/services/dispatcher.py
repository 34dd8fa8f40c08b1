"""
Operation dispatcher.

Routes each request variant to exactly one service call and wraps the answer
in its result variant. This is the only place errors turn into data:
CheckersError and PersistenceError come back as ErrorResult, never raised.
"""

import logging
import time
from typing import Optional

from checkers_arena.core.events import GameEvents
from checkers_arena.engine.errors import CheckersError, ErrorCode, PersistenceError
from checkers_arena.schemas import operations as ops
from checkers_arena.services.game_service import GameService
from checkers_arena.services.matchmaking_service import MatchmakingService
from checkers_arena.services.store import SnapshotStore
from checkers_arena.services.tournament_service import TournamentService

logger = logging.getLogger(__name__)


def current_time_ms() -> int:
    return int(time.time() * 1000)


class OperationDispatcher:

    def __init__(self, store: SnapshotStore, events: Optional[GameEvents] = None):
        self.games = GameService(store, events)
        self.tournaments = TournamentService(store, self.games)
        self.matchmaking = MatchmakingService(store, self.games)

        self._handlers = {
            ops.CreateGame: self._create_game,
            ops.JoinGame: self._join_game,
            ops.MakeMove: self._make_move,
            ops.Resign: self._resign,
            ops.RequestAiMove: self._request_ai_move,
            ops.JoinQueue: self._join_queue,
            ops.LeaveQueue: self._leave_queue,
            ops.OfferDraw: self._offer_draw,
            ops.AcceptDraw: self._accept_draw,
            ops.DeclineDraw: self._decline_draw,
            ops.ClaimTimeWin: self._claim_time_win,
            ops.CreateTournament: self._create_tournament,
            ops.JoinTournament: self._join_tournament,
            ops.JoinTournamentByCode: self._join_tournament_by_code,
            ops.LeaveTournament: self._leave_tournament,
            ops.StartTournament: self._start_tournament,
            ops.StartTournamentMatch: self._start_tournament_match,
            ops.ForfeitTournamentMatch: self._forfeit_tournament_match,
            ops.CancelTournament: self._cancel_tournament,
        }

    async def execute(self, operation: ops.Operation, now_ms: Optional[int] = None) -> ops.OperationResult:
        now = current_time_ms() if now_ms is None else now_ms
        handler = self._handlers[type(operation)]
        try:
            return await handler(operation, now)
        except CheckersError as e:
            logger.debug("%s rejected: %s", operation.type, e.code)
            return ops.ErrorResult(code=e.code.value, message=e.message)
        except PersistenceError as e:
            logger.error("%s failed in storage: %s", operation.type, e)
            return ops.ErrorResult(code=ErrorCode.PERSISTENCE_ERROR.value, message=str(e))

    async def execute_raw(self, payload: dict, now_ms: Optional[int] = None) -> ops.OperationResult:
        """Parses a JSON-shaped request and executes it."""
        return await self.execute(ops.OperationAdapter.validate_python(payload), now_ms)

    # --- Games ---

    async def _create_game(self, op: ops.CreateGame, now: int):
        game = await self.games.create_game(
            op.player_id, now,
            vs_ai=op.vs_ai, time_control=op.time_control,
            color_preference=op.color_preference, is_rated=op.is_rated,
        )
        return ops.GameCreated(game=game)

    async def _join_game(self, op: ops.JoinGame, now: int):
        return ops.GameJoined(game=await self.games.join_game(op.game_id, op.player_id, now))

    async def _make_move(self, op: ops.MakeMove, now: int):
        game, outcome = await self.games.make_move(
            op.game_id, op.player_id, op.from_row, op.from_col, op.to_row, op.to_col, now,
        )
        return ops.MoveMade(game=game, move=outcome.move, game_over=outcome.game_over, timed_out=outcome.timed_out)

    async def _resign(self, op: ops.Resign, now: int):
        return ops.Resigned(game=await self.games.resign(op.game_id, op.player_id, now))

    async def _request_ai_move(self, op: ops.RequestAiMove, now: int):
        game, outcome = await self.games.request_ai_move(op.game_id, now)
        return ops.AiMoveMade(game=game, move=outcome.move, game_over=outcome.game_over, timed_out=outcome.timed_out)

    async def _offer_draw(self, op: ops.OfferDraw, now: int):
        return ops.DrawOffered(game=await self.games.offer_draw(op.game_id, op.player_id, now))

    async def _accept_draw(self, op: ops.AcceptDraw, now: int):
        return ops.DrawAccepted(game=await self.games.accept_draw(op.game_id, op.player_id, now))

    async def _decline_draw(self, op: ops.DeclineDraw, now: int):
        return ops.DrawDeclined(game=await self.games.decline_draw(op.game_id, op.player_id, now))

    async def _claim_time_win(self, op: ops.ClaimTimeWin, now: int):
        return ops.TimeWinClaimed(game=await self.games.claim_time_win(op.game_id, op.player_id, now))

    # --- Matchmaking ---

    async def _join_queue(self, op: ops.JoinQueue, now: int):
        game = await self.matchmaking.join_queue(op.player_id, op.time_control, now)
        if game is None:
            return ops.QueueJoined(player_id=op.player_id, time_control=op.time_control)
        return ops.MatchFound(game=game)

    async def _leave_queue(self, op: ops.LeaveQueue, now: int):
        await self.matchmaking.leave_queue(op.player_id)
        return ops.QueueLeft(player_id=op.player_id)

    # --- Tournaments ---

    async def _create_tournament(self, op: ops.CreateTournament, now: int):
        tournament = await self.tournaments.create_tournament(
            op.player_id, op.name, op.time_control, op.max_players, now,
            is_public=op.is_public, scheduled_start=op.scheduled_start,
        )
        return ops.TournamentCreated(tournament=tournament)

    async def _join_tournament(self, op: ops.JoinTournament, now: int):
        return ops.TournamentJoined(tournament=await self.tournaments.join(op.tournament_id, op.player_id))

    async def _join_tournament_by_code(self, op: ops.JoinTournamentByCode, now: int):
        tournament = await self.tournaments.join_by_code(op.invite_code, op.player_id)
        return ops.TournamentJoinedByCode(tournament=tournament)

    async def _leave_tournament(self, op: ops.LeaveTournament, now: int):
        return ops.TournamentLeft(tournament=await self.tournaments.leave(op.tournament_id, op.player_id))

    async def _start_tournament(self, op: ops.StartTournament, now: int):
        return ops.TournamentStarted(tournament=await self.tournaments.start(op.tournament_id, op.player_id, now))

    async def _start_tournament_match(self, op: ops.StartTournamentMatch, now: int):
        tournament, game = await self.tournaments.start_match(op.tournament_id, op.match_id, op.player_id, now)
        return ops.TournamentMatchStarted(tournament=tournament, game=game)

    async def _forfeit_tournament_match(self, op: ops.ForfeitTournamentMatch, now: int):
        tournament, winner = await self.tournaments.forfeit_match(op.tournament_id, op.match_id, op.player_id, now)
        return ops.TournamentMatchForfeited(tournament=tournament, winner=winner)

    async def _cancel_tournament(self, op: ops.CancelTournament, now: int):
        return ops.TournamentCancelled(tournament=await self.tournaments.cancel(op.tournament_id, op.player_id, now))
