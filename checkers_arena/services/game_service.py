"""
Game Service - load, mutate, save.

Every operation loads a fresh Game snapshot from the store, runs one engine
function on it and saves it back. A rejected request raises before the save,
so the stored game is untouched. When a game reaches Finished, the service
also:
- records player stats (Elo per time-control bucket, or counters for casual games)
- feeds tournament games into their match through the tournament hook
- publishes a GameEndedNotification
"""

import logging
from typing import Awaitable, Callable, Optional, Tuple

from checkers_arena.core.events import GameEvents, game_events
from checkers_arena.engine import game as game_engine
from checkers_arena.engine.elo import apply_game_result
from checkers_arena.engine.errors import CheckersError, ErrorCode
from checkers_arena.models.enums import ColorPreference, GameStatus, TimeControl, Turn
from checkers_arena.schemas.game_schema import Game, MoveOutcome
from checkers_arena.schemas.notifications import GameEndedNotification, MoveNotification
from checkers_arena.schemas.tournament_schema import Tournament, TournamentMatch
from checkers_arena.services.store import SnapshotStore

logger = logging.getLogger(__name__)

TournamentHook = Callable[[Game, int], Awaitable[None]]


class GameService:
    """Centralized service for all game operations"""

    def __init__(self, store: SnapshotStore, events: Optional[GameEvents] = None):
        self.store = store
        self.events = events or game_events
        self._tournament_hook: Optional[TournamentHook] = None

    def set_tournament_hook(self, hook: TournamentHook) -> None:
        self._tournament_hook = hook

    async def get_game(self, game_id: str) -> Game:
        game = await self.store.load_game(game_id)
        if game is None:
            raise CheckersError(ErrorCode.GAME_NOT_FOUND, f"Game {game_id} not found")
        return game

    # --- Creation ---

    async def create_game(
        self,
        player_id: str,
        now_ms: int,
        vs_ai: bool = False,
        time_control: Optional[TimeControl] = None,
        color_preference: ColorPreference = ColorPreference.RED,
        is_rated: bool = True,
    ) -> Game:
        game_id = await self.store.generate_game_id()
        game = game_engine.new_game(
            game_id, player_id, now_ms,
            vs_ai=vs_ai, time_control=time_control,
            color_preference=color_preference, is_rated=is_rated,
        )
        await self.store.save_game(game)
        logger.info("Game %s created by %s (vs_ai=%s, %s)", game_id, player_id, vs_ai, time_control)
        return game

    async def create_matched_game(self, queued_player: str, joiner: str, time_control: TimeControl, now_ms: int) -> Game:
        game_id = await self.store.generate_game_id()
        game = game_engine.new_matched_game(game_id, queued_player, joiner, time_control, now_ms)
        await self.store.save_game(game)
        logger.info("Game %s matched: %s vs %s", game_id, queued_player, joiner)
        return game

    async def create_tournament_game(self, game_id: str, tournament: Tournament, match: TournamentMatch, now_ms: int) -> Game:
        game = game_engine.new_tournament_game(game_id, tournament, match, now_ms)
        await self.store.save_game(game)
        return game

    async def join_game(self, game_id: str, player_id: str, now_ms: int) -> Game:
        game = await self.get_game(game_id)
        game_engine.join_game(game, player_id, now_ms)
        await self.store.save_game(game)
        return game

    # --- Moves ---

    async def make_move(
        self, game_id: str, player_id: str,
        from_row: int, from_col: int, to_row: int, to_col: int,
        now_ms: int,
    ) -> Tuple[Game, MoveOutcome]:
        game = await self.get_game(game_id)
        outcome = game_engine.make_move(game, player_id, from_row, from_col, to_row, to_col, now_ms)
        await self._after_move(game, outcome, now_ms)
        return game, outcome

    async def request_ai_move(self, game_id: str, now_ms: int) -> Tuple[Game, MoveOutcome]:
        game = await self.get_game(game_id)
        outcome = game_engine.play_ai_move(game, now_ms)
        await self._after_move(game, outcome, now_ms)
        return game, outcome

    async def _after_move(self, game: Game, outcome: MoveOutcome, now_ms: int) -> None:
        await self.store.save_game(game)

        if outcome.move is not None:
            await self._notify_opponent(game, outcome)

        if game.status is GameStatus.FINISHED:
            await self._on_finished(game, now_ms, timed_out=outcome.timed_out)

    async def _notify_opponent(self, game: Game, outcome: MoveOutcome) -> None:
        # The side that moved is the one before the turn passed
        side = game.current_turn.opposite() if outcome.turn_passed else game.current_turn
        opponent = side.opposite()
        recipient = game.player_for(opponent)
        if recipient is None or game.is_ai(opponent):
            return
        await self.events.notify_move(MoveNotification(
            game_id=game.id,
            recipient=recipient,
            move=outcome.move,
            board=game.board,
            current_turn=game.current_turn,
            move_count=game.move_count,
        ))

    # --- Endings ---

    async def resign(self, game_id: str, player_id: str, now_ms: int) -> Game:
        game = await self.get_game(game_id)
        game_engine.resign(game, player_id, now_ms)
        await self.store.save_game(game)
        await self._on_finished(game, now_ms)
        return game

    async def offer_draw(self, game_id: str, player_id: str, now_ms: int) -> Game:
        game = await self.get_game(game_id)
        game_engine.offer_draw(game, player_id, now_ms)
        await self.store.save_game(game)
        return game

    async def accept_draw(self, game_id: str, player_id: str, now_ms: int) -> Game:
        game = await self.get_game(game_id)
        game_engine.accept_draw(game, player_id, now_ms)
        await self.store.save_game(game)
        await self._on_finished(game, now_ms)
        return game

    async def decline_draw(self, game_id: str, player_id: str, now_ms: int) -> Game:
        game = await self.get_game(game_id)
        game_engine.decline_draw(game, player_id, now_ms)
        await self.store.save_game(game)
        return game

    async def claim_time_win(self, game_id: str, player_id: str, now_ms: int) -> Game:
        game = await self.get_game(game_id)
        game_engine.claim_time_win(game, player_id, now_ms)
        await self.store.save_game(game)
        await self._on_finished(game, now_ms, timed_out=True)
        return game

    async def _on_finished(self, game: Game, now_ms: int, timed_out: bool = False) -> None:
        """Runs once per transition to Finished, whatever caused it."""
        logger.info("Game %s finished: %s", game.id, game.result)
        await self._record_stats(game)

        if game.is_tournament_game and self._tournament_hook is not None:
            await self._tournament_hook(game, now_ms)

        recipients = [
            game.player_for(side) for side in (Turn.RED, Turn.BLACK)
            if game.player_for(side) is not None and not game.is_ai(side)
        ]
        await self.events.notify_complete(GameEndedNotification(
            game_id=game.id,
            result=game.result,
            winner=game.winner_id(),
            recipients=recipients,
            timed_out=timed_out,
        ))

    async def _record_stats(self, game: Game) -> None:
        async def stats_for(side: Turn):
            player_id = game.player_for(side)
            if player_id is None or game.is_ai(side):
                return None
            return await self.store.load_player_stats(player_id)

        red_stats = await stats_for(Turn.RED)
        black_stats = await stats_for(Turn.BLACK)
        for stats in apply_game_result(game, red_stats, black_stats):
            await self.store.save_player_stats(stats)
