import logging
from typing import Optional, Tuple

from checkers_arena.engine import tournament as swiss
from checkers_arena.engine.errors import CheckersError, ErrorCode
from checkers_arena.models.enums import GameStatus, MatchStatus, TimeControl
from checkers_arena.schemas.game_schema import Game
from checkers_arena.schemas.tournament_schema import Tournament
from checkers_arena.services.game_service import GameService
from checkers_arena.services.store import SnapshotStore

logger = logging.getLogger(__name__)


class TournamentService:
    """
    Registration, start, match play and forfeits for Swiss tournaments.
    Registers itself as the game service's tournament hook so every finished
    tournament game is recorded against its match.
    """

    def __init__(self, store: SnapshotStore, game_service: GameService):
        self.store = store
        self.game_service = game_service
        game_service.set_tournament_hook(self.on_game_finished)

    async def get_tournament(self, tournament_id: str) -> Tournament:
        tournament = await self.store.load_tournament(tournament_id)
        if tournament is None:
            raise CheckersError(ErrorCode.TOURNAMENT_NOT_FOUND, f"Tournament {tournament_id} not found")
        return tournament

    async def create_tournament(
        self,
        player_id: str,
        name: str,
        time_control: TimeControl,
        max_players: int,
        now_ms: int,
        is_public: bool = True,
        scheduled_start: Optional[int] = None,
    ) -> Tournament:
        tournament_id = await self.store.generate_tournament_id()
        tournament = swiss.new_tournament(
            tournament_id, name, player_id, time_control, max_players, is_public, scheduled_start, now_ms,
        )
        await self.store.save_tournament(tournament)
        logger.info("Tournament %s created by %s (%d seats)", tournament_id, player_id, max_players)
        return tournament

    async def join(self, tournament_id: str, player_id: str) -> Tournament:
        tournament = await self.get_tournament(tournament_id)
        swiss.register_player(tournament, player_id)
        await self.store.save_tournament(tournament)
        return tournament

    async def join_by_code(self, invite_code: str, player_id: str) -> Tournament:
        tournament = await self.store.load_tournament_by_invite_code(invite_code)
        if tournament is None:
            raise CheckersError(ErrorCode.INVALID_INVITE_CODE)
        swiss.register_with_code(tournament, player_id, invite_code)
        await self.store.save_tournament(tournament)
        return tournament

    async def leave(self, tournament_id: str, player_id: str) -> Tournament:
        tournament = await self.get_tournament(tournament_id)
        swiss.unregister_player(tournament, player_id)
        await self.store.save_tournament(tournament)
        return tournament

    async def cancel(self, tournament_id: str, player_id: str, now_ms: int) -> Tournament:
        tournament = await self.get_tournament(tournament_id)
        swiss.cancel(tournament, player_id, now_ms)
        await self.store.save_tournament(tournament)
        logger.info("Tournament %s cancelled", tournament_id)
        return tournament

    async def start(self, tournament_id: str, player_id: str, now_ms: int) -> Tournament:
        tournament = await self.get_tournament(tournament_id)
        swiss.start(tournament, player_id, now_ms)
        await self.store.save_tournament(tournament)
        return tournament

    async def start_match(self, tournament_id: str, match_id: str, player_id: str, now_ms: int) -> Tuple[Tournament, Game]:
        """
        Claims a Ready match and creates its game. The game is saved before
        the tournament so a claimed match never points at a missing game.
        """
        tournament = await self.get_tournament(tournament_id)
        swiss.check_match_claimable(tournament, match_id, player_id)
        game_id = await self.store.generate_game_id()
        match = swiss.claim_match(tournament, match_id, player_id, game_id)
        game = await self.game_service.create_tournament_game(game_id, tournament, match, now_ms)
        await self.store.save_tournament(tournament)
        logger.info("Match %s started as game %s", match_id, game_id)
        return tournament, game

    async def forfeit_match(self, tournament_id: str, match_id: str, player_id: str, now_ms: int) -> Tuple[Tournament, str]:
        tournament = await self.get_tournament(tournament_id)
        match = tournament.find_match(match_id)
        running_game = match.game_id if match is not None and match.status is MatchStatus.IN_PROGRESS else None

        winner_id = swiss.forfeit_match(tournament, match_id, player_id, now_ms)
        await self.store.save_tournament(tournament)

        if running_game is not None:
            game = await self.store.load_game(running_game)
            if game is not None and game.status is GameStatus.ACTIVE:
                # The match is already resolved, so the result hook is a no-op here
                await self.game_service.resign(running_game, player_id, now_ms)

        return await self.get_tournament(tournament_id), winner_id

    async def on_game_finished(self, game: Game, now_ms: int) -> None:
        tournament = await self.store.load_tournament(game.tournament_id)
        if tournament is None:
            logger.warning("Game %s points at unknown tournament %s", game.id, game.tournament_id)
            return
        if swiss.record_game_result(tournament, game, now_ms):
            await self.store.save_tournament(tournament)
            logger.info("Tournament %s: match %s recorded from game %s",
                        tournament.id, game.tournament_match_id, game.id)
