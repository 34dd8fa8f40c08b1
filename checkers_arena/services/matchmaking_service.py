import logging
from typing import Optional

from checkers_arena.models.enums import TimeControl
from checkers_arena.schemas.game_schema import Game
from checkers_arena.services.game_service import GameService
from checkers_arena.services.store import SnapshotStore

logger = logging.getLogger(__name__)


class MatchmakingService:

    def __init__(self, store: SnapshotStore, game_service: GameService):
        self.store = store
        self.game_service = game_service

    async def join_queue(self, player_id: str, time_control: TimeControl, now_ms: int) -> Optional[Game]:
        """Returns the new game when an opponent was waiting, else None (player is queued)."""
        opponent = await self.store.enqueue_matchmaking(player_id, time_control, now_ms)
        if opponent is None:
            logger.info("%s waiting for a %s opponent", player_id, time_control)
            return None
        return await self.game_service.create_matched_game(opponent, player_id, time_control, now_ms)

    async def leave_queue(self, player_id: str) -> None:
        await self.store.dequeue_matchmaking(player_id)
