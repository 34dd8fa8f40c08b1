import logging
from typing import Awaitable, Callable, List

from checkers_arena.schemas.notifications import GameEndedNotification, MoveNotification

logger = logging.getLogger(__name__)

MoveListener = Callable[[MoveNotification], Awaitable[None]]
EndedListener = Callable[[GameEndedNotification], Awaitable[None]]


class GameEvents:
    """
    Best-effort fan-out to the messaging layer. A listener that raises is
    logged and skipped; it never fails the operation that produced the event.
    """

    def __init__(self):
        self._on_move_listeners: List[MoveListener] = []
        self._on_complete_listeners: List[EndedListener] = []

    def subscribe_move(self, callback: MoveListener):
        self._on_move_listeners.append(callback)

    def subscribe_complete(self, callback: EndedListener):
        self._on_complete_listeners.append(callback)

    def clear(self):
        self._on_move_listeners.clear()
        self._on_complete_listeners.clear()

    async def notify_move(self, notification: MoveNotification):
        for listener in self._on_move_listeners:
            try:
                await listener(notification)
            except Exception:
                logger.exception("Move listener failed for game %s", notification.game_id)

    async def notify_complete(self, notification: GameEndedNotification):
        for listener in self._on_complete_listeners:
            try:
                await listener(notification)
            except Exception:
                logger.exception("Game-ended listener failed for game %s", notification.game_id)


game_events = GameEvents()
