"""
Snapshot storage used by the services.

Every load returns a fresh copy, so a service that fails halfway through an
operation simply drops its copy and nothing stored changes.
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Tuple

from checkers_arena.engine.elo import new_player_stats
from checkers_arena.models.enums import TimeControl
from checkers_arena.schemas.game_schema import Game
from checkers_arena.schemas.stats_schema import PlayerStats
from checkers_arena.schemas.tournament_schema import Tournament

logger = logging.getLogger(__name__)


def format_game_id(n: int) -> str:
    return f"game_{n:06d}"


def format_tournament_id(n: int) -> str:
    return f"t{n:06d}"


class SnapshotStore(ABC):

    @abstractmethod
    async def load_game(self, game_id: str) -> Optional[Game]:
        ...

    @abstractmethod
    async def save_game(self, game: Game) -> None:
        ...

    @abstractmethod
    async def generate_game_id(self) -> str:
        ...

    @abstractmethod
    async def load_tournament(self, tournament_id: str) -> Optional[Tournament]:
        ...

    @abstractmethod
    async def save_tournament(self, tournament: Tournament) -> None:
        ...

    @abstractmethod
    async def load_tournament_by_invite_code(self, invite_code: str) -> Optional[Tournament]:
        ...

    @abstractmethod
    async def generate_tournament_id(self) -> str:
        ...

    @abstractmethod
    async def load_player_stats(self, player_id: str) -> PlayerStats:
        """Never None: unknown players get fresh stats at the initial rating."""

    @abstractmethod
    async def save_player_stats(self, stats: PlayerStats) -> None:
        ...

    @abstractmethod
    async def enqueue_matchmaking(self, player_id: str, time_control: TimeControl, now_ms: int) -> Optional[str]:
        """
        Pairs the player with the longest-waiting player on the same time
        control (removing that entry) and returns the opponent's id. With
        nobody waiting, queues the player and returns None.
        """

    @abstractmethod
    async def dequeue_matchmaking(self, player_id: str) -> None:
        ...


class MemorySnapshotStore(SnapshotStore):
    """Keeps JSON documents in dicts. Used by tests and the console script."""

    def __init__(self):
        self._games: Dict[str, str] = {}
        self._tournaments: Dict[str, str] = {}
        self._stats: Dict[str, str] = {}
        # (player_id, time_control, enqueued_at), oldest first
        self._queue: List[Tuple[str, TimeControl, int]] = []
        self._game_seq = 0
        self._tournament_seq = 0

    async def load_game(self, game_id: str) -> Optional[Game]:
        raw = self._games.get(game_id)
        return Game.model_validate_json(raw) if raw is not None else None

    async def save_game(self, game: Game) -> None:
        self._games[game.id] = game.model_dump_json()

    async def generate_game_id(self) -> str:
        self._game_seq += 1
        return format_game_id(self._game_seq)

    async def load_tournament(self, tournament_id: str) -> Optional[Tournament]:
        raw = self._tournaments.get(tournament_id)
        return Tournament.model_validate_json(raw) if raw is not None else None

    async def save_tournament(self, tournament: Tournament) -> None:
        self._tournaments[tournament.id] = tournament.model_dump_json()

    async def load_tournament_by_invite_code(self, invite_code: str) -> Optional[Tournament]:
        code = invite_code.strip().upper()
        for raw in self._tournaments.values():
            tournament = Tournament.model_validate_json(raw)
            if tournament.invite_code == code:
                return tournament
        return None

    async def generate_tournament_id(self) -> str:
        self._tournament_seq += 1
        return format_tournament_id(self._tournament_seq)

    async def load_player_stats(self, player_id: str) -> PlayerStats:
        raw = self._stats.get(player_id)
        if raw is None:
            return new_player_stats(player_id)
        return PlayerStats.model_validate_json(raw)

    async def save_player_stats(self, stats: PlayerStats) -> None:
        self._stats[stats.player_id] = stats.model_dump_json()

    async def enqueue_matchmaking(self, player_id: str, time_control: TimeControl, now_ms: int) -> Optional[str]:
        # A player waits in one queue at most, whether or not this join matches
        self._queue = [entry for entry in self._queue if entry[0] != player_id]
        for i, (queued, tc, _) in enumerate(self._queue):
            if tc == time_control:
                del self._queue[i]
                return queued

        self._queue.append((player_id, time_control, now_ms))
        logger.debug("Queued %s for %s", player_id, time_control)
        return None

    async def dequeue_matchmaking(self, player_id: str) -> None:
        self._queue = [entry for entry in self._queue if entry[0] != player_id]
