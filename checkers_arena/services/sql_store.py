"""
SQLAlchemy-backed snapshot store.

Each snapshot is one row holding the pydantic document as JSON, plus a few
plain columns for lookups. Every call runs in its own session; any database
error rolls that session back and surfaces as PersistenceError.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker
from sqlalchemy.future import select

from checkers_arena.core.database import create_engine_for, create_tables, get_session_maker
from checkers_arena.engine.elo import new_player_stats
from checkers_arena.engine.errors import PersistenceError
from checkers_arena.models.counter_model import IdCounter
from checkers_arena.models.enums import TimeControl
from checkers_arena.models.game_model import GameRecord
from checkers_arena.models.queue_model import QueueEntry
from checkers_arena.models.stats_model import PlayerStatsRecord
from checkers_arena.models.tournament_model import TournamentRecord
from checkers_arena.schemas.game_schema import Game
from checkers_arena.schemas.stats_schema import PlayerStats
from checkers_arena.schemas.tournament_schema import Tournament
from checkers_arena.services.store import SnapshotStore, format_game_id, format_tournament_id

logger = logging.getLogger(__name__)


class SqlSnapshotStore(SnapshotStore):

    def __init__(self, session_maker: async_sessionmaker, engine: Optional[AsyncEngine] = None):
        self._session_maker = session_maker
        self._engine = engine

    @classmethod
    def from_url(cls, url: Optional[str] = None) -> "SqlSnapshotStore":
        engine = create_engine_for(url)
        return cls(get_session_maker(engine), engine)

    async def create_tables(self) -> None:
        if self._engine is None:
            raise PersistenceError("Store was built without an engine")
        try:
            await create_tables(self._engine)
        except SQLAlchemyError as e:
            raise PersistenceError(str(e)) from e

    async def dispose(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()

    @asynccontextmanager
    async def _session(self):
        async with self._session_maker() as session:
            try:
                yield session
                await session.commit()
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error("Database error: %s", e)
                raise PersistenceError(str(e)) from e

    async def _next_value(self, name: str) -> int:
        async with self._session() as db:
            result = await db.execute(select(IdCounter).where(IdCounter.name == name).with_for_update())
            counter = result.scalar_one_or_none()
            if counter is None:
                counter = IdCounter(name=name, value=0)
                db.add(counter)
            counter.value += 1
            return counter.value

    # --- Games ---

    async def load_game(self, game_id: str) -> Optional[Game]:
        async with self._session() as db:
            record = await db.get(GameRecord, game_id)
            return Game.model_validate(record.data) if record is not None else None

    async def save_game(self, game: Game) -> None:
        async with self._session() as db:
            await db.merge(GameRecord(
                id=game.id,
                status=game.status.value,
                tournament_id=game.tournament_id,
                updated_at=game.updated_at,
                data=game.model_dump(mode="json"),
            ))

    async def generate_game_id(self) -> str:
        return format_game_id(await self._next_value("game"))

    # --- Tournaments ---

    async def load_tournament(self, tournament_id: str) -> Optional[Tournament]:
        async with self._session() as db:
            record = await db.get(TournamentRecord, tournament_id)
            return Tournament.model_validate(record.data) if record is not None else None

    async def save_tournament(self, tournament: Tournament) -> None:
        async with self._session() as db:
            await db.merge(TournamentRecord(
                id=tournament.id,
                status=tournament.status.value,
                invite_code=tournament.invite_code,
                data=tournament.model_dump(mode="json"),
            ))

    async def load_tournament_by_invite_code(self, invite_code: str) -> Optional[Tournament]:
        code = invite_code.strip().upper()
        async with self._session() as db:
            result = await db.execute(select(TournamentRecord).where(TournamentRecord.invite_code == code))
            record = result.scalar_one_or_none()
            return Tournament.model_validate(record.data) if record is not None else None

    async def generate_tournament_id(self) -> str:
        return format_tournament_id(await self._next_value("tournament"))

    # --- Player stats ---

    async def load_player_stats(self, player_id: str) -> PlayerStats:
        async with self._session() as db:
            record = await db.get(PlayerStatsRecord, player_id)
            if record is None:
                return new_player_stats(player_id)
            return PlayerStats.model_validate(record.data)

    async def save_player_stats(self, stats: PlayerStats) -> None:
        async with self._session() as db:
            await db.merge(PlayerStatsRecord(player_id=stats.player_id, data=stats.model_dump(mode="json")))

    # --- Matchmaking ---

    async def enqueue_matchmaking(self, player_id: str, time_control: TimeControl, now_ms: int) -> Optional[str]:
        async with self._session() as db:
            await db.execute(delete(QueueEntry).where(QueueEntry.player_id == player_id))
            result = await db.execute(
                select(QueueEntry)
                .where(QueueEntry.time_control == time_control.value)
                .order_by(QueueEntry.id)
                .limit(1)
                .with_for_update()
            )
            waiting = result.scalar_one_or_none()
            if waiting is not None:
                opponent = waiting.player_id
                await db.delete(waiting)
                return opponent

            db.add(QueueEntry(player_id=player_id, time_control=time_control.value, enqueued_at=now_ms))
            return None

    async def dequeue_matchmaking(self, player_id: str) -> None:
        async with self._session() as db:
            await db.execute(delete(QueueEntry).where(QueueEntry.player_id == player_id))
