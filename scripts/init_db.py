import asyncio
import logging

from checkers_arena.core.database import create_engine_for, create_tables, get_database_url
from checkers_arena.core.settings import settings

logger = logging.getLogger(__name__)

async def init_models():
    engine = create_engine_for()
    try:
        # Safe create (only creates if missing)
        await create_tables(engine)
        logger.info("Database tables updated at %s", get_database_url())
    finally:
        await engine.dispose()

if __name__ == "__main__":
    logging.basicConfig(level=settings.logging.level)
    asyncio.run(init_models())
