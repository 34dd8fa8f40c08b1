import os
import yaml
from pathlib import Path
from dotenv import load_dotenv
from pydantic import BaseModel, Field
from typing import Optional

load_dotenv()

DEFAULT_SETTINGS_PATH = Path(__file__).resolve().parent.parent / "config" / "settings.yaml"


class RatingConfig(BaseModel):
    initial: int = 1200
    floor: int = 100
    ceiling: int = 3000
    provisional_games: int = 30   # K stays high below this many rated games
    k_provisional: int = 32
    k_established: int = 16
    ai_rating: int = 1500


class TournamentConfig(BaseModel):
    min_capacity: int = 2
    max_capacity: int = 64
    min_start_players: int = 2
    start_fill_divisor: int = 4   # a quarter of capacity must register
    min_rounds: int = 3
    win_points: int = 2
    draw_points: int = 1
    bye_points: int = 2


class DatabaseConfig(BaseModel):
    url: str = "sqlite+aiosqlite:///./checkers.db"
    pool_size: int = 20
    max_overflow: int = 20
    echo: bool = False


class LoggingConfig(BaseModel):
    level: str = "INFO"


class Settings(BaseModel):
    rating: RatingConfig = Field(default_factory=RatingConfig)
    tournament: TournamentConfig = Field(default_factory=TournamentConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def load_settings(path: Optional[str] = None) -> Settings:
    """
    Reads the YAML settings file. A missing file falls back to the model
    defaults, which mirror the shipped config/settings.yaml.
    DATABASE_URL from the environment (or .env) wins over the file.
    """
    config_path = Path(path or os.getenv("CHECKERS_SETTINGS") or DEFAULT_SETTINGS_PATH)
    data = {}
    if config_path.exists():
        with open(config_path, "r") as f:
            data = yaml.safe_load(f) or {}

    loaded = Settings(**data)

    database_url = os.getenv("DATABASE_URL")
    if database_url:
        loaded.database.url = database_url
    return loaded


# Singleton instance
settings = load_settings()
