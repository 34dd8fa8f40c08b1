from pydantic import BaseModel

from checkers_arena.models.enums import RatingCategory


class PlayerStats(BaseModel):
    player_id: str
    games_played: int = 0
    games_won: int = 0
    games_lost: int = 0
    games_drawn: int = 0
    win_streak: int = 0
    best_streak: int = 0

    # One independent rating per time-control bucket
    bullet_rating: int = 1200
    bullet_games: int = 0
    blitz_rating: int = 1200
    blitz_games: int = 0
    rapid_rating: int = 1200
    rapid_games: int = 0

    def rating(self, category: RatingCategory) -> int:
        return getattr(self, f"{category.value}_rating")

    def rated_games(self, category: RatingCategory) -> int:
        return getattr(self, f"{category.value}_games")

    def set_rating(self, category: RatingCategory, rating: int) -> None:
        setattr(self, f"{category.value}_rating", rating)
        setattr(self, f"{category.value}_games", self.rated_games(category) + 1)
