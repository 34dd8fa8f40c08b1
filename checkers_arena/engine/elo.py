import logging
from typing import List, Optional

from checkers_arena.core.settings import settings
from checkers_arena.models.enums import GameResult, RatingCategory, TimeControl, Turn
from checkers_arena.schemas.game_schema import Game
from checkers_arena.schemas.stats_schema import PlayerStats

logger = logging.getLogger(__name__)

DEFAULT_TIME_CONTROL = TimeControl.BLITZ_5_3

WIN = 1.0
DRAW = 0.5
LOSS = 0.0


def new_player_stats(player_id: str) -> PlayerStats:
    initial = settings.rating.initial
    return PlayerStats(
        player_id=player_id,
        bullet_rating=initial,
        blitz_rating=initial,
        rapid_rating=initial,
    )


def calculate_expected_score(rating_a: float, rating_b: float) -> float:
    return 1 / (1 + 10 ** ((rating_b - rating_a) / 400))


def k_factor(rated_games: int) -> int:
    cfg = settings.rating
    return cfg.k_provisional if rated_games < cfg.provisional_games else cfg.k_established


def clamp_rating(rating: int) -> int:
    return max(settings.rating.floor, min(settings.rating.ceiling, rating))


def rating_category(time_control: TimeControl) -> RatingCategory:
    return time_control.category


def game_time_control(game: Game) -> TimeControl:
    """Rated bucket for a game; unclocked or unknown clocks count as blitz 5+3."""
    if game.clock is None:
        return DEFAULT_TIME_CONTROL
    return game.clock.time_control() or DEFAULT_TIME_CONTROL


def update_rating(stats: PlayerStats, opponent_rating: int, outcome: float, time_control: TimeControl) -> int:
    """
    Elo update for one player in the time control's bucket.
    Returns the new (rounded, clamped) rating.
    """
    category = rating_category(time_control)
    my_rating = stats.rating(category)
    k = k_factor(stats.rated_games(category))
    expected = calculate_expected_score(my_rating, opponent_rating)
    new_rating = clamp_rating(round(my_rating + k * (outcome - expected)))
    stats.set_rating(category, new_rating)
    return new_rating


def record_win(stats: PlayerStats) -> None:
    stats.games_played += 1
    stats.games_won += 1
    stats.win_streak += 1
    stats.best_streak = max(stats.best_streak, stats.win_streak)


def record_loss(stats: PlayerStats) -> None:
    stats.games_played += 1
    stats.games_lost += 1
    stats.win_streak = 0


def record_draw(stats: PlayerStats) -> None:
    stats.games_played += 1
    stats.games_drawn += 1


_COUNTERS = {WIN: record_win, LOSS: record_loss, DRAW: record_draw}


def record_outcome(
    stats: PlayerStats,
    outcome: float,
    opponent_rating: Optional[int] = None,
    time_control: Optional[TimeControl] = None,
) -> None:
    """Counters always; the rating only when an opponent rating and bucket are given."""
    _COUNTERS[outcome](stats)
    if opponent_rating is not None and time_control is not None:
        update_rating(stats, opponent_rating, outcome, time_control)


def outcome_for(result: GameResult, side: Turn) -> float:
    if result is GameResult.DRAW:
        return DRAW
    return WIN if result is GameResult.win_for(side) else LOSS


def apply_game_result(game: Game, red_stats: Optional[PlayerStats], black_stats: Optional[PlayerStats]) -> List[PlayerStats]:
    """
    Applies a finished game to both players' stats and returns the ones that
    changed. Pass None for a side that has no stats (the AI, or an empty seat).
    Ratings are read before either side is updated; the AI is pinned at the
    configured AI rating. Casual games only move the counters.
    """
    if game.result is None:
        return []

    time_control = game_time_control(game)
    category = rating_category(time_control)
    ai_rating = settings.rating.ai_rating

    def rating_of(side: Turn, stats: Optional[PlayerStats]) -> int:
        if game.is_ai(side) or stats is None:
            return ai_rating
        return stats.rating(category)

    ratings = {
        Turn.RED: rating_of(Turn.RED, red_stats),
        Turn.BLACK: rating_of(Turn.BLACK, black_stats),
    }

    updated = []
    for side, stats in ((Turn.RED, red_stats), (Turn.BLACK, black_stats)):
        if stats is None or game.is_ai(side):
            continue
        outcome = outcome_for(game.result, side)
        if game.is_rated:
            record_outcome(stats, outcome, ratings[side.opposite()], time_control)
        else:
            record_outcome(stats, outcome)
        updated.append(stats)

    logger.debug("Recorded %s for game %s (rated=%s)", game.result, game.id, game.is_rated)
    return updated
