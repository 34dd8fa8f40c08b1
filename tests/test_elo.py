import unittest

from checkers_arena.engine.clock import Clock
from checkers_arena.engine.elo import (
    DRAW,
    LOSS,
    WIN,
    apply_game_result,
    calculate_expected_score,
    game_time_control,
    k_factor,
    new_player_stats,
    update_rating,
)
from checkers_arena.models.enums import GameResult, PlayerType, RatingCategory, TimeControl
from checkers_arena.schemas.game_schema import AI_PLAYER_ID, Game


class TestEloMath(unittest.TestCase):

    def test_expected_score(self):
        self.assertAlmostEqual(calculate_expected_score(1200, 1200), 0.5)
        self.assertAlmostEqual(calculate_expected_score(1600, 1200), 1 / (1 + 10 ** -1))

    def test_k_factor(self):
        self.assertEqual(k_factor(0), 32)
        self.assertEqual(k_factor(29), 32)
        self.assertEqual(k_factor(30), 16)

    def test_new_player_beats_equal_opponent(self):
        stats = new_player_stats("alice")
        self.assertEqual(update_rating(stats, 1200, WIN, TimeControl.BLITZ_5_3), 1216)
        self.assertEqual(stats.blitz_rating, 1216)
        self.assertEqual(stats.blitz_games, 1)

    def test_experienced_player_moves_less(self):
        stats = new_player_stats("alice")
        stats.blitz_games = 30
        self.assertEqual(update_rating(stats, 1200, WIN, TimeControl.BLITZ_3_0), 1208)

    def test_draw_between_equals_changes_nothing(self):
        stats = new_player_stats("alice")
        self.assertEqual(update_rating(stats, 1200, DRAW, TimeControl.RAPID_10_0), 1200)

    def test_clamped_at_floor(self):
        stats = new_player_stats("alice")
        stats.bullet_rating = 100
        self.assertEqual(update_rating(stats, 100, LOSS, TimeControl.BULLET_1_0), 100)

    def test_clamped_at_ceiling(self):
        stats = new_player_stats("alice")
        stats.rapid_rating = 3000
        self.assertEqual(update_rating(stats, 3000, WIN, TimeControl.RAPID_10_0), 3000)

    def test_win_then_loss_returns_near_start(self):
        stats = new_player_stats("alice")
        self.assertEqual(update_rating(stats, 1200, WIN, TimeControl.BLITZ_5_3), 1216)
        rating = update_rating(stats, 1200, LOSS, TimeControl.BLITZ_5_3)
        self.assertLessEqual(abs(rating - 1200), 1)

    def test_losing_streak_settles_on_floor(self):
        stats = new_player_stats("alice")
        rating = stats.bullet_rating
        for _ in range(400):
            rating = update_rating(stats, rating, LOSS, TimeControl.BULLET_1_0)
            self.assertGreaterEqual(rating, 100)
        self.assertEqual(rating, 100)

    def test_winning_streak_settles_on_ceiling(self):
        stats = new_player_stats("alice")
        rating = stats.rapid_rating
        for _ in range(400):
            rating = update_rating(stats, rating, WIN, TimeControl.RAPID_10_0)
            self.assertLessEqual(rating, 3000)
        self.assertEqual(rating, 3000)

    def test_buckets_are_independent(self):
        stats = new_player_stats("alice")
        update_rating(stats, 1200, WIN, TimeControl.BULLET_2_1)
        self.assertEqual(stats.rating(RatingCategory.BULLET), 1216)
        self.assertEqual(stats.rating(RatingCategory.BLITZ), 1200)
        self.assertEqual(stats.rating(RatingCategory.RAPID), 1200)


class TestApplyGameResult(unittest.TestCase):

    def make_game(self, result, time_control=None, is_rated=True):
        clock = Clock.for_time_control(time_control) if time_control else None
        return Game(id="g", red_player="alice", black_player="bob",
                    result=result, clock=clock, is_rated=is_rated)

    def test_unknown_clock_counts_as_blitz(self):
        self.assertIs(game_time_control(self.make_game(None)), TimeControl.BLITZ_5_3)
        game = self.make_game(None)
        game.clock = Clock(initial_time_ms=1, red_time_ms=1, black_time_ms=1)
        self.assertIs(game_time_control(game), TimeControl.BLITZ_5_3)
        self.assertIs(game_time_control(self.make_game(None, TimeControl.RAPID_10_0)), TimeControl.RAPID_10_0)

    def test_ratings_read_before_update(self):
        red, black = new_player_stats("alice"), new_player_stats("bob")
        updated = apply_game_result(self.make_game(GameResult.RED_WINS, TimeControl.BULLET_1_0), red, black)
        self.assertEqual(len(updated), 2)
        self.assertEqual(red.bullet_rating, 1216)
        self.assertEqual(black.bullet_rating, 1184)
        self.assertEqual(red.games_won, 1)
        self.assertEqual(black.games_lost, 1)
        self.assertEqual(red.blitz_rating, 1200)

    def test_draw_updates_counters(self):
        red, black = new_player_stats("alice"), new_player_stats("bob")
        apply_game_result(self.make_game(GameResult.DRAW), red, black)
        self.assertEqual(red.games_drawn, 1)
        self.assertEqual(black.games_drawn, 1)
        self.assertEqual(red.blitz_games, 1)

    def test_casual_game_keeps_ratings(self):
        red, black = new_player_stats("alice"), new_player_stats("bob")
        apply_game_result(self.make_game(GameResult.BLACK_WINS, is_rated=False), red, black)
        self.assertEqual(black.games_won, 1)
        self.assertEqual(black.blitz_rating, 1200)
        self.assertEqual(black.blitz_games, 0)
        self.assertEqual(red.win_streak, 0)

    def test_ai_is_never_recorded_and_rated_1500(self):
        game = Game(id="g", red_player="alice", black_player=AI_PLAYER_ID,
                    black_player_type=PlayerType.AI, result=GameResult.RED_WINS)
        red = new_player_stats("alice")
        updated = apply_game_result(game, red, None)
        self.assertEqual(updated, [red])
        # 1200 vs 1500: expected ~0.151, 1200 + 32 * 0.849
        self.assertEqual(red.blitz_rating, 1227)

    def test_win_streak(self):
        stats = new_player_stats("alice")
        for _ in range(3):
            apply_game_result(self.make_game(GameResult.RED_WINS), stats, new_player_stats("bob"))
        self.assertEqual(stats.win_streak, 3)
        self.assertEqual(stats.best_streak, 3)
        apply_game_result(self.make_game(GameResult.BLACK_WINS), stats, new_player_stats("bob"))
        self.assertEqual(stats.win_streak, 0)
        self.assertEqual(stats.best_streak, 3)

    def test_unfinished_game_is_ignored(self):
        self.assertEqual(apply_game_result(self.make_game(None), new_player_stats("a"), None), [])


if __name__ == '__main__':
    unittest.main()
