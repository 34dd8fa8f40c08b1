import unittest

from checkers_arena.engine import tournament as swiss
from checkers_arena.engine.errors import CheckersError, ErrorCode
from checkers_arena.models.enums import GameResult, GameStatus, MatchStatus, TimeControl, TournamentStatus
from checkers_arena.schemas.game_schema import Game
from checkers_arena.schemas.tournament_schema import SwissParticipant, Tournament


def make_tournament(players, max_players=8, is_public=True, scheduled_start=None):
    t = swiss.new_tournament("t000001", "Cup", players[0], TimeControl.BLITZ_5_3,
                             max_players, is_public, scheduled_start, now_ms=1_000)
    for p in players[1:]:
        if is_public:
            swiss.register_player(t, p)
        else:
            swiss.register_with_code(t, p, t.invite_code)
    return t


def started(players, max_players=8):
    t = make_tournament(players, max_players)
    swiss.start(t, players[0], now_ms=2_000)
    return t


def pairs(tournament, round_number):
    return [(m.player1, m.player2) for m in tournament.get_round(round_number).matches]


class TestSwissMath(unittest.TestCase):

    def test_round_count(self):
        self.assertEqual(swiss.calculate_swiss_rounds(2), 3)
        self.assertEqual(swiss.calculate_swiss_rounds(8), 3)
        self.assertEqual(swiss.calculate_swiss_rounds(9), 4)
        self.assertEqual(swiss.calculate_swiss_rounds(16), 4)
        self.assertEqual(swiss.calculate_swiss_rounds(17), 5)
        self.assertEqual(swiss.calculate_swiss_rounds(64), 6)

    def test_min_players_to_start(self):
        self.assertEqual(swiss.min_players_to_start(2), 2)
        self.assertEqual(swiss.min_players_to_start(8), 2)
        self.assertEqual(swiss.min_players_to_start(16), 4)
        self.assertEqual(swiss.min_players_to_start(64), 16)

    def test_invite_code(self):
        code = swiss.generate_invite_code("t000001", 1_700_000_000_000)
        self.assertEqual(len(code), 6)
        self.assertTrue(all(c in swiss.INVITE_ALPHABET for c in code))
        self.assertEqual(code, swiss.generate_invite_code("t000001", 1_700_000_000_000))
        self.assertNotIn("O", swiss.INVITE_ALPHABET)
        self.assertNotIn("1", swiss.INVITE_ALPHABET)


class TestPairing(unittest.TestCase):

    def test_fold_pairing_even(self):
        self.assertEqual(
            swiss.first_round_pairings(list("ABCDEFGH")),
            [("A", "H"), ("B", "G"), ("C", "F"), ("D", "E")],
        )

    def test_fold_pairing_odd_gives_last_seed_the_bye(self):
        self.assertEqual(
            swiss.first_round_pairings(["P1", "P2", "P3", "P4", "P5"]),
            [("P1", "P4"), ("P2", "P3"), ("P5", None)],
        )

    def test_avoids_repeat_opponents(self):
        participants = [
            SwissParticipant(player_id="D", score=0, opponents=["C"]),
            SwissParticipant(player_id="A", score=2, opponents=["B"]),
            SwissParticipant(player_id="C", score=0, opponents=["D"]),
            SwissParticipant(player_id="B", score=2, opponents=["A"]),
        ]
        self.assertEqual(swiss.swiss_pairings(participants), [("A", "C"), ("B", "D")])
        self.assertEqual([p.player_id for p in participants], ["A", "B", "C", "D"])

    def test_repeat_allowed_when_unavoidable(self):
        participants = [
            SwissParticipant(player_id="A", score=2, opponents=["B"]),
            SwissParticipant(player_id="B", score=0, opponents=["A"]),
        ]
        self.assertEqual(swiss.swiss_pairings(participants), [("A", "B")])

    def test_bye_goes_to_lowest_without_one(self):
        participants = [
            SwissParticipant(player_id="A", score=4),
            SwissParticipant(player_id="B", score=2),
            SwissParticipant(player_id="C", score=0, has_bye=True),
        ]
        result = swiss.swiss_pairings(participants)
        self.assertEqual(result[0], ("B", None))
        self.assertEqual(result[1], ("A", "C"))
        self.assertTrue(participants[1].has_bye)

    def test_second_bye_when_everyone_had_one(self):
        participants = [
            SwissParticipant(player_id=p, score=s, has_bye=True)
            for p, s in (("A", 4), ("B", 2), ("C", 0))
        ]
        self.assertEqual(swiss.swiss_pairings(participants)[0], ("C", None))

    def test_ties_sorted_by_player_id(self):
        participants = [SwissParticipant(player_id=p, score=2) for p in ("D", "B", "C", "A")]
        swiss.swiss_pairings(participants)
        self.assertEqual([p.player_id for p in participants], ["A", "B", "C", "D"])


class TestRegistration(unittest.TestCase):

    def test_capacity_bounds(self):
        for bad in (1, 65):
            with self.assertRaises(CheckersError) as ctx:
                make_tournament(["A"], max_players=bad)
            self.assertEqual(ctx.exception.code, ErrorCode.INVALID_MAX_PLAYERS)

    def test_creator_registers_automatically(self):
        t = make_tournament(["A"], max_players=16)
        self.assertEqual(t.registered_players, ["A"])
        self.assertEqual(t.total_rounds, 4)
        self.assertIsNone(t.invite_code)

    def test_full_and_duplicate(self):
        t = make_tournament(["A", "B"], max_players=2)
        with self.assertRaises(CheckersError) as ctx:
            swiss.register_player(t, "A")
        self.assertEqual(ctx.exception.code, ErrorCode.ALREADY_REGISTERED)
        with self.assertRaises(CheckersError) as ctx:
            swiss.register_player(t, "C")
        self.assertEqual(ctx.exception.code, ErrorCode.TOURNAMENT_FULL)

    def test_private_tournament_needs_code(self):
        t = make_tournament(["A"], is_public=False)
        self.assertEqual(len(t.invite_code), 6)
        with self.assertRaises(CheckersError) as ctx:
            swiss.register_player(t, "B")
        self.assertEqual(ctx.exception.code, ErrorCode.PRIVATE_TOURNAMENT)
        with self.assertRaises(CheckersError) as ctx:
            swiss.register_with_code(t, "B", "ZZZZZZ" if t.invite_code != "ZZZZZZ" else "YYYYYY")
        self.assertEqual(ctx.exception.code, ErrorCode.INVALID_INVITE_CODE)

        swiss.register_with_code(t, "B", t.invite_code.lower())
        self.assertEqual(t.registered_players, ["A", "B"])

    def test_leave(self):
        t = make_tournament(["A", "B"])
        with self.assertRaises(CheckersError) as ctx:
            swiss.unregister_player(t, "A")
        self.assertEqual(ctx.exception.code, ErrorCode.CREATOR_CANNOT_LEAVE)
        with self.assertRaises(CheckersError) as ctx:
            swiss.unregister_player(t, "Z")
        self.assertEqual(ctx.exception.code, ErrorCode.NOT_REGISTERED)
        swiss.unregister_player(t, "B")
        self.assertEqual(t.registered_players, ["A"])

    def test_registration_closed_after_start(self):
        t = started(["A", "B"])
        with self.assertRaises(CheckersError) as ctx:
            swiss.register_player(t, "C")
        self.assertEqual(ctx.exception.code, ErrorCode.NOT_ACCEPTING_REGISTRATIONS)
        with self.assertRaises(CheckersError) as ctx:
            swiss.unregister_player(t, "B")
        self.assertEqual(ctx.exception.code, ErrorCode.NOT_ACCEPTING_REGISTRATIONS)

    def test_cancel(self):
        t = make_tournament(["A", "B"])
        with self.assertRaises(CheckersError) as ctx:
            swiss.cancel(t, "B", 5)
        self.assertEqual(ctx.exception.code, ErrorCode.NOT_TOURNAMENT_CREATOR)
        swiss.cancel(t, "A", 5)
        self.assertIs(t.status, TournamentStatus.CANCELLED)
        self.assertIsNone(t.winner)


class TestStart(unittest.TestCase):

    def test_start_guards(self):
        t = make_tournament(["A", "B", "C"], max_players=16)
        with self.assertRaises(CheckersError) as ctx:
            swiss.start(t, "B", 0)
        self.assertEqual(ctx.exception.code, ErrorCode.NOT_TOURNAMENT_CREATOR)
        with self.assertRaises(CheckersError) as ctx:
            swiss.start(t, "A", 0)
        self.assertEqual(ctx.exception.code, ErrorCode.NOT_ENOUGH_PLAYERS)
        self.assertIs(t.status, TournamentStatus.REGISTRATION)

    def test_scheduled_start(self):
        t = make_tournament(["A", "B"], scheduled_start=10_000)
        with self.assertRaises(CheckersError) as ctx:
            swiss.start(t, "A", 9_999)
        self.assertEqual(ctx.exception.code, ErrorCode.SCHEDULED_START_NOT_REACHED)
        swiss.start(t, "A", 10_000)
        with self.assertRaises(CheckersError) as ctx:
            swiss.start(t, "A", 10_001)
        self.assertEqual(ctx.exception.code, ErrorCode.TOURNAMENT_ALREADY_STARTED)

    def test_eight_players_fold_paired(self):
        t = started(list("ABCDEFGH"))
        self.assertIs(t.status, TournamentStatus.IN_PROGRESS)
        self.assertEqual(t.num_rounds, 3)
        self.assertEqual(t.current_round, 1)
        self.assertEqual(pairs(t, 1), [("A", "H"), ("B", "G"), ("C", "F"), ("D", "E")])
        self.assertTrue(all(m.status is MatchStatus.READY for m in t.matches))
        self.assertEqual(t.matches[0].id, "t000001_r1_m1")

    def test_five_players_bye_scored_at_start(self):
        t = started(["P1", "P2", "P3", "P4", "P5"])
        self.assertEqual(pairs(t, 1), [("P1", "P4"), ("P2", "P3"), ("P5", None)])
        bye = t.get_round(1).matches[2]
        self.assertIs(bye.status, MatchStatus.FINISHED)
        self.assertEqual(bye.winner, "P5")
        self.assertEqual(t.participant("P5").score, 2)
        self.assertTrue(t.participant("P5").has_bye)
        self.assertEqual(t.current_round, 1)

    def test_flat_matches_mirror_rounds(self):
        t = started(["P1", "P2", "P3", "P4", "P5"])
        restored = Tournament.model_validate_json(t.model_dump_json())
        self.assertEqual(restored.matches, [m for r in restored.rounds for m in r.matches])
        self.assertEqual(restored, t)


class TestMatchesAndAdvancement(unittest.TestCase):

    def forfeit_round(self, t):
        """Player 2 forfeits every open match of the current round."""
        for m in list(t.get_round(t.current_round).matches):
            if m.status is MatchStatus.READY:
                swiss.forfeit_match(t, m.id, m.player2, now_ms=5_000)

    def test_forfeit_awards_opponent_and_advances(self):
        t = started(list("ABCD"))
        swiss.forfeit_match(t, "t000001_r1_m1", "D", 3_000)
        self.assertEqual(t.current_round, 1)
        winner = swiss.forfeit_match(t, "t000001_r1_m2", "B", 4_000)

        self.assertEqual(winner, "C")
        self.assertEqual(t.participant("A").opponents, ["D"])
        self.assertEqual(t.participant("D").opponents, ["A"])
        self.assertEqual(t.current_round, 2)
        self.assertTrue(t.get_round(1).completed)
        # A and C lead on 2 points and have not met
        self.assertEqual(pairs(t, 2), [("A", "C"), ("B", "D")])

    def test_forfeit_guards(self):
        t = started(list("ABCD"))
        with self.assertRaises(CheckersError) as ctx:
            swiss.forfeit_match(t, "nope", "A", 0)
        self.assertEqual(ctx.exception.code, ErrorCode.MATCH_NOT_FOUND)
        with self.assertRaises(CheckersError) as ctx:
            swiss.forfeit_match(t, "t000001_r1_m1", "B", 0)
        self.assertEqual(ctx.exception.code, ErrorCode.NOT_IN_THIS_MATCH)
        swiss.forfeit_match(t, "t000001_r1_m1", "D", 0)
        with self.assertRaises(CheckersError) as ctx:
            swiss.forfeit_match(t, "t000001_r1_m1", "D", 0)
        self.assertEqual(ctx.exception.code, ErrorCode.MATCH_NOT_ACTIVE)

    def test_three_round_tournament_finishes(self):
        t = started(list("ABCD"))
        for _ in range(3):
            self.forfeit_round(t)

        self.assertIs(t.status, TournamentStatus.FINISHED)
        self.assertEqual(t.current_round, 3)
        self.assertEqual(len(t.rounds), 3)
        self.assertTrue(all(r.completed for r in t.rounds))
        self.assertEqual(t.winner, "A")
        self.assertEqual(t.participant("A").score, 6)
        self.assertEqual(t.finished_at, 5_000)

    def test_winner_tie_broken_by_player_id(self):
        participants = [
            SwissParticipant(player_id="B", score=4),
            SwissParticipant(player_id="A", score=4),
            SwissParticipant(player_id="C", score=2),
        ]
        self.assertEqual(swiss.resolve_winner(participants), "A")
        self.assertIsNone(swiss.resolve_winner([]))

    def test_odd_field_runs_to_completion(self):
        t = started(["P1", "P2", "P3", "P4", "P5"])
        for _ in range(3):
            self.forfeit_round(t)
        self.assertIs(t.status, TournamentStatus.FINISHED)
        self.assertIsNotNone(t.winner)
        byes = [m.player1 for m in t.matches if m.player2 is None]
        self.assertEqual(len(byes), 3)
        self.assertEqual(len(set(byes)), 3)

    def test_claim_match(self):
        t = started(list("ABCD"))
        match = swiss.claim_match(t, "t000001_r1_m1", "A", "game_000007")
        self.assertEqual(match.game_id, "game_000007")
        self.assertIs(match.status, MatchStatus.IN_PROGRESS)

        with self.assertRaises(CheckersError) as ctx:
            swiss.claim_match(t, "t000001_r1_m1", "D", "game_000008")
        self.assertEqual(ctx.exception.code, ErrorCode.MATCH_ALREADY_STARTED)
        with self.assertRaises(CheckersError) as ctx:
            swiss.claim_match(t, "t000001_r1_m2", "A", "game_000009")
        self.assertEqual(ctx.exception.code, ErrorCode.NOT_IN_THIS_MATCH)

    def test_bye_cannot_be_claimed(self):
        t = started(["P1", "P2", "P3"])
        with self.assertRaises(CheckersError) as ctx:
            swiss.claim_match(t, "t000001_r1_m2", "P3", "game_000001")
        self.assertEqual(ctx.exception.code, ErrorCode.MATCH_NOT_READY)

    def test_colors_follow_start_timestamp(self):
        t = started(list("ABCD"))
        match = t.matches[0]
        self.assertEqual(swiss.assign_colors(match, 10), ("A", "D"))
        self.assertEqual(swiss.assign_colors(match, 11), ("D", "A"))

    def test_game_result_is_recorded_once(self):
        t = started(list("ABCD"))
        swiss.claim_match(t, "t000001_r1_m1", "A", "game_000001")
        game = Game(id="game_000001", red_player="D", black_player="A",
                    status=GameStatus.FINISHED, result=GameResult.BLACK_WINS,
                    tournament_id=t.id, tournament_match_id="t000001_r1_m1")

        self.assertTrue(swiss.record_game_result(t, game, 9_000))
        self.assertFalse(swiss.record_game_result(t, game, 9_001))
        self.assertEqual(t.participant("A").score, 2)
        self.assertEqual(t.participant("D").score, 0)
        self.assertEqual(t.find_match("t000001_r1_m1").winner, "A")

    def test_drawn_game_splits_points(self):
        t = started(list("ABCD"))
        swiss.claim_match(t, "t000001_r1_m2", "B", "game_000002")
        game = Game(id="game_000002", red_player="B", black_player="C",
                    status=GameStatus.FINISHED, result=GameResult.DRAW,
                    tournament_id=t.id, tournament_match_id="t000001_r1_m2")
        swiss.record_game_result(t, game, 0)
        self.assertEqual(t.participant("B").score, 1)
        self.assertEqual(t.participant("C").score, 1)
        self.assertIsNone(t.find_match("t000001_r1_m2").winner)


if __name__ == '__main__':
    unittest.main()
