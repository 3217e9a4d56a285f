"""
Parlor Games - King of Diamond Engine Tests

Covers target computation, the two-player draw rule, winner selection,
elimination bookkeeping, termination and the self-driving round loop.
"""

import random

import pytest

from src.config.settings import Settings
from src.engine.base import GameStatus
from src.engine.errors import NotFoundError, StateError, ValidationError
from src.engine.events import GameEvent
from src.engine.king_of_diamond import (
    DiamondRoundResult,
    KingOfDiamondRules,
    random_chooser,
)
from src.engine.players import DiamondPlayer


def make_players(*choices):
    players = []
    for i, choice in enumerate(choices, start=1):
        player = DiamondPlayer(id=f"p{i}", name=f"P{i}")
        player.make_choice(choice)
        players.append(player)
    return players


# === Pure rule helpers ===


class TestCalculateTargetNumber:
    @pytest.mark.parametrize("choices", [
        [10, 50, 90],
        [0, 0],
        [100, 100, 100],
        [1, 2],
        [33, 67, 12, 99, 5],
    ])
    def test_average_times_point_eight(self, choices):
        target = KingOfDiamondRules().calculate_target_number(choices)
        assert target == pytest.approx(sum(choices) / len(choices) * 0.8)

    def test_no_rounding(self):
        assert KingOfDiamondRules().calculate_target_number([1, 2]) == pytest.approx(1.2)

    def test_custom_multiplier(self):
        rules = KingOfDiamondRules(target_multiplier=0.5)
        assert rules.calculate_target_number([40, 60]) == pytest.approx(25.0)

    def test_empty_choices(self):
        with pytest.raises(StateError):
            KingOfDiamondRules().calculate_target_number([])


class TestFindRoundWinners:
    def test_single_closest(self):
        players = make_players(10, 50, 90)
        winners = KingOfDiamondRules().find_round_winners(players, 50)
        assert winners == [players[1]]

    def test_equidistant_co_winners(self):
        players = make_players(40, 60)
        winners = KingOfDiamondRules().find_round_winners(players, 50)
        assert winners == players

    def test_all_equal_all_win(self):
        players = make_players(20, 20, 20)
        assert KingOfDiamondRules().find_round_winners(players, 16.0) == players


class TestCheckTwoPlayerDraw:
    @pytest.mark.parametrize("a, b", [(50, 50), (0, 100), (100, 0), (0, 0), (100, 100)])
    def test_draw(self, a, b):
        assert KingOfDiamondRules().check_two_player_draw(*make_players(a, b)) is True

    @pytest.mark.parametrize("a, b", [(30, 70), (0, 99), (1, 100), (49, 50)])
    def test_not_draw(self, a, b):
        assert KingOfDiamondRules().check_two_player_draw(*make_players(a, b)) is False


# === Rule set metadata ===


class TestRulesMetadata:
    def test_game_name(self):
        assert KingOfDiamondRules().get_game_name() == "King of Diamond"

    def test_rules_document(self):
        rules = KingOfDiamondRules().get_game_rules()
        assert rules.min_players == 2
        assert rules.max_players == 20
        assert rules.starting_life == 10
        assert rules.rounds == "Until one winner remains"
        assert len(rules.special_rules) == 6

    def test_no_round_cap(self, make_diamond_game):
        game = make_diamond_game(["A", "B"])
        assert game.max_rounds is None
        assert game.get_game_state().max_rounds is None

    def test_players_start_with_configured_life(self, make_diamond_game):
        game = make_diamond_game(["A"], starting_life=3)
        assert isinstance(game.players[0], DiamondPlayer)
        assert game.players[0].life_points == 3

    @pytest.mark.parametrize("options", [
        {"starting_life": 0},
        {"choice_min": 10, "choice_max": 5},
        {"max_cascade_rounds": 0},
    ])
    def test_invalid_options(self, options):
        with pytest.raises(ValidationError):
            KingOfDiamondRules(**options)

    def test_from_settings(self):
        settings = Settings(starting_life_points=4, target_multiplier=0.5)
        rules = KingOfDiamondRules.from_settings(settings, auto_play=False)
        assert rules.starting_life == 4
        assert rules.target_multiplier == 0.5
        assert rules.auto_play is False
        assert rules.chooser is None


# === Interactive rounds ===


class TestSubmitChoice:
    def test_records_choice(self, make_diamond_game):
        game = make_diamond_game(["Alice", "Bob"], start=True)
        game.submit_choice("player_1", 42)
        assert game.players[0].current_choice == 42

    def test_out_of_range(self, make_diamond_game):
        game = make_diamond_game(["Alice", "Bob"], start=True)
        with pytest.raises(ValidationError):
            game.submit_choice("player_1", 101)
        assert game.players[0].current_choice is None

    def test_unknown_player(self, make_diamond_game):
        game = make_diamond_game(["Alice", "Bob"], start=True)
        with pytest.raises(NotFoundError):
            game.submit_choice("ghost", 10)

    def test_before_start(self, make_diamond_game):
        game = make_diamond_game(["Alice", "Bob"])
        with pytest.raises(StateError):
            game.submit_choice("player_1", 10)

    def test_after_round_resolved(self, make_diamond_game, submit_round):
        game = make_diamond_game(["Alice", "Bob", "Carol"], start=True)
        submit_round(game, {"Alice": 10, "Bob": 50, "Carol": 90})
        game.play_round()
        with pytest.raises(StateError, match="advance the round first"):
            game.submit_choice("player_1", 5)

    def test_eliminated_player(self, make_diamond_game, submit_round):
        game = make_diamond_game(["Alice", "Bob", "Carol"], start=True)
        game.players[2].life_points = 1
        submit_round(game, {"Alice": 10, "Bob": 50, "Carol": 90})
        game.play_round()
        game.advance_round()
        with pytest.raises(StateError, match="eliminated"):
            game.submit_choice("player_3", 5)


class TestPlayRound:
    def test_requires_playing_state(self, make_diamond_game):
        game = make_diamond_game(["Alice", "Bob"])
        with pytest.raises(StateError):
            game.play_round()

    def test_round_not_ready(self, make_diamond_game):
        game = make_diamond_game(["Alice", "Bob", "Carol"], start=True)
        game.submit_choice("player_1", 10)
        with pytest.raises(StateError, match="Round not ready"):
            game.play_round()
        assert game.has_played_this_round is False
        assert [p.life_points for p in game.players] == [10, 10, 10]
        assert all(p.round_history == [] for p in game.players)
        assert game.rules.target_number is None

    def test_three_player_round(self, make_diamond_game, submit_round):
        game = make_diamond_game(["Alice", "Bob", "Carol"], start=True)
        submit_round(game, {"Alice": 10, "Bob": 50, "Carol": 90})

        results = game.play_round()

        assert len(results) == 1
        result = results[0]
        assert isinstance(result, DiamondRoundResult)
        assert result.target_number == pytest.approx(40.0)
        assert result.winner_ids == ("player_2",)
        assert result.is_draw is False
        assert [p.life_points for p in game.players] == [9, 10, 9]
        assert game.get_round_winner() is game.players[1]
        assert game.has_played_this_round is True
        assert game.status is GameStatus.PLAYING

    def test_history_entry_for_every_active_player(self, make_diamond_game, submit_round):
        game = make_diamond_game(["Alice", "Bob", "Carol"], start=True)
        submit_round(game, {"Alice": 10, "Bob": 50, "Carol": 90})
        game.play_round()
        alice, bob, carol = game.players
        assert alice.round_history[0].choice == 10
        assert alice.round_history[0].won is False
        assert alice.round_history[0].life_points_after == 9
        assert bob.round_history[0].won is True
        assert bob.round_history[0].target_number == pytest.approx(40.0)
        assert len(carol.round_history) == 1

    def test_cannot_replay_resolved_round(self, make_diamond_game, submit_round):
        game = make_diamond_game(["Alice", "Bob", "Carol"], start=True)
        submit_round(game, {"Alice": 10, "Bob": 50, "Carol": 90})
        game.play_round()
        with pytest.raises(StateError):
            game.play_round()

    def test_co_winners_keep_life(self, make_diamond_game, submit_round):
        # target = 40 * 0.8 = 32; 20 and 44 are both 12 away
        game = make_diamond_game(["Alice", "Bob", "Carol"], start=True)
        submit_round(game, {"Alice": 20, "Bob": 44, "Carol": 56})
        result = game.play_round()[0]
        assert result.target_number == pytest.approx(32.0)
        assert result.winner_ids == ("player_1", "player_2")
        assert [p.life_points for p in game.players] == [10, 10, 9]
        assert game.get_round_winner() is None

    def test_chooser_fills_missing_choices_only(self, make_diamond_game):
        game = make_diamond_game(
            ["Alice", "Bob", "Carol"], start=True, chooser=lambda p: 90
        )
        game.submit_choice("player_1", 0)
        result = game.play_round()[0]
        assert result.choices == {"player_1": 0, "player_2": 90, "player_3": 90}

    def test_invalid_chooser_value_assigns_nothing(self, make_diamond_game):
        game = make_diamond_game(["Alice", "Bob"], start=True, chooser=lambda p: 500)
        with pytest.raises(ValidationError):
            game.play_round()
        assert all(p.current_choice is None for p in game.players)


class TestTwoPlayerDraw:
    @pytest.mark.parametrize("alice, bob", [(50, 50), (0, 100), (100, 0)])
    def test_draw_costs_both_a_life(self, make_diamond_game, submit_round, alice, bob):
        game = make_diamond_game(["Alice", "Bob"], start=True)
        submit_round(game, {"Alice": alice, "Bob": bob})

        result = game.play_round()[0]

        assert result.is_draw is True
        assert result.winner_ids == ()
        assert game.rules.round_winners == []
        assert game.get_round_winner() is None
        assert [p.life_points for p in game.players] == [9, 9]
        assert [p.round_history[0].won for p in game.players] == [False, False]

    def test_no_draw_for_thirty_seventy(self, make_diamond_game, submit_round):
        game = make_diamond_game(["Alice", "Bob"], start=True)
        submit_round(game, {"Alice": 30, "Bob": 70})

        result = game.play_round()[0]

        assert result.is_draw is False
        assert result.target_number == pytest.approx(40.0)
        assert game.get_round_winner() is game.players[0]
        assert [p.life_points for p in game.players] == [10, 9]

    def test_draw_rule_not_applied_with_three_players(self, make_diamond_game, submit_round):
        game = make_diamond_game(["Alice", "Bob", "Carol"], start=True)
        submit_round(game, {"Alice": 50, "Bob": 50, "Carol": 50})
        result = game.play_round()[0]
        assert result.is_draw is False
        assert len(result.winner_ids) == 3
        assert [p.life_points for p in game.players] == [10, 10, 10]

    def test_draw_rule_reapplies_when_two_remain(self, make_diamond_game, submit_round):
        game = make_diamond_game(["Alice", "Bob", "Carol"], start=True)
        game.players[2].life_points = 1
        submit_round(game, {"Alice": 10, "Bob": 50, "Carol": 90})
        game.play_round()
        game.advance_round()

        submit_round(game, {"Alice": 50, "Bob": 50})
        result = game.play_round()[0]

        assert result.is_draw is True
        assert [p.life_points for p in game.players] == [8, 9, 0]
        assert len(game.players[2].round_history) == 1


class TestAdvanceRound:
    def test_cannot_advance_before_playing(self, make_diamond_game):
        game = make_diamond_game(["Alice", "Bob"], start=True)
        assert game.can_advance_round() is False
        with pytest.raises(StateError):
            game.advance_round()

    def test_advance_clears_round_state(self, make_diamond_game, submit_round):
        game = make_diamond_game(["Alice", "Bob", "Carol"], start=True)
        submit_round(game, {"Alice": 10, "Bob": 50, "Carol": 90})
        game.play_round()

        assert game.can_advance_round() is True
        assert game.advance_round() is True

        assert game.current_round == 2
        assert game.has_played_this_round is False
        assert game.rules.target_number is None
        assert game.rules.round_winners == []
        assert all(p.current_choice is None for p in game.players)
        assert [p.life_points for p in game.players] == [9, 10, 9]
        assert all(len(p.round_history) == 1 for p in game.players)

    def test_many_rounds_without_cap(self, make_diamond_game, submit_round):
        game = make_diamond_game(["Alice", "Bob", "Carol"], start=True, starting_life=50)
        for _ in range(12):
            submit_round(game, {"Alice": 20, "Bob": 44, "Carol": 56})
            game.play_round()
            game.advance_round()
        assert game.current_round == 13
        assert game.status is GameStatus.PLAYING

    def test_cannot_advance_after_finish(self, make_diamond_game, submit_round):
        game = make_diamond_game(["Alice", "Bob"], start=True, starting_life=1)
        submit_round(game, {"Alice": 30, "Bob": 70})
        game.play_round()
        assert game.status is GameStatus.FINISHED
        assert game.can_advance_round() is False
        with pytest.raises(StateError):
            game.advance_round()


class TestTermination:
    def test_last_player_standing_wins(self, make_diamond_game, submit_round):
        game = make_diamond_game(["Alice", "Bob", "Carol"], start=True, starting_life=1)
        submit_round(game, {"Alice": 10, "Bob": 50, "Carol": 90})
        game.play_round()

        assert game.status is GameStatus.FINISHED
        assert game.get_winners() == [game.players[1]]

    def test_simultaneous_elimination_has_no_winner(self, make_diamond_game, submit_round):
        game = make_diamond_game(["Alice", "Bob"], start=True, starting_life=1)
        submit_round(game, {"Alice": 50, "Bob": 50})
        game.play_round()

        assert game.status is GameStatus.FINISHED
        assert all(p.is_eliminated for p in game.players)
        assert game.get_winners() == []

    def test_winners_unavailable_while_playing(self, make_diamond_game):
        game = make_diamond_game(["Alice", "Bob"], start=True)
        with pytest.raises(StateError, match="finished"):
            game.get_winners()


class TestSelfDrivingLoop:
    def test_cascade_resolves_until_finished(self, make_diamond_game, scripted_chooser):
        chooser = scripted_chooser([
            {"Alice": 30, "Bob": 70},
            {"Alice": 30, "Bob": 70},
        ])
        game = make_diamond_game(
            ["Alice", "Bob"], start=True, auto_play=True, chooser=chooser, starting_life=2
        )

        results = game.play_round()

        assert [r.round_number for r in results] == [1, 2]
        assert game.status is GameStatus.FINISHED
        assert game.current_round == 2
        assert game.get_winners() == [game.players[0]]
        assert game.players[1].life_points == 0
        assert game.rules.round_results == results

    def test_each_round_is_observable(self, make_diamond_game, scripted_chooser):
        chooser = scripted_chooser([
            {"Alice": 30, "Bob": 70},
            {"Alice": 50, "Bob": 50},
        ])
        game = make_diamond_game(
            ["Alice", "Bob"], start=True, auto_play=True, chooser=chooser, starting_life=2
        )
        events = []
        game.subscribe(events.append)

        game.play_round()

        kinds = [e.event for e in events]
        assert kinds == [
            GameEvent.ROUND_PLAYED,
            GameEvent.ROUND_ADVANCED,
            GameEvent.ROUND_PLAYED,
            GameEvent.PLAYER_ELIMINATED,
            GameEvent.GAME_FINISHED,
        ]
        assert events[2].data["is_draw"] is True
        assert events[3].player_id == "player_2"

    def test_cascade_suspends_at_limit(self, make_diamond_game):
        game = make_diamond_game(
            ["Alice", "Bob", "Carol"],
            start=True,
            auto_play=True,
            chooser=lambda p: 50,
            max_cascade_rounds=5,
        )

        results = game.play_round()

        assert len(results) == 5
        assert game.status is GameStatus.PLAYING
        assert game.has_played_this_round is True
        assert game.can_advance_round() is True

    def test_chooser_failure_mid_cascade_suspends(
        self, make_diamond_game, scripted_chooser, caplog
    ):
        chooser = scripted_chooser([
            {"Alice": 30, "Bob": 40, "Carol": 50},
            {"Alice": 500, "Bob": 500, "Carol": 500},
        ])
        game = make_diamond_game(
            ["Alice", "Bob", "Carol"], start=True, auto_play=True, chooser=chooser
        )

        results = game.play_round()

        assert [r.round_number for r in results] == [1]
        assert game.rules.round_results == results
        assert game.status is GameStatus.PLAYING
        assert game.current_round == 2
        assert game.has_played_this_round is False
        assert all(len(p.round_history) == 1 for p in game.players)
        assert all(p.current_choice is None for p in game.players)
        assert "Suspending at round 2" in caplog.text

    def test_chooser_failure_in_first_round_raises(self, make_diamond_game):
        game = make_diamond_game(
            ["Alice", "Bob", "Carol"], start=True, auto_play=True, chooser=lambda p: 500
        )

        with pytest.raises(ValidationError):
            game.play_round()

        assert game.current_round == 1
        assert game.has_played_this_round is False
        assert game.rules.round_results == []
        assert all(p.round_history == [] for p in game.players)

    def test_seeded_random_game_finishes(self, make_diamond_game):
        game = make_diamond_game(
            ["A", "B", "C", "D"], start=True, auto_play=True, rng=random.Random(7)
        )

        results = game.play_round()

        assert game.status is GameStatus.FINISHED
        assert len(game.active_players()) <= 1
        assert len(results) == game.current_round

    def test_life_points_never_increase(self, make_diamond_game):
        game = make_diamond_game(
            ["A", "B", "C"], start=True, auto_play=True, rng=random.Random(11)
        )
        game.play_round()

        for player in game.players:
            lives = [r.life_points_after for r in player.round_history]
            assert lives == sorted(lives, reverse=True)
            assert player.is_eliminated == (player.life_points <= 0)
            eliminated_at = [i for i, life in enumerate(lives) if life <= 0]
            if eliminated_at:
                assert eliminated_at[0] == len(lives) - 1

    def test_random_chooser_range(self):
        choose = random_chooser(random.Random(3), 5, 9)
        player = DiamondPlayer(id="p", name="P")
        values = {choose(player) for _ in range(200)}
        assert values <= set(range(5, 10))
        assert len(values) > 1


class TestSnapshot:
    def test_extra_fields(self, make_diamond_game, submit_round):
        game = make_diamond_game(["Alice", "Bob", "Carol"], start=True, starting_life=1)
        submit_round(game, {"Alice": 10, "Bob": 50, "Carol": 90})
        game.play_round()

        snapshot = game.get_game_state()

        assert snapshot.state is GameStatus.FINISHED
        assert snapshot.game_name == "King of Diamond"
        assert snapshot.target_number == pytest.approx(40.0)
        assert [p["name"] for p in snapshot.round_winners] == ["Bob"]
        assert [p["name"] for p in snapshot.active_players] == ["Bob"]
        assert [p["name"] for p in snapshot.eliminated_players] == ["Alice", "Carol"]
        assert snapshot.round_winner["name"] == "Bob"
        assert snapshot.players[0]["life_points"] == 0

    def test_before_any_round(self, make_diamond_game):
        game = make_diamond_game(["Alice", "Bob"], start=True)
        snapshot = game.get_game_state()
        assert snapshot.target_number is None
        assert snapshot.round_winners == []
        assert snapshot.round_winner is None


class TestReset:
    def test_reset_after_finish_matches_fresh_engine(self, make_diamond_game, submit_round):
        game = make_diamond_game(["Alice", "Bob"], start=True, starting_life=1)
        submit_round(game, {"Alice": 30, "Bob": 70})
        game.play_round()
        assert game.status is GameStatus.FINISHED

        game.reset()
        game.add_player("Carol")
        fresh = make_diamond_game(["Carol"], starting_life=1)

        reset_state = game.get_game_state().model_dump()
        fresh_state = fresh.get_game_state().model_dump()
        for snapshot in (reset_state, fresh_state):
            for player in snapshot["players"] + snapshot["active_players"]:
                player.pop("id")
        assert reset_state == fresh_state
        assert game.rules.round_results == []
