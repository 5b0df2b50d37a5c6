"""
Testing the solo game loop and statistics.
Target for every test: "18 + 41 = 59" (puzzle #1).
"""

from numble.solo import (
    GAME_OVER,
    SoloController,
    SoloGame,
    Statistics,
    should_reset_game,
    start_game,
    submit_guess,
    update_statistics,
)
from numble.validation import HARD_MODE, NOT_WHOLE_DIVISION

TARGET = "18 + 41 = 59"
WRONG = ["1 + 1 = 2", "2 + 2 = 4", "3 + 3 = 6", "4 + 4 = 8", "5 + 5 = 10", "6 + 6 = 12"]


def test_win_on_second_guess():
    game = start_game(1)
    outcome = submit_guess(game, "1 + 1 = 2", TARGET)
    assert outcome.accepted
    assert outcome.game.status == "in_progress"
    assert len(outcome.feedback) == 13

    outcome = submit_guess(outcome.game, "18 + 41 = 59", TARGET)
    assert outcome.game.status == "won"
    assert outcome.game.guesses == ["1 + 1 = 2", "18 + 41 = 59"]
    assert outcome.feedback == ["exact"] * 13


def test_input_game_is_not_mutated():
    game = start_game(1)
    submit_guess(game, "1 + 1 = 2", TARGET)
    assert game.guesses == []


def test_invalid_guess_does_not_use_a_turn():
    game = start_game(1)
    outcome = submit_guess(game, "10 / 3 = 3", TARGET)
    assert not outcome.accepted
    assert outcome.rejection.reason == NOT_WHOLE_DIVISION
    assert outcome.game.guesses == []


def test_six_misses_lose_and_seventh_is_refused():
    game = start_game(1)
    for guess in WRONG:
        game = submit_guess(game, guess, TARGET).game
    assert game.status == "lost"
    assert len(game.guesses) == 6

    outcome = submit_guess(game, "18 + 41 = 59", TARGET)
    assert outcome.rejection.reason == GAME_OVER
    assert outcome.game.status == "lost"


def test_guess_is_normalized():
    outcome = submit_guess(start_game(1), "  18  +  41 =  59 ", TARGET)
    assert outcome.game.status == "won"
    assert outcome.game.guesses == ["18 + 41 = 59"]


def test_hard_mode_enforced_only_when_asked():
    game = submit_guess(start_game(1), "1 + 8 = 9", TARGET).game
    # the first guess revealed "+" and "8" (among others); this one drops them
    loose = submit_guess(game, "10 - 1 = 9", TARGET)
    assert loose.accepted

    strict = submit_guess(game, "10 - 1 = 9", TARGET, hard_mode=True)
    assert strict.rejection.reason == HARD_MODE
    assert strict.game is game


def test_day_change_starts_fresh():
    saved = SoloGame(puzzle_number=1, guesses=["1 + 1 = 2"])
    assert should_reset_game(2, 1)
    assert start_game(1, saved) is saved

    fresh = start_game(2, saved)
    assert fresh.puzzle_number == 2
    assert fresh.guesses == []
    assert fresh.status == "in_progress"


def test_statistics_on_win():
    before = SoloGame(puzzle_number=1, guesses=["1 + 1 = 2"])
    after = SoloGame(puzzle_number=1, guesses=["1 + 1 = 2", TARGET], status="won")

    stats = update_statistics(Statistics(), after, before)
    assert stats.games_played == 1
    assert stats.games_won == 1
    assert stats.current_streak == 1
    assert stats.max_streak == 1
    assert stats.guess_distribution[2] == 1
    assert stats.win_percentage == 100


def test_statistics_count_a_game_once():
    before = SoloGame(puzzle_number=1)
    after = SoloGame(puzzle_number=1, guesses=[TARGET], status="won")

    stats = update_statistics(Statistics(), after, before)
    # seeing the same finished game again changes nothing
    again = update_statistics(stats, after, after)
    assert again == stats
    assert again.games_played == 1


def test_loss_resets_streak_but_keeps_max():
    stats = Statistics(games_played=3, games_won=3, current_streak=3, max_streak=3)
    lost = SoloGame(puzzle_number=4, guesses=WRONG, status="lost")

    updated = update_statistics(stats, lost, None)
    assert updated.games_played == 4
    assert updated.current_streak == 0
    assert updated.max_streak == 3
    assert updated.win_percentage == 75
    # input stats untouched
    assert stats.current_streak == 3


def test_controller_updates_stats_on_finish_only():
    controller = SoloController(TARGET, 1)
    game = controller.start()
    stats = Statistics()

    outcome, stats = controller.play(game, stats, "1 + 1 = 2")
    assert stats.games_played == 0

    outcome, stats = controller.play(outcome.game, stats, TARGET)
    assert outcome.game.status == "won"
    assert stats.games_played == 1
    assert stats.guess_distribution[2] == 1


def test_dict_round_trip_for_caller_storage():
    stats = Statistics.from_dict({"games_played": 2, "guess_distribution": {"3": 1}})
    assert stats.guess_distribution[3] == 1
    assert stats.guess_distribution[6] == 0
    assert Statistics.from_dict(stats.to_dict()) == stats

    game = SoloGame.from_dict({"puzzle_number": 5, "guesses": ["1 + 1 = 2"]})
    assert game.status == "in_progress"
    assert SoloGame.from_dict(game.to_dict()) == game
