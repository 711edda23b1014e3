"""
Testing secret generation for each difficulty.
"""

import random

import pytest

from crackcode.generator import ALPHANUMERIC, DIGITS, Difficulty, alphabet_for, generate
from tests.helpers import ScriptedRandom


def test_easy_rejects_already_drawn_symbols():
    rng = ScriptedRandom([3, 3, 5, 3, 1])
    assert generate(3, Difficulty.EASY, rng) == ("3", "5", "1")


def test_easy_longer_than_alphabet_is_an_error():
    with pytest.raises(ValueError):
        generate(11, Difficulty.EASY, random.Random(0))


def test_normal_draws_with_replacement():
    rng = ScriptedRandom([1, 1, 2, 2])
    assert generate(4, Difficulty.NORMAL, rng) == ("1", "1", "2", "2")


def test_hard_forces_a_repeat_from_the_right_neighbour():
    # six unique draws, then position 2 copies position 3
    rng = ScriptedRandom([0, 1, 2, 3, 4, 5, 2])
    assert generate(6, Difficulty.HARD, rng) == ("0", "1", "3", "3", "4", "5")


def test_hard_forced_repeat_wraps_around():
    rng = ScriptedRandom([0, 1, 2, 3, 4, 5, 5])
    assert generate(6, Difficulty.HARD, rng) == ("0", "1", "2", "3", "4", "0")


def test_hard_keeps_a_code_that_already_repeats():
    rng = ScriptedRandom([1, 1, 2, 3, 4, 5])
    assert generate(6, Difficulty.HARD, rng) == ("1", "1", "2", "3", "4", "5")
    assert rng.values == []


def test_hard_short_codes_are_not_forced():
    rng = ScriptedRandom([0, 1, 2, 3, 4])
    assert generate(5, Difficulty.HARD, rng) == ("0", "1", "2", "3", "4")
    assert len(rng.calls) == 5


def test_extreme_draws_letters():
    rng = ScriptedRandom([10, 35, 0])
    assert generate(3, Difficulty.EXTREME, rng) == ("A", "Z", "0")
    assert rng.calls == [36, 36, 36]


def test_alphabets():
    assert alphabet_for(Difficulty.EASY) == DIGITS
    assert alphabet_for("normal") == DIGITS
    assert alphabet_for(Difficulty.HARD) == DIGITS
    assert alphabet_for(Difficulty.EXTREME) == ALPHANUMERIC
    assert len(ALPHANUMERIC) == 36


@pytest.mark.parametrize("length", range(3, 11))
def test_difficulty_constraints_hold_across_seeds(length):
    for seed in range(200):
        rng = random.Random(seed)

        easy = generate(length, Difficulty.EASY, rng)
        assert len(easy) == length
        assert len(set(easy)) == length

        hard = generate(length, Difficulty.HARD, rng)
        assert len(hard) == length
        assert set(hard) <= set(DIGITS)
        if length >= 6:
            assert len(set(hard)) < length

        extreme = generate(length, Difficulty.EXTREME, rng)
        assert len(extreme) == length
        assert set(extreme) <= set(ALPHANUMERIC)

        normal = generate(length, Difficulty.NORMAL, rng)
        assert set(normal) <= set(DIGITS)


def test_default_source_follows_random_seed():
    random.seed(1234)
    first = generate(8, Difficulty.EXTREME)
    random.seed(1234)
    assert generate(8, Difficulty.EXTREME) == first
