"""
Testing guess feedback, in particular repeated symbols.
"""

import random
from collections import Counter

import pytest

from crackcode.evaluator import Mark, evaluate, is_solved, render_feedback

E, P, A = Mark.EXACT, Mark.PRESENT, Mark.ABSENT


def test_swapped_pair():
    assert evaluate("1234", "1243") == (E, E, P, P)


def test_repeated_guess_symbol_only_claims_what_the_secret_has():
    # only two 1s in the secret, both taken by exact matches
    assert evaluate("1123", "1111") == (E, E, A, A)


def test_all_present():
    assert evaluate("5566", "6655") == (P, P, P, P)


def test_exact_matches_are_claimed_before_earlier_present_ones():
    # the leading 2 must not steal a 2 that a later position matches exactly
    assert evaluate("1223", "2222") == (A, E, E, A)


def test_present_claims_leftmost_unclaimed_occurrence():
    assert evaluate("1200", "0012") == (P, P, P, P)
    assert evaluate("1234", "1111") == (E, A, A, A)
    assert evaluate("0011", "1000") == (P, E, P, A)


def test_no_matches():
    assert evaluate("0123", "4567") == (A, A, A, A)


def test_length_mismatch_is_a_precondition_violation():
    with pytest.raises(ValueError):
        evaluate("1234", "123")


def test_is_solved():
    assert is_solved(evaluate("9876", "9876"))
    assert not is_solved(evaluate("9876", "9867"))
    assert not is_solved(())


def test_render_feedback():
    assert render_feedback((E, P, A)) == "+~-"


def test_feedback_conservation_on_random_pairs():
    rng = random.Random(7)
    for _ in range(2000):
        n = rng.randint(3, 10)
        secret = [rng.choice("0123") for _ in range(n)]
        guess = [rng.choice("0123") for _ in range(n)]
        feedback = evaluate(secret, guess)

        assert len(feedback) == n
        exact_positions = sum(1 for s, g in zip(secret, guess) if s == g)
        assert feedback.count(E) == exact_positions

        overlap = sum((Counter(secret) & Counter(guess)).values())
        assert feedback.count(E) + feedback.count(P) <= overlap

        # a secret occurrence is claimed at most once
        claimed = Counter(g for g, mark in zip(guess, feedback) if mark is not A)
        for symbol, count in claimed.items():
            assert count <= secret.count(symbol)
