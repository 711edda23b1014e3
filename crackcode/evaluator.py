"""Per-position feedback for a guess against the secret."""

from enum import Enum
from typing import Optional, Sequence


class Mark(str, Enum):
    """Feedback for one guess position."""
    EXACT = "exact"      # right symbol, right position
    PRESENT = "present"  # right symbol, wrong position
    ABSENT = "absent"    # no unclaimed occurrence left in the secret

    @property
    def glyph(self) -> str:
        return _GLYPHS[self]


_GLYPHS = {Mark.EXACT: "+", Mark.PRESENT: "~", Mark.ABSENT: "-"}


def evaluate(secret: Sequence[str], guess: Sequence[str]) -> tuple[Mark, ...]:
    """
    Score a guess against the secret, position by position.

    Algorithm:
    1. Exact matches claim their secret position first
    2. Each remaining guess symbol, left to right, claims the first
       unclaimed secret position holding the same symbol (Present),
       or gets Absent when none is left

    A secret occurrence is claimed at most once, so repeated symbols are
    never double-counted: secret 1123 against guess 1111 yields
    Exact, Exact, Absent, Absent.

    Raises:
        ValueError: If secret and guess differ in length
    """
    if len(secret) != len(guess):
        raise ValueError(
            f"Secret and guess must be the same length ({len(secret)} != {len(guess)})"
        )

    remaining: list[Optional[str]] = list(secret)
    feedback: list[Optional[Mark]] = [None] * len(secret)

    for i, symbol in enumerate(guess):
        if symbol == secret[i]:
            feedback[i] = Mark.EXACT
            remaining[i] = None

    for i, symbol in enumerate(guess):
        if feedback[i] is not None:
            continue
        if symbol in remaining:
            feedback[i] = Mark.PRESENT
            remaining[remaining.index(symbol)] = None
        else:
            feedback[i] = Mark.ABSENT

    return tuple(feedback)


def is_solved(feedback: Sequence[Mark]) -> bool:
    """True when every position is an exact match."""
    return len(feedback) > 0 and all(mark is Mark.EXACT for mark in feedback)


def render_feedback(feedback: Sequence[Mark]) -> str:
    """Compact text form, e.g. '++~-'."""
    return "".join(mark.glyph for mark in feedback)
