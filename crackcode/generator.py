"""Secret code generation for each difficulty tier."""

from enum import Enum
from typing import Callable, Optional, Protocol
import logging
import random
import string

logger = logging.getLogger(__name__)

DIGITS = string.digits
ALPHANUMERIC = string.digits + string.ascii_uppercase

# Hard codes of at least this length always contain a repeated symbol
FORCED_REPEAT_MIN_LENGTH = 6


class Difficulty(str, Enum):
    """Difficulty tier governing the alphabet and repetition rules."""
    EASY = "easy"
    NORMAL = "normal"
    HARD = "hard"
    EXTREME = "extreme"


class RandomSource(Protocol):
    """Anything that can draw a uniform integer in [0, n)."""

    def randrange(self, n: int) -> int:
        ...


ALPHABETS = {
    Difficulty.EASY: DIGITS,
    Difficulty.NORMAL: DIGITS,
    Difficulty.HARD: DIGITS,
    Difficulty.EXTREME: ALPHANUMERIC,
}


def alphabet_for(difficulty: Difficulty) -> str:
    """Return the symbols a secret may be drawn from."""
    return ALPHABETS[Difficulty(difficulty)]


def _draw(alphabet: str, rng: RandomSource) -> str:
    return alphabet[rng.randrange(len(alphabet))]


def _draw_with_replacement(length: int, alphabet: str, rng: RandomSource) -> list[str]:
    return [_draw(alphabet, rng) for _ in range(length)]


def _generate_easy(length: int, rng: RandomSource) -> list[str]:
    """Unique symbols only, rejection-sampled."""
    alphabet = ALPHABETS[Difficulty.EASY]
    if length > len(alphabet):
        raise ValueError(
            f"Easy codes cannot be longer than {len(alphabet)} symbols, got {length}"
        )

    code: list[str] = []
    while len(code) < length:
        symbol = _draw(alphabet, rng)
        if symbol not in code:
            code.append(symbol)
    return code


def _generate_normal(length: int, rng: RandomSource) -> list[str]:
    return _draw_with_replacement(length, ALPHABETS[Difficulty.NORMAL], rng)


def _generate_hard(length: int, rng: RandomSource) -> list[str]:
    """
    Draw with replacement, then force a repeat on longer codes.

    When a code of FORCED_REPEAT_MIN_LENGTH or more came out with no
    repeated symbol, a random position takes over its right-hand
    neighbour's symbol (wrapping around at the end).
    """
    code = _draw_with_replacement(length, ALPHABETS[Difficulty.HARD], rng)
    if length >= FORCED_REPEAT_MIN_LENGTH and len(set(code)) == len(code):
        i = rng.randrange(length)
        code[i] = code[(i + 1) % length]
    return code


def _generate_extreme(length: int, rng: RandomSource) -> list[str]:
    return _draw_with_replacement(length, ALPHABETS[Difficulty.EXTREME], rng)


STRATEGIES: dict[Difficulty, Callable[[int, RandomSource], list[str]]] = {
    Difficulty.EASY: _generate_easy,
    Difficulty.NORMAL: _generate_normal,
    Difficulty.HARD: _generate_hard,
    Difficulty.EXTREME: _generate_extreme,
}


def generate(length: int, difficulty: Difficulty,
             rng: Optional[RandomSource] = None) -> tuple[str, ...]:
    """
    Generate a secret code.

    Args:
        length: Code length, already validated by the caller
        difficulty: Difficulty tier selecting the generation strategy
        rng: Random source; defaults to the `random` module itself so
            that `random.seed()` makes runs reproducible

    Returns:
        The secret as a tuple of single-character symbols
    """
    if rng is None:
        rng = random
    difficulty = Difficulty(difficulty)
    code = STRATEGIES[difficulty](length, rng)
    logger.debug("Generated %d-symbol %s code", length, difficulty.value)
    return tuple(code)
