"""Core Crack the Code game logic: session state and its transitions."""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Sequence
import logging

from .evaluator import Mark, evaluate, is_solved
from .generator import Difficulty, RandomSource, alphabet_for, generate

logger = logging.getLogger(__name__)

CODE_LENGTH_MIN = 3
CODE_LENGTH_MAX = 10
MAX_ATTEMPTS = 10
FORFEIT_THRESHOLD = 10
DISPLAY_WINDOW = 5


class AttemptMode(str, Enum):
    """Whether the session caps the number of attempts."""
    LIMITED = "limited"
    INFINITE = "infinite"


class Status(str, Enum):
    ACTIVE = "active"
    WON = "won"
    LOST = "lost"


def clamp_length(code_length: int) -> int:
    """Clamp a requested code length into the supported range."""
    return max(CODE_LENGTH_MIN, min(CODE_LENGTH_MAX, int(code_length)))


@dataclass(frozen=True)
class GameConfig:
    """Configuration for a Crack the Code session."""
    code_length: int = 4
    difficulty: Difficulty = Difficulty.NORMAL
    attempt_mode: AttemptMode = AttemptMode.LIMITED
    max_attempts: int = MAX_ATTEMPTS  # cap in limited mode
    forfeit_threshold: int = FORFEIT_THRESHOLD
    display_window: int = DISPLAY_WINDOW  # attempts shown in infinite mode

    def __post_init__(self):
        # Frozen, so normalize through object.__setattr__
        object.__setattr__(self, "code_length", clamp_length(self.code_length))
        object.__setattr__(self, "difficulty", Difficulty(self.difficulty))
        object.__setattr__(self, "attempt_mode", AttemptMode(self.attempt_mode))

    @property
    def alphabet(self) -> str:
        return alphabet_for(self.difficulty)


@dataclass(frozen=True)
class Attempt:
    """One accepted guess and its feedback."""
    index: int
    guess: tuple[str, ...]
    feedback: tuple[Mark, ...]

    @property
    def solved(self) -> bool:
        return is_solved(self.feedback)


@dataclass(frozen=True)
class GameSession:
    """
    Complete state of one game.

    Sessions are immutable values: every transition returns a new session,
    and a rejected action returns the session it was given.
    """
    config: GameConfig
    secret: tuple[str, ...]
    attempts: tuple[Attempt, ...] = ()
    status: Status = Status.ACTIVE
    forfeited: bool = False

    @property
    def attempts_used(self) -> int:
        return len(self.attempts)

    @property
    def is_over(self) -> bool:
        return self.status is not Status.ACTIVE


@dataclass
class SessionSnapshot:
    """Read-only view of a session for players and front ends."""
    status: Status
    config: GameConfig
    attempts: list[Attempt]
    visible_attempts: list[Attempt]
    attempts_used: int
    attempts_remaining: Optional[int]
    latest_feedback: Optional[tuple[Mark, ...]]
    revealed_secret: Optional[str]
    forfeited: bool
    can_forfeit: bool


def _normalize_secret(config: GameConfig, secret: Sequence[str]) -> tuple[str, ...]:
    symbols = tuple(str(s).upper() for s in secret)
    if len(symbols) != config.code_length:
        raise ValueError(
            f"Secret must have exactly {config.code_length} symbols, got {len(symbols)}"
        )
    invalid = [s for s in symbols if len(s) != 1 or s not in config.alphabet]
    if invalid:
        raise ValueError(
            f"Secret symbols {invalid} are not in the {config.difficulty.value} alphabet"
        )
    return symbols


def new_game(config: GameConfig, rng: Optional[RandomSource] = None,
             secret: Optional[Sequence[str]] = None) -> GameSession:
    """
    Start a fresh session.

    Args:
        config: Game configuration (code length is already clamped)
        rng: Random source for secret generation
        secret: Optional predefined secret. If None, generates random secret.

    Raises:
        ValueError: If a predefined secret does not fit the configuration
    """
    if secret is not None:
        code = _normalize_secret(config, secret)
    else:
        code = generate(config.code_length, config.difficulty, rng)

    logger.info(
        "New game: length=%d difficulty=%s mode=%s",
        config.code_length, config.difficulty.value, config.attempt_mode.value,
    )
    return GameSession(config=config, secret=code)


def _normalize_guess(session: GameSession, guess: Sequence[Optional[str]]) -> Optional[tuple[str, ...]]:
    """Upper-cased guess, or None when a slot is not one character or the length is wrong."""
    if guess is None or len(guess) != session.config.code_length:
        return None
    if any(symbol is None or len(str(symbol)) != 1 for symbol in guess):
        return None
    return tuple(str(symbol).upper() for symbol in guess)


def submit_guess(session: GameSession, guess: Sequence[Optional[str]]) -> GameSession:
    """
    Evaluate a guess and advance the session.

    A submission on a finished session, or with an empty or multi-character
    slot or the wrong length, is ignored and the same session is returned.
    """
    if session.is_over:
        logger.debug("Guess ignored: game is already %s", session.status.value)
        return session

    symbols = _normalize_guess(session, guess)
    if symbols is None:
        logger.debug("Guess ignored: incomplete guess %r", guess)
        return session

    feedback = evaluate(session.secret, symbols)
    attempt = Attempt(index=session.attempts_used + 1, guess=symbols, feedback=feedback)
    attempts = session.attempts + (attempt,)

    config = session.config
    status = Status.ACTIVE
    if is_solved(feedback):
        status = Status.WON
    elif config.attempt_mode is AttemptMode.LIMITED and len(attempts) >= config.max_attempts:
        status = Status.LOST

    if status is not Status.ACTIVE:
        logger.info("Game %s after %d attempt(s)", status.value, len(attempts))

    return replace(session, attempts=attempts, status=status)


def can_forfeit(session: GameSession) -> bool:
    """Forfeit needs extreme difficulty, an active game and enough attempts."""
    return (
        session.status is Status.ACTIVE
        and session.config.difficulty is Difficulty.EXTREME
        and session.attempts_used >= session.config.forfeit_threshold
    )


def forfeit(session: GameSession) -> GameSession:
    """Give up: the session is lost without consuming an attempt."""
    if not can_forfeit(session):
        logger.debug("Forfeit ignored: not available")
        return session

    logger.info("Game forfeited after %d attempt(s)", session.attempts_used)
    return replace(session, status=Status.LOST, forfeited=True)


def attempts_remaining(session: GameSession) -> Optional[int]:
    """Attempts left in limited mode; None when attempts are unlimited."""
    if session.config.attempt_mode is AttemptMode.INFINITE:
        return None
    return max(0, session.config.max_attempts - session.attempts_used)


def snapshot(session: GameSession) -> SessionSnapshot:
    """Build the consumer-facing view of a session."""
    attempts = list(session.attempts)
    if session.config.attempt_mode is AttemptMode.INFINITE:
        visible = attempts[-session.config.display_window:] if session.config.display_window > 0 else []
    else:
        visible = list(attempts)

    return SessionSnapshot(
        status=session.status,
        config=session.config,
        attempts=attempts,
        visible_attempts=visible,
        attempts_used=session.attempts_used,
        attempts_remaining=attempts_remaining(session),
        latest_feedback=attempts[-1].feedback if attempts else None,
        revealed_secret="".join(session.secret) if session.status is Status.LOST else None,
        forfeited=session.forfeited,
        can_forfeit=can_forfeit(session),
    )


def validate_guess(config: GameConfig, guess) -> Optional[str]:
    """Validate a player's guess. Returns error message or None."""
    if not isinstance(guess, (list, tuple)):
        return "Guess must be a list of symbols"

    if len(guess) != config.code_length:
        return f"Guess must have exactly {config.code_length} symbols"

    if any(not isinstance(s, str) or s == "" for s in guess):
        return "Every position must be filled"

    if any(len(s) != 1 for s in guess):
        return "Each position takes a single character"

    invalid = [s for s in guess if s.upper() not in config.alphabet]
    if invalid:
        return f"Symbols {invalid} are not allowed; use {config.alphabet}"

    return None


class CrackTheCodeGame:
    """Holds the current session for an interactive front end."""

    def __init__(self, config: Optional[GameConfig] = None,
                 rng: Optional[RandomSource] = None,
                 secret: Optional[Sequence[str]] = None):
        """
        Initialize and start a new game.

        Args:
            config: Game configuration; defaults to GameConfig()
            rng: Random source used for every secret this game generates
            secret: Optional predefined secret for the first session
        """
        self.config = config or GameConfig()
        self.rng = rng
        self.session = new_game(self.config, rng=self.rng, secret=secret)

    def configure(self, code_length: int, difficulty: Difficulty,
                  attempt_mode: AttemptMode) -> SessionSnapshot:
        """Apply new settings and start a new session with them."""
        self.config = replace(
            self.config,
            code_length=code_length,
            difficulty=difficulty,
            attempt_mode=attempt_mode,
        )
        return self.new_game()

    def new_game(self) -> SessionSnapshot:
        self.session = new_game(self.config, rng=self.rng)
        return self.snapshot()

    def submit_guess(self, symbols: Sequence[Optional[str]]) -> SessionSnapshot:
        self.session = submit_guess(self.session, symbols)
        return self.snapshot()

    def forfeit(self) -> SessionSnapshot:
        self.session = forfeit(self.session)
        return self.snapshot()

    def snapshot(self) -> SessionSnapshot:
        return snapshot(self.session)

    @property
    def status(self) -> Status:
        return self.session.status
