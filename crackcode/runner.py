"""Game session management and result tracking."""

from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from typing import Optional, Sequence
import logging
import time

from .evaluator import render_feedback
from .game import CrackTheCodeGame, GameConfig, Status, validate_guess
from .generator import RandomSource
from .llm_player import LLMPlayer
from .cli_player import CLIPlayer

logger = logging.getLogger(__name__)


@dataclass
class GameResult:
    """Complete result of a game session."""
    config: dict  # GameConfig as dict
    player_config: dict  # mode/model info as dict
    secret: str
    turns: list[dict]
    outcome: str  # "win" | "loss" | "forfeit" | "error"
    attempts_used: int
    timestamp: str
    duration_seconds: float
    total_tokens: dict  # {"input": int, "output": int}


class SessionRunner:
    """Plays one game with a player, with retry logic and safety limits."""

    def __init__(self, game_config: GameConfig, player, max_retries: int = 1,
                 secret: Optional[Sequence[str]] = None, max_player_calls: float = 100,
                 timeout_seconds: float = 300, rng: Optional[RandomSource] = None):
        """
        Initialize game session.

        Args:
            game_config: Game configuration
            player: Any object with get_next_guess(snapshot, retry_count), and
                optionally game_over(snapshot) to see the finished board
            max_retries: Maximum retries for invalid guesses per turn
            secret: Optional predefined secret code
            max_player_calls: Maximum turns requested from the player (default: 100, inf for no cap)
            timeout_seconds: Maximum time allowed per game in seconds (default: 300)
            rng: Random source for secret generation
        """
        self.game_config = game_config
        self.player = player
        self.max_retries = max_retries
        self.predefined_secret = secret
        self.max_player_calls = max_player_calls
        self.timeout_seconds = timeout_seconds
        self.rng = rng

    def run(self) -> GameResult:
        """Run a complete game and return results."""
        start_time = time.time()
        game = CrackTheCodeGame(self.game_config, rng=self.rng, secret=self.predefined_secret)

        turns = []
        total_tokens = {"input": 0, "output": 0}
        outcome = None
        player_calls = 0

        try:
            while game.status is Status.ACTIVE:
                elapsed = time.time() - start_time
                if elapsed > self.timeout_seconds:
                    outcome = "error"
                    turns.append({"error": f"Game timeout after {self.timeout_seconds}s (safety limit)"})
                    break

                if player_calls >= self.max_player_calls:
                    outcome = "error"
                    turns.append({"error": f"Max player calls reached ({self.max_player_calls}) (safety limit)"})
                    break

                turn_result = self._execute_turn(game, len(turns) + 1)
                turns.append(turn_result)
                player_calls += 1

                if "tokens" in turn_result:
                    total_tokens["input"] += turn_result["tokens"]["input"]
                    total_tokens["output"] += turn_result["tokens"]["output"]

        except KeyboardInterrupt:
            outcome = "error"
            turns.append({"error": "Interrupted"})
        except Exception as e:
            logger.exception("Game aborted")
            outcome = "error"
            turns.append({"error": f"Fatal error: {str(e)}"})

        game_over = getattr(self.player, "game_over", None)
        if game_over is not None:
            game_over(game.snapshot())

        if outcome is None:
            outcome = self._outcome(game)

        duration = time.time() - start_time
        session = game.session

        return GameResult(
            config=asdict(self.game_config),
            player_config=self._get_player_config(),
            secret="".join(session.secret),
            turns=turns,
            outcome=outcome,
            attempts_used=session.attempts_used,
            timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            duration_seconds=round(duration, 2),
            total_tokens=total_tokens
        )

    @staticmethod
    def _outcome(game: CrackTheCodeGame) -> str:
        if game.status is Status.WON:
            return "win"
        if game.session.forfeited:
            return "forfeit"
        return "loss"

    def _execute_turn(self, game: CrackTheCodeGame, turn_number: int) -> dict:
        """Execute a single turn with retry logic. Rejected guesses consume no attempt."""
        retry_count = 0

        while True:
            snapshot = game.snapshot()
            player_result = self.player.get_next_guess(snapshot, retry_count)

            turn_data = {
                "turn_number": turn_number,
                "raw_response": player_result["raw_response"],
                "parsed": player_result["parsed"],
                "guess": None,
                "feedback": None,
                "error": player_result.get("error"),
            }
            if "prompt_shown" in player_result:
                turn_data["prompt_shown"] = player_result["prompt_shown"]
            if "tokens" in player_result:
                turn_data["tokens"] = player_result["tokens"]

            error = self._apply(game, player_result, turn_data)
            if error is None:
                return turn_data

            turn_data["error"] = error
            if retry_count >= self.max_retries:
                logger.warning("Turn %d failed after %d retries: %s", turn_number, retry_count, error)
                return turn_data
            retry_count += 1

    def _apply(self, game: CrackTheCodeGame, player_result: dict, turn_data: dict) -> Optional[str]:
        """Apply the player's move to the game. Returns error message or None."""
        if not player_result["parsed"]:
            return player_result.get("error") or "Failed to parse response"

        if player_result.get("forfeit"):
            if not game.snapshot().can_forfeit:
                return "Forfeit is not available"
            game.forfeit()
            turn_data["forfeit"] = True
            return None

        guess = player_result["guess"]
        turn_data["guess"] = "".join(guess) if guess else None
        error = validate_guess(self.game_config, guess)
        if error:
            return error

        snapshot = game.submit_guess(guess)
        turn_data["feedback"] = render_feedback(snapshot.latest_feedback)
        turn_data["status"] = snapshot.status.value
        return None

    def _get_player_config(self) -> dict:
        """Get player configuration as dict."""
        if isinstance(self.player, LLMPlayer):
            return {
                "mode": "api",
                "model": self.player.llm_config.model,
                "temperature": self.player.llm_config.temperature,
                "max_tokens": self.player.llm_config.max_tokens,
                "use_parser_fallback": self.player.llm_config.use_parser_fallback,
                "parser_model": self.player.llm_config.parser_model if self.player.llm_config.use_parser_fallback else None
            }
        if isinstance(self.player, CLIPlayer):
            return {"mode": "cli", "model": f"{self.player.cli_config.cli_tool}-cli"}
        return {
            "mode": type(self.player).__name__.replace("Player", "").lower() or "custom",
            "model": getattr(self.player, "model_label", None),
        }
