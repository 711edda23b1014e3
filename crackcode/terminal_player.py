"""Human player at the terminal."""

from typing import Callable, Optional

from tabulate import tabulate

from .evaluator import Mark, render_feedback
from .game import GameConfig, SessionSnapshot
from .prompting import describe_rules, split_guess

MARK_LEGEND = "+ right place   ~ wrong place   - not in code"


def render_board(snapshot: SessionSnapshot) -> str:
    """Guess history as a table, newest last."""
    rows = []
    for attempt in snapshot.visible_attempts:
        rows.append([
            attempt.index,
            " ".join(attempt.guess),
            render_feedback(attempt.feedback),
            attempt.feedback.count(Mark.EXACT),
            attempt.feedback.count(Mark.PRESENT),
        ])
    return tabulate(rows, headers=["#", "Guess", "Feedback", "+", "~"], tablefmt="simple")


class TerminalPlayer:
    """Player that reads guesses typed at the terminal."""

    def __init__(self, game_config: GameConfig, input_func: Optional[Callable[[str], str]] = None):
        self.game_config = game_config
        self.input_func = input_func or input
        self.model_label = "human"
        self._rules_shown = False

    def get_next_guess(self, snapshot: SessionSnapshot, retry_count: int = 0) -> dict:
        if not self._rules_shown:
            print("=== Crack the Code ===")
            print(describe_rules(self.game_config))
            print(f"Symbols: {self.game_config.alphabet}")
            print("Type your guess (e.g. 1234). Type 'quit' to exit.\n")
            self._rules_shown = True

        if snapshot.visible_attempts:
            print()
            print(render_board(snapshot))
            print(MARK_LEGEND)
        if retry_count > 0:
            print("Invalid guess, try again.")
        if snapshot.attempts_remaining is not None:
            print(f"Attempts left: {snapshot.attempts_remaining}")
        if snapshot.can_forfeit:
            print("Type 'forfeit' to give up and reveal the code.")

        user_input = self.input_func("Enter your guess: ").strip()

        if user_input.lower() in ('quit', 'exit'):
            raise KeyboardInterrupt("User quit")

        result = {
            "guess": None,
            "forfeit": False,
            "raw_response": user_input,
            "parsed": True,
            "error": None,
            "tokens": {"input": 0, "output": 0},
        }
        if user_input.lower() == 'forfeit':
            result["forfeit"] = True
        elif user_input:
            result["guess"] = split_guess(user_input)
        else:
            result["parsed"] = False
            result["error"] = "Empty guess"
        return result

    def game_over(self, snapshot: SessionSnapshot):
        """Show the finished board, including the final guess."""
        if snapshot.visible_attempts:
            print()
            print(render_board(snapshot))
            print(MARK_LEGEND)
