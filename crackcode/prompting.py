"""Prompt text and response parsing shared by every player."""

from typing import Optional
import json
import re

from .evaluator import render_feedback
from .game import AttemptMode, GameConfig, SessionSnapshot
from .generator import FORCED_REPEAT_MIN_LENGTH, Difficulty

DIFFICULTY_RULES = {
    Difficulty.EASY: "Digits 0-9, no symbol appears twice.",
    Difficulty.NORMAL: "Digits 0-9, symbols may repeat.",
    Difficulty.HARD: f"Digits 0-9, symbols may repeat; codes of {FORCED_REPEAT_MIN_LENGTH} or more always contain a repeat.",
    Difficulty.EXTREME: "Digits 0-9 and letters A-Z, symbols may repeat.",
}

FENCED_JSON = re.compile(r'```(?:json)?\s*(\{.*?\})\s*```', re.DOTALL)
INLINE_JSON = re.compile(r'\{\s*"(?:guess|forfeit)"\s*:\s*(?:"[^"]*"|\[[^\]]*\]|true|false)\s*\}')


def describe_rules(config: GameConfig) -> str:
    """Human-readable rules for the configured game."""
    if config.attempt_mode is AttemptMode.LIMITED:
        attempts_text = f"You have a maximum of {config.max_attempts} guesses."
    else:
        attempts_text = "You have unlimited guesses."

    lines = [
        f"- The secret code has {config.code_length} positions",
        f"- {DIFFICULTY_RULES[config.difficulty]}",
        f"- {attempts_text}",
    ]
    if config.difficulty is Difficulty.EXTREME:
        lines.append(
            f"- After {config.forfeit_threshold} guesses you may give up to see the code."
        )
    return "\n".join(lines)


def build_system_prompt(config: GameConfig) -> str:
    """Build system prompt based on game configuration."""
    forfeit_text = ""
    if config.difficulty is Difficulty.EXTREME:
        forfeit_text = '\nOnce you are told you may forfeit, you can give up with {"forfeit": true}.'

    example = "".join(config.alphabet[i % len(config.alphabet)] for i in range(config.code_length))

    return f"""You are playing Crack the Code, a Mastermind variant.

RULES:
{describe_rules(config)}

FEEDBACK (one mark per position):
- + : correct symbol in the correct position
- ~ : symbol is in the code but in another position
- - : symbol is not in the code (or all its occurrences are already matched)

RESPONSE FORMAT:
Respond with ONLY a JSON object containing your guess as a string.
{{"guess": "{example}"}}{forfeit_text}

Do not include any other text or explanation outside the JSON object."""


def format_history(snapshot: SessionSnapshot) -> str:
    """Previous guesses and feedback as prompt text."""
    if not snapshot.attempts:
        return ""

    history_text = "Previous guesses:\n\n"
    for attempt in snapshot.visible_attempts:
        history_text += f"Turn {attempt.index}:\n"
        history_text += f"Guess: {''.join(attempt.guess)}\n"
        history_text += f"Feedback: {render_feedback(attempt.feedback)}\n\n"

    if len(snapshot.visible_attempts) < len(snapshot.attempts):
        hidden = len(snapshot.attempts) - len(snapshot.visible_attempts)
        history_text = f"({hidden} earlier guesses not shown)\n" + history_text
    return history_text


def build_turn_message(snapshot: SessionSnapshot, retry_count: int) -> str:
    """The user message for the next turn."""
    if not snapshot.attempts:
        message = "Make your first guess."
    elif retry_count > 0:
        message = format_history(snapshot) + "Your last guess was invalid. Please provide a valid guess in the correct JSON format."
    else:
        message = format_history(snapshot) + "Provide your next guess."

    if snapshot.attempts_remaining is not None:
        message += f"\nGuesses remaining: {snapshot.attempts_remaining}"
    if snapshot.can_forfeit:
        message += "\nYou may now forfeit."
    return message


def split_guess(text: str) -> list[str]:
    """Split '1234', '1 2 3 4' or '1,2,3,4' into upper-cased symbols."""
    text = text.strip()
    if re.search(r'[\s,]', text):
        return [s.upper() for s in re.split(r'[\s,]+', text) if s]
    return [c.upper() for c in text]


def _extract(data) -> Optional[dict]:
    if not isinstance(data, dict):
        return None

    if data.get("forfeit") is True:
        return {"guess": None, "forfeit": True}

    guess = data.get("guess")
    if isinstance(guess, str):
        return {"guess": split_guess(guess), "forfeit": False}
    if isinstance(guess, list):
        return {"guess": [str(s).upper() for s in guess], "forfeit": False}
    return None


def parse_response(response: str) -> Optional[dict]:
    """
    Extract a guess or forfeit from a player response.

    Tries, in order: the whole response as JSON, a fenced ```json block,
    and the last inline {"guess": ...} / {"forfeit": ...} object.

    Returns:
        {"guess": list[str] | None, "forfeit": bool}, or None if nothing parsed
    """
    try:
        parsed = _extract(json.loads(response.strip()))
        if parsed:
            return parsed
    except json.JSONDecodeError:
        pass

    json_match = FENCED_JSON.search(response)
    if json_match:
        try:
            parsed = _extract(json.loads(json_match.group(1)))
            if parsed:
                return parsed
        except json.JSONDecodeError:
            pass

    matches = list(INLINE_JSON.finditer(response))
    if matches:
        try:
            return _extract(json.loads(matches[-1].group(0)))
        except json.JSONDecodeError:
            pass

    return None


def empty_result(raw_response: str = "", error: Optional[str] = None) -> dict:
    """Player result for a turn that produced no usable guess."""
    return {
        "guess": None,
        "forfeit": False,
        "raw_response": raw_response,
        "parsed": False,
        "error": error,
        "tokens": {"input": 0, "output": 0},
    }
