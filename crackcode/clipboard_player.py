"""Manual input mode using clipboard for web UI interaction."""

import logging

import pyperclip

from .game import GameConfig, SessionSnapshot
from .prompting import build_system_prompt, build_turn_message, parse_response

logger = logging.getLogger(__name__)


class ClipboardPlayer:
    """Player that uses manual input with clipboard assistance for web UIs."""

    def __init__(self, game_config: GameConfig, model_label: str = "manual"):
        """
        Initialize clipboard player.

        Args:
            game_config: Game configuration
            model_label: Label for the model being tested manually
        """
        self.game_config = game_config
        self.model_label = model_label
        self.system_prompt = build_system_prompt(game_config)

    def get_next_guess(self, snapshot: SessionSnapshot, retry_count: int = 0) -> dict:
        """Get guess via manual input with clipboard assistance."""
        prompt = self.system_prompt + "\n\n" + build_turn_message(snapshot, retry_count)

        pyperclip.copy(prompt)

        print("\n" + "=" * 70)
        print("PROMPT COPIED TO CLIPBOARD")
        print("=" * 70)
        print(prompt)
        print("=" * 70)
        print("\nPaste this into your LLM web interface and copy the response.")
        print("\nOptions:")
        print("  - Press Enter to paste from clipboard")
        print("  - Type/paste the response manually")
        print("  - Type 'quit' to exit")
        print()

        user_input = input("Enter response: ").strip()

        if user_input.lower() == 'quit':
            raise KeyboardInterrupt("User quit")

        if not user_input:
            try:
                user_input = pyperclip.paste()
                print(f"\nPasted from clipboard:\n{user_input[:200]}...\n")
            except pyperclip.PyperclipException as e:
                logger.warning("Clipboard paste failed: %s", e)
                print("Could not paste from clipboard. Please type the response.")
                user_input = input("Enter response: ").strip()

        parsed = parse_response(user_input)

        return {
            "guess": parsed["guess"] if parsed else None,
            "forfeit": parsed["forfeit"] if parsed else False,
            "raw_response": user_input,
            "parsed": parsed is not None,
            "error": None if parsed is not None else "Failed to parse response",
            "tokens": {"input": 0, "output": 0},
            "prompt_shown": prompt
        }
