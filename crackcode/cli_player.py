"""Player backed by a local agent CLI (claude, codex, gemini)."""

from dataclasses import dataclass
from typing import Optional
import json
import logging
import subprocess

import psutil

from .game import GameConfig, SessionSnapshot
from .prompting import build_system_prompt, build_turn_message, empty_result, parse_response

logger = logging.getLogger(__name__)

CLI_TOOLS = ('claude', 'codex', 'gemini')


class CLIError(Exception):
    """Base exception for CLI-related issues."""
    pass


class CLINotFoundError(CLIError):
    """Raised when the CLI executable is not found."""
    pass


class CLITimeoutError(CLIError):
    """Raised when the CLI command times out."""
    pass


@dataclass
class CLIConfig:
    """Configuration for CLI calls."""
    cli_tool: str  # 'claude', 'codex', or 'gemini'
    timeout: int = 120  # seconds


def detect_parent_cli() -> Optional[str]:
    """
    Walk up the process tree looking for a known agent CLI.

    Returns the CLI tool name or None if not detected.
    """
    try:
        parent = psutil.Process().parent()
        while parent:
            name = parent.name().lower()
            for cli in CLI_TOOLS:
                if cli in name:
                    return cli
            parent = parent.parent()
    except (psutil.NoSuchProcess, psutil.AccessDenied):
        pass

    return None


class CLIPlayer:
    """Player that uses a local CLI tool to generate guesses."""

    def __init__(self, game_config: GameConfig, cli_config: CLIConfig):
        if cli_config.cli_tool not in CLI_TOOLS:
            raise CLIError(f"Unknown CLI tool: {cli_config.cli_tool}")
        self.game_config = game_config
        self.cli_config = cli_config
        self.system_prompt = build_system_prompt(game_config)

    def get_next_guess(self, snapshot: SessionSnapshot, retry_count: int = 0) -> dict:
        """Get next guess from CLI tool. CLI tools don't report token counts."""
        try:
            prompt = self._build_prompt(snapshot, retry_count)
            response = self._call_cli(prompt)
        except CLIError as e:
            logger.warning("%s", e)
            return empty_result(error=str(e))

        parsed = parse_response(self._unwrap(response))
        if parsed is None:
            return empty_result(response, "Failed to parse response")

        return {
            "guess": parsed["guess"],
            "forfeit": parsed["forfeit"],
            "raw_response": response,
            "parsed": True,
            "error": None,
            "tokens": {"input": 0, "output": 0}
        }

    def _build_prompt(self, snapshot: SessionSnapshot, retry_count: int) -> str:
        return "\n".join([
            f"System: {self.system_prompt}",
            f"Human: {build_turn_message(snapshot, retry_count)}",
            "\nAssistant:",
        ])

    def _build_json_schema(self) -> str:
        """JSON schema for claude's structured output."""
        schema = {
            "type": "object",
            "properties": {
                "guess": {
                    "type": "string",
                    "minLength": self.game_config.code_length,
                    "maxLength": self.game_config.code_length
                },
                "forfeit": {"type": "boolean"}
            }
        }
        return json.dumps(schema)

    def _command(self, prompt: str) -> tuple[list[str], Optional[str]]:
        """Command line and stdin for the configured tool."""
        cli_tool = self.cli_config.cli_tool
        if cli_tool == 'claude':
            return ['claude', '--print', '--output-format', 'json',
                    '--json-schema', self._build_json_schema()], prompt
        if cli_tool == 'codex':
            return ['codex', 'exec', prompt], None
        return ['gemini', '--output-format', 'json', prompt], None

    def _call_cli(self, prompt: str) -> str:
        cli_tool = self.cli_config.cli_tool
        cmd, stdin_input = self._command(prompt)

        try:
            result = subprocess.run(
                cmd,
                input=stdin_input,
                capture_output=True,
                text=True,
                timeout=self.cli_config.timeout
            )
        except subprocess.TimeoutExpired:
            raise CLITimeoutError(f"{cli_tool} CLI timed out after {self.cli_config.timeout} seconds")
        except FileNotFoundError:
            raise CLINotFoundError(
                f"{cli_tool} CLI not found. Please ensure '{cli_tool}' is installed and in PATH"
            )
        except OSError as e:
            raise CLIError(f"Error calling {cli_tool}: {e}")

        if result.returncode != 0:
            raise CLIError(f"{cli_tool} CLI error: {result.stderr or 'Unknown error'}")

        return result.stdout.strip()

    @staticmethod
    def _unwrap(response: str) -> str:
        """Gemini and claude wrap output in {"response"|"result": "...", ...}."""
        try:
            wrapper = json.loads(response)
        except json.JSONDecodeError:
            return response

        if isinstance(wrapper, dict):
            if isinstance(wrapper.get("structured_output"), dict):
                return json.dumps(wrapper["structured_output"])
            for key in ("response", "result"):
                if isinstance(wrapper.get(key), str):
                    return wrapper[key]
        return response
