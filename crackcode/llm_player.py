"""LLM API player using LiteLLM."""

from dataclasses import dataclass
from typing import Optional
import logging
import time

import litellm

from .game import GameConfig, SessionSnapshot
from .prompting import build_system_prompt, build_turn_message, empty_result, parse_response

logger = logging.getLogger(__name__)


@dataclass
class LLMConfig:
    """Configuration for LLM API calls."""
    model: str
    temperature: float = 0.7
    max_tokens: int = 500
    use_parser_fallback: bool = False
    parser_model: str = "gpt-3.5-turbo"
    max_retries: int = 1  # Retries for invalid guesses


class LLMPlayer:
    """Player that uses an LLM API to generate guesses."""

    def __init__(self, game_config: GameConfig, llm_config: LLMConfig):
        self.game_config = game_config
        self.llm_config = llm_config
        self.system_prompt = build_system_prompt(game_config)

    def get_next_guess(self, snapshot: SessionSnapshot, retry_count: int = 0) -> dict:
        """
        Get next guess from LLM.

        Returns:
            {
                "guess": list[str] | None,
                "forfeit": bool,
                "raw_response": str,
                "parsed": bool,
                "error": str | None,
                "tokens": dict  # {"input": int, "output": int}
            }
        """
        try:
            messages = [
                {"role": "system", "content": self.system_prompt},
                {"role": "user", "content": build_turn_message(snapshot, retry_count)},
            ]

            response = self._api_call_with_retry(messages)

            raw_response = response.choices[0].message.content or ""
            tokens = {
                "input": response.usage.prompt_tokens,
                "output": response.usage.completion_tokens
            }

            parsed = parse_response(raw_response)

            if parsed is None and self.llm_config.use_parser_fallback:
                parsed = self._fallback_parse(raw_response)

            if parsed is None:
                result = empty_result(raw_response, "Failed to parse response")
                result["tokens"] = tokens
                return result

            return {
                "guess": parsed["guess"],
                "forfeit": parsed["forfeit"],
                "raw_response": raw_response,
                "parsed": True,
                "error": None,
                "tokens": tokens
            }

        except Exception as e:
            logger.warning("LLM call failed for %s: %s", self.llm_config.model, e)
            return empty_result(error=str(e))

    def _api_call_with_retry(self, messages: list[dict], max_attempts: int = 3):
        """Make API call with exponential backoff for network errors."""
        for attempt in range(max_attempts):
            try:
                return litellm.completion(
                    model=self.llm_config.model,
                    messages=messages,
                    temperature=self.llm_config.temperature,
                    max_tokens=self.llm_config.max_tokens
                )
            except Exception as e:
                if attempt == max_attempts - 1:
                    raise
                wait_time = 2 ** attempt  # 1s, 2s, 4s
                logger.warning("API call failed (%s), retrying in %ds", e, wait_time)
                time.sleep(wait_time)

    def _fallback_parse(self, response: str) -> Optional[dict]:
        """Use parser model to extract guess from malformed response."""
        try:
            parser_prompt = f"""Extract the Crack the Code guess from this response.
The guess should be {self.game_config.code_length} symbols from {self.game_config.alphabet}.
If the response gives up instead, output {{"forfeit": true}}.

Response:
{response}

Output ONLY valid JSON in this exact format:
{{"guess": "{self.game_config.alphabet[:self.game_config.code_length]}"}}"""

            result = litellm.completion(
                model=self.llm_config.parser_model,
                messages=[{"role": "user", "content": parser_prompt}],
                temperature=0,
                max_tokens=100
            )

            return parse_response(result.choices[0].message.content or "")

        except Exception as e:
            logger.warning("Parser fallback failed: %s", e)
            return None
