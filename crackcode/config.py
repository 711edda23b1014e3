"""
Environment-driven defaults.

Values come from environment variables, optionally loaded from a .env file
in the working directory. Provider API keys for litellm are read from the
same environment.
"""

import os

from dotenv import load_dotenv

load_dotenv()


class Config:
    """Defaults for the command line, overridable through the environment."""

    LOG_LEVEL = os.getenv('CRACKCODE_LOG_LEVEL', 'WARNING')
    OUTPUT_DIR = os.getenv('CRACKCODE_OUTPUT_DIR', 'outputs')

    # Safety limits per game
    MAX_PLAYER_CALLS = int(os.getenv('CRACKCODE_MAX_PLAYER_CALLS', 100))
    TIMEOUT_SECONDS = float(os.getenv('CRACKCODE_TIMEOUT_SECONDS', 300))

    LLM_MODEL = os.getenv('CRACKCODE_LLM_MODEL')
