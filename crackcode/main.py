"""CLI entry point for Crack the Code."""

import argparse
import json
import logging
import random
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Optional

from .cli_player import CLI_TOOLS, CLIConfig, CLIPlayer, detect_parent_cli
from .clipboard_player import ClipboardPlayer
from .config import Config
from .game import (
    CODE_LENGTH_MAX, CODE_LENGTH_MIN, DISPLAY_WINDOW, FORFEIT_THRESHOLD, MAX_ATTEMPTS,
    AttemptMode, GameConfig,
)
from .generator import Difficulty
from .llm_player import LLMConfig, LLMPlayer
from .prompting import split_guess
from .runner import SessionRunner
from .terminal_player import TerminalPlayer


def parse_secret(secret_str: str, config: GameConfig) -> list[str]:
    """Parse a predefined secret such as '1234' or '1,2,3,4'."""
    secret = split_guess(secret_str)
    if len(secret) != config.code_length:
        raise ValueError(f"Secret must have {config.code_length} symbols")
    invalid = [s for s in secret if len(s) != 1 or s not in config.alphabet]
    if invalid:
        raise ValueError(f"Secret symbols must be drawn from {config.alphabet}")
    return secret


def resolve_mode(mode: str, model: Optional[str]) -> tuple[str, Optional[str]]:
    """
    Decide the execution mode.

    Returns:
        (mode, cli_tool) where cli_tool is set only for cli mode.
        auto picks api when a model is given, cli when launched from an
        agent CLI, and terminal otherwise.
    """
    if mode == 'auto':
        if model:
            return 'api', None
        detected = detect_parent_cli()
        if detected:
            return 'cli', detected
        return 'terminal', None

    if mode == 'cli':
        if model:
            if model not in CLI_TOOLS:
                raise ValueError(f"For CLI mode, --model must be one of: {', '.join(CLI_TOOLS)}")
            return 'cli', model
        detected = detect_parent_cli()
        if not detected:
            raise ValueError("--mode cli requires running from an agent CLI or --model "
                             f"set to one of: {', '.join(CLI_TOOLS)}")
        return 'cli', detected

    return mode, None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Crack the Code - a Mastermind-style code-breaking game",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Play at the terminal
  python -m crackcode.main --difficulty hard --length 6

  # Endless extreme game (forfeit unlocks after 10 guesses)
  python -m crackcode.main --difficulty extreme --attempt-mode infinite

  # Let an LLM play (API keys from the environment or .env)
  python -m crackcode.main --model gpt-4 --runs 5 --output outputs/gpt4.jsonl

  # Relay prompts to a web LLM through the clipboard
  python -m crackcode.main --mode clipboard --model chatgpt-web
        """
    )

    parser.add_argument('--mode', choices=['auto', 'terminal', 'api', 'cli', 'clipboard'], default='auto',
                        help='Who plays: auto (default), terminal (you), api (LLM via litellm), '
                             'cli (local agent CLI), clipboard (manual relay)')
    parser.add_argument('--model', type=str, default=Config.LLM_MODEL,
                        help='LiteLLM model string (api), CLI tool name (cli) or label (clipboard)')

    game_group = parser.add_argument_group('game configuration')
    game_group.add_argument('--length', type=int, default=4,
                            help=f'Code length, clamped to {CODE_LENGTH_MIN}-{CODE_LENGTH_MAX} (default: 4)')
    game_group.add_argument('--difficulty', choices=[d.value for d in Difficulty], default='normal',
                            help='Difficulty (default: normal)')
    game_group.add_argument('--attempt-mode', choices=[m.value for m in AttemptMode], default='limited',
                            help='limited (capped attempts) or infinite (default: limited)')
    game_group.add_argument('--max-attempts', type=int, default=MAX_ATTEMPTS,
                            help=f'Attempt cap in limited mode (default: {MAX_ATTEMPTS})')
    game_group.add_argument('--forfeit-threshold', type=int, default=FORFEIT_THRESHOLD,
                            help=f'Attempts before forfeit unlocks on extreme (default: {FORFEIT_THRESHOLD})')
    game_group.add_argument('--window', type=int, default=DISPLAY_WINDOW,
                            help=f'Attempts shown in infinite mode (default: {DISPLAY_WINDOW})')
    game_group.add_argument('--secret', type=str, default=None,
                            help='Predefined secret (e.g., "1234" or "1,2,3,4")')

    llm_group = parser.add_argument_group('llm configuration (api mode only)')
    llm_group.add_argument('--temperature', type=float, default=0.7,
                           help='Temperature (default: 0.7)')
    llm_group.add_argument('--max-tokens', type=int, default=500,
                           help='Max tokens (default: 500)')
    llm_group.add_argument('--parser-fallback', action='store_true',
                           help='Enable parser fallback for malformed responses')
    llm_group.add_argument('--parser-model', type=str, default='gpt-3.5-turbo',
                           help='Model for parsing fallback (default: gpt-3.5-turbo)')
    llm_group.add_argument('--max-retries', type=int, default=1,
                           help='Max retries for invalid guesses per turn (default: 1)')

    exec_group = parser.add_argument_group('execution')
    exec_group.add_argument('--runs', type=int, default=1,
                            help='Number of games to play (default: 1)')
    exec_group.add_argument('--output', type=str, default=None,
                            help='Append results as JSONL to this file')
    exec_group.add_argument('--save', action='store_true',
                            help=f'Append results to {Config.OUTPUT_DIR}/results_TIMESTAMP.jsonl')
    exec_group.add_argument('--seed', type=int, default=None,
                            help='Random seed for reproducibility')
    exec_group.add_argument('--verbose', action='store_true',
                            help='Verbose logging')
    exec_group.add_argument('--max-player-calls', type=int, default=None,
                            help=f'Maximum turns per game (safety limit, default: {Config.MAX_PLAYER_CALLS} '
                                 'for api and cli players, none for people)')
    exec_group.add_argument('--timeout', type=float, default=None,
                            help=f'Maximum seconds per game (safety limit, default: {Config.TIMEOUT_SECONDS:g} '
                                 'for api and cli players, none for people)')
    return parser


def build_player(mode: str, cli_tool: Optional[str], game_config: GameConfig, args):
    """Create the player for the resolved mode."""
    if mode == 'api':
        llm_config = LLMConfig(
            model=args.model,
            temperature=args.temperature,
            max_tokens=args.max_tokens,
            use_parser_fallback=args.parser_fallback,
            parser_model=args.parser_model,
            max_retries=args.max_retries
        )
        return LLMPlayer(game_config, llm_config)
    if mode == 'cli':
        return CLIPlayer(game_config, CLIConfig(cli_tool=cli_tool))
    if mode == 'clipboard':
        return ClipboardPlayer(game_config, args.model or "web-ui")
    return TerminalPlayer(game_config)


def print_result(result, verbose: bool):
    if result.outcome == "win":
        print(f"  Cracked the code in {result.attempts_used} attempt(s)!")
    elif result.outcome == "loss":
        print(f"  Out of attempts. The code was: {result.secret}")
    elif result.outcome == "forfeit":
        print(f"  Forfeited after {result.attempts_used} attempt(s). The code was: {result.secret}")
    else:
        print(f"  Error: {result.turns[-1].get('error', 'Unknown error') if result.turns else 'Unknown error'}")

    if verbose and result.turns:
        print(f"  Secret: {result.secret}")
        for turn in result.turns:
            if turn.get('feedback'):
                print(f"    Turn {turn['turn_number']}: {turn['guess']} -> {turn['feedback']}")


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else Config.LOG_LEVEL.upper(),
        format='%(asctime)s | %(levelname)s | %(name)s | %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    try:
        mode, cli_tool = resolve_mode(args.mode, args.model)
    except ValueError as e:
        parser.error(str(e))

    if mode == 'api' and not args.model:
        parser.error("--model is required for api mode")

    if args.max_attempts < 1:
        parser.error("--max-attempts must be at least 1")

    if args.runs < 1:
        parser.error("--runs must be at least 1")

    # Out-of-range lengths are clamped by GameConfig
    game_config = GameConfig(
        code_length=args.length,
        difficulty=Difficulty(args.difficulty),
        attempt_mode=AttemptMode(args.attempt_mode),
        max_attempts=args.max_attempts,
        forfeit_threshold=args.forfeit_threshold,
        display_window=args.window,
    )
    if game_config.code_length != args.length:
        print(f"Code length clamped to {game_config.code_length}")

    if args.seed is not None:
        random.seed(args.seed)

    predefined_secret = None
    if args.secret:
        try:
            predefined_secret = parse_secret(args.secret, game_config)
        except ValueError as e:
            parser.error(f"Invalid secret: {e}")

    output_path = None
    if args.output:
        output_path = Path(args.output)
    elif args.save:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        output_path = Path(Config.OUTPUT_DIR) / f"results_{timestamp}.jsonl"
    if output_path is not None:
        output_path.parent.mkdir(parents=True, exist_ok=True)

    player = build_player(mode, cli_tool, game_config, args)

    # Safety limits guard unattended players; people may play on indefinitely
    unattended = mode in ('api', 'cli')
    timeout = args.timeout
    if timeout is None:
        timeout = Config.TIMEOUT_SECONDS if unattended else float('inf')
    max_player_calls = args.max_player_calls
    if max_player_calls is None:
        max_player_calls = Config.MAX_PLAYER_CALLS if unattended else float('inf')

    print(f"Mode: {mode}")
    print(f"Config: length={game_config.code_length}, difficulty={game_config.difficulty.value}, "
          f"attempts={game_config.attempt_mode.value}")
    if output_path is not None:
        print(f"Output: {output_path}")
    print()

    results_summary = {"win": 0, "loss": 0, "forfeit": 0, "error": 0}

    for run in range(1, args.runs + 1):
        if args.runs > 1:
            print(f"Game {run}/{args.runs}")

        session = SessionRunner(
            game_config,
            player,
            args.max_retries,
            secret=predefined_secret,
            max_player_calls=max_player_calls,
            timeout_seconds=timeout
        )
        result = session.run()
        results_summary[result.outcome] += 1

        if output_path is not None:
            with open(output_path, 'a', encoding='utf-8') as f:
                f.write(json.dumps(asdict(result)) + '\n')

        print_result(result, args.verbose)
        print()

    if args.runs > 1:
        print("=" * 60)
        print(f"Games: {args.runs}  Wins: {results_summary['win']}  Losses: {results_summary['loss']}  "
              f"Forfeits: {results_summary['forfeit']}  Errors: {results_summary['error']}")

    if output_path is not None:
        print(f"Results saved to: {output_path}")


if __name__ == '__main__':
    main()
