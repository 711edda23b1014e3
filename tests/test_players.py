"""
Testing player adapters with their external calls replaced.
"""

import subprocess
from types import SimpleNamespace

import pytest

from crackcode import cli_player, clipboard_player, llm_player
from crackcode.cli_player import CLIConfig, CLIError, CLIPlayer
from crackcode.clipboard_player import ClipboardPlayer
from crackcode.game import GameConfig, new_game, snapshot, submit_guess
from crackcode.llm_player import LLMConfig, LLMPlayer
from crackcode.terminal_player import TerminalPlayer, render_board


def fresh_snapshot(secret="1234"):
    return snapshot(new_game(GameConfig(), secret=secret))


def completion_response(content, prompt_tokens=10, completion_tokens=5):
    return SimpleNamespace(
        choices=[SimpleNamespace(message=SimpleNamespace(content=content))],
        usage=SimpleNamespace(prompt_tokens=prompt_tokens, completion_tokens=completion_tokens),
    )


def test_llm_player_parses_completion(monkeypatch):
    calls = []

    def fake_completion(**kwargs):
        calls.append(kwargs)
        return completion_response('{"guess": "1243"}')

    monkeypatch.setattr(llm_player.litellm, "completion", fake_completion)
    player = LLMPlayer(GameConfig(), LLMConfig(model="test-model"))
    result = player.get_next_guess(fresh_snapshot())

    assert result["parsed"] is True
    assert result["guess"] == ["1", "2", "4", "3"]
    assert result["tokens"] == {"input": 10, "output": 5}
    assert calls[0]["model"] == "test-model"
    assert calls[0]["messages"][0]["role"] == "system"
    assert calls[0]["messages"][1]["content"].startswith("Make your first guess.")


def test_llm_player_uses_parser_fallback(monkeypatch):
    responses = [completion_response("I would try one two three four"),
                 completion_response('{"guess": "1234"}')]
    monkeypatch.setattr(llm_player.litellm, "completion", lambda **kwargs: responses.pop(0))

    player = LLMPlayer(GameConfig(), LLMConfig(model="m", use_parser_fallback=True))
    result = player.get_next_guess(fresh_snapshot())
    assert result["guess"] == ["1", "2", "3", "4"]


def test_llm_player_reports_unparsed_response(monkeypatch):
    monkeypatch.setattr(llm_player.litellm, "completion", lambda **kwargs: completion_response("hmm"))
    result = LLMPlayer(GameConfig(), LLMConfig(model="m")).get_next_guess(fresh_snapshot())

    assert result["parsed"] is False
    assert result["raw_response"] == "hmm"
    assert result["tokens"] == {"input": 10, "output": 5}


def test_llm_player_retries_then_reports_failure(monkeypatch):
    attempts = []

    def failing_completion(**kwargs):
        attempts.append(1)
        raise ConnectionError("network down")

    monkeypatch.setattr(llm_player.litellm, "completion", failing_completion)
    monkeypatch.setattr(llm_player.time, "sleep", lambda seconds: None)

    result = LLMPlayer(GameConfig(), LLMConfig(model="m")).get_next_guess(fresh_snapshot())
    assert len(attempts) == 3
    assert result["parsed"] is False
    assert "network down" in result["error"]


def test_cli_player_unwraps_gemini_output(monkeypatch):
    seen = {}

    def fake_run(cmd, **kwargs):
        seen["cmd"] = cmd
        return SimpleNamespace(returncode=0, stdout='{"response": "```json\\n{\\"guess\\": \\"1234\\"}\\n```"}', stderr="")

    monkeypatch.setattr(cli_player.subprocess, "run", fake_run)
    player = CLIPlayer(GameConfig(), CLIConfig(cli_tool="gemini"))
    result = player.get_next_guess(fresh_snapshot())

    assert seen["cmd"][0] == "gemini"
    assert result["guess"] == ["1", "2", "3", "4"]


def test_cli_player_reads_claude_structured_output(monkeypatch):
    def fake_run(cmd, **kwargs):
        assert kwargs["input"].startswith("System:")
        return SimpleNamespace(returncode=0, stdout='{"result": "", "structured_output": {"guess": "4321"}}', stderr="")

    monkeypatch.setattr(cli_player.subprocess, "run", fake_run)
    result = CLIPlayer(GameConfig(), CLIConfig(cli_tool="claude")).get_next_guess(fresh_snapshot())
    assert result["guess"] == ["4", "3", "2", "1"]


def test_cli_player_missing_tool(monkeypatch):
    def fake_run(cmd, **kwargs):
        raise FileNotFoundError(cmd[0])

    monkeypatch.setattr(cli_player.subprocess, "run", fake_run)
    result = CLIPlayer(GameConfig(), CLIConfig(cli_tool="codex")).get_next_guess(fresh_snapshot())
    assert result["parsed"] is False
    assert "not found" in result["error"]


def test_cli_player_timeout(monkeypatch):
    def fake_run(cmd, **kwargs):
        raise subprocess.TimeoutExpired(cmd, kwargs["timeout"])

    monkeypatch.setattr(cli_player.subprocess, "run", fake_run)
    result = CLIPlayer(GameConfig(), CLIConfig(cli_tool="codex", timeout=3)).get_next_guess(fresh_snapshot())
    assert "timed out after 3 seconds" in result["error"]


def test_cli_player_rejects_unknown_tool():
    with pytest.raises(CLIError):
        CLIPlayer(GameConfig(), CLIConfig(cli_tool="notepad"))


def test_clipboard_player(monkeypatch):
    copied = []
    monkeypatch.setattr(clipboard_player.pyperclip, "copy", copied.append)
    monkeypatch.setattr(clipboard_player.pyperclip, "paste", lambda: '{"guess": "9876"}')
    monkeypatch.setattr("builtins.input", lambda prompt="": "")

    result = ClipboardPlayer(GameConfig()).get_next_guess(fresh_snapshot())
    assert result["guess"] == ["9", "8", "7", "6"]
    assert copied and "Crack the Code" in copied[0]
    assert result["prompt_shown"] == copied[0]


def test_clipboard_player_quit(monkeypatch):
    monkeypatch.setattr(clipboard_player.pyperclip, "copy", lambda text: None)
    monkeypatch.setattr("builtins.input", lambda prompt="": "quit")
    with pytest.raises(KeyboardInterrupt):
        ClipboardPlayer(GameConfig()).get_next_guess(fresh_snapshot())


def test_terminal_player_reads_guess():
    player = TerminalPlayer(GameConfig(), input_func=lambda prompt: "1 2 3 4")
    result = player.get_next_guess(fresh_snapshot())
    assert result["guess"] == ["1", "2", "3", "4"]
    assert result["forfeit"] is False


def test_terminal_player_commands():
    player = TerminalPlayer(GameConfig(), input_func=lambda prompt: "Forfeit")
    assert player.get_next_guess(fresh_snapshot())["forfeit"] is True

    player = TerminalPlayer(GameConfig(), input_func=lambda prompt: "")
    assert player.get_next_guess(fresh_snapshot())["parsed"] is False

    player = TerminalPlayer(GameConfig(), input_func=lambda prompt: "quit")
    with pytest.raises(KeyboardInterrupt):
        player.get_next_guess(fresh_snapshot())


def test_render_board():
    session = submit_guess(new_game(GameConfig(), secret="1234"), list("1243"))
    board = render_board(snapshot(session))
    assert "1 2 4 3" in board
    assert "++~~" in board


def test_terminal_player_shows_final_board(capsys):
    session = submit_guess(new_game(GameConfig(), secret="1234"), list("1234"))
    TerminalPlayer(GameConfig()).game_over(snapshot(session))
    assert "1 2 3 4" in capsys.readouterr().out
