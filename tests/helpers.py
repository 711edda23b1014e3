"""Scripted stand-ins for the random source and players."""


class ScriptedRandom:
    """Random source that replays a fixed sequence of draws."""

    def __init__(self, values):
        self.values = list(values)
        self.calls = []

    def randrange(self, n):
        value = self.values.pop(0)
        assert 0 <= value < n, f"scripted draw {value} out of range for randrange({n})"
        self.calls.append(n)
        return value


class ScriptedPlayer:
    """Player that replays canned moves: a guess string, 'forfeit', or None for garbage."""

    def __init__(self, moves):
        self.moves = list(moves)
        self.retry_counts = []
        self.snapshots = []

    def get_next_guess(self, snapshot, retry_count=0):
        self.retry_counts.append(retry_count)
        self.snapshots.append(snapshot)
        move = self.moves.pop(0) if self.moves else None
        result = {
            "guess": None,
            "forfeit": False,
            "raw_response": move or "",
            "parsed": move is not None,
            "error": None if move is not None else "Failed to parse response",
            "tokens": {"input": 1, "output": 2},
        }
        if move == "forfeit":
            result["forfeit"] = True
        elif move is not None:
            result["guess"] = list(move)
        return result
