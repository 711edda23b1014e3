"""Crack the Code: a Mastermind-style code-breaking game engine."""
