"""Trouble - rules engine and turn state machine for the Pop-O-Matic board game."""

__version__ = "0.1.0"
