"""Loadout rules engine for a starship campaign builder."""

__version__ = "0.1.0"
