"""Branching narrative graph interpreter: conditions, effects, scene resolution and reveal."""

__version__ = "0.1.0"
