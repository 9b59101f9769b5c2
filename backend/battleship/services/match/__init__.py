"""Match engine: room lifecycle and attack resolution.

This package contains the domain logic that socket handlers call into,
keeping transport concerns separated from the match rules. Every
operation validates before it mutates and returns the deliveries it
produced; callers hold ``room.lock`` while calling and delivering.
"""
from .combat import attack
from .lifecycle import configure, join, leave

__all__ = ['attack', 'configure', 'join', 'leave']
