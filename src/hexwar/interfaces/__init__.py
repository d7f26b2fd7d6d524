"""Protocol-based interfaces for Hexwar collaborators.

This module exports the protocols for the randomness and persistence
boundaries, so implementations can be swapped in tests and deployments.
"""

from hexwar.interfaces.dice import IDiceRoller
from hexwar.interfaces.store import KeyValueStore

__all__ = [
    "IDiceRoller",
    "KeyValueStore",
]
