"""Dice Roller Protocol Interface.

This module defines the protocol (interface) for the randomness source used
when resolving attacks.
"""

from typing import Protocol


class IDiceRoller(Protocol):
    """Protocol defining the source of combat dice.

    Implementations may animate, log or replay rolls; only the returned sums
    matter to the rules.
    """

    async def roll_combat(self, attacker_army: int, defender_army: int) -> tuple[int, int]:
        """Roll one six-sided die per army point on each side.

        Args:
            attacker_army: Army strength of the attacking tile
            defender_army: Army strength of the defending tile

        Returns:
            ``(attack_sum, defend_sum)``
        """
        ...
