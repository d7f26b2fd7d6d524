"""Dice for Hexwar combat.

Every attack rolls one six-sided die per army point on each side and
compares the sums. Two implementations of
:class:`hexwar.interfaces.dice.IDiceRoller` live here:

- ``RandomDiceRoller`` draws from a ``random.Random`` stream
- ``SeededDiceRoller`` derives the n-th roll of a game from a seed string,
  so any single roll can be recomputed later

Examples:
    >>> seed = generate_seed("game-1", 4, "combat")
    >>> result = roll_combat(seed, 2, 3)
    >>> result["attack_total"] == sum(result["attack_rolls"])
    True
"""

from __future__ import annotations

import hashlib
import random
from typing import Any

DIE_SIDES = 6


def generate_seed(game_id: str, sequence: int, context: str) -> str:
    """Seed string ``"game_id:sequence:context"`` for one roll of a game.

    Raises:
        ValueError: If sequence is negative

    Examples:
        >>> generate_seed("alpha", 3, "combat")
        'alpha:3:combat'
    """
    if sequence < 0:
        raise ValueError(f"sequence must be non-negative, got {sequence}")

    return f"{game_id}:{sequence}:{context}"


def _seed_to_int(seed: str) -> int:
    """Stable 64-bit integer for ``random.Random`` taken from the SHA-256 of ``seed``."""
    digest = hashlib.sha256(seed.encode("utf-8")).digest()
    return int.from_bytes(digest[:8], "big", signed=False)


def _roll(rng: random.Random, count: int) -> list[int]:
    return [rng.randint(1, DIE_SIDES) for _ in range(count)]


def roll_combat(seed: str, attacker_army: int, defender_army: int) -> dict[str, Any]:
    """Roll one d6 per army point for both sides of a fight.

    Both sides draw from a single seeded stream, attacker first, so a seed
    fully determines the pair of sums. An empty side rolls nothing and
    scores 0.

    Raises:
        ValueError: If either army is negative
    """
    if attacker_army < 0 or defender_army < 0:
        raise ValueError(
            f"army sizes must be non-negative, got ({attacker_army}, {defender_army})"
        )

    rng = random.Random(_seed_to_int(seed))
    attack_rolls = _roll(rng, attacker_army)
    defend_rolls = _roll(rng, defender_army)

    return {
        "attack_rolls": attack_rolls,
        "defend_rolls": defend_rolls,
        "attack_total": sum(attack_rolls),
        "defend_total": sum(defend_rolls),
        "seed": seed,
    }


class RandomDiceRoller:
    """Dice roller backed by ``random.Random``.

    Pass ``seed`` to make a whole session replayable from its first roll.
    """

    def __init__(self, seed: int | None = None) -> None:
        self._rng = random.Random(seed)

    async def roll_combat(self, attacker_army: int, defender_army: int) -> tuple[int, int]:
        attack = sum(_roll(self._rng, max(0, attacker_army)))
        defend = sum(_roll(self._rng, max(0, defender_army)))
        return attack, defend


class SeededDiceRoller:
    """Dice roller whose n-th roll is derived from ``generate_seed(game_id, n, "combat")``."""

    def __init__(self, game_id: str, *, start: int = 0) -> None:
        self.game_id = game_id
        self.sequence = start
        self.history: list[dict[str, Any]] = []

    async def roll_combat(self, attacker_army: int, defender_army: int) -> tuple[int, int]:
        seed = generate_seed(self.game_id, self.sequence, "combat")
        self.sequence += 1
        result = roll_combat(seed, attacker_army, defender_army)
        self.history.append(result)
        return result["attack_total"], result["defend_total"]
