"""
Combatant registry for one encounter.

Holds the roster in insertion order and offers the accessors and mutators the
scheduler, the attack resolver and the command interpreter rely on.
"""

from typing import Iterator, Optional

from catchery import log_debug

from combat_tracker.combat.combatant import Combatant, StatusEffect
from combat_tracker.core.constants import CombatantKind
from combat_tracker.core.errors import DuplicateId, UnknownCombatant


class CombatantRegistry:
    """The roster of a single encounter, keyed by combatant id."""

    def __init__(self, combatants: Optional[list[Combatant]] = None) -> None:
        self._combatants: dict[str, Combatant] = {}
        for combatant in combatants or []:
            self.add(combatant)

    def __len__(self) -> int:
        return len(self._combatants)

    def __iter__(self) -> Iterator[Combatant]:
        return iter(self._combatants.values())

    def __contains__(self, combatant_id: object) -> bool:
        return combatant_id in self._combatants

    @property
    def ids(self) -> list[str]:
        """Combatant ids in roster insertion order."""
        return list(self._combatants)

    def add(self, combatant: Combatant) -> None:
        if combatant.id in self._combatants:
            raise DuplicateId(
                f"A combatant with id '{combatant.id}' is already in the encounter",
                {"id": combatant.id},
            )
        self._combatants[combatant.id] = combatant

    def get(self, combatant_id: str) -> Combatant:
        try:
            return self._combatants[combatant_id]
        except KeyError:
            raise UnknownCombatant(
                f"No combatant with id '{combatant_id}'",
                {"id": combatant_id},
            ) from None

    def find(self, name_or_id: str) -> Combatant:
        """
        Finds a combatant by id, or by case-insensitive display name.

        Args:
            name_or_id (str): The id or the display name.

        Returns:
            Combatant: The matching combatant.

        Raises:
            UnknownCombatant: If nothing matches.

        """
        key = name_or_id.strip()
        if key in self._combatants:
            return self._combatants[key]
        lowered = key.lower()
        for combatant in self._combatants.values():
            if combatant.id.lower() == lowered or combatant.name.lower() == lowered:
                return combatant
        raise UnknownCombatant(
            f"Target '{name_or_id}' not found in combat",
            {"query": name_or_id, "known": self.ids},
        )

    def is_alive(self, combatant_id: str) -> bool:
        return self.get(combatant_id).is_alive()

    def apply_damage(self, combatant_id: str, amount: int) -> int:
        """
        Applies damage to a combatant, clamping hit points at zero.

        Returns:
            int: The damage actually taken.

        """
        combatant = self.get(combatant_id)
        taken = combatant.take_damage(amount)
        log_debug(
            f"{combatant.name} takes {taken} damage (remaining HP: {combatant.hp})",
            {"id": combatant_id, "amount": amount, "taken": taken},
        )
        return taken

    def apply_effect(self, combatant_id: str, effect: StatusEffect) -> Optional[StatusEffect]:
        """Attaches an effect, refreshing the duration of a same-named one."""
        return self.get(combatant_id).add_effect(effect)

    def remove_effect(self, combatant_id: str, name: str) -> Optional[StatusEffect]:
        return self.get(combatant_id).remove_effect(name)

    def alive(self) -> list[Combatant]:
        """Returns the living combatants in roster order."""
        return [c for c in self._combatants.values() if c.is_alive()]

    def all_opponents_defeated(self) -> bool:
        """True when every non-player combatant is at zero hit points."""
        opponents = [c for c in self._combatants.values() if c.kind != CombatantKind.PLAYER]
        return bool(opponents) and not any(c.is_alive() for c in opponents)
