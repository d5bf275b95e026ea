"""
Turn scheduler module.

Computes the initiative order once, advances the active-turn pointer, counts
rounds and expires status effects at the start of each bearer's own turn.
"""

from typing import Optional

from catchery import log_debug
from pydantic import BaseModel, Field

from combat_tracker.combat.combatant import Combatant, StatusEffect
from combat_tracker.combat.encounter_log import EncounterLog
from combat_tracker.combat.registry import CombatantRegistry
from combat_tracker.core.constants import LogOutcome
from combat_tracker.core.errors import EmptyEncounter


class TurnChange(BaseModel):
    """What happened when the turn pointer moved."""

    actor_id: str
    round: int
    new_round: bool = False
    expired: list[StatusEffect] = Field(default_factory=list)


class TurnScheduler:
    """Keeps track of whose turn it is and which round is being played.

    Defeated combatants stay in the order (they remain visible in stats and
    in the log) but the pointer never stops on them while anyone is alive.
    """

    def __init__(self, registry: CombatantRegistry, log: Optional[EncounterLog] = None) -> None:
        self.registry = registry
        self.log = log if log is not None else EncounterLog()
        self.order: list[str] = []
        self.turn_index: int = 0
        self.round: int = 1

    def start(self, combatants: list[Combatant]) -> None:
        """
        Fixes the initiative order and points at the first combatant.

        The order is descending initiative; equal scores keep the order in
        which the combatants were given.

        Args:
            combatants (list[Combatant]): The combatants, in roster order.

        """
        ranked = sorted(enumerate(combatants), key=lambda pair: (-pair[1].initiative, pair[0]))
        self.order = [combatant.id for _, combatant in ranked]
        self.turn_index = 0
        self.round = 1
        # A roster may start with someone already down; skip them without
        # counting a round.
        for index, combatant_id in enumerate(self.order):
            if self.registry.is_alive(combatant_id):
                self.turn_index = index
                break
        log_debug(
            "Initiative order fixed",
            {"order": self.order, "turn_index": self.turn_index},
        )

    def _ensure_someone_alive(self) -> None:
        if not self.registry.alive():
            raise EmptyEncounter(
                "No combatant remains alive",
                {"round": self.round, "order": self.order},
            )

    def current_actor(self) -> Combatant:
        """
        Returns the combatant whose turn it is.

        Raises:
            EmptyEncounter: If no combatant remains alive.

        """
        self._ensure_someone_alive()
        return self.registry.get(self.order[self.turn_index])

    def advance(self) -> TurnChange:
        """
        Moves the pointer to the next living combatant and begins their turn.

        Passing the end of the order wraps to the top and starts a new
        round. The effects of the combatant whose turn begins are then
        decremented once, and those reaching zero are removed.

        Returns:
            TurnChange: The new actor, the round and the expired effects.

        Raises:
            EmptyEncounter: If no combatant remains alive. Nothing changes.

        """
        self._ensure_someone_alive()

        index = self.turn_index
        wrapped = False
        for _ in range(len(self.order)):
            index += 1
            if index >= len(self.order):
                index = 0
                wrapped = True
            if self.registry.is_alive(self.order[index]):
                break

        if wrapped:
            self.round += 1
        self.turn_index = index

        actor = self.registry.get(self.order[index])
        expired = actor.tick_effects()
        for effect in expired:
            self.log.record(
                round=self.round,
                actor_id=actor.id,
                description=f"{effect.name} has expired on {actor.name}",
                outcome=LogOutcome.EFFECT_EXPIRED,
                effect=effect.name,
            )

        return TurnChange(
            actor_id=actor.id,
            round=self.round,
            new_round=wrapped,
            expired=expired,
        )
