"""
Encounter module.

An Encounter bundles the roster, the turn scheduler, the attack resolver and
the log of a single tracker session. It is created once per session and
passed explicitly to the command interpreter; nothing here is global.
"""

from typing import Optional

from pydantic import BaseModel

from combat_tracker.combat.attack_resolver import AttackResolver, AttackResult
from combat_tracker.combat.combatant import Combatant, StatusEffect
from combat_tracker.combat.encounter_log import EncounterLog, LogEntry
from combat_tracker.combat.registry import CombatantRegistry
from combat_tracker.combat.turn_scheduler import TurnChange, TurnScheduler
from combat_tracker.core.constants import LogOutcome
from combat_tracker.core.dice import DiceRoller
from combat_tracker.core.errors import MalformedArgument


class EncounterSnapshot(BaseModel):
    """Serializable view of the encounter handed to the rendering layer."""

    round: int
    turn_index: int
    order: list[str]
    combatants: list[Combatant]
    log: list[LogEntry]

    @property
    def current_id(self) -> Optional[str]:
        return self.order[self.turn_index] if self.order else None


class Encounter:
    """One complete combat session."""

    def __init__(self, combatants: list[Combatant], roller: Optional[DiceRoller] = None) -> None:
        self.log = EncounterLog()
        self.registry = CombatantRegistry(combatants)
        self.scheduler = TurnScheduler(self.registry, self.log)
        self.resolver = AttackResolver(
            self.registry,
            self.log,
            roller=roller,
            current_round=lambda: self.scheduler.round,
        )
        self.scheduler.start(list(self.registry))

    # ============================================================================
    # STATE
    # ============================================================================

    @property
    def round(self) -> int:
        return self.scheduler.round

    @property
    def turn_index(self) -> int:
        return self.scheduler.turn_index

    def ordered_combatants(self) -> list[Combatant]:
        """Returns the combatants in initiative order."""
        return [self.registry.get(cid) for cid in self.scheduler.order]

    def current_actor(self) -> Combatant:
        return self.scheduler.current_actor()

    def is_complete(self) -> bool:
        """True when every non-player combatant has been defeated."""
        return self.registry.all_opponents_defeated()

    def snapshot(self) -> EncounterSnapshot:
        return EncounterSnapshot(
            round=self.scheduler.round,
            turn_index=self.scheduler.turn_index,
            order=list(self.scheduler.order),
            combatants=[c.model_copy(deep=True) for c in self.ordered_combatants()],
            log=list(self.log.entries),
        )

    def serialize(self) -> str:
        """Returns the encounter state as a JSON string."""
        return self.snapshot().model_dump_json()

    # ============================================================================
    # OPERATIONS
    # ============================================================================

    def advance(self) -> TurnChange:
        return self.scheduler.advance()

    def attack(self, attacker_id: str, target_id: str) -> AttackResult:
        return self.resolver.resolve(attacker_id, target_id)

    def apply_damage(self, target_id: str, amount: int) -> LogEntry:
        """Applies damage entered by hand and records it."""
        if amount < 0:
            raise MalformedArgument(
                f"Damage must be a positive number, got {amount}",
                {"target": target_id, "amount": amount},
            )
        target = self.registry.get(target_id)
        taken = self.registry.apply_damage(target.id, amount)
        description = f"{target.name} takes {taken} damage (HP: {target.hp}/{target.max_hp})"
        outcome = LogOutcome.DAMAGE
        if not target.is_alive():
            description += f"; {target.name} is down"
            outcome = LogOutcome.DEFEATED
        return self.log.record(
            round=self.round,
            actor_id=target.id,
            description=description,
            outcome=outcome,
            damage=taken,
        )

    def apply_effect(self, target_id: str, effect: StatusEffect) -> LogEntry:
        target = self.registry.get(target_id)
        replaced = self.registry.apply_effect(target.id, effect)
        verb = "refreshed on" if replaced else "applied to"
        return self.log.record(
            round=self.round,
            actor_id=target.id,
            description=f"{effect.name} {verb} {target.name} for {effect.duration} round(s)",
            outcome=LogOutcome.EFFECT_APPLIED,
            effect=effect.name,
        )

    def remove_effect(self, target_id: str, name: str) -> LogEntry:
        target = self.registry.get(target_id)
        removed = self.registry.remove_effect(target.id, name)
        if removed is None:
            raise MalformedArgument(
                f"{target.name} has no effect named '{name}'",
                {"target": target.id, "effect": name},
            )
        return self.log.record(
            round=self.round,
            actor_id=target.id,
            description=f"{removed.name} removed from {target.name}",
            outcome=LogOutcome.EFFECT_REMOVED,
            effect=removed.name,
        )
