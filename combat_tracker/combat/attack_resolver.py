"""
Attack resolver module.

Resolves a single attack: a d20 plus the attacker's bonus against the
target's armor class, with natural 20s and natural 1s overriding the total,
followed by a damage roll applied through the registry.
"""

from typing import Callable, Optional

from catchery import log_debug
from pydantic import BaseModel

from combat_tracker.combat.encounter_log import EncounterLog, LogEntry
from combat_tracker.combat.registry import CombatantRegistry
from combat_tracker.core.constants import D20, LogOutcome
from combat_tracker.core.dice import DiceExpression, DiceRoller
from combat_tracker.core.errors import AttackerDefeated, TargetDefeated
from combat_tracker.core.utils import modifier_to_string

ATTACK_ROLL = DiceExpression(count=1, sides=D20)


class AttackResult(BaseModel):
    """The outcome of one resolved attack."""

    attacker_id: str
    target_id: str
    natural: int
    total: int
    armor_class: int
    hit: bool
    critical: bool = False
    fumble: bool = False
    damage: int = 0
    damage_description: str = ""
    dice_rolled: int = 0
    target_defeated: bool = False
    entry: LogEntry

    @property
    def message(self) -> str:
        return self.entry.description


class AttackResolver:
    """Resolves attacker-vs-target actions for one encounter."""

    def __init__(
        self,
        registry: CombatantRegistry,
        log: EncounterLog,
        roller: Optional[DiceRoller] = None,
        current_round: Callable[[], int] = lambda: 1,
    ) -> None:
        self.registry = registry
        self.log = log
        self.roller = roller if roller is not None else DiceRoller()
        self.current_round = current_round

    def resolve(self, attacker_id: str, target_id: str) -> AttackResult:
        """
        Resolves one attack and records it in the encounter log.

        Args:
            attacker_id (str): The id of the attacking combatant.
            target_id (str): The id of the target.

        Returns:
            AttackResult: Roll, hit or miss, and any damage dealt. A miss is
            a normal result, not an error.

        Raises:
            UnknownCombatant: If either id is not in the encounter.
            AttackerDefeated: If the attacker is at zero hit points.
            TargetDefeated: If the target is already at zero hit points.

        """
        attacker = self.registry.get(attacker_id)
        target = self.registry.get(target_id)
        if not attacker.is_alive():
            raise AttackerDefeated(
                f"{attacker.name} is down and cannot attack; use 'next' to move on",
                {"attacker": attacker_id, "target": target_id},
            )
        if not target.is_alive():
            raise TargetDefeated(
                f"{target.name} is already defeated",
                {"attacker": attacker_id, "target": target_id},
            )

        attack_roll = self.roller.roll(ATTACK_ROLL)
        natural = attack_roll.value
        total = natural + attacker.attack_bonus
        critical = attack_roll.is_critical()
        fumble = attack_roll.is_fumble()
        if critical:
            hit = True
        elif fumble:
            hit = False
        else:
            hit = total >= target.armor_class

        roll_text = (
            f"{attacker.name} attacks {target.name}: {total} "
            f"(d20: {natural}, bonus: {modifier_to_string(attacker.attack_bonus)}) "
            f"vs AC {target.armor_class}"
        )

        if not hit:
            reason = "critical failure" if fumble else "miss"
            entry = self.log.record(
                round=self.current_round(),
                actor_id=attacker.id,
                description=f"{roll_text}, {reason}",
                outcome=LogOutcome.MISS,
            )
            return AttackResult(
                attacker_id=attacker.id,
                target_id=target.id,
                natural=natural,
                total=total,
                armor_class=target.armor_class,
                hit=False,
                fumble=fumble,
                entry=entry,
            )

        # A critical hit doubles the dice, never the modifier.
        expression = DiceExpression.parse(attacker.damage_dice)
        if critical:
            expression = expression.doubled()
        damage = self.roller.roll(expression)
        self.registry.apply_damage(target.id, damage.value)
        defeated = not target.is_alive()

        description = f"{roll_text}, {'critical hit' if critical else 'hit'} for {damage.value} damage ({damage.description})"
        if defeated:
            description += f"; {target.name} is down"
        entry = self.log.record(
            round=self.current_round(),
            actor_id=attacker.id,
            description=description,
            outcome=LogOutcome.HIT,
            damage=damage.value,
        )
        log_debug(
            "Attack resolved",
            {"attacker": attacker.id, "target": target.id, "natural": natural, "damage": damage.value},
        )
        return AttackResult(
            attacker_id=attacker.id,
            target_id=target.id,
            natural=natural,
            total=total,
            armor_class=target.armor_class,
            hit=True,
            critical=critical,
            damage=damage.value,
            damage_description=damage.description,
            dice_rolled=len(damage.rolls),
            target_defeated=defeated,
            entry=entry,
        )
