"""
Combatant module for the combat tracker.

Defines the combatants taking part in an encounter and the timed status
effects they can carry.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field

from combat_tracker.core.constants import CombatantKind
from combat_tracker.core.dice import DiceExpression
from combat_tracker.core.utils import make_bar


class StatusEffect(BaseModel):
    """A named status effect lasting a number of the bearer's turns."""

    name: str = Field(description="Name of the effect, unique per bearer")
    duration: int = Field(gt=0, description="Remaining duration in rounds")
    description: Optional[str] = Field(
        default=None,
        description="Optional free-text reminder of what the effect does",
    )

    def model_post_init(self, _: Any) -> None:
        """Validates fields after model initialization."""
        self.name = self.name.strip()
        if not self.name:
            raise ValueError("name must be a non-empty string")

    @property
    def key(self) -> str:
        """The case-insensitive key used to detect same-named effects."""
        return self.name.lower()


class Combatant(BaseModel):
    """One participant in an encounter.

    Hit points never drop below zero and never exceed the maximum. Temporary
    hit points absorb damage before regular hit points.
    """

    id: str = Field(description="Identifier, unique within the encounter")
    name: str = Field(description="Display name")
    kind: CombatantKind = Field(default=CombatantKind.MONSTER)
    armor_class: int = Field(description="Defense threshold an attack must meet")
    hp: int = Field(ge=0, description="Current hit points")
    max_hp: int = Field(ge=1, description="Maximum hit points")
    temp_hp: int = Field(default=0, ge=0, description="Temporary hit points")
    attack_bonus: int = Field(default=0, description="Bonus added to the d20 attack roll")
    damage_dice: str = Field(default="1d4", description="Damage dice specification")
    initiative: int = Field(default=0, description="Initiative score for this encounter")
    effects: dict[str, StatusEffect] = Field(
        default_factory=dict,
        description="Active status effects, keyed by lowercase name",
    )

    def model_post_init(self, _: Any) -> None:
        """Validates fields after model initialization."""
        if not self.id:
            raise ValueError("id must be a non-empty string")
        if self.hp > self.max_hp:
            raise ValueError(f"hp ({self.hp}) cannot exceed max_hp ({self.max_hp})")
        # Fail early on an unusable damage specification.
        DiceExpression.parse(self.damage_dice)

    # ============================================================================
    # HEALTH
    # ============================================================================

    def is_alive(self) -> bool:
        return self.hp > 0

    def take_damage(self, amount: int) -> int:
        """
        Applies damage, draining temporary hit points first.

        Args:
            amount (int): The damage to apply; negative values count as 0.

        Returns:
            int: The damage actually removed from hit points and temporary
            hit points combined.

        """
        amount = max(0, amount)
        absorbed = min(self.temp_hp, amount)
        self.temp_hp -= absorbed
        lost = min(self.hp, amount - absorbed)
        self.hp -= lost
        return absorbed + lost

    @property
    def is_bloodied(self) -> bool:
        return 0 < self.hp <= self.max_hp // 4

    @property
    def hp_bar(self) -> str:
        color = "red" if self.is_bloodied or not self.is_alive() else "green"
        return make_bar(self.hp, self.max_hp, color=color)

    # ============================================================================
    # STATUS EFFECTS
    # ============================================================================

    def add_effect(self, effect: StatusEffect) -> Optional[StatusEffect]:
        """
        Adds an effect, replacing any effect with the same name.

        Returns:
            Optional[StatusEffect]: The replaced effect, if there was one.

        """
        replaced = self.effects.pop(effect.key, None)
        self.effects[effect.key] = effect.model_copy()
        return replaced

    def remove_effect(self, name: str) -> Optional[StatusEffect]:
        return self.effects.pop(name.strip().lower(), None)

    def tick_effects(self) -> list[StatusEffect]:
        """
        Decrements every effect by one round and drops those reaching zero.

        Returns:
            list[StatusEffect]: The effects that expired.

        """
        expired: list[StatusEffect] = []
        remaining: dict[str, StatusEffect] = {}
        for key, effect in self.effects.items():
            if effect.duration - 1 > 0:
                remaining[key] = effect.model_copy(update={"duration": effect.duration - 1})
            else:
                expired.append(effect)
        self.effects = remaining
        return expired

    # ============================================================================
    # DISPLAY
    # ============================================================================

    @property
    def colored_name(self) -> str:
        return self.kind.colorize(self.name)
