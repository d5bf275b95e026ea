"""
Roster module.

Turns the records supplied by character management (or typed ad hoc) into
combatants: validates them, rolls any missing initiative, and gives every
combatant an id that is unique within the encounter.
"""

import json
from pathlib import Path
from typing import Any, Optional

from catchery import log_debug
from pydantic import BaseModel, Field, ValidationError

from combat_tracker.combat.combatant import Combatant
from combat_tracker.core.constants import CombatantKind
from combat_tracker.core.dice import DiceExpression, DiceRoller
from combat_tracker.core.utils import slugify


class RosterRecord(BaseModel):
    """A combatant as described by its source record."""

    name: str = Field(min_length=1)
    armor_class: int = Field(ge=0)
    hp: int = Field(ge=0)
    max_hp: Optional[int] = Field(default=None, ge=1)
    attack_bonus: int = 0
    damage_dice: str = "1d4"
    kind: CombatantKind = CombatantKind.MONSTER
    initiative: Optional[int] = None
    initiative_bonus: int = 0
    temp_hp: int = Field(default=0, ge=0)

    def model_post_init(self, _: Any) -> None:
        """Validates fields after model initialization."""
        self.name = self.name.strip()
        if not self.name:
            raise ValueError("name must be a non-empty string")
        DiceExpression.parse(self.damage_dice)


def make_ids_unique(names: list[str]) -> list[str]:
    """
    Derives a unique id for each name.

    Only repeated names get a numeric suffix; single instances keep the
    plain slug.

    Example:
        ["Goblin", "Goblin", "Orc"] -> ["goblin", "goblin-2", "orc"]

    """
    ids: list[str] = []
    seen: dict[str, int] = {}
    for name in names:
        base = slugify(name)
        seen[base] = seen.get(base, 0) + 1
        candidate = base if seen[base] == 1 else f"{base}-{seen[base]}"
        while candidate in ids:
            seen[base] += 1
            candidate = f"{base}-{seen[base]}"
        ids.append(candidate)
    return ids


def build_combatants(
    records: list[RosterRecord],
    roller: Optional[DiceRoller] = None,
) -> list[Combatant]:
    """
    Builds combatants from roster records, in the same order.

    Args:
        records (list[RosterRecord]): The validated records.
        roller (Optional[DiceRoller]): Used to roll d20 + initiative bonus
            for records without an initiative score.

    Returns:
        list[Combatant]: The combatants, ready to start an encounter.

    """
    roller = roller if roller is not None else DiceRoller()
    ids = make_ids_unique([record.name for record in records])
    combatants: list[Combatant] = []
    for combatant_id, record in zip(ids, records):
        initiative = record.initiative
        if initiative is None:
            natural = roller.roll_d20()
            initiative = natural + record.initiative_bonus
            log_debug(
                f"Rolled initiative for {record.name}: {initiative}",
                {"natural": natural, "bonus": record.initiative_bonus},
            )
        max_hp = record.max_hp if record.max_hp is not None else max(record.hp, 1)
        combatants.append(
            Combatant(
                id=combatant_id,
                name=record.name,
                kind=record.kind,
                armor_class=record.armor_class,
                hp=min(record.hp, max_hp),
                max_hp=max_hp,
                temp_hp=record.temp_hp,
                attack_bonus=record.attack_bonus,
                damage_dice=record.damage_dice,
                initiative=initiative,
            )
        )
    return combatants


def parse_roster(data: Any) -> list[RosterRecord]:
    """
    Validates raw roster data: a list of records, or {"combatants": [...]}.

    Raises:
        ValueError: If the data is not a list of valid records.

    """
    if isinstance(data, dict):
        data = data.get("combatants")
    if not isinstance(data, list):
        raise ValueError("A roster must be a list of combatant records")
    try:
        return [RosterRecord.model_validate(item) for item in data]
    except ValidationError as e:
        raise ValueError(f"Invalid roster record: {e}") from e


def load_roster(path: Path) -> list[RosterRecord]:
    """Loads and validates a roster from a JSON file."""
    with open(path, "r", encoding="utf-8") as f:
        return parse_roster(json.load(f))
