"""
Shared fixtures for the combat tracker tests.
"""

import pytest

from combat_tracker.combat.combatant import Combatant
from combat_tracker.combat.command_interpreter import CommandInterpreter
from combat_tracker.combat.encounter import Encounter
from combat_tracker.core.constants import CombatantKind
from combat_tracker.core.dice import DiceRoller
from combat_tracker.reference.bridge import ReferenceLookupBridge
from combat_tracker.reference.service import StaticReferenceService


class ScriptedRandom:
    """Stands in for random.Random, returning queued values from randint."""

    def __init__(self, values=None):
        self.values = list(values or [])
        self.calls = []

    def queue(self, *values):
        self.values.extend(values)

    def randint(self, a, b):
        self.calls.append((a, b))
        if not self.values:
            raise AssertionError(f"No scripted roll left for randint({a}, {b})")
        value = self.values.pop(0)
        assert a <= value <= b, f"Scripted roll {value} outside [{a}, {b}]"
        return value


def make_combatant(
    combatant_id,
    initiative=10,
    hp=10,
    armor_class=12,
    attack_bonus=3,
    damage_dice="1d6+2",
    kind=CombatantKind.MONSTER,
    name=None,
):
    return Combatant(
        id=combatant_id,
        name=name or combatant_id.capitalize(),
        kind=kind,
        armor_class=armor_class,
        hp=hp,
        max_hp=max(hp, 1),
        attack_bonus=attack_bonus,
        damage_dice=damage_dice,
        initiative=initiative,
    )


@pytest.fixture
def rng():
    return ScriptedRandom()


@pytest.fixture
def roller(rng):
    return DiceRoller(rng)


@pytest.fixture
def party():
    """A fighter, a goblin and an orc with initiatives 15, 10 and 5."""
    return [
        make_combatant("goblin", initiative=10, hp=7, armor_class=15),
        make_combatant(
            "fighter",
            initiative=15,
            hp=30,
            armor_class=18,
            attack_bonus=5,
            damage_dice="1d8+3",
            kind=CombatantKind.PLAYER,
        ),
        make_combatant("orc", initiative=5, hp=15, armor_class=13, damage_dice="1d12+3"),
    ]


@pytest.fixture
def encounter(party, roller):
    return Encounter(party, roller=roller)


@pytest.fixture
def reference_service():
    return StaticReferenceService(
        {"fireball": "Fireball. 3rd-level evocation.", "prone": "Prone. Crawl only."},
        source="test notes",
    )


@pytest.fixture
def interpreter(encounter, reference_service):
    return CommandInterpreter(encounter, ReferenceLookupBridge(reference_service))


@pytest.fixture
def combatant_factory():
    return make_combatant
