"""
Tests for attack resolution against armor class.
"""

import pytest

from combat_tracker.combat.attack_resolver import AttackResolver
from combat_tracker.combat.encounter_log import EncounterLog
from combat_tracker.combat.registry import CombatantRegistry
from combat_tracker.core.constants import LogOutcome
from combat_tracker.core.dice import DiceRoller
from combat_tracker.core.errors import AttackerDefeated, TargetDefeated, UnknownCombatant


@pytest.fixture
def resolver(party, rng):
    return AttackResolver(CombatantRegistry(party), EncounterLog(), DiceRoller(rng))


def test_hit_when_total_meets_armor_class(resolver, rng):
    rng.queue(10, 6)  # 10 + 5 = 15 vs AC 15, then 1d8 -> 6
    result = resolver.resolve("fighter", "goblin")
    assert result.hit
    assert result.total == 15
    assert result.damage == 9
    assert resolver.registry.get("goblin").hp == 0
    assert result.target_defeated


def test_miss_when_total_below_armor_class(resolver, rng):
    rng.queue(9)
    result = resolver.resolve("fighter", "goblin")
    assert not result.hit
    assert result.damage == 0
    assert resolver.registry.get("goblin").hp == 7
    assert resolver.log.entries[-1].outcome == LogOutcome.MISS


def test_natural_20_always_hits_and_doubles_dice(resolver, rng):
    orc = resolver.registry.get("orc")
    orc.armor_class = 40
    rng.queue(20, 3, 4)
    result = resolver.resolve("fighter", "orc")
    assert result.hit and result.critical
    assert result.dice_rolled == 2
    # Two d8s plus the +3 modifier, added once.
    assert result.damage == 3 + 4 + 3
    assert orc.hp == 5
    assert rng.calls == [(1, 20), (1, 8), (1, 8)]


def test_natural_1_always_misses(resolver, rng):
    fighter = resolver.registry.get("fighter")
    fighter.attack_bonus = 50
    resolver.registry.get("goblin").armor_class = 1
    rng.queue(1)
    result = resolver.resolve("fighter", "goblin")
    assert not result.hit
    assert result.fumble
    assert len(rng.calls) == 1


def test_attack_on_defeated_target_is_rejected_without_log(resolver, rng):
    resolver.registry.apply_damage("goblin", 100)
    with pytest.raises(TargetDefeated):
        resolver.resolve("fighter", "goblin")
    assert len(resolver.log) == 0
    assert rng.calls == []


def test_defeated_attacker_cannot_attack(resolver, rng):
    resolver.registry.apply_damage("fighter", 100)
    with pytest.raises(AttackerDefeated):
        resolver.resolve("fighter", "goblin")
    assert resolver.registry.get("goblin").hp == 7
    assert len(resolver.log) == 0
    assert rng.calls == []


def test_unknown_combatant(resolver):
    with pytest.raises(UnknownCombatant):
        resolver.resolve("fighter", "dragon")
    with pytest.raises(UnknownCombatant):
        resolver.resolve("dragon", "goblin")
    assert len(resolver.log) == 0


def test_every_resolution_appends_one_entry(resolver, rng):
    rng.queue(15, 2, 2)
    resolver.resolve("fighter", "orc")
    resolver.resolve("orc", "fighter")
    entries = resolver.log.entries
    assert [e.actor_id for e in entries] == ["fighter", "orc"]
    assert entries[0].outcome == LogOutcome.HIT
    assert entries[0].damage == 5
    assert entries[1].outcome == LogOutcome.MISS
    assert all(e.round == 1 for e in entries)
