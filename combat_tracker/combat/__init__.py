"""
Combat module for the combat tracker.

Contains the encounter components: the combatant registry, the turn
scheduler, the attack resolver, the encounter log and the command
interpreter that drives them.
"""

from .attack_resolver import AttackResolver, AttackResult
from .combatant import Combatant, StatusEffect
from .command_interpreter import (
    CombatMode,
    CommandInterpreter,
    CommandResult,
    SearchMode,
)
from .encounter import Encounter, EncounterSnapshot
from .encounter_log import EncounterLog, LogEntry
from .registry import CombatantRegistry
from .roster import RosterRecord, build_combatants, load_roster, parse_roster
from .turn_scheduler import TurnChange, TurnScheduler

__all__ = [
    "AttackResolver",
    "AttackResult",
    "Combatant",
    "StatusEffect",
    "CombatMode",
    "SearchMode",
    "CommandInterpreter",
    "CommandResult",
    "Encounter",
    "EncounterSnapshot",
    "EncounterLog",
    "LogEntry",
    "CombatantRegistry",
    "RosterRecord",
    "build_combatants",
    "load_roster",
    "parse_roster",
    "TurnChange",
    "TurnScheduler",
]
