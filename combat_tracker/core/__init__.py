"""
Core module for the combat tracker.

Contains the constants, error taxonomy, dice rolling, configuration and
display utilities shared by the encounter components.
"""

from .config import TrackerSettings, load_settings
from .constants import (
    Command,
    CombatantKind,
    LogOutcome,
    LookupFailure,
    SearchCategory,
)
from .dice import DiceExpression, DiceRoller, RollBreakdown
from .errors import (
    AttackerDefeated,
    CombatError,
    DuplicateId,
    EmptyEncounter,
    InputError,
    InvalidStateForCommand,
    MalformedArgument,
    TargetDefeated,
    TrackerError,
    UnknownCombatant,
    UnknownCommand,
)

__all__ = [
    "Command",
    "CombatantKind",
    "LogOutcome",
    "LookupFailure",
    "SearchCategory",
    "DiceExpression",
    "DiceRoller",
    "RollBreakdown",
    "TrackerSettings",
    "load_settings",
    "TrackerError",
    "InputError",
    "UnknownCommand",
    "InvalidStateForCommand",
    "MalformedArgument",
    "CombatError",
    "UnknownCombatant",
    "DuplicateId",
    "TargetDefeated",
    "AttackerDefeated",
    "EmptyEncounter",
]
