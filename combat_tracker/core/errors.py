"""
Error taxonomy for the combat tracker.

Input errors and combat errors are raised by the encounter components and
recovered by the command interpreter; none of them is fatal to a session.
"""

from typing import Any, Optional


class TrackerError(Exception):
    """Base class for every recoverable combat tracker error."""

    def __init__(self, message: str, context: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message: str = message
        self.context: dict[str, Any] = context or {}

    @property
    def kind(self) -> str:
        """Returns the name of the error kind, as shown to the user."""
        return type(self).__name__


# ---- Input errors ----


class InputError(TrackerError):
    """An input line could not be accepted."""


class UnknownCommand(InputError):
    """The command word is not part of the vocabulary."""


class InvalidStateForCommand(InputError):
    """The command is not allowed in the current mode."""


class MalformedArgument(InputError):
    """The command arguments are missing or malformed."""


# ---- Combat errors ----


class CombatError(TrackerError):
    """A combat operation could not be carried out."""


class UnknownCombatant(CombatError):
    """No combatant matches the given id or name."""


class DuplicateId(CombatError):
    """A combatant with the same id is already registered."""


class TargetDefeated(CombatError):
    """The target is already at zero hit points."""


class AttackerDefeated(CombatError):
    """The combatant whose turn it is is at zero hit points and cannot act."""


class EmptyEncounter(CombatError):
    """No combatant in the encounter is still alive."""
