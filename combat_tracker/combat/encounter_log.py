"""
Encounter log module.

An append-only, ordered record of what happened during an encounter. The
renderer reads its tail after every processed command.
"""

from typing import Iterator, Optional

from pydantic import BaseModel, Field

from combat_tracker.core.constants import LogOutcome


class LogEntry(BaseModel):
    """One event of the encounter."""

    model_config = {"frozen": True}

    round: int = Field(ge=1, description="Round in which the event happened")
    actor_id: str = Field(description="Id of the acting combatant")
    description: str = Field(description="Human-readable description")
    outcome: LogOutcome = Field(description="What the event resulted in")
    damage: Optional[int] = Field(default=None, ge=0, description="Damage dealt, if any")
    effect: Optional[str] = Field(default=None, description="Effect involved, if any")

    def __str__(self) -> str:
        return f"R{self.round} {self.description}"


class EncounterLog:
    """Append-only sequence of log entries."""

    def __init__(self) -> None:
        self._entries: list[LogEntry] = []

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[LogEntry]:
        return iter(self._entries)

    def append(self, entry: LogEntry) -> LogEntry:
        self._entries.append(entry)
        return entry

    def record(
        self,
        round: int,
        actor_id: str,
        description: str,
        outcome: LogOutcome,
        damage: Optional[int] = None,
        effect: Optional[str] = None,
    ) -> LogEntry:
        """Builds and appends an entry in one call."""
        return self.append(
            LogEntry(
                round=round,
                actor_id=actor_id,
                description=description,
                outcome=outcome,
                damage=damage,
                effect=effect,
            )
        )

    @property
    def entries(self) -> tuple[LogEntry, ...]:
        """A read-only view of every entry, oldest first."""
        return tuple(self._entries)

    def tail(self, count: int) -> list[LogEntry]:
        """Returns the last `count` entries, oldest first."""
        if count <= 0:
            return []
        return self._entries[-count:]
