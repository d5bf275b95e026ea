"""
Command interpreter module.

The modal dispatcher of the tracker. In COMBAT mode it routes commands to the
turn scheduler, the attack resolver and the reference lookup bridge; a
successful `search` moves it to SEARCH mode, where the only accepted input is
an acknowledgement that restores the buffered combat display. Errors are
caught here, reported in the result, and never end the session.
"""

from typing import Callable, Literal, Optional, Union

from catchery import log_debug, log_warning
from pydantic import BaseModel, Field

from combat_tracker.combat.combatant import Combatant, StatusEffect
from combat_tracker.combat.encounter import Encounter, EncounterSnapshot
from combat_tracker.combat.encounter_log import LogEntry
from combat_tracker.core.constants import (
    ACKNOWLEDGEMENTS,
    COMMAND_ALIASES,
    DEFAULT_LOG_TAIL,
    SELF_ALIAS,
    Command,
)
from combat_tracker.core.errors import (
    InvalidStateForCommand,
    MalformedArgument,
    TrackerError,
    UnknownCommand,
)
from combat_tracker.reference.bridge import LookupResult, ReferenceLookupBridge


class DisplayContext(BaseModel):
    """What the combat screen was showing: its messages and focused combatant."""

    messages: list[str] = Field(default_factory=list)
    focus_id: Optional[str] = None


class CombatMode(BaseModel):
    """Commands act on the encounter."""

    name: Literal["COMBAT"] = "COMBAT"


class SearchMode(BaseModel):
    """A lookup result is on screen; combat is suspended until acknowledged."""

    name: Literal["SEARCH"] = "SEARCH"
    pending_query: str
    result: LookupResult
    buffered: DisplayContext


Mode = Union[CombatMode, SearchMode]


class CommandResult(BaseModel):
    """Everything the rendering layer needs after one processed line."""

    line: str
    command: Optional[Command] = None
    mode: str = "COMBAT"
    messages: list[str] = Field(default_factory=list)
    error: Optional[str] = None
    error_message: Optional[str] = None
    focus_id: Optional[str] = None
    lookup: Optional[LookupResult] = None
    snapshot: EncounterSnapshot
    log_tail: list[LogEntry] = Field(default_factory=list)
    encounter_complete: bool = False
    quit: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None


def parse_command(word: str) -> Optional[Command]:
    """Maps a command word (or alias) to its command, or None."""
    word = word.lower()
    if word in COMMAND_ALIASES:
        return COMMAND_ALIASES[word]
    try:
        return Command(word)
    except ValueError:
        return None


def describe_stats(combatant: Combatant) -> list[str]:
    """Returns the stats lines of a combatant: hit points, AC and effects."""
    lines = [
        f"{combatant.name} ({combatant.kind.display_name}, id: {combatant.id})",
        f"HP: {combatant.hp}/{combatant.max_hp}"
        + (f" (+{combatant.temp_hp} temp)" if combatant.temp_hp else "")
        + (" DOWN" if not combatant.is_alive() else ""),
        f"AC: {combatant.armor_class}  Attack: {combatant.attack_bonus:+d}  "
        f"Damage: {combatant.damage_dice}  Initiative: {combatant.initiative}",
    ]
    if combatant.effects:
        lines.append("Effects:")
        for effect in combatant.effects.values():
            line = f"  {effect.name} ({effect.duration} rounds)"
            if effect.description:
                line += f": {effect.description}"
            lines.append(line)
    else:
        lines.append("Effects: none")
    return lines


class CommandInterpreter:
    """Parses input lines and dispatches them according to the current mode."""

    def __init__(
        self,
        encounter: Encounter,
        bridge: ReferenceLookupBridge,
        log_tail: int = DEFAULT_LOG_TAIL,
    ) -> None:
        self.encounter = encounter
        self.bridge = bridge
        self.log_tail = log_tail
        self.mode: Mode = CombatMode()
        self.display = DisplayContext()
        self._busy = False
        self._handlers: dict[Command, Callable[[str], DisplayContext]] = {
            Command.ATTACK: self._attack,
            Command.STATS: self._stats,
            Command.NEXT: self._next,
            Command.HELP: self._help,
            Command.SEARCH: self._search,
            Command.ORDER: self._order,
            Command.STATUS: self._status,
            Command.DAMAGE: self._damage,
            Command.QUIT: self._quit,
        }
        self._quit_requested = False

    # ============================================================================
    # DISPATCH
    # ============================================================================

    def handle(self, line: str) -> CommandResult:
        """
        Processes one input line completely.

        Args:
            line (str): The raw input line.

        Returns:
            CommandResult: Messages, the mode after the line, any error, and
            the encounter snapshot with the log tail.

        """
        word, _, _ = line.strip().partition(" ")
        command = parse_command(word) if word else None

        # One line at a time: a line arriving while another is still being
        # processed is refused without touching anything.
        if self._busy:
            error = InvalidStateForCommand(
                "Another command is still being processed",
                {"line": line},
            )
            return self._result(line, command, DisplayContext(), error)

        self._busy = True
        self._quit_requested = False
        try:
            if isinstance(self.mode, SearchMode):
                context = self._handle_search_mode(self.mode, line, command)
            else:
                context = self._handle_combat_mode(line, command)
        except TrackerError as e:
            log_warning(
                f"{e.kind}: {e.message}",
                {"line": line, "mode": self.mode.name, **e.context},
            )
            return self._result(line, command, DisplayContext(), e)
        finally:
            self._busy = False

        if isinstance(self.mode, CombatMode):
            self.display = context
        return self._result(line, command, context)

    def _handle_combat_mode(self, line: str, command: Optional[Command]) -> DisplayContext:
        stripped = line.strip()
        if not stripped:
            return self.display
        if stripped.lower() in ACKNOWLEDGEMENTS:
            raise InvalidStateForCommand(
                f"'{stripped}' only returns from a reference lookup",
                {"mode": self.mode.name},
            )
        if command is None:
            raise UnknownCommand(
                f"Unknown command '{stripped.split()[0]}'. Type 'help' for available commands.",
                {"line": stripped},
            )
        _, _, argument = stripped.partition(" ")
        log_debug("Dispatching command", {"command": command.value, "argument": argument})
        return self._handlers[command](argument.strip())

    def _handle_search_mode(
        self, mode: SearchMode, line: str, command: Optional[Command]
    ) -> DisplayContext:
        stripped = line.strip()
        if stripped.lower() in ACKNOWLEDGEMENTS:
            buffered = mode.buffered
            self.mode = CombatMode()
            return buffered
        if command is not None:
            raise InvalidStateForCommand(
                f"'{command.value}' is not available while reading a reference entry; "
                "press Enter to return to combat",
                {"mode": mode.name, "query": mode.pending_query},
            )
        raise UnknownCommand(
            f"Unknown command '{stripped.split()[0]}'. Press Enter to return to combat.",
            {"line": stripped},
        )

    def _result(
        self,
        line: str,
        command: Optional[Command],
        context: DisplayContext,
        error: Optional[TrackerError] = None,
    ) -> CommandResult:
        lookup = self.mode.result if isinstance(self.mode, SearchMode) else None
        return CommandResult(
            line=line,
            command=command,
            mode=self.mode.name,
            messages=list(context.messages),
            error=error.kind if error else None,
            error_message=error.message if error else None,
            focus_id=context.focus_id,
            lookup=lookup,
            snapshot=self.encounter.snapshot(),
            log_tail=self.encounter.log.tail(self.log_tail),
            encounter_complete=self.encounter.is_complete(),
            quit=self._quit_requested,
        )

    # ============================================================================
    # HELPERS
    # ============================================================================

    def _require(self, argument: str, usage: Command) -> str:
        if not argument:
            raise MalformedArgument(f"Usage: {usage.usage.split('  ')[0].strip()}", {"command": usage.value})
        return argument

    def _find_target(self, name: str) -> Combatant:
        if name.lower() == SELF_ALIAS:
            return self.encounter.current_actor()
        return self.encounter.registry.find(name)

    # ============================================================================
    # COMMANDS
    # ============================================================================

    def _attack(self, argument: str) -> DisplayContext:
        target = self._find_target(self._require(argument, Command.ATTACK))
        attacker = self.encounter.current_actor()
        result = self.encounter.attack(attacker.id, target.id)
        messages = [result.message]
        if result.critical:
            messages.append("Critical hit! Damage dice doubled.")
        elif result.fumble:
            messages.append("Critical failure!")
        return DisplayContext(messages=messages, focus_id=target.id)

    def _stats(self, argument: str) -> DisplayContext:
        target = self._find_target(self._require(argument, Command.STATS))
        return DisplayContext(messages=describe_stats(target), focus_id=target.id)

    def _next(self, argument: str) -> DisplayContext:
        change = self.encounter.advance()
        actor = self.encounter.registry.get(change.actor_id)
        messages: list[str] = []
        if change.new_round:
            messages.append(f"Starting Round {change.round}")
        messages.append(f"It's {actor.name}'s turn!")
        for effect in change.expired:
            messages.append(f"{effect.name} has expired on {actor.name}.")
        return DisplayContext(messages=messages, focus_id=actor.id)

    def _help(self, argument: str) -> DisplayContext:
        messages = ["Combat Mode Commands:"]
        messages.extend(f"  {command.usage}" for command in Command)
        messages.append("While a reference entry is shown, press Enter to return to combat.")
        return DisplayContext(messages=messages, focus_id=self.display.focus_id)

    def _search(self, argument: str) -> DisplayContext:
        query = self._require(argument, Command.SEARCH)
        buffered = self.display.model_copy(deep=True)
        result = self.bridge.lookup(query)
        if not result.ok:
            # Failures are shown and combat resumes straight away.
            messages = [f"Lookup failed for '{query}': {result.message}"]
            return DisplayContext(messages=messages + buffered.messages, focus_id=buffered.focus_id)
        self.mode = SearchMode(pending_query=query, result=result, buffered=buffered)
        return DisplayContext(messages=[result.message, "Press Enter to return to combat."])

    def _order(self, argument: str) -> DisplayContext:
        messages = [f"Initiative Order (Round {self.encounter.round}):"]
        for index, combatant in enumerate(self.encounter.ordered_combatants()):
            marker = ">>>" if index == self.encounter.turn_index else "   "
            messages.append(
                f"{marker} Init {combatant.initiative}: {combatant.name} "
                f"(AC: {combatant.armor_class}, HP: {combatant.hp}/{combatant.max_hp})"
            )
        return DisplayContext(messages=messages, focus_id=self.display.focus_id)

    def _status(self, argument: str) -> DisplayContext:
        parts = argument.split()
        if parts and parts[0].lower() == "list":
            parts = parts[1:]
        if not parts:
            return DisplayContext(messages=self._status_summary(), focus_id=self.display.focus_id)
        target = self._find_target(parts[0])
        if len(parts) == 1:
            if not target.effects:
                return DisplayContext(messages=[f"{target.name} has no active effects."], focus_id=target.id)
            lines = [f"{target.name} effects:"]
            lines.extend(f"  {e.name} ({e.duration} rounds)" for e in target.effects.values())
            return DisplayContext(messages=lines, focus_id=target.id)

        action = parts[1].lower()
        if action == "add":
            if len(parts) < 4:
                raise MalformedArgument("Usage: status <target> add <name> <rounds> [description]")
            name = parts[2]
            try:
                duration = int(parts[3])
            except ValueError:
                raise MalformedArgument(f"Rounds must be a whole number, got '{parts[3]}'") from None
            if duration <= 0:
                raise MalformedArgument(f"Rounds must be positive, got {duration}")
            description = " ".join(parts[4:]) or None
            entry = self.encounter.apply_effect(
                target.id, StatusEffect(name=name, duration=duration, description=description)
            )
            return DisplayContext(messages=[entry.description], focus_id=target.id)
        if action == "remove":
            if len(parts) < 3:
                raise MalformedArgument("Usage: status <target> remove <name>")
            entry = self.encounter.remove_effect(target.id, " ".join(parts[2:]))
            return DisplayContext(messages=[entry.description], focus_id=target.id)
        raise MalformedArgument(
            f"Unknown status action '{parts[1]}'. Use 'add' or 'remove'.",
            {"action": parts[1]},
        )

    def _status_summary(self) -> list[str]:
        lines = ["Status effects:"]
        for combatant in self.encounter.ordered_combatants():
            effects = ", ".join(f"{e.name} ({e.duration})" for e in combatant.effects.values())
            lines.append(f"  {combatant.name}: {effects or 'none'}")
        return lines

    def _damage(self, argument: str) -> DisplayContext:
        target_name, _, amount_text = self._require(argument, Command.DAMAGE).rpartition(" ")
        if not target_name:
            raise MalformedArgument("Usage: damage <target> <amount>")
        try:
            amount = int(amount_text)
        except ValueError:
            raise MalformedArgument(f"Damage must be a whole number, got '{amount_text}'") from None
        target = self._find_target(target_name.strip())
        entry = self.encounter.apply_damage(target.id, amount)
        return DisplayContext(messages=[entry.description], focus_id=target.id)

    def _quit(self, argument: str) -> DisplayContext:
        self._quit_requested = True
        return DisplayContext(messages=["Exiting combat mode..."])
