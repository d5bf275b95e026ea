"""
Constants and enumerations for the combat tracker.

Defines the enumerations for combatant kinds, log outcomes and lookup
failures, together with the command vocabulary understood by the command
interpreter.
"""

from enum import Enum
from typing import Optional

# Sides of the die used for attack and initiative rolls.
D20 = 20

# Number of log entries shown after every processed command.
DEFAULT_LOG_TAIL = 8

# Inputs that acknowledge a reference lookup and return to combat.
ACKNOWLEDGEMENTS = frozenset({"", "ok", "back", "done"})

# Alias accepted as a target for the combatant whose turn it is.
SELF_ALIAS = "self"


class NiceEnum(Enum):
    """An enumeration that provides a nicer string representation."""

    def __str__(self) -> str:
        return self.name

    @property
    def display_name(self) -> str:
        return self.name.lower().replace("_", " ").capitalize()


class CombatantKind(NiceEnum):
    """Defines the kind of combatant taking part in an encounter."""

    PLAYER = "PLAYER"
    NPC = "NPC"
    MONSTER = "MONSTER"

    @property
    def emoji(self) -> str:
        """Returns the emoji associated with this combatant kind."""
        return {
            CombatantKind.PLAYER: "🧙",
            CombatantKind.NPC: "👤",
            CombatantKind.MONSTER: "👹",
        }.get(self, "❔")

    @property
    def color(self) -> str:
        """Returns the color string associated with this combatant kind."""
        return {
            CombatantKind.PLAYER: "bold blue",
            CombatantKind.NPC: "bold green",
            CombatantKind.MONSTER: "bold red",
        }.get(self, "dim white")

    def colorize(self, message: str) -> str:
        """Applies combatant kind color formatting to a message."""
        return f"[{self.color}]{message}[/]"


class LogOutcome(NiceEnum):
    """Defines the outcome recorded by an encounter log entry."""

    HIT = "HIT"
    MISS = "MISS"
    DAMAGE = "DAMAGE"
    DEFEATED = "DEFEATED"
    EFFECT_APPLIED = "EFFECT_APPLIED"
    EFFECT_REMOVED = "EFFECT_REMOVED"
    EFFECT_EXPIRED = "EFFECT_EXPIRED"

    @property
    def color(self) -> str:
        """Returns the color string associated with this outcome."""
        return {
            LogOutcome.HIT: "bold green",
            LogOutcome.MISS: "bold yellow",
            LogOutcome.DAMAGE: "bold red",
            LogOutcome.DEFEATED: "bold red",
            LogOutcome.EFFECT_APPLIED: "bold magenta",
            LogOutcome.EFFECT_REMOVED: "magenta",
            LogOutcome.EFFECT_EXPIRED: "dim white",
        }.get(self, "dim white")

    def colorize(self, message: str) -> str:
        """Applies outcome color formatting to a message."""
        return f"[{self.color}]{message}[/]"


class LookupFailure(NiceEnum):
    """Defines the ways a reference lookup can fail."""

    NOT_FOUND = "NOT_FOUND"
    NETWORK_TIMEOUT = "NETWORK_TIMEOUT"
    PARSE_ERROR = "PARSE_ERROR"
    CACHE_ERROR = "CACHE_ERROR"

    @property
    def friendly_message(self) -> str:
        """Returns the message shown to the user for this failure."""
        return {
            LookupFailure.NOT_FOUND: "No reference entry matches that query.",
            LookupFailure.NETWORK_TIMEOUT: "The reference service did not answer in time.",
            LookupFailure.PARSE_ERROR: "The reference page could not be read.",
            LookupFailure.CACHE_ERROR: "The reference cache could not be used.",
        }[self]


class Command(NiceEnum):
    """Commands understood by the command interpreter."""

    ATTACK = "attack"
    STATS = "stats"
    NEXT = "next"
    HELP = "help"
    SEARCH = "search"
    ORDER = "order"
    STATUS = "status"
    DAMAGE = "damage"
    QUIT = "quit"

    @property
    def usage(self) -> str:
        """Returns the usage line shown by the help command."""
        return {
            Command.ATTACK: "attack <target>             Roll d20 + bonus vs the target's AC",
            Command.STATS: "stats <name>                Show hit points, AC and active effects",
            Command.NEXT: "next                        Advance to the next combatant",
            Command.HELP: "help                        Show this command list",
            Command.SEARCH: "search [category] <query>   Look up a rule, spell or monster",
            Command.ORDER: "order (show, list)          Show the initiative order",
            Command.STATUS: "status [list] [target] | status <target> add <name> <rounds> | status <target> remove <name>",
            Command.DAMAGE: "damage <target> <amount>    Apply damage by hand",
            Command.QUIT: "quit                        Leave the combat tracker",
        }[self]


# Aliases mapped onto their canonical command.
COMMAND_ALIASES: dict[str, Command] = {
    "continue": Command.NEXT,
    "exit": Command.QUIT,
    "show": Command.ORDER,
    "list": Command.ORDER,
    "h": Command.HELP,
    "?": Command.HELP,
}


class SearchCategory(NiceEnum):
    """Defines the reference categories a search can be restricted to."""

    SPELLS = "spells"
    CLASSES = "classes"
    EQUIPMENT = "equipment"
    MONSTERS = "monsters"
    RACES = "races"

    @property
    def page_patterns(self) -> tuple[str, ...]:
        """Returns the reference page paths tried for this category."""
        return {
            SearchCategory.SPELLS: ("spell:{slug}",),
            SearchCategory.CLASSES: ("{slug}",),
            SearchCategory.EQUIPMENT: ("equipment:{slug}", "weapon:{slug}", "armor:{slug}"),
            SearchCategory.MONSTERS: ("monster:{slug}",),
            SearchCategory.RACES: ("{slug}",),
        }[self]

    @classmethod
    def from_word(cls, word: str) -> Optional["SearchCategory"]:
        """Maps a category word (or alias) to its category, or None."""
        return SEARCH_CATEGORY_ALIASES.get(word.lower())


# Words accepted in front of a search query to restrict its category.
SEARCH_CATEGORY_ALIASES: dict[str, SearchCategory] = {
    "spell": SearchCategory.SPELLS,
    "spells": SearchCategory.SPELLS,
    "class": SearchCategory.CLASSES,
    "classes": SearchCategory.CLASSES,
    "equipment": SearchCategory.EQUIPMENT,
    "item": SearchCategory.EQUIPMENT,
    "items": SearchCategory.EQUIPMENT,
    "gear": SearchCategory.EQUIPMENT,
    "monster": SearchCategory.MONSTERS,
    "monsters": SearchCategory.MONSTERS,
    "creature": SearchCategory.MONSTERS,
    "creatures": SearchCategory.MONSTERS,
    "race": SearchCategory.RACES,
    "races": SearchCategory.RACES,
}
