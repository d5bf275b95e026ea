"""
Rendering module for the combat tracker.

Turns the result of each processed command into rich renderables: the
initiative table, the focused combatant's stats, the messages of the command
and the tail of the encounter log.
"""

from typing import Optional

from rich.console import Group, RenderableType
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from combat_tracker.combat.combatant import Combatant
from combat_tracker.combat.command_interpreter import CommandResult
from combat_tracker.combat.encounter import EncounterSnapshot
from combat_tracker.combat.encounter_log import LogEntry


def initiative_table(snapshot: EncounterSnapshot) -> Table:
    """Builds the initiative order table, marking the active combatant."""
    table = Table(title=f"Initiative Order (Round {snapshot.round})", pad_edge=False)
    table.add_column("", no_wrap=True)
    table.add_column("Init", style="cyan", justify="right")
    table.add_column("Name", style="bold")
    table.add_column("HP", justify="right")
    table.add_column("AC", justify="right")
    table.add_column("Effects", style="magenta")
    for index, combatant in enumerate(snapshot.combatants):
        marker = ">>>" if index == snapshot.turn_index else ""
        hp = f"{combatant.hp}/{combatant.max_hp}"
        if not combatant.is_alive():
            hp = f"[bold red]{hp} 💀[/]"
        elif combatant.is_bloodied:
            hp = f"[red]{hp}[/]"
        effects = ", ".join(f"{e.name} ({e.duration})" for e in combatant.effects.values())
        table.add_row(
            marker,
            str(combatant.initiative),
            f"{combatant.kind.emoji} {combatant.colored_name}",
            hp,
            str(combatant.armor_class),
            effects,
        )
    return table


def stats_panel(combatant: Combatant) -> Panel:
    """Builds the stats panel of one combatant."""
    table = Table.grid(padding=(0, 2))
    table.add_column(style="bold")
    table.add_column()
    table.add_row("HP", f"{combatant.hp_bar} {combatant.hp}/{combatant.max_hp}")
    if combatant.temp_hp:
        table.add_row("Temp HP", str(combatant.temp_hp))
    table.add_row("AC", str(combatant.armor_class))
    table.add_row("Attack", f"{combatant.attack_bonus:+d}, {combatant.damage_dice}")
    table.add_row("Initiative", str(combatant.initiative))
    for effect in combatant.effects.values():
        table.add_row("Effect", f"{effect.name} ({effect.duration} rounds)")
    return Panel(
        table,
        title=f"{combatant.kind.emoji} {combatant.colored_name} ({combatant.kind.display_name})",
        expand=False,
    )


def log_panel(entries: list[LogEntry]) -> Panel:
    """Builds the panel showing the tail of the encounter log."""
    lines = Text()
    for entry in entries:
        lines.append(f"R{entry.round} ", style="cyan")
        lines.append_text(Text.from_markup(entry.outcome.colorize(entry.outcome.display_name)))
        lines.append(f" {entry.description}\n")
    return Panel(lines or Text("Nothing has happened yet.", style="dim"), title="Encounter Log")


def _find(snapshot: EncounterSnapshot, combatant_id: Optional[str]) -> Optional[Combatant]:
    for combatant in snapshot.combatants:
        if combatant.id == combatant_id:
            return combatant
    return None


def render_result(result: CommandResult) -> RenderableType:
    """
    Builds the full screen for a processed command.

    In SEARCH mode only the reference entry is shown; in COMBAT mode the
    initiative table, the focused stats, the messages and the log tail.

    """
    if result.mode == "SEARCH" and result.lookup is not None:
        return Group(
            Panel(Text(result.lookup.message), title=f"Reference: {result.lookup.query}"),
            Text("Press Enter to return to combat.", style="dim"),
        )

    parts: list[RenderableType] = [initiative_table(result.snapshot)]
    focused = _find(result.snapshot, result.focus_id)
    if focused is not None:
        parts.append(stats_panel(focused))
    if result.messages:
        parts.append(Text("\n".join(result.messages)))
    if result.error_message:
        parts.append(Text.from_markup(f"[bold red]❌ {result.error}:[/] {result.error_message}"))
    parts.append(log_panel(result.log_tail))
    return Group(*parts)
