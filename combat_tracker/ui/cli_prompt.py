"""
Interactive prompt for the combat tracker.

Reads one line at a time with prompt_toolkit, hands it to the command
interpreter and renders the result with rich.
"""

from typing import Callable, Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import WordCompleter
from rich.console import RenderableType

from combat_tracker.combat.command_interpreter import CommandInterpreter, CommandResult
from combat_tracker.core.constants import COMMAND_ALIASES, Command
from combat_tracker.core.utils import cprint, crule
from combat_tracker.ui.cli_interface import render_result

# Created lazily: building a session needs a terminal.
_session: Optional[PromptSession] = None


def command_completer(names: list[str]) -> WordCompleter:
    """Completes command words and combatant names."""
    words = [command.value for command in Command] + list(COMMAND_ALIASES) + names
    return WordCompleter(words, ignore_case=True, sentence=False)


def show_prompt(message: str, completer: Optional[WordCompleter] = None) -> str:
    """
    Show a prompt with the given message and return the user's input.
    """
    global _session
    if _session is None:
        _session = PromptSession()
    return _session.prompt(message, completer=completer, complete_while_typing=True)


def confirm(message: str, prompt: Callable[..., str] = show_prompt) -> bool:
    """Asks a yes/no question until it gets an answer."""
    while True:
        answer = prompt(f"{message} (y/n) ").strip().lower()
        if answer in ("y", "yes"):
            return True
        if answer in ("n", "no"):
            return False
        cprint("Please enter 'y' or 'n'")


def run_tracker(
    interpreter: CommandInterpreter,
    prompt: Callable[..., str] = show_prompt,
    render: Callable[[RenderableType], None] = cprint,
) -> CommandResult:
    """
    Runs the tracker loop until the user quits or confirms the end of combat.

    Args:
        interpreter (CommandInterpreter): The interpreter owning the encounter.
        prompt (Callable[..., str]): Reads one line of input.
        render (Callable[[RenderableType], None]): Displays a renderable.

    Returns:
        CommandResult: The last processed result.

    """
    crule("⚔️  Combat Tracker", style="bold green")
    result = interpreter.handle(Command.ORDER.value)
    render(render_result(result))
    completer = command_completer(
        [c.name for c in interpreter.encounter.ordered_combatants()]
        + interpreter.encounter.registry.ids
    )
    completion_offered = False

    while True:
        label = "Search" if result.mode == "SEARCH" else f"Round {result.snapshot.round}"
        try:
            line = prompt(f"{label} > ", completer=completer)
        except (EOFError, KeyboardInterrupt):
            cprint("💀 Exiting combat mode...")
            break

        result = interpreter.handle(line)
        render(render_result(result))
        if result.quit:
            break

        if result.encounter_complete and not completion_offered:
            completion_offered = True
            if confirm("🏆 All opponents are defeated. End the encounter?", prompt):
                break

    crule("Combat Over", style="bold green")
    return result
