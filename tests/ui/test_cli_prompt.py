"""
Tests for the interactive tracker loop, driven by scripted input.
"""

from rich.console import Console

from combat_tracker.ui.cli_interface import render_result
from combat_tracker.ui.cli_prompt import command_completer, confirm, run_tracker


def render_text(result):
    console = Console(width=120, color_system=None)
    with console.capture() as capture:
        console.print(render_result(result))
    return capture.get()


class ScriptedPrompt:
    """Returns queued lines, then raises EOFError like a closed terminal."""

    def __init__(self, *lines):
        self.lines = list(lines)
        self.messages = []

    def __call__(self, message, completer=None):
        self.messages.append(message)
        if not self.lines:
            raise EOFError
        return self.lines.pop(0)


def test_quit_ends_the_loop(interpreter):
    prompt = ScriptedPrompt("stats orc", "quit", "next")
    rendered = []
    result = run_tracker(interpreter, prompt=prompt, render=rendered.append)
    assert result.quit
    assert len(rendered) == 3
    assert prompt.lines == ["next"]
    assert prompt.messages == ["Round 1 > ", "Round 1 > "]


def test_end_of_input_ends_the_loop(interpreter):
    prompt = ScriptedPrompt("next")
    result = run_tracker(interpreter, prompt=prompt, render=lambda renderable: None)
    assert result.snapshot.current_id == "goblin"
    assert len(prompt.messages) == 2


def test_prompt_label_follows_mode(interpreter):
    prompt = ScriptedPrompt("search fireball", "", "quit")
    run_tracker(interpreter, prompt=prompt, render=lambda renderable: None)
    assert prompt.messages == ["Round 1 > ", "Search > ", "Round 1 > "]


def test_completion_is_confirmed(interpreter):
    prompt = ScriptedPrompt("damage goblin 50", "damage orc 50", "y", "next")
    result = run_tracker(interpreter, prompt=prompt, render=lambda renderable: None)
    assert result.encounter_complete
    assert prompt.lines == ["next"]
    assert prompt.messages[-1].endswith("(y/n) ")


def test_declined_completion_is_not_asked_again(interpreter):
    prompt = ScriptedPrompt("damage goblin 50", "damage orc 50", "n", "next", "quit")
    result = run_tracker(interpreter, prompt=prompt, render=lambda renderable: None)
    assert result.quit
    assert sum(message.endswith("(y/n) ") for message in prompt.messages) == 1


def test_confirm_repeats_until_answered():
    prompt = ScriptedPrompt("maybe", "YES")
    assert confirm("Really?", prompt)
    assert len(prompt.messages) == 2


def test_completer_offers_commands_and_names():
    words = command_completer(["Goblin", "orc"]).words
    assert "attack" in words
    assert "continue" in words
    assert "Goblin" in words


def test_render_combat_screen(interpreter):
    interpreter.handle("status orc add Poisoned 2")
    output = render_text(interpreter.handle("stats orc"))
    assert "Initiative Order (Round 1)" in output
    assert "Fighter" in output
    assert "Poisoned (2 rounds)" in output
    assert "Encounter Log" in output


def test_render_error(interpreter):
    output = render_text(interpreter.handle("dance"))
    assert "UnknownCommand" in output


def test_render_reference_entry(interpreter):
    output = render_text(interpreter.handle("search fireball"))
    assert "Reference: fireball" in output
    assert "Fireball. 3rd-level evocation." in output
    assert "Initiative Order" not in output
