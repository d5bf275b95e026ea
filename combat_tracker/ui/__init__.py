"""
Console user interface: rich rendering and the prompt_toolkit input loop.
"""

from .cli_interface import initiative_table, log_panel, render_result, stats_panel
from .cli_prompt import run_tracker

__all__ = [
    "initiative_table",
    "log_panel",
    "render_result",
    "stats_panel",
    "run_tracker",
]
