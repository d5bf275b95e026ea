"""
Main entry point for the combat tracker.

Loads a roster of combatants, builds the encounter and runs the interactive
tracker loop:

    combat-tracker data/example_roster.json
    combat-tracker data/example_roster.json --offline --reference-file data/reference_notes.json
"""

import argparse
import json
import random
import sys
from pathlib import Path
from typing import Optional

from catchery import log_warning

from combat_tracker.combat.command_interpreter import CommandInterpreter
from combat_tracker.combat.encounter import Encounter
from combat_tracker.combat.roster import build_combatants, load_roster
from combat_tracker.core.config import TrackerSettings, load_settings
from combat_tracker.core.dice import DiceRoller
from combat_tracker.core.errors import TrackerError
from combat_tracker.core.logging import setup_logging
from combat_tracker.core.utils import cprint
from combat_tracker.reference.bridge import ReferenceLookupBridge
from combat_tracker.reference.service import (
    HttpReferenceService,
    ReferenceService,
    StaticReferenceService,
)
from combat_tracker.ui.cli_prompt import run_tracker


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="combat-tracker",
        description="Track initiative, attacks and status effects for a tabletop encounter.",
    )
    parser.add_argument("roster", type=Path, help="JSON file with the combatants")
    parser.add_argument("--settings", type=Path, default=None, help="JSON settings file")
    parser.add_argument("--seed", type=int, default=None, help="Seed for all dice rolls")
    parser.add_argument("--timeout", type=float, default=None, help="Reference lookup timeout in seconds")
    parser.add_argument("--cache-dir", type=Path, default=None, help="Reference cache directory")
    parser.add_argument("--refresh", action="store_true", default=None, help="Ignore cached reference pages")
    parser.add_argument("--offline", action="store_true", help="Never fetch reference pages")
    parser.add_argument("--reference-file", type=Path, default=None, help="JSON file of offline reference entries")
    parser.add_argument("--log-level", default=None, help="Diagnostic log level (e.g. DEBUG)")
    return parser


def build_reference_service(
    settings: TrackerSettings,
    offline: bool = False,
    reference_file: Optional[Path] = None,
) -> ReferenceService:
    """Chooses the reference service for this session."""
    if offline or reference_file is not None:
        entries: dict[str, str] = {}
        if reference_file is not None:
            with open(reference_file, "r", encoding="utf-8") as f:
                entries = json.load(f)
        return StaticReferenceService(entries, source=str(reference_file or "offline notes"))
    return HttpReferenceService(
        base_url=settings.reference_base_url,
        cache_dir=settings.cache_dir,
        timeout=settings.lookup_timeout,
    )


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = load_settings(args.settings).with_overrides(
        lookup_timeout=args.timeout,
        cache_dir=args.cache_dir,
        refresh_cache=args.refresh,
        log_level=args.log_level,
    )
    setup_logging(settings.log_level.upper())

    roller = DiceRoller(random.Random(args.seed))
    try:
        records = load_roster(args.roster)
        combatants = build_combatants(records, roller)
        encounter = Encounter(combatants, roller=roller)
    except (OSError, ValueError, TrackerError) as e:
        log_warning(f"Could not start the encounter: {e}", {"roster": str(args.roster)})
        cprint(f"[bold red]❌ Could not start the encounter:[/] {e}")
        return 1

    if not combatants:
        cprint("❌ No combatants added. Exiting combat tracker.")
        return 1

    service = build_reference_service(settings, args.offline, args.reference_file)
    bridge = ReferenceLookupBridge(service, refresh=settings.refresh_cache)
    interpreter = CommandInterpreter(encounter, bridge, log_tail=settings.log_tail)
    try:
        run_tracker(interpreter)
    finally:
        if isinstance(service, HttpReferenceService):
            service.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
