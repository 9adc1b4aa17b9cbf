"""CLI entry point for a single elemental reading.

Run:
    uv run elementalvibe 01/02/2000 Ziying --png results/ziying.png --narrative
"""

import argparse
import asyncio
import logging
from pathlib import Path

from dotenv import load_dotenv

from elementalvibe.compute import run
from elementalvibe.config import load_settings
from elementalvibe.i18n import t
from elementalvibe.models import QueryInput, Reading
from elementalvibe.narrative import NarrativeError


def format_reading(reading: Reading) -> str:
    lines = [f"{reading.archetype.name} ({reading.archetype.primary} + {reading.archetype.secondary})"]
    for axis, score in reading.profile.items():
        lines.append(f"  {axis:<6}{score:>4}")
    lines.append(f"  season: {reading.season}")
    return "\n".join(lines)


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    parser = argparse.ArgumentParser(description="Compute an elemental reading.")
    parser.add_argument("birthdate", help='"MM/DD/YYYY"')
    parser.add_argument("name")
    parser.add_argument("--png", type=Path, default=None, help="Save the radar chart here")
    parser.add_argument("--narrative", action="store_true", help="Ask Claude for the narrative")
    parser.add_argument("--brief", action="store_true", help="Use the short narrative variant")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    reading = run(QueryInput(birthdate=args.birthdate, name=args.name))
    print(format_reading(reading))

    if args.png is not None:
        from elementalvibe.renderers.static import save_static_radar

        path = save_static_radar(reading.profile, args.png)
        print(f"Saved: {path}")

    if args.narrative:
        from elementalvibe.orchestrator import NarrativeOrchestrator

        orchestrator = NarrativeOrchestrator(
            settings=load_settings(dotenv=False),
            variant="brief" if args.brief else "full",
        )
        try:
            result = asyncio.run(orchestrator.run(reading))
        except NarrativeError:
            print(t("narrative_error", "en"))
            return 1
        for key, value in vars(result).items():
            print(f"{key}: {value}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
