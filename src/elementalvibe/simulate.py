"""Offline archetype/element distribution simulation.

Run:
    uv run elementalvibe-simulate --iterations 10000 --seed 7
"""

import argparse
import random
import string
from collections import Counter
from dataclasses import dataclass, field
from datetime import date, timedelta

from elementalvibe.compute import calculate_elements, determine_archetype
from elementalvibe.models import AXES


@dataclass
class DistributionReport:
    """Tallies from one simulation run."""

    iterations: int
    archetypes: Counter[str] = field(default_factory=Counter)
    primary_axes: Counter[str] = field(default_factory=Counter)

    def percentages(self, counts: Counter[str]) -> dict[str, float]:
        if not self.iterations:
            return {key: 0.0 for key in counts}
        return {key: count / self.iterations * 100 for key, count in counts.items()}

    def element_table(self) -> list[tuple[str, float]]:
        """Primary-axis share per axis, in natural axis order (zeros included)."""
        pct = self.percentages(self.primary_axes)
        return [(axis, pct.get(axis, 0.0)) for axis in AXES]

    def archetype_table(self) -> list[tuple[str, float]]:
        """Archetype shares, most common first."""
        pct = self.percentages(self.archetypes)
        return [(name, pct[name]) for name, _ in self.archetypes.most_common()]


def random_birthdate(rng: random.Random, start: date, end: date) -> str:
    """Uniform date in [start, end) as "M/D/YYYY"."""
    span = max((end - start).days, 1)
    d = start + timedelta(days=rng.randrange(span))
    return f"{d.month}/{d.day}/{d.year}"


def random_name(rng: random.Random) -> str:
    """3–10 ASCII letters, mixed case."""
    length = rng.randint(3, 10)
    return "".join(rng.choice(string.ascii_letters) for _ in range(length))


def simulate_distribution(
    iterations: int = 10000,
    seed: int | None = None,
    start: date = date(1980, 1, 1),
    end: date = date(2005, 1, 1),
) -> DistributionReport:
    """Score random (birthdate, name) pairs and tally the outcomes.

    Args:
        iterations: Number of random inputs.
        seed: RNG seed for reproducible runs.
        start: Earliest birthdate (inclusive).
        end: Latest birthdate (exclusive).

    Returns:
        DistributionReport with archetype and primary-axis counts.
    """
    rng = random.Random(seed)
    report = DistributionReport(iterations=iterations)
    for _ in range(iterations):
        profile = calculate_elements(random_birthdate(rng, start, end), random_name(rng))
        arch = determine_archetype(profile)
        report.archetypes[arch.name] += 1
        report.primary_axes[arch.primary] += 1
    return report


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Simulate the archetype distribution.")
    parser.add_argument("--iterations", type=int, default=10000)
    parser.add_argument("--seed", type=int, default=None)
    args = parser.parse_args(argv)

    report = simulate_distribution(args.iterations, seed=args.seed)

    print("--- Element Distribution ---")
    for axis, pct in report.element_table():
        print(f"{axis}: {pct:.2f}%")

    print("\n--- Archetype Distribution ---")
    for name, pct in report.archetype_table():
        print(f"{name}: {pct:.2f}%")


if __name__ == "__main__":
    main()
