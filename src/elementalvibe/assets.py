"""Archetype → character image lookup."""

from collections.abc import Mapping
from pathlib import Path

from elementalvibe.compute import ARCHETYPE_NAMES, FALLBACK_ARCHETYPE
from elementalvibe.models import ArchetypeAssets


def _slug(name: str) -> str:
    return name.lower().replace(" ", "-")


def _character(name: str) -> ArchetypeAssets:
    slug = _slug(name)
    return ArchetypeAssets(
        front=f"/characters/{slug}-front.svg",
        side=f"/characters/{slug}-side.svg",
    )


# Served files live under static/, e.g. static/characters/tidal-sage-front.svg
ASSET_ROOT = Path(__file__).parent.parent.parent / "static"

FALLBACK_ASSETS = _character(FALLBACK_ARCHETYPE)

ARCHETYPE_ASSETS: dict[str, ArchetypeAssets] = {
    name: _character(name) for name in ARCHETYPE_NAMES.values()
}
ARCHETYPE_ASSETS[FALLBACK_ARCHETYPE] = FALLBACK_ASSETS


def resolve_assets(
    name: str, table: Mapping[str, ArchetypeAssets] | None = None
) -> ArchetypeAssets:
    """Image pair for an archetype name; the fallback pair for unknown names."""
    table = ARCHETYPE_ASSETS if table is None else table
    return table.get(name, FALLBACK_ASSETS)


def local_asset_files(
    assets: ArchetypeAssets, root: Path | None = None
) -> list[Path]:
    """Existing files for an image pair, front first. Missing files are skipped."""
    root = ASSET_ROOT if root is None else root
    files = (root / path.lstrip("/") for path in (assets.front, assets.side))
    return [f for f in files if f.is_file()]
