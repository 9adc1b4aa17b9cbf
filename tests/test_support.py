"""Tests for assets, configuration, i18n, the simulation utility and the CLI."""

import pytest

from elementalvibe.assets import (
    ARCHETYPE_ASSETS,
    FALLBACK_ASSETS,
    local_asset_files,
    resolve_assets,
)
from elementalvibe.compute import ARCHETYPE_NAMES
from elementalvibe.config import DEFAULT_MIN_DURATION, DEFAULT_MODEL, load_settings
from elementalvibe.i18n import t
from elementalvibe.models import ArchetypeAssets
from elementalvibe.reading import main as reading_main
from elementalvibe.simulate import main as simulate_main
from elementalvibe.simulate import simulate_distribution


# ═══════════════════════════════════════════════════════════════════════════
# Assets
# ═══════════════════════════════════════════════════════════════════════════


class TestAssets:
    def test_every_archetype_has_assets(self):
        for name in ARCHETYPE_NAMES.values():
            assert name in ARCHETYPE_ASSETS

    def test_paths(self):
        assert resolve_assets("Tidal Sage") == ArchetypeAssets(
            front="/characters/tidal-sage-front.svg",
            side="/characters/tidal-sage-side.svg",
        )

    def test_unknown_name_falls_back(self):
        assert resolve_assets("Nobody") == FALLBACK_ASSETS
        assert FALLBACK_ASSETS.front == "/characters/cosmic-wanderer-front.svg"

    def test_injected_table(self):
        table = {"Iron Oak": ArchetypeAssets("a.png", "b.png")}
        assert resolve_assets("Iron Oak", table).front == "a.png"
        assert resolve_assets("Tidal Sage", table) == FALLBACK_ASSETS

    def test_local_files_only_when_present(self, tmp_path):
        assets = resolve_assets("Tidal Sage")
        assert local_asset_files(assets, tmp_path) == []

        characters = tmp_path / "characters"
        characters.mkdir()
        (characters / "tidal-sage-side.svg").write_text("<svg/>")
        assert local_asset_files(assets, tmp_path) == [characters / "tidal-sage-side.svg"]

        (characters / "tidal-sage-front.svg").write_text("<svg/>")
        assert [p.name for p in local_asset_files(assets, tmp_path)] == [
            "tidal-sage-front.svg",
            "tidal-sage-side.svg",
        ]


# ═══════════════════════════════════════════════════════════════════════════
# Config
# ═══════════════════════════════════════════════════════════════════════════


class TestConfig:
    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch):
        for var in (
            "ANTHROPIC_API_KEY",
            "ELEMENTAL_MODEL",
            "ELEMENTAL_MAX_TOKENS",
            "ELEMENTAL_MIN_DURATION",
            "ELEMENTAL_MAX_RETRIES",
            "ELEMENTAL_BACKOFF_BASE",
        ):
            monkeypatch.delenv(var, raising=False)

    def test_defaults(self):
        settings = load_settings(dotenv=False)
        assert settings.api_key is None
        assert settings.model == DEFAULT_MODEL
        assert settings.min_duration == DEFAULT_MIN_DURATION
        assert settings.max_retries == 3
        assert settings.backoff_base == 1.0

    def test_overrides(self, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-test")
        monkeypatch.setenv("ELEMENTAL_MIN_DURATION", "8")
        monkeypatch.setenv("ELEMENTAL_MAX_RETRIES", "5")
        settings = load_settings(dotenv=False)
        assert settings.api_key == "sk-test"
        assert settings.min_duration == 8.0
        assert settings.max_retries == 5

    def test_malformed_values_fall_back(self, monkeypatch, caplog):
        monkeypatch.setenv("ELEMENTAL_MAX_RETRIES", "lots")
        monkeypatch.setenv("ELEMENTAL_MIN_DURATION", "-2")
        settings = load_settings(dotenv=False)
        assert settings.max_retries == 3
        assert settings.min_duration == DEFAULT_MIN_DURATION
        assert "ELEMENTAL_MAX_RETRIES" in caplog.text

    @pytest.mark.parametrize("raw", ["inf", "-inf", "nan", "Infinity"])
    def test_non_finite_values_fall_back(self, monkeypatch, caplog, raw):
        monkeypatch.setenv("ELEMENTAL_MIN_DURATION", raw)
        monkeypatch.setenv("ELEMENTAL_BACKOFF_BASE", raw)
        settings = load_settings(dotenv=False)
        assert settings.min_duration == DEFAULT_MIN_DURATION
        assert settings.backoff_base == 1.0
        assert "ELEMENTAL_MIN_DURATION" in caplog.text


# ═══════════════════════════════════════════════════════════════════════════
# i18n
# ═══════════════════════════════════════════════════════════════════════════


def test_translation_fallbacks():
    assert t("narrative_error", "en") == "The stars are cloudy. Try again later."
    assert t("narrative_error", "fr") == "The stars are cloudy. Try again later."
    assert t("no_such_key", "ko") == "no_such_key"


# ═══════════════════════════════════════════════════════════════════════════
# Simulation
# ═══════════════════════════════════════════════════════════════════════════


class TestSimulation:
    def test_counts_add_up(self):
        report = simulate_distribution(2000, seed=7)
        assert sum(report.archetypes.values()) == 2000
        assert sum(report.primary_axes.values()) == 2000
        assert sum(pct for _, pct in report.element_table()) == pytest.approx(100.0)

    def test_seeded_runs_are_reproducible(self):
        assert simulate_distribution(500, seed=3) == simulate_distribution(500, seed=3)

    def test_fallback_never_appears(self):
        report = simulate_distribution(3000, seed=11)
        assert "Cosmic Wanderer" not in report.archetypes
        assert set(report.archetypes) <= set(ARCHETYPE_NAMES.values())

    def test_archetype_table_sorted(self):
        table = simulate_distribution(1000, seed=5).archetype_table()
        shares = [pct for _, pct in table]
        assert shares == sorted(shares, reverse=True)

    def test_zero_iterations(self):
        report = simulate_distribution(0)
        assert report.element_table() == [(axis, 0.0) for axis in ("fire", "water", "wood", "earth", "metal")]

    def test_cli(self, capsys):
        simulate_main(["--iterations", "200", "--seed", "1"])
        out = capsys.readouterr().out
        assert "--- Element Distribution ---" in out
        assert "--- Archetype Distribution ---" in out


# ═══════════════════════════════════════════════════════════════════════════
# Reading CLI
# ═══════════════════════════════════════════════════════════════════════════


class TestReadingCli:
    def test_prints_profile(self, capsys):
        assert reading_main(["07/15/1998", "Alex"]) == 0
        out = capsys.readouterr().out
        assert "Solar Nomad (earth + fire)" in out
        assert "season: summer" in out

    def test_saves_png(self, tmp_path, capsys):
        target = tmp_path / "alex.png"
        reading_main(["07/15/1998", "Alex", "--png", str(target)])
        assert target.exists()

    def test_unavailable_narrative_prints_apology(self, monkeypatch, capsys):
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        monkeypatch.setenv("ELEMENTAL_MIN_DURATION", "0")
        assert reading_main(["07/15/1998", "Alex", "--narrative"]) == 1
        out = capsys.readouterr().out
        assert out.rstrip().endswith(t("narrative_error", "en"))
