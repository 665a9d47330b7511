"""
Unit tests for the statistics aggregator.
"""

import pytest

from bug import Bug
from genome import SpeciesType
from population_stats import (
    Statistics, recompute, PHYSICAL_GENES, TOOL_GENES, DEFENSIVE_GENES,
    HUNTING_GENES, SPECIES_GENES,
)


class TestRecompute:

    def test_empty_population(self):
        stats = recompute([])
        assert stats.alive == 0
        assert all(stats.count(s) == 0 for s in SpeciesType)
        assert stats.mean("speed") == 0.0
        assert stats.mean("energy") == 0.0

    def test_counts_and_means(self, make_dna):
        bugs = [
            Bug(1, make_dna(speed=1.0), 0, 0, energy=40),
            Bug(2, make_dna(speed=2.0), 0, 0, energy=60),
            Bug(3, make_dna(SpeciesType.CARNIVORE, speed=0.5), 0, 0, energy=80),
        ]
        stats = recompute(bugs, tick=9, generation=2)
        assert (stats.tick, stats.generation, stats.alive) == (9, 2, 3)
        assert stats.count(SpeciesType.HERBIVORE) == 2
        assert stats.count(SpeciesType.CARNIVORE) == 1
        assert stats.mean("speed") == pytest.approx(3.5 / 3)
        assert stats.mean("energy") == pytest.approx(60.0)

    def test_dead_bugs_only_counted_as_visible(self, make_dna):
        alive = Bug(1, make_dna(speed=1.0), 0, 0, energy=50)
        dead = Bug(2, make_dna(speed=2.0), 0, 0, energy=0)
        dead.die("starved", 3)
        stats = recompute([alive, dead])
        assert (stats.alive, stats.dead_visible) == (1, 1)
        assert stats.mean("speed") == pytest.approx(1.0)

    def test_defensive_and_species_means(self, make_dna):
        bugs = [
            Bug(1, make_dna(metabolic_rate=1.5, defense={"predator_detection": 0.2}), 0, 0),
            Bug(2, make_dna(metabolic_rate=0.5, defense={"predator_detection": 0.6}), 0, 0),
        ]
        stats = recompute(bugs)
        assert stats.mean("metabolic_rate") == pytest.approx(1.0)
        assert stats.mean("predator_detection") == pytest.approx(0.4)
        assert stats.mean("hunt_energy_gain") == pytest.approx(40.0)

    def test_hunting_means_cover_hunters_only(self, make_dna):
        grazer = Bug(1, make_dna(), 0, 0)
        stats = recompute([grazer])
        assert stats.mean("stealth_level") == 0.0

        hunters = [
            Bug(2, make_dna(SpeciesType.CARNIVORE, hunting={"stealth_level": 0.2}), 0, 0),
            Bug(3, make_dna(SpeciesType.OMNIVORE, hunting={"stealth_level": 0.8}), 0, 0),
        ]
        stats = recompute([grazer] + hunters)
        assert stats.mean("stealth_level") == pytest.approx(0.5)
        assert stats.mean("chase_speed_multiplier") == pytest.approx(1.5)


class TestStatisticsRow:

    def test_row_has_every_gene(self, make_dna):
        row = recompute([Bug(1, make_dna(), 0, 0)]).to_dict()
        for name in (PHYSICAL_GENES + TOOL_GENES + DEFENSIVE_GENES
                     + HUNTING_GENES + SPECIES_GENES):
            assert f"avg_{name}" in row
        for species in SpeciesType:
            assert row[species.value] in (0, 1)

    def test_default_statistics(self):
        row = Statistics().to_dict()
        assert row["alive"] == 0
        assert row["avg_energy"] == 0.0

    def test_row_carries_climate_labels(self, make_dna):
        row = recompute([Bug(1, make_dna(), 0, 0)], season="winter",
                        weather="blizzard").to_dict()
        assert (row["season"], row["weather"]) == ("winter", "blizzard")
