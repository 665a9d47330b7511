"""
Population statistics for Bugtopia.

A pure reduction over the engine's bugs: counts per species, plus the mean
of every gene, energy and age over living bugs. Hunting genes are averaged
over living hunters only, since other species do not carry them. An empty
population (or one without hunters) yields zero counts and 0.0 means.
"""

from dataclasses import dataclass, field, fields

import numpy as np

from genome import (
    SpeciesType, PhysicalGenes, ToolDNA, DefensiveBehavior, HuntingBehavior,
)

PHYSICAL_GENES  = tuple(f.name for f in fields(PhysicalGenes))
TOOL_GENES      = tuple(f.name for f in fields(ToolDNA))
DEFENSIVE_GENES = tuple(f.name for f in fields(DefensiveBehavior))
HUNTING_GENES   = tuple(f.name for f in fields(HuntingBehavior))
SPECIES_GENES   = ("hunt_energy_gain", "metabolic_rate")
ALL_MEANS = (("energy", "age") + PHYSICAL_GENES + TOOL_GENES + DEFENSIVE_GENES
             + SPECIES_GENES + HUNTING_GENES)


@dataclass(frozen=True)
class Statistics:
    tick:          int = 0
    generation:    int = 0
    alive:         int = 0
    dead_visible:  int = 0
    season:        str = ""
    weather:       str = ""
    species_counts: dict = field(default_factory=dict)
    means:          dict = field(default_factory=dict)

    def mean(self, name: str) -> float:
        """Mean of a gene (or 'energy' / 'age') over living bugs."""
        return self.means.get(name, 0.0)

    def count(self, species: SpeciesType) -> int:
        return self.species_counts.get(species.value, 0)

    def to_dict(self) -> dict:
        row = {
            "tick":         self.tick,
            "generation":   self.generation,
            "alive":        self.alive,
            "dead_visible": self.dead_visible,
            "season":       self.season,
            "weather":      self.weather,
        }
        for s in SpeciesType:
            row[s.value] = self.count(s)
        for name in ALL_MEANS:
            row[f"avg_{name}"] = round(self.mean(name), 4)
        return row


def _mean(values) -> float:
    return float(np.mean(list(values)))


def recompute(bugs, tick: int = 0, generation: int = 0,
              season: str = "", weather: str = "") -> Statistics:
    """Summarise a population (any iterable of bugs, alive or dead).

    season and weather are carried through as labels on the row.
    """
    bugs = list(bugs)
    living = [b for b in bugs if b.alive]

    counts = {s.value: 0 for s in SpeciesType}
    for b in living:
        counts[b.dna.species_type.value] += 1

    means = {name: 0.0 for name in ALL_MEANS}
    if living:
        means["energy"] = _mean(b.energy for b in living)
        means["age"]    = _mean(b.age for b in living)
        for name in PHYSICAL_GENES:
            means[name] = _mean(getattr(b.dna.physical, name) for b in living)
        for name in TOOL_GENES:
            means[name] = _mean(getattr(b.dna.tools, name) for b in living)
        for name in DEFENSIVE_GENES:
            means[name] = _mean(getattr(b.dna.species.defense, name) for b in living)
        for name in SPECIES_GENES:
            means[name] = _mean(getattr(b.dna.species, name) for b in living)

    hunters = [b.dna.species.hunting for b in living
               if b.dna.species.hunting is not None]
    if hunters:
        for name in HUNTING_GENES:
            means[name] = _mean(getattr(h, name) for h in hunters)

    return Statistics(
        tick=tick,
        generation=generation,
        alive=len(living),
        dead_visible=len(bugs) - len(living),
        season=season,
        weather=weather,
        species_counts=counts,
        means=means,
    )
