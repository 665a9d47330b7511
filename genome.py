"""
Genome model for Bugtopia.

A bug's DNA is made of four immutable gene groups:

  PhysicalGenes  : speed, vision, efficiency, size, strength, memory,
                   stickiness, camouflage, aggression, curiosity
  NeuralDNA      : topology + flat weight and bias vectors
  SpeciesTraits  : species tag + the behaviour records that species needs
  ToolDNA        : crafting, proficiency, construction drive, carrying ...

Scalar genes live in a declared [lo, hi] range (see config.py). Crossover
draws each gene from parent A, parent B or their midpoint, then mutates it
with probability `rate` by at most `bound * (hi - lo)` and clamps it back
into range. The neural topology never changes during a run.
"""

import colorsys
from dataclasses import dataclass, fields
from enum import Enum
from typing import Optional

import numpy as np

from config import (
    PHYSICAL_GENE_RANGES, PHYSICAL_GENE_SEED_RANGES, TOOL_GENE_RANGES,
    HUNTING_GENE_RANGES, DEFENSIVE_GENE_RANGES, SPECIES_GENE_RANGES,
    MUTATION_RATE, MUTATION_BOUND, NEURAL_MUTATION_BOUND,
    WEIGHT_LIMIT, BIAS_LIMIT, DEFAULT_TOPOLOGY, NUM_INPUTS, NUM_OUTPUTS,
)


class GenomeError(ValueError):
    """A genome whose parts do not fit together (fatal at construction)."""


# ──────────────────────────────────────────────────────────────────────────────
# Species
# ──────────────────────────────────────────────────────────────────────────────

class SpeciesType(Enum):
    HERBIVORE = "herbivore"
    CARNIVORE = "carnivore"
    OMNIVORE  = "omnivore"
    SCAVENGER = "scavenger"

    @property
    def can_hunt(self) -> bool:
        return self in (SpeciesType.CARNIVORE, SpeciesType.OMNIVORE)

    @property
    def eats_carrion(self) -> bool:
        return self is SpeciesType.SCAVENGER


# hue shift used when colouring bugs; per-species seed ranges for genesis
_SPECIES_HUE = {
    SpeciesType.HERBIVORE: 0.3,
    SpeciesType.CARNIVORE: 0.0,
    SpeciesType.OMNIVORE:  0.1,
    SpeciesType.SCAVENGER: 0.8,
}
_SPECIES_SEED = {
    #                      hunt_energy_gain  metabolic_rate
    SpeciesType.HERBIVORE: ((10.0, 20.0),    (0.8, 1.1)),
    SpeciesType.CARNIVORE: ((35.0, 60.0),    (1.1, 1.4)),
    SpeciesType.OMNIVORE:  ((25.0, 45.0),    (0.9, 1.2)),
    SpeciesType.SCAVENGER: ((20.0, 40.0),    (0.7, 1.0)),
}


# ──────────────────────────────────────────────────────────────────────────────
# Gene records
# ──────────────────────────────────────────────────────────────────────────────

def _clamp_record(record, ranges: dict):
    """Clamp every ranged field of a frozen record in place."""
    for name, (lo, hi) in ranges.items():
        value = float(getattr(record, name))
        object.__setattr__(record, name, min(hi, max(lo, value)))


@dataclass(frozen=True)
class PhysicalGenes:
    speed:             float
    vision_radius:     float
    energy_efficiency: float
    size:              float
    strength:          float
    memory:            float
    stickiness:        float
    camouflage:        float
    aggression:        float
    curiosity:         float

    def __post_init__(self):
        _clamp_record(self, PHYSICAL_GENE_RANGES)


@dataclass(frozen=True)
class ToolDNA:
    tool_crafting:            float
    tool_proficiency:         float
    tool_vision:              float
    construction_drive:       float
    carrying_capacity:        float
    resource_gathering:       float
    engineering_intelligence: float
    collaboration_tendency:   float

    def __post_init__(self):
        _clamp_record(self, TOOL_GENE_RANGES)


@dataclass(frozen=True)
class HuntingBehavior:
    hunting_intensity:      float
    prey_detection_range:   float
    chase_speed_multiplier: float
    hunting_energy_cost:    float
    stealth_level:          float
    pack_coordination:      float

    def __post_init__(self):
        _clamp_record(self, HUNTING_GENE_RANGES)


@dataclass(frozen=True)
class DefensiveBehavior:
    predator_detection:    float
    flee_speed_multiplier: float
    flee_distance:         float
    flee_energy_cost:      float
    hiding_skill:          float
    flocking_tendency:     float
    counter_attack_skill:  float

    def __post_init__(self):
        _clamp_record(self, DEFENSIVE_GENE_RANGES)


@dataclass(frozen=True)
class SpeciesTraits:
    """
    Species tag plus the behaviour records it needs. Every species can
    defend itself; only hunting species carry a HuntingBehavior.
    """
    species:          SpeciesType
    defense:          DefensiveBehavior
    hunting:          Optional[HuntingBehavior] = None
    hunt_energy_gain: float = 40.0
    metabolic_rate:   float = 1.0

    def __post_init__(self):
        if self.species.can_hunt and self.hunting is None:
            raise GenomeError(f"{self.species.value} needs hunting traits")
        if not self.species.can_hunt and self.hunting is not None:
            raise GenomeError(f"{self.species.value} cannot carry hunting traits")
        _clamp_record(self, SPECIES_GENE_RANGES)


class NeuralDNA:
    """
    Layer sizes plus the flattened weights and biases of a dense
    feed-forward network. Weights are stored layer by layer, row-major
    (one row of `topology[i]` inputs per neuron of layer i+1).
    """
    __slots__ = ("topology", "weights", "biases")

    def __init__(self, topology, weights, biases):
        topology = tuple(int(n) for n in topology)
        if len(topology) < 2 or min(topology) < 1:
            raise GenomeError(f"invalid topology {topology}")
        n_weights, n_biases = expected_parameter_counts(topology)

        weights = np.array(weights, dtype=np.float64).ravel()
        biases  = np.array(biases,  dtype=np.float64).ravel()
        if weights.size != n_weights:
            raise GenomeError(
                f"topology {topology} needs {n_weights} weights, got {weights.size}")
        if biases.size != n_biases:
            raise GenomeError(
                f"topology {topology} needs {n_biases} biases, got {biases.size}")

        weights.setflags(write=False)
        biases.setflags(write=False)
        self.topology = topology
        self.weights  = weights
        self.biases   = biases

    def layers(self):
        """Yield (W, b) per layer; W has shape (outputs, inputs)."""
        w_off, b_off = 0, 0
        for n_in, n_out in zip(self.topology[:-1], self.topology[1:]):
            W = self.weights[w_off:w_off + n_in * n_out].reshape(n_out, n_in)
            b = self.biases[b_off:b_off + n_out]
            w_off += n_in * n_out
            b_off += n_out
            yield W, b

    def __repr__(self):
        return f"NeuralDNA(topology={self.topology})"


def expected_parameter_counts(topology) -> tuple:
    """(weight count, bias count) implied by a topology."""
    n_weights = sum(a * b for a, b in zip(topology[:-1], topology[1:]))
    n_biases  = sum(topology[1:])
    return n_weights, n_biases


@dataclass(frozen=True)
class DNA:
    physical: PhysicalGenes
    neural:   NeuralDNA
    species:  SpeciesTraits
    tools:    ToolDNA

    def __post_init__(self):
        topology = self.neural.topology
        if topology[0] != NUM_INPUTS or topology[-1] != NUM_OUTPUTS:
            raise GenomeError(
                f"topology {topology} must read {NUM_INPUTS} perception inputs "
                f"and produce {NUM_OUTPUTS} decision outputs")

    @property
    def species_type(self) -> SpeciesType:
        return self.species.species

    @property
    def genetic_fitness(self) -> float:
        """Rough all-round trait quality, used for terrain fitness on open ground."""
        p = self.physical
        return (p.speed * 0.15 + p.vision_radius * 0.008
                + p.energy_efficiency * 0.4 + p.strength * 0.1
                + p.memory * 0.12 + p.stickiness * 0.08
                + p.camouflage * 0.1 + (1.0 - abs(p.aggression - 0.5)) * 0.1
                + p.curiosity * 0.05)

    def terrain_fitness(self, kind) -> float:
        """How well these genes suit a terrain kind (anything with a `.value` name)."""
        p = self.physical
        name = getattr(kind, "value", kind)
        if name == "water":
            return p.speed * 0.4 + (1.0 + p.energy_efficiency) * 0.4 + p.stickiness * 0.2
        if name == "hill":
            return p.strength * 0.6 + p.size * 0.2 + p.stickiness * 0.2
        if name == "shadow":
            return p.vision_radius * 0.01 + p.memory * 0.4 + p.curiosity * 0.3
        if name == "predator":
            return p.aggression * 0.4 + p.camouflage * 0.4 + p.speed * 0.2
        if name == "wind":
            return p.size * 0.5 + p.strength * 0.3 + p.stickiness * 0.2
        if name == "wall":
            return p.memory * 0.5 + p.curiosity * 0.3 + p.strength * 0.2
        if name == "food":
            return p.vision_radius * 0.01 + p.speed * 0.3 + p.curiosity * 0.4
        return self.genetic_fitness


def gene_range(name: str) -> tuple:
    """Look up the valid (lo, hi) range of any scalar gene by name."""
    for table in (PHYSICAL_GENE_RANGES, TOOL_GENE_RANGES, HUNTING_GENE_RANGES,
                  DEFENSIVE_GENE_RANGES, SPECIES_GENE_RANGES):
        if name in table:
            return table[name]
    raise KeyError(name)


# ──────────────────────────────────────────────────────────────────────────────
# Random genesis
# ──────────────────────────────────────────────────────────────────────────────

def _sample(ranges: dict, rng) -> dict:
    return {name: float(rng.uniform(lo, hi)) for name, (lo, hi) in ranges.items()}


def random_neural_dna(topology=DEFAULT_TOPOLOGY, rng=None) -> NeuralDNA:
    if rng is None:
        rng = np.random.default_rng()
    n_weights, n_biases = expected_parameter_counts(topology)
    return NeuralDNA(topology,
                     rng.uniform(-2.0, 2.0, size=n_weights),
                     rng.uniform(-1.0, 1.0, size=n_biases))


def random_species_traits(species: SpeciesType, rng) -> SpeciesTraits:
    gain_range, metabolic_range = _SPECIES_SEED[species]
    hunting = None
    if species.can_hunt:
        hunting = HuntingBehavior(**_sample(HUNTING_GENE_RANGES, rng))
    return SpeciesTraits(
        species=species,
        defense=DefensiveBehavior(**_sample(DEFENSIVE_GENE_RANGES, rng)),
        hunting=hunting,
        hunt_energy_gain=float(rng.uniform(*gain_range)),
        metabolic_rate=float(rng.uniform(*metabolic_range)),
    )


def random_dna(rng=None, species: SpeciesType = None,
               topology=DEFAULT_TOPOLOGY) -> DNA:
    """Generate a generation-zero genome."""
    if rng is None:
        rng = np.random.default_rng()
    if species is None:
        species = list(SpeciesType)[int(rng.integers(0, len(SpeciesType)))]
    return DNA(
        physical=PhysicalGenes(**_sample(PHYSICAL_GENE_SEED_RANGES, rng)),
        neural=random_neural_dna(topology, rng),
        species=random_species_traits(species, rng),
        tools=ToolDNA(**_sample(TOOL_GENE_RANGES, rng)),
    )


# ──────────────────────────────────────────────────────────────────────────────
# Crossover + mutation
# ──────────────────────────────────────────────────────────────────────────────

def _inherit(va: float, vb: float, lo: float, hi: float,
             rng, rate: float, bound: float) -> float:
    """Pick A, B or the midpoint, maybe perturb, clamp into [lo, hi]."""
    pick = int(rng.integers(0, 3))
    value = va if pick == 0 else vb if pick == 1 else (va + vb) / 2.0
    if rng.random() < rate:
        value += rng.uniform(-bound, bound) * (hi - lo)
    return float(min(hi, max(lo, value)))


def _cross_values(a, b, ranges: dict, rng, rate: float, bound: float) -> dict:
    return {
        name: _inherit(getattr(a, name), getattr(b, name), lo, hi, rng, rate, bound)
        for name, (lo, hi) in ranges.items()
    }


def _cross_record(cls, a, b, ranges: dict, rng, rate: float, bound: float):
    return cls(**_cross_values(a, b, ranges, rng, rate, bound))


def crossover_neural(a: NeuralDNA, b: NeuralDNA, rng,
                     rate: float = MUTATION_RATE,
                     bound: float = NEURAL_MUTATION_BOUND) -> NeuralDNA:
    """Element-wise crossover of two networks with identical topology."""
    if a.topology != b.topology:
        raise GenomeError(f"cannot cross topologies {a.topology} and {b.topology}")

    def _mix(va, vb, limit):
        pick = rng.integers(0, 3, size=va.size)
        child = np.where(pick == 0, va, np.where(pick == 1, vb, (va + vb) / 2.0))
        mask = rng.random(va.size) < rate
        child = child + mask * rng.uniform(-bound, bound, size=va.size)
        return np.clip(child, -limit, limit)

    return NeuralDNA(a.topology,
                     _mix(a.weights, b.weights, WEIGHT_LIMIT),
                     _mix(a.biases,  b.biases,  BIAS_LIMIT))


def crossover_species(a: SpeciesTraits, b: SpeciesTraits, rng,
                      rate: float = MUTATION_RATE,
                      bound: float = MUTATION_BOUND) -> SpeciesTraits:
    """
    Same species: behaviour records are crossed gene by gene.
    Different species: the child takes one parent's tag and records,
    crossed with the other parent's records of the same kind if it has them.
    """
    if a.species is b.species or rng.random() < 0.5:
        base, other = a, b
    else:
        base, other = b, a

    defense = _cross_record(DefensiveBehavior, base.defense, other.defense,
                            DEFENSIVE_GENE_RANGES, rng, rate, bound)
    hunting = None
    if base.species.can_hunt:
        mate = other.hunting if other.hunting is not None else base.hunting
        hunting = _cross_record(HuntingBehavior, base.hunting, mate,
                                HUNTING_GENE_RANGES, rng, rate, bound)
    return SpeciesTraits(
        species=base.species,
        defense=defense,
        hunting=hunting,
        **_cross_values(base, other, SPECIES_GENE_RANGES, rng, rate, bound),
    )


def crossover(parent_a: DNA, parent_b: DNA, rng=None,
              rate: float = MUTATION_RATE, bound: float = MUTATION_BOUND,
              neural_bound: float = NEURAL_MUTATION_BOUND) -> DNA:
    """Produce a child genome from two parents (mutation included)."""
    if rng is None:
        rng = np.random.default_rng()
    return DNA(
        physical=_cross_record(PhysicalGenes, parent_a.physical, parent_b.physical,
                               PHYSICAL_GENE_RANGES, rng, rate, bound),
        neural=crossover_neural(parent_a.neural, parent_b.neural, rng,
                                rate, neural_bound),
        species=crossover_species(parent_a.species, parent_b.species, rng,
                                  rate, bound),
        tools=_cross_record(ToolDNA, parent_a.tools, parent_b.tools,
                            TOOL_GENE_RANGES, rng, rate, bound),
    )


def mutate(dna: DNA, rng=None, rate: float = MUTATION_RATE,
           bound: float = MUTATION_BOUND,
           neural_bound: float = NEURAL_MUTATION_BOUND) -> DNA:
    """Mutation only: a genome crossed with itself keeps every gene."""
    return crossover(dna, dna, rng, rate, bound, neural_bound)


# ──────────────────────────────────────────────────────────────────────────────
# Comparison / display
# ──────────────────────────────────────────────────────────────────────────────

def _normalised(genes: PhysicalGenes) -> np.ndarray:
    return np.array([
        (getattr(genes, f.name) - PHYSICAL_GENE_RANGES[f.name][0])
        / (PHYSICAL_GENE_RANGES[f.name][1] - PHYSICAL_GENE_RANGES[f.name][0])
        for f in fields(genes)
    ])


def genome_similarity(dna_a: DNA, dna_b: DNA) -> float:
    """
    Physical-trait similarity (0..1): one minus the mean absolute
    difference of range-normalised genes.
    """
    diff = np.abs(_normalised(dna_a.physical) - _normalised(dna_b.physical))
    return float(1.0 - diff.mean())


def dna_to_color(dna: DNA) -> tuple:
    """
    Map a genome to an RGB colour: hue from species blended with build,
    saturation from aggression, brightness fading with camouflage.
    """
    p = dna.physical
    lo, hi = PHYSICAL_GENE_RANGES["size"]
    build = (p.size - lo) / (hi - lo)
    hue = (_SPECIES_HUE[dna.species_type] * 0.8 + build * 0.2) % 1.0
    sat = 0.5 + 0.5 * p.aggression
    val = 1.0 - 0.5 * p.camouflage
    r, g, b = colorsys.hsv_to_rgb(hue, sat, val)
    # Brighten so they're visible
    return (max(50, int(r * 255)), max(50, int(g * 255)), max(50, int(b * 255)))
