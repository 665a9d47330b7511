"""
Shared fixtures for the Bugtopia test-suite.

Most engine tests run on a small hand-built open arena with genomes whose
networks ignore their inputs: every weight is zero, so the outputs are
fixed by the last layer's biases. That makes a bug's decision scriptable.
"""

import numpy as np
import pytest

import simulation
from genome import (
    DNA, PhysicalGenes, ToolDNA, NeuralDNA, SpeciesTraits, SpeciesType,
    HuntingBehavior, DefensiveBehavior, expected_parameter_counts,
)
from simulation import Simulation
from config import DEFAULT_TOPOLOGY, DECISION_LABELS

LOW, HIGH = 0.05, 0.95


def _scripted_neural(move_x=0.0, move_y=0.0, topology=DEFAULT_TOPOLOGY, **urges):
    """Zero-weight network whose outputs are exactly the requested values."""
    n_weights, n_biases = expected_parameter_counts(topology)
    biases = np.zeros(n_biases)
    wanted = {"move_x": move_x, "move_y": move_y}
    for name in list(DECISION_LABELS.values())[2:]:
        wanted[name] = 2.0 * urges.get(name, LOW) - 1.0
    out = np.array([wanted[DECISION_LABELS[i]] for i in range(topology[-1])])
    biases[-topology[-1]:] = np.arctanh(np.clip(out, -0.999, 0.999))
    return NeuralDNA(topology, np.zeros(n_weights), biases)


def _make_dna(species=SpeciesType.HERBIVORE, neural=None, tools=None,
              defense=None, hunting=None, hunt_energy_gain=40.0,
              metabolic_rate=1.0, **physical):
    genes = dict(speed=1.0, vision_radius=50.0, energy_efficiency=0.5,
                 size=1.0, strength=1.0, memory=0.5, stickiness=0.8,
                 camouflage=0.0, aggression=0.5, curiosity=0.5)
    genes.update(physical)
    tool_genes = dict(tool_crafting=0.0, tool_proficiency=0.0, tool_vision=0.0,
                      construction_drive=0.0, carrying_capacity=1.0,
                      resource_gathering=0.0, engineering_intelligence=0.0,
                      collaboration_tendency=0.0)
    tool_genes.update(tools or {})
    defense_genes = dict(predator_detection=0.5, flee_speed_multiplier=2.0,
                         flee_distance=100.0, flee_energy_cost=1.0,
                         hiding_skill=0.5, flocking_tendency=0.5,
                         counter_attack_skill=0.5)
    defense_genes.update(defense or {})
    hunt = None
    if species.can_hunt:
        hunt_genes = dict(hunting_intensity=0.5, prey_detection_range=80.0,
                          chase_speed_multiplier=1.5, hunting_energy_cost=1.0,
                          stealth_level=0.5, pack_coordination=0.5)
        hunt_genes.update(hunting or {})
        hunt = HuntingBehavior(**hunt_genes)
    return DNA(
        physical=PhysicalGenes(**genes),
        neural=neural if neural is not None else _scripted_neural(),
        species=SpeciesTraits(species, DefensiveBehavior(**defense_genes), hunt,
                              hunt_energy_gain, metabolic_rate),
        tools=ToolDNA(**tool_genes),
    )


def _open_grid(rows=10, cols=10, **columns):
    """rows × cols grid of 'open'; `col5="water"` style kwargs paint whole columns."""
    grid = [["open"] * cols for _ in range(rows)]
    for key, kind in columns.items():
        col = int(key[3:])
        for row in grid:
            row[col] = kind
    return grid


@pytest.fixture
def scripted_neural():
    return _scripted_neural


@pytest.fixture
def make_dna():
    return _make_dna


@pytest.fixture
def open_grid():
    return _open_grid


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def empty_sim(monkeypatch):
    """400×400 open arena, no bugs, no food, no resources, no random food."""
    monkeypatch.setattr(simulation, "FOOD_SPAWN_RATE", 0.0)
    sim = Simulation(population=0, food_count=0, resource_count=0, seed=7,
                     arena_width=400, arena_height=400, tile_size=40,
                     terrain=_open_grid(), reseed_on_extinction=False)
    yield sim
    sim.close()


@pytest.fixture
def small_sim():
    """Small generated world with a few of everything."""
    sim = Simulation(population=12, max_population=30, seed=5,
                     food_count=20, resource_count=10)
    yield sim
    sim.close()
