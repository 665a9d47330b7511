"""
Bug class for Bugtopia.

Each bug has:
  - (x, y) position and (vx, vy) velocity in world units
  - DNA (immutable) and a NeuralNetwork built from it
  - State: energy, age, generation, inventory, current project, cooldowns

Every tick the engine asks each bug to `plan` against a frozen WorldView:
  1. Sense the world (perception vector)
  2. Run the neural network
  3. Steer: flee > hunt > build > food > social > neural wander
and returns a Proposal. Planning never changes any state; the engine
applies proposals afterwards, one bug at a time.
"""

from dataclasses import dataclass
import math
from typing import Optional

import numpy as np

from genome import DNA, dna_to_color
from neural_network import NeuralNetwork, Decision
from perception import WorldView, nearest, survey, sense
from config import (
    MAX_ENERGY, MAX_AGE, BASE_SPEED, LOW_ENERGY_PIVOT, MOVE_ENERGY_COST,
    BASE_ENERGY_LOSS, REPRODUCTION_THRESHOLD, MIN_REPRODUCTION_AGE,
    FLEE_URGE_MIN, HUNT_URGE_MIN, SOCIAL_URGE_MIN, FOOD_EXPLORE_CUTOFF,
    GATHER_SKILL_MIN, COLLABORATION_MIN, CONSTRUCTION_MIN_ENERGY,
    CRAFTING_MIN, TERRAIN_SCAN_RADIUS, TOOL_PROFICIENCY_MIN, AGGRESSION_MIN,
)

# share of a behaviour's energy cost paid per tick while doing it
EFFORT_SCALE = 0.05


class Cause:
    STARVED  = "starved"
    OLD_AGE  = "old_age"
    HUNTED   = "hunted"


@dataclass(frozen=True)
class Proposal:
    """What one bug wants to do this tick. Targets are ids; None = no intent."""
    bug_id:       int
    decision:     Decision
    vx:           float
    vy:           float
    mode:         str = "wander"
    effort_cost:  float = 0.0
    gather_node_id:   Optional[int] = None
    blueprint_id:     Optional[int] = None
    tool_id:          Optional[int] = None
    hunt_target_id:   Optional[int] = None
    steal_target_id:  Optional[int] = None
    wants_project:    bool = False
    nearby_terrain:   frozenset = frozenset()
    has_prey:         bool = False


def hunt_success_probability(hunter: DNA, prey: DNA) -> float:
    """
    Chance that one hunt attempt kills the prey, in [0.02, 0.95].
    Rises with intensity, stealth, size and speed advantage; falls with the
    prey's detection, flee speed, camouflage and counter-attack skill.
    """
    h = hunter.species.hunting
    if h is None:
        return 0.0
    d = prey.species.defense
    hp, pp = hunter.physical, prey.physical
    p = (0.4 * h.hunting_intensity
         + 0.3 * h.stealth_level
         + 0.15 * (hp.size / pp.size - 1.0)
         + 0.1 * (hp.speed / pp.speed - 1.0)
         - 0.35 * d.predator_detection
         - 0.15 * (d.flee_speed_multiplier - 1.0)
         - 0.15 * pp.camouflage
         - 0.1 * d.counter_attack_skill)
    return min(0.95, max(0.02, p))


def movement_energy(distance: float, terrain_energy_cost: float, dna: DNA) -> float:
    """Energy spent moving `distance` units over terrain with the given cost factor."""
    return (distance * terrain_energy_cost
            * (1.0 - dna.physical.energy_efficiency) * MOVE_ENERGY_COST)


def _unit(dx: float, dy: float) -> tuple:
    n = math.hypot(dx, dy)
    if n < 1e-12:
        return 0.0, 0.0
    return dx / n, dy / n


class Bug:
    """
    A single agent in the ecosystem.
    """
    __slots__ = (
        "id", "dna", "brain", "color",
        "x", "y", "vx", "vy",
        "energy", "age", "generation",
        "alive", "cause_of_death", "died_tick",
        "carried", "project_id", "last_decision",
        "reproduction_cooldown", "hunting_cooldown",
        "construction_cooldown", "tool_cooldown",
    )

    def __init__(self, bug_id: int, dna: DNA, x: float, y: float,
                 energy: float = MAX_ENERGY, generation: int = 0):
        self.id    = bug_id
        self.dna   = dna
        self.brain = NeuralNetwork(dna.neural)
        self.color = dna_to_color(dna)
        self.x, self.y   = float(x), float(y)
        self.vx, self.vy = 0.0, 0.0
        self.energy     = max(0.0, min(MAX_ENERGY, float(energy)))
        self.age        = 0
        self.generation = generation
        self.alive          = True
        self.cause_of_death = None
        self.died_tick      = None
        self.carried       = {}           # ResourceKind → count
        self.project_id    = None         # id of the blueprint this bug started
        self.last_decision = None
        self.reproduction_cooldown = 0
        self.hunting_cooldown      = 0
        self.construction_cooldown = 0
        self.tool_cooldown         = 0

    def __repr__(self):
        state = "alive" if self.alive else f"dead:{self.cause_of_death}"
        return (f"Bug(id={self.id}, {self.dna.species_type.value}, gen={self.generation}, "
                f"pos=({self.x:.1f},{self.y:.1f}), energy={self.energy:.1f}, {state})")

    # ──────────────────────────────────────────────────────────────────────────
    # Derived state
    # ──────────────────────────────────────────────────────────────────────────

    @property
    def capacity(self) -> int:
        return int(self.dna.tools.carrying_capacity * 10)

    @property
    def load(self) -> int:
        return sum(self.carried.values())

    @property
    def current_speed(self) -> float:
        """Top speed before terrain; drops linearly below LOW_ENERGY_PIVOT energy."""
        return (self.dna.physical.speed * BASE_SPEED
                * min(1.0, self.energy / LOW_ENERGY_PIVOT))

    def ready_to_breed(self, threshold: float = REPRODUCTION_THRESHOLD) -> bool:
        return (self.alive and self.energy >= threshold
                and self.reproduction_cooldown <= 0
                and self.age >= MIN_REPRODUCTION_AGE)

    def basal_cost(self) -> float:
        return BASE_ENERGY_LOSS * self.dna.species.metabolic_rate

    def distance_to(self, x: float, y: float) -> float:
        return math.hypot(self.x - x, self.y - y)

    # ──────────────────────────────────────────────────────────────────────────
    # Compute phase
    # ──────────────────────────────────────────────────────────────────────────

    def plan(self, view: WorldView, arena) -> Proposal:
        """Sense → think → steer. Pure: reads self, view and arena only."""
        mods = arena.movement_modifiers(self.x, self.y, self.dna, view.crossings)
        seen = survey(self, view, mods.vision)
        decision = self.brain.decide(sense(self, view, arena, seen))

        dna = self.dna
        defense = dna.species.defense
        hunting = dna.species.hunting
        mode, multiplier, effort = "wander", 1.0, 0.0
        target = None

        project_pos = None
        if self.project_id is not None:
            hit = np.nonzero(view.blueprint_ids == self.project_id)[0]
            if hit.size:
                project_pos = view.blueprint_pos[hit[0]]

        if seen.predator[0] is not None and decision.fleeing > FLEE_URGE_MIN:
            px, py = view.bug_pos[seen.predator[0]]
            target = (self.x - (px - self.x), self.y - (py - self.y))
            mode, multiplier = "flee", defense.flee_speed_multiplier
            effort = defense.flee_energy_cost * EFFORT_SCALE
        elif (seen.prey[0] is not None and hunting is not None
              and decision.hunting > HUNT_URGE_MIN and self.hunting_cooldown <= 0):
            target = tuple(view.bug_pos[seen.prey[0]])
            mode, multiplier = "hunt", hunting.chase_speed_multiplier
            effort = hunting.hunting_energy_cost * EFFORT_SCALE
        elif project_pos is not None and self.load > 0:
            target = tuple(project_pos)
            mode = "build"
        elif seen.food[0] is not None and decision.exploration < FOOD_EXPLORE_CUTOFF:
            target = tuple(view.food_pos[seen.food[0]])
            mode = "food"
        elif (project_pos is not None and seen.resource[0] is not None
              and self.load < self.capacity):
            target = tuple(view.node_pos[seen.resource[0]])
            mode = "gather"
        elif seen.kin[0] is not None and decision.social > SOCIAL_URGE_MIN:
            target = tuple(view.bug_pos[seen.kin[0]])
            mode = "social"

        if target is not None:
            ux, uy = _unit(target[0] - self.x, target[1] - self.y)
        else:
            ux, uy = decision.move_x, decision.move_y
            n = math.hypot(ux, uy)
            if n > 1.0:
                ux, uy = ux / n, uy / n

        speed = self.current_speed * mods.speed * multiplier
        vx, vy = ux * speed, uy * speed

        return Proposal(
            bug_id=self.id,
            decision=decision,
            vx=vx, vy=vy,
            mode=mode,
            effort_cost=effort,
            gather_node_id=self._gather_target(view, seen),
            blueprint_id=self._blueprint_target(view, seen),
            tool_id=self._tool_target(view, seen),
            hunt_target_id=(int(view.bug_ids[seen.prey[0]])
                            if mode == "hunt" else None),
            steal_target_id=self._steal_target(view, seen, decision),
            wants_project=self._wants_project(),
            nearby_terrain=self._nearby_terrain(arena),
            has_prey=seen.prey[0] is not None,
        )

    def _gather_target(self, view, seen) -> Optional[int]:
        if (seen.resource[0] is None or self.load >= self.capacity
                or self.dna.tools.resource_gathering <= GATHER_SKILL_MIN):
            return None
        return int(view.node_ids[seen.resource[0]])

    def _blueprint_target(self, view, seen) -> Optional[int]:
        if self.load == 0:
            return None
        if self.project_id is not None:
            return self.project_id
        if self.dna.tools.collaboration_tendency <= COLLABORATION_MIN:
            return None
        i, _ = nearest(view.blueprint_pos, self.x, self.y, seen.vision)
        return None if i is None else int(view.blueprint_ids[i])

    def _tool_target(self, view, seen) -> Optional[int]:
        if (self.tool_cooldown > 0
                or self.dna.tools.tool_proficiency <= TOOL_PROFICIENCY_MIN):
            return None
        i, _ = nearest(view.tool_pos, self.x, self.y, seen.vision, view.tool_usable)
        return None if i is None else int(view.tool_ids[i])

    def _steal_target(self, view, seen, decision) -> Optional[int]:
        if decision.aggression * self.dna.physical.aggression <= AGGRESSION_MIN:
            return None
        i, _ = nearest(view.bug_pos, self.x, self.y, seen.vision, view.others(self.id))
        return None if i is None else int(view.bug_ids[i])

    def _wants_project(self) -> bool:
        return (self.project_id is None
                and self.construction_cooldown <= 0
                and self.energy > CONSTRUCTION_MIN_ENERGY
                and self.dna.tools.tool_crafting > CRAFTING_MIN)

    def _nearby_terrain(self, arena) -> frozenset:
        if not self._wants_project():
            return frozenset()
        radius = self.dna.tools.tool_vision * TERRAIN_SCAN_RADIUS
        return frozenset(arena.scan_terrain(self.x, self.y, radius))

    # ──────────────────────────────────────────────────────────────────────────
    # Commit-phase helpers (called by the engine only)
    # ──────────────────────────────────────────────────────────────────────────

    def spend(self, amount: float):
        self.energy = max(0.0, self.energy - amount)

    def gain(self, amount: float):
        self.energy = min(MAX_ENERGY, self.energy + amount)

    def tick_cooldowns(self):
        self.age += 1
        self.reproduction_cooldown = max(0, self.reproduction_cooldown - 1)
        self.hunting_cooldown      = max(0, self.hunting_cooldown - 1)
        self.construction_cooldown = max(0, self.construction_cooldown - 1)
        self.tool_cooldown         = max(0, self.tool_cooldown - 1)

    def death_cause(self, max_age: int = MAX_AGE) -> Optional[str]:
        if self.energy <= 0:
            return Cause.STARVED
        if self.age > max_age:
            return Cause.OLD_AGE
        return None

    def die(self, cause: str, tick: int):
        self.alive = False
        self.cause_of_death = cause
        self.died_tick = tick
        self.vx = self.vy = 0.0
