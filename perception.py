"""
Perception for Bugtopia.

At the start of every tick the engine freezes the previous tick's world into
a WorldView: plain read-only numpy arrays of positions and a few per-entity
attributes. Every bug plans against the same view, so the planning phase can
run on worker threads without locks and always sees a consistent world.

`sense` turns a bug plus the view into the fixed-size input vector of its
neural network (see PERCEPTION_LABELS in config.py).
"""

from dataclasses import dataclass
import math

import numpy as np

from arena import crossings_of
from genome import SpeciesType
from config import (
    NUM_INPUTS, MAX_ENERGY, MAX_AGE, BASE_SPEED, CAMOUFLAGE_DETECTION,
)

_SPECIES = list(SpeciesType)
_HUNTERS = np.array([s.can_hunt for s in _SPECIES])
_NOWHERE = (None, math.inf)


def _frozen(values, dtype, shape=None) -> np.ndarray:
    arr = np.array(values, dtype=dtype)
    if shape is not None and arr.size == 0:
        arr = arr.reshape(shape)
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True)
class WorldView:
    tick: int

    bug_ids:        np.ndarray   # (n,)
    bug_pos:        np.ndarray   # (n, 2)
    bug_species:    np.ndarray   # (n,) index into list(SpeciesType)
    bug_alive:      np.ndarray   # (n,) bool
    bug_camouflage: np.ndarray   # (n,)
    bug_died_tick:  np.ndarray   # (n,) −1 while alive

    food_ids:    np.ndarray
    food_pos:    np.ndarray
    food_edible: np.ndarray      # (n_food, n_species) bool

    node_ids:       np.ndarray
    node_pos:       np.ndarray
    node_available: np.ndarray

    blueprint_ids:      np.ndarray
    blueprint_pos:      np.ndarray
    blueprint_builders: np.ndarray

    tool_ids:    np.ndarray
    tool_pos:    np.ndarray
    tool_usable: np.ndarray
    crossings:   tuple           # arena.Crossing per usable bridge or tunnel

    @classmethod
    def capture(cls, tick: int, bugs, foods, nodes, blueprints, tools) -> "WorldView":
        """Freeze entity records (each an iterable, ideally in id order)."""
        bugs, foods, nodes = list(bugs), list(foods), list(nodes)
        blueprints, tools = list(blueprints), list(tools)
        xy = (0, 2)
        return cls(
            tick=tick,
            bug_ids=_frozen([b.id for b in bugs], np.int64),
            bug_pos=_frozen([(b.x, b.y) for b in bugs], np.float64, xy),
            bug_species=_frozen([_SPECIES.index(b.dna.species_type) for b in bugs], np.int8),
            bug_alive=_frozen([b.alive for b in bugs], bool),
            bug_camouflage=_frozen([b.dna.physical.camouflage for b in bugs], np.float64),
            bug_died_tick=_frozen([-1 if b.died_tick is None else b.died_tick
                                   for b in bugs], np.int64),
            food_ids=_frozen([f.id for f in foods], np.int64),
            food_pos=_frozen([(f.x, f.y) for f in foods], np.float64, xy),
            food_edible=_frozen([[f.edible_by(s) for s in _SPECIES] for f in foods],
                                bool, (0, len(_SPECIES))),
            node_ids=_frozen([n.id for n in nodes], np.int64),
            node_pos=_frozen([(n.x, n.y) for n in nodes], np.float64, xy),
            node_available=_frozen([n.available for n in nodes], bool),
            blueprint_ids=_frozen([bp.id for bp in blueprints], np.int64),
            blueprint_pos=_frozen([(bp.x, bp.y) for bp in blueprints], np.float64, xy),
            blueprint_builders=_frozen([bp.builder_id for bp in blueprints], np.int64),
            tool_ids=_frozen([t.id for t in tools], np.int64),
            tool_pos=_frozen([(t.x, t.y) for t in tools], np.float64, xy),
            tool_usable=_frozen([t.usable for t in tools], bool),
            crossings=crossings_of(tools),
        )

    @classmethod
    def empty(cls, tick: int = 0) -> "WorldView":
        return cls.capture(tick, (), (), (), (), ())

    # ──────────────────────────────────────────────────────────────────────────
    # Masks
    # ──────────────────────────────────────────────────────────────────────────

    def others(self, bug_id: int) -> np.ndarray:
        return self.bug_alive & (self.bug_ids != bug_id)

    def predators_of(self, bug_id: int, species: SpeciesType) -> np.ndarray:
        """Living bugs of another species that can hunt."""
        me = _SPECIES.index(species)
        hunters = _HUNTERS[self.bug_species]
        return self.others(bug_id) & hunters & (self.bug_species != me)

    def prey_of(self, bug_id: int, species: SpeciesType) -> np.ndarray:
        if not species.can_hunt:
            return np.zeros(self.bug_ids.size, dtype=bool)
        return self.others(bug_id) & (self.bug_species != _SPECIES.index(species))

    def kin_of(self, bug_id: int, species: SpeciesType) -> np.ndarray:
        return self.others(bug_id) & (self.bug_species == _SPECIES.index(species))

    def corpses(self, tick: int, grace: int) -> np.ndarray:
        return (~self.bug_alive) & (self.bug_died_tick >= 0) \
            & (tick - self.bug_died_tick < grace)

    def edible_food(self, species: SpeciesType) -> np.ndarray:
        if self.food_ids.size == 0:
            return np.zeros(0, dtype=bool)
        return self.food_edible[:, _SPECIES.index(species)]


def nearest(positions: np.ndarray, x: float, y: float, radius: float,
            mask: np.ndarray = None, reach: np.ndarray = None) -> tuple:
    """
    Index and distance of the closest position within `radius`.

    `reach` optionally scales the radius per entry (e.g. camouflaged
    targets are only seen from closer). Ties go to the lowest index.
    Returns (None, inf) when nothing qualifies.
    """
    if positions.shape[0] == 0:
        return _NOWHERE
    d = np.hypot(positions[:, 0] - x, positions[:, 1] - y)
    limit = radius if reach is None else radius * reach
    ok = d <= limit
    if mask is not None:
        ok &= mask
    if not ok.any():
        return _NOWHERE
    d = np.where(ok, d, np.inf)
    i = int(np.argmin(d))
    return i, float(d[i])


def camouflage_reach(view: WorldView) -> np.ndarray:
    """Fraction of a viewer's range at which each bug can still be seen."""
    return 1.0 - CAMOUFLAGE_DETECTION * view.bug_camouflage


# ──────────────────────────────────────────────────────────────────────────────
# Perception vector
# ──────────────────────────────────────────────────────────────────────────────

def _target(inputs, at: int, hit, x, y, pos, radius):
    """dist (1 = none) + unit direction for one target class."""
    i, d = hit
    if i is None:
        inputs[at] = 1.0
        return
    inputs[at] = min(1.0, d / max(radius, 1e-9))
    if d > 0:
        inputs[at + 1] = (pos[i, 0] - x) / d
        inputs[at + 2] = (pos[i, 1] - y) / d


@dataclass(frozen=True)
class Surroundings:
    """Nearest relevant entities for one bug, as (index into view arrays, distance)."""
    vision: float
    food:     tuple = _NOWHERE
    resource: tuple = _NOWHERE
    predator: tuple = _NOWHERE
    prey:     tuple = _NOWHERE
    kin:      tuple = _NOWHERE
    neighbour_threat: float = 0.0


def survey(bug, view: WorldView, vision_modifier: float) -> Surroundings:
    """Find what a bug can see from where it stands."""
    p = bug.dna.physical
    species = bug.dna.species_type
    vision = p.vision_radius * vision_modifier
    camo = camouflage_reach(view)

    food = nearest(view.food_pos, bug.x, bug.y, vision, view.edible_food(species))
    resource = nearest(view.node_pos, bug.x, bug.y, vision, view.node_available)

    defense = bug.dna.species.defense
    alert = vision * (0.5 + defense.predator_detection)
    predator_mask = view.predators_of(bug.id, species)
    predator = nearest(view.bug_pos, bug.x, bug.y, alert, predator_mask, camo)

    prey = _NOWHERE
    prey_mask = view.prey_of(bug.id, species)
    if bug.dna.species.hunting is not None:
        detect = max(vision, bug.dna.species.hunting.prey_detection_range * vision_modifier)
        prey = nearest(view.bug_pos, bug.x, bug.y, detect, prey_mask, camo)

    kin = nearest(view.bug_pos, bug.x, bug.y, vision, view.kin_of(bug.id, species))

    threat = 0.0
    closest, _ = nearest(view.bug_pos, bug.x, bug.y, vision, view.others(bug.id))
    if closest is not None:
        if predator_mask[closest]:
            threat = 1.0
        elif prey_mask[closest]:
            threat = -1.0

    return Surroundings(vision=vision, food=food, resource=resource,
                        predator=predator, prey=prey, kin=kin,
                        neighbour_threat=threat)


def sense(bug, view: WorldView, arena, surroundings: Surroundings = None) -> np.ndarray:
    """Build the perception vector for one bug."""
    mods = arena.movement_modifiers(bug.x, bug.y, bug.dna, view.crossings)
    if surroundings is None:
        surroundings = survey(bug, view, mods.vision)
    s = surroundings
    p = bug.dna.physical
    inputs = np.zeros(NUM_INPUTS, dtype=np.float64)

    inputs[0] = bug.energy / MAX_ENERGY
    inputs[1] = min(1.0, bug.age / MAX_AGE)
    inputs[2] = mods.speed
    inputs[3] = mods.vision
    inputs[4] = mods.energy_cost / 5.0
    _target(inputs, 5,  s.food,     bug.x, bug.y, view.food_pos, s.vision)
    _target(inputs, 8,  s.resource, bug.x, bug.y, view.node_pos, s.vision)
    _target(inputs, 11, s.predator, bug.x, bug.y, view.bug_pos,  s.vision)
    _target(inputs, 14, s.prey,     bug.x, bug.y, view.bug_pos,  s.vision)
    inputs[17] = 1.0 if s.kin[0] is None else min(1.0, s.kin[1] / max(s.vision, 1e-9))
    inputs[18] = s.neighbour_threat
    inputs[19] = min(bug.x, arena.width - bug.x) / (arena.width / 2.0)
    inputs[20] = min(bug.y, arena.height - bug.y) / (arena.height / 2.0)
    top = BASE_SPEED * 2.0
    inputs[21] = max(-1.0, min(1.0, bug.vx / top))
    inputs[22] = max(-1.0, min(1.0, bug.vy / top))
    inputs[23] = p.aggression
    inputs[24] = p.curiosity
    inputs[25] = bug.load / bug.capacity if bug.capacity else 1.0
    inputs[26] = 1.0
    return inputs
