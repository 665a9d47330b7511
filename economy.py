"""
Resource & construction economy for Bugtopia.

  ResourceNode  : a pile of one raw material that slowly regrows
  Blueprint     : a tool under construction; fills up from contributions
  Tool          : a finished structure that wears out with use and time

Bugs gather material into a bounded inventory, start blueprints when the
terrain around them calls for a tool, and contribute what they carry. A
blueprint whose manifest is fully gathered becomes exactly one Tool.
"""

from dataclasses import dataclass, field
from enum import Enum
import math
from typing import Optional

from arena import TerrainKind
from genome import SpeciesType
from config import (
    RESOURCE_MAX_QUANTITY, GATHER_SKILL_MIN, GATHER_ENERGY_COST,
    CRAFTING_MIN, TOOL_WEAR_PER_USE, TOOL_DECAY_PER_TICK,
    BLUEPRINT_STALL_TICKS,
)


# durability below this counts as fully worn
_WORN_EPS = 1e-9


class ResourceKind(Enum):
    STICK = "stick"
    STONE = "stone"
    MUD   = "mud"
    FIBER = "fiber"
    FOOD  = "food"


_R = ResourceKind


class ToolType(Enum):
    MARKER  = "marker"
    TRAP    = "trap"
    RAMP    = "ramp"
    BRIDGE  = "bridge"
    SHELTER = "shelter"
    LEVER   = "lever"
    NEST    = "nest"
    TUNNEL  = "tunnel"

    @property
    def energy_cost(self) -> float:
        return _TOOL_SPECS[self][0]

    @property
    def size(self) -> float:
        """Radius of the area the tool covers."""
        return _TOOL_SPECS[self][1]

    @property
    def recipe(self) -> dict:
        return dict(_TOOL_SPECS[self][2])

    @property
    def crosses_water(self) -> bool:
        return self in (ToolType.BRIDGE, ToolType.TUNNEL)

    @property
    def crosses_walls(self) -> bool:
        return self is ToolType.TUNNEL

    @property
    def speed_bonus(self) -> float:
        return {ToolType.BRIDGE: 1.2, ToolType.RAMP: 1.1}.get(self, 1.0)

    @property
    def passive_energy(self) -> float:
        """Energy regained per tick while standing inside the tool."""
        return {ToolType.SHELTER: 0.1, ToolType.NEST: 0.075}.get(self, 0.0)

    @property
    def food_yield(self) -> float:
        return {ToolType.TRAP: 0.15, ToolType.NEST: 0.25,
                ToolType.SHELTER: 0.10}.get(self, 0.0)


_TOOL_SPECS = {
    #                  energy  radius  recipe
    ToolType.MARKER:  (5.0,    4.0,  {_R.STICK: 1}),
    ToolType.TRAP:    (10.0,  10.0,  {_R.STICK: 2, _R.FIBER: 1}),
    ToolType.RAMP:    (15.0,  10.0,  {_R.MUD: 2, _R.STONE: 1}),
    ToolType.BRIDGE:  (20.0,  20.0,  {_R.STICK: 3, _R.FIBER: 2}),
    ToolType.SHELTER: (25.0,  25.0,  {_R.STICK: 2, _R.STONE: 2, _R.MUD: 1}),
    ToolType.LEVER:   (30.0,  12.5,  {_R.STONE: 2, _R.STICK: 1}),
    ToolType.NEST:    (35.0,  25.0,  {_R.STICK: 3, _R.FIBER: 3, _R.MUD: 2}),
    ToolType.TUNNEL:  (40.0,  15.0,  {_R.STONE: 4, _R.MUD: 3}),
}


def recipe_for(tool_type: ToolType) -> dict:
    return tool_type.recipe


# ──────────────────────────────────────────────────────────────────────────────
# Records
# ──────────────────────────────────────────────────────────────────────────────

@dataclass
class ResourceNode:
    id:           int
    kind:         ResourceKind
    x:            float
    y:            float
    quantity:     int
    respawn_rate: float
    _regrowth:    float = field(default=0.0, repr=False)

    @property
    def available(self) -> bool:
        return self.quantity > 0

    def harvest(self, amount: int) -> int:
        taken = max(0, min(int(amount), self.quantity))
        self.quantity -= taken
        return taken

    def regenerate(self, max_quantity: int = RESOURCE_MAX_QUANTITY):
        """Accumulate fractional regrowth; whole units land in `quantity`."""
        if self.quantity >= max_quantity:
            self._regrowth = 0.0
            return
        self._regrowth += self.respawn_rate
        whole = int(self._regrowth)
        if whole:
            self.quantity = min(max_quantity, self.quantity + whole)
            self._regrowth -= whole


@dataclass
class Tool:
    id:           int
    tool_type:    ToolType
    x:            float
    y:            float
    creator_id:   int
    created_tick: int
    durability:   float = 1.0
    uses:         int = 0

    @property
    def size(self) -> float:
        return self.tool_type.size

    @property
    def usable(self) -> bool:
        return self.durability > 0.0

    def covers(self, x: float, y: float) -> bool:
        return math.hypot(self.x - x, self.y - y) <= self.size

    def degrade(self, amount: float = TOOL_DECAY_PER_TICK):
        self.durability = max(0.0, self.durability - amount)
        if self.durability < _WORN_EPS:
            self.durability = 0.0


@dataclass
class Blueprint:
    id:                 int
    tool_type:          ToolType
    x:                  float
    y:                  float
    builder_id:         int
    started_tick:       int
    required:           dict = None
    gathered:           dict = field(default_factory=dict)
    last_progress_tick: int = None

    def __post_init__(self):
        if self.required is None:
            self.required = self.tool_type.recipe
        if self.last_progress_tick is None:
            self.last_progress_tick = self.started_tick

    @property
    def energy_cost(self) -> float:
        return self.tool_type.energy_cost

    def still_needed(self, kind: ResourceKind) -> int:
        return max(0, self.required.get(kind, 0) - self.gathered.get(kind, 0))

    @property
    def completion(self) -> float:
        total = sum(self.required.values())
        if total == 0:
            return 1.0
        have = sum(min(self.gathered.get(k, 0), n) for k, n in self.required.items())
        return have / total

    @property
    def is_complete(self) -> bool:
        return all(self.still_needed(k) == 0 for k in self.required)

    def is_stalled(self, tick: int, stall_ticks: int = BLUEPRINT_STALL_TICKS) -> bool:
        return tick - self.last_progress_tick >= stall_ticks


# ──────────────────────────────────────────────────────────────────────────────
# Inventory operations
# ──────────────────────────────────────────────────────────────────────────────

def gather(bug, node: ResourceNode, amount: Optional[int] = None) -> int:
    """
    Move material from a node into the bug's inventory.
    Returns the number of units moved (0 when nothing can be taken).
    """
    skill = bug.dna.tools.resource_gathering
    if skill <= GATHER_SKILL_MIN or not node.available:
        return 0
    room = bug.capacity - bug.load
    if room <= 0:
        return 0
    if amount is None:
        amount = int(skill * 3.0) + 1
    taken = node.harvest(min(int(amount), room))
    if taken:
        bug.carried[node.kind] = bug.carried.get(node.kind, 0) + taken
        bug.energy = max(0.0, bug.energy - taken * GATHER_ENERGY_COST)
    return taken


def contribute_to_project(bug, blueprint: Blueprint, kind: ResourceKind,
                          quantity: int, tick: int) -> int:
    """Hand carried material of one kind to a blueprint. Returns units moved."""
    carried = bug.carried.get(kind, 0)
    moved = min(int(quantity), carried, blueprint.still_needed(kind))
    if moved <= 0:
        return 0
    blueprint.gathered[kind] = blueprint.gathered.get(kind, 0) + moved
    blueprint.last_progress_tick = tick
    if carried == moved:
        del bug.carried[kind]
    else:
        bug.carried[kind] = carried - moved
    return moved


def contribute_all(bug, blueprint: Blueprint, tick: int) -> int:
    """Contribute everything useful the bug carries, in recipe order."""
    total = 0
    for kind in list(blueprint.required):
        total += contribute_to_project(bug, blueprint, kind,
                                       bug.carried.get(kind, 0), tick)
    return total


# ──────────────────────────────────────────────────────────────────────────────
# Tools
# ──────────────────────────────────────────────────────────────────────────────

def use_tool(tool: Tool) -> bool:
    """Wear a tool by one use. False (and no change) if it is already worn out."""
    if not tool.usable:
        return False
    tool.uses += 1
    tool.degrade(TOOL_WEAR_PER_USE)
    return True


def tool_benefit(tool: Tool, terrain: TerrainKind, energy: float,
                 ready_to_breed: bool, has_prey: bool) -> float:
    """How useful a tool is to a bug right now (0..1)."""
    t = tool.tool_type
    if t is ToolType.BRIDGE:
        return 0.9 if terrain is TerrainKind.WATER else 0.1
    if t is ToolType.TUNNEL:
        return 0.8 if terrain is TerrainKind.WALL else 0.1
    if t is ToolType.RAMP:
        return 0.7 if terrain is TerrainKind.HILL else 0.1
    if t is ToolType.SHELTER:
        return 0.8 if energy < 40.0 else 0.2
    if t is ToolType.NEST:
        return 0.9 if ready_to_breed else 0.1
    if t is ToolType.TRAP:
        return 0.6 if has_prey else 0.1
    if t is ToolType.LEVER:
        return 0.4
    return 0.3


def apply_tool_effects(bug, tool: Tool, ready_to_breed: bool, has_prey: bool,
                       max_energy: float):
    t = tool.tool_type
    if t is ToolType.SHELTER:
        bug.energy = min(max_energy, bug.energy + 5.0)
    elif t is ToolType.NEST and ready_to_breed:
        bug.energy = min(max_energy, bug.energy + 3.0)
    elif t is ToolType.TRAP and has_prey:
        bug.hunting_cooldown = 0


def speed_bonus_at(x: float, y: float, tools) -> float:
    for tool in tools:
        if tool.usable and tool.covers(x, y) and tool.tool_type.speed_bonus != 1.0:
            return tool.tool_type.speed_bonus
    return 1.0


def passive_energy_at(x: float, y: float, tools) -> float:
    for tool in tools:
        if tool.usable and tool.covers(x, y) and tool.tool_type.passive_energy:
            return tool.tool_type.passive_energy
    return 0.0


def food_chance(tool: Tool) -> float:
    """Per-tick probability that a tool yields a food item."""
    return tool.durability * 0.8 * tool.tool_type.food_yield * 0.1


def food_species_for(tool_type: ToolType, rng) -> SpeciesType:
    """Which species the food a tool produces is meant for."""
    if tool_type is ToolType.TRAP:
        return SpeciesType.CARNIVORE if rng.random() < 0.8 else SpeciesType.SCAVENGER
    if tool_type is ToolType.SHELTER:
        return SpeciesType.HERBIVORE if rng.random() < 0.7 else SpeciesType.OMNIVORE
    if tool_type is ToolType.NEST:
        kinds = list(SpeciesType)
        return kinds[int(rng.integers(0, len(kinds)))]
    return SpeciesType.HERBIVORE


# ──────────────────────────────────────────────────────────────────────────────
# Project planning
# ──────────────────────────────────────────────────────────────────────────────

def choose_project(dna, nearby_terrain, has_prey: bool, rng,
                   energy: float = math.inf) -> Optional[ToolType]:
    """
    Pick the tool a bug should start building, or None.

    The bug needs enough construction drive (rolled against rng) and
    crafting skill, plus more energy than the tool costs. Nearby terrain
    sets the priorities: water → bridge, predator zone → shelter,
    wall → tunnel, hill → ramp, prey → trap, clever builders → marker.
    """
    t = dna.tools
    if t.construction_drive <= rng.random():
        return None

    priorities = {}
    if TerrainKind.WATER in nearby_terrain:
        priorities[ToolType.BRIDGE] = 0.8
    if TerrainKind.PREDATOR in nearby_terrain:
        priorities[ToolType.SHELTER] = 0.8
    if TerrainKind.WALL in nearby_terrain:
        priorities[ToolType.TUNNEL] = 0.7
    if TerrainKind.HILL in nearby_terrain:
        priorities[ToolType.RAMP] = 0.6
    if has_prey and dna.species_type.can_hunt:
        priorities[ToolType.TRAP] = 0.5
    if t.engineering_intelligence > 0.7 and rng.random() < 0.1:
        priorities[ToolType.MARKER] = 0.3

    if not priorities or t.tool_crafting <= CRAFTING_MIN:
        return None
    choice = max(priorities, key=priorities.get)
    if energy <= choice.energy_cost:
        return None
    return choice
