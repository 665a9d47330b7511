"""
Read-only views of engine state.

The engine rebuilds a WorldSnapshot at the end of every tick and swaps it in
with one assignment. Readers (charts, the web feed, tests) only ever see
these frozen copies, never the live records.
"""

from dataclasses import dataclass, asdict
from typing import Optional

from climate import ClimateState
from population_stats import Statistics


@dataclass(frozen=True)
class BugView:
    id:             int
    species:        str
    x:              float
    y:              float
    vx:             float
    vy:             float
    energy:         float
    age:            int
    generation:     int
    alive:          bool
    cause_of_death: Optional[str]
    color:          tuple
    carried:        tuple          # ((resource kind, count), ...)
    project_id:     Optional[int]

    @classmethod
    def of(cls, bug) -> "BugView":
        return cls(
            id=bug.id, species=bug.dna.species_type.value,
            x=bug.x, y=bug.y, vx=bug.vx, vy=bug.vy,
            energy=bug.energy, age=bug.age, generation=bug.generation,
            alive=bug.alive, cause_of_death=bug.cause_of_death,
            color=bug.color,
            carried=tuple(sorted((k.value, n) for k, n in bug.carried.items())),
            project_id=bug.project_id,
        )


@dataclass(frozen=True)
class FoodView:
    id:     int
    kind:   str
    x:      float
    y:      float
    energy: float

    @classmethod
    def of(cls, food) -> "FoodView":
        return cls(food.id, food.food_type.label, food.x, food.y, food.energy)


@dataclass(frozen=True)
class ResourceView:
    id:       int
    kind:     str
    x:        float
    y:        float
    quantity: int

    @classmethod
    def of(cls, node) -> "ResourceView":
        return cls(node.id, node.kind.value, node.x, node.y, node.quantity)


@dataclass(frozen=True)
class BlueprintView:
    id:         int
    tool_type:  str
    x:          float
    y:          float
    builder_id: int
    completion: float
    required:   tuple
    gathered:   tuple

    @classmethod
    def of(cls, bp) -> "BlueprintView":
        return cls(
            id=bp.id, tool_type=bp.tool_type.value, x=bp.x, y=bp.y,
            builder_id=bp.builder_id, completion=bp.completion,
            required=tuple(sorted((k.value, n) for k, n in bp.required.items())),
            gathered=tuple(sorted((k.value, n) for k, n in bp.gathered.items())),
        )


@dataclass(frozen=True)
class ToolView:
    id:         int
    tool_type:  str
    x:          float
    y:          float
    size:       float
    durability: float
    uses:       int
    creator_id: Optional[int]

    @classmethod
    def of(cls, tool) -> "ToolView":
        return cls(tool.id, tool.tool_type.value, tool.x, tool.y, tool.size,
                   tool.durability, tool.uses, tool.creator_id)


@dataclass(frozen=True)
class WorldSnapshot:
    tick:       int
    generation: int
    bugs:       tuple
    foods:      tuple
    resources:  tuple
    blueprints: tuple
    tools:      tuple
    statistics: Statistics
    climate:    ClimateState

    def to_dict(self) -> dict:
        """JSON-friendly form (used by the web feed)."""
        return {
            "tick":       self.tick,
            "generation": self.generation,
            "bugs":       [asdict(b) for b in self.bugs],
            "foods":      [asdict(f) for f in self.foods],
            "resources":  [asdict(r) for r in self.resources],
            "blueprints": [asdict(bp) for bp in self.blueprints],
            "tools":      [asdict(t) for t in self.tools],
            "statistics": self.statistics.to_dict(),
            "climate":    self.climate.to_dict(),
        }


@dataclass(frozen=True)
class BugDetail:
    """Everything an inspector panel shows about one bug."""
    bug:             BugView
    dna:             object
    decision:        object
    project:         Optional[BlueprintView]
    inventory:       dict
    terrain_fitness: dict

    def to_dict(self) -> dict:
        d = self.dna
        return {
            "bug":             asdict(self.bug),
            "species":         d.species_type.value,
            "physical":        asdict(d.physical),
            "tools":           asdict(d.tools),
            "defense":         asdict(d.species.defense),
            "hunting":         asdict(d.species.hunting) if d.species.hunting else None,
            "topology":        list(d.neural.topology),
            "decision":        self.decision.to_dict() if self.decision else None,
            "project":         asdict(self.project) if self.project else None,
            "inventory":       dict(self.inventory),
            "terrain_fitness": dict(self.terrain_fitness),
        }
