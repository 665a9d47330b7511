"""
Unit tests for the resource & construction economy.

Tests cover:
- Resource nodes: harvesting and fractional regrowth
- Gathering into a bounded inventory
- Contributions, completion and stalling of blueprints
- Tool wear, benefits and effects
- Project choice from nearby terrain
"""

import math

import pytest

from arena import TerrainKind
from bug import Bug
from economy import (
    ResourceKind, ResourceNode, Tool, ToolType, Blueprint,
    gather, contribute_to_project, contribute_all, use_tool, tool_benefit,
    apply_tool_effects, speed_bonus_at, passive_energy_at, food_chance,
    choose_project, recipe_for,
)
from genome import SpeciesType


class _FixedRng:
    """Stands in for a Generator where a test needs a known roll."""

    def __init__(self, value):
        self.value = value

    def random(self):
        return self.value


@pytest.fixture
def gatherer(make_dna):
    dna = make_dna(tools={"resource_gathering": 0.9, "carrying_capacity": 0.5})
    return Bug(1, dna, 100.0, 100.0, energy=80.0)


# ---------------------------------------------------------------------------
# Resource nodes
# ---------------------------------------------------------------------------

class TestResourceNode:

    def test_harvest_never_goes_negative(self):
        node = ResourceNode(1, ResourceKind.STICK, 0, 0, quantity=3, respawn_rate=0)
        assert node.harvest(5) == 3
        assert node.quantity == 0
        assert not node.available
        assert node.harvest(1) == 0

    def test_fractional_regrowth(self):
        node = ResourceNode(1, ResourceKind.MUD, 0, 0, quantity=0, respawn_rate=0.5)
        node.regenerate()
        assert node.quantity == 0
        node.regenerate()
        assert node.quantity == 1

    def test_regrowth_is_capped(self):
        node = ResourceNode(1, ResourceKind.MUD, 0, 0, quantity=4, respawn_rate=3.0)
        node.regenerate(max_quantity=5)
        assert node.quantity == 5
        node.regenerate(max_quantity=5)
        assert node.quantity == 5


# ---------------------------------------------------------------------------
# Gathering
# ---------------------------------------------------------------------------

class TestGather:

    def test_gather_moves_units(self, gatherer):
        node = ResourceNode(1, ResourceKind.STONE, 100, 100, 10, 0)
        taken = gather(gatherer, node, amount=2)
        assert taken == 2
        assert gatherer.carried == {ResourceKind.STONE: 2}
        assert node.quantity == 8
        assert gatherer.energy < 80.0

    def test_capacity_is_respected(self, gatherer):
        assert gatherer.capacity == 5
        node = ResourceNode(1, ResourceKind.STICK, 100, 100, 10, 0)
        for _ in range(5):
            gather(gatherer, node)
        assert gatherer.load == 5
        assert gather(gatherer, node) == 0

    def test_low_skill_gathers_nothing(self, make_dna):
        bug = Bug(1, make_dna(tools={"resource_gathering": 0.1}), 0, 0)
        node = ResourceNode(1, ResourceKind.STICK, 0, 0, 10, 0)
        assert gather(bug, node) == 0
        assert node.quantity == 10

    def test_empty_node(self, gatherer):
        node = ResourceNode(1, ResourceKind.STICK, 100, 100, 0, 0)
        assert gather(gatherer, node) == 0
        assert gatherer.carried == {}


# ---------------------------------------------------------------------------
# Blueprints
# ---------------------------------------------------------------------------

class TestBlueprint:

    def test_recipe_defaults(self):
        bp = Blueprint(1, ToolType.TRAP, 0, 0, builder_id=1, started_tick=5)
        assert bp.required == recipe_for(ToolType.TRAP)
        assert bp.last_progress_tick == 5
        assert bp.completion == 0.0
        assert not bp.is_complete

    def test_contribution_capped_by_need(self, gatherer):
        bp = Blueprint(1, ToolType.TRAP, 0, 0, 1, 0)
        gatherer.carried = {ResourceKind.STICK: 4}
        moved = contribute_to_project(gatherer, bp, ResourceKind.STICK, 4, tick=3)
        assert moved == 2
        assert gatherer.carried == {ResourceKind.STICK: 2}
        assert bp.gathered[ResourceKind.STICK] == 2
        assert bp.last_progress_tick == 3

    def test_unwanted_material_is_kept(self, gatherer):
        bp = Blueprint(1, ToolType.TRAP, 0, 0, 1, 0)
        gatherer.carried = {ResourceKind.STONE: 2}
        assert contribute_all(gatherer, bp, tick=1) == 0
        assert gatherer.carried == {ResourceKind.STONE: 2}
        assert bp.last_progress_tick == 0

    def test_completion(self, gatherer):
        bp = Blueprint(1, ToolType.TRAP, 0, 0, 1, 0)
        gatherer.carried = {ResourceKind.STICK: 2, ResourceKind.FIBER: 1}
        assert contribute_all(gatherer, bp, tick=1) == 3
        assert bp.is_complete
        assert bp.completion == pytest.approx(1.0)
        assert gatherer.carried == {}

    def test_partial_completion(self):
        bp = Blueprint(1, ToolType.BRIDGE, 0, 0, 1, 0,
                       gathered={ResourceKind.STICK: 3, ResourceKind.FIBER: 1})
        assert bp.completion == pytest.approx(4 / 5)

    def test_stall(self):
        bp = Blueprint(1, ToolType.RAMP, 0, 0, 1, started_tick=10)
        assert not bp.is_stalled(12, stall_ticks=3)
        assert bp.is_stalled(13, stall_ticks=3)


# ---------------------------------------------------------------------------
# Tools
# ---------------------------------------------------------------------------

class TestTools:

    def test_use_wears_tool(self):
        tool = Tool(1, ToolType.LEVER, 0, 0, 1, 0)
        assert use_tool(tool)
        assert tool.uses == 1
        assert tool.durability == pytest.approx(0.95)

    def test_tool_wears_out(self):
        tool = Tool(1, ToolType.LEVER, 0, 0, 1, 0)
        for _ in range(20):
            use_tool(tool)
        assert tool.durability == 0.0
        assert not tool.usable
        assert not use_tool(tool)
        assert tool.uses == 20

    def test_durability_never_negative(self):
        tool = Tool(1, ToolType.MARKER, 0, 0, 1, 0, durability=0.01)
        tool.degrade(0.5)
        assert tool.durability == 0.0

    def test_covers(self):
        tool = Tool(1, ToolType.SHELTER, 0, 0, 1, 0)
        assert tool.covers(20, 15)
        assert not tool.covers(30, 0)

    def test_benefits(self):
        bridge = Tool(1, ToolType.BRIDGE, 0, 0, 1, 0)
        assert tool_benefit(bridge, TerrainKind.WATER, 50, False, False) == 0.9
        assert tool_benefit(bridge, TerrainKind.OPEN, 50, False, False) == 0.1
        shelter = Tool(2, ToolType.SHELTER, 0, 0, 1, 0)
        assert tool_benefit(shelter, TerrainKind.OPEN, 20, False, False) == 0.8

    def test_shelter_restores_energy(self, gatherer):
        gatherer.energy = 30.0
        apply_tool_effects(gatherer, Tool(1, ToolType.SHELTER, 0, 0, 1, 0),
                           False, False, max_energy=100.0)
        assert gatherer.energy == 35.0

    def test_trap_resets_hunting_cooldown(self, gatherer):
        gatherer.hunting_cooldown = 12
        apply_tool_effects(gatherer, Tool(1, ToolType.TRAP, 0, 0, 1, 0),
                           False, True, max_energy=100.0)
        assert gatherer.hunting_cooldown == 0

    def test_area_effects(self):
        tools = [Tool(1, ToolType.BRIDGE, 0, 0, 1, 0),
                 Tool(2, ToolType.NEST, 100, 0, 1, 0)]
        assert speed_bonus_at(5, 5, tools) == 1.2
        assert speed_bonus_at(100, 0, tools) == 1.0
        assert passive_energy_at(100, 10, tools) == pytest.approx(0.075)
        assert passive_energy_at(0, 0, tools) == 0.0

    def test_food_chance(self):
        assert food_chance(Tool(1, ToolType.MARKER, 0, 0, 1, 0)) == 0.0
        nest = Tool(2, ToolType.NEST, 0, 0, 1, 0, durability=0.5)
        assert food_chance(nest) == pytest.approx(0.5 * 0.8 * 0.25 * 0.1)

    def test_tool_type_table(self):
        assert ToolType.TUNNEL.crosses_walls and ToolType.TUNNEL.crosses_water
        assert ToolType.BRIDGE.crosses_water and not ToolType.BRIDGE.crosses_walls
        assert ToolType.MARKER.energy_cost < ToolType.TUNNEL.energy_cost


# ---------------------------------------------------------------------------
# Project choice
# ---------------------------------------------------------------------------

class TestChooseProject:

    @pytest.fixture
    def builder_dna(self, make_dna):
        return make_dna(tools={"tool_crafting": 0.9, "construction_drive": 0.9})

    def test_water_calls_for_bridge(self, builder_dna):
        choice = choose_project(builder_dna, {TerrainKind.WATER, TerrainKind.HILL},
                                False, _FixedRng(0.5), energy=80)
        assert choice is ToolType.BRIDGE

    def test_hill_calls_for_ramp(self, builder_dna):
        assert choose_project(builder_dna, {TerrainKind.HILL}, False,
                              _FixedRng(0.5), energy=80) is ToolType.RAMP

    def test_trap_only_for_hunters(self, make_dna):
        tools = {"tool_crafting": 0.9, "construction_drive": 0.9}
        herbivore = make_dna(tools=tools)
        carnivore = make_dna(SpeciesType.CARNIVORE, tools=tools)
        assert choose_project(herbivore, set(), True, _FixedRng(0.5)) is None
        assert choose_project(carnivore, set(), True, _FixedRng(0.5)) is ToolType.TRAP

    def test_drive_roll_fails(self, builder_dna):
        assert choose_project(builder_dna, {TerrainKind.WATER}, False,
                              _FixedRng(0.95)) is None

    def test_not_enough_energy(self, builder_dna):
        assert choose_project(builder_dna, {TerrainKind.WATER}, False,
                              _FixedRng(0.5), energy=ToolType.BRIDGE.energy_cost) is None

    def test_unskilled_builder(self, make_dna):
        dna = make_dna(tools={"tool_crafting": 0.2, "construction_drive": 0.9})
        assert choose_project(dna, {TerrainKind.WATER}, False, _FixedRng(0.5)) is None

    def test_unlimited_energy_by_default(self, builder_dna):
        assert choose_project(builder_dna, {TerrainKind.WALL}, False,
                              _FixedRng(0.5), energy=math.inf) is ToolType.TUNNEL


class TestGatherOrdering:

    def test_two_requests_never_overdraw(self, make_dna):
        dna = make_dna(tools={"resource_gathering": 0.9})
        first, second = Bug(1, dna, 0, 0), Bug(2, dna, 0, 0)
        node = ResourceNode(1, ResourceKind.STICK, 0, 0, quantity=3, respawn_rate=0)
        granted = gather(first, node, amount=2) + gather(second, node, amount=2)
        assert granted == 3
        assert (first.load, second.load) == (2, 1)
        assert node.quantity == 0

    def test_durability_non_increasing(self):
        tool = Tool(1, ToolType.TRAP, 0, 0, 1, 0)
        seen = [tool.durability]
        while use_tool(tool):
            seen.append(tool.durability)
            assert tool.usable == (tool.durability > 0.0)
        assert all(a >= b for a, b in zip(seen, seen[1:]))
        assert seen[-1] == 0.0
