"""
Simulation Engine for Bugtopia.

Runs the ecosystem one tick at a time:
  1. Freeze last tick's world into a WorldView
  2. Compute phase: every living bug plans against the view (optionally on
     worker threads); plans are pure and carry no randomness
  3. Commit phase: proposals applied one bug at a time in id order (move,
     energy, eat, gather, contribute, build, use tools, hunt, steal, scavenge)
  4. Economy upkeep: finished blueprints become tools, stalled ones are
     abandoned, tools decay, resources regrow, food spawns
  5. Death bookkeeping, reproduction, corpse cleanup, extinction reseed
  6. Statistics + a fresh WorldSnapshot for readers

Every random draw comes from one seeded numpy Generator during commit, so
a seed fixes the whole run regardless of the number of workers.
"""

from concurrent.futures import ThreadPoolExecutor
import logging
import math
import threading
import time

import numpy as np

from arena import Arena, TerrainKind, crossings_of
from bug import Bug, Cause, hunt_success_probability, movement_energy
from climate import Climate
from economy import (
    ResourceKind, ResourceNode, Tool, Blueprint, ToolType,
    gather, contribute_all, use_tool, tool_benefit, apply_tool_effects,
    speed_bonus_at, passive_energy_at, food_chance, food_species_for,
    choose_project,
)
from food import FoodItem, FoodType, random_food_type
from genome import SpeciesType, random_dna, crossover, mutate, genome_similarity
from perception import WorldView
from population_stats import recompute
from snapshot import (
    WorldSnapshot, BugView, FoodView, ResourceView, BlueprintView, ToolView,
    BugDetail,
)
from config import (
    ARENA_WIDTH, ARENA_HEIGHT, TILE_SIZE,
    INITIAL_POPULATION, MAX_POPULATION, RESEED_ON_EXTINCTION, CORPSE_GRACE_TICKS,
    MAX_ENERGY, INITIAL_ENERGY, MAX_AGE,
    REPRODUCTION_THRESHOLD, REPRODUCTION_COST, REPRODUCTION_COOLDOWN,
    REPRODUCTION_RADIUS, CROSS_SPECIES_SIMILARITY, BIRTH_JITTER,
    MUTATION_RATE, MUTATION_BOUND,
    HUNT_RANGE, HUNTING_COOLDOWN, AGGRESSION_RANGE, MAX_STOLEN_ENERGY,
    CARRION_RANGE,
    RESOURCE_NODE_COUNT, RESOURCE_SEED_QUANTITY, RESOURCE_RESPAWN_RATE,
    GATHER_RADIUS, CONTRIBUTE_RADIUS, COLLABORATION_MIN,
    CONSTRUCTION_COOLDOWN, BLUEPRINT_STALL_TICKS,
    TOOL_DECAY_PER_TICK, TOOL_USE_RADIUS, TOOL_USE_COOLDOWN, TOOL_BENEFIT_MIN,
    INITIAL_FOOD, MAX_FOOD, FOOD_SPAWN_RATE, FOOD_RICH_BIAS, EAT_RADIUS,
    STATS_LOG_INTERVAL,
)

log = logging.getLogger(__name__)

_RAW_MATERIALS = list(ResourceKind)
_SPECIES = list(SpeciesType)


class Simulation:
    """
    Main simulation controller. Owns every entity in id-keyed dicts; bugs
    refer to blueprints (and blueprints/tools to bugs) by id only.
    """

    def __init__(
        self,
        population:             int   = INITIAL_POPULATION,
        max_population:         int   = MAX_POPULATION,
        arena_width:            float = ARENA_WIDTH,
        arena_height:           float = ARENA_HEIGHT,
        tile_size:              float = TILE_SIZE,
        seed:                   int   = None,
        mutation_rate:          float = MUTATION_RATE,
        mutation_bound:         float = MUTATION_BOUND,
        stall_ticks:            int   = BLUEPRINT_STALL_TICKS,
        reproduction_threshold: float = REPRODUCTION_THRESHOLD,
        food_count:             int   = INITIAL_FOOD,
        resource_count:         int   = RESOURCE_NODE_COUNT,
        workers:                int   = 1,
        reseed_on_extinction:   bool  = RESEED_ON_EXTINCTION,
        terrain                       = None,   # optional hand-built grid
        on_tick_callback              = None,   # called with (tick, snapshot)
    ):
        self.population             = population
        self.max_population         = max_population
        self.arena_width            = arena_width
        self.arena_height           = arena_height
        self.tile_size              = tile_size
        self.seed                   = seed
        self.mutation_rate          = mutation_rate
        self.mutation_bound         = mutation_bound
        self.stall_ticks            = stall_ticks
        self.reproduction_threshold = reproduction_threshold
        self.food_count             = food_count
        self.resource_count         = resource_count
        self.workers                = max(1, int(workers))
        self.reseed_on_extinction   = reseed_on_extinction
        self.on_tick_callback       = on_tick_callback
        self._terrain = terrain

        self._lock     = threading.RLock()
        self._running  = False
        self._executor = None
        self.reset()

    # ──────────────────────────────────────────────────────────────────────────
    # Lifecycle
    # ──────────────────────────────────────────────────────────────────────────

    def reset(self):
        """Rebuild the initial world from the seed (running state is kept)."""
        with self._lock:
            self.rng   = np.random.default_rng(self.seed)
            self.arena = Arena(self.arena_width, self.arena_height, self.tile_size,
                               rng=self.rng, terrain=self._terrain)
            self._food_tiles = self.arena.tiles_of(TerrainKind.FOOD)

            self.bugs       = {}
            self.foods      = {}
            self.resources  = {}
            self.blueprints = {}
            self.tools      = {}
            self._next_ids  = {"bug": 1, "food": 1, "resource": 1,
                               "blueprint": 1, "tool": 1}
            self.tick_count      = 0
            self._max_generation = 0
            self._extinct        = False
            self.climate         = Climate()
            self.history         = []

            self._populate()
            self._publish()
        log.info("world reset: %d bugs, %d food, %d resource nodes (seed=%s)",
                 len(self.bugs), len(self.foods), len(self.resources), self.seed)

    def start(self):
        self._running = True

    def pause(self):
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    def advance(self) -> bool:
        """Run one tick if the simulation is started. Returns whether it ticked."""
        if not self._running:
            return False
        self.step()
        return True

    def step(self):
        """Run exactly one tick, started or not."""
        with self._lock:
            self._tick()
        if self.on_tick_callback:
            self.on_tick_callback(self.tick_count, self._snapshot)

    def run(self, ticks: int):
        """Run `ticks` ticks back to back and return the final statistics."""
        t0 = time.time()
        for _ in range(ticks):
            self.step()
        log.info("ran %d ticks in %.2fs", ticks, time.time() - t0)
        return self.statistics

    def close(self):
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    # ──────────────────────────────────────────────────────────────────────────
    # Entity creation
    # ──────────────────────────────────────────────────────────────────────────

    def _new_id(self, kind: str) -> int:
        i = self._next_ids[kind]
        self._next_ids[kind] = i + 1
        return i

    def add_bug(self, dna, x: float, y: float, energy: float = None,
                generation: int = 0) -> Bug:
        x, y = self.arena.clamp(x, y)
        bug = Bug(self._new_id("bug"), dna, x, y,
                  INITIAL_ENERGY if energy is None else energy, generation)
        self.bugs[bug.id] = bug
        self._max_generation = max(self._max_generation, generation)
        return bug

    def add_food(self, x: float, y: float, food_type: FoodType) -> FoodItem:
        x, y = self.arena.clamp(x, y)
        item = FoodItem(self._new_id("food"), x, y, food_type)
        self.foods[item.id] = item
        return item

    def add_resource(self, kind: ResourceKind, x: float, y: float,
                     quantity: int, respawn_rate: float = 0.0) -> ResourceNode:
        x, y = self.arena.clamp(x, y)
        node = ResourceNode(self._new_id("resource"), kind, x, y,
                            max(0, int(quantity)), respawn_rate)
        self.resources[node.id] = node
        return node

    def add_tool(self, tool_type: ToolType, x: float, y: float,
                 creator_id: int = None, durability: float = 1.0) -> Tool:
        x, y = self.arena.clamp(x, y)
        tool = Tool(self._new_id("tool"), tool_type, x, y, creator_id,
                    self.tick_count, durability=max(0.0, min(1.0, durability)))
        self.tools[tool.id] = tool
        return tool

    def add_blueprint(self, tool_type: ToolType, x: float, y: float,
                      builder_id: int) -> Blueprint:
        x, y = self.arena.clamp(x, y)
        bp = Blueprint(self._new_id("blueprint"), tool_type, x, y,
                       builder_id, self.tick_count)
        self.blueprints[bp.id] = bp
        builder = self.bugs.get(builder_id)
        if builder is not None:
            builder.project_id = bp.id
        return bp

    def _populate(self):
        rng = self.rng
        for _ in range(self.population):
            x, y = self.arena.find_spawn_position(rng)
            self.add_bug(random_dna(rng), x, y)
        lo, hi = RESOURCE_SEED_QUANTITY
        for _ in range(self.resource_count):
            kind = _RAW_MATERIALS[int(rng.integers(0, len(_RAW_MATERIALS)))]
            x, y = self.arena.find_spawn_position(rng)
            self.add_resource(kind, x, y, int(rng.integers(lo, hi + 1)),
                              float(rng.uniform(*RESOURCE_RESPAWN_RATE)))
        for _ in range(self.food_count):
            self._spawn_food()

    def _spawn_food(self, near=None, species: SpeciesType = None):
        rng = self.rng
        if near is not None:
            x = near[0] + rng.uniform(-15.0, 15.0)
            y = near[1] + rng.uniform(-15.0, 15.0)
        elif self._food_tiles and rng.random() < FOOD_RICH_BIAS:
            cx, cy = self._food_tiles[int(rng.integers(0, len(self._food_tiles)))]
            half = self.arena.tile_size / 2.0
            x = cx + rng.uniform(-half, half)
            y = cy + rng.uniform(-half, half)
        else:
            x, y = self.arena.find_spawn_position(rng)
        if species is None:
            species = _SPECIES[int(rng.integers(0, len(_SPECIES)))]
        return self.add_food(float(x), float(y), random_food_type(rng, species))

    # ──────────────────────────────────────────────────────────────────────────
    # One tick
    # ──────────────────────────────────────────────────────────────────────────

    def _tick(self):
        tick = self.tick_count + 1
        view = WorldView.capture(self.tick_count, self.bugs.values(),
                                 self.foods.values(), self.resources.values(),
                                 self.blueprints.values(), self.tools.values())
        living = [b for b in self.bugs.values() if b.alive]

        for proposal in self._plan_all(living, view):
            bug = self.bugs.get(proposal.bug_id)
            if bug is not None and bug.alive:
                self._commit(bug, proposal, tick)

        self._upkeep(tick)
        self._bury(tick)
        self._reproduce(tick)
        self._clear_corpses(tick)
        self._check_extinction(tick)

        self.tick_count = tick
        self._publish()
        stats = self._snapshot.statistics
        self.history.append(stats.to_dict())
        if tick % STATS_LOG_INTERVAL == 0:
            self._log_stats(stats)

    def _plan_all(self, living: list, view: WorldView) -> list:
        if self.workers > 1 and len(living) > 1:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(max_workers=self.workers,
                                                    thread_name_prefix="bug-plan")
            # map() yields in submission order, i.e. bug id order
            return list(self._executor.map(lambda b: b.plan(view, self.arena), living))
        return [b.plan(view, self.arena) for b in living]

    # ──────────────────────────────────────────────────────────────────────────
    # Commit phase
    # ──────────────────────────────────────────────────────────────────────────

    def _commit(self, bug: Bug, p, tick: int):
        bug.last_decision = p.decision
        tools = list(self.tools.values())

        # Movement
        mods  = self.arena.movement_modifiers(bug.x, bug.y, bug.dna, crossings_of(tools))
        bonus = speed_bonus_at(bug.x, bug.y, tools)
        nx, ny = self.arena.clamp(bug.x + p.vx * bonus, bug.y + p.vy * bonus)
        if self.arena.is_passable(nx, ny, bug.dna, tools):
            dist = math.hypot(nx - bug.x, ny - bug.y)
            bug.vx, bug.vy = nx - bug.x, ny - bug.y
            bug.x, bug.y = nx, ny
        else:
            dist = 0.0
            bug.vx = bug.vy = 0.0

        bug.spend(movement_energy(dist, mods.energy_cost, bug.dna))
        if dist > 0:
            bug.spend(p.effort_cost)
        bug.spend(bug.basal_cost())
        bug.gain(passive_energy_at(bug.x, bug.y, tools))

        self._eat(bug)
        self._gather(bug, p)
        self._contribute(bug, p, tick)
        self._start_project(bug, p, tick)
        self._use_tool(bug, p)
        self._hunt(bug, p, tick)
        self._steal(bug, p)
        self._scavenge(bug, tick)

        bug.tick_cooldowns()

    def _eat(self, bug: Bug):
        species = bug.dna.species_type
        best, best_d = None, EAT_RADIUS
        for item in self.foods.values():
            if not item.edible_by(species):
                continue
            d = bug.distance_to(item.x, item.y)
            if d <= best_d:
                best, best_d = item, d
        if best is not None:
            bug.gain(best.energy)
            del self.foods[best.id]

    def _gather(self, bug: Bug, p):
        node = self.resources.get(p.gather_node_id)
        if node is not None and bug.distance_to(node.x, node.y) <= GATHER_RADIUS:
            gather(bug, node)

    def _contribute(self, bug: Bug, p, tick: int):
        bp = self.blueprints.get(p.blueprint_id)
        if bp is None or bug.distance_to(bp.x, bp.y) > CONTRIBUTE_RADIUS:
            return
        if bp.builder_id == bug.id or bug.dna.tools.collaboration_tendency > COLLABORATION_MIN:
            contribute_all(bug, bp, tick)

    def _start_project(self, bug: Bug, p, tick: int):
        if not p.wants_project or bug.project_id is not None:
            return
        choice = choose_project(bug.dna, p.nearby_terrain, p.has_prey,
                                self.rng, energy=bug.energy)
        if choice is None:
            return
        bp = Blueprint(self._new_id("blueprint"), choice, bug.x, bug.y, bug.id, tick)
        self.blueprints[bp.id] = bp
        bug.project_id = bp.id
        bug.spend(bp.energy_cost)
        bug.construction_cooldown = CONSTRUCTION_COOLDOWN
        log.debug("tick %d: bug %d started a %s (blueprint %d)",
                  tick, bug.id, choice.value, bp.id)

    def _use_tool(self, bug: Bug, p):
        tool = self.tools.get(p.tool_id)
        if (tool is None or not tool.usable or bug.tool_cooldown > 0
                or bug.distance_to(tool.x, tool.y) > TOOL_USE_RADIUS):
            return
        ready = bug.ready_to_breed(self.breeding_threshold)
        benefit = tool_benefit(tool, self.arena.terrain_at(bug.x, bug.y),
                               bug.energy, ready, p.has_prey)
        if benefit <= TOOL_BENEFIT_MIN:
            return
        if use_tool(tool):
            apply_tool_effects(bug, tool, ready, p.has_prey, MAX_ENERGY)
            bug.tool_cooldown = TOOL_USE_COOLDOWN

    def _hunt(self, bug: Bug, p, tick: int):
        prey = self.bugs.get(p.hunt_target_id)
        if (prey is None or not prey.alive or bug.hunting_cooldown > 0
                or bug.distance_to(prey.x, prey.y) > HUNT_RANGE):
            return
        bug.hunting_cooldown = HUNTING_COOLDOWN
        if self.rng.random() < hunt_success_probability(bug.dna, prey.dna):
            prey.die(Cause.HUNTED, tick)
            bug.gain(bug.dna.species.hunt_energy_gain)
            log.debug("tick %d: bug %d (%s) caught bug %d (%s)", tick,
                      bug.id, bug.dna.species_type.value,
                      prey.id, prey.dna.species_type.value)

    def _steal(self, bug: Bug, p):
        victim = self.bugs.get(p.steal_target_id)
        if (victim is None or not victim.alive
                or bug.distance_to(victim.x, victim.y) > AGGRESSION_RANGE):
            return
        amount = min(MAX_STOLEN_ENERGY, victim.energy)
        victim.spend(amount)
        bug.gain(amount)

    def _scavenge(self, bug: Bug, tick: int):
        if not bug.dna.species_type.eats_carrion:
            return
        best, best_d = None, CARRION_RANGE
        for other in self.bugs.values():
            if other.alive or other.died_tick is None:
                continue
            d = bug.distance_to(other.x, other.y)
            if d <= best_d:
                best, best_d = other, d
        if best is not None:
            bug.gain(bug.dna.species.hunt_energy_gain * 0.5)
            del self.bugs[best.id]

    # ──────────────────────────────────────────────────────────────────────────
    # Economy upkeep
    # ──────────────────────────────────────────────────────────────────────────

    def _upkeep(self, tick: int):
        for change in self.climate.update(self.rng):
            log.info("tick %d: %s (year %d)", tick, change, self.climate.year)

        for bp in list(self.blueprints.values()):
            if bp.is_complete:
                self._complete(bp, tick)
            elif bp.is_stalled(tick, self.stall_ticks):
                self._abandon(bp, tick)

        for tool in list(self.tools.values()):
            tool.degrade(TOOL_DECAY_PER_TICK)
            chance = food_chance(tool)
            if chance > 0 and len(self.foods) < MAX_FOOD and self.rng.random() < chance:
                self._spawn_food(near=(tool.x, tool.y),
                                 species=food_species_for(tool.tool_type, self.rng))
            if not tool.usable:
                del self.tools[tool.id]
                log.info("tick %d: %s %d wore out after %d uses",
                         tick, tool.tool_type.value, tool.id, tool.uses)

        for node in self.resources.values():
            node.regenerate()

        spawn_rate = FOOD_SPAWN_RATE * self.climate.food_multiplier
        if len(self.foods) < MAX_FOOD and self.rng.random() < spawn_rate:
            self._spawn_food()

    def _release_builder(self, bp: Blueprint):
        builder = self.bugs.get(bp.builder_id)
        if builder is not None and builder.project_id == bp.id:
            builder.project_id = None

    def _complete(self, bp: Blueprint, tick: int):
        del self.blueprints[bp.id]
        tool = Tool(self._new_id("tool"), bp.tool_type, bp.x, bp.y,
                    bp.builder_id, tick)
        self.tools[tool.id] = tool
        self._release_builder(bp)
        log.info("tick %d: bug %d finished a %s (tool %d)",
                 tick, bp.builder_id, bp.tool_type.value, tool.id)

    def _abandon(self, bp: Blueprint, tick: int):
        del self.blueprints[bp.id]
        self._release_builder(bp)
        log.info("tick %d: %s blueprint %d abandoned at %.0f%%",
                 tick, bp.tool_type.value, bp.id, bp.completion * 100)

    # ──────────────────────────────────────────────────────────────────────────
    # Death & reproduction
    # ──────────────────────────────────────────────────────────────────────────

    def _bury(self, tick: int):
        for bug in self.bugs.values():
            if not bug.alive:
                continue
            cause = bug.death_cause(MAX_AGE)
            if cause is not None:
                bug.die(cause, tick)
                log.debug("tick %d: bug %d died (%s) at age %d",
                          tick, bug.id, cause, bug.age)

    def _clear_corpses(self, tick: int):
        gone = [b.id for b in self.bugs.values()
                if not b.alive and tick - b.died_tick >= CORPSE_GRACE_TICKS]
        for bug_id in gone:
            del self.bugs[bug_id]

    def compatible(self, a: Bug, b: Bug) -> bool:
        if a.dna.neural.topology != b.dna.neural.topology:
            return False
        if a.dna.species_type is b.dna.species_type:
            return True
        return genome_similarity(a.dna, b.dna) >= CROSS_SPECIES_SIMILARITY

    def _reproduce(self, tick: int):
        eligible = [b for b in self.bugs.values()
                    if b.ready_to_breed(self.breeding_threshold)]
        alive = sum(1 for b in self.bugs.values() if b.alive)
        paired = set()

        for a in eligible:
            if alive >= self.max_population:
                break
            if a.id in paired:
                continue
            mate, mate_d = None, REPRODUCTION_RADIUS
            for b in eligible:
                if b.id == a.id or b.id in paired:
                    continue
                d = a.distance_to(b.x, b.y)
                if d <= mate_d and (mate is None or d < mate_d) and self.compatible(a, b):
                    mate, mate_d = b, d
            if mate is None:
                continue
            self._breed(a, mate, tick)
            paired.update((a.id, mate.id))
            alive += 1

    def _breed(self, a: Bug, b: Bug, tick: int) -> Bug:
        dna = crossover(a.dna, b.dna, self.rng,
                        self.mutation_rate, self.mutation_bound)
        mx, my = (a.x + b.x) / 2.0, (a.y + b.y) / 2.0
        x, y = self.arena.clamp(mx + self.rng.uniform(-BIRTH_JITTER, BIRTH_JITTER),
                                my + self.rng.uniform(-BIRTH_JITTER, BIRTH_JITTER))
        tools = list(self.tools.values())
        if not self.arena.is_passable(x, y, dna, tools):
            x, y = self.arena.clamp(mx, my)
            if not self.arena.is_passable(x, y, dna, tools):
                x, y = a.x, a.y

        paid = 0.0
        for parent in (a, b):
            share = min(REPRODUCTION_COST, parent.energy)
            parent.spend(share)
            parent.reproduction_cooldown = REPRODUCTION_COOLDOWN
            paid += share

        child = self.add_bug(dna, x, y, energy=paid,
                             generation=max(a.generation, b.generation) + 1)
        log.debug("tick %d: bugs %d + %d → bug %d (gen %d, %s)", tick, a.id, b.id,
                  child.id, child.generation, dna.species_type.value)
        return child

    def _check_extinction(self, tick: int):
        if any(b.alive for b in self.bugs.values()):
            self._extinct = False
            return
        if self._extinct:
            return
        self._extinct = True
        if self._next_ids["bug"] == 1:
            return      # nothing ever lived here
        log.warning("tick %d: extinction", tick)
        if not self.reseed_on_extinction:
            return
        # Reseed from the freshest corpses' genes when any remain
        ancestors = sorted((b for b in self.bugs.values()),
                           key=lambda b: (b.died_tick, b.id), reverse=True)
        for i in range(self.population):
            x, y = self.arena.find_spawn_position(self.rng)
            if ancestors:
                parent = ancestors[i % len(ancestors)]
                dna = mutate(parent.dna, self.rng, self.mutation_rate, self.mutation_bound)
                self.add_bug(dna, x, y, generation=parent.generation + 1)
            else:
                self.add_bug(random_dna(self.rng), x, y)
        log.info("tick %d: reseeded %d bugs", tick, self.population)

    # ──────────────────────────────────────────────────────────────────────────
    # Read side
    # ──────────────────────────────────────────────────────────────────────────

    def _publish(self):
        stats = recompute(self.bugs.values(), self.tick_count, self._max_generation,
                          season=self.climate.season.value,
                          weather=self.climate.weather.value)
        self._snapshot = WorldSnapshot(
            tick=self.tick_count,
            generation=self._max_generation,
            bugs=tuple(BugView.of(b) for b in self.bugs.values()),
            foods=tuple(FoodView.of(f) for f in self.foods.values()),
            resources=tuple(ResourceView.of(r) for r in self.resources.values()),
            blueprints=tuple(BlueprintView.of(bp) for bp in self.blueprints.values()),
            tools=tuple(ToolView.of(t) for t in self.tools.values()),
            statistics=stats,
            climate=self.climate.state(),
        )

    def snapshot(self) -> WorldSnapshot:
        return self._snapshot

    @property
    def statistics(self):
        return self._snapshot.statistics

    @property
    def breeding_threshold(self) -> float:
        """Energy a bug needs to breed this season."""
        return self.climate.reproduction_threshold(self.reproduction_threshold)

    @property
    def current_generation(self) -> int:
        """Highest generation of any bug ever created."""
        return self._max_generation

    @property
    def bounds(self) -> tuple:
        return self.arena.bounds

    def terrain_at(self, x: float, y: float) -> TerrainKind:
        return self.arena.terrain_at(x, y)

    def movement_modifiers(self, x: float, y: float, dna):
        return self.arena.movement_modifiers(x, y, dna, crossings_of(self.tools.values()))

    def inspect(self, bug_id: int) -> BugDetail:
        """Detailed view of one bug. Raises KeyError for unknown ids."""
        with self._lock:
            bug = self.bugs[bug_id]
            bp = self.blueprints.get(bug.project_id)
            return BugDetail(
                bug=BugView.of(bug),
                dna=bug.dna,
                decision=bug.last_decision,
                project=BlueprintView.of(bp) if bp is not None else None,
                inventory={k.value: n for k, n in bug.carried.items()},
                terrain_fitness={k.value: round(bug.dna.terrain_fitness(k), 4)
                                 for k in TerrainKind},
            )

    def _log_stats(self, stats):
        species = "  ".join(f"{s.value[:4]} {stats.count(s):>3}" for s in SpeciesType)
        log.info(
            "tick %6d | gen %4d | alive %4d | %s | energy %5.1f | "
            "food %3d | tools %3d | blueprints %3d | %s, %s",
            stats.tick, stats.generation, stats.alive, species,
            stats.mean("energy"), len(self.foods), len(self.tools),
            len(self.blueprints), stats.season, stats.weather,
        )
