"""
Bugtopia Configuration
All tunable parameters for the bug ecosystem simulation.
"""

# ─── World ────────────────────────────────────────────────────────────────────
ARENA_WIDTH  = 800.0   # world units east-west
ARENA_HEIGHT = 600.0   # world units north-south
TILE_SIZE    = 40.0    # side of one terrain tile
SPAWN_CLEAR_RADIUS = 3 # tiles kept wall-free around each spawn area

# Probability of each random terrain feature (checked in this order, the
# remainder is open ground before the structured features are laid down).
TERRAIN_NOISE = (
    ("wall",     0.05),
    ("water",    0.03),
    ("hill",     0.02),
    ("shadow",   0.02),
    ("predator", 0.01),
    ("wind",     0.02),
    ("food",     0.03),
)

# ─── Population ───────────────────────────────────────────────────────────────
INITIAL_POPULATION   = 20
MAX_POPULATION       = 60
RESEED_ON_EXTINCTION = True
CORPSE_GRACE_TICKS   = 90     # dead bugs stay visible (and edible) this long

# ─── Energy & Movement ────────────────────────────────────────────────────────
MAX_ENERGY        = 100.0
INITIAL_ENERGY    = 80.0
BASE_ENERGY_LOSS  = 0.12   # per tick, scaled by species metabolic rate
MOVE_ENERGY_COST  = 1.0    # per unit of distance, before terrain/efficiency
BASE_SPEED        = 2.0    # world units per tick for a speed gene of 1.0
LOW_ENERGY_PIVOT  = 50.0   # below this energy bugs slow down linearly
MAX_AGE           = 1000

# ─── Reproduction ─────────────────────────────────────────────────────────────
REPRODUCTION_THRESHOLD   = 55.0
REPRODUCTION_COST        = 20.0   # paid by each parent, handed to the child
REPRODUCTION_COOLDOWN    = 60
MIN_REPRODUCTION_AGE     = 30
REPRODUCTION_RADIUS      = 50.0
CROSS_SPECIES_SIMILARITY = 0.9    # genome similarity needed across species
BIRTH_JITTER             = 10.0

# ─── Genome ───────────────────────────────────────────────────────────────────
MUTATION_RATE         = 0.1    # per-gene probability
MUTATION_BOUND        = 0.15   # max delta as a fraction of the gene's range
NEURAL_MUTATION_BOUND = 0.3    # max absolute delta of a weight or bias
WEIGHT_LIMIT          = 5.0
BIAS_LIMIT            = 3.0

PHYSICAL_GENE_RANGES = {
    "speed":             (0.1, 2.0),
    "vision_radius":     (10.0, 100.0),
    "energy_efficiency": (0.0, 0.9),
    "size":              (0.5, 2.0),
    "strength":          (0.2, 1.5),
    "memory":            (0.1, 1.2),
    "stickiness":        (0.3, 1.3),
    "camouflage":        (0.0, 1.0),
    "aggression":        (0.0, 1.0),
    "curiosity":         (0.0, 1.0),
}

# Narrower ranges used for generation-zero bugs
PHYSICAL_GENE_SEED_RANGES = {
    "speed":             (0.5, 1.5),
    "vision_radius":     (20.0, 80.0),
    "energy_efficiency": (0.1, 0.5),
    "size":              (0.7, 1.3),
    "strength":          (0.4, 1.2),
    "memory":            (0.3, 1.0),
    "stickiness":        (0.5, 1.1),
    "camouflage":        (0.1, 0.9),
    "aggression":        (0.2, 0.8),
    "curiosity":         (0.3, 0.8),
}

TOOL_GENE_RANGES = {
    "tool_crafting":            (0.0, 1.0),
    "tool_proficiency":         (0.0, 1.0),
    "tool_vision":              (0.0, 1.0),
    "construction_drive":       (0.0, 1.0),
    "carrying_capacity":        (0.2, 2.0),
    "resource_gathering":       (0.0, 1.0),
    "engineering_intelligence": (0.0, 1.0),
    "collaboration_tendency":   (0.0, 1.0),
}

HUNTING_GENE_RANGES = {
    "hunting_intensity":      (0.0, 1.0),
    "prey_detection_range":   (20.0, 150.0),
    "chase_speed_multiplier": (1.0, 3.0),
    "hunting_energy_cost":    (0.5, 5.0),
    "stealth_level":          (0.0, 1.0),
    "pack_coordination":      (0.0, 1.0),
}

DEFENSIVE_GENE_RANGES = {
    "predator_detection":    (0.0, 1.0),
    "flee_speed_multiplier": (1.0, 3.0),
    "flee_distance":         (30.0, 200.0),
    "flee_energy_cost":      (0.5, 4.0),
    "hiding_skill":          (0.0, 1.0),
    "flocking_tendency":     (0.0, 1.0),
    "counter_attack_skill":  (0.0, 1.0),
}

SPECIES_GENE_RANGES = {
    "hunt_energy_gain": (10.0, 80.0),
    "metabolic_rate":   (0.5, 2.0),
}

# ─── Neural Network ───────────────────────────────────────────────────────────
# Perception inputs available to every bug (index → meaning)
PERCEPTION_LABELS = {
    0:  "energy",              # energy / MAX_ENERGY
    1:  "age",                 # age / MAX_AGE
    2:  "terrain_speed",       # speed modifier of the current tile
    3:  "terrain_vision",      # vision modifier of the current tile
    4:  "terrain_energy",      # energy-cost modifier of the current tile
    5:  "food_dist",           # nearest edible food, 1 = none in sight
    6:  "food_dx",
    7:  "food_dy",
    8:  "resource_dist",       # nearest non-empty resource node
    9:  "resource_dx",
    10: "resource_dy",
    11: "predator_dist",       # nearest bug that hunts this bug's species
    12: "predator_dx",
    13: "predator_dy",
    14: "prey_dist",           # nearest huntable bug (hunters only)
    15: "prey_dx",
    16: "prey_dy",
    17: "kin_dist",            # nearest bug of the same species
    18: "threat",              # nearest bug: +1 predator, −1 prey, 0 neutral
    19: "edge_x",              # 0 at an east/west edge, 1 in the middle
    20: "edge_y",
    21: "velocity_x",
    22: "velocity_y",
    23: "aggression",          # aggression gene
    24: "curiosity",           # curiosity gene
    25: "carried_load",        # carried items / capacity
    26: "constant",            # always 1.0
}
NUM_INPUTS = len(PERCEPTION_LABELS)

# Decision outputs (index → meaning); urges are mapped into 0..1
DECISION_LABELS = {
    0: "move_x",
    1: "move_y",
    2: "aggression",
    3: "exploration",
    4: "social",
    5: "reproduction",
    6: "hunting",
    7: "fleeing",
}
NUM_OUTPUTS = len(DECISION_LABELS)

HIDDEN_LAYERS   = (16, 12)
DEFAULT_TOPOLOGY = (NUM_INPUTS,) + HIDDEN_LAYERS + (NUM_OUTPUTS,)

# ─── Behaviour thresholds ─────────────────────────────────────────────────────
FLEE_URGE_MIN       = 0.5
HUNT_URGE_MIN       = 0.5
SOCIAL_URGE_MIN     = 0.6
FOOD_EXPLORE_CUTOFF = 0.7    # exploration above this ignores visible food
CAMOUFLAGE_DETECTION = 0.5   # fraction of vision lost against full camouflage

# ─── Hunting & Combat ─────────────────────────────────────────────────────────
HUNT_RANGE          = 15.0
HUNTING_COOLDOWN    = 30
AGGRESSION_RANGE    = 15.0
AGGRESSION_MIN      = 0.7    # decision.aggression × aggression gene
MAX_STOLEN_ENERGY   = 5.0
CARRION_RANGE       = 12.0

# ─── Resources & Construction ─────────────────────────────────────────────────
RESOURCE_NODE_COUNT      = 50
RESOURCE_MAX_QUANTITY    = 10
RESOURCE_SEED_QUANTITY   = (5, 10)
RESOURCE_RESPAWN_RATE    = (0.01, 0.05)   # units regrown per tick
GATHER_RADIUS            = 20.0
GATHER_SKILL_MIN         = 0.3
GATHER_ENERGY_COST       = 0.5            # per unit gathered
CONTRIBUTE_RADIUS        = 30.0
COLLABORATION_MIN        = 0.6
CONSTRUCTION_MIN_ENERGY  = 40.0
CRAFTING_MIN             = 0.4
CONSTRUCTION_COOLDOWN    = 60
TERRAIN_SCAN_RADIUS      = 100.0          # scaled by the tool_vision gene
BLUEPRINT_STALL_TICKS    = 300            # no contribution for this long → abandoned

TOOL_WEAR_PER_USE        = 0.05
TOOL_DECAY_PER_TICK      = 0.001
TOOL_USE_RADIUS          = 30.0
TOOL_PROFICIENCY_MIN     = 0.3
TOOL_USE_COOLDOWN        = 30
TOOL_BENEFIT_MIN         = 0.3

# ─── Food ─────────────────────────────────────────────────────────────────────
INITIAL_FOOD          = 40
MAX_FOOD              = 80
FOOD_SPAWN_RATE       = 0.25   # chance per tick of one new food item
FOOD_RICH_BIAS        = 0.6    # chance a spawn is placed on a food-rich tile
EAT_RADIUS            = 10.0

# ─── Climate ──────────────────────────────────────────────────────────────────
WEATHER_EARLY_CHANGE_CHANCE = 0.005        # per tick, once past half a pattern's length
WEATHER_LENGTH_JITTER       = (0.7, 1.4)   # scale on a pattern's base duration

# ─── Output / Logging ─────────────────────────────────────────────────────────
SAVE_DIR           = "output"
SNAPSHOT_INTERVAL  = 500     # save an arena snapshot every N ticks
STATS_LOG_INTERVAL = 100     # log a population summary every N ticks
LOG_CSV            = True
STREAM_INTERVAL    = 0.05    # seconds between ticks in the server loop
