"""
Visualizer for Bugtopia.

Produces:
  1. Arena snapshots – terrain map with food, resources, tools, blueprints
                       and bugs coloured by their DNA
  2. Population chart – bugs per species + mean energy over ticks
  3. Brain diagrams   – strongest connections of one bug's network
  4. CSV log          – per-tick statistics
"""

import os
import csv
import numpy as np
import matplotlib
matplotlib.use("Agg")          # non-interactive backend (no display needed)
import matplotlib.pyplot as plt
import matplotlib.patches as mpatches
from matplotlib.colors import ListedColormap

from arena import TerrainKind
from genome import SpeciesType
from config import (
    SAVE_DIR, LOG_CSV, PERCEPTION_LABELS, DECISION_LABELS,
)

TERRAIN_COLORS = {
    TerrainKind.OPEN:     "#1b1b1b",
    TerrainKind.WALL:     "#5a5a5a",
    TerrainKind.WATER:    "#1f4e79",
    TerrainKind.HILL:     "#6b4f2a",
    TerrainKind.SHADOW:   "#0a0a14",
    TerrainKind.PREDATOR: "#5c1a1a",
    TerrainKind.WIND:     "#1d5c5c",
    TerrainKind.FOOD:     "#1f4d1f",
}

SPECIES_COLORS = {
    SpeciesType.HERBIVORE: "#44FF44",
    SpeciesType.CARNIVORE: "#FF4444",
    SpeciesType.OMNIVORE:  "#FFAA22",
    SpeciesType.SCAVENGER: "#CC44FF",
}


# ──────────────────────────────────────────────────────────────────────────────
# Directory setup
# ──────────────────────────────────────────────────────────────────────────────

def ensure_dirs(base: str = SAVE_DIR):
    for sub in ("snapshots", "charts", "brains"):
        os.makedirs(os.path.join(base, sub), exist_ok=True)


def _dark(fig, ax):
    ax.set_facecolor("#111111")
    fig.patch.set_facecolor("#111111")
    ax.tick_params(colors="white")
    for spine in ax.spines.values():
        spine.set_edgecolor("#444444")


# ──────────────────────────────────────────────────────────────────────────────
# Arena snapshot
# ──────────────────────────────────────────────────────────────────────────────

def save_arena_snapshot(arena, snapshot, base: str = SAVE_DIR) -> str:
    """
    Render terrain plus every entity of a WorldSnapshot.
    Dead bugs still on the map are drawn as grey crosses.
    """
    fig, ax = plt.subplots(figsize=(8, 8 * arena.height / arena.width), dpi=100)
    _dark(fig, ax)
    ax.set_xlim(0, arena.width)
    ax.set_ylim(0, arena.height)
    ax.set_aspect("equal")

    cmap = ListedColormap([TERRAIN_COLORS[k] for k in TerrainKind])
    ax.imshow(arena.terrain_grid(), cmap=cmap, vmin=0, vmax=len(TerrainKind) - 1,
              origin="lower", interpolation="nearest",
              extent=(0, arena.cols * arena.tile_size, 0, arena.rows * arena.tile_size))

    if snapshot.foods:
        ax.scatter([f.x for f in snapshot.foods], [f.y for f in snapshot.foods],
                   c="#99FF66", s=6, marker=".", linewidths=0, label="food")
    live_nodes = [r for r in snapshot.resources if r.quantity > 0]
    if live_nodes:
        ax.scatter([r.x for r in live_nodes], [r.y for r in live_nodes],
                   c="#C8A165", s=[4 + 2 * r.quantity for r in live_nodes],
                   marker="s", linewidths=0, label="resources")
    for t in snapshot.tools:
        ax.add_patch(mpatches.Circle((t.x, t.y), t.size, fill=False,
                                     edgecolor="#FFD700", alpha=0.3 + 0.7 * t.durability,
                                     linewidth=1.0))
    for bp in snapshot.blueprints:
        ax.add_patch(mpatches.Circle((bp.x, bp.y), 6, fill=False,
                                     edgecolor="#FFFFFF", linestyle=":",
                                     alpha=0.4 + 0.6 * bp.completion))

    alive = [b for b in snapshot.bugs if b.alive]
    dead  = [b for b in snapshot.bugs if not b.alive]
    if alive:
        rgba = [[r / 255, g / 255, b / 255, 1.0] for (r, g, b) in (x.color for x in alive)]
        ax.scatter([b.x for b in alive], [b.y for b in alive], c=rgba, s=18,
                   edgecolors="white", linewidths=0.3)
    if dead:
        ax.scatter([b.x for b in dead], [b.y for b in dead], c="#777777", s=10,
                   marker="x", linewidths=0.6)

    stats = snapshot.statistics
    ax.set_title(f"Tick {snapshot.tick}  |  gen {snapshot.generation}  |  "
                 f"{stats.alive} alive, {len(snapshot.tools)} tools",
                 color="white", fontsize=10)

    path = os.path.join(base, "snapshots", f"tick_{snapshot.tick:07d}.png")
    plt.savefig(path, dpi=100, bbox_inches="tight", facecolor=fig.get_facecolor())
    plt.close(fig)
    return path


# ──────────────────────────────────────────────────────────────────────────────
# Population chart
# ──────────────────────────────────────────────────────────────────────────────

def save_population_chart(history: list, base: str = SAVE_DIR,
                          filename: str = "population.png"):
    """
    Bugs per species (left axis) and mean energy (right axis) over ticks.
    `history` is a list of Statistics.to_dict() rows.
    """
    if not history:
        return None
    ticks = [h["tick"] for h in history]

    fig, ax1 = plt.subplots(figsize=(12, 5), dpi=100)
    _dark(fig, ax1)

    for species, color in SPECIES_COLORS.items():
        ax1.plot(ticks, [h[species.value] for h in history], color=color,
                 linewidth=1.2, label=species.value.capitalize(), zorder=3)
    ax1.plot(ticks, [h["alive"] for h in history], color="white",
             linewidth=0.8, alpha=0.6, label="Total", zorder=2)
    ax1.set_ylabel("Bugs", color="white")
    ax1.set_xlabel("Tick", color="white")
    ax1.set_ylim(0, max(1, max(h["alive"] for h in history)) * 1.05)

    ax2 = ax1.twinx()
    ax2.plot(ticks, [h["avg_energy"] for h in history], color="#44AAFF",
             linewidth=1.0, linestyle="--", label="Mean energy", zorder=2)
    ax2.set_ylabel("Mean energy", color="white")
    ax2.set_ylim(0, 105)
    ax2.tick_params(colors="white")

    # Combined legend
    lines1, labels1 = ax1.get_legend_handles_labels()
    lines2, labels2 = ax2.get_legend_handles_labels()
    ax1.legend(lines1 + lines2, labels1 + labels2,
               facecolor="#222222", labelcolor="white",
               loc="upper right", fontsize=8)

    ax1.set_title("Population", color="white", fontsize=12)
    plt.tight_layout()
    path = os.path.join(base, "charts", filename)
    plt.savefig(path, dpi=100, bbox_inches="tight",
                facecolor=fig.get_facecolor())
    plt.close(fig)
    return path


# ──────────────────────────────────────────────────────────────────────────────
# Brain diagram
# ──────────────────────────────────────────────────────────────────────────────

def save_brain_diagram(bug, tick: int, base: str = SAVE_DIR,
                       max_edges: int = 120):
    """
    Draw a bug's network as layered columns. Only the `max_edges` strongest
    connections are drawn; green = positive weight, red = negative.
    """
    layers = list(bug.dna.neural.layers())
    topology = bug.dna.neural.topology
    xs = np.linspace(0.0, 1.0, len(topology))

    def _pos(layer, i):
        n = topology[layer]
        return xs[layer], (i + 1) / (n + 1)

    edges = []
    for li, (W, _) in enumerate(layers):
        for j in range(W.shape[0]):
            for i in range(W.shape[1]):
                edges.append((abs(W[j, i]), W[j, i], li, i, j))
    edges.sort(reverse=True)

    fig, ax = plt.subplots(figsize=(10, 7), dpi=100)
    fig.patch.set_facecolor("#111111")
    ax.set_facecolor("#111111")
    ax.axis("off")
    ax.set_xlim(-0.25, 1.25)
    ax.set_ylim(0.0, 1.05)

    for strength, w, li, i, j in edges[:max_edges]:
        x1, y1 = _pos(li, i)
        x2, y2 = _pos(li + 1, j)
        ax.plot([x1, x2], [y1, y2], color="#44FF44" if w >= 0 else "#FF4444",
                lw=0.3 + min(2.5, strength * 0.6), alpha=0.6, zorder=1)

    for layer, n in enumerate(topology):
        labels = None
        if layer == 0:
            labels = PERCEPTION_LABELS
        elif layer == len(topology) - 1:
            labels = DECISION_LABELS
        for i in range(n):
            x, y = _pos(layer, i)
            ax.add_patch(plt.Circle((x, y), 0.008, color="#AAAAAA", zorder=3))
            if labels:
                ha = "right" if layer == 0 else "left"
                dx = -0.015 if layer == 0 else 0.015
                ax.text(x + dx, y, labels.get(i, str(i)), color="white",
                        fontsize=6, ha=ha, va="center", zorder=4)

    ax.set_title(f"Tick {tick} | brain of bug {bug.id} "
                 f"({bug.dna.species_type.value}, gen {bug.generation})",
                 color="white", fontsize=10, pad=4)
    path = os.path.join(base, "brains", f"tick_{tick:07d}_bug_{bug.id}.png")
    plt.savefig(path, dpi=100, bbox_inches="tight",
                facecolor=fig.get_facecolor())
    plt.close(fig)
    return path


# ──────────────────────────────────────────────────────────────────────────────
# CSV log
# ──────────────────────────────────────────────────────────────────────────────

def append_csv(stats: dict, base: str = SAVE_DIR, enabled: bool = LOG_CSV):
    """Append one statistics row to a CSV file."""
    if not enabled:
        return None
    path = os.path.join(base, "population_log.csv")
    file_exists = os.path.isfile(path)
    with open(path, "a", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=list(stats.keys()))
        if not file_exists:
            writer.writeheader()
        writer.writerow(stats)
    return path
