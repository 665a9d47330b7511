"""
Bugtopia – Main Entry Point
===========================

Usage examples:
  python main.py                          # default run
  python main.py --ticks 5000 --pop 40    # custom parameters
  python main.py --seed 7 --workers 4     # reproducible, parallel planning
  python main.py --no_mutation            # turn off mutations (demonstration)
  python main.py --log_level DEBUG        # every hunt, birth and blueprint
"""

import argparse
import logging
import os

from simulation  import Simulation
from visualizer  import (ensure_dirs, save_arena_snapshot,
                          save_population_chart, save_brain_diagram,
                          append_csv)
from config import (SAVE_DIR, SNAPSHOT_INTERVAL, STATS_LOG_INTERVAL,
                    INITIAL_POPULATION, MAX_POPULATION, MUTATION_RATE,
                    ARENA_WIDTH, ARENA_HEIGHT)

log = logging.getLogger("bugtopia")


# ──────────────────────────────────────────────────────────────────────────────
# CLI
# ──────────────────────────────────────────────────────────────────────────────

def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Bugtopia – evolving bug ecosystem")
    p.add_argument("--ticks",      type=int,   default=3000,
                   help="Number of ticks to run")
    p.add_argument("--pop",        type=int,   default=INITIAL_POPULATION,
                   help="Initial population size")
    p.add_argument("--max_pop",    type=int,   default=MAX_POPULATION,
                   help="Population cap for reproduction")
    p.add_argument("--width",      type=float, default=ARENA_WIDTH,
                   help="Arena width in world units")
    p.add_argument("--height",     type=float, default=ARENA_HEIGHT,
                   help="Arena height in world units")
    p.add_argument("--mutation",   type=float, default=MUTATION_RATE,
                   help="Mutation rate per gene")
    p.add_argument("--no_mutation",action="store_true",
                   help="Set mutation rate to 0 (demonstration)")
    p.add_argument("--workers",    type=int,   default=1,
                   help="Threads used to plan bug moves")
    p.add_argument("--seed",       type=int,   default=None,
                   help="Random seed for reproducibility")
    p.add_argument("--outdir",     default=SAVE_DIR,
                   help="Output directory")
    p.add_argument("--snapshot_interval", type=int, default=SNAPSHOT_INTERVAL,
                   help="Save arena snapshot every N ticks")
    p.add_argument("--log_level",  default="INFO",
                   choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return p.parse_args(argv)


# ──────────────────────────────────────────────────────────────────────────────
# Callbacks
# ──────────────────────────────────────────────────────────────────────────────

class SimCallbacks:
    """Per-tick outputs: CSV rows, arena snapshots, brain diagrams, charts."""

    def __init__(self, sim_ref: dict, outdir: str, snapshot_interval: int):
        self.sim_ref           = sim_ref      # filled in once the sim exists
        self.outdir            = outdir
        self.snapshot_interval = max(1, snapshot_interval)

    def on_tick(self, tick, snapshot):
        sim = self.sim_ref.get("sim")
        if sim is None:
            return

        if tick % STATS_LOG_INTERVAL == 0:
            append_csv(snapshot.statistics.to_dict(), self.outdir)

        if tick % self.snapshot_interval == 0:
            path = save_arena_snapshot(sim.arena, snapshot, self.outdir)
            log.info("snapshot: %s", path)

            # Brain of the oldest living bug
            living = [b for b in sim.bugs.values() if b.alive]
            if living:
                elder = max(living, key=lambda b: (b.age, -b.id))
                bpath = save_brain_diagram(elder, tick, self.outdir)
                log.info("brain diagram: %s", bpath)

            save_population_chart(sim.history, self.outdir)


# ──────────────────────────────────────────────────────────────────────────────
# Main
# ──────────────────────────────────────────────────────────────────────────────

def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )
    ensure_dirs(args.outdir)

    mutation_rate = 0.0 if args.no_mutation else args.mutation

    log.info("=" * 60)
    log.info("  Bugtopia – evolving bug ecosystem")
    log.info("=" * 60)
    log.info("  Population : %d (cap %d)", args.pop, args.max_pop)
    log.info("  Arena      : %.0f x %.0f", args.width, args.height)
    log.info("  Ticks      : %d", args.ticks)
    log.info("  Mutation   : %s", mutation_rate)
    log.info("  Workers    : %d", args.workers)
    log.info("  Seed       : %s", args.seed)
    log.info("  Output dir : %s", args.outdir)
    log.info("=" * 60)

    sim_ref = {}
    cb = SimCallbacks(sim_ref, args.outdir, args.snapshot_interval)

    sim = Simulation(
        population       = args.pop,
        max_population   = args.max_pop,
        arena_width      = args.width,
        arena_height     = args.height,
        mutation_rate    = mutation_rate,
        workers          = args.workers,
        seed             = args.seed,
        on_tick_callback = cb.on_tick,
    )
    sim_ref["sim"] = sim

    try:
        sim.run(args.ticks)
    finally:
        sim.close()

    chart_path = save_population_chart(sim.history, args.outdir, "population_final.png")
    log.info("final chart: %s", chart_path)
    snap_path = save_arena_snapshot(sim.arena, sim.snapshot(), args.outdir)
    log.info("final snapshot: %s", snap_path)
    log.info("done, all outputs saved to %s", os.path.abspath(args.outdir))
    return sim


if __name__ == "__main__":
    main()
