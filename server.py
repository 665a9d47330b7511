"""
Bugtopia Server  –  Flask + Server-Sent Events
==============================================

Endpoints:
  POST /start          Start ticking (JSON body with config → new world first)
  POST /pause          Stop ticking, keep the world
  POST /reset          Rebuild the initial world from the seed
  POST /step           Run exactly one tick
  GET  /status         Running flag, tick, generation, statistics
  GET  /snapshot       Full WorldSnapshot as JSON
  GET  /bugs/<id>      Inspector detail for one bug
  GET  /terrain        Terrain grid codes + legend
  GET  /stream         SSE stream – one frame per tick while running

Run:
  python server.py
  # → http://localhost:5000
"""

import threading
import queue
import json
import logging
import time

from flask import Flask, Response, request, jsonify

from arena import TerrainKind
from simulation import Simulation
from config import (
    INITIAL_POPULATION, MAX_POPULATION, ARENA_WIDTH, ARENA_HEIGHT,
    MUTATION_RATE, MUTATION_BOUND, INITIAL_FOOD, RESOURCE_NODE_COUNT,
    STREAM_INTERVAL,
)

log = logging.getLogger(__name__)

# ──────────────────────────────────────────────────────────────────────────────
app = Flask(__name__)

# Global simulation state
_sim:         Simulation | None = None
_sim_thread:  threading.Thread | None = None
_stop_event   = threading.Event()
_frame_queue  = queue.Queue(maxsize=200)   # holds dicts to stream
_sim_lock     = threading.Lock()


# ──────────────────────────────────────────────────────────────────────────────
# CORS helper – allow a browser front-end on any origin to call us
# ──────────────────────────────────────────────────────────────────────────────

@app.after_request
def add_cors(response):
    response.headers["Access-Control-Allow-Origin"]  = "*"
    response.headers["Access-Control-Allow-Headers"] = "Content-Type"
    response.headers["Access-Control-Allow-Methods"] = "GET, POST, OPTIONS"
    return response

@app.route("/", methods=["OPTIONS"])
@app.route("/<path:p>", methods=["OPTIONS"])
def preflight(p=""):
    return Response(status=200)


# ──────────────────────────────────────────────────────────────────────────────
# Simulation management
# ──────────────────────────────────────────────────────────────────────────────

def _build_cfg(data: dict) -> dict:
    """Merge request JSON with defaults."""
    seed = data.get("seed")
    return {
        "population":     int(data.get("population",    INITIAL_POPULATION)),
        "max_population": int(data.get("maxPopulation", MAX_POPULATION)),
        "arena_width":    float(data.get("arenaWidth",  ARENA_WIDTH)),
        "arena_height":   float(data.get("arenaHeight", ARENA_HEIGHT)),
        "mutation_rate":  float(data.get("mutationRate",  MUTATION_RATE)),
        "mutation_bound": float(data.get("mutationBound", MUTATION_BOUND)),
        "food_count":     int(data.get("foodCount",     INITIAL_FOOD)),
        "resource_count": int(data.get("resourceCount", RESOURCE_NODE_COUNT)),
        "workers":        int(data.get("workers",       1)),
        "seed":           None if seed is None else int(seed),
    }


def set_simulation(sim: Simulation):
    """Install the world the endpoints operate on (stops any running loop)."""
    global _sim
    _stop_loop()
    with _sim_lock:
        _sim = sim


def get_simulation() -> Simulation:
    global _sim
    with _sim_lock:
        if _sim is None:
            _sim = Simulation()
        return _sim


def _frame(sim: Simulation) -> dict:
    snap = sim.snapshot()
    return {
        "type":       "tick",
        "tick":       snap.tick,
        "generation": snap.generation,
        "stats":      snap.statistics.to_dict(),
        "climate":    snap.climate.to_dict(),
        "bugs": [
            {"id": b.id, "x": round(b.x, 2), "y": round(b.y, 2),
             "species": b.species, "alive": b.alive,
             "r": int(b.color[0]), "g": int(b.color[1]), "b": int(b.color[2])}
            for b in snap.bugs
        ],
        "foods": [{"x": round(f.x, 2), "y": round(f.y, 2), "kind": f.kind}
                  for f in snap.foods],
        "tools": [{"x": round(t.x, 2), "y": round(t.y, 2), "type": t.tool_type,
                   "durability": round(t.durability, 3)} for t in snap.tools],
    }


def _push(payload: dict):
    # Non-blocking put; drop oldest frame if queue full
    if _frame_queue.full():
        try:
            _frame_queue.get_nowait()
        except queue.Empty:
            pass
    _frame_queue.put(payload)


def _sim_worker(sim: Simulation, stop_evt: threading.Event):
    """Tick in the background while the simulation is started."""
    log.info("simulation loop started at tick %d", sim.tick_count)
    try:
        while not stop_evt.is_set() and sim.advance():
            _push(_frame(sim))
            time.sleep(STREAM_INTERVAL)
    finally:
        _push({"type": "paused", "tick": sim.tick_count})
        log.info("simulation loop stopped at tick %d", sim.tick_count)


def _start_loop(sim: Simulation):
    global _sim_thread, _stop_event
    if _sim_thread and _sim_thread.is_alive():
        return
    _stop_event = threading.Event()
    _sim_thread = threading.Thread(target=_sim_worker, args=(sim, _stop_event),
                                   daemon=True)
    _sim_thread.start()


def _stop_loop():
    _stop_event.set()
    if _sim_thread and _sim_thread.is_alive():
        _sim_thread.join(timeout=3)


# ──────────────────────────────────────────────────────────────────────────────
# Routes
# ──────────────────────────────────────────────────────────────────────────────

@app.route("/start", methods=["POST"])
def start():
    data = request.get_json(silent=True) or {}
    if data:
        cfg = _build_cfg(data)
        set_simulation(Simulation(**cfg))
    else:
        cfg = None
    sim = get_simulation()
    sim.start()
    _start_loop(sim)
    return jsonify({"status": "started", "tick": sim.tick_count, "cfg": cfg})


@app.route("/pause", methods=["POST"])
def pause():
    sim = get_simulation()
    sim.pause()
    return jsonify({"status": "paused", "tick": sim.tick_count})


@app.route("/reset", methods=["POST"])
def reset():
    sim = get_simulation()
    sim.reset()
    _push(_frame(sim))
    return jsonify({"status": "reset", "tick": sim.tick_count,
                    "running": sim.is_running})


@app.route("/step", methods=["POST"])
def step_one():
    """Run exactly one tick (convenience for manual stepping)."""
    sim = get_simulation()
    sim.step()
    _push(_frame(sim))
    return jsonify({"status": "stepped", "tick": sim.tick_count,
                    "stats": sim.statistics.to_dict()})


@app.route("/status", methods=["GET"])
def status():
    sim = get_simulation()
    return jsonify({
        "running":    sim.is_running,
        "tick":       sim.tick_count,
        "generation": sim.current_generation,
        "stats":      sim.statistics.to_dict(),
        "climate":    sim.snapshot().climate.to_dict(),
    })


@app.route("/snapshot", methods=["GET"])
def snapshot():
    return jsonify(get_simulation().snapshot().to_dict())


@app.route("/bugs/<int:bug_id>", methods=["GET"])
def bug_detail(bug_id: int):
    try:
        detail = get_simulation().inspect(bug_id)
    except KeyError:
        return jsonify({"error": f"no bug {bug_id}"}), 404
    return jsonify(detail.to_dict())


@app.route("/terrain", methods=["GET"])
def terrain():
    arena = get_simulation().arena
    return jsonify({
        "tileSize": arena.tile_size,
        "cols":     arena.cols,
        "rows":     arena.rows,
        "legend":   [k.value for k in TerrainKind],
        "grid":     arena.terrain_grid().tolist(),
    })


@app.route("/stream", methods=["GET"])
def stream():
    """SSE endpoint – browser subscribes and receives each tick as an event."""

    def event_gen():
        # Send a hello so the browser knows it's connected
        yield "data: {\"type\": \"connected\"}\n\n"

        while True:
            try:
                payload = _frame_queue.get(timeout=1)
                yield f"data: {json.dumps(payload)}\n\n"
            except queue.Empty:
                # Keep-alive ping
                yield "data: {\"type\": \"ping\"}\n\n"

    return Response(
        event_gen(),
        mimetype="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "X-Accel-Buffering": "no",    # disable nginx buffering if behind proxy
        },
    )


# ──────────────────────────────────────────────────────────────────────────────

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO,
                        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s")
    print("=" * 50)
    print("  Bugtopia Server  →  http://localhost:5000")
    print("  SSE stream       →  http://localhost:5000/stream")
    print("=" * 50)
    app.run(host="0.0.0.0", port=5000, threaded=True, debug=False)
