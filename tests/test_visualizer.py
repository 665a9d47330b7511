"""
Smoke tests for the chart / snapshot writers and the headless runner.
"""

import csv
import os

import pytest

import main
from simulation import Simulation
from visualizer import (
    ensure_dirs, save_arena_snapshot, save_population_chart,
    save_brain_diagram, append_csv,
)


@pytest.fixture
def ran_sim():
    sim = Simulation(population=6, seed=13, food_count=10, resource_count=5)
    sim.run(5)
    return sim


class TestWriters:

    def test_arena_snapshot(self, tmp_path, ran_sim):
        ensure_dirs(str(tmp_path))
        path = save_arena_snapshot(ran_sim.arena, ran_sim.snapshot(), str(tmp_path))
        assert os.path.isfile(path)
        assert path.endswith("tick_0000005.png")

    def test_population_chart(self, tmp_path, ran_sim):
        ensure_dirs(str(tmp_path))
        path = save_population_chart(ran_sim.history, str(tmp_path))
        assert os.path.isfile(path)

    def test_empty_history_draws_nothing(self, tmp_path):
        assert save_population_chart([], str(tmp_path)) is None

    def test_brain_diagram(self, tmp_path, ran_sim):
        ensure_dirs(str(tmp_path))
        bug = next(b for b in ran_sim.bugs.values() if b.alive)
        path = save_brain_diagram(bug, 5, str(tmp_path), max_edges=30)
        assert os.path.isfile(path)

    def test_csv_header_written_once(self, tmp_path, ran_sim):
        for row in ran_sim.history[:3]:
            append_csv(row, str(tmp_path), enabled=True)
        with open(tmp_path / "population_log.csv", newline="") as f:
            rows = list(csv.DictReader(f))
        assert [int(r["tick"]) for r in rows] == [1, 2, 3]

    def test_csv_disabled(self, tmp_path, ran_sim):
        assert append_csv(ran_sim.history[0], str(tmp_path), enabled=False) is None
        assert not (tmp_path / "population_log.csv").exists()


class TestHeadlessRun:

    def test_main_writes_outputs(self, tmp_path):
        sim = main.main(["--ticks", "4", "--pop", "5", "--seed", "1",
                         "--outdir", str(tmp_path), "--snapshot_interval", "2",
                         "--log_level", "WARNING"])
        assert sim.tick_count == 4
        assert os.listdir(tmp_path / "snapshots")
        assert os.listdir(tmp_path / "brains")
        assert (tmp_path / "charts" / "population_final.png").exists()
