"""
Unit tests for world views and the perception vector.
"""

import numpy as np
import pytest

from arena import Arena
from bug import Bug
from economy import ResourceKind, ResourceNode
from food import FoodItem, FoodType
from genome import SpeciesType
from perception import WorldView, nearest, survey, sense
from config import NUM_INPUTS


@pytest.fixture
def arena(open_grid):
    return Arena(400, 400, 40, terrain=open_grid())


def _view(bugs=(), foods=(), nodes=()):
    return WorldView.capture(0, bugs, foods, nodes, (), ())


class TestWorldView:

    def test_arrays_are_read_only(self, make_dna):
        view = _view([Bug(1, make_dna(), 10, 10)])
        with pytest.raises(ValueError):
            view.bug_pos[0, 0] = 99.0

    def test_empty_view(self):
        view = WorldView.empty()
        assert view.bug_pos.shape == (0, 2)
        assert view.edible_food(SpeciesType.HERBIVORE).size == 0

    def test_predator_and_prey_masks(self, make_dna):
        herb = Bug(1, make_dna(SpeciesType.HERBIVORE), 0, 0)
        carn = Bug(2, make_dna(SpeciesType.CARNIVORE), 5, 0)
        view = _view([herb, carn])
        assert list(view.predators_of(1, SpeciesType.HERBIVORE)) == [False, True]
        assert list(view.prey_of(2, SpeciesType.CARNIVORE)) == [True, False]
        assert not view.prey_of(1, SpeciesType.HERBIVORE).any()

    def test_dead_bugs_are_not_others(self, make_dna):
        a, b = Bug(1, make_dna(), 0, 0), Bug(2, make_dna(), 1, 0)
        b.die("starved", 0)
        view = _view([a, b])
        assert not view.others(1).any()
        assert list(view.corpses(tick=1, grace=5)) == [False, True]


class TestNearest:

    def test_nothing_in_range(self):
        pos = np.array([[100.0, 0.0]])
        assert nearest(pos, 0, 0, 50) == (None, float("inf"))

    def test_closest_wins(self):
        pos = np.array([[30.0, 0.0], [10.0, 0.0], [20.0, 0.0]])
        i, d = nearest(pos, 0, 0, 50)
        assert (i, d) == (1, 10.0)

    def test_ties_go_to_lowest_index(self):
        pos = np.array([[0.0, 10.0], [10.0, 0.0]])
        assert nearest(pos, 0, 0, 50)[0] == 0

    def test_mask_and_reach(self):
        pos = np.array([[10.0, 0.0], [20.0, 0.0]])
        assert nearest(pos, 0, 0, 50, mask=np.array([False, True]))[0] == 1
        assert nearest(pos, 0, 0, 25, reach=np.array([0.2, 1.0]))[0] == 1


class TestSurvey:

    def test_sees_edible_food_only(self, make_dna):
        bug = Bug(1, make_dna(), 100, 100)
        foods = [FoodItem(1, 105, 100, FoodType.MEAT), FoodItem(2, 120, 100, FoodType.APPLE)]
        seen = survey(bug, _view([bug], foods), 1.0)
        assert seen.food[0] == 1
        assert seen.food[1] == pytest.approx(20.0)

    def test_empty_nodes_are_ignored(self, make_dna):
        bug = Bug(1, make_dna(), 100, 100)
        nodes = [ResourceNode(1, ResourceKind.STICK, 101, 100, 0, 0),
                 ResourceNode(2, ResourceKind.STONE, 110, 100, 3, 0)]
        assert survey(bug, _view([bug], nodes=nodes), 1.0).resource[0] == 1

    def test_predator_alert(self, make_dna):
        herb = Bug(1, make_dna(defense={"predator_detection": 0.5}), 100, 100)
        carn = Bug(2, make_dna(SpeciesType.CARNIVORE), 140, 100)
        seen = survey(herb, _view([herb, carn]), 1.0)
        assert seen.predator[0] == 1
        assert seen.neighbour_threat == 1.0

    def test_distracted_herbivore_misses_predator(self, make_dna):
        herb = Bug(1, make_dna(defense={"predator_detection": 0.0}), 100, 100)
        carn = Bug(2, make_dna(SpeciesType.CARNIVORE), 140, 100)
        assert survey(herb, _view([herb, carn]), 1.0).predator[0] is None

    def test_camouflage_hides_prey(self, make_dna):
        carn = Bug(1, make_dna(SpeciesType.CARNIVORE,
                               hunting={"prey_detection_range": 60.0}), 100, 100)
        plain = Bug(2, make_dna(camouflage=0.0), 150, 100)
        hidden = Bug(2, make_dna(camouflage=1.0), 150, 100)
        assert survey(carn, _view([carn, plain]), 1.0).prey[0] == 1
        assert survey(carn, _view([carn, hidden]), 1.0).prey[0] is None

    def test_herbivores_have_no_prey(self, make_dna):
        herb = Bug(1, make_dna(), 100, 100)
        other = Bug(2, make_dna(SpeciesType.SCAVENGER), 105, 100)
        seen = survey(herb, _view([herb, other]), 1.0)
        assert seen.prey[0] is None
        assert seen.neighbour_threat == 0.0


class TestSense:

    def test_vector_layout(self, make_dna, arena):
        bug = Bug(1, make_dna(aggression=0.3, curiosity=0.7), 200, 200, energy=50.0)
        inputs = sense(bug, _view([bug]), arena)
        assert inputs.shape == (NUM_INPUTS,)
        assert inputs[0] == pytest.approx(0.5)
        assert inputs[5] == 1.0          # no food in sight
        assert inputs[17] == 1.0         # no kin in sight
        assert inputs[19] == pytest.approx(1.0)
        assert inputs[23] == pytest.approx(0.3)
        assert inputs[24] == pytest.approx(0.7)
        assert inputs[26] == 1.0

    def test_food_direction(self, make_dna, arena):
        bug = Bug(1, make_dna(), 200, 200)
        food = FoodItem(1, 200, 225, FoodType.APPLE)
        inputs = sense(bug, _view([bug], [food]), arena)
        assert inputs[5] == pytest.approx(25.0 / 50.0)
        assert (inputs[6], inputs[7]) == pytest.approx((0.0, 1.0))

    def test_carried_load(self, make_dna, arena):
        bug = Bug(1, make_dna(tools={"carrying_capacity": 1.0}), 200, 200)
        bug.carried = {ResourceKind.MUD: 5}
        assert sense(bug, _view([bug]), arena)[25] == pytest.approx(0.5)

    def test_all_finite(self, make_dna, arena):
        bug = Bug(1, make_dna(), 0, 0)
        assert np.all(np.isfinite(sense(bug, _view([bug]), arena)))
