"""
Unit tests for food types and spawning choices.
"""

import pytest

from food import FoodItem, FoodType, foods_for, random_food_type
from genome import SpeciesType


class TestFoodTypes:

    def test_energy_values(self):
        assert FoodType.MELON.energy == 60.0
        assert FoodType.SEEDS.energy == 20.0

    def test_diets(self):
        assert FoodType.APPLE.edible_by(SpeciesType.HERBIVORE)
        assert not FoodType.APPLE.edible_by(SpeciesType.CARNIVORE)
        assert FoodType.MEAT.edible_by(SpeciesType.CARNIVORE)
        assert FoodType.NUTS.edible_by(SpeciesType.SCAVENGER)

    def test_omnivore_eats_everything(self):
        assert foods_for(SpeciesType.OMNIVORE) == list(FoodType)

    def test_every_species_has_food(self):
        for species in SpeciesType:
            assert foods_for(species)


class TestRandomFood:

    @pytest.mark.parametrize("species", list(SpeciesType))
    def test_picked_food_is_edible(self, rng, species):
        for _ in range(50):
            assert random_food_type(rng, species).edible_by(species)

    def test_rare_foods_appear(self, rng):
        picks = {random_food_type(rng, SpeciesType.HERBIVORE) for _ in range(300)}
        assert FoodType.MELON in picks or FoodType.ORANGE in picks
        assert FoodType.PLUM in picks


class TestFoodItem:

    def test_item_delegates_to_type(self):
        item = FoodItem(1, 10.0, 20.0, FoodType.FISH)
        assert item.energy == 35.0
        assert item.edible_by(SpeciesType.OMNIVORE)
        assert not item.edible_by(SpeciesType.HERBIVORE)
