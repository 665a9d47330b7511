"""
Food items for Bugtopia.

Food is scattered over the arena and eaten whole by the first compatible
bug that reaches it. Each FoodType has a fixed energy value, a rarity and
the set of species that can digest it.
"""

from dataclasses import dataclass
from enum import Enum

from genome import SpeciesType

_H, _C, _O, _S = (SpeciesType.HERBIVORE, SpeciesType.CARNIVORE,
                  SpeciesType.OMNIVORE, SpeciesType.SCAVENGER)


class FoodType(Enum):
    #        name      energy  rare   eaten by
    PLUM   = ("plum",   25.0,  False, (_H, _O))
    APPLE  = ("apple",  30.0,  False, (_H, _O))
    ORANGE = ("orange", 40.0,  True,  (_H, _O))
    MELON  = ("melon",  60.0,  True,  (_H, _O))
    MEAT   = ("meat",   45.0,  False, (_C, _O))
    FISH   = ("fish",   35.0,  False, (_C, _O))
    SEEDS  = ("seeds",  20.0,  False, (_O, _S))
    NUTS   = ("nuts",   25.0,  False, (_O, _S))

    @property
    def label(self) -> str:
        return self.value[0]

    @property
    def energy(self) -> float:
        return self.value[1]

    @property
    def rare(self) -> bool:
        return self.value[2]

    def edible_by(self, species: SpeciesType) -> bool:
        return species in self.value[3]


COMMON_SHARE = 0.7


def foods_for(species: SpeciesType) -> list:
    return [f for f in FoodType if f.edible_by(species)]


def random_food_type(rng, species: SpeciesType) -> FoodType:
    """Pick a food for a species: common foods 70% of the time, rare ones otherwise."""
    available = foods_for(species)
    common = [f for f in available if not f.rare]
    rare   = [f for f in available if f.rare]
    if rng.random() < COMMON_SHARE and common:
        pool = common
    elif rare:
        pool = rare
    else:
        pool = available
    return pool[int(rng.integers(0, len(pool)))]


@dataclass
class FoodItem:
    id:        int
    x:         float
    y:         float
    food_type: FoodType

    @property
    def energy(self) -> float:
        return self.food_type.energy

    def edible_by(self, species: SpeciesType) -> bool:
        return self.food_type.edible_by(species)
