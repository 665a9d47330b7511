"""
Seasons and weather for Bugtopia.

The year cycles spring → summer → fall → winter, each season lasting a fixed
number of ticks. On top of the season runs a weather pattern whose next state
is drawn from a per-season bias table when the current one runs out (or, past
its halfway mark, with a small chance each tick).

The engine reads two things from the climate:
  - a food-spawn multiplier (season abundance × weather modifier)
  - the breeding threshold, divided by the season's reproduction modifier
"""

from dataclasses import dataclass
from enum import Enum

from config import WEATHER_EARLY_CHANGE_CHANCE, WEATHER_LENGTH_JITTER


class Season(Enum):
    SPRING = "spring"
    SUMMER = "summer"
    FALL   = "fall"
    WINTER = "winter"

    @property
    def duration(self) -> int:
        return _SEASON_SPECS[self][0]

    @property
    def food_abundance(self) -> float:
        return _SEASON_SPECS[self][1]

    @property
    def reproduction_modifier(self) -> float:
        return _SEASON_SPECS[self][2]

    @property
    def next(self) -> "Season":
        order = list(Season)
        return order[(order.index(self) + 1) % len(order)]


_SEASON_SPECS = {
    #                 ticks  food  breeding
    Season.SPRING:   (1500,  1.4,  1.3),
    Season.SUMMER:   (2000,  1.6,  1.5),
    Season.FALL:     (1200,  1.0,  0.8),
    Season.WINTER:   ( 800,  0.3,  0.4),
}


class WeatherType(Enum):
    CLEAR    = "clear"
    RAIN     = "rain"
    DROUGHT  = "drought"
    BLIZZARD = "blizzard"
    STORM    = "storm"
    FOG      = "fog"

    @property
    def base_duration(self) -> int:
        return _WEATHER_SPECS[self][0]

    @property
    def food_spawn_modifier(self) -> float:
        return _WEATHER_SPECS[self][1]


_WEATHER_SPECS = {
    #                        ticks  food
    WeatherType.CLEAR:      (800,   1.0),
    WeatherType.RAIN:       (300,   1.3),
    WeatherType.DROUGHT:    (600,   0.3),
    WeatherType.BLIZZARD:   (200,   0.1),
    WeatherType.STORM:      (150,   0.8),
    WeatherType.FOG:        (250,   0.9),
}

_W = WeatherType
# Relative odds of each weather pattern starting in a season
WEATHER_BIAS = {
    Season.SPRING: {_W.CLEAR: 0.40, _W.RAIN: 0.35, _W.FOG: 0.15,
                    _W.STORM: 0.08, _W.DROUGHT: 0.02, _W.BLIZZARD: 0.0},
    Season.SUMMER: {_W.CLEAR: 0.50, _W.DROUGHT: 0.25, _W.STORM: 0.15,
                    _W.RAIN: 0.08, _W.FOG: 0.02, _W.BLIZZARD: 0.0},
    Season.FALL:   {_W.CLEAR: 0.30, _W.RAIN: 0.25, _W.FOG: 0.20,
                    _W.STORM: 0.15, _W.DROUGHT: 0.08, _W.BLIZZARD: 0.02},
    Season.WINTER: {_W.BLIZZARD: 0.30, _W.CLEAR: 0.25, _W.FOG: 0.20,
                    _W.DROUGHT: 0.15, _W.STORM: 0.08, _W.RAIN: 0.02},
}


@dataclass(frozen=True)
class ClimateState:
    season:          str
    year:            int
    season_progress: float
    weather:         str
    weather_left:    int
    food_multiplier: float

    def to_dict(self) -> dict:
        return {
            "season":         self.season,
            "year":           self.year,
            "seasonProgress": round(self.season_progress, 4),
            "weather":        self.weather,
            "weatherLeft":    self.weather_left,
            "foodMultiplier": round(self.food_multiplier, 4),
        }


class Climate:
    """Season clock plus the current weather pattern."""

    def __init__(self):
        self.season         = Season.SPRING
        self.season_tick    = 0
        self.year           = 0
        self.weather        = WeatherType.CLEAR
        self.weather_tick   = 0
        self.weather_length = WeatherType.CLEAR.base_duration

    @property
    def food_multiplier(self) -> float:
        return self.season.food_abundance * self.weather.food_spawn_modifier

    def reproduction_threshold(self, base: float) -> float:
        return base / self.season.reproduction_modifier

    def update(self, rng) -> list:
        """
        Advance one tick. Returns a list of human-readable changes
        ("season fall", "weather rain") for the caller to log.
        """
        changes = []
        self.season_tick += 1
        if self.season_tick >= self.season.duration:
            self.season = self.season.next
            self.season_tick = 0
            if self.season is Season.SPRING:
                self.year += 1
            changes.append(f"season {self.season.value}")

        self.weather_tick += 1
        if self._weather_due(rng):
            self._change_weather(rng)
            changes.append(f"weather {self.weather.value}")
        return changes

    def _weather_due(self, rng) -> bool:
        if self.weather_tick >= self.weather_length:
            return True
        if self.weather_tick > self.weather_length // 2:
            return rng.random() < WEATHER_EARLY_CHANGE_CHANCE
        return False

    def _change_weather(self, rng):
        odds = dict(WEATHER_BIAS[self.season])
        if self.weather is not WeatherType.CLEAR:
            odds[self.weather] *= 0.2      # discourage an immediate repeat
        kinds = [w for w in WeatherType if odds[w] > 0.0]
        roll = rng.random() * sum(odds[w] for w in kinds)
        chosen = kinds[-1]
        for w in kinds:
            roll -= odds[w]
            if roll <= 0.0:
                chosen = w
                break
        lo, hi = WEATHER_LENGTH_JITTER
        self.weather = chosen
        self.weather_tick = 0
        self.weather_length = max(1, int(chosen.base_duration * rng.uniform(lo, hi)))

    def state(self) -> ClimateState:
        return ClimateState(
            season=self.season.value,
            year=self.year,
            season_progress=self.season_tick / self.season.duration,
            weather=self.weather.value,
            weather_left=max(0, self.weather_length - self.weather_tick),
            food_multiplier=self.food_multiplier,
        )
