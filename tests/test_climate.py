"""
Unit tests for the season clock and weather patterns.
"""

import numpy as np
import pytest

from climate import WEATHER_BIAS, Climate, Season, WeatherType


class _CountingRng:
    """Wraps a generator and counts draws."""

    def __init__(self, seed=0):
        self._rng = np.random.default_rng(seed)
        self.draws = 0

    def random(self):
        self.draws += 1
        return self._rng.random()

    def uniform(self, lo, hi):
        self.draws += 1
        return self._rng.uniform(lo, hi)


class TestSeasons:

    def test_cycle_order(self):
        assert Season.SPRING.next is Season.SUMMER
        assert Season.SUMMER.next is Season.FALL
        assert Season.FALL.next is Season.WINTER
        assert Season.WINTER.next is Season.SPRING

    def test_season_rolls_over(self, rng):
        climate = Climate()
        climate.season_tick = Season.SPRING.duration - 1
        assert climate.update(rng)[0] == "season summer"
        assert climate.season is Season.SUMMER
        assert climate.season_tick == 0
        assert climate.year == 0

    def test_year_counts_each_spring(self, rng):
        climate = Climate()
        total = sum(s.duration for s in Season)
        for _ in range(total):
            climate.update(rng)
        assert climate.season is Season.SPRING
        assert climate.year == 1

    def test_breeding_threshold_scales_by_season(self):
        climate = Climate()
        assert climate.reproduction_threshold(55.0) == pytest.approx(55.0 / 1.3)
        climate.season = Season.WINTER
        assert climate.reproduction_threshold(55.0) == pytest.approx(55.0 / 0.4)


class TestWeather:

    def test_initial_state(self):
        climate = Climate()
        assert climate.weather is WeatherType.CLEAR
        assert climate.food_multiplier == pytest.approx(1.4)

    def test_food_multiplier_combines_season_and_weather(self):
        climate = Climate()
        climate.season = Season.WINTER
        climate.weather = WeatherType.BLIZZARD
        assert climate.food_multiplier == pytest.approx(0.3 * 0.1)
        climate.season = Season.SUMMER
        climate.weather = WeatherType.RAIN
        assert climate.food_multiplier == pytest.approx(1.6 * 1.3)

    def test_no_draws_in_first_half_of_a_pattern(self):
        climate = Climate()
        rng = _CountingRng()
        for _ in range(climate.weather_length // 2):
            climate.update(rng)
        assert rng.draws == 0

    def test_pattern_changes_when_it_runs_out(self, rng):
        climate = Climate()
        climate.weather_tick = climate.weather_length - 1
        changes = climate.update(rng)
        assert changes == [f"weather {climate.weather.value}"]
        assert climate.weather_tick == 0
        base = climate.weather.base_duration
        assert int(base * 0.7) <= climate.weather_length <= int(base * 1.4)

    def test_spring_never_brings_blizzards(self, rng):
        climate = Climate()
        seen = set()
        for _ in range(300):
            climate.season_tick = 0
            climate.weather_tick = climate.weather_length - 1
            climate.update(rng)
            seen.add(climate.weather)
        assert WeatherType.BLIZZARD not in seen
        assert seen <= {w for w, odds in WEATHER_BIAS[Season.SPRING].items() if odds > 0}
        assert len(seen) > 2

    def test_same_seed_same_weather(self):
        def run(seed):
            climate, rng = Climate(), np.random.default_rng(seed)
            trace = []
            for _ in range(6000):
                trace.extend(climate.update(rng))
            return trace

        assert run(3) == run(3)
        assert any(c.startswith("weather") for c in run(3))


class TestState:

    def test_state_is_plain_data(self):
        climate = Climate()
        climate.season_tick = 750
        d = climate.state().to_dict()
        assert d["season"] == "spring"
        assert d["weather"] == "clear"
        assert d["seasonProgress"] == pytest.approx(0.5)
        assert d["weatherLeft"] == 800
        assert d["foodMultiplier"] == pytest.approx(1.4)
