# Copyright (C) 2025 Richard Owen
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.
"""Match-day weather and its effect on player performance."""
from dataclasses import dataclass
from enum import Enum

from typing import Optional

from matchday.engine.config import ENGINE_CONFIG, WeatherConfig


class WeatherCondition(str, Enum):
    """Dominant weather condition at kickoff."""

    SUNNY = "sunny"
    CLOUDY = "cloudy"
    RAINY = "rainy"
    SNOWY = "snowy"
    WINDY = "windy"
    FOGGY = "foggy"


@dataclass(frozen=True)
class Weather:
    """Weather conditions for a fixture.

    Parameters
    ----------
    condition : WeatherCondition
        Dominant condition.
    temperature : float
        Air temperature in degrees Celsius, -40 to 50.
    humidity : float
        Relative humidity in percent, 0 to 100.
    wind_speed : float
        Wind speed in km/h, 0 to 200.
    """

    condition: WeatherCondition = WeatherCondition.CLOUDY
    temperature: float = 18.0
    humidity: float = 60.0
    wind_speed: float = 10.0

    def __post_init__(self) -> None:
        """Validate the measurement ranges."""
        object.__setattr__(self, "condition", WeatherCondition(self.condition))
        if not -40 <= self.temperature <= 50:
            raise ValueError("temperature must be between -40 and 50")
        if not 0 <= self.humidity <= 100:
            raise ValueError("humidity must be between 0 and 100")
        if not 0 <= self.wind_speed <= 200:
            raise ValueError("wind_speed must be between 0 and 200")

    @property
    def performance_impact(self) -> float:
        """Multiplier applied to both sides under the default tuning."""
        return self.performance_impact_for()

    def performance_impact_for(self, cfg: Optional[WeatherConfig] = None) -> float:
        """Multiplier applied to both sides under a given tuning.

        Parameters
        ----------
        cfg : Optional[WeatherConfig]
            Weather tuning; ``ENGINE_CONFIG.weather`` when omitted.

        Returns
        -------
        float
            Impact clamped to the configured range, [0.8, 1.2] by default.
        """
        cfg = cfg or ENGINE_CONFIG.weather
        impact = cfg.base_impact

        if self.temperature < cfg.cold_threshold or self.temperature > cfg.hot_threshold:
            impact -= cfg.extreme_temperature_penalty
        elif cfg.ideal_temperature[0] <= self.temperature <= cfg.ideal_temperature[1]:
            impact += cfg.ideal_temperature_bonus

        impact += cfg.condition_impacts.get(self.condition.value, 0.0)

        if self.humidity > cfg.humidity_threshold:
            impact -= cfg.humidity_penalty
        if self.wind_speed > cfg.wind_threshold:
            impact -= cfg.wind_penalty

        return max(cfg.min_impact, min(cfg.max_impact, impact))
