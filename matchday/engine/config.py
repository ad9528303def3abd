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
"""Central configuration for simulation tuning parameters."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Tuple


@dataclass(slots=True)
class HomeAdvantageConfig:
    """Stadium-capacity buckets used to derive the home-side multiplier.

    Parameters
    ----------
    capacity_buckets : Tuple[Tuple[int, float], ...], default=((80000, 1.15), (60000, 1.12), (40000, 1.10), (20000, 1.08))
        ``(minimum capacity, multiplier)`` pairs checked from largest to smallest.
    default_multiplier : float, default=1.05
        Multiplier applied when the stadium is smaller than every bucket.
    neutral_multiplier : float, default=1.0
        Multiplier applied to both sides at a neutral venue.
    default_capacity : int, default=40000
        Capacity assumed for teams created without stadium details.
    """

    capacity_buckets: Tuple[Tuple[int, float], ...] = (
        (80000, 1.15),
        (60000, 1.12),
        (40000, 1.10),
        (20000, 1.08),
    )
    default_multiplier: float = 1.05
    neutral_multiplier: float = 1.0
    default_capacity: int = 40000


@dataclass(slots=True)
class WeatherConfig:
    """Weather performance-impact tuning.

    Parameters
    ----------
    base_impact : float, default=1.0
        Starting impact before any adjustment.
    cold_threshold : float, default=0.0
        Temperatures strictly below this value incur ``extreme_temperature_penalty``.
    hot_threshold : float, default=35.0
        Temperatures strictly above this value incur ``extreme_temperature_penalty``.
    extreme_temperature_penalty : float, default=0.1
        Impact removed for extreme temperatures.
    ideal_temperature : Tuple[float, float], default=(15.0, 25.0)
        Inclusive temperature band that earns ``ideal_temperature_bonus``.
    ideal_temperature_bonus : float, default=0.05
        Impact added inside the ideal band.
    condition_impacts : Dict[str, float]
        Additive impact per weather condition token.
    humidity_threshold : float, default=80.0
        Humidity strictly above this value incurs ``humidity_penalty``.
    humidity_penalty : float, default=0.05
        Impact removed for oppressive humidity.
    wind_threshold : float, default=30.0
        Wind speeds (km/h) strictly above this value incur ``wind_penalty``.
    wind_penalty : float, default=0.05
        Impact removed for strong wind.
    min_impact : float, default=0.8
        Lower clamp of the final impact.
    max_impact : float, default=1.2
        Upper clamp of the final impact.
    """

    base_impact: float = 1.0
    cold_threshold: float = 0.0
    hot_threshold: float = 35.0
    extreme_temperature_penalty: float = 0.1
    ideal_temperature: Tuple[float, float] = (15.0, 25.0)
    ideal_temperature_bonus: float = 0.05
    condition_impacts: Dict[str, float] = field(
        default_factory=lambda: {
            "sunny": 0.05,
            "cloudy": 0.0,
            "rainy": -0.15,
            "snowy": -0.2,
            "windy": -0.1,
            "foggy": -0.1,
        }
    )
    humidity_threshold: float = 80.0
    humidity_penalty: float = 0.05
    wind_threshold: float = 30.0
    wind_penalty: float = 0.05
    min_impact: float = 0.8
    max_impact: float = 1.2


@dataclass(slots=True)
class TacticalConfig:
    """Constants for chemistry, effectiveness and in-match adjustments.

    Parameters
    ----------
    chemistry_sentinel : float, default=0.5
        Chemistry returned when the role list does not match the roster size.
    out_of_position_penalty : float, default=0.3
        Suitability multiplier for a player outside his natural line.
    goalkeeper_mismatch_penalty : float, default=0.1
        Additional multiplier when a goalkeeper plays outfield or vice versa.
    invalid_role_suitability : float, default=0.5
        Suitability reported for a role whose sliders are out of range.
    invalid_setup_effectiveness : float, default=0.8
        Effectiveness reported for an out-of-range tactical setup.
    effectiveness_bounds : Tuple[float, float], default=(0.8, 1.2)
        Clamp applied to tactical effectiveness.
    modifier_bounds : Tuple[float, float], default=(0.5, 1.5)
        Clamp applied to each tactical modifier.
    late_game_minutes : int, default=20
        Remaining minutes under which score-based adjustments trigger.
    low_possession : float, default=0.4
        Possession share under which a counter-attacking switch is suggested.
    high_possession : float, default=0.65
        Possession share over which a direct switch is suggested.
    default_manager_rating : int, default=50
        Manager rating assumed when a team does not declare one.
    """

    chemistry_sentinel: float = 0.5
    out_of_position_penalty: float = 0.3
    goalkeeper_mismatch_penalty: float = 0.1
    invalid_role_suitability: float = 0.5
    invalid_setup_effectiveness: float = 0.8
    effectiveness_bounds: Tuple[float, float] = (0.8, 1.2)
    modifier_bounds: Tuple[float, float] = (0.5, 1.5)
    late_game_minutes: int = 20
    low_possession: float = 0.4
    high_possession: float = 0.65
    default_manager_rating: int = 50


@dataclass(slots=True)
class EventProbabilityConfig:
    """Per-minute event probabilities for the detailed simulation.

    Parameters
    ----------
    shot : float, default=0.2
        Chance of a shot in a minute before intensity and tactics.
    on_target : float, default=0.4
        Share of shots that hit the target.
    conversion : float, default=0.3
        Share of shots on target that beat the goalkeeper at equal strength.
    conversion_bounds : Tuple[float, float], default=(0.15, 0.45)
        Clamp applied after scaling conversion by the strength ratio.
    penalty : float, default=0.003
        Chance of a penalty award in a minute.
    penalty_conversion : float, default=0.78
        Share of penalties that are scored.
    own_goal_share : float, default=0.03
        Share of goals credited as own goals by the defending side.
    assist_chance : float, default=0.7
        Chance that an open-play goal records an assist.
    tackle : float, default=0.06
        Chance of a tackle in a minute.
    foul : float, default=0.05
        Chance of a foul in a minute.
    card : float, default=0.012
        Chance of a booking in a minute.
    red_card_share : float, default=0.1
        Share of bookings that are straight red cards.
    home_card_share : float, default=0.45
        Probability that a booking or foul falls on the home side.
    corner : float, default=0.03
        Chance of a corner in a minute.
    offside : float, default=0.02
        Chance of an offside call in a minute.
    injury : float, default=0.005
        Chance of an injury in a minute.
    momentum_shift : float, default=0.02
        Chance of a spontaneous momentum shift in a minute.
    momentum_shift_range : float, default=10.0
        Maximum absolute size of a spontaneous shift.
    goal_momentum_swing : float, default=15.0
        Momentum handed to the scoring side.
    momentum_weight : float, default=0.4
        How strongly momentum biases which side creates chances.
    early_minutes : int, default=15
        Minutes up to and including this value play at ``intense_multiplier``.
    late_minutes : int, default=75
        Minutes from this value onwards play at ``intense_multiplier``.
    calm_window : Tuple[int, int], default=(30, 60)
        Inclusive minute window played at ``calm_multiplier``.
    intense_multiplier : float, default=1.2
        Event-rate multiplier near kickoff and full time.
    calm_multiplier : float, default=0.8
        Event-rate multiplier mid-match.
    scorer_weights : Tuple[float, float], default=(0.6, 0.3)
        Cumulative thresholds for forward and midfielder scorers.
    instructed_scorer_share : float, default=0.5
        Chance that a shot goes to a player instructed to attack, when one is
        on the pitch.
    instructed_tackler_share : float, default=0.5
        Chance that a tackle goes to a player instructed to win the ball, when
        one is on the pitch.
    passes_per_minute : int, default=10
        Passes attempted per minute split by possession.
    base_pass_accuracy : float, default=0.8
        Pass completion chance under neutral weather.
    max_pass_accuracy : float, default=0.97
        Upper clamp for pass completion chance.
    possession_noise : float, default=8.0
        Maximum swing in percentage points of a single minute's possession.
    max_goals_per_side : int, default=8
        Goals after which further shots on target are always saved.
    max_stoppage : int, default=5
        Upper bound (inclusive) of stoppage time added at minute 90.
    max_substitutions : int, default=3
        Substitutions allowed per side.
    dismissal_strength_penalty : float, default=0.9
        Strength multiplier applied per sent-off player.
    intensity_event_multipliers : Dict[str, float]
        Event-rate multiplier per match-intensity token.
    intensity_card_multipliers : Dict[str, float]
        Card-rate multiplier per match-intensity token.
    """

    shot: float = 0.2
    on_target: float = 0.4
    conversion: float = 0.3
    conversion_bounds: Tuple[float, float] = (0.15, 0.45)
    penalty: float = 0.003
    penalty_conversion: float = 0.78
    own_goal_share: float = 0.03
    assist_chance: float = 0.7
    tackle: float = 0.06
    foul: float = 0.05
    card: float = 0.012
    red_card_share: float = 0.1
    home_card_share: float = 0.45
    corner: float = 0.03
    offside: float = 0.02
    injury: float = 0.005
    momentum_shift: float = 0.02
    momentum_shift_range: float = 10.0
    goal_momentum_swing: float = 15.0
    momentum_weight: float = 0.4
    early_minutes: int = 15
    late_minutes: int = 75
    calm_window: Tuple[int, int] = (30, 60)
    intense_multiplier: float = 1.2
    calm_multiplier: float = 0.8
    scorer_weights: Tuple[float, float] = (0.6, 0.3)
    instructed_scorer_share: float = 0.5
    instructed_tackler_share: float = 0.5
    passes_per_minute: int = 10
    base_pass_accuracy: float = 0.8
    max_pass_accuracy: float = 0.97
    possession_noise: float = 8.0
    max_goals_per_side: int = 8
    max_stoppage: int = 5
    max_substitutions: int = 3
    dismissal_strength_penalty: float = 0.9
    intensity_event_multipliers: Dict[str, float] = field(
        default_factory=lambda: {"low": 0.85, "medium": 1.0, "high": 1.1, "veryHigh": 1.2}
    )
    intensity_card_multipliers: Dict[str, float] = field(
        default_factory=lambda: {"low": 0.8, "medium": 1.0, "high": 1.2, "veryHigh": 1.4}
    )


@dataclass(slots=True)
class RatingConfig:
    """Player match-rating deltas applied as events reference a player.

    Parameters
    ----------
    initial : float, default=6.0
        Rating every player starts the match with.
    minimum : float, default=1.0
        Lower clamp for ratings.
    maximum : float, default=10.0
        Upper clamp for ratings.
    goal : float, default=1.0
        Delta for scoring.
    assist : float, default=0.5
        Delta for an assist.
    shot_on_target : float, default=0.1
        Delta for hitting the target.
    save : float, default=0.2
        Delta for a goalkeeper save.
    tackle : float, default=0.1
        Delta for a successful tackle.
    foul : float, default=-0.1
        Delta for committing a foul.
    own_goal : float, default=-0.8
        Delta for putting the ball in one's own net.
    offside : float, default=-0.05
        Delta for being caught offside.
    yellow_card : float, default=-0.3
        Delta for a booking.
    red_card : float, default=-1.0
        Delta for a dismissal.
    injury : float, default=-0.5
        Delta for picking up an injury.
    """

    initial: float = 6.0
    minimum: float = 1.0
    maximum: float = 10.0
    goal: float = 1.0
    assist: float = 0.5
    shot_on_target: float = 0.1
    save: float = 0.2
    tackle: float = 0.1
    foul: float = -0.1
    own_goal: float = -0.8
    offside: float = -0.05
    yellow_card: float = -0.3
    red_card: float = -1.0
    injury: float = -0.5


@dataclass(slots=True)
class QuickResultConfig:
    """Aggregate goal model used by the quick-result path.

    Parameters
    ----------
    strength_divisor : float, default=100.0
        Divisor turning team strength into a raw goal expectation.
    expectation_bounds : Tuple[float, float], default=(0.3, 3.0)
        Clamp applied to the raw expectation.
    expectation_scale : float, default=1.5
        Multiplier applied after clamping.
    bonus_goal_chance : float, default=0.1
        Chance of a late random adjustment of zero or one goal.
    max_goals : int, default=8
        Hard cap on goals per side.
    final_minute : int, default=90
        Minute recorded on the single full-time event.
    """

    strength_divisor: float = 100.0
    expectation_bounds: Tuple[float, float] = (0.3, 3.0)
    expectation_scale: float = 1.5
    bonus_goal_chance: float = 0.1
    max_goals: int = 8
    final_minute: int = 90


@dataclass(slots=True)
class StreamingConfig:
    """Timing controls for the streaming driver.

    Parameters
    ----------
    base_tick_interval : float, default=1.0
        Wall-clock seconds per simulated minute at speed 1.0.
    min_speed : float, default=0.25
        Slowest permitted speed multiplier.
    max_speed : float, default=8.0
        Fastest permitted speed multiplier.
    max_minute : int, default=120
        Highest minute accepted by ``jump_to_minute``.
    """

    base_tick_interval: float = 1.0
    min_speed: float = 0.25
    max_speed: float = 8.0
    max_minute: int = 120


@dataclass(slots=True)
class CheckpointConfig:
    """Which events trigger automatic match-state checkpoints.

    Parameters
    ----------
    enabled : bool, default=True
        Master switch for automatic checkpoints.
    on_goals : bool, default=True
        Checkpoint after every goal.
    on_cards : bool, default=True
        Checkpoint after yellow and red cards.
    on_half_time : bool, default=True
        Checkpoint at half time.
    on_full_time : bool, default=True
        Checkpoint at full time.
    on_tactical_changes : bool, default=False
        Checkpoint after tactical changes.
    max_checkpoints : int, default=20
        Checkpoints kept per match; manual ones are dropped first.
    history_size : int, default=200
        Past states remembered by the state manager.
    """

    enabled: bool = True
    on_goals: bool = True
    on_cards: bool = True
    on_half_time: bool = True
    on_full_time: bool = True
    on_tactical_changes: bool = False
    max_checkpoints: int = 20
    history_size: int = 200

    def should_checkpoint(self, event_type: str) -> bool:
        """Return whether an event type triggers an automatic checkpoint.

        Parameters
        ----------
        event_type : str
            Event token such as ``"goal"`` or ``"halfTime"``.

        Returns
        -------
        bool
            ``True`` when checkpoints are enabled for that event.
        """
        if not self.enabled:
            return False
        triggers = {
            "goal": self.on_goals,
            "ownGoal": self.on_goals,
            "yellowCard": self.on_cards,
            "redCard": self.on_cards,
            "halfTime": self.on_half_time,
            "fullTime": self.on_full_time,
            "tacticalChange": self.on_tactical_changes,
        }
        return triggers.get(event_type, False)


@dataclass(slots=True)
class EngineConfig:
    """Top-level container for all tuning structures.

    Parameters
    ----------
    home_advantage : HomeAdvantageConfig, default=HomeAdvantageConfig()
        Stadium-capacity home multipliers.
    weather : WeatherConfig, default=WeatherConfig()
        Weather impact tuning.
    tactical : TacticalConfig, default=TacticalConfig()
        Chemistry and tactical-modifier constants.
    events : EventProbabilityConfig, default=EventProbabilityConfig()
        Per-minute event probabilities.
    ratings : RatingConfig, default=RatingConfig()
        Player rating deltas.
    quick_result : QuickResultConfig, default=QuickResultConfig()
        Quick-result goal model.
    streaming : StreamingConfig, default=StreamingConfig()
        Streaming driver timing.
    checkpoints : CheckpointConfig, default=CheckpointConfig()
        Automatic checkpoint triggers for the state manager.
    """

    home_advantage: HomeAdvantageConfig = field(default_factory=HomeAdvantageConfig)
    weather: WeatherConfig = field(default_factory=WeatherConfig)
    tactical: TacticalConfig = field(default_factory=TacticalConfig)
    events: EventProbabilityConfig = field(default_factory=EventProbabilityConfig)
    ratings: RatingConfig = field(default_factory=RatingConfig)
    quick_result: QuickResultConfig = field(default_factory=QuickResultConfig)
    streaming: StreamingConfig = field(default_factory=StreamingConfig)
    checkpoints: CheckpointConfig = field(default_factory=CheckpointConfig)


ENGINE_CONFIG = EngineConfig()
"""Singleton-style access to the simulation configuration."""
