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
"""Result records produced by the formation and tactical analysis layer."""
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from matchday.models.player import Player
from matchday.models.tactics import Formation, TeamTactics


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of an advisory pre-flight check.

    Parameters
    ----------
    is_valid : bool
        Whether the check passed.
    errors : Tuple[str, ...]
        One message per violated rule.
    """

    is_valid: bool
    errors: Tuple[str, ...] = ()


@dataclass(frozen=True)
class FormationRecommendation:
    """How well a formation fits a squad.

    Parameters
    ----------
    formation : Formation
        Formation assessed.
    suitability_score : float
        Fit between 0 and 100; 0 means the squad cannot field it.
    reasons : Tuple[str, ...]
        Human-readable justification.
    """

    formation: Formation
    suitability_score: float
    reasons: Tuple[str, ...] = ()


@dataclass(frozen=True)
class TacticalCompatibility:
    """How well live tactics suit a formation.

    Parameters
    ----------
    score : float
        Compatibility between 0 and 100.
    warnings : Tuple[str, ...]
        Conflicts found.
    """

    score: float
    warnings: Tuple[str, ...] = ()


@dataclass(frozen=True)
class TacticalAdjustment:
    """Suggested change to one tactical slider.

    Parameters
    ----------
    parameter : str
        Slider name, for example ``"pressing"``.
    current_value : int
        Current slider value.
    suggested_value : int
        Recommended slider value.
    reason : str
        Why the change helps.
    """

    parameter: str
    current_value: int
    suggested_value: int
    reason: str


class MatchScenario(str, Enum):
    """In-match situations the planning helpers react to."""

    LOSING = "losing"
    WINNING = "winning"
    DRAWING = "drawing"
    BEHIND_BY_TWO = "behindByTwo"
    PLAYER_SENT_OFF = "playerSentOff"


@dataclass(frozen=True)
class PlannedTacticalChange:
    """Tactics to switch to at a given minute.

    Parameters
    ----------
    target_minute : int
        Minute the change should be made; 0 means immediately.
    new_tactics : TeamTactics
        Tactics to switch to.
    reason : str
        Why the change is planned.
    """

    target_minute: int
    new_tactics: TeamTactics
    reason: str


@dataclass(frozen=True)
class SubstitutionRecommendation:
    """Suggested substitution.

    Parameters
    ----------
    player_out : Player
        Starter to withdraw.
    player_in : Player
        Bench player to introduce.
    reason : str
        Why the change helps.
    priority : int
        Urgency from 1 (highest) to 3.
    """

    player_out: Player
    player_in: Player
    reason: str
    priority: int

    def __post_init__(self) -> None:
        """Keep the priority within 1-3."""
        if not 1 <= self.priority <= 3:
            raise ValueError("priority must be between 1 and 3")


@dataclass(frozen=True)
class MomentumTacticalAdaptation:
    """Tactics suggested by the current momentum.

    Parameters
    ----------
    suggested_tactics : TeamTactics
        Tactics to adopt.
    reasoning : str
        Explanation of the suggestion.
    confidence : float
        Confidence between 0 and 1.
    """

    suggested_tactics: TeamTactics
    reasoning: str
    confidence: float


@dataclass(frozen=True)
class TacticalMatchupAnalysis:
    """Assessment of a team's tactics against a specific opponent.

    Parameters
    ----------
    overall_effectiveness : float
        Expected effectiveness between 0 and 100.
    strengths : Tuple[str, ...]
        Favourable aspects.
    weaknesses : Tuple[str, ...]
        Unfavourable aspects.
    recommendations : Tuple[str, ...]
        Suggested actions; never empty.
    """

    overall_effectiveness: float
    strengths: Tuple[str, ...] = ()
    weaknesses: Tuple[str, ...] = ()
    recommendations: Tuple[str, ...] = ()


@dataclass(frozen=True)
class FormationCounterAnalysis:
    """Assessment of one formation against another.

    Parameters
    ----------
    effectiveness : float
        Expected effectiveness between 0 and 100.
    advantages : Tuple[str, ...]
        Favourable aspects.
    disadvantages : Tuple[str, ...]
        Unfavourable aspects.
    suggestions : Tuple[str, ...]
        Suggested actions.
    """

    effectiveness: float
    advantages: Tuple[str, ...] = ()
    disadvantages: Tuple[str, ...] = ()
    suggestions: Tuple[str, ...] = ()


@dataclass(frozen=True)
class TacticalPerformanceRecord:
    """One past match used for trend analysis.

    Parameters
    ----------
    formation : Formation
        Formation the team played.
    tactics : TeamTactics
        Tactics the team played with.
    goals_scored : int
        Goals the team scored.
    goals_conceded : int
        Goals the team conceded.
    """

    formation: Formation
    tactics: TeamTactics
    goals_scored: int
    goals_conceded: int

    @property
    def is_win(self) -> bool:
        """Whether the team won the match."""
        return self.goals_scored > self.goals_conceded


@dataclass(frozen=True)
class TacticalPerformanceAnalysis:
    """Trends across a team's recent matches.

    Parameters
    ----------
    most_effective_formation : Optional[Formation]
        Formation with the best weighted record; ``None`` without history.
    average_goals_scored : float
        Mean goals scored per match.
    average_goals_conceded : float
        Mean goals conceded per match.
    win_rate : float
        Percentage of matches won.
    recommendations : Tuple[str, ...]
        Suggested actions.
    """

    most_effective_formation: Optional[Formation]
    average_goals_scored: float
    average_goals_conceded: float
    win_rate: float
    recommendations: Tuple[str, ...] = ()
