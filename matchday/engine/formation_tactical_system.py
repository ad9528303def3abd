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
"""Formation validation, squad selection and match-planning analysis.

Everything here is advisory: validation helpers return a
:class:`~matchday.models.analysis.ValidationResult` instead of raising, and the
planning helpers only suggest tactics that a caller may feed into the
streaming simulator.
"""

from __future__ import annotations

from collections import Counter, defaultdict
from dataclasses import replace
from typing import Dict, List, Optional, Sequence

from matchday.models.analysis import (
    FormationCounterAnalysis,
    FormationRecommendation,
    MatchScenario,
    MomentumTacticalAdaptation,
    PlannedTacticalChange,
    SubstitutionRecommendation,
    TacticalAdjustment,
    TacticalCompatibility,
    TacticalMatchupAnalysis,
    TacticalPerformanceAnalysis,
    TacticalPerformanceRecord,
    ValidationResult,
)
from matchday.models.match import MomentumTracker
from matchday.models.player import Player, PlayerPosition
from matchday.models.tactics import Formation, TeamMentality, TeamTactics
from matchday.models.team import Team

MIN_SQUAD_SIZE = 11
MIN_SQUAD_FOR_SUBSTITUTIONS = 14
MAX_SUBSTITUTION_RECOMMENDATIONS = 3

_FORMATION_ADVANTAGES: Dict[Formation, Sequence[Formation]] = {
    Formation.F433: (Formation.F442, Formation.F532),
    Formation.F541: (Formation.F343, Formation.F352),
    Formation.F343: (Formation.F442, Formation.F451),
    Formation.F442: (Formation.F451, Formation.F532),
}

_DEFENSIVE_FORMATIONS = (Formation.F541, Formation.F532)
_ATTACKING_FORMATIONS = (Formation.F343, Formation.F352)
_COUNTER_ATTACKING_FORMATIONS = (Formation.F451, Formation.F541)

_SCENARIO_PLANS: Dict[MatchScenario, PlannedTacticalChange] = {
    MatchScenario.LOSING: PlannedTacticalChange(
        target_minute=60,
        new_tactics=TeamTactics(TeamMentality.ATTACKING, pressing=80, tempo=85, width=75, directness=70),
        reason="Need to push forward more aggressively to equalize",
    ),
    MatchScenario.WINNING: PlannedTacticalChange(
        target_minute=70,
        new_tactics=TeamTactics(TeamMentality.DEFENSIVE, pressing=40, tempo=45, width=50, directness=60),
        reason="Protect the lead by playing more defensively",
    ),
    MatchScenario.DRAWING: PlannedTacticalChange(
        target_minute=75,
        new_tactics=TeamTactics(TeamMentality.ATTACKING, pressing=70, tempo=75, width=65, directness=65),
        reason="Push for a winner in the final stages",
    ),
    MatchScenario.BEHIND_BY_TWO: PlannedTacticalChange(
        target_minute=45,
        new_tactics=TeamTactics(TeamMentality.VERY_ATTACKING, pressing=90, tempo=90, width=80, directness=75),
        reason="Desperate need to score goals - all-out attack",
    ),
    MatchScenario.PLAYER_SENT_OFF: PlannedTacticalChange(
        target_minute=0,
        new_tactics=TeamTactics(TeamMentality.DEFENSIVE, pressing=30, tempo=40, width=45, directness=70),
        reason="Adapt to playing with 10 men - more defensive and direct",
    ),
}


def _count_positions(team: Team) -> Dict[PlayerPosition, int]:
    """Count roster players per natural line.

    Parameters
    ----------
    team : Team
        Squad to count.

    Returns
    -------
    Dict[PlayerPosition, int]
        Number of players per line; missing lines are absent.
    """
    return dict(Counter(p.position for p in team.players))


def _interpolate(value: float, low: float, high: float, start: float, end: float) -> float:
    """Linearly map ``value`` from ``[low, high]`` onto ``[start, end]``.

    Parameters
    ----------
    value : float
        Input; clamped to the source range.
    low : float
        Lower bound of the source range.
    high : float
        Upper bound of the source range.
    start : float
        Output at ``low``.
    end : float
        Output at ``high``.

    Returns
    -------
    float
        Interpolated output.
    """
    clamped = max(low, min(high, value))
    return start + (end - start) * (clamped - low) / (high - low)


class FormationTacticalSystem:
    """Advisory formation and tactics analysis built on the tactical models."""

    def validate_formation(self, team: Team, formation: Formation) -> ValidationResult:
        """Check whether a squad can field a formation.

        Parameters
        ----------
        team : Team
            Squad to check.
        formation : Formation
            Formation to field.

        Returns
        -------
        ValidationResult
            Failure with one error per problem; an empty squad yields the single
            error ``"No players available"``.
        """
        if not team.players:
            return ValidationResult(is_valid=False, errors=("No players available",))

        errors: List[str] = []
        if len(team.players) < MIN_SQUAD_SIZE:
            errors.append(f"Insufficient players (need at least {MIN_SQUAD_SIZE}, have {len(team.players)})")

        available = _count_positions(team)
        for position, required in Formation(formation).requirements.items():
            have = available.get(position, 0)
            if have < required:
                errors.append(f"Not enough {position.value}s (need {required}, have {have})")

        return ValidationResult(is_valid=not errors, errors=tuple(errors))

    def get_formation_recommendations(self, team: Team) -> List[FormationRecommendation]:
        """Rank every formation by fit to the squad's composition.

        Parameters
        ----------
        team : Team
            Squad to analyse.

        Returns
        -------
        List[FormationRecommendation]
            One entry per formation, best fit first.
        """
        recommendations = []
        for formation in Formation:
            score = self._formation_suitability(team, formation)
            recommendations.append(
                FormationRecommendation(
                    formation=formation,
                    suitability_score=score,
                    reasons=tuple(self._formation_reasons(team, formation, score)),
                )
            )
        recommendations.sort(key=lambda rec: rec.suitability_score, reverse=True)
        return recommendations

    def generate_optimal_starting_xi(self, team: Team, formation: Formation) -> Optional[List[Player]]:
        """Pick the best-rated players for each line of a formation.

        Parameters
        ----------
        team : Team
            Squad to select from.
        formation : Formation
            Formation whose line counts must be met exactly.

        Returns
        -------
        Optional[List[Player]]
            Eleven players ordered goalkeeper, defenders, midfielders, forwards;
            ``None`` when the squad is too small or a line is short.
        """
        if len(team.players) < MIN_SQUAD_SIZE:
            return None

        starting_xi: List[Player] = []
        for position, count in Formation(formation).requirements.items():
            candidates = sorted(
                team.get_players_by_position(position),
                key=lambda p: p.overall_rating,
                reverse=True,
            )
            if len(candidates) < count:
                return None
            starting_xi.extend(candidates[:count])

        return starting_xi if len(starting_xi) == MIN_SQUAD_SIZE else None

    def apply_formation_change(self, team: Team, formation: Formation) -> Team:
        """Return a copy of the team set up in another formation.

        Parameters
        ----------
        team : Team
            Team to copy.
        formation : Formation
            New formation.

        Returns
        -------
        Team
            Copy of ``team`` with ``formation`` applied.
        """
        return replace(team, formation=Formation(formation))

    def validate_tactics(self, tactics: TeamTactics) -> ValidationResult:
        """Check that every live-tactics slider lies within 0-100.

        Parameters
        ----------
        tactics : TeamTactics
            Tactics to validate.

        Returns
        -------
        ValidationResult
            One error per out-of-range slider.
        """
        errors = [
            f"{name} must be between 0 and 100 (current: {getattr(tactics, name)})"
            for name in ("pressing", "tempo", "width", "directness")
            if not 0 <= getattr(tactics, name) <= 100
        ]
        return ValidationResult(is_valid=not errors, errors=tuple(errors))

    def get_tactical_presets(self) -> Dict[str, TeamTactics]:
        """Named live-tactics presets.

        Returns
        -------
        Dict[str, TeamTactics]
            Attacking, Defensive, Balanced, Counter Attack, Possession and High
            Press presets.
        """
        return {
            "Attacking": TeamTactics(TeamMentality.ATTACKING, pressing=75, tempo=80, width=70, directness=60),
            "Defensive": TeamTactics(TeamMentality.DEFENSIVE, pressing=45, tempo=40, width=50, directness=45),
            "Balanced": TeamTactics(TeamMentality.BALANCED, pressing=55, tempo=55, width=55, directness=55),
            "Counter Attack": TeamTactics(TeamMentality.DEFENSIVE, pressing=35, tempo=85, width=40, directness=80),
            "Possession": TeamTactics(TeamMentality.BALANCED, pressing=65, tempo=45, width=75, directness=30),
            "High Press": TeamTactics(TeamMentality.ATTACKING, pressing=95, tempo=75, width=60, directness=55),
        }

    def calculate_tactical_compatibility(self, formation: Formation, tactics: TeamTactics) -> TacticalCompatibility:
        """Score how well live tactics suit a formation.

        Parameters
        ----------
        formation : Formation
            Formation in use.
        tactics : TeamTactics
            Tactics to assess.

        Returns
        -------
        TacticalCompatibility
            Score between 0 and 100 with the conflicts found.
        """
        score = 50.0
        warnings: List[str] = []
        attacking = tactics.mentality in (TeamMentality.ATTACKING, TeamMentality.VERY_ATTACKING)
        defensive = tactics.mentality in (TeamMentality.DEFENSIVE, TeamMentality.VERY_DEFENSIVE)

        if formation in _DEFENSIVE_FORMATIONS:
            if attacking:
                score -= 20
                warnings.append("Attacking mentality conflicts with defensive formation")
            if tactics.pressing > 70:
                score -= 15
                warnings.append("High pressing may be difficult with defensive formation")
        elif formation in _ATTACKING_FORMATIONS:
            if defensive:
                score -= 20
                warnings.append("Defensive mentality conflicts with attacking formation")
            if tactics.pressing < 40:
                score -= 10
                warnings.append("Low pressing may not suit attacking formation")
        else:
            score += 10

        if tactics.mentality is TeamMentality.VERY_ATTACKING and tactics.tempo < 60:
            score -= 10
            warnings.append("Very attacking mentality usually requires higher tempo")
        if tactics.mentality is TeamMentality.VERY_DEFENSIVE and tactics.width > 70:
            score -= 10
            warnings.append("Very defensive mentality usually requires narrower play")

        return TacticalCompatibility(score=max(0.0, min(100.0, score)), warnings=tuple(warnings))

    def suggest_tactical_adjustments(self, formation: Formation, tactics: TeamTactics) -> List[TacticalAdjustment]:
        """Suggest slider changes that suit a formation better.

        Parameters
        ----------
        formation : Formation
            Formation in use.
        tactics : TeamTactics
            Current tactics.

        Returns
        -------
        List[TacticalAdjustment]
            Suggestions; empty when the tactics already fit.
        """
        suggestions: List[TacticalAdjustment] = []
        if formation is Formation.F343:
            if tactics.pressing < 60:
                suggestions.append(
                    TacticalAdjustment(
                        "pressing",
                        tactics.pressing,
                        70,
                        "3-4-3 formation benefits from higher pressing to support attacking play",
                    )
                )
            if tactics.tempo < 65:
                suggestions.append(
                    TacticalAdjustment("tempo", tactics.tempo, 75, "Higher tempo suits the attacking nature of 3-4-3")
                )
        elif formation is Formation.F541:
            if tactics.pressing > 60:
                suggestions.append(
                    TacticalAdjustment(
                        "pressing",
                        tactics.pressing,
                        45,
                        "5-4-1 formation works better with lower pressing to maintain defensive shape",
                    )
                )
            if tactics.width > 60:
                suggestions.append(
                    TacticalAdjustment("width", tactics.width, 50, "Narrower play helps maintain defensive solidity in 5-4-1")
                )
        elif formation is Formation.F433 and tactics.width < 60:
            suggestions.append(
                TacticalAdjustment(
                    "width", tactics.width, 70, "4-3-3 formation benefits from wider play to stretch the opposition"
                )
            )
        return suggestions

    def plan_tactical_changes(self, team: Team, scenario: MatchScenario) -> PlannedTacticalChange:
        """Plan the tactical switch for a match scenario.

        Parameters
        ----------
        team : Team
            Team the plan is for.
        scenario : MatchScenario
            Situation to react to.

        Returns
        -------
        PlannedTacticalChange
            Target minute, tactics and reasoning.
        """
        return _SCENARIO_PLANS[MatchScenario(scenario)]

    def recommend_substitutions(
        self, team: Team, current_minute: int, scenario: MatchScenario
    ) -> List[SubstitutionRecommendation]:
        """Recommend substitutions for a match scenario.

        Parameters
        ----------
        team : Team
            Team whose first eleven roster players are on the pitch.
        current_minute : int
            Current match minute.
        scenario : MatchScenario
            Situation to react to.

        Returns
        -------
        List[SubstitutionRecommendation]
            At most three recommendations; empty with fewer than 14 players
            or an empty bench.
        """
        if len(team.players) < MIN_SQUAD_FOR_SUBSTITUTIONS:
            return []

        starters = team.starting_players()
        bench = team.bench_players()
        if not starters or not bench:
            return []
        recommendations: List[SubstitutionRecommendation] = []

        if scenario is MatchScenario.LOSING:
            recommendations.append(
                SubstitutionRecommendation(
                    player_out=self._first_of(starters, PlayerPosition.DEFENDER),
                    player_in=self._first_of(bench, PlayerPosition.FORWARD),
                    reason="Replace defender with attacker to increase goal threat",
                    priority=1,
                )
            )
        elif scenario is MatchScenario.WINNING and current_minute > 70:
            recommendations.append(
                SubstitutionRecommendation(
                    player_out=self._first_of(starters, PlayerPosition.FORWARD),
                    player_in=self._first_of(bench, PlayerPosition.DEFENDER),
                    reason="Strengthen defense to protect the lead",
                    priority=2,
                )
            )
        elif scenario is MatchScenario.PLAYER_SENT_OFF:
            recommendations.append(
                SubstitutionRecommendation(
                    player_out=self._first_of(starters, PlayerPosition.FORWARD),
                    player_in=self._first_of(bench, PlayerPosition.DEFENDER),
                    reason="Add defensive stability after red card",
                    priority=1,
                )
            )

        return recommendations[:MAX_SUBSTITUTION_RECOMMENDATIONS]

    def adapt_tactics_to_momentum(
        self, team: Team, momentum: MomentumTracker, is_home_team: bool
    ) -> MomentumTacticalAdaptation:
        """Suggest tactics that ride or resist the current momentum.

        Pressing and tempo rise monotonically with the side's momentum share:
        banded anchor values (40/45 below 30, 60/60 in between, 80/85 above 70)
        are joined by linear ramps so no increase in momentum lowers them.

        Parameters
        ----------
        team : Team
            Team being advised.
        momentum : MomentumTracker
            Current momentum gauge.
        is_home_team : bool
            Whether ``team`` is the home side.

        Returns
        -------
        MomentumTacticalAdaptation
            Suggested tactics, reasoning and confidence.
        """
        share = momentum.momentum_for(is_home_team)
        pressing = round(_interpolate(share, 30, 70, 40, 80))
        tempo = round(_interpolate(share, 30, 70, 45, 85))

        if share > 70:
            tactics = TeamTactics(TeamMentality.ATTACKING, pressing=80, tempo=85, width=75, directness=65)
            reasoning = f"{team.name} have high momentum - push forward aggressively to capitalize"
            confidence = 0.8
        elif share < 30:
            tactics = TeamTactics(TeamMentality.DEFENSIVE, pressing=40, tempo=45, width=50, directness=55)
            reasoning = f"{team.name} momentum is low - play more defensively to regain control"
            confidence = 0.9
        else:
            tactics = TeamTactics(TeamMentality.BALANCED, pressing=pressing, tempo=tempo, width=60, directness=60)
            reasoning = "Momentum is balanced - maintain current approach"
            confidence = 0.6

        return MomentumTacticalAdaptation(suggested_tactics=tactics, reasoning=reasoning, confidence=confidence)

    def analyze_tactical_matchup(
        self, my_team: Team, opponent_team: Team, my_tactics: TeamTactics
    ) -> TacticalMatchupAnalysis:
        """Assess a team's tactics against a specific opponent.

        Parameters
        ----------
        my_team : Team
            Team being advised.
        opponent_team : Team
            Opponent.
        my_tactics : TeamTactics
            Tactics ``my_team`` intends to play.

        Returns
        -------
        TacticalMatchupAnalysis
            Effectiveness between 0 and 100 with strengths, weaknesses and
            recommendations.
        """
        strengths: List[str] = []
        weaknesses: List[str] = []
        recommendations: List[str] = []
        effectiveness = 50.0

        mine, theirs = my_team.formation, opponent_team.formation
        if self.has_formation_advantage(mine, theirs):
            effectiveness += 15
            strengths.append("Formation advantage against opponent")
        elif self.has_formation_advantage(theirs, mine):
            effectiveness -= 15
            weaknesses.append("Formation disadvantage against opponent")
            recommendations.append("Consider changing formation to counter opponent")

        my_strength, their_strength = my_team.overall_rating, opponent_team.overall_rating
        if my_strength > their_strength + 5:
            effectiveness += 10
            strengths.append("Superior team quality")
        elif their_strength > my_strength + 5:
            effectiveness -= 10
            weaknesses.append("Opponent has stronger team")
            recommendations.append("Use tactical discipline to nullify quality difference")

        if my_tactics.mentality is TeamMentality.ATTACKING and theirs in _DEFENSIVE_FORMATIONS:
            effectiveness -= 5
            weaknesses.append("Attacking play against defensive setup may be difficult")
            recommendations.append("Consider more patient build-up play")

        if my_tactics.pressing > 70 and theirs in _COUNTER_ATTACKING_FORMATIONS:
            effectiveness -= 8
            weaknesses.append("High pressing vulnerable to counter-attacks")
            recommendations.append("Reduce pressing intensity against counter-attacking teams")

        if not strengths:
            strengths.append("Well-organized tactical setup")
            if my_tactics.pressing >= 60:
                strengths.append("Good pressing intensity")
            if my_tactics.tempo >= 60:
                strengths.append("Positive tempo of play")

        if not recommendations:
            recommendations.append("Maintain current tactical approach")

        return TacticalMatchupAnalysis(
            overall_effectiveness=max(0.0, min(100.0, effectiveness)),
            strengths=tuple(strengths),
            weaknesses=tuple(weaknesses),
            recommendations=tuple(recommendations),
        )

    def analyze_formation_counter(
        self, my_formation: Formation, opponent_formation: Formation
    ) -> FormationCounterAnalysis:
        """Assess one formation against another.

        Parameters
        ----------
        my_formation : Formation
            Formation being assessed.
        opponent_formation : Formation
            Formation it faces.

        Returns
        -------
        FormationCounterAnalysis
            Effectiveness between 0 and 100 with advantages, disadvantages and
            suggestions.
        """
        advantages: List[str] = []
        disadvantages: List[str] = []
        suggestions: List[str] = []
        effectiveness = 50.0

        if my_formation is Formation.F433:
            if opponent_formation is Formation.F541:
                effectiveness += 15
                advantages.append("Wide forwards can exploit wingback areas")
                advantages.append("Central midfielder can find space between lines")
            elif opponent_formation is Formation.F442:
                effectiveness += 10
                advantages.append("Extra midfielder provides numerical advantage")
        elif my_formation is Formation.F541:
            if opponent_formation is Formation.F343:
                effectiveness += 20
                advantages.append("Defensive solidity counters attacking formation")
                advantages.append("Wingbacks can exploit wide areas left by 3 center-backs")
            elif opponent_formation is Formation.F433:
                effectiveness += 10
                advantages.append("Extra defender helps handle three forwards")
            else:
                disadvantages.append("May lack attacking threat")
                suggestions.append("Ensure quick transitions to attack")
        elif my_formation is Formation.F343:
            if opponent_formation is Formation.F541:
                effectiveness -= 15
                disadvantages.append("Vulnerable to defensive solidity")
                suggestions.append("Be patient in build-up play")
            elif opponent_formation is Formation.F442:
                effectiveness += 12
                advantages.append("Wingbacks can overload wide areas")
                advantages.append("Three forwards stretch defense")

        return FormationCounterAnalysis(
            effectiveness=max(0.0, min(100.0, effectiveness)),
            advantages=tuple(advantages),
            disadvantages=tuple(disadvantages),
            suggestions=tuple(suggestions),
        )

    def analyze_performance_trends(self, history: Sequence[TacticalPerformanceRecord]) -> TacticalPerformanceAnalysis:
        """Summarise results across a team's recent matches.

        Parameters
        ----------
        history : Sequence[TacticalPerformanceRecord]
            Past matches, in any order.

        Returns
        -------
        TacticalPerformanceAnalysis
            Averages, win rate, best formation and recommendations.
        """
        if not history:
            return TacticalPerformanceAnalysis(
                most_effective_formation=None,
                average_goals_scored=0.0,
                average_goals_conceded=0.0,
                win_rate=0.0,
                recommendations=("No match history available",),
            )

        played = len(history)
        average_scored = sum(r.goals_scored for r in history) / played
        average_conceded = sum(r.goals_conceded for r in history) / played
        win_rate = sum(1 for r in history if r.is_win) / played * 100.0

        by_formation: Dict[Formation, List[TacticalPerformanceRecord]] = defaultdict(list)
        for record in history:
            by_formation[record.formation].append(record)

        best_formation: Optional[Formation] = None
        best_score = 0.0
        for formation, records in by_formation.items():
            formation_win_rate = sum(1 for r in records if r.is_win) / len(records) * 100.0
            formation_goals = sum(r.goals_scored for r in records) / len(records)
            score = formation_win_rate + formation_goals * 10
            if score > best_score:
                best_score = score
                best_formation = formation

        recommendations: List[str] = []
        if win_rate < 40:
            recommendations.append("Consider tactical changes - current approach needs improvement")
        if average_scored < 1.0:
            recommendations.append("Focus on attacking improvements - goal scoring is below average")
        if average_conceded > 2.0:
            recommendations.append("Defensive stability needs attention - too many goals conceded")
        if best_formation is not None:
            recommendations.append(f"{best_formation.value} has been your most effective formation")

        return TacticalPerformanceAnalysis(
            most_effective_formation=best_formation,
            average_goals_scored=average_scored,
            average_goals_conceded=average_conceded,
            win_rate=win_rate,
            recommendations=tuple(recommendations),
        )

    @staticmethod
    def has_formation_advantage(formation: Formation, opponent: Formation) -> bool:
        """Check the formation counter table.

        Parameters
        ----------
        formation : Formation
            Formation that might hold the advantage.
        opponent : Formation
            Formation it faces.

        Returns
        -------
        bool
            ``True`` when ``formation`` is listed as beating ``opponent``.
        """
        return opponent in _FORMATION_ADVANTAGES.get(formation, ())

    @staticmethod
    def _formation_suitability(team: Team, formation: Formation) -> float:
        """Score how well the squad's composition fits a formation.

        Parameters
        ----------
        team : Team
            Squad to score.
        formation : Formation
            Formation to score.

        Returns
        -------
        float
            0 when the formation cannot be fielded, otherwise 50 plus depth and
            formation bonuses, capped at 100.
        """
        if len(team.players) < MIN_SQUAD_SIZE:
            return 0.0

        available = _count_positions(team)
        suitability = 50.0
        for position, required in formation.requirements.items():
            have = available.get(position, 0)
            if have < required:
                return 0.0
            suitability += (have - required) * 5

        forwards = available.get(PlayerPosition.FORWARD, 0)
        midfielders = available.get(PlayerPosition.MIDFIELDER, 0)
        defenders = available.get(PlayerPosition.DEFENDER, 0)
        if formation in _ATTACKING_FORMATIONS and forwards >= 3:
            suitability += 15
        elif formation in _DEFENSIVE_FORMATIONS and defenders >= 6:
            suitability += 15
        elif formation is Formation.F451 and midfielders >= 6:
            suitability += 10

        return min(100.0, suitability)

    @staticmethod
    def _formation_reasons(team: Team, formation: Formation, suitability: float) -> List[str]:
        """Explain a suitability score.

        Parameters
        ----------
        team : Team
            Squad that was scored.
        formation : Formation
            Formation that was scored.
        suitability : float
            Score returned by :meth:`_formation_suitability`.

        Returns
        -------
        List[str]
            Band summary followed by formation-specific notes.
        """
        if suitability == 0:
            return ["Insufficient players for this formation"]

        if suitability >= 80:
            reasons = ["Excellent fit for your squad"]
        elif suitability >= 60:
            reasons = ["Good option for your team"]
        else:
            reasons = ["Workable but not ideal"]

        available = _count_positions(team)
        forwards = available.get(PlayerPosition.FORWARD, 0)
        midfielders = available.get(PlayerPosition.MIDFIELDER, 0)
        defenders = available.get(PlayerPosition.DEFENDER, 0)

        if formation is Formation.F343:
            if forwards >= 4:
                reasons.append("Plenty of attacking options available")
            if defenders < 4:
                reasons.append("Limited defensive depth")
        elif formation is Formation.F541:
            if defenders >= 6:
                reasons.append("Strong defensive foundation")
            if forwards < 2:
                reasons.append("Limited attacking options")
        elif formation is Formation.F433:
            if midfielders >= 4:
                reasons.append("Good midfield balance")
            if forwards >= 4:
                reasons.append("Multiple attacking options")

        return reasons

    @staticmethod
    def _first_of(players: List[Player], position: PlayerPosition) -> Optional[Player]:
        """Return the first player of a line, falling back to the first player.

        Parameters
        ----------
        players : List[Player]
            Candidate list.
        position : PlayerPosition
            Preferred line.

        Returns
        -------
        Optional[Player]
            First player registered in ``position``, else the first player, or
            ``None`` for an empty list.
        """
        if not players:
            return None
        return next((p for p in players if p.position == position), players[0])
