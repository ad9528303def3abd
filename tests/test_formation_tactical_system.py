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
"""Tests for formation validation, presets and the tactical analysis helpers."""

from __future__ import annotations

from dataclasses import replace

import pytest

from matchday.engine.formation_tactical_system import FormationTacticalSystem
from matchday.models.analysis import MatchScenario, TacticalPerformanceRecord
from matchday.models.match import MomentumTracker
from matchday.models.player import Player, PlayerPosition
from matchday.models.tactics import Formation, TeamMentality, TeamTactics
from matchday.models.team import Team


def squad(gk: int, df: int, mf: int, fw: int, rating: int = 70, team_id: str = "squad") -> Team:
    """Build a squad with the given number of players per line, in line order."""
    players = []
    for position, count in (
        (PlayerPosition.GOALKEEPER, gk),
        (PlayerPosition.DEFENDER, df),
        (PlayerPosition.MIDFIELDER, mf),
        (PlayerPosition.FORWARD, fw),
    ):
        for _ in range(count):
            index = len(players)
            players.append(Player(f"{team_id}-{index}", f"P{index}", 25, position, rating, rating, rating))
    return Team(team_id=team_id, name=f"{team_id.title()} FC", players=players)


class TestFormationValidation:
    """Tests for validate_formation and the formation recommendations."""

    def test_exact_squad_is_valid(self) -> None:
        result = FormationTacticalSystem().validate_formation(squad(1, 4, 4, 2), Formation.F442)
        assert result.is_valid
        assert result.errors == ()

    def test_short_line_reported(self) -> None:
        result = FormationTacticalSystem().validate_formation(squad(1, 3, 4, 3), Formation.F442)
        assert not result.is_valid
        assert result.errors == ("Not enough defenders (need 4, have 3)",)

    def test_small_squad_reported(self) -> None:
        result = FormationTacticalSystem().validate_formation(squad(1, 2, 1, 1), Formation.F442)
        assert not result.is_valid
        assert result.errors[0] == "Insufficient players (need at least 11, have 5)"
        assert len(result.errors) == 4

    def test_empty_squad(self) -> None:
        result = FormationTacticalSystem().validate_formation(Team(team_id="e", name="Empty"), Formation.F442)
        assert result.errors == ("No players available",)

    def test_recommendations_cover_every_formation_best_first(self) -> None:
        recommendations = FormationTacticalSystem().get_formation_recommendations(squad(2, 7, 6, 5))
        assert {rec.formation for rec in recommendations} == set(Formation)
        scores = [rec.suitability_score for rec in recommendations]
        assert scores == sorted(scores, reverse=True)
        assert all(0 <= score <= 100 for score in scores)
        assert recommendations[0].reasons[0] == "Excellent fit for your squad"

    def test_unfieldable_formation_scores_zero(self) -> None:
        recommendations = FormationTacticalSystem().get_formation_recommendations(squad(1, 4, 4, 2))
        by_formation = {rec.formation: rec for rec in recommendations}
        assert by_formation[Formation.F343].suitability_score == 0
        assert by_formation[Formation.F343].reasons == ("Insufficient players for this formation",)
        assert by_formation[Formation.F442].suitability_score == 50

    def test_optimal_starting_xi_takes_best_per_line(self) -> None:
        team = squad(1, 4, 4, 2)
        backup = Player("backup-gk", "Backup", 30, PlayerPosition.GOALKEEPER, 90, 90, 90)
        team = replace(team, players=team.players + [backup])
        starting = FormationTacticalSystem().generate_optimal_starting_xi(team, Formation.F442)
        assert starting is not None
        assert len(starting) == 11
        assert starting[0].player_id == "backup-gk"

    def test_optimal_starting_xi_requires_full_lines(self) -> None:
        system = FormationTacticalSystem()
        assert system.generate_optimal_starting_xi(squad(1, 4, 4, 2), Formation.F433) is None
        assert system.generate_optimal_starting_xi(squad(1, 2, 2, 1), Formation.F442) is None

    def test_apply_formation_change_copies(self) -> None:
        team = squad(1, 4, 4, 2)
        changed = FormationTacticalSystem().apply_formation_change(team, Formation.F451)
        assert changed.formation is Formation.F451
        assert team.formation is Formation.F442


class TestTacticsAnalysis:
    """Tests for presets, compatibility and adjustment suggestions."""

    def test_validate_tactics_reports_each_slider(self) -> None:
        tactics = TeamTactics(TeamMentality.BALANCED, pressing=120, tempo=50, width=-5, directness=50)
        result = FormationTacticalSystem().validate_tactics(tactics)
        assert not result.is_valid
        assert result.errors == (
            "pressing must be between 0 and 100 (current: 120)",
            "width must be between 0 and 100 (current: -5)",
        )

    def test_presets(self) -> None:
        presets = FormationTacticalSystem().get_tactical_presets()
        assert set(presets) == {"Attacking", "Defensive", "Balanced", "Counter Attack", "Possession", "High Press"}
        assert presets["High Press"].pressing == 95
        system = FormationTacticalSystem()
        assert all(system.validate_tactics(t).is_valid for t in presets.values())

    def test_compatibility_penalises_conflicts(self) -> None:
        system = FormationTacticalSystem()
        high_press = system.get_tactical_presets()["High Press"]
        result = system.calculate_tactical_compatibility(Formation.F541, high_press)
        assert result.score == pytest.approx(15.0)
        assert len(result.warnings) == 2

    def test_compatibility_rewards_flexible_formation(self) -> None:
        result = FormationTacticalSystem().calculate_tactical_compatibility(Formation.F442, TeamTactics.balanced())
        assert result.score == pytest.approx(60.0)
        assert result.warnings == ()

    def test_very_attacking_needs_tempo(self) -> None:
        tactics = TeamTactics(TeamMentality.VERY_ATTACKING, pressing=50, tempo=40, width=50, directness=50)
        result = FormationTacticalSystem().calculate_tactical_compatibility(Formation.F442, tactics)
        assert result.score == pytest.approx(50.0)
        assert "Very attacking mentality usually requires higher tempo" in result.warnings

    def test_suggestions_for_343(self) -> None:
        suggestions = FormationTacticalSystem().suggest_tactical_adjustments(Formation.F343, TeamTactics.balanced())
        assert [(s.parameter, s.current_value, s.suggested_value) for s in suggestions] == [
            ("pressing", 50, 70),
            ("tempo", 50, 75),
        ]

    def test_suggestions_for_433_and_442(self) -> None:
        system = FormationTacticalSystem()
        wide = system.suggest_tactical_adjustments(Formation.F433, TeamTactics.balanced())
        assert [(s.parameter, s.suggested_value) for s in wide] == [("width", 70)]
        assert system.suggest_tactical_adjustments(Formation.F442, TeamTactics.balanced()) == []


class TestInMatchPlanning:
    """Tests for scenario plans, substitutions and momentum adaptation."""

    def test_plan_for_losing(self) -> None:
        plan = FormationTacticalSystem().plan_tactical_changes(squad(1, 4, 4, 2), MatchScenario.LOSING)
        assert plan.target_minute == 60
        assert plan.new_tactics.mentality is TeamMentality.ATTACKING

    def test_plan_for_red_card_is_immediate(self) -> None:
        plan = FormationTacticalSystem().plan_tactical_changes(squad(1, 4, 4, 2), MatchScenario.PLAYER_SENT_OFF)
        assert plan.target_minute == 0
        assert plan.new_tactics.mentality is TeamMentality.DEFENSIVE

    def test_no_substitutions_for_small_squad(self) -> None:
        assert FormationTacticalSystem().recommend_substitutions(squad(1, 4, 4, 2), 60, MatchScenario.LOSING) == []

    def test_losing_brings_on_forward(self) -> None:
        team = squad(2, 5, 5, 4)
        team = replace(team, players=team.players[:1] + team.players[2:] + team.players[1:2])
        recommendations = FormationTacticalSystem().recommend_substitutions(team, 60, MatchScenario.LOSING)
        assert len(recommendations) == 1
        rec = recommendations[0]
        assert rec.player_out.position is PlayerPosition.DEFENDER
        assert rec.player_in.position is PlayerPosition.FORWARD
        assert rec.priority == 1

    def test_first_of_empty_list(self) -> None:
        assert FormationTacticalSystem._first_of([], PlayerPosition.FORWARD) is None

    def test_winning_substitution_only_late(self) -> None:
        system = FormationTacticalSystem()
        team = squad(2, 6, 4, 4)
        assert system.recommend_substitutions(team, 60, MatchScenario.WINNING) == []
        late = system.recommend_substitutions(team, 80, MatchScenario.WINNING)
        assert len(late) == 1
        assert late[0].priority == 2

    def test_momentum_bands(self) -> None:
        system = FormationTacticalSystem()
        team = squad(1, 4, 4, 2)
        momentum = MomentumTracker(home_momentum=80.0, away_momentum=20.0)

        home = system.adapt_tactics_to_momentum(team, momentum, is_home_team=True)
        assert home.suggested_tactics.mentality is TeamMentality.ATTACKING
        assert home.confidence == pytest.approx(0.8)

        away = system.adapt_tactics_to_momentum(team, momentum, is_home_team=False)
        assert away.suggested_tactics.mentality is TeamMentality.DEFENSIVE
        assert away.confidence == pytest.approx(0.9)

        level = system.adapt_tactics_to_momentum(team, MomentumTracker(), is_home_team=True)
        assert level.suggested_tactics.mentality is TeamMentality.BALANCED
        assert (level.suggested_tactics.pressing, level.suggested_tactics.tempo) == (60, 65)

    def test_momentum_never_lowers_pressing_or_tempo(self) -> None:
        system = FormationTacticalSystem()
        team = squad(1, 4, 4, 2)
        previous = (0, 0)
        for share in range(0, 101):
            tracker = MomentumTracker(home_momentum=float(share), away_momentum=100.0 - share)
            tactics = system.adapt_tactics_to_momentum(team, tracker, True).suggested_tactics
            current = (tactics.pressing, tactics.tempo)
            assert current[0] >= previous[0] and current[1] >= previous[1]
            previous = current


class TestMatchupAnalysis:
    """Tests for matchup, counter and trend analysis."""

    def test_formation_advantage_table(self) -> None:
        assert FormationTacticalSystem.has_formation_advantage(Formation.F433, Formation.F442)
        assert not FormationTacticalSystem.has_formation_advantage(Formation.F442, Formation.F433)

    def test_matchup_with_formation_advantage(self) -> None:
        mine = replace(squad(1, 4, 3, 3, team_id="mine"), formation=Formation.F433)
        theirs = squad(1, 4, 4, 2, team_id="theirs")
        analysis = FormationTacticalSystem().analyze_tactical_matchup(mine, theirs, TeamTactics.balanced())
        assert analysis.overall_effectiveness == pytest.approx(65.0)
        assert "Formation advantage against opponent" in analysis.strengths
        assert analysis.recommendations == ("Maintain current tactical approach",)

    def test_matchup_against_stronger_attacking_opponent(self) -> None:
        mine = squad(1, 4, 4, 2, rating=60, team_id="mine")
        theirs = replace(squad(1, 3, 4, 3, rating=80, team_id="theirs"), formation=Formation.F343)
        analysis = FormationTacticalSystem().analyze_tactical_matchup(mine, theirs, TeamTactics.balanced())
        assert analysis.overall_effectiveness == pytest.approx(25.0)
        assert "Opponent has stronger team" in analysis.weaknesses
        assert "Formation disadvantage against opponent" in analysis.weaknesses

    def test_matchup_penalises_pressing_against_counter(self) -> None:
        mine = squad(1, 4, 4, 2, rating=60, team_id="mine")
        theirs = replace(squad(1, 4, 5, 1, rating=80, team_id="theirs"), formation=Formation.F451)
        pressing = TeamTactics(TeamMentality.BALANCED, pressing=80, tempo=50, width=50, directness=50)
        analysis = FormationTacticalSystem().analyze_tactical_matchup(mine, theirs, pressing)
        assert analysis.overall_effectiveness == pytest.approx(47.0)
        assert "High pressing vulnerable to counter-attacks" in analysis.weaknesses
        assert "Formation advantage against opponent" in analysis.strengths

    def test_formation_counter(self) -> None:
        system = FormationTacticalSystem()
        assert system.analyze_formation_counter(Formation.F541, Formation.F343).effectiveness == pytest.approx(70.0)
        assert system.analyze_formation_counter(Formation.F343, Formation.F541).effectiveness == pytest.approx(35.0)
        neutral = system.analyze_formation_counter(Formation.F541, Formation.F442)
        assert neutral.disadvantages == ("May lack attacking threat",)

    def test_trends_without_history(self) -> None:
        analysis = FormationTacticalSystem().analyze_performance_trends([])
        assert analysis.most_effective_formation is None
        assert analysis.recommendations == ("No match history available",)

    def test_trends_pick_most_effective_formation(self) -> None:
        tactics = TeamTactics.balanced()
        history = [
            TacticalPerformanceRecord(Formation.F433, tactics, 3, 1),
            TacticalPerformanceRecord(Formation.F433, tactics, 2, 0),
            TacticalPerformanceRecord(Formation.F442, tactics, 0, 2),
        ]
        analysis = FormationTacticalSystem().analyze_performance_trends(history)
        assert analysis.most_effective_formation is Formation.F433
        assert analysis.win_rate == pytest.approx(200 / 3)
        assert analysis.average_goals_scored == pytest.approx(5 / 3)
        assert analysis.recommendations[-1] == "4-3-3 has been your most effective formation"
