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
"""Tests for player, team, tactics, weather, event and match models."""

from dataclasses import FrozenInstanceError, replace

import pytest

from matchday.engine.config import HomeAdvantageConfig, WeatherConfig
from matchday.models.events import MatchEvent, MatchEventType
from matchday.models.match import Match, MatchResult, MatchStatistics, MomentumTracker, PlayerPerformance
from matchday.models.player import Player, PlayerPosition
from matchday.models.tactics import (
    AttackingMentality,
    AttackingStyle,
    DefensiveStyle,
    Formation,
    PlayerRole,
    TacticalPosition,
    TacticalSetup,
    TeamMentality,
    TeamTactics,
)
from matchday.models.team import Stadium, Team
from matchday.models.weather import Weather, WeatherCondition


def make_player(player_id: str = "p1", position: PlayerPosition = PlayerPosition.MIDFIELDER, rating: int = 70) -> Player:
    """Create a player with identical ratings."""
    return Player(
        player_id=player_id,
        name=f"Player {player_id}",
        age=26,
        position=position,
        technical=rating,
        physical=rating,
        mental=rating,
    )


def make_team(team_id: str, capacity: int = 40000) -> Team:
    """Create a 4-4-2 squad with four substitutes."""
    lines = [PlayerPosition.GOALKEEPER] + [PlayerPosition.DEFENDER] * 4 + [PlayerPosition.MIDFIELDER] * 4
    lines += [PlayerPosition.FORWARD] * 2 + [PlayerPosition.GOALKEEPER, PlayerPosition.DEFENDER]
    lines += [PlayerPosition.MIDFIELDER, PlayerPosition.FORWARD]
    players = [make_player(f"{team_id}-{i}", pos) for i, pos in enumerate(lines)]
    return Team(team_id=team_id, name=f"{team_id.title()} FC", players=players, stadium=Stadium(capacity=capacity))


def make_setup(**overrides) -> TacticalSetup:
    """Create a balanced 4-4-2 setup."""
    values = dict(
        formation=Formation.F442,
        attacking_mentality=AttackingMentality.BALANCED,
        defensive_style=DefensiveStyle.ZONAL,
        attacking_style=AttackingStyle.POSSESSION,
        width=50,
        tempo=50,
        defensive_line=50,
        pressing=50,
    )
    values.update(overrides)
    return TacticalSetup(**values)


class TestPlayer:
    """Tests for Player class."""

    def test_create_player(self) -> None:
        player = Player(
            player_id="p9", name="Nine", age=24, position="forward", technical=80, physical=70, mental=60
        )
        assert player.position is PlayerPosition.FORWARD
        assert player.overall_rating == 70
        assert player.attacking_rating == 75
        assert player.defending_rating == 65
        assert not player.is_goalkeeper

    def test_ratings_must_be_within_range(self) -> None:
        """Test ratings must be within 1..100."""
        with pytest.raises(ValueError):
            make_player(rating=0)
        with pytest.raises(ValueError):
            make_player(rating=101)

    def test_age_and_id_validation(self) -> None:
        with pytest.raises(ValueError):
            Player(player_id="", name="x", age=25, position="defender", technical=50, physical=50, mental=50)
        with pytest.raises(ValueError):
            Player(player_id="x", name="x", age=14, position="defender", technical=50, physical=50, mental=50)


class TestTeam:
    """Tests for Team class."""

    def test_starting_eleven_defaults_to_first_eleven(self) -> None:
        team = make_team("home")
        assert [p.player_id for p in team.starting_players()] == [f"home-{i}" for i in range(11)]
        assert len(team.bench_players()) == 4

    def test_declared_starting_eleven(self) -> None:
        team = make_team("home")
        chosen = [f"home-{i}" for i in range(4, 15)]
        team = replace(team, starting_xi=chosen)
        assert [p.player_id for p in team.starting_players()] == chosen
        assert {p.player_id for p in team.bench_players()} == {"home-0", "home-1", "home-2", "home-3"}

    def test_unknown_starter_rejected(self) -> None:
        with pytest.raises(ValueError):
            Team(team_id="t", name="T", players=[make_player()], starting_xi=["nobody"])

    def test_starting_eleven_capped_at_eleven(self) -> None:
        team = make_team("home")
        with pytest.raises(ValueError):
            replace(team, starting_xi=[p.player_id for p in team.players[:12]])

    def test_duplicate_starter_rejected(self) -> None:
        team = make_team("home")
        with pytest.raises(ValueError):
            replace(team, starting_xi=["home-0", "home-1", "home-1"])

    def test_home_advantage_by_capacity(self) -> None:
        assert make_team("a", capacity=85000).home_advantage() == pytest.approx(1.15)
        assert make_team("b", capacity=45000).home_advantage() == pytest.approx(1.10)
        assert make_team("c", capacity=5000).home_advantage() == pytest.approx(1.05)
        assert make_team("d", capacity=85000).home_advantage(is_neutral=True) == pytest.approx(1.0)

    def test_home_advantage_with_custom_buckets(self) -> None:
        cfg = HomeAdvantageConfig(capacity_buckets=((10000, 1.3),), default_multiplier=2.0, neutral_multiplier=0.9)
        assert make_team("a", capacity=85000).home_advantage(cfg=cfg) == pytest.approx(1.3)
        assert make_team("b", capacity=5000).home_advantage(cfg=cfg) == pytest.approx(2.0)
        assert make_team("c", capacity=5000).home_advantage(True, cfg) == pytest.approx(0.9)

    def test_lookup_helpers(self) -> None:
        team = make_team("home")
        assert team.get_player("home-3").position is PlayerPosition.DEFENDER
        assert team.get_player("missing") is None
        assert len(team.get_players_by_position(PlayerPosition.GOALKEEPER)) == 2
        assert team.overall_rating == 70

    def test_empty_team_rating(self) -> None:
        assert Team(team_id="e", name="Empty").overall_rating == 0


class TestTactics:
    """Tests for formations, setups, roles and live tactics."""

    def test_formation_requirements_sum_to_eleven(self) -> None:
        for formation in Formation:
            assert sum(formation.requirements.values()) == 11
            assert len(formation.slots) == 11
            assert formation.slots[0] is TacticalPosition.GOALKEEPER

    def test_mentality_levels(self) -> None:
        assert AttackingMentality.ULTRA_DEFENSIVE.level == 1
        assert AttackingMentality.ULTRA_ATTACKING.level == 5

    def test_setup_accepts_tokens(self) -> None:
        setup = make_setup(formation="4-3-3", attacking_mentality="attacking")
        assert setup.formation is Formation.F433
        assert setup.mentality_level == 4

    def test_setup_is_frozen(self) -> None:
        setup = make_setup()
        with pytest.raises(FrozenInstanceError):
            setup.width = 10  # type: ignore[misc]
        assert replace(setup, width=10).width == 10

    def test_tactical_effectiveness_bounds(self) -> None:
        assert make_setup(width=0).calculate_tactical_effectiveness(80, 80) == pytest.approx(0.8)
        value = make_setup().calculate_tactical_effectiveness(100, 100)
        assert 0.8 <= value <= 1.2
        assert value > make_setup().calculate_tactical_effectiveness(20, 20)

    def test_unbalanced_setup_penalised(self) -> None:
        balanced = make_setup(attacking_mentality=AttackingMentality.ATTACKING, defensive_line=50)
        exposed = make_setup(attacking_mentality=AttackingMentality.ATTACKING, defensive_line=20)
        assert exposed.calculate_tactical_effectiveness(70, 70) < balanced.calculate_tactical_effectiveness(70, 70)

    def test_role_suitability(self) -> None:
        striker = PlayerRole(TacticalPosition.STRIKER, 90, 20, 60, 70)
        assert striker.calculate_role_suitability(90, 40, 85, 80) > striker.calculate_role_suitability(40, 90, 40, 80)
        invalid = PlayerRole(TacticalPosition.STRIKER, 0, 20, 60, 70)
        assert invalid.calculate_role_suitability(90, 40, 85, 80) == pytest.approx(0.5)

    def test_team_tactics_modifiers(self) -> None:
        balanced = TeamTactics.balanced()
        attacking = TeamTactics(TeamMentality.VERY_ATTACKING, pressing=50, tempo=50, width=50, directness=50)
        assert attacking.attacking_modifier > balanced.attacking_modifier
        assert attacking.defensive_modifier < balanced.defensive_modifier

    def test_team_tactics_from_setup(self) -> None:
        tactics = TeamTactics.from_setup(
            make_setup(attacking_mentality=AttackingMentality.ULTRA_ATTACKING, attacking_style=AttackingStyle.DIRECT)
        )
        assert tactics.mentality is TeamMentality.VERY_ATTACKING
        assert tactics.directness == 75
        assert tactics.pressing == 50

    def test_team_tactics_slider_range(self) -> None:
        assert TeamTactics.balanced().is_valid
        assert TeamTactics(TeamMentality.BALANCED, pressing=0, tempo=100, width=0, directness=100).is_valid
        assert not TeamTactics(TeamMentality.BALANCED, pressing=500, tempo=50, width=50, directness=50).is_valid
        assert not TeamTactics(TeamMentality.BALANCED, pressing=50, tempo=50, width=-1, directness=50).is_valid


class TestWeather:
    """Tests for weather impact."""

    def test_snowy_weather_hits_floor(self) -> None:
        weather = Weather(WeatherCondition.SNOWY, temperature=-10, humidity=85, wind_speed=40)
        assert weather.performance_impact == pytest.approx(0.8)

    def test_mild_sunny_weather_boosts(self) -> None:
        weather = Weather(WeatherCondition.SUNNY, temperature=20, humidity=50, wind_speed=5)
        assert weather.performance_impact == pytest.approx(1.1)

    def test_impact_follows_given_tuning(self) -> None:
        weather = Weather(WeatherCondition.SUNNY, temperature=20, humidity=50, wind_speed=5)
        assert weather.performance_impact_for(WeatherConfig(min_impact=0.5, max_impact=0.5)) == pytest.approx(0.5)
        assert weather.performance_impact_for() == pytest.approx(weather.performance_impact)

    def test_invalid_measurements(self) -> None:
        with pytest.raises(ValueError):
            Weather(temperature=60)
        with pytest.raises(ValueError):
            Weather(humidity=120)


class TestMatchEvent:
    """Tests for MatchEvent validation."""

    def test_metadata_is_read_only(self) -> None:
        event = MatchEvent("evt-1", MatchEventType.GOAL, 10, "home", "Goal", metadata={"penalty": False})
        with pytest.raises(TypeError):
            event.metadata["penalty"] = True  # type: ignore[index]

    def test_minute_range(self) -> None:
        with pytest.raises(ValueError):
            MatchEvent("evt-1", MatchEventType.GOAL, 121, "home", "Goal")

    def test_required_fields(self) -> None:
        with pytest.raises(ValueError):
            MatchEvent("evt-1", MatchEventType.GOAL, 10, "home", "")


class TestMatch:
    """Tests for Match and the statistics containers."""

    def test_create_unplayed_match(self) -> None:
        match = Match.create("m1", make_team("home"), make_team("away"))
        assert match.current_minute == 0
        assert match.events == ()
        assert match.result is None
        assert match.is_home("home") and not match.is_home("away")
        with pytest.raises(ValueError):
            match.is_home("other")

    def test_teams_must_differ(self) -> None:
        team = make_team("home")
        with pytest.raises(ValueError):
            Match.create("m1", team, team)

    def test_completion_requires_result(self) -> None:
        match = Match.create("m1", make_team("home"), make_team("away"))
        with pytest.raises(ValueError):
            replace(match, is_completed=True)
        done = replace(match, is_completed=True, result=MatchResult.DRAW)
        assert done.is_completed

    def test_with_event_keeps_order(self) -> None:
        match = Match.create("m1", make_team("home"), make_team("away"))
        match = match.with_event(MatchEvent("evt-1", MatchEventType.GOAL, 30, "home", "Goal"))
        with pytest.raises(ValueError):
            match.with_event(MatchEvent("evt-2", MatchEventType.GOAL, 20, "away", "Goal"))

    def test_goals_from_events_counts_own_goals_for_opponent(self) -> None:
        match = Match.create("m1", make_team("home"), make_team("away"))
        match = match.with_event(MatchEvent("evt-1", MatchEventType.GOAL, 10, "home", "Goal"))
        match = match.with_event(MatchEvent("evt-2", MatchEventType.OWN_GOAL, 20, "home", "Own goal"))
        match = match.with_event(MatchEvent("evt-3", MatchEventType.OWN_GOAL, 30, "away", "Own goal"))
        assert match.goals_from_events() == (2, 1)
        assert len(match.events_of_type(MatchEventType.OWN_GOAL)) == 2

    def test_result_from_score(self) -> None:
        assert MatchResult.from_score(2, 1) is MatchResult.HOME_WIN
        assert MatchResult.from_score(0, 0) is MatchResult.DRAW
        assert MatchResult.from_score(1, 3) is MatchResult.AWAY_WIN

    def test_statistics_possession_sums_to_hundred(self) -> None:
        stats = MatchStatistics()
        stats.set_possession(63.37)
        assert stats.home_possession + stats.away_possession == pytest.approx(100.0)
        stats.set_possession(140)
        assert stats.home_possession == 100.0 and stats.away_possession == 0.0

    def test_statistics_counters(self) -> None:
        stats = MatchStatistics()
        stats.increment("shots", True, 3)
        stats.increment("passes", False, 4)
        stats.increment("passes_completed", False, 3)
        assert stats.get("shots", True) == 3
        assert stats.away_pass_accuracy == 75.0
        assert stats.home_pass_accuracy == 0.0
        copy = stats.copy()
        copy.increment("shots", True)
        assert stats.home_shots == 3

    def test_momentum_sums_to_hundred(self) -> None:
        momentum = MomentumTracker()
        momentum.shift(20, 12, "Home pressure")
        momentum.shift(-95, 40, "Away surge")
        assert momentum.home_momentum + momentum.away_momentum == pytest.approx(100.0)
        assert momentum.home_momentum == 0.0
        assert momentum.last_shift == 40
        assert momentum.copy().shift_events is not momentum.shift_events

    def test_performance_rating_clamped(self) -> None:
        performance = PlayerPerformance("p1", "Player", "home")
        performance.adjust_rating(10)
        assert performance.rating == 10.0
        performance.adjust_rating(-20)
        assert performance.rating == 1.0
