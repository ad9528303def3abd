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
"""Tests for utility modules (generator, roster, debug)."""

import json
import random
from pathlib import Path

import pytest

from matchday.engine.match_simulator import MatchSimulator
from matchday.models.match import Match
from matchday.models.player import PlayerPosition
from matchday.models.tactics import (
    AttackingMentality,
    AttackingStyle,
    DefensiveStyle,
    Formation,
    PlayerRole,
    TacticalPosition,
    TacticalSetup,
)
from matchday.utils.debug import MatchDebugger
from matchday.utils.generator import generate_random_player, generate_team
from matchday.utils.roster import (
    load_teams_from_json,
    match_to_dict,
    player_from_dict,
    player_role_from_dict,
    player_role_to_dict,
    tactical_setup_from_dict,
    tactical_setup_to_dict,
    team_from_dict,
)

DATA_FILE = Path(__file__).resolve().parents[1] / "data" / "players.json"


class TestGenerator:
    """Tests for generator utility functions."""

    def test_generate_random_player(self) -> None:
        """Test generating a random player."""
        player = generate_random_player("p1", random.Random(3))
        assert player.player_id == "p1"
        assert len(player.name) > 0
        assert isinstance(player.position, PlayerPosition)
        assert 18 <= player.age <= 35
        for rating in (player.technical, player.physical, player.mental):
            assert 1 <= rating <= 100

    def test_generate_random_player_with_position(self) -> None:
        """Forwards are generated with attacking-range ratings."""
        player = generate_random_player("p9", random.Random(5), name="Nine", position=PlayerPosition.FORWARD)
        assert player.name == "Nine"
        assert player.position is PlayerPosition.FORWARD
        assert 60 <= player.technical <= 90
        assert 60 <= player.physical <= 90

    def test_same_seed_same_player(self) -> None:
        assert generate_random_player("p1", random.Random(8)) == generate_random_player("p1", random.Random(8))

    def test_generate_team(self) -> None:
        """Test generating a complete team."""
        team = generate_team("t1", random.Random(1), name="Test FC", formation=Formation.F352, capacity=30000)
        assert team.team_id == "t1"
        assert team.name == "Test FC"
        assert team.formation is Formation.F352
        assert team.stadium.capacity == 30000
        assert len(team.players) == 18
        starters = team.starting_players()
        counts = {position: sum(1 for p in starters if p.position is position) for position in PlayerPosition}
        assert counts == Formation.F352.requirements

    def test_bench_carries_a_goalkeeper(self) -> None:
        team = generate_team("t2", random.Random(2))
        bench = team.bench_players()
        assert bench[0].position is PlayerPosition.GOALKEEPER
        assert [p.position for p in bench[:4]] == [
            PlayerPosition.GOALKEEPER,
            PlayerPosition.DEFENDER,
            PlayerPosition.MIDFIELDER,
            PlayerPosition.FORWARD,
        ]

    def test_player_ids_are_prefixed_and_unique(self) -> None:
        team = generate_team("blue", random.Random(4), substitutes=3)
        ids = [p.player_id for p in team.players]
        assert ids == [f"blue-p{n}" for n in range(1, 15)]


class TestRoster:
    """Tests for roster loading and dictionary conversion."""

    def test_player_from_dict(self) -> None:
        """Test loading a player from dictionary."""
        player = player_from_dict(
            {"id": 7, "name": "Test Player", "age": 25, "position": "midfielder", "technical": 80, "physical": 70}
        )
        assert player.player_id == "7"
        assert player.name == "Test Player"
        assert player.position is PlayerPosition.MIDFIELDER
        assert player.technical == 80
        assert player.mental == 50

    def test_team_from_dict_defaults(self) -> None:
        team = team_from_dict({"players": [{"id": "a", "position": "goalkeeper"}]}, "Visitors")
        assert team.team_id == "visitors"
        assert team.name == "Visitors"
        assert team.stadium.capacity == 40000
        assert team.formation is Formation.F442

    def test_load_teams_from_json(self) -> None:
        """Test loading teams from the bundled data file."""
        home, away = load_teams_from_json(str(DATA_FILE))
        assert home.name == "Riverside United"
        assert away.name == "Harbour City"
        assert home.formation is Formation.F433
        assert away.formation is Formation.F442
        for team in (home, away):
            assert len(team.players) == 16
            assert team.starting_players()[0].position is PlayerPosition.GOALKEEPER

    def test_load_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_teams_from_json(str(tmp_path / "missing.json"))

    def test_load_missing_section(self, tmp_path: Path) -> None:
        path = tmp_path / "half.json"
        path.write_text(json.dumps({"home": {"id": "h", "players": []}}), encoding="utf-8")
        with pytest.raises(KeyError):
            load_teams_from_json(str(path))

    def test_tactical_setup_dict(self) -> None:
        setup = TacticalSetup(
            formation=Formation.F4231,
            attacking_mentality=AttackingMentality.ATTACKING,
            defensive_style=DefensiveStyle.HIGH_PRESS,
            attacking_style=AttackingStyle.WING_PLAY,
            width=70,
            tempo=65,
            defensive_line=60,
            pressing=80,
        )
        data = tactical_setup_to_dict(setup)
        assert data["formation"] == "4-2-3-1"
        assert data["defensiveLine"] == 60
        assert tactical_setup_from_dict(data) == setup

    def test_player_role_dict(self) -> None:
        anonymous = PlayerRole(TacticalPosition.STRIKER, 90, 20, 50, 70)
        assert "playerId" not in player_role_to_dict(anonymous)
        named = PlayerRole(TacticalPosition.GOALKEEPER, 10, 90, 30, 20, player_id="gk")
        assert player_role_from_dict(player_role_to_dict(named)) == named

    def test_match_to_dict(self) -> None:
        home, away = load_teams_from_json(str(DATA_FILE))
        match = MatchSimulator(seed=2).simulate_match(Match.create("export", home, away))
        data = match_to_dict(match)
        assert data["id"] == "export"
        assert data["isCompleted"] is True
        assert data["result"] == match.result.value
        assert data["events"][0]["type"] == "kickoff"
        assert len(data["events"]) == len(match.events)
        assert data["statistics"]["home_passes"] == match.statistics.home_passes
        assert set(data["playerRatings"]) == set(match.player_performances)
        json.dumps(data)


class TestDebugger:
    """Tests for MatchDebugger."""

    def test_memory_only_log(self) -> None:
        debugger = MatchDebugger()
        debugger.log_match_event(12, "goal", "Goal scored by Nine")
        debugger.log_control("pause", "minute 12")
        debugger.log_error("SubscriberError", "boom")
        recent = debugger.get_recent_events()
        assert debugger.log_path is None
        assert len(recent) == 3
        assert recent[0].startswith("00001 [")
        assert "MATCH_EVENT: Minute: 12 | Event: goal | Details: Goal scored by Nine" in recent[0]
        assert "CONTROL: Command: pause | Details: minute 12" in recent[1]
        assert "ERROR: Type: SubscriberError | Details: boom" in recent[2]

    def test_recent_events_are_bounded(self) -> None:
        debugger = MatchDebugger(max_recent=3)
        for minute in range(10):
            debugger.log_match_event(minute, "tick", "...")
        recent = debugger.get_recent_events(10)
        assert len(recent) == 3
        assert recent[-1].startswith("00010 ")
        assert debugger.get_recent_events(0) == []

    def test_session_file(self, tmp_path: Path) -> None:
        debugger = MatchDebugger(output_dir=str(tmp_path / "logs"))
        debugger.log_control("dispose")
        debugger.close()
        text = debugger.log_path.read_text(encoding="utf-8")
        assert text.startswith("=== Match Debug Session:")
        assert "CONTROL: Command: dispose\n" in text
        assert len(debugger.get_recent_events()) == 1

    def test_new_session_requires_directory(self) -> None:
        with pytest.raises(RuntimeError):
            MatchDebugger().start_new_session()
