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
"""Simulate many fixtures between the players.json squads and tally outcomes."""
import sys
from collections import Counter
from pathlib import Path

from matchday.engine.match_simulator import MatchSimulator
from matchday.models.match import Match
from matchday.utils.roster import load_teams_from_json


def run_quick_batch(matches: int = 500, detailed: bool = False) -> Counter:
    """Simulate a batch of matches and print the outcome distribution.

    Parameters
    ----------
    matches : int
        Number of fixtures to simulate (default 500).
    detailed : bool
        Use the minute-by-minute simulation instead of the quick path.

    Returns
    -------
    Counter
        Outcome counts keyed by result token.
    """
    data_path = Path(__file__).parent.parent / "data" / "players.json"
    home, away = load_teams_from_json(str(data_path))

    outcomes: Counter = Counter()
    scores: Counter = Counter()
    goals = 0
    for seed in range(matches):
        simulator = MatchSimulator(seed=seed)
        fixture = Match.create(f"batch-{seed}", home, away)
        result = simulator.simulate_match(fixture) if detailed else simulator.simulate_quick_result(fixture)
        outcomes[result.result.value] += 1
        scores[f"{result.home_goals}-{result.away_goals}"] += 1
        goals += result.home_goals + result.away_goals

    print(f"{home.name} vs {away.name}: {matches} matches ({'detailed' if detailed else 'quick'})")
    for outcome, count in outcomes.most_common():
        print(f"  {outcome}: {count} ({count / matches * 100:.1f}%)")
    print(f"  Goals per match: {goals / matches:.2f}")
    print("  Most common scores: " + ", ".join(f"{score} x{count}" for score, count in scores.most_common(5)))
    return outcomes


if __name__ == "__main__":
    run_quick_batch(int(sys.argv[1]) if len(sys.argv) > 1 else 500, "--detailed" in sys.argv)
