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
"""Entry point for manual match simulations."""
import argparse
import random
import threading
from pathlib import Path
from typing import List, Optional, Tuple

from matchday.engine.commentary import CommentaryEngine
from matchday.engine.match_simulator import MatchSimulator
from matchday.engine.streaming import MatchSimulationEvent, StreamingMatchSimulator
from matchday.models.events import MatchEventType
from matchday.models.match import Match
from matchday.models.tactics import Formation
from matchday.models.team import Team
from matchday.models.weather import Weather, WeatherCondition
from matchday.utils.debug import MatchDebugger
from matchday.utils.generator import generate_team  # Fallback if no roster file
from matchday.utils.roster import load_teams_from_json

DEFAULT_ROSTER = Path("data/players.json")
HIGHLIGHTS = {
    MatchEventType.KICKOFF,
    MatchEventType.GOAL,
    MatchEventType.OWN_GOAL,
    MatchEventType.PENALTY,
    MatchEventType.RED_CARD,
    MatchEventType.SUBSTITUTION,
    MatchEventType.TACTICAL_CHANGE,
    MatchEventType.HALF_TIME,
    MatchEventType.FULL_TIME,
}


def build_parser() -> argparse.ArgumentParser:
    """Create the command-line parser.

    Returns
    -------
    argparse.ArgumentParser
        Parser for ``--seed``, ``--speed``, ``--quick``, ``--roster`` and
        ``--log-dir``.
    """
    parser = argparse.ArgumentParser(prog="matchday", description="Simulate a football match.")
    parser.add_argument("--seed", type=int, default=None, help="seed for a reproducible match")
    parser.add_argument("--speed", type=float, default=4.0, help="streaming speed multiplier")
    parser.add_argument("--quick", action="store_true", help="print a quick result instead of streaming")
    parser.add_argument("--roster", type=Path, default=DEFAULT_ROSTER, help="JSON roster with home and away squads")
    parser.add_argument("--log-dir", default=None, help="directory for match debug logs")
    return parser


def load_teams(roster: Path, seed: Optional[int]) -> Tuple[Team, Team]:
    """Load squads from a roster file, generating them when unavailable.

    Parameters
    ----------
    roster : Path
        JSON document following the ``data/players.json`` schema.
    seed : Optional[int]
        Seed for generated squads.

    Returns
    -------
    Tuple[Team, Team]
        Home and away teams.
    """
    if roster.exists():
        try:
            return load_teams_from_json(str(roster))
        except (KeyError, ValueError) as e:
            print(f"Error loading teams from {roster}: {e}")
            print("Falling back to generated teams...")
    else:
        print(f"No roster file found at {roster}")
        print("Using generated teams...")

    rng = random.Random(seed)
    home = generate_team("home", rng, name="Riverside United", formation=Formation.F433)
    away = generate_team("away", rng, name="Harbour City", formation=Formation.F442)
    return home, away


def print_envelope(envelope: MatchSimulationEvent) -> None:
    """Print a streamed envelope, skipping routine events.

    Parameters
    ----------
    envelope : MatchSimulationEvent
        Envelope published by the streaming simulator.
    """
    event = envelope.event
    if event is None:
        minute = envelope.metadata.get("minute", envelope.match.current_minute)
        if minute % 15 == 0:
            print(f"{minute:>3}' {envelope.commentary}")
        return
    if event.event_type in HIGHLIGHTS:
        print(f"{event.minute:>3}' {envelope.commentary}")


def print_summary(match: Match) -> None:
    """Print the final score and headline statistics.

    Parameters
    ----------
    match : Match
        Completed match.
    """
    print(f"\nFinal Score: {match.score_line()}")
    stats = match.statistics
    if stats is None:
        return
    rows: List[Tuple[str, object, object]] = [
        ("Possession", f"{stats.home_possession:.0f}%", f"{stats.away_possession:.0f}%"),
        ("Shots", stats.home_shots, stats.away_shots),
        ("On target", stats.home_shots_on_target, stats.away_shots_on_target),
        ("Pass accuracy", f"{stats.home_pass_accuracy:.0f}%", f"{stats.away_pass_accuracy:.0f}%"),
        ("Corners", stats.home_corners, stats.away_corners),
        ("Fouls", stats.home_fouls, stats.away_fouls),
        ("Yellow cards", stats.home_yellow_cards, stats.away_yellow_cards),
        ("Red cards", stats.home_red_cards, stats.away_red_cards),
    ]
    print(f"\n{'':<15}{match.home_team.name:>20}{match.away_team.name:>20}")
    for label, home, away in rows:
        print(f"{label:<15}{home!s:>20}{away!s:>20}")


def main(argv: Optional[List[str]] = None) -> None:
    """Simulate a demo match and print it to the terminal.

    Parameters
    ----------
    argv : Optional[List[str]]
        Command-line arguments; ``sys.argv`` when ``None``.
    """
    args = build_parser().parse_args(argv)
    home_team, away_team = load_teams(args.roster, args.seed)
    weather = Weather(condition=random.Random(args.seed).choice(list(WeatherCondition)))
    match = Match.create("demo", home_team, away_team, weather=weather)
    debugger = MatchDebugger(args.log_dir)
    commentary = CommentaryEngine(random.Random(args.seed))

    if args.quick:
        result = MatchSimulator(seed=args.seed, debugger=debugger).simulate_quick_result(match)
        print(f"Quick result: {result.score_line()}")
        print(commentary.post_match(result))
        debugger.close()
        return

    print(commentary.pre_match(match))
    simulator = StreamingMatchSimulator(seed=args.seed, debugger=debugger)
    finished = threading.Event()
    final: List[Match] = []

    def on_envelope(envelope: MatchSimulationEvent) -> None:
        print_envelope(envelope)
        if envelope.event is not None and envelope.event.event_type is MatchEventType.FULL_TIME:
            final.append(envelope.match)
            finished.set()

    simulator.subscribe(on_envelope)
    controls = simulator.start_match(match)
    controls.set_speed(args.speed)
    try:
        finished.wait()
    except KeyboardInterrupt:
        print("\nSkipping to the final whistle...")
        controls.skip_to_end()
    finally:
        controls.dispose()
        debugger.close()

    if final:
        print_summary(final[-1])
        print(commentary.post_match(final[-1]))
    if debugger.log_path is not None:
        print(f"\nDebug log written to {debugger.log_path}")


if __name__ == "__main__":
    main()
