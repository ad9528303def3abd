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
"""Text commentary for streamed matches."""

from __future__ import annotations

import random
from typing import Dict, Optional

from matchday.models.events import MatchEvent, MatchEventType
from matchday.models.match import Match
from matchday.models.weather import WeatherCondition

MINUTE_PHRASES = (
    "The action continues...",
    "Both teams looking for an opening...",
    "Intense battle in midfield...",
    "The pace is picking up...",
    "Players working hard on both sides...",
)

PRE_MATCH_TEMPLATES = (
    "Welcome to {stadium} where {home} host {away} in what promises to be an exciting encounter!",
    "Good evening and welcome to {stadium}! {home} take on {away} in tonight's fixture.",
    "The teams are making their way onto the pitch at {stadium}. {home} vs {away} - this should be a cracker!",
    "We're live from {stadium} where {home} are preparing to face {away}.",
)

# {player}, {team}, {opposition} and {stadium} are filled from the event and match.
EVENT_TEMPLATES: Dict[MatchEventType, tuple] = {
    MatchEventType.YELLOW_CARD: (
        "{player} goes into the book for that challenge.",
        "The referee reaches for his pocket - yellow card for {player}.",
        "Yellow card! {player} will have to be careful for the rest of the match.",
    ),
    MatchEventType.RED_CARD: (
        "RED CARD! {player} is sent off! {team} are down to ten men!",
        "SENT OFF! {player} receives his marching orders from the referee!",
        "Disaster for {team}! {player} sees red and is dismissed!",
    ),
    MatchEventType.SHOT: (
        "{player} lets fly for {team}!",
        "{player} winds up for a shot...",
    ),
    MatchEventType.SHOT_ON_TARGET: (
        "{player} tests the goalkeeper with a well-struck shot!",
        "Good effort from {player} - it's on target!",
    ),
    MatchEventType.SHOT_OFF_TARGET: (
        "{player} shoots but it's wide of the target!",
        "Over the bar! {player} couldn't keep his shot down!",
        "{player} fires wide - {team} will rue that missed opportunity!",
    ),
    MatchEventType.SAVE: (
        "Brilliant save! {player} keeps {team} in the game!",
        "What a save from {player}! Outstanding reflexes!",
        "Superb goalkeeping! {player} denies {opposition}!",
    ),
    MatchEventType.FOUL: (
        "Foul by {player}! The referee awards a free kick to {opposition}.",
        "{player} brings down his opponent - free kick {opposition}.",
        "The referee blows for a foul by {player}.",
    ),
    MatchEventType.TACKLE: (
        "Crunching tackle from {player}!",
        "{player} wins the ball back for {team}.",
    ),
    MatchEventType.CORNER: (
        "Corner kick for {team}! A good opportunity to create danger!",
        "{team} win a corner - can they capitalize on this set piece?",
        "It's a corner for {team} - a chance to test the {opposition} defense!",
    ),
    MatchEventType.OFFSIDE: (
        "Offside! {player} was caught in an offside position.",
        "The flag is up - {player} strayed offside there.",
    ),
    MatchEventType.INJURY: (
        "{player} is down injured. The medical team are attending to the player.",
        "Concern for {player} here - he's receiving treatment on the field.",
    ),
    MatchEventType.SUBSTITUTION: (
        "Substitution for {team} - fresh legs coming on.",
        "Change for {team} as they look to alter the dynamic.",
    ),
    MatchEventType.PENALTY: (
        "PENALTY to {team}! {player} steps up...",
        "The referee points to the spot! Penalty for {team}!",
    ),
    MatchEventType.OWN_GOAL: (
        "Oh no! {player} turns it into his own net!",
        "Disaster for {team}! An own goal from {player}!",
    ),
    MatchEventType.ASSIST: (
        "Lovely ball from {player} to set that up.",
        "{player} with the assist for {team}.",
    ),
    MatchEventType.MOMENTUM_SHIFT: (
        "The momentum is shifting! {team} are taking control.",
        "You can feel the tide turning in favor of {team}!",
        "Momentum swinging toward {team} here at {stadium}!",
    ),
}

_WEATHER_DESCRIPTIONS = {
    WeatherCondition.SUNNY: "sunny conditions",
    WeatherCondition.CLOUDY: "overcast skies",
    WeatherCondition.RAINY: "wet conditions",
    WeatherCondition.SNOWY: "snowy weather",
    WeatherCondition.WINDY: "windy conditions",
    WeatherCondition.FOGGY: "foggy conditions",
}


class CommentaryEngine:
    """Generate broadcast-style lines for match moments.

    Parameters
    ----------
    rng : Optional[random.Random]
        Source used to vary phrasing; a fresh unseeded generator when omitted.
    """

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self.rng = rng or random.Random()

    def pre_match(self, match: Match) -> str:
        """Line read before kickoff.

        Parameters
        ----------
        match : Match
            Upcoming fixture.

        Returns
        -------
        str
            Welcome line naming the teams and stadium.
        """
        template = self.rng.choice(PRE_MATCH_TEMPLATES)
        return template.format(
            stadium=match.home_team.stadium.name,
            home=match.home_team.name,
            away=match.away_team.name,
        )

    def kickoff(self, match: Match) -> str:
        """Kickoff line.

        Parameters
        ----------
        match : Match
            Match being kicked off.

        Returns
        -------
        str
            Kickoff announcement.
        """
        return f"The match is underway! {match.home_team.name} vs {match.away_team.name}"

    def half_time(self, match: Match) -> str:
        """Half-time line.

        Parameters
        ----------
        match : Match
            Match at the interval.

        Returns
        -------
        str
            Half-time score announcement.
        """
        return f"Half time! {match.score_line()}"

    def full_time(self, match: Match) -> str:
        """Full-time line.

        Parameters
        ----------
        match : Match
            Completed match.

        Returns
        -------
        str
            Final score announcement.
        """
        return f"FULL TIME! {match.score_line()}. What a match!"

    def minute(self, minute: int, match: Match) -> str:
        """Line published with every simulated minute.

        Parameters
        ----------
        minute : int
            Minute just simulated.
        match : Match
            Match after the minute.

        Returns
        -------
        str
            A stock phrase, or a time-check near half time, late on and every
            ten minutes.
        """
        if minute == 45:
            return "We're approaching half time..."
        if minute > 85:
            return "The clock is ticking down..."
        if minute % 10 == 0:
            return f"{minute} minutes played. {match.score_line()}"
        return self.rng.choice(MINUTE_PHRASES)

    def event(self, event: MatchEvent, match: Match) -> str:
        """Line describing a single event.

        Parameters
        ----------
        event : MatchEvent
            Event to describe.
        match : Match
            Match including the event.

        Returns
        -------
        str
            Commentary line; falls back to the event description.
        """
        event_type = event.event_type
        if event_type is MatchEventType.KICKOFF:
            return self.kickoff(match)
        if event_type is MatchEventType.HALF_TIME:
            return self.half_time(match)
        if event_type is MatchEventType.FULL_TIME:
            return self.full_time(match)
        if event_type is MatchEventType.GOAL:
            return f"GOAL! {event.player_name or 'Unknown'} finds the back of the net! {match.score_line()}"
        if event_type is MatchEventType.TACTICAL_CHANGE:
            return self._tactical_change(event, match)

        templates = EVENT_TEMPLATES.get(event_type)
        if not templates:
            return event.description

        team = match.team(event.team_id)
        opposition = match.away_team if team is match.home_team else match.home_team
        return self.rng.choice(templates).format(
            player=event.player_name or "Unknown",
            team=team.name,
            opposition=opposition.name,
            stadium=match.home_team.stadium.name,
        )

    def match_state(self, match: Match) -> str:
        """Context-aware line about the flow of the match.

        Parameters
        ----------
        match : Match
            Match in progress.

        Returns
        -------
        str
            Observation driven by shots, possession or momentum when one side
            dominates, otherwise a generic line mentioning the weather.
        """
        home, away = match.home_team.name, match.away_team.name
        stats = match.statistics
        if stats is not None:
            if stats.home_shots > stats.away_shots + 3:
                return f"{home} are really turning up the pressure with {stats.home_shots} shots to {away}'s {stats.away_shots}."
            if stats.away_shots > stats.home_shots + 3:
                return f"The visitors are asking all the questions here - {stats.away_shots} shots for {away}."
            if stats.home_possession > 70:
                return f"{home} are really dominating possession here with {stats.home_possession:.0f}% of the ball."
            if stats.home_possession < 30:
                return f"{away} are controlling this match, enjoying {stats.away_possession:.0f}% possession."

        momentum = match.momentum
        if momentum is not None:
            if momentum.home_momentum > 75:
                return f"{home} have really seized control of this match and are piling on the pressure!"
            if momentum.away_momentum > 75:
                return f"The momentum has completely shifted in favor of {away} here!"

        weather = _WEATHER_DESCRIPTIONS[match.weather.condition]
        return f"Both teams working hard in these {weather}."

    def post_match(self, match: Match) -> str:
        """Summary read after the final whistle.

        Parameters
        ----------
        match : Match
            Completed match.

        Returns
        -------
        str
            Verdict shaped by the winner and the margin.
        """
        home, away = match.home_team.name, match.away_team.name
        stadium = match.home_team.stadium.name
        score = f"{match.home_goals}-{match.away_goals}"
        margin = match.home_goals - match.away_goals

        if margin == 1:
            return f"A narrow but deserved victory for {home}! They edge past {away} {score}."
        if margin >= 3:
            return f"A comprehensive victory for {home}! They sweep aside {away} {score} in emphatic fashion."
        if margin > 0:
            return f"{home} secure a solid {score} victory over {away} here at {stadium}."
        if margin == -1:
            return f"What a result for {away}! They snatch a crucial {score} victory away from home."
        if margin <= -3:
            return f"Stunning! {away} run riot here at {stadium}, crushing {home} {score}!"
        if margin < 0:
            return f"Excellent away performance from {away} as they beat {home} {score} on the road."
        if match.home_goals == 0:
            return f"A goalless draw here at {stadium}. Both defenses stood firm in a tactical battle."
        if match.home_goals >= 3:
            return f"What an entertaining {score} draw! Goals galore but neither side could find a winner."
        return f"The points are shared here at {stadium}. A {score} draw between {home} and {away}."

    @staticmethod
    def _tactical_change(event: MatchEvent, match: Match) -> str:
        """Describe a tactical change by its kind.

        Parameters
        ----------
        event : MatchEvent
            Tactical-change event.
        match : Match
            Match including the event.

        Returns
        -------
        str
            Line naming the team and the change.
        """
        team = match.team(event.team_id).name
        meta = event.metadata
        change_type = meta.get("changeType")
        if change_type == "formation":
            return f"{team} change their formation to {meta.get('formation')}!"
        if change_type == "playerInstructions":
            return f"{event.player_name or 'A player'} receives new tactical instructions from the bench."
        if change_type == "automaticTactics":
            verb = "enable" if meta.get("enabled") else "disable"
            return f"{team} {verb} automatic tactical adjustments."
        if change_type == "matchIntensity":
            return f"{team} adjust their match intensity to {meta.get('intensity')}."
        if "mentality" in meta:
            return f"{team} make a tactical adjustment. They're now playing with a {meta['mentality']} mentality."
        return f"{team} make a tactical adjustment."
