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
"""Tactical domain models: formations, setups, player roles and live tactics.

Every enumeration in this module is string valued so that ``member.value`` is
the short token exchanged with persistence layers (``"4-4-2"``, ``"balanced"``,
``"counter-attack"`` ...). Value objects are frozen dataclasses; use
:func:`dataclasses.replace` to derive adjusted copies.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple

from matchday.engine.config import ENGINE_CONFIG, TacticalConfig
from matchday.models.player import PlayerPosition


class Formation(str, Enum):
    """Named arrangement of player lines."""

    F442 = "4-4-2"
    F433 = "4-3-3"
    F352 = "3-5-2"
    F532 = "5-3-2"
    F451 = "4-5-1"
    F4231 = "4-2-3-1"
    F343 = "3-4-3"
    F4141 = "4-1-4-1"
    F541 = "5-4-1"
    F3421 = "3-4-2-1"

    @property
    def requirements(self) -> Dict[PlayerPosition, int]:
        """Players required per natural line, goalkeeper included."""
        gk, df, mf, fw = _FORMATION_LINES[self]
        return {
            PlayerPosition.GOALKEEPER: gk,
            PlayerPosition.DEFENDER: df,
            PlayerPosition.MIDFIELDER: mf,
            PlayerPosition.FORWARD: fw,
        }

    @property
    def slots(self) -> Tuple[TacticalPosition, ...]:
        """Ordered tactical slots from goalkeeper to the most advanced player."""
        return _FORMATION_SLOTS[self]


class AttackingMentality(str, Enum):
    """Five-level attacking posture of a tactical setup."""

    ULTRA_DEFENSIVE = "ultra-defensive"
    DEFENSIVE = "defensive"
    BALANCED = "balanced"
    ATTACKING = "attacking"
    ULTRA_ATTACKING = "ultra-attacking"

    @property
    def level(self) -> int:
        """Ordinal value from 1 (ultra-defensive) to 5 (ultra-attacking)."""
        return list(AttackingMentality).index(self) + 1


class DefensiveStyle(str, Enum):
    """Out-of-possession approach."""

    MAN_MARKING = "man-marking"
    ZONAL = "zonal"
    HIGH_PRESS = "high-press"
    LOW_BLOCK = "low-block"


class AttackingStyle(str, Enum):
    """In-possession approach."""

    POSSESSION = "possession"
    COUNTER_ATTACK = "counter-attack"
    DIRECT = "direct"
    WING_PLAY = "wing-play"


class TacticalPosition(str, Enum):
    """Slot a player occupies inside a formation."""

    GOALKEEPER = "goalkeeper"
    CENTRE_BACK = "centre-back"
    LEFT_BACK = "left-back"
    RIGHT_BACK = "right-back"
    WING_BACK = "wing-back"
    DEFENSIVE_MIDFIELDER = "defensive-midfielder"
    CENTRE_MIDFIELDER = "centre-midfielder"
    ATTACKING_MIDFIELDER = "attacking-midfielder"
    LEFT_WINGER = "left-winger"
    RIGHT_WINGER = "right-winger"
    STRIKER = "striker"


_FORMATION_LINES: Dict[Formation, Tuple[int, int, int, int]] = {
    Formation.F442: (1, 4, 4, 2),
    Formation.F433: (1, 4, 3, 3),
    Formation.F352: (1, 3, 5, 2),
    Formation.F532: (1, 5, 3, 2),
    Formation.F451: (1, 4, 5, 1),
    Formation.F4231: (1, 4, 5, 1),
    Formation.F343: (1, 3, 4, 3),
    Formation.F4141: (1, 4, 5, 1),
    Formation.F541: (1, 5, 4, 1),
    Formation.F3421: (1, 3, 6, 1),
}

_GK = TacticalPosition.GOALKEEPER
_CB = TacticalPosition.CENTRE_BACK
_LB = TacticalPosition.LEFT_BACK
_RB = TacticalPosition.RIGHT_BACK
_WB = TacticalPosition.WING_BACK
_DM = TacticalPosition.DEFENSIVE_MIDFIELDER
_CM = TacticalPosition.CENTRE_MIDFIELDER
_AM = TacticalPosition.ATTACKING_MIDFIELDER
_LW = TacticalPosition.LEFT_WINGER
_RW = TacticalPosition.RIGHT_WINGER
_ST = TacticalPosition.STRIKER

_FORMATION_SLOTS: Dict[Formation, Tuple[TacticalPosition, ...]] = {
    Formation.F442: (_GK, _LB, _CB, _CB, _RB, _LW, _CM, _CM, _RW, _ST, _ST),
    Formation.F433: (_GK, _LB, _CB, _CB, _RB, _CM, _CM, _CM, _LW, _ST, _RW),
    Formation.F352: (_GK, _CB, _CB, _CB, _WB, _CM, _CM, _CM, _WB, _ST, _ST),
    Formation.F532: (_GK, _CB, _CB, _CB, _WB, _DM, _CM, _DM, _WB, _ST, _ST),
    Formation.F451: (_GK, _LB, _CB, _CB, _RB, _LW, _CM, _CM, _RW, _AM, _ST),
    Formation.F4231: (_GK, _LB, _CB, _CB, _RB, _DM, _DM, _LW, _AM, _RW, _ST),
    Formation.F343: (_GK, _CB, _CB, _CB, _CM, _CM, _CM, _CM, _LW, _ST, _RW),
    Formation.F4141: (_GK, _LB, _CB, _CB, _RB, _DM, _LW, _CM, _CM, _RW, _ST),
    Formation.F541: (_GK, _WB, _CB, _CB, _CB, _WB, _LW, _CM, _CM, _RW, _ST),
    Formation.F3421: (_GK, _CB, _CB, _CB, _WB, _CM, _CM, _WB, _AM, _AM, _ST),
}


def _in_slider_range(*values: int) -> bool:
    """Return whether every slider lies within the 1-100 scale.

    Parameters
    ----------
    *values : int
        Slider values to check.

    Returns
    -------
    bool
        ``True`` when all values are between 1 and 100 inclusive.
    """
    return all(1 <= value <= 100 for value in values)


@dataclass(frozen=True)
class TacticalSetup:
    """Team-wide tactical instructions.

    Parameters
    ----------
    formation : Formation
        Shape the team lines up in.
    attacking_mentality : AttackingMentality
        Attacking posture.
    defensive_style : DefensiveStyle
        Out-of-possession approach.
    attacking_style : AttackingStyle
        In-possession approach.
    width : int
        Width of play, 1 (narrow) to 100 (wide).
    tempo : int
        Speed of play, 1 (slow) to 100 (fast).
    defensive_line : int
        Height of the back line, 1 (deep) to 100 (high).
    pressing : int
        Pressing intensity, 1 (passive) to 100 (relentless).
    """

    formation: Formation
    attacking_mentality: AttackingMentality
    defensive_style: DefensiveStyle
    attacking_style: AttackingStyle
    width: int
    tempo: int
    defensive_line: int
    pressing: int

    def __post_init__(self) -> None:
        """Coerce enum tokens so setups built from plain strings behave alike."""
        object.__setattr__(self, "formation", Formation(self.formation))
        object.__setattr__(self, "attacking_mentality", AttackingMentality(self.attacking_mentality))
        object.__setattr__(self, "defensive_style", DefensiveStyle(self.defensive_style))
        object.__setattr__(self, "attacking_style", AttackingStyle(self.attacking_style))

    @property
    def is_valid(self) -> bool:
        """Whether every slider lies within 1-100."""
        return _in_slider_range(self.width, self.tempo, self.defensive_line, self.pressing)

    @property
    def mentality_level(self) -> int:
        """Attacking mentality as an ordinal from 1 to 5."""
        return self.attacking_mentality.level

    def calculate_tactical_effectiveness(
        self,
        team_chemistry: float,
        manager_rating: float,
        config: Optional[TacticalConfig] = None,
    ) -> float:
        """Score how well the setup can be executed.

        Parameters
        ----------
        team_chemistry : float
            Chemistry on the 0-100 scale.
        manager_rating : float
            Manager ability on the 0-100 scale.
        config : Optional[TacticalConfig]
            Tuning overrides; defaults to ``ENGINE_CONFIG.tactical``.

        Returns
        -------
        float
            Multiplier between 0.8 and 1.2; 0.8 for an invalid setup.
        """
        cfg = config or ENGINE_CONFIG.tactical
        if not self.is_valid:
            return cfg.invalid_setup_effectiveness

        balance = 1.0
        level = self.mentality_level
        if (level >= 4 and self.defensive_line < 30) or (level <= 2 and self.pressing > 70):
            balance -= 0.1

        chemistry_multiplier = 0.9 + (team_chemistry / 100.0) * 0.2
        manager_multiplier = 0.95 + (manager_rating / 100.0) * 0.1
        low, high = cfg.effectiveness_bounds
        return max(low, min(high, balance * chemistry_multiplier * manager_multiplier))


@dataclass(frozen=True)
class PlayerRole:
    """Slot assignment plus individual sliders for one player.

    Parameters
    ----------
    position : TacticalPosition
        Slot the player fills.
    attacking_freedom : int
        How far forward the player may roam, 1-100.
    defensive_work : int
        Share of defensive duties, 1-100.
    width : int
        How wide the player positions himself, 1-100.
    creative_freedom : int
        Licence to improvise, 1-100.
    player_id : Optional[str]
        Player the role was generated for, when known.
    """

    position: TacticalPosition
    attacking_freedom: int
    defensive_work: int
    width: int
    creative_freedom: int
    player_id: Optional[str] = None

    def __post_init__(self) -> None:
        """Coerce the slot token into a :class:`TacticalPosition`."""
        object.__setattr__(self, "position", TacticalPosition(self.position))

    @property
    def is_valid(self) -> bool:
        """Whether every slider lies within 1-100."""
        return _in_slider_range(self.attacking_freedom, self.defensive_work, self.width, self.creative_freedom)

    def calculate_role_suitability(
        self,
        player_attacking: int,
        player_defending: int,
        player_technical: int,
        player_physical: int,
        config: Optional[TacticalConfig] = None,
    ) -> float:
        """Estimate how well a player profile fits this role.

        Parameters
        ----------
        player_attacking : int
            Attacking capability, 1-100.
        player_defending : int
            Defensive capability, 1-100.
        player_technical : int
            Technical rating, 1-100.
        player_physical : int
            Physical rating, 1-100.
        config : Optional[TacticalConfig]
            Tuning overrides; defaults to ``ENGINE_CONFIG.tactical``.

        Returns
        -------
        float
            Suitability between 0 and 1.
        """
        cfg = config or ENGINE_CONFIG.tactical
        if not self.is_valid:
            return cfg.invalid_role_suitability

        pos = self.position
        if pos is TacticalPosition.GOALKEEPER:
            suitability = player_technical / 100.0
        elif pos in (TacticalPosition.CENTRE_BACK, TacticalPosition.LEFT_BACK, TacticalPosition.RIGHT_BACK):
            suitability = (player_defending * 0.6 + player_physical * 0.4) / 100.0
        elif pos is TacticalPosition.WING_BACK:
            suitability = (player_attacking * 0.3 + player_defending * 0.4 + player_physical * 0.3) / 100.0
        elif pos is TacticalPosition.DEFENSIVE_MIDFIELDER:
            suitability = (player_defending * 0.7 + player_technical * 0.3) / 100.0
        elif pos is TacticalPosition.CENTRE_MIDFIELDER:
            suitability = (
                player_attacking * 0.25 + player_defending * 0.25 + player_technical * 0.3 + player_physical * 0.2
            ) / 100.0
        elif pos is TacticalPosition.ATTACKING_MIDFIELDER:
            suitability = (player_attacking * 0.5 + player_technical * 0.5) / 100.0
        elif pos in (TacticalPosition.LEFT_WINGER, TacticalPosition.RIGHT_WINGER):
            suitability = (player_attacking * 0.5 + player_technical * 0.3 + player_physical * 0.2) / 100.0
        else:
            suitability = (player_attacking * 0.7 + player_technical * 0.3) / 100.0

        role_match = 1.0
        if self.attacking_freedom > 70 and player_attacking < 50:
            role_match -= 0.2
        if self.defensive_work > 70 and player_defending < 50:
            role_match -= 0.2

        return max(0.0, min(1.0, suitability * role_match))


class TeamMentality(str, Enum):
    """Five-level mentality used by live in-match tactics."""

    VERY_DEFENSIVE = "veryDefensive"
    DEFENSIVE = "defensive"
    BALANCED = "balanced"
    ATTACKING = "attacking"
    VERY_ATTACKING = "veryAttacking"


_ATTACKING_MENTALITY_FACTOR = {
    TeamMentality.VERY_DEFENSIVE: 0.7,
    TeamMentality.DEFENSIVE: 0.85,
    TeamMentality.BALANCED: 1.0,
    TeamMentality.ATTACKING: 1.15,
    TeamMentality.VERY_ATTACKING: 1.3,
}

_DEFENSIVE_MENTALITY_FACTOR = {
    TeamMentality.VERY_DEFENSIVE: 1.3,
    TeamMentality.DEFENSIVE: 1.15,
    TeamMentality.BALANCED: 1.0,
    TeamMentality.ATTACKING: 0.85,
    TeamMentality.VERY_ATTACKING: 0.7,
}

_SETUP_TO_TEAM_MENTALITY = {
    AttackingMentality.ULTRA_DEFENSIVE: TeamMentality.VERY_DEFENSIVE,
    AttackingMentality.DEFENSIVE: TeamMentality.DEFENSIVE,
    AttackingMentality.BALANCED: TeamMentality.BALANCED,
    AttackingMentality.ATTACKING: TeamMentality.ATTACKING,
    AttackingMentality.ULTRA_ATTACKING: TeamMentality.VERY_ATTACKING,
}

_STYLE_DIRECTNESS = {
    AttackingStyle.POSSESSION: 30,
    AttackingStyle.COUNTER_ATTACK: 65,
    AttackingStyle.DIRECT: 75,
    AttackingStyle.WING_PLAY: 55,
}


@dataclass(frozen=True)
class TeamTactics:
    """Live tactics a side plays with during a match.

    Parameters
    ----------
    mentality : TeamMentality
        Attacking posture.
    pressing : int
        Pressing intensity on a 0-100 scale.
    tempo : int
        Speed of play on a 0-100 scale.
    width : int
        Width of play on a 0-100 scale.
    directness : int
        Preference for long, forward passing on a 0-100 scale.
    """

    mentality: TeamMentality
    pressing: int
    tempo: int
    width: int
    directness: int

    def __post_init__(self) -> None:
        """Coerce the mentality token into a :class:`TeamMentality`."""
        object.__setattr__(self, "mentality", TeamMentality(self.mentality))

    @property
    def is_valid(self) -> bool:
        """Whether every slider lies within 0-100."""
        return all(0 <= value <= 100 for value in (self.pressing, self.tempo, self.width, self.directness))

    @property
    def attacking_modifier(self) -> float:
        """Chance-creation multiplier implied by mentality, tempo and width."""
        modifier = _ATTACKING_MENTALITY_FACTOR[self.mentality]
        modifier *= 0.8 + self.tempo * 0.004
        modifier *= 0.95 + self.width * 0.001
        return modifier

    @property
    def defensive_modifier(self) -> float:
        """Defensive solidity multiplier implied by mentality and pressing."""
        return _DEFENSIVE_MENTALITY_FACTOR[self.mentality] * (0.9 + self.pressing * 0.002)

    @classmethod
    def balanced(cls) -> TeamTactics:
        """Neutral tactics every side starts a streamed match with.

        Returns
        -------
        TeamTactics
            Balanced mentality with every slider at 50.
        """
        return cls(mentality=TeamMentality.BALANCED, pressing=50, tempo=50, width=50, directness=50)

    @classmethod
    def from_setup(cls, setup: TacticalSetup) -> TeamTactics:
        """Translate a pre-match setup into live tactics.

        Parameters
        ----------
        setup : TacticalSetup
            Setup whose mentality and sliders should be carried over.

        Returns
        -------
        TeamTactics
            Live tactics mirroring ``setup``.
        """
        return cls(
            mentality=_SETUP_TO_TEAM_MENTALITY[setup.attacking_mentality],
            pressing=setup.pressing,
            tempo=setup.tempo,
            width=setup.width,
            directness=_STYLE_DIRECTNESS[setup.attacking_style],
        )


class InstructionRole(str, Enum):
    """Individual role a manager can hand a player mid-match."""

    GOALKEEPER = "goalkeeper"
    CENTREBACK = "centreback"
    FULLBACK = "fullback"
    WINGBACK = "wingback"
    DEFENSIVE_MIDFIELDER = "defensiveMidfielder"
    CENTRAL_MIDFIELDER = "centralMidfielder"
    ATTACKING_MIDFIELDER = "attackingMidfielder"
    WINGER = "winger"
    STRIKER = "striker"
    TARGET_MAN = "targetMan"
    POACHER = "poacher"
    FALSE_NINE = "falseNine"
    BALL_WINNER = "ballWinner"
    PLAYMAKER = "playmaker"


class PlayerMentality(str, Enum):
    """Individual mentality attached to player instructions."""

    DEFENSIVE = "defensive"
    BALANCED = "balanced"
    ATTACKING = "attacking"
    AGGRESSIVE = "aggressive"


@dataclass(frozen=True)
class PlayerInstructions:
    """Instructions issued to one player during a match.

    Parameters
    ----------
    player_id : str
        Player the instructions target.
    role : InstructionRole
        Individual role to adopt.
    mentality : PlayerMentality
        Individual mentality to adopt.
    instructions : Tuple[str, ...]
        Free-text extra instructions such as ``"stay wide"``.
    """

    player_id: str
    role: InstructionRole
    mentality: PlayerMentality
    instructions: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        """Coerce tokens and freeze the instruction list."""
        object.__setattr__(self, "role", InstructionRole(self.role))
        object.__setattr__(self, "mentality", PlayerMentality(self.mentality))
        object.__setattr__(self, "instructions", tuple(self.instructions))


class MatchIntensity(str, Enum):
    """How hard a side commits to duels, scaling event and card rates."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    VERY_HIGH = "veryHigh"
