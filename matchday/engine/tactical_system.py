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
"""Tactical derivation layer feeding the match simulator.

The :class:`TacticalSystem` turns a squad into a default :class:`TacticalSetup`,
assigns players to formation slots, scores how well the assignment fits
(chemistry) and converts a setup into the four multipliers the simulator
consumes. All methods are pure functions of their arguments.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Dict, List, Optional, Sequence, Tuple

from matchday.engine.config import ENGINE_CONFIG, EngineConfig
from matchday.models.player import Player, PlayerPosition
from matchday.models.tactics import (
    AttackingMentality,
    AttackingStyle,
    DefensiveStyle,
    Formation,
    PlayerRole,
    TacticalPosition,
    TacticalSetup,
)
from matchday.models.team import Team

# Natural line -> slots the player can fill without an out-of-position penalty.
POSITION_COMPATIBILITY: Dict[PlayerPosition, Tuple[TacticalPosition, ...]] = {
    PlayerPosition.GOALKEEPER: (TacticalPosition.GOALKEEPER,),
    PlayerPosition.DEFENDER: (
        TacticalPosition.CENTRE_BACK,
        TacticalPosition.LEFT_BACK,
        TacticalPosition.RIGHT_BACK,
        TacticalPosition.WING_BACK,
    ),
    PlayerPosition.MIDFIELDER: (
        TacticalPosition.DEFENSIVE_MIDFIELDER,
        TacticalPosition.CENTRE_MIDFIELDER,
        TacticalPosition.ATTACKING_MIDFIELDER,
        TacticalPosition.LEFT_WINGER,
        TacticalPosition.RIGHT_WINGER,
    ),
    PlayerPosition.FORWARD: (
        TacticalPosition.STRIKER,
        TacticalPosition.LEFT_WINGER,
        TacticalPosition.RIGHT_WINGER,
        TacticalPosition.ATTACKING_MIDFIELDER,
    ),
}

# (attacking freedom, defensive work, width, creative freedom) before player boosts.
_BASE_ROLE_SLIDERS: Dict[TacticalPosition, Tuple[int, int, int, int]] = {
    TacticalPosition.GOALKEEPER: (10, 90, 30, 20),
    TacticalPosition.CENTRE_BACK: (20, 80, 40, 30),
    TacticalPosition.LEFT_BACK: (40, 70, 80, 40),
    TacticalPosition.RIGHT_BACK: (40, 70, 80, 40),
    TacticalPosition.WING_BACK: (60, 60, 90, 50),
    TacticalPosition.DEFENSIVE_MIDFIELDER: (30, 80, 50, 40),
    TacticalPosition.CENTRE_MIDFIELDER: (60, 60, 50, 70),
    TacticalPosition.ATTACKING_MIDFIELDER: (80, 30, 50, 90),
    TacticalPosition.LEFT_WINGER: (80, 40, 90, 80),
    TacticalPosition.RIGHT_WINGER: (80, 40, 90, 80),
    TacticalPosition.STRIKER: (90, 20, 60, 70),
}

_FORMATION_FAMILIARITY: Dict[Formation, float] = {
    Formation.F442: 1.05,
    Formation.F433: 1.05,
    Formation.F4231: 1.0,
    Formation.F352: 1.0,
    Formation.F451: 0.98,
    Formation.F532: 0.98,
    Formation.F343: 0.95,
    Formation.F4141: 0.95,
    Formation.F541: 0.95,
    Formation.F3421: 0.95,
}

# (attacking, defending, possession) multipliers per formation.
_FORMATION_MODIFIERS: Dict[Formation, Tuple[float, float, float]] = {
    Formation.F442: (1.0, 1.0, 1.0),
    Formation.F433: (1.05, 0.98, 1.02),
    Formation.F352: (0.98, 1.05, 0.98),
    Formation.F532: (0.95, 1.1, 0.95),
    Formation.F451: (0.98, 1.02, 1.05),
    Formation.F4231: (1.02, 1.0, 1.08),
    Formation.F343: (1.1, 0.9, 1.05),
    Formation.F4141: (0.95, 1.05, 1.08),
    Formation.F541: (0.92, 1.12, 0.95),
    Formation.F3421: (1.04, 0.96, 1.04),
}

# (attacking, defending, possession, chance creation) multipliers per mentality.
_MENTALITY_MODIFIERS: Dict[AttackingMentality, Tuple[float, float, float, float]] = {
    AttackingMentality.ULTRA_DEFENSIVE: (0.8, 1.2, 0.9, 1.0),
    AttackingMentality.DEFENSIVE: (0.9, 1.1, 1.0, 1.0),
    AttackingMentality.BALANCED: (1.0, 1.0, 1.0, 1.0),
    AttackingMentality.ATTACKING: (1.1, 0.9, 1.0, 1.1),
    AttackingMentality.ULTRA_ATTACKING: (1.2, 0.8, 1.1, 1.2),
}

# (attacking, possession, chance creation) multipliers per attacking style.
_STYLE_MODIFIERS: Dict[AttackingStyle, Tuple[float, float, float]] = {
    AttackingStyle.POSSESSION: (1.0, 1.15, 0.95),
    AttackingStyle.COUNTER_ATTACK: (1.0, 0.9, 1.1),
    AttackingStyle.DIRECT: (1.05, 0.95, 1.0),
    AttackingStyle.WING_PLAY: (1.0, 1.0, 1.05),
}


def _squad_averages(players: Sequence[Player]) -> Tuple[float, float, float]:
    """Average attacking, defending and technical capability of a squad.

    Parameters
    ----------
    players : Sequence[Player]
        Non-empty list of players.

    Returns
    -------
    Tuple[float, float, float]
        ``(attacking, defending, technical)`` means.
    """
    count = len(players)
    attacking = sum((p.technical + p.physical) / 2 for p in players) / count
    defending = sum((p.mental + p.physical) / 2 for p in players) / count
    technical = sum(p.technical for p in players) / count
    return attacking, defending, technical


def _boost(rating: float) -> int:
    """Slider boost earned by a strong rating.

    Parameters
    ----------
    rating : float
        Player capability on the 1-100 scale.

    Returns
    -------
    int
        25 above 85, 15 from 75, otherwise 0.
    """
    if rating > 85:
        return 25
    if rating >= 75:
        return 15
    return 0


class TacticalSystem:
    """Derive setups, roles, chemistry and tactical modifiers.

    Parameters
    ----------
    config : Optional[EngineConfig]
        Tuning overrides; defaults to ``ENGINE_CONFIG``.
    """

    def __init__(self, config: Optional[EngineConfig] = None) -> None:
        self.config = config or ENGINE_CONFIG

    def create_default_setup(self, team: Team) -> TacticalSetup:
        """Derive a starting setup from the squad's attribute balance.

        Parameters
        ----------
        team : Team
            Squad to analyse; must contain at least one player.

        Returns
        -------
        TacticalSetup
            Formation, mentality, styles and sliders suited to the squad.

        Raises
        ------
        ValueError
            When the team has no players.
        """
        if not team.players:
            raise ValueError(f"Cannot derive a tactical setup for {team.name}: no players")

        attacking, defending, technical = _squad_averages(team.players)

        if attacking >= 80 or attacking > defending + 8:
            natural_mentality = AttackingMentality.ATTACKING
        elif defending >= 80 or defending > attacking + 8:
            natural_mentality = AttackingMentality.DEFENSIVE
        else:
            natural_mentality = AttackingMentality.BALANCED

        if technical > 75:
            attacking_style = AttackingStyle.POSSESSION
        elif attacking > defending:
            attacking_style = AttackingStyle.DIRECT
        else:
            attacking_style = AttackingStyle.COUNTER_ATTACK

        if technical >= 90 and not attacking > defending + 10:
            formation = Formation.F4231
            mentality = natural_mentality
            attacking_style = AttackingStyle.POSSESSION
        elif defending > attacking + 5:
            formation = Formation.F532
            mentality = AttackingMentality.DEFENSIVE
        elif attacking > defending + 5:
            formation = Formation.F343
            mentality = AttackingMentality.ATTACKING
        else:
            formation = Formation.F442
            mentality = AttackingMentality.BALANCED

        defensive_style = DefensiveStyle.ZONAL if technical > 70 else DefensiveStyle.MAN_MARKING

        return TacticalSetup(
            formation=formation,
            attacking_mentality=mentality,
            defensive_style=defensive_style,
            attacking_style=attacking_style,
            width=min(100, 50 + int(technical // 5)),
            tempo=min(100, 50 + int(attacking // 5)),
            defensive_line=min(100, 50 + int(defending // 5)),
            pressing=min(100, 50 + int((attacking + defending) // 10)),
        )

    def create_optimal_roles(self, formation: Formation, players: Sequence[Player]) -> List[PlayerRole]:
        """Assign players to the formation's slots.

        Slots are filled in order. A goalkeeper slot takes the first natural
        goalkeeper; every other slot takes the highest-rated compatible player,
        falling back to the best remaining player. With fewer players than slots
        the goalkeeper and strikers are filled first.

        Parameters
        ----------
        formation : Formation
            Formation whose slots are filled.
        players : Sequence[Player]
            Candidates; each is used at most once.

        Returns
        -------
        List[PlayerRole]
            One role per filled slot, ``min(len(players), 11)`` in total.
        """
        slots = list(Formation(formation).slots)
        if len(players) < len(slots):
            slots = self._prioritise_slots(slots)

        remaining = list(players)
        roles: List[PlayerRole] = []
        for slot in slots:
            if not remaining:
                break
            chosen = self._pick_player(slot, remaining)
            remaining.remove(chosen)
            roles.append(self._create_role_for_position(slot, chosen))
        return roles

    def calculate_team_chemistry(self, team: Team, setup: TacticalSetup, roles: Sequence[PlayerRole]) -> float:
        """Score how well the roles fit the roster.

        Parameters
        ----------
        team : Team
            Squad whose players are paired with ``roles``.
        setup : TacticalSetup
            Setup providing the formation familiarity.
        roles : Sequence[PlayerRole]
            One role per roster player. Roles carrying a ``player_id`` are paired
            by id, the rest by roster order.

        Returns
        -------
        float
            Chemistry between 0 and 100, or the low sentinel when the number of
            roles differs from the number of players.

        Raises
        ------
        ValueError
            When the team has no players.
        """
        cfg = self.config.tactical
        if not team.players:
            raise ValueError(f"Cannot calculate chemistry for {team.name}: no players")
        if len(roles) != len(team.players):
            return cfg.chemistry_sentinel

        total = 0.0
        for player, role in self._pair_roles(team.players, roles):
            suitability = role.calculate_role_suitability(
                player_attacking=player.attacking_rating,
                player_defending=player.defending_rating,
                player_technical=player.technical,
                player_physical=player.physical,
                config=cfg,
            )
            if not self.is_position_compatible(player.position, role.position):
                suitability *= cfg.out_of_position_penalty
            keeper_in_goal = role.position is TacticalPosition.GOALKEEPER
            if player.is_goalkeeper != keeper_in_goal:
                suitability *= cfg.goalkeeper_mismatch_penalty
            total += suitability

        base = total / len(team.players) * 100.0
        return max(0.0, min(100.0, base * _FORMATION_FAMILIARITY[setup.formation]))

    def apply_tactical_modifiers(
        self,
        setup: TacticalSetup,
        team_chemistry: float,
        manager_rating: Optional[float] = None,
    ) -> Dict[str, float]:
        """Convert a setup into simulator multipliers.

        Parameters
        ----------
        setup : TacticalSetup
            Setup to evaluate.
        team_chemistry : float
            Chemistry on the 0-100 scale.
        manager_rating : Optional[float]
            Manager ability on the 0-100 scale; the configured default when
            omitted.

        Returns
        -------
        Dict[str, float]
            ``attacking``, ``defending``, ``possession`` and ``chance_creation``
            multipliers, each clamped to [0.5, 1.5].
        """
        cfg = self.config.tactical
        rating = cfg.default_manager_rating if manager_rating is None else manager_rating
        effectiveness = setup.calculate_tactical_effectiveness(team_chemistry, rating, config=cfg)

        attacking, defending, possession, chance = _MENTALITY_MODIFIERS[setup.attacking_mentality]

        f_att, f_def, f_pos = _FORMATION_MODIFIERS[setup.formation]
        attacking *= f_att
        defending *= f_def
        possession *= f_pos

        s_att, s_pos, s_chance = _STYLE_MODIFIERS[setup.attacking_style]
        attacking *= s_att
        possession *= s_pos
        chance *= s_chance

        chance *= 1.0 + (setup.width - 50) / 100 * 0.1
        attacking *= 1.0 + (setup.tempo - 50) / 100 * 0.05
        defending *= 1.0 + (setup.pressing - 50) / 100 * 0.1
        possession *= 1.0 + (setup.defensive_line - 50) / 100 * 0.05

        low, high = cfg.modifier_bounds
        raw = {
            "attacking": attacking,
            "defending": defending,
            "possession": possession,
            "chance_creation": chance,
        }
        return {name: max(low, min(high, value * effectiveness)) for name, value in raw.items()}

    def suggest_tactical_adjustment(
        self,
        current_setup: TacticalSetup,
        current_score: int,
        opponent_score: int,
        minutes_remaining: int,
        current_possession: float,
    ) -> TacticalSetup:
        """Suggest an in-match adjustment for the scoreline and possession.

        Parameters
        ----------
        current_setup : TacticalSetup
            Setup currently in use.
        current_score : int
            Goals scored by the team being advised.
        opponent_score : int
            Goals scored by the opponent.
        minutes_remaining : int
            Regulation minutes left.
        current_possession : float
            Possession share of the team between 0 and 1.

        Returns
        -------
        TacticalSetup
            Adjusted setup; ``current_setup`` itself when nothing applies.
        """
        cfg = self.config.tactical
        difference = current_score - opponent_score
        late = minutes_remaining < cfg.late_game_minutes
        adjusted = current_setup

        if difference < 0 and late:
            adjusted = replace(
                adjusted,
                attacking_mentality=AttackingMentality.ATTACKING,
                pressing=min(100, adjusted.pressing + 20),
                tempo=min(100, adjusted.tempo + 15),
            )
        elif difference > 0 and late:
            adjusted = replace(
                adjusted,
                attacking_mentality=AttackingMentality.DEFENSIVE,
                defensive_line=max(1, adjusted.defensive_line - 15),
                pressing=max(1, adjusted.pressing - 10),
            )

        if current_possession < cfg.low_possession:
            adjusted = replace(
                adjusted,
                attacking_style=AttackingStyle.COUNTER_ATTACK,
                tempo=max(1, adjusted.tempo - 10),
            )
        elif current_possession > cfg.high_possession:
            adjusted = replace(
                adjusted,
                attacking_style=AttackingStyle.DIRECT,
                tempo=min(100, adjusted.tempo + 10),
            )

        return adjusted

    @staticmethod
    def is_position_compatible(player_position: PlayerPosition, slot: TacticalPosition) -> bool:
        """Check whether a natural line can fill a slot.

        Parameters
        ----------
        player_position : PlayerPosition
            Player's natural line.
        slot : TacticalPosition
            Slot to fill.

        Returns
        -------
        bool
            ``True`` when the slot is in the line's compatibility list.
        """
        return slot in POSITION_COMPATIBILITY[player_position]

    @staticmethod
    def _prioritise_slots(slots: List[TacticalPosition]) -> List[TacticalPosition]:
        """Reorder slots so the goalkeeper and strikers come first.

        Parameters
        ----------
        slots : List[TacticalPosition]
            Formation slots in natural order.

        Returns
        -------
        List[TacticalPosition]
            Goalkeeper, then strikers, then the remaining slots in order.
        """
        keepers = [s for s in slots if s is TacticalPosition.GOALKEEPER]
        strikers = [s for s in slots if s is TacticalPosition.STRIKER]
        others = [s for s in slots if s not in (TacticalPosition.GOALKEEPER, TacticalPosition.STRIKER)]
        return keepers + strikers + others

    def _pick_player(self, slot: TacticalPosition, candidates: List[Player]) -> Player:
        """Choose the candidate for one slot.

        Parameters
        ----------
        slot : TacticalPosition
            Slot being filled.
        candidates : List[Player]
            Unassigned players; must not be empty.

        Returns
        -------
        Player
            First natural goalkeeper for the goalkeeper slot, otherwise the
            best-rated compatible player, otherwise the best-rated player.
        """
        if slot is TacticalPosition.GOALKEEPER:
            keeper = next((p for p in candidates if p.is_goalkeeper), None)
            if keeper is not None:
                return keeper

        best: Optional[Player] = None
        for player in candidates:
            if self.is_position_compatible(player.position, slot):
                if best is None or player.overall_rating > best.overall_rating:
                    best = player
        if best is not None:
            return best

        best = candidates[0]
        for player in candidates[1:]:
            if player.overall_rating > best.overall_rating:
                best = player
        return best

    @staticmethod
    def _create_role_for_position(slot: TacticalPosition, player: Player) -> PlayerRole:
        """Build the role sliders for a player in a slot.

        Parameters
        ----------
        slot : TacticalPosition
            Slot the player fills.
        player : Player
            Player assigned to the slot.

        Returns
        -------
        PlayerRole
            Base sliders for the slot, boosted by the player's strengths.
        """
        attacking_freedom, defensive_work, width, creative_freedom = _BASE_ROLE_SLIDERS[slot]

        if slot is not TacticalPosition.GOALKEEPER:
            attacking_freedom += _boost(player.attacking_rating)
            if slot not in (TacticalPosition.STRIKER, TacticalPosition.ATTACKING_MIDFIELDER):
                defensive_work += _boost(player.defending_rating)
            creative_freedom += _boost(player.technical)

        return PlayerRole(
            position=slot,
            attacking_freedom=min(100, attacking_freedom),
            defensive_work=min(100, defensive_work),
            width=min(100, width),
            creative_freedom=min(100, creative_freedom),
            player_id=player.player_id,
        )

    @staticmethod
    def _pair_roles(players: Sequence[Player], roles: Sequence[PlayerRole]) -> List[Tuple[Player, PlayerRole]]:
        """Pair each roster player with a role.

        Parameters
        ----------
        players : Sequence[Player]
            Roster in order.
        roles : Sequence[PlayerRole]
            Roles of the same length as ``players``.

        Returns
        -------
        List[Tuple[Player, PlayerRole]]
            Pairs matched by ``player_id`` when every role carries a known id,
            otherwise by position in the sequences.
        """
        by_id = {role.player_id: role for role in roles if role.player_id is not None}
        if len(by_id) == len(roles) and all(p.player_id in by_id for p in players):
            return [(p, by_id[p.player_id]) for p in players]
        return list(zip(players, roles))
