"""
Sample archetypes and team compositions.

An archetype is a reusable fighter template: a stat block, a loadout of
default spell ids and an AI role. Compositions are named lists of
archetype ids used by the CLI, the matchup simulator and the counter
matrix.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

from ..state.combat import AIRole, Combatant, StatBlock, Team, create_combatant
from .spells import BASIC_ATTACK_ID, get_spell

__all__ = [
    "Archetype",
    "ARCHETYPES",
    "COMPOSITIONS",
    "get_archetype",
    "build_combatant",
    "build_team",
]


@dataclass(frozen=True)
class Archetype:
    id: str
    name: str
    role: AIRole
    stats: StatBlock
    spell_ids: Tuple[str, ...] = (BASIC_ATTACK_ID,)


ARCHETYPES: Dict[str, Archetype] = {
    "tank": Archetype(
        id="tank", name="Guardian", role=AIRole.TANK,
        stats=StatBlock(hp=220, damage=18, speed=8, armor=20, evasion=5),
        spell_ids=(BASIC_ATTACK_ID, "stun", "shield"),
    ),
    "dps": Archetype(
        id="dps", name="Duelist", role=AIRole.DPS,
        stats=StatBlock(hp=130, damage=32, speed=12, txc=30, crit_chance=10),
        spell_ids=(BASIC_ATTACK_ID, "fireball", "poison"),
    ),
    "support": Archetype(
        id="support", name="Cleric", role=AIRole.SUPPORT,
        stats=StatBlock(hp=140, damage=22, speed=10),
        spell_ids=(BASIC_ATTACK_ID, "heal", "war-cry", "rejuvenate"),
    ),
    "skirmisher": Archetype(
        id="skirmisher", name="Skirmisher", role=AIRole.RANDOM,
        stats=StatBlock(hp=150, damage=25, speed=11, evasion=10),
        spell_ids=(BASIC_ATTACK_ID, "lightning-bolt", "weaken"),
    ),
}

COMPOSITIONS: Dict[str, Tuple[str, ...]] = {
    "bruisers": ("tank", "dps"),
    "glass": ("dps", "dps"),
    "sustain": ("tank", "support"),
    "mixed": ("dps", "support"),
    "solo-tank": ("tank",),
    "solo-dps": ("dps",),
    "solo-skirmisher": ("skirmisher",),
}


def get_archetype(archetype_id: str) -> Archetype:
    """Raises KeyError if unknown."""
    return ARCHETYPES[archetype_id]


def build_combatant(archetype: Archetype, team: Team, index: int = 0) -> Combatant:
    """Instantiate an archetype at full health; ids are unique per team and slot."""
    return create_combatant(
        id=f"{team.value}-{archetype.id}-{index}",
        name=f"{archetype.name} {index + 1}" if index else archetype.name,
        team=team,
        spells=[get_spell(sid) for sid in archetype.spell_ids],
        stats=archetype.stats,
        role=archetype.role,
    )


def build_team(archetype_ids: Sequence[str], team: Team) -> List[Combatant]:
    return [build_combatant(get_archetype(aid), team, i) for i, aid in enumerate(archetype_ids)]
