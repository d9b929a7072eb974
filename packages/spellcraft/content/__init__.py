"""
Content definitions - spells, sample archetypes and compositions.
"""

from .spells import (
    SpellType,
    CCEffect,
    BuffMode,
    SituationalModifier,
    Spell,
    BASIC_ATTACK_ID,
    SKIP_SPELL_ID,
    DEFAULT_SPELLS,
    get_spell,
    get_default_spells,
)

from .archetypes import (
    Archetype,
    ARCHETYPES,
    COMPOSITIONS,
    get_archetype,
    build_combatant,
    build_team,
)

__all__ = [
    "SpellType",
    "CCEffect",
    "BuffMode",
    "SituationalModifier",
    "Spell",
    "BASIC_ATTACK_ID",
    "SKIP_SPELL_ID",
    "DEFAULT_SPELLS",
    "get_spell",
    "get_default_spells",
    "Archetype",
    "ARCHETYPES",
    "COMPOSITIONS",
    "get_archetype",
    "build_combatant",
    "build_team",
]
