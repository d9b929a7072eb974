"""
Spell definitions.

A Spell is a flat, immutable record of numeric dials. The same record is
read by the power/cost model at design time and by the combat engine at
run time. SpellType is a closed enum; per-type behavior elsewhere in the
package is looked up in tables keyed on every member.

Authoring surfaces exchange spells as camelCase dictionaries
(manaCost, castTime, ccEffect, ...); Spell.from_dict / Spell.to_dict
translate at that boundary.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

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
]


class SpellType(Enum):
    DAMAGE = "damage"
    HEAL = "heal"
    SHIELD = "shield"
    BUFF = "buff"
    DEBUFF = "debuff"
    CC = "cc"


class CCEffect(Enum):
    STUN = "stun"
    SLOW = "slow"
    KNOCKBACK = "knockback"
    SILENCE = "silence"


class BuffMode(Enum):
    ADDITIVE = "additive"
    MULTIPLICATIVE = "multiplicative"


# Spells that target the caster's own side
FRIENDLY_TYPES = frozenset({SpellType.HEAL, SpellType.BUFF, SpellType.SHIELD})

BASIC_ATTACK_ID = "basic-attack"
SKIP_SPELL_ID = "skip"


@dataclass(frozen=True)
class SituationalModifier:
    """Named percentage adjustment, e.g. ("target below 30% hp", +25)."""

    condition: str
    adjustment: float

    def to_dict(self) -> Dict[str, Any]:
        return {"condition": self.condition, "adjustment": self.adjustment}


# snake_case field -> camelCase record key
_CAMEL_KEYS = {
    "cast_time": "castTime",
    "mana_cost": "manaCost",
    "cc_effect": "ccEffect",
    "situational_modifiers": "situationalModifiers",
    "scaling_stat": "scalingStat",
    "target_stat": "targetStat",
    "stat_modifications": "statModifications",
    "buff_mode": "buffMode",
}


@dataclass(frozen=True)
class Spell:
    """
    A spell definition.

    Numeric dials:
        effect: percent of one base damage unit (100 = a basic hit)
        eco: ticks; 1 is instant, >1 spreads the effect over time
        aoe: number of targets
        dangerous: accuracy percent, 0 means "always hits"
        cooldown: rounds before reuse
        cast_time: seconds; >0.5 raises mana cost
    """

    id: str
    name: str
    type: SpellType
    effect: float = 100
    scale: float = 0
    eco: int = 1
    aoe: int = 1
    dangerous: float = 100
    pierce: float = 0
    cooldown: float = 0
    range: int = 1
    priority: int = 0
    cast_time: float = 0.5
    mana_cost: Optional[int] = None
    duration: Optional[int] = None
    reflection: float = 0
    cc_effect: Optional[CCEffect] = None
    buff_mode: BuffMode = BuffMode.ADDITIVE
    situational_modifiers: Tuple[SituationalModifier, ...] = ()
    scaling_stat: Optional[str] = None
    target_stat: Optional[str] = None
    # Signed stat deltas applied by buff/debuff effects at run time
    stat_modifications: Mapping[str, float] = field(default_factory=dict, hash=False)
    description: str = ""
    tags: Tuple[str, ...] = ()

    # -------------------------------------------------------------------------
    # Convenience
    # -------------------------------------------------------------------------

    @property
    def is_friendly(self) -> bool:
        """True if the spell targets allies rather than enemies."""
        return self.type in FRIENDLY_TYPES

    def with_changes(self, **changes: Any) -> Spell:
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)

    # -------------------------------------------------------------------------
    # Record conversion
    # -------------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        """Flat camelCase record for authoring surfaces and reports."""
        data: Dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, Enum):
                value = value.value
            elif f.name == "situational_modifiers":
                value = [m.to_dict() for m in value]
            elif f.name == "stat_modifications":
                value = dict(value)
            elif f.name == "tags":
                value = list(value)
            data[_CAMEL_KEYS.get(f.name, f.name)] = value
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Spell:
        """
        Build a Spell from a flat record.

        Accepts camelCase or snake_case keys. Unknown keys are ignored so
        records carrying presentation-only fields still load. Raises
        KeyError/ValueError when id, name or type are missing or invalid.
        """
        snake = {v: k for k, v in _CAMEL_KEYS.items()}
        known = {f.name for f in fields(cls)}
        kwargs: Dict[str, Any] = {}
        for key, value in data.items():
            name = snake.get(key, key)
            if name not in known or value is None:
                continue
            kwargs[name] = value

        kwargs["type"] = SpellType(kwargs["type"])
        if "cc_effect" in kwargs:
            kwargs["cc_effect"] = CCEffect(kwargs["cc_effect"])
        if "buff_mode" in kwargs:
            kwargs["buff_mode"] = BuffMode(kwargs["buff_mode"])
        if "situational_modifiers" in kwargs:
            kwargs["situational_modifiers"] = tuple(
                SituationalModifier(m["condition"], m["adjustment"])
                for m in kwargs["situational_modifiers"]
            )
        if "stat_modifications" in kwargs:
            kwargs["stat_modifications"] = dict(kwargs["stat_modifications"])
        if "tags" in kwargs:
            kwargs["tags"] = tuple(kwargs["tags"])
        return cls(id=kwargs.pop("id"), name=kwargs.pop("name"), **kwargs)


# =============================================================================
# DEFAULT CATALOG
# =============================================================================

DEFAULT_SPELLS: Tuple[Spell, ...] = (
    Spell(
        id=BASIC_ATTACK_ID, name="Basic Attack", type=SpellType.DAMAGE,
        effect=100, dangerous=0, range=1,
        description="Always available, always hits.",
    ),
    Spell(
        id="fireball", name="Fireball", type=SpellType.DAMAGE,
        effect=150, cooldown=3, dangerous=90, cast_time=1.0, range=5,
    ),
    Spell(
        id="poison", name="Poison", type=SpellType.DAMAGE,
        effect=50, cooldown=4, eco=2, dangerous=95, cast_time=0.6, range=4,
    ),
    Spell(
        id="lightning-bolt", name="Lightning Bolt", type=SpellType.DAMAGE,
        effect=120, cooldown=6, dangerous=85, pierce=20, cast_time=1.2, range=7,
    ),
    Spell(
        id="heal", name="Heal", type=SpellType.HEAL,
        effect=100, cooldown=4, cast_time=0.8, range=3,
    ),
    Spell(
        id="rejuvenate", name="Rejuvenate", type=SpellType.HEAL,
        effect=90, cooldown=5, eco=3, range=3,
    ),
    Spell(
        id="shield", name="Shield", type=SpellType.SHIELD,
        effect=40, cooldown=5, range=2, priority=1,
    ),
    Spell(
        id="war-cry", name="War Cry", type=SpellType.BUFF,
        effect=20, cooldown=6, duration=3, target_stat="damage",
        stat_modifications={"damage": 5},
    ),
    Spell(
        id="weaken", name="Weaken", type=SpellType.DEBUFF,
        effect=20, cooldown=5, duration=2, dangerous=90, target_stat="damage",
        stat_modifications={"damage": -5},
    ),
    Spell(
        id="stun", name="Stun", type=SpellType.CC,
        effect=30, cooldown=8, dangerous=75, cast_time=0.8, range=3,
        cc_effect=CCEffect.STUN,
    ),
)

_SPELLS_BY_ID: Dict[str, Spell] = {s.id: s for s in DEFAULT_SPELLS}


def get_spell(spell_id: str) -> Spell:
    """Look up a default spell by id. Raises KeyError if unknown."""
    return _SPELLS_BY_ID[spell_id]


def get_default_spells() -> List[Spell]:
    return list(DEFAULT_SPELLS)
