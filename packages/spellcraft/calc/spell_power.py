"""
Spell Power Model - HP-equivalent power of a spell.

Pure functions, no state. Every value is expressed as "HP-equivalent":
how much raw health the effect is worth, using a stat-weight table.

Calculation order:
1. Effect percentage (negative effects count as 0)
2. Bucket by spell type (over-time bucket when eco > 1)
3. Sum of buckets
4. AoE multiplier (diminishing returns)
5. Hit chance adjustment (dangerous / 100)

The constants below define the game's balance curve and are reproduced
exactly; tune them through the stat-weight table rather than by editing.
"""

import math
from dataclasses import dataclass, asdict
from typing import Callable, Dict, Mapping, Optional

from ..config import DEFAULT_STAT_WEIGHTS
from ..content.spells import BuffMode, Spell, SpellType

__all__ = [
    "SpellPowerBreakdown",
    "calculate_spell_power",
    "calculate_aoe_multiplier",
    "calculate_hit_chance_adjustment",
    "calculate_buff_power",
    "calculate_total_value",
    "round_half_up",
    # Constants
    "BASE_DAMAGE_PER_EFFECT",
    "CC_MULTIPLIER",
    "BUFF_TEMPORARY_FACTOR",
    "DEFAULT_BUFF_DURATION",
    "AOE_TIERS",
]


# =============================================================================
# CONSTANTS
# =============================================================================

# 100% effect of direct damage is worth 5 HP
BASE_DAMAGE_PER_EFFECT = 5.0

# Disabling a target is worth ~3x equivalent direct damage
CC_MULTIPLIER = 3.0

# Temporary stat changes are worth 60% of a permanent one
BUFF_TEMPORARY_FACTOR = 0.6
DEFAULT_BUFF_DURATION = 3

# (max targets in tier, coefficient); above the last tier uses AOE_LARGE_COEF
AOE_TIERS = ((3, 0.8), (5, 0.6))
AOE_LARGE_COEF = 0.5


def round_half_up(value: float, ndigits: int = 0) -> float:
    """Round with .5 going up, as game balance sheets do (not banker's rounding)."""
    factor = 10 ** ndigits
    return math.floor(value * factor + 0.5) / factor


# =============================================================================
# RESULT TYPE
# =============================================================================

@dataclass(frozen=True)
class SpellPowerBreakdown:
    """Per-bucket HP-equivalent power of a spell."""

    direct_damage: float = 0.0
    direct_heal: float = 0.0
    dot_power: float = 0.0
    hot_power: float = 0.0
    shield_power: float = 0.0
    buff_power: float = 0.0
    debuff_power: float = 0.0
    cc_power: float = 0.0
    aoe_multiplier: float = 1.0
    hit_chance_adjustment: float = 1.0
    total_power: float = 0.0

    @property
    def base_power(self) -> float:
        """Sum of buckets before AoE and accuracy scaling."""
        return (
            self.direct_damage + self.direct_heal + self.dot_power
            + self.hot_power + self.shield_power + self.buff_power
            + self.debuff_power + self.cc_power
        )

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


# =============================================================================
# COMPONENT FORMULAS
# =============================================================================

def calculate_aoe_multiplier(aoe: float) -> float:
    """
    Diminishing-returns multiplier for hitting several targets.

    aoe <= 1 -> 1.0, 2-3 -> aoe*0.8, 4-5 -> aoe*0.6, 6+ -> aoe*0.5,
    each rounded to one decimal.
    """
    if aoe <= 1:
        return 1.0
    for max_targets, coef in AOE_TIERS:
        if aoe <= max_targets:
            return round_half_up(aoe * coef, 1)
    return round_half_up(aoe * AOE_LARGE_COEF, 1)


def calculate_hit_chance_adjustment(dangerous: Optional[float]) -> float:
    """Linear accuracy scaling. 0 or unset means the spell always hits."""
    if not dangerous:
        return 1.0
    return min(100.0, max(0.0, dangerous)) / 100


def calculate_total_value(per_tick: float, duration: int, stacks: int = 1) -> float:
    """Total value of an over-time effect: no decay, every tick counts fully."""
    return per_tick * max(0, duration) * stacks


def calculate_buff_power(
    value: float,
    stat: str,
    mode: BuffMode = BuffMode.ADDITIVE,
    duration: int = DEFAULT_BUFF_DURATION,
    stat_weights: Optional[Mapping[str, float]] = None,
    stacks: int = 1,
) -> float:
    """
    HP-equivalent of a temporary stat change.

    Both modes are priced the same: value is already normalized to a
    fraction of one stat point's worth.
    """
    weights = stat_weights if stat_weights is not None else DEFAULT_STAT_WEIGHTS
    weight = weights.get(stat, 1.0)
    return value * weight * max(0, duration) * stacks * BUFF_TEMPORARY_FACTOR


# =============================================================================
# PER-TYPE BUCKETS
# =============================================================================

def _damage_buckets(spell: Spell, value: float, weights: Mapping[str, float]) -> Dict[str, float]:
    damage_weight = weights.get("damage", BASE_DAMAGE_PER_EFFECT)
    if spell.eco > 1:
        total = calculate_total_value(value / spell.eco, spell.eco)
        return {"dot_power": total * damage_weight}
    return {"direct_damage": value * damage_weight}


def _heal_buckets(spell: Spell, value: float, weights: Mapping[str, float]) -> Dict[str, float]:
    hp_weight = weights.get("hp", 1.0)
    if spell.eco > 1:
        total = calculate_total_value(value / spell.eco, spell.eco)
        return {"hot_power": total * hp_weight}
    return {"direct_heal": value * hp_weight}


def _shield_buckets(spell: Spell, value: float, weights: Mapping[str, float]) -> Dict[str, float]:
    return {"shield_power": value * weights.get("hp", 1.0)}


def _stat_change_power(spell: Spell, value: float, weights: Mapping[str, float]) -> float:
    return calculate_buff_power(
        value,
        spell.target_stat or "damage",
        spell.buff_mode,
        spell.duration or DEFAULT_BUFF_DURATION,
        weights,
    )


def _buff_buckets(spell: Spell, value: float, weights: Mapping[str, float]) -> Dict[str, float]:
    return {"buff_power": _stat_change_power(spell, value, weights)}


def _debuff_buckets(spell: Spell, value: float, weights: Mapping[str, float]) -> Dict[str, float]:
    return {"debuff_power": _stat_change_power(spell, value, weights)}


def _cc_buckets(spell: Spell, value: float, weights: Mapping[str, float]) -> Dict[str, float]:
    return {"cc_power": value * weights.get("damage", BASE_DAMAGE_PER_EFFECT) * CC_MULTIPLIER}


BucketFn = Callable[[Spell, float, Mapping[str, float]], Dict[str, float]]

POWER_BUCKETS: Dict[SpellType, BucketFn] = {
    SpellType.DAMAGE: _damage_buckets,
    SpellType.HEAL: _heal_buckets,
    SpellType.SHIELD: _shield_buckets,
    SpellType.BUFF: _buff_buckets,
    SpellType.DEBUFF: _debuff_buckets,
    SpellType.CC: _cc_buckets,
}


# =============================================================================
# MAIN ENTRY POINT
# =============================================================================

def calculate_spell_power(
    spell: Spell,
    stat_weights: Optional[Mapping[str, float]] = None,
) -> SpellPowerBreakdown:
    """
    Calculate the HP-equivalent power breakdown of a spell.

    Args:
        spell: Spell definition
        stat_weights: Stat -> HP weight table (defaults to DEFAULT_STAT_WEIGHTS)

    Returns:
        SpellPowerBreakdown with total_power =
        sum(buckets) * aoe_multiplier * hit_chance_adjustment
    """
    weights = stat_weights if stat_weights is not None else DEFAULT_STAT_WEIGHTS
    value = max(0.0, spell.effect) / 100

    buckets = POWER_BUCKETS[spell.type](spell, value, weights)
    aoe_multiplier = calculate_aoe_multiplier(spell.aoe)
    hit_adjustment = calculate_hit_chance_adjustment(spell.dangerous)
    total = sum(buckets.values()) * aoe_multiplier * hit_adjustment

    return SpellPowerBreakdown(
        aoe_multiplier=aoe_multiplier,
        hit_chance_adjustment=hit_adjustment,
        total_power=total,
        **buckets,
    )
