"""
Spell Cost Model - mana cost, balance check, and power tiers.

Mana is priced at a target ratio of 2 HP-equivalent power per mana point,
then adjusted for spell type, cooldown and cast time.

    cost = round(max(1, power / 2.0 * type_eff * cooldown_factor * cast_penalty))
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Mapping, Optional

from ..content.spells import Spell, SpellType
from .spell_power import SpellPowerBreakdown, calculate_spell_power, round_half_up

__all__ = [
    "SpellTier",
    "SpellCost",
    "StatInvestment",
    "calculate_mana_cost",
    "get_recommended_mana_cost",
    "get_type_efficiency",
    "calculate_cooldown_factor",
    "calculate_cast_time_penalty",
    "is_balanced",
    "power_to_mana_ratio",
    "calculate_spell_points",
    "calculate_tier",
    "get_spell_cost",
    "compare_to_stat_investment",
    # Constants
    "POWER_PER_MANA",
    "DEFAULT_TOLERANCE",
    "TYPE_EFFICIENCY",
    "TIER_THRESHOLDS",
]


# =============================================================================
# CONSTANTS
# =============================================================================

POWER_PER_MANA = 2.0
DEFAULT_TOLERANCE = 0.2

# Utility-heavy types pay more per point of power
TYPE_EFFICIENCY: Dict[SpellType, float] = {
    SpellType.DAMAGE: 1.0,
    SpellType.HEAL: 0.8,
    SpellType.SHIELD: 0.9,
    SpellType.BUFF: 1.1,
    SpellType.DEBUFF: 1.2,
    SpellType.CC: 1.5,
}

MAX_COOLDOWN_DISCOUNT = 0.5
COOLDOWN_DISCOUNT_ROUNDS = 20
BASE_CAST_TIME = 0.5
CAST_TIME_PENALTY_RATE = 0.2


class SpellTier(Enum):
    COMMON = "Common"
    UNCOMMON = "Uncommon"
    RARE = "Rare"
    EPIC = "Epic"
    LEGENDARY = "Legendary"


# Inclusive upper bound of each named tier; anything above is Legendary
TIER_THRESHOLDS = (
    (20, SpellTier.COMMON),
    (40, SpellTier.UNCOMMON),
    (60, SpellTier.RARE),
    (80, SpellTier.EPIC),
)


@dataclass(frozen=True)
class SpellCost:
    spell_points: int
    tier: SpellTier


@dataclass(frozen=True)
class StatInvestment:
    """What a spell's power would buy if spent on raw stats instead."""

    hp_equivalent: float
    damage_equivalent: float
    description: str


# =============================================================================
# MANA COST
# =============================================================================

def get_type_efficiency(spell_type: SpellType) -> float:
    return TYPE_EFFICIENCY[spell_type]


def calculate_cooldown_factor(cooldown: float) -> float:
    """Longer cooldowns discount the cost, capped at 50% off."""
    if cooldown <= 0:
        return 1.0
    return 1 - min(MAX_COOLDOWN_DISCOUNT, cooldown / COOLDOWN_DISCOUNT_ROUNDS)


def calculate_cast_time_penalty(cast_time: float) -> float:
    if cast_time <= BASE_CAST_TIME:
        return 1.0
    return 1 + (cast_time - BASE_CAST_TIME) * CAST_TIME_PENALTY_RATE


def calculate_mana_cost(
    spell: Spell,
    stat_weights: Optional[Mapping[str, float]] = None,
    breakdown: Optional[SpellPowerBreakdown] = None,
) -> int:
    """
    Recommended mana cost of a spell, always >= 1.

    Args:
        spell: Spell definition
        stat_weights: Stat weight table passed through to the power model
        breakdown: Precomputed power breakdown, to avoid recomputing it
    """
    if breakdown is None:
        breakdown = calculate_spell_power(spell, stat_weights)
    raw = (
        breakdown.total_power / POWER_PER_MANA
        * get_type_efficiency(spell.type)
        * calculate_cooldown_factor(spell.cooldown)
        * calculate_cast_time_penalty(spell.cast_time)
    )
    return int(round_half_up(max(1.0, raw)))


def get_recommended_mana_cost(spell: Spell, stat_weights: Optional[Mapping[str, float]] = None) -> int:
    """Recommended cost for an authored spell; rebalance_spells applies it."""
    return calculate_mana_cost(spell, stat_weights)


# =============================================================================
# BALANCE CHECK
# =============================================================================

def power_to_mana_ratio(spell: Spell, stat_weights: Optional[Mapping[str, float]] = None) -> Optional[float]:
    """HP-equivalent power per mana point, or None when the spell has no cost."""
    if not spell.mana_cost:
        return None
    return calculate_spell_power(spell, stat_weights).total_power / spell.mana_cost


def is_balanced(
    spell: Spell,
    tolerance: float = DEFAULT_TOLERANCE,
    stat_weights: Optional[Mapping[str, float]] = None,
) -> bool:
    """True iff |power / mana_cost - 2.0| <= tolerance * 2.0."""
    ratio = power_to_mana_ratio(spell, stat_weights)
    if ratio is None:
        return False
    return abs(ratio - POWER_PER_MANA) <= tolerance * POWER_PER_MANA


# =============================================================================
# TIERS
# =============================================================================

def calculate_spell_points(spell: Spell, stat_weights: Optional[Mapping[str, float]] = None) -> int:
    return int(round_half_up(calculate_spell_power(spell, stat_weights).total_power))


def calculate_tier(spell_points: float) -> SpellTier:
    for upper, tier in TIER_THRESHOLDS:
        if spell_points <= upper:
            return tier
    return SpellTier.LEGENDARY


def get_spell_cost(spell: Spell, stat_weights: Optional[Mapping[str, float]] = None) -> SpellCost:
    points = calculate_spell_points(spell, stat_weights)
    return SpellCost(spell_points=points, tier=calculate_tier(points))


def compare_to_stat_investment(
    spell: Spell,
    stat_weights: Optional[Mapping[str, float]] = None,
) -> StatInvestment:
    """Express a spell's power as the HP or damage points it is worth."""
    weights = stat_weights if stat_weights is not None else {}
    power = calculate_spell_power(spell, stat_weights).total_power
    hp_weight = weights.get("hp", 1.0)
    damage_weight = weights.get("damage", 5.0)
    hp_eq = power / hp_weight
    dmg_eq = power / damage_weight
    return StatInvestment(
        hp_equivalent=hp_eq,
        damage_equivalent=dmg_eq,
        description=f"Worth ~{hp_eq:.1f} HP or ~{dmg_eq:.1f} damage",
    )
