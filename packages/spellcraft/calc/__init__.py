"""
Calculation utilities for spell balancing and combat.

Contains:
- Spell power (HP-equivalent breakdown, pure functions)
- Spell cost (mana cost, balance check, tiers)
- Budget (point-buy deltas from a baseline spell)
- Damage resolution (hit, crit, mitigation)
"""

from .spell_power import (
    SpellPowerBreakdown,
    calculate_spell_power,
    calculate_aoe_multiplier,
    calculate_hit_chance_adjustment,
    calculate_buff_power,
    calculate_total_value,
    round_half_up,
    BASE_DAMAGE_PER_EFFECT,
    CC_MULTIPLIER,
)

from .spell_cost import (
    SpellTier,
    SpellCost,
    calculate_mana_cost,
    get_type_efficiency,
    is_balanced,
    calculate_spell_points,
    calculate_tier,
    get_spell_cost,
    compare_to_stat_investment,
    TYPE_EFFICIENCY,
)

from .budget import calculate_spell_budget, is_net_zero, is_malus

from .damage import (
    DamageResult,
    resolve_damage,
    calculate_hit_chance,
    calculate_effective_damage,
)

__all__ = [
    "SpellPowerBreakdown",
    "calculate_spell_power",
    "calculate_aoe_multiplier",
    "calculate_hit_chance_adjustment",
    "calculate_buff_power",
    "calculate_total_value",
    "round_half_up",
    "BASE_DAMAGE_PER_EFFECT",
    "CC_MULTIPLIER",
    "SpellTier",
    "SpellCost",
    "calculate_mana_cost",
    "get_type_efficiency",
    "is_balanced",
    "calculate_spell_points",
    "calculate_tier",
    "get_spell_cost",
    "compare_to_stat_investment",
    "TYPE_EFFICIENCY",
    "calculate_spell_budget",
    "is_net_zero",
    "is_malus",
    "DamageResult",
    "resolve_damage",
    "calculate_hit_chance",
    "calculate_effective_damage",
]
