"""
Damage Resolution - hit, crit and mitigation for one attack.

Pure functions over two StatBlocks and an injected RNG. No state.

Resolution order:
1. Crit/fail roll (rng * 100): < crit_chance is a crit,
   >= 100 - fail_chance is a critical failure
2. Hit chance = clamp(txc + txc_mod + 50 - evasion, 1, 100)
3. Hit roll (rng * 100) < hit chance
4. Raw damage = attacker damage * effect / 100
5. Crit multiplier and mitigation, in the order the defender's
   config_apply_before_crit flag selects
6. Round to int, floor 0
"""

from dataclasses import dataclass
from typing import Callable

from ..state.combat import StatBlock
from .spell_power import round_half_up

__all__ = [
    "DamageResult",
    "resolve_damage",
    "calculate_hit_chance",
    "calculate_effective_damage",
    # Constants
    "BASE_HIT_CHANCE",
    "MAX_ARMOR_REDUCTION",
    "MIN_MITIGATED_DAMAGE",
]


# =============================================================================
# CONSTANTS
# =============================================================================

BASE_HIT_CHANCE = 50
MIN_HIT_CHANCE = 1
MAX_HIT_CHANCE = 100

# Armor: reduction = armor / (armor + 10 * damage), capped at 90%
ARMOR_DAMAGE_FACTOR = 10
MAX_ARMOR_REDUCTION = 0.90

# Any hit that lands deals at least 1 after mitigation
MIN_MITIGATED_DAMAGE = 1


@dataclass(frozen=True)
class DamageResult:
    total_damage: int
    is_hit: bool
    is_critical: bool
    hit_chance: float
    raw_damage: float


# =============================================================================
# COMPONENT FORMULAS
# =============================================================================

def calculate_hit_chance(txc: float, evasion: float) -> float:
    """txc + 50 - evasion, clamped to [1, 100]."""
    return max(MIN_HIT_CHANCE, min(MAX_HIT_CHANCE, txc + BASE_HIT_CHANCE - evasion))


def calculate_effective_damage(
    raw_damage: float,
    armor: float,
    resistance: float,
    armor_pen: float,
    pen_percent: float,
    flat_first: bool,
) -> float:
    """
    Damage after armor and resistance.

    Armor reduction shrinks as the hit grows. flat_first applies armor
    before resistance; the result is never below MIN_MITIGATED_DAMAGE.
    """
    eff_armor = max(0, armor - armor_pen)
    res_factor = max(0.0, min(1.0, max(0, resistance - pen_percent) / 100))

    armor_reduction = 0.0
    if eff_armor > 0 and raw_damage > 0:
        armor_reduction = min(
            MAX_ARMOR_REDUCTION,
            eff_armor / (eff_armor + ARMOR_DAMAGE_FACTOR * raw_damage),
        )

    damage = raw_damage
    if flat_first:
        damage *= 1 - armor_reduction
        damage *= 1 - res_factor
    else:
        damage *= 1 - res_factor
        damage *= 1 - armor_reduction

    return max(MIN_MITIGATED_DAMAGE, damage)


# =============================================================================
# MAIN ENTRY POINT
# =============================================================================

def resolve_damage(
    attacker: StatBlock,
    defender: StatBlock,
    rng: Callable[[], float],
    effect: float = 100,
) -> DamageResult:
    """
    Resolve one attack.

    Args:
        attacker: Attacker's effective stats
        defender: Defender's effective stats
        rng: Zero-argument callable returning floats in [0, 1)
        effect: Spell effect percent scaling the attacker's damage

    Consumes exactly two RNG draws (crit/fail roll, hit roll).
    """
    crit_fail_roll = rng() * 100
    txc_modifier = 0.0
    multiplier = 1.0
    is_critical = False

    if crit_fail_roll < attacker.crit_chance:
        is_critical = True
        txc_modifier = attacker.crit_txc_bonus
        multiplier = attacker.crit_mult
    elif crit_fail_roll >= 100 - attacker.fail_chance:
        txc_modifier = -attacker.fail_txc_malus
        multiplier = attacker.fail_mult

    hit_chance = calculate_hit_chance(attacker.txc + txc_modifier, defender.evasion)
    hit_roll = rng() * 100
    if hit_roll >= hit_chance:
        return DamageResult(0, False, is_critical, hit_chance, 0.0)

    base = attacker.damage * max(0, effect) / 100

    def mitigate(amount: float) -> float:
        return calculate_effective_damage(
            amount,
            defender.armor,
            defender.resistance,
            attacker.armor_pen,
            attacker.pen_percent,
            defender.config_flat_first,
        )

    if defender.config_apply_before_crit:
        final = mitigate(base) * multiplier
    else:
        final = mitigate(base * multiplier)

    return DamageResult(
        total_damage=int(round_half_up(max(0, final))),
        is_hit=True,
        is_critical=is_critical,
        hit_chance=hit_chance,
        raw_damage=base * multiplier,
    )
