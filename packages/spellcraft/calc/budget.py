"""
Budget/Delta Cost Model - point-buy cost of a spell relative to a baseline.

Used while authoring: a designer tunes dials until the spell nets out to a
target number of points. Independent of the mana cost model; the two are
not expected to agree.

    budget = sum((value - baseline) * weight for each balanceable field)
             + 2 if the spell carries a crowd-control effect
"""

from typing import Mapping, Optional

from ..config import BALANCEABLE_FIELDS, BalanceConfig, DEFAULT_BASELINE, DEFAULT_SPELL_WEIGHTS
from ..content.spells import Spell

__all__ = [
    "calculate_spell_budget",
    "is_net_zero",
    "is_malus",
    "CC_EFFECT_COST",
]

CC_EFFECT_COST = 2.0


def _field_value(spell: Spell, name: str) -> float:
    value = getattr(spell, name, None)
    return value or 0


def calculate_spell_budget(
    spell: Spell,
    weights: Optional[Mapping[str, float]] = None,
    baseline: Optional[Mapping[str, float]] = None,
    config: Optional[BalanceConfig] = None,
) -> float:
    """
    Point-buy budget of a spell. May be fractional or negative.

    Explicit weights/baseline take precedence over the config's tables;
    with neither, the package defaults are used. Missing spell values,
    baseline values and weights all count as 0.
    """
    if weights is None:
        weights = config.spell_weights if config else DEFAULT_SPELL_WEIGHTS
    if baseline is None:
        baseline = config.baseline if config else DEFAULT_BASELINE

    budget = 0.0
    for name in BALANCEABLE_FIELDS:
        delta = _field_value(spell, name) - (baseline.get(name) or 0)
        budget += delta * weights.get(name, 0)

    if spell.cc_effect is not None:
        budget += CC_EFFECT_COST
    return budget


def is_net_zero(
    spell: Spell,
    target: float = 0.0,
    tolerance: float = 1e-9,
    config: Optional[BalanceConfig] = None,
) -> bool:
    """True if the spell's budget hits the target point total."""
    return abs(calculate_spell_budget(spell, config=config) - target) <= tolerance


def is_malus(field_name: str, weights: Optional[Mapping[str, float]] = None) -> bool:
    """A malus field refunds points as its value goes up (negative weight)."""
    weights = weights if weights is not None else DEFAULT_SPELL_WEIGHTS
    return weights.get(field_name, 0) < 0
