"""
Balance report - current vs recommended mana cost for a spell collection.

For every spell: the power breakdown, its assigned cost, the recommended
cost, the signed and percent deviation, and whether it passes the balance
tolerance. rebalance_spells() applies the recommendations.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional

from ..calc.spell_cost import (
    DEFAULT_TOLERANCE, calculate_mana_cost, get_recommended_mana_cost, get_spell_cost, is_balanced,
)
from ..calc.spell_power import SpellPowerBreakdown, calculate_spell_power
from ..content.spells import Spell

__all__ = [
    "SpellBalanceEntry",
    "build_balance_report",
    "rebalance_spells",
    "format_balance_report",
]


@dataclass(frozen=True)
class SpellBalanceEntry:
    spell_id: str
    name: str
    spell_type: str
    breakdown: SpellPowerBreakdown
    current_cost: Optional[int]
    recommended_cost: int
    change: int
    percent_change: float
    balanced: bool
    tier: str

    @property
    def power(self) -> float:
        return self.breakdown.total_power

    def to_dict(self) -> Dict[str, Any]:
        return {
            "spell_id": self.spell_id,
            "name": self.name,
            "type": self.spell_type,
            "power": self.power,
            "breakdown": self.breakdown.to_dict(),
            "current_cost": self.current_cost,
            "recommended_cost": self.recommended_cost,
            "change": self.change,
            "percent_change": self.percent_change,
            "balanced": self.balanced,
            "tier": self.tier,
        }


def build_balance_report(
    spells: Iterable[Spell],
    tolerance: float = DEFAULT_TOLERANCE,
    stat_weights: Optional[Mapping[str, float]] = None,
) -> List[SpellBalanceEntry]:
    """
    One entry per spell, in input order.

    A spell without an assigned cost is reported as unbalanced with a
    percent change of 0.
    """
    entries = []
    for spell in spells:
        breakdown = calculate_spell_power(spell, stat_weights)
        recommended = calculate_mana_cost(spell, stat_weights, breakdown)
        current = spell.mana_cost
        change = recommended - (current or 0)
        percent = change / current * 100 if current else 0.0
        entries.append(SpellBalanceEntry(
            spell_id=spell.id,
            name=spell.name,
            spell_type=spell.type.value,
            breakdown=breakdown,
            current_cost=current,
            recommended_cost=recommended,
            change=change,
            percent_change=percent,
            balanced=is_balanced(spell, tolerance, stat_weights),
            tier=get_spell_cost(spell, stat_weights).tier.value,
        ))
    return entries


def rebalance_spells(
    spells: Iterable[Spell],
    stat_weights: Optional[Mapping[str, float]] = None,
) -> List[Spell]:
    """Copies of the spells with mana_cost set to the recommended cost."""
    return [
        spell.with_changes(mana_cost=get_recommended_mana_cost(spell, stat_weights))
        for spell in spells
    ]


def format_balance_report(entries: List[SpellBalanceEntry]) -> str:
    """Fixed-width text table."""
    header = f"{'Spell':<18} {'Type':<7} {'Power':>7} {'Cost':>5} {'Rec':>5} {'Chg%':>7}  {'Tier':<10} OK"
    lines = [header, "-" * len(header)]
    for e in entries:
        current = "-" if e.current_cost is None else str(e.current_cost)
        lines.append(
            f"{e.name[:18]:<18} {e.spell_type:<7} {e.power:>7.2f} {current:>5} "
            f"{e.recommended_cost:>5} {e.percent_change:>+7.1f}  {e.tier:<10} {'yes' if e.balanced else 'no'}"
        )
    return "\n".join(lines)
