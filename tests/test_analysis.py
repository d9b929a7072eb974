"""
Analysis Tests

Balance reports and counter matrix validation.
"""

import logging

import pytest

from packages.spellcraft.analysis.balance_report import (
    build_balance_report,
    format_balance_report,
    rebalance_spells,
)
from packages.spellcraft.analysis.counter_matrix import (
    CounterRelation,
    expected_range,
    validate_counter_matrix,
)
from packages.spellcraft.calc.spell_cost import calculate_mana_cost, get_recommended_mana_cost
from packages.spellcraft.content.archetypes import COMPOSITIONS
from packages.spellcraft.content.spells import DEFAULT_SPELLS
from packages.spellcraft.simulation.batch import MatchupConfig


class TestBalanceReport:
    """Test current vs recommended cost reporting."""

    def test_one_entry_per_spell_in_order(self):
        entries = build_balance_report(DEFAULT_SPELLS)
        assert [e.spell_id for e in entries] == [s.id for s in DEFAULT_SPELLS]

    def test_unpriced_spells(self):
        entry = build_balance_report(DEFAULT_SPELLS[:1])[0]
        assert entry.current_cost is None
        assert entry.change == entry.recommended_cost
        assert entry.percent_change == 0.0
        assert not entry.balanced

    def test_deviation(self, make_spell):
        # recommended 3 vs assigned 6
        entry = build_balance_report([make_spell(effect=100, mana_cost=6)])[0]
        assert entry.recommended_cost == 3
        assert entry.change == -3
        assert entry.percent_change == pytest.approx(-50.0)
        assert not entry.balanced
        assert entry.power == pytest.approx(5.0)

    def test_rebalance_applies_recommendations(self):
        rebalanced = rebalance_spells(DEFAULT_SPELLS)
        for before, after in zip(DEFAULT_SPELLS, rebalanced):
            assert after.mana_cost == get_recommended_mana_cost(before) == calculate_mana_cost(before)
            assert before.mana_cost is None
        assert all(e.change == 0 for e in build_balance_report(rebalanced))

    def test_format(self):
        text = format_balance_report(build_balance_report(DEFAULT_SPELLS))
        lines = text.splitlines()
        assert lines[0].startswith("Spell")
        assert len(lines) == len(DEFAULT_SPELLS) + 2
        assert "Fireball" in text

    def test_to_dict(self, make_spell):
        data = build_balance_report([make_spell(effect=100, mana_cost=3)])[0].to_dict()
        assert data["balanced"] is True
        assert data["tier"] == "Common"
        assert data["breakdown"]["direct_damage"] == pytest.approx(5.0)


class TestCounterMatrix:
    """Test win-rate bands and pair simulation."""

    def test_expected_ranges(self):
        assert expected_range(CounterRelation.STRONG) == pytest.approx((0.6, 1.0))
        assert expected_range(CounterRelation.WEAK) == pytest.approx((0.0, 0.4))
        assert expected_range(CounterRelation.EVEN) == pytest.approx((0.4, 0.6))
        assert expected_range(CounterRelation.STRONG, 0.7) == (1.0, 1.0)

    def test_mirror_match_is_even(self):
        matrix = {"solo-dps": {"solo-dps": CounterRelation.EVEN}}
        (result,) = validate_counter_matrix(matrix, COMPOSITIONS, MatchupConfig(iterations=300), tolerance=0.15)
        assert result.iterations == 300
        assert result.passed

    def test_impossible_claim_fails(self):
        matrix = {"solo-dps": {"solo-dps": CounterRelation.WEAK}}
        (result,) = validate_counter_matrix(matrix, COMPOSITIONS, MatchupConfig(iterations=100), tolerance=0.45)
        assert not result.passed
        assert result.to_dict()["relation"] == "Weak"

    def test_unknown_compositions_skipped(self, caplog):
        matrix = {"nobody": {"glass": CounterRelation.STRONG}, "glass": {"ghosts": CounterRelation.EVEN}}
        with caplog.at_level(logging.WARNING):
            results = validate_counter_matrix(matrix, COMPOSITIONS, MatchupConfig(iterations=1))
        assert results == []
        assert "nobody" in caplog.text
        assert "ghosts" in caplog.text
