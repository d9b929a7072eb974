"""
Budget Model Tests

Point-buy deltas against the baseline spell.
"""

import pytest

from packages.spellcraft.calc.budget import (
    CC_EFFECT_COST,
    calculate_spell_budget,
    is_malus,
    is_net_zero,
)
from packages.spellcraft.content.spells import CCEffect, SpellType, get_spell


class TestSpellBudget:
    """Test weighted deltas."""

    def test_baseline_spell_costs_nothing(self, make_spell):
        assert calculate_spell_budget(make_spell()) == pytest.approx(0.0)
        assert is_net_zero(make_spell())

    def test_effect_increase(self, make_spell):
        assert calculate_spell_budget(make_spell(effect=150)) == pytest.approx(5.0)

    def test_maluses_refund_points(self, make_spell):
        # cooldown 3 -> -3, cast_time +0.5 -> -1
        spell = make_spell(effect=150, cooldown=3, cast_time=1.0)
        assert calculate_spell_budget(spell) == pytest.approx(1.0)

    def test_cc_effect_adds_flat_cost(self, make_spell):
        plain = make_spell(spell_type=SpellType.CC)
        stun = make_spell(spell_type=SpellType.CC, cc_effect=CCEffect.STUN)
        assert calculate_spell_budget(stun) - calculate_spell_budget(plain) == pytest.approx(CC_EFFECT_COST)

    def test_unset_optionals_count_as_zero(self, make_spell):
        assert calculate_spell_budget(make_spell(duration=None, mana_cost=None)) == pytest.approx(0.0)
        assert calculate_spell_budget(make_spell(duration=4)) == pytest.approx(2.0)

    def test_can_be_negative(self):
        # Basic attack always hits (dangerous 0): 100 below the baseline accuracy
        assert calculate_spell_budget(get_spell("basic-attack")) == pytest.approx(-10.0)

    def test_explicit_tables_override_config(self, make_spell, config):
        config.spell_weights["effect"] = 1.0
        spell = make_spell(effect=110)
        assert calculate_spell_budget(spell, config=config) == pytest.approx(10.0)
        assert calculate_spell_budget(spell, weights={"effect": 0.5}, config=config) == pytest.approx(5.0)

    def test_missing_weight_counts_as_zero(self, make_spell):
        assert calculate_spell_budget(make_spell(effect=300), weights={}) == 0.0

    def test_net_zero_target(self, make_spell):
        assert is_net_zero(make_spell(effect=150), target=5.0)
        assert not is_net_zero(make_spell(effect=150))


class TestMalus:
    def test_malus_fields(self):
        assert is_malus("cooldown")
        assert is_malus("cast_time")
        assert not is_malus("effect")
        assert not is_malus("range")
        assert not is_malus("unknown")
