"""
Spell Cost Tests

Mana pricing, the power/mana balance check, and tier boundaries.
"""

import pytest

from packages.spellcraft.calc.spell_cost import (
    SpellTier,
    calculate_cast_time_penalty,
    calculate_cooldown_factor,
    calculate_mana_cost,
    calculate_tier,
    compare_to_stat_investment,
    get_spell_cost,
    get_type_efficiency,
    is_balanced,
    power_to_mana_ratio,
)
from packages.spellcraft.content.spells import SpellType


class TestManaCost:
    """Test the recommended cost formula."""

    @pytest.mark.parametrize("effect,expected", [(100, 3), (150, 4), (200, 5)])
    def test_plain_damage_costs(self, make_spell, effect, expected):
        assert calculate_mana_cost(make_spell(effect=effect)) == expected

    def test_minimum_cost_is_one(self, make_spell):
        assert calculate_mana_cost(make_spell(effect=10, dangerous=10)) == 1

    def test_zero_power_still_costs_one(self, make_spell):
        assert calculate_mana_cost(make_spell(effect=0)) == 1

    def test_cooldown_discount(self, make_spell):
        no_cd = make_spell(effect=100, cooldown=0)
        long_cd = make_spell(effect=100, cooldown=10)
        assert calculate_mana_cost(long_cd) < calculate_mana_cost(no_cd)
        assert calculate_mana_cost(long_cd) == 1

    def test_cooldown_factor_caps_at_half(self):
        assert calculate_cooldown_factor(0) == 1.0
        assert calculate_cooldown_factor(4) == pytest.approx(0.8)
        assert calculate_cooldown_factor(10) == 0.5
        assert calculate_cooldown_factor(40) == 0.5

    def test_cast_time_penalty(self):
        assert calculate_cast_time_penalty(0.3) == 1.0
        assert calculate_cast_time_penalty(0.5) == 1.0
        assert calculate_cast_time_penalty(1.0) == pytest.approx(1.1)
        assert calculate_cast_time_penalty(2.0) == pytest.approx(1.3)

    def test_slow_cast_costs_more(self, make_spell):
        fast = make_spell(effect=300)
        slow = make_spell(effect=300, cast_time=2.0)
        # 15 / 2 = 7.5 -> 8 vs 7.5 * 1.3 = 9.75 -> 10
        assert calculate_mana_cost(fast) == 8
        assert calculate_mana_cost(slow) == 10

    def test_type_efficiency_table_is_exhaustive(self):
        for spell_type in SpellType:
            assert get_type_efficiency(spell_type) > 0


class TestIsBalanced:
    """Test the 2.0 power-per-mana target."""

    def test_unset_or_zero_cost_is_unbalanced(self, make_spell):
        assert not is_balanced(make_spell(effect=100))
        assert not is_balanced(make_spell(effect=100, mana_cost=0))
        assert power_to_mana_ratio(make_spell(effect=100)) is None

    @pytest.mark.parametrize("effect", [100, 150, 200])
    def test_recommended_cost_is_balanced(self, make_spell, effect):
        spell = make_spell(effect=effect)
        priced = spell.with_changes(mana_cost=calculate_mana_cost(spell))
        assert is_balanced(priced)

    def test_tolerance_boundary(self, make_spell):
        # power 5.0: cost 2 -> ratio 2.5 (|0.5| > 0.4), cost 3 -> 1.67 (|0.33| <= 0.4)
        assert not is_balanced(make_spell(effect=100, mana_cost=2))
        assert is_balanced(make_spell(effect=100, mana_cost=3))
        assert is_balanced(make_spell(effect=100, mana_cost=2), tolerance=0.25)

    def test_overpriced_spell(self, make_spell):
        assert not is_balanced(make_spell(effect=100, mana_cost=10))


class TestTiers:
    """Test tier boundaries (inclusive upper bounds)."""

    @pytest.mark.parametrize("points,tier", [
        (0, SpellTier.COMMON),
        (20, SpellTier.COMMON),
        (21, SpellTier.UNCOMMON),
        (40, SpellTier.UNCOMMON),
        (41, SpellTier.RARE),
        (60, SpellTier.RARE),
        (61, SpellTier.EPIC),
        (80, SpellTier.EPIC),
        (81, SpellTier.LEGENDARY),
        (500, SpellTier.LEGENDARY),
    ])
    def test_boundaries(self, points, tier):
        assert calculate_tier(points) is tier

    def test_spell_cost_rounds_power(self, make_spell):
        # 150 effect at 90 accuracy -> 6.75 -> 7 points
        cost = get_spell_cost(make_spell(effect=150, dangerous=90))
        assert cost.spell_points == 7
        assert cost.tier is SpellTier.COMMON

    def test_big_aoe_cc_is_higher_tier(self, make_spell):
        # 15 * 3.0 (aoe 5) = 45 points
        cost = get_spell_cost(make_spell(spell_type=SpellType.CC, effect=100, aoe=5))
        assert cost.spell_points == 45
        assert cost.tier is SpellTier.RARE


class TestStatInvestment:
    def test_default_weights(self, make_spell):
        investment = compare_to_stat_investment(make_spell(effect=200))
        assert investment.hp_equivalent == pytest.approx(10.0)
        assert investment.damage_equivalent == pytest.approx(2.0)
        assert "10.0 HP" in investment.description
