"""
Spell Power Tests

HP-equivalent power model: bucket routing, AoE diminishing returns,
accuracy scaling, and exact parity constants.
"""

import pytest

from packages.spellcraft.calc.spell_power import (
    POWER_BUCKETS,
    calculate_aoe_multiplier,
    calculate_buff_power,
    calculate_hit_chance_adjustment,
    calculate_spell_power,
    calculate_total_value,
    round_half_up,
)
from packages.spellcraft.content.spells import DEFAULT_SPELLS, SpellType


class TestAoeMultiplier:
    """Test AoE diminishing returns tiers."""

    @pytest.mark.parametrize("aoe,expected", [
        (1, 1.0), (2, 1.6), (3, 2.4), (4, 2.4), (5, 3.0), (6, 3.0), (10, 5.0),
    ])
    def test_tier_values(self, aoe, expected):
        assert calculate_aoe_multiplier(aoe) == expected

    def test_single_and_below_are_one(self):
        assert calculate_aoe_multiplier(0) == 1.0
        assert calculate_aoe_multiplier(-3) == 1.0

    def test_rounds_to_one_decimal(self):
        # 7 * 0.5 = 3.5, 9 * 0.5 = 4.5 (half-up, not banker's)
        assert calculate_aoe_multiplier(7) == 3.5
        assert calculate_aoe_multiplier(9) == 4.5


class TestDirectBuckets:
    """Test instant damage/heal/shield power."""

    def test_direct_damage_effect_100(self, make_spell):
        power = calculate_spell_power(make_spell(effect=100, aoe=1, dangerous=100))
        assert power.total_power == pytest.approx(5.0)
        assert power.direct_damage == pytest.approx(5.0)
        assert power.dot_power == 0

    def test_direct_damage_effect_150(self, make_spell):
        power = calculate_spell_power(make_spell(effect=150, dangerous=100))
        assert power.total_power == pytest.approx(7.5)

    def test_heal_effect_100(self, make_spell):
        power = calculate_spell_power(make_spell(spell_type=SpellType.HEAL, effect=100))
        assert power.total_power == pytest.approx(1.0)
        assert power.direct_heal == pytest.approx(1.0)

    def test_shield_effect_50(self, make_spell):
        power = calculate_spell_power(make_spell(spell_type=SpellType.SHIELD, effect=50))
        assert power.total_power == pytest.approx(0.5)
        assert power.shield_power == pytest.approx(0.5)

    def test_cc_is_three_times_damage(self, make_spell):
        cc = calculate_spell_power(make_spell(spell_type=SpellType.CC, effect=100))
        dmg = calculate_spell_power(make_spell(effect=100))
        assert cc.cc_power == pytest.approx(15.0)
        assert cc.total_power == pytest.approx(dmg.total_power * 3)


class TestOverTimeBuckets:
    """Test eco > 1 routing."""

    def test_dot_replaces_direct(self, make_spell):
        power = calculate_spell_power(make_spell(effect=100, eco=4))
        assert power.direct_damage == 0
        assert power.dot_power == pytest.approx(5.0)

    def test_over_time_equals_instant_total(self, make_spell):
        instant = calculate_spell_power(make_spell(effect=120, eco=1))
        spread = calculate_spell_power(make_spell(effect=120, eco=3))
        assert spread.total_power == pytest.approx(instant.total_power)

    def test_hot_bucket(self, make_spell):
        power = calculate_spell_power(make_spell(spell_type=SpellType.HEAL, effect=90, eco=3))
        assert power.direct_heal == 0
        assert power.hot_power == pytest.approx(0.9)

    def test_zero_or_negative_eco_is_instant(self, make_spell):
        for eco in (0, -2):
            power = calculate_spell_power(make_spell(effect=100, eco=eco))
            assert power.direct_damage == pytest.approx(5.0)
            assert power.dot_power == 0

    def test_total_value_no_decay(self):
        assert calculate_total_value(2.5, 4) == 10.0
        assert calculate_total_value(2.5, 4, stacks=2) == 20.0
        assert calculate_total_value(1.0, -1) == 0.0


class TestBuffPower:
    """Test temporary stat change pricing."""

    def test_default_duration_is_three(self, make_spell):
        spell = make_spell(spell_type=SpellType.BUFF, effect=20)
        # 0.2 * damage weight 5 * 3 rounds * 0.6
        assert calculate_spell_power(spell).buff_power == pytest.approx(1.8)

    def test_explicit_duration_and_stat(self, make_spell):
        spell = make_spell(spell_type=SpellType.DEBUFF, effect=50, duration=2, target_stat="armor")
        # 0.5 * 1.8 * 2 * 0.6
        assert calculate_spell_power(spell).debuff_power == pytest.approx(1.08)

    def test_unknown_stat_weight_defaults_to_one(self):
        assert calculate_buff_power(1.0, "luck", duration=1) == pytest.approx(0.6)


class TestHitChance:
    """Test accuracy scaling."""

    def test_halving_dangerous_halves_power(self, make_spell):
        full = calculate_spell_power(make_spell(effect=140, dangerous=100))
        half = calculate_spell_power(make_spell(effect=140, dangerous=50))
        assert half.total_power == pytest.approx(full.total_power / 2)

    def test_zero_means_always_hits(self):
        assert calculate_hit_chance_adjustment(0) == 1.0
        assert calculate_hit_chance_adjustment(None) == 1.0

    def test_clamped(self):
        assert calculate_hit_chance_adjustment(150) == 1.0
        assert calculate_hit_chance_adjustment(-20) == 0.0


class TestTotals:
    """Test totals and invariants across the catalog."""

    def test_total_is_sum_times_multipliers(self, make_spell):
        power = calculate_spell_power(make_spell(effect=100, aoe=3, dangerous=80))
        assert power.total_power == pytest.approx(power.base_power * 2.4 * 0.8)

    def test_non_negative_for_catalog(self):
        for spell in DEFAULT_SPELLS:
            assert calculate_spell_power(spell).total_power >= 0

    def test_negative_effect_contributes_zero(self, make_spell):
        assert calculate_spell_power(make_spell(effect=-50)).total_power == 0

    def test_only_type_bucket_non_zero(self, make_spell):
        expected = {
            SpellType.DAMAGE: "direct_damage",
            SpellType.HEAL: "direct_heal",
            SpellType.SHIELD: "shield_power",
            SpellType.BUFF: "buff_power",
            SpellType.DEBUFF: "debuff_power",
            SpellType.CC: "cc_power",
        }
        buckets = set(expected.values()) | {"dot_power", "hot_power"}
        for spell_type, bucket in expected.items():
            power = calculate_spell_power(make_spell(spell_type=spell_type, effect=100)).to_dict()
            assert power[bucket] > 0
            assert all(power[b] == 0 for b in buckets - {bucket})

    def test_every_type_has_a_bucket_function(self):
        assert set(POWER_BUCKETS) == set(SpellType)

    def test_custom_weights(self, make_spell):
        power = calculate_spell_power(make_spell(effect=100), {"damage": 3.0, "hp": 1.0})
        assert power.total_power == pytest.approx(3.0)


class TestRoundHalfUp:
    def test_half_goes_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(3.5) == 4
        assert round_half_up(0.25, 1) == 0.3
