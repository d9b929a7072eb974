"""
Balance Config Tests

Config value semantics, store adapters, and the load/save/reset lifecycle.
"""

import json

import pytest

from packages.spellcraft.calc.spell_power import calculate_spell_power
from packages.spellcraft.config import (
    CONFIG_KEY,
    DEFAULT_STAT_WEIGHTS,
    BalanceConfig,
    BalanceConfigManager,
    StatRange,
)
from packages.spellcraft.persistence import InMemoryConfigStore, JsonFileConfigStore


class TestBalanceConfig:
    """Test the config value object."""

    def test_fresh_instances_do_not_share_tables(self):
        a = BalanceConfig()
        b = BalanceConfig()
        a.stat_weights["damage"] = 99
        assert b.stat_weights["damage"] == 5.0
        assert DEFAULT_STAT_WEIGHTS["damage"] == 5.0

    def test_copy_is_independent(self, config):
        clone = config.copy()
        clone.baseline["effect"] = 50
        assert config.baseline["effect"] == 100

    def test_dict_round_trip(self, config):
        config.stat_weights["armor"] = 2.5
        config.ranges["effect"] = StatRange(20, 200, 10)
        restored = BalanceConfig.from_dict(json.loads(json.dumps(config.to_dict())))
        assert restored.stat_weights["armor"] == 2.5
        assert restored.ranges["effect"] == StatRange(20, 200, 10)

    def test_partial_data_merges_over_defaults(self):
        restored = BalanceConfig.from_dict({"version": 4, "stat_weights": {"damage": 4.0}})
        assert restored.version == 4
        assert restored.stat_weights["damage"] == 4.0
        assert restored.stat_weights["hp"] == 1.0
        assert restored.range_for("pierce") == StatRange(0, 50, 5)

    def test_unknown_range_has_fallback(self, config):
        assert config.range_for("mystery").contains(50)

    def test_weights_flow_into_power_model(self, make_spell, config):
        config.stat_weights["damage"] = 10.0
        spell = make_spell(effect=100)
        assert calculate_spell_power(spell, config.stat_weights).total_power == pytest.approx(10.0)
        assert calculate_spell_power(spell).total_power == pytest.approx(5.0)


class TestStatRange:
    def test_bounds_inclusive(self):
        r = StatRange(0, 100)
        assert r.contains(0)
        assert r.contains(100)
        assert not r.contains(100.5)
        assert not r.contains(-1)

    def test_open_upper_bound(self):
        r = StatRange(1)
        assert r.contains(10 ** 6)
        assert r.describe() == ">= 1"


class TestStores:
    """Test store adapters."""

    def test_in_memory_isolates_callers(self):
        store = InMemoryConfigStore()
        data = {"stat_weights": {"damage": 3}}
        store.write("k", data)
        data["stat_weights"]["damage"] = 100
        assert store.read("k")["stat_weights"]["damage"] == 3
        store.read("k")["stat_weights"]["damage"] = 7
        assert store.read("k")["stat_weights"]["damage"] == 3

    def test_in_memory_delete(self):
        store = InMemoryConfigStore({"k": {"a": 1}})
        assert "k" in store
        store.delete("k")
        store.delete("k")
        assert store.read("k") is None

    def test_json_file_store(self, tmp_path):
        store = JsonFileConfigStore(tmp_path / "cfg")
        assert store.read(CONFIG_KEY) is None
        store.write(CONFIG_KEY, {"version": 2})
        assert (tmp_path / "cfg" / f"{CONFIG_KEY}.json").exists()
        assert store.read(CONFIG_KEY) == {"version": 2}
        store.delete(CONFIG_KEY)
        assert store.read(CONFIG_KEY) is None


class TestConfigManager:
    """Test the load / save-as-default / reset lifecycle."""

    def test_load_defaults_when_empty(self):
        manager = BalanceConfigManager(InMemoryConfigStore())
        config = manager.load()
        assert config.version == 1
        assert config.stat_weights == DEFAULT_STAT_WEIGHTS

    def test_load_returns_copies(self):
        manager = BalanceConfigManager(InMemoryConfigStore())
        first = manager.load()
        first.stat_weights["damage"] = 42
        assert manager.load().stat_weights["damage"] == 5.0

    def test_save_bumps_version_and_persists(self):
        store = InMemoryConfigStore()
        manager = BalanceConfigManager(store)
        config = manager.load()
        config.stat_weights["damage"] = 4.5
        saved = manager.save_as_default(config)
        assert saved.version == 2

        reloaded = BalanceConfigManager(store).load()
        assert reloaded.version == 2
        assert reloaded.stat_weights["damage"] == 4.5

    def test_save_twice_keeps_increasing(self):
        manager = BalanceConfigManager(InMemoryConfigStore())
        stale = manager.load()
        manager.save_as_default(stale)
        assert manager.save_as_default(stale).version == 3

    def test_reset(self):
        store = InMemoryConfigStore()
        manager = BalanceConfigManager(store)
        config = manager.load()
        config.stat_weights["damage"] = 1.0
        manager.save_as_default(config)

        reset = manager.reset()
        assert reset.stat_weights["damage"] == 5.0
        assert CONFIG_KEY not in store
        assert manager.load().version == 1

    def test_file_backed_lifecycle(self, tmp_path):
        manager = BalanceConfigManager(JsonFileConfigStore(tmp_path))
        config = manager.load()
        config.spell_weights["cooldown"] = -2.0
        manager.save_as_default(config)
        reloaded = BalanceConfigManager(JsonFileConfigStore(tmp_path)).load()
        assert reloaded.spell_weights["cooldown"] == -2.0
