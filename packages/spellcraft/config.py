"""
Balance configuration - stat weights, budget baseline, and authoring ranges.

A BalanceConfig is a plain value object. Power, cost, budget and validation
functions take it (or one of its tables) as an explicit argument; nothing in
the package reads a module-level singleton. BalanceConfigManager owns the
load / save-as-default / reset lifecycle on top of a ConfigStore.

Usage:
    from packages.spellcraft.config import BalanceConfig, BalanceConfigManager
    from packages.spellcraft.persistence import InMemoryConfigStore

    manager = BalanceConfigManager(InMemoryConfigStore())
    config = manager.load()                  # defaults merged with stored data
    tuned = config.copy()
    tuned.stat_weights["damage"] = 4.5
    manager.save_as_default(tuned)           # bumps version, persists
    manager.reset()                          # back to factory defaults
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .persistence import ConfigStore

logger = logging.getLogger(__name__)

__all__ = [
    "StatRange",
    "BalanceConfig",
    "BalanceConfigManager",
    "DEFAULT_STAT_WEIGHTS",
    "DEFAULT_SPELL_WEIGHTS",
    "DEFAULT_BASELINE",
    "DEFAULT_RANGES",
    "DEFAULT_DESCRIPTIONS",
    "BALANCEABLE_FIELDS",
    "CONFIG_KEY",
]


# =============================================================================
# DEFAULT TABLES
# =============================================================================

# HP-equivalent value of one point of each stat
DEFAULT_STAT_WEIGHTS: Dict[str, float] = {
    "hp": 1.0,
    "damage": 5.0,
    "speed": 1.0,
    "txc": 2.0,
    "evasion": 2.0,
    "crit_chance": 5.0,
    "crit_mult": 10.0,
    "armor": 1.8,
    "resistance": 1.5,
    "armor_pen": 1.5,
    "pen_percent": 1.0,
}

# Spell fields that participate in the point-buy budget
BALANCEABLE_FIELDS = (
    "effect",
    "scale",
    "eco",
    "aoe",
    "dangerous",
    "pierce",
    "cast_time",
    "cooldown",
    "range",
    "priority",
    "mana_cost",
    "duration",
    "reflection",
)

# Budget points per unit of deviation from the baseline spell.
# Negative weights are maluses: raising the field refunds points.
DEFAULT_SPELL_WEIGHTS: Dict[str, float] = {
    "effect": 0.1,
    "scale": 1.0,
    "eco": 1.0,
    "aoe": 1.0,
    "dangerous": 0.1,
    "pierce": 0.2,
    "cast_time": -2.0,
    "cooldown": -1.0,
    "range": 0.0,
    "priority": 0.0,
    "mana_cost": 0.0,
    "duration": 0.5,
    "reflection": 0.1,
}

# Reference spell: a single-target instant 100% hit that always lands
DEFAULT_BASELINE: Dict[str, float] = {
    "effect": 100,
    "scale": 0,
    "eco": 1,
    "aoe": 1,
    "dangerous": 100,
    "pierce": 0,
    "cast_time": 0.5,
    "cooldown": 0,
    "range": 1,
    "priority": 0,
    "mana_cost": 0,
    "duration": 0,
    "reflection": 0,
}


@dataclass(frozen=True)
class StatRange:
    """Inclusive authoring range for one spell field."""

    min: float
    max: Optional[float] = None  # None = unbounded above
    step: float = 1.0

    def contains(self, value: float) -> bool:
        if value < self.min:
            return False
        return self.max is None or value <= self.max

    def describe(self) -> str:
        if self.max is None:
            return f">= {self.min:g}"
        return f"{self.min:g}..{self.max:g}"

    def to_dict(self) -> Dict[str, Any]:
        return {"min": self.min, "max": self.max, "step": self.step}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> StatRange:
        return cls(min=data["min"], max=data.get("max"), step=data.get("step", 1.0))


DEFAULT_RANGES: Dict[str, StatRange] = {
    "effect": StatRange(10, 300, 5),
    "scale": StatRange(-10, 10, 1),
    "eco": StatRange(1, None, 1),
    "aoe": StatRange(1, None, 1),
    "dangerous": StatRange(0, 100, 5),
    "pierce": StatRange(0, 50, 5),
    "cast_time": StatRange(0.1, 2.0, 0.1),
    "cooldown": StatRange(0, 20, 1),
    "range": StatRange(1, 10, 1),
    "priority": StatRange(-5, 5, 1),
    "mana_cost": StatRange(0, 200, 1),
    "duration": StatRange(0, None, 1),
    "reflection": StatRange(0, 100, 5),
}

DEFAULT_DESCRIPTIONS: Dict[str, str] = {
    "effect": "Percentage of the caster's base damage unit (100 = one basic hit)",
    "scale": "Linear modifier applied on top of effect",
    "eco": "Ticks the effect is spread over (1 = instant)",
    "aoe": "Number of targets hit",
    "dangerous": "Accuracy percentage (0 = always hits)",
    "pierce": "Percentage of mitigation ignored",
    "cast_time": "Seconds to cast; slower spells cost more mana",
    "cooldown": "Rounds before the spell can be used again",
    "range": "Maximum distance to target",
    "priority": "Initiative modifier",
    "mana_cost": "Resource cost paid on cast",
    "duration": "Rounds a buff or debuff lasts",
    "reflection": "Percentage of damage reflected",
}

CONFIG_KEY = "balance_config"


# =============================================================================
# CONFIG OBJECT
# =============================================================================

@dataclass
class BalanceConfig:
    """
    Complete balancing configuration.

    Every table is copied on construction of a new instance via copy(),
    so tests and callers can tweak one config without touching another.
    """

    version: int = 1
    stat_weights: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_STAT_WEIGHTS))
    spell_weights: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_SPELL_WEIGHTS))
    baseline: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_BASELINE))
    ranges: Dict[str, StatRange] = field(default_factory=lambda: dict(DEFAULT_RANGES))
    descriptions: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_DESCRIPTIONS))

    def copy(self) -> BalanceConfig:
        return BalanceConfig(
            version=self.version,
            stat_weights=self.stat_weights.copy(),
            spell_weights=self.spell_weights.copy(),
            baseline=self.baseline.copy(),
            ranges=self.ranges.copy(),
            descriptions=self.descriptions.copy(),
        )

    def range_for(self, field_name: str) -> StatRange:
        return self.ranges.get(field_name, StatRange(0, 100, 1))

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-compatible dictionary."""
        return {
            "version": self.version,
            "stat_weights": dict(self.stat_weights),
            "spell_weights": dict(self.spell_weights),
            "baseline": dict(self.baseline),
            "ranges": {name: r.to_dict() for name, r in self.ranges.items()},
            "descriptions": dict(self.descriptions),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> BalanceConfig:
        """
        Build a config from stored data, merged over the defaults.

        Keys missing from the stored tables keep their default values, so
        data saved by an older version still loads with newly added stats.
        """
        config = cls()
        config.version = int(data.get("version", config.version))
        config.stat_weights.update(data.get("stat_weights", {}))
        config.spell_weights.update(data.get("spell_weights", {}))
        config.baseline.update(data.get("baseline", {}))
        config.descriptions.update(data.get("descriptions", {}))
        for name, raw in data.get("ranges", {}).items():
            config.ranges[name] = StatRange.from_dict(raw)
        return config


# =============================================================================
# LIFECYCLE
# =============================================================================

class BalanceConfigManager:
    """
    Load / save-as-default / reset lifecycle for a BalanceConfig.

    The manager caches the loaded config for the session. The returned
    object is always a copy: changes only become the default through an
    explicit save_as_default() call.
    """

    def __init__(self, store: ConfigStore, key: str = CONFIG_KEY):
        self.store = store
        self.key = key
        self._current: Optional[BalanceConfig] = None

    def load(self) -> BalanceConfig:
        """Return the session config, reading the store on first use."""
        if self._current is None:
            data = self.store.read(self.key)
            if data is None:
                logger.info("No stored balance config, using defaults")
                self._current = BalanceConfig()
            else:
                self._current = BalanceConfig.from_dict(data)
                logger.info("Loaded balance config v%d", self._current.version)
        return self._current.copy()

    def save_as_default(self, config: BalanceConfig) -> BalanceConfig:
        """Persist config as the new default and bump its version."""
        current_version = self._current.version if self._current else 0
        saved = config.copy()
        saved.version = max(config.version, current_version) + 1
        self.store.write(self.key, saved.to_dict())
        self._current = saved
        logger.info("Saved balance config v%d", saved.version)
        return saved.copy()

    def reset(self) -> BalanceConfig:
        """Discard stored data and return factory defaults."""
        self.store.delete(self.key)
        self._current = BalanceConfig()
        logger.info("Balance config reset to defaults")
        return self._current.copy()
