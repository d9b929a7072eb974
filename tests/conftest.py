"""
Shared pytest fixtures for the Spellcraft Balancer test suite.

This module provides reusable fixtures for:
- RNG with known seeds
- Fresh balance configs (never shared between tests)
- Spells and duel combatants
"""

import os
import sys

import pytest

# Ensure project root is in path
_project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, _project_root)

from packages.spellcraft.config import BalanceConfig
from packages.spellcraft.content.spells import Spell, SpellType, get_spell
from packages.spellcraft.state.combat import AIRole, StatBlock, Team, create_combatant
from packages.spellcraft.state.rng import Random


# =============================================================================
# RNG Fixtures
# =============================================================================


@pytest.fixture
def rng_seed_42():
    """RNG initialized with seed 42 for deterministic tests."""
    return Random(42)


class FixedRng:
    """Callable returning a fixed sequence of rolls, cycling at the end."""

    def __init__(self, *values):
        self.values = list(values)
        self.calls = 0

    def __call__(self):
        value = self.values[self.calls % len(self.values)]
        self.calls += 1
        return value


@pytest.fixture
def fixed_rng():
    """Factory for scripted RNG rolls."""
    return FixedRng


# =============================================================================
# Config Fixtures
# =============================================================================


@pytest.fixture
def config():
    """Fresh default BalanceConfig per test."""
    return BalanceConfig()


# =============================================================================
# Spell Fixtures
# =============================================================================


@pytest.fixture
def make_spell():
    """Factory for ad-hoc spells: make_spell(type=SpellType.HEAL, effect=50)."""
    def _make(spell_id="test-spell", spell_type=SpellType.DAMAGE, **kwargs):
        return Spell(id=spell_id, name=kwargs.pop("name", spell_id.title()), type=spell_type, **kwargs)
    return _make


# =============================================================================
# Combatant Fixtures
# =============================================================================

# Always hits (txc 50 -> 100% vs 0 evasion), never crits or fumbles
SURE_HIT_STATS = StatBlock(hp=100, damage=25, speed=10, txc=50, crit_chance=0, fail_chance=0)


@pytest.fixture
def make_combatant():
    """Factory: make_combatant("a", Team.HERO, spells=[...], role=AIRole.DPS, ...)."""
    def _make(cid, team, spells=None, stats=None, role=AIRole.DPS, current_health=None, name=None):
        return create_combatant(
            id=cid,
            name=name or cid.upper(),
            team=team,
            spells=spells if spells is not None else [get_spell("basic-attack")],
            stats=stats or SURE_HIT_STATS,
            role=role,
            current_health=current_health,
        )
    return _make
