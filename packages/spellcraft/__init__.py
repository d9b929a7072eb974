"""
Spellcraft Balancer

A game-design balancing workbench: price spells in HP-equivalent power and
mana, then check the numbers by simulating many fights.

Core subsystems:
- calc: Spell power, mana cost, point-buy budget, damage resolution
- state: Seedable RNG, combatants, effects, combat snapshots
- combat_engine: Upkeep / intent / action turn state machine
- ai: Role-conditioned greedy intent selection
- simulation: Monte Carlo matchup batches (serial or process pool)
- analysis: Balance reports and counter matrix validation
- config: BalanceConfig and its load / save / reset lifecycle

Usage:
    from packages.spellcraft import calculate_spell_power, calculate_mana_cost, get_spell

    fireball = get_spell("fireball")
    power = calculate_spell_power(fireball).total_power
    cost = calculate_mana_cost(fireball)

    from packages.spellcraft import build_team, run_matchup, MatchupConfig, Team
    result = run_matchup(
        build_team(["tank", "dps"], Team.HERO),
        build_team(["dps", "dps"], Team.ENEMY),
        MatchupConfig(iterations=1000, seed=7),
    )
    print(result.win_rate("hero"), result.turns.median)
"""

__version__ = "0.1.0"

# RNG System
from .state.rng import XorShift128, Random, seed_to_long

# Configuration
from .config import BalanceConfig, BalanceConfigManager, StatRange
from .persistence import InMemoryConfigStore, JsonFileConfigStore

# Spells and Archetypes
from .content.spells import Spell, SpellType, CCEffect, BuffMode, SituationalModifier, DEFAULT_SPELLS, get_spell
from .content.archetypes import ARCHETYPES, COMPOSITIONS, build_combatant, build_team

# Power / Cost / Budget
from .calc.spell_power import SpellPowerBreakdown, calculate_spell_power, calculate_aoe_multiplier
from .calc.spell_cost import (
    SpellTier,
    calculate_mana_cost,
    is_balanced,
    calculate_spell_points,
    calculate_tier,
    get_spell_cost,
)
from .calc.budget import calculate_spell_budget
from .calc.damage import DamageResult, resolve_damage

# Validation
from .validation import ValidationResult, SpellValidationError, validate_spell, build_spell_instance

# Combat
from .state.combat import (
    StatBlock,
    Team,
    AIRole,
    Combatant,
    CombatState,
    CombatLogEntry,
    Intent,
    Winner,
    create_combatant,
)
from .combat_engine import (
    CombatRules,
    CombatResult,
    start_combat,
    process_upkeep,
    determine_intent,
    execute_action,
    next_turn,
    step_turn,
    run_combat,
)
from .ai import evaluate_turn, score_action

# Simulation and Analysis
from .simulation.batch import MatchupConfig, MatchupResult, CompositionBudgetError, run_matchup, iter_matchup
from .analysis.balance_report import build_balance_report, rebalance_spells
from .analysis.counter_matrix import CounterRelation, validate_counter_matrix

__all__ = [
    "XorShift128", "Random", "seed_to_long",
    "BalanceConfig", "BalanceConfigManager", "StatRange",
    "InMemoryConfigStore", "JsonFileConfigStore",
    "Spell", "SpellType", "CCEffect", "BuffMode", "SituationalModifier", "DEFAULT_SPELLS", "get_spell",
    "ARCHETYPES", "COMPOSITIONS", "build_combatant", "build_team",
    "SpellPowerBreakdown", "calculate_spell_power", "calculate_aoe_multiplier",
    "SpellTier", "calculate_mana_cost", "is_balanced", "calculate_spell_points",
    "calculate_tier", "get_spell_cost",
    "calculate_spell_budget",
    "DamageResult", "resolve_damage",
    "ValidationResult", "SpellValidationError", "validate_spell", "build_spell_instance",
    "StatBlock", "Team", "AIRole", "Combatant", "CombatState", "CombatLogEntry", "Intent",
    "Winner", "create_combatant",
    "CombatRules", "CombatResult", "start_combat", "process_upkeep", "determine_intent",
    "execute_action", "next_turn", "step_turn", "run_combat",
    "evaluate_turn", "score_action",
    "MatchupConfig", "MatchupResult", "CompositionBudgetError", "run_matchup", "iter_matchup",
    "build_balance_report", "rebalance_spells",
    "CounterRelation", "validate_counter_matrix",
]
