"""
State module - combat snapshots and RNG.

Contains:
- RNG system (XorShift128, seedable Random wrapper)
- Combat state (stat blocks, combatants, effects, intents, log)
"""

# RNG System
from .rng import XorShift128, Random, RNGState, seed_to_long

# Combat State
from .combat import (
    StatBlock,
    Team,
    AIRole,
    EffectKind,
    LogKind,
    CombatPhase,
    Winner,
    ActiveEffect,
    Combatant,
    Intent,
    CombatLogEntry,
    CombatState,
    create_combatant,
)

__all__ = [
    "XorShift128",
    "Random",
    "RNGState",
    "seed_to_long",
    "StatBlock",
    "Team",
    "AIRole",
    "EffectKind",
    "LogKind",
    "CombatPhase",
    "Winner",
    "ActiveEffect",
    "Combatant",
    "Intent",
    "CombatLogEntry",
    "CombatState",
    "create_combatant",
]
