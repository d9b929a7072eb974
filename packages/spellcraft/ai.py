"""
AI Decision Engine - greedy, role-conditioned intent selection.

For the acting combatant, every (available spell, legal target) pair is
scored by the role's utility function and the best pair becomes the
Intent. There is no lookahead and no memory between calls.

Roles:
    tank    - crowd-control dangerous enemies, shield allies below 50%
    dps     - confirm kills, else focus low-health and high-threat targets
    support - heal the most hurt ally, never a full-health one
    random  - uniform noise over legal pairs

"Attack" below is the target's base damage stat; health percentages use
base max hp. The kill-confirm estimate ignores mitigation and accuracy.

Usage:
    intent = evaluate_turn(combatant, state, rng)
"""

from typing import Callable, Dict, List, Optional

from .content.spells import CCEffect, SKIP_SPELL_ID, Spell, SpellType
from .state.combat import AIRole, Combatant, CombatState, Intent
from .state.rng import Random

__all__ = [
    "evaluate_turn",
    "score_action",
    "legal_targets",
    "KILL_CONFIRM_SCORE",
    "NO_SPELLS_MESSAGE",
    "NO_ENEMIES_MESSAGE",
    "NO_ACTION_MESSAGE",
]

KILL_CONFIRM_SCORE = 1000
WASTED_HEAL_PENALTY = -100
RANDOM_SCORE_RANGE = 50

NO_SPELLS_MESSAGE = "No available spells. Skipping turn."
NO_ENEMIES_MESSAGE = "No enemies left."
NO_ACTION_MESSAGE = "No valid action found."

Rng = Callable[[], float]


# =============================================================================
# Role utilities
# =============================================================================

def _score_tank(source: Combatant, spell: Spell, target: Combatant, rng: Rng) -> float:
    if spell.type is SpellType.CC or spell.cc_effect is CCEffect.STUN:
        return target.stats.damage * 2
    if spell.type is SpellType.SHIELD and target.team is source.team:
        hp_percent = target.health_percent
        if hp_percent < 50:
            return (100 - hp_percent) * 3
        return 0.0
    if spell.type is SpellType.DAMAGE:
        return target.stats.damage
    return 0.0


def _score_dps(source: Combatant, spell: Spell, target: Combatant, rng: Rng) -> float:
    if spell.type is not SpellType.DAMAGE:
        return 0.0
    estimated = source.stats.damage * spell.effect / 100
    if target.current_health <= estimated:
        return KILL_CONFIRM_SCORE
    return (100 - target.health_percent) * 2 + target.stats.damage


def _score_support(source: Combatant, spell: Spell, target: Combatant, rng: Rng) -> float:
    hp_percent = target.health_percent
    if spell.type is SpellType.HEAL:
        if hp_percent < 100:
            return (100 - hp_percent) * 5
        return WASTED_HEAL_PENALTY
    if spell.type in (SpellType.BUFF, SpellType.SHIELD):
        return 100 - hp_percent
    return 0.0


def _score_random(source: Combatant, spell: Spell, target: Combatant, rng: Rng) -> float:
    return rng() * RANDOM_SCORE_RANGE


ROLE_SCORERS: Dict[AIRole, Callable[[Combatant, Spell, Combatant, Rng], float]] = {
    AIRole.TANK: _score_tank,
    AIRole.DPS: _score_dps,
    AIRole.SUPPORT: _score_support,
    AIRole.RANDOM: _score_random,
}


def score_action(source: Combatant, spell: Spell, target: Combatant, rng: Rng) -> float:
    """Score one (spell, target) pair for the source's role. Higher is better."""
    return ROLE_SCORERS[source.role](source, spell, target, rng)


# =============================================================================
# Intent selection
# =============================================================================

def legal_targets(combatant: Combatant, spell: Spell, state: CombatState) -> List[Combatant]:
    """Living allies for heal/buff/shield, living enemies for everything else."""
    if spell.is_friendly:
        return state.living(combatant.team)
    return state.living(combatant.team.opponent)


def _skip(combatant: Combatant, message: str) -> Intent:
    return Intent(
        source_id=combatant.id,
        target_id=combatant.id,
        spell_id=SKIP_SPELL_ID,
        description=message,
    )


def evaluate_turn(
    combatant: Combatant,
    state: CombatState,
    rng: Optional[Rng] = None,
) -> Intent:
    """
    Pick the highest-scoring (spell, target) pair for the combatant.

    Ties go to the first pair encountered (spells in equipped order, then
    targets in state order). Returns a self-targeted skip intent when no
    spell is off cooldown, no enemy is alive, or nothing can be targeted.

    Args:
        combatant: Acting combatant
        state: Current combat state (read only)
        rng: Noise source for the random role. Defaults to a copy of the
            state's stream, leaving the state untouched.
    """
    if rng is None:
        rng = Random.from_state(state.rng_state)

    available = combatant.available_spells()
    if not available:
        return _skip(combatant, NO_SPELLS_MESSAGE)
    if not state.living(combatant.team.opponent):
        return _skip(combatant, NO_ENEMIES_MESSAGE)

    best_score = float("-inf")
    best: Optional[Intent] = None
    for spell in available:
        for target in legal_targets(combatant, spell, state):
            score = score_action(combatant, spell, target, rng)
            if score > best_score:
                best_score = score
                best = Intent(
                    source_id=combatant.id,
                    target_id=target.id,
                    spell_id=spell.id,
                    description=f"Casting {spell.name} on {target.name}",
                    score=score,
                )

    return best or _skip(combatant, NO_ACTION_MESSAGE)
