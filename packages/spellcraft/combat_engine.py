"""
Combat Engine - turn-based state machine for one encounter.

Phases per actor turn:
    UPKEEP  - tick the actor's dot/hot effects, expire effects, decay cooldowns
    INTENT  - ask the AI for a (spell, target) pair
    ACTION  - resolve the intent, set the spell's cooldown, advance the turn

Design principles:
- State is never mutated - every transition copies its input and returns
  the copy as the new source of truth
- Randomness comes only from the RNG stream stored in the state, which is
  seeded from the generator passed to start_combat()
- Lookup failures (missing combatant, missing spell, dead target) degrade
  to a logged skip or fizzle; a malformed intent never raises

Usage:
    from packages.spellcraft.combat_engine import start_combat, step_turn
    from packages.spellcraft.state.rng import Random

    state = start_combat(heroes, enemies, Random(42))
    while state.winner is None and state.round <= 100:
        state = step_turn(state)

    # or, in one call
    result = run_combat(heroes, enemies, Random(42), max_rounds=100)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from .ai import evaluate_turn
from .calc.damage import resolve_damage
from .calc.spell_power import round_half_up
from .content.spells import Spell, SpellType
from .state.combat import (
    ActiveEffect,
    Combatant,
    CombatLogEntry,
    CombatPhase,
    CombatState,
    EffectKind,
    LogKind,
    Team,
    Winner,
)
from .state.rng import Random

logger = logging.getLogger(__name__)

__all__ = [
    "CombatRules",
    "CombatResult",
    "start_combat",
    "process_upkeep",
    "determine_intent",
    "execute_action",
    "next_turn",
    "check_winner",
    "step_turn",
    "run_combat",
    "DEFAULT_MAX_ROUNDS",
    "INITIATIVE_JITTER",
]

DEFAULT_MAX_ROUNDS = 100

# Random tiebreak added to speed when rolling initiative
INITIATIVE_JITTER = 0.99


@dataclass(frozen=True)
class CombatRules:
    """
    Engine policy switches.

    fizzle_advances_turn: a fizzled action ends the actor's turn. When
        False the turn index stays put and the same actor acts again.
    """

    fizzle_advances_turn: bool = True


DEFAULT_RULES = CombatRules()


@dataclass
class CombatResult:
    """Outcome of run_combat()."""

    winner: Optional[Winner]
    rounds: int
    final_state: CombatState
    timed_out: bool

    @property
    def log(self) -> List[CombatLogEntry]:
        return self.final_state.log


# =============================================================================
# Helpers
# =============================================================================

def _log(
    state: CombatState,
    message: str,
    kind: LogKind = LogKind.INFO,
    source_id: Optional[str] = None,
    target_id: Optional[str] = None,
    value: Optional[float] = None,
) -> None:
    state.log.append(CombatLogEntry(state.round, message, kind, source_id, target_id, value))


def _log_death(state: CombatState, combatant: Combatant) -> None:
    _log(state, f"{combatant.name} has died!", LogKind.DEATH, target_id=combatant.id)


def _credit(state: CombatState, source_id: Optional[str], damage: float, overkill: float) -> None:
    """Attribute dealt damage and overkill to the source's team."""
    source = state.get_combatant(source_id)
    if source is None:
        return
    state.damage_dealt[source.team.value] += damage
    state.overkill[source.team.value] += overkill


def check_winner(state: CombatState) -> Optional[Winner]:
    """Winner by survivors: one side empty wins for the other, both empty is a draw."""
    heroes_alive = bool(state.living(Team.HERO))
    enemies_alive = bool(state.living(Team.ENEMY))
    if not heroes_alive and not enemies_alive:
        return Winner.DRAW
    if not heroes_alive:
        return Winner.ENEMY
    if not enemies_alive:
        return Winner.HERO
    return None


def _advance(state: CombatState) -> CombatState:
    """Move to the next actor and check the win condition (mutates state)."""
    action_round = state.round
    state.current_turn_index += 1
    if state.current_turn_index >= len(state.turn_order):
        state.current_turn_index = 0
        state.round += 1

    state.winner = check_winner(state)
    if state.winner is not None:
        state.end_round = action_round
        state.phase = CombatPhase.ENDED
        if state.winner is Winner.DRAW:
            _log(state, "Both sides have fallen. The combat is a draw.")
        else:
            _log(state, f"Combat over: {state.winner.value} side wins.")
    else:
        state.phase = CombatPhase.UPKEEP
    return state


# =============================================================================
# Start
# =============================================================================

def start_combat(heroes: List[Combatant], enemies: List[Combatant], rng: Random) -> CombatState:
    """
    Create the opening state and roll initiative.

    Initiative = speed + rng * 0.99, highest first. The generator's stream
    continues inside the returned state; the caller's rng is advanced by
    one draw per combatant and not used afterwards.
    """
    combatants = [c.copy() for c in heroes] + [c.copy() for c in enemies]

    rolls = [(c.id, c.stats.speed + rng.random_float() * INITIATIVE_JITTER) for c in combatants]
    rolls.sort(key=lambda pair: pair[1], reverse=True)

    state = CombatState(
        combatants=combatants,
        turn_order=[cid for cid, _ in rolls],
        current_turn_index=0,
        round=1,
        phase=CombatPhase.UPKEEP,
        rng_state=rng.get_state(),
    )
    _log(state, "Combat Started!")

    state.winner = check_winner(state)
    if state.winner is not None:
        state.end_round = 1
        state.phase = CombatPhase.ENDED
    return state


# =============================================================================
# Upkeep
# =============================================================================

def process_upkeep(state: CombatState) -> CombatState:
    """
    Tick the current actor's effects and cooldowns.

    Each dot/hot applies once, then the effect is decremented, or removed
    with an "expired" entry if its duration was <= 1. Dots bypass shields.
    Positive cooldowns drop by one.
    """
    state = state.copy()
    state.phase = CombatPhase.INTENT
    actor = state.current_actor
    if actor is None or actor.is_dead:
        return state

    remaining: List[ActiveEffect] = []
    for effect in list(actor.active_effects):
        if effect.kind is EffectKind.DOT:
            before = actor.current_health
            actor.current_health = max(0, before - effect.magnitude)
            dealt = before - actor.current_health
            _credit(state, effect.source_id, dealt, max(0, effect.magnitude - before))
            _log(state, f"{actor.name} took {effect.magnitude} damage from {effect.name}.",
                 LogKind.DAMAGE, effect.source_id, actor.id, effect.magnitude)
        elif effect.kind is EffectKind.HOT:
            healed = actor.heal(effect.magnitude)
            _log(state, f"{actor.name} healed {healed:g} from {effect.name}.",
                 LogKind.HEAL, effect.source_id, actor.id, healed)

        if effect.duration > 1:
            remaining.append(effect.decremented())
        else:
            _log(state, f"{effect.name} on {actor.name} expired.", target_id=actor.id)

    actor.active_effects = remaining
    actor.cooldowns = {sid: cd - 1 for sid, cd in actor.cooldowns.items() if cd > 0}

    if actor.refresh_dead():
        _log_death(state, actor)
    return state


# =============================================================================
# Intent
# =============================================================================

def determine_intent(state: CombatState) -> CombatState:
    """Ask the AI for the current actor's intent and store it."""
    state = state.copy()
    state.phase = CombatPhase.ACTION
    actor = state.current_actor
    if actor is None or actor.is_dead:
        return state

    rng = Random.from_state(state.rng_state)
    state.active_intents[actor.id] = evaluate_turn(actor, state, rng)
    state.rng_state = rng.get_state()
    return state


# =============================================================================
# Action resolution
# =============================================================================

def _scaled_amount(caster: Combatant, spell: Spell) -> int:
    """Caster damage * effect%, rounded and floored at 0. Used for heals and shields."""
    return max(0, int(round_half_up(caster.effective_stats().damage * max(0, spell.effect) / 100)))


def _push_effect(
    state: CombatState,
    target: Combatant,
    caster: Combatant,
    spell: Spell,
    kind: EffectKind,
    name: str,
    magnitude: int = 0,
    duration: int = 1,
    stat_modifications: Optional[Dict[str, float]] = None,
) -> None:
    target.active_effects.append(ActiveEffect(
        id=state.next_effect_id(spell.id),
        name=name,
        kind=kind,
        source_id=caster.id,
        spell_id=spell.id,
        magnitude=magnitude,
        duration=duration,
        stat_modifications=dict(stat_modifications or {}),
    ))


def _resolve_attack(state: CombatState, caster: Combatant, target: Combatant,
                    spell: Spell, rng: Random) -> None:
    result = resolve_damage(caster.effective_stats(), target.effective_stats(), rng, spell.effect)
    if not result.is_hit:
        _log(state, f"{caster.name} casts {spell.name} but misses {target.name}!",
             LogKind.INFO, caster.id, target.id)
        return

    absorbed, overkill = target.take_damage(result.total_damage)
    dealt = result.total_damage - absorbed - overkill
    _credit(state, caster.id, dealt, overkill)

    crit = " (CRITICAL!)" if result.is_critical else ""
    shield = f" ({absorbed} absorbed)" if absorbed else ""
    _log(state, f"{caster.name} casts {spell.name} on {target.name} for "
                f"{result.total_damage} damage{crit}{shield}.",
         LogKind.DAMAGE, caster.id, target.id, result.total_damage)

    if spell.eco > 1 and not target.is_dead:
        per_tick = int(round_half_up(result.total_damage / spell.eco))
        if per_tick > 0:
            _push_effect(state, target, caster, spell, EffectKind.DOT,
                         f"{spell.name} (DoT)", per_tick, spell.eco)


def _resolve_heal(state: CombatState, caster: Combatant, target: Combatant,
                  spell: Spell, rng: Random) -> None:
    amount = _scaled_amount(caster, spell)
    healed = target.heal(amount)
    _log(state, f"{caster.name} casts {spell.name} on {target.name} for {healed:g} healing.",
         LogKind.HEAL, caster.id, target.id, healed)

    if spell.eco > 1:
        per_tick = int(round_half_up(amount / spell.eco))
        if per_tick > 0:
            _push_effect(state, target, caster, spell, EffectKind.HOT,
                         f"{spell.name} (HoT)", per_tick, spell.eco)


def _resolve_shield(state: CombatState, caster: Combatant, target: Combatant,
                    spell: Spell, rng: Random) -> None:
    amount = _scaled_amount(caster, spell)
    target.shield += amount
    _log(state, f"{caster.name} shields {target.name} for {amount}.",
         LogKind.SHIELD, caster.id, target.id, amount)


def _resolve_stat_change(state: CombatState, caster: Combatant, target: Combatant,
                         spell: Spell, rng: Random) -> None:
    mods = {stat: delta for stat, delta in spell.stat_modifications.items() if delta}
    if not mods:
        _log(state, f"{caster.name} casts {spell.name} on {target.name}, but it has no effect.",
             LogKind.INFO, caster.id, target.id)
        return

    kind = EffectKind.BUFF if spell.type is SpellType.BUFF else EffectKind.DEBUFF
    duration = spell.duration or 1
    _push_effect(state, target, caster, spell, kind, spell.name,
                 duration=duration, stat_modifications=mods)

    changes = ", ".join(f"{stat}: {delta:+g}" for stat, delta in mods.items())
    _log(state, f"{caster.name} casts {spell.name} on {target.name} ({changes} for {duration} turns).",
         LogKind.BUFF if kind is EffectKind.BUFF else LogKind.DEBUFF, caster.id, target.id)


ACTION_RESOLVERS: Dict[SpellType, Callable[[CombatState, Combatant, Combatant, Spell, Random], None]] = {
    SpellType.DAMAGE: _resolve_attack,
    SpellType.CC: _resolve_attack,
    SpellType.HEAL: _resolve_heal,
    SpellType.SHIELD: _resolve_shield,
    SpellType.BUFF: _resolve_stat_change,
    SpellType.DEBUFF: _resolve_stat_change,
}


def execute_action(state: CombatState, rules: CombatRules = DEFAULT_RULES) -> CombatState:
    """
    Resolve the current actor's intent and advance the turn.

    Degradations:
        actor dead/missing or no intent -> turn skipped
        target dead/missing             -> fizzle (see CombatRules)
        spell not equipped (or skip)    -> logged skip
    """
    state = state.copy()
    actor = state.current_actor
    intent = state.active_intents.pop(actor.id, None) if actor else None

    if actor is None or actor.is_dead or intent is None:
        logger.debug("Round %d: no action for %s", state.round, state.current_actor_id)
        return _advance(state)

    target = state.get_combatant(intent.target_id)
    if target is None or target.is_dead:
        _log(state, f"{actor.name}'s target is dead. Action fizzled.", LogKind.INFO, actor.id, intent.target_id)
        logger.debug("Round %d: %s fizzled on %s", state.round, actor.id, intent.target_id)
        if rules.fizzle_advances_turn:
            return _advance(state)
        state.phase = CombatPhase.UPKEEP
        return state

    spell = actor.get_spell(intent.spell_id)
    if spell is None:
        _log(state, f"{actor.name} skips the turn: {intent.description}", LogKind.INFO, actor.id)
        if not intent.is_skip:
            logger.debug("Round %d: %s has no spell %s", state.round, actor.id, intent.spell_id)
        return _advance(state)

    rng = Random.from_state(state.rng_state)
    ACTION_RESOLVERS[spell.type](state, actor, target, spell, rng)
    state.rng_state = rng.get_state()

    actor.cooldowns[spell.id] = spell.cooldown

    # Target was alive when the action started, so any death here is new
    target.refresh_dead()
    if target.is_dead:
        _log_death(state, target)

    return _advance(state)


def next_turn(state: CombatState) -> CombatState:
    """Advance to the next actor and evaluate the win condition."""
    return _advance(state.copy())


# =============================================================================
# Drivers
# =============================================================================

def step_turn(state: CombatState, rules: CombatRules = DEFAULT_RULES) -> CombatState:
    """Run upkeep, intent and action for the current actor."""
    if state.winner is not None:
        return state
    state = process_upkeep(state)
    state = determine_intent(state)
    return execute_action(state, rules)


def run_combat(
    heroes: List[Combatant],
    enemies: List[Combatant],
    rng: Random,
    max_rounds: int = DEFAULT_MAX_ROUNDS,
    rules: CombatRules = DEFAULT_RULES,
) -> CombatResult:
    """
    Fight to a winner or the round cap.

    A fight still undecided after max_rounds is reported with
    timed_out=True and no winner.
    """
    state = start_combat(heroes, enemies, rng)
    # Upper bound on actor turns, so a non-advancing fizzle policy cannot spin forever
    max_steps = max_rounds * max(1, len(state.turn_order)) * 2

    steps = 0
    while state.winner is None and state.round <= max_rounds and steps < max_steps:
        state = step_turn(state, rules)
        steps += 1

    if state.winner is None:
        logger.debug("Combat hit the %d round cap", max_rounds)
        return CombatResult(None, min(state.round, max_rounds), state, timed_out=True)
    return CombatResult(state.winner, state.end_round or state.round, state, timed_out=False)
