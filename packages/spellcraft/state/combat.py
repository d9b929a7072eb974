"""
Combat State - everything needed to continue a simulated encounter.

Designed for fast copying: the engine copies the incoming state at the top
of every transition and only ever mutates the copy. A snapshot handed to a
caller is never touched again.

Frozen values (StatBlock, ActiveEffect, Intent, CombatLogEntry) are shared
between snapshots; mutable containers (combatants, lists, dicts) are copied.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Tuple

from .rng import RNGState

if TYPE_CHECKING:
    from ..content.spells import Spell

__all__ = [
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


# =============================================================================
# Enums
# =============================================================================

class Team(Enum):
    HERO = "hero"
    ENEMY = "enemy"

    @property
    def opponent(self) -> Team:
        return Team.ENEMY if self is Team.HERO else Team.HERO


class AIRole(Enum):
    TANK = "tank"
    DPS = "dps"
    SUPPORT = "support"
    RANDOM = "random"


class EffectKind(Enum):
    BUFF = "buff"
    DEBUFF = "debuff"
    DOT = "dot"
    HOT = "hot"


class LogKind(Enum):
    INFO = "info"
    DAMAGE = "damage"
    HEAL = "heal"
    SHIELD = "shield"
    BUFF = "buff"
    DEBUFF = "debuff"
    DEATH = "death"


class CombatPhase(Enum):
    NOT_STARTED = "not_started"
    UPKEEP = "upkeep"
    INTENT = "intent"
    ACTION = "action"
    ENDED = "ended"


class Winner(Enum):
    HERO = "hero"
    ENEMY = "enemy"
    DRAW = "draw"  # both sides wiped out by the same action


# =============================================================================
# Stat Block
# =============================================================================

@dataclass(frozen=True)
class StatBlock:
    """
    Combat stats read by damage resolution and the AI.

    Percentages (crit_chance, fail_chance, resistance, pen_percent) are
    0-100. txc and evasion are flat: hit chance = txc + 50 - evasion.
    """

    hp: int = 150
    damage: float = 25
    speed: float = 10
    txc: float = 25
    evasion: float = 0

    # Critical module
    crit_chance: float = 5
    crit_mult: float = 2.0
    crit_txc_bonus: float = 20
    fail_chance: float = 5
    fail_mult: float = 0.0
    fail_txc_malus: float = 20

    # Mitigation module
    armor: float = 0
    resistance: float = 0
    armor_pen: float = 0
    pen_percent: float = 0

    # Mitigation order flags
    config_flat_first: bool = True
    config_apply_before_crit: bool = False

    def with_modifications(self, mods: Mapping[str, float]) -> StatBlock:
        """Return a copy with signed deltas added. Unknown keys are ignored."""
        numeric = {
            f.name for f in fields(self)
            if not f.name.startswith("config_")
        }
        changes = {
            name: getattr(self, name) + delta
            for name, delta in mods.items()
            if name in numeric and delta
        }
        if not changes:
            return self
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


# =============================================================================
# Effects
# =============================================================================

@dataclass(frozen=True)
class ActiveEffect:
    """
    A timed effect on a combatant.

    magnitude is the per-tick damage (dot) or healing (hot); buff/debuff
    effects carry stat_modifications instead. duration counts the upkeeps
    still to run; an effect at duration 1 ticks once more and expires.
    """

    id: str
    name: str
    kind: EffectKind
    source_id: str
    spell_id: str
    magnitude: int = 0
    duration: int = 1
    stat_modifications: Mapping[str, float] = field(default_factory=dict, hash=False)

    def __post_init__(self):
        if self.duration < 0:
            object.__setattr__(self, "duration", 0)

    def decremented(self) -> ActiveEffect:
        return replace(self, duration=self.duration - 1)


# =============================================================================
# Combatant
# =============================================================================

@dataclass
class Combatant:
    """
    A fighter in an encounter.

    Health only changes through take_damage()/heal(), which keep is_dead in
    step with current_health.
    """

    id: str
    name: str
    team: Team
    stats: StatBlock
    current_health: float
    equipped_spells: List[Spell] = field(default_factory=list)
    active_effects: List[ActiveEffect] = field(default_factory=list)
    # spell id -> rounds remaining
    cooldowns: Dict[str, float] = field(default_factory=dict)
    role: AIRole = AIRole.DPS
    shield: int = 0
    is_dead: bool = False

    def __post_init__(self):
        self.is_dead = self.current_health <= 0

    # -------------------------------------------------------------------------
    # Health
    # -------------------------------------------------------------------------

    @property
    def max_health(self) -> float:
        return self.stats.hp

    @property
    def health_percent(self) -> float:
        if self.stats.hp <= 0:
            return 0.0
        return self.current_health / self.stats.hp * 100

    def take_damage(self, amount: float) -> Tuple[int, int]:
        """
        Apply damage, shield first. Returns (absorbed, overkill).

        Health is clamped at 0; overkill is the damage past zero.
        """
        amount = max(0, amount)
        absorbed = min(max(0, self.shield), amount)
        self.shield -= absorbed
        remaining = amount - absorbed
        overkill = max(0, remaining - self.current_health)
        self.current_health = max(0, self.current_health - remaining)
        self.refresh_dead()
        return absorbed, overkill

    def heal(self, amount: float) -> float:
        """Heal up to max health. Returns the amount actually restored."""
        before = self.current_health
        self.current_health = min(self.stats.hp, self.current_health + max(0, amount))
        self.refresh_dead()
        return self.current_health - before

    def refresh_dead(self) -> bool:
        """Recompute is_dead. Returns True if this call killed the combatant."""
        was_dead = self.is_dead
        self.is_dead = self.current_health <= 0
        if self.is_dead and not was_dead:
            self.active_effects = []
            self.shield = 0
            return True
        return False

    # -------------------------------------------------------------------------
    # Spells and stats
    # -------------------------------------------------------------------------

    def get_spell(self, spell_id: str) -> Optional[Spell]:
        for spell in self.equipped_spells:
            if spell.id == spell_id:
                return spell
        return None

    def available_spells(self) -> List[Spell]:
        return [s for s in self.equipped_spells if self.cooldowns.get(s.id, 0) <= 0]

    def effective_stats(self) -> StatBlock:
        """Base stats with active buff/debuff deltas folded in."""
        stats = self.stats
        for effect in self.active_effects:
            if effect.kind in (EffectKind.BUFF, EffectKind.DEBUFF) and effect.stat_modifications:
                stats = stats.with_modifications(effect.stat_modifications)
        return stats

    def copy(self) -> Combatant:
        """Copy with fresh effect list and cooldown dict (spells and stats are immutable)."""
        return Combatant(
            id=self.id,
            name=self.name,
            team=self.team,
            stats=self.stats,
            current_health=self.current_health,
            equipped_spells=self.equipped_spells,
            active_effects=self.active_effects.copy(),
            cooldowns=self.cooldowns.copy(),
            role=self.role,
            shield=self.shield,
            is_dead=self.is_dead,
        )


def create_combatant(
    id: str,
    name: str,
    team: Team,
    spells: List[Spell],
    stats: Optional[StatBlock] = None,
    role: AIRole = AIRole.DPS,
    current_health: Optional[float] = None,
) -> Combatant:
    """Create a combatant at full health unless current_health is given."""
    stats = stats or StatBlock()
    return Combatant(
        id=id,
        name=name,
        team=team,
        stats=stats,
        current_health=stats.hp if current_health is None else current_health,
        equipped_spells=list(spells),
        role=role,
    )


# =============================================================================
# Intents and Log
# =============================================================================

@dataclass(frozen=True)
class Intent:
    """An AI-selected (spell, target) pair awaiting resolution."""

    source_id: str
    target_id: str
    spell_id: str
    description: str
    score: float = 0.0

    @property
    def is_skip(self) -> bool:
        return self.spell_id == "skip"


@dataclass(frozen=True)
class CombatLogEntry:
    round: int
    message: str
    kind: LogKind = LogKind.INFO
    source_id: Optional[str] = None
    target_id: Optional[str] = None
    value: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "round": self.round,
            "message": self.message,
            "kind": self.kind.value,
        }
        if self.source_id is not None:
            data["source_id"] = self.source_id
        if self.target_id is not None:
            data["target_id"] = self.target_id
        if self.value is not None:
            data["value"] = self.value
        return data


# =============================================================================
# Combat State
# =============================================================================

@dataclass
class CombatState:
    """
    Complete encounter snapshot.

    turn_order is rolled once at combat start. rng_state holds the
    (seed0, seed1, counter) of the encounter's RNG so each transition is a
    pure function of the snapshot it was given.
    """

    combatants: List[Combatant]
    turn_order: List[str] = field(default_factory=list)
    current_turn_index: int = 0
    round: int = 0
    log: List[CombatLogEntry] = field(default_factory=list)
    active_intents: Dict[str, Intent] = field(default_factory=dict)
    winner: Optional[Winner] = None
    # Round in which the deciding action happened
    end_round: Optional[int] = None
    phase: CombatPhase = CombatPhase.NOT_STARTED
    rng_state: RNGState = (0, 0, 0)

    # Deterministic effect ids
    effect_seq: int = 0

    # Per-team metrics (keyed by Team.value)
    damage_dealt: Dict[str, float] = field(default_factory=lambda: {"hero": 0, "enemy": 0})
    overkill: Dict[str, float] = field(default_factory=lambda: {"hero": 0, "enemy": 0})

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def get_combatant(self, combatant_id: Optional[str]) -> Optional[Combatant]:
        for c in self.combatants:
            if c.id == combatant_id:
                return c
        return None

    @property
    def current_actor_id(self) -> Optional[str]:
        if not self.turn_order:
            return None
        return self.turn_order[self.current_turn_index % len(self.turn_order)]

    @property
    def current_actor(self) -> Optional[Combatant]:
        return self.get_combatant(self.current_actor_id)

    def living(self, team: Team) -> List[Combatant]:
        return [c for c in self.combatants if c.team is team and not c.is_dead]

    def next_effect_id(self, prefix: str) -> str:
        """Allocate a deterministic effect id (mutates this snapshot)."""
        self.effect_seq += 1
        return f"{prefix}-{self.effect_seq}"

    # -------------------------------------------------------------------------
    # Copy
    # -------------------------------------------------------------------------

    def copy(self) -> CombatState:
        """
        Copy for the next transition.

        Log entries and intents are frozen, so copying their containers
        is enough.
        """
        return CombatState(
            combatants=[c.copy() for c in self.combatants],
            turn_order=self.turn_order.copy(),
            current_turn_index=self.current_turn_index,
            round=self.round,
            log=self.log.copy(),
            active_intents=self.active_intents.copy(),
            winner=self.winner,
            end_round=self.end_round,
            phase=self.phase,
            rng_state=self.rng_state,
            effect_seq=self.effect_seq,
            damage_dealt=self.damage_dealt.copy(),
            overkill=self.overkill.copy(),
        )
