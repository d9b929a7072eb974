"""
Spell template validation and construction.

validate_spell() never raises: it returns every field-level violation so an
authoring surface can show them all at once. build_spell_instance() is the
hard gate - an invalid template raises SpellValidationError. Going over the
point budget is only a warning.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional

from .config import BalanceConfig
from .content.spells import Spell, SpellType
from .calc.spell_cost import SpellTier, calculate_tier, calculate_spell_points
from .calc.budget import calculate_spell_budget

logger = logging.getLogger(__name__)

__all__ = [
    "FieldViolation",
    "ValidationResult",
    "SpellValidationError",
    "SpellInstance",
    "SpellDiff",
    "validate_spell",
    "build_spell_instance",
    "optimize_allocation",
    "compare_spell_instances",
]

# Fields always range-checked; optional fields are checked only when set
_REQUIRED_RANGE_FIELDS = (
    "effect", "scale", "eco", "aoe", "dangerous", "pierce",
    "cast_time", "cooldown", "range", "priority",
)
_OPTIONAL_RANGE_FIELDS = ("mana_cost", "duration", "reflection")


@dataclass(frozen=True)
class FieldViolation:
    field: str
    message: str
    kind: str = "range"  # "range" | "required"

    def __str__(self) -> str:
        return f"{self.field}: {self.message}"


@dataclass
class ValidationResult:
    errors: List[FieldViolation] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    def fields(self) -> List[str]:
        return [e.field for e in self.errors]


class SpellValidationError(ValueError):
    """Raised when a derived object is built from an invalid template."""

    def __init__(self, violations: List[FieldViolation]):
        self.violations = list(violations)
        super().__init__("Invalid spell template: " + "; ".join(str(v) for v in violations))


@dataclass(frozen=True)
class SpellInstance:
    """A validated spell with its point cost and tier."""

    spell: Spell
    spell_points: int
    tier: SpellTier
    budget_points: float
    budget: Optional[float] = None
    over_budget: bool = False


@dataclass(frozen=True)
class SpellDiff:
    points_delta: int
    budget_delta: float
    tier_change: Optional[str] = None


def validate_spell(spell: Spell, config: Optional[BalanceConfig] = None) -> ValidationResult:
    """Collect required-field and range violations for a spell template."""
    config = config or BalanceConfig()
    result = ValidationResult()

    for name in ("id", "name"):
        if not getattr(spell, name):
            result.errors.append(FieldViolation(name, f"{name} is required", kind="required"))
    if not isinstance(spell.type, SpellType):
        result.errors.append(FieldViolation("type", "type is required", kind="required"))

    for name in _REQUIRED_RANGE_FIELDS + _OPTIONAL_RANGE_FIELDS:
        value = getattr(spell, name)
        if value is None:
            continue
        bounds = config.range_for(name)
        if not bounds.contains(value):
            result.errors.append(FieldViolation(name, f"must be {bounds.describe()} (got {value:g})"))

    return result


def build_spell_instance(
    template: Spell,
    budget: Optional[float] = None,
    config: Optional[BalanceConfig] = None,
) -> SpellInstance:
    """
    Validate a template and derive its SpellInstance.

    Raises:
        SpellValidationError: template has any field violation
    """
    config = config or BalanceConfig()
    result = validate_spell(template, config)
    if not result.valid:
        raise SpellValidationError(result.errors)

    points = calculate_spell_points(template, config.stat_weights)
    over_budget = budget is not None and points > budget
    if over_budget:
        logger.warning(
            "Spell %s: %d spell points exceed budget %g; marked over-budget",
            template.id, points, budget,
        )

    return SpellInstance(
        spell=template,
        spell_points=points,
        tier=calculate_tier(points),
        budget_points=calculate_spell_budget(template, config=config),
        budget=budget,
        over_budget=over_budget,
    )


def optimize_allocation(partial: Mapping[str, Any]) -> Spell:
    """Fill a partially authored record with zero-cost defaults."""
    data = {
        "id": "untitled",
        "name": "Untitled Spell",
        "type": SpellType.DAMAGE.value,
        "mana_cost": 0,
        "duration": 0,
    }
    data.update({k: v for k, v in partial.items() if v is not None})
    if isinstance(data["type"], SpellType):
        data["type"] = data["type"].value
    return Spell.from_dict(data)


def compare_spell_instances(a: SpellInstance, b: SpellInstance) -> SpellDiff:
    tier_change = None
    if a.tier != b.tier:
        tier_change = f"{a.tier.value} -> {b.tier.value}"
    return SpellDiff(
        points_delta=b.spell_points - a.spell_points,
        budget_delta=b.budget_points - a.budget_points,
        tier_change=tier_change,
    )
