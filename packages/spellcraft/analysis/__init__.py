"""
Balance analysis - cost reports and counter matrix checks.
"""

from .balance_report import SpellBalanceEntry, build_balance_report, rebalance_spells, format_balance_report
from .counter_matrix import CounterRelation, CounterpickValidationResult, expected_range, validate_counter_matrix

__all__ = [
    "SpellBalanceEntry",
    "build_balance_report",
    "rebalance_spells",
    "format_balance_report",
    "CounterRelation",
    "CounterpickValidationResult",
    "expected_range",
    "validate_counter_matrix",
]
