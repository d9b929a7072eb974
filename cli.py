#!/usr/bin/env python3
"""
Spellcraft Balancer - Command Line Interface

Price spells, run duels, and validate matchups from the terminal.

Usage:
    python cli.py report
    python cli.py report --rebalance --json
    python cli.py duel --hero dps --enemy tank --seed DUEL1
    python cli.py matchup --side-a bruisers --side-b glass --iterations 2000 --workers 4
    python cli.py counters --iterations 500
    python cli.py config show
    python cli.py config set-weight damage 4.5
    python cli.py config reset
"""

import argparse
import json
import logging
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from packages.spellcraft.analysis.balance_report import (
    build_balance_report, format_balance_report, rebalance_spells,
)
from packages.spellcraft.analysis.counter_matrix import CounterRelation, validate_counter_matrix
from packages.spellcraft.calc.spell_cost import SpellTier
from packages.spellcraft.combat_engine import run_combat
from packages.spellcraft.config import BalanceConfigManager
from packages.spellcraft.content.archetypes import ARCHETYPES, COMPOSITIONS, build_team
from packages.spellcraft.content.spells import DEFAULT_SPELLS, Spell
from packages.spellcraft.persistence import JsonFileConfigStore
from packages.spellcraft.simulation.batch import CompositionBudgetError, MatchupConfig, run_matchup
from packages.spellcraft.state.combat import Team
from packages.spellcraft.state.rng import Random, seed_to_long

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = os.path.join("~", ".spellcraft")

# Design intent checked by the counters command
DEFAULT_COUNTER_MATRIX = {
    "bruisers": {"glass": CounterRelation.STRONG, "sustain": CounterRelation.EVEN},
    "glass": {"sustain": CounterRelation.WEAK},
    "solo-dps": {"solo-skirmisher": CounterRelation.EVEN},
}


def setup_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format='%(asctime)s - %(levelname)s - %(message)s',
    )


def load_config(args):
    return BalanceConfigManager(JsonFileConfigStore(args.config_dir))


def load_spells(path):
    """Load spell records from a JSON list, or the default catalog."""
    if not path:
        return list(DEFAULT_SPELLS)
    with open(path, "r", encoding="utf-8") as f:
        return [Spell.from_dict(record) for record in json.load(f)]


def resolve_side(name):
    if name in COMPOSITIONS:
        return COMPOSITIONS[name]
    if name in ARCHETYPES:
        return (name,)
    raise SystemExit(f"Unknown composition or archetype: {name}")


# =============================================================================
# COMMANDS
# =============================================================================

def cmd_report(args) -> int:
    config = load_config(args).load()
    spells = load_spells(args.spells)
    if args.rebalance:
        spells = rebalance_spells(spells, config.stat_weights)

    entries = build_balance_report(spells, args.tolerance, config.stat_weights)
    if args.json:
        print(json.dumps([e.to_dict() for e in entries], indent=2))
    else:
        print(format_balance_report(entries))
        unbalanced = sum(1 for e in entries if not e.balanced)
        print(f"\n{len(entries) - unbalanced}/{len(entries)} spells within ±{args.tolerance:.0%}")
    return 0


def cmd_duel(args) -> int:
    heroes = build_team(resolve_side(args.hero), Team.HERO)
    enemies = build_team(resolve_side(args.enemy), Team.ENEMY)
    result = run_combat(heroes, enemies, Random(seed_to_long(args.seed)), args.max_rounds)

    if args.json:
        print(json.dumps({
            "winner": result.winner.value if result.winner else None,
            "rounds": result.rounds,
            "timed_out": result.timed_out,
            "log": [e.to_dict() for e in result.log],
        }, indent=2))
        return 0

    for entry in result.log:
        print(f"[R{entry.round:>3}] {entry.message}")
    outcome = "timed out" if result.timed_out else f"winner: {result.winner.value}"
    print(f"\n{outcome} after {result.rounds} rounds")
    return 0


def cmd_matchup(args) -> int:
    side_a = build_team(resolve_side(args.side_a), Team.HERO)
    side_b = build_team(resolve_side(args.side_b), Team.ENEMY)
    config = MatchupConfig(
        iterations=args.iterations,
        max_rounds=args.max_rounds,
        seed=seed_to_long(args.seed),
        budget=args.budget,
        max_tier=SpellTier(args.max_tier) if args.max_tier else None,
        log_sample_size=args.sample_logs,
        n_workers=args.workers,
    )

    def progress(done, total):
        if not args.json:
            print(f"\r{done}/{total}", end="", file=sys.stderr, flush=True)

    try:
        result = run_matchup(side_a, side_b, config, progress_callback=progress)
    except CompositionBudgetError as e:
        print(f"Budget check failed: {e}", file=sys.stderr)
        return 1
    if not args.json:
        print(file=sys.stderr)

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
        return 0

    print(f"{args.side_a} vs {args.side_b}: {result.iterations_run} runs")
    for side, stats in result.sides.items():
        print(f"  {side:<6} win {stats.win_rate:6.1%}  dmg/turn {stats.avg_damage_per_turn:6.1f}  "
              f"overkill {stats.avg_overkill:5.1f}  efficiency {stats.damage_efficiency:5.1%}")
    print(f"  draws {result.draws} ({result.draw_rate:.1%})  timeouts {result.timeouts} ({result.timeout_rate:.1%})")
    t = result.turns
    print(f"  rounds mean {t.mean:.1f} median {t.median:g} min {t.min} max {t.max}")
    return 0


def cmd_counters(args) -> int:
    config = MatchupConfig(iterations=args.iterations, seed=seed_to_long(args.seed), n_workers=args.workers)
    results = validate_counter_matrix(DEFAULT_COUNTER_MATRIX, COMPOSITIONS, config, args.tolerance)

    if args.json:
        print(json.dumps([r.to_dict() for r in results], indent=2))
    else:
        for r in results:
            low, high = r.expected_range
            status = "PASS" if r.passed else "FAIL"
            print(f"{status} {r.attacker_id} vs {r.defender_id} ({r.relation.value}): "
                  f"{r.actual_win_rate:.1%} expected [{low:.0%}, {high:.0%}]")
    return 0 if all(r.passed for r in results) else 1


def cmd_config(args) -> int:
    manager = load_config(args)
    if args.action == "reset":
        config = manager.reset()
    elif args.action == "set-weight":
        config = manager.load()
        config.stat_weights[args.stat] = args.value
        config = manager.save_as_default(config)
    else:
        config = manager.load()
    print(json.dumps(config.to_dict(), indent=2))
    return 0


# =============================================================================
# MAIN
# =============================================================================

def main():
    parser = argparse.ArgumentParser(
        description="Spellcraft Balancer - spell pricing and matchup simulation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s report --tolerance 0.2
  %(prog)s duel --hero dps --enemy tank --seed 42
  %(prog)s matchup --side-a bruisers --side-b glass --iterations 5000
  %(prog)s counters --iterations 500
  %(prog)s config show
        """
    )
    parser.add_argument("--config-dir", default=DEFAULT_CONFIG_DIR, help="Balance config directory")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Report command
    report_parser = subparsers.add_parser("report", help="Balance report for a spell list")
    report_parser.add_argument("--spells", help="JSON file with spell records (default catalog if omitted)")
    report_parser.add_argument("--tolerance", "-t", type=float, default=0.2, help="Balance tolerance")
    report_parser.add_argument("--rebalance", action="store_true", help="Apply recommended costs first")
    report_parser.add_argument("--json", "-j", action="store_true", help="Output in JSON format")

    # Duel command
    duel_parser = subparsers.add_parser("duel", help="Run one fight and print its log")
    duel_parser.add_argument("--hero", default="dps", help="Hero archetype or composition")
    duel_parser.add_argument("--enemy", default="tank", help="Enemy archetype or composition")
    duel_parser.add_argument("--seed", "-s", default="0", help="Seed (number or word)")
    duel_parser.add_argument("--max-rounds", type=int, default=100, help="Round cap")
    duel_parser.add_argument("--json", "-j", action="store_true", help="Output in JSON format")

    # Matchup command
    matchup_parser = subparsers.add_parser("matchup", help="Monte Carlo matchup between two sides")
    matchup_parser.add_argument("--side-a", required=True, help="Hero composition or archetype")
    matchup_parser.add_argument("--side-b", required=True, help="Enemy composition or archetype")
    matchup_parser.add_argument("--iterations", "-n", type=int, default=1000, help="Number of fights")
    matchup_parser.add_argument("--max-rounds", type=int, default=100, help="Round cap per fight")
    matchup_parser.add_argument("--seed", "-s", default="0", help="Base seed")
    matchup_parser.add_argument("--budget", type=float, help="Max spell points per side")
    matchup_parser.add_argument("--max-tier", choices=[t.value for t in SpellTier],
                                help="Highest spell tier either side may equip")
    matchup_parser.add_argument("--sample-logs", type=int, default=0, help="Fight logs to keep")
    matchup_parser.add_argument("--workers", "-w", type=int, default=1, help="Worker processes (0 = auto)")
    matchup_parser.add_argument("--json", "-j", action="store_true", help="Output in JSON format")

    # Counters command
    counters_parser = subparsers.add_parser("counters", help="Validate the counter matrix")
    counters_parser.add_argument("--iterations", "-n", type=int, default=500, help="Fights per pair")
    counters_parser.add_argument("--tolerance", "-t", type=float, default=0.10, help="Win-rate tolerance")
    counters_parser.add_argument("--seed", "-s", default="0", help="Base seed")
    counters_parser.add_argument("--workers", "-w", type=int, default=1, help="Worker processes (0 = auto)")
    counters_parser.add_argument("--json", "-j", action="store_true", help="Output in JSON format")

    # Config command
    config_parser = subparsers.add_parser("config", help="Show, tune or reset the balance config")
    config_sub = config_parser.add_subparsers(dest="action")
    config_sub.add_parser("show", help="Print the active config")
    config_sub.add_parser("reset", help="Restore factory defaults")
    set_parser = config_sub.add_parser("set-weight", help="Set a stat weight and save as default")
    set_parser.add_argument("stat", help="Stat name (e.g. damage)")
    set_parser.add_argument("value", type=float, help="HP-equivalent weight")

    args = parser.parse_args()
    setup_logging(args.verbose)

    if not args.command:
        parser.print_help()
        return 1

    # Dispatch to command handler
    commands = {
        "report": cmd_report,
        "duel": cmd_duel,
        "matchup": cmd_matchup,
        "counters": cmd_counters,
        "config": cmd_config,
    }

    handler = commands.get(args.command)
    if handler:
        return handler(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
