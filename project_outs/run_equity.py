"""run_equity.py — command line for Project Outs.

Runs one scenario locally and prints equity, EV, pot odds and outs, or
starts the ZMQ equity worker.

Usage::

    python run_equity.py --hero "As Ks" --board "Qs Js 2d" --opponents 1 --pot 100 --bet 50
    python run_equity.py --hero "Ah Ad" --board "Kc 7d 2s 9h" --trials 5000 --seed 7 --json
    python run_equity.py --serve --bind tcp://0.0.0.0:5557

Environment variables (optional, overridden by arguments)
---------------------------------------------------------
``OUTS_ENGINE_TRIALS``       Default Monte-Carlo trial budget.
``OUTS_ENGINE_EVALUATOR``    ``treys`` or ``combo``.
``OUTS_WORKER_BIND``         Worker bind address.
"""

from __future__ import annotations

import argparse
import json
from typing import Sequence

from core.equity_engine import EquityResult
from core.equity_worker import EquityWorker
from tools.equity_tool import EquityTool
from utils.card_utils import parse_card_text
from utils.config import EngineConfig, WorkerConfig
from utils.logger import OutsLogger

_log = OutsLogger("CLI")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Project Outs — Monte-Carlo equity and outs calculator",
    )
    parser.add_argument("--hero", type=str, default="", help='Hero hole cards, e.g. "As Ks"')
    parser.add_argument("--board", type=str, default="", help='Board cards, e.g. "Qs Js 2d"')
    parser.add_argument("--opponents", type=int, default=1, help="Number of opponents (default: 1)")
    parser.add_argument("--pot", type=float, default=0.0, help="Pot before the call")
    parser.add_argument("--bet", type=float, default=0.0, help="Amount to call")
    parser.add_argument("--trials", type=int, default=None, help="Monte-Carlo trials (default: config)")
    parser.add_argument("--seed", type=int, default=None, help="Seed for a reproducible run")
    parser.add_argument(
        "--evaluator", type=str, default="",
        help="Hand evaluator backend: treys or combo (default: config)",
    )
    parser.add_argument("--json", action="store_true", help="Print the raw result payload")
    parser.add_argument("--serve", action="store_true", help="Start the ZMQ equity worker")
    parser.add_argument("--bind", type=str, default="", help="Worker bind address (default: config)")
    return parser


def _print_result(result: EquityResult) -> None:
    _log.highlight(f"{result.hand_name or '-'}  equity={result.equity}%  ev={result.ev}")
    _log.info(f"pot odds={result.pot_odds}%  simulations={result.simulations}")
    outs_cards = " ".join(entry.card for entry in result.outs_list) or "-"
    _log.info(f"outs={result.outs} ({outs_cards})  draw odds={result.draw_odds}%")
    if result.dirty_outs:
        dirty_cards = " ".join(entry.card for entry in result.dirty_outs_list)
        _log.warn(f"dirty outs={result.dirty_outs} ({dirty_cards})")
    if result.reverse_outs:
        reverse_cards = " ".join(entry.card for entry in result.reverse_outs_list)
        _log.warn(
            f"reverse outs={result.reverse_outs} ({reverse_cards})  "
            f"reverse draw odds={result.reverse_draw_odds}%"
        )


def main(argv: Sequence[str] | None = None) -> int:
    """Parse arguments and run a scenario or the worker; returns the exit code."""
    args = _build_parser().parse_args(argv)

    engine_config = EngineConfig()
    if args.evaluator:
        engine_config.evaluator = args.evaluator

    if args.serve:
        bind = args.bind or WorkerConfig().bind
        try:
            worker = EquityWorker(bind_address=bind, engine_config=engine_config)
        except ValueError as error:
            _log.error(str(error))
            return 2
        worker.start()
        return 0

    try:
        tool = EquityTool(engine_config)
    except ValueError as error:
        _log.error(str(error))
        return 2

    hero = parse_card_text(args.hero)
    board = parse_card_text(args.board)
    result = tool.estimate(
        hero_cards=hero,
        board_cards=board,
        opponents=args.opponents,
        pot=args.pot,
        bet=args.bet,
        trials=args.trials,
        seed=args.seed,
    )

    if args.json:
        print(json.dumps(result.to_payload(), indent=2))
    else:
        if not result.hand_name:
            _log.warn("need exactly 2 hero cards and 3-5 board cards; nothing to simulate")
        _print_result(result)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
