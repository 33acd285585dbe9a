"""Scenario entry point: equity, EV, pot odds and outs in one record.

:func:`equity` is the single synchronous contract consumed by the tool
facade, the worker and the command line::

    result = equity(["As", "Ks"], ["Qs", "Js", "2d"], num_opponents=1, pot=100, bet=50)
    result.equity, result.outs, result.draw_odds

Malformed scenarios (hero not exactly two distinct cards, fewer than
three or more than five board cards, a card shared by hero and board,
an infinite or NaN pot or bet) yield the all-zero :class:`EquityResult` instead of an exception.
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass, field
from typing import Any, Iterable

from core.hand_evaluator import HandEvaluator, get_evaluator
from core.math_engine import MathEngine
from core.metrics import expected_value, percent, pot_odds_pct
from core.outs_classifier import OutEntry, OutsClassifier, ReverseOutEntry
from utils.card_utils import full_deck, normalize_card, remove_known
from utils.config import EngineConfig


@dataclass(slots=True)
class EquityResult:
    """Everything reported for one scenario.

    Percentages are in ``[0, 100]`` with two decimals.

    Attributes:
        equity:            Hero's pot share.
        ev:                Expected value of calling the bet.
        hand_name:         Category label of hero + known board.
        pot_odds:          Price of the call.
        outs:              Number of real outs.
        draw_odds:         Chance to hit a real out by the river.
        outs_list:         Real outs in deck order.
        dirty_outs:        Number of dirty outs.
        dirty_outs_list:   Dirty outs in deck order.
        reverse_outs:      Number of reverse outs.
        reverse_draw_odds: Chance a reverse out arrives by the river.
        reverse_outs_list: Reverse outs in deck order.
        simulations:       Baseline trials actually counted.
    """

    equity: float = 0.0
    ev: float = 0.0
    hand_name: str = ""
    pot_odds: float = 0.0
    outs: int = 0
    draw_odds: float = 0.0
    outs_list: list[OutEntry] = field(default_factory=list)
    dirty_outs: int = 0
    dirty_outs_list: list[OutEntry] = field(default_factory=list)
    reverse_outs: int = 0
    reverse_draw_odds: float = 0.0
    reverse_outs_list: list[ReverseOutEntry] = field(default_factory=list)
    simulations: int = 0

    def to_payload(self) -> dict[str, Any]:
        """JSON-ready dictionary used on the worker boundary."""
        return {
            "equity": self.equity,
            "ev": self.ev,
            "handName": self.hand_name,
            "potOdds": self.pot_odds,
            "outs": self.outs,
            "drawOdds": self.draw_odds,
            "outsList": [entry.to_payload() for entry in self.outs_list],
            "dirtyOuts": self.dirty_outs,
            "dirtyOutsList": [entry.to_payload() for entry in self.dirty_outs_list],
            "reverseOuts": self.reverse_outs,
            "reverseDrawOdds": self.reverse_draw_odds,
            "reverseOutsList": [entry.to_payload() for entry in self.reverse_outs_list],
            "simulations": self.simulations,
        }


def _scenario_cards(raw_cards: Iterable[Any]) -> list[str] | None:
    """Normalise *raw_cards*; ``None`` when a card is invalid or repeated.

    Empty slots (``""`` / ``None``) are skipped, like unfilled card pickers.
    """
    cards: list[str] = []
    for item in raw_cards or []:
        if item is None or (isinstance(item, str) and not item.strip()):
            continue
        card = normalize_card(item)
        if card is None or card in cards:
            return None
        cards.append(card)
    return cards


class EquityEngine:
    """Runs the baseline simulation, the outs classifier and the metrics."""

    def __init__(self, config: EngineConfig | None = None, evaluator: HandEvaluator | None = None) -> None:
        self.config = config if config is not None else EngineConfig()
        self.evaluator = evaluator if evaluator is not None else get_evaluator(self.config.evaluator)
        self.math = MathEngine(self.evaluator)
        self.classifier = OutsClassifier(self.math, self.config)

    def _random_source(self, rng: random.Random | None, seed: int | None) -> random.Random:
        if rng is not None:
            return rng
        return random.Random(seed if seed is not None else self.config.seed)

    def calculate(
        self,
        hero_cards: Iterable[str],
        board_cards: Iterable[str],
        num_opponents: int,
        pot: float,
        bet: float,
        trials: int | None = None,
        *,
        rng: random.Random | None = None,
        seed: int | None = None,
    ) -> EquityResult:
        """Estimate equity, EV, pot odds and outs for one scenario.

        Args:
            hero_cards:    Hero's two hole cards.
            board_cards:   Community cards on the board (3–5).
            num_opponents: Unknown opponent hands to simulate.
            pot:           Pot before hero's call.
            bet:           Amount hero has to call.
            trials:        Monte-Carlo budget, defaults to ``config.trials``.
            rng:           Random source; a fresh one is built when omitted.
            seed:          Seed for the fresh random source.

        Returns:
            :class:`EquityResult`, all-zero for malformed scenarios.
        """
        hero = _scenario_cards(hero_cards)
        board = _scenario_cards(board_cards)
        if hero is None or board is None or len(hero) != 2 or not 3 <= len(board) <= 5:
            return EquityResult()
        if set(hero) & set(board) or int(num_opponents) < 0:
            return EquityResult()
        if not (math.isfinite(pot) and math.isfinite(bet)):
            return EquityResult()

        opponents = int(num_opponents)
        budget = self.config.trials if trials is None else max(0, int(trials))
        source = self._random_source(rng, seed)
        deck = remove_known(full_deck(), hero + board)

        baseline = self.math.simulate(hero, board, deck, opponents, budget, source)
        equity_pct = percent(baseline.equity)
        result = EquityResult(
            equity=equity_pct,
            ev=expected_value(equity_pct, pot, bet),
            hand_name=self.evaluator.evaluate(hero + board).label,
            pot_odds=pot_odds_pct(pot, bet),
            simulations=baseline.counted,
        )
        if baseline.counted == 0:
            return result

        report = self.classifier.classify(hero, board, deck, opponents, budget, baseline, source)
        result.outs = len(report.outs)
        result.outs_list = report.outs
        result.draw_odds = percent(report.draw_odds)
        result.dirty_outs = len(report.dirty_outs)
        result.dirty_outs_list = report.dirty_outs
        result.reverse_outs = len(report.reverse_outs)
        result.reverse_draw_odds = percent(report.reverse_draw_odds)
        result.reverse_outs_list = report.reverse_outs
        return result


def equity(
    hero: Iterable[str],
    board: Iterable[str],
    num_opponents: int,
    pot: float,
    bet: float,
    trials: int = 2500,
    *,
    rng: random.Random | None = None,
    seed: int | None = None,
    config: EngineConfig | None = None,
) -> EquityResult:
    """Convenience wrapper building a one-off :class:`EquityEngine`."""
    engine = EquityEngine(config=config)
    return engine.calculate(hero, board, num_opponents, pot, bet, trials, rng=rng, seed=seed)
