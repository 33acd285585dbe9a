"""Outs classification by forced-card re-simulation.

For every unseen card the classifier asks two questions:

1. Does the card lift hero's hand into a strictly stronger category?
2. Does a short re-simulation with the card forced onto the board raise
   hero's equity by more than ``equity_margin``?

Both → **real out**.  Only the first → **dirty out** (looks better, wins
no more often).  Neither, while hero's loss rate climbs by more than
``loss_margin`` → **reverse out**, tagged with the opponent category
that beat hero most often in that re-simulation.

Maintainer notes
-----------------
* Both margins live in :class:`utils.config.EngineConfig`.  They are
  heuristics: the re-simulations are short, so margins below the
  sampling noise turn random cards into outs.
* Cards are visited in deck order, so the three lists come out in
  :func:`utils.card_utils.full_deck` order.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Any, Sequence

from core.hand_evaluator import HandCategory, HandEvaluator
from core.math_engine import MathEngine, SimulationResult
from utils.card_utils import streets_left as count_streets_left
from utils.config import EngineConfig


@dataclass(frozen=True, slots=True)
class OutEntry:
    """An unseen card and the category it gives hero."""

    card: str
    category: HandCategory

    def to_payload(self) -> dict[str, Any]:
        return {"card": self.card, "category": self.category.label}


@dataclass(frozen=True, slots=True)
class ReverseOutEntry:
    """A card that mostly helps the opponents.

    Attributes:
        card:              The unseen card.
        category:          Hero's category with the card on board.
        opponent_category: Opponent category that beat hero most often.
    """

    card: str
    category: HandCategory
    opponent_category: HandCategory | None

    def to_payload(self) -> dict[str, Any]:
        return {
            "card": self.card,
            "category": self.category.label,
            "opponentCategory": self.opponent_category.label if self.opponent_category else "",
        }


@dataclass(slots=True)
class OutsReport:
    outs: list[OutEntry] = field(default_factory=list)
    dirty_outs: list[OutEntry] = field(default_factory=list)
    reverse_outs: list[ReverseOutEntry] = field(default_factory=list)
    draw_odds: float = 0.0
    reverse_draw_odds: float = 0.0


def draw_odds(outs: int, remaining: int, streets_left: int) -> float:
    """Probability of hitting at least one of *outs* before the river.

    One street left: ``outs / remaining``.  Two streets left: one minus the
    chance of missing twice without replacement.
    """
    if streets_left <= 0 or remaining <= 0 or outs <= 0:
        return 0.0
    if streets_left == 1:
        return min(outs / remaining, 1.0)
    if outs >= remaining:
        return 1.0
    miss = ((remaining - outs) / remaining) * ((remaining - 1 - outs) / (remaining - 1))
    return 1.0 - miss


class OutsClassifier:
    """Tags every unseen card as real, dirty or reverse out."""

    def __init__(self, engine: MathEngine, config: EngineConfig | None = None) -> None:
        self.engine = engine
        self.config = config if config is not None else EngineConfig()

    @property
    def evaluator(self) -> HandEvaluator:
        return self.engine.evaluator

    def classify(
        self,
        hero: Sequence[str],
        board: Sequence[str],
        deck: Sequence[str],
        opponents: int,
        trials: int,
        baseline: SimulationResult,
        rng: random.Random,
    ) -> OutsReport:
        """Classify every card of *deck* against the *baseline* run.

        Args:
            hero:      Hero's hole cards.
            board:     Known community cards.
            deck:      Unseen cards, in deck order.
            opponents: Number of opponents simulated.
            trials:    Caller's trial budget (scaled down per card).
            baseline:  Result of the full-budget simulation.
            rng:       Random source shared with the baseline run.

        Returns:
            :class:`OutsReport`; empty on the river or for unevaluable hands.
        """
        report = OutsReport()
        streets = count_streets_left(board)
        known = list(hero) + list(board)
        current = self.evaluator.evaluate(known)
        if streets == 0 or not current.is_valid:
            return report

        sub_trials = self.config.sub_trials(trials)
        forced_board = list(board)
        for card in deck:
            improved = self.evaluator.evaluate(known + [card])
            if improved.category is None:
                continue
            improves_rank = improved.category.is_stronger_than(current.category)

            rest = [other for other in deck if other != card]
            sub = self.engine.simulate(hero, forced_board + [card], rest, opponents, sub_trials, rng)

            if improves_rank:
                if sub.equity > baseline.equity + self.config.equity_margin:
                    report.outs.append(OutEntry(card, improved.category))
                else:
                    report.dirty_outs.append(OutEntry(card, improved.category))
            elif sub.loss_rate > baseline.loss_rate + self.config.loss_margin:
                report.reverse_outs.append(ReverseOutEntry(card, improved.category, sub.dominant_threat))

        remaining = len(deck)
        report.draw_odds = draw_odds(len(report.outs), remaining, streets)
        report.reverse_draw_odds = draw_odds(len(report.reverse_outs), remaining, streets)
        return report
