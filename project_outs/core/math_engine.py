"""Monte-Carlo equity sampler over the unseen part of the deck.

Every trial shuffles the unseen cards, completes the board, deals two
cards to each opponent from the remainder and evaluates all 7-card
hands.  Hero collects ``1 / winners`` of the pot on a tie for the best
score and nothing otherwise.

Randomness always comes from the ``random.Random`` passed in by the
caller; the module never touches the global random state.

Performance:
    ~5 000 heads-up trials/s on a single core with the Treys backend.
    Each extra opponent adds one 7-card evaluation per trial.
"""

from __future__ import annotations

import random
from collections import Counter
from dataclasses import dataclass, field
from typing import Sequence

from core.hand_evaluator import HandCategory, HandEvaluator, TreysEvaluator
from utils.card_utils import shuffle_deck
from utils.logger import OutsLogger

_log = OutsLogger("Equity")


@dataclass(slots=True)
class SimulationResult:
    """Aggregated counters of one Monte-Carlo run.

    Attributes:
        equity_share: Sum of hero's per-trial pot share.
        losses:       Trials where at least one opponent beat hero.
        counted:      Trials that contributed to the counters.
        beaten_by:    Category of the best opponent hand in each lost trial.
    """

    equity_share: float = 0.0
    losses: int = 0
    counted: int = 0
    beaten_by: Counter[HandCategory] = field(default_factory=Counter)

    @property
    def equity(self) -> float:
        """Hero's expected pot share in ``[0, 1]``."""
        if self.counted == 0:
            return 0.0
        return self.equity_share / self.counted

    @property
    def loss_rate(self) -> float:
        if self.counted == 0:
            return 0.0
        return self.losses / self.counted

    @property
    def dominant_threat(self) -> HandCategory | None:
        """Opponent category that beat hero most often, if any."""
        if not self.beaten_by:
            return None
        return self.beaten_by.most_common(1)[0][0]


class MathEngine:
    """Stateless Monte-Carlo equity calculator."""

    def __init__(self, evaluator: HandEvaluator | None = None) -> None:
        self.evaluator: HandEvaluator = evaluator if evaluator is not None else TreysEvaluator()

    @staticmethod
    def can_deal(deck_size: int, board_size: int, opponents: int) -> bool:
        """Whether *deck_size* unseen cards cover the board and every opponent."""
        return deck_size >= max(0, 5 - board_size) + 2 * max(0, opponents)

    def simulate(
        self,
        hero: Sequence[str],
        board: Sequence[str],
        deck: Sequence[str],
        opponents: int,
        trials: int,
        rng: random.Random,
    ) -> SimulationResult:
        """Run *trials* random run-outs and return the aggregated counters.

        Args:
            hero:      Hero's two hole cards.
            board:     Community cards already dealt (3–5).
            deck:      Unseen cards the run-outs are drawn from.
            opponents: Number of random opponent hands to deal.
            trials:    Number of run-outs to sample.
            rng:       Random source owned by the caller.

        Returns:
            :class:`SimulationResult`; ``counted`` is ``0`` when the deck
            cannot cover the deal.
        """
        result = SimulationResult()
        hero_cards = list(hero)
        known_board = list(board)
        opponents_count = max(0, int(opponents))
        board_needed = max(0, 5 - len(known_board))

        if not self.can_deal(len(deck), len(known_board), opponents_count):
            _log.warn(
                f"deck exhausted: {len(deck)} unseen cards cannot cover "
                f"{board_needed} board cards and {opponents_count} opponents"
            )
            return result

        evaluate = self.evaluator.evaluate
        for _ in range(max(0, int(trials))):
            rest = shuffle_deck(deck, rng)
            full_board = known_board + rest[:board_needed]

            hero_value = evaluate(hero_cards + full_board)
            if not hero_value.is_valid:
                continue

            best_villain = None
            villain_scores: list[int] = []
            offset = board_needed
            for _ in range(opponents_count):
                villain_value = evaluate(rest[offset:offset + 2] + full_board)
                offset += 2
                villain_scores.append(villain_value.score)
                if best_villain is None or villain_value.score < best_villain.score:
                    best_villain = villain_value

            result.counted += 1
            if best_villain is None or hero_value.score < best_villain.score:
                result.equity_share += 1.0
            elif hero_value.score == best_villain.score:
                winners = 1 + villain_scores.count(hero_value.score)
                result.equity_share += 1.0 / winners
            else:
                result.losses += 1
                if best_villain.category is not None:
                    result.beaten_by[best_villain.category] += 1

        return result
