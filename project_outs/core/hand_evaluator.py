"""Best-of-N hand evaluation behind a single pluggable interface.

Two interchangeable backends score 5–7 cards and return a
:class:`HandValue` whose ``score`` follows the Treys convention:
**lower is stronger**.  Scores are only comparable between hands
evaluated by the same backend.

* :class:`TreysEvaluator` — precomputed lookup tables from ``treys``;
  the 52 card codes are built once at construction.
* :class:`ComboEvaluator` — scores every 5-card subset with an explicit
  category/kicker key.  Slower, but works for any number of cards ≥ 5.

Invalid input (fewer than 5 cards, duplicates, unknown cards) never
raises: the evaluators return :data:`INVALID_SCORE` and no category so
the sampler can skip the trial.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from enum import IntEnum
from itertools import combinations
from typing import Protocol, Sequence

from treys import Card, Evaluator

from utils.card_utils import RANKS, SUITS, full_deck


INVALID_SCORE = 10**9
"""Sentinel score, worse than any valid hand of either backend."""


class HandCategory(IntEnum):
    """The nine standard categories, strongest first (Treys rank classes)."""

    STRAIGHT_FLUSH = 1
    FOUR_OF_A_KIND = 2
    FULL_HOUSE = 3
    FLUSH = 4
    STRAIGHT = 5
    THREE_OF_A_KIND = 6
    TWO_PAIR = 7
    PAIR = 8
    HIGH_CARD = 9

    @property
    def label(self) -> str:
        return _CATEGORY_LABELS[self]

    def is_stronger_than(self, other: HandCategory | None) -> bool:
        if other is None:
            return True
        return self.value < other.value


_CATEGORY_LABELS: dict[HandCategory, str] = {
    HandCategory.STRAIGHT_FLUSH: "Straight Flush",
    HandCategory.FOUR_OF_A_KIND: "Four of a Kind",
    HandCategory.FULL_HOUSE: "Full House",
    HandCategory.FLUSH: "Flush",
    HandCategory.STRAIGHT: "Straight",
    HandCategory.THREE_OF_A_KIND: "Three of a Kind",
    HandCategory.TWO_PAIR: "Two Pair",
    HandCategory.PAIR: "Pair",
    HandCategory.HIGH_CARD: "High Card",
}


@dataclass(frozen=True, slots=True)
class HandValue:
    """Strength of the best 5-card hand found in a card set.

    Attributes:
        score:    Backend score, lower is stronger.
        category: Coarse category, ``None`` for invalid input.
    """

    score: int
    category: HandCategory | None

    @property
    def is_valid(self) -> bool:
        return self.category is not None

    @property
    def label(self) -> str:
        return self.category.label if self.category is not None else ""


INVALID_HAND = HandValue(score=INVALID_SCORE, category=None)


class HandEvaluator(Protocol):
    """Structural interface shared by every evaluator backend.

    Implementations:
    * :class:`TreysEvaluator` (default)
    * :class:`ComboEvaluator`
    """

    def evaluate(self, cards: Sequence[str]) -> HandValue:
        """Return the best 5-card :class:`HandValue` contained in *cards*."""
        ...


def _has_duplicates(cards: Sequence[str]) -> bool:
    return len(set(cards)) != len(cards)


class TreysEvaluator:
    """Lookup-table evaluator backed by :class:`treys.Evaluator`."""

    def __init__(self) -> None:
        self._evaluator = Evaluator()
        self._codes: dict[str, int] = {card: Card.new(card) for card in full_deck()}

    def evaluate(self, cards: Sequence[str]) -> HandValue:
        if not 5 <= len(cards) <= 7 or _has_duplicates(cards):
            return INVALID_HAND
        try:
            encoded = [self._codes[card] for card in cards]
        except KeyError:
            return INVALID_HAND

        score = self._evaluator.evaluate(encoded[:2], encoded[2:])
        # newer treys releases report royal flushes as rank class 0
        rank_class = max(int(self._evaluator.get_rank_class(score)), HandCategory.STRAIGHT_FLUSH.value)
        return HandValue(score=score, category=HandCategory(rank_class))


# ── Generic combination scorer ────────────────────────────────────

_RANK_VALUES: dict[str, int] = {rank: idx + 2 for idx, rank in enumerate(RANKS)}
_KEY_BASE = 15
_COMBO_CEILING = 9 * _KEY_BASE**5


def _straight_high(values: list[int]) -> int:
    """High card of a 5-card straight (``5`` for the wheel), else ``0``."""
    unique = sorted(set(values), reverse=True)
    if len(unique) != 5:
        return 0
    if unique[0] - unique[4] == 4:
        return unique[0]
    if unique == [14, 5, 4, 3, 2]:
        return 5
    return 0


def _five_card_key(five: Sequence[str]) -> tuple[int, list[int]]:
    """Return ``(strength, tiebreakers)``; strength 8 is a straight flush."""
    values = [_RANK_VALUES[card[0]] for card in five]
    is_flush = len({card[1] for card in five}) == 1
    high = _straight_high(values)

    # Groups ordered by size, then rank: e.g. full house → [trips, pair]
    groups = sorted(Counter(values).items(), key=lambda item: (item[1], item[0]), reverse=True)
    shape = [count for _, count in groups]
    ranked = [value for value, _ in groups]

    if high and is_flush:
        return 8, [high]
    if shape[0] == 4:
        return 7, ranked
    if shape == [3, 2]:
        return 6, ranked
    if is_flush:
        return 5, sorted(values, reverse=True)
    if high:
        return 4, [high]
    if shape[0] == 3:
        return 3, ranked
    if shape[:2] == [2, 2]:
        return 2, ranked
    if shape[0] == 2:
        return 1, ranked
    return 0, sorted(values, reverse=True)


class ComboEvaluator:
    """Scores every 5-card subset and keeps the best one."""

    def evaluate(self, cards: Sequence[str]) -> HandValue:
        if len(cards) < 5 or _has_duplicates(cards):
            return INVALID_HAND
        if any(len(card) != 2 or card[0] not in _RANK_VALUES or card[1] not in SUITS for card in cards):
            return INVALID_HAND

        best_score = INVALID_SCORE
        best_strength = -1
        for five in combinations(cards, 5):
            strength, tiebreakers = _five_card_key(five)
            packed = strength
            for position in range(5):
                packed = packed * _KEY_BASE + (tiebreakers[position] if position < len(tiebreakers) else 0)
            score = _COMBO_CEILING - packed
            if score < best_score:
                best_score = score
                best_strength = strength

        return HandValue(score=best_score, category=HandCategory(9 - best_strength))


_BACKENDS = {
    "treys": TreysEvaluator,
    "combo": ComboEvaluator,
}


def get_evaluator(name: str = "treys") -> HandEvaluator:
    """Instantiate the evaluator backend registered under *name*."""
    key = (name or "treys").strip().lower()
    backend = _BACKENDS.get(key)
    if backend is None:
        raise ValueError(f"Unknown hand evaluator: {name!r} (expected one of {sorted(_BACKENDS)})")
    return backend()
