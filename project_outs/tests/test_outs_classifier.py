"""Tests for core.outs_classifier — policy, ordering and draw odds."""

from __future__ import annotations

import random
from collections import Counter
from typing import Sequence

import pytest

pytest.importorskip("treys")

from core.hand_evaluator import HandCategory, TreysEvaluator
from core.math_engine import MathEngine, SimulationResult
from core.outs_classifier import OutsClassifier, draw_odds
from utils.card_utils import full_deck, remove_known
from utils.config import EngineConfig


HERO = ["As", "Ks"]
FLOP = ["Qs", "Js", "2d"]
BASELINE = SimulationResult(equity_share=60.0, losses=30, counted=100)


def _config() -> EngineConfig:
    return EngineConfig(
        trials=2500,
        evaluator="treys",
        seed=None,
        min_sub_trials=140,
        sub_trial_fraction=0.1,
        equity_margin=0.03,
        loss_margin=0.05,
    )


class ScriptedEngine:
    """Returns canned re-simulation results keyed by the forced card."""

    def __init__(self) -> None:
        self.evaluator = TreysEvaluator()
        self.calls: list[tuple[str, int, int]] = []

    def simulate(
        self,
        hero: Sequence[str],
        board: Sequence[str],
        deck: Sequence[str],
        opponents: int,
        trials: int,
        rng: random.Random,
    ) -> SimulationResult:
        forced = board[-1]
        assert forced not in deck
        self.calls.append((forced, len(deck), trials))

        if forced.endswith("s"):
            return SimulationResult(equity_share=95.0, losses=3, counted=100)
        if forced == "8h":
            return SimulationResult(
                equity_share=35.0,
                losses=60,
                counted=100,
                beaten_by=Counter({HandCategory.PAIR: 40, HandCategory.FLUSH: 20}),
            )
        return SimulationResult(equity_share=60.0, losses=30, counted=100)


class TestClassificationPolicy:
    def _classify(self):
        engine = ScriptedEngine()
        classifier = OutsClassifier(engine, _config())  # type: ignore[arg-type]
        deck = remove_known(full_deck(), HERO + FLOP)
        report = classifier.classify(HERO, FLOP, deck, 1, 2500, BASELINE, random.Random(0))
        return engine, deck, report

    def test_rank_and_equity_gain_is_real_out(self) -> None:
        _, deck, report = self._classify()
        spades = [card for card in deck if card.endswith("s")]
        assert [entry.card for entry in report.outs] == spades
        assert all(entry.category.is_stronger_than(HandCategory.HIGH_CARD) for entry in report.outs)

    def test_rank_without_equity_gain_is_dirty(self) -> None:
        _, _, report = self._classify()
        dirty = {entry.card: entry.category for entry in report.dirty_outs}
        assert dirty["Ah"] == HandCategory.PAIR
        assert dirty["Th"] == HandCategory.STRAIGHT
        assert "3h" not in dirty

    def test_loss_rise_without_rank_gain_is_reverse(self) -> None:
        _, _, report = self._classify()
        assert len(report.reverse_outs) == 1
        reverse = report.reverse_outs[0]
        assert reverse.card == "8h"
        assert reverse.category == HandCategory.HIGH_CARD
        assert reverse.opponent_category == HandCategory.PAIR

    def test_categories_are_disjoint_and_ordered(self) -> None:
        _, deck, report = self._classify()
        real = [entry.card for entry in report.outs]
        dirty = [entry.card for entry in report.dirty_outs]
        reverse = [entry.card for entry in report.reverse_outs]

        assert not set(real) & set(dirty)
        assert not set(real) & set(reverse)
        assert not set(dirty) & set(reverse)
        assert dirty == sorted(dirty, key=deck.index)

    def test_every_card_resimulated_with_reduced_budget(self) -> None:
        engine, deck, _ = self._classify()
        assert [call[0] for call in engine.calls] == deck
        assert all(call[1] == len(deck) - 1 for call in engine.calls)
        assert all(call[2] == 250 for call in engine.calls)

    def test_draw_odds_follow_real_outs(self) -> None:
        _, deck, report = self._classify()
        assert report.draw_odds == pytest.approx(draw_odds(len(report.outs), len(deck), 2))
        assert report.reverse_draw_odds == pytest.approx(draw_odds(1, len(deck), 2))


class TestClassifierWithSimulation:
    def test_river_has_no_outs(self) -> None:
        classifier = OutsClassifier(MathEngine(), _config())
        board = FLOP + ["7c", "3h"]
        deck = remove_known(full_deck(), HERO + board)
        report = classifier.classify(HERO, board, deck, 1, 200, BASELINE, random.Random(1))

        assert report.outs == []
        assert report.dirty_outs == []
        assert report.reverse_outs == []
        assert report.draw_odds == 0.0

    def test_made_straight_flush_cannot_improve(self) -> None:
        engine = MathEngine()
        classifier = OutsClassifier(engine, _config())
        hero = ["9h", "Th"]
        board = ["Jh", "Qh", "Kh"]
        deck = remove_known(full_deck(), hero + board)
        rng = random.Random(2)
        baseline = engine.simulate(hero, board, deck, 1, 300, rng)

        report = classifier.classify(hero, board, deck, 1, 300, baseline, rng)

        assert report.outs == []
        assert report.dirty_outs == []
        assert report.draw_odds == 0.0


class TestDrawOdds:
    def test_one_street(self) -> None:
        assert draw_odds(9, 46, 1) == pytest.approx(9 / 46)

    def test_two_streets(self) -> None:
        expected = 1 - (38 / 47) * (37 / 46)
        assert draw_odds(9, 47, 2) == pytest.approx(expected)

    def test_no_outs_or_no_street(self) -> None:
        assert draw_odds(0, 47, 2) == 0.0
        assert draw_odds(9, 45, 0) == 0.0
        assert draw_odds(3, 0, 1) == 0.0

    def test_outs_cover_deck(self) -> None:
        assert draw_odds(10, 10, 2) == 1.0
        assert draw_odds(9, 10, 2) == pytest.approx(1.0)
