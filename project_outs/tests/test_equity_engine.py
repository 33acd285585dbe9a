"""Tests for core.equity_engine — the scenario contract end to end."""

from __future__ import annotations

import random

import pytest

pytest.importorskip("treys")

from core.equity_engine import EquityEngine, EquityResult, equity
from core.metrics import expected_value, percent
from core.outs_classifier import draw_odds
from utils.card_utils import full_deck, remove_known
from utils.config import EngineConfig


def _engine(**overrides) -> EquityEngine:
    settings = dict(
        trials=400,
        evaluator="treys",
        seed=None,
        min_sub_trials=140,
        sub_trial_fraction=0.1,
        equity_margin=0.03,
        loss_margin=0.05,
    )
    settings.update(overrides)
    return EquityEngine(config=EngineConfig(**settings))


class TestDegenerateInput:
    @pytest.mark.parametrize(
        "hero,board,opponents",
        [
            (["As", "Ah"], [], 1),
            (["As", "Ah"], ["Kd", "7c"], 1),
            (["As"], ["Kd", "7c", "2h"], 1),
            (["As", "As"], ["Kd", "7c", "2h"], 1),
            (["As", "Ah", "Ad"], ["Kd", "7c", "2h"], 1),
            (["As", "Ah"], ["As", "7c", "2h"], 1),
            (["As", "Ah"], ["Kd", "Kd", "2h"], 1),
            (["As", "Ah"], ["Kd", "7c", "2h", "3h", "4h", "5h"], 1),
            (["As", "Zz"], ["Kd", "7c", "2h"], 1),
            (["As", "Ah"], ["Kd", "7c", "2h"], -1),
        ],
    )
    def test_returns_zero_result(self, hero: list[str], board: list[str], opponents: int) -> None:
        result = _engine().calculate(hero, board, opponents, pot=100.0, bet=50.0, seed=1)
        assert result == EquityResult()
        assert result.hand_name == ""
        assert result.pot_odds == 0.0
        assert result.outs_list == []

    @pytest.mark.parametrize("pot,bet", [(float("inf"), 50.0), (100.0, float("nan")), (float("-inf"), 10.0)])
    def test_non_finite_stakes_return_zero_result(self, pot: float, bet: float) -> None:
        result = _engine().calculate(["As", "Ks"], ["Qs", "Js", "2d"], 1, pot, bet, seed=1)
        assert result == EquityResult()

    def test_empty_slots_are_ignored(self) -> None:
        result = _engine().calculate(["As", "", "Ks"], ["Qs", None, "Js", "2d", "7h", "3c"], 1, 100.0, 50.0, seed=1)
        assert result.hand_name == "High Card"
        assert result.simulations == 400


class TestScenarios:
    def test_no_opponents_is_full_equity(self) -> None:
        result = _engine().calculate(["7c", "2d"], ["Kh", "Qs", "9c", "4d"], 0, 100.0, 20.0, seed=3)
        assert result.equity == 100.0
        assert result.ev == 120.0

    def test_bounds(self) -> None:
        engine = _engine(trials=200)
        scenarios = [
            (["Ah", "Kd"], ["2c", "7s", "9h"], 2, 60.0, 20.0),
            (["5c", "5d"], ["Ac", "Kc", "Qd", "Jh"], 1, 10.0, 300.0),
            (["Th", "9h"], ["8h", "2h", "Kc", "4s", "Ad"], 3, 0.0, 0.0),
        ]
        for hero, board, opponents, pot, bet in scenarios:
            result = engine.calculate(hero, board, opponents, pot, bet, seed=4)
            assert 0.0 <= result.equity <= 100.0
            assert 0.0 <= result.pot_odds <= 100.0
            assert 0.0 <= result.draw_odds <= 100.0
            assert 0.0 <= result.reverse_draw_odds <= 100.0

    def test_royal_draw_outs(self) -> None:
        hero = ["As", "Ks"]
        board = ["Qs", "Js", "2d"]
        result = _engine().calculate(hero, board, 1, pot=100.0, bet=50.0, seed=5)

        outs = {entry.card for entry in result.outs_list}
        remaining_spades = {card for card in full_deck() if card.endswith("s")} - set(hero + board)
        assert remaining_spades <= outs
        assert {"Tc", "Td", "Th"} <= outs

        remaining = len(remove_known(full_deck(), hero + board))
        assert remaining == 47
        assert result.draw_odds == percent(draw_odds(result.outs, remaining, 2))
        assert result.hand_name == "High Card"
        assert result.pot_odds == 33.33

    def test_made_straight_flush_has_no_outs(self) -> None:
        result = _engine().calculate(["9h", "Th"], ["Jh", "Qh", "Kh"], 1, 100.0, 50.0, seed=6)
        assert result.hand_name == "Straight Flush"
        assert result.outs == 0
        assert result.dirty_outs == 0
        assert result.draw_odds == 0.0

    def test_river_reports_no_draws(self) -> None:
        result = _engine().calculate(["Ah", "Ad"], ["Kc", "7d", "2s", "9h", "3c"], 1, 100.0, 50.0, seed=7)
        assert result.hand_name == "Pair"
        assert result.outs == 0
        assert result.dirty_outs == 0
        assert result.reverse_outs == 0
        assert result.equity > 50.0

    def test_board_flush_cards_are_reverse_outs(self) -> None:
        result = _engine(trials=800).calculate(["2c", "2d"], ["Ah", "Kh", "Qh", "3c"], 1, 100.0, 50.0, seed=8)
        reverse = result.reverse_outs_list
        assert any(entry.card.endswith("h") for entry in reverse)
        assert all(entry.opponent_category is not None for entry in reverse)
        assert result.reverse_draw_odds == percent(draw_odds(result.reverse_outs, 46, 1))

    def test_exhausted_deck_degrades_to_zero(self) -> None:
        result = _engine().calculate(["As", "Ah"], ["2c", "7d", "9h"], 30, 100.0, 50.0, seed=9)
        assert result.simulations == 0
        assert result.equity == 0.0
        assert result.outs == 0
        assert result.hand_name == "Pair"


class TestResultInvariants:
    def test_lists_match_counts_and_are_disjoint(self) -> None:
        hero = ["8d", "9d"]
        board = ["Td", "Jc", "2d"]
        result = _engine().calculate(hero, board, 2, 100.0, 25.0, seed=10)

        assert len(result.outs_list) == result.outs
        assert len(result.dirty_outs_list) == result.dirty_outs
        assert len(result.reverse_outs_list) == result.reverse_outs

        real = {entry.card for entry in result.outs_list}
        dirty = {entry.card for entry in result.dirty_outs_list}
        reverse = {entry.card for entry in result.reverse_outs_list}
        unseen = set(remove_known(full_deck(), hero + board))
        assert not real & dirty and not real & reverse and not dirty & reverse
        assert real | dirty | reverse <= unseen

    def test_ev_round_trip(self) -> None:
        result = _engine().calculate(["Ah", "Qh"], ["Kh", "7h", "2c"], 1, 120.0, 40.0, seed=11)
        assert result.ev == expected_value(result.equity, 120.0, 40.0)

    def test_seeded_runs_are_identical(self) -> None:
        engine = _engine(trials=300)
        args = (["Jc", "Tc"], ["9c", "8d", "2h", "Kc"], 2, 80.0, 20.0)
        first = engine.calculate(*args, seed=12)
        second = engine.calculate(*args, seed=12)
        assert first == second
        assert first.to_payload() == second.to_payload()

    def test_injected_random_source(self) -> None:
        engine = _engine(trials=300)
        args = (["Jc", "Tc"], ["9c", "8d", "2h", "Kc"], 1, 80.0, 20.0)
        first = engine.calculate(*args, rng=random.Random(13))
        second = engine.calculate(*args, rng=random.Random(13))
        assert first == second

    def test_payload_keys(self) -> None:
        result = _engine(trials=200).calculate(["As", "Ks"], ["Qs", "Js", "2d", "7c"], 1, 100.0, 50.0, seed=14)
        payload = result.to_payload()
        assert set(payload) == {
            "equity", "ev", "handName", "potOdds", "outs", "drawOdds", "outsList",
            "dirtyOuts", "dirtyOutsList", "reverseOuts", "reverseDrawOdds",
            "reverseOutsList", "simulations",
        }
        for entry in payload["outsList"]:
            assert set(entry) == {"card", "category"}
        for entry in payload["reverseOutsList"]:
            assert set(entry) == {"card", "category", "opponentCategory"}


def test_module_level_equity_wrapper() -> None:
    config = EngineConfig(trials=200, evaluator="treys", seed=None)
    result = equity(["As", "Ah"], ["Kd", "7c", "2h"], 1, 100.0, 50.0, trials=200, seed=15, config=config)
    assert result.simulations == 200
    assert result.hand_name == "Pair"
    assert result.equity > 50.0


def test_preflop_is_not_simulated() -> None:
    result = equity(["As", "Ah"], [], 1, 100.0, 50.0, seed=16)
    assert result == EquityResult()
