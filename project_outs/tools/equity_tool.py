"""Equity estimation tool.

Wraps :class:`core.equity_engine.EquityEngine` with a keyword-friendly
interface for the worker and the command line.  One engine (and one
evaluator lookup table) is built per tool and reused across requests;
each request still gets its own random source.
"""

from __future__ import annotations

from core.equity_engine import EquityEngine, EquityResult
from utils.config import EngineConfig


class EquityTool:
    """Facade over :class:`EquityEngine` for scenario requests."""

    def __init__(self, config: EngineConfig | None = None) -> None:
        self.engine = EquityEngine(config=config)

    @property
    def default_trials(self) -> int:
        return self.engine.config.trials

    def estimate(
        self,
        hero_cards: list[str],
        board_cards: list[str],
        opponents: int = 1,
        pot: float = 0.0,
        bet: float = 0.0,
        trials: int | None = None,
        seed: int | None = None,
    ) -> EquityResult:
        """Run one scenario and return its :class:`EquityResult`.

        Args:
            hero_cards:  Hero's two hole cards.
            board_cards: Community cards on the board.
            opponents:   Number of opponents to simulate against.
            pot:         Pot before the call.
            bet:         Amount to call.
            trials:      Monte-Carlo iterations (config default when ``None``).
            seed:        Fixed seed for a reproducible answer.
        """
        return self.engine.calculate(
            hero_cards,
            board_cards,
            opponents,
            pot,
            bet,
            trials,
            seed=seed,
        )
