"""Runtime configuration dataclasses for the engine and the worker.

Each dataclass reads its defaults through :data:`utils.outs_config.cfg`
(``OUTS_*`` env > ``config.yaml`` > code default) at construction time.
Override individual fields when constructing from code (e.g. in tests).
"""

from __future__ import annotations

from dataclasses import dataclass, field

from utils.outs_config import cfg


@dataclass(slots=True)
class EngineConfig:
    """Simulation budget, evaluator backend and outs tolerances.

    NOTE: All fields use ``default_factory`` so that environment variables
    are read at **instantiation** time, not at import/class-definition time.
    This ensures ``monkeypatch.setenv`` in tests works correctly.

    Attributes:
        trials:             Default Monte-Carlo trial budget.
        evaluator:          Hand evaluator backend (``treys`` / ``combo``).
        seed:               Fixed seed for reproducible runs, ``None`` for entropy.
        min_sub_trials:     Floor for the per-card re-simulations.
        sub_trial_fraction: Share of ``trials`` used by each re-simulation.
        equity_margin:      Equity gain (fraction) a card needs to be a real out.
        loss_margin:        Loss-rate rise (fraction) that makes a reverse out.
    """

    trials: int = field(default_factory=lambda: cfg.get_int("engine.trials", 2500))
    evaluator: str = field(default_factory=lambda: cfg.get_str("engine.evaluator", "treys"))
    seed: int | None = field(default_factory=lambda: cfg.get_optional_int("engine.seed"))
    min_sub_trials: int = field(default_factory=lambda: cfg.get_int("outs.min_sub_trials", 140))
    sub_trial_fraction: float = field(default_factory=lambda: cfg.get_float("outs.sub_trial_fraction", 0.1))
    equity_margin: float = field(default_factory=lambda: cfg.get_float("outs.equity_margin", 0.03))
    loss_margin: float = field(default_factory=lambda: cfg.get_float("outs.loss_margin", 0.05))

    def sub_trials(self, trials: int) -> int:
        """Trial budget for one forced-card re-simulation."""
        return max(int(self.min_sub_trials), int(trials * self.sub_trial_fraction))


@dataclass(slots=True)
class WorkerConfig:
    """Equity worker (ZMQ ``REP``) and client (``REQ``) configuration."""

    bind: str = field(default_factory=lambda: cfg.get_str("worker.bind", "tcp://0.0.0.0:5557"))
    server: str = field(default_factory=lambda: cfg.get_str("worker.server", "tcp://127.0.0.1:5557"))
    timeout_ms: int = field(default_factory=lambda: cfg.get_int("worker.timeout_ms", 30000))
