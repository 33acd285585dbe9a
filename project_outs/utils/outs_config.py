"""Outs Config — central loader for ``config.yaml``.

Reads ``config.yaml`` from the project root and exposes every setting
through dotted keys.  ``OUTS_*`` environment variables **always take
priority** over the YAML file, which in turn beats the code defaults.

Usage::

    from utils.outs_config import cfg

    print(cfg.get_int("engine.trials"))           # 2500
    print(cfg.get_float("outs.equity_margin"))    # 0.03
    print(cfg.get_str("worker.bind"))             # "tcp://0.0.0.0:5557"

Equivalent environment variable: ``OUTS_OUTS_EQUITY_MARGIN``
  → the YAML key ``outs.equity_margin`` becomes ``OUTS_OUTS_EQUITY_MARGIN``.

Loading is lazy (on first access) and thread-safe.
"""

from __future__ import annotations

import os
import threading
from pathlib import Path
from typing import Any

import yaml


def _find_config_path() -> Path:
    """Resolve ``config.yaml`` by walking up to the project root."""
    env_path = os.getenv("OUTS_CONFIG_FILE", "").strip()
    if env_path:
        return Path(env_path)

    start = Path(__file__).resolve().parent
    for ancestor in [start, start.parent, start.parent.parent]:
        candidate = ancestor / "config.yaml"
        if candidate.exists():
            return candidate

    return start.parent / "config.yaml"


class OutsConfig:
    """Settings access with env > yaml > default priority.

    Attributes:
        _data: Raw dictionary loaded from the YAML file.
        _loaded: Whether the YAML file has been read already.
    """

    def __init__(self) -> None:
        self._data: dict[str, Any] = {}
        self._loaded: bool = False
        self._lock = threading.Lock()

    # ── Lazy loading ──────────────────────────────────────────────

    def _ensure_loaded(self) -> None:
        """Load the YAML file once, thread-safely."""
        if self._loaded:
            return
        with self._lock:
            if self._loaded:
                return
            self._load()
            self._loaded = True

    def _load(self) -> None:
        config_path = _find_config_path()
        if not config_path.exists():
            self._data = {}
            return
        try:
            with open(config_path, "r", encoding="utf-8") as fh:
                raw = yaml.safe_load(fh)
        except (OSError, yaml.YAMLError):
            self._data = {}
            return
        self._data = raw if isinstance(raw, dict) else {}

    def reload(self) -> None:
        """Force a fresh read of the file (tests, hot reload)."""
        with self._lock:
            self._loaded = False
            self._load()
            self._loaded = True

    # ── Dotted-key access ─────────────────────────────────────────

    def _resolve(self, dotted_key: str) -> Any:
        """Resolve ``outs.equity_margin`` → data[outs][equity_margin]."""
        self._ensure_loaded()
        node: Any = self._data
        for part in dotted_key.split("."):
            if isinstance(node, dict):
                node = node.get(part)
            else:
                return None
        return node

    @staticmethod
    def _env_key(dotted_key: str) -> str:
        """Convert ``engine.trials`` → ``OUTS_ENGINE_TRIALS``."""
        return "OUTS_" + dotted_key.upper().replace(".", "_")

    # ── Typed getters ─────────────────────────────────────────────

    def get_str(self, key: str, default: str = "") -> str:
        """Return a string: env > yaml > default."""
        env_val = os.getenv(self._env_key(key), "").strip()
        if env_val:
            return env_val
        yaml_val = self._resolve(key)
        if yaml_val is not None:
            return str(yaml_val)
        return default

    def get_int(self, key: str, default: int = 0) -> int:
        """Return an integer: env > yaml > default."""
        env_val = os.getenv(self._env_key(key), "").strip()
        if env_val:
            try:
                return int(env_val)
            except ValueError:
                pass
        yaml_val = self._resolve(key)
        if yaml_val is not None:
            try:
                return int(yaml_val)
            except (ValueError, TypeError):
                pass
        return default

    def get_float(self, key: str, default: float = 0.0) -> float:
        """Return a float: env > yaml > default."""
        env_val = os.getenv(self._env_key(key), "").strip()
        if env_val:
            try:
                return float(env_val)
            except ValueError:
                pass
        yaml_val = self._resolve(key)
        if yaml_val is not None:
            try:
                return float(yaml_val)
            except (ValueError, TypeError):
                pass
        return default

    def get_optional_int(self, key: str) -> int | None:
        """Return an integer, or ``None`` when the key is unset or blank."""
        raw = self.get_str(key, "").strip()
        if not raw:
            return None
        try:
            return int(raw)
        except ValueError:
            return None

    def __repr__(self) -> str:
        self._ensure_loaded()
        sections = list(self._data.keys())
        return f"<OutsConfig sections={sections}>"


# ── Global singleton ──────────────────────────────────────────────
cfg = OutsConfig()
