"""One-shot equity worker over ZeroMQ ``REQ``/``REP``.

The worker runs one scenario per request and answers with exactly one
JSON message, keeping heavy simulations off the caller's thread or
process.  The client opens a fresh ``REQ`` socket per call, so a timed
out request is simply abandoned.

Message types
-------------
``equity``   ``{"hero", "board", "numOpponents", "pot", "bet", "trials", "seed"}``
             → ``{"ok": true, "result": {...}, "latency_ms": ...}``
``health``   → ``{"ok": true, "status": "ok"}``
"""

from __future__ import annotations

import math
import time
from typing import Any

import zmq

from tools.equity_tool import EquityTool
from utils.config import EngineConfig, WorkerConfig
from utils.logger import OutsLogger

_log = OutsLogger("Worker")
_client_log = OutsLogger("Client")


def _to_float(value: Any, default: float = 0.0) -> float:
    """Coerce *value* to a finite float, returning *default* on failure."""
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return default
    else:
        return default
    # inf / nan would break rounding and the JSON reply
    return number if math.isfinite(number) else default


def _to_int(value: Any, default: int | None) -> int | None:
    """Coerce *value* to int, returning *default* on failure."""
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else default
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())
    return default


class EquityWorker:
    """Serves equity requests on a ZMQ ``REP`` socket."""

    def __init__(self, bind_address: str, engine_config: EngineConfig | None = None, max_reconnects: int = 10) -> None:
        self.bind_address = bind_address
        self.tool = EquityTool(engine_config)
        self.max_reconnects = max(0, int(max_reconnects))

    def _handle_equity(self, request: dict[str, Any]) -> dict[str, Any]:
        started_at = time.perf_counter()
        hero = request.get("hero", [])
        board = request.get("board", [])
        opponents = _to_int(request.get("numOpponents"), 1)
        trials = _to_int(request.get("trials"), None)
        seed = _to_int(request.get("seed"), None)

        result = self.tool.estimate(
            hero_cards=hero if isinstance(hero, list) else [],
            board_cards=board if isinstance(board, list) else [],
            opponents=opponents if opponents is not None else 1,
            pot=_to_float(request.get("pot")),
            bet=_to_float(request.get("bet")),
            trials=trials,
            seed=seed,
        )
        latency_ms = round((time.perf_counter() - started_at) * 1000, 2)
        return {"ok": True, "result": result.to_payload(), "latency_ms": latency_ms}

    def handle_request(self, request: Any) -> dict[str, Any]:
        """Answer one decoded request; never raises for bad payloads."""
        if not isinstance(request, dict):
            return {"ok": False, "error": "invalid_request: expected a JSON object"}

        message_type = str(request.get("type", "equity")).strip().lower()
        if message_type == "health":
            return {"ok": True, "status": "ok"}
        if message_type == "equity":
            return self._handle_equity(request)
        return {"ok": False, "error": f"unsupported_type: {message_type}"}

    def start(self) -> None:
        context = zmq.Context.instance()

        def _create_socket() -> Any:
            sock = context.socket(zmq.REP)
            sock.setsockopt(zmq.LINGER, 0)
            sock.setsockopt(zmq.RCVTIMEO, 1000)
            sock.bind(self.bind_address)
            return sock

        socket = _create_socket()
        _log.highlight(f"Listening on {self.bind_address}")
        _log.info(f"evaluator={self.tool.engine.config.evaluator}  default_trials={self.tool.default_trials}")

        reconnect_count = 0
        try:
            while True:
                try:
                    request = socket.recv_json()
                    reconnect_count = 0
                except zmq.error.Again:
                    continue
                except zmq.ZMQError as zmq_err:
                    reconnect_count += 1
                    _log.error(f"ZMQ socket error ({zmq_err}). reconnect attempt {reconnect_count}/{self.max_reconnects}")
                    if reconnect_count > self.max_reconnects:
                        _log.error("max reconnect attempts reached. shutting down.")
                        break
                    socket.close(0)
                    time.sleep(min(reconnect_count * 0.5, 5.0))
                    try:
                        socket = _create_socket()
                        _log.success("reconnected successfully")
                    except zmq.ZMQError as rebind_err:
                        _log.error(f"rebind failed: {rebind_err}")
                    continue
                except ValueError as error:
                    _log.error(f"invalid_request: {error}")
                    socket.send_json({"ok": False, "error": f"invalid_request: {error}"})
                    continue

                try:
                    response = self.handle_request(request)
                except Exception as error:
                    _log.error(f"request failed: {type(error).__name__}: {error}")
                    response = {"ok": False, "error": f"internal_error: {type(error).__name__}"}
                if response.get("ok") and "result" in response:
                    payload = response["result"]
                    _log.success(
                        f"equity={payload['equity']}%  outs={payload['outs']}  "
                        f"latency={response['latency_ms']}ms"
                    )
                elif not response.get("ok"):
                    _log.warn(str(response.get("error", "")))
                socket.send_json(response)
        finally:
            socket.close(0)


class EquityClient:
    """Sends one request per call to an :class:`EquityWorker`."""

    def __init__(self, config: WorkerConfig | None = None) -> None:
        self.config = config if config is not None else WorkerConfig()
        self._context = zmq.Context.instance()

    def _connect(self) -> Any:
        """Open a fresh ``REQ`` socket; one socket serves exactly one request."""
        socket = self._context.socket(zmq.REQ)
        socket.setsockopt(zmq.LINGER, 0)
        socket.setsockopt(zmq.RCVTIMEO, max(100, int(self.config.timeout_ms)))
        socket.setsockopt(zmq.SNDTIMEO, max(100, int(self.config.timeout_ms)))
        socket.connect(self.config.server)
        return socket

    def request(self, payload: dict[str, Any]) -> dict[str, Any]:
        """Send *payload* and wait for the single reply.

        The ZMQ ``REQ/REP`` pattern requires strict send→recv alternation,
        so the socket is discarded after the reply or the timeout.
        """
        socket = self._connect()
        try:
            socket.send_json(payload)
            response = socket.recv_json()
        except zmq.ZMQError as error:
            _client_log.warn(f"request failed: {error}")
            return {"ok": False, "error": "connection_timeout"}
        finally:
            socket.close(0)

        if isinstance(response, dict):
            return response
        return {"ok": False, "error": "invalid_response"}

    def equity(
        self,
        hero: list[str],
        board: list[str],
        num_opponents: int,
        pot: float,
        bet: float,
        trials: int | None = None,
        seed: int | None = None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "type": "equity",
            "hero": list(hero),
            "board": list(board),
            "numOpponents": int(num_opponents),
            "pot": float(pot),
            "bet": float(bet),
        }
        if trials is not None:
            payload["trials"] = int(trials)
        if seed is not None:
            payload["seed"] = int(seed)
        return self.request(payload)

    def health(self) -> dict[str, Any]:
        return self.request({"type": "health"})


if __name__ == "__main__":
    worker_config = WorkerConfig()
    EquityWorker(bind_address=worker_config.bind).start()
