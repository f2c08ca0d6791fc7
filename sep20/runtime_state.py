from __future__ import annotations

import threading
import time
from collections import deque
from typing import Any, Deque, Dict, List

from sep20.errors import AnomalousTransaction

MAX_ANOMALIES = 50

_state_lock = threading.Lock()
_anomalies: Deque[Dict[str, Any]] = deque(maxlen=MAX_ANOMALIES)
_state: Dict[str, Any] = {
    "probe_ok": 0,
    "probe_failed": 0,
    "last_probe_ts": None,
    "last_probe_error": None,
    "last_seed_ts": None,
    "last_seed_size": 0,
    "anomaly_count": 0,
}


def note_probe(success: bool, error: str | None = None) -> None:
    with _state_lock:
        _state["last_probe_ts"] = time.time()
        if success:
            _state["probe_ok"] += 1
        else:
            _state["probe_failed"] += 1
            _state["last_probe_error"] = error or "unknown"


def note_seed(size: int) -> None:
    with _state_lock:
        _state["last_seed_ts"] = time.time()
        _state["last_seed_size"] = int(size)


def note_anomaly(anomaly: AnomalousTransaction) -> None:
    with _state_lock:
        entry = anomaly.to_dict()
        entry["ts"] = time.time()
        _anomalies.append(entry)
        _state["anomaly_count"] += 1


def recent_anomalies() -> List[Dict[str, Any]]:
    with _state_lock:
        return [dict(a) for a in _anomalies]


def get_state() -> Dict[str, Any]:
    with _state_lock:
        data = dict(_state)
        data["recent_anomalies"] = [dict(a) for a in _anomalies]
        return data


def reset_state() -> None:
    with _state_lock:
        _anomalies.clear()
        _state.update(
            probe_ok=0,
            probe_failed=0,
            last_probe_ts=None,
            last_probe_error=None,
            last_seed_ts=None,
            last_seed_size=0,
            anomaly_count=0,
        )
