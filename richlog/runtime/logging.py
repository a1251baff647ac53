from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Protocol

from richlog.config.settings import RichLogConfig
from richlog.runtime.clock import Clock, RealClock


class EventSink(Protocol):
    def log_event(self, event: str, fields: Dict[str, Any]) -> None:
        ...


class NullLogger:
    def log_event(self, event: str, fields: Dict[str, Any]) -> None:
        return None

    def close(self) -> None:
        return None


class MemoryLogger:
    def __init__(self, clock: Clock | None = None) -> None:
        self._clock = clock or RealClock()
        self.events: List[Dict[str, Any]] = []

    def log_event(self, event: str, fields: Dict[str, Any]) -> None:
        payload: Dict[str, Any] = {"ts_ms": self._clock.now_ms(), "event": event}
        payload.update(fields)
        self.events.append(payload)

    def of_kind(self, event: str) -> List[Dict[str, Any]]:
        return [e for e in self.events if e["event"] == event]

    def close(self) -> None:
        return None


class JsonlLogger:
    def __init__(
        self,
        out_dir: str | Path,
        run_id: str,
        role: str,
        clock: Clock | None = None,
    ) -> None:
        self._dir = Path(out_dir)
        self._dir.mkdir(parents=True, exist_ok=True)
        self._path = self._dir / f"{run_id}_{role}.jsonl"
        self._clock = clock or RealClock()
        self._run_id = run_id
        self._role = role
        self._fh = self._path.open("a", encoding="utf-8")

    @property
    def path(self) -> Path:
        return self._path

    def _base_event(self, event: str) -> Dict[str, Any]:
        return {
            "ts_ms": self._clock.now_ms(),
            "run_id": self._run_id,
            "event": event,
            "role": self._role,
        }

    def log_run_start(self, config: RichLogConfig) -> None:
        payload = self._base_event("run_start")
        payload["config"] = config.as_dict()
        self._write(payload)

    def log_event(self, event: str, fields: Dict[str, Any]) -> None:
        payload = self._base_event(event)
        payload.update(fields)
        self._write(payload)

    def _write(self, payload: Dict[str, Any]) -> None:
        self._fh.write(json.dumps(payload, ensure_ascii=True) + "\n")
        self._fh.flush()

    def close(self) -> None:
        self._fh.close()
