from __future__ import annotations

from abc import ABC, abstractmethod


class ILineSource(ABC):
    @abstractmethod
    def read_line(self, timeout_ms: int) -> str | None:
        raise NotImplementedError

    @property
    @abstractmethod
    def exhausted(self) -> bool:
        raise NotImplementedError

    @abstractmethod
    def close(self) -> None:
        raise NotImplementedError
