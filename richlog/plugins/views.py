from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Tuple, Union


@dataclass(frozen=True)
class ConfigView:
    data: Any
    text: str
    error: str | None = None
    kind: Literal["config"] = field(default="config", init=False)


@dataclass(frozen=True)
class ImageView:
    mime_type: str
    data_uri: str
    kind: Literal["image"] = field(default="image", init=False)


@dataclass(frozen=True)
class CommandView:
    text: str
    lines: Tuple[str, ...]
    kind: Literal["command"] = field(default="command", init=False)


@dataclass(frozen=True)
class GenericView:
    type: str
    text: str
    kind: Literal["generic"] = field(default="generic", init=False)


PayloadView = Union[ConfigView, ImageView, CommandView, GenericView]
