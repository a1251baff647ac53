from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Literal

SourceKind = Literal["file", "uart"]

DEFAULT_CHUNK_SIZE = 1000
DEFAULT_UUID_BYTES = 4


def _require_keys(data: Dict[str, Any], keys: Iterable[str], context: str) -> None:
    missing = [key for key in keys if key not in data]
    if missing:
        joined = ", ".join(missing)
        raise ValueError(f"missing {context} keys: {joined}")


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _strict_int(value: Any, context: str) -> int:
    if isinstance(value, bool):
        raise ValueError(f"invalid {context} value: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    raise ValueError(f"invalid {context} value: {value!r}")


@dataclass(frozen=True)
class EncoderSpec:
    chunk_size: int = DEFAULT_CHUNK_SIZE
    uuid_bytes: int = DEFAULT_UUID_BYTES

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EncoderSpec":
        return cls(
            chunk_size=_strict_int(data.get("chunk_size", DEFAULT_CHUNK_SIZE), "chunk_size"),
            uuid_bytes=_strict_int(data.get("uuid_bytes", DEFAULT_UUID_BYTES), "uuid_bytes"),
        )

    def validate(self) -> None:
        if self.chunk_size <= 0:
            raise ValueError("encoder chunk_size must be > 0")
        if not (1 <= self.uuid_bytes <= 16):
            raise ValueError("encoder uuid_bytes must be 1..16")


@dataclass(frozen=True)
class LoggingSpec:
    out_dir: str | None = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LoggingSpec":
        return cls(out_dir=_optional_str(data.get("out_dir")))


@dataclass(frozen=True)
class SourceSpec:
    kind: SourceKind = "file"
    path: str | None = None
    port: str | None = None
    baudrate: int = 115200
    encoding: str = "utf-8"
    max_line_bytes: int = 65536

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SourceSpec":
        _require_keys(data, ["kind"], "source")
        return cls(
            kind=data["kind"],
            path=_optional_str(data.get("path")),
            port=_optional_str(data.get("port")),
            baudrate=_strict_int(data.get("baudrate", 115200), "baudrate"),
            encoding=str(data.get("encoding", "utf-8")),
            max_line_bytes=_strict_int(data.get("max_line_bytes", 65536), "max_line_bytes"),
        )

    def validate(self) -> None:
        if self.kind not in ("file", "uart"):
            raise ValueError(f"invalid source kind: {self.kind}")
        if self.kind == "uart" and not self.port:
            raise ValueError("uart source requires a port")
        if self.baudrate <= 0:
            raise ValueError("source baudrate must be > 0")
        if self.max_line_bytes <= 0:
            raise ValueError("source max_line_bytes must be > 0")
        try:
            "".encode(self.encoding)
        except LookupError as exc:
            raise ValueError(f"unknown source encoding: {self.encoding}") from exc


@dataclass(frozen=True)
class RichLogConfig:
    run_id: str = "richlog"
    encoder: EncoderSpec = field(default_factory=EncoderSpec)
    logging: LoggingSpec = field(default_factory=LoggingSpec)
    source: SourceSpec | None = None
    plugins: List[Dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RichLogConfig":
        if not isinstance(data, dict):
            raise ValueError("config must be a mapping")
        source_raw = data.get("source")
        plugins_raw = data.get("plugins") or []
        if not isinstance(plugins_raw, list):
            raise ValueError("config plugins must be a list")
        return cls(
            run_id=str(data.get("run_id", "richlog")),
            encoder=EncoderSpec.from_dict(data.get("encoder") or {}),
            logging=LoggingSpec.from_dict(data.get("logging") or {}),
            source=SourceSpec.from_dict(source_raw) if source_raw else None,
            plugins=[dict(item) for item in plugins_raw],
        )

    def validate(self) -> None:
        if not self.run_id:
            raise ValueError("run_id must be non-empty")
        self.encoder.validate()
        if self.source is not None:
            self.source.validate()
        for item in self.plugins:
            if not item.get("type"):
                raise ValueError("every plugin entry requires a type")

    def as_dict(self) -> Dict[str, Any]:
        source = None
        if self.source is not None:
            source = {
                "kind": self.source.kind,
                "path": self.source.path,
                "port": self.source.port,
                "baudrate": self.source.baudrate,
                "encoding": self.source.encoding,
                "max_line_bytes": self.source.max_line_bytes,
            }
        return {
            "run_id": self.run_id,
            "encoder": {
                "chunk_size": self.encoder.chunk_size,
                "uuid_bytes": self.encoder.uuid_bytes,
            },
            "logging": {"out_dir": self.logging.out_dir},
            "source": source,
            "plugins": [dict(item) for item in self.plugins],
        }


def load_mapping(path: str | Path) -> Any:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(path)
    if path.suffix.lower() in {".yaml", ".yml"}:
        try:
            import yaml
        except ImportError as exc:
            raise RuntimeError("PyYAML is required to load YAML config files") from exc
        return yaml.safe_load(path.read_text(encoding="utf-8"))
    return json.loads(path.read_text(encoding="utf-8"))


def load_config(path: str | Path) -> RichLogConfig:
    config = RichLogConfig.from_dict(load_mapping(path) or {})
    config.validate()
    return config


def save_config(path: str | Path, config: RichLogConfig) -> None:
    path = Path(path)
    data = config.as_dict()
    if path.suffix.lower() in {".yaml", ".yml"}:
        try:
            import yaml
        except ImportError as exc:
            raise RuntimeError("PyYAML is required to write YAML config files") from exc
        path.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
    else:
        path.write_text(json.dumps(data, indent=2), encoding="utf-8")
