from __future__ import annotations

import json
import random
import secrets
from typing import Any, List

from richlog.config.settings import DEFAULT_CHUNK_SIZE, DEFAULT_UUID_BYTES, EncoderSpec
from richlog.protocol.errors import InvalidPayloadKind
from richlog.protocol.hexcodec import bytes_to_hex
from richlog.protocol.wire import WireLine

CONFIG_TYPE = "config"
IMAGE_TYPE = "image"
COMMAND_TYPE = "command"


def _random_bytes(num_bytes: int) -> bytes:
    try:
        return secrets.token_bytes(num_bytes)
    except (NotImplementedError, OSError):
        return random.getrandbits(8 * num_bytes).to_bytes(num_bytes, "big")


def generate_uuid(num_bytes: int = DEFAULT_UUID_BYTES) -> str:
    if num_bytes <= 0:
        raise ValueError("num_bytes must be > 0")
    return _random_bytes(num_bytes).hex()


def _validate_field(value: str, name: str) -> None:
    if not isinstance(value, str) or not value:
        raise ValueError(f"{name} must be a non-empty string")
    if "," in value or "\n" in value or "\r" in value:
        raise ValueError(f"{name} must not contain commas or line breaks")


def payload_to_hex(payload: Any) -> str:
    if isinstance(payload, str):
        return payload.encode("utf-8").hex()
    if isinstance(payload, (bytes, bytearray, memoryview)):
        return bytes_to_hex(payload)
    raise InvalidPayloadKind(
        f"payload must be str, bytes, bytearray or memoryview, not {type(payload).__name__}"
    )


def split_hex(hex_data: str, chunk_size: int) -> List[str]:
    if isinstance(chunk_size, bool) or not isinstance(chunk_size, int) or chunk_size <= 0:
        raise ValueError("chunk_size must be a positive integer")
    if not hex_data:
        return [""]
    return [hex_data[i : i + chunk_size] for i in range(0, len(hex_data), chunk_size)]


def encode_wire_lines(
    type: str,
    payload: Any,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    uuid: str | None = None,
) -> List[WireLine]:
    _validate_field(type, "type")
    hex_data = payload_to_hex(payload)
    chunks = split_hex(hex_data, chunk_size)
    if uuid is None:
        uuid = generate_uuid()
    else:
        _validate_field(uuid, "uuid")
    total = len(chunks)
    return [
        WireLine(type=type, uuid=uuid, index=i, total=total, hex_chunk=chunk)
        for i, chunk in enumerate(chunks, start=1)
    ]


def encode(
    type: str,
    payload: Any,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    uuid: str | None = None,
) -> List[str]:
    return [line.format() for line in encode_wire_lines(type, payload, chunk_size, uuid)]


def serialize_config(config: Any) -> str:
    return json.dumps(config, separators=(",", ":"), ensure_ascii=False)


def encode_config(
    config: Any, chunk_size: int = DEFAULT_CHUNK_SIZE, uuid: str | None = None
) -> List[str]:
    return encode(CONFIG_TYPE, serialize_config(config), chunk_size, uuid)


def encode_image(
    image: bytes | bytearray | memoryview,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    uuid: str | None = None,
) -> List[str]:
    if isinstance(image, str):
        raise InvalidPayloadKind("image payload must be bytes, not str")
    return encode(IMAGE_TYPE, image, chunk_size, uuid)


def encode_command(
    output: str, chunk_size: int = DEFAULT_CHUNK_SIZE, uuid: str | None = None
) -> List[str]:
    return encode(COMMAND_TYPE, output, chunk_size, uuid)


class RichLogEncoder:
    """Encoder bound to an ``EncoderSpec``.

    Generated correlation ids use ``spec.uuid_bytes`` random bytes; an explicit
    ``uuid`` argument always wins.
    """

    def __init__(self, spec: EncoderSpec | None = None) -> None:
        self._spec = spec or EncoderSpec()
        self._spec.validate()

    @property
    def spec(self) -> EncoderSpec:
        return self._spec

    def new_uuid(self) -> str:
        return generate_uuid(self._spec.uuid_bytes)

    def encode(self, type: str, payload: Any, uuid: str | None = None) -> List[str]:
        return encode(type, payload, self._spec.chunk_size, uuid if uuid is not None else self.new_uuid())

    def encode_config(self, config: Any, uuid: str | None = None) -> List[str]:
        return self.encode(CONFIG_TYPE, serialize_config(config), uuid)

    def encode_image(self, image: bytes | bytearray | memoryview, uuid: str | None = None) -> List[str]:
        return encode_image(image, self._spec.chunk_size, uuid if uuid is not None else self.new_uuid())

    def encode_command(self, output: str, uuid: str | None = None) -> List[str]:
        return self.encode(COMMAND_TYPE, output, uuid)
