from __future__ import annotations

import re

from richlog.protocol.errors import MalformedHex

_HEX_RE = re.compile(r"[0-9a-fA-F]*")


def bytes_to_hex(data: bytes | bytearray | memoryview) -> str:
    return bytes(data).hex()


def validate_hex(hex_string: str) -> None:
    if _HEX_RE.fullmatch(hex_string) is None:
        raise MalformedHex("hex data contains non-hex characters")
    if len(hex_string) % 2 != 0:
        raise MalformedHex(f"hex data length {len(hex_string)} is odd")


def hex_to_bytes(hex_string: str) -> bytes:
    validate_hex(hex_string)
    return bytes.fromhex(hex_string)


def hex_to_text(hex_string: str, encoding: str = "utf-8") -> str:
    return hex_to_bytes(hex_string).decode(encoding)
