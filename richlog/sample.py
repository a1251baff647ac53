from __future__ import annotations

import struct
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Dict, List, Sequence

from richlog.encoding.encoder import encode_command, encode_config, encode_image

SAMPLE_CONFIG: Dict[str, Any] = {
    "server": {"port": 8080, "host": "localhost", "timeout": 30000, "debug": True},
    "database": {
        "host": "db.example.com",
        "port": 5432,
        "username": "admin",
        "password": "********",
        "database": "app_db",
        "poolSize": 10,
        "connectionTimeout": 5000,
    },
    "logging": {
        "level": "info",
        "file": "/var/log/app.log",
        "rotation": {"maxSize": "10MB", "maxFiles": 5, "compress": True},
    },
    "features": {
        "enableCache": True,
        "enableNotifications": True,
        "cacheTime": 3600,
        "maxUploadSize": 52428800,
    },
}

SAMPLE_COMMAND_OUTPUT = """$ df -h
Filesystem      Size  Used Avail Use% Mounted on
udev            3.9G     0  3.9G   0% /dev
tmpfs           796M  1.7M  794M   1% /run
/dev/nvme0n1p2  457G  199G  235G  46% /
tmpfs           3.9G  132M  3.8G   4% /dev/shm

$ ps aux | grep node
user       1234  0.6  1.2 1156376 102032 ?      Ssl  08:30   1:23 node /usr/local/bin/npm start
user       5678  0.0  0.0   9032   736 pts/0    S+   10:45   0:00 grep --color=auto node

$ uptime
 10:46:03 up 2 days,  2:15,  3 users,  load average: 0.52, 0.58, 0.59
"""


def build_bmp(width: int = 200, height: int = 100) -> bytes:
    """24-bit bottom-up BMP with a blue/green gradient and fixed red channel."""
    if width <= 0 or height <= 0:
        raise ValueError("width and height must be > 0")
    row_bytes = width * 3
    padding = (4 - row_bytes % 4) % 4
    image_size = (row_bytes + padding) * height
    header = struct.pack(
        "<2sIHHIIiiHHIIiiII",
        b"BM",
        54 + image_size,
        0,
        0,
        54,
        40,
        width,
        height,
        1,
        24,
        0,
        image_size,
        2835,
        2835,
        0,
        0,
    )
    pixels = bytearray()
    for y in range(height):
        for x in range(width):
            pixels += bytes((round(255 * x / width), round(255 * y / height), 128))
        pixels += b"\x00" * padding
    return header + bytes(pixels)


def _stamp(ts: datetime) -> str:
    return ts.strftime("%Y-%m-%d %H:%M:%S.") + f"{ts.microsecond // 1000:03d}"


def timestamp_lines(lines: Sequence[str], start: datetime) -> List[str]:
    return [f"[{_stamp(start + timedelta(milliseconds=i))}] {line}" for i, line in enumerate(lines)]


def generate_sample_lines(
    chunk_size: int = 1000,
    uuids: Sequence[str | None] = (None, None, None),
    image: bytes | None = None,
) -> List[str]:
    if len(uuids) != 3:
        raise ValueError("uuids must hold one entry per sample payload")
    config_uuid, image_uuid, command_uuid = uuids
    config_lines = timestamp_lines(
        encode_config(SAMPLE_CONFIG, chunk_size, config_uuid),
        datetime(2023, 8, 15, 10, 0, 1, 236000),
    )
    image_lines = timestamp_lines(
        encode_image(image if image is not None else build_bmp(), chunk_size, image_uuid),
        datetime(2023, 8, 15, 10, 15, 30, 533000),
    )
    command_lines = timestamp_lines(
        encode_command(SAMPLE_COMMAND_OUTPUT, chunk_size, command_uuid),
        datetime(2023, 8, 15, 11, 0, 0, 755000),
    )
    return [
        "[2023-08-15 10:00:01.235] application starting",
        *config_lines,
        "[2023-08-15 10:00:02.105] configuration loaded",
        "[2023-08-15 10:15:30.532] anomaly detected",
        *image_lines,
        "[2023-08-15 10:15:31.023] anomaly recorded",
        "[2023-08-15 11:00:00.754] running disk space check",
        *command_lines,
        "[2023-08-15 11:00:01.125] check finished",
    ]


def write_sample_log(path: str | Path, **kwargs: Any) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(generate_sample_lines(**kwargs)) + "\n", encoding="utf-8")
    return path
