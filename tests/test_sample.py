import json
import re
import struct
from pathlib import Path

import pytest

from richlog.reassembly import reassemble
from richlog.sample import (
    SAMPLE_COMMAND_OUTPUT,
    SAMPLE_CONFIG,
    build_bmp,
    generate_sample_lines,
    write_sample_log,
)

_STAMP = re.compile(r"^\[\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}\.\d{3}\] ")


def test_build_bmp_default_size() -> None:
    data = build_bmp()
    assert len(data) == 60054
    assert data[:2] == b"BM"
    assert struct.unpack_from("<I", data, 2)[0] == len(data)
    assert struct.unpack_from("<ii", data, 18) == (200, 100)


def test_build_bmp_pads_rows() -> None:
    data = build_bmp(3, 2)
    assert len(data) == 78
    assert data[54:57] == bytes((0, 0, 128))


def test_build_bmp_rejects_empty() -> None:
    with pytest.raises(ValueError, match="width and height must be > 0"):
        build_bmp(0, 1)


def test_sample_lines_reassemble() -> None:
    lines = generate_sample_lines(chunk_size=500, uuids=("cfg00001", "img00002", "cmd00003"))
    assert all(_STAMP.match(line) for line in lines)
    assert lines[0] == "[2023-08-15 10:00:01.235] application starting"
    assert lines[1].startswith("[2023-08-15 10:00:01.236] RICHLOG:config,cfg00001,1,")
    assert lines[2].startswith("[2023-08-15 10:00:01.237] ")

    items = {item.type: item for item in reassemble(lines)}
    assert set(items) == {"config", "image", "command"}
    assert json.loads(items["config"].raw_bytes) == SAMPLE_CONFIG
    assert items["image"].raw_bytes == build_bmp()
    assert items["command"].text() == SAMPLE_COMMAND_OUTPUT
    assert items["image"].uuid == "img00002"


def test_sample_lines_with_custom_image() -> None:
    lines = generate_sample_lines(image=b"GIF89a", uuids=("a", "b", "c"))
    items = {item.type: item for item in reassemble(lines)}
    assert items["image"].raw_bytes == b"GIF89a"


def test_sample_uuids_length_checked() -> None:
    with pytest.raises(ValueError, match="one entry per sample payload"):
        generate_sample_lines(uuids=("a",))


def test_write_sample_log(tmp_path: Path) -> None:
    path = write_sample_log(tmp_path / "nested" / "sample.log", chunk_size=2000)
    text = path.read_text(encoding="utf-8")
    assert text.endswith("check finished\n")
    assert len(reassemble(text.splitlines())) == 3
