import io
import json
import sys
from pathlib import Path
from types import SimpleNamespace

import pytest

from richlog.cli import main
from richlog.encoding import encode
from richlog.sample import SAMPLE_CONFIG


def _scan_report(capsys: pytest.CaptureFixture[str], argv: list[str]) -> dict:
    assert main(argv) == 0
    return json.loads(capsys.readouterr().out)


def test_encode_text(capsys: pytest.CaptureFixture[str]) -> None:
    code = main(["encode", "--type", "command", "--text", "hi", "--chunk-size", "2", "--uuid", "deadbeef"])
    assert code == 0
    assert capsys.readouterr().out == "RICHLOG:command,deadbeef,1,2,68\nRICHLOG:command,deadbeef,2,2,69\n"


def test_encode_json_file_to_out(tmp_path: Path) -> None:
    src = tmp_path / "cfg.json"
    src.write_text(json.dumps({"a": 1, "b": [1, 2]}, indent=4), encoding="utf-8")
    out = tmp_path / "lines.txt"
    assert main(["encode", "--type", "config", "--json", str(src), "--uuid", "u", "--out", str(out)]) == 0
    expected = '{"a":1,"b":[1,2]}'.encode("utf-8").hex()
    assert out.read_text(encoding="utf-8") == f"RICHLOG:config,u,1,1,{expected}\n"


def test_encode_binary_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    src = tmp_path / "blob.bin"
    src.write_bytes(b"\x00\xff")
    assert main(["encode", "--type", "image", "--file", str(src), "--uuid", "i"]) == 0
    assert capsys.readouterr().out == "RICHLOG:image,i,1,1,00ff\n"


def test_encode_stdin_and_config_uuid_width(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    cfg = tmp_path / "richlog.yaml"
    cfg.write_text("encoder:\n  chunk_size: 4\n  uuid_bytes: 8\n", encoding="utf-8")
    monkeypatch.setattr(sys, "stdin", io.StringIO("abcd"))
    assert main(["encode", "--type", "command", "--config", str(cfg)]) == 0
    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 2
    uuid = lines[0].split(",")[1]
    assert len(uuid) == 16
    assert lines[1] == f"RICHLOG:command,{uuid},2,2,6364"


def test_encode_rejects_bad_type() -> None:
    with pytest.raises(ValueError, match="must not contain commas"):
        main(["encode", "--type", "a,b", "--text", "x"])


def test_sample_then_scan(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    log = tmp_path / "sample.log"
    assert main(["sample", "--out", str(log), "--chunk-size", "300"]) == 0
    assert capsys.readouterr().out.strip() == str(log)

    out_dir = tmp_path / "items"
    events_dir = tmp_path / "events"
    report_path = tmp_path / "report.json"
    argv = [
        "scan",
        "--log",
        str(log),
        "--out-dir",
        str(out_dir),
        "--events-dir",
        str(events_dir),
        "--out",
        str(report_path),
    ]
    assert main(argv) == 0
    report = json.loads(report_path.read_text(encoding="utf-8"))

    assert [entry["type"] for entry in report["items"]] == ["config", "image", "command"]
    assert [entry["view"] for entry in report["items"]] == ["config", "image", "command"]
    assert all(entry["known"] for entry in report["items"])
    assert report["pending"] == []
    assert report["stats"]["completed"] == 3

    suffixes = sorted(Path(entry["path"]).suffix for entry in report["items"])
    assert suffixes == [".bmp", ".json", ".txt"]
    config_entry = report["items"][0]
    assert json.loads(Path(config_entry["path"]).read_text(encoding="utf-8")) == SAMPLE_CONFIG

    events_path = events_dir / "richlog_scan.jsonl"
    events = [json.loads(line) for line in events_path.read_text(encoding="utf-8").splitlines()]
    kinds = [event["event"] for event in events]
    assert kinds[0] == "run_start"
    assert kinds.count("item_completed") == 3
    assert kinds[-1] == "reader_done"


def test_scan_reports_unknown_types_and_bad_config(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    log = tmp_path / "mixed.log"
    lines = (
        ["start"]
        + encode("trace", "t", uuid="t1")
        + encode("config", "{oops", uuid="c1")
        + ["RICHLOG:image,p1,1,2,89"]
    )
    log.write_text("\n".join(lines) + "\n", encoding="utf-8")
    report = _scan_report(capsys, ["scan", "--log", str(log)])

    by_uuid = {entry["uuid"]: entry for entry in report["items"]}
    assert by_uuid["t1"] == {"uuid": "t1", "type": "trace", "bytes": 1, "known": False}
    assert by_uuid["c1"]["view"] == "config"
    assert by_uuid["c1"]["error"] == "invalid JSON"
    assert report["pending"] == ["p1"]


def test_scan_with_extra_plugins(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    log = tmp_path / "trace.log"
    log.write_text("\n".join(encode("trace", "t", uuid="t1")) + "\n", encoding="utf-8")
    plugins = tmp_path / "plugins.json"
    plugins.write_text(json.dumps([{"type": "trace"}]), encoding="utf-8")
    report = _scan_report(capsys, ["scan", "--log", str(log), "--plugins", str(plugins)])
    assert report["items"][0]["known"] is True
    assert report["items"][0]["view"] == "generic"


def test_scan_multiple_logs_share_state(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    lines = encode("command", "hello", chunk_size=4, uuid="split")
    first = tmp_path / "a.log"
    second = tmp_path / "b.log"
    first.write_text("\n".join(lines[:1]) + "\n", encoding="utf-8")
    second.write_text("\n".join(lines[1:]) + "\n", encoding="utf-8")
    report = _scan_report(capsys, ["scan", "--log", str(first), "--log", str(second)])
    assert [entry["uuid"] for entry in report["items"]] == ["split"]


def test_scan_source_from_yaml_config(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    log = tmp_path / "app.log"
    log.write_text("\n".join(encode("command", "ok", uuid="y1")) + "\n", encoding="utf-8")
    cfg = tmp_path / "richlog.yaml"
    cfg.write_text(
        f"run_id: cfgrun\nsource:\n  kind: file\n  path: {log}\nlogging:\n  out_dir: {tmp_path / 'ev'}\n",
        encoding="utf-8",
    )
    report = _scan_report(capsys, ["scan", "--config", str(cfg)])
    assert [entry["uuid"] for entry in report["items"]] == ["y1"]
    assert (tmp_path / "ev" / "cfgrun_scan.jsonl").exists()


def test_scan_requires_a_source() -> None:
    with pytest.raises(ValueError, match="--log or --uart-port is required"):
        main(["scan"])


def test_scan_uart(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    payload = ("\r\n".join(["boot"] + encode("command", "hi", chunk_size=2, uuid="u1")) + "\r\n").encode()

    class _FakeSerial:
        def __init__(self, *, port: str, baudrate: int, timeout: float) -> None:
            self.port = port
            self.baudrate = baudrate
            self._buf = bytearray(payload)

        @property
        def in_waiting(self) -> int:
            return len(self._buf)

        def read(self, n: int) -> bytes:
            out = bytes(self._buf[:n])
            del self._buf[:n]
            return out

        def close(self) -> None:
            return None

    monkeypatch.setitem(sys.modules, "serial", SimpleNamespace(Serial=_FakeSerial))
    report = _scan_report(
        capsys, ["scan", "--uart-port", "/dev/ttyUSB0", "--uart-baud", "9600", "--max-items", "1"]
    )
    assert [entry["uuid"] for entry in report["items"]] == ["u1"]


def test_plugins_listing(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    plugins = tmp_path / "plugins.yaml"
    plugins.write_text("plugins:\n  - type: trace\n    icon: bug\n", encoding="utf-8")
    assert main(["plugins", "--plugins", str(plugins)]) == 0
    listing = json.loads(capsys.readouterr().out)
    assert list(listing) == ["config", "image", "command", "trace"]
    assert listing["trace"]["icon"] == "bug"
    assert listing["image"]["handler"] == "image"


def test_scan_max_items_spans_all_logs(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    first = tmp_path / "a.log"
    second = tmp_path / "b.log"
    first.write_text("\n".join(encode("command", "one", uuid="m1")) + "\n", encoding="utf-8")
    second.write_text("\n".join(encode("command", "two", uuid="m2")) + "\n", encoding="utf-8")
    report = _scan_report(
        capsys, ["scan", "--log", str(first), "--log", str(second), "--max-items", "1"]
    )
    assert [entry["uuid"] for entry in report["items"]] == ["m1"]
    assert report["stats"]["lines_seen"] == 1
