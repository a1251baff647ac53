from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List

from richlog.config import EncoderSpec, RichLogConfig, load_config
from richlog.encoding import RichLogEncoder, serialize_config
from richlog.plugins import PluginRegistry, default_registry, load_plugin_descriptors
from richlog.plugins.handlers import sniff_image_mime
from richlog.reassembly import CompletedItem, Reassembler
from richlog.runtime.clock import RealClock
from richlog.runtime.logging import JsonlLogger, NullLogger
from richlog.runtime.reader import LogReader
from richlog.sample import write_sample_log
from richlog.sources import FileLineSource, ILineSource, UartLineSource

_EXTENSIONS = {
    "config": ".json",
    "command": ".txt",
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/gif": ".gif",
    "image/bmp": ".bmp",
    "image/webp": ".webp",
}


def _load_config(path: str | None) -> RichLogConfig:
    if path:
        return load_config(path)
    config = RichLogConfig()
    config.validate()
    return config


def _build_registry(config: RichLogConfig, plugins_path: str | None) -> PluginRegistry:
    extra = list(config.plugins)
    if plugins_path:
        extra.extend(load_plugin_descriptors(plugins_path))
    return default_registry(extra)


def _read_payload(args: argparse.Namespace) -> Any:
    if args.text is not None:
        return args.text
    if args.json is not None:
        return serialize_config(json.loads(Path(args.json).read_text(encoding="utf-8")))
    if args.file is not None:
        return Path(args.file).read_bytes()
    return sys.stdin.read()


def _run_encode(args: argparse.Namespace) -> int:
    config = _load_config(args.config)
    spec = config.encoder
    if args.chunk_size is not None:
        spec = EncoderSpec(chunk_size=args.chunk_size, uuid_bytes=spec.uuid_bytes)
    encoder = RichLogEncoder(spec)
    lines = encoder.encode(args.type, _read_payload(args), uuid=args.uuid)
    output = "\n".join(lines) + "\n"
    if args.out:
        Path(args.out).write_text(output, encoding="utf-8")
    else:
        sys.stdout.write(output)
    return 0


def _item_extension(item: CompletedItem) -> str:
    if item.type == "image":
        return _EXTENSIONS.get(sniff_image_mime(item.raw_bytes), ".bin")
    return _EXTENSIONS.get(item.type, ".bin")


def _describe(item: CompletedItem, registry: PluginRegistry) -> Dict[str, Any]:
    known = registry.is_type_known(item.type)
    entry: Dict[str, Any] = {
        "uuid": item.uuid,
        "type": item.type,
        "bytes": item.size,
        "known": known,
    }
    if known:
        view = registry.convert(item)
        entry["view"] = view.kind
        error = getattr(view, "error", None)
        if error:
            entry["error"] = error
    return entry


def _open_sources(args: argparse.Namespace, config: RichLogConfig) -> List[ILineSource]:
    source_spec = config.source
    encoding = source_spec.encoding if source_spec else "utf-8"
    if args.uart_port or (not args.log and source_spec and source_spec.kind == "uart"):
        port = args.uart_port or source_spec.port  # type: ignore[union-attr]
        baudrate = args.uart_baud or (source_spec.baudrate if source_spec else 115200)
        max_line_bytes = source_spec.max_line_bytes if source_spec else 65536
        return [
            UartLineSource(
                port=port, baudrate=baudrate, encoding=encoding, max_line_bytes=max_line_bytes
            )
        ]
    paths = list(args.log or [])
    if not paths and source_spec and source_spec.path:
        paths = [source_spec.path]
    if not paths:
        raise ValueError("--log or --uart-port is required")
    return [FileLineSource(path, encoding=encoding) for path in paths]


def _run_scan(args: argparse.Namespace) -> int:
    config = _load_config(args.config)
    registry = _build_registry(config, args.plugins)
    events_dir = args.events_dir or config.logging.out_dir
    logger = (
        JsonlLogger(events_dir, config.run_id, "scan", clock=RealClock())
        if events_dir
        else NullLogger()
    )
    if isinstance(logger, JsonlLogger):
        logger.log_run_start(config)
    reassembler = Reassembler(logger=logger)
    out_dir = Path(args.out_dir) if args.out_dir else None
    if out_dir is not None:
        out_dir.mkdir(parents=True, exist_ok=True)

    report: List[Dict[str, Any]] = []

    def _on_item(item: CompletedItem) -> None:
        entry = _describe(item, registry)
        if out_dir is not None:
            target = out_dir / f"{item.uuid}{_item_extension(item)}"
            target.write_bytes(item.raw_bytes)
            entry["path"] = str(target)
        report.append(entry)

    try:
        sources = _open_sources(args, config)
        try:
            for source in sources:
                # --max-items bounds the whole scan, not each source.
                remaining = None if args.max_items is None else args.max_items - len(report)
                if remaining is not None and remaining <= 0:
                    break
                reader = LogReader(source, reassembler, logger, on_item=_on_item)
                try:
                    reader.run(step_ms=args.step_ms, max_items=remaining, max_seconds=args.max_seconds)
                except KeyboardInterrupt:
                    break
        finally:
            for source in sources:
                source.close()
    finally:
        logger.close()

    output = json.dumps(
        {
            "items": report,
            "pending": reassembler.pending_uuids(),
            "stats": reassembler.stats(),
        },
        indent=2,
    )
    if args.out:
        Path(args.out).write_text(output, encoding="utf-8")
    else:
        print(output)
    return 0


def _run_sample(args: argparse.Namespace) -> int:
    path = write_sample_log(args.out, chunk_size=args.chunk_size)
    print(str(path))
    return 0


def _run_plugins(args: argparse.Namespace) -> int:
    config = _load_config(args.config)
    registry = _build_registry(config, args.plugins)
    types = {
        type_name: registry.get_plugin_info(type_name).as_dict()  # type: ignore[union-attr]
        for type_name in registry.registered_types()
    }
    print(json.dumps(types, indent=2))
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="richlog")
    sub = parser.add_subparsers(dest="cmd", required=True)

    enc = sub.add_parser("encode", help="encode a payload into wire lines")
    enc.add_argument("--type", required=True)
    group = enc.add_mutually_exclusive_group()
    group.add_argument("--text")
    group.add_argument("--file", help="encode the raw bytes of a file")
    group.add_argument("--json", help="load a JSON file and encode it compactly")
    enc.add_argument("--chunk-size", type=int)
    enc.add_argument("--uuid")
    enc.add_argument("--config")
    enc.add_argument("--out")
    enc.set_defaults(func=_run_encode)

    scan = sub.add_parser("scan", help="reassemble payloads embedded in logs")
    scan.add_argument("--log", action="append", help="path to a log file (repeatable)")
    scan.add_argument("--uart-port")
    scan.add_argument("--uart-baud", type=int)
    scan.add_argument("--config")
    scan.add_argument("--plugins", help="JSON or YAML plugin descriptor file")
    scan.add_argument("--out-dir", help="write each completed payload to this directory")
    scan.add_argument("--events-dir", help="write JSONL events to this directory")
    scan.add_argument("--out", help="write the JSON report here instead of stdout")
    scan.add_argument("--step-ms", type=int, default=0)
    scan.add_argument("--max-items", type=int)
    scan.add_argument("--max-seconds", type=float)
    scan.set_defaults(func=_run_scan)

    sample = sub.add_parser("sample", help="write a sample log with embedded payloads")
    sample.add_argument("--out", required=True)
    sample.add_argument("--chunk-size", type=int, default=1000)
    sample.set_defaults(func=_run_sample)

    plugins = sub.add_parser("plugins", help="list registered payload types")
    plugins.add_argument("--config")
    plugins.add_argument("--plugins")
    plugins.set_defaults(func=_run_plugins)

    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
