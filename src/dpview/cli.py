from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from dataclasses import replace
from datetime import UTC, datetime, timedelta
from pathlib import Path

from pydantic import ValidationError

from dpview.core.errors import GrammarError, SchemaError
from dpview.core.frames import Frame, parse_utc_timestamp
from dpview.core.schema import QueryDescriptor, TimeRange
from dpview.datasource import DataSource
from dpview.io import ClientError, ClientSettings

logger = logging.getLogger(__name__)

_COMMANDS = ("health", "entities", "overview", "query", "dashboard")


def _add_common_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--api-url", type=str, default="", help="Backend API URL (overrides config).")
    p.add_argument("--config", type=str, default=None, help="Path to a dpview TOML config.")
    p.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level.",
    )


def _settings(args: argparse.Namespace) -> ClientSettings:
    """Load settings (env > TOML > defaults), apply --api-url, and validate."""
    logging.basicConfig(
        level=getattr(logging, args.log_level), format="%(levelname)s %(name)s: %(message)s"
    )
    s = ClientSettings.load(args.config)
    if args.api_url:
        s = replace(s, api_url=args.api_url)
    return s.validate()


def _make_datasource(settings: ClientSettings) -> DataSource:
    return DataSource(settings)


def _print_frame(frame: Frame) -> None:
    print(frame.to_polars())


def _cmd_health(argv: list[str]) -> int:
    p = argparse.ArgumentParser(prog="dpview health", description="Check the backend API.")
    _add_common_args(p)
    args = p.parse_args(argv)

    async def run() -> int:
        async with _make_datasource(_settings(args)) as ds:
            status = await ds.health_check()
        print(f"[{'INFO' if status.ok else 'ERROR'}] {status.status}: {status.message}")
        return 0 if status.ok else 1

    return asyncio.run(run())


def _cmd_entities(argv: list[str]) -> int:
    p = argparse.ArgumentParser(prog="dpview entities", description="List entity types.")
    _add_common_args(p)
    args = p.parse_args(argv)

    async def run() -> int:
        async with _make_datasource(_settings(args)) as ds:
            catalog = await ds.get_entity_spec()
        for key, spec in catalog.items():
            print(f"{key}\t{spec.name}\t~{spec.estimated_id_count}\t{len(spec.attributes)} attributes")
        return 0

    return asyncio.run(run())


def _cmd_overview(argv: list[str]) -> int:
    p = argparse.ArgumentParser(
        prog="dpview overview", description="Show current values of an entity type."
    )
    p.add_argument("etype", type=str, help="Entity type key.")
    p.add_argument("--filter", dest="eid_filter", type=str, default="", help="Entity id filter.")
    p.add_argument("--full", action="store_true", help="Full overview instead of the preview.")
    _add_common_args(p)
    args = p.parse_args(argv)

    async def run() -> int:
        async with _make_datasource(_settings(args)) as ds:
            if args.full:
                frame = await ds.full_overview_query(args.etype, args.eid_filter or None)
            else:
                frame = await ds.entity_overview_query(args.etype, args.eid_filter)
        _print_frame(frame)
        return 0

    return asyncio.run(run())


def _timestamp(text: str) -> datetime:
    try:
        return parse_utc_timestamp(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an ISO timestamp: {text!r}") from None


def _time_range(start: datetime | None, end: datetime | None) -> TimeRange:
    to = end or datetime.now(tz=UTC)
    frm = start or to - timedelta(hours=24)
    return TimeRange(start=frm, end=to)


def _cmd_query(argv: list[str]) -> int:
    p = argparse.ArgumentParser(prog="dpview query", description="Dispatch one query.")
    p.add_argument("--etype", type=str, required=True, help="Entity type key.")
    p.add_argument(
        "--kind",
        type=str,
        required=True,
        help="CURRENT_ATTR, HISTORY_ATTR, CURRENT_ETYPE_OVERVIEW or CURRENT_ATTR_OVERVIEW.",
    )
    p.add_argument("--attr", type=str, default=None, help="Attribute id.")
    p.add_argument("--eid", type=str, default=None, help="Entity id.")
    p.add_argument("--from", dest="start", type=_timestamp, default=None, help="Window start (ISO, UTC).")
    p.add_argument("--to", dest="end", type=_timestamp, default=None, help="Window end (ISO, UTC).")
    _add_common_args(p)
    args = p.parse_args(argv)

    descriptor = QueryDescriptor(
        query_kind=args.kind, entity_type=args.etype, attribute_id=args.attr, entity_id=args.eid
    )
    window = _time_range(args.start, args.end)

    async def run() -> int:
        async with _make_datasource(_settings(args)) as ds:
            (result,) = await ds.query([descriptor], window)
        if result.error is not None:
            print(f"[ERROR] {result.error}", file=sys.stderr)
            return 1
        if not result.frames:
            print("[WARN] No frames (invalid target).")
        for frame in result.frames:
            _print_frame(frame)
        return 0

    return asyncio.run(run())


def _cmd_dashboard(argv: list[str]) -> int:
    p = argparse.ArgumentParser(
        prog="dpview dashboard", description="Generate a dashboard JSON document."
    )
    p.add_argument("etype", type=str, help="Entity type key.")
    p.add_argument(
        "--variant", choices=["per-id", "full"], default="per-id", help="Dashboard variant."
    )
    p.add_argument("--eid", type=str, default=None, help="Example entity id (per-id only).")
    p.add_argument("--out", type=str, default="", help="Output path (stdout when omitted).")
    _add_common_args(p)
    args = p.parse_args(argv)

    async def run() -> int:
        async with _make_datasource(_settings(args)) as ds:
            if args.variant == "full":
                dashboard = await ds.generate_full_overview_dashboard(args.etype)
            else:
                dashboard = await ds.generate_per_id_dashboard(args.etype, args.eid)
        text = dashboard.to_json(indent=2)
        if args.out:
            out = Path(args.out)
            out.parent.mkdir(parents=True, exist_ok=True)
            out.write_text(text + "\n", encoding="utf-8")
            print(f"[INFO] Wrote dashboard to {out}")
        else:
            print(text)
        return 0

    return asyncio.run(run())


def build_argparser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="dpview", description="Entity catalog browser and dashboard generator."
    )
    sub = p.add_subparsers(dest="cmd", required=True)
    for name in _COMMANDS:
        sub.add_parser(name)
    return p


def main(argv: list[str] | None = None) -> None:
    argv = list(sys.argv[1:] if argv is None else argv)
    if not argv:
        build_argparser().print_help()
        return
    cmd, rest = argv[0], argv[1:]
    handlers = {
        "health": _cmd_health,
        "entities": _cmd_entities,
        "overview": _cmd_overview,
        "query": _cmd_query,
        "dashboard": _cmd_dashboard,
    }
    handler = handlers.get(cmd)
    if handler is None:
        print(f"Unknown command: {cmd}", file=sys.stderr)
        raise SystemExit(2)
    try:
        code = handler(rest)
    except (ClientError, SchemaError, GrammarError, ValidationError) as exc:
        logger.debug("command %s failed", cmd, exc_info=True)
        print(f"[ERROR] {exc}", file=sys.stderr)
        code = 1
    raise SystemExit(code)


if __name__ == "__main__":
    main()
