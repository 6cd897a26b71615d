"""pf CLI entrypoint.

Subcommands: replay.

`pf replay` builds a test-mode price store, applies the pushes of a CSV/Parquet file in
order and writes the resulting latest prices, a replay report and structured telemetry
(JSONL) into the output directory.

Exit codes: 0 every push accepted, 1 some pushes rejected, 2 invalid input or config.
"""

from __future__ import annotations

import argparse
import os
import sys
import uuid
from pathlib import Path
from typing import Any, Mapping, Optional

import orjson

from pricefeed.adapters.telemetry.jsonl import JsonlTelemetry
from pricefeed.config.config_loader import ConfigLoader, load_file_config, parse_cli_overrides
from pricefeed.config.configs import DEFAULT_TOLERANCE_S, PriceFeedConfig
from pricefeed.core.factory import build_clock, build_store
from pricefeed.core.price_store import PriceStore
from pricefeed.core.replay import ReplayReport, replay
from pricefeed.core.utility import insert_path
from pricefeed.data.loader import load_pushes
from pricefeed.errors.errors import ConfigurationError, ReplayError
from pricefeed.types.types import symbol_to_str

REPORT_SCHEMA_VERSION = 1
ENV_PREFIX = "PF_"

EXIT_OK = 0
EXIT_REJECTED = 1
EXIT_INVALID = 2


def build_parser() -> argparse.ArgumentParser:
    """
    Return the top-level CLI argument parser.
    """
    p = argparse.ArgumentParser(prog="pf")
    sub = p.add_subparsers(dest="command", required=True)

    rp = sub.add_parser("replay", help="Replay price pushes from a CSV/Parquet file")
    rp.add_argument("--input", type=Path, required=True, help="CSV or Parquet file of pushes")
    rp.add_argument("--out", type=Path, required=True, help="Output run directory")
    rp.add_argument("--owner", type=str, required=False, help="Owner identity of the store")
    rp.add_argument(
        "--tolerance",
        type=str,
        required=False,
        help="Max publish-time lead over the clock, seconds or duration like '15m'",
    )
    rp.add_argument("--start-time", type=int, required=False, help="Initial clock time")
    rp.add_argument("--config", type=Path, required=False, help="Path to a JSON config file")
    rp.add_argument(
        "--set",
        dest="config_overrides",
        action="append",  # builds a Python list (config_overrides) containing each key=value
        default=[],
        metavar="KEY=VALUE",
        help="Override a config entry (may be repeated)",
    )
    return p


def _collect_env_config(
    environ: Mapping[str, str], prefix: str = ENV_PREFIX
) -> Optional[dict[str, Any]]:
    """
    PF_START_TIME=10 -> {"start_time": "10"}; double underscores nest keys.

    Only variables naming a PriceFeedConfig field are collected, so unrelated PF_*
    variables in the environment are ignored.
    """
    env_cfg: dict[str, Any] = {}
    for key, value in environ.items():
        if not key.startswith(prefix):
            continue
        dotted = key[len(prefix) :].lower().replace("__", ".")
        if dotted.split(".", 1)[0] not in PriceFeedConfig.model_fields:
            continue
        try:
            insert_path(env_cfg, dotted, value)
        except ValueError as exc:
            raise ConfigurationError(str(exc), field=key) from exc
    return env_cfg or None


def run_replay(args: argparse.Namespace, environ: Mapping[str, str]) -> int:
    """Execute the replay flow and emit report + telemetry artifacts."""
    out_dir: Path = args.out
    out_dir.mkdir(parents=True, exist_ok=True)
    run_id = str(uuid.uuid4())
    sink = out_dir / "events.log.jsonl"

    # config resolution happens before a clock exists
    bootstrap_telemetry = JsonlTelemetry(run_id=run_id, sink_path=sink)
    loader = ConfigLoader(bootstrap_telemetry)

    file_cfg = load_file_config(args.config) if args.config else None
    cli_overrides: dict[str, Any] = parse_cli_overrides(args.config_overrides)
    if args.owner is not None:
        cli_overrides["owner"] = args.owner
    if args.tolerance is not None:
        cli_overrides["tolerance"] = args.tolerance
    if args.start_time is not None:
        cli_overrides["start_time"] = args.start_time
    # replays always drive time explicitly
    cli_overrides["test_mode"] = True

    resolved = loader.resolve(
        defaults={"tolerance": DEFAULT_TOLERANCE_S},
        file_cfg=file_cfg,
        env_cfg=_collect_env_config(environ),
        cli_overrides=cli_overrides,
    )

    clock = build_clock(resolved.config)
    telemetry = JsonlTelemetry(run_id=run_id, sink_path=sink, clock=clock)
    store = build_store(resolved.config, clock=clock, telemetry=telemetry)

    records = load_pushes(args.input)
    telemetry.log("replay_started", input=str(args.input), pushes=len(records))
    report = replay(store, records, default_caller=resolved.config.owner)
    telemetry.log(
        "replay_finished",
        accepted=report.accepted,
        rejected=len(report.rejections),
    )

    _write_json(out_dir / "latest_prices.json", _latest_prices(store))
    _write_json(
        out_dir / "replay_report.json",
        _report_payload(report, run_id=run_id, config_hash=resolved.config_hash),
    )

    print(
        f"{report.accepted}/{report.total} pushes accepted, "
        f"{len(store.symbols())} symbols supported"
    )
    return EXIT_OK if report.all_accepted else EXIT_REJECTED


def main(argv: list[str] | None = None, environ: Mapping[str, str] | None = None) -> int:
    """CLI entrypoint wrapper compatible with setuptools scripts."""
    parser = build_parser()
    args = parser.parse_args(argv)
    env = os.environ if environ is None else environ

    if args.command == "replay":
        try:
            return run_replay(args, env)
        except (ConfigurationError, ReplayError) as exc:
            print(f"pf {args.command}: {exc}", file=sys.stderr)
            return EXIT_INVALID

    # unreachable: argparse enforces a known subcommand
    parser.error(f"unknown command {args.command!r}")
    return EXIT_INVALID


def _latest_prices(store: PriceStore) -> dict[str, dict[str, int]]:
    return {
        symbol_to_str(symbol): {"publish_time": tick.publish_time, "price": tick.price}
        for symbol, tick in store.snapshot().items()
    }


def _report_payload(report: ReplayReport, *, run_id: str, config_hash: str) -> dict[str, Any]:
    return {
        "schema_version": REPORT_SCHEMA_VERSION,
        "run_id": run_id,
        "config_hash": config_hash,
        "accepted": report.accepted,
        "total": report.total,
        "rejections": [
            {
                "row": r.row,
                "symbol": r.symbol,
                "reason": r.reason.value,
                "message": r.message,
            }
            for r in report.rejections
        ],
    }


def _write_json(path: Path, payload: Mapping[str, Any]) -> None:
    path.write_bytes(orjson.dumps(payload, option=orjson.OPT_INDENT_2 | orjson.OPT_SORT_KEYS))


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
