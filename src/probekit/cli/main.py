"""
Command-line interface for probekit.

Two commands are available:

    probekit check CONFIG [--strict]
        Compile the probes of a configuration file and list the active ones.

    probekit replay CONFIG EVENTS [--seed N] [--dry-run]
        Replay a JSON-lines event file through the probe engine, flush every
        probe at the end and wait for the writes.

An event line is either ``{"event": "some:event"}`` (optionally with a
``"document"``) or a document ``{"index", "collection", "_id", "body"}``,
replayed as a ``data:beforeCreate`` event.
"""

import argparse
import asyncio
import json
import logging
import sys
import tomllib
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from ..config import load_config
from ..engine.plugin import ProbePlugin
from ..matching.simple import SimpleMatcher
from ..notifications import MEASURE_EVENT, CallbackNotifier
from ..probes.compiler import compile_probes
from ..storage.memory_storage import MemoryStorage
from ..validation import ValidationError, handle_cli_error

# --- Logging Setup ---
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)-5.5s] %(name)s:%(filename)s:%(lineno)d\t %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    stream=sys.stdout,
)
logger = logging.getLogger(__name__)

DOCUMENT_EVENT = "data:beforeCreate"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="probekit",
        description="Aggregate application events into probe measures.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    check = subparsers.add_parser("check", help="Validate a probe configuration file.")
    check.add_argument("config", type=Path, help="Path to the probes.toml file")
    check.add_argument(
        "--strict",
        action="store_true",
        help="Fail on the first invalid probe instead of dropping it.",
    )

    replay = subparsers.add_parser("replay", help="Replay a JSON-lines event file.")
    replay.add_argument("config", type=Path, help="Path to the probes.toml file")
    replay.add_argument("events", type=Path, help="Path to the JSON-lines event file")
    replay.add_argument("--seed", type=int, default=None, help="Seed of the sampler probes.")
    replay.add_argument(
        "--dry-run",
        action="store_true",
        help="Keep measures in memory instead of writing them to storage.",
    )
    return parser


def read_events(path: Path) -> Iterator[Dict[str, Any]]:
    """
    Yield the events of a JSON-lines file, skipping blank lines.

    Raises:
        ValidationError: On a line that is not a JSON object
    """
    with open(path, "r", encoding="utf-8") as f:
        for line_number, line in enumerate(f, start=1):
            if not line.strip():
                continue
            try:
                entry = json.loads(line)
            except json.JSONDecodeError as e:
                raise ValidationError(
                    f"line {line_number} is not valid JSON: {e}",
                    field_name=str(path),
                ) from e
            if not isinstance(entry, dict):
                raise ValidationError(
                    f"line {line_number} must be a JSON object",
                    field_name=str(path),
                    value=entry,
                )
            yield entry


def run_check(config_path: Path, strict: bool = False) -> int:
    """Compile a configuration file and print its active probes."""
    app_config = load_config(config_path)
    probes = compile_probes(app_config.probes, strict=strict)

    print(f"{len(probes)} active probe(s) out of {len(app_config.probes)}")
    for name, probe in probes.items():
        interval = f"{probe.interval_ms}ms" if probe.interval_ms else "none"
        volatile = " volatile" if probe.volatile else ""
        print(f"  {name}: {probe.type.value}, interval {interval}{volatile}")

    return 0 if len(probes) == len(app_config.probes) else 1


async def run_replay(
    config_path: Path,
    events_path: Path,
    seed: Optional[int] = None,
    dry_run: bool = False,
) -> Dict[str, int]:
    """
    Replay an event file through a freshly initialized plugin.

    Returns:
        Replay statistics: events replayed and measures notified
    """
    app_config = load_config(config_path)

    notified: List[Dict[str, Any]] = []
    notifier = CallbackNotifier()
    notifier.subscribe(MEASURE_EVENT, notified.append)

    plugin = ProbePlugin()
    await plugin.init(
        app_config,
        matcher=SimpleMatcher(),
        notifier=notifier,
        storage=MemoryStorage() if dry_run else None,
        seed=seed,
    )
    if plugin.dummy:
        logger.warning("No active probe, nothing to replay")
        return {"events": 0, "measures": 0}

    replayed = 0
    try:
        for entry in read_events(events_path):
            if "event" in entry:
                await plugin.handle(entry["event"], entry.get("document"))
            else:
                await plugin.handle(DOCUMENT_EVENT, entry)
            replayed += 1

        plugin.engine.flush_all()
    finally:
        await plugin.shutdown(drain=True)

    logger.info(f"Replayed {replayed} event(s), {len(notified)} measure(s) flushed")
    return {"events": replayed, "measures": len(notified)}


def main_cli(argv: Optional[List[str]] = None) -> None:
    """
    Main command-line interface for probekit.

    Raises:
        SystemExit: With the command exit code, or 1 on configuration errors
    """
    args = build_parser().parse_args(argv)

    try:
        if args.command == "check":
            exit_code = run_check(args.config, strict=args.strict)
        else:
            stats = asyncio.run(
                run_replay(args.config, args.events, seed=args.seed, dry_run=args.dry_run)
            )
            print(f"{stats['events']} event(s) replayed, {stats['measures']} measure(s) flushed")
            exit_code = 0
    except (FileNotFoundError, ValidationError, tomllib.TOMLDecodeError) as e:
        handle_cli_error(
            error=e,
            context=f"{args.command} command",
            exit_code=1,
            include_traceback=False,
            logger=logger,
        )

    sys.exit(exit_code)


if __name__ == "__main__":
    main_cli()
