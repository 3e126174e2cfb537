"""
Event validation entrypoint.
Validates every scouted match of one event from exported JSON files, stores the
results, and prints the event summary.

Usage:
    python -m validation.main --event 2026test --catalog game.json \
        --matches matches.json --scouting scouting.json [--store redis]
"""
from __future__ import annotations

import argparse
import asyncio
import json
import signal
import sys
from pathlib import Path
from typing import Optional

# Ensure backend root is on path when run as python -m validation.main
_backend = Path(__file__).resolve().parent.parent
if str(_backend) not in sys.path:
    sys.path.insert(0, str(_backend))

from pydantic import TypeAdapter

from shared.config import get_settings
from shared.models.domain import ScoutingEntry, TBAMatch, ValidationProgress
from shared.utils.logging import get_logger, setup_logging
from shared.utils.metrics import start_metrics_server
from shared.utils.redis_manager import RedisManager

from validation.batch import BatchValidator, MatchWorkItem
from validation.catalog import load_catalog
from validation.config import get_validation_settings
from validation.engine import MatchValidator
from validation.match_keys import parse_match_key
from validation.repository import InMemoryResultRepository, RedisResultRepository, ResultRepository
from validation.scouting import entries_for_match

logger = get_logger(__name__)

_MATCHES = TypeAdapter(list[TBAMatch])
_ENTRIES = TypeAdapter(list[ScoutingEntry])


def build_work_items(matches: list[TBAMatch], entries: list[ScoutingEntry]) -> list[MatchWorkItem]:
    """One work item per official match, carrying the entries scouted for it."""
    items: list[MatchWorkItem] = []
    for match in matches:
        number = match.match_number or parse_match_key(match.key).match_number
        items.append(MatchWorkItem(
            match_key=match.key,
            tba_match=match,
            entries=entries_for_match(entries, match.key, number),
        ))
    return items


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Validate an event's scouting data against official results")
    parser.add_argument("--event", required=True, help="Event key, e.g. 2026test")
    parser.add_argument("--catalog", required=True, type=Path, help="Game field catalog (JSON)")
    parser.add_argument("--matches", required=True, type=Path, help="Official match records (JSON list)")
    parser.add_argument("--scouting", required=True, type=Path, help="Scouting entries (JSON list)")
    parser.add_argument("--store", choices=("memory", "redis"), default="memory")
    parser.add_argument("--validated-by", default=None)
    parser.add_argument("--output", type=Path, default=None, help="Write the summary here instead of stdout")
    return parser.parse_args(argv)


async def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging("validation", {"event_key": args.event}, stream=sys.stderr)
    settings = get_settings()
    validation_settings = get_validation_settings()
    start_metrics_server()

    catalog = load_catalog(args.catalog)
    matches = _MATCHES.validate_json(args.matches.read_bytes())
    entries = _ENTRIES.validate_json(args.scouting.read_bytes())

    redis: Optional[RedisManager] = None
    repository: ResultRepository
    if args.store == "redis":
        redis = RedisManager(settings)
        try:
            await redis.connect()
        except Exception as e:
            logger.exception("startup_connect_failed", error=str(e))
            raise
        repository = RedisResultRepository(redis, ttl_s=validation_settings.result_ttl_s)
    else:
        repository = InMemoryResultRepository()

    validator = MatchValidator(
        catalog,
        validation_settings.to_validation_config(),
        validated_by=args.validated_by,
    )
    batch = BatchValidator(validator, repository, validation_settings)

    cancel = asyncio.Event()
    loop = asyncio.get_running_loop()
    handled: list[signal.Signals] = []
    for sig in (signal.SIGTERM, signal.SIGINT):
        try:
            loop.add_signal_handler(sig, cancel.set)
            handled.append(sig)
        except NotImplementedError:
            pass

    def on_progress(progress: ValidationProgress) -> None:
        logger.debug(
            "batch_progress",
            current=progress.current,
            total=progress.total,
            match_key=progress.current_match,
        )

    try:
        outcome = await batch.run(
            args.event,
            build_work_items(matches, entries),
            on_progress=on_progress,
            cancel=cancel,
        )
    finally:
        for sig in handled:
            loop.remove_signal_handler(sig)
        if redis is not None:
            await redis.disconnect()

    rendered = json.dumps(outcome.summary().model_dump(mode="json"), indent=2)
    if args.output:
        args.output.write_text(rendered, encoding="utf-8")
    else:
        print(rendered)
    return 0 if outcome.outcome == "completed" else 1


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
