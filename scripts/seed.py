from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from opsdeck.core.config import get_settings
from opsdeck.persistence.db import create_all, create_engine, create_session_factory
from opsdeck.services.seeding import run_seed


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Seed demo fixtures into the PMO database")
    parser.add_argument("--database-url", default=None, help="Override DATABASE_URL")
    parser.add_argument(
        "--create-schema",
        action="store_true",
        help="Create missing tables first (local databases without migrations)",
    )
    return parser


async def _seed(args: argparse.Namespace) -> int:
    settings = get_settings()
    engine = create_engine(args.database_url or settings.database_url)
    try:
        if args.create_schema:
            await create_all(engine)
        report = await run_seed(create_session_factory(engine), settings=settings)
    finally:
        await engine.dispose()
    print(f"Seed complete: {report.total_created} created, {report.total_updated} updated.")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=get_settings().log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    # Any failure, including an unresolved fixture reference, exits non-zero.
    try:
        return asyncio.run(_seed(args))
    except Exception as exc:  # noqa: BLE001 - surface any fixture or DB errors
        print(f"seed failed: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
