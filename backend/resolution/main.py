"""
Resolver entrypoint: runs a single resolution pass and exits.
Intended for cron/scheduler invocation: python -m resolution.main
"""
from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path

# Ensure backend root is on path when run as python -m resolution.main
_backend = Path(__file__).resolve().parent.parent
if str(_backend) not in sys.path:
    sys.path.insert(0, str(_backend))

from shared.config import get_settings
from shared.utils.database import DatabaseManager
from shared.utils.logging import get_logger, setup_logging
from shared.utils.redis_manager import RedisManager

from resolution.config import get_resolver_settings
from resolution.engine import PassSummary, ResolutionEngine
from resolution.sources.registry import build_registry
from resolution.store import ForecastStore

logger = get_logger(__name__)


async def run_once() -> PassSummary:
    settings = get_settings()
    resolver_settings = get_resolver_settings()

    db = DatabaseManager(settings)
    redis = RedisManager(settings)
    try:
        await db.connect()
        await redis.connect()
    except Exception as e:
        logger.exception("startup_connect_failed", error=str(e))
        raise

    try:
        async with build_registry(resolver_settings) as registry:
            engine = ResolutionEngine(
                ForecastStore(db),
                registry,
                redis=redis,
                settings=resolver_settings,
                owner_id=settings.instance_id,
            )
            return await engine.run_pass()
    finally:
        await redis.disconnect()
        await db.disconnect()


def main() -> int:
    setup_logging("resolver")
    summary = asyncio.run(run_once())
    print(json.dumps(summary.to_dict(), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
