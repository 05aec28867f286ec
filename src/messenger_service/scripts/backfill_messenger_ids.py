"""One-off script: assign a messenger handle to every user that lacks one."""
from __future__ import annotations

import asyncio
import logging

from messenger_service.config import settings
from messenger_service.infrastructure.db.session import engine, open_uow
from messenger_service.log_config import configure_logging
from messenger_service.services import identity_service

logger = logging.getLogger(__name__)


async def backfill() -> int:
    try:
        async with open_uow() as uow:
            updated = await identity_service.backfill_handles(uow)
    finally:
        await engine.dispose()
    logger.info("Backfilled messenger ids for %d users", updated)
    return updated


def main() -> None:
    configure_logging(settings.LOG_LEVEL)
    asyncio.run(backfill())


if __name__ == "__main__":
    main()
