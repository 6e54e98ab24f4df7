# init_db.py
import asyncio
import logging

from clinic_booking.core.logging import configure_logging
from clinic_booking.db.sql import engine, init_db

logger = logging.getLogger("init_db")


async def init_models():
    await init_db(drop=True)
    await engine.dispose()
    logger.info("Database schema recreated successfully!")


if __name__ == "__main__":
    configure_logging()
    asyncio.run(init_models())
