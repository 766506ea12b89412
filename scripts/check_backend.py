"""
Quick check that the transport billing backend is reachable and, when
credentials are given, that a login round trip works.

Run: python scripts/check_backend.py [email password]
"""

import asyncio
import sys
from pathlib import Path
from dotenv import load_dotenv

sys.path.insert(0, str(Path(__file__).parent.parent))

# Load environment variables
load_dotenv()

import logging

from transport_billing.core.config import settings
from transport_billing.db.storage import MemoryStore
from transport_billing.services.container import build_services
from utils.format_utils import format_currency

logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')
logger = logging.getLogger(__name__)


async def check_backend(email=None, password=None):
    print("=" * 60)
    print(f"  Backend check: {settings.API_BASE_URL}")
    print("=" * 60 + "\n")

    # Throwaway store so the real session file is never touched
    services = build_services(MemoryStore())

    try:
        health = await services.api.health_check()
        if not health.success:
            logger.error(f"Health check failed: {health.error}")
            return False
        logger.info("Backend is healthy")

        if not email:
            return True

        result = await services.session.login(email, password or "")
        if not result.success:
            logger.error(f"Login failed: {result.error}")
            return False
        logger.info(f"Logged in as {result.user.email}")

        entries = await services.api.get_transport_entries(limit=settings.ENTRY_PAGE_SIZE)
        if entries.success and entries.data is not None:
            revenue = sum(bill.total for bill in entries.data.entries)
            logger.info(f"Fetched {len(entries.data.entries)} of {entries.data.total} entries ({format_currency(revenue)})")
        else:
            logger.error(f"Entry fetch failed: {entries.error}")
            return False

        services.session.logout()
        return True

    finally:
        await services.close()


if __name__ == "__main__":
    args = sys.argv[1:]
    ok = asyncio.run(check_backend(*args[:2]))
    sys.exit(0 if ok else 1)
