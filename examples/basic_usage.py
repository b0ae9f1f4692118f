"""
Basic usage example of LicenseManager.

Acquires a license from the authority configured in LICENSE_MANAGER_URL,
validates it for a domain and prints the user limits.
"""

import asyncio
import logging
import sys
from pathlib import Path

# Add the project root to the path to import tasklic
sys.path.insert(0, str(Path(__file__).parent.parent))

from tasklic import LicenseManager


async def main() -> None:
    # Configure logging
    logging.basicConfig(level=logging.INFO)
    logger = logging.getLogger(__name__)

    manager = LicenseManager(log_level=logging.INFO)
    try:
        acquired = await manager.acquire_license(
            "tenant-42", "https://tenant42.example.com"
        )
        logger.info("Acquire: %s", acquired.message)
        if not acquired.success:
            return

        result = await manager.validate_license(
            "tenant-42", "https://tenant42.example.com"
        )
        logger.info("License valid: %s (%s)", result.valid, result.message)

        check = await manager.check_user_limit("tenant-42", 25)
        logger.info("25 users allowed: %s (%s)", check.allowed, check.message)
    finally:
        manager.close()


if __name__ == "__main__":
    asyncio.run(main())
