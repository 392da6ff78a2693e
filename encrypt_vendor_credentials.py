"""
Cifra las credenciales de vendors que siguen guardadas en claro.

Uso:
    python encrypt_vendor_credentials.py
"""

import asyncio

import structlog

from app.config import settings
from app.db.database import close_db, get_db_context
from app.services import VendorService
from app.utils.crypto import CredentialCipher


logger = structlog.get_logger(__name__)


async def main() -> int:
    cipher = CredentialCipher(settings.ENCRYPTION_SECRET)

    async with get_db_context() as db:
        migrated = await VendorService(db, cipher).encrypt_plaintext_credentials()

    await close_db()
    logger.info("Credential migration finished", migrated=migrated)
    print(f"Encrypted credentials for {migrated} vendor(s)")
    return migrated


def run() -> None:
    """Entry point de consola."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
