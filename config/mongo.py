from pymongo import MongoClient
from pymongo.errors import ConnectionFailure

from config.logging import logger
from config.settings import settings

# driver timeouts (ms); the analytics fallback covers slow backends
CONNECT_TIMEOUT_MS = 5000


class MongoManager:
    """
    Lazily connected, process-wide MongoDB handle for the remote
    analytics backend. A failed connect leaves no client behind, so
    the next call retries.
    """

    _client = None
    _db = None

    @classmethod
    def connect(cls):
        if cls._db is not None:
            return cls._db

        if not settings.has_remote_credentials:
            raise RuntimeError("MONGO_URI is not configured")

        try:
            logger.info("Connecting to remote analytics backend...")

            client = MongoClient(
                settings.MONGO_URI,
                serverSelectionTimeoutMS=CONNECT_TIMEOUT_MS,
                connectTimeoutMS=CONNECT_TIMEOUT_MS,
                socketTimeoutMS=CONNECT_TIMEOUT_MS,
                retryWrites=True
            )
            client.admin.command("ping")

        except ConnectionFailure:
            logger.exception("Remote analytics backend unreachable.")
            raise

        cls._client = client
        cls._db = client[settings.MONGO_DB_NAME]
        logger.info(f"Connected to remote backend | DB: {settings.MONGO_DB_NAME}")

        return cls._db

    @classmethod
    def close(cls):
        if cls._client is not None:
            cls._client.close()
        cls._client = None
        cls._db = None


def get_database():
    return MongoManager.connect()
