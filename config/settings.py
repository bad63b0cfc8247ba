import os
from dotenv import load_dotenv

# -----------------------------------------------------
# LOAD LOCAL .env IF EXISTS
# -----------------------------------------------------
load_dotenv()  # safe: only affects local dev


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Settings:
    """
    Central configuration for the analytics engine.
    Works for both local dev (.env) and CI/CD secrets.
    """

    # ---------------- ENV ----------------
    ENV = os.getenv("ENV", "dev")

    # ---------------- REMOTE BACKEND ----------------
    MONGO_URI = os.getenv("MONGO_URI")
    MONGO_DB_NAME = os.getenv("MONGO_DB_NAME", "aq_analytics")

    # ---------------- LIVE MEASUREMENTS ----------------
    OPENAQ_BASE_URL = os.getenv("OPENAQ_BASE_URL", "https://api.openaq.org/v3")
    OPENAQ_API_KEY = os.getenv("OPENAQ_API_KEY")
    OPENAQ_RADIUS_METERS = int(os.getenv("OPENAQ_RADIUS_METERS", "25000"))
    OPENAQ_LIMIT = int(os.getenv("OPENAQ_LIMIT", "120"))

    # ---------------- CACHE / OFF-THREAD ----------------
    SNAPSHOT_CACHE_TTL_MINUTES = float(os.getenv("SNAPSHOT_CACHE_TTL_MINUTES", "30"))
    OFFTHREAD_ENABLED = _env_bool("OFFTHREAD_ENABLED", "true")
    OFFTHREAD_TIMEOUT_MS = int(os.getenv("OFFTHREAD_TIMEOUT_MS", "5000"))

    # ---------------- LOGGING ----------------
    LOG_DIR = os.getenv("LOG_DIR", "logs")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

    @property
    def has_remote_credentials(self) -> bool:
        return bool(self.MONGO_URI)

    @property
    def snapshot_cache_ttl_seconds(self) -> float:
        return self.SNAPSHOT_CACHE_TTL_MINUTES * 60

    @property
    def offthread_timeout_seconds(self) -> float:
        return self.OFFTHREAD_TIMEOUT_MS / 1000


# ---------------- CREATE INSTANCE ----------------
settings = Settings()

# ---------------- FAIL FAST ----------------
if settings.ENV not in ["dev", "test", "prod"]:
    raise ValueError("ENV must be 'dev', 'test' or 'prod'")

if settings.SNAPSHOT_CACHE_TTL_MINUTES <= 0:
    raise ValueError("SNAPSHOT_CACHE_TTL_MINUTES must be positive")

if settings.OFFTHREAD_TIMEOUT_MS <= 0:
    raise ValueError("OFFTHREAD_TIMEOUT_MS must be positive")
