import logging
import os
from datetime import datetime

from config.settings import settings

# =====================================================
# HANDLERS: daily file + console
# =====================================================
os.makedirs(settings.LOG_DIR, exist_ok=True)

LOG_FILE = os.path.join(settings.LOG_DIR, f"analytics_{datetime.now().date()}.log")
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
    format=LOG_FORMAT,
    handlers=[
        logging.FileHandler(LOG_FILE, encoding="utf-8"),
        logging.StreamHandler()
    ]
)

# driver / http chatter stays out of the analytics log
for noisy in ("pymongo", "urllib3"):
    logging.getLogger(noisy).setLevel(logging.WARNING)

logger = logging.getLogger("AQ_ANALYTICS")

if not settings.has_remote_credentials:
    logger.warning("Remote backend not configured (MONGO_URI missing), analytics use local fallback.")
