import logging

# Optional: load .env for local/dev; harmless in prod
from dotenv import load_dotenv
load_dotenv()

from .config import LOG_LEVEL

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

from .app import app  # noqa: E402
