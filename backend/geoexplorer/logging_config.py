import logging
from typing import Optional

LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"

_configured = False


def setup_logging(level: Optional[str] = None) -> None:
    """Configure the root logger once. Later calls are no-ops."""
    global _configured
    if _configured:
        return

    lvl = getattr(logging, (level or "INFO").upper(), logging.INFO)
    logging.basicConfig(level=lvl, format=LOG_FORMAT)
    _configured = True
