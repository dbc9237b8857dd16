import logging
import sys

from app.core.config import settings


def setup_logging():
    """
    Configure structured logging for the application.
    
    Sets up logging to stdout at the level named by ``LOG_LEVEL``.
    This is production-ready and works well with Docker and Kubernetes.
    """
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)]
    )
    
    # Reduce HTTP client noise in logs (one line per provider request otherwise)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    
    return logging.getLogger("snailtrail")


# Create global logger instance
logger = setup_logging()
