import logging
import sys

from config import settings


def configure_logging() -> None:
    """
    Configure process-wide logging.
    Call once at API startup (and from scripts) before anything logs.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )
