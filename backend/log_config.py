import logging
import sys

from config import LOG_LEVEL

HANDLER_NAME = "wallet_pnl"


def setup_logging(level: str = LOG_LEVEL) -> None:
    """Configure root logging to stdout. Safe to call more than once."""
    root_logger = logging.getLogger()
    if not any(h.get_name() == HANDLER_NAME for h in root_logger.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))
        handler.set_name(HANDLER_NAME)
        root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, level, logging.INFO))

    # Quiet noisy libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)
