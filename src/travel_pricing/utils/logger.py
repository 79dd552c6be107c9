"""Logging utilities for the travel_pricing package."""
import logging
from typing import Optional

_LOGGER: Optional[logging.Logger] = None


def get_logger(name: str = "travel_pricing") -> logging.Logger:
    """Return a named logger, configuring the root handler on first use."""
    global _LOGGER
    if _LOGGER is None:
        logging.basicConfig(
            level=logging.INFO,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        )
        _LOGGER = logging.getLogger("travel_pricing")
    return logging.getLogger(name)
