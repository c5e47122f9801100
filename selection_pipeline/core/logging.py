"""
Logging setup.

Modules log through ``logging.getLogger(__name__)``; this only configures
the root handler once at application startup.
"""

import logging
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: Optional[Union[str, int]] = None) -> None:
    """Configure root logging with the application format."""
    if level is None:
        from selection_pipeline.core.config import settings

        level = settings.LOG_LEVEL
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger().setLevel(level)
