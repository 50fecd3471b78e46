"""Utility functions for the relay web app."""
from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def configure_logging(level: Optional[str] = None, log_file: Optional[str] = None) -> None:
    """Configure root logging once for the process.

    Args:
        level: Level name; defaults to ``RELAY_LOG_LEVEL`` or INFO.
        log_file: Optional extra file target; defaults to ``RELAY_LOG_FILE``.
    """
    level_name = (level or os.getenv("RELAY_LOG_LEVEL") or "INFO").upper()
    log_file = log_file or os.getenv("RELAY_LOG_FILE")

    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
    )


def get_current_timestamp() -> str:
    """Get current UTC timestamp in ISO format.
    
    Returns:
        ISO formatted timestamp string.
    """
    return datetime.now(timezone.utc).isoformat()
