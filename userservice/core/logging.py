import logging
from typing import Optional

from userservice.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: Optional[str] = None) -> None:
    """Configure the root logger once for the whole process"""
    logging.basicConfig(
        level=(level or settings.LOG_LEVEL).upper(),
        format=LOG_FORMAT,
    )


def sanitize_for_log(value: Optional[str]) -> str:
    # user-supplied text must not start a new log line
    if value is None:
        return ""
    return value.replace("\r", "").replace("\n", "")
