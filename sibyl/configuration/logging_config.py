import os
import sys
from loguru import logger

DEFAULT_LOG_LEVEL = "INFO"
LOG_FORMAT = "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | {message}"

def configure_logging(level: str = None) -> None:
    """Replace loguru's default sink with a stderr sink at SIBYL_LOG_LEVEL"""
    level = (level or os.environ.get('SIBYL_LOG_LEVEL') or DEFAULT_LOG_LEVEL).upper()
    logger.remove()
    logger.add(sys.stderr, level=level, format=LOG_FORMAT)
