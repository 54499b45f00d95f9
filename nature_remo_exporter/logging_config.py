"""
Logging module
Structured stdout logging for the exporter process
"""
import logging
import sys

from pythonjsonlogger import jsonlogger

TEXT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
JSON_FORMAT = '%(asctime)s %(name)s %(levelname)s %(message)s'


def setup_logging(level: str = "INFO", fmt: str = "json") -> None:
    """Configure the root logger with a single stdout handler"""
    logger = logging.getLogger()
    logger.setLevel(getattr(logging, level.upper()))

    # Replace handlers so repeated calls don't duplicate output
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)

    if fmt == "json":
        formatter = jsonlogger.JsonFormatter(JSON_FORMAT)
    else:
        formatter = logging.Formatter(TEXT_FORMAT)

    handler.setFormatter(formatter)
    logger.addHandler(handler)
