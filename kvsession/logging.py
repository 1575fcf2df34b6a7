"""Structured (JSON) logging for kvsession modules."""

import logging
import os
import sys

from pythonjsonlogger.json import JsonFormatter

LOGLEVEL = os.environ.get('LOGLEVEL', 'INFO')
LOG_FORMAT = os.environ.get('LOG_FORMAT',
                            '%(asctime)s %(levelname)s %(name)s %(message)s')


def getLogger(name: str) -> logging.Logger:
    """
    Get a logger that writes JSON records to stderr.

    Parameters
    ----------
    name : str
        Usually ``__name__`` of the calling module.

    Returns
    -------
    :class:`logging.Logger`

    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(JsonFormatter(
            LOG_FORMAT,
            rename_fields={'levelname': 'level', 'asctime': 'timestamp'}
        ))
        logger.addHandler(handler)
    logger.setLevel(LOGLEVEL)
    return logger
