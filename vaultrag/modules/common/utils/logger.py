"""Module-level logger helper.

Thin wrapper over the centralized logging factory, so modules can keep the
familiar ``logger = get_logger(__name__)`` idiom.
"""

import logging
from typing import Optional, Union

from ....infrastructure.logging import get_logger as _get_centralized_logger


def get_logger(name: str, level: Optional[int] = None) -> Union[logging.Logger, logging.LoggerAdapter]:
    """Get a configured logger.

    Args:
        name: The name of the logger, typically __name__
        level: Optional level override for this logger only
    """
    logger = _get_centralized_logger(name)

    if level is not None:
        if isinstance(logger, logging.LoggerAdapter):
            logger.logger.setLevel(level)
        else:
            logger.setLevel(level)

    return logger
