##############################################################################
# Copyright (c) crispr_db Project developers. See top-level LICENSE and
# COPYRIGHT files for dates and other details. No copyright assignment is
# required to contribute to crispr_db.
##############################################################################

"""
Console logging for crispr_db.

Store operations report at INFO, while cache hits and the SQL sent to the
database report at DEBUG. The debug format adds the emitting module and line
so a statement can be traced back to the adaptor that built it.
"""

import logging
import sys
from types import SimpleNamespace
from typing import IO, Optional, Union

import coloredlogs


FORMATS = {
    "DEFAULT": "[%(asctime)s: %(levelname)s] %(message)s",
    "DEBUG": "[%(asctime)s: %(levelname)s] [%(name)s:%(lineno)d] %(message)s",
}

# Handlers installed here carry this name so a second call replaces them.
HANDLER_NAME = "crispr_db_console"

# The logger that reports every statement and its parameters.
SQL_LOGGER = "crispr_db.backends.sqlite"


def resolve_level(log_level: Union[str, int]) -> int:
    """
    Turn a level name such as `"info"` or a numeric level into a logging level.

    Args:
        log_level: The level name, in any case, or a numeric level.

    Returns:
        The numeric logging level.

    Raises:
        ValueError: If `log_level` isn't a known level name.
    """
    if isinstance(log_level, int):
        return log_level
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level '{log_level}'.")
    return level


def setup_logging(
    logger: logging.Logger,
    log_level: Union[str, int] = "INFO",
    colors: bool = True,
    stream: Optional[IO] = None,
    show_sql: bool = True,
):
    """
    Send a logger's records to the console.

    Calling this again replaces the console handler rather than adding a
    second one.

    Args:
        logger: The logger to configure, normally the `crispr_db` package logger.
        log_level: Level name or number.
        colors: If True the records are written through coloredlogs.
        stream: Where to write. Defaults to stdout.
        show_sql: If False the statement log stays at INFO even when `logger`
            is at DEBUG.
    """
    level = resolve_level(log_level)
    fmt = FORMATS["DEBUG"] if level <= logging.DEBUG else FORMATS["DEFAULT"]
    stream = stream if stream is not None else sys.stdout

    for handler in list(logger.handlers):
        if handler.get_name() == HANDLER_NAME:
            logger.removeHandler(handler)

    logger.setLevel(level)
    logger.propagate = False

    if colors:
        coloredlogs.install(level=level, logger=logger, fmt=fmt, stream=stream)
        # coloredlogs adds its own handler; name it so it's found next time
        logger.handlers[-1].set_name(HANDLER_NAME)
    else:
        handler = logging.StreamHandler(stream)
        handler.set_name(HANDLER_NAME)
        handler.setFormatter(logging.Formatter(fmt))
        logger.addHandler(handler)

    sql_logger = logging.getLogger(SQL_LOGGER)
    sql_logger.setLevel(logging.NOTSET if show_sql else max(level, logging.INFO))


def setup_logging_from_config(
    logger: logging.Logger, logging_config: SimpleNamespace, log_level: Optional[str] = None
):
    """
    Configure console logging from the `logging` section of the app config.

    Args:
        logger: The logger to configure.
        logging_config: The `logging` section, holding `level`, `colors` and
            optionally `show_sql`.
        log_level: A level from the command line, overriding the config.
    """
    setup_logging(
        logger,
        log_level=log_level or logging_config.level,
        colors=logging_config.colors,
        show_sql=getattr(logging_config, "show_sql", True),
    )
