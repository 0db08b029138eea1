"""Logging setup for lncluster."""

import inspect
import logging
import os

from lncluster.core import logging as lg


def configure_logging(
    log_level: lg.levels.LogLevel = lg.levels.LogLevel.INFO,
    global_logging: bool = False,
) -> lg.logger.LNClusterLogger:
    """Create the singleton lncluster logger or return the existing one.

    Parameters
    ----------
    log_level : LogLevel
        Minimum log level shown to the user. The sink always captures
        every level.
    global_logging : bool
        If True, records from third-party libraries (docker, urllib3)
        are shown too.

    Returns
    -------
    LNClusterLogger
        The configured logger.
    """
    logger = get_logger()
    root_logger = logging.getLogger()

    configured = any(
        isinstance(h, lg.handler.LNClusterLoggerHandler) for h in root_logger.handlers
    )
    if configured:
        logger.set_level(log_level)
        return logger

    root_logger.handlers.clear()
    always_verbose = log_level == lg.levels.LogLevel.DEBUG

    logger._spinner = lg.spinner.Spinner(logger, always_verbose=always_verbose)
    logger._formatter = lg.formatter.LNClusterLogFormatter(
        always_verbose=always_verbose
    )
    user_handler = lg.handler.LNClusterLoggerHandler(logger._spinner)
    user_handler.setFormatter(logger._formatter)
    user_handler.setLevel(log_level.py_level)

    sink_handler = lg.sink.SinkOnlyHandler(logger._log_sink, logger._formatter)
    root_logger.addHandler(sink_handler)
    root_logger.addHandler(user_handler)
    root_logger.setLevel(logging.NOTSET)
    logger.propagate = True
    logger._log_level = log_level

    if not global_logging:
        for name in ("urllib3", "docker"):
            logging.getLogger(name).setLevel(logging.WARNING)

    logger.debug("Logger configured.")
    return logger


def get_caller_fq_name(stacklevel: int = 3) -> str:
    """Return `module:file:line` of the frame `stacklevel` levels up."""
    frame = inspect.currentframe()
    for _ in range(stacklevel):
        if frame is not None:
            frame = frame.f_back
    if frame is None:
        return "<unknown>"
    module = inspect.getmodule(frame)
    module_name = module.__name__ if module else "<unknown>"
    filename = os.path.basename(frame.f_code.co_filename)
    return f"{module_name}:{filename}:{frame.f_lineno}"


def get_logger() -> lg.logger.LNClusterLogger:
    """Return the process-wide "lncluster" logger.

    The logger is created as an `LNClusterLogger` even if a plain logger
    was registered under the same name first.
    """
    existing = logging.Logger.manager.loggerDict.get("lncluster")
    if isinstance(existing, lg.logger.LNClusterLogger):
        return existing
    if isinstance(existing, logging.Logger):
        del logging.Logger.manager.loggerDict["lncluster"]
    previous = logging.getLoggerClass()
    logging.setLoggerClass(lg.logger.LNClusterLogger)
    try:
        return logging.getLogger("lncluster")  # type: ignore[return-value]
    finally:
        logging.setLoggerClass(previous)
