"""Logging utility."""

import logging
from pathlib import Path
from typing import Optional


APP_LOGGER_NAME = "collabbot"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# HTTP client libraries log every request at INFO
CHATTY_LIBRARIES = ("httpx", "httpcore", "openai")


def setup_logger(
    name: str,
    log_level: str = "INFO",
    log_file: Optional[str] = None
) -> logging.Logger:
    """
    Configure a named logger with a console handler and an optional file handler.

    Calling it again for the same name only updates the level.
    """
    logger = logging.getLogger(name)
    level = getattr(logging, log_level.upper(), logging.INFO)
    logger.setLevel(level)

    if logger.handlers:
        for handler in logger.handlers:
            handler.setLevel(level)
        return logger

    formatter = logging.Formatter(LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')
    handlers = [logging.StreamHandler()]
    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    # Records stop at the app logger instead of reaching a root handler as well
    logger.propagate = False
    return logger


# Application logger instance
app_logger: Optional[logging.Logger] = None


def init_app_logger(settings) -> logging.Logger:
    """
    Initialize the application logger with settings.

    Args:
        settings: Application settings instance

    Returns:
        Configured application logger
    """
    global app_logger

    app_logger = setup_logger(
        name=APP_LOGGER_NAME,
        log_level=settings.log_level,
        log_file=settings.log_file
    )

    library_level = logging.DEBUG if app_logger.level <= logging.DEBUG else logging.WARNING
    for library in CHATTY_LIBRARIES:
        logging.getLogger(library).setLevel(library_level)

    return app_logger


def get_app_logger(component: Optional[str] = None) -> logging.Logger:
    """
    Get the application logger, or a child of it for one component.

    Child loggers (``collabbot.search`` and so on) share the app logger's
    handlers and level.
    """
    base = app_logger if app_logger is not None else setup_logger(APP_LOGGER_NAME)
    return base.getChild(component) if component else base
