import logging
import os
import sys

from PySide6.QtCore import QtMsgType, qInstallMessageHandler

LOG_LEVEL = logging.DEBUG
LOG_LEVEL_ENV_KEY = 'DAILYEXPENSETRACKER_LOG_LEVEL'
LOG_FORMAT = '[%(asctime)s] <%(module)s> %(levelname)s:  %(message)s'
LOG_DATEFMT = '%Y-%m-%d %H:%M:%S'

LEVELS = (logging.DEBUG, logging.INFO, logging.WARNING, logging.ERROR, logging.CRITICAL)

# Loggers of the HTTP stack below the backend client. They log every request at INFO.
QUIET_LOGGERS = ('httpx', 'httpcore', 'hpack')

QT_LEVELS = {
    QtMsgType.QtDebugMsg: logging.DEBUG,
    QtMsgType.QtInfoMsg: logging.INFO,
    QtMsgType.QtWarningMsg: logging.WARNING,
    QtMsgType.QtCriticalMsg: logging.ERROR,
    QtMsgType.QtFatalMsg: logging.CRITICAL,
}


def set_logging_level(level):
    """
    Sets the level of the root logger and of each of its handlers.

    Args:
        level (int): One of the standard logging levels.

    Raises:
        ValueError: If level is not one of the standard logging levels.
    """
    if not isinstance(level, int) or level not in LEVELS:
        raise ValueError(f'Invalid logging level {level!r}. Use one of the standard logging levels, e.g. logging.DEBUG.')

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers:
        handler.setLevel(level)


def get_env_level(default=LOG_LEVEL):
    """
    Reads the logging level name from the environment.

    Returns:
        int: The matching logging level, or `default` if unset or unknown.
    """
    name = os.environ.get(LOG_LEVEL_ENV_KEY, '').strip().upper()
    if not name:
        return default

    level = logging.getLevelNamesMapping().get(name)
    if level not in LEVELS:
        logging.warning(f'Unknown log level "{name}" in {LOG_LEVEL_ENV_KEY}, using default.')
        return default
    return level


def qt_message_handler(mode, context, message):
    """
    Forwards Qt's own messages to the "Qt" logger.
    """
    level = QT_LEVELS.get(mode, logging.WARNING)
    logging.getLogger('Qt').log(level, message.strip())
    if mode == QtMsgType.QtFatalMsg:
        sys.exit(1)


def setup_logging():
    """
    Configures the root logger and installs Qt message handler.

    Safe to call repeatedly, the previous handlers are replaced.
    """
    level = get_env_level()

    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    stream_handler = logging.StreamHandler(sys.stdout)
    stream_handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT))
    root_logger.addHandler(stream_handler)

    set_logging_level(level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    qInstallMessageHandler(qt_message_handler)
