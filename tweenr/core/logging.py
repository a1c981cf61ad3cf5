# tweenr/core/logging.py
from __future__ import annotations
import logging, logging.handlers
from app_config import APP_NAME, COMPANY_NAME, LOG_DIR

from tweenr.qt import QtCore

LOG_FILE = LOG_DIR / f"{APP_NAME.lower()}.log"
QT_LOGGER = "tweenr.qt"

_QT_LEVELS = {
    QtCore.QtMsgType.QtDebugMsg: logging.DEBUG,
    QtCore.QtMsgType.QtInfoMsg: logging.INFO,
    QtCore.QtMsgType.QtWarningMsg: logging.WARNING,
    QtCore.QtMsgType.QtCriticalMsg: logging.ERROR,
    QtCore.QtMsgType.QtFatalMsg: logging.CRITICAL,
}


def setup_logging(level: int = logging.INFO, log_to_file: bool = True) -> logging.Logger:
    logger = logging.getLogger()  # root
    logger.setLevel(level)

    # Reinit replaces handlers instead of stacking them
    for h in list(logger.handlers):
        logger.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    if log_to_file:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        fh = logging.handlers.RotatingFileHandler(
            LOG_FILE, maxBytes=10_000_000, backupCount=5, encoding="utf-8"
        )
        fh.setFormatter(fmt)
        fh.setLevel(level)
        logger.addHandler(fh)

    ch = logging.StreamHandler()
    ch.setFormatter(fmt)
    ch.setLevel(level)
    logger.addHandler(ch)

    logger.info("%s logging initialised • %s • %s", APP_NAME, COMPANY_NAME,
                LOG_FILE if log_to_file else "console only")
    return logger


def _qt_message(mode, context, message: str) -> None:
    where = f" ({context.file}:{context.line})" if context is not None and context.file else ""
    logging.getLogger(QT_LOGGER).log(_QT_LEVELS.get(mode, logging.INFO), "%s%s", message, where)


def install_qt_message_handler() -> None:
    """Route qDebug/qWarning/... output (style, font, QPA warnings) into the log file."""
    QtCore.qInstallMessageHandler(_qt_message)


def get_logger(name: str | None = None) -> logging.Logger:
    """
    Return a child logger of the root configured by setup_logging().
    Usage: from tweenr.core.logging import get_logger; log = get_logger(__name__)
    """
    return logging.getLogger(name or APP_NAME)
