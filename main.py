# main.py
from __future__ import annotations
import logging
import sys

from tweenr.qt import QtWidgets, binding_versions
from app_config import ensure_app_dirs, apply_qsettings_org, banner
from tweenr.core.config import QSettingsStore, ThemePreference, get_settings
from tweenr.core.logging import install_qt_message_handler, setup_logging
from tweenr.ui.main_window import MainWindow
from tweenr.ui.theme import apply_theme


def main() -> int:
    ensure_app_dirs()
    apply_qsettings_org()
    logger = setup_logging(level=logging.DEBUG if "--debug" in sys.argv else logging.INFO)

    app = QtWidgets.QApplication(sys.argv)
    install_qt_message_handler()
    logger.info(banner())
    logger.info(binding_versions())

    settings = get_settings()
    store = QSettingsStore(settings)
    apply_theme(app, ThemePreference(store).load())
    mw = MainWindow(store=store, settings=settings)
    mw.show()

    return app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
