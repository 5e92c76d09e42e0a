"""Gives out a production-ready logger.

This module provides:
- setup_logging: a function to route app and generator logs to a rotating file handler and std stream
"""

import logging
import os
from logging.handlers import RotatingFileHandler


def setup_logging(app):
    """Sets logging of a Flask app, and with it the ``snowgen`` package, to .log file and std stream.

    Leaves the file out if ``LOG_FILE`` is empty.

    Args:
        app (Flask): The Flask app to configure
    """

    log_level = logging.DEBUG if app.config["DEBUG"] else logging.INFO
    handlers = []

    log_file = app.config.get("LOG_FILE")
    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir)
        file_handler = RotatingFileHandler(log_file, maxBytes=10_000_000, backupCount=5)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]")
        )
        file_handler.setLevel(log_level)
        handlers.append(file_handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s: %(message)s"))
    console_handler.setLevel(log_level)
    handlers.append(console_handler)

    # app.logger is named after the package, so the generator's module loggers propagate into it
    for old in app.logger.handlers:
        old.close()
    app.logger.handlers = handlers
    app.logger.setLevel(log_level)
