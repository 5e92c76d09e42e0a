"""Pulls pieces together to serve Snowflake-like IDs over Flask.

This module provides:
- create_app: a function to get a Flask considering a dev/prod environment
- BitLayout, Generator, Identifier and the errors, for use as a library
"""

import time

from flask import Flask, g, request

from .api.endpoints import register_endpoints
from .codec import Identifier, from_bytes, from_hex, from_integer, to_bytes, to_hex, to_integer
from .config import config, load_generator
from .ids import Generator, MonotonicClock, wall_clock
from .layout import DEFAULT_LAYOUT, TWITTER_EPOCH, BitLayout, Field
from .utils.errors import ConfigError, DecodeError, FieldOverflowError
from .utils.logging import setup_logging

__all__ = [
    "create_app",
    "BitLayout", "Field", "DEFAULT_LAYOUT", "TWITTER_EPOCH",
    "Generator", "MonotonicClock", "wall_clock",
    "Identifier", "to_integer", "to_bytes", "to_hex", "from_integer", "from_bytes", "from_hex",
    "ConfigError", "DecodeError", "FieldOverflowError",
]


def create_app(config_name="development", overrides=None):
    """Initializes a Flask app with an ID generator.

    Args:
        config_name (str): A key of ``config``
        overrides (dict | None): Settings that win over the config class

    Raises:
        ConfigError: If the generator settings are invalid
    """
    app = Flask(__name__)
    app.config.from_object(config[config_name])
    if overrides:
        app.config.update(overrides)

    setup_logging(app)

    generator = load_generator(app.config)
    app.extensions["snowgen"] = generator
    app.logger.info(
        "Issuing IDs with %d timestamp bits, %d sequence bits and fields %s",
        generator.layout.timestamp_bits,
        generator.layout.sequence_bits,
        ", ".join(f"{field.name}:{field.bits}" for field in generator.layout.fields) or "none",
    )

    register_endpoints(app, generator)

    @app.before_request
    def _start_timer():
        g.start_time = time.time()

    @app.after_request
    def _log_request(response):
        if app.config["LOG_REQUESTS"]:
            duration = (time.time() - g.start_time) * 1000
            log_message = (
                f"{request.remote_addr} - {request.method} {request.path} "
                f"HTTP/{request.environ.get('SERVER_PROTOCOL')} "
                f"{response.status_code} - {duration:.2f}ms"
            )
            app.logger.info(log_message)
        return response

    return app
