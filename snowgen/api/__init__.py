"""The HTTP API of the ID service.

This module provides:
- create_blueprint: a function that gives out a fresh blueprint for one app
"""

from flask import Blueprint


def create_blueprint() -> Blueprint:
    """Creates the API blueprint. Each app gets its own, so routes can be bound per app."""
    return Blueprint("api", __name__)
