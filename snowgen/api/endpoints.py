"""The main endpoints file.

This module provides:
- API: a class of all endpoints
- register_endpoints: a function that registers endpoints onto an app and assigns a Generator
"""
import logging
from http import HTTPStatus

from flask import Response, abort, jsonify, request

from ..ids import Generator
from ..utils.errors import DecodeError
from . import create_blueprint

MAX_BATCH = 1000


class API:
    """The dome API class to store endpoint methods + the generator."""
    def __init__(self, generator: Generator):
        """Populates variables that are used by endpoints.

        Args:
            generator (Generator): The generator that issues and parses IDs
        """
        self.generator = generator
        self.logger = logging.getLogger(__name__)

    def issue(self):
        """Issues new IDs.

        Takes an optional ``count`` request arg between 1 and 1000, defaults to 1.
        """
        raw_count = request.args.get("count", "1")
        try:
            count = int(raw_count)
        except ValueError:
            abort(HTTPStatus.BAD_REQUEST, description="Count must be an integer")
        if not 1 <= count <= MAX_BATCH:
            abort(HTTPStatus.BAD_REQUEST, description=f"Count must be between 1 and {MAX_BATCH}")
        ids = [self.generator.new().as_dict() for _ in range(count)]
        return jsonify({"ids": ids})

    def parse(self):
        """Decodes an ID given as hex under ``id`` or as a decimal under ``int`` request arg."""
        hex_id = request.args.get("id")
        int_id = request.args.get("int")
        try:
            if hex_id is not None:
                return jsonify(self.generator.parse_hex(hex_id).as_dict())
            if int_id is not None:
                return jsonify(self.generator.parse_integer(int(int_id)).as_dict())
        except (DecodeError, ValueError) as e:
            self.logger.debug("Rejected ID %r: %s", hex_id if hex_id is not None else int_id, e)
            abort(HTTPStatus.BAD_REQUEST, description="ID is invalid")
        abort(HTTPStatus.BAD_REQUEST, description="ID missing")

    def layout(self):
        """Describes how IDs are packed."""
        return jsonify(self.generator.layout.describe())

    @staticmethod
    def hello():
        """A root plug to test connections and inform users."""
        return Response(
            """
        <h1>Hello!</h1>
        <p>GET /api/id for a fresh ID, /api/parse?id=... to take one apart.</p>
        """,
            200,
        )



def register_endpoints(app, generator):
    """Binds endpoints to a Flask app.

    Args:
        app (Flask): The app to bind endpoints to
        generator (Generator): The generator that will be used for logic
    """
    api = API(generator)
    api_bp = create_blueprint()
    api_bp.add_url_rule("/id", view_func=api.issue, methods=["GET"])
    api_bp.add_url_rule("/parse", view_func=api.parse, methods=["GET"])
    api_bp.add_url_rule("/layout", view_func=api.layout, methods=["GET"])
    api_bp.add_url_rule("/", view_func=api.hello, methods=["GET"])
    app.register_blueprint(api_bp, url_prefix="/api")
