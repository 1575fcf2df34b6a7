"""Provides an app factory for the demonstration app."""

from typing import Optional

from flask import Flask, Response, jsonify
from werkzeug.exceptions import BadRequest, HTTPException, NotFound

from . import routes
from .extension import KVSession
from .kv import KVStore


def jsonify_exception(error: HTTPException) -> Response:
    """Render an HTTP error as JSON with a ``reason``."""
    exc_resp = error.get_response()
    response = jsonify(reason=error.description)
    response.status_code = exc_resp.status_code
    return response


def create_app(store: Optional[KVStore] = None) -> Flask:
    """Initialize an instance of the demonstration app."""
    app = Flask('kvsession')
    app.config.from_object('kvsession.config')

    KVSession(app, store=store)

    app.register_blueprint(routes.blueprint)
    app.errorhandler(NotFound)(jsonify_exception)
    app.errorhandler(BadRequest)(jsonify_exception)
    return app
