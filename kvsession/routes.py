"""Demonstration routes for a session-backed application."""

from http import HTTPStatus

from flask import Blueprint, request, jsonify
from werkzeug.exceptions import BadRequest

from .extension import current_session

blueprint = Blueprint('kvsession', __name__, url_prefix='')


@blueprint.route('/', methods=['GET'])
def hello() -> str:
    """Greet the client by the name stored in its session."""
    name = current_session().get('name').value
    return f'Hello {name or "anonymous"}'


@blueprint.route('/name', methods=['POST'])
def set_name():
    """Store a name in the session."""
    name = request.form.get('name')
    if not name:
        raise BadRequest('Missing name')
    current_session().set('name', name)
    return jsonify({'name': name}), HTTPStatus.OK


@blueprint.route('/refresh', methods=['POST'])
def refresh():
    """Move the session data to a new session id."""
    current_session().refresh()
    return jsonify({}), HTTPStatus.OK


@blueprint.route('/logout', methods=['POST'])
def logout():
    """Discard all session data and start a new anonymous session."""
    current_session().destroy()
    return jsonify({}), HTTPStatus.OK
