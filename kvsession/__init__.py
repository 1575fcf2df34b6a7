"""
Signed-cookie HTTP sessions backed by an ordered key-value store.

Each request gets a :class:`.Session` whose id is read from a signed cookie
(or freshly generated), and whose data is stored in a key-value engine under
``(key_space, session_id, ...)``. Sessions can be destroyed (all data wiped,
new anonymous id) or refreshed (all data moved to a new id).

.. code-block:: python

   import os

   from flask import Flask, request, make_response
   from kvsession import create_session

   app = Flask('hello')

   @app.route('/')
   def hello():
       session = create_session(request, [os.environ['SECRET_KEY']])
       name = session.get('name').value
       return session.send(make_response(f'Hello {name or "anonymous"}'))

See :mod:`.extension` for a Flask extension that does this for every request.
"""

from .exceptions import ConfigurationError, InvalidKeyType, StoreUnavailable
from .extension import KVSession, current_session
from .session import Session, SessionOptions, create_session
