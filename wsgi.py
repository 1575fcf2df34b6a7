"""Web Server Gateway Interface entry-point."""

from kvsession.factory import create_app

application = create_app()
