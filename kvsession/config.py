"""Flask configuration for kvsession."""

import os

KVSESSION_COOKIE_NAME = os.environ.get('KVSESSION_COOKIE_NAME', 'sid')
"""Name of the cookie that carries the signed session id."""

KVSESSION_KEY_SPACE = os.environ.get('KVSESSION_KEY_SPACE', 'sessions')
"""Root key part under which all session data is stored."""

KVSESSION_STORE_URL = os.environ.get('KVSESSION_STORE_URL')
"""
Location of the key-value engine, e.g. ``redis://localhost:6379/0``.

If unset, a process-wide in-memory store is used.
"""

KVSESSION_SIGNATURE_KEYS = os.environ.get('KVSESSION_SIGNATURE_KEYS', '')
"""Comma-separated cookie signing secrets, newest first."""
