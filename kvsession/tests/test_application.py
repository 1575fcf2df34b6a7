"""Application tests for the session extension and demonstration routes."""

from http import HTTPStatus
from unittest import TestCase, mock
import json

from flask import Flask, Response, g
from werkzeug.exceptions import NotFound

from .. import extension
from ..cookies import KeyStack
from ..exceptions import ConfigurationError
from ..factory import create_app, jsonify_exception
from ..kv import MemoryStore

SECRET = 'foo-signing-key-0123456789abcdef01234'


def _session_cookies(response, name='sid'):
    return [value for value in response.headers.getlist('Set-Cookie')
            if value.startswith(f'{name}=')]


def _session_id(response, name='sid'):
    cookies = _session_cookies(response, name)
    assert len(cookies) == 1, 'Exactly one session cookie is set'
    token = cookies[0].split(';', 1)[0].split('=', 1)[1]
    return KeyStack([SECRET]).verify(token)


class TestDemoApplication(TestCase):
    """Session data survives across requests from the same client."""

    def setUp(self):
        self.store = MemoryStore()
        self.app = create_app(store=self.store)
        self.app.config['KVSESSION_SIGNATURE_KEYS'] = SECRET
        self.client = self.app.test_client()

    def test_anonymous(self):
        """A new client is greeted anonymously and gets a cookie."""
        response = self.client.get('/')
        self.assertEqual(response.status_code, HTTPStatus.OK)
        self.assertEqual(response.get_data(as_text=True), 'Hello anonymous')
        self.assertIsNotNone(_session_id(response))

    def test_name(self):
        """A stored name is used on the next request."""
        first = self.client.post('/name', data={'name': 'bob'})
        self.assertEqual(first.status_code, HTTPStatus.OK)
        session_id = _session_id(first)

        second = self.client.get('/')
        self.assertEqual(second.get_data(as_text=True), 'Hello bob')
        self.assertEqual(_session_id(second), session_id,
                         'The same session id is used')
        self.assertEqual(
            self.store.get(('sessions', session_id, 'name')).value, 'bob'
        )

    def test_missing_name(self):
        """A name is required."""
        response = self.client.post('/name', data={})
        self.assertEqual(response.status_code, HTTPStatus.BAD_REQUEST)
        self.assertIn('reason', json.loads(response.data))

    def test_refresh(self):
        """Refreshing keeps the data but changes the id."""
        old_id = _session_id(self.client.post('/name', data={'name': 'bob'}))
        response = self.client.post('/refresh')
        new_id = _session_id(response)
        self.assertNotEqual(new_id, old_id)
        self.assertEqual(list(self.store.list(('sessions', old_id))), [])
        self.assertEqual(self.client.get('/').get_data(as_text=True),
                         'Hello bob')

    def test_logout(self):
        """Logging out wipes the data and starts a new anonymous session."""
        old_id = _session_id(self.client.post('/name', data={'name': 'bob'}))
        response = self.client.post('/logout')
        new_id = _session_id(response)
        self.assertNotEqual(new_id, old_id)
        self.assertEqual(list(self.store.list(('sessions', old_id))), [])
        self.assertEqual(self.client.get('/').get_data(as_text=True),
                         'Hello anonymous')

    def test_forged_cookie(self):
        """A cookie signed with another key starts a new session."""
        forged = KeyStack(['not-our-key-0123456789abcdef0123456']) \
            .sign('a' * 32)
        self.store.set(('sessions', 'a' * 32, 'name'), 'mallory')
        client = self.app.test_client(use_cookies=False)
        response = client.get('/', headers={'Cookie': f'sid={forged}'})
        self.assertEqual(response.get_data(as_text=True), 'Hello anonymous')
        self.assertNotEqual(_session_id(response), 'a' * 32)

    def test_not_found(self):
        """Unknown routes still get a JSON error."""
        response = self.client.get('/nope')
        self.assertEqual(response.status_code, HTTPStatus.NOT_FOUND)
        self.assertIn('reason', json.loads(response.data))

    def test_jsonify_exception(self):
        """HTTP errors are rendered as JSON responses with their status."""
        with self.app.app_context():
            response = jsonify_exception(NotFound('No such thing'))
        self.assertIsInstance(response, Response)
        self.assertEqual(response.status_code, HTTPStatus.NOT_FOUND)
        self.assertEqual(json.loads(response.data),
                         {'reason': 'No such thing'})


class TestKVSessionExtension(TestCase):
    """Tests for :class:`extension.KVSession`."""

    def setUp(self):
        self.app = Flask('test_kvsession_app')
        self.store = MemoryStore()

    def test_config_defaults(self):
        """Defaults are set without clobbering explicit configuration."""
        self.app.config['KVSESSION_COOKIE_NAME'] = 'session_id'
        extension.KVSession(self.app, store=self.store)
        self.assertEqual(self.app.config['KVSESSION_COOKIE_NAME'],
                         'session_id')
        self.assertEqual(self.app.config['KVSESSION_KEY_SPACE'], 'sessions')
        self.assertIsNone(self.app.config['KVSESSION_STORE_URL'])
        self.assertIs(self.app.extensions['kvsession'].store, self.store)

    def test_key_list(self):
        """Signing keys may be given as a list, newest first."""
        self.app.config['KVSESSION_SIGNATURE_KEYS'] = [
            SECRET, 'old-signing-key-0123456789abcdef0123'
        ]
        extension.KVSession(self.app, store=self.store)
        with self.app.test_request_context('/'):
            self.app.preprocess_request()
            self.assertRegex(extension.current_session().id, '^[0-9a-f]{32}$')

    def test_comma_separated_keys(self):
        """Signing keys may be a comma-separated string."""
        self.assertEqual(extension._signature_keys(' a, b ,,c'),
                         ['a', 'b', 'c'])
        self.assertEqual(extension._signature_keys(None), [])

    def test_no_keys(self):
        """Requests fail if no signing keys are configured."""
        extension.KVSession(self.app, store=self.store)
        with self.app.test_request_context('/'):
            with self.assertRaises(ConfigurationError):
                self.app.preprocess_request()

    @mock.patch(f'{extension.__name__}.open_store')
    def test_store_url(self, mock_open_store):
        """Without an explicit store, one is opened from configuration."""
        mock_open_store.return_value = self.store
        self.app.config['KVSESSION_SIGNATURE_KEYS'] = SECRET
        self.app.config['KVSESSION_STORE_URL'] = 'redis://redis:6379/0'
        extension.KVSession(self.app)
        with self.app.test_request_context('/'):
            self.app.preprocess_request()
        mock_open_store.assert_called_once_with('redis://redis:6379/0')

    def test_no_session(self):
        """Outside of a loaded request there is no current session."""
        extension.KVSession(self.app, store=self.store)
        with self.app.test_request_context('/'):
            with self.assertRaises(RuntimeError):
                extension.current_session()
            self.assertIsNone(g.get('kvsession'))
