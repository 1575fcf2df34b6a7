"""Tests for :mod:`kvsession.headers`."""

from unittest import TestCase

from werkzeug.datastructures import Headers
from werkzeug.wrappers import Response

from ..headers import merge_headers


class CookieSource(object):
    """Stands in for a cookie jar."""

    def __init__(self, *cookies):
        self.cookies = cookies

    def to_headers(self):
        return [('Set-Cookie', cookie) for cookie in self.cookies]


class TestMergeHeaders(TestCase):
    """Headers from several sources are merged."""

    def test_no_sources(self):
        """Nothing in, nothing out."""
        self.assertEqual(len(merge_headers()), 0)
        self.assertEqual(len(merge_headers(None)), 0)

    def test_mapping_and_pairs(self):
        """Mappings and iterables of pairs are both accepted."""
        merged = merge_headers({'Content-Type': 'application/json'},
                               [('Cache-Control', 'no-cache')])
        self.assertEqual(merged['Content-Type'], 'application/json')
        self.assertEqual(merged['Cache-Control'], 'no-cache')

    def test_later_source_wins(self):
        """Later sources replace earlier values for the same header."""
        merged = merge_headers({'Content-Type': 'text/plain'},
                               {'content-type': 'application/json'})
        self.assertEqual(merged.getlist('Content-Type'), ['application/json'])

    def test_repeated_within_source(self):
        """Repeated headers from one source are all kept."""
        merged = merge_headers([('Link', '<a>'), ('Link', '<b>')])
        self.assertEqual(merged.getlist('Link'), ['<a>', '<b>'])

        merged = merge_headers([('Link', '<a>'), ('Link', '<b>')],
                               {'link': '<c>'})
        self.assertEqual(merged.getlist('Link'), ['<c>'],
                         'A later source replaces every earlier value')

    def test_set_cookie_appended(self):
        """``Set-Cookie`` values accumulate across sources."""
        response = Response('ok', headers=[('Set-Cookie', 'a=1')])
        merged = merge_headers(response, CookieSource('b=2'),
                               Headers([('Set-Cookie', 'c=3')]))
        self.assertEqual(merged.getlist('Set-Cookie'), ['a=1', 'b=2', 'c=3'])
        self.assertIn('Content-Type', merged, 'Response headers are included')
