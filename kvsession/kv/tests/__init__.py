"""Tests for :mod:`kvsession.kv`."""
