"""Tests for :mod:`kvsession`."""
