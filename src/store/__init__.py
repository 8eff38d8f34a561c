"""Revision storage layer.

This module persists immutable per-file snapshots under a workspace
and lists them back in chronological order.
"""
