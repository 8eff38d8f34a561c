"""Workspace binding layer.

This module wires the revision store to an open workspace: save routing,
the read-side catalog, and the open/close lifecycle.
"""
