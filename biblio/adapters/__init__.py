"""Adapter package for external I/O implementations.

Purpose:
    Collect concrete implementations of ``LibraryPort``: the ``requests``-based
    REST adapter and the in-memory backend used for demos and tests.

Call context:
    Imported by ``biblio.web_ui.runtime`` for wiring and by tests for
    transport-level behavior verification.
"""
