"""ViewModel package for page state and command surfaces.

Call context:
    ``biblio.web_ui.runtime`` constructs these viewmodels and
    ``biblio.web_ui.main`` binds NiceGUI widgets to them.

Dependencies:
    Domain types and use cases only. Transport adapters stay outside; all
    blocking calls go through the injected async runner.
"""
