"""Use-case layer for the dashboard workflows.

Each module wraps one backend interaction behind ``LibraryPort`` and converts
adapter failures into ``UseCaseError`` so viewmodels never see transport
exceptions.
"""
