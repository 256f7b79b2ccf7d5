"""
DocLens document service.

Indexes uploaded documents (category and tags derived from their text) and
serves keyword search and faceted browsing over them.
"""

__version__ = "1.0.0"
