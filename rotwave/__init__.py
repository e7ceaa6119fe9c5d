"""ROTWAVE Comments API.

Comment and threaded reply storage for content items, backed by MongoDB.
"""

__version__ = "1.0.0"
