"""
HTTP API for Bedtime Books.
"""

from .app import create_app

__all__ = ["create_app"]
