"""HTTP API exposing tracked assets and their derived price history."""

from pricesync.api.app import create_app

__all__ = ["create_app"]
