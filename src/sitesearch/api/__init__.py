"""HTTP query surface for the search index (FastAPI)."""

from sitesearch.api.app import create_app

__all__ = ["create_app"]
