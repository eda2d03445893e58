"""HTTP service for the curation pipeline and link analyzer."""

from .app import create_app

__all__ = ["create_app"]
