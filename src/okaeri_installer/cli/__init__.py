"""Command line interface for the asset installer."""

from .main import app

__all__ = ["app"]
