"""Read-only Flask viewer over a finished book index."""
from __future__ import annotations
from .web import app, main

__all__ = ["app", "main"]
