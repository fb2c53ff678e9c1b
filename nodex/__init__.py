"""nodex package initializer.

Expose the FastAPI application as ``app`` lazily so the workflow core can be
imported (and unit tested) without building the HTTP layer."""

from __future__ import annotations

__all__ = ["app"]


def __getattr__(name: str):
    if name == "app":
        from .main import app as fastapi_app
        return fastapi_app
    raise AttributeError(f"module {__name__} has no attribute {name!r}")
