"""
Shared document conversion utilities.

Provides a thread-safe license guard for document libraries and a fluent,
strategy-driven conversion pipeline. A small FastAPI application exposing the
pipeline is available in `docs_common.webapi`.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
