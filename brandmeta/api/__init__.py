"""FastAPI HTTP layer package.

Public re-export so callers can write::

    from brandmeta.api import app

    uvicorn brandmeta.api:app --reload
"""

from brandmeta.api.app import app

__all__ = ["app"]
