"""FastAPI application package.

Run with::

    uvicorn faqsmith.api.app:app --reload
"""

from faqsmith.api.app import create_app

__all__ = ["create_app"]
