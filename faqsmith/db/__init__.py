"""Database layer package.

Public re-exports so callers can write::

    from faqsmith.db import get_connection, init_db
    from faqsmith.db import faqs, pages
"""

from faqsmith.db.connection import get_connection
from faqsmith.db.migrations import init_db
from faqsmith.db import faqs, pages

__all__ = ["get_connection", "init_db", "faqs", "pages"]
