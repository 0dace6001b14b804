"""Process-wide logging setup.

Library modules only ever call ``logging.getLogger(__name__)``; the API
factory and the CLI call :func:`configure_logging` once at startup.
"""

from __future__ import annotations

import logging

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Framework/network loggers that are chatty at INFO.
_NOISY_LOGGERS = ("httpx", "httpcore", "uvicorn.access")


def configure_logging(level: str = "INFO") -> None:
    """Configure the root logger and quieten noisy third-party loggers."""
    resolved = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(level=resolved, format=_FORMAT)
    logging.getLogger("faqsmith").setLevel(resolved)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(resolved, logging.WARNING))
