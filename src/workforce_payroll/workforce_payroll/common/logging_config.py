from __future__ import annotations

import logging
from typing import Optional

_FORMAT = "%(asctime)s level=%(levelname)s logger=%(name)s %(message)s"
_HANDLER_NAME = "workforce_payroll"
# Package root under whichever import path was used.
PACKAGE_LOGGER = __name__.rsplit(".common", 1)[0]


def configure_logging(level: str = "INFO", *, stream=None) -> logging.Logger:
    """Install a single stream handler on the package logger.

    Safe to call more than once; repeated app factory calls reuse the handler.
    """

    root = logging.getLogger(PACKAGE_LOGGER)
    root.setLevel(getattr(logging, str(level).upper(), logging.INFO))

    existing: Optional[logging.Handler] = None
    for h in root.handlers:
        if h.get_name() == _HANDLER_NAME:
            existing = h
            break

    if existing is None:
        handler = logging.StreamHandler(stream)
        handler.set_name(_HANDLER_NAME)
        handler.setFormatter(logging.Formatter(_FORMAT))
        root.addHandler(handler)

    return root
