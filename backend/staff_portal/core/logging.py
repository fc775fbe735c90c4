from __future__ import annotations

import logging

from staff_portal.core.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_CONFIGURED = False


def configure_logging(level: str | None = None) -> None:
    global _CONFIGURED
    if _CONFIGURED:
        return
    logging.basicConfig(level=(level or settings.log_level).upper(), format=LOG_FORMAT)
    # keep token endpoint request lines out of INFO output
    logging.getLogger("httpx").setLevel(logging.WARNING)
    _CONFIGURED = True
