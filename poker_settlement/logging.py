from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def configure_logging(level: str) -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    # Keep asyncpg/sqlalchemy pool chatter out of INFO output.
    logging.getLogger("sqlalchemy.pool").setLevel(logging.WARNING)
