from __future__ import annotations

import asyncio
import logging
import sys

from poker_settlement.config import settings
from poker_settlement.db.session import engine, session_scope
from poker_settlement.logging import configure_logging
from poker_settlement.report import render_settlement
from poker_settlement.services.sessions import get_session, settle_stored_session

logger = logging.getLogger(__name__)

USAGE = "Usage: poker-settle <session-id>"


async def main(session_id: int) -> int:
    try:
        async with session_scope() as session:
            ps = await get_session(session, session_id=session_id)
            if ps is None:
                logger.error("Poker session %s not found", session_id)
                return 1
            result = await settle_stored_session(session, session_id=session_id)
            title = ps.title or f"session #{session_id}"
    finally:
        await engine.dispose()

    print(render_settlement(result, title=title))
    # Transfers are stored either way; a non-zero status flags results that do not sum to zero.
    return 0 if result.is_balanced else 2


def run() -> None:
    configure_logging(settings.log_level)

    args = sys.argv[1:]
    if args and args[0] in ("help", "--help", "-h"):
        print(USAGE)
        return
    if len(args) != 1:
        print(USAGE)
        sys.exit(1)
    try:
        session_id = int(args[0])
    except ValueError:
        print(f"Not a session id: {args[0]}")
        print(USAGE)
        sys.exit(1)

    sys.exit(asyncio.run(main(session_id)))


if __name__ == "__main__":
    run()
