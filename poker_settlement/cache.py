from __future__ import annotations

import logging
from typing import Optional

from poker_settlement.services.settlement import SettlementResult

logger = logging.getLogger(__name__)


class SettlementCache:
    """
    Settlement results keyed by session id.

    Owned by whoever loads sessions; create one per load cycle or call
    invalidate() when a session's results change. There is no module-level
    instance.
    """

    def __init__(self) -> None:
        self._results: dict[int, SettlementResult] = {}

    def get(self, session_id: int) -> Optional[SettlementResult]:
        return self._results.get(session_id)

    def put(self, session_id: int, result: SettlementResult) -> None:
        self._results[session_id] = result

    def invalidate(self, session_id: int) -> None:
        if self._results.pop(session_id, None) is not None:
            logger.debug("Invalidated cached settlement for session_id=%s", session_id)

    def clear(self) -> None:
        self._results.clear()

    def __contains__(self, session_id: int) -> bool:
        return session_id in self._results

    def __len__(self) -> int:
        return len(self._results)
