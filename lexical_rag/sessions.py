from __future__ import annotations

import logging
import threading
from typing import Dict, List, Optional

from .index.tfidf import TfidfIndex

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Maps session ids to their own TfidfIndex.

    Indexes are created on first use and dropped with discard(). The
    registry's own bookkeeping is locked; the indexes it hands out are not,
    so each one should be driven by a single session at a time.
    """

    def __init__(self) -> None:
        self._indexes: Dict[str, TfidfIndex] = {}
        self._lock = threading.Lock()

    def get_or_create(self, session_id: str) -> TfidfIndex:
        with self._lock:
            index = self._indexes.get(session_id)
            if index is None:
                index = TfidfIndex()
                self._indexes[session_id] = index
                logger.debug("Created index for session %s", session_id)
            return index

    def get(self, session_id: str) -> Optional[TfidfIndex]:
        with self._lock:
            return self._indexes.get(session_id)

    def clear(self, session_id: str) -> None:
        """Empty a session's index but keep the session registered."""
        index = self.get(session_id)
        if index is not None:
            index.clear()

    def discard(self, session_id: str) -> bool:
        with self._lock:
            index = self._indexes.pop(session_id, None)
        if index is None:
            return False
        index.clear()
        logger.info("Discarded session %s", session_id)
        return True

    def clear_all(self) -> None:
        with self._lock:
            indexes = list(self._indexes.values())
            self._indexes.clear()
        for index in indexes:
            index.clear()

    def session_ids(self) -> List[str]:
        with self._lock:
            return list(self._indexes)

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._indexes

    def __len__(self) -> int:
        with self._lock:
            return len(self._indexes)
