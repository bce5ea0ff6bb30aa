"""
Agent Memory

Process-scoped state owned by each agent instance:
- ConversationHistory: bounded, ordered log of prior exchanges
- ContextStore: unbounded key/value scratch state
"""

import logging
from typing import Any, Dict, List, Optional

from agents.agent_types import HistoryEntry

logger = logging.getLogger(__name__)

HISTORY_CAP = 50
HISTORY_KEEP = 40


class ConversationHistory:
    """
    Ordered conversation log.

    Once the log grows past `cap` entries it is cut back to the most recent
    `keep` entries in one pass.
    """

    def __init__(self, cap: int = HISTORY_CAP, keep: int = HISTORY_KEEP):
        if keep > cap:
            raise ValueError("keep must not exceed cap")
        self.cap = cap
        self.keep = keep
        self.entries: List[HistoryEntry] = []

    def append(self, role: str, content: str) -> None:
        self.entries.append(HistoryEntry(role=role, content=content))

        if len(self.entries) > self.cap:
            dropped = len(self.entries) - self.keep
            self.entries = self.entries[-self.keep:]
            logger.debug(f"HISTORY: Trimmed {dropped} oldest entries")

    def recent(self, count: int) -> List[HistoryEntry]:
        """Most recent `count` entries, oldest first"""
        if count <= 0:
            return []
        return list(self.entries[-count:])

    def as_messages(self, count: int) -> List[Dict[str, str]]:
        return [entry.to_message() for entry in self.recent(count)]

    def clear(self) -> None:
        self.entries = []

    def __len__(self) -> int:
        return len(self.entries)


class ContextStore:
    """Key/value scratch state with no expiry and no size cap"""

    def __init__(self):
        self._items: Dict[str, Any] = {}

    def set(self, key: str, value: Any) -> None:
        self._items[key] = value

    def get(self, key: str, default: Optional[Any] = None) -> Any:
        return self._items.get(key, default)

    def all(self) -> Dict[str, Any]:
        return dict(self._items)

    def __contains__(self, key: str) -> bool:
        return key in self._items

    def __len__(self) -> int:
        return len(self._items)
