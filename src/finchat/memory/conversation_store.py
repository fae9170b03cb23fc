"""
In-memory conversation history.

Each conversation id owns an ordered, bounded list of :class:`Turn`.  Nothing is persisted; the
store lives as long as the process.  The store does not serialize concurrent writers on its own:
callers that may run two exchanges for the same id at once should hold :meth:`lock` for the
whole read-modify-append cycle.
"""

import asyncio
import logging
from typing import (
    Dict,
    Iterable,
    List,
)

from finchat.config import settings
from finchat.core.schema import Turn

logger = logging.getLogger(__name__)


class ConversationStore:
    """Mapping from conversation id to its most recent turns."""

    def __init__(self, max_turns: int | None = None):
        if max_turns is None:
            max_turns = settings.HISTORY_LIMIT
        if max_turns < 1:
            raise ValueError("max_turns must be at least 1")
        self.max_turns = max_turns
        self._conversations: Dict[str, List[Turn]] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #
    def get(self, conversation_id: str) -> List[Turn]:
        """Return a copy of the stored turns (empty if the id is unknown)."""
        return list(self._conversations.get(conversation_id, []))

    def recent(self, conversation_id: str, n: int) -> List[Turn]:
        """Return at most the last *n* stored turns."""
        if n <= 0:
            return []
        return self.get(conversation_id)[-n:]

    def append(self, conversation_id: str, turns: Iterable[Turn]) -> None:
        """Append *turns* in order, then keep only the newest ``max_turns``."""
        history = self._conversations.get(conversation_id, []) + list(turns)
        self._conversations[conversation_id] = history[-self.max_turns :]
        logger.debug(
            "Conversation '%s' now holds %d turns",
            conversation_id,
            len(self._conversations[conversation_id]),
        )

    def delete(self, conversation_id: str) -> None:
        """Forget the conversation.  Unknown ids are ignored."""
        self._conversations.pop(conversation_id, None)
        # A held lock stays so the running exchange and its waiters share it
        lock = self._locks.get(conversation_id)
        if lock is not None and not lock.locked():
            del self._locks[conversation_id]

    def lock(self, conversation_id: str) -> asyncio.Lock:
        """Per-conversation lock for serializing exchanges on the same id."""
        return self._locks.setdefault(conversation_id, asyncio.Lock())

    def ids(self) -> List[str]:
        """Ids of all live conversations."""
        return list(self._conversations)

    def __contains__(self, conversation_id: object) -> bool:
        return conversation_id in self._conversations

    def __len__(self) -> int:
        return len(self._conversations)
