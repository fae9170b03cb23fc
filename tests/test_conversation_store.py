"""Tests for the in-memory conversation store."""

import pytest
from pydantic import ValidationError

from finchat.core.schema import (
    Role,
    Turn,
)
from finchat.memory.conversation_store import ConversationStore


def _exchange(n: int) -> list[Turn]:
    return [
        Turn(role=Role.USER, content=f"question {n}"),
        Turn(role=Role.ASSISTANT, content=f"answer {n}"),
    ]


@pytest.mark.parametrize("exchanges", [0, 1, 3, 5, 6, 12])
def test_history_length_is_bounded(store: ConversationStore, exchanges: int) -> None:
    """After N exchanges the stored history holds min(2N, 10) turns."""

    for n in range(exchanges):
        store.append("c1", _exchange(n))

    assert len(store.get("c1")) == min(2 * exchanges, 10)


def test_truncation_keeps_newest_turns_in_order(store: ConversationStore) -> None:
    for n in range(7):
        store.append("c1", _exchange(n))

    history = store.get("c1")
    assert history[0].content == "question 2"
    assert history[-1].content == "answer 6"
    assert [t.role for t in history[:2]] == [Role.USER, Role.ASSISTANT]


def test_unknown_id_is_empty(store: ConversationStore) -> None:
    assert store.get("nobody") == []
    assert "nobody" not in store


def test_delete_removes_history(store: ConversationStore) -> None:
    """A cleared conversation reads back empty regardless of prior content."""

    for n in range(4):
        store.append("c1", _exchange(n))
    store.append("c2", _exchange(0))

    store.delete("c1")

    assert store.get("c1") == []
    assert "c1" not in store
    assert store.ids() == ["c2"]
    assert len(store.get("c2")) == 2


def test_delete_unknown_id_is_noop(store: ConversationStore) -> None:
    store.delete("never-seen")
    assert len(store) == 0


def test_recent_window(store: ConversationStore) -> None:
    for n in range(5):
        store.append("c1", _exchange(n))

    window = store.recent("c1", 6)
    assert len(store.get("c1")) == 10
    assert len(window) == 6
    assert window[0].content == "question 2"
    assert store.recent("c1", 0) == []


def test_get_returns_a_copy(store: ConversationStore) -> None:
    store.append("c1", _exchange(0))
    snapshot = store.get("c1")
    snapshot.clear()
    assert len(store.get("c1")) == 2


def test_lock_is_stable_per_conversation(store: ConversationStore) -> None:
    assert store.lock("c1") is store.lock("c1")
    assert store.lock("c1") is not store.lock("c2")


def test_delete_releases_idle_lock(store: ConversationStore) -> None:
    idle = store.lock("c1")
    store.delete("c1")
    assert store.lock("c1") is not idle


@pytest.mark.asyncio
async def test_delete_keeps_held_lock(store: ConversationStore) -> None:
    held = store.lock("c1")
    async with held:
        store.append("c1", _exchange(0))
        store.delete("c1")
        assert store.lock("c1") is held
    assert store.get("c1") == []


def test_turns_are_immutable() -> None:
    turn = Turn(role=Role.USER, content="hi")
    with pytest.raises(ValidationError):
        turn.content = "changed"  # type: ignore[misc]


def test_invalid_limit() -> None:
    with pytest.raises(ValueError):
        ConversationStore(max_turns=0)
