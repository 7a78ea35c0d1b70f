from tool_agent.memory import InMemoryStore


def test_recent_returns_last_messages_oldest_first():
    store = InMemoryStore()
    for i in range(5):
        store.append("user", f"m{i}")

    assert [m.content for m in store.recent(3)] == ["m2", "m3", "m4"]
    assert [m.content for m in store.recent(10)] == ["m0", "m1", "m2", "m3", "m4"]


def test_recent_with_non_positive_limit():
    store = InMemoryStore()
    store.append("user", "hello")
    assert store.recent(0) == []
    assert store.recent(-1) == []


def test_max_messages_drops_oldest():
    store = InMemoryStore(max_messages=2)
    store.append("user", "a")
    store.append("assistant", "b")
    store.append("assistant", "c")

    assert len(store) == 2
    assert [(m.role, m.content) for m in store.recent(5)] == [("assistant", "b"), ("assistant", "c")]


def test_clear():
    store = InMemoryStore()
    store.append("user", "a")
    store.clear()
    assert len(store) == 0
