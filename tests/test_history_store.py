from app.storage.history import HistoryStore


def _save(store: HistoryStore, name: str, date: str, user_id: str = "u1"):
    return store.save(
        user_id=user_id,
        file_name=name,
        original_size=1_000,
        compressed_size=600,
        date=date,
        file_type="text/plain",
    )


def test_list_orders_by_instant_not_by_text():
    store = HistoryStore()
    _save(store, "whole-second.txt", "2026-01-01T00:00:00Z")
    _save(store, "fraction.txt", "2026-01-01T00:00:00.123000Z")
    _save(store, "earlier.txt", "2025-12-31T23:59:59.999999Z")

    names = [item.file_name for item in store.list_for_user("u1")]
    assert names == ["fraction.txt", "whole-second.txt", "earlier.txt"]


def test_list_is_scoped_to_user():
    store = HistoryStore()
    _save(store, "mine.txt", "2026-01-01T00:00:00Z")
    _save(store, "theirs.txt", "2026-01-02T00:00:00Z", user_id="u2")

    assert [item.file_name for item in store.list_for_user("u1")] == ["mine.txt"]
    assert store.delete(store.list_for_user("u2")[0].id, "u1") is False
