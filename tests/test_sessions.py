from __future__ import annotations

from datetime import timedelta

from storefront.sessions import InMemorySessionStore


def test_set_get_clear_round_trip() -> None:
    store = InMemorySessionStore()
    token = store.set({"id": 1, "email": "user@x.com"})

    assert store.get(token) == {"id": 1, "email": "user@x.com"}

    store.clear(token)
    assert store.get(token) is None


def test_tokens_are_unique_per_session() -> None:
    store = InMemorySessionStore()
    assert store.set({"id": 1}) != store.set({"id": 1})


def test_expired_sessions_are_dropped() -> None:
    store = InMemorySessionStore(ttl=timedelta(seconds=-1))
    token = store.set({"id": 1})

    assert store.get(token) is None


def test_returned_payload_is_a_copy() -> None:
    store = InMemorySessionStore()
    token = store.set({"id": 1})

    payload = store.get(token)
    assert payload is not None
    payload["id"] = 2

    assert store.get(token) == {"id": 1}


def test_cookie_max_age_matches_ttl() -> None:
    assert InMemorySessionStore(ttl=timedelta(hours=8)).cookie_max_age == 8 * 3600
