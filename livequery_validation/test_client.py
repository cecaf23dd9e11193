from __future__ import annotations

import pytest

from livequery.client import LiveClient
from livequery.contracts.events import ViewState
from livequery.query.builder import eq
from livequery.sources.memory import StatusSignal
from livequery_validation.stubs import build_user


def test_views_share_the_connection_status(connection) -> None:
    client = LiveClient(connection)
    active = client.table_query("User", lambda q: q.eq("isActive", True))
    admins = client.table_query("User", eq("role", "admin"))

    assert connection.status.subscriber_count() == 2
    connection.connect()
    connection.apply_subscriptions()

    assert connection.status.subscriber_count() == 0
    assert active.state is ViewState.ready
    assert admins.state is ViewState.ready
    assert [s.query for s in connection.subscriptions] == [
        "SELECT * FROM User WHERE isActive = TRUE",
        "SELECT * FROM User WHERE role = 'admin'",
    ]


def test_explicit_status_source_is_used(connection) -> None:
    status = StatusSignal()
    client = LiveClient(connection, status=status)
    client.table_query("User")

    assert status.subscriber_count() == 1
    assert connection.status.subscriber_count() == 0


def test_status_source_is_required() -> None:
    class Bare:
        is_active = False

    with pytest.raises(ValueError):
        LiveClient(Bare())  # type: ignore[arg-type]


def test_close_destroys_every_view(connection) -> None:
    with LiveClient(connection) as client:
        client.table_query("User")
        client.table_query("User", eq("isActive", True))
        connection.connect()
        connection.apply_subscriptions()
        assert len(client.views) == 2

    assert client.views == []
    assert connection.table("User").listener_count() == 0
    assert connection.active_subscriptions() == []

    with connection.transaction() as tx:
        tx.insert("User", build_user(5))


def test_views_excludes_destroyed(connection) -> None:
    client = LiveClient(connection)
    first = client.table_query("User")
    second = client.table_query("User")

    first.destroy()

    assert client.views == [second]
