from __future__ import annotations

import pytest

from livequery.contracts.events import ConnectionStatus
from livequery.sources.memory import InMemoryConnection, InMemoryTable, StatusSignal
from livequery_validation.stubs import build_user


def test_status_signal_calls_back_immediately_then_on_change() -> None:
    signal = StatusSignal()
    seen: list = []
    unsubscribe = signal.subscribe(seen.append)

    signal.set(ConnectionStatus.connecting)
    signal.set(ConnectionStatus.connecting)
    signal.set("connected")
    unsubscribe()
    signal.set(ConnectionStatus.error)

    assert seen == [
        ConnectionStatus.disconnected,
        ConnectionStatus.connecting,
        ConnectionStatus.connected,
    ]
    assert signal.value is ConnectionStatus.error


def test_connection_status_transitions() -> None:
    conn = InMemoryConnection()
    seen: list = []
    conn.status.subscribe(seen.append)

    conn.connect()
    assert conn.is_active
    conn.fail()
    assert not conn.is_active

    assert seen == [
        ConnectionStatus.disconnected,
        ConnectionStatus.connecting,
        ConnectionStatus.connected,
        ConnectionStatus.error,
    ]


def test_transaction_writes_cache_before_events() -> None:
    conn = InMemoryConnection()
    table = conn.add_table(InMemoryTable("User", rows=[build_user(1)]))
    sizes: list[int] = []
    table.on_insert(lambda tx, row: sizes.append(len(table)))

    with conn.transaction() as tx:
        tx.insert("User", build_user(2))
        tx.insert("User", build_user(3))

    assert sizes == [3, 3]


def test_transaction_marker_is_shared() -> None:
    conn = InMemoryConnection()
    conn.add_table(InMemoryTable("User", rows=[build_user(1)]))
    markers: list = []
    conn.table("User").on_insert(lambda tx, row: markers.append(tx))
    conn.table("User").on_update(lambda tx, old, new: markers.append(tx))

    with conn.transaction() as tx:
        tx.insert("User", build_user(2))
        tx.update("User", build_user(1, name="x"))
    with conn.transaction("named") as tx:
        tx.insert("User", build_user(3))

    assert markers[0] == markers[1]
    assert markers[2] == "named"


def test_update_reports_previous_row() -> None:
    conn = InMemoryConnection()
    old = build_user(1)
    conn.add_table(InMemoryTable("User", rows=[old]))
    seen: list = []
    conn.table("User").on_update(lambda tx, o, n: seen.append((o, n)))

    new = build_user(1, name="renamed")
    with conn.transaction() as tx:
        tx.update("User", new)

    assert seen == [(old, new)]
    assert conn.table("User").get(1) == new


def test_update_of_unknown_row_raises() -> None:
    conn = InMemoryConnection()
    with pytest.raises(KeyError):
        with conn.transaction() as tx:
            tx.update("User", build_user(404))


def test_failed_transaction_leaves_cache_untouched() -> None:
    conn = InMemoryConnection()
    users = conn.add_table(InMemoryTable("User", rows=[build_user(1)]))
    teams = conn.add_table(InMemoryTable("Team", rows=[{"id": 7, "name": "core"}]))
    seen: list = []
    users.on_insert(lambda tx, row: seen.append(row))
    teams.on_delete(lambda tx, row: seen.append(row))

    with pytest.raises(KeyError):
        with conn.transaction() as tx:
            tx.insert("User", build_user(2))
            tx.delete("Team", {"id": 7})
            tx.update("User", build_user(99))

    assert [r["id"] for r in users.iter()] == [1]
    assert teams.get(7) == {"id": 7, "name": "core"}
    assert seen == []

    with conn.transaction() as tx:
        tx.insert("User", build_user(2))
    assert [r["id"] for r in users.iter()] == [1, 2]
    assert len(seen) == 1


def test_tables_are_created_on_first_use() -> None:
    conn = InMemoryConnection()
    assert conn.table("Missing").iter() == []
    assert "Missing" in conn.tables


def test_auto_apply_reports_applied_on_subscribe() -> None:
    conn = InMemoryConnection(auto_apply=True)
    applied: list = []
    sub = conn.subscription_builder().on_applied(lambda: applied.append(1)).subscribe("SELECT * FROM User")

    assert applied == [1]
    assert sub.applied_count == 1
    assert conn.apply_subscriptions() == 0
