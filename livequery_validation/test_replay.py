from __future__ import annotations

import json
from pathlib import Path

import pytest

from livequery.orchestrator.replay import Replay, run_scenario


def _ids(rows) -> set[int]:
    return {r["id"] for r in rows}


def _write_scenario(dir_: Path, scenario: dict, csv: str | None = None) -> Path:
    (dir_ / "scenario.json").write_text(json.dumps(scenario))
    if csv is not None:
        (dir_ / "User.csv").write_text(csv)
    return dir_


@pytest.fixture()
def demo_outcome(demo_dir: Path):
    return run_scenario(demo_dir)


def test_demo_scenario_runs(demo_outcome) -> None:
    assert demo_outcome.ok, demo_outcome.errors
    assert demo_outcome.warnings == []
    report = demo_outcome.data
    assert report.transactions_applied == 3
    assert report.subscriptions == [v.query for v in report.views]


def test_demo_final_rows(demo_outcome) -> None:
    views = {v.name: v for v in demo_outcome.data.views}

    assert _ids(views["active_users"].rows) == {2, 4, 5, 6}
    assert _ids(views["product_and_eng_admins"].rows) == {1, 2, 5}
    assert _ids(views["all_users"].rows) == {1, 2, 4, 5, 6}
    assert all(v.state == "ready" for v in views.values())


def test_demo_callback_logs(demo_outcome) -> None:
    views = {v.name: v for v in demo_outcome.data.views}

    active = [e["event"] for e in views["active_users"].log]
    assert active == ["initial_snapshot", "insert", "insert", "insert", "delete", "delete"]
    assert views["active_users"].log[0]["rows"] == 3

    admins = [e["event"] for e in views["product_and_eng_admins"].log]
    assert admins == ["initial_snapshot", "insert", "update", "update"]

    everyone = [e["event"] for e in views["all_users"].log]
    assert everyone == ["initial_snapshot", "insert", "insert", "update", "update", "delete"]


def test_demo_recomputes_once_per_transaction(demo_outcome) -> None:
    views = {v.name: v for v in demo_outcome.data.views}

    # applied + one per transaction that touched the view
    assert views["active_users"].recomputes == 4
    assert views["product_and_eng_admins"].recomputes == 3
    assert views["all_users"].recomputes == 4


def test_demo_query_text(demo_outcome) -> None:
    views = {v.name: v for v in demo_outcome.data.views}
    assert views["product_and_eng_admins"].query == (
        "SELECT * FROM User WHERE role = 'admin' AND (dept = 'Eng' OR dept = 'Product')"
    )
    assert views["all_users"].query == "SELECT * FROM User"


def test_seed_rows_come_from_csv(demo_dir: Path) -> None:
    replay = Replay(demo_dir)
    assert list(replay.seed_frames) == ["User"]
    assert len(replay.seed_frames["User"]) == 4


def test_empty_cells_become_none(tmp_path: Path) -> None:
    _write_scenario(
        tmp_path,
        {"views": [{"name": "v", "table": "User", "where": {"kind": "eq", "key": "dept", "value": "Eng"}}]},
        csv="id,dept\n1,Eng\n2,\n",
    )
    outcome = run_scenario(tmp_path)
    assert outcome.ok
    assert outcome.data.views[0].rows == [{"id": 1, "dept": "Eng"}]


def test_unknown_column_warns(tmp_path: Path) -> None:
    _write_scenario(
        tmp_path,
        {"views": [{"name": "v", "table": "User", "where": {"kind": "eq", "key": "nope", "value": 1}}]},
        csv="id,name\n1,a\n",
    )
    outcome = run_scenario(tmp_path)
    assert outcome.ok
    assert [w.code for w in outcome.warnings] == ["unknown_column"]
    assert outcome.warnings[0].context["column"] == "nope"
    assert outcome.data.views[0].rows == []


def test_unknown_table_warns(tmp_path: Path) -> None:
    _write_scenario(tmp_path, {"views": [{"name": "v", "table": "Ghost"}]})
    outcome = run_scenario(tmp_path)
    assert outcome.ok
    assert [w.code for w in outcome.warnings] == ["unknown_table"]


def test_missing_scenario_fails(tmp_path: Path) -> None:
    outcome = run_scenario(tmp_path)
    assert not outcome.ok
    assert outcome.errors[0].code == "missing_scenario"


def test_invalid_predicate_fails(tmp_path: Path) -> None:
    _write_scenario(
        tmp_path,
        {"views": [{"name": "v", "table": "User", "where": {"kind": "gt", "key": "age", "value": 3}}]},
    )
    outcome = run_scenario(tmp_path)
    assert not outcome.ok
    assert outcome.errors[0].code == "invalid_scenario"


def test_update_of_missing_row_fails(tmp_path: Path) -> None:
    _write_scenario(
        tmp_path,
        {
            "views": [{"name": "v", "table": "User"}],
            "transactions": [{"ops": [{"op": "update", "table": "User", "row": {"id": 9}}]}],
        },
        csv="id\n1\n",
    )
    outcome = run_scenario(tmp_path)
    assert not outcome.ok
    assert outcome.errors[0].code == "invalid_operation"


def test_custom_primary_key(tmp_path: Path) -> None:
    _write_scenario(
        tmp_path,
        {
            "tables": {"User": {"primary_key": "email"}},
            "views": [{"name": "v", "table": "User"}],
            "transactions": [
                {"ops": [{"op": "update", "table": "User", "row": {"email": "a@x", "name": "A2"}}]}
            ],
        },
    )
    (tmp_path / "User.csv").write_text("email,name\na@x,A\n")
    outcome = run_scenario(tmp_path)
    assert outcome.ok
    assert outcome.data.views[0].rows == [{"email": "a@x", "name": "A2"}]


def test_traces_are_off_by_default(demo_outcome) -> None:
    assert demo_outcome.trace == {}


def test_trace_collects_one_entry_per_view(demo_dir: Path) -> None:
    outcome = run_scenario(demo_dir, trace=True)
    assert outcome.ok

    traces = outcome.trace["views"]
    assert list(traces) == ["active_users", "product_and_eng_admins", "all_users"]

    active = traces["active_users"]
    assert active["view_id"] == "active_users"
    assert active["query"] == "SELECT * FROM User WHERE isActive = TRUE"
    assert active["totals"]["subscribe_requested"] == 1
    assert active["totals"]["initial_snapshot"] == 1
    # same count the rows observer saw
    assert active["totals"]["snapshot_recomputed"] == 4
    assert active["totals"]["destroyed"] == 1


def test_trace_follows_settings(monkeypatch: pytest.MonkeyPatch, demo_dir: Path) -> None:
    from livequery.config import settings

    monkeypatch.setattr(settings, "LIVEQUERY_TRACE_VIEWS", True)
    outcome = run_scenario(demo_dir)
    assert set(outcome.trace["views"]) == {"active_users", "product_and_eng_admins", "all_users"}

    assert run_scenario(demo_dir, trace=False).trace == {}


def test_failed_replay_keeps_traces(tmp_path: Path) -> None:
    _write_scenario(
        tmp_path,
        {
            "views": [{"name": "v", "table": "User"}],
            "transactions": [{"ops": [{"op": "update", "table": "User", "row": {"id": 9}}]}],
        },
        csv="id\n1\n",
    )
    outcome = run_scenario(tmp_path, trace=True)
    assert not outcome.ok
    assert outcome.trace["views"]["v"]["totals"]["initial_snapshot"] == 1
