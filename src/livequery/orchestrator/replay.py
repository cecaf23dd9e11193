"""Replaying a recorded change feed through live views."""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import pandas as pd
from pydantic import ValidationError

from livequery.client import LiveClient
from livequery.config import settings
from livequery.contracts.outcome import Message, Outcome, err, warn
from livequery.contracts.specs import ReplayReport, ScenarioSpec, ViewReport, ViewSpec
from livequery.contracts.trace import ViewTrace
from livequery.contracts.validate import check_filter_columns
from livequery.engine.table_query import QueryCallbacks, TableQuery
from livequery.query.render import build_select
from livequery.sources.memory import InMemoryConnection, InMemoryTable
from livequery.util.logging import get_logger

logger = get_logger("replay")


def _records(df: pd.DataFrame) -> list[dict[str, Any]]:
    """DataFrame rows as plain dicts, empty cells as None."""
    return df.astype(object).where(df.notna(), None).to_dict(orient="records")


@dataclass
class _Recorder:
    """Collects what one view reported while the scenario ran."""

    log: list[dict[str, Any]] = field(default_factory=list)
    recomputes: int = 0

    def callbacks(self) -> QueryCallbacks:
        return QueryCallbacks(
            on_insert=lambda row: self.log.append({"event": "insert", "row": row}),
            on_delete=lambda row: self.log.append({"event": "delete", "row": row}),
            on_update=lambda old, new: self.log.append({"event": "update", "old": old, "new": new}),
            on_initial_snapshot=lambda rows: self.log.append(
                {"event": "initial_snapshot", "rows": len(rows)}
            ),
        )

    def on_rows(self, rows: tuple) -> None:
        self.recomputes += 1


class Replay:
    """Runs a scenario directory against in-memory tables.

    A scenario directory holds ``scenario.json`` (views and transactions)
    and optionally one ``<table>.csv`` per table with the rows present
    before the subscription is applied.

    With ``trace`` on (default: ``settings.trace_enabled``) every view is
    traced and the traces land in ``Outcome.trace["views"]``, keyed by view
    name.
    """

    def __init__(self, data_dir: Path, trace: Optional[bool] = None):
        """Load the scenario.

        Raises:
            FileNotFoundError: If scenario.json is missing
            ValidationError: If scenario.json does not match ScenarioSpec
        """
        self.data_dir = Path(data_dir)
        self.trace = settings.trace_enabled if trace is None else trace
        self.scenario = self._load_scenario()
        self.seed_frames = self._load_tables()

    def _load_scenario(self) -> ScenarioSpec:
        scenario_path = self.data_dir / "scenario.json"
        if not scenario_path.exists():
            raise FileNotFoundError(f"Scenario file not found: {scenario_path}")

        with open(scenario_path) as f:
            data = json.load(f)
        return ScenarioSpec.model_validate(data)

    def _load_tables(self) -> dict[str, pd.DataFrame]:
        frames: dict[str, pd.DataFrame] = {}
        for csv_path in sorted(self.data_dir.glob("*.csv")):
            frames[csv_path.stem] = pd.read_csv(csv_path)
        return frames

    def _known_columns(self, table: str) -> Optional[set[str]]:
        columns: set[str] = set()
        if table in self.seed_frames:
            columns.update(self.seed_frames[table].columns)
        for tx in self.scenario.transactions:
            for op in tx.ops:
                if op.table == table:
                    columns.update(op.row)
        return columns or None

    def _check_views(self) -> list[Message]:
        warnings: list[Message] = []
        for view in self.scenario.views:
            columns = self._known_columns(view.table)
            if columns is None:
                warnings.append(
                    warn("unknown_table", f"No rows known for table '{view.table}'", table=view.table)
                )
                continue
            warnings.extend(check_filter_columns(view.where, columns, view.table))
        return warnings

    def _build_connection(self) -> InMemoryConnection:
        conn = InMemoryConnection()
        for name, df in self.seed_frames.items():
            primary_key = self.scenario.tables.get(name)
            conn.add_table(
                InMemoryTable(
                    name,
                    rows=_records(df),
                    primary_key=primary_key.primary_key if primary_key else "id",
                )
            )
        for name, spec in self.scenario.tables.items():
            if name not in conn.tables:
                conn.add_table(InMemoryTable(name, primary_key=spec.primary_key))
        return conn

    def run(self) -> Outcome[ReplayReport]:
        """Connect, apply every subscription, then replay the transactions in order."""
        warnings = self._check_views()
        conn = self._build_connection()
        client = LiveClient(conn)

        views: list[tuple[ViewSpec, TableQuery, _Recorder]] = []
        for spec in self.scenario.views:
            recorder = _Recorder()
            view = client.table_query(
                spec.table,
                spec.where,
                callbacks=recorder.callbacks(),
                trace=self._new_trace(spec),
            )
            view.subscribe_rows(recorder.on_rows)
            views.append((spec, view, recorder))

        try:
            conn.connect()
            applied = conn.apply_subscriptions()
            logger.info(f"Applied {applied} subscriptions")

            applied_txs = 0
            for tx_spec in self.scenario.transactions:
                with conn.transaction(tx_spec.id) as tx:
                    for op in tx_spec.ops:
                        getattr(tx, op.op)(op.table, op.row)
                applied_txs += 1

            report = ReplayReport(
                views=[
                    ViewReport(
                        name=spec.name,
                        query=view.query,
                        state=view.state.value,
                        rows=[dict(r) for r in view.rows],
                        log=recorder.log,
                        recomputes=recorder.recomputes,
                    )
                    for spec, view, recorder in views
                ],
                transactions_applied=applied_txs,
                subscriptions=[s.query for s in conn.subscriptions],
            )
        except KeyError as e:
            logger.error(f"Replay failed: {e}")
            return Outcome.failure(
                errors=[err("invalid_operation", f"Replay failed: {e}")],
                warnings=warnings,
                trace=self._collect_traces(views),
            )
        finally:
            client.close()

        return Outcome.success(data=report, warnings=warnings, trace=self._collect_traces(views))

    def _new_trace(self, spec: ViewSpec) -> Optional[ViewTrace]:
        if not self.trace:
            return None
        return ViewTrace(
            view_id=spec.name,
            query=build_select(spec.table, spec.where),
            max_events=settings.LIVEQUERY_TRACE_MAX_EVENTS,
        )

    def _collect_traces(self, views: list[tuple[ViewSpec, TableQuery, _Recorder]]) -> dict[str, Any]:
        if not self.trace:
            return {}
        traces = {spec.name: view.trace.to_dict() for spec, view, _ in views if view.trace is not None}
        return {"views": traces} if traces else {}


def run_scenario(data_dir: Path, trace: Optional[bool] = None) -> Outcome[ReplayReport]:
    """Load and run a scenario, turning load errors into a failed Outcome."""
    try:
        replay = Replay(data_dir, trace=trace)
    except FileNotFoundError as e:
        return Outcome.failure(errors=[err("missing_scenario", str(e))])
    except (ValidationError, json.JSONDecodeError) as e:
        return Outcome.failure(errors=[err("invalid_scenario", f"Invalid scenario: {e}")])
    return replay.run()
