"""Scenario orchestration."""

from livequery.orchestrator.replay import Replay, run_scenario

__all__ = ["Replay", "run_scenario"]
