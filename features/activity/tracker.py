"""
Aggregate Tracker — overall progress and per-agent performance.

Each new record bumps its agent's counters, folds any latency into a running
mean, and moves the overall progress if the record carries one. Nothing is
recomputed from history: state only changes on observe() and reset().
"""

from __future__ import annotations

import logging
from dataclasses import replace

from features.activity.models import (
    ActivityLevel,
    ActivityRecord,
    ActivityStatus,
    AgentPerformance,
    AgentStatus,
)

log = logging.getLogger(__name__)


class AggregateTracker:
    """Maintains current progress and an agent performance table."""

    def __init__(self, seed_agents: tuple[str, ...] | list[str] = ()):
        self._seed_agents = tuple(seed_agents)
        self.progress = 0
        self.agents: dict[str, AgentPerformance] = {}
        self.reset()

    def reset(self) -> None:
        """Back to zero progress and an idle, pre-seeded agent table."""
        self.progress = 0
        self.agents = {name: AgentPerformance(name=name) for name in self._seed_agents}

    def observe(self, record: ActivityRecord) -> None:
        if record.progress is not None:
            self.progress = record.progress

        if not record.agent:
            return
        agent = self.agents.get(record.agent)
        if agent is None:
            agent = AgentPerformance(name=record.agent)
            self.agents[record.agent] = agent
            log.debug("[MONITOR] Tracking new agent: %s", record.agent)

        agent.tasks_completed += 1
        if record.level is ActivityLevel.ERROR:
            agent.error_count += 1
        agent.success_rate = 100.0 * (agent.tasks_completed - agent.error_count) / agent.tasks_completed

        latency = record.metadata.get("durationMs")
        if isinstance(latency, (int, float)) and not isinstance(latency, bool):
            agent.latency_samples += 1
            agent.avg_response_time += (latency - agent.avg_response_time) / agent.latency_samples

        if record.level is ActivityLevel.ERROR:
            agent.status = AgentStatus.ERROR
        elif record.status is ActivityStatus.COMPLETED:
            agent.status = AgentStatus.COMPLETE
        else:
            agent.status = AgentStatus.ACTIVE
        agent.last_activity = record.timestamp

    def snapshot(self) -> list[AgentPerformance]:
        """Copies of the agent rows, in first-seen order."""
        return [replace(a) for a in self.agents.values()]

    def summary(self) -> dict:
        statuses: dict[str, int] = {}
        for a in self.agents.values():
            statuses[a.status.value] = statuses.get(a.status.value, 0) + 1
        return {
            "progress": self.progress,
            "total_agents": len(self.agents),
            "agent_statuses": statuses,
            "tasks_completed": sum(a.tasks_completed for a in self.agents.values()),
        }
