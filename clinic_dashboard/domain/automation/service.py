"""Automation metrics - n8n workflow execution health"""

import logging
from collections.abc import Sequence
from datetime import datetime, timedelta, timezone
from typing import Optional

from ...errors import degraded_sources
from ...services.n8n_service import N8nService
from ...shared.validators import format_percentage
from .schemas import AutomationMetricsResponse, DailyExecutions, RecentExecution, WorkflowExecution

logger = logging.getLogger(__name__)

RECENT_EXECUTION_LIMIT = 10


def _started_since(executions: Sequence[WorkflowExecution], since: datetime) -> list[WorkflowExecution]:
    return [e for e in executions if e.startedAt is not None and e.startedAt >= since]


def executions_by_day(executions: Sequence[WorkflowExecution]) -> list[DailyExecutions]:
    """Per-day success/error counts (UTC dates, oldest first); any non-success counts as an error"""
    days: dict[str, DailyExecutions] = {}
    for execution in executions:
        if execution.startedAt is None:
            continue
        date = execution.startedAt.astimezone(timezone.utc).date().isoformat()
        day = days.setdefault(date, DailyExecutions(date=date))
        if execution.status == "success":
            day.success += 1
        else:
            day.error += 1
    return [days[date] for date in sorted(days)]


class AutomationService:
    def __init__(self, n8n: N8nService):
        self.n8n = n8n

    async def get_metrics(self, now: Optional[datetime] = None) -> AutomationMetricsResponse:
        now = now or datetime.now(timezone.utc)
        result = await self.n8n.list_executions()
        executions = result.data

        last_7 = _started_since(executions, now - timedelta(days=7))
        last_30 = _started_since(executions, now - timedelta(days=30))

        success_7 = sum(1 for e in last_7 if e.status == "success")
        success_30 = sum(1 for e in last_30 if e.status == "success")

        return AutomationMetricsResponse(
            totalExecutions7Days=len(last_7),
            successfulExecutions7Days=success_7,
            failedExecutions7Days=sum(1 for e in last_7 if e.status == "error"),
            successRate7Days=format_percentage(success_7, len(last_7)),
            totalExecutions30Days=len(last_30),
            successfulExecutions30Days=success_30,
            failedExecutions30Days=sum(1 for e in last_30 if e.status == "error"),
            successRate30Days=format_percentage(success_30, len(last_30)),
            executionsByDay=executions_by_day(last_7),
            recentExecutions=[
                RecentExecution(id=e.id, status=e.status, startedAt=e.startedAt, duration=e.duration_seconds)
                for e in executions[:RECENT_EXECUTION_LIMIT]
            ],
            totalExecutionsAllTime=len(executions),
            lastUpdated=now.isoformat(),
            degradedSources=degraded_sources(result),
        )
