"""Automation domain schemas - n8n workflow executions"""

import math
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from ...shared.validators import parse_iso_datetime


class WorkflowExecution(BaseModel):
    id: Optional[int] = None
    status: str = ""
    finished: bool = False
    mode: str = ""
    workflowId: Optional[str] = None
    startedAt: Optional[datetime] = None
    stoppedAt: Optional[datetime] = None

    @classmethod
    def from_n8n(cls, payload: dict[str, Any]) -> "WorkflowExecution":
        execution_id = payload.get("id")
        try:
            execution_id = int(execution_id) if execution_id is not None else None
        except (TypeError, ValueError):
            execution_id = None

        workflow_id = payload.get("workflowId")
        return cls(
            id=execution_id,
            status=payload.get("status") or "",
            finished=payload.get("finished") is True,
            mode=payload.get("mode") or "",
            workflowId=str(workflow_id) if workflow_id is not None else None,
            startedAt=parse_iso_datetime(payload.get("startedAt")),
            stoppedAt=parse_iso_datetime(payload.get("stoppedAt")),
        )

    @property
    def duration_seconds(self) -> Optional[int]:
        if self.startedAt is None or self.stoppedAt is None:
            return None
        return math.floor((self.stoppedAt - self.startedAt).total_seconds() + 0.5)


class DailyExecutions(BaseModel):
    date: str
    success: int = 0
    error: int = 0


class RecentExecution(BaseModel):
    id: Optional[int]
    status: str
    startedAt: Optional[datetime]
    duration: Optional[int]


class AutomationMetricsResponse(BaseModel):
    totalExecutions7Days: int
    successfulExecutions7Days: int
    failedExecutions7Days: int
    successRate7Days: str
    totalExecutions30Days: int
    successfulExecutions30Days: int
    failedExecutions30Days: int
    successRate30Days: str
    executionsByDay: list[DailyExecutions]
    recentExecutions: list[RecentExecution]
    totalExecutionsAllTime: int
    lastUpdated: str
    degradedSources: list[str] = Field(default_factory=list)
