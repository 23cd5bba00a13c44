"""Automation router - n8n workflow metrics"""

from fastapi import APIRouter, Depends

from ...auth import require_session
from ...dependencies import get_n8n_service
from ...services.n8n_service import N8nService
from .schemas import AutomationMetricsResponse
from .service import AutomationService

router = APIRouter(prefix="/api", tags=["Automation"], dependencies=[Depends(require_session)])


def get_automation_service(n8n: N8nService = Depends(get_n8n_service)) -> AutomationService:
    return AutomationService(n8n)


@router.get("/n8n-metrics", response_model=AutomationMetricsResponse)
async def get_n8n_metrics(service: AutomationService = Depends(get_automation_service)):
    """Execution counts and success rates of the WhatsApp agent workflow"""
    return await service.get_metrics()
