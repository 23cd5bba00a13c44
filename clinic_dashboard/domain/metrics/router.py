"""Service metrics router"""

from fastapi import APIRouter, Depends

from ...auth import require_session
from ...dependencies import get_calcom_service, get_supabase_service
from ...services.calcom_service import CalcomService
from ...services.supabase_service import SupabaseService
from .schemas import ServiceMetricsResponse
from .service import ServiceMetricsService

router = APIRouter(prefix="/api", tags=["Service Metrics"], dependencies=[Depends(require_session)])


def get_service_metrics_service(
    supabase: SupabaseService = Depends(get_supabase_service),
    calcom: CalcomService = Depends(get_calcom_service),
) -> ServiceMetricsService:
    return ServiceMetricsService(supabase, calcom)


@router.get("/service-metrics", response_model=ServiceMetricsResponse)
async def get_service_metrics(service: ServiceMetricsService = Depends(get_service_metrics_service)):
    """Consultations, links sent and matched bookings per service (top 15)"""
    return await service.get_service_metrics()
