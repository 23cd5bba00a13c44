"""Service metrics schemas"""

from pydantic import BaseModel, Field


class ServiceMetric(BaseModel):
    service: str
    consultations: int = 0
    linksSent: int = 0
    bookingsConfirmed: int = 0
    conversionRate: int = 0
    clients: list[str] = Field(default_factory=list)


class ServiceTotals(BaseModel):
    totalConsultations: int
    totalLinksSent: int
    totalBookings: int
    uniqueServices: int
    totalConversations: int
    conversationsWithCalLink: int
    totalCalcomBookings: int


class CalcomStats(BaseModel):
    totalBookings: int
    matchedBookings: int
    overallConversionRate: int


class ServiceMetricsResponse(BaseModel):
    services: list[ServiceMetric]
    totals: ServiceTotals
    calcomStats: CalcomStats
    source: str = "supabase"
    lastUpdated: str
    degradedSources: list[str] = Field(default_factory=list)
