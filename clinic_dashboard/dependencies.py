"""Request-scoped provider clients, built fresh for every request"""

from .services.airtable_service import AirtableService
from .services.calcom_service import CalcomService
from .services.n8n_service import N8nService
from .services.supabase_service import SupabaseService


def get_supabase_service() -> SupabaseService:
    return SupabaseService()


def get_calcom_service() -> CalcomService:
    return CalcomService()


def get_airtable_service() -> AirtableService:
    return AirtableService()


def get_n8n_service() -> N8nService:
    return N8nService()
