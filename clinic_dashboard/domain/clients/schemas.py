"""Client domain schemas - Airtable client records and the sync summary"""

from typing import Any, Optional

from pydantic import BaseModel, Field

from ...shared.validators import normalize_phone

DEFAULT_CLIENT_NAME = "Desconocido"
WHATSAPP_CLIENT_NAME = "Cliente WhatsApp"
DEFAULT_SERVICE = "Consulta General"

# Airtable column names; the first-contact column was created with a trailing tab
NAME_FIELD = "Nombre"
PHONE_FIELD = "Teléfono"
SERVICES_FIELD = "Servicio_Consultado"
LINK_SENT_FIELD = "Enlace_Cita_Enviado"
FIRST_CONTACT_FIELDS = ("Fecha primer contacto", "Fecha primer contacto\t")
LAST_UPDATE_FIELD = "Última actualización"


class AirtableClientRecord(BaseModel):
    """One row of the Airtable client table"""

    id: str
    name: str = DEFAULT_CLIENT_NAME
    phone: str = ""
    services: list[str] = Field(default_factory=list)
    firstContact: Optional[str] = None
    lastUpdate: Optional[str] = None
    linkSent: bool = False

    @classmethod
    def from_airtable(cls, record: dict[str, Any]) -> "AirtableClientRecord":
        fields = record.get("fields")
        if not isinstance(fields, dict):
            fields = {}

        services_raw = fields.get(SERVICES_FIELD)
        services_str = services_raw if isinstance(services_raw, str) else ""
        services = [s.strip() for s in services_str.split(",") if s.strip()]

        first_contact = None
        for field_name in FIRST_CONTACT_FIELDS:
            if fields.get(field_name):
                first_contact = str(fields[field_name])
                break

        phone = fields.get(PHONE_FIELD)
        last_update = fields.get(LAST_UPDATE_FIELD)

        return cls(
            id=str(record.get("id") or ""),
            name=fields.get(NAME_FIELD) or DEFAULT_CLIENT_NAME,
            phone=phone if isinstance(phone, str) else "",
            services=services,
            firstContact=first_contact,
            lastUpdate=str(last_update) if last_update else None,
            linkSent=fields.get(LINK_SENT_FIELD) is True,
        )

    @property
    def phone_key(self) -> str:
        return normalize_phone(self.phone)


class ServiceCount(BaseModel):
    service: str
    count: int


class ClientStats(BaseModel):
    total: int
    newThisWeek: int
    newToday: int
    withLinkSent: int
    linkSentPercentage: int
    topServices: list[ServiceCount]


class ClientListResponse(BaseModel):
    clients: list[AirtableClientRecord]
    stats: ClientStats
    lastUpdated: str
    degradedSources: list[str] = Field(default_factory=list)


class ServiceStat(BaseModel):
    service: str
    consultations: int
    linksSent: int


class SyncPreviewResponse(BaseModel):
    totalMessages: int
    totalConversations: int
    conversationsWithCalLink: int
    conversationsWithServices: int
    serviceStats: list[ServiceStat]
    lastUpdated: str
    degradedSources: list[str] = Field(default_factory=list)


class SyncCounts(BaseModel):
    created: int = 0
    updated: int = 0
    errors: int = 0
    total: int = 0


class SyncResponse(SyncPreviewResponse):
    sync: SyncCounts
