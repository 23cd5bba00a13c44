import logging
from typing import Any, Optional
from urllib.parse import quote

import httpx

from .. import config
from ..domain.clients.schemas import AirtableClientRecord
from ..errors import ConfigurationMissing, FetchResult

logger = logging.getLogger(__name__)

PROVIDER = "Airtable"
BASE_URL = "https://api.airtable.com/v0"
PAGE_SIZE = 100


class AirtableService:
    """Reads and writes the client table in Airtable"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_id: Optional[str] = None,
        table_name: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else config.AIRTABLE_API_KEY
        self.base_id = base_id if base_id is not None else config.AIRTABLE_BASE_ID
        self.table_name = table_name or config.AIRTABLE_TABLE_NAME
        self.transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.api_key and self.base_id)

    def _require_config(self) -> None:
        if not self.configured:
            logger.error("AIRTABLE_API_KEY / AIRTABLE_BASE_ID not configured in environment variables")
            raise ConfigurationMissing(PROVIDER)

    def _table_path(self) -> str:
        return f"/{self.base_id}/{quote(self.table_name, safe='')}"

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=BASE_URL,
            headers={"Authorization": f"Bearer {self.api_key}", "Content-Type": "application/json"},
            timeout=config.HTTP_TIMEOUT_SECONDS,
            transport=self.transport,
        )

    async def fetch_all_records(self) -> FetchResult[AirtableClientRecord]:
        """
        Fetch every client record.

        Airtable pages with an opaque ``offset`` cursor; the last page has none.
        A failed page keeps the records already fetched.
        """
        self._require_config()

        records: list[AirtableClientRecord] = []
        cursor: Optional[str] = None

        async with self._client() as client:
            while True:
                params: dict[str, Any] = {"pageSize": PAGE_SIZE}
                if cursor:
                    params["offset"] = cursor

                try:
                    response = await client.get(self._table_path(), params=params)
                except httpx.HTTPError as e:
                    return FetchResult.failure(PROVIDER, f"request error: {e}", partial=records)

                if response.status_code != 200:
                    return FetchResult.failure(
                        PROVIDER, response.text[:200], status_code=response.status_code, partial=records
                    )

                try:
                    payload = response.json()
                except ValueError:
                    return FetchResult.failure(PROVIDER, "invalid JSON", partial=records)

                for raw in payload.get("records") or []:
                    if isinstance(raw, dict):
                        records.append(AirtableClientRecord.from_airtable(raw))

                cursor = payload.get("offset")
                if not cursor:
                    break

        logger.info(f"✅ Fetched {len(records)} client records from Airtable")
        return FetchResult.success(records)

    async def create_record(self, fields: dict[str, Any]) -> bool:
        self._require_config()
        return await self._write("POST", self._table_path(), fields)

    async def update_record(self, record_id: str, fields: dict[str, Any]) -> bool:
        self._require_config()
        return await self._write("PATCH", f"{self._table_path()}/{record_id}", fields)

    async def _write(self, method: str, path: str, fields: dict[str, Any]) -> bool:
        async with self._client() as client:
            try:
                response = await client.request(method, path, json={"fields": fields})
            except httpx.HTTPError as e:
                logger.error(f"❌ Airtable {method} failed: {e}")
                return False

        if response.status_code != 200:
            logger.error(f"❌ Airtable {method} error: {response.status_code} {response.text[:200]}")
            return False
        return True
