import logging
from typing import Any, Optional

import httpx

from .. import config
from ..domain.conversations.schemas import RawMessage
from ..errors import ConfigurationMissing, FetchResult

logger = logging.getLogger(__name__)

PROVIDER = "Supabase"


class SupabaseService:
    """Reads the WhatsApp agent's chat log through the Supabase REST API"""

    def __init__(
        self,
        url: Optional[str] = None,
        api_key: Optional[str] = None,
        table: Optional[str] = None,
        page_size: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = (url if url is not None else config.SUPABASE_URL or "").rstrip("/")
        self.api_key = api_key if api_key is not None else config.SUPABASE_ANON_KEY
        self.table = table or config.SUPABASE_CHAT_TABLE
        self.page_size = page_size or config.SUPABASE_PAGE_SIZE
        self.transport = transport

    def _require_config(self) -> None:
        if not self.url or not self.api_key:
            logger.error("SUPABASE_URL / SUPABASE_ANON_KEY not configured in environment variables")
            raise ConfigurationMissing(PROVIDER)

    def _headers(self) -> dict[str, str]:
        return {"apikey": self.api_key, "Authorization": f"Bearer {self.api_key}"}

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=f"{self.url}/rest/v1",
            headers=self._headers(),
            timeout=config.HTTP_TIMEOUT_SECONDS,
            transport=self.transport,
        )

    async def fetch_all_messages(self) -> FetchResult[RawMessage]:
        """
        Fetch the whole chat log in ascending id order.

        Pages through with limit/offset until a short page comes back. A failed
        page stops the loop and keeps whatever was already fetched.
        """
        self._require_config()

        messages: list[RawMessage] = []
        offset = 0

        async with self._client() as client:
            while True:
                params = {
                    "select": "*",
                    "order": "id.asc",
                    "limit": self.page_size,
                    "offset": offset,
                }
                try:
                    response = await client.get(f"/{self.table}", params=params)
                except httpx.HTTPError as e:
                    return FetchResult.failure(PROVIDER, f"request error at offset {offset}: {e}", partial=messages)

                if response.status_code != 200:
                    return FetchResult.failure(
                        PROVIDER, response.text[:200], status_code=response.status_code, partial=messages
                    )

                rows = _json_rows(response)
                if rows is None:
                    return FetchResult.failure(PROVIDER, "response is not a JSON array", partial=messages)

                messages.extend(RawMessage.from_supabase(row) for row in rows if isinstance(row, dict))
                logger.debug(f"📥 Fetched {len(rows)} chat rows at offset {offset}")

                if len(rows) < self.page_size:
                    break
                offset += self.page_size

        logger.info(f"✅ Fetched {len(messages)} chat messages from Supabase")
        return FetchResult.success(messages)

    async def fetch_session_messages(self, session_id: str) -> FetchResult[RawMessage]:
        """Fetch one session's messages in ascending id order"""
        self._require_config()

        params = {"session_id": f"eq.{session_id}", "select": "*", "order": "id.asc"}
        async with self._client() as client:
            try:
                response = await client.get(f"/{self.table}", params=params)
            except httpx.HTTPError as e:
                return FetchResult.failure(PROVIDER, f"request error for session {session_id}: {e}")

        if response.status_code != 200:
            return FetchResult.failure(PROVIDER, response.text[:200], status_code=response.status_code)

        rows = _json_rows(response)
        if rows is None:
            return FetchResult.failure(PROVIDER, "response is not a JSON array")

        return FetchResult.success([RawMessage.from_supabase(row) for row in rows if isinstance(row, dict)])


def _json_rows(response: httpx.Response) -> Optional[list[Any]]:
    try:
        data = response.json()
    except ValueError:
        return None
    return data if isinstance(data, list) else None
