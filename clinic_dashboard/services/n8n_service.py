import logging
from typing import Optional

import httpx

from .. import config
from ..domain.automation.schemas import WorkflowExecution
from ..errors import ConfigurationMissing, FetchResult

logger = logging.getLogger(__name__)

PROVIDER = "n8n"
EXECUTION_LIMIT = 100


class N8nService:
    """Reads workflow execution history from the n8n public API"""

    def __init__(
        self,
        api_url: Optional[str] = None,
        api_key: Optional[str] = None,
        workflow_id: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_url = (api_url if api_url is not None else config.N8N_API_URL or "").rstrip("/")
        self.api_key = api_key if api_key is not None else config.N8N_API_KEY
        self.workflow_id = workflow_id if workflow_id is not None else config.N8N_WORKFLOW_ID
        self.transport = transport

    def _require_config(self) -> None:
        if not self.api_url or not self.api_key:
            logger.error("N8N_API_URL / N8N_API_KEY not configured in environment variables")
            raise ConfigurationMissing(PROVIDER)

    async def list_executions(self) -> FetchResult[WorkflowExecution]:
        """Most recent executions of the WhatsApp agent workflow, newest first"""
        self._require_config()

        params = {"limit": EXECUTION_LIMIT}
        if self.workflow_id:
            params["workflowId"] = self.workflow_id

        async with httpx.AsyncClient(timeout=config.HTTP_TIMEOUT_SECONDS, transport=self.transport) as client:
            try:
                response = await client.get(
                    f"{self.api_url}/api/v1/executions",
                    headers={"X-N8N-API-KEY": self.api_key, "Accept": "application/json"},
                    params=params,
                )
            except httpx.HTTPError as e:
                return FetchResult.failure(PROVIDER, f"request error: {e}")

        if response.status_code != 200:
            return FetchResult.failure(PROVIDER, response.text[:200], status_code=response.status_code)

        try:
            payload = response.json()
        except ValueError:
            return FetchResult.failure(PROVIDER, "invalid JSON")

        executions = [
            WorkflowExecution.from_n8n(item) for item in payload.get("data") or [] if isinstance(item, dict)
        ]
        logger.info(f"✅ Fetched {len(executions)} n8n executions")
        return FetchResult.success(executions)
