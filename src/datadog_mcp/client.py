"""Datadog HTTP API client."""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import httpx

from .config import DatadogConfig
from .errors import DatadogAPIError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


@dataclass
class BackendRequest:
    """A single Datadog API call."""
    method: str
    path: str
    params: Dict[str, Any] = field(default_factory=dict)
    json: Optional[Dict[str, Any]] = None


def _error_message(response: httpx.Response) -> str:
    """Pull the error text out of a Datadog error body."""
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase
    errors = body.get("errors") if isinstance(body, dict) else None
    if errors:
        return "; ".join(
            e if isinstance(e, str) else e.get("detail") or e.get("title") or str(e)
            for e in errors
        )
    return response.reason_phrase


class DatadogClient:
    """Authenticated client for one Datadog API domain on one site."""

    def __init__(self, config: DatadogConfig, domain: str, timeout: float = DEFAULT_TIMEOUT):
        self.domain = domain
        self.site = config.site_for(domain)
        self.base_url = f"https://api.{self.site}"
        self._http = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            headers={
                "DD-API-KEY": config.api_key,
                "DD-APPLICATION-KEY": config.app_key,
                "Accept": "application/json",
                "Content-Type": "application/json",
            },
        )

    async def send(self, request: BackendRequest) -> Any:
        """Send one request and return the decoded JSON body.

        Raises:
            DatadogAPIError: On any HTTP status >= 400
            httpx.HTTPError: On transport failures
        """
        logger.info(f"Datadog request: {request.method} {self.base_url}{request.path}")
        response = await self._http.request(
            request.method,
            request.path,
            params=request.params or None,
            json=request.json,
        )
        if response.status_code >= 400:
            try:
                body = response.json()
            except ValueError:
                body = response.text
            raise DatadogAPIError(response.status_code, _error_message(response), body)
        return response.json() if response.text else {}

    async def aclose(self):
        await self._http.aclose()
