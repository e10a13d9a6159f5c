"""Generic Datadog tool adapter.

Every tool follows the same shape: check credentials, check required
parameters, build one request, send it, normalize the response and translate
403/429/404 into errors an agent can act on.
"""

import logging
from typing import Any, Callable, Optional, Sequence, Tuple

import httpx
from pydantic import BaseModel

from ..client import BackendRequest, DatadogClient
from ..config import DatadogConfig
from ..errors import (
    AuthorizationError,
    CredentialsError,
    DatadogAPIError,
    ErrorKind,
    NotFoundError,
    ParameterError,
    RateLimitError,
    classify,
)

logger = logging.getLogger(__name__)

RequestBuilder = Callable[[Any], BackendRequest]
Normalizer = Callable[[Any, Any], Any]
NotFoundFormatter = Callable[[Any], str]


def truncate(result: Any, key: str, limit: Optional[int]) -> Any:
    """Keep the first `limit` items of result[key] when the API returned more."""
    if not limit or not isinstance(result, dict):
        return result
    items = result.get(key)
    if isinstance(items, list) and len(items) > limit:
        return {**result, key: items[:limit]}
    return result


def compact(**fields) -> dict:
    """Drop unset fields so absent parameters are omitted from a request."""
    return {k: v for k, v in fields.items() if v is not None}


def dump(model: Optional[BaseModel]) -> Optional[dict]:
    """Serialize a parameter model with its wire names, omitting unset fields."""
    if model is None:
        return None
    return model.model_dump(by_alias=True, exclude_none=True)


class ToolAdapter:
    """One Datadog capability bound to its own client handle.

    Args:
        config: Resolved credentials and sites
        name: External tool name (e.g. "get-trace")
        domain: API domain; selects the site and labels errors (e.g. "spans")
        build_request: Maps validated params onto a BackendRequest
        normalize: Optional (params, response) -> result transform
        scope: Datadog permission scope needed by the endpoint
        rate_limit: Documented quota, e.g. "300 requests per hour"
        not_found: Optional params -> message used for 404 responses
        required: (attribute, caller-facing name) pairs that must be non-empty
    """

    def __init__(
        self,
        config: DatadogConfig,
        name: str,
        domain: str,
        build_request: RequestBuilder,
        normalize: Optional[Normalizer] = None,
        scope: str = "",
        rate_limit: Optional[str] = None,
        not_found: Optional[NotFoundFormatter] = None,
        required: Sequence[Tuple[str, str]] = (),
    ):
        self.config = config
        self.name = name
        self.domain = domain
        self.build_request = build_request
        self.normalize = normalize
        self.scope = scope
        self.rate_limit = rate_limit
        self.not_found = not_found
        self.required = tuple(required)
        self._client: Optional[DatadogClient] = None

    def __repr__(self):
        return f"ToolAdapter({self.name!r}, domain={self.domain!r})"

    @property
    def initialized(self) -> bool:
        return self._client is not None

    def initialize(self):
        """Create the client handle. Calling again keeps the existing handle."""
        if self._client is None:
            self._client = DatadogClient(self.config, self.domain)

    async def aclose(self):
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def validate(self, params: Any):
        if not self.config.has_credentials:
            raise CredentialsError("API Key and App Key are required")
        for attr, label in self.required:
            value = getattr(params, attr, None)
            if value is None or (isinstance(value, str) and not value.strip()):
                raise ParameterError(label)

    async def execute(self, params: Any) -> Any:
        """Run the tool once against Datadog.

        Raises:
            CredentialsError: API or application key missing
            ParameterError: A required parameter is missing or empty
            RuntimeError: initialize() has not been called
            AuthorizationError, RateLimitError, NotFoundError: Translated API errors
            DatadogAPIError, httpx.HTTPError: Anything else, unchanged
        """
        self.validate(params)
        if self._client is None:
            raise RuntimeError(f"{self.name} used before initialize()")

        request = self.build_request(params)
        try:
            response = await self._client.send(request)
        except DatadogAPIError as e:
            self._translate(e, params)
            raise
        except httpx.HTTPError as e:
            logger.error(f"Error executing {self.name}: {type(e).__name__}: {e}")
            raise

        if self.normalize is not None:
            return self.normalize(params, response)
        return response

    def _translate(self, error: DatadogAPIError, params: Any):
        kind = classify(error.status, self.rate_limit is not None, self.not_found is not None)
        label = f"{self.domain.capitalize()} API"

        if kind is ErrorKind.AUTHORIZATION:
            logger.error(
                f"Authorization failed (403 Forbidden) for {self.name}: {error}. "
                f"Check that your API key and Application key are valid. Required scope: {self.scope}"
            )
            raise AuthorizationError(
                "Datadog API authorization failed. Please verify your API and Application keys "
                f"have the '{self.scope}' scope."
            ) from error
        if kind is ErrorKind.RATE_LIMIT:
            logger.error(f"Rate limit exceeded (429): {label} is limited to {self.rate_limit}.")
            raise RateLimitError(f"Rate limit exceeded. {label} allows {self.rate_limit}.") from error
        if kind is ErrorKind.NOT_FOUND:
            logger.error(f"Not found (404) for {self.name}: {error}")
            raise NotFoundError(self.not_found(params)) from error
        if kind is ErrorKind.UNCLASSIFIED:
            logger.error(f"Error executing {self.name}: {error}")
