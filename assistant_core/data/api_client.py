"""
HTTP client for the assistant backend with reliability patterns.

Every request body is encoded through the contract registry before it is
sent; responses are returned as raw JSON for the gateway to decode.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

import httpx
import structlog
from httpx import HTTPStatusError, TimeoutException

from assistant_core.contracts.registry import Payload, encode
from assistant_core.core.config import ApiConfig
from assistant_core.core.exceptions import ApiError, ContractError, DataAccessError
from assistant_core.utils.reliability import with_circuit_breaker, with_retry

logger = structlog.get_logger(__name__)

CIRCUIT_BREAKER_NAME = "assistant_api"


@dataclass(frozen=True)
class Endpoint:
    method: str
    path: str
    # Served by the chat gateway when one is configured
    via_gateway: bool = False


ENDPOINTS: Dict[str, Endpoint] = {
    "upload": Endpoint("POST", "/upload"),
    "ingest": Endpoint("POST", "/ingest"),
    "kb.search": Endpoint("POST", "/kb/search"),
    "kb.graph": Endpoint("GET", "/kb/graph"),
    "chat.threads": Endpoint("GET", "/chat/threads"),
    "chat.history": Endpoint("GET", "/chat/threads/{thread_id}/messages"),
    "chat.send": Endpoint("POST", "/chat/send", via_gateway=True),
    "projects.list": Endpoint("GET", "/projects"),
    "projects.detail": Endpoint("GET", "/projects/{project_id}"),
    "projects.kanban": Endpoint("GET", "/projects/{project_id}/kanban"),
    "projects.timeline": Endpoint("GET", "/projects/{project_id}/timeline"),
    "digest": Endpoint("POST", "/digest"),
    "watch.list": Endpoint("GET", "/watch"),
    "watch.add": Endpoint("POST", "/watch"),
    "watch.remove": Endpoint("POST", "/watch/remove"),
    "schedule.update": Endpoint("POST", "/schedule"),
    "meetings.list": Endpoint("GET", "/meetings/list"),
    "emails.list": Endpoint("GET", "/emails/list"),
    "health": Endpoint("GET", "/health"),
}


def endpoint_path(name: str, **path_params: str) -> str:
    """
    Path of the endpoint behind contract ``name`` with its placeholders filled.

    Raises:
        ContractError: No endpoint for ``name`` or a path parameter is missing
    """
    try:
        endpoint = ENDPOINTS[name]
    except KeyError:
        raise ContractError(f"No endpoint for contract '{name}'") from None
    try:
        return endpoint.path.format(**path_params)
    except KeyError as e:
        raise ContractError(
            f"Missing path parameter {e} for '{name}'", details={"endpoint": endpoint.path}
        ) from None


class AssistantApiClient:
    """
    Live backend client.

    Transport failures and non-2xx responses raise ``ApiError`` after the
    configured number of attempts; a run of failures opens the circuit
    breaker, after which calls fail fast with ``CircuitBreakerError``.
    """

    def __init__(self, config: ApiConfig, transport: Optional[httpx.BaseTransport] = None):
        self.config = config

        self.client = httpx.Client(
            timeout=httpx.Timeout(config.request_timeout),
            headers=self._get_headers(),
            follow_redirects=True,
            transport=transport,
        )

        self._request = with_circuit_breaker(
            name=CIRCUIT_BREAKER_NAME,
            failure_threshold=5,
            recovery_timeout=60.0,
            expected_exception=ApiError,
        )(
            with_retry(
                max_attempts=max(1, config.max_retries),
                retry_exceptions=(ApiError,),
            )(self._send)
        )

        logger.info(
            "Assistant API client initialized",
            base_url=config.base_url,
            gateway=bool(config.gateway_url),
            authenticated=bool(config.api_key),
        )

    def _get_headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.config.api_key:
            headers["Authorization"] = f"Bearer {self.config.api_key}"
        return headers

    def close(self) -> None:
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def url_for(self, name: str, **path_params: str) -> str:
        """Absolute URL of the endpoint behind contract ``name``."""
        path = endpoint_path(name, **path_params)
        base = self.config.base_url
        if ENDPOINTS[name].via_gateway and self.config.gateway_url:
            base = self.config.gateway_url.rstrip("/")
        return f"{base}{path}"

    def _send(
        self,
        method: str,
        url: str,
        json_data: Optional[Dict[str, Any]] = None,
        files: Optional[List[Tuple[str, Tuple[str, bytes]]]] = None,
    ) -> Any:
        """
        Perform one HTTP request.

        Returns:
            Parsed JSON, or the raw body text when it is not JSON (left for
            the contract layer to reject)

        Raises:
            ApiError: On transport errors and non-2xx responses
        """
        try:
            logger.debug("Making assistant API request", method=method, url=url, has_data=bool(json_data))

            response = self.client.request(method=method, url=url, json=json_data, files=files)
            response.raise_for_status()

        except HTTPStatusError as e:
            logger.error(
                "Assistant API HTTP error",
                status_code=e.response.status_code,
                response_text=e.response.text[:500],
                url=url,
            )
            raise ApiError(
                f"Assistant API HTTP error: {e.response.status_code}",
                status_code=e.response.status_code,
                details={"url": url},
            ) from e

        except TimeoutException as e:
            logger.error("Assistant API timeout", url=url, error=str(e))
            raise ApiError(f"Assistant API timeout: {e}", details={"url": url}) from e

        except httpx.HTTPError as e:
            logger.error("Assistant API transport error", url=url, error=str(e))
            raise ApiError(f"Assistant API unreachable: {e}", details={"url": url}) from e

        try:
            return response.json()
        except ValueError:
            return response.text

    def call(self, name: str, body: Optional[Payload] = None, **path_params: str) -> Any:
        """
        Call the endpoint for contract ``name``.

        Args:
            name: Contract name, e.g. ``"kb.search"``
            body: Request model or mapping; ``None`` for reads
            **path_params: Values for placeholders in the endpoint path

        Returns:
            The undecoded response payload
        """
        payload = encode(name, body)
        endpoint = ENDPOINTS.get(name)
        method = endpoint.method if endpoint else "GET"
        return self._request(method, self.url_for(name, **path_params), json_data=payload)

    def upload(self, paths: Iterable[Path]) -> Any:
        """Send local files as a multipart ``files`` upload."""
        files = []
        for path in paths:
            path = Path(path)
            try:
                files.append(("files", (path.name, path.read_bytes())))
            except OSError as e:
                raise DataAccessError(f"Cannot read upload file {path}: {e}") from e

        logger.info("Uploading files", count=len(files))
        return self._request("POST", self.url_for("upload"), files=files)
