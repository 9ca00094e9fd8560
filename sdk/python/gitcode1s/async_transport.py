"""
Async HTTP Transport for gitcode1s.

Handles route templating, bearer authentication, coalescing of identical
in-flight requests, and recovery from authentication failures through an
interactive re-authentication step, using the httpx async client.
"""

import asyncio
import re
import time
from dataclasses import dataclass
from typing import Any, Protocol
from urllib.parse import quote

import httpx

from gitcode1s.credentials import DEFAULT_BASE_URL, CredentialStore
from gitcode1s.exceptions import (
    ApiError,
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    RateLimitedError,
    ServerError,
    TransportError,
)
from gitcode1s.logging import get_logger, log_auth_event, log_http_request, log_http_response

logger = get_logger("http")

Scalar = str | int | float | bool | None
RequestKey = tuple[str, str, tuple[tuple[str, Scalar], ...]]


@dataclass
class ApiResponse:
    """A successful provider response."""

    status: int
    data: Any
    headers: httpx.Headers


class Authenticator(Protocol):
    """Interactive re-authentication step (see `AuthenticationView`)."""

    async def open(self, notice: str = "", wait: bool = False) -> None:
        ...


def _stringify(value: Scalar) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def build_path(route: str, params: dict[str, Scalar]) -> str:
    """
    Expand a route template.

    Each param fills the matching ":name" placeholder, URL-encoded. Params
    without a placeholder are appended as query parameters unless None. The
    reserved "format" param is never sent.

    Example:
        >>> build_path("/repos/:owner/:repo/branches", {"owner": "a", "repo": "b", "page": 2})
        '/repos/a/b/branches?page=2'
    """
    path = route
    query: list[str] = []

    for name, value in params.items():
        if name == "format":
            continue
        placeholder = re.compile(rf":{re.escape(name)}(?![A-Za-z0-9_])")
        if placeholder.search(path):
            encoded = quote(_stringify(value), safe="")
            path = placeholder.sub(lambda _: encoded, path)
        elif value is not None:
            query.append(f"{quote(name, safe='')}={quote(_stringify(value), safe='')}")

    if query:
        path += ("&" if "?" in path else "?") + "&".join(query)
    return path


class AsyncHTTPTransport:
    """
    Async HTTP transport layer for the GitCode API.

    Handles:
    - ":name" route templating with query-string fallback
    - Bearer token read fresh from the credential store on every call
    - Coalescing of identical concurrent requests into one network call
    - One retry after interactive re-authentication on 401/403
    - Error response parsing into typed exceptions
    """

    AUTH_NOTICE = "Authentication required or rate limit exceeded"

    def __init__(
        self,
        credentials: CredentialStore,
        authenticator: Authenticator,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Create a transport bound to one API base URL.

        Args:
            credentials: Store the access token is read from
            authenticator: Re-authentication step run on 401/403
            base_url: Base URL for API requests
            timeout: Request timeout in seconds
            http_transport: Optional httpx transport (tests inject a MockTransport)
        """
        self.base_url = base_url.rstrip("/")
        self.credentials = credentials
        self.authenticator = authenticator
        self.timeout = timeout
        self._in_flight: dict[RequestKey, asyncio.Task[ApiResponse]] = {}

        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=http_transport,
        )

    async def close(self) -> None:
        """Release pooled connections."""
        await self._client.aclose()

    async def __aenter__(self) -> "AsyncHTTPTransport":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def request(
        self,
        route: str,
        params: dict[str, Scalar] | None = None,
        method: str = "GET",
    ) -> ApiResponse:
        """
        Make a request, re-authenticating once if the provider rejects it.

        Args:
            route: API route with ":name" placeholders (e.g., "/repos/:owner/:repo")
            params: Placeholder values and query parameters; "format" selects
                "text", "blob" or the default JSON decoding
            method: HTTP method

        Returns:
            ApiResponse with the decoded body

        Raises:
            ApiError: On a non-2xx response (after the single auth retry)
            TransportError: When the provider cannot be reached
        """
        params = params or {}
        try:
            return await self._coalesced_request(route, params, method)
        except (AuthenticationError, AuthorizationError) as e:
            log_auth_event("request_rejected", reason=f"HTTP {e.status} for {route}")
            await self.authenticator.open(self.AUTH_NOTICE, wait=True)
            return await self._coalesced_request(route, params, method)

    def _request_key(self, route: str, params: dict[str, Scalar], method: str) -> RequestKey:
        return (method.upper(), route, tuple(sorted(params.items(), key=lambda item: item[0])))

    async def _coalesced_request(
        self, route: str, params: dict[str, Scalar], method: str
    ) -> ApiResponse:
        key = self._request_key(route, params, method)
        task = self._in_flight.get(key)

        if task is None or task.done():
            task = asyncio.ensure_future(self._send(route, params, method))
            self._in_flight[key] = task

            def forget(done: asyncio.Task[ApiResponse]) -> None:
                if self._in_flight.get(key) is done:
                    del self._in_flight[key]

            task.add_done_callback(forget)
        else:
            logger.debug("Joining in-flight %s %s", method, route)

        # A cancelled waiter must not cancel the call other waiters share
        return await asyncio.shield(task)

    async def _send(self, route: str, params: dict[str, Scalar], method: str) -> ApiResponse:
        response_format = params.get("format")
        headers = {
            "Accept": "text/plain" if response_format == "text" else "application/json",
        }
        token = self.credentials.get_token()
        if token:
            headers["Authorization"] = f"Bearer {token}"

        path = build_path(route, params)
        log_http_request(method, path, headers)

        start = time.monotonic()
        try:
            response = await self._client.request(method, path, headers=headers)
        except httpx.RequestError as e:
            logger.error("Request %s %s failed: %s", method, route, e)
            raise TransportError(str(e)) from e
        log_http_response(response.status_code, path, (time.monotonic() - start) * 1000)

        data = self._decode(response, response_format)
        if not response.is_success:
            raise self._parse_error_response(response, data)

        return ApiResponse(status=response.status_code, data=data, headers=response.headers)

    def _decode(self, response: httpx.Response, response_format: Scalar) -> Any:
        if response_format == "text":
            return response.text
        if response_format == "blob":
            return response.content
        try:
            return response.json()
        except ValueError:
            return response.text

    def _parse_error_response(self, response: httpx.Response, body: Any) -> ApiError:
        """
        Map a non-2xx response to the matching ApiError subclass.

        Args:
            response: HTTP response with error status
            body: Decoded response body

        Returns:
            Appropriate ApiError subclass
        """
        message = None
        if isinstance(body, dict):
            message = body.get("message") or body.get("error_message")
        message = message or f"HTTP {response.status_code}"

        status_code = response.status_code

        if status_code == 401:
            return AuthenticationError(status_code, body, message)
        elif status_code == 403:
            return AuthorizationError(status_code, body, message)
        elif status_code == 404:
            return NotFoundError(status_code, body, message)
        elif status_code == 429:
            retry_after_str = response.headers.get("Retry-After", "60")
            try:
                retry_after = int(retry_after_str)
            except ValueError:
                retry_after = 60
            return RateLimitedError(status_code, body, message, retry_after)
        elif status_code >= 500:
            return ServerError(status_code, body, message)
        else:
            return ApiError(status_code, body, message)
