"""HTTP fetching shared by feeds, channel pages and the Bot API."""

from typing import Any, Dict, Optional

import httpx

from .errors import NetworkFailure, ParseFailure

DEFAULT_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"


class PageFetcher:
    """Fetch URLs with a bounded timeout and map httpx errors to NetworkFailure."""

    def __init__(
        self,
        timeout: float = 15.0,
        user_agent: str = DEFAULT_USER_AGENT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """
        Initialize page fetcher.

        Args:
            timeout: Default request timeout in seconds
            user_agent: Default User-Agent header
            transport: Custom httpx transport (tests pass httpx.MockTransport)
        """
        self.timeout = timeout
        self.user_agent = user_agent
        self.transport = transport

    async def get(
        self,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> httpx.Response:
        """GET `url` and return the response; non-2xx raises NetworkFailure."""
        request_headers = {"User-Agent": self.user_agent}
        if headers:
            request_headers.update(headers)

        try:
            async with httpx.AsyncClient(
                timeout=timeout or self.timeout,
                follow_redirects=True,
                headers=request_headers,
                transport=self.transport,
            ) as client:
                response = await client.get(url, params=params)
                response.raise_for_status()
                return response
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status == 404:
                message = "Not found (404)"
            elif status == 403:
                message = "Access forbidden (403)"
            elif status >= 500:
                message = f"Server error ({status})"
            else:
                message = f"HTTP {status}"
            raise NetworkFailure(message, url=url) from e
        except httpx.TimeoutException as e:
            raise NetworkFailure("Request timed out", url=url) from e
        except httpx.HTTPError as e:
            raise NetworkFailure(f"HTTP error: {e}", url=url) from e

    async def get_text(self, url: str, **kwargs: Any) -> str:
        """GET `url` and return the decoded body."""
        response = await self.get(url, **kwargs)
        return response.text

    async def get_json(self, url: str, **kwargs: Any) -> Any:
        """GET `url` and decode a JSON body."""
        response = await self.get(url, **kwargs)
        try:
            return response.json()
        except ValueError as e:
            raise ParseFailure(f"Invalid JSON: {e}", url=url) from e
