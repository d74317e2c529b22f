"""
Pet store HTTP client - JSON requests against the store's REST API.

The client holds nothing but its base URL and opens a session per request,
so a single instance can be shared by concurrent reconciliations.
"""

import asyncio
import logging
from typing import Dict, Optional

import aiohttp

from errors import ErrorKind, PetstoreError

logger = logging.getLogger(__name__)


def error_from_status(status: int, message: str) -> PetstoreError:
    """
    Classify a non-2xx response.

    Args:
        status: HTTP status code of the response
        message: Response body text, kept as diagnostic detail

    Returns:
        A NOT_FOUND error for 404, otherwise a TRANSPORT error.
    """
    if status == 404:
        return PetstoreError(ErrorKind.NOT_FOUND, message or "not found", status=status)
    return PetstoreError(
        ErrorKind.TRANSPORT,
        message or f"request failed with status {status}",
        status=status,
    )


class PetstoreClient:
    """Base client for the pet store API."""

    def __init__(self, server_url: str):
        self.server_url = server_url.rstrip("/")

    def _get_headers(self, method: str) -> Dict[str, str]:
        """Get HTTP headers for a request with the given method."""
        if method == "GET":
            return {"Accept": "application/json"}
        if method in ("PUT", "POST"):
            return {"Content-Type": "application/json"}
        return {}

    async def do_request(
        self, path: str, method: str, body: Optional[str] = None
    ) -> str:
        """
        Send one request and return the response body text.

        Args:
            path: Path relative to the server URL, e.g. '/pet/42'
            method: HTTP method
            body: JSON encoded request body, if any

        Returns:
            The response body text (may be empty).

        Raises:
            PetstoreError: NOT_FOUND on 404, TRANSPORT on any other failure.
        """
        url = f"{self.server_url}{path}"
        logger.debug(f"{method} {url}")

        try:
            # No client-side deadline; callers bound the request themselves.
            timeout = aiohttp.ClientTimeout(total=None)
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.request(
                    method, url, headers=self._get_headers(method), data=body
                ) as response:
                    text = await response.text()
                    if not 200 <= response.status < 300:
                        raise error_from_status(response.status, text)
                    return text
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise PetstoreError(
                ErrorKind.TRANSPORT,
                f"{method} {url} failed: {str(e) or type(e).__name__}",
            ) from e
