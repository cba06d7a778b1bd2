"""
Async client for the Figma REST API image rendering endpoint.
"""

import asyncio
import logging
import time
from typing import Any, Dict, Optional

import aiohttp

from figma_fetch.exceptions import LocatorError
from figma_fetch.models.config import DEFAULT_API_BASE_URL
from figma_fetch.models.node import NodeReference, RemoteImageResult, RenderRequest

log = logging.getLogger(__name__)


class FigmaAPIClient:
    """
    Async client for the Figma REST API (v1).

    The access token is passed in explicitly; the client never reads the
    environment. A single request is made per lookup, with no retries.
    """

    def __init__(
        self,
        access_token: str,
        base_url: str = DEFAULT_API_BASE_URL,
        timeout: int = 60,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        """
        Initializes the API client.

        Args:
            access_token: Figma personal access token.
            base_url: Root of the REST API, ending with a slash.
            timeout: Total request timeout in seconds.
            session: An existing session to use instead of creating one.
        """
        self.access_token = access_token
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self.timeout = timeout

        self._session = session
        self._owns_session = session is None

    async def __aenter__(self) -> "FigmaAPIClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _initialize_session(self) -> aiohttp.ClientSession:
        """Ensures an active aiohttp session is available."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers={"Accept": "application/json"},
                timeout=aiohttp.ClientTimeout(total=self.timeout, connect=15),
            )
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """Gracefully closes the aiohttp session if this client created it."""
        if self._owns_session and self._session and not self._session.closed:
            await self._session.close()

    @staticmethod
    async def _error_detail(response: aiohttp.ClientResponse) -> str:
        """Extracts the API's error text from a failed response, if any."""
        try:
            body = await response.json(content_type=None)
        except (aiohttp.ClientError, ValueError):
            return response.reason or ""
        if isinstance(body, dict):
            return str(body.get("err") or body.get("message") or response.reason or "")
        return response.reason or ""

    async def api_call(self, endpoint: str, **params: Any) -> Dict[str, Any]:
        """
        Makes an authenticated GET request and returns the decoded JSON body.

        Raises:
            LocatorError: On transport errors or non-2xx responses.
        """
        session = await self._initialize_session()
        url = self.base_url + endpoint
        start_time = time.monotonic()

        try:
            async with session.get(
                url, params=params, headers={"X-Figma-Token": self.access_token}
            ) as r:
                duration_ms = (time.monotonic() - start_time) * 1000
                log.debug(f"GET {endpoint} -> {r.status} ({duration_ms:.0f} ms)")

                if r.status == 403:
                    raise LocatorError(
                        "The Figma API rejected the access token "
                        f"({await self._error_detail(r)})."
                    )
                if r.status == 404:
                    raise LocatorError(
                        f"Figma file not found ({await self._error_detail(r)})."
                    )
                if r.status >= 400:
                    raise LocatorError(
                        f"Figma API request failed with status {r.status}: "
                        f"{await self._error_detail(r)}"
                    )

                return await r.json(content_type=None)
        except LocatorError:
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            log.debug(f"API call to {endpoint} failed: {e!r}")
            raise LocatorError(
                f"Request to the Figma API failed: {str(e) or type(e).__name__}"
            ) from e

    async def render_node(self, node_ref: NodeReference) -> RemoteImageResult:
        """Requests a PNG render at scale 1 for a single node."""
        request = RenderRequest.for_node(node_ref)
        payload = await self.api_call(
            f"images/{request.file_id}", **request.to_query_params()
        )
        if not isinstance(payload, dict):
            raise LocatorError("Unexpected response body from the Figma images API.")
        return RemoteImageResult.from_response(payload, node_ref)

    async def fetch_image_url(self, node_ref: NodeReference) -> str:
        """
        Resolves a node reference to a downloadable image URL.

        Raises:
            LocatorError: If rendering failed or no image exists for the node.
        """
        result = await self.render_node(node_ref)
        if not result.ok:
            raise LocatorError(result.api_error)
        log.debug(f"Resolved node {node_ref.node_id} to {result.image_url}")
        return result.image_url

    async def fetch_current_user(self) -> Dict[str, Any]:
        """Returns the account that owns the access token."""
        return await self.api_call("me")
