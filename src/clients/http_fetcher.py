from __future__ import annotations

import httpx

from core.errors import ExternalServiceError, ValidationError

USER_AGENT = "amp-runtime-parameters"


class HttpFetcher:
    """GET a URL and hand back the response without raising on status.

    Callers decide what a non-success status means; only transport
    failures become ExternalServiceError.
    """

    def __init__(self, *, timeout: float = 20.0, verify: bool = True) -> None:
        self._timeout = float(timeout)
        self._verify = bool(verify)

    async def fetch(self, url: str) -> httpx.Response:
        target = (url or "").strip()
        if not target:
            raise ValidationError("URL is empty")

        try:
            async with self._create_client() as client:
                return await client.get(target)
        except httpx.HTTPError as e:
            raise ExternalServiceError(f"Failed to fetch {target}: {e}") from e

    def _create_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            headers={"User-Agent": USER_AGENT},
            timeout=self._timeout,
            verify=self._verify,
            follow_redirects=True,
        )
