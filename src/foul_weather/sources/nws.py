# ABOUTME: Client for the NWS products API (api.weather.gov).
# ABOUTME: Fetches the latest Area Forecast Discussion for a WFO with httpx.

import httpx
import structlog

from foul_weather.config import Settings, get_settings
from foul_weather.models import SourceDocument

log = structlog.get_logger()


class ForecastDiscussionClient:
    """Fetches the latest text product of a given type per WFO."""

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Lazy-initialized HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.settings.nws_base_url,
                timeout=self.settings.nws_timeout,
                headers={
                    "User-Agent": self.settings.nws_user_agent,
                    "Accept": "application/json",
                },
                follow_redirects=True,
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "ForecastDiscussionClient":
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def fetch_latest(self, wfo_identifier: str) -> SourceDocument | None:
        """Fetch the latest product for a WFO.

        Returns:
            The SourceDocument, or None if the office has no product or the call failed.
        """
        path = f"/products/types/{self.settings.nws_product_type}/locations/{wfo_identifier}/latest"
        try:
            response = await self.client.get(path)
        except httpx.HTTPError as e:
            log.error("product_fetch_error", wfo=wfo_identifier, error=str(e))
            return None

        if response.status_code != 200:
            log.warning("product_not_available", wfo=wfo_identifier, status=response.status_code)
            return None

        try:
            payload = response.json()
        except ValueError as e:
            log.error("product_invalid_json", wfo=wfo_identifier, error=str(e))
            return None

        text = payload.get("productText")
        issuance_time = payload.get("issuanceTime")
        if not text or not issuance_time:
            log.warning("product_text_missing", wfo=wfo_identifier)
            return None

        log.debug("product_fetched", wfo=wfo_identifier, issuance_time=issuance_time, length=len(text))
        return SourceDocument(wfo_identifier=wfo_identifier, text=text, issuance_time=issuance_time)
