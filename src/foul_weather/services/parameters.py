# ABOUTME: Per-run parameter store backed by Secret Manager or the environment.
# ABOUTME: Supplies API keys and ad copy, fetched fresh for every pipeline run.

import asyncio

import structlog
from google.api_core import exceptions as google_exceptions
from google.cloud import secretmanager
from pydantic import SecretStr

from foul_weather.config import Settings, get_settings
from foul_weather.models import RunParameters

log = structlog.get_logger()

# Secret Manager secret id per RunParameters field.
SECRET_NAMES = {
    "gemini_api_key": "gemini-api-key",
    "preroll_ad_text": "preroll-ad-text",
    "postroll_ad_text": "postroll-ad-text",
}


class ParameterStore:
    """Resolves RunParameters from Secret Manager, falling back to Settings."""

    def __init__(
        self,
        settings: Settings | None = None,
        client: secretmanager.SecretManagerServiceClient | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self._client = client

    @property
    def client(self) -> secretmanager.SecretManagerServiceClient:
        """Lazy-initialized Secret Manager client."""
        if self._client is None:
            self._client = secretmanager.SecretManagerServiceClient()
        return self._client

    def _from_settings(self) -> RunParameters:
        return RunParameters(
            gemini_api_key=self.settings.gemini_api_key,
            preroll_ad_text=self.settings.preroll_ad_text,
            postroll_ad_text=self.settings.postroll_ad_text,
        )

    def _access_secret(self, secret_id: str) -> str | None:
        name = f"projects/{self.settings.gcp_project}/secrets/{secret_id}/versions/latest"
        try:
            response = self.client.access_secret_version(name=name)
        except google_exceptions.NotFound:
            log.debug("secret_not_found", secret=secret_id)
            return None
        return response.payload.data.decode("UTF-8")

    def _fetch_sync(self) -> RunParameters:
        params = self._from_settings()
        if self.settings.parameter_source != "secret_manager":
            return params

        if not self.settings.gcp_project:
            log.warning("secret_manager_no_project")
            return params

        values = {}
        for field, secret_id in SECRET_NAMES.items():
            value = self._access_secret(secret_id)
            if value is not None:
                values[field] = value.strip()

        if "gemini_api_key" in values:
            values["gemini_api_key"] = SecretStr(values["gemini_api_key"])
        return params.model_copy(update=values)

    async def fetch(self) -> RunParameters:
        """Fetch the current parameters without blocking the event loop."""
        return await asyncio.to_thread(self._fetch_sync)
