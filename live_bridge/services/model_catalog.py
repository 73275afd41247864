"""
Discovery of Live-capable models, cached as an immutable snapshot.

Every refresh builds a new CatalogSnapshot and swaps it in with a single
assignment; existing readers keep the snapshot they already hold. Sessions read
the snapshot at connection time, so staleness is bounded by the TTL.
"""

import logging
import time
from typing import Callable, Optional, Tuple

import httpx
from pydantic import BaseModel, ConfigDict

from live_bridge.config.constants import LIVE_GENERATION_METHOD, LOGGER_NAME
from live_bridge.config.settings import ConfigurationError, Settings
from live_bridge.services.credentials import Credential

logger = logging.getLogger(LOGGER_NAME)

DISCOVERY_TIMEOUT = 10.0  # seconds


class CatalogSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    models: Tuple[str, ...] = ()
    fetched_at: float = 0.0

    def age(self, now: Optional[float] = None) -> float:
        return (now if now is not None else time.monotonic()) - self.fetched_at


class ModelCatalog:
    """
    Short-lived cache of the models that support the Live API.

    Args:
        settings: Shared settings (discovery URL and TTL)
        client_factory: Builds the httpx client used for discovery; tests pass one
            wired to an httpx.MockTransport
    """

    def __init__(
        self,
        settings: Settings,
        client_factory: Callable[[], httpx.AsyncClient] = None,
    ):
        self.settings = settings
        self._client_factory = client_factory or (
            lambda: httpx.AsyncClient(timeout=DISCOVERY_TIMEOUT)
        )
        self._snapshot: Optional[CatalogSnapshot] = None

    @property
    def snapshot(self) -> Optional[CatalogSnapshot]:
        return self._snapshot

    def _is_fresh(self, snapshot: Optional[CatalogSnapshot]) -> bool:
        return snapshot is not None and snapshot.age() < self.settings.discovery_ttl

    async def _fetch(self, credential: Credential) -> Tuple[str, ...]:
        params = {}
        headers = {}
        if credential.bearer_token:
            headers["Authorization"] = f"Bearer {credential.bearer_token}"
        elif credential.api_key:
            params["key"] = credential.api_key

        models = []
        page_token = None
        async with self._client_factory() as client:
            while True:
                if page_token:
                    params["pageToken"] = page_token
                response = await client.get(
                    self.settings.discovery_url, params=params, headers=headers
                )
                response.raise_for_status()
                payload = response.json()
                for entry in payload.get("models", []):
                    methods = entry.get("supportedGenerationMethods") or []
                    if LIVE_GENERATION_METHOD in methods and entry.get("name"):
                        models.append(entry["name"])
                page_token = payload.get("nextPageToken")
                if not page_token:
                    break
        return tuple(models)

    async def get_snapshot(self, credential: Credential) -> CatalogSnapshot:
        """
        Return the current snapshot, refreshing it when older than the TTL.

        A failed refresh falls back to the stale snapshot when one exists.

        Raises:
            ConfigurationError: If discovery fails and there is nothing cached
        """
        snapshot = self._snapshot
        if self._is_fresh(snapshot):
            return snapshot

        try:
            models = await self._fetch(credential)
        except (httpx.HTTPError, ValueError) as e:
            if snapshot is not None:
                logger.warning(f"Model discovery failed, serving stale snapshot: {e}")
                return snapshot
            raise ConfigurationError(f"Model discovery failed: {e}") from e

        snapshot = CatalogSnapshot(models=models, fetched_at=time.monotonic())
        self._snapshot = snapshot
        logger.info(f"Discovered {len(models)} Live-capable models")
        return snapshot

    async def resolve_model(self, credential: Credential) -> str:
        """
        Return the configured model, or the first discovered Live-capable model.

        Raises:
            ConfigurationError: If no model is configured and none can be discovered
        """
        if self.settings.model:
            return self.settings.model
        snapshot = await self.get_snapshot(credential)
        if not snapshot.models:
            raise ConfigurationError("No Live-capable model available")
        return snapshot.models[0]
