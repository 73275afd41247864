"""
Credential resolution for the upstream Live API.

A credential is either an API key, embedded in the endpoint URL as the ``key``
query parameter, or a bearer token sent in the Authorization header. Resolution
is async so a provider that calls out to an external token source can be dropped
in without touching the session.
"""

import logging
from typing import Dict, Optional, Tuple
from urllib.parse import urlencode, urlsplit, urlunsplit

from pydantic import BaseModel, ConfigDict

from live_bridge.config.constants import LOGGER_NAME
from live_bridge.config.settings import ConfigurationError, Settings

logger = logging.getLogger(LOGGER_NAME)


class Credential(BaseModel):
    """An upstream credential. A bearer token takes precedence over an API key."""

    model_config = ConfigDict(frozen=True)

    api_key: Optional[str] = None
    bearer_token: Optional[str] = None

    def apply(self, url: str) -> Tuple[str, Dict[str, str]]:
        """
        Attach the credential to an endpoint URL.

        Args:
            url: The endpoint URL without credentials

        Returns:
            The URL to connect to and the handshake headers to send
        """
        if self.bearer_token:
            return url, {"Authorization": f"Bearer {self.bearer_token}"}
        if self.api_key:
            parts = urlsplit(url)
            key_param = urlencode({"key": self.api_key})
            query = f"{parts.query}&{key_param}" if parts.query else key_param
            return urlunsplit(parts._replace(query=query)), {}
        raise ConfigurationError("Credential has neither an API key nor a bearer token")

    def __repr__(self) -> str:
        kind = "bearer" if self.bearer_token else "api_key" if self.api_key else "none"
        return f"Credential(kind={kind})"

    __str__ = __repr__


class CredentialProvider:
    """Resolves the upstream credential from settings."""

    def __init__(self, settings: Settings):
        self.settings = settings

    async def resolve(self) -> Credential:
        """
        Resolve the credential for a new session.

        Raises:
            ConfigurationError: If no credential is configured
        """
        if self.settings.access_token:
            logger.debug("Using bearer token credential")
            return Credential(bearer_token=self.settings.access_token)
        if self.settings.api_key:
            logger.debug("Using API key credential")
            return Credential(api_key=self.settings.api_key)
        raise ConfigurationError(
            "No upstream credential configured: set GEMINI_API_KEY or GEMINI_ACCESS_TOKEN"
        )
