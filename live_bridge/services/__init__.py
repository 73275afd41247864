"""
Services module for the external collaborators of a bridge session.

Key components:
- credentials: Resolves the upstream credential (API key or bearer token) and
  attaches it to the endpoint URL or handshake headers.
- model_catalog: Discovers Live-capable models and caches them as an immutable
  snapshot with bounded staleness.

Usage examples:
```python
from live_bridge.config.settings import Settings
from live_bridge.services.credentials import CredentialProvider
from live_bridge.services.model_catalog import ModelCatalog

settings = Settings.from_env()
credential = await CredentialProvider(settings).resolve()
model = await ModelCatalog(settings).resolve_model(credential)
url, headers = credential.apply(settings.endpoint)
```
"""
