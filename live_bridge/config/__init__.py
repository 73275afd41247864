"""
Configuration module for the live bridge.

Key components:
- constants: Application-wide constants: logger name, wire formats, protocol defaults.
- logging_config: Console and rotating file logging for the application logger.
- settings: Environment-driven Settings model shared read-only by every session.

Usage examples:
```python
from live_bridge.config.logging_config import configure_logging
from live_bridge.config.settings import Settings

logger = configure_logging()
settings = Settings.from_env()
logger.info(f"Upstream endpoint: {settings.endpoint}")
```
"""
