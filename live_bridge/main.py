"""
FastAPI server relaying browser voice clients to the upstream Live API.

This module builds the FastAPI application: the client WebSocket endpoint at /ws,
plus the health and model-discovery routes that sit beside it. Settings are read
from the environment (and an optional .env file) once, at import time.
"""

from fastapi import FastAPI, HTTPException, WebSocket
from fastapi.middleware.cors import CORSMiddleware

from live_bridge.config.logging_config import configure_logging
from live_bridge.config.settings import ConfigurationError, Settings, load_env_file
from live_bridge.services.credentials import CredentialProvider
from live_bridge.services.model_catalog import ModelCatalog
from live_bridge.websocket_manager import WebSocketManager

# Load environment variables from .env file if it exists
load_env_file()

settings = Settings.from_env()

logger = configure_logging(settings.log_level)

app = FastAPI(
    title="Live Bridge",
    description="Relay between browser voice clients and a streaming Live API",
    version="1.0.0",
)

# Browser pages served from another origin call /health and /models directly
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

credential_provider = CredentialProvider(settings)
model_catalog = ModelCatalog(settings)
websocket_manager = WebSocketManager(settings, credential_provider, model_catalog)


@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    """WebSocket endpoint for browser clients.

    Client -> server: binary frames of 16 kHz mono PCM16 audio, and JSON control
    messages {"type": "text", "text": ...} or {"type": "stop_audio"}.
    Server -> client: JSON events, starting with {"type": "ready", ...} once the
    upstream session is set up. Frames sent before "ready" are dropped.
    """
    await websocket_manager.handle_websocket(websocket)


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring system status.

    Returns:
        dict: Liveness, whether a credential is configured and the number of active sessions
    """
    return {
        "status": "healthy",
        "credential_configured": settings.has_credential,
        "active_sessions": len(websocket_manager.session_registry),
    }


@app.get("/models")
async def list_models():
    """Return the current snapshot of Live-capable models.

    Raises:
        HTTPException: 503 when no credential is configured or discovery fails
    """
    try:
        credential = await credential_provider.resolve()
        snapshot = await model_catalog.get_snapshot(credential)
    except ConfigurationError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return {
        "configured_model": settings.model,
        "models": list(snapshot.models),
    }


@app.get("/")
async def root():
    """Root endpoint to display basic information about the API."""
    return {
        "name": "Live Bridge",
        "description": "Relay between browser voice clients and a streaming Live API",
        "version": "1.0.0",
        "endpoints": {
            "/ws": "WebSocket endpoint for browser clients",
            "/health": "Health check endpoint",
            "/models": "Live-capable model discovery",
        },
    }


if __name__ == "__main__":
    import uvicorn

    logger.info(f"Starting server on http://{settings.host}:{settings.port}")
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        websocket_ping_interval=20,
        websocket_max_size=16777216,  # 16MB - large enough for audio chunks
        websocket_ping_timeout=20,
        http="h11",
    )
