"""
Constants and configuration values used throughout the application.

This module keeps the wire-level constants of both legs in one place: the audio
formats the browser and the upstream service exchange, endpoint defaults and
protocol limits.
"""

# Logger name used throughout the application
LOGGER_NAME = "live_bridge"

# Upstream Live API defaults
DEFAULT_LIVE_ENDPOINT = (
    "wss://generativelanguage.googleapis.com/ws/"
    "google.ai.generativelanguage.v1beta.GenerativeService.BidiGenerateContent"
)
DEFAULT_DISCOVERY_URL = "https://generativelanguage.googleapis.com/v1beta/models"
LIVE_GENERATION_METHOD = "bidiGenerateContent"

# Audio format constants
INPUT_AUDIO_MIME_TYPE = "audio/pcm;rate=16000"
DEFAULT_OUTPUT_AUDIO_MIME_TYPE = "audio/pcm;rate=24000"
DEFAULT_OUTPUT_SAMPLE_RATE = 24000

# Longest prefix of an unparseable upstream payload echoed to the client
DEBUG_PAYLOAD_LIMIT = 500
