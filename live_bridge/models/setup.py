"""
Setup configuration sent as the first message of every upstream session.

The configuration is built once per session from the shared settings, sent exactly
once and never mutated: the models are frozen.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from live_bridge.config.settings import Settings


def qualify_model_name(model: str) -> str:
    """Prefix bare model names with "models/" as the Live API expects."""
    if "/" in model:
        return model
    return f"models/{model}"


class GenerationParameters(BaseModel):
    model_config = ConfigDict(frozen=True)

    response_modalities: List[str] = Field(default_factory=lambda: ["AUDIO"])
    temperature: float = 0.7
    max_output_tokens: int = 1024
    voice_name: Optional[str] = None


class SetupConfiguration(BaseModel):
    """The one-time handshake payload: model, generation parameters and system preamble."""

    model_config = ConfigDict(frozen=True)

    model: str
    generation: GenerationParameters = Field(default_factory=GenerationParameters)
    system_preamble: str = ""
    input_transcription: bool = True
    output_transcription: bool = True

    @classmethod
    def from_settings(cls, settings: Settings, model: str) -> "SetupConfiguration":
        """
        Build the setup configuration for one session.

        Args:
            settings: The shared application settings
            model: The resolved model identifier for this session
        """
        return cls(
            model=qualify_model_name(model),
            generation=GenerationParameters(
                temperature=settings.temperature,
                max_output_tokens=settings.max_output_tokens,
                voice_name=settings.voice_name,
            ),
            system_preamble=settings.system_preamble,
            input_transcription=settings.input_transcription,
            output_transcription=settings.output_transcription,
        )

    def to_envelope(self) -> Dict[str, Any]:
        """Render the upstream ``setup`` envelope."""
        generation_config: Dict[str, Any] = {
            "responseModalities": list(self.generation.response_modalities),
            "temperature": self.generation.temperature,
            "maxOutputTokens": self.generation.max_output_tokens,
        }
        if self.generation.voice_name:
            generation_config["speechConfig"] = {
                "voiceConfig": {
                    "prebuiltVoiceConfig": {"voiceName": self.generation.voice_name}
                }
            }

        setup: Dict[str, Any] = {
            "model": self.model,
            "generationConfig": generation_config,
        }
        if self.system_preamble:
            setup["systemInstruction"] = {"parts": [{"text": self.system_preamble}]}
        if self.input_transcription:
            setup["inputAudioTranscription"] = {}
        if self.output_transcription:
            setup["outputAudioTranscription"] = {}
        return {"setup": setup}
