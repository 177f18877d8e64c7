"""Text-to-speech for the multilingual summary.

The provider returns raw PCM (24 kHz, 16-bit little-endian, mono); it is
handed around base64-encoded and written to a WAV container for playback.
"""

from __future__ import annotations

import base64
import logging
import wave
from pathlib import Path
from typing import Any

from adapters.ai_analyst import build_ai_client, translate_provider_error
from core.config import AppSettings
from core.domain.errors import SpeechError
from core.domain.language import SummaryLanguage
from core.domain.models import BhashiniSummary

logger = logging.getLogger(__name__)

PCM_SAMPLE_RATE = 24_000
PCM_CHANNELS = 1
PCM_SAMPLE_WIDTH = 2


def select_summary_text(summary: BhashiniSummary, language: SummaryLanguage | str) -> str | None:
    """Text to read aloud for `language`, English as fallback; None if empty."""

    text = summary.for_language(language).strip()
    return text or None


async def generate_speech(
    text: str,
    *,
    settings: AppSettings | None = None,
    client: Any | None = None,
) -> str:
    """Synthesize `text` and return base64-encoded PCM."""

    if not text or not text.strip():
        raise SpeechError("Nothing to speak")

    settings = settings or AppSettings()
    client = client or build_ai_client(
        settings,
        api_key=settings.ai_tts_api_key,
        base_url=settings.ai_tts_base_url,
    )

    try:
        response = await client.audio.speech.create(
            model=settings.ai_tts_model,
            voice=settings.ai_tts_voice,
            input=text,
            response_format="pcm",
        )
    except Exception as exc:
        logger.warning("Cloud TTS error: %s", exc)
        translated = translate_provider_error(exc)
        if translated is exc:
            raise SpeechError(str(exc)) from exc
        raise SpeechError(str(translated)) from exc

    audio = getattr(response, "content", None)
    if not audio:
        raise SpeechError("No audio content returned")
    return base64.b64encode(audio).decode("ascii")


def pcm_to_wav(
    pcm: bytes,
    path: Path,
    *,
    sample_rate: int = PCM_SAMPLE_RATE,
    channels: int = PCM_CHANNELS,
) -> Path:
    """Write 16-bit PCM frames into a WAV file."""

    frame_size = PCM_SAMPLE_WIDTH * channels
    usable = len(pcm) - (len(pcm) % frame_size)
    path.parent.mkdir(parents=True, exist_ok=True)
    with wave.open(str(path), "wb") as wav:
        wav.setnchannels(channels)
        wav.setsampwidth(PCM_SAMPLE_WIDTH)
        wav.setframerate(sample_rate)
        wav.writeframes(pcm[:usable])
    return path


def pcm_duration_seconds(pcm: bytes, *, sample_rate: int = PCM_SAMPLE_RATE, channels: int = PCM_CHANNELS) -> float:
    return len(pcm) / float(PCM_SAMPLE_WIDTH * channels * sample_rate)
