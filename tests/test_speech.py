from __future__ import annotations

import asyncio
import base64
import wave

import pytest

from adapters.speech import generate_speech, pcm_duration_seconds, pcm_to_wav, select_summary_text
from core.domain.errors import SpeechError
from core.domain.language import SummaryLanguage
from core.domain.models import BhashiniSummary

from conftest import FakeAIClient


def test_select_summary_text_falls_back_to_english():
    summary = BhashiniSummary(en="Take rest.", hi="आराम करें।")

    assert select_summary_text(summary, SummaryLanguage.HINDI) == "आराम करें।"
    assert select_summary_text(summary, SummaryLanguage.TAMIL) == "Take rest."
    assert select_summary_text(summary, "xx") == "Take rest."


def test_select_summary_text_none_when_blank():
    assert select_summary_text(BhashiniSummary(en="  "), SummaryLanguage.ENGLISH) is None


def test_generate_speech_returns_base64_pcm(settings):
    client = FakeAIClient(audio=b"\x01\x00\x02\x00")

    audio_b64 = asyncio.run(generate_speech("Take rest.", settings=settings, client=client))

    assert base64.b64decode(audio_b64) == b"\x01\x00\x02\x00"
    call = client.speech.calls[0]
    assert call["response_format"] == "pcm"
    assert call["model"] == settings.ai_tts_model
    assert call["voice"] == settings.ai_tts_voice
    assert call["input"] == "Take rest."


def test_generate_speech_rejects_empty_text(settings):
    with pytest.raises(SpeechError):
        asyncio.run(generate_speech("   ", settings=settings, client=FakeAIClient()))


def test_generate_speech_without_audio_fails(settings):
    with pytest.raises(SpeechError, match="No audio content"):
        asyncio.run(generate_speech("hello", settings=settings, client=FakeAIClient(audio=b"")))


def test_generate_speech_wraps_provider_errors(settings):
    client = FakeAIClient(exc=RuntimeError("voice unsupported"))
    with pytest.raises(SpeechError):
        asyncio.run(generate_speech("hello", settings=settings, client=client))


def test_pcm_to_wav(tmp_path):
    pcm = b"\x00\x01" * 24_000 + b"\x07"

    path = pcm_to_wav(pcm, tmp_path / "out" / "summary.wav")

    with wave.open(str(path), "rb") as wav:
        assert wav.getnchannels() == 1
        assert wav.getsampwidth() == 2
        assert wav.getframerate() == 24_000
        assert wav.getnframes() == 24_000


def test_pcm_duration_seconds():
    assert pcm_duration_seconds(b"\x00" * 48_000) == pytest.approx(1.0)
