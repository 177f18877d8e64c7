from __future__ import annotations

import io
import json
from types import SimpleNamespace
from typing import Any

import pytest
from PIL import Image

from core.config import AppSettings


SAMPLE_RESPONSE: dict[str, Any] = {
    "metadata": {"doctor": "Dr. A. Sharma", "date": "12/03/2024", "currency": "INR"},
    "medications": [
        {
            "prescribed_brand": "Crocin 650",
            "active_salt": "Paracetamol 650mg",
            "jan_aushadhi_generic": "Paracetamol Tablets IP 650mg",
            "brand_price_est": "₹30",
            "jan_aushadhi_price_est": "₹6",
            "savings_est": "₹24",
        },
        {
            "prescribed_brand": "Augmentin 625",
            "active_salt": "Amoxicillin 500mg + Clavulanic Acid 125mg",
            "jan_aushadhi_generic": "Amoxycillin and Potassium Clavulanate Tablets IP",
            "brand_price_est": "₹220",
            "jan_aushadhi_price_est": "₹64",
            "savings_est": "₹156",
        },
    ],
    "bhashini_summary": {
        "en": "Take paracetamol for fever and the antibiotic twice daily.",
        "hi": "बुखार के लिए पैरासिटामोल लें।",
        "te": "",
        "ta": "",
        "kn": "",
        "bn": "",
        "mr": "",
    },
    "disclaimer": "AI-generated estimate. Consult a pharmacist.",
}


def make_image_bytes(width: int, height: int, *, mode: str = "RGB", fmt: str = "PNG") -> bytes:
    color: Any = (255, 255, 255, 0) if mode == "RGBA" else "white"
    buffer = io.BytesIO()
    Image.new(mode, (width, height), color).save(buffer, format=fmt)
    return buffer.getvalue()


class FakeCompletions:
    def __init__(self, reply: str = "", exc: Exception | None = None) -> None:
        self.reply = reply
        self.exc = exc
        self.calls: list[dict[str, Any]] = []

    async def create(self, **kwargs: Any) -> Any:
        self.calls.append(kwargs)
        if self.exc is not None:
            raise self.exc
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=self.reply))])


class FakeSpeech:
    def __init__(self, audio: bytes = b"", exc: Exception | None = None) -> None:
        self.audio = audio
        self.exc = exc
        self.calls: list[dict[str, Any]] = []

    async def create(self, **kwargs: Any) -> Any:
        self.calls.append(kwargs)
        if self.exc is not None:
            raise self.exc
        return SimpleNamespace(content=self.audio)


class FakeAIClient:
    """Stand-in for `AsyncOpenAI` exposing only what the adapters call."""

    def __init__(self, reply: str = "", *, exc: Exception | None = None, audio: bytes = b"") -> None:
        self.completions = FakeCompletions(reply, exc)
        self.speech = FakeSpeech(audio, exc)
        self.chat = SimpleNamespace(completions=self.completions)
        self.audio = SimpleNamespace(speech=self.speech)


@pytest.fixture
def settings() -> AppSettings:
    return AppSettings(_env_file=None, ai_api_key="test-key")


@pytest.fixture
def sample_response() -> dict[str, Any]:
    return json.loads(json.dumps(SAMPLE_RESPONSE))


@pytest.fixture
def sample_response_text(sample_response: dict[str, Any]) -> str:
    return json.dumps(sample_response, ensure_ascii=False)
