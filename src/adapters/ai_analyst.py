"""Adaptador para el análisis de recetas (modelo multimodal vía OpenAI SDK).

Responsabilidad:
- Enviar la imagen (data-URI JPEG) + prompt fijo + esquema JSON al proveedor.
- Devolver el texto crudo (para el proxy) o el `AnalysisResult` saneado.
- Normalizar los errores del SDK a la jerarquía de `core.domain.errors`.

Sin reintentos automáticos: cada acción del usuario es un único request.
"""

from __future__ import annotations

import logging
from typing import Any

from openai import (
    APIConnectionError,
    APIStatusError,
    APITimeoutError,
    AsyncOpenAI,
    RateLimitError,
)

from adapters.image_processing import JPEG_MIME, to_data_uri
from core.config import AppSettings
from core.domain.errors import (
    AnalysisFailedError,
    ConfigurationError,
    RateLimitedError,
    UnreadableResponseError,
)
from core.domain.models import AnalysisResult
from core.services.result_parser import RESPONSE_SCHEMA, parse_analysis_text

logger = logging.getLogger(__name__)


SYSTEM_PROMPT = (
    "ROLE: Expert Indian medical pharmacist and digital health architect for the Aushadh-AI mission "
    "supporting PMBJP (Pradhan Mantri Bhartiya Janaushadhi Pariyojana).\n"
    "TASK: Analyse the prescription image. Digitise it and map every medicine to its Jan Aushadhi equivalent.\n\n"
    "INSTRUCTIONS:\n"
    "1. Handwriting: transcribe ALL doctor names visible, the date, and every medication with its dosage.\n"
    "2. Generic mapping: identify the active chemical salt of every brand.\n"
    "3. Jan Aushadhi match: map the salt to the standard Jan Aushadhi generic.\n"
    "4. Financial insight: compare branded vs Jan Aushadhi prices (assume ~80% saving when data is missing). "
    "Use the ₹ (INR) symbol, UTF-8 encoded.\n"
    "5. Summary: a short plain-language summary of the prescription in English, Hindi, Telugu, Tamil, "
    "Kannada, Bengali and Marathi (keys en, hi, te, ta, kn, bn, mr).\n"
    "6. Keep the structure compatible with ABDM (FHIR R4) medication statements.\n\n"
    "CONSTRAINT: Output a single valid JSON object only. No conversation, no markdown fences. "
    "Mark illegible text as 'Not provided in image'.\n\n"
    "JSON SHAPE:\n"
    "{\n"
    '  "metadata": {"doctor": "string", "date": "string", "currency": "string"},\n'
    '  "medications": [{"prescribed_brand": "string", "active_salt": "string", '
    '"jan_aushadhi_generic": "string", "brand_price_est": "string", '
    '"jan_aushadhi_price_est": "string", "savings_est": "string"}],\n'
    '  "bhashini_summary": {"en": "string", "hi": "string", "te": "string", "ta": "string", '
    '"kn": "string", "bn": "string", "mr": "string"},\n'
    '  "disclaimer": "string"\n'
    "}"
)

USER_INSTRUCTION = "Analyse this prescription and return the JSON object."


def build_ai_client(
    settings: AppSettings,
    *,
    api_key: str | None = None,
    base_url: str | None = None,
) -> AsyncOpenAI:
    """Cliente del proveedor, sin reintentos del SDK.

    Lanza `ConfigurationError` si no hay API key: no existe un fallback
    offline para leer una receta.
    """

    key = (api_key or settings.ai_api_key or "").strip()
    if not key:
        raise ConfigurationError("Missing AI API key (set AUSHADH_AI_API_KEY).")
    return AsyncOpenAI(
        api_key=key,
        base_url=base_url or settings.ai_base_url,
        timeout=settings.ai_timeout_seconds,
        max_retries=0,
    )


def translate_provider_error(exc: Exception) -> Exception:
    """Mapea excepciones del SDK a errores del dominio."""

    if isinstance(exc, RateLimitError):
        return RateLimitedError(str(exc))
    if isinstance(exc, APIStatusError):
        status = getattr(exc, "status_code", None)
        if status == 429:
            return RateLimitedError(str(exc))
        return AnalysisFailedError(f"provider returned HTTP {status}", status_code=status)
    if isinstance(exc, (APITimeoutError, APIConnectionError)):
        return AnalysisFailedError(f"provider unreachable: {type(exc).__name__}")
    return exc


def build_messages(image_b64: str, mime_type: str = JPEG_MIME) -> list[dict[str, Any]]:
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {
            "role": "user",
            "content": [
                {"type": "image_url", "image_url": {"url": to_data_uri(image_b64, mime_type)}},
                {"type": "text", "text": USER_INSTRUCTION},
            ],
        },
    ]


class ModelAnalyzer:
    """Implementa `PrescriptionAnalyzer` llamando directamente al modelo."""

    def __init__(self, settings: AppSettings | None = None, *, client: Any | None = None) -> None:
        self._settings = settings or AppSettings()
        self._client = client

    def _get_client(self) -> Any:
        if self._client is None:
            self._client = build_ai_client(self._settings)
        return self._client

    async def request_raw_analysis(self, image_b64: str, mime_type: str = JPEG_MIME) -> str:
        """Devuelve el texto crudo del modelo (el proxy lo reenvía tal cual)."""

        client = self._get_client()
        try:
            response = await client.chat.completions.create(
                model=self._settings.ai_model,
                messages=build_messages(image_b64, mime_type),
                response_format={
                    "type": "json_schema",
                    "json_schema": {"name": "prescription_analysis", "schema": RESPONSE_SCHEMA},
                },
                temperature=0.2,
            )
        except Exception as exc:
            translated = translate_provider_error(exc)
            if translated is exc:
                raise
            logger.warning("Prescription analysis request failed: %s", exc)
            raise translated from exc

        choices = getattr(response, "choices", None) or []
        content = (choices[0].message.content or "") if choices else ""
        if not content.strip():
            raise UnreadableResponseError("No response text from AI")
        logger.debug("Model reply (first 300 chars): %s", content[:300])
        return content

    async def analyze(self, image_b64: str, mime_type: str = JPEG_MIME) -> AnalysisResult:
        text = await self.request_raw_analysis(image_b64, mime_type)
        result = parse_analysis_text(text)
        logger.info("Analysis parsed: %d medication(s)", len(result.medications))
        return result
