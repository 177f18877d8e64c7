"""Errores del dominio.

Por qué una jerarquía propia:
- Los adaptadores (SDK de IA, httpx, Pillow) lanzan excepciones heterogéneas;
  aquí se normalizan para que la CLI y el proxy decidan el mensaje/estado HTTP.
- Los mensajes al usuario son deliberadamente gruesos (dos variantes).
"""

from __future__ import annotations


RATE_LIMITED_MESSAGE = "High traffic. Please wait a moment."
RETAKE_PHOTO_MESSAGE = "We couldn't clearly read the medicines. Please try a clearer photo."
SAMPLE_FAILED_MESSAGE = "Failed to load sample image."


class AushadhError(Exception):
    """Base de todos los errores de la aplicación."""


class ConfigurationError(AushadhError):
    """Falta configuración obligatoria (p.ej. API key)."""


class ImageProcessingError(AushadhError):
    """La imagen no se pudo leer o re-codificar."""


class AnalysisFailedError(AushadhError):
    """Fallo de red/HTTP/proveedor al analizar la receta."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RateLimitedError(AnalysisFailedError):
    """El proveedor (o el proxy) respondió 429."""

    def __init__(self, message: str = "429 rate limited") -> None:
        super().__init__(message, status_code=429)


class UnreadableResponseError(AushadhError):
    """La respuesta del modelo no contiene un objeto JSON utilizable."""


class SpeechError(AushadhError):
    """La síntesis de voz no devolvió audio."""


def user_message_for(exc: BaseException) -> str:
    """Traduce una excepción al mensaje visible para el usuario."""

    if isinstance(exc, RateLimitedError):
        return RATE_LIMITED_MESSAGE
    if "429" in str(exc):
        return RATE_LIMITED_MESSAGE
    return RETAKE_PHOTO_MESSAGE
