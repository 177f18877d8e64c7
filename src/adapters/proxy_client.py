"""Cliente del proxy `POST /api/process-prescription`.

Por qué existe:
- Permite usar la app sin tener la API key en la máquina del usuario: el
  proxy la guarda y reenvía el texto crudo del modelo.
- El parseo (JSON + fallback `{...}`) se hace aquí, igual que en el modo directo.
"""

from __future__ import annotations

import logging

import httpx

from adapters.http_client import build_async_client
from adapters.image_processing import JPEG_MIME, to_data_uri
from core.config import AppSettings
from core.domain.errors import AnalysisFailedError, ConfigurationError, RateLimitedError
from core.domain.models import AnalysisResult
from core.services.result_parser import parse_analysis_text

logger = logging.getLogger(__name__)

PROCESS_PATH = "/api/process-prescription"


class ProxyAnalyzer:
    """Implementa `PrescriptionAnalyzer` contra el proxy HTTP."""

    def __init__(
        self,
        proxy_url: str | None = None,
        *,
        settings: AppSettings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings or AppSettings()
        base = (proxy_url or self._settings.proxy_url or "").strip()
        if not base:
            raise ConfigurationError("Missing proxy URL (set AUSHADH_PROXY_URL or pass --proxy-url).")
        self._endpoint = base.rstrip("/") + PROCESS_PATH
        self._transport = transport

    @property
    def endpoint(self) -> str:
        return self._endpoint

    async def analyze(self, image_b64: str, mime_type: str = JPEG_MIME) -> AnalysisResult:
        payload = {"image": to_data_uri(image_b64, mime_type)}
        try:
            async with build_async_client(
                self._settings,
                transport=self._transport,
                timeout_seconds=self._settings.ai_timeout_seconds,
            ) as client:
                response = await client.post(self._endpoint, json=payload)
        except httpx.HTTPError as exc:
            logger.warning("Proxy request failed: %s", exc)
            raise AnalysisFailedError(f"proxy unreachable: {type(exc).__name__}") from exc

        if response.status_code == 429:
            raise RateLimitedError(f"429 from proxy {self._endpoint}")
        if response.status_code >= 400:
            logger.warning("Proxy returned HTTP %s: %s", response.status_code, response.text[:200])
            raise AnalysisFailedError(
                f"proxy returned HTTP {response.status_code}",
                status_code=response.status_code,
            )

        return parse_analysis_text(response.text)
