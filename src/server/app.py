"""Proxy HTTP que guarda la API key del proveedor.

Por qué existe:
- El navegador (o cualquier cliente liviano) nunca ve la API key.
- Devuelve el texto crudo del modelo; el cliente hace el parseo y el
  fallback de extracción JSON, más tolerante que forzar JSON en el servidor.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel

from adapters.ai_analyst import ModelAnalyzer
from adapters.image_processing import strip_data_uri
from core.config import AppSettings
from core.domain.errors import RATE_LIMITED_MESSAGE, RateLimitedError

logger = logging.getLogger(__name__)

HEALTH_MESSAGE = "Aushadh-AI Proxy is running!"
PROCESS_PATH = "/api/process-prescription"
IMAGE_REQUIRED_MESSAGE = "Image data is required."


class ProcessIn(BaseModel):
    image: Optional[str] = None  # data-URI o base64 "pelado"


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def create_app(settings: AppSettings | None = None, analyzer: Any | None = None) -> FastAPI:
    """Construye la app; `analyzer` debe exponer `request_raw_analysis`."""

    settings = settings or AppSettings()
    analyzer = analyzer or ModelAnalyzer(settings)
    max_chars = int(settings.max_upload_mb * 1024 * 1024)

    app = FastAPI(title="Aushadh-AI Proxy", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        # Cuerpo ausente o no-JSON: mismo contrato que `{}`.
        if request.url.path == PROCESS_PATH:
            return _error(400, IMAGE_REQUIRED_MESSAGE)
        return await request_validation_exception_handler(request, exc)

    @app.get("/", response_class=PlainTextResponse)
    def root():
        return HEALTH_MESSAGE

    @app.post(PROCESS_PATH)
    async def process_prescription(body: Optional[ProcessIn] = None):
        image = ((body.image if body else None) or "").strip()
        if not image:
            return _error(400, IMAGE_REQUIRED_MESSAGE)
        if len(image) > max_chars:
            return _error(413, f"Image exceeds {settings.max_upload_mb:g} MB.")

        base64_data = strip_data_uri(image)
        try:
            text = await analyzer.request_raw_analysis(base64_data, "image/jpeg")
        except RateLimitedError:
            logger.warning("Provider rate limited the proxy")
            return _error(429, RATE_LIMITED_MESSAGE)
        except Exception:
            logger.exception("Processing failed on the server")
            return _error(500, "Processing failed on the server.")

        return PlainTextResponse(text)

    return app


app = create_app()
