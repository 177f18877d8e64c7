"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- Permite que adaptadores (imagen/IA/proxy) lean config de forma consistente.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.domain.language import SummaryLanguage


GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta/openai/"
OPENAI_BASE_URL = "https://api.openai.com/v1"


def get_user_config_dir() -> Path:
    """Directorio de configuración por usuario (cross-platform, sin dependencias)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "aushadh-ai"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "aushadh-ai"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "aushadh-ai"
    return Path.home() / ".config" / "aushadh-ai"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def _parse_env_lines(text: str) -> dict[str, str]:
    data: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key:
            data[key] = value
    return data


def write_user_env_vars(values: dict[str, str | None], *, env_path: Path | None = None) -> Path:
    """Escribe/actualiza variables en el .env global del usuario."""

    env_path = env_path or get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing: dict[str, str] = {}
    if env_path.exists():
        existing = _parse_env_lines(env_path.read_text(encoding="utf-8"))

    existing.update({k: v for k, v in values.items() if v is not None})

    lines = ["# Aushadh-AI user config (.env)"]
    for key in sorted(existing.keys()):
        lines.append(f"{key}={existing[key]}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


class AppSettings(BaseSettings):
    """Configuración central de la aplicación.

    Por qué pydantic-settings:
    - Tipado + validación en el borde (env vars) sin ensuciar el Core con lógica.
    - Un único contrato de configuración para CLI/proxy/adapters.
    """

    model_config = SettingsConfigDict(
        env_prefix="AUSHADH_",
        extra="ignore",
        case_sensitive=False,
        # Orden: proyecto primero (dev), luego config global de usuario.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    http_timeout_seconds: float = Field(
        default=20.0,
        gt=0,
        description="Timeout por request HTTP (proxy, imagen de ejemplo).",
    )
    user_agent: str = Field(
        default="aushadh-ai/0.1 (+https://local)",
        min_length=1,
        description="User-Agent para peticiones salientes.",
    )

    ai_api_key: str | None = Field(
        default=None,
        description="API key del proveedor multimodal (nunca se expone al navegador).",
    )
    ai_base_url: str = Field(
        default=GEMINI_BASE_URL,
        min_length=8,
        description="Base URL compatible OpenAI (Gemini por defecto).",
    )
    ai_model: str = Field(
        default="gemini-2.5-flash",
        min_length=1,
        description="Modelo multimodal para leer la receta.",
    )
    ai_locator_model: str = Field(
        default="gemini-2.5-flash",
        min_length=1,
        description="Modelo para localizar el Kendra más cercano.",
    )
    ai_tts_model: str = Field(
        default="gpt-4o-mini-tts",
        min_length=1,
        description="Modelo de síntesis de voz.",
    )
    ai_tts_voice: str = Field(
        default="alloy",
        min_length=1,
        description="Voz predefinida para la síntesis.",
    )
    ai_tts_base_url: str = Field(
        default=OPENAI_BASE_URL,
        min_length=8,
        description="Base URL para TTS: el endpoint compatible de Gemini no sirve `audio/speech`.",
    )
    ai_tts_api_key: str | None = Field(
        default=None,
        description="API key del proveedor TTS; si falta se usa ai_api_key.",
    )
    ai_timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Timeout para llamadas al proveedor IA (segundos).",
    )

    max_image_dimension: int = Field(
        default=1280,
        ge=64,
        le=8192,
        description="Lado máximo (px) de la imagen enviada al modelo.",
    )
    jpeg_quality: int = Field(
        default=80,
        ge=1,
        le=95,
        description="Calidad JPEG de la imagen re-codificada (0.8 en el cliente web).",
    )

    proxy_url: str | None = Field(
        default=None,
        description="Si se define, la CLI analiza vía el proxy en lugar de llamar al modelo.",
    )
    server_host: str = Field(default="0.0.0.0", min_length=1)
    server_port: int = Field(default=3000, ge=1, le=65535)
    max_upload_mb: float = Field(
        default=10.0,
        gt=0,
        description="Tamaño máximo del cuerpo base64 aceptado por el proxy.",
    )

    sample_image_url: str = Field(
        default="https://aryaman.space/images/medical-text-extraction/prescription.jpeg",
        min_length=8,
        description="Receta de ejemplo para probar sin cámara.",
    )
    default_language: SummaryLanguage = Field(
        default=SummaryLanguage.ENGLISH,
        description="Idioma por defecto del resumen (en/hi/te/ta/kn/bn/mr).",
    )
    log_level: str = Field(
        default="WARNING",
        description="Nivel de logging (DEBUG/INFO/WARNING/ERROR).",
    )
