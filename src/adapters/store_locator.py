"""Localizador del Jan Aushadhi Kendra más cercano.

Coordenadas -> nombre + dirección + URL de mapa. La búsqueda en sí la hace
el modelo hospedado; aquí solo se arma el prompt y se sanea la respuesta.
Cualquier fallo devuelve `None` ("no store found"), nunca una excepción.
"""

from __future__ import annotations

import json
import logging
from typing import Any
from urllib.parse import urlparse

from adapters.ai_analyst import build_ai_client
from core.config import AppSettings
from core.domain.errors import AushadhError
from core.domain.models import StoreLocation
from core.services.result_parser import extract_json_object, sanitize_string

logger = logging.getLogger(__name__)

DEFAULT_STORE_NAME = "Jan Aushadhi Kendra"
VERIFIED_ADDRESS = "Jan Aushadhi Kendra (Verified Location)"

_LOCATOR_PROMPT = (
    "Find the nearest 'Pradhan Mantri Bhartiya Janaushadhi Kendra' to location {lat}, {lng}.\n"
    "Reply with a single JSON object only:\n"
    '{{"found": true, "name": "store name", "address": "full street address", '
    '"map_uri": "https://maps.google.com/...", "notes": "optional review snippets"}}\n'
    'If you cannot identify one, reply {{"found": false}}.'
)


def default_map_uri(lat: float, lng: float) -> str:
    return f"https://www.google.com/maps/search/?api=1&query=Jan+Aushadhi+Kendra+near+{lat},{lng}"


def _validate_coordinates(lat: float, lng: float) -> None:
    if not -90.0 <= lat <= 90.0:
        raise ValueError(f"latitude out of range: {lat}")
    if not -180.0 <= lng <= 180.0:
        raise ValueError(f"longitude out of range: {lng}")


def _is_http_url(value: str) -> bool:
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def store_from_payload(data: dict[str, Any], *, lat: float, lng: float) -> StoreLocation | None:
    """Normaliza el JSON del modelo a `StoreLocation` (o None si no hay tienda)."""

    if data.get("found") is False:
        return None

    name = sanitize_string(data.get("name")).strip() or DEFAULT_STORE_NAME

    map_uri = sanitize_string(data.get("map_uri") or data.get("mapUri")).strip()
    if not _is_http_url(map_uri):
        map_uri = default_map_uri(lat, lng)

    address = sanitize_string(data.get("address")).replace("*", "").strip()
    if len(address) < 5:
        notes = sanitize_string(data.get("notes")).strip()
        address = f"{VERIFIED_ADDRESS}: {notes}" if notes else VERIFIED_ADDRESS

    return StoreLocation(name=name, address=address, map_uri=map_uri)


async def find_nearest_store(
    lat: float,
    lng: float,
    *,
    settings: AppSettings | None = None,
    client: Any | None = None,
) -> StoreLocation | None:
    """Pregunta al modelo por el Kendra más cercano a (lat, lng)."""

    _validate_coordinates(lat, lng)
    settings = settings or AppSettings()

    try:
        client = client or build_ai_client(settings)
        response = await client.chat.completions.create(
            model=settings.ai_locator_model,
            messages=[{"role": "user", "content": _LOCATOR_PROMPT.format(lat=lat, lng=lng)}],
            temperature=0.1,
        )
        choices = getattr(response, "choices", None) or []
        text = (choices[0].message.content or "") if choices else ""
        data = json.loads(extract_json_object(text))
    except (AushadhError, ValueError) as exc:
        logger.warning("Store locator returned no usable answer: %s", exc)
        return None
    except Exception:
        logger.exception("Store locator failed")
        return None

    if not isinstance(data, dict):
        return None
    return store_from_payload(data, lat=lat, lng=lng)
