"""Preparación de la imagen antes de enviarla al modelo.

Por qué en adapters:
- Pillow es un detalle de infraestructura; el Core solo recibe base64.
- Reduce el tamaño de la foto (cámaras de móvil de 12MP+) a un lado máximo
  de 1280px y JPEG calidad 0.8: suficiente para leer la letra del médico y
  mucho más liviano para el request.
"""

from __future__ import annotations

import base64
import io
from dataclasses import dataclass

from PIL import Image, ImageOps, UnidentifiedImageError

from core.domain.errors import ImageProcessingError


MAX_DIMENSION = 1280
JPEG_QUALITY = 80
JPEG_MIME = "image/jpeg"


@dataclass(frozen=True)
class PreparedImage:
    """Imagen lista para el request (base64 sin prefijo data-URI)."""

    base64_data: str
    mime_type: str
    width: int
    height: int
    original_width: int
    original_height: int

    @property
    def data_uri(self) -> str:
        return to_data_uri(self.base64_data, self.mime_type)


def compute_target_size(width: int, height: int, max_dimension: int = MAX_DIMENSION) -> tuple[int, int]:
    """Tamaño final preservando aspecto; ningún lado supera `max_dimension`."""

    if width <= 0 or height <= 0:
        raise ValueError("image dimensions must be positive")

    w = float(width)
    h = float(height)
    if w > h:
        if w > max_dimension:
            h *= max_dimension / w
            w = float(max_dimension)
    else:
        if h > max_dimension:
            w *= max_dimension / h
            h = float(max_dimension)
    return max(1, int(w)), max(1, int(h))


def normalize_rotation(value: int) -> int:
    """Normaliza la rotación del usuario a 0/90/180/270 (sentido horario)."""

    if value % 90 != 0:
        raise ValueError(f"rotation must be a multiple of 90 degrees, got {value}")
    return value % 360


def to_data_uri(base64_data: str, mime_type: str = JPEG_MIME) -> str:
    return f"data:{mime_type};base64,{base64_data}"


def strip_data_uri(value: str) -> str:
    """Quita cualquier prefijo hasta la primera coma (`data:<mime>;base64,`, `base64,`).

    El base64 nunca contiene comas; sin coma el valor se devuelve igual.
    """

    _, sep, tail = value.partition(",")
    return tail if sep and tail else value


def prepare_image(
    data: bytes,
    *,
    rotation: int = 0,
    max_dimension: int = MAX_DIMENSION,
    quality: int = JPEG_QUALITY,
) -> PreparedImage:
    """Abre, orienta, rota, reduce y re-codifica la imagen como JPEG base64."""

    if not data:
        raise ImageProcessingError("Failed to read file")

    rotation = normalize_rotation(rotation)
    try:
        with Image.open(io.BytesIO(data)) as opened:
            image = ImageOps.exif_transpose(opened)
            image.load()
    except (UnidentifiedImageError, OSError) as exc:
        raise ImageProcessingError("Failed to load image") from exc

    original_width, original_height = image.size

    if rotation:
        # PIL rota en sentido antihorario.
        image = image.rotate(-rotation, expand=True)

    if image.mode != "RGB":
        image = image.convert("RGB")

    target = compute_target_size(image.width, image.height, max_dimension)
    if target != image.size:
        image = image.resize(target, Image.LANCZOS)

    out = io.BytesIO()
    image.save(out, format="JPEG", quality=quality, optimize=True)
    encoded = base64.b64encode(out.getvalue()).decode("ascii")

    return PreparedImage(
        base64_data=encoded,
        mime_type=JPEG_MIME,
        width=image.width,
        height=image.height,
        original_width=original_width,
        original_height=original_height,
    )
