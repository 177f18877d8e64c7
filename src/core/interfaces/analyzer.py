"""Contrato del analizador de recetas.

Por qué Protocol:
- Define un contrato estructural (duck typing) sin herencia rígida.
- Permite intercambiar la llamada directa al modelo y el proxy HTTP, y
  sustituirlos por fakes en tests.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from core.domain.models import AnalysisResult


@runtime_checkable
class PrescriptionAnalyzer(Protocol):
    """Contrato mínimo para analizar una receta.

    Reglas de diseño:
    - `analyze` es asíncrono porque hace I/O (HTTP).
    - Recibe la imagen ya re-codificada (base64 sin prefijo data-URI).
    """

    async def analyze(self, image_b64: str, mime_type: str = "image/jpeg") -> AnalysisResult:
        """Analiza la imagen y devuelve el resultado normalizado."""

        ...
