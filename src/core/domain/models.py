"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Nos da validación y documentación autocontenida (Field) sin acoplar
  el Core a librerías de I/O.
- Los DTOs reflejan el esquema JSON que devuelve el modelo multimodal; no
  tienen ciclo de vida ni persistencia, viven un único request/response.

Nota:
- Estos modelos describen *qué* es la información, no *cómo* se obtiene.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

from core.domain.language import SummaryLanguage


NOT_PROVIDED = "Not provided in image"
DEFAULT_DISCLAIMER = (
    "Aushadh-AI is an assistive tool. Outputs are AI-generated estimates. "
    "For medical decisions, please consult a licensed pharmacist or physician."
)


class AppStatus(str, Enum):
    """Estado de la sesión de análisis (un único request en vuelo)."""

    IDLE = "idle"
    UPLOADING = "uploading"
    PROCESSING = "processing"
    SUCCESS = "success"
    ERROR = "error"


class Medication(BaseModel):
    """Un medicamento detectado y su equivalente genérico Jan Aushadhi."""

    model_config = ConfigDict(extra="ignore")

    prescribed_brand: str = Field(default="", description="Marca tal como aparece en la receta.")
    active_salt: str = Field(default="", description="Principio activo (sal) de la marca.")
    jan_aushadhi_generic: str = Field(default="", description="Genérico PMBJP equivalente.")
    brand_price_est: str = Field(default="", description="Precio estimado de la marca (texto libre, p.ej. '₹120').")
    jan_aushadhi_price_est: str = Field(default="", description="Precio estimado del genérico.")
    savings_est: str = Field(default="", description="Ahorro estimado (texto libre).")


class AnalysisMetadata(BaseModel):
    model_config = ConfigDict(extra="ignore")

    doctor: str = Field(default=NOT_PROVIDED, description="Médico(s) transcritos de la receta.")
    date: str = Field(default=NOT_PROVIDED, description="Fecha de la receta.")
    currency: str = Field(default="INR", description="Moneda de los precios estimados.")


class BhashiniSummary(BaseModel):
    """Resumen plano en siete idiomas."""

    model_config = ConfigDict(extra="ignore")

    en: str = "Analysis complete."
    hi: str = ""
    te: str = ""
    ta: str = ""
    kn: str = ""
    bn: str = ""
    mr: str = ""

    def for_language(self, language: SummaryLanguage | str) -> str:
        """Texto del idioma pedido; si está vacío, cae a inglés."""

        code = language.value if isinstance(language, SummaryLanguage) else str(language)
        text = getattr(self, code, "") if code in SummaryLanguage.codes() else ""
        return text or self.en


class AnalysisResult(BaseModel):
    """Agregado principal: la receta digitalizada."""

    metadata: AnalysisMetadata = Field(default_factory=AnalysisMetadata)
    medications: list[Medication] = Field(default_factory=list)
    bhashini_summary: BhashiniSummary = Field(default_factory=BhashiniSummary)
    disclaimer: str = Field(default=DEFAULT_DISCLAIMER)

    @property
    def has_medications(self) -> bool:
        return bool(self.medications)


class StoreLocation(BaseModel):
    """Jan Aushadhi Kendra más cercano devuelto por el localizador."""

    name: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    map_uri: str = Field(..., min_length=1, description="URL navegable (Google Maps).")


class SavingsBreakdown(BaseModel):
    """Comparativa agregada marca vs. Jan Aushadhi."""

    total_brand_price: float = Field(..., gt=0)
    total_generic_price: float
    total_savings: float
    savings_percentage: int

    def chart_slices(self) -> list[tuple[str, float, str]]:
        """Porciones del gráfico de dona: (etiqueta, valor, color)."""

        return [
            ("Jan Aushadhi", max(self.total_generic_price, 0.0), "#2E7D32"),
            ("Savings", max(self.total_savings, 0.0), "#81C784"),
        ]
