"""Exportación de reportes.

Por qué está en adapters:
- PDF/HTML son detalles de infraestructura (WeasyPrint/Jinja2).
- El Core solo conoce `AnalysisResult`, `SavingsBreakdown` y `StoreLocation`.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from core.domain.language import SummaryLanguage
from core.domain.models import AnalysisResult, SavingsBreakdown, StoreLocation
from core.services.savings import compute_savings


_TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

_DONUT_RADIUS = 50.0
_DONUT_GAP = 4.0


def _get_env() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(_TEMPLATES_DIR)),
        autoescape=select_autoescape(["html", "xml"]),
    )


def donut_segments(savings: SavingsBreakdown) -> list[dict[str, object]]:
    """Segmentos SVG (stroke-dasharray) del gráfico de dona.

    Empieza a las 12 en punto y avanza en sentido horario.
    """

    slices = [s for s in savings.chart_slices() if s[1] > 0]
    total = sum(value for _, value, _ in slices)
    if total <= 0:
        return []

    circumference = 2 * math.pi * _DONUT_RADIUS
    gap = _DONUT_GAP if len(slices) > 1 else 0.0
    segments: list[dict[str, object]] = []
    offset = 0.0
    for label, value, color in slices:
        length = value / total * circumference
        visible = max(length - gap, 0.0)
        segments.append(
            {
                "label": label,
                "color": color,
                "dasharray": f"{visible:.2f} {circumference - visible:.2f}",
                "dashoffset": f"{-offset:.2f}",
            }
        )
        offset += length
    return segments


def render_result_html(
    *,
    result: AnalysisResult,
    language: SummaryLanguage = SummaryLanguage.ENGLISH,
    store: StoreLocation | None = None,
) -> str:
    """Renderiza un HTML autocontenido para el reporte."""

    generated_at = datetime.now(timezone.utc).isoformat(timespec="seconds")
    savings = compute_savings(result.medications)
    template = _get_env().get_template("report.html")
    return template.render(
        result=result,
        generated_at=generated_at,
        language=language,
        language_label=language.label(),
        summary_text=result.bhashini_summary.for_language(language),
        savings=savings,
        segments=donut_segments(savings) if savings else [],
        donut_radius=_DONUT_RADIUS,
        store=store,
    )


def export_result_html(
    *,
    result: AnalysisResult,
    output_path: Path,
    language: SummaryLanguage = SummaryLanguage.ENGLISH,
    store: StoreLocation | None = None,
) -> Path:
    """Exporta el resultado como HTML.

    Sirve como fallback cuando el render PDF no está soportado por el entorno.
    """

    output_path.parent.mkdir(parents=True, exist_ok=True)
    html = render_result_html(result=result, language=language, store=store)
    output_path.write_text(html, encoding="utf-8")
    return output_path


def export_result_pdf(
    *,
    result: AnalysisResult,
    output_path: Path,
    language: SummaryLanguage = SummaryLanguage.ENGLISH,
    store: StoreLocation | None = None,
) -> Path:
    """Exporta el resultado como PDF (WeasyPrint, sincrónico).

    WeasyPrint se importa aquí: necesita Pango/Cairo del sistema y el export
    HTML debe seguir funcionando donde no estén.
    """

    from weasyprint import HTML  # noqa: PLC0415

    output_path.parent.mkdir(parents=True, exist_ok=True)
    html = render_result_html(result=result, language=language, store=store)
    HTML(string=html, base_url=str(_TEMPLATES_DIR)).write_pdf(str(output_path))
    return output_path
