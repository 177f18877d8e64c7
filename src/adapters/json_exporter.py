"""Exportación JSON del resultado.

Por qué JSON:
- Interoperabilidad (p.ej. con un registro ABDM/FHIR posterior).
- Permite re-usar el análisis (comando `speak`) sin volver a llamar al modelo.
"""

from __future__ import annotations

import json
from pathlib import Path

from core.domain.models import AnalysisResult


def export_result_json(*, result: AnalysisResult, output_path: Path) -> Path:
    """Exporta `AnalysisResult` a JSON UTF-8 con formato estable."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    payload = result.model_dump(mode="json")
    output_path.write_text(
        json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True) + "\n",
        encoding="utf-8",
    )
    return output_path


def load_result_json(path: Path) -> AnalysisResult:
    """Carga un resultado exportado previamente."""

    data = json.loads(path.read_text(encoding="utf-8"))
    return AnalysisResult.model_validate(data)
