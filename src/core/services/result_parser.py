"""Parsing and sanitization of the model's prescription JSON.

The hosted model is asked for strict JSON, but in practice it sometimes
wraps the object in prose or markdown fences, or returns nested objects
where plain strings are expected. Everything here is pure (no I/O) so the
direct analyzer, the proxy client and the tests share the same contract.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from core.domain.errors import UnreadableResponseError
from core.domain.models import (
    DEFAULT_DISCLAIMER,
    NOT_PROVIDED,
    AnalysisMetadata,
    AnalysisResult,
    BhashiniSummary,
    Medication,
)

logger = logging.getLogger(__name__)


MEDICATION_FIELDS: tuple[str, ...] = (
    "prescribed_brand",
    "active_salt",
    "jan_aushadhi_generic",
    "brand_price_est",
    "jan_aushadhi_price_est",
    "savings_est",
)

SUMMARY_LANGUAGES: tuple[str, ...] = ("en", "hi", "te", "ta", "kn", "bn", "mr")

RESPONSE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "metadata": {
            "type": "object",
            "properties": {
                "doctor": {"type": "string"},
                "date": {"type": "string"},
                "currency": {"type": "string"},
            },
            "required": ["doctor", "date", "currency"],
        },
        "medications": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {name: {"type": "string"} for name in MEDICATION_FIELDS},
                "required": list(MEDICATION_FIELDS),
            },
        },
        "bhashini_summary": {
            "type": "object",
            "properties": {code: {"type": "string"} for code in SUMMARY_LANGUAGES},
            "required": ["en"],
        },
        "disclaimer": {"type": "string"},
    },
    "required": ["metadata", "medications", "bhashini_summary", "disclaimer"],
}

_JSON_FENCE_RE = re.compile(r"```(?:json)?\s*(\{.*?\})\s*```", re.DOTALL | re.IGNORECASE)
_FIRST_OBJECT_RE = re.compile(r"\{[\s\S]*\}")


def _json_compact(value: object) -> str:
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def _scalar_to_str(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def sanitize_string(value: object) -> str:
    """Coerce an arbitrary JSON value into display-safe text.

    Never raises. Objects prefer their `text`/`value` key, arrays are joined
    with ", " and null becomes an empty string.
    """

    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (bool, int, float)):
        return _scalar_to_str(value)
    if isinstance(value, (list, tuple)):
        parts: list[str] = []
        for item in value:
            if item is None or isinstance(item, (dict, list, tuple)):
                try:
                    parts.append(_json_compact(item))
                except (TypeError, ValueError):
                    parts.append("")
            else:
                parts.append(_scalar_to_str(item))
        return ", ".join(parts)
    if isinstance(value, dict):
        if value.get("text"):
            return sanitize_string(value["text"])
        if value.get("value"):
            return sanitize_string(value["value"])
        try:
            dumped = _json_compact(value)
        except (TypeError, ValueError):
            return ""
        return "" if dumped == "{}" else dumped
    try:
        return str(value)
    except Exception:
        return ""


def extract_json_object(text: str) -> str:
    """Return the JSON object text contained in a model reply.

    Order: the whole reply, a ```json fence, then the first "{" through the
    last "}".
    """

    stripped = (text or "").strip()
    if not stripped:
        raise UnreadableResponseError("No response text from AI")

    try:
        json.loads(stripped)
        return stripped
    except json.JSONDecodeError:
        pass

    match = _JSON_FENCE_RE.search(stripped)
    if match:
        candidate = match.group(1).strip()
        try:
            json.loads(candidate)
            return candidate
        except json.JSONDecodeError:
            pass

    match = _FIRST_OBJECT_RE.search(stripped)
    if match:
        candidate = match.group(0)
        try:
            json.loads(candidate)
            return candidate
        except json.JSONDecodeError as exc:
            raise UnreadableResponseError("Failed to parse AI response as JSON") from exc

    raise UnreadableResponseError("Failed to parse AI response as JSON")


def _as_dict(value: object) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _coerce_medications(value: object) -> list[Medication]:
    if not isinstance(value, list):
        return []
    medications: list[Medication] = []
    for item in value:
        if not isinstance(item, dict):
            logger.debug("Skipping non-object medication entry: %r", item)
            continue
        medications.append(Medication(**{name: sanitize_string(item.get(name)) for name in MEDICATION_FIELDS}))
    return medications


def build_analysis_result(data: dict[str, Any]) -> AnalysisResult:
    """Normaliza un dict ya parseado al modelo `AnalysisResult`."""

    meta = _as_dict(data.get("metadata"))
    summary = _as_dict(data.get("bhashini_summary"))

    metadata = AnalysisMetadata(
        doctor=sanitize_string(meta.get("doctor") or NOT_PROVIDED),
        date=sanitize_string(meta.get("date") or NOT_PROVIDED),
        currency=sanitize_string(meta.get("currency") or "INR"),
    )

    summary_fields = {code: sanitize_string(summary.get(code)) for code in SUMMARY_LANGUAGES}
    summary_fields["en"] = sanitize_string(summary.get("en") or "Analysis complete.")

    disclaimer = sanitize_string(data.get("disclaimer")) or DEFAULT_DISCLAIMER

    return AnalysisResult(
        metadata=metadata,
        medications=_coerce_medications(data.get("medications")),
        bhashini_summary=BhashiniSummary(**summary_fields),
        disclaimer=disclaimer,
    )


def parse_analysis_text(text: str) -> AnalysisResult:
    """Parsea la respuesta cruda del modelo y la sanea."""

    json_text = extract_json_object(text)
    data = json.loads(json_text)
    if not isinstance(data, dict):
        raise UnreadableResponseError("AI response is not a JSON object")
    return build_analysis_result(data)
