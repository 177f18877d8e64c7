from __future__ import annotations

import json

import pytest

from core.domain.errors import UnreadableResponseError
from core.domain.models import DEFAULT_DISCLAIMER, NOT_PROVIDED
from core.services.result_parser import (
    RESPONSE_SCHEMA,
    extract_json_object,
    parse_analysis_text,
    sanitize_string,
)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, ""),
        ("Crocin", "Crocin"),
        (42, "42"),
        (2.0, "2"),
        (12.5, "12.5"),
        (True, "true"),
        (["a", 1, None], "a, 1, null"),
        ([{"x": 1}, "b"], '{"x":1}, b'),
        ({"text": "Paracetamol"}, "Paracetamol"),
        ({"value": 30}, "30"),
        ({"text": {"value": "nested"}}, "nested"),
        ({}, ""),
        ({"amount": 30, "unit": "₹"}, '{"amount":30,"unit":"₹"}'),
    ],
)
def test_sanitize_string(value, expected):
    assert sanitize_string(value) == expected


def test_sanitize_string_handles_unserializable_objects():
    assert sanitize_string({"obj": object()}) == ""
    assert isinstance(sanitize_string(object()), str)


def test_extract_json_object_accepts_clean_json():
    assert json.loads(extract_json_object('{"a": 1}')) == {"a": 1}


def test_extract_json_object_recovers_prose_wrapped_json():
    text = 'Sure! Here is the analysis:\n{"metadata": {"doctor": "Dr. X"}}\nLet me know if you need more.'
    assert json.loads(extract_json_object(text)) == {"metadata": {"doctor": "Dr. X"}}


def test_extract_json_object_reads_markdown_fence():
    text = "```json\n{\"disclaimer\": \"d\"}\n```"
    assert json.loads(extract_json_object(text)) == {"disclaimer": "d"}


@pytest.mark.parametrize("text", ["I could not read this prescription.", "{not: json at all}", "   "])
def test_extract_json_object_fails_cleanly(text):
    with pytest.raises(UnreadableResponseError):
        extract_json_object(text)


def test_parse_conformant_response(sample_response_text):
    result = parse_analysis_text(sample_response_text)

    assert result.metadata.doctor == "Dr. A. Sharma"
    assert result.metadata.date == "12/03/2024"
    assert result.metadata.currency == "INR"
    assert len(result.medications) == 2
    first = result.medications[0]
    assert first.prescribed_brand == "Crocin 650"
    assert first.active_salt == "Paracetamol 650mg"
    assert first.jan_aushadhi_generic == "Paracetamol Tablets IP 650mg"
    assert first.brand_price_est == "₹30"
    assert first.jan_aushadhi_price_est == "₹6"
    assert first.savings_est == "₹24"
    assert result.bhashini_summary.hi.startswith("बुखार")
    assert result.disclaimer == "AI-generated estimate. Consult a pharmacist."


def test_parse_coerces_non_string_fields():
    payload = {
        "metadata": {"doctor": ["Dr. A", "Dr. B"], "date": None, "currency": "INR"},
        "medications": [
            {
                "prescribed_brand": {"text": "Dolo"},
                "active_salt": None,
                "jan_aushadhi_generic": ["Paracetamol", "650mg"],
                "brand_price_est": 30,
                "jan_aushadhi_price_est": {"value": "₹6"},
                "savings_est": {},
            },
            "garbage entry",
        ],
        "bhashini_summary": {"en": {"text": "Summary"}, "hi": 5},
        "disclaimer": None,
    }
    result = parse_analysis_text(json.dumps(payload))

    assert result.metadata.doctor == "Dr. A, Dr. B"
    assert result.metadata.date == NOT_PROVIDED
    assert len(result.medications) == 1
    med = result.medications[0]
    assert med.prescribed_brand == "Dolo"
    assert med.active_salt == ""
    assert med.jan_aushadhi_generic == "Paracetamol, 650mg"
    assert med.brand_price_est == "30"
    assert med.jan_aushadhi_price_est == "₹6"
    assert med.savings_est == ""
    assert result.bhashini_summary.en == "Summary"
    assert result.bhashini_summary.hi == "5"
    assert result.disclaimer == DEFAULT_DISCLAIMER


def test_parse_fills_defaults_for_missing_sections():
    result = parse_analysis_text('{"medications": "none"}')

    assert result.medications == []
    assert result.metadata.doctor == NOT_PROVIDED
    assert result.metadata.currency == "INR"
    assert result.bhashini_summary.en == "Analysis complete."
    assert result.bhashini_summary.ta == ""


def test_parse_rejects_non_object_json():
    with pytest.raises(UnreadableResponseError):
        parse_analysis_text("[1, 2, 3]")


def test_parse_rejects_empty_text():
    with pytest.raises(UnreadableResponseError, match="No response text"):
        parse_analysis_text("")


def test_response_schema_requires_all_sections():
    assert RESPONSE_SCHEMA["required"] == ["metadata", "medications", "bhashini_summary", "disclaimer"]
    med_schema = RESPONSE_SCHEMA["properties"]["medications"]["items"]
    assert len(med_schema["required"]) == 6
    assert set(RESPONSE_SCHEMA["properties"]["bhashini_summary"]["properties"]) == {
        "en", "hi", "te", "ta", "kn", "bn", "mr",
    }
