from __future__ import annotations

import pytest

from core.domain.models import Medication
from core.services.savings import compute_savings, parse_price


def _med(brand: str, generic: str) -> Medication:
    return Medication(prescribed_brand="X", brand_price_est=brand, jan_aushadhi_price_est=generic)


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("₹120", 120.0),
        ("Rs. 50", 50.0),
        ("₹1,250.50/strip", 1250.5),
        ("approx 45 per 10 tabs", 45.0),
        ("", 0.0),
        (None, 0.0),
        ("not available", 0.0),
    ],
)
def test_parse_price(text, expected):
    assert parse_price(text) == pytest.approx(expected)


def test_compute_savings_aggregates_all_medications():
    breakdown = compute_savings([_med("₹100", "₹30"), _med("₹50", "₹10")])

    assert breakdown is not None
    assert breakdown.total_brand_price == 150
    assert breakdown.total_generic_price == 40
    assert breakdown.total_savings == 110
    assert breakdown.savings_percentage == 73


def test_compute_savings_rounds_half_up():
    breakdown = compute_savings([_med("₹8", "₹7")])
    assert breakdown is not None
    assert breakdown.savings_percentage == 13


def test_compute_savings_with_sample(sample_response):
    meds = [Medication(**m) for m in sample_response["medications"]]
    breakdown = compute_savings(meds)

    assert breakdown is not None
    assert breakdown.total_brand_price == 250
    assert breakdown.total_generic_price == 70
    assert breakdown.total_savings == 180
    assert breakdown.savings_percentage == 72


def test_compute_savings_hidden_without_medications():
    assert compute_savings([]) is None


def test_compute_savings_hidden_when_brand_total_is_zero():
    assert compute_savings([_med("N/A", "₹10"), _med("", "")]) is None


def test_generic_costlier_than_brand_gives_negative_savings():
    breakdown = compute_savings([_med("₹10", "₹15")])

    assert breakdown is not None
    assert breakdown.total_savings == -5
    assert breakdown.savings_percentage == -50
    labels = {label: value for label, value, _ in breakdown.chart_slices()}
    assert labels == {"Jan Aushadhi": 15, "Savings": 0.0}
