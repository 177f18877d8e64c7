from __future__ import annotations

import asyncio
import json

import pytest

from adapters.store_locator import (
    VERIFIED_ADDRESS,
    default_map_uri,
    find_nearest_store,
    store_from_payload,
)

from conftest import FakeAIClient

LAT, LNG = 17.385, 78.4867


def test_default_map_uri():
    assert default_map_uri(LAT, LNG) == (
        "https://www.google.com/maps/search/?api=1&query=Jan+Aushadhi+Kendra+near+17.385,78.4867"
    )


def test_payload_with_full_details():
    store = store_from_payload(
        {
            "found": True,
            "name": "PMBJK Ameerpet",
            "address": "**Shop 4**, Ameerpet Main Road, Hyderabad",
            "map_uri": "https://maps.google.com/?cid=123",
        },
        lat=LAT,
        lng=LNG,
    )

    assert store is not None
    assert store.name == "PMBJK Ameerpet"
    assert store.address == "Shop 4, Ameerpet Main Road, Hyderabad"
    assert store.map_uri == "https://maps.google.com/?cid=123"


def test_short_address_uses_verified_label_and_notes():
    store = store_from_payload(
        {"name": "", "address": "N/A", "notes": "Open till 9pm"}, lat=LAT, lng=LNG
    )

    assert store is not None
    assert store.name == "Jan Aushadhi Kendra"
    assert store.address == f"{VERIFIED_ADDRESS}: Open till 9pm"
    assert store.map_uri == default_map_uri(LAT, LNG)


def test_invalid_map_uri_falls_back_to_search():
    store = store_from_payload({"address": "Main Road 12", "mapUri": "maps://nope"}, lat=LAT, lng=LNG)
    assert store is not None
    assert store.map_uri == default_map_uri(LAT, LNG)


def test_not_found_payload():
    assert store_from_payload({"found": False}, lat=LAT, lng=LNG) is None


def test_find_nearest_store_uses_locator_model(settings):
    reply = json.dumps({"found": True, "name": "Kendra", "address": "Road No. 1, Hyderabad"})
    client = FakeAIClient(reply=f"Sure:\n{reply}")

    store = asyncio.run(find_nearest_store(LAT, LNG, settings=settings, client=client))

    assert store is not None
    assert store.name == "Kendra"
    call = client.completions.calls[0]
    assert call["model"] == settings.ai_locator_model
    assert "17.385, 78.4867" in call["messages"][0]["content"]


@pytest.mark.parametrize("reply", ["I don't know.", '{"found": false}', "[]"])
def test_find_nearest_store_returns_none_for_unusable_replies(settings, reply):
    client = FakeAIClient(reply=reply)
    assert asyncio.run(find_nearest_store(LAT, LNG, settings=settings, client=client)) is None


def test_find_nearest_store_swallows_provider_errors(settings):
    client = FakeAIClient(exc=RuntimeError("provider down"))
    assert asyncio.run(find_nearest_store(LAT, LNG, settings=settings, client=client)) is None


def test_find_nearest_store_rejects_bad_coordinates(settings):
    with pytest.raises(ValueError):
        asyncio.run(find_nearest_store(123.0, LNG, settings=settings, client=FakeAIClient()))
