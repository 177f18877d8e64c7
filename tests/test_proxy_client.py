from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from adapters.proxy_client import ProxyAnalyzer
from core.config import AppSettings
from core.domain.errors import AnalysisFailedError, ConfigurationError, RateLimitedError


def _transport(handler) -> httpx.MockTransport:
    return httpx.MockTransport(handler)


def test_requires_proxy_url():
    with pytest.raises(ConfigurationError):
        ProxyAnalyzer(settings=AppSettings(_env_file=None, proxy_url=None))


def test_endpoint_joins_path(settings):
    analyzer = ProxyAnalyzer("https://proxy.test/", settings=settings)
    assert analyzer.endpoint == "https://proxy.test/api/process-prescription"


def test_posts_data_uri_and_parses_reply(settings, sample_response_text):
    seen: dict[str, object] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, text=sample_response_text)

    analyzer = ProxyAnalyzer("https://proxy.test", settings=settings, transport=_transport(handler))
    result = asyncio.run(analyzer.analyze("QUJD"))

    assert seen["url"] == "https://proxy.test/api/process-prescription"
    assert seen["body"] == {"image": "data:image/jpeg;base64,QUJD"}
    assert len(result.medications) == 2


def test_proxy_429_is_rate_limited(settings):
    analyzer = ProxyAnalyzer(
        "https://proxy.test",
        settings=settings,
        transport=_transport(lambda request: httpx.Response(429, json={"error": "slow down"})),
    )
    with pytest.raises(RateLimitedError):
        asyncio.run(analyzer.analyze("QUJD"))


def test_proxy_500_is_analysis_failure(settings):
    analyzer = ProxyAnalyzer(
        "https://proxy.test",
        settings=settings,
        transport=_transport(
            lambda request: httpx.Response(500, json={"error": "Processing failed on the server."})
        ),
    )
    with pytest.raises(AnalysisFailedError) as info:
        asyncio.run(analyzer.analyze("QUJD"))
    assert info.value.status_code == 500


def test_network_error_is_analysis_failure(settings):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    analyzer = ProxyAnalyzer("https://proxy.test", settings=settings, transport=_transport(handler))
    with pytest.raises(AnalysisFailedError):
        asyncio.run(analyzer.analyze("QUJD"))
