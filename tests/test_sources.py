"""Tests for the HTTP data source against a stub requests session."""

import sys
from pathlib import Path

import pytest
import requests

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from conftest import make_payload, run

from sound_treasury.config import Config
from sound_treasury.data.sectors import CHEMICALS
from sound_treasury.exceptions import InvalidPayload, NetworkFailure
from sound_treasury.models.comparison import build_comparison_series
from sound_treasury.pipeline.sources import RemoteDataSource


class StubResponse:
    def __init__(self, status_code=200, body=None, bad_json=False):
        self.status_code = status_code
        self._body = body
        self._bad_json = bad_json

    @property
    def ok(self):
        return 200 <= self.status_code < 400

    def json(self):
        if self._bad_json:
            raise ValueError("Expecting value")
        return self._body


class StubSession:
    """Replays queued responses (or raises queued exceptions) in order."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.headers = {}
        self.urls = []
        self.closed = False

    def get(self, url, timeout=None):
        self.urls.append(url)
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def close(self):
        self.closed = True


def model_body():
    payload = make_payload(count=5)
    return {
        "data": [p.to_dict() for p in payload.data],
        "stats": payload.stats.to_dict(),
    }


def source_with(*responses, attempts=2):
    session = StubSession(*responses)
    source = RemoteDataSource("http://api.test/api/", max_attempts=attempts, retry_delay=0, session=session)
    return source, session


class TestModelSeries:

    def test_success(self):
        source, session = source_with(StubResponse(body=model_body()))
        payload = source.get_model_series()
        assert len(payload.data) == 5
        assert session.urls == ["http://api.test/api/model-series"]

    def test_sets_headers(self):
        source, session = source_with()
        assert session.headers["Accept"] == "application/json"
        assert "User-Agent" in session.headers

    def test_http_error_is_network_failure(self):
        source, _ = source_with(StubResponse(status_code=503), StubResponse(status_code=503))
        with pytest.raises(NetworkFailure):
            source.get_model_series()

    def test_transport_error_retried(self):
        source, session = source_with(
            requests.ConnectionError("refused"),
            StubResponse(body=model_body()),
        )
        payload = source.get_model_series()
        assert len(payload.data) == 5
        assert len(session.urls) == 2

    def test_bad_json_is_invalid_payload_and_not_retried(self):
        source, session = source_with(StubResponse(bad_json=True), StubResponse(body=model_body()))
        with pytest.raises(InvalidPayload):
            source.get_model_series()
        assert len(session.urls) == 1

    def test_wrong_shape_is_invalid_payload(self):
        source, _ = source_with(StubResponse(body={"data": "nope"}))
        with pytest.raises(InvalidPayload):
            source.get_model_series()

    def test_async_wrapper(self):
        source, _ = source_with(StubResponse(body=model_body()))
        payload = run(source.fetch_model_series())
        assert payload.stats.data_source == "Test Feed"


class TestSectorSeries:

    def test_success(self):
        series = build_comparison_series(CHEMICALS.history_copy(), CHEMICALS.assets)
        source, session = source_with(StubResponse(body=series.to_dict()))
        fetched = source.get_sector_series("chemicals")
        assert session.urls == ["http://api.test/api/sector-series/chemicals"]
        assert fetched == series

    def test_timeout_is_network_failure(self):
        source, _ = source_with(requests.Timeout("slow"), attempts=1)
        with pytest.raises(NetworkFailure):
            run(source.fetch_sector_series("chemicals"))


class TestConstruction:

    def test_from_config(self):
        config = Config().with_overrides(api_base_url="http://example.test", request_timeout=3.0)
        source = RemoteDataSource.from_config(config)
        assert source.base_url == "http://example.test"
        assert source.timeout == 3.0
        source.close()

    def test_close(self):
        source, session = source_with()
        source.close()
        assert session.closed
