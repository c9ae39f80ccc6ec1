"""Unit tests for fetcher.py: file and HTTP catalog loading."""
import json
from decimal import Decimal

import pytest
import requests

from home_loan_analyzer import fetcher
from home_loan_analyzer.fetcher import FetchError, fetch_raw_catalog, load_catalog
from home_loan_analyzer.resolver import InvalidInputError

CATALOG = {
    "banks": [{"bank_name": "Bank A", "current_mrr": 7.3}],
    "promotions": [
        {
            "bank_name": "Bank A",
            "name": "Fix 3Y",
            "rates": [{"year": 3, "rate": 2.9}, {"year": 99, "reference": "MRR", "spread": 1.3}],
        }
    ],
}


class _FakeResponse:
    def __init__(self, payload=None, status=200, text=None):
        self._payload = payload
        self.status_code = status
        self.text = text

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Server Error")

    def json(self):
        if self.text is not None:
            return json.loads(self.text)
        return self._payload


class TestFileCatalog:
    def test_loads_and_resolves(self, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps(CATALOG), encoding="utf-8")
        (promo,) = load_catalog(str(path))
        assert promo.promo_name == "Fix 3Y"
        assert promo.rates[-1].rate == Decimal("6.0")

    def test_missing_file(self, tmp_path):
        with pytest.raises(FetchError, match="Cannot read"):
            fetch_raw_catalog(str(tmp_path / "nope.json"))

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(FetchError, match="not valid JSON"):
            fetch_raw_catalog(str(path))

    def test_invalid_rows_surface_as_input_errors(self, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps([{"bank_name": "Bank A", "name": "X", "loan_calc_method": "?"}]))
        with pytest.raises(InvalidInputError):
            load_catalog(str(path))


class TestHttpCatalog:
    def test_fetches_json(self, monkeypatch):
        calls = {}

        def fake_get(url, headers=None, timeout=None):
            calls.update(url=url, headers=headers, timeout=timeout)
            return _FakeResponse([
                {"bank_name": "Bank B", "name": "Float", "rates": [{"year": 99, "rate": 6.1}]}
            ])

        monkeypatch.setattr(fetcher.requests, "get", fake_get)
        monkeypatch.delenv("HOME_LOAN_API_KEY", raising=False)
        (promo,) = load_catalog("https://example.test/rest/v1/bank_promotions")
        assert promo.bank_name == "Bank B"
        assert calls["timeout"] == 10
        assert "apikey" not in calls["headers"]

    def test_api_key_from_environment(self, monkeypatch):
        seen = {}

        def fake_get(url, headers=None, timeout=None):
            seen.update(headers)
            return _FakeResponse([])

        monkeypatch.setattr(fetcher.requests, "get", fake_get)
        monkeypatch.setenv("HOME_LOAN_API_KEY", "secret")
        assert load_catalog("https://example.test/promos") == []
        assert seen["apikey"] == "secret"
        assert seen["Authorization"] == "Bearer secret"

    def test_http_error(self, monkeypatch):
        monkeypatch.setattr(fetcher.requests, "get", lambda *a, **kw: _FakeResponse(status=503))
        with pytest.raises(FetchError, match="request failed"):
            fetch_raw_catalog("https://example.test/promos")

    def test_connection_error(self, monkeypatch):
        def boom(*args, **kwargs):
            raise requests.ConnectionError("unreachable")

        monkeypatch.setattr(fetcher.requests, "get", boom)
        with pytest.raises(FetchError, match="unreachable"):
            fetch_raw_catalog("https://example.test/promos")

    def test_non_json_body(self, monkeypatch):
        monkeypatch.setattr(fetcher.requests, "get", lambda *a, **kw: _FakeResponse(text="<html>"))
        with pytest.raises(FetchError, match="not valid JSON"):
            fetch_raw_catalog("https://example.test/promos")
