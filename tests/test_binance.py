"""
Tests for the Binance kline fetcher.

HTTP is replaced with a fake session; no network access.
"""

from __future__ import annotations

from typing import Any, Optional

import pytest
import requests
from pydantic import ValidationError

from chart_structure.io import BinanceKlineQuery, IngestionError, RemoteFetchError, fetch_binance_klines


class FakeResponse:
    def __init__(self, payload: Any = None, status_code: int = 200, text: str = ""):
        self._payload = payload
        self.status_code = status_code
        self.text = text

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300

    def json(self) -> Any:
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class FakeSession:
    def __init__(self, response: Optional[FakeResponse] = None, error: Optional[Exception] = None):
        self.response = response
        self.error = error
        self.calls: list[dict[str, Any]] = []

    def get(self, url: str, params: dict[str, Any], timeout: float) -> FakeResponse:
        self.calls.append({"url": url, "params": params, "timeout": timeout})
        if self.error is not None:
            raise self.error
        return self.response


KLINE_ROWS = [
    [1_700_000_000_000, "100.0", "110.0", "95.0", "105.0", "12.5", 1_700_003_599_999, "0", 10, "0", "0", "0"],
    [1_700_003_600_000, "105.0", "112.0", "101.0", "108.0", "7.25", 1_700_007_199_999, "0", 8, "0", "0", "0"],
]


def test_query_normalizes_symbol() -> None:
    query = BinanceKlineQuery(symbol=" btcusdt ", interval="1h")

    assert query.symbol == "BTCUSDT"
    assert query.limit == 500
    assert query.to_params() == {"symbol": "BTCUSDT", "interval": "1h", "limit": 500}


def test_query_time_range_params() -> None:
    query = BinanceKlineQuery(symbol="ETHUSDT", interval="4h", limit=10, start_time=1, end_time=2)

    params = query.to_params()

    assert params["startTime"] == 1
    assert params["endTime"] == 2


def test_query_validation() -> None:
    with pytest.raises(ValidationError):
        BinanceKlineQuery(symbol="BTCUSDT", interval="2m")
    with pytest.raises(ValidationError):
        BinanceKlineQuery(symbol="BTCUSDT", interval="1h", limit=0)
    with pytest.raises(ValidationError):
        BinanceKlineQuery(symbol="BTCUSDT", interval="1h", limit=1501)


def test_fetch_maps_rows() -> None:
    session = FakeSession(FakeResponse(KLINE_ROWS))
    query = BinanceKlineQuery(symbol="btcusdt", interval="1h", limit=2)

    data = fetch_binance_klines(query, session=session, base_url="https://example.test/", timeout=3.0)

    call = session.calls[0]
    assert call["url"] == "https://example.test/fapi/v1/klines"
    assert call["params"] == {"symbol": "BTCUSDT", "interval": "1h", "limit": 2}
    assert call["timeout"] == 3.0

    assert data.symbol == "BTCUSDT"
    assert len(data) == 2
    bar = data.bars[0]
    assert bar.timestamp == 1_700_000_000_000
    assert (bar.open, bar.high, bar.low, bar.close, bar.volume) == (100.0, 110.0, 95.0, 105.0, 12.5)


def test_fetch_empty_payload() -> None:
    session = FakeSession(FakeResponse([]))

    data = fetch_binance_klines(BinanceKlineQuery(symbol="BTCUSDT", interval="1m"), session=session)

    assert len(data) == 0


def test_fetch_http_error() -> None:
    session = FakeSession(FakeResponse(status_code=429, text="Too many requests"))

    with pytest.raises(RemoteFetchError) as exc_info:
        fetch_binance_klines(BinanceKlineQuery(symbol="BTCUSDT", interval="1h"), session=session)

    assert exc_info.value.status_code == 429
    assert "429" in str(exc_info.value)
    assert isinstance(exc_info.value, IngestionError)


def test_fetch_transport_error() -> None:
    session = FakeSession(error=requests.ConnectionError("connection refused"))

    with pytest.raises(RemoteFetchError) as exc_info:
        fetch_binance_klines(BinanceKlineQuery(symbol="BTCUSDT", interval="1h"), session=session)

    assert exc_info.value.status_code is None


def test_fetch_malformed_payload() -> None:
    session = FakeSession(FakeResponse({"code": -1121, "msg": "Invalid symbol."}))

    with pytest.raises(RemoteFetchError, match="格式错误"):
        fetch_binance_klines(BinanceKlineQuery(symbol="BTCUSDT", interval="1h"), session=session)


def test_fetch_invalid_json_body() -> None:
    session = FakeSession(FakeResponse(ValueError("No JSON object could be decoded")))

    with pytest.raises(RemoteFetchError):
        fetch_binance_klines(BinanceKlineQuery(symbol="BTCUSDT", interval="1h"), session=session)
