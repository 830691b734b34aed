"""
io/binance.py
拉取 Binance USDT 永续 K 线，并统一转换为标准 OHLCData。
"""

from __future__ import annotations

import logging
from typing import Any, Literal, Optional

import pandas as pd
import requests
from pydantic import BaseModel, Field, field_validator

from .errors import RemoteFetchError
from .schema import COL_TIMESTAMP, PRICE_COLUMNS, COL_VOLUME, REQUIRED_COLUMNS, OHLCData

logger = logging.getLogger(__name__)

BASE_URL = "https://fapi.binance.com"
KLINES_PATH = "/fapi/v1/klines"
DEFAULT_LIMIT = 500
DEFAULT_TIMEOUT = 10.0

BinanceInterval = Literal[
    "1m", "3m", "5m", "15m", "30m", "1h", "2h", "4h", "6h", "8h", "12h", "1d", "3d", "1w"
]


class BinanceKlineQuery(BaseModel):
    """Kline request parameters."""

    symbol: str = Field(min_length=1)
    interval: BinanceInterval
    limit: int = Field(default=DEFAULT_LIMIT, ge=1, le=1500)
    start_time: Optional[int] = None
    end_time: Optional[int] = None

    model_config = {"extra": "forbid"}

    @field_validator("symbol")
    @classmethod
    def _upper_symbol(cls, value: str) -> str:
        return value.strip().upper()

    def to_params(self) -> dict[str, Any]:
        """Query-string parameters in the names the Binance API expects."""
        params: dict[str, Any] = {
            "symbol": self.symbol,
            "interval": self.interval,
            "limit": self.limit,
        }
        if self.start_time is not None:
            params["startTime"] = self.start_time
        if self.end_time is not None:
            params["endTime"] = self.end_time
        return params


def rows_to_frame(payload: list[list[Any]]) -> pd.DataFrame:
    """Map raw kline rows `[openTime, o, h, l, c, v, ...]` to the standard frame."""
    df = pd.DataFrame([row[:6] for row in payload], columns=REQUIRED_COLUMNS)
    df[COL_TIMESTAMP] = df[COL_TIMESTAMP].astype("int64")
    for col in [*PRICE_COLUMNS, COL_VOLUME]:
        df[col] = pd.to_numeric(df[col]).astype(float)
    return df


def fetch_binance_klines(
    query: BinanceKlineQuery,
    session: Optional[requests.Session] = None,
    base_url: str = BASE_URL,
    timeout: float = DEFAULT_TIMEOUT,
) -> OHLCData:
    """
    Fetch klines for one symbol/interval.

    Args:
        query: Validated request parameters
        session: Optional requests session (a fresh request is made otherwise)
        base_url: REST endpoint root
        timeout: Request timeout in seconds

    Returns:
        OHLCData in the order Binance returns (ascending open time)

    Raises:
        RemoteFetchError: Transport failure, non-2xx status or malformed payload
    """
    http = session or requests
    url = f"{base_url.rstrip('/')}{KLINES_PATH}"

    logger.info(f"Fetching {query.symbol} {query.interval} klines (limit={query.limit})")

    try:
        response = http.get(url, params=query.to_params(), timeout=timeout)
    except requests.RequestException as e:
        logger.error(f"Binance 请求失败: {e}")
        raise RemoteFetchError(f"Binance 请求失败: {e}") from e

    if not response.ok:
        logger.error(f"Binance 请求失败: {response.status_code} {response.text}")
        raise RemoteFetchError(
            f"Binance 请求失败: {response.status_code} {response.text}",
            status_code=response.status_code,
        )

    try:
        payload = response.json()
        if not isinstance(payload, list):
            raise ValueError(f"expected a list of klines, got {type(payload).__name__}")
        df = rows_to_frame(payload)
    except (ValueError, TypeError) as e:
        raise RemoteFetchError(f"Binance 返回数据格式错误: {e}") from e

    logger.info(f"Fetched {len(df)} klines for {query.symbol}")
    return OHLCData(df=df, symbol=query.symbol, name=f"{query.symbol} {query.interval}")
