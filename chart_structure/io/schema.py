"""
io/schema.py
标准 K 线数据模型。

所有适配器 / 解析器最终都产出同一种 DataFrame:
    timestamp (int, 毫秒), open, high, low, close, volume

分析核心只读取 Bar 序列，不做排序、去重或时间校验。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Union

import numpy as np
import pandas as pd

COL_TIMESTAMP = "timestamp"
COL_DATETIME = "datetime"
COL_OPEN = "open"
COL_HIGH = "high"
COL_LOW = "low"
COL_CLOSE = "close"
COL_VOLUME = "volume"

PRICE_COLUMNS = [COL_OPEN, COL_HIGH, COL_LOW, COL_CLOSE]
REQUIRED_COLUMNS = [COL_TIMESTAMP, *PRICE_COLUMNS, COL_VOLUME]


@dataclass(frozen=True)
class Bar:
    """One OHLCV candle. Timestamps are in milliseconds by convention."""

    timestamp: int
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0


@dataclass
class OHLCData:
    """
    标准化的 OHLC 数据容器。

    Attributes:
        df: DataFrame with REQUIRED_COLUMNS, ascending by timestamp
        symbol: Instrument symbol (optional)
        name: Human readable label (optional)
    """

    df: pd.DataFrame
    symbol: Optional[str] = None
    name: Optional[str] = None

    def __post_init__(self) -> None:
        if COL_TIMESTAMP not in self.df.columns and COL_DATETIME in self.df.columns:
            self.df = self.df.copy()
            self.df[COL_TIMESTAMP] = _datetime_to_ms(self.df[COL_DATETIME])
        if COL_VOLUME not in self.df.columns:
            self.df = self.df.copy()
            self.df[COL_VOLUME] = 0.0

        missing = [col for col in REQUIRED_COLUMNS if col not in self.df.columns]
        if missing:
            raise ValueError(f"OHLCData 缺少必要列: {missing}")

    def __len__(self) -> int:
        return len(self.df)

    def __repr__(self) -> str:
        label = self.name or self.symbol or "unnamed"
        return f"<OHLCData {label}: {len(self.df)} bars>"

    @property
    def date_range(self) -> tuple[pd.Timestamp, pd.Timestamp]:
        """First and last bar time as pandas Timestamps (UTC)."""
        stamps = pd.to_datetime(self.df[COL_TIMESTAMP], unit="ms", utc=True)
        return stamps.iloc[0], stamps.iloc[-1]

    @property
    def bars(self) -> list[Bar]:
        return bars_from_frame(self.df)


BarSource = Union[Sequence[Bar], pd.DataFrame, OHLCData]


def _datetime_to_ms(series: pd.Series) -> pd.Series:
    stamps = pd.to_datetime(series, utc=True)
    epoch = pd.Timestamp("1970-01-01", tz="UTC")
    return ((stamps - epoch) // pd.Timedelta(milliseconds=1)).astype("int64")


def bars_from_frame(df: pd.DataFrame) -> list[Bar]:
    """
    Convert a standard OHLCV DataFrame into a list of Bar records.

    A `datetime` column is accepted in place of `timestamp`; a missing
    `volume` column reads as zero volume.
    """
    if df.empty:
        return []

    if COL_TIMESTAMP in df.columns:
        timestamps = df[COL_TIMESTAMP].to_numpy()
    else:
        timestamps = _datetime_to_ms(df[COL_DATETIME]).to_numpy()

    volumes = df[COL_VOLUME].to_numpy() if COL_VOLUME in df.columns else np.zeros(len(df))

    return [
        Bar(
            timestamp=int(ts),
            open=float(o),
            high=float(h),
            low=float(l),
            close=float(c),
            volume=float(v),
        )
        for ts, o, h, l, c, v in zip(
            timestamps,
            df[COL_OPEN].to_numpy(),
            df[COL_HIGH].to_numpy(),
            df[COL_LOW].to_numpy(),
            df[COL_CLOSE].to_numpy(),
            volumes,
        )
    ]


def bars_to_frame(bars: Iterable[Bar]) -> pd.DataFrame:
    """Inverse of bars_from_frame."""
    rows = [
        (bar.timestamp, bar.open, bar.high, bar.low, bar.close, bar.volume) for bar in bars
    ]
    df = pd.DataFrame(rows, columns=REQUIRED_COLUMNS)
    df[COL_TIMESTAMP] = df[COL_TIMESTAMP].astype("int64")
    return df


def coerce_bars(source: BarSource) -> list[Bar]:
    """Accept a Bar sequence, a DataFrame or an OHLCData and return bars."""
    if isinstance(source, OHLCData):
        return source.bars
    if isinstance(source, pd.DataFrame):
        return bars_from_frame(source)
    return list(source)
