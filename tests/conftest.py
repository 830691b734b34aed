"""
conftest.py
共享测试工具：K 线 / 分型 / 笔 的构造工厂。
"""

from __future__ import annotations

from typing import Callable, Optional, Sequence

import pytest

from chart_structure.analysis.types import Fractal, Stroke
from chart_structure.io.schema import Bar

BAR_INTERVAL_MS = 60_000


def build_bars(highs: Sequence[float], lows: Optional[Sequence[float]] = None) -> list[Bar]:
    lows = highs if lows is None else lows
    return [
        Bar(
            timestamp=i * BAR_INTERVAL_MS,
            open=float(low),
            high=float(high),
            low=float(low),
            close=float(high),
            volume=1.0,
        )
        for i, (high, low) in enumerate(zip(highs, lows))
    ]


def _strokes(prices: Sequence[float]) -> list[Stroke]:
    """Alternating strokes through `prices`; the first kind follows the first move."""
    kind = "bottom" if prices[0] < prices[1] else "top"
    fractals = []
    for i, price in enumerate(prices):
        bar = Bar(i * BAR_INTERVAL_MS, price, price, price, price, 1.0)
        fractals.append(Fractal(kind, i, bar))
        kind = "top" if kind == "bottom" else "bottom"

    return [
        Stroke("up" if start.kind == "bottom" else "down", start, end)
        for start, end in zip(fractals, fractals[1:])
    ]


@pytest.fixture
def make_bars() -> Callable[..., list[Bar]]:
    """Bars from highs (and optional lows); flat bars when lows are omitted."""
    return build_bars


@pytest.fixture
def make_strokes() -> Callable[[Sequence[float]], list[Stroke]]:
    return _strokes


# 13 个交替分型 (K 线 1..13)，12 笔：一段确认上涨 + 一段未确认下跌，含一个中枢
SWING_PRICES = [12, 10, 20, 15, 25, 20, 30, 22, 28, 18, 24, 12, 16, 8, 11]


@pytest.fixture
def swing_bars() -> list[Bar]:
    return build_bars(SWING_PRICES)
