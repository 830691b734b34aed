"""
io/parsers.py
文本内容 -> 标准 K 线 DataFrame。

- CSV: 表头大小写不敏感，支持常见别名 (time/timestamp/date/datetime, o/h/l/c, vol/v)
- JSON: 顶层数组，每项为对象，timestamp/time 为秒或毫秒时间戳

时间戳统一为毫秒。输出按时间升序 (稳定排序)。
"""

from __future__ import annotations

import io
import json
import logging
import math
from typing import Any, Optional

import numpy as np
import pandas as pd
from pandas.errors import EmptyDataError, ParserError

from .errors import CsvFormatError, JsonFormatError
from .schema import (
    COL_CLOSE,
    COL_HIGH,
    COL_LOW,
    COL_OPEN,
    COL_TIMESTAMP,
    COL_VOLUME,
    REQUIRED_COLUMNS,
)

logger = logging.getLogger(__name__)

# 列名别名 (按优先级)
COLUMN_ALIASES: dict[str, list[str]] = {
    COL_TIMESTAMP: ["time", "timestamp", "date", "datetime"],
    COL_OPEN: ["open", "o"],
    COL_HIGH: ["high", "h"],
    COL_LOW: ["low", "l"],
    COL_CLOSE: ["close", "c"],
    COL_VOLUME: ["volume", "vol", "v"],
}

# 大于 1e12 视为毫秒，大于 1e9 视为秒
MS_THRESHOLD = 1_000_000_000_000
SECONDS_THRESHOLD = 1_000_000_000


def _epoch_number_to_ms(value: float) -> Optional[int]:
    if value > MS_THRESHOLD:
        return int(value)
    if value > SECONDS_THRESHOLD:
        return int(value * 1000)
    return None


def _parse_csv_timestamp(raw: str) -> int:
    trimmed = raw.strip()
    if not trimmed:
        raise CsvFormatError("CSV 存在空时间字段")

    try:
        numeric = float(trimmed)
    except ValueError:
        numeric = math.nan

    if math.isfinite(numeric):
        ms = _epoch_number_to_ms(numeric)
        if ms is not None:
            return ms

    try:
        stamp = pd.Timestamp(trimmed)
    except (ValueError, TypeError) as e:
        raise CsvFormatError(f"无法解析时间: {trimmed}") from e
    if pd.isna(stamp):
        raise CsvFormatError(f"无法解析时间: {trimmed}")

    if stamp.tzinfo is None:
        stamp = stamp.tz_localize("UTC")
    return int((stamp - pd.Timestamp("1970-01-01", tz="UTC")) // pd.Timedelta(milliseconds=1))


def _find_column(headers: list[str], candidates: list[str]) -> Optional[str]:
    normalized = {header.strip().lower(): header for header in headers}
    for candidate in candidates:
        if candidate in normalized:
            return normalized[candidate]
    return None


def _numeric_column(values: pd.Series, field_name: str) -> pd.Series:
    numbers = pd.to_numeric(values.str.strip(), errors="coerce")
    bad = numbers.isna() | ~np.isfinite(numbers)
    if bad.any():
        raw = values[bad].iloc[0]
        raise CsvFormatError(f"无法解析 {field_name}: {raw}")
    return numbers.astype(float)


def _finalize(df: pd.DataFrame) -> pd.DataFrame:
    df = df[REQUIRED_COLUMNS]
    df = df.sort_values(COL_TIMESTAMP, kind="mergesort").reset_index(drop=True)
    df[COL_TIMESTAMP] = df[COL_TIMESTAMP].astype("int64")
    return df


def parse_csv_content(content: str) -> pd.DataFrame:
    """
    Parse delimited text into the standard bar frame.

    Args:
        content: CSV text with a header row

    Returns:
        DataFrame with REQUIRED_COLUMNS, ascending by timestamp

    Raises:
        CsvFormatError: Too few lines, missing columns, or unparseable values
    """
    lines = [line.strip() for line in content.splitlines() if line.strip()]
    if len(lines) < 2:
        raise CsvFormatError("CSV 内容不足，至少需要表头和一行数据")

    # 列数少于表头的行直接跳过，多出的列忽略
    field_count = len(lines[0].split(","))
    rows = [
        ",".join(cells[:field_count])
        for cells in (line.split(",") for line in lines[1:])
        if len(cells) >= field_count
    ]

    try:
        raw = pd.read_csv(
            io.StringIO("\n".join([lines[0], *rows])),
            dtype=str,
            keep_default_na=False,
            index_col=False,
        )
    except (ParserError, EmptyDataError) as e:
        raise CsvFormatError(f"CSV 格式错误: {e}") from e

    headers = [str(col) for col in raw.columns]
    mapping = {target: _find_column(headers, aliases) for target, aliases in COLUMN_ALIASES.items()}
    if any(col is None for col in mapping.values()):
        raise CsvFormatError("CSV 表头缺少必要字段: time/open/high/low/close/volume")

    df = pd.DataFrame(
        {
            COL_TIMESTAMP: [_parse_csv_timestamp(v) for v in raw[mapping[COL_TIMESTAMP]]],
        },
        index=raw.index,
    )
    for target in (COL_OPEN, COL_HIGH, COL_LOW, COL_CLOSE, COL_VOLUME):
        df[target] = _numeric_column(raw[mapping[target]], target)

    logger.debug(f"Parsed {len(df)} CSV rows")
    return _finalize(df)


def _ensure_number(value: Any, field_name: str) -> float:
    if isinstance(value, bool):
        raise JsonFormatError(f"JSON 字段无效: {field_name}")
    if isinstance(value, (int, float, str)):
        try:
            parsed = float(value)
        except (ValueError, OverflowError):
            parsed = math.nan
        if math.isfinite(parsed):
            return parsed
    raise JsonFormatError(f"JSON 字段无效: {field_name}")


def _normalize_json_timestamp(raw: Any) -> int:
    value = _ensure_number(raw, "timestamp")
    ms = _epoch_number_to_ms(value)
    if ms is None:
        raise JsonFormatError("JSON timestamp 格式错误，需为秒或毫秒时间戳")
    return ms


def parse_json_content(content: str) -> pd.DataFrame:
    """
    Parse a JSON array of bar objects into the standard bar frame.

    Each object needs `timestamp` (or `time`) in seconds or milliseconds and
    open/high/low/close; `volume` defaults to 0. Numeric strings are accepted.

    Raises:
        JsonFormatError: Invalid JSON, non-array payload, or invalid fields
    """
    try:
        parsed = json.loads(content)
    except json.JSONDecodeError as e:
        raise JsonFormatError("JSON 解析失败，请检查文件格式") from e

    if not isinstance(parsed, list):
        raise JsonFormatError("JSON 顶层必须是数组")

    rows = []
    for index, item in enumerate(parsed):
        if not isinstance(item, dict):
            raise JsonFormatError(f"JSON 第 {index + 1} 项不是对象")

        stamp = item.get("timestamp")
        if stamp is None:
            stamp = item.get("time")
        volume = item.get("volume")

        rows.append(
            {
                COL_TIMESTAMP: _normalize_json_timestamp(stamp),
                COL_OPEN: _ensure_number(item.get("open"), f"open@{index}"),
                COL_HIGH: _ensure_number(item.get("high"), f"high@{index}"),
                COL_LOW: _ensure_number(item.get("low"), f"low@{index}"),
                COL_CLOSE: _ensure_number(item.get("close"), f"close@{index}"),
                COL_VOLUME: _ensure_number(0 if volume is None else volume, f"volume@{index}"),
            }
        )

    df = pd.DataFrame(rows, columns=REQUIRED_COLUMNS)
    logger.debug(f"Parsed {len(df)} JSON items")
    return _finalize(df)
