"""CSV bar files (header row + one bar per line)."""

from __future__ import annotations

from pathlib import Path

from ..parsers import parse_csv_content
from ..schema import OHLCData
from .base import DataAdapter


class CsvAdapter(DataAdapter):
    extensions = (".csv",)

    @property
    def name(self) -> str:
        return "CSV"

    def load(self, path: Path) -> OHLCData:
        path = Path(path)
        df = parse_csv_content(self._read_text(path))
        return OHLCData(df=df, symbol=path.stem, name=path.name)
