"""JSON bar files (top-level array of bar objects)."""

from __future__ import annotations

from pathlib import Path

from ..parsers import parse_json_content
from ..schema import OHLCData
from .base import DataAdapter


class JsonAdapter(DataAdapter):
    extensions = (".json",)

    @property
    def name(self) -> str:
        return "JSON"

    def load(self, path: Path) -> OHLCData:
        path = Path(path)
        df = parse_json_content(self._read_text(path))
        return OHLCData(df=df, symbol=path.stem, name=path.name)
