"""
Response parsing.

Converts OpMon connector responses into pandas DataFrames (query results)
and MetricFindValue lists (variable queries).
"""

import logging
from typing import Any, Dict, List

import pandas as pd

from .schemas import MetricFindValue
from .static import Datapoint

logger = logging.getLogger("opmon.response_parser")


def _rows(payload: Any) -> List[Any]:
    if isinstance(payload, dict):
        return payload.get("data") or []
    return payload or []


class ResponseParser:
    """Turns raw connector payloads into typed results."""

    def to_data_frames(self, payload: Any) -> List[pd.DataFrame]:
        """
        Parse a /query response.

        An empty payload, or one whose first frame is empty, yields no frames.
        """
        frames = _rows(payload)
        if not frames or not frames[0]:
            return []
        return [self.to_data_frame(frame) for frame in frames]

    def to_data_frame(self, frame: Dict[str, Any]) -> pd.DataFrame:
        """
        Parse one frame.

        Supported shapes:
            time series: {"target": name, "datapoints": [[value, ts_ms], ...]}
            table:       {"type": "table", "columns": [{"text": ...}], "rows": [[...]]}
            columnar:    {"name": ..., "fields": [{"name": ..., "values": [...]}]}
        """
        if "datapoints" in frame:
            points = frame.get("datapoints") or []
            df = pd.DataFrame({
                "time": pd.to_datetime([p[Datapoint.TS] for p in points], unit="ms", utc=True),
                "value": [p[Datapoint.VALUE] for p in points],
            })
            name = frame.get("target")
        elif frame.get("type") == "table" or "columns" in frame:
            columns = [
                column.get("text") if isinstance(column, dict) else column
                for column in frame.get("columns", [])
            ]
            df = pd.DataFrame(frame.get("rows") or [], columns=columns)
            name = frame.get("name")
        elif "fields" in frame:
            df = pd.DataFrame({
                field.get("name"): field.get("values", [])
                for field in frame["fields"]
            })
            name = frame.get("name")
        else:
            logger.warning("unrecognized frame shape with keys %s", sorted(frame))
            df = pd.DataFrame([frame])
            name = None

        df.attrs["name"] = name
        df.attrs["refId"] = frame.get("refId")
        return df

    def transform_metric_find_response(self, payload: Any) -> List[MetricFindValue]:
        """Parse a /variable response into text/value pairs."""
        values = []
        for row in _rows(payload):
            if isinstance(row, dict):
                text = row.get("text", row.get("value"))
                values.append(MetricFindValue(text=str(text), value=row.get("value", text)))
            else:
                values.append(MetricFindValue(text=str(row), value=row))
        return values
