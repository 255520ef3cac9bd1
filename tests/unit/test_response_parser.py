"""Unit tests for response parsing"""
import pandas as pd

from opmon.response_parser import ResponseParser


class TestToDataFrames:
    """Test /query response conversion"""

    def test_empty_payloads(self):
        parser = ResponseParser()
        assert parser.to_data_frames([]) == []
        assert parser.to_data_frames(None) == []
        assert parser.to_data_frames([{}]) == []
        assert parser.to_data_frames({"data": []}) == []

    def test_time_series_frame(self):
        payload = [{"target": "web01 availability", "refId": "A",
                    "datapoints": [[99.5, 1700000000000], [100.0, 1700000060000]]}]

        frames = ResponseParser().to_data_frames(payload)

        assert len(frames) == 1
        df = frames[0]
        assert list(df.columns) == ["time", "value"]
        assert df["value"].tolist() == [99.5, 100.0]
        assert df["time"].iloc[0] == pd.Timestamp(1700000000000, unit="ms", tz="UTC")
        assert df.attrs["name"] == "web01 availability"
        assert df.attrs["refId"] == "A"

    def test_table_frame(self):
        payload = {"data": [{"type": "table",
                             "columns": [{"text": "host"}, {"text": "state"}],
                             "rows": [["web01", "OK"], ["web02", "CRITICAL"]]}]}

        df = ResponseParser().to_data_frames(payload)[0]

        assert list(df.columns) == ["host", "state"]
        assert df["state"].tolist() == ["OK", "CRITICAL"]

    def test_columnar_frame(self):
        payload = [{"name": "cpu", "fields": [{"name": "time", "values": [1, 2]},
                                              {"name": "value", "values": [0.5, 0.7]}]}]

        df = ResponseParser().to_data_frames(payload)[0]

        assert df["value"].tolist() == [0.5, 0.7]
        assert df.attrs["name"] == "cpu"


class TestMetricFindResponse:
    """Test /variable response conversion"""

    def test_strings_and_dicts(self):
        values = ResponseParser().transform_metric_find_response(["web01", {"text": "Web 2", "value": "web02"}, {"text": "x"}])

        assert [(v.text, v.value) for v in values] == [("web01", "web01"), ("Web 2", "web02"), ("x", "x")]

    def test_empty(self):
        assert ResponseParser().transform_metric_find_response(None) == []
