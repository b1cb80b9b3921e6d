"""
Metric source tests

HTTP is replaced by a mocked requests.Session; no network access.
"""
import math
from unittest.mock import MagicMock

import pandas as pd
import pytest
import requests

from dca_tuner.errors import AlignmentError, MetricSourceError
from dca_tuner.pipeline.data_pipeline import MetricDataPipeline


def _response(payload, status: int = 200):
    resp = MagicMock()
    resp.ok = 200 <= status < 300
    resp.status_code = status
    resp.json.return_value = payload
    return resp


def _session(payloads: dict):
    """Session whose get() answers by the metric id in the query."""
    session = MagicMock(spec=requests.Session)

    def get(url, params=None, timeout=None):
        metric = params["ids"].split(",", 1)[1]
        return payloads[metric]

    session.get.side_effect = get
    return session


DATES = ["2024-01-01", "2024-01-02", "2024-01-03"]


class TestFetch:
    def test_fetch_and_preprocess(self):
        session = _session({
            "close": _response([DATES, [100, 101.5, "102"]]),
            "marketcap": _response([DATES, [1e9, None, 3e9]]),
        })
        pipeline = MetricDataPipeline(api_base="https://example.test/", session=session)
        raw = pipeline.fetch(["close", "marketcap"])
        assert list(raw) == ["close", "marketcap"]

        metrics = pipeline.preprocess()
        assert metrics["close"].tolist() == [100.0, 101.5, 102.0]
        assert math.isnan(metrics["marketcap"].iloc[1])
        assert list(metrics["close"].index) == DATES
        assert pipeline.get_dates() == DATES

    def test_request_format(self):
        session = _session({"close": _response([DATES, [1, 2, 3]])})
        MetricDataPipeline(api_base="https://example.test/", timeout=5, session=session).fetch(["close"])
        session.get.assert_called_once_with(
            "https://example.test/api/vecs/query",
            params={"index": "dateindex", "ids": "date,close", "format": "json"},
            timeout=5,
        )

    def test_metric_matrix(self):
        session = _session({
            "close": _response([DATES, [1, 2, 3]]),
            "liveliness": _response([DATES, [0.5, 0.6, 0.7]]),
        })
        pipeline = MetricDataPipeline(session=session)
        pipeline.fetch(["close", "liveliness"])
        pipeline.preprocess()
        matrix = pipeline.get_metric_matrix()
        assert matrix.shape == (3, 2)
        assert list(matrix.columns) == ["close", "liveliness"]

    def test_empty_matrix(self):
        assert MetricDataPipeline(session=MagicMock()).get_metric_matrix().empty

    def test_duplicate_dates_dropped(self):
        dates = ["d1", "d1", "d2"]
        session = _session({"close": _response([dates, [1, 2, 3]])})
        pipeline = MetricDataPipeline(session=session)
        pipeline.fetch(["close"])
        close = pipeline.preprocess()["close"]
        assert close.tolist() == [1.0, 3.0]
        assert list(close.index) == ["d1", "d2"]

    def test_get_metrics_is_a_copy(self):
        session = _session({"close": _response([DATES, [1, 2, 3]])})
        pipeline = MetricDataPipeline(session=session)
        pipeline.fetch(["close"])
        pipeline.get_metrics().clear()
        assert "close" in pipeline.get_metrics()


class TestFetchErrors:
    def test_misaligned_dates(self):
        session = _session({
            "close": _response([DATES, [1, 2, 3]]),
            "marketcap": _response([DATES[1:], [2, 3]]),
        })
        with pytest.raises(AlignmentError):
            MetricDataPipeline(session=session).fetch(["close", "marketcap"])

    def test_dates_values_length_mismatch(self):
        session = _session({"close": _response([DATES, [1, 2]])})
        with pytest.raises(AlignmentError):
            MetricDataPipeline(session=session).fetch(["close"])

    def test_http_error(self):
        session = _session({"close": _response(None, status=500)})
        with pytest.raises(MetricSourceError, match="500"):
            MetricDataPipeline(session=session).fetch(["close"])

    @pytest.mark.parametrize("payload", [{"close": [1]}, [DATES], "oops", [DATES, "x"]])
    def test_invalid_payload(self, payload):
        session = _session({"close": _response(payload)})
        with pytest.raises(MetricSourceError):
            MetricDataPipeline(session=session).fetch(["close"])

    def test_invalid_json(self):
        resp = _response(None)
        resp.json.side_effect = ValueError("no json")
        session = _session({"close": resp})
        with pytest.raises(MetricSourceError):
            MetricDataPipeline(session=session).fetch(["close"])

    def test_connection_error(self):
        session = MagicMock(spec=requests.Session)
        session.get.side_effect = requests.ConnectionError("down")
        with pytest.raises(MetricSourceError):
            MetricDataPipeline(session=session).fetch(["close"])


class TestLatestDate:
    def test_latest_date(self):
        session = MagicMock(spec=requests.Session)
        session.get.return_value = _response("2024-06-30")
        pipeline = MetricDataPipeline(api_base="https://example.test", session=session)
        assert pipeline.fetch_latest_date() == "2024-06-30"
        session.get.assert_called_once_with(
            "https://example.test/api/vecs/dateindex-to-date", params={"from": -1}, timeout=30.0
        )

    def test_latest_date_invalid(self):
        session = MagicMock(spec=requests.Session)
        session.get.return_value = _response(["2024-06-30"])
        with pytest.raises(MetricSourceError):
            MetricDataPipeline(session=session).fetch_latest_date()
