"""
Data Pipeline - Fetches on-chain metric series and aligns them by date.

Metrics come from the bitcoinresearchkit API, one request per metric:

    GET {api_base}/api/vecs/query?index=dateindex&ids=date,{metric}&format=json
    -> [[date, ...], [value, ...]]

Every metric is indexed by the same date axis. A metric whose dates differ
is an alignment error, never padded or trimmed.
"""

import logging
from typing import Dict, List, Optional, Sequence

import pandas as pd
import requests

from ..config import DEFAULT_API_BASE
from ..errors import AlignmentError, MetricSourceError
from .catalog import METRICS_LIST

logger = logging.getLogger(__name__)


class MetricDataPipeline:
    """
    Pipeline for fetching and preprocessing metric data.

    Handles:
    - Metric series fetching over HTTP
    - Date alignment validation across metrics
    - Numeric coercion and duplicate-date cleanup
    - Building a metric matrix (dates x metrics)
    """

    def __init__(self, api_base: str = DEFAULT_API_BASE, timeout: float = 30.0,
                 session: Optional[requests.Session] = None):
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

        self._dates: Optional[List[str]] = None
        self._raw_data: Dict[str, pd.Series] = {}
        self._metric_matrix: Optional[pd.DataFrame] = None

    def fetch(self, metrics: Sequence[str] = METRICS_LIST) -> Dict[str, pd.Series]:
        """
        Fetch series for multiple metrics.

        Args:
            metrics: Metric identifiers (default: the full catalog)

        Returns:
            Dictionary mapping metric names to date-indexed series
        """
        self._dates = None
        self._raw_data = {}
        self._metric_matrix = None

        for metric in metrics:
            dates, values = self._fetch_single(metric)
            self._check_alignment(metric, dates)
            self._raw_data[metric] = pd.Series(values, index=pd.Index(dates, name="date"),
                                               name=metric, dtype=object)

        logger.info(f"Fetched {len(self._raw_data)} metrics, {len(self._dates or [])} days")
        return self._raw_data

    def _get_json(self, url: str, params: Optional[dict] = None):
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
        except requests.RequestException as e:
            raise MetricSourceError(f"Request to {url} failed: {e}") from e

        if not response.ok:
            raise MetricSourceError(f"Request to {url} failed: HTTP {response.status_code}")

        try:
            return response.json()
        except ValueError as e:
            raise MetricSourceError(f"Invalid JSON from {url}") from e

    def _fetch_single(self, metric: str):
        """Fetch (dates, values) for one metric."""
        logger.debug(f"Fetching {metric}")
        data = self._get_json(
            f"{self.api_base}/api/vecs/query",
            params={"index": "dateindex", "ids": f"date,{metric}", "format": "json"},
        )

        if not isinstance(data, list) or len(data) < 2:
            raise MetricSourceError(f"Invalid data format for {metric}")

        dates, values = data[0], data[1]
        if not isinstance(dates, list) or not isinstance(values, list):
            raise MetricSourceError(f"Invalid data format for {metric}")
        if len(dates) != len(values):
            raise AlignmentError(
                f"{metric}: {len(dates)} dates but {len(values)} values"
            )
        return dates, values

    def _check_alignment(self, metric: str, dates: List[str]):
        """All metrics must share the first metric's date labels."""
        if self._dates is None:
            self._dates = list(dates)
            return
        if list(dates) != self._dates:
            raise AlignmentError(
                f"{metric} dates do not match: {len(dates)} days vs {len(self._dates)} "
                f"({dates[:1]}..{dates[-1:]} vs {self._dates[:1]}..{self._dates[-1:]})"
            )

    def preprocess(self) -> Dict[str, pd.Series]:
        """
        Clean all fetched series.

        Returns:
            Dictionary of cleaned float series
        """
        cleaned = {}
        for metric, series in self._raw_data.items():
            cleaned[metric] = self._clean_series(series)

        self._raw_data = cleaned
        return cleaned

    def _clean_series(self, series: pd.Series) -> pd.Series:
        """Coerce to float and drop duplicate dates."""
        if series.empty:
            return series.astype(float)

        series = series[~series.index.duplicated(keep="first")]
        return pd.to_numeric(series, errors="coerce").astype(float)

    def get_metrics(self) -> Dict[str, pd.Series]:
        """Return the fetched series by metric name."""
        return dict(self._raw_data)

    def get_dates(self) -> List[str]:
        """Return the shared date labels."""
        return list(self._dates or [])

    def get_metric_matrix(self) -> pd.DataFrame:
        """
        Build the aligned metric matrix.

        Returns:
            DataFrame with dates as index, metrics as columns
        """
        if not self._raw_data:
            return pd.DataFrame()

        self._metric_matrix = pd.concat(self._raw_data.values(), axis=1, keys=self._raw_data.keys())
        return self._metric_matrix

    def fetch_latest_date(self) -> str:
        """Fetch the most recent date served by the API."""
        data = self._get_json(f"{self.api_base}/api/vecs/dateindex-to-date", params={"from": -1})
        if not isinstance(data, str):
            raise MetricSourceError("Invalid date format received")
        return data
