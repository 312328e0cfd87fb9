"""
HTTP client the dashboard uses to talk to the accidents API.

Responses are returned as decoded JSON; their shape is checked later by
the normalizer, not here.
"""

import logging
from typing import Any, Dict, List, Optional

import requests

from .errors import ApiError

logger = logging.getLogger(__name__)


class AccidentsClient:
    def __init__(self, base_url: str, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None):
        url = f"{self.base_url}{path}"
        try:
            response = self.session.get(url, params=params)
        except requests.RequestException as e:
            raise ApiError(f"Could not reach the accidents API: {e}") from e

        if not response.ok:
            message = f"Request failed with status {response.status_code}"
            try:
                body = response.json()
            except ValueError:
                body = None
            if isinstance(body, dict) and body.get("error"):
                message = body["error"]
            raise ApiError(message, status_code=response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise ApiError(f"Invalid JSON from {path}") from e

    def get_years(self) -> List[int]:
        """Available years, newest first; an empty list if they cannot be loaded."""
        try:
            years = self._get("/years")
        except ApiError as e:
            logger.warning(f"Could not load years: {e}")
            return []
        if not isinstance(years, list):
            logger.warning(f"Years response is not a list: {years!r}")
            return []
        return years

    def get_filter_options(self) -> Dict[str, List[Dict[str, Any]]]:
        return self._get("/filter-options")

    def get_chart_data(self, accident_type: str, segment_type: str, year) -> Dict[str, Any]:
        return self._get(f"/{accident_type}/{segment_type}", params={"year": year})

    def get_summary(self, year) -> Dict[str, int]:
        body = self._get("/summary", params={"year": year})
        data = body.get("data") if isinstance(body, dict) else None
        data = data or {}
        return {
            "fatal": data.get("fatal") or 0,
            "nonFatal": data.get("nonFatal") or 0,
        }

    def get_multi_year_data(self, accident_type: str, segment_type: str) -> Dict[str, Any]:
        return self._get("/multi-year", params={"accidentType": accident_type, "segmentType": segment_type})
