"""Activity store backed by Supabase's PostgREST API.

Tracks are written as EWKT and may come back as GeoJSON, WKT or WKB hex
depending on the column type and PostgREST version; rows keep the raw value
and the geometry codec decodes it on demand.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import requests
from requests import Session

from .. import config
from ..errors import ActivityStoreError
from ..models import StoredActivity, VisitRecord
from ..utils import isoformat_z, to_utc_aware
from .base import ActivityFilters, stored_activity_from_row, visit_record_from_row
from .session import create_default_session

LOGGER = logging.getLogger(__name__)

LIST_COLUMNS = "id,sport,started_at,ended_at,total_distance_m,track_geom,created_at"
DETAIL_COLUMNS = f"{LIST_COLUMNS},center_point"

QueryParams = List[Tuple[str, str]]


class SupabaseActivityStore:
    """Thin PostgREST client implementing :class:`ActivityStore`."""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        access_token: str | None = None,
        *,
        session: Session | None = None,
        timeout: float | None = None,
        table: str | None = None,
        visits_rpc: str | None = None,
    ) -> None:
        self.base_url = (base_url or config.SUPABASE_URL).rstrip("/")
        if not self.base_url:
            raise ActivityStoreError(
                "SUPABASE_URL is not configured; set it in the environment or .env"
            )
        self.api_key = api_key if api_key is not None else config.SUPABASE_ANON_KEY
        token = access_token if access_token is not None else config.SUPABASE_ACCESS_TOKEN
        self.access_token = token or self.api_key
        self.session = session or create_default_session()
        self.timeout = timeout if timeout is not None else config.REQUEST_TIMEOUT
        self.table = table or config.ACTIVITIES_TABLE
        self.visits_rpc = visits_rpc or config.VISITS_NEAR_RPC

    # ------------------------------------------------------------------
    # ActivityStore API
    # ------------------------------------------------------------------
    def insert_activity(self, record: Mapping[str, Any]) -> StoredActivity:
        payload = self._request(
            "POST",
            self._table_url(),
            context="insert activity",
            json=dict(record),
            headers={"Prefer": "return=representation"},
        )
        rows = payload if isinstance(payload, list) else [payload]
        if not rows or not isinstance(rows[0], Mapping):
            raise ActivityStoreError("insert activity returned no row")
        return stored_activity_from_row(rows[0])

    def query_activities(self, filters: ActivityFilters) -> List[StoredActivity]:
        params = build_query_params(filters)
        payload = self._request(
            "GET", self._table_url(), context="query activities", params=params
        )
        return [stored_activity_from_row(row) for row in _rows(payload)]

    def get_activity(self, activity_id: str) -> Optional[StoredActivity]:
        params: QueryParams = [
            ("select", DETAIL_COLUMNS),
            ("id", f"eq.{activity_id}"),
            ("limit", "1"),
        ]
        payload = self._request(
            "GET", self._table_url(), context="get activity", params=params
        )
        rows = _rows(payload)
        return stored_activity_from_row(rows[0]) if rows else None

    def delete_activity(self, activity_id: str, user_id: str) -> None:
        params: QueryParams = [("id", f"eq.{activity_id}"), ("user_id", f"eq.{user_id}")]
        self._request(
            "DELETE", self._table_url(), context="delete activity", params=params
        )

    def find_visits_near(
        self, lat: float, lon: float, radius_m: float
    ) -> List[VisitRecord]:
        payload = self._request(
            "POST",
            f"{self.base_url}/rest/v1/rpc/{self.visits_rpc}",
            context="find visits near",
            json={"lat": lat, "lon": lon, "radius_m": radius_m},
        )
        return [visit_record_from_row(row) for row in _rows(payload)]

    # ------------------------------------------------------------------
    # HTTP helpers
    # ------------------------------------------------------------------
    def _table_url(self) -> str:
        return f"{self.base_url}/rest/v1/{self.table}"

    def _headers(self, extra: Mapping[str, str] | None = None) -> Dict[str, str]:
        headers = {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.access_token}",
        }
        if extra:
            headers.update(extra)
        return headers

    def _request(
        self,
        method: str,
        url: str,
        *,
        context: str,
        params: Sequence[Tuple[str, str]] | None = None,
        json: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> Any:
        LOGGER.debug("%s %s params=%s", method, url, params)
        try:
            response = self.session.request(
                method,
                url,
                params=params,
                json=json,
                headers=self._headers(headers),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise ActivityStoreError(f"{context} failed: {exc}") from exc
        if response.status_code >= 400:
            detail = _extract_error(response)
            message = f"{context} failed with HTTP {response.status_code}"
            if detail:
                message = f"{message} | {detail}"
            LOGGER.warning(message)
            raise ActivityStoreError(message)
        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise ActivityStoreError(f"{context} returned invalid JSON") from exc


def build_query_params(filters: ActivityFilters) -> QueryParams:
    """PostgREST query parameters for ``filters`` (newest first)."""

    params: QueryParams = [("select", LIST_COLUMNS), ("order", "started_at.desc")]
    if filters.limit:
        params.append(("limit", str(int(filters.limit))))
    if filters.sport is not None:
        params.append(("sport", f"eq.{filters.sport.value}"))
    if filters.started_from is not None:
        params.append(
            ("started_at", f"gte.{isoformat_z(to_utc_aware(filters.started_from))}")
        )
    if filters.started_to is not None:
        params.append(
            ("started_at", f"lte.{isoformat_z(to_utc_aware(filters.started_to))}")
        )
    return params


def _rows(payload: Any) -> List[Mapping[str, Any]]:
    if not isinstance(payload, list):
        return []
    return [row for row in payload if isinstance(row, Mapping)]


def _extract_error(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return (response.text or "").strip()[:200]
    if isinstance(body, Mapping):
        parts = [str(body[key]) for key in ("message", "details", "hint") if body.get(key)]
        return " ".join(parts)
    return str(body)[:200]


__all__ = ["SupabaseActivityStore", "build_query_params"]
