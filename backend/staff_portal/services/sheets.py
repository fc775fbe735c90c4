from __future__ import annotations

import json
import logging
from typing import Any
from urllib.parse import quote

import httpx
import pandas as pd

from staff_portal.core.errors import UpstreamOtherError

logger = logging.getLogger(__name__)

SHEET_RANGE = "A1:Z100"
JSON_COLUMNS = ("LocationBreakdown",)


def _decode_json_cell(value: Any) -> Any:
    if not isinstance(value, str):
        return value
    try:
        return json.loads(value)
    except ValueError:
        return {}


def _numeric_column(series: pd.Series) -> pd.Series | None:
    blank = series.isna() | (series.astype(str).str.strip() == "")
    converted = pd.to_numeric(series.mask(blank), errors="coerce")
    if converted[~blank].isna().any():
        return None
    return converted.fillna(0.0).astype(float)


def parse_sheet_values(values: list[list[Any]] | None) -> pd.DataFrame:
    """Turn a Sheets ``values`` grid (header row first) into a frame.

    Columns whose filled cells are all numeric become float columns with
    blanks read as zero; everything else stays as text.
    """
    if not values or len(values) < 2:
        return pd.DataFrame()

    headers = [str(header) for header in values[0]]
    rows = [list(row) + [None] * (len(headers) - len(row)) for row in values[1:]]
    frame = pd.DataFrame([row[: len(headers)] for row in rows], columns=headers)

    for column in frame.columns:
        if column in JSON_COLUMNS:
            frame[column] = frame[column].map(_decode_json_cell)
            continue
        numeric = _numeric_column(frame[column])
        if numeric is not None and not frame[column].dropna().empty:
            frame[column] = numeric
    return frame


class SheetsClient:
    def __init__(self, http: httpx.AsyncClient, *, spreadsheet_id: str | None, api_key: str | None, api_base: str) -> None:
        self._http = http
        self._spreadsheet_id = spreadsheet_id
        self._api_key = api_key
        self._api_base = api_base.rstrip("/")

    async def fetch_values(self, tab_name: str) -> list[list[Any]]:
        if not self._spreadsheet_id or not self._api_key:
            raise UpstreamOtherError(None, "Google Sheets is not configured; set PORTAL_GOOGLE_SHEET_ID and PORTAL_GOOGLE_API_KEY")

        cell_range = quote(f"{tab_name}!{SHEET_RANGE}", safe="")
        url = f"{self._api_base}/{self._spreadsheet_id}/values/{cell_range}"
        try:
            response = await self._http.get(url, params={"key": self._api_key})
        except httpx.HTTPError as exc:
            raise UpstreamOtherError(None, f"Failed to load \"{tab_name}\": {exc}") from exc

        if response.status_code >= 400:
            raise UpstreamOtherError(response.status_code, f"HTTP {response.status_code} loading \"{tab_name}\"")
        try:
            payload = response.json()
        except ValueError as exc:
            raise UpstreamOtherError(response.status_code, f"Non-JSON response loading \"{tab_name}\"") from exc
        if not isinstance(payload, dict):
            raise UpstreamOtherError(response.status_code, f"Unexpected response loading \"{tab_name}\"")
        return payload.get("values") or []

    async def fetch_tab(self, tab_name: str) -> pd.DataFrame:
        frame = parse_sheet_values(await self.fetch_values(tab_name))
        logger.debug("Loaded %d rows from sheet tab %s", len(frame), tab_name)
        return frame
