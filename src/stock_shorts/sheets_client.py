"""Client for reading article rows from the Google Sheets values API."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Mapping, Protocol
from urllib.parse import quote

import requests

from .config import Settings
from .errors import SourceUnavailable
from .mapping import RawRow


logger = logging.getLogger(__name__)


class RowSource(Protocol):
    def fetch_rows(self) -> list[RawRow]: ...


@dataclass(slots=True)
class SheetsClient:
    spreadsheet_id: str
    api_key: str | None = None
    access_token: str | None = None
    cell_range: str = "Sheet1!A2:O1000"
    base_url: str = "https://sheets.googleapis.com"
    timeout: float = 20.0
    max_retries: int = 3
    backoff_base: float = 1.0
    backoff_cap: float = 30.0

    @classmethod
    def from_settings(cls, settings: Settings) -> "SheetsClient | None":
        if not settings.sheets_enabled:
            return None
        return cls(
            spreadsheet_id=settings.sheets_spreadsheet_id,
            api_key=settings.sheets_api_key,
            access_token=settings.sheets_access_token,
            cell_range=settings.sheets_range,
            base_url=str(settings.sheets_base_url).rstrip("/"),
            timeout=settings.sheets_timeout_seconds,
            max_retries=settings.sheets_max_retries,
            backoff_base=settings.sheets_backoff_base_seconds,
            backoff_cap=settings.sheets_backoff_cap_seconds,
        )

    def fetch_rows(self) -> list[RawRow]:
        """Return every row in the configured range as a list of strings.

        An empty sheet yields ``[]``; any transport or payload problem raises
        :class:`SourceUnavailable` so callers can tell the two apart.
        """
        endpoint = f"/v4/spreadsheets/{quote(self.spreadsheet_id, safe='')}/values/{quote(self.cell_range, safe='')}"
        payload = self._call(endpoint, {"majorDimension": "ROWS"})
        values = payload.get("values", [])
        if not isinstance(values, list):
            raise SourceUnavailable("Unexpected 'values' structure from Google Sheets")
        rows: list[RawRow] = []
        for row in values:
            if not isinstance(row, list):
                raise SourceUnavailable("Unexpected row structure from Google Sheets")
            rows.append(["" if cell is None else str(cell) for cell in row])
        logger.info("Fetched %s rows from spreadsheet %s", len(rows), self.spreadsheet_id)
        return rows

    def test_connection(self) -> bool:
        try:
            self._call(f"/v4/spreadsheets/{quote(self.spreadsheet_id, safe='')}", {"fields": "spreadsheetId"})
        except SourceUnavailable as exc:
            logger.warning("Google Sheets connection test failed: %s", exc)
            return False
        return True

    def _call(self, endpoint: str, params: Mapping[str, Any] | None = None) -> Mapping[str, Any]:
        url = f"{self.base_url}{endpoint}"
        query = dict(params or {})
        if self.api_key:
            query["key"] = self.api_key
        headers = {"Authorization": f"Bearer {self.access_token}"} if self.access_token else {}
        attempt = 0
        while True:
            try:
                response = requests.get(url, headers=headers, params=query, timeout=self.timeout)
                response.raise_for_status()
                payload = response.json()
                if not isinstance(payload, Mapping):
                    raise SourceUnavailable("Unexpected response structure from Google Sheets")
                return payload
            except requests.HTTPError as exc:
                status = exc.response.status_code if exc.response is not None else None
                if (status is not None and status < 500) or attempt >= self.max_retries:
                    raise SourceUnavailable(f"Google Sheets request failed: {exc}") from exc
                self._wait_before_retry(attempt, exc)
            except ValueError as exc:
                raise SourceUnavailable("Google Sheets returned a non-JSON response") from exc
            except requests.RequestException as exc:
                if attempt >= self.max_retries:
                    raise SourceUnavailable(f"Google Sheets request failed: {exc}") from exc
                self._wait_before_retry(attempt, exc)
            attempt += 1

    def _wait_before_retry(self, attempt: int, exc: Exception) -> None:
        delay = min(self.backoff_base * (2**attempt), self.backoff_cap)
        logger.warning(
            "Google Sheets request failed (retry %s of %s), retrying in %s seconds: %s",
            attempt + 1,
            self.max_retries,
            delay,
            exc,
        )
        time.sleep(delay)


__all__ = ["RowSource", "SheetsClient"]
