"""
app/connectors/statcan_connector.py

Statistics Canada web data service connector for full-table CSV downloads.

The service answers a table request with a JSON pointer to a ZIP archive;
the archive holds the data CSV and a separate metadata CSV.
"""

from __future__ import annotations

import io
import logging
import zipfile

import pandas as pd
import requests

from app.config import ExternalHTTPSettings, StatCanSettings
from app.connectors.base import BaseConnector, ConnectorRequestError

logger = logging.getLogger(__name__)

WDS_SUCCESS_STATUS = "SUCCESS"


def extract_csv_member(archive: bytes) -> bytes:
    """
    Return the data CSV stored in a StatCan table archive.
    """

    try:
        with zipfile.ZipFile(io.BytesIO(archive)) as bundle:
            csv_names = [name for name in bundle.namelist() if name.lower().endswith(".csv")]
            data_names = [name for name in csv_names if "metadata" not in name.lower()]
            candidates = data_names or csv_names
            if not candidates:
                raise ConnectorRequestError("statcan: no CSV file found in the archive.")
            logger.info("Extracting CSV member name=%s members=%s", candidates[0], len(csv_names))
            return bundle.read(candidates[0])
    except zipfile.BadZipFile as exc:
        raise ConnectorRequestError("statcan: downloaded archive is not a valid ZIP file.") from exc


def read_csv_rows(raw_csv: bytes) -> list[dict[str, str]]:
    """
    Parse a header-row CSV into string-valued row mappings.
    """

    try:
        frame = pd.read_csv(
            io.BytesIO(raw_csv),
            dtype=str,
            keep_default_na=False,
            encoding="utf-8-sig",
        )
    except (pd.errors.EmptyDataError, pd.errors.ParserError, UnicodeDecodeError) as exc:
        raise ConnectorRequestError(f"statcan: CSV could not be parsed: {exc}") from exc

    if frame.empty:
        raise ConnectorRequestError("statcan: CSV contained no data rows.")
    frame.columns = [str(column) for column in frame.columns]
    return frame.to_dict(orient="records")


class StatCanConnector(BaseConnector):
    """
    Downloads one StatCan table as parsed CSV rows.
    """

    def __init__(
        self,
        *,
        settings: StatCanSettings,
        http_settings: ExternalHTTPSettings,
        session: requests.Session | None = None,
    ) -> None:
        super().__init__(source="statcan", http_settings=http_settings, session=session)
        self._settings = settings

    @property
    def enabled(self) -> bool:
        return self._settings.enabled

    def table_endpoint(self) -> str:
        return (
            f"{self._settings.base_url.rstrip('/')}/getFullTableDownloadCSV/"
            f"{self._settings.table_id}/{self._settings.language}"
        )

    def fetch_download_url(self) -> str:
        """
        Ask the web data service where the table archive can be downloaded.
        """

        payload = self._request_json(method="GET", url=self.table_endpoint())
        if not isinstance(payload, dict):
            raise ConnectorRequestError("statcan: unexpected web data service payload shape.")

        status = payload.get("status")
        download_url = payload.get("object")
        if status != WDS_SUCCESS_STATUS or not isinstance(download_url, str) or not download_url:
            raise ConnectorRequestError(f"statcan: web data service returned status={status!r}.")
        return download_url

    def fetch_table_rows(self) -> list[dict[str, str]]:
        """
        Download the table archive and return its CSV rows.
        """

        if not self.enabled:
            logger.info("StatCan connector disabled; skipping remote fetch")
            return []

        download_url = self.fetch_download_url()
        logger.info("Downloading StatCan table table_id=%s url=%s", self._settings.table_id, download_url)
        archive = self._request_bytes(method="GET", url=download_url)
        logger.info("StatCan archive downloaded size_mb=%.2f", len(archive) / 1024 / 1024)

        rows = read_csv_rows(extract_csv_member(archive))
        logger.info("StatCan CSV parsed rows=%s", len(rows))
        return rows
