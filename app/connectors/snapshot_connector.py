"""
app/connectors/snapshot_connector.py

Fetches a published dataset snapshot document over HTTP.
"""

from __future__ import annotations

from typing import Any

import requests

from app.config import ExternalHTTPSettings
from app.connectors.base import BaseConnector


class SnapshotConnector(BaseConnector):
    """
    Connector for the JSON snapshot served from a known URL.
    """

    def __init__(
        self,
        *,
        url: str,
        http_settings: ExternalHTTPSettings,
        session: requests.Session | None = None,
    ) -> None:
        super().__init__(source="snapshot", http_settings=http_settings, session=session)
        self.url = url

    def fetch_document(self) -> Any:
        return self._request_json(method="GET", url=self.url)
