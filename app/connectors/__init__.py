"""
app/connectors package marker.
"""

from app.connectors.base import BaseConnector, ConnectorRequestError
from app.connectors.snapshot_connector import SnapshotConnector
from app.connectors.statcan_connector import StatCanConnector

__all__ = [
    "BaseConnector",
    "ConnectorRequestError",
    "SnapshotConnector",
    "StatCanConnector",
]
