"""
tests/test_dataset_acquirer.py

Pytest unit tests for DatasetAcquirer source ordering, caching and
invalidation. Snapshot and marker files live in tmp_path; the remote
connector is a fake and the clock is injected.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import pytest

from app.connectors.base import ConnectorRequestError
from app.repositories.snapshot_repository import SnapshotRepository
from app.repositories.timestamp_store import FileTimestampStore
from app.services.dataset_acquirer import DatasetAcquirer

START = datetime(2024, 6, 15, tzinfo=timezone.utc).timestamp()


class FakeClock:
    def __init__(self, now: float) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeStatCanConnector:
    source = "statcan"

    def __init__(self, rows: list[dict[str, str]] | None = None, error: Exception | None = None) -> None:
        self.rows = rows or []
        self.error = error
        self.calls = 0

    def fetch_table_rows(self) -> list[dict[str, str]]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.rows)


class FakeSnapshotConnector:
    url = "https://example.test/cmhc-data.json"

    def __init__(self, payload: Any = None, error: Exception | None = None) -> None:
        self.payload = payload
        self.error = error
        self.calls = 0

    def fetch_document(self) -> Any:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.payload


def _statcan_row(geo: str, unit: str, value: str, ref_date: str = "2023") -> dict[str, str]:
    return {
        "REF_DATE": ref_date,
        "GEO": geo,
        "Type of structure": "Apartment structures of six units and over",
        "Type of unit": unit,
        "VALUE": value,
    }


def _snapshot_document(records: list[dict[str, Any]]) -> dict[str, Any]:
    return {
        "metadata": {
            "generatedAt": "2024-01-01T00:00:00+00:00",
            "recordCount": len(records),
            "dataYear": 2023,
            "uniqueBedroomTypes": sorted({record["bedrooms"] for record in records}),
            "uniqueCities": len({record["geography"] for record in records}),
        },
        "data": records,
    }


def _write_snapshot(path: Path, records: list[dict[str, Any]]) -> None:
    path.write_text(json.dumps(_snapshot_document(records)), encoding="utf-8")


def _snapshot_record(geography: str = "Toronto, Ontario", value: str = "1500") -> dict[str, Any]:
    return {
        "geography": geography,
        "bedrooms": "1",
        "value": value,
        "refDate": "2023",
        "dataAgeMonths": 1,
        "year": 2023,
        "structureType": "",
        "category": "",
    }


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(START)


@pytest.fixture()
def snapshot_path(tmp_path: Path) -> Path:
    return tmp_path / "cmhc-data.json"


def _acquirer(
    *,
    snapshot_path: Path | None,
    clock: FakeClock,
    connector: FakeStatCanConnector | None = None,
    signal: FileTimestampStore | None = None,
    ttl: float = 86400.0,
    snapshot_connector: FakeSnapshotConnector | None = None,
) -> DatasetAcquirer:
    return DatasetAcquirer(
        statcan_connector=connector or FakeStatCanConnector(),  # type: ignore[arg-type]
        snapshot_repository=SnapshotRepository(snapshot_path) if snapshot_path else None,
        snapshot_connector=snapshot_connector,  # type: ignore[arg-type]
        invalidation_signal=signal,
        cache_ttl_seconds=ttl,
        invalidation_check_seconds=60.0,
        clock=clock,
    )


class TestSourceOrder:
    def test_local_snapshot_is_preferred(self, snapshot_path: Path, clock: FakeClock) -> None:
        _write_snapshot(snapshot_path, [_snapshot_record()])
        connector = FakeStatCanConnector(rows=[_statcan_row("Ottawa, Ontario", "One bedroom units", "1400")])

        records = _acquirer(snapshot_path=snapshot_path, clock=clock, connector=connector).acquire()

        assert [record.geography for record in records] == ["Toronto, Ontario"]
        assert connector.calls == 0

    def test_snapshot_data_age_is_recomputed(self, snapshot_path: Path, clock: FakeClock) -> None:
        _write_snapshot(snapshot_path, [_snapshot_record()])

        records = _acquirer(snapshot_path=snapshot_path, clock=clock).acquire()

        assert records[0].data_age_months == 17

    def test_remote_fetch_when_no_snapshot(self, snapshot_path: Path, clock: FakeClock) -> None:
        connector = FakeStatCanConnector(
            rows=[
                _statcan_row("Ottawa, Ontario", "One bedroom units", "1400"),
                _statcan_row("Montreal, Quebec", "One bedroom units", "1100"),
            ]
        )

        records = _acquirer(snapshot_path=snapshot_path, clock=clock, connector=connector).acquire()

        assert [(record.geography, record.bedrooms, record.category) for record in records] == [
            ("Ottawa, Ontario", "1", "Highrise")
        ]
        assert connector.calls == 1

    def test_malformed_snapshot_falls_back_to_remote(self, snapshot_path: Path, clock: FakeClock) -> None:
        snapshot_path.write_text("{not json", encoding="utf-8")
        connector = FakeStatCanConnector(rows=[_statcan_row("Ottawa, Ontario", "Two bedroom units", "1900")])

        records = _acquirer(snapshot_path=snapshot_path, clock=clock, connector=connector).acquire()

        assert len(records) == 1
        assert connector.calls == 1

    def test_undecodable_snapshot_falls_back_to_remote(self, snapshot_path: Path, clock: FakeClock) -> None:
        snapshot_path.write_bytes(b'{"data": [\xff\xfe]}')
        connector = FakeStatCanConnector(rows=[_statcan_row("Ottawa, Ontario", "Two bedroom units", "1900")])

        records = _acquirer(snapshot_path=snapshot_path, clock=clock, connector=connector).acquire()

        assert [record.geography for record in records] == ["Ottawa, Ontario"]
        assert connector.calls == 1

    def test_snapshot_url_used_when_no_local_file(self, snapshot_path: Path, clock: FakeClock) -> None:
        snapshot = FakeSnapshotConnector(payload=_snapshot_document([_snapshot_record(geography="London, Ontario")]))
        connector = FakeStatCanConnector(rows=[_statcan_row("Ottawa, Ontario", "One bedroom units", "1400")])

        records = _acquirer(
            snapshot_path=snapshot_path, clock=clock, connector=connector, snapshot_connector=snapshot
        ).acquire()

        assert [record.geography for record in records] == ["London, Ontario"]
        assert records[0].data_age_months == 17
        assert snapshot.calls == 1
        assert connector.calls == 0

    def test_local_snapshot_skips_snapshot_url(self, snapshot_path: Path, clock: FakeClock) -> None:
        _write_snapshot(snapshot_path, [_snapshot_record()])
        snapshot = FakeSnapshotConnector(payload=_snapshot_document([_snapshot_record(geography="London, Ontario")]))

        records = _acquirer(snapshot_path=snapshot_path, clock=clock, snapshot_connector=snapshot).acquire()

        assert [record.geography for record in records] == ["Toronto, Ontario"]
        assert snapshot.calls == 0

    @pytest.mark.parametrize(
        "snapshot",
        [
            FakeSnapshotConnector(error=ConnectorRequestError("snapshot: invalid JSON payload")),
            FakeSnapshotConnector(payload={"records": []}),
            FakeSnapshotConnector(payload={"data": [{"geography": "Toronto, Ontario"}]}),
            FakeSnapshotConnector(payload=["not", "a", "document"]),
        ],
    )
    def test_bad_snapshot_url_falls_back_to_statcan(
        self, snapshot_path: Path, clock: FakeClock, snapshot: FakeSnapshotConnector
    ) -> None:
        connector = FakeStatCanConnector(rows=[_statcan_row("Ottawa, Ontario", "Two bedroom units", "1900")])

        records = _acquirer(
            snapshot_path=snapshot_path, clock=clock, connector=connector, snapshot_connector=snapshot
        ).acquire()

        assert [record.geography for record in records] == ["Ottawa, Ontario"]
        assert connector.calls == 1

    def test_remote_failure_returns_empty_and_is_not_cached(self, snapshot_path: Path, clock: FakeClock) -> None:
        connector = FakeStatCanConnector(error=ConnectorRequestError("statcan: down"))
        acquirer = _acquirer(snapshot_path=snapshot_path, clock=clock, connector=connector)

        assert acquirer.acquire() == []
        assert acquirer.cache.records is None

        connector.error = None
        connector.rows = [_statcan_row("Ottawa, Ontario", "Two bedroom units", "1900")]
        assert len(acquirer.acquire()) == 1

    def test_unexpected_remote_error_is_contained(self, snapshot_path: Path, clock: FakeClock) -> None:
        connector = FakeStatCanConnector(error=KeyError("VALUE"))

        assert _acquirer(snapshot_path=snapshot_path, clock=clock, connector=connector).acquire() == []


class TestCaching:
    def test_cache_hit_skips_sources(self, snapshot_path: Path, clock: FakeClock) -> None:
        _write_snapshot(snapshot_path, [_snapshot_record()])
        acquirer = _acquirer(snapshot_path=snapshot_path, clock=clock)
        first = acquirer.acquire()

        snapshot_path.unlink()
        clock.advance(3600)

        assert acquirer.acquire() == first

    def test_ttl_expiry_reacquires(self, snapshot_path: Path, clock: FakeClock) -> None:
        _write_snapshot(snapshot_path, [_snapshot_record(value="1500")])
        acquirer = _acquirer(snapshot_path=snapshot_path, clock=clock, ttl=100)
        acquirer.acquire()

        _write_snapshot(snapshot_path, [_snapshot_record(value="1600")])
        clock.advance(101)

        assert acquirer.acquire()[0].value == "1600"

    def test_snapshot_url_failure_keeps_existing_cache(self, snapshot_path: Path, clock: FakeClock) -> None:
        snapshot = FakeSnapshotConnector(payload=_snapshot_document([_snapshot_record(value="1500")]))
        connector = FakeStatCanConnector(error=ConnectorRequestError("statcan: down"))
        acquirer = _acquirer(
            snapshot_path=snapshot_path, clock=clock, connector=connector, snapshot_connector=snapshot, ttl=100
        )
        first = acquirer.acquire()

        snapshot.error = ConnectorRequestError("snapshot: HTTP 502")
        clock.advance(101)

        assert acquirer.acquire() == []
        assert acquirer.cache.records == tuple(first)

    def test_invalidate_forces_reload(self, snapshot_path: Path, clock: FakeClock) -> None:
        _write_snapshot(snapshot_path, [_snapshot_record(value="1500")])
        acquirer = _acquirer(snapshot_path=snapshot_path, clock=clock)
        acquirer.acquire()

        _write_snapshot(snapshot_path, [_snapshot_record(value="1650")])
        acquirer.invalidate()

        assert acquirer.acquire()[0].value == "1650"


class TestInvalidationSignal:
    def test_advancing_marker_forces_reacquisition(
        self, tmp_path: Path, snapshot_path: Path, clock: FakeClock
    ) -> None:
        signal = FileTimestampStore(tmp_path / ".cache-invalidated")
        _write_snapshot(snapshot_path, [_snapshot_record(value="1500")])
        acquirer = _acquirer(snapshot_path=snapshot_path, clock=clock, signal=signal)
        acquirer.acquire()

        _write_snapshot(snapshot_path, [_snapshot_record(value="1750")])
        signal.write(clock.now + 1)

        clock.advance(30)
        assert acquirer.acquire()[0].value == "1500"

        clock.advance(31)
        assert acquirer.acquire()[0].value == "1750"

    def test_stale_marker_is_ignored(self, tmp_path: Path, snapshot_path: Path, clock: FakeClock) -> None:
        signal = FileTimestampStore(tmp_path / ".cache-invalidated")
        signal.write(clock.now - 10)
        _write_snapshot(snapshot_path, [_snapshot_record(value="1500")])
        acquirer = _acquirer(snapshot_path=snapshot_path, clock=clock, signal=signal)
        acquirer.acquire()

        _write_snapshot(snapshot_path, [_snapshot_record(value="1750")])
        clock.advance(120)

        assert acquirer.acquire()[0].value == "1500"
