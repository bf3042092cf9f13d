"""
tests/test_api.py

HTTP surface over SQLite with service dependencies overridden.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterator
from datetime import date, datetime, timezone

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.api.routers import comparison_router, hotels_router, ingestion_router
from app.domain.ingestion import CycleSummary, MailAttachment
from app.hashing import compute_content_hash
from app.parsers.history_forecast import parse_history_forecast
from app.services.comparison_service import ComparisonService, get_comparison_service
from app.services.hotel_service import HotelService, get_hotel_service
from app.services.ingestion_cycle_service import (
    IngestionCycleRunner,
    IngestionCycleService,
    get_ingestion_cycle_runner,
)
from app.services.seed_upload_service import SeedUploadService, get_seed_upload_service
from app.services.snapshot_registrar import SnapshotRegistrar
from db.session import get_db
from forecast_fixtures import build_file, build_line


@pytest.fixture()
def client(session_factory, mail_source, blob_storage) -> Iterator[TestClient]:
    app = FastAPI()
    app.include_router(hotels_router)
    app.include_router(comparison_router)
    app.include_router(ingestion_router)

    def _db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    runner = IngestionCycleRunner(
        service_provider=lambda: IngestionCycleService(
            mail_source=mail_source,
            storage=blob_storage,
            session_factory=session_factory,
        )
    )
    app.dependency_overrides[get_db] = _db
    app.dependency_overrides[get_hotel_service] = lambda: HotelService(session_factory=session_factory)
    app.dependency_overrides[get_comparison_service] = lambda: ComparisonService(session_factory=session_factory)
    app.dependency_overrides[get_seed_upload_service] = lambda: SeedUploadService(
        storage=blob_storage,
        session_factory=session_factory,
    )
    app.dependency_overrides[get_ingestion_cycle_runner] = lambda: runner

    with TestClient(app) as test_client:
        yield test_client


def _create_hotel(client: TestClient, email: str = "gm@harbourview.example") -> dict:
    response = client.post(
        "/hotels",
        json={"name": "Harbour View", "email": email, "total_available_rooms": 100},
    )
    assert response.status_code == 201
    return response.json()


class TestHotelEndpoints:
    def test_create_list_and_deactivate(self, client) -> None:
        hotel = _create_hotel(client)
        assert hotel["email"] == "gm@harbourview.example"
        assert hotel["is_active"] is True

        assert client.post("/hotels", json={"name": "Copy", "email": "GM@harbourview.example"}).status_code == 409

        response = client.post(f"/hotels/{hotel['id']}/deactivate")
        assert response.status_code == 200
        assert response.json()["is_active"] is False
        assert client.get("/hotels", params={"active_only": True}).json() == []
        assert len(client.get("/hotels").json()) == 1

    def test_update_and_unknown_hotel(self, client) -> None:
        hotel = _create_hotel(client)

        response = client.patch(f"/hotels/{hotel['id']}", json={"total_available_rooms": 110})
        assert response.status_code == 200
        assert response.json()["total_available_rooms"] == 110

        missing = "00000000-0000-0000-0000-000000000000"
        assert client.patch(f"/hotels/{missing}", json={"name": "X"}).status_code == 404
        assert client.get(f"/hotels/{missing}/snapshots").status_code == 404

    def test_seed_upload_then_snapshot_listing(self, client) -> None:
        hotel = _create_hotel(client)
        content = build_file(build_line("History", date(2025, 9, 1), "60", "9000"))

        response = client.post(
            f"/hotels/{hotel['id']}/seed",
            files={"file": ("seed.txt", content, "text/plain")},
            data={"onboarding_date": "2025-09-15"},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["row_count"] == 1
        assert body["snapshot_time"].startswith("2025-09-15")

        again = client.post(
            f"/hotels/{hotel['id']}/seed",
            files={"file": ("seed-2.txt", content + b"\n", "text/plain")},
        )
        assert again.status_code == 409

        snapshots = client.get(f"/hotels/{hotel['id']}/snapshots").json()["snapshots"]
        assert len(snapshots) == 1
        assert snapshots[0]["is_seed"] is True
        assert snapshots[0]["status"] == "COMPLETED"

    def test_seed_upload_rejects_other_extensions(self, client) -> None:
        hotel = _create_hotel(client)

        response = client.post(
            f"/hotels/{hotel['id']}/seed",
            files={"file": ("seed.xlsx", b"binary", "application/octet-stream")},
        )

        assert response.status_code == 400


class TestComparisonEndpoint:
    def test_pickup_payload(self, client, session_factory) -> None:
        hotel = _create_hotel(client)
        registrar = SnapshotRegistrar(session_factory=session_factory)
        for day, rooms in ((1, "30"), (2, "36")):
            content = build_file(build_line("Forecast", date(2025, 11, 20), rooms, "6000"))
            snapshot_id = registrar.register(
                hotel_id=uuid.UUID(hotel["id"]),
                original_filename=f"history_forecast_{day}.txt",
                storage_reference=f"ref/{day}",
                content_hash=compute_content_hash(content),
                snapshot_time=datetime(2025, 11, day, tzinfo=timezone.utc),
            )
            registrar.commit_rows(snapshot_id, parse_history_forecast(content, 100))

        response = client.get(
            f"/comparison/{hotel['id']}",
            params={"mode": "pickup", "as_of_date": "2025-11-25"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["mode"] == "pickup"
        assert body["baseline"]["filename"] == "history_forecast_1.txt"
        assert body["daily"][0]["key"] == "2025-11-20"
        assert body["daily"][0]["pickup_rooms"] == {
            "value": 6.0,
            "is_positive": True,
            "is_negative": False,
            "is_zero": False,
        }
        assert body["monthly"][0]["key"] == "2025-11"
        assert body["mtd"]["key"] == "MTD"

    def test_error_statuses(self, client) -> None:
        hotel = _create_hotel(client)

        assert client.get(f"/comparison/{hotel['id']}", params={"mode": "pickup"}).status_code == 400
        assert client.get(f"/comparison/{hotel['id']}", params={"mode": "weekly"}).status_code == 400
        assert client.get(f"/comparison/{hotel['id']}", params={"mode": "actual_vs_snapshot"}).status_code == 404
        missing = "00000000-0000-0000-0000-000000000000"
        assert client.get(f"/comparison/{missing}").status_code == 404


class TestIngestionEndpoint:
    def test_manual_run_returns_summary(self, client, mail_source) -> None:
        _create_hotel(client)
        content = build_file(build_line("Forecast", date(2025, 11, 20), "30", "6000"))
        mail_source.add("msg-1", "gm@harbourview.example", MailAttachment("history_forecast1761955200.txt", content))

        response = client.post("/ingestion/run")

        assert response.status_code == 200
        assert response.json()["snapshots_created"] == 1
        assert response.json()["processed"] == 1

    def test_busy_runner_returns_conflict(self) -> None:
        class _BusyRunner(IngestionCycleRunner):
            def run_if_idle(self) -> CycleSummary | None:
                return None

        app = FastAPI()
        app.include_router(ingestion_router)
        app.dependency_overrides[get_ingestion_cycle_runner] = lambda: _BusyRunner(service_provider=lambda: None)

        response = TestClient(app).post("/ingestion/run")

        assert response.status_code == 409
